from __future__ import annotations

from pathlib import Path
from typing import List

import pytest

from campaign_analytics.records import CampaignRecord
from tests.record_factory import make_record


@pytest.fixture()
def sample_records() -> List[CampaignRecord]:
    return [
        make_record(
            "Bienvenida",
            display_name="Bienvenida - envío 1",
            channel="Email",
            format="Video",
            business_line="Posgrado",
            sent=1000,
            delivered=900,
            opened=300,
            clicked=60,
            advanced=45,
            enrolled=6,
            bounced=100,
            unsubscribed=4,
        ),
        make_record(
            "Bienvenida",
            display_name="Bienvenida - envío 2",
            channel="HSM",
            format=" video ",
            business_line=" POSGRADO ",
            sent=500,
            delivered=480,
            opened=240,
            clicked=30,
            advanced=60,
            enrolled=12,
            bounced=20,
            unsubscribed=1,
        ),
        make_record(
            "Cierre",
            display_name="Cierre - recordatorio",
            channel="email",
            format="Imagen",
            business_line="Pregrado",
            sent=400,
            delivered=400,
            opened=100,
            clicked=25,
            advanced=10,
            enrolled=1,
            bounced=0,
            unsubscribed=9,
        ),
    ]


@pytest.fixture()
def export_csv(tmp_path: Path) -> Path:
    path = tmp_path / "campañas.csv"
    path.write_text(
        "\n".join(
            [
                "Campaña,nombre,enviado,entregado,abierto,con clic,avanzo,matriculado,suscripción,canal,formato,línea de negocio",
                "Bienvenida,Bienvenida 1,1000,900,300,60,45,6,4,Email,Video,Posgrado",
                "Bienvenida,Bienvenida 2,500,480,240,30,60,12,1,HSM,video, POSGRADO ",
                ",,,,,,,,,,,",
                "Cierre,,400,400,100,25,10,1,9,email,Imagen,Pregrado",
            ]
        )
        + "\n",
        encoding="utf-8",
    )
    return path
