from __future__ import annotations

import math
from decimal import Decimal

import numpy as np
import pytest

from campaign_analytics.records import (
    FIELD_ALIASES,
    CampaignRecord,
    coerce_number,
    merge_aliases,
    normalize_row,
    normalize_rows,
    row_is_empty,
)


def test_normalize_row_mixed_casing_and_types():
    record = normalize_row({"Campaña": "C1", "abierto": "150", "Entregado": 200})

    assert record.campaign_id == "C1"
    assert record.display_name == "C1"
    assert record.opened == 150
    assert record.delivered == 200
    assert record.sent == 0
    assert record.enrolled == 0
    assert record.channel == "N/A"
    assert record.business_line == "N/A"


def test_empty_row_yields_defaulted_record():
    record = normalize_row({})

    assert record == CampaignRecord()
    assert record.campaign_id == "Sin ID"
    assert record.display_name == "Sin ID"
    assert record.format == "N/A"


def test_unsubscribe_aliases_follow_priority_order():
    assert normalize_row({"cancelada": 7, "Suscripción": 3}).unsubscribed == 3
    assert normalize_row({"suscripción": None, "suscripcion cancelada": "4"}).unsubscribed == 4
    assert normalize_row({"Suscripción Cancelada": 2, "cancelada": 8}).unsubscribed == 2


def test_zero_counts_as_present_value():
    record = normalize_row({"abierto": 0, "Abierto": 9})
    assert record.opened == 0


def test_missing_markers_fall_through_to_next_alias():
    record = normalize_row({"abierto": float("nan"), "Abierto": "12", "canal": "  ", "Canal": "HSM"})
    assert record.opened == 12
    assert record.channel == "HSM"


def test_malformed_numbers_become_zero():
    record = normalize_row(
        {
            "enviado": "abc",
            "entregado": [1, 2],
            "abierto": float("inf"),
            "con clic": {"value": 3},
        }
    )
    assert record.sent == 0
    assert record.delivered == 0
    assert record.opened == 0
    assert record.clicked == 0


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("1,234", 1234),
        (" 42 ", 42),
        ("(5)", -5),
        ("12.5", 12.5),
        (np.int64(7), 7),
        (3.0, 3),
        (None, 0),
        ("", 0),
        ("1,234,567", 1234567),
        ("(1,234)", -1234),
        ("12,5", 0),
        ("1,2345", 0),
        (10**400, 0),
        (Decimal("sNaN"), 0),
        (Decimal("12.5"), 12.5),
    ],
)
def test_coerce_number(raw, expected):
    assert coerce_number(raw) == expected


def test_oversized_and_signaling_numbers_fall_through_to_next_alias():
    record = normalize_row({"Campaña": "C1", "abierto": 10**400, "Abierto": 12, "entregado": Decimal("sNaN")})

    assert record.opened == 12
    assert record.delivered == 0


def test_negative_counters_are_accepted():
    assert normalize_row({"enviado": -10}).sent == -10


def test_display_name_falls_back_to_campaign_id():
    record = normalize_row({"campaña": "Cierre", "nombre": "   "})
    assert record.display_name == "Cierre"

    named = normalize_row({"Campaign": "Cierre", "Nombre": "Cierre - recordatorio"})
    assert named.campaign_id == "Cierre"
    assert named.display_name == "Cierre - recordatorio"


def test_numeric_identifiers_are_rendered_as_text():
    record = normalize_row({"campaña": 2024.0, "estado": 1})
    assert record.campaign_id == "2024"
    assert record.status == "1"


def test_text_fields_keep_their_source_spelling():
    record = normalize_row({"línea de negocio": " Posgrado ", "Formato": "VIDEO", "asunto": "Hola"})
    assert record.business_line == " Posgrado "
    assert record.format == "VIDEO"
    assert record.subject == "Hola"


def test_bounce_reason_counters():
    record = normalize_row(
        {
            "rebotar": "5",
            "bounced usuario desconocido": 3,
            "bounced mala configuración del buzón": "2",
        }
    )
    assert record.bounced == 5
    assert record.bounced_unknown_user == 3
    assert record.bounced_mailbox_misconfigured == 2


def test_records_are_immutable():
    record = normalize_row({"campaña": "C1"})
    with pytest.raises(AttributeError):
        record.opened = 10  # type: ignore[misc]


def test_merge_aliases_appends_after_builtin_spellings():
    aliases = merge_aliases({"opened": ["Aperturas"]})

    assert aliases["opened"][: len(FIELD_ALIASES["opened"])] == FIELD_ALIASES["opened"]
    assert aliases["opened"][-1] == "Aperturas"
    assert normalize_row({"Aperturas": "8"}, aliases).opened == 8
    assert normalize_row({"abierto": 1, "Aperturas": "8"}, aliases).opened == 1
    assert "Aperturas" not in FIELD_ALIASES["opened"]


def test_merge_aliases_rejects_unknown_fields():
    with pytest.raises(ValueError):
        merge_aliases({"revenue": ["Ingresos"]})


def test_normalize_rows_keeps_order_and_empty_rows():
    records = normalize_rows([{"campaña": "A"}, {}, {"campaña": "B"}])
    assert [record.campaign_id for record in records] == ["A", "Sin ID", "B"]


def test_row_is_empty():
    assert row_is_empty({"campaña": None, "abierto": math.nan, "canal": " "})
    assert not row_is_empty({"abierto": 0})
