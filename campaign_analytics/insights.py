"""Executive insights layered on top of the aggregation helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import pandas as pd

from campaign_analytics.metrics import (
    ChannelInsight,
    GlobalSummary,
    channel_insight,
    format_rollup,
    global_summary,
    safe_ratio,
)
from campaign_analytics.records import CampaignRecord


@dataclass(slots=True)
class ActionItem:
    kind: str
    title: str
    description: str


@dataclass(slots=True)
class ExecutiveInsights:
    channel: ChannelInsight
    top_performers: List[CampaignRecord]
    bottom_performers: List[CampaignRecord]
    conclusions: Dict[str, str]
    actions: List[ActionItem] = field(default_factory=list)

    @property
    def best_channel(self) -> str:
        return self.channel.best_channel

    @property
    def best_channel_rate(self) -> float:
        return self.channel.best_channel_rate


def top_performers(records: Sequence[CampaignRecord], limit: int = 3) -> List[CampaignRecord]:
    """Records with the highest influence ratio (enrolled / opened)."""

    return sorted(records, key=lambda record: safe_ratio(record.enrolled, record.opened), reverse=True)[:limit]


def bottom_performers(records: Sequence[CampaignRecord], limit: int = 3) -> List[CampaignRecord]:
    """Records with the lowest open ratio (opened / delivered)."""

    return sorted(records, key=lambda record: safe_ratio(record.opened, record.delivered))[:limit]


def build_conclusions(summary: GlobalSummary, insight: ChannelInsight) -> Dict[str, str]:
    weaker = "EMAIL" if insight.best_channel == "HSM" else "HSM"
    return {
        "canales": (
            f"El canal {insight.best_channel} presenta la tasa de influencia más alta "
            f"({insight.best_channel_rate:.2f}%) y es hoy el vehículo con mayor capacidad de conversión. "
            f"El canal {weaker} convierte con menor eficiencia, por lo que conviene revisar su segmentación "
            "y la personalización del mensaje antes de seguir ampliando su volumen."
        ),
        "funnel": (
            f"La tasa promedio de avance en el funnel es del {summary.funnel_advance_rate:.1f}%. "
            "Parte de la audiencia interactúa con el mensaje pero no continúa hasta la conversión; "
            "reforzar los llamados a la acción y simplificar la experiencia posterior a la apertura "
            "reduce esa fricción."
        ),
        "formatos": (
            "Una apertura alta no garantiza una influencia alta: algunos formatos captan la atención "
            "pero no logran la matrícula. Priorizar los formatos que sostienen ambas tasas asegura "
            "tráfico de mayor intención."
        ),
        "suscripcion": (
            "Las cancelaciones de suscripción se concentran en campañas de asunto urgente y contenido "
            "poco relevante. Mantener una frecuencia de envío moderada y retirar los envíos con rebote "
            "superior al promedio protege la reputación de los dominios y la base de contactos."
        ),
        "influencia": (
            f"La tasa de influencia global del {summary.influence_rate:.2f}% es el indicador principal del "
            "periodo. Las campañas que superan este promedio deben analizarse para replicar su estructura "
            "creativa en los próximos envíos."
        ),
    }


def action_items(insight: ChannelInsight, formats: pd.DataFrame) -> List[ActionItem]:
    leading_format = str(formats.iloc[0]["name"]) if not formats.empty else "líder"
    return [
        ActionItem(
            kind="KEEP",
            title="Escalar modelos de éxito",
            description=f"Mantener el canal {insight.best_channel} y el formato {leading_format} como eje.",
        ),
        ActionItem(
            kind="FIX",
            title="Reducir fricción post-apertura",
            description="Revisar las campañas con menor avance en el funnel y simplificar su llamado a la acción.",
        ),
        ActionItem(
            kind="STOP",
            title="Depurar envíos con rebote alto",
            description="Pausar los envíos con rebote o cancelaciones sobre el promedio hasta limpiar la base.",
        ),
    ]


def executive_insights(
    records: Sequence[CampaignRecord],
    summary: Optional[GlobalSummary] = None,
) -> Optional[ExecutiveInsights]:
    if not records:
        return None
    summary = summary or global_summary(records)
    insight = channel_insight(records)
    return ExecutiveInsights(
        channel=insight,
        top_performers=top_performers(records),
        bottom_performers=bottom_performers(records),
        conclusions=build_conclusions(summary, insight),
        actions=action_items(insight, format_rollup(records)),
    )
