"""Normalization of raw spreadsheet rows into typed campaign records."""

from __future__ import annotations

import math
import numbers
import re
from dataclasses import dataclass, fields
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import pandas as pd


MISSING_TEXT = "N/A"
MISSING_CAMPAIGN_ID = "Sin ID"

COUNTER_FIELDS: Tuple[str, ...] = (
    "sent",
    "delivered",
    "opened",
    "clicked",
    "enrolled",
    "advanced",
    "bounced",
    "unsubscribed",
    "bounced_unknown_user",
    "bounced_mailbox_misconfigured",
)

TEXT_FIELDS: Tuple[str, ...] = (
    "channel",
    "format",
    "business_line",
    "subscription_type",
    "subject",
    "status",
)

# Ordered source spellings per canonical field; the first present value wins.
FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "campaign_id": ("campaña", "Campaña", "Campaign", "campaign"),
    "display_name": ("nombre", "Nombre", "Name", "name"),
    "enrolled": ("matriculado", "Matriculado", "Enrolled", "enrolled"),
    "advanced": ("avanzo", "Avanzo", "Advanced", "advanced"),
    "sent": ("enviado", "Enviado", "Sent", "sent"),
    "delivered": ("entregado", "Entregado", "Delivered", "delivered"),
    "opened": ("abierto", "Abierto", "Opened", "opened"),
    "clicked": ("con clic", "Con Clic", "clic", "Clicked", "clicked"),
    "bounced": ("rebotar", "Rebotar", "Bounced", "bounced"),
    "unsubscribed": (
        "suscripción",
        "suscripcion",
        "Suscripción",
        "Suscripcion",
        "suscripción cancelada",
        "suscripcion cancelada",
        "Suscripción Cancelada",
        "cancelada",
        "Unsubscribed",
        "unsubscribed",
    ),
    "bounced_unknown_user": ("bounced usuario desconocido",),
    "bounced_mailbox_misconfigured": ("bounced mala configuración del buzón",),
    "subscription_type": ("tipo de suscripción", "Tipo de suscripción", "Subscription Type"),
    "subject": ("asunto", "Asunto", "Subject"),
    "status": ("estado", "Estado", "Status"),
    "business_line": ("línea de negocio", "Línea de negocio", "Business Line"),
    "channel": ("canal", "Canal", "Channel", "channel"),
    "format": ("formato", "Formato", "Format", "format"),
}


@dataclass(frozen=True, slots=True)
class CampaignRecord:
    """One message row of the campaign export with every field resolved."""

    campaign_id: str = MISSING_CAMPAIGN_ID
    display_name: str = MISSING_CAMPAIGN_ID
    sent: float = 0
    delivered: float = 0
    opened: float = 0
    clicked: float = 0
    enrolled: float = 0
    advanced: float = 0
    bounced: float = 0
    unsubscribed: float = 0
    bounced_unknown_user: float = 0
    bounced_mailbox_misconfigured: float = 0
    channel: str = MISSING_TEXT
    format: str = MISSING_TEXT
    business_line: str = MISSING_TEXT
    subscription_type: str = MISSING_TEXT
    subject: str = MISSING_TEXT
    status: str = MISSING_TEXT


RECORD_COLUMNS: Tuple[str, ...] = tuple(field.name for field in fields(CampaignRecord))

_NUMERIC_NOISE = re.compile(r"[$%\s]")
_THOUSANDS_SEPARATOR = re.compile(r",(?=\d{3}(?!\d))")
_PARENTHESIZED = re.compile(r"^\((.+)\)$")


def merge_aliases(extra: Optional[Mapping[str, Iterable[str]]] = None) -> Dict[str, Tuple[str, ...]]:
    """Return the alias table with ``extra`` spellings probed after the built-in ones."""

    merged = dict(FIELD_ALIASES)
    for field_name, spellings in (extra or {}).items():
        if field_name not in merged:
            raise ValueError(
                f"Unknown record field '{field_name}'. Valid options: {', '.join(sorted(merged))}"
            )
        known = list(merged[field_name])
        known.extend(spelling for spelling in spellings if spelling not in known)
        merged[field_name] = tuple(known)
    return merged


def is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, numbers.Number):
        try:
            return math.isfinite(value)  # type: ignore[arg-type]
        except TypeError:
            return True
        except (ValueError, OverflowError):
            return False
    try:
        return not bool(pd.isna(value))
    except (TypeError, ValueError):
        return True


def _resolve(row: Mapping[str, Any], candidates: Iterable[str]) -> Any:
    for key in candidates:
        value = row.get(key)
        if is_present(value):
            return value
    return None


def _tidy_number(number: float) -> float:
    if not math.isfinite(number):
        return 0
    if float(number).is_integer():
        return int(number)
    return float(number)


def coerce_number(value: Any) -> float:
    """Convert a raw cell to a number; anything unparsable becomes 0.

    Commas are read as thousands separators only when followed by exactly three
    digits, so a decimal comma such as ``"12,5"`` is unparsable rather than 125.
    """

    if not is_present(value):
        return 0
    if isinstance(value, numbers.Number):
        try:
            return _tidy_number(float(value))  # type: ignore[arg-type]
        except (TypeError, ValueError, OverflowError):
            return 0
    if isinstance(value, str):
        text = _NUMERIC_NOISE.sub("", value)
        text = _THOUSANDS_SEPARATOR.sub("", text)
        text = _PARENTHESIZED.sub(r"-\1", text)
        try:
            return _tidy_number(float(text))
        except ValueError:
            return 0
    return 0


def coerce_text(value: Any, default: str = MISSING_TEXT) -> str:
    if not is_present(value):
        return default
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def normalize_row(
    row: Mapping[str, Any],
    aliases: Optional[Mapping[str, Tuple[str, ...]]] = None,
) -> CampaignRecord:
    """Map one raw row (any key casing or spelling) onto a :class:`CampaignRecord`."""

    table = aliases or FIELD_ALIASES
    campaign_id = coerce_text(_resolve(row, table["campaign_id"]), MISSING_CAMPAIGN_ID)
    values: Dict[str, Any] = {
        "campaign_id": campaign_id,
        "display_name": coerce_text(_resolve(row, table["display_name"]), campaign_id),
    }
    for name in COUNTER_FIELDS:
        values[name] = coerce_number(_resolve(row, table[name]))
    for name in TEXT_FIELDS:
        values[name] = coerce_text(_resolve(row, table[name]))
    return CampaignRecord(**values)


def normalize_rows(
    rows: Iterable[Mapping[str, Any]],
    aliases: Optional[Mapping[str, Tuple[str, ...]]] = None,
) -> List[CampaignRecord]:
    return [normalize_row(row, aliases) for row in rows]


def row_is_empty(row: Mapping[str, Any]) -> bool:
    return not any(is_present(value) for value in row.values())
