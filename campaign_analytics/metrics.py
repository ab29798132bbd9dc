"""Aggregations behind the campaign analytics view.

Every function here is pure: it receives the record sequence (and filter
values) explicitly and returns a freshly built result. Ratios follow one
policy:

* a zero denominator yields ``0`` rather than ``NaN`` or ``inf``;
* percentages are rounded half-up to 1 decimal for funnel-style rates
  (delivery, open, click, click-to-open, advance, bounce) and to 2 decimals
  for influence/conversion-style rates (influence, enrollment).
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Literal, Optional, Sequence

import numpy as np
import pandas as pd

from campaign_analytics.records import COUNTER_FIELDS, RECORD_COLUMNS, CampaignRecord


ChannelFilter = Literal["all", "email", "hsm"]

CHANNEL_FILTERS: tuple[str, ...] = ("all", "email", "hsm")
ALL = "all"
FUNNEL_PLACES = 1
INFLUENCE_PLACES = 2
TOP_N = 10

UNNAMED_CAMPAIGN = "Sin Nombre"
UNKNOWN_CHANNEL = "Desconocido"
UNKNOWN_FORMAT = "n/a"
UNKNOWN_LINE = "N/A"

CHANNEL_COLUMNS = ["name", "sent", "delivered", "opened", "advanced", "delivery_rate", "open_rate", "advance_rate"]
FUNNEL_COLUMNS = ["name", "advanced", "opened", "advance_rate"]
INFLUENCE_COLUMNS = ["name", "enrolled", "opened", "influence_rate"]
UNSUBSCRIBE_COLUMNS = ["name", "unsubscribed"]
FORMAT_COLUMNS = ["format", "name", "opened", "delivered", "enrolled", "open_rate", "influence_rate"]
LINE_COLUMNS = ["name", "opened", "delivered", "enrolled", "open_rate", "influence_rate"]
TOP_COLUMNS = [
    "campaign_id",
    "name",
    "channel",
    "clicked",
    "opened",
    "delivered",
    "enrolled",
    "open_rate",
    "influence_rate",
]


def safe_ratio(numerator: float, denominator: float) -> float:
    """Return ``numerator / denominator`` or ``0`` when the division is undefined."""

    if not denominator:
        return 0.0
    result = numerator / denominator
    if not math.isfinite(result):
        return 0.0
    return float(result)


def round_half_up(value: float, places: int) -> float:
    if not math.isfinite(value):
        return 0.0
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def percentage(numerator: float, denominator: float, places: int = FUNNEL_PLACES) -> float:
    return round_half_up(safe_ratio(numerator, denominator) * 100, places)


def _percentage_series(numerator: pd.Series, denominator: pd.Series, places: int) -> pd.Series:
    denominator = denominator.astype(float).replace(0, np.nan)
    ratio = (numerator.astype(float) / denominator) * 100
    ratio = ratio.replace([np.inf, -np.inf], np.nan).fillna(0.0)
    return ratio.map(lambda value: round_half_up(value, places)).astype(float)


def _as_count(value: float) -> float:
    value = float(value)
    if value.is_integer():
        return int(value)
    return value


def records_frame(records: Sequence[CampaignRecord]) -> pd.DataFrame:
    """Tabulate records in their original order with float counters."""

    frame = pd.DataFrame([asdict(record) for record in records], columns=list(RECORD_COLUMNS))
    for column in COUNTER_FIELDS:
        frame[column] = frame[column].astype(float)
    for column in RECORD_COLUMNS:
        if column not in COUNTER_FIELDS:
            frame[column] = frame[column].astype(object)
    return frame


def filter_by_channel(frame: pd.DataFrame, channel_filter: Optional[str] = ALL) -> pd.DataFrame:
    """Keep rows whose channel contains ``channel_filter`` (case-insensitive)."""

    needle = (channel_filter or ALL).strip().lower()
    if needle in {"", ALL}:
        return frame
    if frame.empty:
        return frame
    mask = frame["channel"].astype(str).str.lower().str.contains(needle, regex=False).astype(bool)
    return frame.loc[mask]


def _normalized(frame: pd.DataFrame, column: str, fallback: str, transform) -> pd.Series:
    keys = frame[column].astype(str).map(transform)
    return keys.where(keys != "", fallback)


def _rollup(frame: pd.DataFrame, keys: pd.Series, counters: List[str]) -> pd.DataFrame:
    summary = frame[counters].groupby(keys.rename("name"), sort=False).sum()
    return summary.reset_index()


def _tidy_counts(frame: pd.DataFrame) -> pd.DataFrame:
    for column in frame.columns.intersection(COUNTER_FIELDS):
        if (frame[column] % 1 == 0).all():
            frame[column] = frame[column].astype("int64")
    return frame


def _finish(summary: pd.DataFrame, columns: List[str], sort_by: Optional[str] = None) -> pd.DataFrame:
    if summary.empty:
        return pd.DataFrame(columns=columns)
    result = summary[columns]
    if sort_by:
        result = result.sort_values(sort_by, ascending=False, kind="stable")
    return _tidy_counts(result.reset_index(drop=True))


@dataclass(slots=True)
class GlobalSummary:
    total_sent: float = 0
    total_delivered: float = 0
    total_opened: float = 0
    total_clicked: float = 0
    total_enrolled: float = 0
    total_advanced: float = 0
    total_bounced: float = 0
    total_unsubscribed: float = 0
    delivery_rate: float = 0.0
    open_rate: float = 0.0
    click_rate: float = 0.0
    click_to_open_rate: float = 0.0
    funnel_advance_rate: float = 0.0
    influence_rate: float = 0.0
    bounce_rate: float = 0.0
    enrollment_rate: float = 0.0

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


def global_summary(records: Sequence[CampaignRecord]) -> GlobalSummary:
    """Totals and headline rates over the full, unfiltered record sequence."""

    frame = records_frame(records)
    totals = {column: _as_count(frame[column].sum()) for column in COUNTER_FIELDS}

    sent = totals["sent"]
    delivered = totals["delivered"]
    opened = totals["opened"]
    clicked = totals["clicked"]
    enrolled = totals["enrolled"]
    advanced = totals["advanced"]
    bounced = totals["bounced"]

    return GlobalSummary(
        total_sent=sent,
        total_delivered=delivered,
        total_opened=opened,
        total_clicked=clicked,
        total_enrolled=enrolled,
        total_advanced=advanced,
        total_bounced=bounced,
        total_unsubscribed=totals["unsubscribed"],
        delivery_rate=percentage(delivered, sent),
        open_rate=percentage(opened, delivered),
        click_rate=percentage(clicked, delivered),
        click_to_open_rate=percentage(clicked, opened),
        funnel_advance_rate=percentage(advanced, opened),
        influence_rate=percentage(enrolled, opened, INFLUENCE_PLACES),
        bounce_rate=percentage(bounced, sent),
        enrollment_rate=percentage(enrolled, delivered, INFLUENCE_PLACES),
    )


def channel_rollup(records: Sequence[CampaignRecord]) -> pd.DataFrame:
    """Delivery, open and funnel-advance rates per channel, in first-seen order.

    Channels are grouped case-insensitively; each row is labelled with the
    first spelling seen for that channel.
    """

    frame = records_frame(records)
    keys = _normalized(frame, "channel", UNKNOWN_CHANNEL.lower(), lambda value: value.strip().lower())
    labels = _normalized(frame, "channel", UNKNOWN_CHANNEL, lambda value: value.strip())
    summary = _rollup(frame, keys, ["sent", "delivered", "opened", "advanced"])
    display = labels.groupby(keys.rename("name"), sort=False).first()
    summary["name"] = summary["name"].map(display)
    summary["delivery_rate"] = _percentage_series(summary["delivered"], summary["sent"], FUNNEL_PLACES)
    summary["open_rate"] = _percentage_series(summary["opened"], summary["delivered"], FUNNEL_PLACES)
    summary["advance_rate"] = _percentage_series(summary["advanced"], summary["opened"], FUNNEL_PLACES)
    return _finish(summary, CHANNEL_COLUMNS)


def _campaign_groups(
    records: Sequence[CampaignRecord],
    channel_filter: Optional[str],
    counters: List[str],
) -> pd.DataFrame:
    frame = filter_by_channel(records_frame(records), channel_filter)
    keys = _normalized(frame, "campaign_id", UNNAMED_CAMPAIGN, lambda value: value)
    return _rollup(frame, keys, counters)


def campaign_funnel_rollup(
    records: Sequence[CampaignRecord],
    channel_filter: Optional[str] = ALL,
) -> pd.DataFrame:
    summary = _campaign_groups(records, channel_filter, ["advanced", "opened"])
    summary["advance_rate"] = _percentage_series(summary["advanced"], summary["opened"], FUNNEL_PLACES)
    return _finish(summary, FUNNEL_COLUMNS, sort_by="advance_rate")


def campaign_influence_rollup(
    records: Sequence[CampaignRecord],
    channel_filter: Optional[str] = ALL,
) -> pd.DataFrame:
    summary = _campaign_groups(records, channel_filter, ["enrolled", "opened"])
    summary["influence_rate"] = _percentage_series(summary["enrolled"], summary["opened"], INFLUENCE_PLACES)
    return _finish(summary, INFLUENCE_COLUMNS, sort_by="influence_rate")


def campaign_unsubscribe_rollup(
    records: Sequence[CampaignRecord],
    channel_filter: Optional[str] = ALL,
) -> pd.DataFrame:
    summary = _campaign_groups(records, channel_filter, ["unsubscribed"])
    return _finish(summary, UNSUBSCRIBE_COLUMNS, sort_by="unsubscribed")


def _engagement_rates(summary: pd.DataFrame) -> pd.DataFrame:
    summary["open_rate"] = _percentage_series(summary["opened"], summary["delivered"], FUNNEL_PLACES)
    summary["influence_rate"] = _percentage_series(summary["enrolled"], summary["opened"], INFLUENCE_PLACES)
    return summary


def _capitalize(value: str) -> str:
    return value[:1].upper() + value[1:]


def format_rollup(
    records: Sequence[CampaignRecord],
    channel_filter: Optional[str] = ALL,
) -> pd.DataFrame:
    frame = filter_by_channel(records_frame(records), channel_filter)
    keys = _normalized(frame, "format", UNKNOWN_FORMAT, lambda value: value.lower().strip())
    summary = _engagement_rates(_rollup(frame, keys, ["opened", "delivered", "enrolled"]))
    summary = summary.rename(columns={"name": "format"})
    summary["name"] = summary["format"].map(_capitalize)
    return _finish(summary, FORMAT_COLUMNS, sort_by="open_rate")


def business_line_rollup(
    records: Sequence[CampaignRecord],
    channel_filter: Optional[str] = ALL,
) -> pd.DataFrame:
    frame = filter_by_channel(records_frame(records), channel_filter)
    keys = _normalized(frame, "business_line", UNKNOWN_LINE, lambda value: value.strip().upper())
    summary = _engagement_rates(_rollup(frame, keys, ["opened", "delivered", "enrolled"]))
    return _finish(summary, LINE_COLUMNS, sort_by="open_rate")


def top_by_open_rate(
    records: Sequence[CampaignRecord],
    campaign: Optional[str] = ALL,
    *,
    limit: int = TOP_N,
) -> pd.DataFrame:
    """Rank individual records by open rate, keeping at most ``limit`` rows."""

    frame = records_frame(records)
    if campaign and campaign != ALL:
        frame = frame.loc[frame["campaign_id"] == campaign]
    if frame.empty:
        return pd.DataFrame(columns=TOP_COLUMNS)

    ranked = frame.rename(columns={"display_name": "name"})
    ranked["open_rate"] = _percentage_series(ranked["opened"], ranked["delivered"], FUNNEL_PLACES)
    ranked["influence_rate"] = _percentage_series(ranked["enrolled"], ranked["opened"], INFLUENCE_PLACES)
    ranked = ranked.sort_values("open_rate", ascending=False, kind="stable").head(limit)
    return _tidy_counts(ranked[TOP_COLUMNS].reset_index(drop=True))


def campaign_options(records: Sequence[CampaignRecord]) -> List[str]:
    """Distinct campaign ids, sorted, for the campaign selector."""

    return sorted({record.campaign_id for record in records})


@dataclass(slots=True)
class ChannelInsight:
    email_influence_rate: float
    hsm_influence_rate: float
    best_channel: str
    best_channel_rate: float

    def as_dict(self) -> Dict[str, object]:
        return asdict(self)


def channel_insight(records: Sequence[CampaignRecord]) -> ChannelInsight:
    """Compare the influence rate of the ``email`` and ``hsm`` channels.

    Only those two literal channel names take part; any other channel is
    ignored and an absent one counts as an all-zero bucket.
    """

    frame = records_frame(records)
    keys = frame["channel"].astype(str).str.lower()
    sums = frame[["enrolled", "opened"]].groupby(keys, sort=False).sum()

    def _influence(channel: str) -> float:
        if channel not in sums.index:
            return 0.0
        bucket = sums.loc[channel]
        return safe_ratio(float(bucket["enrolled"]), float(bucket["opened"])) * 100

    email = _influence("email")
    hsm = _influence("hsm")
    best = "HSM" if hsm > email else "EMAIL"
    return ChannelInsight(
        email_influence_rate=round_half_up(email, INFLUENCE_PLACES),
        hsm_influence_rate=round_half_up(hsm, INFLUENCE_PLACES),
        best_channel=best,
        best_channel_rate=round_half_up(max(hsm, email), INFLUENCE_PLACES),
    )
