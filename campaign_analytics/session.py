"""In-memory session state for the analytics view."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from campaign_analytics.config import IngestionSettings
from campaign_analytics.data_loader import LoadedExport, load_records
from campaign_analytics.insights import ExecutiveInsights, executive_insights
from campaign_analytics.metrics import (
    ALL,
    CHANNEL_FILTERS,
    ChannelInsight,
    GlobalSummary,
    business_line_rollup,
    campaign_funnel_rollup,
    campaign_influence_rollup,
    campaign_options,
    campaign_unsubscribe_rollup,
    channel_insight,
    channel_rollup,
    format_rollup,
    global_summary,
    top_by_open_rate,
)
from campaign_analytics.records import CampaignRecord, normalize_rows


@dataclass(frozen=True, slots=True)
class DashboardFilters:
    """One channel filter per filtered view plus the selected campaign."""

    funnel_channel: str = ALL
    influence_channel: str = ALL
    unsubscribe_channel: str = ALL
    format_channel: str = ALL
    business_line_channel: str = ALL
    campaign: str = ALL

    @classmethod
    def for_channel(cls, channel: str, campaign: str = ALL) -> "DashboardFilters":
        return cls(channel, channel, channel, channel, channel, campaign)


@dataclass(slots=True)
class DashboardView:
    records: Tuple[CampaignRecord, ...]
    filters: DashboardFilters
    summary: GlobalSummary
    channels: pd.DataFrame
    funnel: pd.DataFrame
    influence: pd.DataFrame
    unsubscribes: pd.DataFrame
    formats: pd.DataFrame
    business_lines: pd.DataFrame
    top_records: pd.DataFrame
    campaigns: List[str]
    channel_insight: ChannelInsight
    insights: Optional[ExecutiveInsights]


def build_view(records: Sequence[CampaignRecord], filters: Optional[DashboardFilters] = None) -> DashboardView:
    """Run every aggregation for ``records`` under ``filters``."""

    filters = filters or DashboardFilters()
    records = tuple(records)
    summary = global_summary(records)
    return DashboardView(
        records=records,
        filters=filters,
        summary=summary,
        channels=channel_rollup(records),
        funnel=campaign_funnel_rollup(records, filters.funnel_channel),
        influence=campaign_influence_rollup(records, filters.influence_channel),
        unsubscribes=campaign_unsubscribe_rollup(records, filters.unsubscribe_channel),
        formats=format_rollup(records, filters.format_channel),
        business_lines=business_line_rollup(records, filters.business_line_channel),
        top_records=top_by_open_rate(records, filters.campaign),
        campaigns=campaign_options(records),
        channel_insight=channel_insight(records),
        insights=executive_insights(records, summary),
    )


Listener = Callable[["DashboardSession"], None]


class DashboardSession:
    """Hold the loaded records and active filters; replace wholesale, never mutate."""

    def __init__(self, ingestion: Optional[IngestionSettings] = None) -> None:
        self.ingestion = ingestion or IngestionSettings()
        self._records: Tuple[CampaignRecord, ...] = ()
        self._filters = DashboardFilters()
        self._listeners: List[Listener] = []
        self.last_export: Optional[LoadedExport] = None

    @property
    def records(self) -> Tuple[CampaignRecord, ...]:
        return self._records

    @property
    def filters(self) -> DashboardFilters:
        return self._filters

    @property
    def is_loaded(self) -> bool:
        return bool(self._records)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def load(self, records: Iterable[CampaignRecord]) -> None:
        self._records = tuple(records)
        self._notify()

    def load_rows(self, rows: Iterable[Mapping[str, Any]]) -> None:
        self.load(normalize_rows(rows, self.ingestion.aliases()))

    def load_file(self, path: str | Path) -> LoadedExport:
        """Decode ``path`` and replace the records; a decode failure leaves the session untouched."""

        export = load_records(path, self.ingestion)
        self.last_export = export
        self.load(export.records)
        return export

    def reset(self) -> None:
        self._records = ()
        self.last_export = None
        self._notify()

    def set_filters(self, **changes: str) -> DashboardFilters:
        valid = {item.name for item in fields(DashboardFilters)}
        for key, value in changes.items():
            if key not in valid:
                raise ValueError(f"Unknown filter '{key}'. Valid options: {', '.join(sorted(valid))}")
            if key != "campaign" and value not in CHANNEL_FILTERS:
                raise ValueError(f"Unsupported channel filter '{value}'. Valid options: {', '.join(CHANNEL_FILTERS)}")
        self._filters = replace(self._filters, **changes)
        self._notify()
        return self._filters

    def view(self) -> DashboardView:
        return build_view(self._records, self._filters)
