"""Public API for the campaign_analytics package."""

from .config import AnalysisSettings, IngestionSettings, settings_from_dict
from .data_loader import IngestionError, load_records, read_raw_rows
from .insights import ExecutiveInsights, executive_insights
from .metrics import (
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
    safe_ratio,
    top_by_open_rate,
)
from .pipeline import CampaignAnalysisPipeline
from .records import FIELD_ALIASES, CampaignRecord, normalize_row, normalize_rows
from .session import DashboardFilters, DashboardSession, DashboardView, build_view

__all__ = [
    "AnalysisSettings",
    "CampaignAnalysisPipeline",
    "CampaignRecord",
    "ChannelInsight",
    "DashboardFilters",
    "DashboardSession",
    "DashboardView",
    "ExecutiveInsights",
    "FIELD_ALIASES",
    "GlobalSummary",
    "IngestionError",
    "IngestionSettings",
    "build_view",
    "business_line_rollup",
    "campaign_funnel_rollup",
    "campaign_influence_rollup",
    "campaign_options",
    "campaign_unsubscribe_rollup",
    "channel_insight",
    "channel_rollup",
    "executive_insights",
    "format_rollup",
    "global_summary",
    "load_records",
    "normalize_row",
    "normalize_rows",
    "read_raw_rows",
    "safe_ratio",
    "settings_from_dict",
    "top_by_open_rate",
]
