"""Reporting helpers for the campaign analytics view."""

from __future__ import annotations

from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional
import json

import pandas as pd

from campaign_analytics.config import AnalysisSettings
from campaign_analytics.quality import QualityReport
from campaign_analytics.session import DashboardView


REPORT_VERSION = "campaign-analytics/1.0"


def _frame_to_json_records(df: pd.DataFrame) -> list[dict[str, object]]:
    if df.empty:
        return []
    return json.loads(df.to_json(orient="records", force_ascii=False))


def dataframe_to_csv(df: pd.DataFrame, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    if df.empty:
        path.write_text("", encoding="utf-8")
    else:
        df.to_csv(path, index=False)


def dataframe_to_markdown(df: pd.DataFrame) -> str:
    if df.empty:
        return "_No data available._"
    try:
        return df.to_markdown(index=False)
    except ImportError:
        return df.to_string(index=False)


def build_summary_payload(
    *,
    view: DashboardView,
    settings: Optional[AnalysisSettings] = None,
    quality: Optional[QualityReport] = None,
) -> Dict[str, object]:
    payload: Dict[str, object] = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "data_path": str(settings.data_path) if settings else None,
        "records_analyzed": len(view.records),
        "filters": asdict(view.filters),
        "summary": view.summary.as_dict(),
        "channels": _frame_to_json_records(view.channels),
        "campaign_funnel": _frame_to_json_records(view.funnel),
        "campaign_influence": _frame_to_json_records(view.influence),
        "campaign_unsubscribes": _frame_to_json_records(view.unsubscribes),
        "formats": _frame_to_json_records(view.formats),
        "business_lines": _frame_to_json_records(view.business_lines),
        "top_by_open_rate": _frame_to_json_records(view.top_records),
        "campaigns": list(view.campaigns),
        "channel_insight": view.channel_insight.as_dict(),
        "report_version": REPORT_VERSION,
    }

    if view.insights:
        payload["insights"] = {
            "best_channel": view.insights.best_channel,
            "best_channel_rate": view.insights.best_channel_rate,
            "top_performers": [asdict(record) for record in view.insights.top_performers],
            "bottom_performers": [asdict(record) for record in view.insights.bottom_performers],
            "conclusions": dict(view.insights.conclusions),
            "actions": [asdict(item) for item in view.insights.actions],
        }

    if quality:
        payload["data_quality"] = {
            "status": quality.status,
            "rules": [asdict(rule) for rule in quality.rules],
        }

    return payload


def _format_count(value: float) -> str:
    return f"{value:,.0f}" if float(value).is_integer() else f"{value:,.2f}"


def build_markdown_report(view: DashboardView, settings: Optional[AnalysisSettings] = None) -> str:
    summary = view.summary
    lines = [
        "# Campaign Performance Summary",
        "",
        f"**Dataset:** `{settings.data_path.name}`" if settings else None,
        f"**Records analyzed:** {len(view.records)}",
        "",
        "## Key Metrics",
    ]
    for value, label in [
        (summary.total_sent, "Sent"),
        (summary.total_delivered, "Delivered"),
        (summary.total_opened, "Opened"),
        (summary.total_clicked, "Clicked"),
        (summary.total_enrolled, "Enrolled"),
        (summary.total_unsubscribed, "Unsubscribed"),
    ]:
        lines.append(f"- **{label}:** {_format_count(value)}")
    for value, label in [
        (summary.delivery_rate, "Delivery rate"),
        (summary.open_rate, "Open rate"),
        (summary.click_rate, "Click rate"),
        (summary.click_to_open_rate, "Click-to-open rate"),
        (summary.funnel_advance_rate, "Funnel advance rate"),
        (summary.influence_rate, "Influence rate"),
    ]:
        lines.append(f"- **{label}:** {value}%")

    filters = view.filters
    sections = [
        ("## Channel performance", view.channels),
        (f"## Funnel advance by campaign (channel: {filters.funnel_channel})", view.funnel),
        (f"## Influence by campaign (channel: {filters.influence_channel})", view.influence),
        (f"## Unsubscribes by campaign (channel: {filters.unsubscribe_channel})", view.unsubscribes),
        (f"## Format performance (channel: {filters.format_channel})", view.formats),
        (f"## Business line performance (channel: {filters.business_line_channel})", view.business_lines),
        (f"## Top messages by open rate (campaign: {filters.campaign})", view.top_records),
    ]
    for title, frame in sections:
        lines.extend(["", title, ""])
        lines.append(dataframe_to_markdown(frame))

    insights = view.insights
    if insights:
        lines.extend(
            [
                "",
                "## Executive insights",
                "",
                f"**Best channel:** {insights.best_channel} (influence {insights.best_channel_rate:.2f}%)",
            ]
        )
        for key, text in insights.conclusions.items():
            lines.extend(["", f"### {key.capitalize()}", "", text])
        lines.extend(["", "### Actions", ""])
        for item in insights.actions:
            lines.append(f"- **{item.kind}** {item.title}: {item.description}")

    return "\n".join(line for line in lines if line is not None)
