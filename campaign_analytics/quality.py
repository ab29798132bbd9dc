from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, List, Literal, Optional, Sequence

import json

from campaign_analytics.metrics import records_frame
from campaign_analytics.records import COUNTER_FIELDS, MISSING_CAMPAIGN_ID, CampaignRecord

RuleStatus = Literal["PASS", "WARN", "FAIL"]

KNOWN_CHANNELS = {"email", "hsm"}


@dataclass(slots=True)
class RuleResult:
    name: str
    status: RuleStatus
    detail: str
    sample_rows: Optional[int] = None


@dataclass(slots=True)
class QualityReport:
    status: RuleStatus
    rules: List[RuleResult]
    stats: Dict[str, object]


def run_quality_checks(records: Sequence[CampaignRecord], rows_read: Optional[int] = None) -> QualityReport:
    """Describe suspicious rows without altering or rejecting any record."""

    df = records_frame(records)
    rows_read = len(df) if rows_read is None else rows_read
    rules: List[RuleResult] = []

    # Q1 Schema
    identified = (df["campaign_id"] != MISSING_CAMPAIGN_ID) | (df[list(COUNTER_FIELDS)] != 0).any(axis=1)
    if rows_read and not bool(identified.any()):
        rules.append(
            RuleResult(
                name="Q1 Schema",
                status="FAIL",
                detail="No row carries a recognized campaign column or counter",
                sample_rows=rows_read,
            )
        )
    else:
        rules.append(RuleResult(name="Q1 Schema", status="PASS", detail="Recognized columns present"))

    # Q2 Funnel order
    over_delivered = int((df["delivered"] > df["sent"]).sum())
    over_opened = int((df["opened"] > df["delivered"]).sum())
    if over_delivered or over_opened:
        rules.append(
            RuleResult(
                name="Q2 Funnel order",
                status="WARN",
                detail=f"delivered > sent in {over_delivered} rows; opened > delivered in {over_opened} rows",
                sample_rows=over_delivered + over_opened,
            )
        )
    else:
        rules.append(RuleResult(name="Q2 Funnel order", status="PASS", detail="Counters decrease along the funnel"))

    # Q3 Range
    negative_columns: Dict[str, int] = {}
    for column in COUNTER_FIELDS:
        count = int((df[column] < 0).sum())
        if count > 0:
            negative_columns[column] = count
    if negative_columns:
        detail = ", ".join(f"{col} ({count})" for col, count in negative_columns.items())
        rules.append(
            RuleResult(
                name="Q3 Range",
                status="WARN",
                detail=f"Negative values detected in: {detail}",
                sample_rows=sum(negative_columns.values()),
            )
        )
    else:
        rules.append(RuleResult(name="Q3 Range", status="PASS", detail="All counters are non-negative"))

    # Q4 Channels
    channels = sorted({str(value) for value in df["channel"]})
    unexpected = [value for value in channels if value.lower() not in KNOWN_CHANNELS]
    if unexpected:
        rules.append(
            RuleResult(
                name="Q4 Channels",
                status="WARN",
                detail=f"Channels outside email/hsm are left out of the best-channel comparison: {', '.join(unexpected)}",
                sample_rows=int(df["channel"].astype(str).isin(unexpected).sum()),
            )
        )
    else:
        rules.append(RuleResult(name="Q4 Channels", status="PASS", detail="Only email and hsm channels present"))

    if any(rule.status == "FAIL" for rule in rules):
        overall_status: RuleStatus = "FAIL"
    elif any(rule.status == "WARN" for rule in rules):
        overall_status = "WARN"
    else:
        overall_status = "PASS"

    stats = {
        "rows_read": int(rows_read),
        "records": int(len(df)),
        "campaigns": int(df["campaign_id"].nunique()),
        "channels": channels,
    }

    return QualityReport(status=overall_status, rules=rules, stats=stats)


def write_quality_artifacts(report: QualityReport, output_dir: Path) -> Dict[str, str]:
    output_dir.mkdir(parents=True, exist_ok=True)

    report_dict = asdict(report)
    json_path = output_dir / "data_quality.json"
    json_path.write_text(json.dumps(report_dict, indent=2), encoding="utf-8")

    lines = [
        "# Data Quality Report",
        f"**Status:** {report.status}",
        "",
        "## Summary",
        f"- Rows read: {report.stats.get('rows_read')}",
        f"- Records: {report.stats.get('records')}",
        f"- Campaigns: {report.stats.get('campaigns')}",
        f"- Channels: {', '.join(report.stats.get('channels') or []) or 'none'}",
        "",
        "## Rules",
    ]
    for rule in report.rules:
        sample = f" (count={rule.sample_rows})" if rule.sample_rows else ""
        lines.append(f"- [{rule.status}] {rule.name}: {rule.detail}{sample}")
    markdown_path = output_dir / "data_quality.md"
    markdown_path.write_text("\n".join(lines), encoding="utf-8")

    return {"json": str(json_path), "markdown": str(markdown_path)}
