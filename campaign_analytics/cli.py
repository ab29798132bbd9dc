"""Command line entry point for campaign export analysis."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Dict, Optional, Sequence

from campaign_analytics.config import AnalysisSettings, IngestionSettings
from campaign_analytics.data_loader import IngestionError
from campaign_analytics.metrics import ALL, CHANNEL_FILTERS
from campaign_analytics.pipeline import CampaignAnalysisPipeline


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Summarize a campaign delivery export (CSV or Excel).")
    parser.add_argument("--data", type=Path, help="Path to the exported .csv/.xlsx file.")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("reports"),
        help="Directory to write reports and derived artifacts.",
    )
    parser.add_argument("--config", type=Path, help="Optional JSON configuration file.")
    parser.add_argument("--channel", choices=list(CHANNEL_FILTERS), default=ALL, help="Channel filter for rollups.")
    parser.add_argument("--campaign", default=ALL, help="Campaign id for the top-10 ranking.")
    parser.add_argument("--sheet", help="Worksheet name to read from Excel exports (defaults to the first sheet).")
    parser.add_argument("--no-csv", action="store_true", help="Skip the per-rollup CSV files.")
    parser.add_argument("--no-quality", action="store_true", help="Skip the data quality report.")
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> AnalysisSettings:
    return AnalysisSettings(
        data_path=args.data,
        output_dir=args.output_dir,
        ingestion=IngestionSettings(sheet_name=args.sheet if args.sheet else 0),
        channel_filter=args.channel,
        campaign_filter=args.campaign,
        include_quality=not args.no_quality,
        write_csv=not args.no_csv,
    )


def display_console_summary(results: Dict[str, object]) -> None:
    summary = results["summary"]
    export = results["export"]

    print("\nCampaign analysis completed.\n")
    print(f"  {'Rows read':24s} {export.rows_read:,}")
    print(f"  {'Empty rows dropped':24s} {export.rows_dropped:,}")
    for attribute, label in [
        ("total_sent", "Sent"),
        ("total_delivered", "Delivered"),
        ("total_opened", "Opened"),
        ("total_enrolled", "Enrolled"),
    ]:
        print(f"  {label:24s} {getattr(summary, attribute):,.0f}")
    for attribute, label in [
        ("delivery_rate", "Delivery rate"),
        ("open_rate", "Open rate"),
        ("click_to_open_rate", "CTO"),
        ("funnel_advance_rate", "Funnel advance"),
        ("influence_rate", "Influence rate"),
    ]:
        print(f"  {label:24s} {getattr(summary, attribute)}%")

    view = results["view"]
    if view.insights:
        print(f"  {'Best channel':24s} {view.insights.best_channel} ({view.insights.best_channel_rate:.2f}%)")

    quality = results.get("quality")
    if quality is not None:
        print(f"\n[Quality] {quality.status}")
        for rule in quality.rules:
            if rule.status != "PASS":
                print(f"- [{rule.status}] {rule.name}: {rule.detail}")

    print("\nArtifacts:")
    print(f"  Markdown report: {results['report_path']}")
    print(f"  Metrics summary: {results['summary_path']}")
    for name, path in (results.get("csv_paths") or {}).items():
        print(f"  CSV ({name}): {path}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)

    try:
        if args.config:
            pipeline = CampaignAnalysisPipeline.from_config_file(args.config)
        elif args.data:
            pipeline = CampaignAnalysisPipeline(build_settings(args))
        else:
            print("No work to execute. Provide --data or --config.")
            return 2
        results = pipeline.run()
    except IngestionError as exc:
        print(f"[Ingest] Failed: {exc}")
        return 1
    except ValueError as exc:
        print(f"[Config] Invalid settings: {exc}")
        return 1

    display_console_summary(results)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
