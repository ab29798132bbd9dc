"""High-level pipeline orchestration."""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Dict

from campaign_analytics.config import AnalysisSettings, settings_from_dict
from campaign_analytics.quality import run_quality_checks, write_quality_artifacts
from campaign_analytics.reporting import build_markdown_report, build_summary_payload, dataframe_to_csv
from campaign_analytics.session import DashboardFilters, DashboardSession


class CampaignAnalysisPipeline:
    """Load one campaign export and write every derived view to disk."""

    def __init__(self, settings: AnalysisSettings) -> None:
        self.settings = settings
        self.settings.resolve_paths()
        self.settings.ensure_output_tree()
        self.session = DashboardSession(settings.ingestion)

    @classmethod
    def from_config_file(cls, path: Path) -> "CampaignAnalysisPipeline":
        payload = json.loads(path.read_text(encoding="utf-8"))
        settings = settings_from_dict(payload, base_path=path.parent)
        return cls(settings)

    def run(self) -> Dict[str, object]:
        export = self.session.load_file(self.settings.data_path)
        filters = DashboardFilters.for_channel(self.settings.channel_filter, self.settings.campaign_filter)
        self.session.set_filters(**asdict(filters))
        view = self.session.view()
        output_dir = self.settings.output_dir

        quality = None
        quality_paths = None
        if self.settings.include_quality:
            quality = run_quality_checks(view.records, rows_read=export.rows_read)
            quality_paths = write_quality_artifacts(quality, output_dir)

        summary_payload = build_summary_payload(view=view, settings=self.settings, quality=quality)
        summary_payload["rows_read"] = export.rows_read
        summary_payload["rows_dropped"] = export.rows_dropped

        metrics_path = output_dir / "metrics_summary.json"
        metrics_path.write_text(json.dumps(summary_payload, indent=2, ensure_ascii=False), encoding="utf-8")

        report_path = output_dir / "campaign_report.md"
        report_path.write_text(build_markdown_report(view, self.settings), encoding="utf-8")

        csv_paths: Dict[str, Path] = {}
        if self.settings.write_csv:
            derived_dir = output_dir / "derived"
            for name, frame in [
                ("channel_performance", view.channels),
                ("campaign_funnel", view.funnel),
                ("campaign_influence", view.influence),
                ("campaign_unsubscribes", view.unsubscribes),
                ("format_performance", view.formats),
                ("business_line_performance", view.business_lines),
                ("top_by_open_rate", view.top_records),
            ]:
                path = derived_dir / f"{name}.csv"
                dataframe_to_csv(frame, path)
                csv_paths[name] = path

        return {
            "view": view,
            "export": export,
            "summary": view.summary,
            "quality": quality,
            "quality_paths": quality_paths,
            "summary_path": metrics_path,
            "report_path": report_path,
            "csv_paths": csv_paths,
        }
