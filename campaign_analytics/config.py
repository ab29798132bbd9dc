"""Configuration models for the campaign analytics pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, MutableMapping, Tuple

from campaign_analytics.metrics import ALL, CHANNEL_FILTERS
from campaign_analytics.records import FIELD_ALIASES, merge_aliases


@dataclass(slots=True)
class IngestionSettings:
    """Describe how an uploaded export is decoded into raw rows."""

    sheet_name: str | int = 0
    drop_empty_rows: bool = True
    extra_aliases: Dict[str, Tuple[str, ...]] = field(default_factory=dict)

    def aliases(self) -> Dict[str, Tuple[str, ...]]:
        return merge_aliases(self.extra_aliases)


@dataclass(slots=True)
class AnalysisSettings:
    """Execution parameters for a batch campaign analysis run."""

    data_path: Path
    output_dir: Path = Path("reports")
    ingestion: IngestionSettings = field(default_factory=IngestionSettings)
    channel_filter: str = ALL
    campaign_filter: str = ALL
    include_quality: bool = True
    write_csv: bool = True

    def resolve_paths(self) -> None:
        self.data_path = self.data_path.expanduser().resolve()
        self.output_dir = self.output_dir.expanduser().resolve()

    def ensure_output_tree(self) -> None:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        (self.output_dir / "derived").mkdir(exist_ok=True)


def _channel_filter(value: object) -> str:
    text = str(value or ALL).strip().lower()
    if text not in CHANNEL_FILTERS:
        raise ValueError(f"Unsupported channel filter '{value}'. Valid options: {', '.join(CHANNEL_FILTERS)}")
    return text


def _ingestion_from_dict(payload: object) -> IngestionSettings:
    if not isinstance(payload, MutableMapping):
        return IngestionSettings()

    aliases_payload = payload.get("extra_aliases") or {}
    if not isinstance(aliases_payload, MutableMapping):
        raise ValueError("`ingestion.extra_aliases` must map record fields to lists of column names")
    extra_aliases: Dict[str, Tuple[str, ...]] = {}
    for key, spellings in aliases_payload.items():
        if key not in FIELD_ALIASES:
            raise ValueError(f"Unknown record field '{key}' in `ingestion.extra_aliases`")
        if isinstance(spellings, str):
            spellings = [spellings]
        extra_aliases[key] = tuple(str(spelling) for spelling in spellings)

    sheet_name = payload.get("sheet_name", 0)
    return IngestionSettings(
        sheet_name=sheet_name if isinstance(sheet_name, (str, int)) else 0,
        drop_empty_rows=bool(payload.get("drop_empty_rows", True)),
        extra_aliases=extra_aliases,
    )


def settings_from_dict(payload: MutableMapping[str, object], *, base_path: Path | None = None) -> AnalysisSettings:
    """Create :class:`AnalysisSettings` from a dictionary (e.g., parsed JSON)."""

    base = base_path or Path.cwd()

    data_path_value = payload.get("data_path") if isinstance(payload, MutableMapping) else None
    if not data_path_value:
        raise ValueError("`data_path` is required in the configuration payload")

    output_dir_value = payload.get("output_dir")
    data_path = Path(str(data_path_value)).expanduser()
    output_dir = Path(str(output_dir_value)).expanduser() if output_dir_value else Path("reports")
    if not data_path.is_absolute():
        data_path = base / data_path
    if not output_dir.is_absolute():
        output_dir = base / output_dir

    settings = AnalysisSettings(
        data_path=data_path,
        output_dir=output_dir,
        ingestion=_ingestion_from_dict(payload.get("ingestion")),
        channel_filter=_channel_filter(payload.get("channel_filter", ALL)),
        campaign_filter=str(payload.get("campaign_filter") or ALL),
        include_quality=bool(payload.get("include_quality", True)),
        write_csv=bool(payload.get("write_csv", True)),
    )
    settings.resolve_paths()
    return settings
