"""Utilities for decoding campaign exports into raw rows and records."""

from __future__ import annotations

import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from campaign_analytics.config import IngestionSettings
from campaign_analytics.records import CampaignRecord, normalize_rows, row_is_empty


EXCEL_SUFFIXES = {".xlsx", ".xlsm"}
CSV_SUFFIXES = {".csv"}


class IngestionError(ValueError):
    """Raised when an export cannot be decoded into rows."""


@dataclass(slots=True)
class LoadedExport:
    """Records decoded from one export plus the counts seen along the way."""

    path: Path
    records: List[CampaignRecord]
    rows_read: int
    rows_dropped: int
    columns: List[str]


def _read_frame(path: Path, settings: IngestionSettings) -> pd.DataFrame:
    suffix = path.suffix.lower()
    if suffix in CSV_SUFFIXES:
        return pd.read_csv(path, dtype=object)
    if suffix in EXCEL_SUFFIXES:
        return pd.read_excel(path, sheet_name=settings.sheet_name, dtype=object, engine="openpyxl")
    raise IngestionError(
        f"Unsupported file type '{path.suffix}'. Expected one of: "
        f"{', '.join(sorted(CSV_SUFFIXES | EXCEL_SUFFIXES))}"
    )


def _frame_to_rows(frame: pd.DataFrame) -> List[Dict[str, Any]]:
    frame = frame.rename(columns=lambda column: str(column).strip())
    cleaned = frame.astype(object).where(frame.notna(), None)
    return cleaned.to_dict(orient="records")


def read_raw_rows(path: str | Path, settings: Optional[IngestionSettings] = None) -> List[Dict[str, Any]]:
    """Decode the first sheet (or ``settings.sheet_name``) of an export into row mappings."""

    settings = settings or IngestionSettings()
    path = Path(path)
    if not path.exists():
        raise IngestionError(f"Export not found: {path}")
    try:
        frame = _read_frame(path, settings)
    except IngestionError:
        raise
    except (ValueError, OSError, KeyError, zipfile.BadZipFile) as exc:
        raise IngestionError(f"Could not read {path.name}: {exc}") from exc
    return _frame_to_rows(frame)


def load_records(path: str | Path, settings: Optional[IngestionSettings] = None) -> LoadedExport:
    settings = settings or IngestionSettings()
    rows = read_raw_rows(path, settings)
    kept = [row for row in rows if not row_is_empty(row)] if settings.drop_empty_rows else rows
    columns = list(rows[0].keys()) if rows else []
    return LoadedExport(
        path=Path(path),
        records=normalize_rows(kept, settings.aliases()),
        rows_read=len(rows),
        rows_dropped=len(rows) - len(kept),
        columns=columns,
    )
