"""CSV export of releases and cleaned tickets."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

import pandas as pd

from .column_config import get_columns
from .config import EXPORT_DATE_FORMAT, SETTINGS
from .mappers import releases_to_dataframe, tickets_to_dataframe
from .models import ReleaseModel, TicketModel

logger = logging.getLogger(__name__)

DATE_COLUMNS = ("created", "resolution_date", "release_date", "opening_date")


def format_for_export(df: pd.DataFrame, columns: Sequence[str]) -> pd.DataFrame:
    """Select ``columns`` (missing ones become empty) and render dates/nulls."""
    out = pd.DataFrame(index=df.index)
    for col in columns:
        if col not in df.columns:
            out[col] = ""
            continue
        series = df[col]
        if col in DATE_COLUMNS:
            series = pd.to_datetime(series, utc=True, errors="coerce").dt.strftime(EXPORT_DATE_FORMAT)
        out[col] = series.astype(object).where(series.notna(), "")
    return out


def _write(df: pd.DataFrame, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    df.to_csv(path, index=False, encoding=SETTINGS.csv_encoding)
    logger.info("Exported CSV file: %s", path)
    return path


def export_releases_csv(
    releases: Iterable[ReleaseModel],
    project_key: str,
    output_dir: str | Path | None = None,
    columns: Sequence[str] | None = None,
) -> Path:
    df = releases_to_dataframe(releases)
    table = format_for_export(df, columns or get_columns("releases"))
    return _write(table, Path(output_dir or SETTINGS.output_dir) / f"{project_key}_releases.csv")


def export_tickets_csv(
    tickets: Iterable[TicketModel],
    project_key: str,
    output_dir: str | Path | None = None,
    columns: Sequence[str] | None = None,
) -> Path:
    df = tickets_to_dataframe(tickets)
    table = format_for_export(df, columns or get_columns("tickets"))
    return _write(table, Path(output_dir or SETTINGS.output_dir) / f"{project_key}_tickets.csv")
