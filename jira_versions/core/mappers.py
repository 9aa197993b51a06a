"""Mapping raw Jira JSON into ReleaseModel / TicketModel and tabular views."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Any

import pandas as pd
import pytz

from .catalog import ReleaseCatalog
from .config import RELEASE_DATE_FORMAT, TIMEZONE, VERSION_LIST_SEPARATOR
from .models import ReleaseModel, TicketModel

logger = logging.getLogger(__name__)


def parse_dt(val) -> datetime | None:
    if not val:
        return None
    ts = pd.to_datetime(val, utc=True, errors="coerce")
    if ts is None or pd.isna(ts):
        return None
    return ts.to_pydatetime()


def parse_release_date(val: str | None) -> datetime | None:
    """Release dates are calendar days; anchor them at local midnight."""
    if not val:
        return None
    try:
        day = datetime.strptime(str(val).strip(), RELEASE_DATE_FORMAT)
    except ValueError:
        return None
    return pytz.timezone(TIMEZONE).localize(day)


def map_release(raw: dict[str, Any]) -> ReleaseModel:
    name = raw.get("name")
    release_date = parse_release_date(raw.get("releaseDate"))
    if raw.get("releaseDate") and release_date is None:
        logger.warning("Failed to parse release date for version %s: %s", name, raw.get("releaseDate"))
    return ReleaseModel(
        id=raw.get("id"),
        name=name,
        release_date=release_date,
        released=bool(raw.get("released", False)),
        archived=bool(raw.get("archived", False)),
    )


def _resolve_versions(value: Any, catalog: ReleaseCatalog) -> list[ReleaseModel]:
    out: list[ReleaseModel] = []
    for item in value or []:
        if not isinstance(item, dict):
            continue
        release = catalog.lookup(item.get("name"))
        if release is not None:
            out.append(release)
    return out


def map_ticket(raw: dict[str, Any], catalog: ReleaseCatalog) -> TicketModel:
    fields = raw.get("fields") or {}
    return TicketModel(
        key=raw.get("key"),
        created=parse_dt(fields.get("created")),
        resolution_date=parse_dt(fields.get("resolutiondate")),
        summary=fields.get("summary"),
        status=(fields.get("status") or {}).get("name") if fields.get("status") else None,
        resolution=(fields.get("resolution") or {}).get("name") if fields.get("resolution") else None,
        affected_versions=_resolve_versions(fields.get("versions"), catalog),
        fixed_versions=_resolve_versions(fields.get("fixVersions"), catalog),
    )


def _version_name(version: ReleaseModel | None) -> str:
    if version is None:
        return ""
    return version.name or ""


def _version_names(versions: Iterable[ReleaseModel]) -> str:
    return VERSION_LIST_SEPARATOR.join(v.name for v in versions if v is not None and v.name)


def tickets_to_dataframe(tickets: Iterable[TicketModel]) -> pd.DataFrame:
    rows = []
    for t in tickets:
        rows.append(
            {
                "key": t.key,
                "summary": t.summary,
                "status": t.status,
                "resolution": t.resolution,
                "created": t.created,
                "resolution_date": t.resolution_date,
                "opening_version": _version_name(t.opening_version),
                "opening_date": t.opening_version.release_date if t.opening_version else None,
                "injected_version": _version_name(t.injected_version),
                "fixed_version": _version_name(t.fixed_version),
                "fixed_versions": _version_names(t.fixed_versions),
                "affected_versions": _version_names(t.affected_versions),
                "injected_origin": t.injected_origin.value if t.injected_origin else "",
                "affected_origin": t.affected_origin.value if t.affected_origin else "",
                "proportion": t.proportion,
                "unsuitable_predicted_iv": bool(t.unsuitable_predicted_iv),
            }
        )
    return pd.DataFrame(rows)


def releases_to_dataframe(releases: Iterable[ReleaseModel]) -> pd.DataFrame:
    rows = [
        {
            "id": r.id,
            "name": r.name,
            "release_date": r.release_date,
            "released": r.released,
            "archived": r.archived,
        }
        for r in releases
    ]
    df = pd.DataFrame(rows)
    if df.empty:
        return df
    df["release_date"] = pd.to_datetime(df["release_date"], utc=True, errors="coerce")
    return df.sort_values(by="release_date", na_position="last").reset_index(drop=True)
