"""Load and expose export column configuration from YAML (with fallbacks)."""

from __future__ import annotations

from pathlib import Path

import yaml

from .config import RELEASE_EXPORT_COLUMNS, TICKET_AUDIT_COLUMNS, TICKET_EXPORT_COLUMNS

_CACHE: dict[str, list[str]] | None = None


def _defaults() -> dict[str, list[str]]:
    return {
        "tickets": list(TICKET_EXPORT_COLUMNS),
        "releases": list(RELEASE_EXPORT_COLUMNS),
        "audit": list(TICKET_AUDIT_COLUMNS),
    }


def load_column_sets(base_path: str | Path | None = None, *, reload: bool = False):
    global _CACHE
    if _CACHE is not None and not reload and base_path is None:
        return _CACHE
    base = Path(base_path or Path(__file__).resolve().parent.parent)
    yaml_path = base / "columns.yaml"
    sets = _defaults()
    if yaml_path.exists():
        try:
            data = yaml.safe_load(yaml_path.read_text()) or {}
        except yaml.YAMLError:
            data = {}
        for name, columns in (data.get("sets") or {}).items():
            if isinstance(columns, list) and columns:
                sets[name] = [str(c) for c in columns]
    if base_path is None:
        _CACHE = sets
    return sets


def get_columns(set_name: str) -> list[str]:
    sets = load_column_sets()
    return sets.get(set_name, [])
