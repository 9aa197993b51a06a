"""Immutable per-project release lookup."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from .models import ReleaseModel

logger = logging.getLogger(__name__)


class ReleaseCatalog:
    """Releases of one project indexed by name.

    Built once from the tracker's release list and never mutated afterwards.
    """

    __slots__ = ("_by_name",)

    def __init__(self, by_name: Mapping[str, ReleaseModel]):
        self._by_name = MappingProxyType(dict(by_name))

    @classmethod
    def build(cls, releases: Iterable[ReleaseModel]) -> ReleaseCatalog:
        if releases is None:
            raise TypeError("releases cannot be None")
        by_name: dict[str, ReleaseModel] = {}
        for release in releases:
            if release is None or not release.name:
                continue
            if release.name in by_name:
                # Last write wins for duplicate names
                logger.debug("Duplicate release name %r; keeping id=%s", release.name, release.id)
            by_name[release.name] = release
        return cls(by_name)

    def lookup(self, name: str | None) -> ReleaseModel | None:
        if not name:
            return None
        return self._by_name.get(name)

    def all(self) -> set[ReleaseModel]:
        return set(self._by_name.values())

    def dated(self) -> list[ReleaseModel]:
        """Dated releases ascending by date (ties broken by name)."""
        dated = [r for r in self._by_name.values() if r.release_date is not None]
        return sorted(dated, key=lambda r: (r.release_date, r.name))

    def __len__(self) -> int:
        return len(self._by_name)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[ReleaseModel]:
        return iter(self._by_name.values())

    def __repr__(self) -> str:
        return f"ReleaseCatalog({len(self)} releases)"
