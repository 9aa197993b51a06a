"""Domain data models for Jira releases and defect tickets."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Origin(str, Enum):
    """Where a version reference came from."""

    REPORTED = "reported"
    PREDICTED = "predicted"


@dataclass(frozen=True, slots=True)
class ReleaseModel:
    id: str | None
    name: str | None
    release_date: datetime | None = None
    released: bool = False
    archived: bool = False

    @property
    def is_dated(self) -> bool:
        return self.release_date is not None


@dataclass(slots=True)
class TicketModel:
    """A resolved defect ticket.

    Fields fall into three lifecycle stages:

    - raw: copied from the tracker response (``key`` through ``fixed_versions``);
    - derived: computed from raw data and the release catalog
      (``opening_version``, ``injected_version``, ``fixed_version``);
    - estimated: filled by the proportion estimator when the tracker did not
      report an injected version (``unsuitable_predicted_iv``, ``proportion``,
      and ``affected_versions`` when ``affected_origin`` is ``PREDICTED``).

    ``None`` on a derived or estimated field always means "absent"; whether it
    has been computed yet is given by the pipeline stage, never by the value.
    """

    key: str
    created: datetime | None
    resolution_date: datetime | None = None
    summary: str | None = None
    status: str | None = None
    resolution: str | None = None
    affected_versions: list[ReleaseModel] = field(default_factory=list)
    fixed_versions: list[ReleaseModel] = field(default_factory=list)

    # Derived
    opening_version: ReleaseModel | None = None
    injected_version: ReleaseModel | None = None
    fixed_version: ReleaseModel | None = None

    # Estimated
    injected_origin: Origin | None = None
    affected_origin: Origin | None = None
    proportion: float | None = None
    unsuitable_predicted_iv: bool | None = None
