"""Opening, injected and canonical fixed version derivation (pure functions)."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import datetime

from jira_versions.core.catalog import ReleaseCatalog
from jira_versions.core.models import Origin, ReleaseModel, TicketModel


def latest_release(versions: Sequence[ReleaseModel]) -> ReleaseModel | None:
    """Pick the latest dated release, falling back to the first one seen.

    Undated entries never replace a dated pick; among equal dates the first
    seen wins.
    """
    if not versions:
        return None
    latest = versions[0]
    for version in versions:
        if version.release_date is None:
            continue
        if latest.release_date is None or version.release_date > latest.release_date:
            latest = version
    return latest


def oldest_dated_release(versions: Iterable[ReleaseModel]) -> ReleaseModel | None:
    oldest: ReleaseModel | None = None
    for version in versions:
        if version is None or version.release_date is None:
            continue
        if oldest is None or version.release_date < oldest.release_date:
            oldest = version
    return oldest


def opening_release(created: datetime | None, catalog: ReleaseCatalog) -> ReleaseModel | None:
    """Latest dated catalog release not after ``created``.

    Undated releases are excluded; same-day releases resolve to the greatest
    name so the result does not depend on catalog insertion order.
    """
    if catalog is None:
        raise TypeError("catalog cannot be None")
    if created is None:
        return None
    opening: ReleaseModel | None = None
    for release in catalog.dated():
        if release.release_date > created:
            break
        opening = release
    return opening


def normalize_fixed_versions(ticket: TicketModel) -> TicketModel:
    """Collapse the reported fix versions to the single canonical one."""
    fixed = latest_release(ticket.fixed_versions)
    return replace(
        ticket,
        fixed_versions=[fixed] if fixed is not None else [],
        fixed_version=fixed,
    )


def derive_versions(ticket: TicketModel, catalog: ReleaseCatalog) -> TicketModel:
    """Return a copy of ``ticket`` with OV, IV and canonical FV computed.

    Recomputing from the same raw data always gives the same result. Estimation
    flags are cleared; affected versions that were backfilled keep their
    predicted origin and proportion, and so does the IV taken from them.
    """
    normalized = normalize_fixed_versions(ticket)
    predicted = normalized.affected_origin is Origin.PREDICTED
    origin = Origin.PREDICTED if predicted else Origin.REPORTED
    injected = oldest_dated_release(normalized.affected_versions)
    return replace(
        normalized,
        opening_version=opening_release(normalized.created, catalog),
        injected_version=injected,
        injected_origin=origin if injected is not None else None,
        affected_origin=origin if normalized.affected_versions else None,
        proportion=normalized.proportion if predicted else None,
        unsuitable_predicted_iv=None,
    )


def prepare_tickets(tickets: Iterable[TicketModel], catalog: ReleaseCatalog) -> list[TicketModel]:
    if tickets is None:
        raise TypeError("tickets cannot be None")
    if catalog is None:
        raise TypeError("catalog cannot be None")
    return [derive_versions(t, catalog) for t in tickets]
