"""Ticket cleaning pipeline: derive, validate, estimate, backfill, revalidate.

Each stage returns new ticket copies; the input collection is never mutated.
A ticket dropped by either validation pass does not re-enter the pipeline.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field, replace

from jira_versions.core.catalog import ReleaseCatalog
from jira_versions.core.config import COLD_START_FRACTION
from jira_versions.core.models import Origin, ReleaseModel, TicketModel

from .derive import prepare_tickets
from .proportion import ProportionAccumulator, apply_prediction, cold_start_proportion
from .validate import partition

logger = logging.getLogger(__name__)

STAGE_FIRST_VALIDATION = "first_validation"
STAGE_SECOND_VALIDATION = "second_validation"


@dataclass(slots=True)
class RemovedTicket:
    ticket: TicketModel
    reason: str
    stage: str


@dataclass(slots=True)
class CleaningResult:
    tickets: list[TicketModel]
    removed: list[RemovedTicket] = field(default_factory=list)
    cold_start_p: float = 0.0
    consistent: bool = True


def _opening_sort_key(ticket: TicketModel):
    ov = ticket.opening_version
    # First validation guarantees a dated OV; keep the key total anyway
    date = ov.release_date if ov is not None else None
    return (date is None, date)


def sort_by_opening(tickets: Sequence[TicketModel]) -> list[TicketModel]:
    return sorted(tickets, key=_opening_sort_key)


def cold_start_count(total: int, fraction: float = COLD_START_FRACTION) -> int:
    if not 0.0 <= fraction <= 1.0:
        raise ValueError(f"cold start fraction must be within [0, 1], got {fraction}")
    return int(total * fraction)


def estimate_injected_versions(
    tickets: Sequence[TicketModel],
    cold_start_p: float,
    catalog: ReleaseCatalog,
    *,
    fraction: float = COLD_START_FRACTION,
) -> list[TicketModel]:
    """Predict missing IVs over OV-sorted ``tickets``.

    The leading ``fraction`` uses ``cold_start_p``; every later ticket uses the
    mean proportion of eligible tickets before it in ``tickets`` as given,
    i.e. only reported injected versions train the estimate.
    """
    cutoff = cold_start_count(len(tickets), fraction)
    history = ProportionAccumulator()
    out: list[TicketModel] = []
    for index, ticket in enumerate(tickets):
        if ticket.injected_version is None:
            p = cold_start_p if index < cutoff else history.value
            out.append(apply_prediction(ticket, p, catalog))
        else:
            out.append(ticket)
        history.add(ticket)
    return out


def releases_between(
    catalog: ReleaseCatalog, start: ReleaseModel, end: ReleaseModel
) -> list[ReleaseModel]:
    """Dated releases within ``[start, end)``; undated releases are excluded."""
    if start.release_date is None or end.release_date is None:
        return []
    return [r for r in catalog.dated() if start.release_date <= r.release_date < end.release_date]


def backfill_affected_versions(tickets: Sequence[TicketModel], catalog: ReleaseCatalog) -> list[TicketModel]:
    out: list[TicketModel] = []
    for ticket in tickets:
        if ticket.affected_versions or ticket.injected_version is None or ticket.fixed_version is None:
            out.append(ticket)
            continue
        affected = releases_between(catalog, ticket.injected_version, ticket.fixed_version)
        out.append(
            replace(
                ticket,
                affected_versions=affected,
                affected_origin=Origin.PREDICTED if affected else None,
            )
        )
    return out


def check_unsuitable_consistency(tickets: Sequence[TicketModel]) -> bool:
    """Tickets lacking IV or AV must be exactly those flagged unsuitable."""
    if tickets is None:
        raise TypeError("tickets cannot be None")
    missing = {t.key for t in tickets if t.injected_version is None or not t.affected_versions}
    flagged = {t.key for t in tickets if t.unsuitable_predicted_iv is True}
    logger.info("Tickets with null IV or AV: %d; flagged unsuitable: %d", len(missing), len(flagged))
    if missing == flagged:
        return True
    for key in sorted(missing - flagged):
        logger.warning("Ticket %s has null IV/AV but is not marked as unsuitable", key)
    for key in sorted(flagged - missing):
        logger.warning("Ticket %s is marked as unsuitable but has IV and AV", key)
    return False


def _record_removed(removed: list[tuple[TicketModel, str]], stage: str) -> list[RemovedTicket]:
    out = []
    for ticket, reason in removed:
        logger.debug("Removed %s at %s: %s", ticket.key, stage, reason)
        out.append(RemovedTicket(ticket=ticket, reason=reason, stage=stage))
    return out


def clean_tickets(
    tickets: Sequence[TicketModel],
    training_tickets: Sequence[TicketModel],
    catalog: ReleaseCatalog,
    *,
    cold_start_fraction: float = COLD_START_FRACTION,
) -> CleaningResult:
    """Run the full cleaning pipeline over one project's tickets.

    ``training_tickets`` is the external cold start set; it must already carry
    derived versions (see :func:`prepare_tickets`) against its own catalog.
    Training tickets failing the first validation pass do not train P.
    """
    if tickets is None or training_tickets is None:
        raise TypeError("tickets and training_tickets cannot be None")
    if catalog is None:
        raise TypeError("catalog cannot be None")

    derived = prepare_tickets(tickets, catalog)
    kept, removed = partition(derived)
    removed_log = _record_removed(removed, STAGE_FIRST_VALIDATION)
    logger.info("First validation kept %d of %d tickets", len(kept), len(derived))

    training, rejected = partition(training_tickets)
    if rejected:
        logger.info("Ignoring %d inconsistent cold start tickets", len(rejected))

    ordered = sort_by_opening(kept)
    cold_p = cold_start_proportion(training)
    estimated = estimate_injected_versions(ordered, cold_p, catalog, fraction=cold_start_fraction)
    backfilled = backfill_affected_versions(estimated, catalog)
    # checked before the second pass, which drops every ticket without an IV
    consistent = check_unsuitable_consistency(backfilled)

    survivors, removed = partition(backfilled, full=True)
    removed_log.extend(_record_removed(removed, STAGE_SECOND_VALIDATION))
    logger.info("Second validation kept %d of %d tickets", len(survivors), len(backfilled))

    consistent = check_unsuitable_consistency(survivors) and consistent
    if not consistent:
        logger.warning("Null IV/AV tickets do not match the unsuitable prediction flags")

    return CleaningResult(
        tickets=survivors,
        removed=removed_log,
        cold_start_p=cold_p,
        consistent=consistent,
    )
