"""Proportion estimator for missing injected versions.

The proportion of a well-formed ticket is

    P = (FV - IV) / (FV - OV)

measured on release timestamps. Averaged over tickets whose history is known,
it predicts how far before the opening version a defect was injected:

    predicted = FV - (FV - OV) * P
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace

from jira_versions.core.catalog import ReleaseCatalog
from jira_versions.core.models import Origin, ReleaseModel, TicketModel

logger = logging.getLogger(__name__)


def timestamp(release: ReleaseModel) -> float:
    return release.release_date.timestamp()


def is_eligible(ticket: TicketModel) -> bool:
    """IV, OV and FV present and dated, with FV strictly after OV and IV."""
    iv = ticket.injected_version
    ov = ticket.opening_version
    fv = ticket.fixed_version
    if iv is None or ov is None or fv is None:
        return False
    if iv.release_date is None or ov.release_date is None or fv.release_date is None:
        return False
    return fv.release_date > ov.release_date and fv.release_date > iv.release_date


def proportion(ticket: TicketModel) -> float | None:
    if not is_eligible(ticket):
        return None
    fv = timestamp(ticket.fixed_version)
    return (fv - timestamp(ticket.injected_version)) / (fv - timestamp(ticket.opening_version))


class ProportionAccumulator:
    """Running mean of eligible proportions.

    Values are summed in the order they are added, so the mean matches a
    fresh left-to-right recomputation over the same tickets exactly.
    """

    __slots__ = ("total", "count")

    def __init__(self):
        self.total = 0.0
        self.count = 0

    def add(self, ticket: TicketModel) -> bool:
        p = proportion(ticket)
        if p is None:
            return False
        self.total += p
        self.count += 1
        return True

    @property
    def value(self) -> float:
        if self.count == 0:
            return 0.0
        return self.total / self.count


def average_proportion(tickets: Sequence[TicketModel]) -> float:
    if tickets is None:
        raise TypeError("tickets cannot be None")
    acc = ProportionAccumulator()
    for ticket in tickets:
        acc.add(ticket)
    if acc.count == 0:
        logger.warning("No eligible tickets among %d for proportion; using P=0", len(tickets))
    return acc.value


def cold_start_proportion(training_tickets: Sequence[TicketModel]) -> float:
    p = average_proportion(training_tickets)
    logger.info("Cold start proportion over %d training tickets: %.4f", len(training_tickets), p)
    return p


def incremental_proportion(tickets: Sequence[TicketModel], index: int) -> float:
    """Mean proportion of eligible tickets strictly before ``index``."""
    if tickets is None:
        raise TypeError("tickets cannot be None")
    if index < 0:
        raise ValueError("index cannot be negative")
    return average_proportion(tickets[:index])


def predict_iv(ticket: TicketModel, p: float, catalog: ReleaseCatalog) -> ReleaseModel | None:
    """Latest dated catalog release not after the predicted injection time."""
    if catalog is None:
        raise TypeError("catalog cannot be None")
    fv = ticket.fixed_version
    ov = ticket.opening_version
    if fv is None or ov is None or fv.release_date is None or ov.release_date is None:
        return None
    fv_ts = timestamp(fv)
    predicted = fv_ts - (fv_ts - timestamp(ov)) * p
    match: ReleaseModel | None = None
    for release in catalog.dated():
        if timestamp(release) > predicted:
            break
        match = release
    return match


def apply_prediction(ticket: TicketModel, p: float, catalog: ReleaseCatalog) -> TicketModel:
    predicted = predict_iv(ticket, p, catalog)
    if predicted is None:
        logger.debug("No release precedes predicted IV for %s (P=%.4f)", ticket.key, p)
        return replace(ticket, unsuitable_predicted_iv=True, proportion=p)
    return replace(
        ticket,
        injected_version=predicted,
        injected_origin=Origin.PREDICTED,
        proportion=p,
    )
