"""Missing-version coverage statistics for a ticket collection."""

from __future__ import annotations

import logging
from collections.abc import Sequence

import pandas as pd

from jira_versions.core.models import TicketModel

logger = logging.getLogger(__name__)

COVERAGE_FIELDS = (
    ("Injected Version", lambda t: t.injected_version is None or not t.injected_version.name),
    ("Opening Version", lambda t: t.opening_version is None or not t.opening_version.name),
    ("Affected Versions", lambda t: not t.affected_versions),
    ("Fixed Versions", lambda t: not t.fixed_versions),
)


def missing_version_summary(tickets: Sequence[TicketModel]) -> pd.DataFrame:
    """Count and percentage of tickets missing each version field.

    Returns
    -------
    pd.DataFrame
        Columns ``field``, ``missing``, ``percent``; empty when there are no
        tickets.
    """
    if tickets is None:
        raise TypeError("tickets cannot be None")
    total = len(tickets)
    if total == 0:
        return pd.DataFrame(columns=["field", "missing", "percent"])
    rows = []
    for label, is_missing in COVERAGE_FIELDS:
        missing = sum(1 for t in tickets if t is not None and is_missing(t))
        rows.append({"field": label, "missing": missing, "percent": round(missing * 100.0 / total, 2)})
    return pd.DataFrame(rows)


def log_ticket_statistics(tickets: Sequence[TicketModel], label: str = "tickets") -> pd.DataFrame:
    summary = missing_version_summary(tickets)
    if summary.empty:
        logger.info("No %s to analyze for statistics", label)
        return summary
    lines = [f"Ticket statistics for {len(tickets)} {label}:"]
    for row in summary.itertuples(index=False):
        lines.append(f"- Missing {row.field}: {row.missing} ({row.percent:.2f}%)")
    logger.info("\n".join(lines))
    return summary
