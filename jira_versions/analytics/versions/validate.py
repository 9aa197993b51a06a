"""Temporal consistency rules for a ticket's version assignment.

Every comparison involving a release without a date is treated as "cannot
determine" and never causes removal on its own.
"""

from __future__ import annotations

from collections.abc import Iterable

from jira_versions.core.models import ReleaseModel, TicketModel


def is_after(first: ReleaseModel | None, second: ReleaseModel | None) -> bool:
    if first is None or second is None:
        return False
    if first.release_date is None or second.release_date is None:
        return False
    return first.release_date > second.release_date


def is_before(first: ReleaseModel | None, second: ReleaseModel | None) -> bool:
    return is_after(second, first)


def same_date(first: ReleaseModel | None, second: ReleaseModel | None) -> bool:
    if first is None or second is None:
        return False
    if first.release_date is None or second.release_date is None:
        return False
    return first.release_date == second.release_date


def removal_reason(ticket: TicketModel, *, full: bool = False) -> str | None:
    """Return why ``ticket`` must be dropped, or None when it is well formed.

    ``full`` enables the rules that only make sense once injected and affected
    versions have been estimated.
    """
    ov = ticket.opening_version
    fv = ticket.fixed_version
    iv = ticket.injected_version

    if ov is None:
        return "missing opening version"
    if fv is None:
        return "missing fixed version"
    if is_after(ov, fv):
        return "opening version after fixed version"
    for av in ticket.affected_versions:
        if is_after(av, fv) or same_date(av, fv):
            return f"affected version {av.name} not before fixed version"
    if iv is not None and is_after(iv, fv):
        return "injected version after fixed version"
    if is_after(iv, ov):
        return "injected version after opening version"

    if not full:
        return None

    if iv is None:
        return "missing injected version"
    for av in ticket.affected_versions:
        if is_before(av, iv) or is_after(av, fv) or same_date(av, fv):
            return f"affected version {av.name} outside [injected, fixed)"
    if same_date(iv, fv):
        return "injected version equals fixed version"
    if same_date(ov, fv):
        return "opening version equals fixed version"
    return None


def is_invalid(ticket: TicketModel, *, full: bool = False) -> bool:
    return removal_reason(ticket, full=full) is not None


def partition(
    tickets: Iterable[TicketModel], *, full: bool = False
) -> tuple[list[TicketModel], list[tuple[TicketModel, str]]]:
    """Split tickets into those kept and (ticket, reason) pairs removed."""
    if tickets is None:
        raise TypeError("tickets cannot be None")
    kept: list[TicketModel] = []
    removed: list[tuple[TicketModel, str]] = []
    for ticket in tickets:
        reason = removal_reason(ticket, full=full)
        if reason is None:
            kept.append(ticket)
        else:
            removed.append((ticket, reason))
    return kept, removed
