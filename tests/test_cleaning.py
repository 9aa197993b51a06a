from datetime import UTC, datetime, timedelta

import pytest

from jira_versions.analytics.versions.cleaning import (
    STAGE_FIRST_VALIDATION,
    STAGE_SECOND_VALIDATION,
    backfill_affected_versions,
    check_unsuitable_consistency,
    clean_tickets,
    cold_start_count,
    releases_between,
    sort_by_opening,
)
from jira_versions.analytics.versions.derive import derive_versions
from jira_versions.analytics.versions.proportion import average_proportion, proportion
from jira_versions.analytics.versions.validate import is_invalid
from jira_versions.core.catalog import ReleaseCatalog
from jira_versions.core.models import Origin, ReleaseModel, TicketModel


def _release(name, y=None, m=1, d=1):
    day = datetime(y, m, d, tzinfo=UTC) if y else None
    return ReleaseModel(id=name, name=name, release_date=day)


R1 = _release("1.0", 2020, 1, 1)
R2 = _release("1.1", 2020, 2, 1)
R3 = _release("1.2", 2020, 3, 1)
R4 = _release("1.3", 2020, 4, 1)
R5 = _release("1.4", 2020, 5, 1)
R6 = _release("1.5", 2020, 6, 1)
R7 = _release("1.6", 2020, 7, 1)
R8 = _release("1.7", 2020, 8, 1)
NEXT = _release("2.0")
CATALOG = ReleaseCatalog.build([R1, R2, R3, R4, R5, R6, R7, R8, NEXT])


def _raw(key, created, affected=(), fixed=()):
    return TicketModel(
        key=key,
        created=created,
        affected_versions=list(affected),
        fixed_versions=list(fixed),
    )


def _sample_tickets():
    return [
        # listed out of opening order on purpose
        _raw("BK-6", datetime(2020, 6, 15, tzinfo=UTC), affected=[R3, R2], fixed=[R8]),
        _raw("BK-1", datetime(2020, 2, 15, tzinfo=UTC), affected=[R1], fixed=[R4]),
        _raw("BK-5", datetime(2020, 5, 15, tzinfo=UTC), fixed=[R7, NEXT]),
        _raw("BK-3", datetime(2019, 12, 1, tzinfo=UTC), fixed=[R2]),
        _raw("BK-2", datetime(2020, 3, 15, tzinfo=UTC), fixed=[R5]),
        _raw("BK-4", datetime(2020, 4, 15, tzinfo=UTC), affected=[R6], fixed=[R5]),
    ]


def _training_ticket(iv, ov, fv):
    return TicketModel(
        key="TR-1",
        created=ov.release_date,
        injected_version=iv,
        opening_version=ov,
        fixed_version=fv,
        fixed_versions=[fv],
        affected_versions=[iv],
    )


# P = 1: the predicted injection instant is the opening version itself
TRAINING = [_training_ticket(iv=R3, ov=R3, fv=R5)]


def test_cold_start_count():
    assert cold_start_count(10, 0.2) == 2
    assert cold_start_count(4, 0.2) == 0
    assert cold_start_count(4, 1.0) == 4
    with pytest.raises(ValueError):
        cold_start_count(4, 1.5)


def test_releases_between_is_half_open_and_skips_undated():
    assert releases_between(CATALOG, R3, R5) == [R3, R4]
    assert releases_between(CATALOG, R3, R3) == []
    assert releases_between(CATALOG, R3, NEXT) == []


def test_sort_by_opening_is_stable():
    a = TicketModel(key="A", created=None, opening_version=R3)
    b = TicketModel(key="B", created=None, opening_version=R1)
    c = TicketModel(key="C", created=None, opening_version=R3)
    assert [t.key for t in sort_by_opening([a, b, c])] == ["B", "A", "C"]


def test_clean_tickets_removes_and_estimates():
    result = clean_tickets(_sample_tickets(), TRAINING, CATALOG, cold_start_fraction=0.5)

    assert [t.key for t in result.tickets] == ["BK-1", "BK-2", "BK-5", "BK-6"]
    assert result.cold_start_p == pytest.approx(1.0)
    assert result.consistent is True
    removed = {r.ticket.key: (r.stage, r.reason) for r in result.removed}
    assert removed == {
        "BK-3": (STAGE_FIRST_VALIDATION, "missing opening version"),
        "BK-4": (STAGE_FIRST_VALIDATION, "affected version 1.5 not before fixed version"),
    }

    by_key = {t.key: t for t in result.tickets}
    reported = by_key["BK-1"]
    assert reported.injected_version is R1
    assert reported.injected_origin is Origin.REPORTED
    assert reported.proportion is None

    # cold start segment: P = 1 maps IV onto the opening version
    cold = by_key["BK-2"]
    assert cold.opening_version is R3
    assert cold.injected_version is R3
    assert cold.injected_origin is Origin.PREDICTED
    assert cold.affected_versions == [R3, R4]
    assert cold.affected_origin is Origin.PREDICTED

    # incremental segment: only BK-1 carries a reported IV before it
    incremental = by_key["BK-5"]
    assert incremental.fixed_version is R7
    assert incremental.proportion == pytest.approx(91 / 60)
    assert incremental.injected_version is R3
    assert incremental.affected_versions == [R3, R4, R5, R6]


def test_clean_tickets_ordering_invariant():
    result = clean_tickets(_sample_tickets(), TRAINING, CATALOG, cold_start_fraction=0.5)
    for t in result.tickets:
        iv, ov, fv = t.injected_version, t.opening_version, t.fixed_version
        assert iv.release_date <= ov.release_date < fv.release_date
        for av in t.affected_versions:
            assert iv.release_date <= av.release_date < fv.release_date


def test_clean_tickets_is_idempotent_and_leaves_input_untouched():
    tickets = _sample_tickets()
    first = clean_tickets(tickets, TRAINING, CATALOG, cold_start_fraction=0.5)
    second = clean_tickets(tickets, TRAINING, CATALOG, cold_start_fraction=0.5)
    assert first.tickets == second.tickets
    assert [r.ticket.key for r in first.removed] == [r.ticket.key for r in second.removed]
    assert tickets == _sample_tickets()


def test_unmatched_prediction_is_flagged_then_removed():
    base = datetime(2010, 1, 1, tzinfo=UTC)

    def rel(day):
        return ReleaseModel(id=f"d{day}", name=f"d{day}", release_date=base + timedelta(days=day))

    # P = 100 pushes every prediction far before the first release
    training = [_training_ticket(iv=rel(0), ov=rel(99), fv=rel(100))]
    ticket = _raw("BK-9", datetime(2020, 3, 15, tzinfo=UTC), fixed=[R5])

    result = clean_tickets([ticket], training, CATALOG, cold_start_fraction=1.0)
    assert result.tickets == []
    assert len(result.removed) == 1
    removed = result.removed[0]
    assert removed.stage == STAGE_SECOND_VALIDATION
    assert removed.reason == "missing injected version"
    assert removed.ticket.unsuitable_predicted_iv is True
    assert result.consistent is True


def test_backfill_leaves_reported_affected_versions():
    t = TicketModel(
        key="A",
        created=None,
        injected_version=R1,
        fixed_version=R4,
        affected_versions=[R2],
        affected_origin=Origin.REPORTED,
    )
    missing_iv = TicketModel(key="B", created=None, fixed_version=R4)
    out = backfill_affected_versions([t, missing_iv], CATALOG)
    assert out[0].affected_versions == [R2]
    assert out[0].affected_origin is Origin.REPORTED
    assert out[1].affected_versions == []


def test_check_unsuitable_consistency_detects_mismatch(caplog):
    complete = TicketModel(key="OK", created=None, injected_version=R1, affected_versions=[R1])
    flagged = TicketModel(key="FLAG", created=None, unsuitable_predicted_iv=True)
    unflagged = TicketModel(key="NOFLAG", created=None, injected_version=R1)

    assert check_unsuitable_consistency([complete, flagged]) is True
    with caplog.at_level("WARNING"):
        assert check_unsuitable_consistency([complete, flagged, unflagged]) is False
    assert "NOFLAG" in caplog.text
    with pytest.raises(TypeError):
        check_unsuitable_consistency(None)


def test_clean_tickets_rejects_none():
    with pytest.raises(TypeError):
        clean_tickets(None, [], CATALOG)
    with pytest.raises(TypeError):
        clean_tickets([], [], None)


def test_inconsistent_training_tickets_do_not_train_cold_start():
    good = _training_ticket(iv=R1, ov=R5, fv=R8)
    # injected after opening: still eligible for P, but rejected by validation
    bad = _training_ticket(iv=R7, ov=R3, fv=R8)
    assert is_invalid(bad)
    assert proportion(bad) is not None

    only_good = clean_tickets([], [good], CATALOG)
    with_bad = clean_tickets([], [good, bad], CATALOG)
    assert with_bad.cold_start_p == only_good.cold_start_p
    assert with_bad.cold_start_p == pytest.approx(proportion(good))
    assert with_bad.cold_start_p != pytest.approx(average_proportion([good, bad]))


def test_consistency_checked_before_second_validation():
    # no training data: P = 0 predicts IV = FV, which leaves nothing to backfill
    ticket = _raw("BK-8", datetime(2020, 3, 15, tzinfo=UTC), fixed=[R5])
    result = clean_tickets([ticket], [], CATALOG, cold_start_fraction=1.0)
    assert result.tickets == []
    assert result.removed[0].stage == STAGE_SECOND_VALIDATION
    assert result.removed[0].ticket.unsuitable_predicted_iv is None
    assert result.consistent is False


def test_rederiving_cleaned_ticket_keeps_predicted_origin():
    result = clean_tickets(_sample_tickets(), TRAINING, CATALOG, cold_start_fraction=0.5)
    cold = next(t for t in result.tickets if t.key == "BK-2")
    again = derive_versions(cold, CATALOG)
    assert again.injected_version is R3
    assert again.affected_versions == [R3, R4]
    assert again.injected_origin is Origin.PREDICTED
    assert again.affected_origin is Origin.PREDICTED
    assert again.proportion == cold.proportion
    assert again == derive_versions(again, CATALOG)
