from __future__ import annotations

from datetime import date, datetime

import pytest

from presence.errors import InvalidDateError, InvalidRangeError
from presence.records import (
    BalanceAdjustment,
    CoverageRule,
    DraftEvent,
    EventBehavior,
    EventCategory,
    EventStatus,
    OnCallRecord,
    VacationRequest,
    VacationStatus,
)


def test_behavior_factors():
    assert EventBehavior.CREDIT_2X.gain_factor == 2
    assert EventBehavior.CREDIT_1X.gain_factor == 1
    assert EventBehavior.DEBIT.use_factor == 1
    assert EventBehavior.NEUTRAL.is_absence
    assert EventBehavior.DEBIT.is_absence
    assert not EventBehavior.CREDIT_1X.is_absence


def test_event_status_parsing():
    assert EventStatus.parse(None) is None
    assert EventStatus.parse("aprovado") is EventStatus.APPROVED
    assert EventStatus.parse("nova_opcao") is EventStatus.COUNTER_OFFER
    with pytest.raises(ValueError):
        EventStatus.parse("maybe")


def test_events_without_status_count_as_approved(make_event):
    assert make_event("1", "day_off", "2024-03-01").counts_as_approved
    assert make_event("1", "day_off", "2024-03-01", status="approved").counts_as_approved
    assert not make_event("1", "day_off", "2024-03-01", status="pending").counts_as_approved


def test_event_derived_days(make_event):
    ev = make_event("1", "worked_day", "2024-03-01", "2024-03-02")
    assert ev.days == 2
    assert ev.days_gained == 4
    assert ev.days_used == 0
    assert ev.covers(date(2024, 3, 2))
    assert not ev.covers(date(2024, 3, 3))


def test_event_range_is_validated(make_event):
    with pytest.raises(InvalidRangeError):
        make_event("1", "day_off", "2024-03-02", "2024-03-01")


def test_accept_counter_offer(make_event):
    offer = make_event("1", "day_off", "2024-03-01", status="counter_offer")
    accepted = offer.accept_counter_offer()
    assert accepted.status is EventStatus.APPROVED
    assert accepted.collaborator_accepted_counter_offer
    assert offer.status is EventStatus.COUNTER_OFFER  # original untouched
    with pytest.raises(ValueError):
        accepted.accept_counter_offer()


def test_with_status(make_event):
    ev = make_event("1", "day_off", "2024-03-01", status="pending")
    assert ev.with_status("rejeitado").status is EventStatus.REJECTED


def test_vacation_status_defaults_to_pending():
    v = VacationRequest("1", "2024-03-01", "2024-03-05", status=None)
    assert v.status is VacationStatus.PENDING
    assert not v.approved
    assert VacationRequest("1", "2024-03-01", "2024-03-05", status="aprovado").approved


def test_on_call_record_minutes():
    oc = OnCallRecord("1", "2024-03-01", "2024-03-02", "20:00", "08:00")
    assert oc.start_minutes == 1200
    assert oc.end_minutes == 480
    assert oc.covers(date(2024, 3, 2))


def test_adjustment_parses_iso_timestamp():
    a = BalanceAdjustment("1", 2, "fix", "2024-03-01T10:00:00Z", "admin")
    assert a.created_at == datetime(2024, 3, 1, 10, 0)


def test_adjustment_rejects_malformed_timestamp():
    with pytest.raises(InvalidDateError):
        BalanceAdjustment("1", 2, "fix", "last tuesday", "admin")


def test_adjustment_date_timestamp_becomes_midnight():
    a = BalanceAdjustment("1", 2, "fix", date(2024, 3, 1), "admin")
    assert a.created_at == datetime(2024, 3, 1)


def test_coverage_rule_normalises_scope():
    r = CoverageRule("Analyst", "2", sector="", shift_label="")
    assert r.min_people == 2
    assert r.scope == ("Analyst", None, None)
    with pytest.raises(ValueError):
        CoverageRule("Analyst", -1)


def test_draft_event_span():
    d = DraftEvent("1", "2024-03-01", "2024-03-03")
    assert d.covers(date(2024, 3, 3))
    with pytest.raises(InvalidRangeError):
        DraftEvent("1", "2024-03-03", "2024-03-01")


def test_category_behavior_coerced_from_string():
    assert EventCategory("x", "X", "credit_1x").behavior is EventBehavior.CREDIT_1X
