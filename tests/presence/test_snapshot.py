from __future__ import annotations

from datetime import date

import pytest

from presence.errors import DanglingReferenceError
from presence.input_data import Snapshot
from presence.records import EventStatus

RECORDS = {
    "collaborators": [
        {
            "id": 1,
            "colabId": "B-1",
            "name": "Ana",
            "role": "Analyst",
            "sector": "A",
            "shiftType": "day",
            "hasRotation": True,
            "rotationStartDate": "2024-03-03",
            "schedule": {
                "monday": {"enabled": True, "start": "08:00", "end": "17:00"},
                "terca": {"enabled": True, "start": "08:00", "end": "17:00"},
            },
        },
        {"id": "2", "name": "Bruno", "role": "Operator", "active": False},
    ],
    "events": [
        {
            "collaboratorId": "1",
            "type": "folga",
            "startDate": "2024-03-05",
            "endDate": "2024-03-05",
            "status": "aprovado",
        },
        {
            "collaboratorId": "99",
            "category": "day_off",
            "startDate": "2024-03-05",
            "endDate": "2024-03-05",
        },
    ],
    "onCalls": [
        {
            "collaboratorId": "1",
            "startDate": "2024-03-06",
            "endDate": "2024-03-06",
            "startTime": "18:00",
            "endTime": "23:00",
        }
    ],
    "vacationRequests": [
        {
            "collaboratorId": "2",
            "startDate": "2024-03-10",
            "endDate": "2024-03-20",
            "status": "aprovado",
        }
    ],
    "adjustments": [
        {
            "collaboratorId": "1",
            "amount": 2,
            "reason": "import",
            "createdAt": "2024-01-01T09:00:00Z",
            "createdBy": "admin",
        }
    ],
    "coverageRules": [{"roleName": "Analyst", "minPeople": 1, "sector": "A"}],
}


def test_from_records_parses_camel_case(cfg):
    snap = Snapshot.from_records(RECORDS, cfg)
    ana = snap.collaborator("1")
    assert ana.badge_id == "B-1"
    assert ana.shift_label == "day"
    assert ana.rotation_reference_date == date(2024, 3, 3)
    assert ana.schedule.for_weekday(1).usable
    assert not snap.collaborator("2").is_active

    (event,) = snap.events_for("1")
    assert event.category.id == "day_off"
    assert event.status is EventStatus.APPROVED
    assert snap.on_calls_for("1")[0].start_minutes == 18 * 60
    assert snap.vacations_for("2")[0].approved
    assert snap.adjustments_for("1")[0].amount == 2
    assert snap.coverage_rules[0].scope == ("Analyst", "A", None)


def test_dangling_records_are_skipped(cfg):
    snap = Snapshot.from_records(RECORDS, cfg)
    assert len(snap.events) == 1
    (err,) = snap.skipped
    assert isinstance(err, DanglingReferenceError)
    assert err.collaborator_id == "99"
    assert err.record_kind == "event"


def test_dangling_records_raise_when_strict(cfg):
    with pytest.raises(DanglingReferenceError):
        Snapshot.from_records(RECORDS, cfg, strict=True)


def test_checked_returns_self_when_clean(make_collaborator, make_event):
    snap = Snapshot(
        collaborators=[make_collaborator("1")],
        events=[make_event("1", "day_off", "2024-03-04")],
    )
    assert snap.checked() is snap
    assert snap.events_for("missing") == []
    assert [c.id for c in snap.active_collaborators()] == ["1"]
