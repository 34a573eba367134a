from __future__ import annotations

import datetime as dt

import pytest

from planavail.domain import DEFAULT_VALID_WEEKDAYS, AvailabilitySlot, Event, ValidationError, Weekday
from planavail.payloads import (
    block_plan_from_payload,
    event_from_payload,
    parse_plans,
    plan_from_payload,
    slot_to_payload,
)


def _plan_payload(**overrides) -> dict:
    payload = {
        "id": 24,
        "division": {"id": 24306},
        "categoryType": "MC",
        "start": 1717419600000,
        "end": 1735678800000,
        "capacity": 3,
        "schedDaysReq": 2,
        "daysOccurringType": "MON_WED_FRI",
    }
    payload.update(overrides)
    return payload


def test_plan_from_payload_reads_nested_references_and_weekdays() -> None:
    plan = plan_from_payload(_plan_payload())
    assert plan.id == 24
    assert plan.division_id == 24306
    assert plan.category_type == "MC"
    assert plan.start == 1717419600000
    assert plan.capacity == 3
    assert plan.increment is None
    assert plan.sched_days_req == 2
    assert plan.valid_weekdays == {Weekday.MON, Weekday.WED, Weekday.FRI}


def test_plan_optional_fields_fall_back_to_defaults() -> None:
    plan = plan_from_payload(
        _plan_payload(capacity="lots", increment=None, schedDaysReq=None, daysOccurringType=7)
    )
    assert plan.capacity is None
    assert plan.increment is None
    assert plan.sched_days_req == 0
    assert plan.valid_weekdays == DEFAULT_VALID_WEEKDAYS


def test_plan_accepts_iso_instants() -> None:
    plan = plan_from_payload(_plan_payload(start="2024-06-03T13:00:00Z", end="2024-06-03T21:00:00+00:00"))
    assert plan.start == 1717419600000
    assert plan.end == 1717448400000


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"division": None}, "division"),
        ({"division": {"label": "x"}}, "division"),
        ({"id": None}, "Plan id"),
        ({"start": "tomorrow"}, "Plan start"),
        ({"end": float("nan")}, "Plan end"),
        ({"start": "2024-06-03T13:00:00"}, "Plan start"),
    ],
)
def test_plan_missing_required_field_is_rejected(overrides: dict, message: str) -> None:
    with pytest.raises(ValidationError, match=message):
        plan_from_payload(_plan_payload(**overrides))


def test_parse_plans_keeps_order() -> None:
    plans = parse_plans([_plan_payload(id=2), _plan_payload(id=1)])
    assert [p.id for p in plans] == [2, 1]


def test_event_from_payload() -> None:
    ev = event_from_payload({"id": 5, "plan": {"id": 24}, "start": 1, "end": 2, "statusType": "CANCELLED"})
    assert ev == Event(id=5, plan_id=24, start=1, end=2, status_type="CANCELLED")
    assert ev.cancelled


def test_event_without_plan_or_end_degrades() -> None:
    ev = event_from_payload({"id": 5, "start": 1})
    assert ev.plan_id is None
    assert ev.end is None
    assert not ev.cancelled


def test_block_plan_from_payload() -> None:
    block = block_plan_from_payload(
        {
            "id": 9,
            "division": {"id": 24306},
            "related": {"id": 24},
            "start": 10,
            "end": 20,
            "daysOccurringType": "TUE_XYZ",
        }
    )
    assert block.division_id == 24306
    assert block.related_plan_id == 24
    assert block.weekdays == {Weekday.TUE}


def test_block_plan_without_restriction_or_related_plan() -> None:
    block = block_plan_from_payload({"id": 9, "start": 10, "end": 20})
    assert block.weekdays == frozenset()
    assert block.related_plan_id is None
    assert block.division_id is None


def test_block_plan_without_window_is_rejected() -> None:
    with pytest.raises(ValidationError, match="Block end"):
        block_plan_from_payload({"id": 9, "start": 10})


def test_slot_to_payload() -> None:
    plan = plan_from_payload(_plan_payload())
    ev = Event(id=5, plan_id=24, start=100, end=200, status_type="BOOKED")
    slot = AvailabilitySlot(date=dt.date(2024, 6, 4), start=1, end=2, plan=plan, events=(ev,))

    assert slot_to_payload(slot) == {
        "date": "2024-06-04",
        "start": 1,
        "end": 2,
        "plan": {"id": 24, "categoryType": "MC"},
        "events": [{"id": 5, "start": 100, "end": 200}],
        "available": True,
    }
