"""Translation between scheduling-proxy JSON records and domain records.

Records use the proxy's camelCase keys and nested ``{"id": ...}`` references,
e.g. ``{"id": 7, "division": {"id": 3}, "categoryType": "MC", ...}``.
Optional fields that are missing or malformed fall back to defaults; missing
required fields raise ``ValidationError``.
"""

from __future__ import annotations

import datetime as dt
import math
from typing import Any, Iterable, Mapping

from planavail.domain import AvailabilitySlot, BlockPlan, Event, Plan, ValidationError
from planavail.timecalc import parse_weekdays, resolve_valid_weekdays, to_ms


def _ref_id(raw: Mapping[str, Any], key: str) -> Any:
    ref = raw.get(key)
    if isinstance(ref, Mapping):
        return ref.get("id")
    return None


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return value


def _instant(value: Any) -> int | None:
    number = _number(value)
    if number is not None:
        return int(number)
    if isinstance(value, str):
        try:
            parsed = dt.datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        if parsed.tzinfo is None:
            return None
        return to_ms(parsed)
    return None


def _required(value: Any, what: str, record: Mapping[str, Any]) -> Any:
    if value is None:
        raise ValidationError(f"{what} is missing or invalid in record id={record.get('id')!r}")
    return value


def plan_from_payload(raw: Mapping[str, Any]) -> Plan:
    capacity = _number(raw.get("capacity"))
    sched_days_req = _number(raw.get("schedDaysReq"))
    return Plan(
        id=_required(raw.get("id"), "Plan id", raw),
        division_id=_required(_ref_id(raw, "division"), "Plan division id", raw),
        category_type=str(raw.get("categoryType") or ""),
        start=_required(_instant(raw.get("start")), "Plan start", raw),
        end=_required(_instant(raw.get("end")), "Plan end", raw),
        capacity=int(capacity) if capacity is not None else None,
        increment=_number(raw.get("increment")),
        sched_days_req=int(sched_days_req) if sched_days_req is not None else 0,
        valid_weekdays=resolve_valid_weekdays(raw.get("daysOccurringType")),
    )


def event_from_payload(raw: Mapping[str, Any]) -> Event:
    return Event(
        id=raw.get("id"),
        plan_id=_ref_id(raw, "plan"),
        start=_instant(raw.get("start")),
        end=_instant(raw.get("end")),
        status_type=raw.get("statusType"),
    )


def block_plan_from_payload(raw: Mapping[str, Any]) -> BlockPlan:
    return BlockPlan(
        id=raw.get("id"),
        division_id=_ref_id(raw, "division"),
        related_plan_id=_ref_id(raw, "related"),
        start=_required(_instant(raw.get("start")), "Block start", raw),
        end=_required(_instant(raw.get("end")), "Block end", raw),
        weekdays=parse_weekdays(raw.get("daysOccurringType")),
    )


def parse_plans(items: Iterable[Mapping[str, Any]]) -> tuple[Plan, ...]:
    return tuple(plan_from_payload(item) for item in items)


def parse_events(items: Iterable[Mapping[str, Any]]) -> tuple[Event, ...]:
    return tuple(event_from_payload(item) for item in items)


def parse_block_plans(items: Iterable[Mapping[str, Any]]) -> tuple[BlockPlan, ...]:
    return tuple(block_plan_from_payload(item) for item in items)


def slot_to_payload(slot: AvailabilitySlot) -> dict[str, Any]:
    return {
        "date": slot.date.isoformat(),
        "start": slot.start,
        "end": slot.end,
        "plan": {"id": slot.plan.id, "categoryType": slot.plan.category_type},
        "events": [{"id": ev.id, "start": ev.start, "end": ev.end} for ev in slot.events],
        "available": slot.available,
    }
