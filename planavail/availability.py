from __future__ import annotations

import datetime as dt
import logging
import math
from collections import defaultdict
from typing import Hashable, Iterable, Sequence

from planavail.blackout import blocked_duration, blocked_intervals, fully_covers
from planavail.domain import AvailabilitySlot, BlockPlan, Event, Plan, ValidationError
from planavail.policies import CapacityPolicy, resolve_policy
from planavail.timecalc import (
    EASTERN,
    Clock,
    advance_business_days,
    anchor_instant,
    civil_date,
    iter_days,
    system_clock,
    to_ms,
    weekday_of,
)

logger = logging.getLogger(__name__)

_BookingIndex = dict[tuple[Hashable, dt.date], list[Event]]


def _require_finite(value: object, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        raise ValidationError(f"{name} must be a finite epoch-millisecond number, got {value!r}")
    return int(value)


def _validate_plans(plans: Sequence[Plan]) -> None:
    for plan in plans:
        if plan.division_id is None:
            raise ValidationError(f"Plan {plan.id!r} is missing its division id")
        if not plan.valid_weekdays:
            raise ValidationError(f"Plan {plan.id!r} recurs on no weekday")


def _index_bookings(events: Iterable[Event], tz: dt.tzinfo) -> _BookingIndex:
    index: _BookingIndex = defaultdict(list)
    for ev in events:
        if ev.plan_id is None or ev.start is None or ev.cancelled:
            continue
        index[(ev.plan_id, civil_date(ev.start, tz))].append(ev)
    return index


def _evaluate_day(
    plan: Plan,
    policy: CapacityPolicy,
    day: dt.date,
    *,
    now_ms: int,
    bookings: _BookingIndex,
    block_plans: Sequence[BlockPlan],
    tz: dt.tzinfo,
) -> AvailabilitySlot | None:
    if weekday_of(day) not in plan.valid_weekdays:
        return None

    window_start = anchor_instant(day, plan.start, tz)
    window_end = anchor_instant(day, plan.end, tz)
    if now_ms > window_end:
        logger.debug("Plan %s %s: window already over", plan.id, day)
        return None

    blocked = blocked_intervals(day, plan, window_start, window_end, block_plans, tz)
    if fully_covers(blocked, window_start, window_end):
        logger.debug("Plan %s %s: blacked out", plan.id, day)
        return None

    day_bookings = tuple(bookings.get((plan.id, day), ()))
    if not policy.is_open(day_bookings, window_end - window_start, blocked_duration(blocked)):
        logger.debug("Plan %s %s: full (%d bookings)", plan.id, day, len(day_bookings))
        return None

    return AvailabilitySlot(
        date=day,
        start=window_start,
        end=window_end,
        plan=plan,
        events=day_bookings,
    )


def find_available_slots(
    *,
    start: float,
    end: float,
    category_type: str,
    plans: Sequence[Plan],
    events: Sequence[Event],
    block_plans: Sequence[BlockPlan],
    clock: Clock = system_clock,
    tz: dt.tzinfo = EASTERN,
) -> list[AvailabilitySlot]:
    """Open (plan, date) slots between ``start`` and ``end`` (epoch ms).

    Slots come out in plan order, then by ascending date. The clock is read
    once; both the lead-time floor and the elapsed-window check use that
    reading.
    """
    range_start = _require_finite(start, "start")
    range_end = _require_finite(end, "end")
    _validate_plans(plans)

    now = clock()
    now_ms = to_ms(now)
    today = now.astimezone(tz).date()
    bookings = _index_bookings(events, tz)

    slots: list[AvailabilitySlot] = []
    for plan in plans:
        if plan.category_type != category_type or range_start > plan.end or range_end < plan.start:
            continue

        first = civil_date(max(range_start, plan.start), tz)
        last = civil_date(min(range_end, plan.end), tz)
        earliest = advance_business_days(today, plan.sched_days_req, plan.valid_weekdays)
        if earliest > first:
            first = earliest

        policy = resolve_policy(plan)
        logger.debug("Plan %s: %s..%s policy=%s", plan.id, first, last, policy)

        for day in iter_days(first, last):
            slot = _evaluate_day(
                plan,
                policy,
                day,
                now_ms=now_ms,
                bookings=bookings,
                block_plans=block_plans,
                tz=tz,
            )
            if slot is not None:
                slots.append(slot)

    return slots
