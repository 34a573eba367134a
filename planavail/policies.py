from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Union

from planavail.domain import TRIAL_CATEGORY, Event, Plan
from planavail.timecalc import HOUR_MS, MINUTE_MS


def booked_duration(bookings: Sequence[Event]) -> int:
    # Bookings without both ends contribute no duration.
    return sum(ev.end - ev.start for ev in bookings if ev.start is not None and ev.end is not None)


@dataclass(frozen=True)
class FixedCapacity:
    capacity: int

    def is_open(self, bookings: Sequence[Event], window_ms: int, blocked_ms: int) -> bool:
        # Partial blackouts do not reduce a fixed capacity.
        return self.capacity > len(bookings)


@dataclass(frozen=True)
class IncrementDuration:
    unit_ms: int

    def is_open(self, bookings: Sequence[Event], window_ms: int, blocked_ms: int) -> bool:
        return booked_duration(bookings) + self.unit_ms + blocked_ms <= window_ms


@dataclass(frozen=True)
class TrialUnit(IncrementDuration):
    unit_ms: int = HOUR_MS


@dataclass(frozen=True)
class NoPolicy:
    def is_open(self, bookings: Sequence[Event], window_ms: int, blocked_ms: int) -> bool:
        return False


CapacityPolicy = Union[FixedCapacity, IncrementDuration, TrialUnit, NoPolicy]


def resolve_policy(plan: Plan) -> CapacityPolicy:
    """Pick the capacity model for a plan; the first matching rule wins.

    Zero counts as unset for both ``capacity`` and ``increment``.
    """
    if plan.capacity:
        return FixedCapacity(plan.capacity)
    if plan.increment:
        return IncrementDuration(round(plan.increment * MINUTE_MS))
    if plan.category_type == TRIAL_CATEGORY:
        return TrialUnit()
    return NoPolicy()
