from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from enum import IntEnum
from typing import Hashable


class Weekday(IntEnum):
    """Weekday codes as they appear in ``daysOccurringType`` strings (Sunday=0)."""

    SUN = 0
    MON = 1
    TUE = 2
    WED = 3
    THUR = 4
    FRI = 5
    SAT = 6


WEEKEND = frozenset({Weekday.SAT, Weekday.SUN})
DEFAULT_VALID_WEEKDAYS = frozenset({Weekday.MON, Weekday.TUE, Weekday.WED, Weekday.THUR, Weekday.FRI})

TRIAL_CATEGORY = "TR"
CANCELLED_STATUS = "CANCELLED"


@dataclass(frozen=True)
class Plan:
    """Recurring availability template.

    ``start``/``end`` are epoch milliseconds. They bound the span the plan is
    valid for, and their time-of-day (in the scheduling timezone) is reused as
    the bookable window on every date the plan recurs.
    """

    id: Hashable
    division_id: Hashable
    category_type: str
    start: int
    end: int
    capacity: int | None = None
    increment: float | None = None  # minutes
    sched_days_req: int = 0
    valid_weekdays: frozenset[Weekday] = DEFAULT_VALID_WEEKDAYS


@dataclass(frozen=True)
class Event:
    """A booking against a plan."""

    id: Hashable
    plan_id: Hashable | None
    start: int | None
    end: int | None = None
    status_type: str | None = None

    @property
    def cancelled(self) -> bool:
        return self.status_type == CANCELLED_STATUS


@dataclass(frozen=True)
class BlockPlan:
    """Blackout rule scoped to one plan of one division.

    An empty ``weekdays`` set means the rule applies every day.
    """

    id: Hashable
    division_id: Hashable | None
    related_plan_id: Hashable | None
    start: int
    end: int
    weekdays: frozenset[Weekday] = frozenset()


@dataclass(frozen=True)
class AvailabilitySlot:
    date: dt.date
    start: int
    end: int
    plan: Plan
    events: tuple[Event, ...]
    available: bool = True


class ValidationError(ValueError):
    """Required input is missing or malformed; raised before any evaluation starts."""


class ProxyError(RuntimeError):
    """The scheduling proxy answered with a non-success status or an error payload.

    Transport-level failures are not wrapped; they surface as ``httpx`` errors.
    """
