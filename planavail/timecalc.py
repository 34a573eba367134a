from __future__ import annotations

import datetime as dt
from typing import Callable, Iterator
from zoneinfo import ZoneInfo

from planavail.domain import DEFAULT_VALID_WEEKDAYS, WEEKEND, Weekday

EASTERN = ZoneInfo("America/New_York")

SECOND_MS = 1000
MINUTE_MS = SECOND_MS * 60
HOUR_MS = MINUTE_MS * 60
DAY_MS = HOUR_MS * 24

_EPOCH = dt.datetime(1970, 1, 1, tzinfo=dt.timezone.utc)
_ONE_MS = dt.timedelta(milliseconds=1)
_ONE_DAY = dt.timedelta(days=1)

Clock = Callable[[], dt.datetime]


def system_clock() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def to_ms(moment: dt.datetime) -> int:
    # Naive datetimes are not accepted: they would silently pick up the host timezone.
    if moment.tzinfo is None:
        raise ValueError(f"Expected an aware datetime, got naive {moment!r}")
    return (moment - _EPOCH) // _ONE_MS


def from_ms(ms: int, tz: dt.tzinfo = EASTERN) -> dt.datetime:
    return (_EPOCH + dt.timedelta(milliseconds=ms)).astimezone(tz)


def civil_date(ms: int, tz: dt.tzinfo = EASTERN) -> dt.date:
    return from_ms(ms, tz).date()


def weekday_of(day: dt.date) -> Weekday:
    # date.weekday() is Monday=0; Weekday is Sunday=0.
    return Weekday((day.weekday() + 1) % 7)


def anchor_instant(day: dt.date, time_of_day_ms: int, tz: dt.tzinfo = EASTERN) -> int:
    """Combine a civil date with the wall-clock time of ``time_of_day_ms``.

    Both are read in ``tz``, so the result does not depend on the host
    timezone or on which side of a DST change either input falls.
    """
    wall_clock = from_ms(time_of_day_ms, tz).time()
    return to_ms(dt.datetime.combine(day, wall_clock, tzinfo=tz))


def parse_weekdays(raw: object) -> frozenset[Weekday]:
    if not isinstance(raw, str):
        return frozenset()
    members = Weekday.__members__
    return frozenset(members[token] for token in raw.split("_") if token in members)


def resolve_valid_weekdays(raw: object) -> frozenset[Weekday]:
    return parse_weekdays(raw) or DEFAULT_VALID_WEEKDAYS


def step_to_valid_weekday(day: dt.date, valid_weekdays: frozenset[Weekday]) -> dt.date:
    if not valid_weekdays:
        raise ValueError("valid_weekdays must not be empty")
    while weekday_of(day) not in valid_weekdays:
        day += _ONE_DAY
    return day


def advance_business_days(day: dt.date, days: int, valid_weekdays: frozenset[Weekday]) -> dt.date:
    """Move ``day`` forward by ``days`` business days, landing on a valid weekday.

    Only Monday-Friday count toward ``days``. With ``days <= 0`` the result is
    the first date on or after ``day`` that is a valid weekday and not a
    weekend day.
    """
    if days <= 0:
        business = valid_weekdays - WEEKEND
        # A weekend-only plan has no such date; land on its next valid day instead.
        return step_to_valid_weekday(day, business or valid_weekdays)

    remaining = days
    while remaining > 0:
        day += _ONE_DAY
        if weekday_of(day) not in WEEKEND:
            remaining -= 1
    return step_to_valid_weekday(day, valid_weekdays)


def iter_days(first: dt.date, last: dt.date) -> Iterator[dt.date]:
    day = first
    while day <= last:
        yield day
        day += _ONE_DAY
