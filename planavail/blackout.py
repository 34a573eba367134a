from __future__ import annotations

import datetime as dt
from typing import Iterable

from planavail.domain import BlockPlan, Plan
from planavail.timecalc import EASTERN, anchor_instant, weekday_of

Interval = tuple[int, int]


def _applies_to(block: BlockPlan, plan: Plan, day: dt.date) -> bool:
    if block.division_id is None or block.division_id != plan.division_id:
        return False
    if block.related_plan_id is None or block.related_plan_id != plan.id:
        return False
    return not block.weekdays or weekday_of(day) in block.weekdays


def merge_intervals(intervals: Iterable[Interval]) -> list[Interval]:
    merged: list[Interval] = []
    for start, end in sorted(intervals):
        if merged and start <= merged[-1][1]:
            last_start, last_end = merged[-1]
            merged[-1] = (last_start, max(last_end, end))
        else:
            merged.append((start, end))
    return merged


def blocked_intervals(
    day: dt.date,
    plan: Plan,
    window_start: int,
    window_end: int,
    block_plans: Iterable[BlockPlan],
    tz: dt.tzinfo = EASTERN,
) -> list[Interval]:
    """Blackout time inside the plan's window on ``day`` as disjoint, sorted intervals."""
    clipped: list[Interval] = []
    for block in block_plans:
        if not _applies_to(block, plan, day):
            continue
        block_start = anchor_instant(day, block.start, tz)
        block_end = anchor_instant(day, block.end, tz)
        # Empty or inverted windows (e.g. 22:00-02:00) never block anything.
        if block_end <= block_start:
            continue
        if block_end <= window_start or block_start >= window_end:
            continue
        clipped.append((max(block_start, window_start), min(block_end, window_end)))
    return merge_intervals(clipped)


def blocked_duration(intervals: Iterable[Interval]) -> int:
    return sum(end - start for start, end in intervals)


def fully_covers(intervals: Iterable[Interval], window_start: int, window_end: int) -> bool:
    return any(start <= window_start and end >= window_end for start, end in intervals)
