from __future__ import annotations

import datetime as dt
import itertools

from planavail.blackout import blocked_duration, blocked_intervals, fully_covers, merge_intervals
from planavail.domain import BlockPlan, Plan, Weekday
from planavail.timecalc import EASTERN, HOUR_MS, to_ms

DAY = dt.date(2024, 6, 4)  # Tuesday


def _ms(*args: int) -> int:
    return to_ms(dt.datetime(*args, tzinfo=EASTERN))


def _plan() -> Plan:
    return Plan(id=7, division_id=3, category_type="MC", start=_ms(2024, 6, 1, 9), end=_ms(2024, 6, 30, 17), capacity=1)


def _block(start_hour: int, end_hour: int, **kwargs) -> BlockPlan:
    defaults = dict(id=f"b{start_hour}-{end_hour}", division_id=3, related_plan_id=7)
    defaults.update(kwargs)
    # Recorded on an unrelated date; only the time of day matters.
    return BlockPlan(start=_ms(2024, 1, 2, start_hour), end=_ms(2024, 1, 2, end_hour), **defaults)


WINDOW = (_ms(2024, 6, 4, 9), _ms(2024, 6, 4, 17))


def test_merge_intervals_joins_overlapping_and_touching() -> None:
    assert merge_intervals([(5, 7), (1, 3), (3, 4), (6, 9), (11, 12)]) == [(1, 4), (5, 9), (11, 12)]


def test_merge_intervals_is_order_independent() -> None:
    intervals = [(1, 3), (2, 6), (8, 10), (10, 11), (15, 18), (0, 1)]
    expected = merge_intervals(intervals)
    for perm in itertools.permutations(intervals):
        assert merge_intervals(perm) == expected
        assert blocked_duration(merge_intervals(perm)) == blocked_duration(expected)


def test_merge_intervals_is_idempotent() -> None:
    merged = merge_intervals([(1, 3), (2, 6), (8, 10)])
    assert merge_intervals(merged) == merged


def test_blocks_are_clipped_to_window() -> None:
    blocks = [_block(7, 10), _block(16, 20)]
    intervals = blocked_intervals(DAY, _plan(), *WINDOW, blocks)
    assert intervals == [(_ms(2024, 6, 4, 9), _ms(2024, 6, 4, 10)), (_ms(2024, 6, 4, 16), _ms(2024, 6, 4, 17))]
    assert blocked_duration(intervals) == 2 * HOUR_MS


def test_blocks_for_other_plans_or_divisions_are_ignored() -> None:
    blocks = [
        _block(10, 11, division_id=4),
        _block(10, 11, related_plan_id=8),
        _block(10, 11, division_id=None),
        _block(10, 11, related_plan_id=None),
    ]
    assert blocked_intervals(DAY, _plan(), *WINDOW, blocks) == []


def test_blocks_outside_window_are_ignored() -> None:
    blocks = [_block(6, 9), _block(17, 19)]
    assert blocked_intervals(DAY, _plan(), *WINDOW, blocks) == []


def test_weekday_restriction() -> None:
    tuesday_only = _block(10, 11, weekdays=frozenset({Weekday.TUE}))
    monday_only = _block(12, 13, weekdays=frozenset({Weekday.MON}))
    intervals = blocked_intervals(DAY, _plan(), *WINDOW, [tuesday_only, monday_only])
    assert intervals == [(_ms(2024, 6, 4, 10), _ms(2024, 6, 4, 11))]


def test_inverted_block_window_is_ignored() -> None:
    assert blocked_intervals(DAY, _plan(), *WINDOW, [_block(16, 10)]) == []


def test_adjacent_blocks_merge_into_full_cover() -> None:
    intervals = blocked_intervals(DAY, _plan(), *WINDOW, [_block(13, 17), _block(9, 13)])
    assert intervals == [WINDOW]
    assert fully_covers(intervals, *WINDOW)


def test_partial_block_does_not_fully_cover() -> None:
    intervals = blocked_intervals(DAY, _plan(), *WINDOW, [_block(9, 16)])
    assert not fully_covers(intervals, *WINDOW)
    assert not fully_covers([], *WINDOW)
