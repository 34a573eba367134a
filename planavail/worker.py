from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass

import httpx
from tenacity import RetryCallState, retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from planavail.availability import find_available_slots
from planavail.config import Settings
from planavail.domain import AvailabilitySlot, BlockPlan, Event, Plan, ProxyError
from planavail.payloads import parse_block_plans, parse_events, parse_plans
from planavail.proxy_client import fetch_block_plans, fetch_events, fetch_plans
from planavail.timecalc import DAY_MS, Clock, civil_date, system_clock, to_ms

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CalendarInputs:
    plans: tuple[Plan, ...]
    events: tuple[Event, ...]
    block_plans: tuple[BlockPlan, ...]


def _short_exc(retry_state: RetryCallState) -> str | None:
    if retry_state.outcome is None or not retry_state.outcome.failed:
        return None
    exc = retry_state.outcome.exception()
    if exc is None:
        return None
    msg = str(exc).strip()
    return f"{type(exc).__name__}: {msg}" if msg else type(exc).__name__


def _log_after_attempt(retry_state: RetryCallState) -> None:
    reason = _short_exc(retry_state)
    if reason:
        logger.warning("Fetch attempt %s failed (%s)", retry_state.attempt_number, reason)


def _log_before_sleep(retry_state: RetryCallState) -> None:
    sleep_seconds = getattr(retry_state.next_action, "sleep", None)
    if sleep_seconds is None:
        logger.info("Retrying fetch...")
        return
    logger.info("Retrying fetch (attempt %s) in %.0f sec.", retry_state.attempt_number + 1, sleep_seconds)


def fetch_inputs(settings: Settings, *, start_ms: int, end_ms: int) -> CalendarInputs:
    common = {
        "base_url": settings.proxy_url,
        "division_id": settings.division_id,
        "start_ms": start_ms,
        "end_ms": end_ms,
        "timeout_seconds": settings.request_timeout_seconds,
    }

    # Bookings are counted per calendar day, so include those made earlier today.
    day_start = dt.datetime.combine(civil_date(start_ms, settings.tz), dt.time(), tzinfo=settings.tz)

    logger.info("Fetching plans, blackouts and events for division %s", settings.division_id)
    plans = fetch_plans(category_type=settings.category_type, **common)
    block_plans = fetch_block_plans(**common)
    events = fetch_events(**{**common, "start_ms": to_ms(day_start)})

    return CalendarInputs(
        plans=parse_plans(plans),
        events=parse_events(events),
        block_plans=parse_block_plans(block_plans),
    )


def _fetch_inputs_with_retry(settings: Settings, *, start_ms: int, end_ms: int) -> CalendarInputs:
    # Only collaborator failures are retried; malformed payloads fail immediately.
    decorated = retry(
        retry=retry_if_exception_type((ProxyError, httpx.TransportError)),
        stop=stop_after_attempt(settings.fetch_retry_attempts),
        wait=wait_exponential(multiplier=2, min=2, max=4),
        after=_log_after_attempt,
        before_sleep=_log_before_sleep,
        reraise=True,
    )(fetch_inputs)

    return decorated(settings, start_ms=start_ms, end_ms=end_ms)


def run_once(settings: Settings, *, clock: Clock = system_clock) -> list[AvailabilitySlot]:
    now = clock()
    start_ms = to_ms(now)
    end_ms = start_ms + settings.range_days * DAY_MS

    try:
        inputs = _fetch_inputs_with_retry(settings, start_ms=start_ms, end_ms=end_ms)
    except Exception as e:
        logger.error("Fetch failed (%s: %s)", type(e).__name__, e)
        raise

    logger.info(
        "Inputs: plans=%d events=%d blackouts=%d",
        len(inputs.plans),
        len(inputs.events),
        len(inputs.block_plans),
    )

    slots = find_available_slots(
        start=start_ms,
        end=end_ms,
        category_type=settings.category_type,
        plans=inputs.plans,
        events=inputs.events,
        block_plans=inputs.block_plans,
        # Same instant for the range, the lead-time floor and the elapsed-window check.
        clock=lambda: now,
        tz=settings.tz,
    )
    logger.info("Open slots: %d (category=%s, days=%d)", len(slots), settings.category_type, settings.range_days)
    return slots
