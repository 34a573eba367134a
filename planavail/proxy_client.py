from __future__ import annotations

from typing import Any

import httpx

from planavail.domain import ProxyError

DIVISIONS_PATH = "schedulingDivisions"
PLANS_PATH = "plans"
EVENTS_PATH = "events/range"

AVAILABLE_STATUS = "AVAILABLE"
UNAVAILABLE_STATUS = "UNAVAILABLE"
BLOCK_CATEGORY = "B"


def post_json(
    *,
    base_url: str,
    path: str,
    payload: dict[str, Any],
    timeout_seconds: float = 20.0,
    transport: httpx.BaseTransport | None = None,
) -> Any:
    url = f"{base_url}{path}"

    with httpx.Client(timeout=timeout_seconds, transport=transport) as client:
        r = client.post(url, json=payload)
        if not r.is_success:
            raise ProxyError(f"HTTP error! Status: {r.status_code} ({path})")
        try:
            data = r.json()
        except ValueError as e:
            raise ProxyError(f"Invalid JSON ({path})") from e
        if isinstance(data, dict) and data.get("error"):
            raise ProxyError(f"Error: {data['error']} ({path})")
        return data


def fetch_divisions(*, base_url: str, timeout_seconds: float = 20.0, transport: httpx.BaseTransport | None = None) -> list[dict[str, Any]]:
    return post_json(base_url=base_url, path=DIVISIONS_PATH, payload={}, timeout_seconds=timeout_seconds, transport=transport)


def fetch_plans(
    *,
    base_url: str,
    division_id: int | str,
    category_type: str,
    start_ms: int,
    end_ms: int,
    timeout_seconds: float = 20.0,
    transport: httpx.BaseTransport | None = None,
) -> list[dict[str, Any]]:
    payload = {
        "categoryType": category_type,
        "statusType": AVAILABLE_STATUS,
        "division": {"id": division_id},
        "start": start_ms,
        "end": end_ms,
    }
    return post_json(base_url=base_url, path=PLANS_PATH, payload=payload, timeout_seconds=timeout_seconds, transport=transport)


def fetch_block_plans(
    *,
    base_url: str,
    division_id: int | str,
    start_ms: int,
    end_ms: int,
    timeout_seconds: float = 20.0,
    transport: httpx.BaseTransport | None = None,
) -> list[dict[str, Any]]:
    # Blackouts are stored as plans of their own category.
    payload = {
        "categoryType": BLOCK_CATEGORY,
        "statusType": UNAVAILABLE_STATUS,
        "division": {"id": division_id},
        "start": start_ms,
        "end": end_ms,
    }
    return post_json(base_url=base_url, path=PLANS_PATH, payload=payload, timeout_seconds=timeout_seconds, transport=transport)


def fetch_events(
    *,
    base_url: str,
    division_id: int | str,
    start_ms: int,
    end_ms: int,
    timeout_seconds: float = 20.0,
    transport: httpx.BaseTransport | None = None,
) -> list[dict[str, Any]]:
    payload = {
        "start": start_ms,
        "end": end_ms,
        "division": {"id": division_id},
    }
    return post_json(base_url=base_url, path=EVENTS_PATH, payload=payload, timeout_seconds=timeout_seconds, transport=transport)
