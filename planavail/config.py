from __future__ import annotations

import os
from dataclasses import dataclass
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv


def parse_division_id(raw: str) -> int | str:
    # The proxy uses numeric division ids, but accept opaque ones as-is.
    raw = raw.strip()
    try:
        return int(raw)
    except ValueError:
        return raw


def _parse_timezone(raw: str) -> str:
    try:
        ZoneInfo(raw)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise RuntimeError(f"Invalid TIMEZONE value: {raw!r}. Expected an IANA name like 'America/New_York'.") from e
    return raw


@dataclass(frozen=True)
class Settings:
    proxy_url: str
    division_id: int | str

    category_type: str = "MC"
    range_days: int = 30
    timezone: str = "America/New_York"

    request_timeout_seconds: float = 20.0

    # How many times the orchestration layer fetches inputs before giving up.
    fetch_retry_attempts: int = 2

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


def _require(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"Missing required environment variable: {name}")
    return value


def load_settings(dotenv_path: str | None = None) -> Settings:
    # Prefer .env in repo root; dotenv_path allows overriding in tests.
    load_dotenv(dotenv_path=dotenv_path, override=False)

    proxy_url = _require("PROXY_URL").strip()
    if not proxy_url.endswith("/"):
        proxy_url += "/"

    range_days = int(os.getenv("RANGE_DAYS", "30"))
    if range_days < 1:
        raise RuntimeError("RANGE_DAYS must be >= 1")

    request_timeout_seconds = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "20"))
    if request_timeout_seconds <= 0:
        raise RuntimeError("REQUEST_TIMEOUT_SECONDS must be > 0")

    fetch_retry_attempts = int(os.getenv("FETCH_RETRY_ATTEMPTS", "2"))
    if fetch_retry_attempts < 1:
        raise RuntimeError("FETCH_RETRY_ATTEMPTS must be >= 1")

    return Settings(
        proxy_url=proxy_url,
        division_id=parse_division_id(_require("DIVISION_ID")),
        category_type=os.getenv("CATEGORY_TYPE", "MC").strip() or "MC",
        range_days=range_days,
        timezone=_parse_timezone(os.getenv("TIMEZONE", "America/New_York").strip()),
        request_timeout_seconds=request_timeout_seconds,
        fetch_retry_attempts=fetch_retry_attempts,
    )
