"""Clock and timezone helpers shared by the domain, storage and wire layers.

Domain objects carry aware datetimes in the application timezone. The database
stores UTC without ``tzinfo`` so ordering and snapshot comparisons such as
``created_at <= as_of`` follow real time even across DST transitions.
Realtime frames carry ISO 8601 strings with an explicit offset.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone, tzinfo
from functools import lru_cache
from typing import Final

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.config import get_settings

_DEFAULT_TIMEZONE: Final[str] = "Asia/Tokyo"
_OFFSET_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"^(?:UTC|GMT)(?P<sign>[+-])(?P<hours>\d{1,2})(?::?(?P<minutes>\d{2}))?$",
    re.IGNORECASE,
)


@lru_cache(maxsize=1)
def get_app_timezone() -> tzinfo:
    """Return the timezone named by ``APP_TIMEZONE`` (``Asia/Tokyo`` if unusable)."""

    name = (get_settings().app_timezone or "").strip()
    if not name:
        return ZoneInfo(_DEFAULT_TIMEZONE)
    try:
        return ZoneInfo(name)
    except ZoneInfoNotFoundError:
        return _fixed_offset(name) or ZoneInfo(_DEFAULT_TIMEZONE)


def _fixed_offset(name: str) -> tzinfo | None:
    match = _OFFSET_PATTERN.match(name)
    if match is None:
        return None
    offset = timedelta(hours=int(match["hours"]), minutes=int(match["minutes"] or 0))
    return timezone(-offset if match["sign"] == "-" else offset)


def now_in_app_timezone() -> datetime:
    return datetime.now(tz=get_app_timezone())


def utc_now_naive() -> datetime:
    """Current time in the storage form used by column defaults."""

    return datetime.now(tz=timezone.utc).replace(tzinfo=None)


def ensure_app_timezone(value: datetime | None) -> datetime | None:
    """Express ``value`` in the app timezone; naive values are read as app wall clock."""

    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=get_app_timezone())
    return value.astimezone(get_app_timezone())


def to_storage_datetime(value: datetime | None) -> datetime | None:
    """Return the storage form of ``value``: UTC, no ``tzinfo``."""

    localized = ensure_app_timezone(value)
    if localized is None:
        return None
    return localized.astimezone(timezone.utc).replace(tzinfo=None)


def from_storage_datetime(value: datetime | None) -> datetime | None:
    """Turn a stored UTC value back into an aware app-timezone datetime."""

    if value is None:
        return None
    return value.replace(tzinfo=timezone.utc).astimezone(get_app_timezone())


def isoformat_or_none(value: datetime | None) -> str | None:
    """Serialize ``value`` for realtime frames, always with an offset."""

    localized = ensure_app_timezone(value)
    return localized.isoformat() if localized is not None else None


def parse_app_datetime(value: str | None) -> datetime | None:
    """Parse an ISO 8601 string produced by :func:`isoformat_or_none`.

    The offset in the string is kept as is, so clients need no settings.
    """

    if not value:
        return None
    return datetime.fromisoformat(value)
