"""Clock helpers used across layers."""

from .datetime import (
    ensure_app_timezone,
    from_storage_datetime,
    get_app_timezone,
    isoformat_or_none,
    now_in_app_timezone,
    parse_app_datetime,
    to_storage_datetime,
    utc_now_naive,
)

__all__ = [
    "ensure_app_timezone",
    "from_storage_datetime",
    "get_app_timezone",
    "isoformat_or_none",
    "now_in_app_timezone",
    "parse_app_datetime",
    "to_storage_datetime",
    "utc_now_naive",
]
