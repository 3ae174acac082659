# harness/helpers/datetime_helper.py
"""
Date helpers with a small token format: YYYY MM DD HH mm ss.

All "now" values are local time, like the values a browser under test shows.
"""

from __future__ import annotations

import math
import time
from datetime import datetime, timedelta
from typing import Optional

_TOKENS = (
    ("YYYY", "%Y"),
    ("MM", "%m"),
    ("DD", "%d"),
    ("HH", "%H"),
    ("mm", "%M"),
    ("ss", "%S"),
)


def format_date(value: datetime, fmt: str = "YYYY-MM-DD") -> str:
    # First occurrence of each token only.
    out = fmt
    for token, directive in _TOKENS:
        out = out.replace(token, value.strftime(directive), 1)
    return out


def get_current_date(fmt: str = "YYYY-MM-DD") -> str:
    return format_date(datetime.now(), fmt)


def get_date_with_offset(days: int, fmt: str = "YYYY-MM-DD") -> str:
    return format_date(datetime.now() + timedelta(days=days), fmt)


def get_timestamp() -> int:
    """Milliseconds since the epoch."""
    return int(time.time() * 1000)


def parse_date(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _now_like(value: datetime) -> datetime:
    return datetime.now(value.tzinfo) if value.tzinfo else datetime.now()


def is_in_past(value: datetime) -> bool:
    return value < _now_like(value)


def is_in_future(value: datetime) -> bool:
    return value > _now_like(value)


def get_days_difference(first: datetime, second: datetime) -> int:
    seconds = abs((second - first).total_seconds())
    return math.ceil(seconds / 86400)


def add_hours(hours: int, base: Optional[datetime] = None) -> datetime:
    return (base or datetime.now()) + timedelta(hours=hours)


def add_minutes(minutes: int, base: Optional[datetime] = None) -> datetime:
    return (base or datetime.now()) + timedelta(minutes=minutes)
