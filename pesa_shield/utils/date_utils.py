"""Date manipulation utilities"""

from datetime import datetime
from typing import Callable
from zoneinfo import ZoneInfo


def to_local_naive(value: datetime, tz_name: str) -> datetime:
    """Convert an aware datetime to naive wall-clock time in tz_name; naive values pass through"""
    if value.tzinfo is None:
        return value
    return value.astimezone(ZoneInfo(tz_name)).replace(tzinfo=None)


def local_clock(tz_name: str) -> Callable[[], datetime]:
    """Clock returning naive wall-clock time in tz_name"""
    zone = ZoneInfo(tz_name)

    def now() -> datetime:
        return datetime.now(zone).replace(tzinfo=None)

    return now
