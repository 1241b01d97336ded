import math
from datetime import datetime, timezone
from typing import Tuple
from zoneinfo import ZoneInfo

from study_analytics.config import settings


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """SQLite hands datetimes back without tzinfo; they are stored as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def local_zone() -> ZoneInfo:
    return ZoneInfo(settings.timezone)


def to_local(value: datetime) -> datetime:
    return ensure_utc(value).astimezone(local_zone())


def hour_and_day(start_time: datetime) -> Tuple[int, int]:
    """Return (hour of day 0-23, day of week 0-6 with Sunday = 0)."""
    local = to_local(start_time)
    return local.hour, (local.weekday() + 1) % 7


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))
