"""Timezone helpers used at the scheduling boundary.

The scheduling core only handles timezone-aware UTC datetimes. Naive input is
interpreted in the business (or request) timezone and converted here.
"""

from datetime import date, datetime, time, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from ...config import BUSINESS_TIMEZONE


def get_zone(tz_name: Optional[str] = None) -> ZoneInfo:
    return ZoneInfo(tz_name or BUSINESS_TIMEZONE)


def to_utc(value: datetime, tz_name: Optional[str] = None) -> datetime:
    """Normalize ``value`` to aware UTC; naive values are read as local time in ``tz_name``"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=get_zone(tz_name))
    return value.astimezone(timezone.utc)


def to_local(value: datetime, tz_name: Optional[str] = None) -> datetime:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(get_zone(tz_name))


def format_hhmm(value: datetime, tz_name: Optional[str] = None) -> str:
    return to_local(value, tz_name).strftime("%H:%M")


def local_day_bounds(day: date, tz_name: Optional[str] = None) -> tuple[datetime, datetime]:
    """First and last instant (inclusive) of a local calendar day, in UTC"""
    zone = get_zone(tz_name)
    start = datetime.combine(day, time.min, tzinfo=zone)
    end = datetime.combine(day, time.max, tzinfo=zone)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def local_weekday(value: datetime, tz_name: Optional[str] = None) -> int:
    """Weekday of ``value`` in local time, 0=Sunday ... 6=Saturday"""
    return (to_local(value, tz_name).weekday() + 1) % 7


def date_weekday(day: date) -> int:
    return (day.weekday() + 1) % 7
