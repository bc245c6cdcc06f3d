"""Shared validation utilities"""

import re
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

_HHMM = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


def validate_hhmm(value: str) -> str:
    """
    Validate a wall-clock time in 24h ``HH:MM`` format.

    Raises:
        ValueError: If the value is not a valid HH:MM time
    """
    if not isinstance(value, str) or not _HHMM.match(value):
        raise ValueError(f"Invalid time '{value}', expected HH:MM")
    return value


def validate_timezone(value: Optional[str]) -> Optional[str]:
    """
    Validate an IANA timezone name such as ``America/Sao_Paulo``.

    Raises:
        ValueError: If the timezone is unknown
    """
    if not value:
        return value
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"Unknown timezone '{value}'")
    return value


def validate_weekdays(days: Optional[list[int]]) -> Optional[list[int]]:
    """Weekday numbers must be within 0 (Sunday) .. 6 (Saturday) and unique"""
    if days is None:
        return days
    if any(day < 0 or day > 6 for day in days):
        raise ValueError("Weekdays must be between 0 (Sunday) and 6 (Saturday)")
    if len(set(days)) != len(days):
        raise ValueError("Weekdays must not contain duplicates")
    return days
