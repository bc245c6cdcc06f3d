"""
Interval math for appointment scheduling.

All intervals are half-open ``[start, end)``: an appointment ending at 10:30
and another starting at 10:30 do not overlap, so back-to-back bookings are
allowed.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from ...shared.exceptions import InvalidDurationError, ValidationError


@dataclass(frozen=True)
class Interval:
    start: datetime
    end: datetime

    @property
    def duration(self) -> timedelta:
        return self.end - self.start


def overlaps(a: Interval, b: Interval) -> bool:
    """
    Return True when two half-open intervals share at least one instant.

    Covers every overlap shape (starts inside, ends inside, contains,
    contained) with a single pair of strict inequalities.
    """
    return a.start < b.end and b.start < a.end


def compute_end_time(start: datetime, duration_minutes: int) -> datetime:
    """End of an appointment that starts at ``start`` and lasts ``duration_minutes``"""
    if duration_minutes is None or duration_minutes <= 0:
        raise InvalidDurationError(duration_minutes)
    return start + timedelta(minutes=duration_minutes)


def ensure_ordered(start: datetime, end: datetime) -> Interval:
    """Build an interval, rejecting empty or inverted ranges"""
    if not start < end:
        raise ValidationError(
            f"Start time must be before end time ({start.isoformat()} >= {end.isoformat()})"
        )
    return Interval(start, end)


def minutes_of_day(value: datetime) -> int:
    """Minutes elapsed since local midnight of ``value``"""
    return value.hour * 60 + value.minute


def hhmm_to_minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def time_of_day_overlaps(
    start_minutes: int, end_minutes: int, other_start: int, other_end: int
) -> bool:
    """Half-open overlap on wall-clock minutes within a single day"""
    return start_minutes < other_end and other_start < end_minutes
