"""
Conflict resolution between a candidate interval and existing appointments.

First come, first served: when several active appointments overlap the
candidate, the one created earliest is reported as the winner. Ties on
``created_at`` fall back to the appointment id so the answer is stable.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from .intervals import Interval, overlaps
from .time_utils import format_hhmm


@dataclass(frozen=True)
class ScheduledAppointment:
    """Snapshot of an existing appointment, with the names used in rejection messages"""

    id: str
    start: datetime
    end: datetime
    created_at: datetime
    display_name: str
    service_name: str

    @property
    def interval(self) -> Interval:
        return Interval(self.start, self.end)


def find_conflict(
    candidate: Interval,
    existing: Iterable[ScheduledAppointment],
    exclude_id: Optional[str] = None,
) -> Optional[ScheduledAppointment]:
    """Return the winning appointment that blocks ``candidate``, or None if the range is free"""
    conflicting = [
        appointment
        for appointment in existing
        if appointment.id != exclude_id and overlaps(candidate, appointment.interval)
    ]
    if not conflicting:
        return None
    return min(conflicting, key=lambda appointment: (appointment.created_at, appointment.id))


def describe_conflict(winner: ScheduledAppointment, tz_name: Optional[str] = None) -> str:
    time_range = f"{format_hhmm(winner.start, tz_name)} - {format_hhmm(winner.end, tz_name)}"
    return (
        f"This time slot is not available. {winner.display_name} already has a "
        f"{winner.service_name} appointment from {time_range}"
    )
