"""Working-hours and advance-booking policy"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from ... import config
from ...shared.exceptions import ValidationError
from ...shared.validators import validate_hhmm, validate_weekdays
from .intervals import hhmm_to_minutes, minutes_of_day
from .time_utils import date_weekday, to_local


DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


@dataclass(frozen=True)
class BookingRules:
    tz_name: str = config.BUSINESS_TIMEZONE
    open_time: str = config.OPEN_TIME
    close_time: str = config.CLOSE_TIME
    working_days: tuple[int, ...] = field(default_factory=lambda: tuple(config.WORKING_DAYS))
    slot_interval_min: int = config.SLOT_INTERVAL_MIN
    min_advance_hours: int = config.MIN_ADVANCE_HOURS
    max_advance_days: int = config.MAX_ADVANCE_DAYS
    enforce: bool = config.ENFORCE_BOOKING_RULES

    def __post_init__(self):
        validate_hhmm(self.open_time)
        validate_hhmm(self.close_time)
        validate_weekdays(list(self.working_days))
        if self.close_minutes <= self.open_minutes:
            raise ValueError(f"Closing time {self.close_time} must be after opening time {self.open_time}")

    @classmethod
    def from_config(cls) -> "BookingRules":
        return cls()

    @property
    def open_minutes(self) -> int:
        return hhmm_to_minutes(self.open_time)

    @property
    def close_minutes(self) -> int:
        return hhmm_to_minutes(self.close_time)

    def is_working_day(self, day: date) -> bool:
        return date_weekday(day) in self.working_days

    def working_day_names(self) -> str:
        return ", ".join(DAY_NAMES[day] for day in sorted(self.working_days))

    def validate(self, starts_at: datetime, ends_at: datetime, now: Optional[datetime] = None) -> None:
        """Reject bookings outside working hours or the advance-booking window"""
        if not self.enforce:
            return

        local_start = to_local(starts_at, self.tz_name)
        local_end = to_local(ends_at, self.tz_name)

        if not self.is_working_day(local_start.date()):
            raise ValidationError(
                f"We are closed on {DAY_NAMES[date_weekday(local_start.date())]}. "
                f"Working days: {self.working_day_names()}."
            )

        start_minutes = minutes_of_day(local_start)
        end_minutes = minutes_of_day(local_end)
        ends_next_day = local_end.date() != local_start.date()
        if (
            start_minutes < self.open_minutes
            or start_minutes >= self.close_minutes
            or ends_next_day
            or end_minutes > self.close_minutes
        ):
            raise ValidationError(
                f"The selected time ({local_start:%H:%M} - {local_end:%H:%M} on "
                f"{local_start:%d/%m/%Y}) is outside business hours "
                f"({self.open_time} - {self.close_time})."
            )

        now = now or datetime.now(timezone.utc)
        lead_time = starts_at - now
        if lead_time < timedelta(hours=self.min_advance_hours):
            raise ValidationError(
                f"Appointments must be booked at least {self.min_advance_hours} hour(s) in advance."
            )
        if lead_time > timedelta(days=self.max_advance_days):
            raise ValidationError(
                f"Appointments cannot be booked more than {self.max_advance_days} day(s) in advance."
            )
