"""Error taxonomy shared by the domain services.

Services raise these; ``app.main`` maps them onto HTTP responses
(400 / 404 / 409). Storage errors are never wrapped here.
"""

from typing import Any, Optional


class SchedulingError(Exception):
    """Base class for errors surfaced to API callers"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SchedulingError):
    """Malformed or logically inconsistent input"""

    status_code = 400


class InvalidDurationError(ValidationError):
    """Service duration is not a positive number of minutes"""

    def __init__(self, duration_minutes: Any):
        super().__init__(f"Duration must be a positive number of minutes (got {duration_minutes})")
        self.duration_minutes = duration_minutes


class NotFoundError(SchedulingError):
    """A referenced service, user, barber or appointment does not exist"""

    status_code = 404

    def __init__(self, resource: str, message: Optional[str] = None):
        super().__init__(message or f"{resource.capitalize()} not found")
        self.resource = resource


class ConflictError(SchedulingError):
    """The requested time range is already taken"""

    status_code = 409

    def __init__(self, message: str, conflict: Any = None):
        super().__init__(message)
        # ScheduledAppointment for appointment conflicts, TimeBlock for blocked ranges
        self.conflict = conflict
