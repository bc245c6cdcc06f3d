"""Scheduling service - Business logic for booking appointments"""

import logging
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ...config import COMMISSION_RATE
from ...models import Appointment, AppointmentStatus, Role, Service, User, utcnow
from ...shared.exceptions import ConflictError, NotFoundError, ValidationError
from ...shared.pagination import Page, PageRequest
from ...utils.sanitization import clean_text
from ..time_blocks.service import TimeBlockService, block_covers, describe_block
from .booking_rules import DAY_NAMES, BookingRules
from .conflicts import describe_conflict, find_conflict
from .intervals import Interval, compute_end_time, ensure_ordered
from .repository import AppointmentRepository, ServiceCatalog, UserDirectory
from .schemas import AppointmentCreate, AppointmentUpdate
from .time_utils import date_weekday, get_zone, local_day_bounds, to_utc

logger = logging.getLogger(__name__)

MISSING_CLIENT_MESSAGE = (
    "Missing client identification: provide userId (registered client) "
    "or clientName (walk-in booking)."
)
VALID_STATUSES = [status.value for status in AppointmentStatus]


def compute_commission(price, rate) -> Decimal:
    """Barber share of a service price, rounded to cents"""
    return (Decimal(str(price)) * Decimal(str(rate))).quantize(Decimal("0.01"))


class SchedulingService:
    """
    Service layer for appointment scheduling.

    Every create/update runs "lock scope -> load active appointments ->
    resolve conflict -> write" inside one database transaction, so two
    overlapping bookings in the same scope cannot both succeed.

    Conflict scope: an appointment with a barber only competes with that
    barber's active appointments; one without a barber competes with every
    active appointment in the shop.
    """

    def __init__(
        self,
        db: Session,
        repo: Optional[AppointmentRepository] = None,
        catalog: Optional[ServiceCatalog] = None,
        users: Optional[UserDirectory] = None,
        time_blocks: Optional[TimeBlockService] = None,
        rules: Optional[BookingRules] = None,
        clock: Callable[[], datetime] = utcnow,
        commission_rate=COMMISSION_RATE,
    ):
        self.db = db
        self.repo = repo or AppointmentRepository()
        self.catalog = catalog or ServiceCatalog()
        self.users = users or UserDirectory()
        self.time_blocks = time_blocks or TimeBlockService(db)
        self.rules = rules or BookingRules.from_config()
        self.clock = clock
        self.commission_rate = Decimal(str(commission_rate))

    # ============================================================================
    # LOOKUPS
    # ============================================================================

    def _resolve_service(self, service_id: str) -> Service:
        service = self.catalog.get_service(self.db, service_id)
        if not service:
            raise NotFoundError("service")
        if not service.active:
            raise ValidationError(f'The service "{service.name}" is no longer available for booking.')
        return service

    def _resolve_user(self, user_id: str) -> User:
        user = self.users.get_user(self.db, user_id)
        if not user:
            raise NotFoundError("user")
        return user

    def _resolve_barber(self, barber_id: str) -> User:
        barber = self.users.get_user(self.db, barber_id)
        if not barber or barber.role not in (Role.BARBER.value, Role.ADMIN.value):
            raise NotFoundError("barber")
        return barber

    def _commission_for(self, service_id: str) -> Decimal:
        service = self.catalog.get_service(self.db, service_id)
        if not service:
            raise NotFoundError("service")
        return compute_commission(service.price, self.commission_rate)

    # ============================================================================
    # VALIDATION
    # ============================================================================

    def _check_bookable(self, candidate: Interval) -> None:
        """Working hours (when enforced) and blocked periods"""
        self.rules.validate(candidate.start, candidate.end, now=self.clock())

        block = self.time_blocks.find_blocking(candidate, self.rules.tz_name)
        if block:
            logger.warning(f"⚠️ Requested range overlaps time block {block.id}")
            raise ConflictError(describe_block(block, self.rules.tz_name), conflict=block)

    def _ensure_free(
        self,
        candidate: Interval,
        barber_id: Optional[str],
        exclude_id: Optional[str] = None,
    ) -> None:
        """Lock the conflict scope and reject the candidate if an earlier booking holds it"""
        self.repo.lock_scope(self.db, barber_id)
        existing = [
            self.repo.to_scheduled(appointment)
            for appointment in self.repo.find_active_in_scope(self.db, barber_id, exclude_id)
        ]
        winner = find_conflict(candidate, existing, exclude_id=exclude_id)
        if winner:
            logger.warning(
                f"⚠️ Scheduling conflict with appointment {winner.id} "
                f"(scope: {barber_id or 'shop'})"
            )
            raise ConflictError(describe_conflict(winner, self.rules.tz_name), conflict=winner)

    # ============================================================================
    # CORE OPERATIONS
    # ============================================================================

    def create(self, data: AppointmentCreate) -> Appointment:
        """Book a new appointment"""
        tz_name = data.timezone or self.rules.tz_name
        client_name = clean_text(data.clientName)

        if not data.userId and not client_name:
            raise ValidationError(MISSING_CLIENT_MESSAGE)

        service = self._resolve_service(data.serviceId)

        starts_at = to_utc(data.startsAt, tz_name)
        if data.endsAt is not None:
            ends_at = to_utc(data.endsAt, tz_name)
        else:
            ends_at = compute_end_time(starts_at, service.duration_min)
        candidate = ensure_ordered(starts_at, ends_at)

        self._check_bookable(candidate)

        if data.userId:
            self._resolve_user(data.userId)
        if data.barberId:
            self._resolve_barber(data.barberId)

        logger.info(
            f"📥 Booking {service.name} at {starts_at.isoformat()} "
            f"(barber: {data.barberId or 'any'})"
        )

        try:
            self._ensure_free(candidate, data.barberId)
            appointment = self.repo.create(
                self.db,
                starts_at=starts_at,
                ends_at=ends_at,
                status=(data.status or AppointmentStatus.CONFIRMED).value,
                user_id=data.userId,
                client_name=client_name,
                barber_id=data.barberId,
                service_id=service.id,
                commission=compute_commission(service.price, self.commission_rate),
                commission_paid=bool(data.commissionPaid),
                created_at=self.clock(),
            )
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"✅ Appointment {appointment.id} created")
        return self.repo.find_by_id(self.db, appointment.id)

    def update(self, appointment_id: str, data: AppointmentUpdate) -> Appointment:
        """
        Update an appointment.

        Only fields present in the payload are applied. Changing startsAt,
        endsAt, serviceId or barberId re-runs time validation and conflict
        checks; other fields are patched directly.
        """
        appointment = self.find_one(appointment_id)
        fields = data.model_fields_set
        tz_name = data.timezone or self.rules.tz_name

        updates = {}
        if data.status is not None:
            updates["status"] = data.status.value
        if "userId" in fields:
            if data.userId:
                self._resolve_user(data.userId)
            updates["user_id"] = data.userId
        if "clientName" in fields:
            updates["client_name"] = clean_text(data.clientName)
        if "barberId" in fields:
            if data.barberId:
                self._resolve_barber(data.barberId)
            updates["barber_id"] = data.barberId
        if data.commissionPaid is not None:
            updates["commission_paid"] = data.commissionPaid
        if data.status == AppointmentStatus.COMPLETED:
            updates["commission"] = self._commission_for(data.serviceId or appointment.service_id)

        user_id = updates.get("user_id", appointment.user_id)
        client_name = updates.get("client_name", appointment.client_name)
        if not user_id and not client_name:
            raise ValidationError(MISSING_CLIENT_MESSAGE)

        reschedule = (
            data.startsAt is not None
            or data.endsAt is not None
            or data.serviceId is not None
            or "barberId" in fields
        )
        if not reschedule:
            self.repo.update(self.db, appointment, **updates)
            logger.info(f"✅ Appointment {appointment_id} updated")
            return self.repo.find_by_id(self.db, appointment_id)

        service = self._resolve_service(data.serviceId or appointment.service_id)
        if service.id != appointment.service_id:
            updates["service_id"] = service.id

        starts_at = to_utc(data.startsAt, tz_name) if data.startsAt is not None else appointment.starts_at
        if data.endsAt is not None:
            ends_at = to_utc(data.endsAt, tz_name)
        elif data.startsAt is not None:
            ends_at = compute_end_time(starts_at, service.duration_min)
        else:
            ends_at = appointment.ends_at
        candidate = ensure_ordered(starts_at, ends_at)

        self._check_bookable(candidate)

        barber_id = updates.get("barber_id", appointment.barber_id)
        try:
            self._ensure_free(candidate, barber_id, exclude_id=appointment.id)
            self.repo.update(
                self.db, appointment, starts_at=starts_at, ends_at=ends_at, **updates
            )
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"✅ Appointment {appointment_id} rescheduled to {starts_at.isoformat()}")
        return self.repo.find_by_id(self.db, appointment_id)

    def remove(self, appointment_id: str) -> Appointment:
        """Delete an appointment and return its last known state"""
        appointment = self.find_one(appointment_id)
        self.repo.delete(self.db, appointment)
        logger.info(f"🗑️ Appointment {appointment_id} deleted")
        return appointment

    # ============================================================================
    # READ OPERATIONS
    # ============================================================================

    def find_one(self, appointment_id: str) -> Appointment:
        appointment = self.repo.find_by_id(self.db, appointment_id)
        if not appointment:
            raise NotFoundError("appointment")
        return appointment

    def find_all(
        self,
        page: Optional[PageRequest] = None,
        day: Optional[date] = None,
        barber_id: Optional[str] = None,
        user_id: Optional[str] = None,
        status: Optional[str] = None,
        commission_paid: Optional[bool] = None,
    ) -> Page[Appointment]:
        """List appointments, optionally filtered by local day, barber, client, status and payout"""
        if status:
            self._validate_status(status)
        starts_from = starts_to = None
        if day:
            starts_from, starts_to = local_day_bounds(day, self.rules.tz_name)
        return self.repo.search(
            self.db,
            page or PageRequest(),
            starts_from=starts_from,
            starts_to=starts_to,
            barber_id=barber_id,
            user_id=user_id,
            status=status,
            commission_paid=commission_paid,
        )

    def find_by_date(self, day: date, page: Optional[PageRequest] = None) -> Page[Appointment]:
        """Appointments starting within the given business-local calendar day"""
        starts_from, starts_to = local_day_bounds(day, self.rules.tz_name)
        return self.repo.search(
            self.db, page or PageRequest(), starts_from=starts_from, starts_to=starts_to
        )

    def find_by_user(self, user_id: str, page: Optional[PageRequest] = None) -> Page[Appointment]:
        return self.repo.search(self.db, page or PageRequest(), user_id=user_id, newest_first=True)

    def find_by_barber(self, barber_id: str, page: Optional[PageRequest] = None) -> Page[Appointment]:
        return self.repo.search(
            self.db, page or PageRequest(), barber_id=barber_id, newest_first=True
        )

    def find_by_status(self, status: str, page: Optional[PageRequest] = None) -> Page[Appointment]:
        self._validate_status(status)
        return self.repo.search(self.db, page or PageRequest(), status=status)

    def get_client_history(
        self,
        client_name: Optional[str] = None,
        phone: Optional[str] = None,
        page: Optional[PageRequest] = None,
    ) -> Page[Appointment]:
        """Past and upcoming appointments of a client, matched by name or phone"""
        client_name = clean_text(client_name)
        phone = clean_text(phone, max_length=50)
        if not client_name and not phone:
            raise ValidationError("Provide at least the client's name or phone to search the history")
        return self.repo.client_history(
            self.db, page or PageRequest(), client_name=client_name, phone=phone
        )

    def get_available_slots(
        self, day: date, service_id: str, barber_id: Optional[str] = None
    ) -> dict:
        """
        Free start times for a service on a business-local day.

        Slots step by the configured interval from opening time and must end
        by closing time. Slots inside the minimum-advance window, overlapping
        an active appointment in scope, or covered by a time block are
        skipped.
        """
        rules = self.rules
        if not rules.is_working_day(day):
            raise ValidationError(
                f"{DAY_NAMES[date_weekday(day)]} is not a working day. "
                f"Working days: {rules.working_day_names()}"
            )
        if rules.slot_interval_min <= 0:
            raise ValidationError("Slot interval must be a positive number of minutes")

        service = self._resolve_service(service_id)
        if barber_id:
            self._resolve_barber(barber_id)

        zone = get_zone(rules.tz_name)
        existing = [
            self.repo.to_scheduled(appointment)
            for appointment in self.repo.find_active_in_scope(self.db, barber_id)
        ]
        blocks = self.time_blocks.list_blocks()
        earliest_start = self.clock() + timedelta(hours=rules.min_advance_hours)

        slots = []
        minute = rules.open_minutes
        while minute + service.duration_min <= rules.close_minutes:
            local_start = datetime.combine(day, time(minute // 60, minute % 60), tzinfo=zone)
            minute += rules.slot_interval_min

            start = local_start.astimezone(timezone.utc)
            if start < earliest_start:
                continue
            candidate = Interval(start, compute_end_time(start, service.duration_min))
            if find_conflict(candidate, existing) is not None:
                continue
            if any(block_covers(block, candidate, rules.tz_name) for block in blocks):
                continue
            slots.append(start.isoformat())

        return {
            "slots": slots,
            "businessHours": {"openTime": rules.open_time, "closeTime": rules.close_time},
        }

    def mark_commissions_paid(self, barber_id: str) -> dict:
        """Settle a barber's outstanding commissions"""
        self._resolve_barber(barber_id)
        updated = self.repo.mark_commissions_paid(self.db, barber_id)
        logger.info(f"💰 Marked {updated} commission(s) paid for barber {barber_id}")
        return {"updated": updated}

    @staticmethod
    def _validate_status(status: str) -> None:
        if status not in VALID_STATUSES:
            raise ValidationError(f"Invalid status. Allowed values: {', '.join(VALID_STATUSES)}")


__all__ = ["SchedulingService"]
