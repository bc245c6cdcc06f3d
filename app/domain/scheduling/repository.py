"""Scheduling repositories - Database operations for appointments and their collaborators"""

import zlib
from datetime import datetime
from typing import Optional

from sqlalchemy import or_, text
from sqlalchemy.orm import Query, Session, joinedload

from ...models import ACTIVE_STATUSES, Appointment, Service, User, utcnow
from ...shared.pagination import Page, PageRequest
from .conflicts import ScheduledAppointment


def _scope_key(scope: str) -> int:
    return zlib.crc32(f"appointments:{scope}".encode())


GLOBAL_SCOPE_KEY = _scope_key("*")


class ServiceCatalog:
    """Read-only access to the service catalog"""

    @staticmethod
    def get_service(db: Session, service_id: str) -> Optional[Service]:
        return db.query(Service).filter(Service.id == service_id).first()


class UserDirectory:
    """Read-only access to registered users (clients and barbers)"""

    @staticmethod
    def get_user(db: Session, user_id: str) -> Optional[User]:
        return db.query(User).filter(User.id == user_id).first()


class AppointmentRepository:
    """Repository for appointment database operations.

    Exposes retrieval and write primitives only; deciding whether two
    appointments clash is the scheduling service's job.
    """

    @staticmethod
    def _with_associations(query: Query) -> Query:
        return query.options(
            joinedload(Appointment.user),
            joinedload(Appointment.barber),
            joinedload(Appointment.service),
        )

    @staticmethod
    def find_by_id(db: Session, appointment_id: str) -> Optional[Appointment]:
        query = db.query(Appointment).filter(Appointment.id == appointment_id)
        return AppointmentRepository._with_associations(query).first()

    @staticmethod
    def find_active_in_scope(
        db: Session, barber_id: Optional[str], exclude_id: Optional[str] = None
    ) -> list[Appointment]:
        """
        Active appointments in a conflict scope, oldest booking first.

        A barber id restricts the scope to that barber's agenda; None means
        the whole shop.
        """
        query = db.query(Appointment).filter(Appointment.status.in_(ACTIVE_STATUSES))
        if barber_id:
            query = query.filter(Appointment.barber_id == barber_id)
        if exclude_id:
            query = query.filter(Appointment.id != exclude_id)
        query = AppointmentRepository._with_associations(query)
        return query.order_by(Appointment.created_at.asc(), Appointment.id.asc()).all()

    @staticmethod
    def to_scheduled(appointment: Appointment) -> ScheduledAppointment:
        return ScheduledAppointment(
            id=appointment.id,
            start=appointment.starts_at,
            end=appointment.ends_at,
            created_at=appointment.created_at,
            display_name=appointment.display_name,
            service_name=appointment.service.name if appointment.service else "Service",
        )

    @staticmethod
    def lock_scope(db: Session, barber_id: Optional[str]) -> None:
        """
        Serialize conflict check + write for a scope until the transaction ends.

        PostgreSQL: transaction-level advisory locks. A barber-scoped writer
        holds the global key shared and its barber key exclusively; a global
        writer holds the global key exclusively, since it checks every
        barber's agenda. SQLite engines take the whole-database write lock
        when the transaction begins (``install_sqlite_write_locking``), so
        there is nothing more to lock here.
        """
        if db.get_bind().dialect.name != "postgresql":
            return
        if barber_id:
            db.execute(text("SELECT pg_advisory_xact_lock_shared(:key)"), {"key": GLOBAL_SCOPE_KEY})
            db.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": _scope_key(barber_id)})
        else:
            db.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": GLOBAL_SCOPE_KEY})

    @staticmethod
    def create(db: Session, **appointment_data) -> Appointment:
        appointment = Appointment(**appointment_data)
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def update(db: Session, appointment: Appointment, **updates) -> Appointment:
        """Apply updates; None values are written, so callers only pass fields they mean to change"""
        for key, value in updates.items():
            if hasattr(appointment, key):
                setattr(appointment, key, value)
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def delete(db: Session, appointment: Appointment) -> None:
        db.delete(appointment)
        db.commit()

    @staticmethod
    def mark_commissions_paid(db: Session, barber_id: str) -> int:
        """Flag every unpaid commission of a barber as paid; returns how many rows changed"""
        updated = (
            db.query(Appointment)
            .filter(
                Appointment.barber_id == barber_id,
                Appointment.commission_paid.is_(False),
            )
            .update(
                {Appointment.commission_paid: True, Appointment.updated_at: utcnow()},
                synchronize_session=False,
            )
        )
        db.commit()
        return updated

    @staticmethod
    def _paginate(query: Query, page: PageRequest, *order_by) -> Page[Appointment]:
        total = query.count()
        items = (
            AppointmentRepository._with_associations(query)
            .order_by(*order_by)
            .offset(page.skip)
            .limit(page.limit)
            .all()
        )
        return Page(items=items, total=total, page=page.page, limit=page.limit)

    @staticmethod
    def search(
        db: Session,
        page: PageRequest,
        starts_from: Optional[datetime] = None,
        starts_to: Optional[datetime] = None,
        barber_id: Optional[str] = None,
        user_id: Optional[str] = None,
        status: Optional[str] = None,
        commission_paid: Optional[bool] = None,
        newest_first: bool = False,
    ) -> Page[Appointment]:
        """Search and filter appointments; date bounds are inclusive"""
        query = db.query(Appointment)

        if starts_from:
            query = query.filter(Appointment.starts_at >= starts_from)
        if starts_to:
            query = query.filter(Appointment.starts_at <= starts_to)
        if barber_id:
            query = query.filter(Appointment.barber_id == barber_id)
        if user_id:
            query = query.filter(Appointment.user_id == user_id)
        if status:
            query = query.filter(Appointment.status == status)
        if commission_paid is not None:
            query = query.filter(Appointment.commission_paid.is_(commission_paid))

        order = Appointment.starts_at.desc() if newest_first else Appointment.starts_at.asc()
        return AppointmentRepository._paginate(query, page, order, Appointment.id.asc())

    @staticmethod
    def client_history(
        db: Session,
        page: PageRequest,
        client_name: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> Page[Appointment]:
        """Appointments matching a walk-in name, a registered client's name or phone"""
        conditions = []
        if client_name:
            pattern = f"%{client_name.lower()}%"
            conditions.append(Appointment.client_name.ilike(pattern))
            conditions.append(User.name.ilike(pattern))
        if phone:
            conditions.append(User.phone.contains(phone))

        query = (
            db.query(Appointment)
            .outerjoin(User, Appointment.user_id == User.id)
            .filter(or_(*conditions))
        )
        return AppointmentRepository._paginate(
            query, page, Appointment.starts_at.desc(), Appointment.id.asc()
        )
