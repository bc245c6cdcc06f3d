import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    TypeDecorator,
)
from sqlalchemy.orm import relationship

from .database import Base


def generate_public_id():
    """Generate a unique identifier for a new row"""
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """Stores instants as naive UTC and always returns timezone-aware UTC values"""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class AppointmentStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELED = "CANCELED"
    COMPLETED = "COMPLETED"
    NO_SHOW = "NO_SHOW"


# Only these statuses hold their slot
ACTIVE_STATUSES = (AppointmentStatus.PENDING.value, AppointmentStatus.CONFIRMED.value)


class Role(str, enum.Enum):
    CLIENT = "CLIENT"
    BARBER = "BARBER"
    ADMIN = "ADMIN"


class BlockType(str, enum.Enum):
    LUNCH = "LUNCH"
    BREAK = "BREAK"
    DAY_OFF = "DAY_OFF"
    VACATION = "VACATION"
    CUSTOM = "CUSTOM"


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_public_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=True)
    phone = Column(String(50), nullable=True)
    role = Column(String(20), default=Role.CLIENT.value, nullable=False)
    created_at = Column(UTCDateTime, default=utcnow, nullable=False)

    appointments = relationship(
        "Appointment", back_populates="user", foreign_keys="Appointment.user_id"
    )


class Service(Base):
    __tablename__ = "services"

    id = Column(String(36), primary_key=True, default=generate_public_id)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    duration_min = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    active = Column(Boolean, default=True, nullable=False)  # Soft-deactivated, never deleted
    created_at = Column(UTCDateTime, default=utcnow, nullable=False)


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(String(36), primary_key=True, default=generate_public_id)
    starts_at = Column(UTCDateTime, nullable=False, index=True)
    ends_at = Column(UTCDateTime, nullable=False)
    status = Column(String(20), default=AppointmentStatus.CONFIRMED.value, nullable=False)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    client_name = Column(String(255), nullable=True)  # Walk-in / manual bookings
    barber_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    service_id = Column(String(36), ForeignKey("services.id"), nullable=False)
    # Barber commission, from the service price at booking and again on completion
    commission = Column(Numeric(10, 2), nullable=False, default=0)
    commission_paid = Column(Boolean, default=False, nullable=False)
    # Tie-break key for conflicts: the earliest booking keeps the slot
    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="appointments", foreign_keys=[user_id])
    barber = relationship("User", foreign_keys=[barber_id])
    service = relationship("Service")

    __table_args__ = (
        Index("ix_appointments_scope_status", "barber_id", "status", "starts_at"),
        Index("ix_appointments_barber_commission", "barber_id", "commission_paid"),
    )

    @property
    def display_name(self) -> str:
        if self.user is not None and self.user.name:
            return self.user.name
        return self.client_name or "Another client"


class TimeBlock(Base):
    __tablename__ = "time_blocks"

    id = Column(String(36), primary_key=True, default=generate_public_id)
    type = Column(String(20), default=BlockType.CUSTOM.value, nullable=False)
    reason = Column(String(200), nullable=True)
    starts_at = Column(UTCDateTime, nullable=False)
    ends_at = Column(UTCDateTime, nullable=False)
    is_recurring = Column(Boolean, default=False, nullable=False)
    recurring_days = Column(JSON, default=list, nullable=False)  # 0=Sunday ... 6=Saturday
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)
