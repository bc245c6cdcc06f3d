"""Shared fixtures for database-backed tests"""

import unittest
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base
from app.domain.scheduling.booking_rules import BookingRules
from app.domain.scheduling.service import SchedulingService
from app.models import Appointment, AppointmentStatus, Role, Service, TimeBlock, User

TZ = "America/Sao_Paulo"
# A fixed "now" well before every appointment used in the tests
NOW = datetime(2023, 12, 1, 12, 0, tzinfo=timezone.utc)


def utc(year, month, day, hour, minute=0):
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


def make_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return engine


class DatabaseTestCase(unittest.TestCase):
    """Fresh in-memory database per test, plus seed helpers"""

    def setUp(self):
        self.engine = make_engine()
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        self.db = self.SessionLocal()

    def tearDown(self):
        self.db.close()
        Base.metadata.drop_all(bind=self.engine)
        self.engine.dispose()

    def make_service(self, rules=None, clock=lambda: NOW):
        return SchedulingService(
            self.db,
            rules=rules or BookingRules(tz_name=TZ, enforce=False),
            clock=clock,
        )

    def add(self, instance):
        self.db.add(instance)
        self.db.commit()
        self.db.refresh(instance)
        return instance

    def add_service(self, name="Haircut", duration_min=30, active=True):
        return self.add(
            Service(name=name, duration_min=duration_min, price=Decimal("50.00"), active=active)
        )

    def add_user(self, name="Alice", role=Role.CLIENT, phone=None):
        return self.add(User(name=name, role=role.value, phone=phone))

    def add_barber(self, name="Bruno"):
        return self.add_user(name=name, role=Role.BARBER)

    def add_appointment(
        self,
        service,
        starts_at,
        ends_at,
        client_name="Walk-in",
        user=None,
        barber=None,
        status=AppointmentStatus.CONFIRMED,
        created_at=None,
    ):
        return self.add(
            Appointment(
                starts_at=starts_at,
                ends_at=ends_at,
                status=status.value,
                client_name=client_name,
                user_id=user.id if user else None,
                barber_id=barber.id if barber else None,
                service_id=service.id,
                created_at=created_at or NOW,
            )
        )

    def add_time_block(self, starts_at, ends_at, reason="Lunch", recurring_days=None, block_type="LUNCH"):
        return self.add(
            TimeBlock(
                type=block_type,
                reason=reason,
                starts_at=starts_at,
                ends_at=ends_at,
                is_recurring=recurring_days is not None,
                recurring_days=recurring_days or [],
            )
        )
