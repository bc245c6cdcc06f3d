"""Scheduling domain schemas - Pydantic models for validation"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from ...models import AppointmentStatus
from ...shared.validators import validate_timezone


class AppointmentCreate(BaseModel):
    """Schema for booking a new appointment"""

    startsAt: datetime
    endsAt: Optional[datetime] = None
    serviceId: str
    userId: Optional[str] = None
    clientName: Optional[str] = Field(None, max_length=255)
    barberId: Optional[str] = None
    status: Optional[AppointmentStatus] = None
    commissionPaid: Optional[bool] = None
    # Used to read naive startsAt/endsAt; defaults to the business timezone
    timezone: Optional[str] = None

    @field_validator("timezone")
    @classmethod
    def validate_tz(cls, v):
        return validate_timezone(v)


class AppointmentUpdate(BaseModel):
    """Schema for updating an appointment; only fields present in the payload are applied"""

    startsAt: Optional[datetime] = None
    endsAt: Optional[datetime] = None
    serviceId: Optional[str] = None
    userId: Optional[str] = None
    clientName: Optional[str] = Field(None, max_length=255)
    barberId: Optional[str] = None
    status: Optional[AppointmentStatus] = None
    commissionPaid: Optional[bool] = None
    timezone: Optional[str] = None

    @field_validator("timezone")
    @classmethod
    def validate_tz(cls, v):
        return validate_timezone(v)


class UserSummary(BaseModel):
    id: str
    name: str
    phone: Optional[str] = None


class ServiceSummary(BaseModel):
    id: str
    name: str
    durationMin: int
    price: Decimal


class AppointmentResponse(BaseModel):
    """Schema for appointment response"""

    id: str
    startsAt: datetime
    endsAt: datetime
    status: str
    userId: Optional[str]
    clientName: Optional[str]
    barberId: Optional[str]
    serviceId: str
    commission: Decimal = Decimal("0")
    commissionPaid: bool = False
    createdAt: datetime
    updatedAt: Optional[datetime] = None
    user: Optional[UserSummary] = None
    barber: Optional[UserSummary] = None
    service: Optional[ServiceSummary] = None

    class Config:
        from_attributes = True


class PaginationMeta(BaseModel):
    currentPage: int
    itemsPerPage: int
    totalItems: int
    totalPages: int
    hasPreviousPage: bool
    hasNextPage: bool


class PaginatedAppointments(BaseModel):
    data: list[AppointmentResponse]
    meta: PaginationMeta


class BusinessHours(BaseModel):
    openTime: str
    closeTime: str


class AvailableSlotsResponse(BaseModel):
    slots: list[str]
    businessHours: BusinessHours


class CommissionsPaidResponse(BaseModel):
    updated: int


class ConflictDetail(BaseModel):
    """Body returned with HTTP 409"""

    detail: str
    conflict: Optional[dict[str, Any]] = None
