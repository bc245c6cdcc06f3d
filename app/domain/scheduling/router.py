"""Appointment router - FastAPI endpoints for booking operations"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from ...database import get_db
from ...models import Appointment, User
from ...shared.pagination import Page, PageRequest
from .schemas import (
    AppointmentCreate,
    AppointmentResponse,
    AppointmentUpdate,
    AvailableSlotsResponse,
    CommissionsPaidResponse,
    ConflictDetail,
    PaginatedAppointments,
    ServiceSummary,
    UserSummary,
)
from .service import SchedulingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])
barbers_router = APIRouter(prefix="/barbers", tags=["Barbers"])


def get_scheduling_service(db: Session = Depends(get_db)) -> SchedulingService:
    """Dependency injection for SchedulingService"""
    return SchedulingService(db)


def _user_summary(user: Optional[User]) -> Optional[UserSummary]:
    if user is None:
        return None
    return UserSummary(id=user.id, name=user.name, phone=user.phone)


def to_response(appointment: Appointment) -> AppointmentResponse:
    service = appointment.service
    return AppointmentResponse(
        id=appointment.id,
        startsAt=appointment.starts_at,
        endsAt=appointment.ends_at,
        status=appointment.status,
        userId=appointment.user_id,
        clientName=appointment.client_name,
        barberId=appointment.barber_id,
        serviceId=appointment.service_id,
        commission=appointment.commission if appointment.commission is not None else 0,
        commissionPaid=bool(appointment.commission_paid),
        createdAt=appointment.created_at,
        updatedAt=appointment.updated_at,
        user=_user_summary(appointment.user),
        barber=_user_summary(appointment.barber),
        service=ServiceSummary(
            id=service.id, name=service.name, durationMin=service.duration_min, price=service.price
        )
        if service
        else None,
    )


def to_paginated(page: Page[Appointment]) -> PaginatedAppointments:
    return PaginatedAppointments(
        data=[to_response(appointment) for appointment in page.items], meta=page.meta()
    )


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.post(
    "",
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ConflictDetail}},
)
async def create_appointment(
    data: AppointmentCreate,
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Book an appointment; 409 if the time range is already taken"""
    return to_response(service.create(data))


@router.get("", response_model=PaginatedAppointments)
async def list_appointments(
    service: SchedulingService = Depends(get_scheduling_service),
    day: Optional[date] = Query(None, alias="date"),
    barberId: Optional[str] = Query(None),
    userId: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    commissionPaid: Optional[bool] = Query(None),
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    offset: Optional[int] = Query(None),
):
    """List appointments with optional filters and pagination"""
    page_request = PageRequest.build(page=page, limit=limit, offset=offset)
    result = service.find_all(
        page_request,
        day=day,
        barber_id=barberId,
        user_id=userId,
        status=status_filter,
        commission_paid=commissionPaid,
    )
    return to_paginated(result)


# Fixed paths must be declared before /{appointment_id}


@router.get("/available-slots", response_model=AvailableSlotsResponse)
async def get_available_slots(
    day: date = Query(..., alias="date"),
    serviceId: str = Query(...),
    barberId: Optional[str] = Query(None),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Free start times for a service on a given day"""
    return service.get_available_slots(day, serviceId, barber_id=barberId)


@router.get("/client-history", response_model=PaginatedAppointments)
async def get_client_history(
    clientName: Optional[str] = Query(None),
    phone: Optional[str] = Query(None),
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Appointments of a client found by name or phone, newest first"""
    page_request = PageRequest.build(page=page, limit=limit)
    return to_paginated(service.get_client_history(clientName, phone, page_request))


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: str,
    service: SchedulingService = Depends(get_scheduling_service),
):
    return to_response(service.find_one(appointment_id))


@router.patch(
    "/{appointment_id}", response_model=AppointmentResponse, responses={409: {"model": ConflictDetail}}
)
async def update_appointment(
    appointment_id: str,
    data: AppointmentUpdate,
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Update an appointment; moving it re-checks availability"""
    return to_response(service.update(appointment_id, data))


@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_appointment(
    appointment_id: str,
    service: SchedulingService = Depends(get_scheduling_service),
):
    service.remove(appointment_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================================
# COMMISSIONS
# ============================================================================


@barbers_router.post("/{barber_id}/commissions/paid", response_model=CommissionsPaidResponse)
async def mark_commissions_paid(
    barber_id: str,
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Mark every unpaid commission of a barber as paid"""
    return service.mark_commissions_paid(barber_id)
