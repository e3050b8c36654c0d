"""
Appointment API endpoints.
"""

import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from core.constants import MAX_TITLE_LENGTH, MAX_DESCRIPTION_LENGTH
from core.database import get_db
from auth.dependencies import get_current_employee, AuthContext
from services import AppointmentService
from api.responses import (
    AppointmentCreateResponse,
    AppointmentStatusResponse,
    UpcomingAppointmentsResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class AppointmentCreateRequest(BaseModel):
    """Request model for booking an appointment."""
    employee_id: Optional[int] = None
    client_id: Optional[int] = None
    service_id: Optional[int] = None
    date: Optional[str] = None
    """Local date, YYYY-MM-DD."""
    time: Optional[str] = None
    """Local start time, HH:MM."""
    timezone_offset: Optional[Union[float, str]] = None
    """Minutes to add to local time to get UTC (UTC-6 sends 360)."""
    title: Optional[str] = Field(None, max_length=MAX_TITLE_LENGTH)
    description: Optional[str] = Field(None, max_length=MAX_DESCRIPTION_LENGTH)


class AppointmentStatusRequest(BaseModel):
    """Request model for a staff status change."""
    appointment_id: Optional[int] = None
    status: Optional[str] = None


@router.post("", summary="Book an appointment")
async def create_appointment(
    request: AppointmentCreateRequest,
    auth: AuthContext = Depends(get_current_employee),
    db: Session = Depends(get_db)
) -> AppointmentCreateResponse:
    """
    Book an appointment for a client and return the confirmation token.

    Staff may only book for themselves; a boss may book for any employee of
    the company.
    """
    result = AppointmentService.create_appointment(
        db=db,
        auth=auth,
        employee_id=request.employee_id,
        client_id=request.client_id,
        service_id=request.service_id,
        date=request.date,
        time_of_day=request.time,
        timezone_offset_minutes=request.timezone_offset,
        title=request.title,
        description=request.description
    )
    return AppointmentCreateResponse(
        message=result['message'],
        token=result['token'],
        appointment=result['appointment']
    )


@router.patch("", summary="Change an appointment status")
async def update_appointment_status(
    request: AppointmentStatusRequest,
    auth: AuthContext = Depends(get_current_employee),
    db: Session = Depends(get_db)
) -> AppointmentStatusResponse:
    result = AppointmentService.update_status(db, auth, request.appointment_id, request.status)
    return AppointmentStatusResponse(
        message=result['message'],
        appointment_id=result['appointment_id'],
        appointment_status=result['status']
    )


@router.get("/upcoming", summary="List upcoming appointments")
async def list_upcoming_appointments(
    auth: AuthContext = Depends(get_current_employee),
    db: Session = Depends(get_db)
) -> UpcomingAppointmentsResponse:
    """Appointments of the company that have not ended yet, soonest first."""
    appointments = AppointmentService.list_upcoming(db, auth)
    return UpcomingAppointmentsResponse(appointments=appointments)
