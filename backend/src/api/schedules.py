"""
Employee schedule and vacation API endpoints.

Writes are boss-only; staff can read their own schedule and vacations.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from core.database import get_db
from auth.dependencies import get_current_employee, require_boss, AuthContext
from services import ScheduleService
from api.responses import (
    StatusResponse,
    ScheduleEntryResponse,
    ScheduleListResponse,
    VacationResponse,
    VacationListResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class ScheduleEntryCreateRequest(BaseModel):
    day_of_week: int
    """1=Monday ... 7=Sunday."""
    entry_time: Optional[str] = None
    exit_time: Optional[str] = None
    break_start: Optional[str] = None
    break_end: Optional[str] = None


class ScheduleEntryUpdateRequest(BaseModel):
    day_of_week: Optional[int] = None
    entry_time: Optional[str] = None
    exit_time: Optional[str] = None
    break_start: Optional[str] = None
    break_end: Optional[str] = None


class VacationRequest(BaseModel):
    start_date: Optional[str] = None
    end_date: Optional[str] = None


# ===== Weekly schedule =====

@router.get("/{employee_id}/schedule", summary="List an employee's weekly schedule")
async def list_schedule(
    employee_id: int,
    auth: AuthContext = Depends(get_current_employee),
    db: Session = Depends(get_db)
) -> ScheduleListResponse:
    return ScheduleListResponse(schedule=ScheduleService.list_schedule(db, auth, employee_id))


@router.post("/{employee_id}/schedule", summary="Add a schedule entry")
async def add_schedule_entry(
    employee_id: int,
    request: ScheduleEntryCreateRequest,
    auth: AuthContext = Depends(require_boss),
    db: Session = Depends(get_db)
) -> ScheduleEntryResponse:
    entry = ScheduleService.add_schedule_entry(
        db, auth, employee_id,
        day_of_week=request.day_of_week,
        entry_time=request.entry_time,
        exit_time=request.exit_time,
        break_start=request.break_start,
        break_end=request.break_end
    )
    return ScheduleEntryResponse(**entry)


@router.patch("/{employee_id}/schedule/{entry_id}", summary="Update a schedule entry")
async def update_schedule_entry(
    employee_id: int,
    entry_id: int,
    request: ScheduleEntryUpdateRequest,
    auth: AuthContext = Depends(require_boss),
    db: Session = Depends(get_db)
) -> ScheduleEntryResponse:
    # Only fields present in the body are changed
    changes = request.model_dump(exclude_unset=True)
    entry = ScheduleService.update_schedule_entry(db, auth, employee_id, entry_id, changes)
    return ScheduleEntryResponse(**entry)


@router.delete("/{employee_id}/schedule/{entry_id}", summary="Delete a schedule entry")
async def delete_schedule_entry(
    employee_id: int,
    entry_id: int,
    auth: AuthContext = Depends(require_boss),
    db: Session = Depends(get_db)
) -> StatusResponse:
    ScheduleService.delete_schedule_entry(db, auth, employee_id, entry_id)
    return StatusResponse(message="Horario eliminado.")


# ===== Vacations =====

@router.get("/{employee_id}/vacations", summary="List an employee's vacations")
async def list_vacations(
    employee_id: int,
    auth: AuthContext = Depends(get_current_employee),
    db: Session = Depends(get_db)
) -> VacationListResponse:
    return VacationListResponse(vacations=ScheduleService.list_vacations(db, auth, employee_id))


@router.post("/{employee_id}/vacations", summary="Add a vacation range")
async def add_vacation(
    employee_id: int,
    request: VacationRequest,
    auth: AuthContext = Depends(require_boss),
    db: Session = Depends(get_db)
) -> VacationResponse:
    vacation = ScheduleService.add_vacation(db, auth, employee_id, request.start_date, request.end_date)
    return VacationResponse(**vacation)


@router.patch("/{employee_id}/vacations/{vacation_id}", summary="Update a vacation range")
async def update_vacation(
    employee_id: int,
    vacation_id: int,
    request: VacationRequest,
    auth: AuthContext = Depends(require_boss),
    db: Session = Depends(get_db)
) -> VacationResponse:
    vacation = ScheduleService.update_vacation(
        db, auth, employee_id, vacation_id, request.start_date, request.end_date
    )
    return VacationResponse(**vacation)


@router.delete("/{employee_id}/vacations/{vacation_id}", summary="Delete a vacation range")
async def delete_vacation(
    employee_id: int,
    vacation_id: int,
    auth: AuthContext = Depends(require_boss),
    db: Session = Depends(get_db)
) -> StatusResponse:
    ScheduleService.delete_vacation(db, auth, employee_id, vacation_id)
    return StatusResponse(message="Vacaciones eliminadas.")
