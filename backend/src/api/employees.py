"""
Employee roster API endpoints.

Mounted next to the schedule endpoints under /api/employees.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from core.database import get_db
from auth.dependencies import get_current_employee, AuthContext
from services import EmployeeService
from api.responses import (
    EmployeeListResponse,
    EmployeeMutationResponse,
    EmployeeDetailsResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


class EmployeeRequest(BaseModel):
    name: Optional[str] = None
    role: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    dni: Optional[str] = None
    active: Optional[bool] = None


class EmployeeCreateRequest(EmployeeRequest):
    user_id: Optional[str] = None
    """Identity subject to link, when the employee already has an account."""


@router.get("", summary="List the company's employees")
async def list_employees(
    auth: AuthContext = Depends(get_current_employee),
    db: Session = Depends(get_db)
) -> EmployeeListResponse:
    return EmployeeListResponse(employees=EmployeeService.list_employees(db, auth))


@router.post("", summary="Add an employee")
async def create_employee(
    request: EmployeeCreateRequest,
    auth: AuthContext = Depends(get_current_employee),
    db: Session = Depends(get_db)
) -> EmployeeMutationResponse:
    employee = EmployeeService.create_employee(
        db, auth,
        name=request.name,
        role=request.role,
        email=request.email,
        phone=request.phone,
        dni=request.dni,
        active=request.active,
        user_id=request.user_id
    )
    return EmployeeMutationResponse(employee=employee)


@router.patch("/{employee_id}", summary="Update an employee")
async def update_employee(
    employee_id: int,
    request: EmployeeRequest,
    auth: AuthContext = Depends(get_current_employee),
    db: Session = Depends(get_db)
) -> EmployeeMutationResponse:
    employee = EmployeeService.update_employee(
        db, auth, employee_id,
        name=request.name,
        role=request.role,
        email=request.email,
        phone=request.phone,
        dni=request.dni,
        active=request.active
    )
    return EmployeeMutationResponse(employee=employee)


@router.get("/{employee_id}/details", summary="Schedule and vacations of an employee")
async def employee_details(
    employee_id: int,
    auth: AuthContext = Depends(get_current_employee),
    db: Session = Depends(get_db)
) -> EmployeeDetailsResponse:
    return EmployeeDetailsResponse(**EmployeeService.employee_details(db, auth, employee_id))
