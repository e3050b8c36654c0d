"""
Employee service for the company's staff roster.

Every employee can list the roster. Only a boss adds or edits employees.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from auth.context import AuthContext
from core.constants import EMPLOYEE_ROLES
from core.exceptions import InvalidInputError, ForbiddenError, NotFoundError, ConflictError, DependencyError
from models import Employee
from services.client_service import normalize_text
from services.schedule_service import ScheduleService

logger = logging.getLogger(__name__)


def employee_snapshot(employee: Employee) -> Dict[str, Any]:
    return {
        'id': employee.id,
        'name': employee.name,
        'email': employee.email,
        'phone': employee.phone,
        'dni': employee.dni,
        'role': employee.role,
        'active': employee.active,
    }


class EmployeeService:
    """Service class for employee roster operations."""

    @staticmethod
    def _require_boss(auth: AuthContext) -> None:
        if not auth.is_boss():
            logger.warning(f"Employee {auth.employee_id} tried to edit the roster")
            raise ForbiddenError("Solo el jefe puede editar empleados.")

    @staticmethod
    def _validate(name: Any, role: Any) -> tuple[str, str]:
        name_value = normalize_text(name)
        if not name_value:
            raise InvalidInputError("El nombre es obligatorio.")
        role_value = normalize_text(role).lower()
        if role_value not in EMPLOYEE_ROLES:
            raise InvalidInputError("El rol debe ser boss o staff.")
        return name_value, role_value

    @staticmethod
    def _ensure_identity_free(db: Session, user_id: str, employee_id: Optional[int] = None) -> None:
        query = db.query(Employee.id).filter(Employee.user_id == user_id)
        if employee_id is not None:
            query = query.filter(Employee.id != employee_id)
        if query.first():
            raise ConflictError("Esa cuenta ya esta vinculada a otro empleado.")

    @staticmethod
    def _commit(db: Session, failure_message: str) -> None:
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"{failure_message}: {e}")
            raise DependencyError(failure_message, details=str(e)) from e

    @staticmethod
    def list_employees(db: Session, auth: AuthContext) -> List[Dict[str, Any]]:
        employees = db.query(Employee).filter(
            Employee.company_id == auth.company_id
        ).order_by(Employee.name, Employee.id).all()
        return [employee_snapshot(employee) for employee in employees]

    @staticmethod
    def create_employee(
        db: Session,
        auth: AuthContext,
        name: Any,
        role: Any,
        email: Any = None,
        phone: Any = None,
        dni: Any = None,
        active: Optional[bool] = None,
        user_id: Any = None
    ) -> Dict[str, Any]:
        """
        Add an employee to the boss's company.

        Args:
            db: Database session
            auth: Authenticated boss context
            name: Display name (required)
            role: 'boss' or 'staff', case-insensitive
            email, phone, dni: Optional contact and identity fields
            active: Defaults to True
            user_id: Authenticated identity to link, if already known

        Raises:
            ForbiddenError: Caller is not a boss
            InvalidInputError: Empty name or unknown role
            ConflictError: ``user_id`` already linked to another employee
        """
        EmployeeService._require_boss(auth)
        name_value, role_value = EmployeeService._validate(name, role)
        user_id_value = normalize_text(user_id) or None
        if user_id_value:
            EmployeeService._ensure_identity_free(db, user_id_value)

        employee = Employee(
            company_id=auth.company_id,
            name=name_value,
            role=role_value,
            email=normalize_text(email) or None,
            phone=normalize_text(phone) or None,
            dni=normalize_text(dni) or None,
            active=True if active is None else bool(active),
            user_id=user_id_value
        )
        db.add(employee)
        EmployeeService._commit(db, "No pudimos crear el empleado.")
        logger.info(f"Boss {auth.employee_id} created employee {employee.id} with role {role_value}")
        return employee_snapshot(employee)

    @staticmethod
    def update_employee(
        db: Session,
        auth: AuthContext,
        employee_id: Optional[int],
        name: Any,
        role: Any,
        email: Any = None,
        phone: Any = None,
        dni: Any = None,
        active: Optional[bool] = None
    ) -> Dict[str, Any]:
        """
        Replace an employee's profile. Empty contact fields are cleared;
        ``active`` is left unchanged when omitted.

        Raises:
            ForbiddenError: Caller is not a boss
            InvalidInputError: Missing id, empty name or unknown role
            NotFoundError: Employee not in the caller's company
        """
        EmployeeService._require_boss(auth)
        if not employee_id:
            raise InvalidInputError("Selecciona un empleado para editar.")
        name_value, role_value = EmployeeService._validate(name, role)

        employee = db.query(Employee).filter(
            Employee.id == employee_id,
            Employee.company_id == auth.company_id
        ).first()
        if not employee:
            raise NotFoundError("Empleado no encontrado.")

        employee.name = name_value
        employee.role = role_value
        employee.email = normalize_text(email) or None
        employee.phone = normalize_text(phone) or None
        employee.dni = normalize_text(dni) or None
        if active is not None:
            employee.active = bool(active)
        EmployeeService._commit(db, "No pudimos actualizar el empleado.")
        logger.info(f"Boss {auth.employee_id} updated employee {employee.id}")
        return employee_snapshot(employee)

    @staticmethod
    def employee_details(db: Session, auth: AuthContext, employee_id: int) -> Dict[str, Any]:
        """Weekly schedule and vacations of one employee, under the schedule read rules."""
        return {
            'schedule': ScheduleService.list_schedule(db, auth, employee_id),
            'vacations': ScheduleService.list_vacations(db, auth, employee_id),
        }
