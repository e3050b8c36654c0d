"""
Schedule service for employee working hours and vacations.

Only a boss edits schedules and vacations, for employees of their own
company. Staff can read their own.
"""

import logging
from datetime import date as date_type, time
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from auth.context import AuthContext
from core.exceptions import InvalidInputError, ForbiddenError, NotFoundError, DependencyError
from models import Employee, EmployeeSchedule, EmployeeVacation
from utils.datetime_utils import parse_date_string, parse_time_string

logger = logging.getLogger(__name__)


def _format_time(value: Optional[time]) -> Optional[str]:
    return value.strftime('%H:%M') if value is not None else None


def schedule_snapshot(entry: EmployeeSchedule) -> Dict[str, Any]:
    return {
        'id': entry.id,
        'employee_id': entry.employee_id,
        'day_of_week': entry.day_of_week,
        'entry_time': _format_time(entry.entry_time),
        'exit_time': _format_time(entry.exit_time),
        'break_start': _format_time(entry.break_start),
        'break_end': _format_time(entry.break_end),
    }


def vacation_snapshot(vacation: EmployeeVacation) -> Dict[str, Any]:
    return {
        'id': vacation.id,
        'employee_id': vacation.employee_id,
        'start_date': vacation.start_date.isoformat() if vacation.start_date else None,
        'end_date': vacation.end_date.isoformat() if vacation.end_date else None,
    }


def _optional_time(value: Optional[str]) -> Optional[time]:
    if value is None or not str(value).strip():
        return None
    try:
        return parse_time_string(value)
    except ValueError as e:
        raise InvalidInputError("La hora no es valida.", details=str(e)) from e


def _required_date(value: Optional[str]) -> date_type:
    if value is None or not str(value).strip():
        raise InvalidInputError("Completa las fechas de inicio y fin.")
    try:
        return parse_date_string(value)
    except ValueError as e:
        raise InvalidInputError("La fecha no es valida.", details=str(e)) from e


def _validate_day_of_week(day_of_week: Any) -> int:
    if isinstance(day_of_week, bool) or not isinstance(day_of_week, int) or not 1 <= day_of_week <= 7:
        raise InvalidInputError("El dia debe estar entre 1 y 7.")
    return day_of_week


class ScheduleService:
    """Service class for schedule and vacation management."""

    @staticmethod
    def _get_employee(db: Session, auth: AuthContext, employee_id: int, write: bool) -> Employee:
        """
        Resolve an employee the caller may read (``write=False``) or edit.

        Raises:
            ForbiddenError: Staff editing anything, or reading someone else
            NotFoundError: Employee not in the caller's company
        """
        if write and not auth.is_boss():
            raise ForbiddenError("Solo el jefe puede editar horarios.")
        if not auth.is_boss() and employee_id != auth.employee_id:
            raise ForbiddenError("Solo puedes ver tu propio horario.")

        employee = db.query(Employee).filter(
            Employee.id == employee_id,
            Employee.company_id == auth.company_id
        ).first()
        if not employee:
            raise NotFoundError("Empleado no encontrado.")
        return employee

    @staticmethod
    def _commit(db: Session, failure_message: str) -> None:
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"{failure_message}: {e}")
            raise DependencyError(failure_message, details=str(e)) from e

    # Weekly schedule

    @staticmethod
    def list_schedule(db: Session, auth: AuthContext, employee_id: int) -> List[Dict[str, Any]]:
        ScheduleService._get_employee(db, auth, employee_id, write=False)
        entries = db.query(EmployeeSchedule).filter(
            EmployeeSchedule.company_id == auth.company_id,
            EmployeeSchedule.employee_id == employee_id
        ).order_by(EmployeeSchedule.day_of_week, EmployeeSchedule.entry_time).all()
        return [schedule_snapshot(entry) for entry in entries]

    @staticmethod
    def add_schedule_entry(
        db: Session,
        auth: AuthContext,
        employee_id: int,
        day_of_week: Any,
        entry_time: Optional[str],
        exit_time: Optional[str],
        break_start: Optional[str] = None,
        break_end: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Add a working window for a weekday (1=Monday ... 7=Sunday).

        Inverted or incomplete windows are stored as given; availability
        checks simply ignore them.
        """
        ScheduleService._get_employee(db, auth, employee_id, write=True)
        entry = EmployeeSchedule(
            company_id=auth.company_id,
            employee_id=employee_id,
            day_of_week=_validate_day_of_week(day_of_week),
            entry_time=_optional_time(entry_time),
            exit_time=_optional_time(exit_time),
            break_start=_optional_time(break_start),
            break_end=_optional_time(break_end)
        )
        db.add(entry)
        ScheduleService._commit(db, "No pudimos guardar el horario.")
        logger.info(f"Added schedule entry {entry.id} for employee {employee_id} on day {entry.day_of_week}")
        return schedule_snapshot(entry)

    @staticmethod
    def _get_schedule_entry(db: Session, auth: AuthContext, employee_id: int, entry_id: int) -> EmployeeSchedule:
        entry = db.query(EmployeeSchedule).filter(
            EmployeeSchedule.id == entry_id,
            EmployeeSchedule.employee_id == employee_id,
            EmployeeSchedule.company_id == auth.company_id
        ).first()
        if not entry:
            raise NotFoundError("Horario no encontrado.")
        return entry

    @staticmethod
    def update_schedule_entry(
        db: Session,
        auth: AuthContext,
        employee_id: int,
        entry_id: int,
        changes: Dict[str, Any]
    ) -> Dict[str, Any]:
        """
        Apply partial changes. Time fields set to an empty value clear them.
        """
        ScheduleService._get_employee(db, auth, employee_id, write=True)
        entry = ScheduleService._get_schedule_entry(db, auth, employee_id, entry_id)

        if 'day_of_week' in changes:
            entry.day_of_week = _validate_day_of_week(changes['day_of_week'])
        for field in ('entry_time', 'exit_time', 'break_start', 'break_end'):
            if field in changes:
                setattr(entry, field, _optional_time(changes[field]))

        ScheduleService._commit(db, "No pudimos actualizar el horario.")
        logger.info(f"Updated schedule entry {entry_id} of employee {employee_id}")
        return schedule_snapshot(entry)

    @staticmethod
    def delete_schedule_entry(db: Session, auth: AuthContext, employee_id: int, entry_id: int) -> None:
        ScheduleService._get_employee(db, auth, employee_id, write=True)
        entry = ScheduleService._get_schedule_entry(db, auth, employee_id, entry_id)
        db.delete(entry)
        ScheduleService._commit(db, "No pudimos eliminar el horario.")
        logger.info(f"Deleted schedule entry {entry_id} of employee {employee_id}")

    # Vacations

    @staticmethod
    def list_vacations(db: Session, auth: AuthContext, employee_id: int) -> List[Dict[str, Any]]:
        ScheduleService._get_employee(db, auth, employee_id, write=False)
        vacations = db.query(EmployeeVacation).filter(
            EmployeeVacation.company_id == auth.company_id,
            EmployeeVacation.employee_id == employee_id
        ).order_by(EmployeeVacation.start_date).all()
        return [vacation_snapshot(vacation) for vacation in vacations]

    @staticmethod
    def _parse_range(start_date: Optional[str], end_date: Optional[str]) -> tuple[date_type, Optional[date_type]]:
        start = _required_date(start_date)
        end = _required_date(end_date) if end_date not in (None, "") else None
        if end is not None and start > end:
            raise InvalidInputError("La fecha de inicio no puede ser mayor a la de fin.")
        return start, end

    @staticmethod
    def add_vacation(
        db: Session,
        auth: AuthContext,
        employee_id: int,
        start_date: Optional[str],
        end_date: Optional[str] = None
    ) -> Dict[str, Any]:
        """Add an inclusive vacation range. Without an end date it covers one day."""
        ScheduleService._get_employee(db, auth, employee_id, write=True)
        start, end = ScheduleService._parse_range(start_date, end_date)
        vacation = EmployeeVacation(
            company_id=auth.company_id,
            employee_id=employee_id,
            start_date=start,
            end_date=end
        )
        db.add(vacation)
        ScheduleService._commit(db, "No pudimos guardar las vacaciones.")
        logger.info(f"Added vacation {vacation.id} for employee {employee_id}: {start} to {end or start}")
        return vacation_snapshot(vacation)

    @staticmethod
    def _get_vacation(db: Session, auth: AuthContext, employee_id: int, vacation_id: int) -> EmployeeVacation:
        vacation = db.query(EmployeeVacation).filter(
            EmployeeVacation.id == vacation_id,
            EmployeeVacation.employee_id == employee_id,
            EmployeeVacation.company_id == auth.company_id
        ).first()
        if not vacation:
            raise NotFoundError("Vacaciones no encontradas.")
        return vacation

    @staticmethod
    def update_vacation(
        db: Session,
        auth: AuthContext,
        employee_id: int,
        vacation_id: int,
        start_date: Optional[str],
        end_date: Optional[str] = None
    ) -> Dict[str, Any]:
        ScheduleService._get_employee(db, auth, employee_id, write=True)
        vacation = ScheduleService._get_vacation(db, auth, employee_id, vacation_id)
        vacation.start_date, vacation.end_date = ScheduleService._parse_range(start_date, end_date)
        ScheduleService._commit(db, "No pudimos actualizar las vacaciones.")
        logger.info(f"Updated vacation {vacation_id} of employee {employee_id}")
        return vacation_snapshot(vacation)

    @staticmethod
    def delete_vacation(db: Session, auth: AuthContext, employee_id: int, vacation_id: int) -> None:
        ScheduleService._get_employee(db, auth, employee_id, write=True)
        vacation = ScheduleService._get_vacation(db, auth, employee_id, vacation_id)
        db.delete(vacation)
        ScheduleService._commit(db, "No pudimos eliminar las vacaciones.")
        logger.info(f"Deleted vacation {vacation_id} of employee {employee_id}")
