"""
Availability service for employee schedule and vacation checks.

A candidate booking is expressed in the company's local wall-clock time: a
calendar date plus start/end minutes since midnight. Schedules are weekly
entries (one or more per weekday, each with an optional break); vacations are
inclusive date ranges.
"""

import logging
from datetime import date as date_type
from typing import Any, Dict, List, NamedTuple, Optional, Sequence

from sqlalchemy.orm import Session

from core.exceptions import InvalidInputError
from models import EmployeeSchedule, EmployeeVacation
from utils.datetime_utils import minutes_since_midnight, ranges_overlap, iso_weekday

logger = logging.getLogger(__name__)


# Rejection reasons
REASON_NO_SCHEDULE = "no_schedule"
REASON_BREAK_CONFLICT = "break_conflict"
REASON_OUTSIDE_HOURS = "outside_hours"
REASON_ON_VACATION = "on_vacation"

REJECTION_MESSAGES = {
    REASON_NO_SCHEDULE: "El empleado no tiene horario registrado para este dia.",
    REASON_BREAK_CONFLICT: "La cita coincide con el descanso del empleado.",
    REASON_OUTSIDE_HOURS: "La cita esta fuera del horario de trabajo del empleado.",
    REASON_ON_VACATION: "El empleado esta de vacaciones en esa fecha.",
}


class ScheduleCheck(NamedTuple):
    ok: bool
    reason: Optional[str] = None


def _minutes_or_none(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return minutes_since_midnight(value)
    except InvalidInputError:
        return None


class AvailabilityService:
    """
    Service class for availability operations.

    The pure checks (``validate_schedule``, ``is_on_vacation``) work on
    pre-fetched rows; ``check_employee_availability`` fetches and raises.
    """

    @staticmethod
    def validate_schedule(
        entries: Sequence[EmployeeSchedule],
        start_minutes: int,
        end_minutes: int
    ) -> ScheduleCheck:
        """
        Check a candidate window against the schedule entries of its weekday.

        Pure function - no database queries.

        An entry accepts the candidate when its work window fully contains it
        and its break (if any) does not overlap it. Entries with a missing or
        inverted work window are ignored; an inverted break counts as no break.

        Args:
            entries: All schedule entries of the employee for the weekday
            start_minutes: Candidate start, minutes since local midnight
            end_minutes: Candidate end, minutes since local midnight

        Returns:
            ScheduleCheck(ok=True) or ScheduleCheck(ok=False, reason=...)
        """
        if not entries:
            return ScheduleCheck(False, REASON_NO_SCHEDULE)

        has_break_conflict = False

        for entry in entries:
            entry_start = _minutes_or_none(entry.entry_time)
            entry_end = _minutes_or_none(entry.exit_time)
            if entry_start is None or entry_end is None or entry_end <= entry_start:
                continue
            if start_minutes < entry_start or end_minutes > entry_end:
                continue

            break_start = _minutes_or_none(entry.break_start)
            break_end = _minutes_or_none(entry.break_end)
            has_break = break_start is not None and break_end is not None and break_end > break_start
            if has_break and ranges_overlap(start_minutes, end_minutes, break_start, break_end):
                has_break_conflict = True
                continue

            return ScheduleCheck(True)

        if has_break_conflict:
            return ScheduleCheck(False, REASON_BREAK_CONFLICT)
        return ScheduleCheck(False, REASON_OUTSIDE_HOURS)

    @staticmethod
    def is_on_vacation(vacations: Sequence[EmployeeVacation], local_date: date_type) -> bool:
        """
        Check whether a local date falls inside any vacation range.

        Ranges are inclusive on both ends; a range without an end date covers
        its start date only.
        """
        for vacation in vacations:
            if vacation.start_date is None:
                continue
            end_date = vacation.end_date or vacation.start_date
            if vacation.start_date <= local_date <= end_date:
                return True
        return False

    @staticmethod
    def fetch_employee_schedule_data(
        db: Session,
        company_id: int,
        employee_id: int,
        local_date: date_type
    ) -> Dict[str, List[Any]]:
        """
        Fetch schedule entries for the weekday of ``local_date`` and the
        vacation ranges that could cover it.

        Returns:
            {'entries': List[EmployeeSchedule], 'vacations': List[EmployeeVacation]}
        """
        entries = db.query(EmployeeSchedule).filter(
            EmployeeSchedule.company_id == company_id,
            EmployeeSchedule.employee_id == employee_id,
            EmployeeSchedule.day_of_week == iso_weekday(local_date)
        ).order_by(EmployeeSchedule.entry_time).all()

        vacations = db.query(EmployeeVacation).filter(
            EmployeeVacation.company_id == company_id,
            EmployeeVacation.employee_id == employee_id,
            EmployeeVacation.start_date <= local_date
        ).all()

        return {'entries': entries, 'vacations': vacations}

    @staticmethod
    def check_employee_availability(
        db: Session,
        company_id: int,
        employee_id: int,
        local_date: date_type,
        start_minutes: int,
        end_minutes: int
    ) -> None:
        """
        Ensure the employee works during the candidate window and is not on
        vacation that day.

        Raises:
            InvalidInputError: With the localized rejection message
        """
        data = AvailabilityService.fetch_employee_schedule_data(db, company_id, employee_id, local_date)

        check = AvailabilityService.validate_schedule(data['entries'], start_minutes, end_minutes)
        if not check.ok:
            logger.info(
                f"Employee {employee_id} unavailable on {local_date} "
                f"{start_minutes}-{end_minutes}: {check.reason}"
            )
            raise InvalidInputError(REJECTION_MESSAGES[check.reason])

        if AvailabilityService.is_on_vacation(data['vacations'], local_date):
            logger.info(f"Employee {employee_id} on vacation on {local_date}")
            raise InvalidInputError(REJECTION_MESSAGES[REASON_ON_VACATION])
