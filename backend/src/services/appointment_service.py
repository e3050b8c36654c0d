"""
Appointment service for booking and lifecycle transitions.

Bookings are validated completely before the insert. Every later status
change is a conditional update guarded by the status that was observed when
the decision was made, so concurrent writers cannot both win.
"""

import logging
from datetime import date as date_type, time, timedelta
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from auth.context import AuthContext
from core.constants import (
    APPOINTMENT_STATUSES, STATUS_PENDING, STATUS_CONFIRMED, STATUS_REJECTED,
    STATUS_COMPLETED, STATUS_CANCELLED, STATUS_TRANSITIONS,
    DUPLICATE_CLEANUP_STATUSES, MINUTES_PER_DAY, UPCOMING_APPOINTMENTS_LIMIT,
    TOKEN_TYPE_CONFIRM, TOKEN_TYPE_DELETE, TOKEN_TYPE_CHANGE, TOKEN_TYPE_WAITLIST,
    ACTION_CONFIRM, EVENT_CANCELLATION_CONFIRMED, EVENT_CHANGE_CONFIRMED,
)
from core.exceptions import (
    SchedulingError, InvalidInputError, ForbiddenError, NotFoundError,
    LockedError, DependencyError, PartialFailureError,
)
from models import Appointment, Client, ConfirmationToken, Employee, Service, WaitlistEntry
from services.availability_service import AvailabilityService
from services.conflict_service import ConflictService
from utils.datetime_utils import (
    utc_now, ensure_utc, parse_date_string, parse_time_string,
    to_absolute_instant, minutes_since_midnight,
)
from utils.query_helpers import apply_scope

logger = logging.getLogger(__name__)

Notification = Tuple[str, Dict[str, Any]]


def _isoformat(value: Any) -> Optional[str]:
    if value is None:
        return None
    return ensure_utc(value).isoformat()


def appointment_snapshot(appointment: Appointment) -> Dict[str, Any]:
    """JSON-ready view of an appointment with its client, employee and service."""
    client = appointment.client
    service = appointment.service
    employee = appointment.employee
    return {
        'id': appointment.id,
        'company_id': appointment.company_id,
        'status': appointment.status,
        'start_time': _isoformat(appointment.start_time),
        'end_time': _isoformat(appointment.end_time),
        'title': appointment.title,
        'description': appointment.description,
        'employee': {'id': employee.id, 'name': employee.name} if employee else None,
        'client': {'id': client.id, 'name': client.name, 'phone': client.phone} if client else None,
        'service': {
            'id': service.id,
            'name': service.name,
            'duration_minutes': service.duration_minutes,
        } if service else None,
    }


def waitlist_clients_snapshot(entries: List[WaitlistEntry]) -> List[Dict[str, Any]]:
    return [
        {
            'waitlist_entry_id': entry.id,
            'client_id': entry.client_id,
            'name': entry.client.name if entry.client else None,
            'phone': entry.client.phone if entry.client else None,
        }
        for entry in entries
    ]


class AppointmentService:
    """
    Service class for appointment operations.

    Contains booking, staff status changes and the transitions driven by
    confirmation links.
    """

    @staticmethod
    def _parse_local_slot(date: Optional[str], time_of_day: Optional[str]) -> Tuple[date_type, time]:
        if not date or not time_of_day:
            raise InvalidInputError("Selecciona fecha y hora de inicio.")
        try:
            return parse_date_string(date), parse_time_string(time_of_day)
        except ValueError as e:
            raise InvalidInputError("La fecha u hora no son validas.", details=str(e)) from e

    @staticmethod
    def _get_bookable_service(db: Session, company_id: int, service_id: Optional[int]) -> Service:
        service = None
        if service_id:
            service = db.query(Service).filter(
                Service.id == service_id,
                Service.company_id == company_id
            ).first()
        if not service:
            raise InvalidInputError("Selecciona un servicio valido.")
        if not service.duration_minutes or service.duration_minutes <= 0:
            raise InvalidInputError("El servicio seleccionado no tiene duracion valida.")
        return service

    @staticmethod
    def _resolve_employee(db: Session, auth: AuthContext, employee_id: Optional[int]) -> Employee:
        """
        Staff may only book for themselves; a boss may book for any employee
        of the company.

        Raises:
            ForbiddenError: If the target employee is outside the caller's reach
        """
        if not employee_id:
            raise ForbiddenError("Selecciona un empleado.")

        if not auth.is_boss() and employee_id != auth.employee_id:
            logger.warning(f"Employee {auth.employee_id} tried to book for employee {employee_id}")
            raise ForbiddenError("Solo puedes agendar citas para ti.")

        employee = db.query(Employee).filter(
            Employee.id == employee_id,
            Employee.company_id == auth.company_id
        ).first()
        if not employee:
            raise ForbiddenError("Empleado no encontrado.")
        return employee

    @staticmethod
    def _get_client(db: Session, company_id: int, client_id: Optional[int]) -> Client:
        client = None
        if client_id:
            client = db.query(Client).filter(
                Client.id == client_id,
                Client.company_id == company_id
            ).first()
        if not client:
            raise InvalidInputError("Selecciona un cliente valido.")
        return client

    @staticmethod
    def create_appointment(
        db: Session,
        auth: AuthContext,
        employee_id: Optional[int],
        client_id: Optional[int],
        service_id: Optional[int],
        date: Optional[str],
        time_of_day: Optional[str],
        timezone_offset_minutes: Any,
        title: Optional[str] = None,
        description: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Book an appointment and issue its confirmation link.

        Validation runs in order: date/time, service, employee scope, client,
        same-day end, duplicate guard, schedule, vacation. Nothing is written
        until all of them pass.

        Args:
            db: Database session
            auth: Authenticated employee context
            employee_id: Employee who will attend the appointment
            client_id: Client being booked
            service_id: Service providing the duration
            date: Local date "YYYY-MM-DD"
            time_of_day: Local start time "HH:MM"
            timezone_offset_minutes: Client offset, minutes to add to local time for UTC
            title: Optional title
            description: Optional description

        Returns:
            Dict with 'token' and 'appointment' ({'id', 'start_time'})

        Raises:
            InvalidInputError, ForbiddenError, ConflictError: Validation failures
            PartialFailureError: Appointment stored but the token could not be issued
            DependencyError: Store failure before the insert committed
        """
        from services.confirmation_service import ConfirmationService

        try:
            local_date, local_time = AppointmentService._parse_local_slot(date, time_of_day)
            service = AppointmentService._get_bookable_service(db, auth.company_id, service_id)
            employee = AppointmentService._resolve_employee(db, auth, employee_id)
            client = AppointmentService._get_client(db, auth.company_id, client_id)

            start_minutes = minutes_since_midnight(local_time)
            end_minutes = start_minutes + service.duration_minutes
            if end_minutes > MINUTES_PER_DAY:
                raise InvalidInputError("La cita debe terminar el mismo dia.")

            start_time = to_absolute_instant(local_date, local_time, timezone_offset_minutes)
            end_time = start_time + timedelta(minutes=service.duration_minutes)

            ConflictService.ensure_no_duplicate_booking(
                db, auth.company_id, employee.id, client.id, service.id, start_time
            )
            AvailabilityService.check_employee_availability(
                db, auth.company_id, employee.id, local_date, start_minutes, end_minutes
            )

            appointment = Appointment(
                company_id=auth.company_id,
                employee_id=employee.id,
                client_id=client.id,
                service_id=service.id,
                start_time=start_time,
                end_time=end_time,
                title=title,
                description=description,
                status=STATUS_PENDING
            )
            db.add(appointment)
            db.commit()
        except SchedulingError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Failed to create appointment: {e}")
            raise DependencyError("No pudimos crear la cita.", details=str(e)) from e

        logger.info(
            f"Created appointment {appointment.id} for client {client.id} "
            f"with employee {employee.id} at {start_time.isoformat()}"
        )

        try:
            token = ConfirmationService.issue(db, appointment_id=appointment.id, token_type=TOKEN_TYPE_CONFIRM)
        except (SchedulingError, SQLAlchemyError) as e:
            logger.exception(f"Failed to issue confirmation for appointment {appointment.id}: {e}")
            raise PartialFailureError(
                "La cita se creo, pero no pudimos generar la confirmacion.",
                details=str(e)
            ) from e

        return {
            'message': "Cita creada.",
            'token': token.token,
            'appointment': {
                'id': appointment.id,
                'start_time': ensure_utc(start_time),
            },
        }

    @staticmethod
    def update_status(db: Session, auth: AuthContext, appointment_id: Optional[int], new_status: Optional[str]) -> Dict[str, Any]:
        """
        Staff-driven status change.

        Args:
            db: Database session
            auth: Authenticated employee context (scopes the lookup)
            appointment_id: Appointment to change
            new_status: Target status

        Returns:
            Dict with 'message', 'appointment_id' and 'status'

        Raises:
            InvalidInputError: Missing id or unknown status
            NotFoundError: Appointment outside the caller's scope
            LockedError: Completed source, disallowed transition, or the status
                changed since it was read
        """
        if not appointment_id or new_status not in APPOINTMENT_STATUSES:
            raise InvalidInputError("Solicitud no valida.")

        try:
            query = db.query(Appointment).filter(Appointment.id == appointment_id)
            appointment = apply_scope(query, Appointment, auth.scope).first()
            if not appointment:
                raise NotFoundError("Cita no encontrada.")

            current_status = appointment.status
            if current_status == new_status:
                return {'message': "Sin cambios.", 'appointment_id': appointment.id, 'status': current_status}

            if current_status == STATUS_COMPLETED:
                raise LockedError("Esta cita ya fue realizada.")
            if new_status not in STATUS_TRANSITIONS.get(current_status, frozenset()):
                raise LockedError(f"No se puede cambiar la cita de {current_status} a {new_status}.")

            AppointmentService._transition(db, appointment, current_status, new_status)
            db.commit()
        except SchedulingError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Failed to update appointment {appointment_id}: {e}")
            raise DependencyError("No pudimos actualizar la cita.", details=str(e)) from e

        logger.info(f"Employee {auth.employee_id} moved appointment {appointment_id} from {current_status} to {new_status}")
        return {'message': "Cita actualizada.", 'appointment_id': appointment_id, 'status': new_status}

    @staticmethod
    def _transition(db: Session, appointment: Appointment, expected_status: str, new_status: str) -> None:
        """
        Conditional status write. Does not commit.

        Raises:
            LockedError: If the stored status is no longer ``expected_status``
        """
        updated = db.query(Appointment).filter(
            Appointment.id == appointment.id,
            Appointment.status == expected_status
        ).update({
            Appointment.status: new_status,
            Appointment.updated_at: utc_now(),
        })
        if updated == 0:
            logger.warning(f"Appointment {appointment.id} changed concurrently, expected {expected_status}")
            raise LockedError("La cita cambio de estado, intenta de nuevo.")

    @staticmethod
    def apply_token_action(db: Session, token: ConfirmationToken, action: str) -> List[Notification]:
        """
        Apply the transition a confirmation link asks for. Does not commit.

        The caller marks the token used afterwards in the same transaction.

        Args:
            db: Database session
            token: Unused, unexpired token row
            action: 'confirm' or 'reject'

        Returns:
            (event, payload) notifications to dispatch after the commit

        Raises:
            NotFoundError: The bound appointment or waitlist entry is gone
            LockedError: The appointment is completed or changed concurrently
        """
        if token.type == TOKEN_TYPE_WAITLIST:
            AppointmentService._apply_waitlist_action(db, token, action)
            return []

        appointment = token.appointment
        if appointment is None:
            raise NotFoundError("Cita no encontrada.")
        # Applies to both actions of every appointment-bound link
        if appointment.status == STATUS_COMPLETED:
            raise LockedError("Esta cita ya fue realizada.")

        if token.type == TOKEN_TYPE_CONFIRM:
            target = STATUS_CONFIRMED if action == ACTION_CONFIRM else STATUS_REJECTED
            AppointmentService._answer_confirmation(db, appointment, target)
            if action == ACTION_CONFIRM:
                AppointmentService.cleanup_duplicate_slots(db, appointment)
            return []

        if token.type == TOKEN_TYPE_DELETE:
            if action != ACTION_CONFIRM:
                return []
            entries = db.query(WaitlistEntry).options(joinedload(WaitlistEntry.client)).filter(
                WaitlistEntry.appointment_id == appointment.id
            ).all()
            waitlist_clients = waitlist_clients_snapshot(entries)
            AppointmentService._answer_confirmation(db, appointment, STATUS_CANCELLED)
            return [(EVENT_CANCELLATION_CONFIRMED, {
                'action': TOKEN_TYPE_DELETE,
                'appointment': appointment_snapshot(appointment),
                'waitlist_clients': waitlist_clients,
            })]

        if token.type == TOKEN_TYPE_CHANGE:
            if action != ACTION_CONFIRM:
                return []
            entries = db.query(WaitlistEntry).options(joinedload(WaitlistEntry.client)).filter(
                WaitlistEntry.appointment_id == appointment.id
            ).all()
            return [(EVENT_CHANGE_CONFIRMED, {
                'action': TOKEN_TYPE_CHANGE,
                'appointment': appointment_snapshot(appointment),
                'waitlist_clients': waitlist_clients_snapshot(entries),
            })]

        raise InvalidInputError("Tipo de confirmacion no valido.")

    @staticmethod
    def _answer_confirmation(db: Session, appointment: Appointment, target_status: str) -> None:
        current_status = appointment.status
        if current_status == STATUS_COMPLETED:
            raise LockedError("Esta cita ya fue realizada.")
        if current_status == target_status:
            return
        AppointmentService._transition(db, appointment, current_status, target_status)
        logger.info(f"Appointment {appointment.id} moved from {current_status} to {target_status} by client link")

    @staticmethod
    def _apply_waitlist_action(db: Session, token: ConfirmationToken, action: str) -> None:
        from services.waitlist_service import WaitlistService

        entry = token.waitlist_entry
        if entry is None:
            raise NotFoundError("Espera no encontrada.")
        if action == ACTION_CONFIRM:
            return
        WaitlistService.remove_entry(db, entry.id, keep_token_id=token.id)
        logger.info(f"Waitlist entry {entry.id} declined by client link")

    @staticmethod
    def cleanup_duplicate_slots(db: Session, appointment: Appointment) -> int:
        """
        Delete sibling bookings of a newly confirmed slot. Does not commit.

        Siblings share company, employee, service and start instant and are
        still pending or cancelled. The client is not part of the match. Their
        tokens and waitlist entries are removed first.

        Returns:
            Number of appointments deleted
        """
        sibling_ids = [
            row.id for row in db.query(Appointment.id).filter(
                Appointment.company_id == appointment.company_id,
                Appointment.employee_id == appointment.employee_id,
                Appointment.service_id == appointment.service_id,
                Appointment.start_time == appointment.start_time,
                Appointment.status.in_(DUPLICATE_CLEANUP_STATUSES),
                Appointment.id != appointment.id
            ).all()
        ]
        if not sibling_ids:
            return 0

        entry_ids = [
            row.id for row in db.query(WaitlistEntry.id).filter(
                WaitlistEntry.appointment_id.in_(sibling_ids)
            ).all()
        ]

        db.query(ConfirmationToken).filter(
            ConfirmationToken.appointment_id.in_(sibling_ids)
        ).delete(synchronize_session=False)
        if entry_ids:
            db.query(ConfirmationToken).filter(
                ConfirmationToken.waitlist_entry_id.in_(entry_ids)
            ).delete(synchronize_session=False)
            db.query(WaitlistEntry).filter(
                WaitlistEntry.id.in_(entry_ids)
            ).delete(synchronize_session=False)
        db.query(Appointment).filter(
            Appointment.id.in_(sibling_ids)
        ).delete(synchronize_session=False)

        logger.info(f"Removed duplicate appointments {sibling_ids} after confirming appointment {appointment.id}")
        return len(sibling_ids)

    @staticmethod
    def list_upcoming(db: Session, auth: AuthContext, limit: int = UPCOMING_APPOINTMENTS_LIMIT) -> List[Dict[str, Any]]:
        """
        Appointments of the company that have not ended yet, soonest first.

        Used to pick the appointment a waitlist entry is attached to.
        """
        try:
            appointments = db.query(Appointment).options(
                joinedload(Appointment.client),
                joinedload(Appointment.service),
                joinedload(Appointment.employee),
            ).filter(
                Appointment.company_id == auth.company_id,
                Appointment.end_time > utc_now()
            ).order_by(Appointment.start_time, Appointment.id).limit(limit).all()
        except SQLAlchemyError as e:
            logger.exception(f"Failed to list upcoming appointments: {e}")
            raise DependencyError("No pudimos cargar las citas.", details=str(e)) from e

        return [appointment_snapshot(appointment) for appointment in appointments]
