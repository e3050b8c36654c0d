"""
Waitlist service.

Clients can wait for a specific appointment. When that appointment is
rejected or cancelled, staff reassign it to a waiting client; the
reassignment is a conditional update so two staff members racing for the
same slot cannot both succeed.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from auth.context import AuthContext
from core.constants import REASSIGNABLE_STATUSES, STATUS_PENDING, TOKEN_TYPE_CONFIRM, TOKEN_TYPE_WAITLIST
from core.exceptions import (
    SchedulingError, InvalidInputError, NotFoundError, LockedError, DependencyError, PartialFailureError,
)
from models import Appointment, Client, ConfirmationToken, WaitlistEntry
from services.appointment_service import appointment_snapshot
from services.confirmation_service import ConfirmationService
from utils.datetime_utils import utc_now, ensure_utc

logger = logging.getLogger(__name__)


def entry_snapshot(entry: WaitlistEntry) -> Dict[str, Any]:
    client = entry.client
    return {
        'id': entry.id,
        'appointment_id': entry.appointment_id,
        'client_id': entry.client_id,
        'client': {'id': client.id, 'name': client.name, 'phone': client.phone} if client else None,
        'appointment': appointment_snapshot(entry.appointment) if entry.appointment else None,
        'created_at': ensure_utc(entry.created_at).isoformat() if entry.created_at else None,
    }


class WaitlistService:
    """Service class for waitlist operations."""

    @staticmethod
    def _get_company_entry(db: Session, company_id: int, entry_id: Optional[int]) -> WaitlistEntry:
        entry = None
        if entry_id:
            entry = db.query(WaitlistEntry).join(
                Appointment, WaitlistEntry.appointment_id == Appointment.id
            ).filter(
                WaitlistEntry.id == entry_id,
                Appointment.company_id == company_id
            ).first()
        if not entry:
            raise NotFoundError("Espera no encontrada.")
        return entry

    @staticmethod
    def _get_company_appointment(db: Session, company_id: int, appointment_id: int) -> Appointment:
        appointment = db.query(Appointment).filter(
            Appointment.id == appointment_id,
            Appointment.company_id == company_id
        ).first()
        if not appointment:
            raise NotFoundError("Cita no encontrada.")
        return appointment

    @staticmethod
    def _get_company_client(db: Session, company_id: int, client_id: int) -> Client:
        client = db.query(Client).filter(
            Client.id == client_id,
            Client.company_id == company_id
        ).first()
        if not client:
            raise NotFoundError("Cliente no encontrado.")
        return client

    @staticmethod
    def remove_entry(db: Session, entry_id: int, keep_token_id: Optional[int] = None) -> None:
        """
        Delete an entry. Does not commit.

        Its unused tokens are revoked (except ``keep_token_id``, which the
        caller is consuming) and all of its tokens are detached so they stay
        on record as spent.
        """
        revoke_query = db.query(ConfirmationToken).filter(
            ConfirmationToken.waitlist_entry_id == entry_id,
            ConfirmationToken.used_at.is_(None)
        )
        if keep_token_id is not None:
            revoke_query = revoke_query.filter(ConfirmationToken.id != keep_token_id)
        revoke_query.update({ConfirmationToken.used_at: utc_now()})

        db.query(ConfirmationToken).filter(
            ConfirmationToken.waitlist_entry_id == entry_id
        ).update({ConfirmationToken.waitlist_entry_id: None})

        db.query(WaitlistEntry).filter(WaitlistEntry.id == entry_id).delete()

    @staticmethod
    def list_entries(db: Session, auth: AuthContext) -> List[Dict[str, Any]]:
        """Waitlist entries of the company, newest first."""
        try:
            entries = db.query(WaitlistEntry).join(
                Appointment, WaitlistEntry.appointment_id == Appointment.id
            ).options(
                joinedload(WaitlistEntry.client),
                joinedload(WaitlistEntry.appointment),
            ).filter(
                Appointment.company_id == auth.company_id
            ).order_by(WaitlistEntry.created_at.desc(), WaitlistEntry.id.desc()).all()
        except SQLAlchemyError as e:
            logger.exception(f"Failed to list waitlist: {e}")
            raise DependencyError("No pudimos cargar la lista de espera.", details=str(e)) from e

        return [entry_snapshot(entry) for entry in entries]

    @staticmethod
    def create_entry(
        db: Session,
        auth: AuthContext,
        appointment_id: Optional[int],
        client_id: Optional[int]
    ) -> Dict[str, Any]:
        """
        Put a client on the waitlist of an appointment and issue the
        'waitlist' link asking them to confirm their interest.

        Returns:
            Dict with 'entry' snapshot and 'token'

        Raises:
            InvalidInputError: Missing ids
            NotFoundError: Appointment or client outside the company
            PartialFailureError: Entry stored but the token could not be issued
        """
        if not appointment_id or not client_id:
            raise InvalidInputError("Selecciona una cita y un cliente.")

        try:
            WaitlistService._get_company_appointment(db, auth.company_id, appointment_id)
            WaitlistService._get_company_client(db, auth.company_id, client_id)

            entry = WaitlistEntry(appointment_id=appointment_id, client_id=client_id)
            db.add(entry)
            db.commit()
        except SchedulingError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Failed to create waitlist entry: {e}")
            raise DependencyError("No pudimos guardar la espera.", details=str(e)) from e

        logger.info(f"Client {client_id} added to waitlist of appointment {appointment_id} (entry {entry.id})")

        try:
            token = ConfirmationService.issue(db, waitlist_entry_id=entry.id, token_type=TOKEN_TYPE_WAITLIST)
        except SchedulingError as e:
            logger.exception(f"Failed to issue waitlist token for entry {entry.id}: {e}")
            raise PartialFailureError(
                "La espera se creo, pero no pudimos generar la confirmacion.",
                details=e.details or e.message
            ) from e

        return {'message': "Cliente agregado a la lista de espera.", 'entry': entry_snapshot(entry), 'token': token.token}

    @staticmethod
    def update_entry(
        db: Session,
        auth: AuthContext,
        entry_id: Optional[int],
        appointment_id: Optional[int] = None,
        client_id: Optional[int] = None
    ) -> Dict[str, Any]:
        """Move an entry to another appointment and/or client of the company."""
        if not entry_id or (appointment_id is None and client_id is None):
            raise InvalidInputError("Solicitud no valida.")

        try:
            entry = WaitlistService._get_company_entry(db, auth.company_id, entry_id)
            if appointment_id is not None:
                WaitlistService._get_company_appointment(db, auth.company_id, appointment_id)
                entry.appointment_id = appointment_id
            if client_id is not None:
                WaitlistService._get_company_client(db, auth.company_id, client_id)
                entry.client_id = client_id
            db.commit()
            db.refresh(entry)
        except SchedulingError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Failed to update waitlist entry {entry_id}: {e}")
            raise DependencyError("No pudimos actualizar la espera.", details=str(e)) from e

        logger.info(f"Updated waitlist entry {entry_id}")
        return {'message': "Espera actualizada.", 'entry': entry_snapshot(entry)}

    @staticmethod
    def delete_entry(db: Session, auth: AuthContext, entry_id: Optional[int]) -> Dict[str, Any]:
        if not entry_id:
            raise InvalidInputError("Solicitud no valida.")

        try:
            WaitlistService._get_company_entry(db, auth.company_id, entry_id)
            WaitlistService.remove_entry(db, entry_id)
            db.commit()
        except SchedulingError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Failed to delete waitlist entry {entry_id}: {e}")
            raise DependencyError("No pudimos eliminar la espera.", details=str(e)) from e

        logger.info(f"Deleted waitlist entry {entry_id}")
        return {'message': "Espera eliminada.", 'entry_id': entry_id}

    @staticmethod
    def assign(db: Session, auth: AuthContext, entry_id: Optional[int]) -> Dict[str, Any]:
        """
        Hand a freed appointment over to a waiting client.

        The appointment takes the entry's client and goes back to 'pending',
        but only while it is still rejected or cancelled. A fresh confirm
        link is issued for the new client and the entry is removed.

        Args:
            db: Database session
            auth: Authenticated employee context
            entry_id: Waitlist entry to promote

        Returns:
            Dict with 'message', 'token' and 'appointment_id'

        Raises:
            NotFoundError: Entry absent or in another company
            LockedError: The appointment is no longer reassignable
            PartialFailureError: Reassignment committed but a later step failed
        """
        if not entry_id:
            raise InvalidInputError("Solicitud no valida.")

        try:
            entry = WaitlistService._get_company_entry(db, auth.company_id, entry_id)
            appointment_id = entry.appointment_id
            client_id = entry.client_id

            updated = db.query(Appointment).filter(
                Appointment.id == appointment_id,
                Appointment.company_id == auth.company_id,
                Appointment.status.in_(REASSIGNABLE_STATUSES)
            ).update({
                Appointment.client_id: client_id,
                Appointment.status: STATUS_PENDING,
                Appointment.updated_at: utc_now(),
            })
            if updated == 0:
                logger.warning(f"Appointment {appointment_id} not reassignable from waitlist entry {entry_id}")
                raise LockedError("La cita ya no esta disponible para reasignar.")
            db.commit()
        except SchedulingError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Failed to reassign appointment from waitlist entry {entry_id}: {e}")
            raise DependencyError("No pudimos reasignar la cita.", details=str(e)) from e

        logger.info(f"Appointment {appointment_id} reassigned to client {client_id} from waitlist entry {entry_id}")

        try:
            token = ConfirmationService.issue(db, appointment_id=appointment_id, token_type=TOKEN_TYPE_CONFIRM)
        except SchedulingError as e:
            logger.exception(f"Failed to issue confirmation after reassigning appointment {appointment_id}: {e}")
            raise PartialFailureError(
                "La cita se actualizo, pero no pudimos generar la confirmacion.",
                details=e.details or e.message
            ) from e

        try:
            WaitlistService.remove_entry(db, entry_id)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Failed to remove waitlist entry {entry_id} after reassignment: {e}")
            raise PartialFailureError(
                "La cita se asigno, pero no pudimos eliminar la espera.",
                details=str(e)
            ) from e

        return {'message': "Cliente asignado. Confirmacion generada.", 'token': token.token, 'appointment_id': appointment_id}
