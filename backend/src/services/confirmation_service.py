"""
Confirmation token service.

Tokens are single-use credentials shared with clients in confirmation links.
Consumption is one unit of work: the requested transition is applied first
and the conditional ``used_at`` write comes last, so a token is never spent
without its effect and never applied twice.
"""

import logging
import uuid
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, aliased

from auth.context import AuthContext
from core.constants import (
    TOKEN_TYPES, TOKEN_TYPE_CONFIRM, TOKEN_TYPE_WAITLIST, TOKEN_ACTIONS, ACTION_CONFIRM,
    WAITLIST_TOKEN_FALLBACK_HOURS,
)
from core.exceptions import (
    SchedulingError, InvalidInputError, NotFoundError, UsedError, ExpiredError, LockedError,
    DependencyError,
)
from models import Appointment, ConfirmationToken, WaitlistEntry
from services.appointment_service import AppointmentService, appointment_snapshot
from services.notification_service import Notifier, dispatch_notifications
from utils.datetime_utils import utc_now, ensure_utc

logger = logging.getLogger(__name__)


CONSUME_MESSAGES = {
    'confirm': {
        'confirm': "La cita ha sido confirmada.",
        'reject': "La cita ha sido rechazada.",
    },
    'delete': {
        'confirm': "La solicitud de eliminacion ha sido confirmada.",
        'reject': "La solicitud de eliminacion ha sido rechazada.",
    },
    'waitlist': {
        'confirm': "La solicitud de lista de espera ha sido confirmada.",
        'reject': "La solicitud de lista de espera ha sido rechazada.",
    },
    'change': {
        'confirm': "La solicitud de modificacion ha sido confirmada.",
        'reject': "La solicitud de modificacion ha sido rechazada.",
    },
}

CONFIRMATIONS_LIST_LIMIT = 500


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return ensure_utc(value).isoformat() if value is not None else None


def is_expired(expires_at: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """A token without an expiry counts as expired."""
    if expires_at is None:
        return True
    return (now or utc_now()) > ensure_utc(expires_at)


class ConfirmationService:
    """Service class for confirmation token operations."""

    @staticmethod
    def generate_token() -> str:
        return str(uuid.uuid4())

    @staticmethod
    def issue(
        db: Session,
        appointment_id: Optional[int] = None,
        waitlist_entry_id: Optional[int] = None,
        token_type: str = TOKEN_TYPE_CONFIRM,
        expires_at: Optional[datetime] = None,
        commit: bool = True
    ) -> ConfirmationToken:
        """
        Issue a new token bound to an appointment or a waitlist entry.

        Appointment tokens expire at the appointment start by default.
        Waitlist tokens expire at the start of the entry's appointment, or
        24 hours from now when that is unknown. Issuing a 'confirm' token
        revokes every earlier unused 'confirm' token of the same appointment
        in the same transaction.

        Args:
            db: Database session
            appointment_id: Appointment to bind (all types except 'waitlist')
            waitlist_entry_id: Waitlist entry to bind ('waitlist' type only)
            token_type: 'confirm', 'delete', 'change' or 'waitlist'
            expires_at: Explicit expiry overriding the default
            commit: Commit the transaction (False leaves it flushed only)

        Returns:
            The new ConfirmationToken row

        Raises:
            InvalidInputError: Unknown type or wrong binding for the type
            NotFoundError: Appointment or entry does not exist
            DependencyError: Store failure
        """
        if token_type not in TOKEN_TYPES:
            raise InvalidInputError("Tipo de confirmacion no valido.")
        if token_type == TOKEN_TYPE_WAITLIST:
            if waitlist_entry_id is None or appointment_id is not None:
                raise InvalidInputError("Solicitud no valida.")
        elif appointment_id is None or waitlist_entry_id is not None:
            raise InvalidInputError("Solicitud no valida.")

        try:
            if token_type == TOKEN_TYPE_WAITLIST:
                entry = db.query(WaitlistEntry).filter(WaitlistEntry.id == waitlist_entry_id).first()
                if not entry:
                    raise NotFoundError("Espera no encontrada.")
                if expires_at is None:
                    slot_start = entry.appointment.start_time if entry.appointment else None
                    expires_at = slot_start or utc_now() + timedelta(hours=WAITLIST_TOKEN_FALLBACK_HOURS)
            else:
                appointment = db.query(Appointment).filter(Appointment.id == appointment_id).first()
                if not appointment:
                    raise NotFoundError("Cita no encontrada.")
                if expires_at is None:
                    expires_at = appointment.start_time
                if token_type == TOKEN_TYPE_CONFIRM:
                    ConfirmationService.revoke_confirm_tokens(db, appointment_id)

            token = ConfirmationToken(
                token=ConfirmationService.generate_token(),
                type=token_type,
                appointment_id=appointment_id,
                waitlist_entry_id=waitlist_entry_id,
                expires_at=ensure_utc(expires_at),
                used_at=None
            )
            db.add(token)
            if commit:
                db.commit()
            else:
                db.flush()
        except SchedulingError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Failed to issue {token_type} token: {e}")
            raise DependencyError("No pudimos generar la confirmacion.", details=str(e)) from e

        logger.info(
            f"Issued {token_type} token {token.id} for "
            f"{'appointment ' + str(appointment_id) if appointment_id else 'waitlist entry ' + str(waitlist_entry_id)}"
        )
        return token

    @staticmethod
    def revoke_confirm_tokens(db: Session, appointment_id: int) -> int:
        """Mark unused 'confirm' tokens of an appointment as used. Does not commit."""
        revoked = db.query(ConfirmationToken).filter(
            ConfirmationToken.appointment_id == appointment_id,
            ConfirmationToken.type == TOKEN_TYPE_CONFIRM,
            ConfirmationToken.used_at.is_(None)
        ).update({ConfirmationToken.used_at: utc_now()}, synchronize_session=False)
        if revoked:
            logger.info(f"Revoked {revoked} previous confirm token(s) of appointment {appointment_id}")
        return revoked

    @staticmethod
    def _normalize_request(token: Optional[str], token_type: Optional[str]) -> tuple[str, str]:
        token_value = token.strip() if isinstance(token, str) else ""
        if not token_value:
            raise InvalidInputError("Token no valido.")
        type_value = token_type.strip().lower() if isinstance(token_type, str) and token_type.strip() else TOKEN_TYPE_CONFIRM
        if type_value not in TOKEN_TYPES:
            raise InvalidInputError("Tipo de confirmacion no valido.")
        return token_value, type_value

    @staticmethod
    def _load_valid_token(db: Session, token: str, token_type: str) -> ConfirmationToken:
        """
        Raises:
            NotFoundError: No token of that value and type
            UsedError: Already consumed or revoked
            ExpiredError: Past (or missing) expiry
        """
        row = db.query(ConfirmationToken).filter(
            ConfirmationToken.token == token,
            ConfirmationToken.type == token_type
        ).first()
        if not row:
            raise NotFoundError("Token no encontrado.")
        if row.used_at is not None:
            raise UsedError()
        if is_expired(row.expires_at):
            raise ExpiredError()
        return row

    @staticmethod
    def _token_snapshot(row: ConfirmationToken) -> Dict[str, Any]:
        snapshot: Dict[str, Any] = {
            'token_id': row.id,
            'type': row.type,
            'expires_at': _isoformat(row.expires_at),
            'appointment': None,
            'waitlist_entry': None,
        }
        if row.appointment is not None:
            snapshot['appointment'] = appointment_snapshot(row.appointment)
        if row.waitlist_entry is not None:
            entry = row.waitlist_entry
            snapshot['waitlist_entry'] = {
                'id': entry.id,
                'client': {'id': entry.client.id, 'name': entry.client.name, 'phone': entry.client.phone}
                if entry.client else None,
            }
            if entry.appointment is not None:
                snapshot['appointment'] = appointment_snapshot(entry.appointment)
        return snapshot

    @staticmethod
    def resolve(db: Session, token: Optional[str], token_type: Optional[str] = None) -> Dict[str, Any]:
        """
        Look up a token for display on the confirmation page.

        Returns:
            Snapshot with the bound appointment (client, service, employee)
            and, for waitlist tokens, the entry

        Raises:
            InvalidInputError, NotFoundError, UsedError, ExpiredError, DependencyError
        """
        token_value, type_value = ConfirmationService._normalize_request(token, token_type)
        try:
            row = ConfirmationService._load_valid_token(db, token_value, type_value)
            return ConfirmationService._token_snapshot(row)
        except SQLAlchemyError as e:
            logger.exception(f"Failed to resolve confirmation token: {e}")
            raise DependencyError("No pudimos validar la cita.", details=str(e)) from e

    @staticmethod
    def _mark_used(db: Session, token_id: int) -> bool:
        """Conditional used_at write. False when another request consumed it first."""
        updated = db.query(ConfirmationToken).filter(
            ConfirmationToken.id == token_id,
            ConfirmationToken.used_at.is_(None)
        ).update({ConfirmationToken.used_at: utc_now()})
        return updated > 0

    @staticmethod
    def _is_spent(db: Session, token_id: int) -> bool:
        used_at = db.query(ConfirmationToken.used_at).filter(ConfirmationToken.id == token_id).scalar()
        return used_at is not None

    @staticmethod
    def consume(
        db: Session,
        token: Optional[str],
        token_type: Optional[str],
        action: Optional[str],
        notifier: Optional[Notifier] = None
    ) -> Dict[str, Any]:
        """
        Apply the client's answer to a confirmation link.

        Args:
            db: Database session
            token: Token value from the link
            token_type: Token type (defaults to 'confirm')
            action: 'confirm' or 'reject'
            notifier: Receives the resulting events after the commit

        Returns:
            Dict with 'status' ('confirmed' or 'rejected') and 'message'

        Raises:
            InvalidInputError: Missing token, unknown type or action
            NotFoundError: Unknown token, or its appointment/entry is gone
            UsedError: Already consumed, including by a concurrent request
            ExpiredError: Past its expiry
            LockedError: The appointment is completed or changed concurrently
            DependencyError: Store failure; nothing is persisted
        """
        token_value, type_value = ConfirmationService._normalize_request(token, token_type)
        if action not in TOKEN_ACTIONS:
            raise InvalidInputError("Accion no valida.")

        try:
            row = ConfirmationService._load_valid_token(db, token_value, type_value)
            token_id = row.id
            try:
                notifications = AppointmentService.apply_token_action(db, row, action)
            except LockedError:
                # A concurrent consume of the same token moves the appointment first
                db.rollback()
                if ConfirmationService._is_spent(db, token_id):
                    logger.warning(f"Token {token_id} consumed concurrently")
                    raise UsedError()
                raise
            if not ConfirmationService._mark_used(db, row.id):
                logger.warning(f"Token {row.id} consumed concurrently")
                raise UsedError()
            db.commit()
        except SchedulingError:
            db.rollback()
            raise
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"Failed to consume confirmation token: {e}")
            raise DependencyError("No pudimos actualizar la cita.", details=str(e)) from e

        logger.info(f"Token {row.id} ({type_value}) consumed with action {action}")
        dispatch_notifications(notifier, notifications)

        return {
            'status': 'confirmed' if action == ACTION_CONFIRM else 'rejected',
            'message': CONSUME_MESSAGES[type_value][action],
        }

    @staticmethod
    def list_for_scope(db: Session, auth: AuthContext, limit: int = CONFIRMATIONS_LIST_LIMIT) -> List[Dict[str, Any]]:
        """
        Tokens visible to the caller, newest first.

        A boss sees every token of the company; staff see the tokens of their
        own appointments. Waitlist tokens are scoped through the entry's
        appointment.
        """
        entry_appointment = aliased(Appointment)
        field, value = auth.scope

        try:
            rows = db.query(ConfirmationToken).outerjoin(
                Appointment, ConfirmationToken.appointment_id == Appointment.id
            ).outerjoin(
                WaitlistEntry, ConfirmationToken.waitlist_entry_id == WaitlistEntry.id
            ).outerjoin(
                entry_appointment, WaitlistEntry.appointment_id == entry_appointment.id
            ).filter(
                or_(
                    getattr(Appointment, field) == value,
                    getattr(entry_appointment, field) == value
                )
            ).order_by(
                ConfirmationToken.created_at.desc(), ConfirmationToken.id.desc()
            ).limit(limit).all()
        except SQLAlchemyError as e:
            logger.exception(f"Failed to list confirmations: {e}")
            raise DependencyError("No pudimos cargar las confirmaciones.", details=str(e)) from e

        results = []
        for row in rows:
            snapshot = ConfirmationService._token_snapshot(row)
            snapshot.update({
                'token': row.token,
                'used_at': _isoformat(row.used_at),
                'created_at': _isoformat(row.created_at),
            })
            results.append(snapshot)
        return results
