"""
Client service for the company's client book.

Any employee of the company can add and edit clients and read a client's
appointment history.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from auth.context import AuthContext
from core.exceptions import InvalidInputError, NotFoundError, DependencyError
from models import Appointment, Client
from utils.datetime_utils import ensure_utc

logger = logging.getLogger(__name__)


def normalize_text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def client_snapshot(client: Client) -> Dict[str, Any]:
    return {
        'id': client.id,
        'name': client.name,
        'phone': client.phone,
    }


def _history_item(appointment: Appointment) -> Dict[str, Any]:
    service = appointment.service
    employee = appointment.employee
    return {
        'id': appointment.id,
        'status': appointment.status,
        'start_time': ensure_utc(appointment.start_time).isoformat(),
        'end_time': ensure_utc(appointment.end_time).isoformat(),
        'service': {
            'id': service.id,
            'name': service.name,
            'duration_minutes': service.duration_minutes,
            'price': float(service.price) if service.price is not None else None,
        } if service else None,
        'employee': {'id': employee.id, 'name': employee.name} if employee else None,
    }


class ClientService:
    """Service class for client operations."""

    @staticmethod
    def _get_company_client(db: Session, company_id: int, client_id: Optional[int]) -> Client:
        if not client_id:
            raise InvalidInputError("Selecciona un cliente para editar.")
        client = db.query(Client).filter(
            Client.id == client_id,
            Client.company_id == company_id
        ).first()
        if not client:
            raise NotFoundError("Cliente no encontrado.")
        return client

    @staticmethod
    def _commit(db: Session, failure_message: str) -> None:
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"{failure_message}: {e}")
            raise DependencyError(failure_message, details=str(e)) from e

    @staticmethod
    def list_clients(db: Session, auth: AuthContext) -> List[Dict[str, Any]]:
        clients = db.query(Client).filter(
            Client.company_id == auth.company_id
        ).order_by(Client.name, Client.id).all()
        return [client_snapshot(client) for client in clients]

    @staticmethod
    def create_client(db: Session, auth: AuthContext, name: Any, phone: Any = None) -> Dict[str, Any]:
        """
        Add a client to the caller's company.

        Raises:
            InvalidInputError: Empty name
            DependencyError: Store failure
        """
        name_value = normalize_text(name)
        if not name_value:
            raise InvalidInputError("El nombre es obligatorio.")

        client = Client(
            company_id=auth.company_id,
            name=name_value,
            phone=normalize_text(phone) or None
        )
        db.add(client)
        ClientService._commit(db, "No pudimos crear el cliente.")
        logger.info(f"Employee {auth.employee_id} created client {client.id}")
        return client_snapshot(client)

    @staticmethod
    def update_client(db: Session, auth: AuthContext, client_id: Optional[int], name: Any, phone: Any = None) -> Dict[str, Any]:
        """
        Replace a client's name and phone. An empty phone clears it.

        Raises:
            InvalidInputError: Missing id or empty name
            NotFoundError: Client not in the caller's company
        """
        client = ClientService._get_company_client(db, auth.company_id, client_id)
        name_value = normalize_text(name)
        if not name_value:
            raise InvalidInputError("El nombre es obligatorio.")

        client.name = name_value
        client.phone = normalize_text(phone) or None
        ClientService._commit(db, "No pudimos actualizar el cliente.")
        logger.info(f"Employee {auth.employee_id} updated client {client.id}")
        return client_snapshot(client)

    @staticmethod
    def client_history(db: Session, auth: AuthContext, client_id: Optional[int]) -> List[Dict[str, Any]]:
        """Every appointment of the client, most recent first."""
        client = ClientService._get_company_client(db, auth.company_id, client_id)
        try:
            appointments = db.query(Appointment).options(
                joinedload(Appointment.service),
                joinedload(Appointment.employee),
            ).filter(
                Appointment.client_id == client.id,
                Appointment.company_id == auth.company_id
            ).order_by(Appointment.start_time.desc(), Appointment.id.desc()).all()
        except SQLAlchemyError as e:
            logger.exception(f"Failed to load history of client {client.id}: {e}")
            raise DependencyError("No pudimos cargar el historial.", details=str(e)) from e

        return [_history_item(appointment) for appointment in appointments]
