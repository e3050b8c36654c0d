"""
Service catalog management.

A boss maintains the company's bookable services: name, duration, price and
the employee who performs each one. Every employee can read the catalog.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from auth.context import AuthContext
from core.exceptions import InvalidInputError, ForbiddenError, NotFoundError, DependencyError
from models import Employee, Service, ServiceEmployee
from services.client_service import normalize_text

logger = logging.getLogger(__name__)


def service_snapshot(service: Service) -> Dict[str, Any]:
    return {
        'id': service.id,
        'name': service.name,
        'duration_minutes': service.duration_minutes,
        'price': float(service.price) if service.price is not None else None,
        'employees': [
            {'id': employee.id, 'name': employee.name, 'email': employee.email}
            for employee in service.employees
        ],
    }


def _parse_duration(value: Any) -> int:
    """Positive whole number of minutes."""
    if isinstance(value, bool):
        raise InvalidInputError("La duracion debe ser un numero mayor que 0.")
    try:
        duration = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise InvalidInputError("La duracion debe ser un numero mayor que 0.") from e
    if not duration.is_finite() or duration <= 0 or duration != duration.to_integral_value():
        raise InvalidInputError("La duracion debe ser un numero mayor que 0.")
    return int(duration)


def _parse_price(value: Any) -> Decimal:
    if isinstance(value, bool) or value is None:
        raise InvalidInputError("El precio debe ser un numero valido.")
    try:
        price = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise InvalidInputError("El precio debe ser un numero valido.") from e
    if not price.is_finite() or price < 0:
        raise InvalidInputError("El precio debe ser un numero valido.")
    return price


class ServiceCatalogService:
    """Service class for the company's service catalog."""

    @staticmethod
    def _require_boss(auth: AuthContext) -> None:
        if not auth.is_boss():
            logger.warning(f"Employee {auth.employee_id} tried to edit the service catalog")
            raise ForbiddenError("Solo el jefe puede crear o editar servicios.")

    @staticmethod
    def _validate(db: Session, auth: AuthContext, name: Any, duration: Any, price: Any, employee_id: Optional[int]) -> tuple[str, int, Decimal]:
        name_value = normalize_text(name)
        if not name_value:
            raise InvalidInputError("El nombre es obligatorio.")
        duration_value = _parse_duration(duration)
        price_value = _parse_price(price)

        employee = None
        if employee_id:
            employee = db.query(Employee).filter(
                Employee.id == employee_id,
                Employee.company_id == auth.company_id
            ).first()
        if not employee:
            raise InvalidInputError("Selecciona el empleado al que se asigna el servicio.")
        return name_value, duration_value, price_value

    @staticmethod
    def _commit(db: Session, failure_message: str) -> None:
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"{failure_message}: {e}")
            raise DependencyError(failure_message, details=str(e)) from e

    @staticmethod
    def list_services(db: Session, auth: AuthContext) -> List[Dict[str, Any]]:
        services = db.query(Service).options(
            selectinload(Service.employees)
        ).filter(
            Service.company_id == auth.company_id
        ).order_by(Service.name, Service.id).all()
        return [service_snapshot(service) for service in services]

    @staticmethod
    def create_service(
        db: Session,
        auth: AuthContext,
        name: Any,
        duration: Any,
        price: Any,
        employee_id: Optional[int]
    ) -> Dict[str, Any]:
        """
        Add a service and assign it to one employee.

        Raises:
            ForbiddenError: Caller is not a boss
            InvalidInputError: Empty name, non-positive duration, negative
                price, or an employee outside the company
            DependencyError: Store failure
        """
        ServiceCatalogService._require_boss(auth)
        name_value, duration_value, price_value = ServiceCatalogService._validate(
            db, auth, name, duration, price, employee_id
        )

        service = Service(
            company_id=auth.company_id,
            name=name_value,
            duration_minutes=duration_value,
            price=price_value
        )
        service.employee_links.append(ServiceEmployee(employee_id=employee_id))
        db.add(service)
        ServiceCatalogService._commit(db, "No pudimos guardar el servicio.")
        db.refresh(service)
        logger.info(f"Created service {service.id} ({duration_value} min) assigned to employee {employee_id}")
        return service_snapshot(service)

    @staticmethod
    def update_service(
        db: Session,
        auth: AuthContext,
        service_id: Optional[int],
        name: Any,
        duration: Any,
        price: Any,
        employee_id: Optional[int]
    ) -> Dict[str, Any]:
        """
        Replace a service's fields and its employee assignment.

        Appointments already booked keep their stored end time.

        Raises:
            ForbiddenError: Caller is not a boss
            InvalidInputError: Missing id or invalid fields
            NotFoundError: Service not in the caller's company
        """
        ServiceCatalogService._require_boss(auth)
        if not service_id:
            raise InvalidInputError("Selecciona un servicio para editar.")
        name_value, duration_value, price_value = ServiceCatalogService._validate(
            db, auth, name, duration, price, employee_id
        )

        service = db.query(Service).filter(
            Service.id == service_id,
            Service.company_id == auth.company_id
        ).first()
        if not service:
            raise NotFoundError("Servicio no encontrado.")

        service.name = name_value
        service.duration_minutes = duration_value
        service.price = price_value
        service.employee_links.clear()
        db.flush()
        service.employee_links.append(ServiceEmployee(employee_id=employee_id))
        ServiceCatalogService._commit(db, "No pudimos guardar el servicio.")
        db.refresh(service)
        logger.info(f"Updated service {service.id}, now assigned to employee {employee_id}")
        return service_snapshot(service)
