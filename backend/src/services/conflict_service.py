"""
Duplicate booking guard.

Only exact duplicates are rejected: the same client booked with the same
employee for the same service at the same instant. Partial overlaps with
other appointments of the employee are not checked.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from core.constants import DUPLICATE_BLOCKING_STATUSES
from core.exceptions import ConflictError
from models import Appointment

logger = logging.getLogger(__name__)


class ConflictService:
    """Service class for duplicate booking detection."""

    @staticmethod
    def find_duplicate_booking(
        db: Session,
        company_id: int,
        employee_id: int,
        client_id: int,
        service_id: int,
        start_time: datetime
    ) -> Optional[Appointment]:
        """
        Find an active appointment identical to the candidate booking.

        Rejected and cancelled appointments do not block a rebooking.
        """
        return db.query(Appointment).filter(
            Appointment.company_id == company_id,
            Appointment.employee_id == employee_id,
            Appointment.client_id == client_id,
            Appointment.service_id == service_id,
            Appointment.start_time == start_time,
            Appointment.status.in_(DUPLICATE_BLOCKING_STATUSES)
        ).first()

    @staticmethod
    def ensure_no_duplicate_booking(
        db: Session,
        company_id: int,
        employee_id: int,
        client_id: int,
        service_id: int,
        start_time: datetime
    ) -> None:
        """
        Raises:
            ConflictError: If an identical active appointment exists
        """
        existing = ConflictService.find_duplicate_booking(
            db, company_id, employee_id, client_id, service_id, start_time
        )
        if existing:
            logger.warning(
                f"Duplicate booking rejected: appointment {existing.id} already holds "
                f"employee {employee_id}, client {client_id}, service {service_id} at {start_time}"
            )
            raise ConflictError()
