"""
Services package for scheduling business logic.

This package contains service classes that encapsulate business logic
shared across multiple API endpoints.
"""

from .availability_service import AvailabilityService
from .conflict_service import ConflictService
from .appointment_service import AppointmentService
from .confirmation_service import ConfirmationService
from .waitlist_service import WaitlistService
from .schedule_service import ScheduleService
from .client_service import ClientService
from .service_catalog_service import ServiceCatalogService
from .employee_service import EmployeeService

__all__ = [
    "AvailabilityService",
    "ConflictService",
    "AppointmentService",
    "ConfirmationService",
    "WaitlistService",
    "ScheduleService",
    "ClientService",
    "ServiceCatalogService",
    "EmployeeService",
]
