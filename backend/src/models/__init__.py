# Package initialization
# Import all models to ensure relationships are properly established
from .company import Company
from .employee import Employee
from .client import Client
from .service import Service
from .appointment import Appointment
from .employee_schedule import EmployeeSchedule
from .employee_vacation import EmployeeVacation
from .waitlist_entry import WaitlistEntry
from .confirmation_token import ConfirmationToken
from .service_employee import ServiceEmployee

__all__ = [
    "Company",
    "Employee",
    "Client",
    "Service",
    "Appointment",
    "EmployeeSchedule",
    "EmployeeVacation",
    "WaitlistEntry",
    "ConfirmationToken",
    "ServiceEmployee",
]
