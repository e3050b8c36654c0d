"""
Shared response models for API endpoints.

Every body carries ``status`` ("ok", or the outcome/error kind) and, where
useful to the caller, a human-readable ``message``.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class StatusResponse(BaseModel):
    """Bare acknowledgement."""
    status: str = "ok"
    message: Optional[str] = None


class EmployeeSummary(BaseModel):
    id: int
    name: str


class ClientSummary(BaseModel):
    id: int
    name: str
    phone: Optional[str] = None


class ServiceSummary(BaseModel):
    id: int
    name: str
    duration_minutes: Optional[int] = None


class AppointmentSnapshot(BaseModel):
    """Appointment with the people and service it involves."""
    id: int
    company_id: int
    status: str
    start_time: datetime
    end_time: datetime
    title: Optional[str] = None
    description: Optional[str] = None
    employee: Optional[EmployeeSummary] = None
    client: Optional[ClientSummary] = None
    service: Optional[ServiceSummary] = None


class AppointmentRef(BaseModel):
    id: int
    start_time: datetime


class AppointmentCreateResponse(BaseModel):
    """Response model for a new booking."""
    status: str = "ok"
    message: Optional[str] = None
    token: str
    """Token for the client's confirmation link."""
    appointment: AppointmentRef


class AppointmentStatusResponse(BaseModel):
    """Response model for a staff status change."""
    status: str = "ok"
    message: Optional[str] = None
    appointment_id: int
    appointment_status: str


class UpcomingAppointmentsResponse(BaseModel):
    status: str = "ok"
    appointments: List[AppointmentSnapshot]


class WaitlistEntrySummary(BaseModel):
    id: int
    client: Optional[ClientSummary] = None


class ConfirmationSnapshot(BaseModel):
    """What a confirmation link points at."""
    token_id: int
    type: str
    expires_at: Optional[datetime] = None
    appointment: Optional[AppointmentSnapshot] = None
    waitlist_entry: Optional[WaitlistEntrySummary] = None


class ConfirmationResolveResponse(ConfirmationSnapshot):
    status: str = "ok"


class ConfirmationResultResponse(BaseModel):
    """Outcome of answering a link: status is 'confirmed' or 'rejected'."""
    status: str
    message: str


class ConfirmationListItem(ConfirmationSnapshot):
    token: str
    used_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class ConfirmationListResponse(BaseModel):
    status: str = "ok"
    confirmations: List[ConfirmationListItem]


class WaitlistEntryResponse(BaseModel):
    id: int
    appointment_id: int
    client_id: int
    client: Optional[ClientSummary] = None
    appointment: Optional[AppointmentSnapshot] = None
    created_at: Optional[datetime] = None


class WaitlistListResponse(BaseModel):
    status: str = "ok"
    entries: List[WaitlistEntryResponse]


class WaitlistEntryMutationResponse(BaseModel):
    status: str = "ok"
    message: Optional[str] = None
    entry: WaitlistEntryResponse
    token: Optional[str] = None
    """Waitlist link token, set when the entry is created."""


class WaitlistAssignResponse(BaseModel):
    status: str = "ok"
    message: str
    token: str
    appointment_id: int


class ScheduleEntryResponse(BaseModel):
    id: int
    employee_id: int
    day_of_week: int
    entry_time: Optional[str] = None
    exit_time: Optional[str] = None
    break_start: Optional[str] = None
    break_end: Optional[str] = None


class ScheduleListResponse(BaseModel):
    status: str = "ok"
    schedule: List[ScheduleEntryResponse]


class VacationResponse(BaseModel):
    id: int
    employee_id: int
    start_date: str
    end_date: Optional[str] = None


class VacationListResponse(BaseModel):
    status: str = "ok"
    vacations: List[VacationResponse]


class ClientResponse(BaseModel):
    id: int
    name: str
    phone: Optional[str] = None


class ClientListResponse(BaseModel):
    status: str = "ok"
    clients: List[ClientResponse]


class ClientMutationResponse(BaseModel):
    status: str = "ok"
    client: ClientResponse


class PricedServiceSummary(ServiceSummary):
    price: Optional[float] = None


class ClientHistoryItem(BaseModel):
    """Past or upcoming appointment of a client."""
    id: int
    status: str
    start_time: datetime
    end_time: datetime
    service: Optional[PricedServiceSummary] = None
    employee: Optional[EmployeeSummary] = None


class ClientHistoryResponse(BaseModel):
    status: str = "ok"
    history: List[ClientHistoryItem]


class AssignedEmployee(BaseModel):
    id: int
    name: str
    email: Optional[str] = None


class CatalogServiceResponse(BaseModel):
    id: int
    name: str
    duration_minutes: Optional[int] = None
    price: Optional[float] = None
    employees: List[AssignedEmployee] = []


class CatalogListResponse(BaseModel):
    status: str = "ok"
    services: List[CatalogServiceResponse]


class CatalogMutationResponse(BaseModel):
    status: str = "ok"
    service: CatalogServiceResponse


class EmployeeResponse(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    dni: Optional[str] = None
    role: str
    active: bool


class EmployeeListResponse(BaseModel):
    status: str = "ok"
    employees: List[EmployeeResponse]


class EmployeeMutationResponse(BaseModel):
    status: str = "ok"
    employee: EmployeeResponse


class EmployeeDetailsResponse(BaseModel):
    status: str = "ok"
    schedule: List[ScheduleEntryResponse]
    vacations: List[VacationResponse]
