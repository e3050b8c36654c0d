"""
Test configuration and shared fixtures for the Agenda test suite.

Each test gets a fresh in-memory SQLite database built from the model
metadata, so tests are isolated without a running PostgreSQL server.
"""

import os

# Must be set before core.config is imported anywhere
os.environ["DATABASE_URL"] = os.getenv("TEST_DATABASE_URL", "sqlite://")
os.environ.setdefault("WEBHOOK_URL", "")

import pytest
from datetime import date, datetime, time, timedelta, timezone
from typing import Any, Dict, Generator, List, Optional, Tuple

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from core.database import Base, get_db
from auth.dependencies import AuthContext, get_current_employee
from services.notification_service import Notifier, get_notifier

# Import all models to ensure they're registered with SQLAlchemy before any relationships are resolved
from models import (
    Company, Employee, Client, Service, Appointment,
    EmployeeSchedule, EmployeeVacation, WaitlistEntry, ConfirmationToken, ServiceEmployee,
)


TEST_DATABASE_URL = os.environ["DATABASE_URL"]


class RecordingNotifier(Notifier):
    """Notifier that keeps events in memory instead of posting them."""

    def __init__(self):
        self.events: List[Tuple[str, Dict[str, Any]]] = []

    def notify(self, event: str, payload: Dict[str, Any]) -> None:
        self.events.append((event, payload))


@pytest.fixture(scope="function")
def db_engine():
    """
    Create a fresh database for the test.

    StaticPool keeps the single in-memory connection alive so the TestClient
    thread and the test see the same database.
    """
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine = create_engine(
            TEST_DATABASE_URL,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(TEST_DATABASE_URL)

    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Provide a database session configured like the application's."""
    TestSession = sessionmaker(bind=db_engine, autoflush=False, expire_on_commit=False)
    session = TestSession()

    yield session

    session.rollback()
    session.close()


@pytest.fixture
def recording_notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def app_client(db_session, recording_notifier) -> Generator[TestClient, None, None]:
    """TestClient bound to the test session and the recording notifier."""
    from main import app

    def override_get_db() -> Generator[Session, None, None]:
        # The session is managed by the db_session fixture
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: recording_notifier

    yield TestClient(app)

    app.dependency_overrides.clear()


def auth_context_for(employee: Employee) -> AuthContext:
    return AuthContext(
        employee_id=employee.id,
        company_id=employee.company_id,
        role=employee.role,
        name=employee.name
    )


def authenticate_as(employee: Employee) -> AuthContext:
    """Make subsequent API requests act as ``employee``."""
    from main import app

    context = auth_context_for(employee)
    app.dependency_overrides[get_current_employee] = lambda: context
    return context


def next_weekday(iso_day: int = 1, min_days_ahead: int = 7) -> date:
    """First date at least ``min_days_ahead`` days from today falling on ``iso_day``."""
    start = date.today() + timedelta(days=min_days_ahead)
    return start + timedelta(days=(iso_day - start.isoweekday()) % 7)


# Helper functions for creating records

def create_company(db_session: Session, name: str = "Barberia Centro") -> Company:
    company = Company(name=name)
    db_session.add(company)
    db_session.commit()
    return company


def create_employee(
    db_session: Session,
    company: Company,
    name: str,
    role: str = "staff",
    user_id: Optional[str] = None,
    phone: Optional[str] = None
) -> Employee:
    employee = Employee(
        company_id=company.id,
        name=name,
        role=role,
        user_id=user_id,
        phone=phone,
        email=f"{name.lower().replace(' ', '.')}@example.com"
    )
    db_session.add(employee)
    db_session.commit()
    return employee


def create_client(db_session: Session, company: Company, name: str, phone: str = "+5215500000000") -> Client:
    client = Client(company_id=company.id, name=name, phone=phone)
    db_session.add(client)
    db_session.commit()
    return client


def create_service(
    db_session: Session,
    company: Company,
    name: str = "Corte",
    duration_minutes: Optional[int] = 60
) -> Service:
    service = Service(company_id=company.id, name=name, duration_minutes=duration_minutes, price=150)
    db_session.add(service)
    db_session.commit()
    return service


def create_schedule(
    db_session: Session,
    employee: Employee,
    day_of_week: int,
    entry_time: Optional[time] = time(9, 0),
    exit_time: Optional[time] = time(17, 0),
    break_start: Optional[time] = time(12, 0),
    break_end: Optional[time] = time(13, 0)
) -> EmployeeSchedule:
    entry = EmployeeSchedule(
        company_id=employee.company_id,
        employee_id=employee.id,
        day_of_week=day_of_week,
        entry_time=entry_time,
        exit_time=exit_time,
        break_start=break_start,
        break_end=break_end
    )
    db_session.add(entry)
    db_session.commit()
    return entry


def create_vacation(
    db_session: Session,
    employee: Employee,
    start_date: date,
    end_date: Optional[date] = None
) -> EmployeeVacation:
    vacation = EmployeeVacation(
        company_id=employee.company_id,
        employee_id=employee.id,
        start_date=start_date,
        end_date=end_date
    )
    db_session.add(vacation)
    db_session.commit()
    return vacation


def create_appointment_row(
    db_session: Session,
    employee: Employee,
    client: Client,
    service: Service,
    start_time: datetime,
    status: str = "pending"
) -> Appointment:
    """Insert an appointment directly, bypassing booking validation."""
    appointment = Appointment(
        company_id=employee.company_id,
        employee_id=employee.id,
        client_id=client.id,
        service_id=service.id,
        start_time=start_time,
        end_time=start_time + timedelta(minutes=service.duration_minutes or 60),
        status=status
    )
    db_session.add(appointment)
    db_session.commit()
    return appointment


def create_token_row(
    db_session: Session,
    token: str,
    token_type: str = "confirm",
    appointment: Optional[Appointment] = None,
    waitlist_entry: Optional[WaitlistEntry] = None,
    expires_at: Optional[datetime] = None,
    used_at: Optional[datetime] = None
) -> ConfirmationToken:
    row = ConfirmationToken(
        token=token,
        type=token_type,
        appointment_id=appointment.id if appointment else None,
        waitlist_entry_id=waitlist_entry.id if waitlist_entry else None,
        expires_at=expires_at if expires_at is not None else datetime.now(timezone.utc) + timedelta(days=1),
        used_at=used_at
    )
    db_session.add(row)
    db_session.commit()
    return row


def create_waitlist_entry(db_session: Session, appointment: Appointment, client: Client) -> WaitlistEntry:
    entry = WaitlistEntry(appointment_id=appointment.id, client_id=client.id)
    db_session.add(entry)
    db_session.commit()
    return entry


def local_instant(on: date, at: time) -> datetime:
    """UTC instant of a local wall-clock time booked with offset 0."""
    return datetime.combine(on, at, tzinfo=timezone.utc)


def booking_payload(
    employee: Employee,
    client: Client,
    service: Service,
    on: date,
    at: str = "10:00",
    timezone_offset: Any = 0,
    **extra: Any
) -> Dict[str, Any]:
    payload = {
        "employee_id": employee.id,
        "client_id": client.id,
        "service_id": service.id,
        "date": on.isoformat(),
        "time": at,
        "timezone_offset": timezone_offset,
    }
    payload.update(extra)
    return payload


# Shared tenant fixtures

@pytest.fixture
def company(db_session) -> Company:
    return create_company(db_session)


@pytest.fixture
def other_company(db_session) -> Company:
    return create_company(db_session, name="Estetica Norte")


@pytest.fixture
def boss(db_session, company) -> Employee:
    return create_employee(db_session, company, "Laura Jefa", role="boss", user_id="user-boss")


@pytest.fixture
def staff(db_session, company) -> Employee:
    return create_employee(db_session, company, "Pedro Staff", role="staff", user_id="user-staff")


@pytest.fixture
def other_staff(db_session, company) -> Employee:
    return create_employee(db_session, company, "Ana Staff", role="staff", user_id="user-ana")


@pytest.fixture
def customer(db_session, company) -> Client:
    return create_client(db_session, company, "Carlos Cliente", phone="+5215511111111")


@pytest.fixture
def second_customer(db_session, company) -> Client:
    return create_client(db_session, company, "Diana Cliente", phone="+5215522222222")


@pytest.fixture
def service(db_session, company) -> Service:
    return create_service(db_session, company)


@pytest.fixture
def work_day() -> date:
    """A Monday at least a week away."""
    return next_weekday(1)


@pytest.fixture
def staff_schedule(db_session, staff, work_day) -> EmployeeSchedule:
    """09:00-17:00 with a 12:00-13:00 break on ``work_day``'s weekday."""
    return create_schedule(db_session, staff, work_day.isoweekday())
