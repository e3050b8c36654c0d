"""
Appointment model representing a booked slot of an employee's time.

Start and end are absolute UTC instants. The end is always the start plus the
service duration, on the same local calendar day the booking was made for.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, ForeignKey, Index, TIMESTAMP, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class Appointment(Base):
    """
    Appointment between a client and an employee for a service.

    Status lifecycle:
    - 'pending': created, waiting for the client's confirmation link
    - 'confirmed' / 'rejected': answered through the link or set by staff
    - 'cancelled': cancellation confirmed; the slot can be reassigned
    - 'completed': locked, no further transitions
    """

    __tablename__ = "appointments"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id", ondelete="CASCADE"))
    """Tenant that owns the appointment."""

    employee_id: Mapped[int] = mapped_column(ForeignKey("employees.id"))
    client_id: Mapped[int] = mapped_column(ForeignKey("clients.id"))
    service_id: Mapped[int] = mapped_column(ForeignKey("services.id"))

    start_time: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True))
    """Absolute start instant (UTC)."""

    end_time: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True))
    """Absolute end instant (UTC), start plus the service duration."""

    title: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(String(1000), nullable=True)

    status: Mapped[str] = mapped_column(String(20), default="pending")
    """One of 'pending', 'confirmed', 'rejected', 'completed', 'cancelled'."""

    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    employee = relationship("Employee")
    client = relationship("Client")
    service = relationship("Service")
    waitlist_entries = relationship("WaitlistEntry", back_populates="appointment")

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'rejected', 'completed', 'cancelled')",
            name="check_valid_appointment_status"
        ),
        CheckConstraint("end_time > start_time", name="check_appointment_time_range"),
        # Duplicate guard and duplicate cleanup lookups
        Index("idx_appointments_slot", "company_id", "employee_id", "service_id", "start_time"),
        Index("idx_appointments_company_start", "company_id", "start_time"),
        Index("idx_appointments_employee_start", "employee_id", "start_time"),
        Index("idx_appointments_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Appointment(id={self.id}, employee_id={self.employee_id}, start={self.start_time}, status='{self.status}')>"
