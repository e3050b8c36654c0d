"""
Employee model.

Employees are the staff members whose time is booked. The ``boss`` role has
company-wide scope; ``staff`` members only see and act on their own
appointments.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, ForeignKey, Index, TIMESTAMP, CheckConstraint, Boolean
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base
from core.constants import ROLE_BOSS


class Employee(Base):
    """Employee belonging to a company, linked to an authenticated identity."""

    __tablename__ = "employees"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id", ondelete="CASCADE"))
    """Reference to the company (tenant) the employee works for."""

    user_id: Mapped[Optional[str]] = mapped_column(String(255), unique=True, nullable=True)
    """Subject of the authenticated identity (the ``sub`` claim of the access token)."""

    name: Mapped[str] = mapped_column(String(255))
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    dni: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    role: Mapped[str] = mapped_column(String(20), default="staff")
    """Either 'boss' (tenant-wide scope) or 'staff' (own appointments only)."""

    active: Mapped[bool] = mapped_column(Boolean, default=True)
    """Inactive employees stay on record for past appointments."""

    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    company = relationship("Company", back_populates="employees")
    schedules = relationship("EmployeeSchedule", back_populates="employee", cascade="all, delete-orphan")
    vacations = relationship("EmployeeVacation", back_populates="employee", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("role IN ('boss', 'staff')", name="check_valid_employee_role"),
        Index("idx_employees_company", "company_id"),
    )

    @property
    def is_boss(self) -> bool:
        return self.role == ROLE_BOSS

    def __repr__(self) -> str:
        return f"<Employee(id={self.id}, company_id={self.company_id}, role='{self.role}')>"
