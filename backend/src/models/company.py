"""
Company model representing a tenant.

Every scheduling record (employees, clients, services, appointments, schedules)
is partitioned by company.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class Company(Base):
    """Tenant that owns employees, clients, services and appointments."""

    __tablename__ = "companies"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    """Unique identifier for the company."""

    name: Mapped[str] = mapped_column(String(255))
    """Display name of the company."""

    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    """Timestamp when the company was created."""

    employees = relationship("Employee", back_populates="company")
    clients = relationship("Client", back_populates="company")
    services = relationship("Service", back_populates="company")

    def __repr__(self) -> str:
        return f"<Company(id={self.id}, name='{self.name}')>"
