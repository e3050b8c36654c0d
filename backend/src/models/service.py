"""
Service model: a bookable offering with a fixed duration.

The duration determines the end of every appointment booked for the service.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import String, ForeignKey, Index, TIMESTAMP, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class Service(Base):
    """Service offered by a company."""

    __tablename__ = "services"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id", ondelete="CASCADE"))
    name: Mapped[str] = mapped_column(String(255))

    duration_minutes: Mapped[Optional[int]] = mapped_column(nullable=True)
    """Length of an appointment for this service. Must be positive to be bookable."""

    price: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)

    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    company = relationship("Company", back_populates="services")
    employee_links = relationship("ServiceEmployee", back_populates="service", cascade="all, delete-orphan")
    employees = relationship("Employee", secondary="service_employees", viewonly=True, order_by="Employee.name")

    __table_args__ = (
        Index("idx_services_company", "company_id"),
    )

    def __repr__(self) -> str:
        return f"<Service(id={self.id}, name='{self.name}', duration={self.duration_minutes})>"
