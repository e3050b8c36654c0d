"""
Service-Employee mapping model.

Records which employees perform each service of the company's catalog.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import ForeignKey, TIMESTAMP, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class ServiceEmployee(Base):
    """Assignment of an employee to a service."""

    __tablename__ = "service_employees"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    service_id: Mapped[int] = mapped_column(ForeignKey("services.id", ondelete="CASCADE"))
    """Reference to the service."""

    employee_id: Mapped[int] = mapped_column(ForeignKey("employees.id", ondelete="CASCADE"))
    """Reference to the employee who performs it."""

    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    service = relationship("Service", back_populates="employee_links")
    employee = relationship("Employee")

    __table_args__ = (
        UniqueConstraint("service_id", "employee_id", name="uq_service_employee"),
        Index("idx_service_employees_employee", "employee_id"),
    )

    def __repr__(self) -> str:
        return f"<ServiceEmployee(service_id={self.service_id}, employee_id={self.employee_id})>"
