"""Employee vacation model: inclusive date ranges with no bookable days."""

from datetime import date
from typing import Optional

from sqlalchemy import Date, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class EmployeeVacation(Base):
    """Vacation range of an employee. Both bounds are inclusive."""

    __tablename__ = "employee_vacations"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id", ondelete="CASCADE"))
    employee_id: Mapped[int] = mapped_column(ForeignKey("employees.id", ondelete="CASCADE"))

    start_date: Mapped[date] = mapped_column(Date)

    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    """Last vacation day. NULL means a single-day vacation on start_date."""

    employee = relationship("Employee", back_populates="vacations")

    __table_args__ = (
        Index("idx_employee_vacations_employee", "company_id", "employee_id"),
    )

    def __repr__(self) -> str:
        return f"<EmployeeVacation(employee_id={self.employee_id}, {self.start_date}..{self.end_date})>"
