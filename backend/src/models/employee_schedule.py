"""
Employee weekly schedule model.

Each record is one working window for a weekday, with an optional break.
Several records per weekday are allowed to describe split shifts; a booking
only has to fit one of them.
"""

from datetime import time
from typing import Optional

from sqlalchemy import Time, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class EmployeeSchedule(Base):
    """Working window of an employee for one day of the week."""

    __tablename__ = "employee_schedules"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id", ondelete="CASCADE"))
    employee_id: Mapped[int] = mapped_column(ForeignKey("employees.id", ondelete="CASCADE"))

    day_of_week: Mapped[int] = mapped_column()
    """ISO weekday (1=Monday, ..., 7=Sunday)."""

    entry_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    exit_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    break_start: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    break_end: Mapped[Optional[time]] = mapped_column(Time, nullable=True)

    employee = relationship("Employee", back_populates="schedules")

    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 1 AND 7", name="check_valid_day_of_week"),
        Index("idx_employee_schedules_employee_day", "company_id", "employee_id", "day_of_week"),
    )

    def __repr__(self) -> str:
        return (
            f"<EmployeeSchedule(employee_id={self.employee_id}, day={self.day_of_week}, "
            f"{self.entry_time}-{self.exit_time}, break={self.break_start}-{self.break_end})>"
        )
