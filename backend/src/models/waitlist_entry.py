"""
Waitlist entry model.

Binds a waiting client to an appointment they want to take over if it frees
up (rejected or cancelled).
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import ForeignKey, Index, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class WaitlistEntry(Base):
    """Client waiting for a specific appointment slot."""

    __tablename__ = "waitlist_entries"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    appointment_id: Mapped[int] = mapped_column(ForeignKey("appointments.id", ondelete="CASCADE"))
    client_id: Mapped[int] = mapped_column(ForeignKey("clients.id", ondelete="CASCADE"))
    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    appointment = relationship("Appointment", back_populates="waitlist_entries")
    client = relationship("Client")

    __table_args__ = (
        Index("idx_waitlist_entries_appointment", "appointment_id"),
    )

    def __repr__(self) -> str:
        return f"<WaitlistEntry(id={self.id}, appointment_id={self.appointment_id}, client_id={self.client_id})>"
