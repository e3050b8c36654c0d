"""
Confirmation token model.

A token is the credential embedded in a link sent to a client. It is issued for
one appointment, or for one waitlist entry for the 'waitlist' type, and
can be consumed once: ``used_at`` moves from NULL to a timestamp through a
conditional update that only matches while it is still NULL.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, ForeignKey, Index, TIMESTAMP, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class ConfirmationToken(Base):
    """Single-use, expiring confirmation link credential."""

    __tablename__ = "confirmation_tokens"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)

    token: Mapped[str] = mapped_column(String(64), unique=True)
    """Opaque random value shared in the link."""

    type: Mapped[str] = mapped_column(String(20))
    """One of 'confirm', 'delete', 'change', 'waitlist'."""

    appointment_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("appointments.id", ondelete="CASCADE"), nullable=True
    )
    waitlist_entry_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("waitlist_entries.id", ondelete="SET NULL"), nullable=True
    )
    """Set to NULL once the entry is removed; the row survives as a spent token."""

    expires_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    """Instant after which the link is no longer valid. NULL counts as expired."""

    used_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    """When the token was consumed or revoked. NULL while unused."""

    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    appointment = relationship("Appointment")
    waitlist_entry = relationship("WaitlistEntry")

    __table_args__ = (
        CheckConstraint(
            "type IN ('confirm', 'delete', 'change', 'waitlist')",
            name="check_valid_token_type"
        ),
        CheckConstraint(
            "appointment_id IS NULL OR waitlist_entry_id IS NULL",
            name="check_token_single_binding"
        ),
        Index("idx_confirmation_tokens_appointment_type", "appointment_id", "type"),
        Index("idx_confirmation_tokens_waitlist_entry", "waitlist_entry_id"),
    )

    @property
    def is_used(self) -> bool:
        return self.used_at is not None

    def __repr__(self) -> str:
        return f"<ConfirmationToken(id={self.id}, type='{self.type}', used={self.is_used})>"
