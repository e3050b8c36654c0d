"""Client model: the person an appointment is booked for."""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, ForeignKey, Index, TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.database import Base


class Client(Base):
    """Client of a company."""

    __tablename__ = "clients"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id", ondelete="CASCADE"))
    name: Mapped[str] = mapped_column(String(255))

    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    """Phone number used by the notification sink to reach the client."""

    created_at: Mapped[Optional[datetime]] = mapped_column(TIMESTAMP(timezone=True), nullable=True)

    company = relationship("Company", back_populates="clients")

    __table_args__ = (
        Index("idx_clients_company", "company_id"),
    )

    def __repr__(self) -> str:
        return f"<Client(id={self.id}, company_id={self.company_id}, name='{self.name}')>"
