"""Client and Lead model definitions."""

from datetime import date, datetime
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base
from .enums import LeadStatus
from .mixins import Money, TenantScopedMixin, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from .booking import Booking
    from .quotation import Quotation


class Client(UUIDPrimaryKeyMixin, TenantScopedMixin, TimestampMixin, Base):
    """A traveller or customer of the tour operator."""

    __tablename__ = "clients"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    nationality: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    preferred_language: Mapped[str] = mapped_column(String(10), nullable=False, default="en")
    passport_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    date_of_birth: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)

    __table_args__ = (
        UniqueConstraint("tenant_id", "email", name="uq_client_tenant_email"),
        CheckConstraint("length(name) > 0", name="ck_client_name_not_empty"),
    )

    leads: Mapped[list["Lead"]] = relationship("Lead", back_populates="client")
    bookings: Mapped[list["Booking"]] = relationship("Booking", back_populates="client")

    def __repr__(self) -> str:
        return f"<Client(id={self.id}, name='{self.name}', email='{self.email}')>"


class Lead(UUIDPrimaryKeyMixin, TenantScopedMixin, TimestampMixin, Base):
    """An inquiry from a prospective client."""

    __tablename__ = "leads"

    client_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        ForeignKey("clients.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    source: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    inquiry_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    destination: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    pax_adults: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    pax_children: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    budget_eur: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    status: Mapped[LeadStatus] = mapped_column(
        String(20),
        nullable=False,
        default=LeadStatus.NEW,
        index=True
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("pax_adults >= 0", name="ck_lead_pax_adults_non_negative"),
        CheckConstraint("pax_children >= 0", name="ck_lead_pax_children_non_negative"),
    )

    client: Mapped[Optional["Client"]] = relationship("Client", back_populates="leads")
    quotations: Mapped[list["Quotation"]] = relationship(
        "Quotation",
        back_populates="lead",
        cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Lead(id={self.id}, client_id={self.client_id}, status={self.status})>"
