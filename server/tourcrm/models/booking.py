"""Booking and BookingItem model definitions."""

from datetime import date
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from sqlalchemy import CheckConstraint, Date, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base
from .enums import BookingStatus, ItemType
from .mixins import Money, Rate, TenantScopedMixin, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from .client import Client
    from .quotation import Quotation


class Booking(UUIDPrimaryKeyMixin, TenantScopedMixin, TimestampMixin, Base):
    """A confirmed trip, usually created by accepting a quotation."""

    __tablename__ = "bookings"

    quotation_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        ForeignKey("quotations.id", ondelete="SET NULL"),
        nullable=True,
        unique=True,
        index=True
    )
    client_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("clients.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )

    booking_code: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)

    # TRY per EUR, frozen when the booking is created
    locked_exchange_rate: Mapped[float] = mapped_column(Rate, nullable=False)
    total_cost_try: Mapped[float] = mapped_column(Money, nullable=False, default=0)
    total_sell_eur: Mapped[float] = mapped_column(Money, nullable=False, default=0)
    deposit_due_eur: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    balance_due_eur: Mapped[Optional[float]] = mapped_column(Money, nullable=True)

    status: Mapped[BookingStatus] = mapped_column(
        String(20),
        nullable=False,
        default=BookingStatus.PENDING,
        index=True
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("tenant_id", "booking_code", name="uq_booking_tenant_code"),
        CheckConstraint("length(booking_code) > 0", name="ck_booking_code_not_empty"),
        CheckConstraint("end_date >= start_date", name="ck_booking_dates_ordered"),
    )

    quotation: Mapped[Optional["Quotation"]] = relationship("Quotation", back_populates="booking")
    client: Mapped["Client"] = relationship("Client", back_populates="bookings")
    items: Mapped[list["BookingItem"]] = relationship(
        "BookingItem",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingItem.created_at"
    )

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, code='{self.booking_code}', status={self.status}, "
            f"locked_exchange_rate={self.locked_exchange_rate})>"
        )


class BookingItem(UUIDPrimaryKeyMixin, TenantScopedMixin, TimestampMixin, Base):
    """A priced line of a booking."""

    __tablename__ = "booking_items"

    booking_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    service_offering_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        ForeignKey("service_offerings.id", ondelete="SET NULL"),
        nullable=True
    )
    vendor_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid,
        ForeignKey("vendors.id", ondelete="SET NULL"),
        nullable=True
    )

    item_type: Mapped[ItemType] = mapped_column(String(20), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    service_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    qty: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    unit_cost_try: Mapped[float] = mapped_column(Money, nullable=False, default=0)
    unit_price_eur: Mapped[float] = mapped_column(Money, nullable=False, default=0)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("qty > 0", name="ck_booking_item_qty_positive"),
    )

    booking: Mapped["Booking"] = relationship("Booking", back_populates="items")

    def __repr__(self) -> str:
        return (
            f"<BookingItem(id={self.id}, booking_id={self.booking_id}, "
            f"item_type={self.item_type}, qty={self.qty})>"
        )
