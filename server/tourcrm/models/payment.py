"""Client and vendor payment model definitions."""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base
from .enums import PaymentMethod, PaymentStatus
from .mixins import Money, TenantScopedMixin, TimestampMixin, UUIDPrimaryKeyMixin


class PaymentClient(UUIDPrimaryKeyMixin, TenantScopedMixin, TimestampMixin, Base):
    """Money received from a client against a booking (EUR)."""

    __tablename__ = "payments_client"

    booking_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    amount_eur: Mapped[float] = mapped_column(Money, nullable=False)
    method: Mapped[PaymentMethod] = mapped_column(String(20), nullable=False)
    paid_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    txn_ref: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    status: Mapped[PaymentStatus] = mapped_column(
        String(20),
        nullable=False,
        default=PaymentStatus.COMPLETED,
        index=True
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("amount_eur > 0", name="ck_payment_client_amount_positive"),
    )

    def __repr__(self) -> str:
        return (
            f"<PaymentClient(id={self.id}, booking_id={self.booking_id}, "
            f"amount_eur={self.amount_eur}, status={self.status})>"
        )


class PaymentVendor(UUIDPrimaryKeyMixin, TenantScopedMixin, TimestampMixin, Base):
    """Money owed or paid to a vendor for a booking (TRY)."""

    __tablename__ = "payments_vendor"

    booking_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    vendor_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("vendors.id", ondelete="RESTRICT"),
        nullable=False,
        index=True
    )
    amount_try: Mapped[float] = mapped_column(Money, nullable=False)
    due_at: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    status: Mapped[PaymentStatus] = mapped_column(
        String(20),
        nullable=False,
        default=PaymentStatus.PENDING,
        index=True
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("amount_try > 0", name="ck_payment_vendor_amount_positive"),
    )

    def __repr__(self) -> str:
        return (
            f"<PaymentVendor(id={self.id}, vendor_id={self.vendor_id}, "
            f"amount_try={self.amount_try}, status={self.status})>"
        )
