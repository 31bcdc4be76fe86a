"""Quotation model definition."""

from datetime import date
from typing import TYPE_CHECKING, Any, Optional
from uuid import UUID

from sqlalchemy import JSON, CheckConstraint, Date, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base
from .enums import QuotationStatus
from .mixins import Money, Rate, TenantScopedMixin, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from .booking import Booking
    from .client import Lead


class Quotation(UUIDPrimaryKeyMixin, TenantScopedMixin, TimestampMixin, Base):
    """A priced proposal sent to a lead's client."""

    __tablename__ = "quotations"

    lead_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("leads.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # {"items": [{"item_type": ..., "qty": ..., "unit_cost_try": ..., "unit_price_eur": ...}]}
    custom_json: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    calc_cost_try: Mapped[float] = mapped_column(Money, nullable=False, default=0)
    sell_price_eur: Mapped[float] = mapped_column(Money, nullable=False, default=0)
    exchange_rate_used: Mapped[Optional[float]] = mapped_column(Rate, nullable=True)
    valid_until: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    status: Mapped[QuotationStatus] = mapped_column(
        String(20),
        nullable=False,
        default=QuotationStatus.DRAFT,
        index=True
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("calc_cost_try >= 0", name="ck_quotation_cost_non_negative"),
        CheckConstraint("sell_price_eur >= 0", name="ck_quotation_sell_non_negative"),
    )

    lead: Mapped["Lead"] = relationship("Lead", back_populates="quotations")
    booking: Mapped[Optional["Booking"]] = relationship(
        "Booking",
        back_populates="quotation",
        uselist=False
    )

    def __repr__(self) -> str:
        return (
            f"<Quotation(id={self.id}, lead_id={self.lead_id}, status={self.status}, "
            f"sell_price_eur={self.sell_price_eur})>"
        )
