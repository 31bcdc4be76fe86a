"""Manual quote model definitions: quote, days and expense lines."""

from datetime import date
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import JSON, Boolean, CheckConstraint, Date, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base
from .enums import ExpenseCategory, TransportPricingMode
from .mixins import Money, TenantScopedMixin, TimestampMixin, UUIDPrimaryKeyMixin


class ManualQuote(UUIDPrimaryKeyMixin, TenantScopedMixin, TimestampMixin, Base):
    """A hand-built, day-by-day quote priced across fixed PAX tiers."""

    __tablename__ = "manual_quotes"

    quote_name: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False, default="B2C")
    season_name: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    valid_from: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    valid_to: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    tour_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    pax: Mapped[int] = mapped_column(Integer, nullable=False, default=2)
    markup: Mapped[float] = mapped_column(Money, nullable=False, default=0)
    tax: Mapped[float] = mapped_column(Money, nullable=False, default=0)
    transport_pricing_mode: Mapped[TransportPricingMode] = mapped_column(
        String(10),
        nullable=False,
        default=TransportPricingMode.TOTAL
    )
    pricing_table: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)

    __table_args__ = (
        CheckConstraint("markup >= 0 AND markup <= 100", name="ck_manual_quote_markup_range"),
        CheckConstraint("tax >= 0 AND tax <= 100", name="ck_manual_quote_tax_range"),
        CheckConstraint("pax > 0", name="ck_manual_quote_pax_positive"),
    )

    days: Mapped[list["ManualQuoteDay"]] = relationship(
        "ManualQuoteDay",
        back_populates="quote",
        cascade="all, delete-orphan",
        order_by="ManualQuoteDay.day_number"
    )

    def __repr__(self) -> str:
        return f"<ManualQuote(id={self.id}, name='{self.quote_name}', pax={self.pax})>"


class ManualQuoteDay(UUIDPrimaryKeyMixin, TenantScopedMixin, TimestampMixin, Base):
    """One day of a manual quote itinerary."""

    __tablename__ = "manual_quote_days"

    quote_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("manual_quotes.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    day_number: Mapped[int] = mapped_column(Integer, nullable=False)
    day_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    __table_args__ = (
        CheckConstraint("day_number >= 1", name="ck_manual_quote_day_number_positive"),
    )

    quote: Mapped["ManualQuote"] = relationship("ManualQuote", back_populates="days")
    expenses: Mapped[list["ManualQuoteExpense"]] = relationship(
        "ManualQuoteExpense",
        back_populates="day",
        cascade="all, delete-orphan",
        order_by="ManualQuoteExpense.created_at"
    )

    def __repr__(self) -> str:
        return f"<ManualQuoteDay(id={self.id}, quote_id={self.quote_id}, day={self.day_number})>"


class ManualQuoteExpense(UUIDPrimaryKeyMixin, TenantScopedMixin, TimestampMixin, Base):
    """A cost line of a manual quote day."""

    __tablename__ = "manual_quote_expenses"

    day_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("manual_quote_days.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    category: Mapped[ExpenseCategory] = mapped_column(String(40), nullable=False)
    hotel_category: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    price: Mapped[float] = mapped_column(Money, nullable=False, default=0)
    single_supplement: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    child_0_to_2: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    child_3_to_5: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    child_6_to_11: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    vehicle_count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    price_per_vehicle: Mapped[Optional[float]] = mapped_column(Money, nullable=True)

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_manual_quote_expense_price_non_negative"),
    )

    day: Mapped["ManualQuoteDay"] = relationship("ManualQuoteDay", back_populates="expenses")

    def __repr__(self) -> str:
        return (
            f"<ManualQuoteExpense(id={self.id}, category={self.category}, price={self.price})>"
        )
