"""Seasonal rate tables, one per service type."""

from datetime import date
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import JSON, Boolean, CheckConstraint, Date, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base
from .enums import BoardType, PricingModel
from .mixins import Money, TenantScopedMixin, TimestampMixin, UUIDPrimaryKeyMixin


class SeasonalRateMixin(UUIDPrimaryKeyMixin, TenantScopedMixin, TimestampMixin):
    """Columns every rate table shares: the offering, the season window and the active flag."""

    service_offering_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("service_offerings.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    season_from: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    season_to: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__}(id={self.id}, offering={self.service_offering_id}, "
            f"season={self.season_from}..{self.season_to}, active={self.is_active})>"
        )


class HotelRoomRate(SeasonalRateMixin, Base):
    """Per-person hotel room prices for a season and board type."""

    __tablename__ = "hotel_room_rates"

    board_type: Mapped[BoardType] = mapped_column(String(4), nullable=False, index=True)
    price_per_person_double: Mapped[float] = mapped_column(Money, nullable=False)
    single_supplement: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    price_per_person_triple: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    child_price_0_to_2: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    child_price_3_to_5: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    child_price_6_to_11: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    allotment: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    release_days: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    min_stay: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __table_args__ = (
        CheckConstraint("season_from < season_to", name="ck_hotel_room_rate_season_ordered"),
    )


class TransferRate(SeasonalRateMixin, Base):
    """Transfer pricing for a season."""

    __tablename__ = "transfer_rates"

    pricing_model: Mapped[PricingModel] = mapped_column(String(20), nullable=False)
    base_cost_try: Mapped[float] = mapped_column(Money, nullable=False)
    included_km: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    included_hours: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    extra_km_try: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    extra_hour_try: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    night_surcharge_pct: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    holiday_surcharge_pct: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    waiting_time_free: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        CheckConstraint("season_from < season_to", name="ck_transfer_rate_season_ordered"),
    )


class VehicleRate(SeasonalRateMixin, Base):
    """Vehicle hire pricing for a season."""

    __tablename__ = "vehicle_rates"

    daily_rate_try: Mapped[float] = mapped_column(Money, nullable=False)
    daily_km_included: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    hourly_rate_try: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    min_hours: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    extra_km_try: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    driver_daily_try: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    one_way_fee_try: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    deposit_try: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    min_rental_days: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        CheckConstraint("season_from < season_to", name="ck_vehicle_rate_season_ordered"),
    )


class GuideRate(SeasonalRateMixin, Base):
    """Guide service pricing for a season."""

    __tablename__ = "guide_rates"

    pricing_model: Mapped[PricingModel] = mapped_column(String(20), nullable=False)
    day_cost_try: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    half_day_cost_try: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    hour_cost_try: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    overtime_hour_try: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    holiday_surcharge_pct: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    min_hours: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    __table_args__ = (
        CheckConstraint("season_from < season_to", name="ck_guide_rate_season_ordered"),
    )


class ActivityRate(SeasonalRateMixin, Base):
    """Activity or excursion pricing for a season."""

    __tablename__ = "activity_rates"

    pricing_model: Mapped[PricingModel] = mapped_column(String(20), nullable=False)
    base_cost_try: Mapped[float] = mapped_column(Money, nullable=False)
    min_pax: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    max_pax: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    tiered_pricing_json: Mapped[Optional[dict[str, Any]]] = mapped_column(JSON, nullable=True)
    child_discount_pct: Mapped[Optional[float]] = mapped_column(Money, nullable=True)
    group_discount_pct: Mapped[Optional[float]] = mapped_column(Money, nullable=True)

    __table_args__ = (
        CheckConstraint("season_from < season_to", name="ck_activity_rate_season_ordered"),
    )
