"""Seasonal rate schemas, one trio (create, update, response) per service type."""

from datetime import date, datetime
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ..models.enums import BoardType, PricingModel


class RateBase(BaseModel):
    """Fields shared by every rate create request."""

    service_offering_id: UUID = Field(..., description="Offering the rate prices")
    season_from: date = Field(..., description="First day of the season (inclusive)")
    season_to: date = Field(..., description="Last day of the season (inclusive)")
    notes: Optional[str] = None


class RateUpdateBase(BaseModel):
    """Fields shared by every rate update request."""

    season_from: Optional[date] = None
    season_to: Optional[date] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None


class RateOut(BaseModel):
    """Fields shared by every rate response."""

    id: UUID
    tenant_id: UUID
    service_offering_id: UUID
    season_from: date
    season_to: date
    is_active: bool
    notes: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class HotelRoomRateCreate(RateBase):
    board_type: BoardType
    price_per_person_double: float = Field(..., ge=0)
    single_supplement: Optional[float] = Field(None, ge=0)
    price_per_person_triple: Optional[float] = Field(None, ge=0)
    child_price_0_to_2: Optional[float] = Field(None, ge=0)
    child_price_3_to_5: Optional[float] = Field(None, ge=0)
    child_price_6_to_11: Optional[float] = Field(None, ge=0)
    allotment: Optional[int] = Field(None, ge=0)
    release_days: Optional[int] = Field(None, ge=0)
    min_stay: int = Field(1, ge=1)


class HotelRoomRateUpdate(RateUpdateBase):
    board_type: Optional[BoardType] = None
    price_per_person_double: Optional[float] = Field(None, ge=0)
    single_supplement: Optional[float] = Field(None, ge=0)
    price_per_person_triple: Optional[float] = Field(None, ge=0)
    child_price_0_to_2: Optional[float] = Field(None, ge=0)
    child_price_3_to_5: Optional[float] = Field(None, ge=0)
    child_price_6_to_11: Optional[float] = Field(None, ge=0)
    allotment: Optional[int] = Field(None, ge=0)
    release_days: Optional[int] = Field(None, ge=0)
    min_stay: Optional[int] = Field(None, ge=1)


class HotelRoomRate(RateOut):
    board_type: BoardType
    price_per_person_double: float
    single_supplement: Optional[float] = None
    price_per_person_triple: Optional[float] = None
    child_price_0_to_2: Optional[float] = None
    child_price_3_to_5: Optional[float] = None
    child_price_6_to_11: Optional[float] = None
    allotment: Optional[int] = None
    release_days: Optional[int] = None
    min_stay: int


class TransferRateCreate(RateBase):
    pricing_model: PricingModel
    base_cost_try: float = Field(..., ge=0)
    included_km: Optional[int] = Field(None, ge=0)
    included_hours: Optional[int] = Field(None, ge=0)
    extra_km_try: Optional[float] = Field(None, ge=0)
    extra_hour_try: Optional[float] = Field(None, ge=0)
    night_surcharge_pct: Optional[float] = Field(None, ge=0, le=100)
    holiday_surcharge_pct: Optional[float] = Field(None, ge=0, le=100)
    waiting_time_free: Optional[int] = Field(None, ge=0)


class TransferRateUpdate(RateUpdateBase):
    pricing_model: Optional[PricingModel] = None
    base_cost_try: Optional[float] = Field(None, ge=0)
    included_km: Optional[int] = Field(None, ge=0)
    included_hours: Optional[int] = Field(None, ge=0)
    extra_km_try: Optional[float] = Field(None, ge=0)
    extra_hour_try: Optional[float] = Field(None, ge=0)
    night_surcharge_pct: Optional[float] = Field(None, ge=0, le=100)
    holiday_surcharge_pct: Optional[float] = Field(None, ge=0, le=100)
    waiting_time_free: Optional[int] = Field(None, ge=0)


class TransferRate(RateOut):
    pricing_model: PricingModel
    base_cost_try: float
    included_km: Optional[int] = None
    included_hours: Optional[int] = None
    extra_km_try: Optional[float] = None
    extra_hour_try: Optional[float] = None
    night_surcharge_pct: Optional[float] = None
    holiday_surcharge_pct: Optional[float] = None
    waiting_time_free: Optional[int] = None


class VehicleRateCreate(RateBase):
    daily_rate_try: float = Field(..., ge=0)
    daily_km_included: Optional[int] = Field(None, ge=0)
    hourly_rate_try: Optional[float] = Field(None, ge=0)
    min_hours: Optional[int] = Field(None, ge=0)
    extra_km_try: Optional[float] = Field(None, ge=0)
    driver_daily_try: Optional[float] = Field(None, ge=0)
    one_way_fee_try: Optional[float] = Field(None, ge=0)
    deposit_try: Optional[float] = Field(None, ge=0)
    min_rental_days: Optional[int] = Field(None, ge=1)


class VehicleRateUpdate(RateUpdateBase):
    daily_rate_try: Optional[float] = Field(None, ge=0)
    daily_km_included: Optional[int] = Field(None, ge=0)
    hourly_rate_try: Optional[float] = Field(None, ge=0)
    min_hours: Optional[int] = Field(None, ge=0)
    extra_km_try: Optional[float] = Field(None, ge=0)
    driver_daily_try: Optional[float] = Field(None, ge=0)
    one_way_fee_try: Optional[float] = Field(None, ge=0)
    deposit_try: Optional[float] = Field(None, ge=0)
    min_rental_days: Optional[int] = Field(None, ge=1)


class VehicleRate(RateOut):
    daily_rate_try: float
    daily_km_included: Optional[int] = None
    hourly_rate_try: Optional[float] = None
    min_hours: Optional[int] = None
    extra_km_try: Optional[float] = None
    driver_daily_try: Optional[float] = None
    one_way_fee_try: Optional[float] = None
    deposit_try: Optional[float] = None
    min_rental_days: Optional[int] = None


class GuideRateCreate(RateBase):
    pricing_model: PricingModel
    day_cost_try: Optional[float] = Field(None, ge=0)
    half_day_cost_try: Optional[float] = Field(None, ge=0)
    hour_cost_try: Optional[float] = Field(None, ge=0)
    overtime_hour_try: Optional[float] = Field(None, ge=0)
    holiday_surcharge_pct: Optional[float] = Field(None, ge=0, le=100)
    min_hours: Optional[int] = Field(None, ge=0)


class GuideRateUpdate(RateUpdateBase):
    pricing_model: Optional[PricingModel] = None
    day_cost_try: Optional[float] = Field(None, ge=0)
    half_day_cost_try: Optional[float] = Field(None, ge=0)
    hour_cost_try: Optional[float] = Field(None, ge=0)
    overtime_hour_try: Optional[float] = Field(None, ge=0)
    holiday_surcharge_pct: Optional[float] = Field(None, ge=0, le=100)
    min_hours: Optional[int] = Field(None, ge=0)


class GuideRate(RateOut):
    pricing_model: PricingModel
    day_cost_try: Optional[float] = None
    half_day_cost_try: Optional[float] = None
    hour_cost_try: Optional[float] = None
    overtime_hour_try: Optional[float] = None
    holiday_surcharge_pct: Optional[float] = None
    min_hours: Optional[int] = None


class ActivityRateCreate(RateBase):
    pricing_model: PricingModel
    base_cost_try: float = Field(..., ge=0)
    min_pax: Optional[int] = Field(None, ge=1)
    max_pax: Optional[int] = Field(None, ge=1)
    tiered_pricing_json: Optional[Dict[str, Any]] = None
    child_discount_pct: Optional[float] = Field(None, ge=0, le=100)
    group_discount_pct: Optional[float] = Field(None, ge=0, le=100)


class ActivityRateUpdate(RateUpdateBase):
    pricing_model: Optional[PricingModel] = None
    base_cost_try: Optional[float] = Field(None, ge=0)
    min_pax: Optional[int] = Field(None, ge=1)
    max_pax: Optional[int] = Field(None, ge=1)
    tiered_pricing_json: Optional[Dict[str, Any]] = None
    child_discount_pct: Optional[float] = Field(None, ge=0, le=100)
    group_discount_pct: Optional[float] = Field(None, ge=0, le=100)


class ActivityRate(RateOut):
    pricing_model: PricingModel
    base_cost_try: float
    min_pax: Optional[int] = None
    max_pax: Optional[int] = None
    tiered_pricing_json: Optional[Dict[str, Any]] = None
    child_discount_pct: Optional[float] = None
    group_discount_pct: Optional[float] = None
