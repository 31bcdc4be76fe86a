"""Manual quote schemas."""

from datetime import date, datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ..models.enums import ExpenseCategory, TransportPricingMode


class ExpenseIn(BaseModel):
    """An expense line as submitted by the client."""

    category: ExpenseCategory
    hotel_category: Optional[str] = Field(None, max_length=50)
    location: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=500)
    price: float = Field(0, ge=0, description="Per-person price")
    single_supplement: Optional[float] = Field(None, ge=0)
    child_0_to_2: Optional[float] = Field(None, ge=0)
    child_3_to_5: Optional[float] = Field(None, ge=0)
    child_6_to_11: Optional[float] = Field(None, ge=0)
    vehicle_count: Optional[int] = Field(None, ge=0)
    price_per_vehicle: Optional[float] = Field(None, ge=0)


class ExpenseUpdate(BaseModel):
    category: Optional[ExpenseCategory] = None
    hotel_category: Optional[str] = Field(None, max_length=50)
    location: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = Field(None, max_length=500)
    price: Optional[float] = Field(None, ge=0)
    single_supplement: Optional[float] = Field(None, ge=0)
    child_0_to_2: Optional[float] = Field(None, ge=0)
    child_3_to_5: Optional[float] = Field(None, ge=0)
    child_6_to_11: Optional[float] = Field(None, ge=0)
    vehicle_count: Optional[int] = Field(None, ge=0)
    price_per_vehicle: Optional[float] = Field(None, ge=0)


class Expense(ExpenseIn):
    id: UUID
    day_id: UUID

    class Config:
        from_attributes = True


class DayIn(BaseModel):
    day_number: int = Field(..., ge=1)
    day_date: Optional[date] = None
    expenses: List[ExpenseIn] = Field(default_factory=list)


class DayUpdate(BaseModel):
    day_number: Optional[int] = Field(None, ge=1)
    day_date: Optional[date] = None


class Day(BaseModel):
    id: UUID
    quote_id: UUID
    day_number: int
    day_date: Optional[date] = None
    expenses: List[Expense] = Field(default_factory=list)

    class Config:
        from_attributes = True


class CreateManualQuoteRequest(BaseModel):
    """Request schema for creating a manual quote with its days."""

    quote_name: str = Field(..., min_length=1, max_length=255)
    category: str = Field("B2C", max_length=20)
    season_name: Optional[str] = Field(None, max_length=100)
    valid_from: Optional[date] = None
    valid_to: Optional[date] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    tour_type: Optional[str] = Field(None, max_length=50)
    pax: int = Field(2, ge=1)
    markup: float = Field(0, ge=0, le=100, description="Markup percentage")
    tax: float = Field(0, ge=0, le=100, description="Tax percentage applied after markup")
    transport_pricing_mode: TransportPricingMode = TransportPricingMode.TOTAL
    notes: Optional[str] = None
    days: List[DayIn] = Field(default_factory=list)


class UpdateManualQuoteRequest(BaseModel):
    quote_name: Optional[str] = Field(None, min_length=1, max_length=255)
    category: Optional[str] = Field(None, max_length=20)
    season_name: Optional[str] = Field(None, max_length=100)
    valid_from: Optional[date] = None
    valid_to: Optional[date] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    tour_type: Optional[str] = Field(None, max_length=50)
    pax: Optional[int] = Field(None, ge=1)
    markup: Optional[float] = Field(None, ge=0, le=100)
    tax: Optional[float] = Field(None, ge=0, le=100)
    transport_pricing_mode: Optional[TransportPricingMode] = None
    notes: Optional[str] = None


class ManualQuote(BaseModel):
    """Manual quote response schema, including the computed price table."""

    id: UUID
    tenant_id: UUID
    quote_name: str
    category: str
    season_name: Optional[str] = None
    valid_from: Optional[date] = None
    valid_to: Optional[date] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    tour_type: Optional[str] = None
    pax: int
    markup: float
    tax: float
    transport_pricing_mode: TransportPricingMode
    pricing_table: Optional[Dict[str, Any]] = None
    notes: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime
    days: List[Day] = Field(default_factory=list)

    class Config:
        from_attributes = True


class ManualQuoteSummary(BaseModel):
    """List entry without days."""

    id: UUID
    quote_name: str
    category: str
    season_name: Optional[str] = None
    tour_type: Optional[str] = None
    pax: int
    pricing_table: Optional[Dict[str, Any]] = None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True
