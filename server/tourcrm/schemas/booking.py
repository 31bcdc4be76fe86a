"""Booking-related Pydantic schemas."""

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from ..models.enums import BookingStatus, ItemType


class CreateBookingItemRequest(BaseModel):
    """Request schema for adding a line to a booking."""

    item_type: ItemType = Field(..., description="Kind of service")
    service_offering_id: Optional[UUID] = None
    vendor_id: Optional[UUID] = None
    description: Optional[str] = Field(None, max_length=500)
    service_date: Optional[date] = None
    qty: int = Field(1, ge=1)
    unit_cost_try: float = Field(0, ge=0)
    unit_price_eur: float = Field(0)
    notes: Optional[str] = None


class BookingItem(BaseModel):
    """Booking item response schema."""

    id: UUID
    booking_id: UUID
    service_offering_id: Optional[UUID] = None
    vendor_id: Optional[UUID] = None
    item_type: ItemType
    description: Optional[str] = None
    service_date: Optional[date] = None
    qty: int
    unit_cost_try: float
    unit_price_eur: float
    notes: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class CreateBookingRequest(BaseModel):
    """Request schema for creating a booking directly."""

    client_id: UUID = Field(..., description="Client travelling")
    quotation_id: Optional[UUID] = None
    booking_code: Optional[str] = Field(None, min_length=1, max_length=32, description="Generated when omitted")
    start_date: date
    end_date: date
    locked_exchange_rate: float = Field(..., gt=0, description="TRY per EUR")
    total_cost_try: float = Field(0, ge=0)
    total_sell_eur: float = Field(0, ge=0)
    deposit_due_eur: Optional[float] = Field(None, ge=0)
    balance_due_eur: Optional[float] = Field(None, ge=0)
    status: BookingStatus = BookingStatus.PENDING
    notes: Optional[str] = None
    items: List[CreateBookingItemRequest] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_dates(self) -> "CreateBookingRequest":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class UpdateBookingRequest(BaseModel):
    """Request schema for updating a booking."""

    booking_code: Optional[str] = Field(None, min_length=1, max_length=32)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    total_cost_try: Optional[float] = Field(None, ge=0)
    total_sell_eur: Optional[float] = Field(None, ge=0)
    deposit_due_eur: Optional[float] = Field(None, ge=0)
    balance_due_eur: Optional[float] = Field(None, ge=0)
    status: Optional[BookingStatus] = None
    notes: Optional[str] = None


class Booking(BaseModel):
    """Booking response schema."""

    id: UUID
    tenant_id: UUID
    quotation_id: Optional[UUID] = None
    client_id: UUID
    booking_code: str = Field(..., description="Human-readable code, e.g. BK-2025-0001")
    start_date: date
    end_date: date
    locked_exchange_rate: float
    total_cost_try: float
    total_sell_eur: float
    deposit_due_eur: Optional[float] = None
    balance_due_eur: Optional[float] = None
    status: BookingStatus
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BookingDetail(Booking):
    """Booking with its items."""

    items: List[BookingItem] = Field(default_factory=list)


class BookingPnL(BaseModel):
    """Profit and loss of a booking, in EUR at the locked rate."""

    booking_id: UUID
    booking_code: str
    locked_exchange_rate: float
    revenue_eur: float
    cost_try: float
    cost_eur: float
    profit_eur: float
    margin_pct: float


class BookingStatusStats(BaseModel):
    """Aggregates for one booking status."""

    status: BookingStatus
    count: int
    total_sell_eur: float


class BookingStats(BaseModel):
    """Aggregates across statuses."""

    by_status: List[BookingStatusStats]
