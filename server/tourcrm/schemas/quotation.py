"""Quotation Pydantic schemas."""

from datetime import date, datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from ..models.enums import ItemType, QuotationStatus
from .booking import Booking


class QuotationItem(BaseModel):
    """A priced line stored under ``custom_json.items``."""

    item_type: ItemType = Field(..., description="Kind of service")
    description: Optional[str] = Field(None, max_length=500)
    service_offering_id: Optional[UUID] = None
    vendor_id: Optional[UUID] = None
    service_date: Optional[date] = None
    qty: int = Field(1, ge=1)
    unit_cost_try: float = Field(0, ge=0, description="Supplier cost per unit in TRY")
    unit_price_eur: float = Field(0, description="Sell price per unit in EUR")


def _validate_custom_json(value: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if value is None:
        return value
    items = value.get("items", [])
    if not isinstance(items, list):
        raise ValueError("custom_json.items must be a list")
    normalized = dict(value)
    normalized["items"] = [
        QuotationItem.model_validate(item).model_dump(mode="json") for item in items
    ]
    return normalized


class CreateQuotationRequest(BaseModel):
    """Request schema for creating a quotation."""

    lead_id: UUID = Field(..., description="Lead the quotation answers")
    custom_json: Dict[str, Any] = Field(default_factory=dict, description="Itinerary and line items")
    calc_cost_try: float = Field(0, ge=0, description="Computed supplier cost in TRY")
    sell_price_eur: float = Field(0, ge=0, description="Price offered to the client in EUR")
    exchange_rate_used: Optional[float] = Field(None, gt=0)
    valid_until: Optional[date] = None
    notes: Optional[str] = None

    @field_validator("custom_json")
    @classmethod
    def check_custom_json(cls, value):
        return _validate_custom_json(value)


class UpdateQuotationRequest(BaseModel):
    """Request schema for updating a quotation."""

    custom_json: Optional[Dict[str, Any]] = None
    calc_cost_try: Optional[float] = Field(None, ge=0)
    sell_price_eur: Optional[float] = Field(None, ge=0)
    exchange_rate_used: Optional[float] = Field(None, gt=0)
    valid_until: Optional[date] = None
    notes: Optional[str] = None

    @field_validator("custom_json")
    @classmethod
    def check_custom_json(cls, value):
        return _validate_custom_json(value)


class Quotation(BaseModel):
    """Quotation response schema."""

    id: UUID
    tenant_id: UUID
    lead_id: UUID
    custom_json: Dict[str, Any]
    calc_cost_try: float
    sell_price_eur: float
    exchange_rate_used: Optional[float] = None
    valid_until: Optional[date] = None
    status: QuotationStatus
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class QuotationTransition(BaseModel):
    """Result of a send, accept or reject action."""

    quotation: Quotation
    message: str
    booking: Optional[Booking] = None


class QuotationStatusStats(BaseModel):
    """Aggregates for one quotation status."""

    status: QuotationStatus
    count: int
    total_cost_try: float
    total_sell_eur: float


class QuotationStats(BaseModel):
    """Aggregates across statuses."""

    by_status: List[QuotationStatusStats]
