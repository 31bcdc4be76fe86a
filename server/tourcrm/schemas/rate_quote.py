"""Schemas for pricing a single service offering from its rate table."""

from datetime import date
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from ..models.enums import BoardType, ServiceType


class RateQuoteRequest(BaseModel):
    """What to price; unused fields are ignored for the offering's service type."""

    service_offering_id: UUID
    service_date: date = Field(..., description="Date the service is used; selects the season")
    pax: Optional[int] = Field(None, ge=1, description="Travellers including children")
    children: Optional[int] = Field(None, ge=0)
    nights: Optional[int] = Field(None, ge=1, description="Hotel nights")
    days: Optional[int] = Field(None, ge=1, description="Vehicle hire or guide days")
    hours: Optional[float] = Field(None, ge=0, description="Vehicle hire, guide or transfer hours")
    distance: Optional[float] = Field(None, ge=0, description="Kilometres driven")
    board_type: Optional[BoardType] = Field(None, description="Hotel board type; any when omitted")

    @model_validator(mode="after")
    def check_children(self) -> "RateQuoteRequest":
        if self.children and self.pax is not None and self.children > self.pax:
            raise ValueError("children must not exceed pax")
        return self


class RateQuotePricing(BaseModel):
    """Cost of the service in TRY and how it was built up."""

    rate_id: UUID
    pricing_model: str
    breakdown: Dict[str, Any] = Field(default_factory=dict)
    total_cost_try: float
    note: Optional[str] = None


class RateQuote(BaseModel):
    """Priced service offering."""

    service_offering_id: UUID
    service_type: ServiceType
    service_title: str
    supplier: str
    service_date: date
    details: Dict[str, Any] = Field(default_factory=dict)
    pricing: RateQuotePricing
