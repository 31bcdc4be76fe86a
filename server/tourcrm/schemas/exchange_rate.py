"""Exchange rate schemas."""

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ..models.enums import Currency


class CreateExchangeRateRequest(BaseModel):
    """Request schema for recording a daily rate."""

    from_currency: Currency = Currency.TRY
    to_currency: Currency = Currency.EUR
    rate: float = Field(..., gt=0, description="Units of from_currency per one to_currency")
    rate_date: date
    source: Optional[str] = Field(None, max_length=100)


class UpdateExchangeRateRequest(BaseModel):
    rate: Optional[float] = Field(None, gt=0)
    rate_date: Optional[date] = None
    source: Optional[str] = Field(None, max_length=100)


class ExchangeRate(BaseModel):
    """Exchange rate response schema."""

    id: UUID
    tenant_id: UUID
    from_currency: Currency
    to_currency: Currency
    rate: float
    rate_date: date
    source: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ImportCsvRequest(BaseModel):
    """CSV body: one ``from,to,rate,YYYY-MM-DD`` line per rate; a header line is allowed."""

    csv: str = Field(..., min_length=1)
    source: Optional[str] = Field("csv-import", max_length=100)


class ImportCsvResult(BaseModel):
    imported: int = 0
    skipped: int = 0
    errors: List[str] = Field(default_factory=list)


class LatestExchangeRate(BaseModel):
    """Rate in effect on a given date."""

    from_currency: Currency
    to_currency: Currency
    rate: float
    on_date: date
