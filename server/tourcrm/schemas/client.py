"""Client and lead Pydantic schemas."""

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ..models.enums import LeadStatus


class CreateClientRequest(BaseModel):
    """Request schema for creating a client."""

    name: str = Field(..., min_length=1, max_length=255, description="Full name")
    email: Optional[str] = Field(None, max_length=255, description="Email, unique per tenant")
    phone: Optional[str] = Field(None, max_length=50)
    nationality: Optional[str] = Field(None, max_length=100)
    preferred_language: str = Field("en", max_length=10)
    passport_number: Optional[str] = Field(None, max_length=50)
    date_of_birth: Optional[date] = None
    notes: Optional[str] = None


class UpdateClientRequest(BaseModel):
    """Request schema for updating a client; omitted fields are left unchanged."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    nationality: Optional[str] = Field(None, max_length=100)
    preferred_language: Optional[str] = Field(None, max_length=10)
    passport_number: Optional[str] = Field(None, max_length=50)
    date_of_birth: Optional[date] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None


class Client(BaseModel):
    """Client response schema."""

    id: UUID
    tenant_id: UUID
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    nationality: Optional[str] = None
    preferred_language: str
    passport_number: Optional[str] = None
    date_of_birth: Optional[date] = None
    notes: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BulkImportRequest(BaseModel):
    """Request schema for importing many clients at once."""

    clients: List[CreateClientRequest] = Field(..., min_length=1, max_length=1000)
    atomic: bool = Field(False, description="Roll back every row if any row fails")
    dry_run: bool = Field(False, description="Validate without writing")
    skip_duplicates: bool = Field(True, description="Skip rows whose email already exists")


class BulkImportError(BaseModel):
    """A row that could not be imported."""

    row: int
    email: Optional[str] = None
    error: str


class BulkImportResult(BaseModel):
    """Outcome of a bulk import."""

    created: int = 0
    skipped: int = 0
    errors: List[BulkImportError] = Field(default_factory=list)
    dry_run: bool = False


class CreateLeadRequest(BaseModel):
    """Request schema for creating a lead."""

    client_id: Optional[UUID] = Field(None, description="Client the inquiry belongs to")
    source: Optional[str] = Field(None, max_length=100, description="Channel, e.g. website or referral")
    inquiry_date: Optional[datetime] = None
    destination: Optional[str] = Field(None, max_length=255)
    pax_adults: int = Field(1, ge=0, le=500)
    pax_children: int = Field(0, ge=0, le=500)
    budget_eur: Optional[float] = Field(None, ge=0)
    status: LeadStatus = LeadStatus.NEW
    notes: Optional[str] = None


class UpdateLeadRequest(BaseModel):
    """Request schema for updating a lead."""

    client_id: Optional[UUID] = None
    source: Optional[str] = Field(None, max_length=100)
    destination: Optional[str] = Field(None, max_length=255)
    pax_adults: Optional[int] = Field(None, ge=0, le=500)
    pax_children: Optional[int] = Field(None, ge=0, le=500)
    budget_eur: Optional[float] = Field(None, ge=0)
    status: Optional[LeadStatus] = None
    notes: Optional[str] = None


class Lead(BaseModel):
    """Lead response schema."""

    id: UUID
    tenant_id: UUID
    client_id: Optional[UUID] = None
    source: Optional[str] = None
    inquiry_date: datetime
    destination: Optional[str] = None
    pax_adults: int
    pax_children: int
    budget_eur: Optional[float] = None
    status: LeadStatus
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
