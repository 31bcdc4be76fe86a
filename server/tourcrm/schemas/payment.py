"""Client and vendor payment schemas."""

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ..models.enums import PaymentMethod, PaymentStatus


class CreateClientPaymentRequest(BaseModel):
    """Request schema for recording a client payment."""

    booking_id: UUID = Field(..., description="Booking the payment is for")
    amount_eur: float = Field(..., gt=0, description="Amount received in EUR")
    method: PaymentMethod
    paid_at: Optional[datetime] = Field(None, description="Defaults to now")
    txn_ref: Optional[str] = Field(None, max_length=255)
    status: PaymentStatus = PaymentStatus.COMPLETED
    notes: Optional[str] = None


class UpdateClientPaymentRequest(BaseModel):
    amount_eur: Optional[float] = Field(None, gt=0)
    method: Optional[PaymentMethod] = None
    paid_at: Optional[datetime] = None
    txn_ref: Optional[str] = Field(None, max_length=255)
    status: Optional[PaymentStatus] = None
    notes: Optional[str] = None


class ClientPayment(BaseModel):
    """Client payment response schema."""

    id: UUID
    tenant_id: UUID
    booking_id: UUID
    amount_eur: float
    method: PaymentMethod
    paid_at: datetime
    txn_ref: Optional[str] = None
    status: PaymentStatus
    notes: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class PaymentBreakdown(BaseModel):
    key: str
    count: int
    total_eur: float


class ClientPaymentStats(BaseModel):
    """Client payment totals grouped by method and by status."""

    total_count: int
    total_eur: float
    by_method: List[PaymentBreakdown]
    by_status: List[PaymentBreakdown]


class CreateVendorPaymentRequest(BaseModel):
    """Request schema for scheduling a vendor payment."""

    booking_id: UUID
    vendor_id: UUID
    amount_try: float = Field(..., gt=0, description="Amount owed in TRY")
    due_at: date
    paid_at: Optional[datetime] = None
    status: PaymentStatus = PaymentStatus.PENDING
    notes: Optional[str] = None


class UpdateVendorPaymentRequest(BaseModel):
    amount_try: Optional[float] = Field(None, gt=0)
    due_at: Optional[date] = None
    paid_at: Optional[datetime] = None
    status: Optional[PaymentStatus] = None
    notes: Optional[str] = None


class VendorPayment(BaseModel):
    """Vendor payment response schema."""

    id: UUID
    tenant_id: UUID
    booking_id: UUID
    vendor_id: UUID
    amount_try: float
    due_at: date
    paid_at: Optional[datetime] = None
    status: PaymentStatus
    notes: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
