"""Supplier, service offering and vendor schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ..models.enums import ServiceType, VendorType


class CreateSupplierRequest(BaseModel):
    """Request schema for creating a supplier."""

    name: str = Field(..., min_length=1, max_length=255)
    supplier_type: ServiceType = Field(..., description="Service type the supplier provides")
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    city: Optional[str] = Field(None, max_length=100)
    tax_number: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None


class UpdateSupplierRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    supplier_type: Optional[ServiceType] = None
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    city: Optional[str] = Field(None, max_length=100)
    tax_number: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None
    is_active: Optional[bool] = None


class Supplier(BaseModel):
    """Supplier response schema."""

    id: UUID
    tenant_id: UUID
    name: str
    supplier_type: ServiceType
    email: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    tax_number: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class CreateServiceOfferingRequest(BaseModel):
    """Request schema for creating a service offering."""

    supplier_id: UUID = Field(..., description="Supplier delivering the service")
    service_type: ServiceType = Field(..., description="Selects the rate table used for pricing")
    title: str = Field(..., min_length=1, max_length=255)
    location: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None


class UpdateServiceOfferingRequest(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    location: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    is_active: Optional[bool] = None


class ServiceOffering(BaseModel):
    """Service offering response schema."""

    id: UUID
    tenant_id: UUID
    supplier_id: UUID
    service_type: ServiceType
    title: str
    location: Optional[str] = None
    description: Optional[str] = None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class CreateVendorRequest(BaseModel):
    """Request schema for creating a vendor."""

    name: str = Field(..., min_length=1, max_length=255)
    vendor_type: VendorType
    contact_name: Optional[str] = Field(None, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    iban: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None


class UpdateVendorRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    vendor_type: Optional[VendorType] = None
    contact_name: Optional[str] = Field(None, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    iban: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None
    is_active: Optional[bool] = None


class Vendor(BaseModel):
    """Vendor response schema."""

    id: UUID
    tenant_id: UUID
    name: str
    vendor_type: VendorType
    contact_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    iban: Optional[str] = None
    notes: Optional[str] = None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True
