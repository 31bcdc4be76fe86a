"""Catalog routers: suppliers, service offerings and vendors."""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import ALL_STAFF, CATALOG_EDITORS, Pagination, require_roles
from ..models.enums import ServiceType, VendorType
from ..schemas.auth import CurrentUser
from ..schemas.catalog import (
    CreateServiceOfferingRequest,
    CreateSupplierRequest,
    CreateVendorRequest,
    ServiceOffering,
    Supplier,
    UpdateServiceOfferingRequest,
    UpdateSupplierRequest,
    UpdateVendorRequest,
    Vendor,
)
from ..schemas.common import PaginatedResponse, PaginationParams
from ..services.catalog_service import ServiceOfferingService, SupplierService, VendorService

logger = logging.getLogger(__name__)

suppliers_router = APIRouter(prefix="/v1/suppliers", tags=["catalog"])
offerings_router = APIRouter(prefix="/v1/service-offerings", tags=["catalog"])
vendors_router = APIRouter(prefix="/v1/vendors", tags=["catalog"])

DB_DEPENDENCY = Depends(get_db)
STAFF = Depends(require_roles(*ALL_STAFF))
EDITORS = Depends(require_roles(*CATALOG_EDITORS))


# Suppliers

@suppliers_router.get("", response_model=PaginatedResponse[Supplier])
async def list_suppliers(
    supplier_type: Optional[ServiceType] = Query(None, alias="type"),
    search: Optional[str] = Query(None, max_length=100),
    include_inactive: bool = Query(False),
    pagination: PaginationParams = Pagination,
    current_user: CurrentUser = STAFF,
    db: AsyncSession = DB_DEPENDENCY,
):
    suppliers, total = await SupplierService(db).list_suppliers(
        current_user.tenant_uuid,
        pagination,
        supplier_type=supplier_type,
        search=search,
        include_inactive=include_inactive,
    )
    return PaginatedResponse[Supplier].build([Supplier.model_validate(s) for s in suppliers], total, pagination)


@suppliers_router.get("/{supplier_id}", response_model=Supplier)
async def get_supplier(supplier_id: UUID, current_user: CurrentUser = STAFF, db: AsyncSession = DB_DEPENDENCY):
    supplier = await SupplierService(db).get_supplier_by_id_or_raise(current_user.tenant_uuid, supplier_id)
    return Supplier.model_validate(supplier)


@suppliers_router.post("", response_model=Supplier, status_code=status.HTTP_201_CREATED)
async def create_supplier(
    request: CreateSupplierRequest,
    current_user: CurrentUser = EDITORS,
    db: AsyncSession = DB_DEPENDENCY,
):
    supplier = await SupplierService(db).create_supplier(current_user.tenant_uuid, request)
    return Supplier.model_validate(supplier)


@suppliers_router.patch("/{supplier_id}", response_model=Supplier)
async def update_supplier(
    supplier_id: UUID,
    request: UpdateSupplierRequest,
    current_user: CurrentUser = EDITORS,
    db: AsyncSession = DB_DEPENDENCY,
):
    supplier = await SupplierService(db).update_supplier(current_user.tenant_uuid, supplier_id, request)
    return Supplier.model_validate(supplier)


@suppliers_router.delete("/{supplier_id}", response_model=Supplier)
async def remove_supplier(supplier_id: UUID, current_user: CurrentUser = EDITORS, db: AsyncSession = DB_DEPENDENCY):
    """Deactivate a supplier."""
    supplier = await SupplierService(db).remove_supplier(current_user.tenant_uuid, supplier_id)
    return Supplier.model_validate(supplier)


# Service offerings

@offerings_router.get("", response_model=PaginatedResponse[ServiceOffering])
async def list_offerings(
    service_type: Optional[ServiceType] = Query(None),
    supplier_id: Optional[UUID] = Query(None),
    location: Optional[str] = Query(None, max_length=255),
    include_inactive: bool = Query(False),
    pagination: PaginationParams = Pagination,
    current_user: CurrentUser = STAFF,
    db: AsyncSession = DB_DEPENDENCY,
):
    offerings, total = await ServiceOfferingService(db).list_offerings(
        current_user.tenant_uuid,
        pagination,
        service_type=service_type,
        supplier_id=supplier_id,
        location=location,
        include_inactive=include_inactive,
    )
    return PaginatedResponse[ServiceOffering].build(
        [ServiceOffering.model_validate(o) for o in offerings], total, pagination
    )


@offerings_router.get("/{offering_id}", response_model=ServiceOffering)
async def get_offering(offering_id: UUID, current_user: CurrentUser = STAFF, db: AsyncSession = DB_DEPENDENCY):
    offering = await ServiceOfferingService(db).get_offering_by_id_or_raise(current_user.tenant_uuid, offering_id)
    return ServiceOffering.model_validate(offering)


@offerings_router.post("", response_model=ServiceOffering, status_code=status.HTTP_201_CREATED)
async def create_offering(
    request: CreateServiceOfferingRequest,
    current_user: CurrentUser = EDITORS,
    db: AsyncSession = DB_DEPENDENCY,
):
    """Create an offering; the supplier must belong to the caller's tenant."""
    offering = await ServiceOfferingService(db).create_offering(current_user.tenant_uuid, request)
    return ServiceOffering.model_validate(offering)


@offerings_router.patch("/{offering_id}", response_model=ServiceOffering)
async def update_offering(
    offering_id: UUID,
    request: UpdateServiceOfferingRequest,
    current_user: CurrentUser = EDITORS,
    db: AsyncSession = DB_DEPENDENCY,
):
    offering = await ServiceOfferingService(db).update_offering(current_user.tenant_uuid, offering_id, request)
    return ServiceOffering.model_validate(offering)


@offerings_router.delete("/{offering_id}", response_model=ServiceOffering)
async def remove_offering(offering_id: UUID, current_user: CurrentUser = EDITORS, db: AsyncSession = DB_DEPENDENCY):
    offering = await ServiceOfferingService(db).remove_offering(current_user.tenant_uuid, offering_id)
    return ServiceOffering.model_validate(offering)


# Vendors

@vendors_router.get("", response_model=PaginatedResponse[Vendor])
async def list_vendors(
    vendor_type: Optional[VendorType] = Query(None, alias="type"),
    include_inactive: bool = Query(False),
    pagination: PaginationParams = Pagination,
    current_user: CurrentUser = STAFF,
    db: AsyncSession = DB_DEPENDENCY,
):
    vendors, total = await VendorService(db).list_vendors(
        current_user.tenant_uuid, pagination, vendor_type=vendor_type, include_inactive=include_inactive
    )
    return PaginatedResponse[Vendor].build([Vendor.model_validate(v) for v in vendors], total, pagination)


@vendors_router.get("/{vendor_id}", response_model=Vendor)
async def get_vendor(vendor_id: UUID, current_user: CurrentUser = STAFF, db: AsyncSession = DB_DEPENDENCY):
    vendor = await VendorService(db).get_vendor_by_id_or_raise(current_user.tenant_uuid, vendor_id)
    return Vendor.model_validate(vendor)


@vendors_router.post("", response_model=Vendor, status_code=status.HTTP_201_CREATED)
async def create_vendor(
    request: CreateVendorRequest,
    current_user: CurrentUser = EDITORS,
    db: AsyncSession = DB_DEPENDENCY,
):
    vendor = await VendorService(db).create_vendor(current_user.tenant_uuid, request)
    return Vendor.model_validate(vendor)


@vendors_router.patch("/{vendor_id}", response_model=Vendor)
async def update_vendor(
    vendor_id: UUID,
    request: UpdateVendorRequest,
    current_user: CurrentUser = EDITORS,
    db: AsyncSession = DB_DEPENDENCY,
):
    vendor = await VendorService(db).update_vendor(current_user.tenant_uuid, vendor_id, request)
    return Vendor.model_validate(vendor)


@vendors_router.delete("/{vendor_id}", response_model=Vendor)
async def remove_vendor(vendor_id: UUID, current_user: CurrentUser = EDITORS, db: AsyncSession = DB_DEPENDENCY):
    vendor = await VendorService(db).remove_vendor(current_user.tenant_uuid, vendor_id)
    return Vendor.model_validate(vendor)
