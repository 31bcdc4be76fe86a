"""Supplier, service offering and vendor services."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError, ValidationError
from ..models.catalog import ServiceOffering, Supplier, Vendor
from ..models.enums import ServiceType, VendorType
from ..schemas.catalog import (
    CreateServiceOfferingRequest,
    CreateSupplierRequest,
    CreateVendorRequest,
    UpdateServiceOfferingRequest,
    UpdateSupplierRequest,
    UpdateVendorRequest,
)
from ..schemas.common import PaginationParams

logger = logging.getLogger(__name__)


async def _paginate(db: AsyncSession, model, conditions: list, order_by, pagination: PaginationParams):
    total = await db.scalar(select(func.count()).select_from(model).where(*conditions))
    stmt = (
        select(model)
        .where(*conditions)
        .order_by(order_by)
        .offset(pagination.offset)
        .limit(pagination.limit)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all()), total or 0


class SupplierService:
    """Service for supplier operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_supplier_by_id(self, tenant_id: UUID, supplier_id: UUID) -> Optional[Supplier]:
        stmt = select(Supplier).where(Supplier.id == supplier_id, Supplier.tenant_id == tenant_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_supplier_by_id_or_raise(self, tenant_id: UUID, supplier_id: UUID) -> Supplier:
        supplier = await self.get_supplier_by_id(tenant_id, supplier_id)
        if supplier is None:
            raise NotFoundError(resource_type="supplier", resource_id=str(supplier_id))
        return supplier

    async def list_suppliers(
        self,
        tenant_id: UUID,
        pagination: PaginationParams,
        supplier_type: Optional[ServiceType] = None,
        search: Optional[str] = None,
        include_inactive: bool = False,
    ) -> tuple[list[Supplier], int]:
        conditions = [Supplier.tenant_id == tenant_id]
        if not include_inactive:
            conditions.append(Supplier.is_active.is_(True))
        if supplier_type:
            conditions.append(Supplier.supplier_type == supplier_type.value)
        if search:
            pattern = f"%{search}%"
            conditions.append(or_(Supplier.name.ilike(pattern), Supplier.city.ilike(pattern)))
        return await _paginate(self.db, Supplier, conditions, Supplier.name, pagination)

    async def create_supplier(self, tenant_id: UUID, request: CreateSupplierRequest) -> Supplier:
        supplier = Supplier(tenant_id=tenant_id, **request.model_dump())
        self.db.add(supplier)
        await self.db.commit()
        await self.db.refresh(supplier)

        logger.info(
            "Supplier created",
            extra={"tenant_id": str(tenant_id), "supplier_id": str(supplier.id), "name": supplier.name}
        )
        return supplier

    async def update_supplier(
        self, tenant_id: UUID, supplier_id: UUID, request: UpdateSupplierRequest
    ) -> Supplier:
        supplier = await self.get_supplier_by_id_or_raise(tenant_id, supplier_id)
        for field, value in request.model_dump(exclude_unset=True).items():
            setattr(supplier, field, value)
        await self.db.commit()
        await self.db.refresh(supplier)
        return supplier

    async def remove_supplier(self, tenant_id: UUID, supplier_id: UUID) -> Supplier:
        """Soft delete."""
        supplier = await self.get_supplier_by_id_or_raise(tenant_id, supplier_id)
        supplier.is_active = False
        await self.db.commit()
        await self.db.refresh(supplier)
        return supplier


class ServiceOfferingService:
    """Service for service offering operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_offering_by_id(self, tenant_id: UUID, offering_id: UUID) -> Optional[ServiceOffering]:
        stmt = select(ServiceOffering).where(
            ServiceOffering.id == offering_id,
            ServiceOffering.tenant_id == tenant_id,
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_offering_by_id_or_raise(self, tenant_id: UUID, offering_id: UUID) -> ServiceOffering:
        offering = await self.get_offering_by_id(tenant_id, offering_id)
        if offering is None:
            raise NotFoundError(resource_type="service_offering", resource_id=str(offering_id))
        return offering

    async def list_offerings(
        self,
        tenant_id: UUID,
        pagination: PaginationParams,
        service_type: Optional[ServiceType] = None,
        supplier_id: Optional[UUID] = None,
        location: Optional[str] = None,
        include_inactive: bool = False,
    ) -> tuple[list[ServiceOffering], int]:
        conditions = [ServiceOffering.tenant_id == tenant_id]
        if not include_inactive:
            conditions.append(ServiceOffering.is_active.is_(True))
        if service_type:
            conditions.append(ServiceOffering.service_type == service_type.value)
        if supplier_id:
            conditions.append(ServiceOffering.supplier_id == supplier_id)
        if location:
            conditions.append(ServiceOffering.location.ilike(f"%{location}%"))
        return await _paginate(self.db, ServiceOffering, conditions, ServiceOffering.title, pagination)

    async def create_offering(
        self, tenant_id: UUID, request: CreateServiceOfferingRequest
    ) -> ServiceOffering:
        """
        Create an offering under an existing supplier.

        Raises:
            ValidationError: If the supplier does not exist in the tenant
        """
        supplier = await SupplierService(self.db).get_supplier_by_id(tenant_id, request.supplier_id)
        if supplier is None:
            raise ValidationError(
                detail=f"Supplier with ID {request.supplier_id} not found",
                errors={"supplier_id": str(request.supplier_id)},
            )

        offering = ServiceOffering(tenant_id=tenant_id, **request.model_dump())
        self.db.add(offering)
        await self.db.commit()
        await self.db.refresh(offering)

        logger.info(
            "Service offering created",
            extra={
                "tenant_id": str(tenant_id),
                "offering_id": str(offering.id),
                "service_type": offering.service_type,
            }
        )
        return offering

    async def update_offering(
        self, tenant_id: UUID, offering_id: UUID, request: UpdateServiceOfferingRequest
    ) -> ServiceOffering:
        offering = await self.get_offering_by_id_or_raise(tenant_id, offering_id)
        for field, value in request.model_dump(exclude_unset=True).items():
            setattr(offering, field, value)
        await self.db.commit()
        await self.db.refresh(offering)
        return offering

    async def remove_offering(self, tenant_id: UUID, offering_id: UUID) -> ServiceOffering:
        """Soft delete."""
        offering = await self.get_offering_by_id_or_raise(tenant_id, offering_id)
        offering.is_active = False
        await self.db.commit()
        await self.db.refresh(offering)
        return offering


class VendorService:
    """Service for vendor operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_vendor_by_id(self, tenant_id: UUID, vendor_id: UUID) -> Optional[Vendor]:
        stmt = select(Vendor).where(Vendor.id == vendor_id, Vendor.tenant_id == tenant_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_vendor_by_id_or_raise(self, tenant_id: UUID, vendor_id: UUID) -> Vendor:
        vendor = await self.get_vendor_by_id(tenant_id, vendor_id)
        if vendor is None:
            raise NotFoundError(resource_type="vendor", resource_id=str(vendor_id))
        return vendor

    async def list_vendors(
        self,
        tenant_id: UUID,
        pagination: PaginationParams,
        vendor_type: Optional[VendorType] = None,
        include_inactive: bool = False,
    ) -> tuple[list[Vendor], int]:
        conditions = [Vendor.tenant_id == tenant_id]
        if not include_inactive:
            conditions.append(Vendor.is_active.is_(True))
        if vendor_type:
            conditions.append(Vendor.vendor_type == vendor_type.value)
        return await _paginate(self.db, Vendor, conditions, Vendor.name, pagination)

    async def create_vendor(self, tenant_id: UUID, request: CreateVendorRequest) -> Vendor:
        vendor = Vendor(tenant_id=tenant_id, **request.model_dump())
        self.db.add(vendor)
        await self.db.commit()
        await self.db.refresh(vendor)

        logger.info(
            "Vendor created",
            extra={"tenant_id": str(tenant_id), "vendor_id": str(vendor.id), "name": vendor.name}
        )
        return vendor

    async def update_vendor(self, tenant_id: UUID, vendor_id: UUID, request: UpdateVendorRequest) -> Vendor:
        vendor = await self.get_vendor_by_id_or_raise(tenant_id, vendor_id)
        for field, value in request.model_dump(exclude_unset=True).items():
            setattr(vendor, field, value)
        await self.db.commit()
        await self.db.refresh(vendor)
        return vendor

    async def remove_vendor(self, tenant_id: UUID, vendor_id: UUID) -> Vendor:
        """Soft delete."""
        vendor = await self.get_vendor_by_id_or_raise(tenant_id, vendor_id)
        vendor.is_active = False
        await self.db.commit()
        await self.db.refresh(vendor)
        return vendor
