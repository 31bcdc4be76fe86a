"""Supplier, ServiceOffering and Vendor model definitions."""

from typing import Optional
from uuid import UUID

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base
from .enums import ServiceType, VendorType
from .mixins import TenantScopedMixin, TimestampMixin, UUIDPrimaryKeyMixin


class Supplier(UUIDPrimaryKeyMixin, TenantScopedMixin, TimestampMixin, Base):
    """A company that provides services listed in the catalog."""

    __tablename__ = "suppliers"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    supplier_type: Mapped[ServiceType] = mapped_column(String(20), nullable=False, index=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    tax_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint("length(name) > 0", name="ck_supplier_name_not_empty"),
    )

    offerings: Mapped[list["ServiceOffering"]] = relationship("ServiceOffering", back_populates="supplier")

    def __repr__(self) -> str:
        return f"<Supplier(id={self.id}, name='{self.name}', type={self.supplier_type})>"


class ServiceOffering(UUIDPrimaryKeyMixin, TenantScopedMixin, TimestampMixin, Base):
    """A catalog entry priced through the rate table of its service type."""

    __tablename__ = "service_offerings"

    supplier_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("suppliers.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    service_type: Mapped[ServiceType] = mapped_column(String(20), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint("length(title) > 0", name="ck_service_offering_title_not_empty"),
    )

    supplier: Mapped["Supplier"] = relationship("Supplier", back_populates="offerings")

    def __repr__(self) -> str:
        return (
            f"<ServiceOffering(id={self.id}, type={self.service_type}, title='{self.title}')>"
        )


class Vendor(UUIDPrimaryKeyMixin, TenantScopedMixin, TimestampMixin, Base):
    """A party the operator pays for delivered services."""

    __tablename__ = "vendors"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    vendor_type: Mapped[VendorType] = mapped_column(String(20), nullable=False, index=True)
    contact_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    iban: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    def __repr__(self) -> str:
        return f"<Vendor(id={self.id}, name='{self.name}', type={self.vendor_type})>"
