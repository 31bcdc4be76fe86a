"""Models module exporting all database models."""

from .audit_log import AuditLog
from .booking import Booking, BookingItem
from .catalog import ServiceOffering, Supplier, Vendor
from .client import Client, Lead
from .enums import (
    BoardType,
    BookingStatus,
    Currency,
    ExpenseCategory,
    ItemType,
    LeadStatus,
    PaymentMethod,
    PaymentStatus,
    PricingModel,
    QuotationStatus,
    ServiceType,
    TransportPricingMode,
    UserRole,
    VendorType,
)
from .exchange_rate import ExchangeRate
from .idempotency import IdempotencyKey
from .manual_quote import ManualQuote, ManualQuoteDay, ManualQuoteExpense
from .payment import PaymentClient, PaymentVendor
from .quotation import Quotation
from .rates import ActivityRate, GuideRate, HotelRoomRate, TransferRate, VehicleRate
from .tenant import Tenant, User

__all__ = [
    # Tenancy
    "Tenant",
    "User",

    # CRM entities
    "Client",
    "Lead",
    "Quotation",
    "Booking",
    "BookingItem",

    # Catalog and rates
    "Supplier",
    "ServiceOffering",
    "Vendor",
    "HotelRoomRate",
    "TransferRate",
    "VehicleRate",
    "GuideRate",
    "ActivityRate",

    # Money
    "ExchangeRate",
    "PaymentClient",
    "PaymentVendor",

    # Manual quotes
    "ManualQuote",
    "ManualQuoteDay",
    "ManualQuoteExpense",

    # Infrastructure
    "AuditLog",
    "IdempotencyKey",

    # Enumerations
    "BoardType",
    "BookingStatus",
    "Currency",
    "ExpenseCategory",
    "ItemType",
    "LeadStatus",
    "PaymentMethod",
    "PaymentStatus",
    "PricingModel",
    "QuotationStatus",
    "ServiceType",
    "TransportPricingMode",
    "UserRole",
    "VendorType",
]
