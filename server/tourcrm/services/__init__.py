"""Service layer package."""

from .audit_service import AuditService
from .booking_service import BookingService
from .catalog_service import ServiceOfferingService, SupplierService, VendorService
from .client_service import ClientService
from .exchange_rate_service import ExchangeRateService
from .idempotency_service import IdempotencyService
from .lead_service import LeadService
from .manual_quote_service import ManualQuoteService
from .payment_service import ClientPaymentService, VendorPaymentService
from .quotation_service import QuotationService
from .rate_quote_service import RateQuoteService
from .rate_service import (
    ActivityRateService,
    GuideRateService,
    HotelRoomRateService,
    TransferRateService,
    VehicleRateService,
)
from .retention_service import RetentionService
from .report_service import ReportService
from .timeline_service import TimelineService
from .user_service import UserService

__all__ = [
    "AuditService",
    "BookingService",
    "ClientService",
    "LeadService",
    "QuotationService",
    "SupplierService",
    "ServiceOfferingService",
    "VendorService",
    "HotelRoomRateService",
    "TransferRateService",
    "VehicleRateService",
    "GuideRateService",
    "ActivityRateService",
    "ExchangeRateService",
    "ClientPaymentService",
    "VendorPaymentService",
    "ManualQuoteService",
    "RateQuoteService",
    "ReportService",
    "TimelineService",
    "IdempotencyService",
    "RetentionService",
    "UserService",
]
