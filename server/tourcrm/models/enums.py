"""Enumerations shared by models and schemas."""

from enum import Enum


class UserRole(str, Enum):
    """Roles a user can hold inside a tenant."""
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    AGENT = "AGENT"
    OPERATIONS = "OPERATIONS"
    ACCOUNTING = "ACCOUNTING"
    GUIDE = "GUIDE"
    VENDOR = "VENDOR"


class LeadStatus(str, Enum):
    """Lead pipeline status."""
    NEW = "NEW"
    CONTACTED = "CONTACTED"
    QUOTED = "QUOTED"
    WON = "WON"
    LOST = "LOST"


ACTIVE_LEAD_STATUSES = (LeadStatus.NEW, LeadStatus.CONTACTED, LeadStatus.QUOTED)


class QuotationStatus(str, Enum):
    """Quotation workflow status."""
    DRAFT = "DRAFT"
    SENT = "SENT"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class BookingStatus(str, Enum):
    """Booking status enumeration."""
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class VendorType(str, Enum):
    """Vendor category."""
    HOTEL = "HOTEL"
    TRANSPORT = "TRANSPORT"
    GUIDE = "GUIDE"
    ACTIVITY = "ACTIVITY"


class ItemType(str, Enum):
    """Booking line item type."""
    HOTEL = "HOTEL"
    TRANSFER = "TRANSFER"
    GUIDE = "GUIDE"
    ACTIVITY = "ACTIVITY"
    FEE = "FEE"
    DISCOUNT = "DISCOUNT"


class PaymentStatus(str, Enum):
    """Payment status enumeration."""
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class PaymentMethod(str, Enum):
    """How a client paid."""
    CASH = "CASH"
    CREDIT_CARD = "CREDIT_CARD"
    BANK_TRANSFER = "BANK_TRANSFER"
    ONLINE = "ONLINE"
    OTHER = "OTHER"


class Currency(str, Enum):
    """Supported currencies."""
    EUR = "EUR"
    TRY = "TRY"
    USD = "USD"


class ServiceType(str, Enum):
    """Kind of service a catalog offering describes."""
    HOTEL_ROOM = "HOTEL_ROOM"
    TRANSFER = "TRANSFER"
    VEHICLE_HIRE = "VEHICLE_HIRE"
    GUIDE = "GUIDE"
    ACTIVITY = "ACTIVITY"


class BoardType(str, Enum):
    """Hotel meal plan."""
    BB = "BB"
    HB = "HB"
    FB = "FB"
    AI = "AI"


class PricingModel(str, Enum):
    """How a transfer, guide or activity rate is charged."""
    PER_PERSON = "PER_PERSON"
    PER_GROUP = "PER_GROUP"
    PER_DAY = "PER_DAY"
    PER_HOUR = "PER_HOUR"
    PER_TRIP = "PER_TRIP"
    PER_KM = "PER_KM"


class ExpenseCategory(str, Enum):
    """Manual quote expense category."""
    HOTEL_ACCOMMODATION = "hotelAccommodation"
    MEALS = "meals"
    ENTRANCE_FEES = "entranceFees"
    SIC_TOUR_COST = "sicTourCost"
    TIPS = "tips"
    TRANSPORTATION = "transportation"
    GUIDE = "guide"
    GUIDE_DRIVER_ACCOMMODATION = "guideDriverAccommodation"
    PARKING = "parking"


class TransportPricingMode(str, Enum):
    """Whether transportation lines are priced per person or per vehicle."""
    TOTAL = "total"
    VEHICLE = "vehicle"
