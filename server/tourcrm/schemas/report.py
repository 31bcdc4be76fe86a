"""Report schemas: profit and loss, revenue and leads."""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.enums import BookingStatus, LeadStatus, PaymentStatus


class ReportFilters(BaseModel):
    """Inclusive creation-date window; open-ended on a missing side."""

    date_from: Optional[date] = None
    date_to: Optional[date] = None


class LeadReportFilters(ReportFilters):
    status: Optional[LeadStatus] = None


class ReportPeriod(BaseModel):
    date_from: Optional[date] = None
    date_to: Optional[date] = None


class PnLRevenue(BaseModel):
    total_eur: float
    transaction_count: int


class PnLCosts(BaseModel):
    total_try: float
    total_eur: float
    transaction_count: int
    exchange_rate_used: Optional[float] = Field(None, description="TRY per EUR used to convert costs")


class PnLProfit(BaseModel):
    net_profit_eur: float
    profit_margin_pct: float


class PnLReport(BaseModel):
    """Completed client payments against completed vendor payments."""

    period: ReportPeriod
    revenue: PnLRevenue
    costs: PnLCosts
    profit: PnLProfit


class RevenueSummary(BaseModel):
    total_bookings_value_eur: float
    total_received_eur: float
    total_bookings_count: int


class PaymentStatusRevenue(BaseModel):
    status: PaymentStatus
    amount_eur: float
    count: int


class BookingStatusRevenue(BaseModel):
    status: BookingStatus
    value_eur: float
    count: int


class RevenueReport(BaseModel):
    """Booked value and client payments split by status."""

    period: ReportPeriod
    summary: RevenueSummary
    by_payment_status: List[PaymentStatusRevenue]
    by_booking_status: List[BookingStatusRevenue]


class LeadsSummary(BaseModel):
    total_leads: int
    won_leads: int
    lost_leads: int
    conversion_rate: float = Field(..., description="Won leads as a percentage of all leads")
    average_budget_eur: float
    leads_with_quotations: int


class LeadStatusCount(BaseModel):
    status: LeadStatus
    count: int
    percentage: float


class LeadSourceCount(BaseModel):
    source: str
    count: int
    percentage: float


class LeadsReport(BaseModel):
    """Lead pipeline statistics."""

    period: ReportPeriod
    summary: LeadsSummary
    by_status: List[LeadStatusCount]
    by_source: List[LeadSourceCount]
