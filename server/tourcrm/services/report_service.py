"""Tenant reports: profit and loss, revenue and the lead pipeline."""

import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ValidationError
from ..models.booking import Booking
from ..models.client import Lead
from ..models.enums import Currency, LeadStatus, PaymentStatus
from ..models.exchange_rate import ExchangeRate
from ..models.payment import PaymentClient, PaymentVendor
from ..schemas.report import (
    BookingStatusRevenue,
    LeadReportFilters,
    LeadsReport,
    LeadsSummary,
    LeadSourceCount,
    LeadStatusCount,
    PaymentStatusRevenue,
    PnLCosts,
    PnLProfit,
    PnLReport,
    PnLRevenue,
    ReportFilters,
    ReportPeriod,
    RevenueReport,
    RevenueSummary,
)
from .exchange_rate_service import ExchangeRateService

logger = logging.getLogger(__name__)


def _round2(value: float) -> float:
    return round(value, 2)


def _percentage(part: int, whole: int) -> float:
    return _round2(part / whole * 100) if whole else 0.0


def created_between(column: Any, filters: ReportFilters) -> list:
    """Conditions keeping ``column`` inside the filter's days, both ends included."""
    conditions = []
    if filters.date_from:
        conditions.append(column >= datetime.combine(filters.date_from, time.min))
    if filters.date_to:
        conditions.append(column < datetime.combine(filters.date_to + timedelta(days=1), time.min))
    return conditions


class ReportService:
    """Aggregate reports over one tenant's payments, bookings and leads."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _average_try_per_eur(self, tenant_id: UUID, filters: ReportFilters) -> Optional[float]:
        conditions = [
            ExchangeRate.tenant_id == tenant_id,
            ExchangeRate.from_currency == Currency.TRY.value,
            ExchangeRate.to_currency == Currency.EUR.value,
        ]
        if filters.date_from:
            conditions.append(ExchangeRate.rate_date >= filters.date_from)
        if filters.date_to:
            conditions.append(ExchangeRate.rate_date <= filters.date_to)

        average = await self.db.scalar(select(func.avg(ExchangeRate.rate)).where(*conditions))
        if average:
            return float(average)
        return await ExchangeRateService(self.db).get_latest_rate(
            tenant_id, Currency.TRY, Currency.EUR, filters.date_to or date.today()
        )

    async def get_pnl_report(self, tenant_id: UUID, filters: ReportFilters) -> PnLReport:
        """
        Completed client payments (EUR) against completed vendor payments (TRY).

        Vendor costs are converted at the average TRY/EUR rate of the period,
        or the latest rate before its end when the period has none.

        Raises:
            ValidationError: If there are vendor costs but no exchange rate to convert them
        """
        revenue_total, revenue_count = (await self.db.execute(
            select(func.coalesce(func.sum(PaymentClient.amount_eur), 0), func.count(PaymentClient.id))
            .where(
                PaymentClient.tenant_id == tenant_id,
                PaymentClient.status == PaymentStatus.COMPLETED.value,
                *created_between(PaymentClient.created_at, filters),
            )
        )).one()
        cost_total, cost_count = (await self.db.execute(
            select(func.coalesce(func.sum(PaymentVendor.amount_try), 0), func.count(PaymentVendor.id))
            .where(
                PaymentVendor.tenant_id == tenant_id,
                PaymentVendor.status == PaymentStatus.COMPLETED.value,
                *created_between(PaymentVendor.created_at, filters),
            )
        )).one()

        revenue_eur = float(revenue_total)
        cost_try = float(cost_total)
        rate = await self._average_try_per_eur(tenant_id, filters)
        if rate is None and cost_try > 0:
            raise ValidationError(
                detail="No TRY to EUR exchange rate available to convert vendor costs",
                code="EXCHANGE_RATE_MISSING",
            )

        cost_eur = cost_try / rate if rate else 0.0
        net_profit = revenue_eur - cost_eur

        logger.debug(
            "P&L report built",
            extra={"tenant_id": str(tenant_id), "revenue_eur": revenue_eur, "cost_try": cost_try, "rate": rate}
        )

        return PnLReport(
            period=ReportPeriod(date_from=filters.date_from, date_to=filters.date_to),
            revenue=PnLRevenue(total_eur=_round2(revenue_eur), transaction_count=revenue_count),
            costs=PnLCosts(
                total_try=_round2(cost_try),
                total_eur=_round2(cost_eur),
                transaction_count=cost_count,
                exchange_rate_used=rate,
            ),
            profit=PnLProfit(
                net_profit_eur=_round2(net_profit),
                profit_margin_pct=_round2(net_profit / revenue_eur * 100) if revenue_eur > 0 else 0.0,
            ),
        )

    async def get_revenue_report(self, tenant_id: UUID, filters: ReportFilters) -> RevenueReport:
        payment_rows = (await self.db.execute(
            select(
                PaymentClient.status,
                func.coalesce(func.sum(PaymentClient.amount_eur), 0),
                func.count(PaymentClient.id),
            )
            .where(PaymentClient.tenant_id == tenant_id, *created_between(PaymentClient.created_at, filters))
            .group_by(PaymentClient.status)
            .order_by(PaymentClient.status)
        )).all()
        booking_rows = (await self.db.execute(
            select(Booking.status, func.coalesce(func.sum(Booking.total_sell_eur), 0), func.count(Booking.id))
            .where(Booking.tenant_id == tenant_id, *created_between(Booking.created_at, filters))
            .group_by(Booking.status)
            .order_by(Booking.status)
        )).all()

        by_payment_status = [
            PaymentStatusRevenue(status=status, amount_eur=_round2(float(amount)), count=count)
            for status, amount, count in payment_rows
        ]
        by_booking_status = [
            BookingStatusRevenue(status=status, value_eur=_round2(float(value)), count=count)
            for status, value, count in booking_rows
        ]

        return RevenueReport(
            period=ReportPeriod(date_from=filters.date_from, date_to=filters.date_to),
            summary=RevenueSummary(
                total_bookings_value_eur=_round2(sum(row.value_eur for row in by_booking_status)),
                total_received_eur=_round2(sum(
                    row.amount_eur for row in by_payment_status if row.status == PaymentStatus.COMPLETED
                )),
                total_bookings_count=sum(row.count for row in by_booking_status),
            ),
            by_payment_status=by_payment_status,
            by_booking_status=by_booking_status,
        )

    async def get_leads_report(self, tenant_id: UUID, filters: LeadReportFilters) -> LeadsReport:
        conditions = [Lead.tenant_id == tenant_id, *created_between(Lead.created_at, filters)]
        if filters.status:
            conditions.append(Lead.status == filters.status.value)

        status_rows = (await self.db.execute(
            select(Lead.status, func.count(Lead.id)).where(*conditions).group_by(Lead.status).order_by(Lead.status)
        )).all()
        source_rows = (await self.db.execute(
            select(Lead.source, func.count(Lead.id))
            .where(*conditions)
            .group_by(Lead.source)
            .order_by(func.count(Lead.id).desc())
        )).all()
        average_budget = await self.db.scalar(select(func.avg(Lead.budget_eur)).where(*conditions))
        with_quotations = await self.db.scalar(
            select(func.count(Lead.id)).where(*conditions, Lead.quotations.any())
        )

        counts = {LeadStatus(status): count for status, count in status_rows}
        total = sum(counts.values())
        won = counts.get(LeadStatus.WON, 0)

        return LeadsReport(
            period=ReportPeriod(date_from=filters.date_from, date_to=filters.date_to),
            summary=LeadsSummary(
                total_leads=total,
                won_leads=won,
                lost_leads=counts.get(LeadStatus.LOST, 0),
                conversion_rate=_percentage(won, total),
                average_budget_eur=_round2(float(average_budget or 0)),
                leads_with_quotations=with_quotations or 0,
            ),
            by_status=[
                LeadStatusCount(status=status, count=count, percentage=_percentage(count, total))
                for status, count in counts.items()
            ],
            by_source=[
                LeadSourceCount(source=source or "Unknown", count=count, percentage=_percentage(count, total))
                for source, count in source_rows
            ],
        )
