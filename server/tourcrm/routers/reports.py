"""Report router: profit and loss, revenue and leads."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import FINANCE, SALES, require_roles
from ..core.exceptions import ValidationError
from ..models.enums import LeadStatus, UserRole
from ..schemas.auth import CurrentUser
from ..schemas.report import LeadReportFilters, LeadsReport, PnLReport, ReportFilters, RevenueReport
from ..services.report_service import ReportService

router = APIRouter(prefix="/v1/reports", tags=["reports"])

DB_DEPENDENCY = Depends(get_db)
FINANCE_STAFF = Depends(require_roles(*FINANCE))
PIPELINE_STAFF = Depends(require_roles(*SALES, UserRole.OPERATIONS))


def report_filters(
    date_from: Optional[date] = Query(None, description="First day included"),
    date_to: Optional[date] = Query(None, description="Last day included"),
) -> ReportFilters:
    if date_from and date_to and date_to < date_from:
        raise ValidationError(detail="date_to must not be before date_from", code="INVALID_DATE_RANGE")
    return ReportFilters(date_from=date_from, date_to=date_to)


@router.get("/pnl", response_model=PnLReport)
async def pnl_report(
    filters: ReportFilters = Depends(report_filters),
    current_user: CurrentUser = FINANCE_STAFF,
    db: AsyncSession = DB_DEPENDENCY,
):
    return await ReportService(db).get_pnl_report(current_user.tenant_uuid, filters)


@router.get("/revenue", response_model=RevenueReport)
async def revenue_report(
    filters: ReportFilters = Depends(report_filters),
    current_user: CurrentUser = FINANCE_STAFF,
    db: AsyncSession = DB_DEPENDENCY,
):
    return await ReportService(db).get_revenue_report(current_user.tenant_uuid, filters)


@router.get("/leads", response_model=LeadsReport)
async def leads_report(
    status_filter: Optional[LeadStatus] = Query(None, alias="status"),
    filters: ReportFilters = Depends(report_filters),
    current_user: CurrentUser = PIPELINE_STAFF,
    db: AsyncSession = DB_DEPENDENCY,
):
    lead_filters = LeadReportFilters(date_from=filters.date_from, date_to=filters.date_to, status=status_filter)
    return await ReportService(db).get_leads_report(current_user.tenant_uuid, lead_filters)
