"""Manual quote router: quotes, their days and expense lines."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import ALL_STAFF, SALES, Pagination, require_roles
from ..schemas.auth import CurrentUser
from ..schemas.common import MessageResponse, PaginatedResponse, PaginationParams
from ..schemas.manual_quote import (
    CreateManualQuoteRequest,
    DayIn,
    DayUpdate,
    ExpenseIn,
    ExpenseUpdate,
    ManualQuote,
    ManualQuoteSummary,
    UpdateManualQuoteRequest,
)
from ..services.manual_quote_service import ManualQuoteService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/manual-quotes", tags=["manual-quotes"])

DB_DEPENDENCY = Depends(get_db)
STAFF = Depends(require_roles(*ALL_STAFF))
EDITORS = Depends(require_roles(*SALES))


@router.get("", response_model=PaginatedResponse[ManualQuoteSummary])
async def list_manual_quotes(
    pagination: PaginationParams = Pagination,
    current_user: CurrentUser = STAFF,
    db: AsyncSession = DB_DEPENDENCY,
):
    quotes, total = await ManualQuoteService(db).list_quotes(current_user.tenant_uuid, pagination)
    return PaginatedResponse[ManualQuoteSummary].build(
        [ManualQuoteSummary.model_validate(q) for q in quotes], total, pagination
    )


@router.get("/{quote_id}", response_model=ManualQuote)
async def get_manual_quote(quote_id: UUID, current_user: CurrentUser = STAFF, db: AsyncSession = DB_DEPENDENCY):
    quote = await ManualQuoteService(db).get_quote_by_id_or_raise(current_user.tenant_uuid, quote_id)
    return ManualQuote.model_validate(quote)


@router.post("", response_model=ManualQuote, status_code=status.HTTP_201_CREATED)
async def create_manual_quote(
    request: CreateManualQuoteRequest,
    current_user: CurrentUser = EDITORS,
    db: AsyncSession = DB_DEPENDENCY,
):
    """Create a quote with its days and expenses; the PAX price table is computed on save."""
    quote = await ManualQuoteService(db).create_quote(current_user.tenant_uuid, request)
    return ManualQuote.model_validate(quote)


@router.patch("/{quote_id}", response_model=ManualQuote)
async def update_manual_quote(
    quote_id: UUID,
    request: UpdateManualQuoteRequest,
    current_user: CurrentUser = EDITORS,
    db: AsyncSession = DB_DEPENDENCY,
):
    quote = await ManualQuoteService(db).update_quote(current_user.tenant_uuid, quote_id, request)
    return ManualQuote.model_validate(quote)


@router.delete("/{quote_id}", response_model=MessageResponse)
async def remove_manual_quote(quote_id: UUID, current_user: CurrentUser = EDITORS, db: AsyncSession = DB_DEPENDENCY):
    await ManualQuoteService(db).remove_quote(current_user.tenant_uuid, quote_id)
    return MessageResponse(message="Manual quote deactivated")


@router.post("/{quote_id}/days", response_model=ManualQuote, status_code=status.HTTP_201_CREATED)
async def add_day(
    quote_id: UUID,
    request: DayIn,
    current_user: CurrentUser = EDITORS,
    db: AsyncSession = DB_DEPENDENCY,
):
    quote = await ManualQuoteService(db).add_day(current_user.tenant_uuid, quote_id, request)
    return ManualQuote.model_validate(quote)


@router.patch("/{quote_id}/days/{day_id}", response_model=ManualQuote)
async def update_day(
    quote_id: UUID,
    day_id: UUID,
    request: DayUpdate,
    current_user: CurrentUser = EDITORS,
    db: AsyncSession = DB_DEPENDENCY,
):
    quote = await ManualQuoteService(db).update_day(current_user.tenant_uuid, quote_id, day_id, request)
    return ManualQuote.model_validate(quote)


@router.delete("/{quote_id}/days/{day_id}", response_model=ManualQuote)
async def remove_day(
    quote_id: UUID,
    day_id: UUID,
    current_user: CurrentUser = EDITORS,
    db: AsyncSession = DB_DEPENDENCY,
):
    quote = await ManualQuoteService(db).remove_day(current_user.tenant_uuid, quote_id, day_id)
    return ManualQuote.model_validate(quote)


@router.post("/{quote_id}/days/{day_id}/expenses", response_model=ManualQuote, status_code=status.HTTP_201_CREATED)
async def add_expense(
    quote_id: UUID,
    day_id: UUID,
    request: ExpenseIn,
    current_user: CurrentUser = EDITORS,
    db: AsyncSession = DB_DEPENDENCY,
):
    quote = await ManualQuoteService(db).add_expense(current_user.tenant_uuid, quote_id, day_id, request)
    return ManualQuote.model_validate(quote)


@router.patch("/{quote_id}/expenses/{expense_id}", response_model=ManualQuote)
async def update_expense(
    quote_id: UUID,
    expense_id: UUID,
    request: ExpenseUpdate,
    current_user: CurrentUser = EDITORS,
    db: AsyncSession = DB_DEPENDENCY,
):
    quote = await ManualQuoteService(db).update_expense(current_user.tenant_uuid, quote_id, expense_id, request)
    return ManualQuote.model_validate(quote)


@router.delete("/{quote_id}/expenses/{expense_id}", response_model=ManualQuote)
async def remove_expense(
    quote_id: UUID,
    expense_id: UUID,
    current_user: CurrentUser = EDITORS,
    db: AsyncSession = DB_DEPENDENCY,
):
    quote = await ManualQuoteService(db).remove_expense(current_user.tenant_uuid, quote_id, expense_id)
    return ManualQuote.model_validate(quote)
