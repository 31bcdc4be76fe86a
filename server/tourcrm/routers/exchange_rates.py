"""Exchange rate router."""

import logging
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import ALL_STAFF, FINANCE, Pagination, require_roles
from ..core.exceptions import NotFoundError
from ..models.enums import Currency
from ..schemas.auth import CurrentUser
from ..schemas.common import MessageResponse, PaginatedResponse, PaginationParams
from ..schemas.exchange_rate import (
    CreateExchangeRateRequest,
    ExchangeRate,
    ImportCsvRequest,
    ImportCsvResult,
    LatestExchangeRate,
    UpdateExchangeRateRequest,
)
from ..services.exchange_rate_service import ExchangeRateService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/exchange-rates", tags=["exchange-rates"])

DB_DEPENDENCY = Depends(get_db)
STAFF = Depends(require_roles(*ALL_STAFF))
EDITORS = Depends(require_roles(*FINANCE))


@router.get("", response_model=PaginatedResponse[ExchangeRate])
async def list_exchange_rates(
    from_currency: Optional[Currency] = Query(None),
    to_currency: Optional[Currency] = Query(None),
    pagination: PaginationParams = Pagination,
    current_user: CurrentUser = STAFF,
    db: AsyncSession = DB_DEPENDENCY,
):
    rates, total = await ExchangeRateService(db).list_rates(
        current_user.tenant_uuid, pagination, from_currency=from_currency, to_currency=to_currency
    )
    return PaginatedResponse[ExchangeRate].build([ExchangeRate.model_validate(r) for r in rates], total, pagination)


@router.get("/latest", response_model=LatestExchangeRate)
async def latest_exchange_rate(
    from_currency: Currency = Query(Currency.TRY, alias="from"),
    to_currency: Currency = Query(Currency.EUR, alias="to"),
    on_date: Optional[date] = Query(None, alias="date"),
    current_user: CurrentUser = STAFF,
    db: AsyncSession = DB_DEPENDENCY,
):
    """Rate in effect on ``date`` (default today): the latest one dated on or before it."""
    on_date = on_date or date.today()
    rate = await ExchangeRateService(db).get_latest_rate(
        current_user.tenant_uuid, from_currency, to_currency, on_date=on_date
    )
    if rate is None:
        raise NotFoundError(
            resource_type="exchange_rate",
            detail=f"No exchange rate found for {from_currency.value} to {to_currency.value}",
        )
    return LatestExchangeRate(
        from_currency=from_currency, to_currency=to_currency, rate=float(rate), on_date=on_date
    )


@router.post("/import-csv", response_model=ImportCsvResult)
async def import_exchange_rates(
    request: ImportCsvRequest,
    current_user: CurrentUser = EDITORS,
    db: AsyncSession = DB_DEPENDENCY,
) -> ImportCsvResult:
    result = await ExchangeRateService(db).import_csv(current_user.tenant_uuid, request.csv, request.source)
    logger.info(
        "Exchange rates imported",
        extra={"tenant_id": current_user.tenant_id, "imported": result.imported, "skipped": result.skipped}
    )
    return result


@router.get("/{rate_id}", response_model=ExchangeRate)
async def get_exchange_rate(rate_id: UUID, current_user: CurrentUser = STAFF, db: AsyncSession = DB_DEPENDENCY):
    rate = await ExchangeRateService(db).get_rate_by_id_or_raise(current_user.tenant_uuid, rate_id)
    return ExchangeRate.model_validate(rate)


@router.post("", response_model=ExchangeRate, status_code=status.HTTP_201_CREATED)
async def create_exchange_rate(
    request: CreateExchangeRateRequest,
    current_user: CurrentUser = EDITORS,
    db: AsyncSession = DB_DEPENDENCY,
):
    rate = await ExchangeRateService(db).create_rate(current_user.tenant_uuid, request)
    return ExchangeRate.model_validate(rate)


@router.patch("/{rate_id}", response_model=ExchangeRate)
async def update_exchange_rate(
    rate_id: UUID,
    request: UpdateExchangeRateRequest,
    current_user: CurrentUser = EDITORS,
    db: AsyncSession = DB_DEPENDENCY,
):
    rate = await ExchangeRateService(db).update_rate(current_user.tenant_uuid, rate_id, request)
    return ExchangeRate.model_validate(rate)


@router.delete("/{rate_id}", response_model=MessageResponse)
async def delete_exchange_rate(rate_id: UUID, current_user: CurrentUser = EDITORS, db: AsyncSession = DB_DEPENDENCY):
    await ExchangeRateService(db).delete_rate(current_user.tenant_uuid, rate_id)
    return MessageResponse(message="Exchange rate deleted")
