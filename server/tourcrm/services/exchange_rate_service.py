"""Exchange rate service: CRUD, latest-rate lookup and CSV import."""

import csv
import io
import logging
from datetime import date
from typing import Optional
from uuid import UUID

from cachetools import TTLCache
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..models.enums import Currency
from ..models.exchange_rate import ExchangeRate
from ..schemas.common import PaginationParams
from ..schemas.exchange_rate import (
    CreateExchangeRateRequest,
    ImportCsvResult,
    UpdateExchangeRateRequest,
)

logger = logging.getLogger(__name__)

# (tenant_id, from, to, on_date) -> rate
_rate_cache: TTLCache = TTLCache(
    maxsize=settings.exchange_rate_cache_size,
    ttl=settings.exchange_rate_cache_seconds,
)


def clear_rate_cache(tenant_id: Optional[UUID] = None) -> None:
    """Drop cached lookups for one tenant, or for all tenants."""
    if tenant_id is None:
        _rate_cache.clear()
        return
    for key in [k for k in list(_rate_cache.keys()) if k[0] == tenant_id]:
        _rate_cache.pop(key, None)


class ExchangeRateService:
    """Service for exchange-rate operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_rate_by_id(self, tenant_id: UUID, rate_id: UUID) -> Optional[ExchangeRate]:
        stmt = select(ExchangeRate).where(
            ExchangeRate.id == rate_id,
            ExchangeRate.tenant_id == tenant_id,
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_rate_by_id_or_raise(self, tenant_id: UUID, rate_id: UUID) -> ExchangeRate:
        rate = await self.get_rate_by_id(tenant_id, rate_id)
        if rate is None:
            raise NotFoundError(resource_type="exchange_rate", resource_id=str(rate_id))
        return rate

    async def list_rates(
        self,
        tenant_id: UUID,
        pagination: PaginationParams,
        from_currency: Optional[Currency] = None,
        to_currency: Optional[Currency] = None,
    ) -> tuple[list[ExchangeRate], int]:
        conditions = [ExchangeRate.tenant_id == tenant_id]
        if from_currency:
            conditions.append(ExchangeRate.from_currency == from_currency.value)
        if to_currency:
            conditions.append(ExchangeRate.to_currency == to_currency.value)

        total = await self.db.scalar(select(func.count()).select_from(ExchangeRate).where(*conditions))
        stmt = (
            select(ExchangeRate)
            .where(*conditions)
            .order_by(ExchangeRate.rate_date.desc())
            .offset(pagination.offset)
            .limit(pagination.limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total or 0

    async def _ensure_unique(
        self,
        tenant_id: UUID,
        from_currency: str,
        to_currency: str,
        rate_date: date,
        exclude_id: Optional[UUID] = None,
    ) -> None:
        conditions = [
            ExchangeRate.tenant_id == tenant_id,
            ExchangeRate.from_currency == from_currency,
            ExchangeRate.to_currency == to_currency,
            ExchangeRate.rate_date == rate_date,
        ]
        if exclude_id is not None:
            conditions.append(ExchangeRate.id != exclude_id)
        existing = await self.db.scalar(select(ExchangeRate.id).where(*conditions))
        if existing is not None:
            raise ConflictError(
                detail=(
                    f"Exchange rate for {from_currency}/{to_currency} on "
                    f"{rate_date.isoformat()} already exists"
                ),
                conflicting_resource={"id": str(existing)},
                code="EXCHANGE_RATE_EXISTS",
            )

    async def create_rate(self, tenant_id: UUID, request: CreateExchangeRateRequest) -> ExchangeRate:
        """
        Record a daily rate.

        Raises:
            ValidationError: If both currencies are the same
            ConflictError: If the pair already has a rate on that date
        """
        if request.from_currency == request.to_currency:
            raise ValidationError("From and to currencies must differ")

        await self._ensure_unique(
            tenant_id, request.from_currency.value, request.to_currency.value, request.rate_date
        )

        rate = ExchangeRate(tenant_id=tenant_id, **request.model_dump())
        self.db.add(rate)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError(
                detail="Exchange rate for this currency pair and date already exists",
                code="EXCHANGE_RATE_EXISTS",
            )
        await self.db.refresh(rate)
        clear_rate_cache(tenant_id)

        logger.info(
            "Exchange rate created",
            extra={
                "tenant_id": str(tenant_id),
                "pair": f"{rate.from_currency}/{rate.to_currency}",
                "rate": rate.rate,
                "rate_date": rate.rate_date.isoformat(),
            }
        )
        return rate

    async def update_rate(
        self, tenant_id: UUID, rate_id: UUID, request: UpdateExchangeRateRequest
    ) -> ExchangeRate:
        rate = await self.get_rate_by_id_or_raise(tenant_id, rate_id)
        changes = request.model_dump(exclude_unset=True)

        if "rate_date" in changes and changes["rate_date"] != rate.rate_date:
            await self._ensure_unique(
                tenant_id, rate.from_currency, rate.to_currency, changes["rate_date"], exclude_id=rate.id
            )

        for field, value in changes.items():
            setattr(rate, field, value)

        await self.db.commit()
        await self.db.refresh(rate)
        clear_rate_cache(tenant_id)
        return rate

    async def delete_rate(self, tenant_id: UUID, rate_id: UUID) -> None:
        rate = await self.get_rate_by_id_or_raise(tenant_id, rate_id)
        await self.db.delete(rate)
        await self.db.commit()
        clear_rate_cache(tenant_id)

    async def get_latest_rate(
        self,
        tenant_id: UUID,
        from_currency: Currency = Currency.TRY,
        to_currency: Currency = Currency.EUR,
        on_date: Optional[date] = None,
    ) -> Optional[float]:
        """
        Most recent rate dated on or before ``on_date`` (today by default).

        Lookups are cached in-process for ``exchange_rate_cache_seconds``,
        holding at most ``exchange_rate_cache_size`` entries.
        """
        on_date = on_date or date.today()
        cache_key = (tenant_id, Currency(from_currency).value, Currency(to_currency).value, on_date)

        cached = _rate_cache.get(cache_key)
        if cached is not None:
            return cached

        stmt = (
            select(ExchangeRate.rate)
            .where(
                ExchangeRate.tenant_id == tenant_id,
                ExchangeRate.from_currency == cache_key[1],
                ExchangeRate.to_currency == cache_key[2],
                ExchangeRate.rate_date <= on_date,
            )
            .order_by(ExchangeRate.rate_date.desc())
            .limit(1)
        )
        rate = await self.db.scalar(stmt)
        if rate is not None:
            _rate_cache[cache_key] = float(rate)
        return rate

    async def import_csv(self, tenant_id: UUID, text: str, source: Optional[str] = None) -> ImportCsvResult:
        """
        Import ``from,to,rate,YYYY-MM-DD`` lines.

        A leading header line is skipped. Rows that already exist are counted
        as skipped; malformed rows are reported in ``errors``.
        """
        result = ImportCsvResult()
        reader = csv.reader(io.StringIO(text.strip()))

        for line_no, row in enumerate(reader, start=1):
            if not row or all(not cell.strip() for cell in row):
                continue
            if line_no == 1 and row[0].strip().lower() in ("from", "from_currency"):
                continue
            if len(row) != 4:
                result.errors.append(f"Line {line_no}: expected 4 columns, got {len(row)}")
                continue

            try:
                from_currency = Currency(row[0].strip().upper())
                to_currency = Currency(row[1].strip().upper())
                value = float(row[2].strip())
                rate_date = date.fromisoformat(row[3].strip())
            except ValueError as e:
                result.errors.append(f"Line {line_no}: {e}")
                continue

            if value <= 0:
                result.errors.append(f"Line {line_no}: rate must be positive")
                continue

            existing = await self.db.scalar(
                select(ExchangeRate.id).where(
                    ExchangeRate.tenant_id == tenant_id,
                    ExchangeRate.from_currency == from_currency.value,
                    ExchangeRate.to_currency == to_currency.value,
                    ExchangeRate.rate_date == rate_date,
                )
            )
            if existing is not None:
                result.skipped += 1
                continue

            self.db.add(ExchangeRate(
                tenant_id=tenant_id,
                from_currency=from_currency,
                to_currency=to_currency,
                rate=value,
                rate_date=rate_date,
                source=source,
            ))
            # Flush per row so duplicate lines inside the same file are detected
            await self.db.flush()
            result.imported += 1

        await self.db.commit()
        clear_rate_cache(tenant_id)

        logger.info(
            "Exchange rates imported",
            extra={
                "tenant_id": str(tenant_id),
                "imported": result.imported,
                "skipped": result.skipped,
                "errors": len(result.errors),
            }
        )
        return result
