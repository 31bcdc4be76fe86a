"""Manual quote service: day-by-day quotes priced across PAX slabs."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.exceptions import NotFoundError
from ..models.manual_quote import ManualQuote, ManualQuoteDay, ManualQuoteExpense
from ..schemas.common import PaginationParams
from ..schemas.manual_quote import (
    CreateManualQuoteRequest,
    DayIn,
    DayUpdate,
    ExpenseIn,
    ExpenseUpdate,
    UpdateManualQuoteRequest,
)
from .pricing import calculate_pricing_table

logger = logging.getLogger(__name__)


class ManualQuoteService:
    """Service for manual quote operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_quote_by_id(self, tenant_id: UUID, quote_id: UUID) -> Optional[ManualQuote]:
        stmt = (
            select(ManualQuote)
            .where(
                ManualQuote.id == quote_id,
                ManualQuote.tenant_id == tenant_id,
                ManualQuote.is_active.is_(True),
            )
            .options(selectinload(ManualQuote.days).selectinload(ManualQuoteDay.expenses))
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_quote_by_id_or_raise(self, tenant_id: UUID, quote_id: UUID) -> ManualQuote:
        quote = await self.get_quote_by_id(tenant_id, quote_id)
        if quote is None:
            raise NotFoundError(resource_type="manual_quote", resource_id=str(quote_id))
        return quote

    async def _get_day_or_raise(self, tenant_id: UUID, quote_id: UUID, day_id: UUID) -> ManualQuoteDay:
        stmt = select(ManualQuoteDay).where(
            ManualQuoteDay.id == day_id,
            ManualQuoteDay.quote_id == quote_id,
            ManualQuoteDay.tenant_id == tenant_id,
        )
        day = (await self.db.execute(stmt)).scalar_one_or_none()
        if day is None:
            raise NotFoundError(resource_type="manual_quote_day", resource_id=str(day_id))
        return day

    async def _get_expense_or_raise(
        self, tenant_id: UUID, quote_id: UUID, expense_id: UUID
    ) -> ManualQuoteExpense:
        stmt = (
            select(ManualQuoteExpense)
            .join(ManualQuoteDay, ManualQuoteExpense.day_id == ManualQuoteDay.id)
            .where(
                ManualQuoteExpense.id == expense_id,
                ManualQuoteExpense.tenant_id == tenant_id,
                ManualQuoteDay.quote_id == quote_id,
            )
        )
        expense = (await self.db.execute(stmt)).scalar_one_or_none()
        if expense is None:
            raise NotFoundError(resource_type="manual_quote_expense", resource_id=str(expense_id))
        return expense

    async def recalculate(self, tenant_id: UUID, quote_id: UUID) -> ManualQuote:
        """Recompute and store the pricing table from the quote's current expenses."""
        quote = await self.get_quote_by_id_or_raise(tenant_id, quote_id)
        expenses = [expense for day in quote.days for expense in day.expenses]
        quote.pricing_table = calculate_pricing_table(
            expenses, quote.markup, quote.tax, quote.transport_pricing_mode
        )
        await self.db.commit()

        logger.debug(
            "Manual quote repriced",
            extra={"tenant_id": str(tenant_id), "quote_id": str(quote_id), "expenses": len(expenses)}
        )
        return await self.get_quote_by_id_or_raise(tenant_id, quote_id)

    def _build_day(self, tenant_id: UUID, day: DayIn) -> ManualQuoteDay:
        return ManualQuoteDay(
            tenant_id=tenant_id,
            day_number=day.day_number,
            day_date=day.day_date,
            expenses=[ManualQuoteExpense(tenant_id=tenant_id, **e.model_dump()) for e in day.expenses],
        )

    async def list_quotes(
        self, tenant_id: UUID, pagination: PaginationParams
    ) -> tuple[list[ManualQuote], int]:
        conditions = [ManualQuote.tenant_id == tenant_id, ManualQuote.is_active.is_(True)]
        total = await self.db.scalar(select(func.count()).select_from(ManualQuote).where(*conditions))
        stmt = (
            select(ManualQuote)
            .where(*conditions)
            .order_by(ManualQuote.created_at.desc())
            .offset(pagination.offset)
            .limit(pagination.limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total or 0

    async def create_quote(self, tenant_id: UUID, request: CreateManualQuoteRequest) -> ManualQuote:
        quote = ManualQuote(tenant_id=tenant_id, **request.model_dump(exclude={"days"}))
        quote.days = [self._build_day(tenant_id, day) for day in request.days]
        self.db.add(quote)
        await self.db.flush()

        logger.info(
            "Manual quote created",
            extra={"tenant_id": str(tenant_id), "quote_id": str(quote.id), "days": len(request.days)}
        )
        return await self.recalculate(tenant_id, quote.id)

    async def update_quote(
        self, tenant_id: UUID, quote_id: UUID, request: UpdateManualQuoteRequest
    ) -> ManualQuote:
        quote = await self.get_quote_by_id_or_raise(tenant_id, quote_id)
        for field, value in request.model_dump(exclude_unset=True).items():
            setattr(quote, field, value)
        await self.db.flush()
        return await self.recalculate(tenant_id, quote_id)

    async def remove_quote(self, tenant_id: UUID, quote_id: UUID) -> None:
        """Soft delete."""
        quote = await self.get_quote_by_id_or_raise(tenant_id, quote_id)
        quote.is_active = False
        await self.db.commit()
        logger.info("Manual quote deactivated", extra={"tenant_id": str(tenant_id), "quote_id": str(quote_id)})

    async def add_day(self, tenant_id: UUID, quote_id: UUID, request: DayIn) -> ManualQuote:
        await self.get_quote_by_id_or_raise(tenant_id, quote_id)
        day = self._build_day(tenant_id, request)
        day.quote_id = quote_id
        self.db.add(day)
        await self.db.flush()
        return await self.recalculate(tenant_id, quote_id)

    async def update_day(self, tenant_id: UUID, quote_id: UUID, day_id: UUID, request: DayUpdate) -> ManualQuote:
        await self.get_quote_by_id_or_raise(tenant_id, quote_id)
        day = await self._get_day_or_raise(tenant_id, quote_id, day_id)
        for field, value in request.model_dump(exclude_unset=True).items():
            setattr(day, field, value)
        await self.db.flush()
        return await self.recalculate(tenant_id, quote_id)

    async def remove_day(self, tenant_id: UUID, quote_id: UUID, day_id: UUID) -> ManualQuote:
        await self.get_quote_by_id_or_raise(tenant_id, quote_id)
        day = await self._get_day_or_raise(tenant_id, quote_id, day_id)
        await self.db.delete(day)
        await self.db.flush()
        return await self.recalculate(tenant_id, quote_id)

    async def add_expense(
        self, tenant_id: UUID, quote_id: UUID, day_id: UUID, request: ExpenseIn
    ) -> ManualQuote:
        await self.get_quote_by_id_or_raise(tenant_id, quote_id)
        await self._get_day_or_raise(tenant_id, quote_id, day_id)
        self.db.add(ManualQuoteExpense(tenant_id=tenant_id, day_id=day_id, **request.model_dump()))
        await self.db.flush()
        return await self.recalculate(tenant_id, quote_id)

    async def update_expense(
        self, tenant_id: UUID, quote_id: UUID, expense_id: UUID, request: ExpenseUpdate
    ) -> ManualQuote:
        await self.get_quote_by_id_or_raise(tenant_id, quote_id)
        expense = await self._get_expense_or_raise(tenant_id, quote_id, expense_id)
        for field, value in request.model_dump(exclude_unset=True).items():
            setattr(expense, field, value)
        await self.db.flush()
        return await self.recalculate(tenant_id, quote_id)

    async def remove_expense(self, tenant_id: UUID, quote_id: UUID, expense_id: UUID) -> ManualQuote:
        await self.get_quote_by_id_or_raise(tenant_id, quote_id)
        expense = await self._get_expense_or_raise(tenant_id, quote_id, expense_id)
        await self.db.delete(expense)
        await self.db.flush()
        return await self.recalculate(tenant_id, quote_id)
