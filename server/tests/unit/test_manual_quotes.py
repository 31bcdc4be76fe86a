"""Unit tests for manual quotes and their PAX pricing table."""

import pytest

from tourcrm.core.exceptions import NotFoundError
from tourcrm.models.enums import ExpenseCategory, TransportPricingMode
from tourcrm.schemas.common import PaginationParams
from tourcrm.schemas.manual_quote import (
    CreateManualQuoteRequest,
    DayIn,
    DayUpdate,
    ExpenseIn,
    ExpenseUpdate,
    UpdateManualQuoteRequest,
)
from tourcrm.services.manual_quote_service import ManualQuoteService


def two_day_quote(**overrides):
    data = {
        "quote_name": "Cappadocia Highlights",
        "season_name": "Summer 2025",
        "pax": 4,
        "markup": 10,
        "tax": 0,
        "days": [
            DayIn(
                day_number=1,
                expenses=[
                    ExpenseIn(category=ExpenseCategory.HOTEL_ACCOMMODATION, price=100),
                    ExpenseIn(category=ExpenseCategory.MEALS, price=20),
                ],
            ),
            DayIn(
                day_number=2,
                expenses=[
                    ExpenseIn(
                        category=ExpenseCategory.TRANSPORTATION,
                        price=30,
                        vehicle_count=1,
                        price_per_vehicle=400,
                    ),
                ],
            ),
        ],
    }
    data.update(overrides)
    return CreateManualQuoteRequest(**data)


@pytest.mark.asyncio
async def test_create_quote_prices_every_slab(test_session, tenant):
    quote = await ManualQuoteService(test_session).create_quote(tenant.id, two_day_quote())

    assert [day.day_number for day in quote.days] == [1, 2]
    # 150 per person, 2 people, +10%
    assert quote.pricing_table["pax2"]["total_cost"] == 300.0
    assert quote.pricing_table["pax2"]["total_price"] == 330.0
    assert quote.pricing_table["pax10"]["price_per_person"] == 165.0


@pytest.mark.asyncio
async def test_vehicle_mode_reprices_transport(test_session, tenant):
    quote = await ManualQuoteService(test_session).create_quote(
        tenant.id, two_day_quote(markup=0, transport_pricing_mode=TransportPricingMode.VEHICLE)
    )

    # 120 per person plus one 400 vehicle
    assert quote.pricing_table["pax2"]["total_cost"] == 640.0
    assert quote.pricing_table["pax10"]["total_cost"] == 1600.0


@pytest.mark.asyncio
async def test_update_markup_recalculates(test_session, tenant):
    service = ManualQuoteService(test_session)
    quote = await service.create_quote(tenant.id, two_day_quote())

    updated = await service.update_quote(tenant.id, quote.id, UpdateManualQuoteRequest(markup=20, tax=10))

    # 300 cost, +20% = 360, +10% tax = 396
    assert updated.pricing_table["pax2"]["markup"] == 60.0
    assert updated.pricing_table["pax2"]["tax"] == 36.0
    assert updated.pricing_table["pax2"]["total_price"] == 396.0


@pytest.mark.asyncio
async def test_expense_changes_recalculate(test_session, tenant):
    service = ManualQuoteService(test_session)
    quote = await service.create_quote(tenant.id, two_day_quote(markup=0))
    day_one = quote.days[0]

    quote = await service.add_expense(
        tenant.id, quote.id, day_one.id, ExpenseIn(category=ExpenseCategory.ENTRANCE_FEES, price=25)
    )
    assert quote.pricing_table["pax2"]["total_cost"] == 350.0

    fee = next(e for e in quote.days[0].expenses if e.category == ExpenseCategory.ENTRANCE_FEES.value)
    quote = await service.update_expense(tenant.id, quote.id, fee.id, ExpenseUpdate(price=50))
    assert quote.pricing_table["pax2"]["total_cost"] == 400.0

    quote = await service.remove_expense(tenant.id, quote.id, fee.id)
    assert quote.pricing_table["pax2"]["total_cost"] == 300.0


@pytest.mark.asyncio
async def test_day_changes_recalculate(test_session, tenant):
    service = ManualQuoteService(test_session)
    quote = await service.create_quote(tenant.id, two_day_quote(markup=0))

    quote = await service.add_day(
        tenant.id,
        quote.id,
        DayIn(day_number=3, expenses=[ExpenseIn(category=ExpenseCategory.TIPS, price=10)]),
    )
    assert len(quote.days) == 3
    assert quote.pricing_table["pax2"]["total_cost"] == 320.0

    third = quote.days[2]
    quote = await service.update_day(tenant.id, quote.id, third.id, DayUpdate(day_number=4))
    assert [day.day_number for day in quote.days] == [1, 2, 4]

    quote = await service.remove_day(tenant.id, quote.id, third.id)
    assert len(quote.days) == 2
    assert quote.pricing_table["pax2"]["total_cost"] == 300.0


@pytest.mark.asyncio
async def test_removed_quote_is_hidden(test_session, tenant):
    service = ManualQuoteService(test_session)
    quote = await service.create_quote(tenant.id, two_day_quote())

    await service.remove_quote(tenant.id, quote.id)

    with pytest.raises(NotFoundError):
        await service.get_quote_by_id_or_raise(tenant.id, quote.id)
    quotes, total = await service.list_quotes(tenant.id, PaginationParams())
    assert (quotes, total) == ([], 0)


@pytest.mark.asyncio
async def test_expense_of_other_quote_is_not_found(test_session, tenant):
    service = ManualQuoteService(test_session)
    first = await service.create_quote(tenant.id, two_day_quote())
    second = await service.create_quote(tenant.id, two_day_quote(quote_name="Istanbul Weekend"))
    foreign_expense = first.days[0].expenses[0]

    with pytest.raises(NotFoundError):
        await service.remove_expense(tenant.id, second.id, foreign_expense.id)
