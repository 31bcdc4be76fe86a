"""Unit tests for pricing helpers."""

from datetime import date

import pytest

from tourcrm.models.enums import ExpenseCategory, TransportPricingMode
from tourcrm.services.pricing import (
    PAX_SLABS,
    calculate_gross,
    calculate_margin,
    calculate_pricing_table,
    calculate_profit,
    calculate_vat,
    cost_from_price,
    expense_cost_for_pax,
    price_from_cost,
    select_rate_by_date,
)


def test_price_from_cost_applies_markup_then_converts():
    """1000 TRY at 25% markup and 30 TRY/EUR is 41.67 EUR."""
    assert price_from_cost(1000, 25, 30) == 41.67


def test_cost_from_price_removes_markup():
    assert cost_from_price(125, 25, 30) == 3000.0


@pytest.mark.parametrize(
    "cost,markup,rate",
    [(-1, 10, 30), (100, -5, 30), (100, 10, 0)],
)
def test_price_from_cost_rejects_invalid_input(cost, markup, rate):
    with pytest.raises(ValueError):
        price_from_cost(cost, markup, rate)


def test_margin_and_profit():
    """Selling at 100 EUR something that cost 2000 TRY at 40 TRY/EUR."""
    assert calculate_margin(100, 2000, 40) == 50.0
    assert calculate_profit(100, 2000, 40) == 50.0


def test_margin_is_zero_without_sales():
    assert calculate_margin(0, 2000, 40) == 0.0


def test_loss_gives_negative_profit():
    assert calculate_profit(40, 2000, 40) == -10.0


def test_vat_and_gross():
    assert calculate_vat(100, 20) == 20.0
    assert calculate_gross(100, 20) == 120.0
    with pytest.raises(ValueError):
        calculate_vat(-1, 20)


def test_select_rate_by_date_picks_latest_on_or_before():
    rates = [
        {"rate_date": date(2025, 1, 1), "rate": 34.0},
        {"rate_date": date(2025, 1, 10), "rate": 35.0},
        {"rate_date": date(2025, 1, 20), "rate": 36.0},
    ]
    assert select_rate_by_date(rates, date(2025, 1, 15)) == 35.0
    assert select_rate_by_date(rates, date(2025, 1, 20)) == 36.0


def test_select_rate_by_date_without_candidates():
    with pytest.raises(ValueError):
        select_rate_by_date([], date(2025, 1, 1))
    with pytest.raises(ValueError):
        select_rate_by_date([{"rate_date": date(2025, 2, 1), "rate": 35.0}], date(2025, 1, 1))


def test_pricing_table_has_every_slab():
    table = calculate_pricing_table([], markup=10, tax=20)
    assert list(table) == [f"pax{pax}" for pax in PAX_SLABS]
    assert all(row["total_price"] == 0 for row in table.values())


def test_pricing_table_markup_then_tax():
    """100 per person: pax2 costs 200, +10% markup = 220, +20% tax = 264."""
    expenses = [{"category": ExpenseCategory.HOTEL_ACCOMMODATION.value, "price": 100}]

    table = calculate_pricing_table(expenses, markup=10, tax=20)

    assert table["pax2"] == {
        "total_cost": 200.0,
        "markup": 20.0,
        "tax": 44.0,
        "total_price": 264.0,
        "price_per_person": 132.0,
    }
    assert table["pax10"]["total_cost"] == 1000.0
    assert table["pax10"]["price_per_person"] == 132.0


def test_vehicle_mode_prices_transport_per_vehicle():
    transport = {
        "category": ExpenseCategory.TRANSPORTATION.value,
        "price": 50,
        "vehicle_count": 2,
        "price_per_vehicle": 300,
    }
    meals = {"category": ExpenseCategory.MEALS.value, "price": 20}

    table = calculate_pricing_table(
        [transport, meals], markup=0, tax=0, transport_pricing_mode=TransportPricingMode.VEHICLE
    )

    # 600 for the vehicles whatever the group size, plus 20 per person
    assert table["pax2"]["total_cost"] == 640.0
    assert table["pax10"]["total_cost"] == 800.0


def test_total_mode_prices_transport_per_person():
    transport = {
        "category": ExpenseCategory.TRANSPORTATION.value,
        "price": 50,
        "vehicle_count": 2,
        "price_per_vehicle": 300,
    }
    assert expense_cost_for_pax(transport, 4, TransportPricingMode.TOTAL) == 200.0
    assert expense_cost_for_pax(transport, 4, "vehicle") == 600.0


def test_vehicle_mode_ignores_transport_without_vehicle_data():
    transport = {"category": ExpenseCategory.TRANSPORTATION.value, "price": 50}
    assert expense_cost_for_pax(transport, 4, TransportPricingMode.VEHICLE) == 0.0
    assert expense_cost_for_pax({**transport, "vehicle_count": 2}, 4, "vehicle") == 0.0

    table = calculate_pricing_table([transport], markup=0, tax=0, transport_pricing_mode="vehicle")
    assert [table[f"pax{n}"]["total_cost"] for n in PAX_SLABS] == [0.0] * 5
