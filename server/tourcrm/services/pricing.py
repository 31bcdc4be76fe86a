"""Pricing helpers: the manual quote PAX table and currency/margin arithmetic."""

from datetime import date
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Union

from ..models.enums import ExpenseCategory, TransportPricingMode

PAX_SLABS = (2, 4, 6, 8, 10)


def _get(expense: Any, name: str) -> Any:
    if isinstance(expense, Mapping):
        return expense.get(name)
    return getattr(expense, name, None)


def _category_value(category: Any) -> Optional[str]:
    if isinstance(category, ExpenseCategory):
        return category.value
    return category


def expense_cost_for_pax(
    expense: Any,
    pax: int,
    transport_pricing_mode: Union[TransportPricingMode, str] = TransportPricingMode.TOTAL,
) -> float:
    """Cost of one expense line for a group of ``pax`` travellers."""
    mode = TransportPricingMode(transport_pricing_mode)
    if (
        mode == TransportPricingMode.VEHICLE
        and _category_value(_get(expense, "category")) == ExpenseCategory.TRANSPORTATION.value
    ):
        per_vehicle = _get(expense, "price_per_vehicle")
        vehicles = _get(expense, "vehicle_count")
        if per_vehicle and vehicles:
            return float(per_vehicle) * int(vehicles)
        return 0.0

    return float(_get(expense, "price") or 0) * pax


def calculate_pricing_table(
    expenses: Iterable[Any],
    markup: float,
    tax: float,
    transport_pricing_mode: Union[TransportPricingMode, str] = TransportPricingMode.TOTAL,
    slabs: Sequence[int] = PAX_SLABS,
) -> Dict[str, Dict[str, float]]:
    """
    Price a set of expenses for every PAX slab.

    Each expense is either a mapping or an object exposing ``category``,
    ``price``, ``price_per_vehicle`` and ``vehicle_count``. Markup is applied
    to the summed cost and tax is applied on top of the marked-up amount.

    Returns:
        ``{"pax2": {...}, "pax4": {...}, ...}`` with ``total_cost``, ``markup``,
        ``tax``, ``total_price`` and ``price_per_person`` rounded to cents.
    """
    expenses = list(expenses)
    table: Dict[str, Dict[str, float]] = {}

    for pax in slabs:
        total_cost = sum(
            expense_cost_for_pax(expense, pax, transport_pricing_mode) for expense in expenses
        )
        with_markup = total_cost * (1 + markup / 100)
        markup_amount = with_markup - total_cost
        total_price = with_markup * (1 + tax / 100)
        tax_amount = total_price - with_markup

        table[f"pax{pax}"] = {
            "total_cost": round(total_cost, 2),
            "markup": round(markup_amount, 2),
            "tax": round(tax_amount, 2),
            "total_price": round(total_price, 2),
            "price_per_person": round(total_price / pax, 2),
        }

    return table


def price_from_cost(cost_try: float, markup_pct: float, rate: float) -> float:
    """EUR sell price for a TRY cost with markup, at ``rate`` TRY per EUR."""
    if cost_try < 0:
        raise ValueError("Cost cannot be negative")
    if markup_pct < 0:
        raise ValueError("Markup percentage cannot be negative")
    if rate <= 0:
        raise ValueError("Exchange rate must be positive")
    return round(cost_try * (1 + markup_pct / 100) / rate, 2)


def cost_from_price(sell_price_eur: float, markup_pct: float, rate: float) -> float:
    """TRY cost covered by a EUR sell price once the markup is removed."""
    if sell_price_eur < 0:
        raise ValueError("Sell price cannot be negative")
    if markup_pct < 0:
        raise ValueError("Markup percentage cannot be negative")
    if rate <= 0:
        raise ValueError("Exchange rate must be positive")
    return round(sell_price_eur * rate / (1 + markup_pct / 100), 2)


def calculate_margin(sell_price_eur: float, cost_try: float, rate: float) -> float:
    """Gross margin percentage; 0 when nothing is sold."""
    if sell_price_eur <= 0:
        return 0.0
    if rate <= 0:
        raise ValueError("Exchange rate must be positive")
    cost_eur = cost_try / rate
    return round((sell_price_eur - cost_eur) / sell_price_eur * 100, 2)


def calculate_profit(sell_price_eur: float, cost_try: float, rate: float) -> float:
    """Profit in EUR; negative for a loss."""
    if rate <= 0:
        raise ValueError("Exchange rate must be positive")
    return round(sell_price_eur - cost_try / rate, 2)


def calculate_vat(net_amount: float, vat_rate: float) -> float:
    if net_amount < 0:
        raise ValueError("Net amount cannot be negative")
    if vat_rate < 0:
        raise ValueError("VAT rate cannot be negative")
    return round(net_amount * vat_rate / 100, 2)


def calculate_gross(net_amount: float, vat_rate: float) -> float:
    return round(net_amount + calculate_vat(net_amount, vat_rate), 2)


def select_rate_by_date(rates: Iterable[Any], on_date: date) -> float:
    """
    Return the most recent exchange rate dated on or before ``on_date``.

    Raises:
        ValueError: If no rate qualifies or the selected rate is not positive
    """
    rates = list(rates)
    if not rates:
        raise ValueError("No exchange rates available")

    candidates = [rate for rate in rates if _get(rate, "rate_date") <= on_date]
    if not candidates:
        raise ValueError(f"No exchange rate found on or before {on_date.isoformat()}")

    selected = max(candidates, key=lambda rate: _get(rate, "rate_date"))
    value = float(_get(selected, "rate"))
    if value <= 0:
        raise ValueError("Invalid exchange rate: rate must be positive")
    return value
