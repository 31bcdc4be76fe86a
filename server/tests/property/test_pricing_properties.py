"""Property-based tests for season overlap and PAX pricing."""

from datetime import date, timedelta

from hypothesis import given
from hypothesis import strategies as st

from tourcrm.models.enums import ExpenseCategory, TransportPricingMode
from tourcrm.services.pricing import PAX_SLABS, calculate_pricing_table, price_from_cost
from tourcrm.services.rate_overlap import ranges_overlap

# Strategies for generating test data
days = st.dates(min_value=date(2020, 1, 1), max_value=date(2030, 12, 31))
seasons = st.tuples(days, st.integers(min_value=0, max_value=400)).map(
    lambda pair: (pair[0], pair[0] + timedelta(days=pair[1]))
)
prices = st.floats(min_value=0, max_value=10_000, allow_nan=False, allow_infinity=False)
percentages = st.floats(min_value=0, max_value=100, allow_nan=False, allow_infinity=False)
categories = st.sampled_from(list(ExpenseCategory))

expenses = st.lists(
    st.fixed_dictionaries({
        "category": categories.map(lambda c: c.value),
        "price": prices,
        "vehicle_count": st.integers(min_value=0, max_value=5),
        "price_per_vehicle": prices,
    }),
    max_size=12,
)


@given(a=seasons, b=seasons)
def test_overlap_is_symmetric(a, b):
    assert ranges_overlap(*a, *b) == ranges_overlap(*b, *a)


@given(a=seasons, b=seasons)
def test_overlap_matches_shared_days(a, b):
    """Two inclusive seasons overlap exactly when they share a calendar day."""
    latest_start = max(a[0], b[0])
    earliest_end = min(a[1], b[1])
    assert ranges_overlap(*a, *b) == (latest_start <= earliest_end)


@given(season=seasons)
def test_season_overlaps_itself(season):
    assert ranges_overlap(*season, *season)


@given(season=seasons, gap=st.integers(min_value=1, max_value=365))
def test_adjacent_seasons_do_not_overlap(season, gap):
    following = (season[1] + timedelta(days=gap), season[1] + timedelta(days=gap + 30))
    assert not ranges_overlap(*season, *following)


@given(lines=expenses, markup=percentages, tax=percentages)
def test_total_mode_cost_grows_with_pax(lines, markup, tax):
    table = calculate_pricing_table(lines, markup, tax, TransportPricingMode.TOTAL)
    costs = [table[f"pax{pax}"]["total_cost"] for pax in PAX_SLABS]
    assert costs == sorted(costs)


@given(lines=expenses, markup=percentages, tax=percentages)
def test_total_mode_price_per_person_is_flat(lines, markup, tax):
    """Without vehicle pricing every traveller pays the same whatever the group size."""
    table = calculate_pricing_table(lines, markup, tax, TransportPricingMode.TOTAL)
    per_person = [table[f"pax{pax}"]["price_per_person"] for pax in PAX_SLABS]
    assert max(per_person) - min(per_person) <= 0.011


@given(
    vehicles=st.integers(min_value=0, max_value=5),
    per_vehicle=st.floats(min_value=0, max_value=5_000, allow_nan=False, allow_infinity=False),
)
def test_vehicle_lines_cost_the_same_for_every_slab(vehicles, per_vehicle):
    line = {
        "category": ExpenseCategory.TRANSPORTATION.value,
        "price": 10,
        "vehicle_count": vehicles,
        "price_per_vehicle": per_vehicle,
    }
    table = calculate_pricing_table([line], 0, 0, TransportPricingMode.VEHICLE)
    costs = {table[f"pax{pax}"]["total_cost"] for pax in PAX_SLABS}
    assert len(costs) == 1


@given(lines=expenses, markup=percentages, tax=percentages)
def test_table_components_add_up(lines, markup, tax):
    table = calculate_pricing_table(lines, markup, tax)
    for row in table.values():
        assert abs(row["total_cost"] + row["markup"] + row["tax"] - row["total_price"]) <= 0.02
        assert row["total_price"] >= row["total_cost"]


@given(
    cost=st.floats(min_value=0, max_value=1_000_000, allow_nan=False, allow_infinity=False),
    markup=percentages,
    rate=st.floats(min_value=1, max_value=100, allow_nan=False, allow_infinity=False),
)
def test_price_never_below_converted_cost(cost, markup, rate):
    assert price_from_cost(cost, markup, rate) >= round(cost / rate, 2) - 0.01
