"""Unit tests for seasonal rate overlap validation."""

from datetime import date

import pytest
import pytest_asyncio

from tourcrm.core.exceptions import NotFoundError, RateOverlapError, ValidationError
from tourcrm.models.catalog import ServiceOffering, Supplier
from tourcrm.models.enums import BoardType, ServiceType
from tourcrm.schemas.rates import HotelRoomRateCreate, HotelRoomRateUpdate, TransferRateCreate
from tourcrm.services.rate_overlap import ranges_overlap
from tourcrm.services.rate_service import HotelRoomRateService, TransferRateService


@pytest_asyncio.fixture
async def hotel_offering(test_session, tenant):
    supplier = Supplier(tenant_id=tenant.id, name="Cave Suites", supplier_type=ServiceType.HOTEL_ROOM)
    test_session.add(supplier)
    await test_session.flush()
    offering = ServiceOffering(
        tenant_id=tenant.id,
        supplier_id=supplier.id,
        service_type=ServiceType.HOTEL_ROOM,
        title="Deluxe cave room",
        location="Goreme",
    )
    test_session.add(offering)
    await test_session.commit()
    return offering


def hotel_rate(offering, season_from, season_to, board_type=BoardType.BB, price=120.0):
    return HotelRoomRateCreate(
        service_offering_id=offering.id,
        season_from=season_from,
        season_to=season_to,
        board_type=board_type,
        price_per_person_double=price,
    )


@pytest.mark.parametrize(
    "a,b,expected",
    [
        ((date(2025, 1, 1), date(2025, 3, 31)), (date(2025, 4, 1), date(2025, 6, 30)), False),
        ((date(2025, 1, 1), date(2025, 3, 31)), (date(2025, 3, 31), date(2025, 6, 30)), True),
        ((date(2025, 1, 1), date(2025, 12, 31)), (date(2025, 5, 1), date(2025, 5, 2)), True),
        ((date(2025, 5, 1), date(2025, 5, 2)), (date(2025, 1, 1), date(2025, 12, 31)), True),
        ((date(2025, 2, 1), date(2025, 4, 1)), (date(2025, 1, 1), date(2025, 2, 15)), True),
    ],
)
def test_ranges_overlap(a, b, expected):
    assert ranges_overlap(*a, *b) is expected


@pytest.mark.asyncio
async def test_create_non_overlapping_rates(test_session, tenant, hotel_offering):
    service = HotelRoomRateService(test_session)

    first = await service.create_rate(tenant.id, hotel_rate(hotel_offering, date(2025, 1, 1), date(2025, 3, 31)))
    second = await service.create_rate(tenant.id, hotel_rate(hotel_offering, date(2025, 4, 1), date(2025, 6, 30)))

    assert first.id != second.id
    rates = await service.list_rates(tenant.id, service_offering_id=hotel_offering.id)
    assert [r.season_from for r in rates] == [date(2025, 1, 1), date(2025, 4, 1)]


@pytest.mark.asyncio
async def test_touching_seasons_overlap(test_session, tenant, hotel_offering):
    """Seasons are inclusive, so sharing the boundary day is an overlap."""
    service = HotelRoomRateService(test_session)
    existing = await service.create_rate(
        tenant.id, hotel_rate(hotel_offering, date(2025, 1, 1), date(2025, 3, 31))
    )

    with pytest.raises(RateOverlapError) as exc_info:
        await service.create_rate(tenant.id, hotel_rate(hotel_offering, date(2025, 3, 31), date(2025, 6, 30)))

    problem = exc_info.value.problem_details
    assert exc_info.value.status_code == 409
    assert problem["code"] == "RATE_OVERLAP"
    assert problem["conflicting_resource"]["id"] == str(existing.id)


@pytest.mark.asyncio
async def test_enclosing_season_overlaps(test_session, tenant, hotel_offering):
    service = HotelRoomRateService(test_session)
    await service.create_rate(tenant.id, hotel_rate(hotel_offering, date(2025, 5, 1), date(2025, 5, 31)))

    with pytest.raises(RateOverlapError):
        await service.create_rate(tenant.id, hotel_rate(hotel_offering, date(2025, 1, 1), date(2025, 12, 31)))


@pytest.mark.asyncio
async def test_board_types_do_not_conflict(test_session, tenant, hotel_offering):
    service = HotelRoomRateService(test_session)
    await service.create_rate(tenant.id, hotel_rate(hotel_offering, date(2025, 1, 1), date(2025, 3, 31)))

    half_board = await service.create_rate(
        tenant.id, hotel_rate(hotel_offering, date(2025, 1, 1), date(2025, 3, 31), board_type=BoardType.HB)
    )

    assert half_board.board_type == BoardType.HB.value


@pytest.mark.asyncio
async def test_inactive_rates_are_ignored(test_session, tenant, hotel_offering):
    service = HotelRoomRateService(test_session)
    old = await service.create_rate(tenant.id, hotel_rate(hotel_offering, date(2025, 1, 1), date(2025, 3, 31)))

    await service.remove_rate(tenant.id, old.id)
    replacement = await service.create_rate(
        tenant.id, hotel_rate(hotel_offering, date(2025, 1, 1), date(2025, 3, 31), price=140.0)
    )

    assert replacement.price_per_person_double == 140.0


@pytest.mark.asyncio
async def test_reactivation_is_checked_for_overlap(test_session, tenant, hotel_offering):
    service = HotelRoomRateService(test_session)
    old = await service.create_rate(tenant.id, hotel_rate(hotel_offering, date(2025, 1, 1), date(2025, 3, 31)))
    await service.remove_rate(tenant.id, old.id)
    await service.create_rate(tenant.id, hotel_rate(hotel_offering, date(2025, 2, 1), date(2025, 4, 30)))

    with pytest.raises(RateOverlapError):
        await service.update_rate(tenant.id, old.id, HotelRoomRateUpdate(is_active=True))

    active = await service.list_rates(tenant.id, service_offering_id=hotel_offering.id)
    assert len(active) == 1


@pytest.mark.asyncio
async def test_reactivation_without_conflict(test_session, tenant, hotel_offering):
    service = HotelRoomRateService(test_session)
    old = await service.create_rate(tenant.id, hotel_rate(hotel_offering, date(2025, 1, 1), date(2025, 3, 31)))
    await service.remove_rate(tenant.id, old.id)

    restored = await service.update_rate(tenant.id, old.id, HotelRoomRateUpdate(is_active=True))

    assert restored.is_active is True


@pytest.mark.asyncio
async def test_update_skips_itself(test_session, tenant, hotel_offering):
    service = HotelRoomRateService(test_session)
    rate = await service.create_rate(tenant.id, hotel_rate(hotel_offering, date(2025, 1, 1), date(2025, 3, 31)))

    updated = await service.update_rate(
        tenant.id, rate.id, HotelRoomRateUpdate(season_to=date(2025, 4, 15))
    )

    assert updated.season_to == date(2025, 4, 15)


@pytest.mark.asyncio
async def test_update_into_neighbour_is_rejected(test_session, tenant, hotel_offering):
    service = HotelRoomRateService(test_session)
    await service.create_rate(tenant.id, hotel_rate(hotel_offering, date(2025, 1, 1), date(2025, 3, 31)))
    later = await service.create_rate(tenant.id, hotel_rate(hotel_offering, date(2025, 4, 1), date(2025, 6, 30)))

    with pytest.raises(RateOverlapError):
        await service.update_rate(tenant.id, later.id, HotelRoomRateUpdate(season_from=date(2025, 3, 15)))


@pytest.mark.asyncio
async def test_reversed_season_is_invalid(test_session, tenant, hotel_offering):
    service = HotelRoomRateService(test_session)

    with pytest.raises(ValidationError):
        await service.create_rate(tenant.id, hotel_rate(hotel_offering, date(2025, 3, 31), date(2025, 1, 1)))


@pytest.mark.asyncio
async def test_offering_must_match_rate_type(test_session, tenant, hotel_offering):
    request = TransferRateCreate(
        service_offering_id=hotel_offering.id,
        season_from=date(2025, 1, 1),
        season_to=date(2025, 3, 31),
        pricing_model="PER_TRIP",
        base_cost_try=1500,
    )

    with pytest.raises(NotFoundError):
        await TransferRateService(test_session).create_rate(tenant.id, request)


@pytest.mark.asyncio
async def test_overlap_is_tenant_scoped(test_session, tenant, other_tenant, hotel_offering):
    service = HotelRoomRateService(test_session)
    await service.create_rate(tenant.id, hotel_rate(hotel_offering, date(2025, 1, 1), date(2025, 3, 31)))

    # The other tenant cannot see the offering at all
    with pytest.raises(NotFoundError):
        await service.create_rate(other_tenant.id, hotel_rate(hotel_offering, date(2025, 1, 1), date(2025, 3, 31)))
