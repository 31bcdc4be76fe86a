"""Unit tests for client and vendor payments."""

from datetime import date, timedelta

import pytest
import pytest_asyncio

from tourcrm.core.exceptions import NotFoundError
from tourcrm.models.catalog import Vendor
from tourcrm.models.enums import PaymentMethod, PaymentStatus, VendorType
from tourcrm.schemas.booking import CreateBookingRequest
from tourcrm.schemas.common import PaginationParams
from tourcrm.schemas.payment import (
    CreateClientPaymentRequest,
    CreateVendorPaymentRequest,
    UpdateClientPaymentRequest,
)
from tourcrm.services.booking_service import BookingService
from tourcrm.services.payment_service import (
    ClientPaymentService,
    PaymentLimitExceededError,
    VendorPaymentService,
)


@pytest_asyncio.fixture
async def booking(test_session, tenant, client_record):
    """A 1000 EUR booking."""
    start = date.today() + timedelta(days=30)
    return await BookingService(test_session).create_booking(
        tenant.id,
        CreateBookingRequest(
            client_id=client_record.id,
            start_date=start,
            end_date=start + timedelta(days=4),
            locked_exchange_rate=35.0,
            total_cost_try=21000,
            total_sell_eur=1000,
        ),
    )


def payment(booking, amount, status=PaymentStatus.COMPLETED):
    return CreateClientPaymentRequest(
        booking_id=booking.id,
        amount_eur=amount,
        method=PaymentMethod.BANK_TRANSFER,
        status=status,
    )


@pytest.mark.asyncio
async def test_payments_up_to_total_are_accepted(test_session, tenant, booking):
    service = ClientPaymentService(test_session)

    await service.create_payment(tenant.id, payment(booking, 600))
    await service.create_payment(tenant.id, payment(booking, 400))

    assert await service.paid_total(tenant.id, booking.id) == 1000.0


@pytest.mark.asyncio
async def test_payment_over_total_is_rejected(test_session, tenant, booking):
    service = ClientPaymentService(test_session)
    await service.create_payment(tenant.id, payment(booking, 999.99))

    with pytest.raises(PaymentLimitExceededError) as exc_info:
        await service.create_payment(tenant.id, payment(booking, 0.02))

    problem = exc_info.value.problem_details
    assert problem["code"] == "PAYMENT_EXCEEDS_TOTAL"
    assert problem["errors"]["remaining_eur"] == pytest.approx(0.01)


@pytest.mark.asyncio
async def test_pending_payments_count_towards_limit(test_session, tenant, booking):
    service = ClientPaymentService(test_session)
    await service.create_payment(tenant.id, payment(booking, 800, status=PaymentStatus.PENDING))

    with pytest.raises(PaymentLimitExceededError):
        await service.create_payment(tenant.id, payment(booking, 300))


@pytest.mark.asyncio
async def test_failed_payments_do_not_count(test_session, tenant, booking):
    service = ClientPaymentService(test_session)
    await service.create_payment(tenant.id, payment(booking, 900, status=PaymentStatus.FAILED))

    created = await service.create_payment(tenant.id, payment(booking, 1000))

    assert created.amount_eur == 1000
    assert await service.paid_total(tenant.id, booking.id) == 1000.0


@pytest.mark.asyncio
async def test_update_rechecks_limit_without_itself(test_session, tenant, booking):
    service = ClientPaymentService(test_session)
    first = await service.create_payment(tenant.id, payment(booking, 500))
    await service.create_payment(tenant.id, payment(booking, 300))

    updated = await service.update_payment(tenant.id, first.id, UpdateClientPaymentRequest(amount_eur=700))
    assert updated.amount_eur == 700

    with pytest.raises(PaymentLimitExceededError):
        await service.update_payment(tenant.id, first.id, UpdateClientPaymentRequest(amount_eur=701))


@pytest.mark.asyncio
async def test_payment_defaults_paid_at(test_session, tenant, booking):
    created = await ClientPaymentService(test_session).create_payment(tenant.id, payment(booking, 100))
    assert created.paid_at is not None
    assert created.status == PaymentStatus.COMPLETED


@pytest.mark.asyncio
async def test_payment_for_unknown_booking(test_session, other_tenant, booking):
    with pytest.raises(NotFoundError):
        await ClientPaymentService(test_session).create_payment(other_tenant.id, payment(booking, 100))


@pytest.mark.asyncio
async def test_client_payment_stats(test_session, tenant, booking):
    service = ClientPaymentService(test_session)
    await service.create_payment(tenant.id, payment(booking, 200))
    await service.create_payment(tenant.id, payment(booking, 300, status=PaymentStatus.PENDING))

    stats = await service.get_stats(tenant.id)

    assert stats.total_count == 2
    assert stats.total_eur == 500.0
    by_status = {row.key: row for row in stats.by_status}
    assert by_status["PENDING"].total_eur == 300.0


@pytest.mark.asyncio
async def test_vendor_payment_lifecycle(test_session, tenant, booking):
    vendor = Vendor(tenant_id=tenant.id, name="Goreme Transfers", vendor_type=VendorType.TRANSPORT)
    test_session.add(vendor)
    await test_session.commit()

    service = VendorPaymentService(test_session)
    created = await service.create_payment(
        tenant.id,
        CreateVendorPaymentRequest(
            booking_id=booking.id,
            vendor_id=vendor.id,
            amount_try=4500,
            due_at=date.today() + timedelta(days=20),
        ),
    )

    assert created.status == PaymentStatus.PENDING
    payments, total = await service.list_payments(tenant.id, PaginationParams(), booking_id=booking.id)
    assert total == 1
    assert payments[0].vendor_id == vendor.id


@pytest.mark.asyncio
async def test_vendor_payment_requires_vendor(test_session, tenant, booking):
    from uuid import uuid4

    with pytest.raises(NotFoundError):
        await VendorPaymentService(test_session).create_payment(
            tenant.id,
            CreateVendorPaymentRequest(
                booking_id=booking.id,
                vendor_id=uuid4(),
                amount_try=100,
                due_at=date.today(),
            ),
        )
