"""Booking router: bookings, their items, P&L and statistics."""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import ALL_STAFF, FINANCE, SALES, Pagination, require_roles
from ..models.enums import BookingStatus, UserRole
from ..schemas.auth import CurrentUser
from ..schemas.booking import (
    Booking,
    BookingDetail,
    BookingItem,
    BookingPnL,
    BookingStats,
    CreateBookingItemRequest,
    CreateBookingRequest,
    UpdateBookingRequest,
)
from ..schemas.common import MessageResponse, PaginatedResponse, PaginationParams
from ..services.booking_service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/bookings", tags=["bookings"])

DB_DEPENDENCY = Depends(get_db)
STAFF = Depends(require_roles(*ALL_STAFF))
EDITORS = Depends(require_roles(*SALES, UserRole.OPERATIONS))
FINANCE_STAFF = Depends(require_roles(*FINANCE))


@router.get("", response_model=PaginatedResponse[Booking])
async def list_bookings(
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    client_id: Optional[UUID] = Query(None),
    pagination: PaginationParams = Pagination,
    current_user: CurrentUser = STAFF,
    db: AsyncSession = DB_DEPENDENCY,
):
    bookings, total = await BookingService(db).list_bookings(
        current_user.tenant_uuid, pagination, status=status_filter, client_id=client_id
    )
    return PaginatedResponse[Booking].build([Booking.model_validate(b) for b in bookings], total, pagination)


@router.get("/stats", response_model=BookingStats)
async def booking_stats(current_user: CurrentUser = STAFF, db: AsyncSession = DB_DEPENDENCY):
    return await BookingService(db).get_stats_by_status(current_user.tenant_uuid)


@router.get("/{booking_id}", response_model=BookingDetail)
async def get_booking(booking_id: UUID, current_user: CurrentUser = STAFF, db: AsyncSession = DB_DEPENDENCY):
    booking = await BookingService(db).get_booking_by_id_or_raise(
        current_user.tenant_uuid, booking_id, with_items=True
    )
    return BookingDetail.model_validate(booking)


@router.post("", response_model=BookingDetail, status_code=status.HTTP_201_CREATED)
async def create_booking(
    request: CreateBookingRequest,
    current_user: CurrentUser = EDITORS,
    db: AsyncSession = DB_DEPENDENCY,
):
    """Create a booking directly; the code is generated when omitted."""
    booking = await BookingService(db).create_booking(current_user.tenant_uuid, request)
    return BookingDetail.model_validate(booking)


@router.patch("/{booking_id}", response_model=Booking)
async def update_booking(
    booking_id: UUID,
    request: UpdateBookingRequest,
    current_user: CurrentUser = EDITORS,
    db: AsyncSession = DB_DEPENDENCY,
):
    booking = await BookingService(db).update_booking(current_user.tenant_uuid, booking_id, request)
    return Booking.model_validate(booking)


@router.delete("/{booking_id}", response_model=MessageResponse)
async def delete_booking(booking_id: UUID, current_user: CurrentUser = EDITORS, db: AsyncSession = DB_DEPENDENCY):
    await BookingService(db).delete_booking(current_user.tenant_uuid, booking_id)
    return MessageResponse(message="Booking deleted")


@router.get("/{booking_id}/items", response_model=List[BookingItem])
async def list_booking_items(booking_id: UUID, current_user: CurrentUser = STAFF, db: AsyncSession = DB_DEPENDENCY):
    items = await BookingService(db).list_items(current_user.tenant_uuid, booking_id)
    return [BookingItem.model_validate(item) for item in items]


@router.post("/{booking_id}/items", response_model=BookingItem, status_code=status.HTTP_201_CREATED)
async def add_booking_item(
    booking_id: UUID,
    request: CreateBookingItemRequest,
    current_user: CurrentUser = EDITORS,
    db: AsyncSession = DB_DEPENDENCY,
):
    item = await BookingService(db).add_item(current_user.tenant_uuid, booking_id, request)
    return BookingItem.model_validate(item)


@router.delete("/{booking_id}/items/{item_id}", response_model=MessageResponse)
async def remove_booking_item(
    booking_id: UUID,
    item_id: UUID,
    current_user: CurrentUser = EDITORS,
    db: AsyncSession = DB_DEPENDENCY,
):
    await BookingService(db).remove_item(current_user.tenant_uuid, booking_id, item_id)
    return MessageResponse(message="Booking item removed")


@router.get("/{booking_id}/pnl", response_model=BookingPnL)
async def booking_pnl(booking_id: UUID, current_user: CurrentUser = FINANCE_STAFF, db: AsyncSession = DB_DEPENDENCY):
    """Revenue, cost and margin at the booking's locked exchange rate."""
    return await BookingService(db).calculate_pnl(current_user.tenant_uuid, booking_id)
