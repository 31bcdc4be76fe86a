"""Seasonal rate routers, one per service type, built from a shared factory."""

import logging
from typing import List, Optional, Type
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import ALL_STAFF, CATALOG_EDITORS, require_roles
from ..schemas.auth import CurrentUser
from ..schemas import rates as schemas
from ..services.rate_service import (
    ActivityRateService,
    GuideRateService,
    HotelRoomRateService,
    RateService,
    TransferRateService,
    VehicleRateService,
)

logger = logging.getLogger(__name__)

DB_DEPENDENCY = Depends(get_db)
STAFF = Depends(require_roles(*ALL_STAFF))
EDITORS = Depends(require_roles(*CATALOG_EDITORS))


def build_rate_router(
    path: str,
    service_cls: Type[RateService],
    create_schema: Type[BaseModel],
    update_schema: Type[BaseModel],
    out_schema: Type[BaseModel],
) -> APIRouter:
    """Create the list/get/create/update/remove routes for one rate table."""
    router = APIRouter(prefix=f"/v1/rates/{path}", tags=["rates"])

    @router.get("", response_model=List[out_schema])
    async def list_rates(
        service_offering_id: Optional[UUID] = Query(None),
        include_inactive: bool = Query(False),
        current_user: CurrentUser = STAFF,
        db: AsyncSession = DB_DEPENDENCY,
    ):
        rates = await service_cls(db).list_rates(
            current_user.tenant_uuid, service_offering_id=service_offering_id, include_inactive=include_inactive
        )
        return [out_schema.model_validate(rate) for rate in rates]

    @router.get("/{rate_id}", response_model=out_schema)
    async def get_rate(rate_id: UUID, current_user: CurrentUser = STAFF, db: AsyncSession = DB_DEPENDENCY):
        rate = await service_cls(db).get_rate_by_id_or_raise(current_user.tenant_uuid, rate_id)
        return out_schema.model_validate(rate)

    @router.post("", response_model=out_schema, status_code=status.HTTP_201_CREATED)
    async def create_rate(
        request: create_schema,
        current_user: CurrentUser = EDITORS,
        db: AsyncSession = DB_DEPENDENCY,
    ):
        """Create a rate; overlapping seasons for the same offering are rejected with 409."""
        rate = await service_cls(db).create_rate(current_user.tenant_uuid, request)
        return out_schema.model_validate(rate)

    @router.patch("/{rate_id}", response_model=out_schema)
    async def update_rate(
        rate_id: UUID,
        request: update_schema,
        current_user: CurrentUser = EDITORS,
        db: AsyncSession = DB_DEPENDENCY,
    ):
        rate = await service_cls(db).update_rate(current_user.tenant_uuid, rate_id, request)
        return out_schema.model_validate(rate)

    @router.delete("/{rate_id}", response_model=out_schema)
    async def remove_rate(rate_id: UUID, current_user: CurrentUser = EDITORS, db: AsyncSession = DB_DEPENDENCY):
        rate = await service_cls(db).remove_rate(current_user.tenant_uuid, rate_id)
        return out_schema.model_validate(rate)

    return router


hotel_room_rates_router = build_rate_router(
    "hotel-rooms",
    HotelRoomRateService,
    schemas.HotelRoomRateCreate,
    schemas.HotelRoomRateUpdate,
    schemas.HotelRoomRate,
)
transfer_rates_router = build_rate_router(
    "transfers",
    TransferRateService,
    schemas.TransferRateCreate,
    schemas.TransferRateUpdate,
    schemas.TransferRate,
)
vehicle_rates_router = build_rate_router(
    "vehicles",
    VehicleRateService,
    schemas.VehicleRateCreate,
    schemas.VehicleRateUpdate,
    schemas.VehicleRate,
)
guide_rates_router = build_rate_router(
    "guides",
    GuideRateService,
    schemas.GuideRateCreate,
    schemas.GuideRateUpdate,
    schemas.GuideRate,
)
activity_rates_router = build_rate_router(
    "activities",
    ActivityRateService,
    schemas.ActivityRateCreate,
    schemas.ActivityRateUpdate,
    schemas.ActivityRate,
)

rate_routers = [
    hotel_room_rates_router,
    transfer_rates_router,
    vehicle_rates_router,
    guide_rates_router,
    activity_rates_router,
]
