"""Seasonal rate services, one per service type, sharing a generic base."""

import logging
from datetime import date
from typing import Any, ClassVar, Generic, Optional, Type, TypeVar
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import NotFoundError, RateOverlapError, ValidationError
from ..core.observability import metrics_collector
from ..models.enums import ServiceType
from ..models.rates import ActivityRate, GuideRate, HotelRoomRate, TransferRate, VehicleRate
from .catalog_service import ServiceOfferingService
from .rate_overlap import validate_no_overlap

logger = logging.getLogger(__name__)

RateModel = TypeVar("RateModel")


class RateService(Generic[RateModel]):
    """
    CRUD for one rate table.

    Subclasses set ``model``, ``service_type`` and ``resource_type``; hotel
    rates additionally scope the overlap check by board type.
    """

    model: ClassVar[Type[Any]]
    service_type: ClassVar[ServiceType]
    resource_type: ClassVar[str]
    scoped_by_board_type: ClassVar[bool] = False

    def __init__(self, db: AsyncSession):
        self.db = db

    def _board_type(self, value: Any) -> Optional[str]:
        if not self.scoped_by_board_type or value is None:
            return None
        return getattr(value, "value", value)

    async def _check_overlap(
        self,
        tenant_id: UUID,
        service_offering_id: UUID,
        season_from: date,
        season_to: date,
        exclude_id: Optional[UUID] = None,
        board_type: Optional[str] = None,
    ) -> None:
        try:
            await validate_no_overlap(
                self.db,
                self.model,
                tenant_id,
                service_offering_id,
                season_from,
                season_to,
                exclude_id=exclude_id,
                board_type=board_type,
            )
        except RateOverlapError:
            metrics_collector.record_rate_overlap(self.resource_type)
            raise

    @staticmethod
    def _check_season(season_from: date, season_to: date) -> None:
        if season_from >= season_to:
            raise ValidationError(
                detail="Season start date must be before end date",
                errors={"season_from": season_from.isoformat(), "season_to": season_to.isoformat()},
            )

    async def get_rate_by_id(self, tenant_id: UUID, rate_id: UUID) -> Optional[RateModel]:
        stmt = select(self.model).where(self.model.id == rate_id, self.model.tenant_id == tenant_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_rate_by_id_or_raise(self, tenant_id: UUID, rate_id: UUID) -> RateModel:
        rate = await self.get_rate_by_id(tenant_id, rate_id)
        if rate is None:
            raise NotFoundError(resource_type=self.resource_type, resource_id=str(rate_id))
        return rate

    async def list_rates(
        self,
        tenant_id: UUID,
        service_offering_id: Optional[UUID] = None,
        include_inactive: bool = False,
    ) -> list[RateModel]:
        conditions = [self.model.tenant_id == tenant_id]
        if service_offering_id:
            conditions.append(self.model.service_offering_id == service_offering_id)
        if not include_inactive:
            conditions.append(self.model.is_active.is_(True))

        stmt = select(self.model).where(*conditions).order_by(self.model.season_from)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_rate_for_date(
        self,
        tenant_id: UUID,
        service_offering_id: UUID,
        on_date: date,
        board_type: Optional[Any] = None,
    ) -> Optional[RateModel]:
        """Active rate whose season contains ``on_date``; the newest one when several board types apply."""
        conditions = [
            self.model.tenant_id == tenant_id,
            self.model.service_offering_id == service_offering_id,
            self.model.season_from <= on_date,
            self.model.season_to >= on_date,
            self.model.is_active.is_(True),
        ]
        board_type = self._board_type(board_type)
        if board_type is not None:
            conditions.append(self.model.board_type == board_type)

        stmt = select(self.model).where(*conditions).order_by(self.model.created_at.desc()).limit(1)
        return await self.db.scalar(stmt)

    async def create_rate(self, tenant_id: UUID, request: BaseModel) -> RateModel:
        """
        Create a rate after checking the season and the offering.

        Raises:
            ValidationError: If the season is empty or reversed
            NotFoundError: If the offering is missing or of another service type
            RateOverlapError: If the season overlaps an active rate
        """
        self._check_season(request.season_from, request.season_to)

        offering = await ServiceOfferingService(self.db).get_offering_by_id(
            tenant_id, request.service_offering_id
        )
        if offering is None or offering.service_type != self.service_type.value:
            raise NotFoundError(
                resource_type="service_offering",
                resource_id=str(request.service_offering_id),
                detail=(
                    f"Service offering {request.service_offering_id} not found "
                    f"or is not of type {self.service_type.value}"
                ),
            )

        data = request.model_dump()
        await self._check_overlap(
            tenant_id,
            request.service_offering_id,
            request.season_from,
            request.season_to,
            board_type=self._board_type(data.get("board_type")),
        )

        rate = self.model(tenant_id=tenant_id, **data)
        self.db.add(rate)
        await self.db.commit()
        await self.db.refresh(rate)

        logger.info(
            "Rate created",
            extra={
                "rate_type": self.resource_type,
                "tenant_id": str(tenant_id),
                "rate_id": str(rate.id),
                "service_offering_id": str(rate.service_offering_id),
                "season_from": rate.season_from.isoformat(),
                "season_to": rate.season_to.isoformat(),
            }
        )
        return rate

    async def update_rate(self, tenant_id: UUID, rate_id: UUID, request: BaseModel) -> RateModel:
        """Apply changes; a changed season or board type, or a reactivation, is rechecked for overlap."""
        rate = await self.get_rate_by_id_or_raise(tenant_id, rate_id)
        changes = request.model_dump(exclude_unset=True)

        season_from = changes.get("season_from", rate.season_from)
        season_to = changes.get("season_to", rate.season_to)
        board_type = self._board_type(changes.get("board_type") or getattr(rate, "board_type", None))

        reactivated = changes.get("is_active") is True and not rate.is_active
        reshaped = bool({"season_from", "season_to", "board_type"} & changes.keys())
        will_be_active = changes.get("is_active", rate.is_active)

        if reshaped:
            self._check_season(season_from, season_to)
        if will_be_active and (reshaped or reactivated):
            await self._check_overlap(
                tenant_id,
                rate.service_offering_id,
                season_from,
                season_to,
                exclude_id=rate.id,
                board_type=board_type,
            )

        for field, value in changes.items():
            setattr(rate, field, value)

        await self.db.commit()
        await self.db.refresh(rate)
        return rate

    async def remove_rate(self, tenant_id: UUID, rate_id: UUID) -> RateModel:
        """Soft delete: the rate stays but no longer takes part in overlap checks."""
        rate = await self.get_rate_by_id_or_raise(tenant_id, rate_id)
        rate.is_active = False
        await self.db.commit()
        await self.db.refresh(rate)

        logger.info(
            "Rate deactivated",
            extra={"rate_type": self.resource_type, "tenant_id": str(tenant_id), "rate_id": str(rate_id)}
        )
        return rate


class HotelRoomRateService(RateService[HotelRoomRate]):
    model = HotelRoomRate
    service_type = ServiceType.HOTEL_ROOM
    resource_type = "hotel_room_rate"
    scoped_by_board_type = True


class TransferRateService(RateService[TransferRate]):
    model = TransferRate
    service_type = ServiceType.TRANSFER
    resource_type = "transfer_rate"


class VehicleRateService(RateService[VehicleRate]):
    model = VehicleRate
    service_type = ServiceType.VEHICLE_HIRE
    resource_type = "vehicle_rate"


class GuideRateService(RateService[GuideRate]):
    model = GuideRate
    service_type = ServiceType.GUIDE
    resource_type = "guide_rate"


class ActivityRateService(RateService[ActivityRate]):
    model = ActivityRate
    service_type = ServiceType.ACTIVITY
    resource_type = "activity_rate"


RATE_SERVICES: dict[ServiceType, Type[RateService]] = {
    service.service_type: service
    for service in (
        HotelRoomRateService,
        TransferRateService,
        VehicleRateService,
        GuideRateService,
        ActivityRateService,
    )
}
