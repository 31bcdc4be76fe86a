"""Season overlap checks shared by all rate services."""

import logging
from datetime import date
from typing import Optional, Type
from uuid import UUID

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import RateOverlapError

logger = logging.getLogger(__name__)


def ranges_overlap(start1: date, end1: date, start2: date, end2: date) -> bool:
    """
    Return True when two inclusive date ranges share at least one day.

    Ranges that only touch at an endpoint overlap.
    """
    return start1 <= end2 and start2 <= end1


async def validate_no_overlap(
    db: AsyncSession,
    model: Type,
    tenant_id: UUID,
    service_offering_id: UUID,
    season_from: date,
    season_to: date,
    exclude_id: Optional[UUID] = None,
    board_type: Optional[str] = None,
) -> None:
    """
    Reject a season that intersects an active rate of the same offering.

    Args:
        db: Database session
        model: Rate model class to search
        tenant_id: Owning tenant
        service_offering_id: Offering the rate prices
        season_from: First day of the new season
        season_to: Last day of the new season
        exclude_id: Rate being updated, skipped in the search
        board_type: Restrict the search to one board type (hotel rooms)

    Raises:
        RateOverlapError: If an overlapping active rate exists
    """
    conditions = [
        model.tenant_id == tenant_id,
        model.service_offering_id == service_offering_id,
        model.is_active.is_(True),
        or_(
            # new season starts inside an existing one
            and_(model.season_from <= season_from, model.season_to >= season_from),
            # new season ends inside an existing one
            and_(model.season_from <= season_to, model.season_to >= season_to),
            # new season contains an existing one
            and_(model.season_from >= season_from, model.season_to <= season_to),
        ),
    ]
    if exclude_id is not None:
        conditions.append(model.id != exclude_id)
    if board_type is not None:
        conditions.append(model.board_type == board_type)

    stmt = select(model).where(*conditions).order_by(model.season_from).limit(1)
    result = await db.execute(stmt)
    existing = result.scalar_one_or_none()

    if existing is None:
        return

    logger.warning(
        "Rate season overlap rejected",
        extra={
            "rate_type": model.__tablename__,
            "tenant_id": str(tenant_id),
            "service_offering_id": str(service_offering_id),
            "existing_rate_id": str(existing.id),
            "season_from": season_from.isoformat(),
            "season_to": season_to.isoformat(),
        }
    )
    raise RateOverlapError(
        existing_id=str(existing.id),
        season_from=existing.season_from,
        season_to=existing.season_to,
        board_type=board_type,
    )
