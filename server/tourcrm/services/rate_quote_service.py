"""Price one service offering for a date from its seasonal rate table."""

import logging
import math
from typing import Any, Callable, Dict, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.exceptions import NotFoundError, ValidationError
from ..models.catalog import ServiceOffering
from ..models.enums import ServiceType
from ..schemas.rate_quote import RateQuote, RateQuotePricing, RateQuoteRequest
from .rate_service import RATE_SERVICES

logger = logging.getLogger(__name__)

DEFAULT_HOTEL_PAX = 2
DEFAULT_VEHICLE_MIN_HOURS = 4
DEFAULT_GUIDE_HOURS = 8

Calculation = Tuple[Dict[str, Any], RateQuotePricing]


def _money(value: Any) -> float:
    return float(value or 0)


def _value(field: Any) -> Any:
    return getattr(field, "value", field)


def hotel_cost(rate: Any, request: RateQuoteRequest) -> Calculation:
    """
    Per person per night at double occupancy.

    Children are charged at the 3-5 bracket and adults share rooms two by two.
    """
    nights = request.nights or 1
    pax = request.pax or DEFAULT_HOTEL_PAX
    children = request.children or 0
    adults = pax - children

    adult_cost = adults * _money(rate.price_per_person_double) * nights
    child_cost = children * _money(rate.child_price_3_to_5) * nights
    total = adult_cost + child_cost

    details = {
        "board_type": _value(rate.board_type),
        "nights": nights,
        "rooms": math.ceil(adults / 2),
        "adults": adults,
        "children": children,
        "pax": pax,
    }
    pricing = RateQuotePricing(
        rate_id=rate.id,
        pricing_model="PER_PERSON_NIGHT",
        breakdown={
            "price_per_person_double": _money(rate.price_per_person_double),
            "adult_cost_try": round(adult_cost, 2),
            "child_cost_try": round(child_cost, 2),
        },
        total_cost_try=round(total, 2),
        note="Assumes double occupancy for adults and the 3-5 age bracket for children",
    )
    return details, pricing


def transfer_cost(rate: Any, request: RateQuoteRequest) -> Calculation:
    """Base cost plus kilometres and hours beyond what the rate includes."""
    total = _money(rate.base_cost_try)
    breakdown: Dict[str, Any] = {"base_cost": total}

    if request.distance and rate.included_km and request.distance > rate.included_km:
        extra_km = request.distance - rate.included_km
        extra_km_cost = extra_km * _money(rate.extra_km_try)
        breakdown["extra_km"] = {"km": extra_km, "cost": round(extra_km_cost, 2)}
        total += extra_km_cost

    if request.hours and rate.included_hours and request.hours > rate.included_hours:
        extra_hours = request.hours - rate.included_hours
        extra_hours_cost = extra_hours * _money(rate.extra_hour_try)
        breakdown["extra_hours"] = {"hours": extra_hours, "cost": round(extra_hours_cost, 2)}
        total += extra_hours_cost

    details = {"distance": request.distance, "hours": request.hours}
    pricing = RateQuotePricing(
        rate_id=rate.id,
        pricing_model=_value(rate.pricing_model),
        breakdown=breakdown,
        total_cost_try=round(total, 2),
    )
    return details, pricing


def vehicle_cost(rate: Any, request: RateQuoteRequest) -> Calculation:
    """
    Daily hire when ``days`` is given, otherwise hourly hire.

    Daily hire adds the driver's daily cost when the rate has one and charges
    kilometres beyond the daily allowance. Hourly hire bills at least the
    rate's minimum hours.

    Raises:
        ValidationError: If hourly hire is requested from a rate without an hourly price
    """
    breakdown: Dict[str, Any] = {}
    note = None

    if request.days:
        days = request.days
        total = _money(rate.daily_rate_try) * days
        breakdown["daily_rate"] = {"days": days, "unit_cost": _money(rate.daily_rate_try), "cost": round(total, 2)}
        pricing_model = "DAILY"

        if rate.driver_daily_try:
            driver_cost = _money(rate.driver_daily_try) * days
            breakdown["driver"] = {"days": days, "cost": round(driver_cost, 2)}
            total += driver_cost

        if request.distance and rate.daily_km_included:
            included_km = rate.daily_km_included * days
            if request.distance > included_km:
                extra_km = request.distance - included_km
                extra_km_cost = extra_km * _money(rate.extra_km_try)
                breakdown["extra_km"] = {"km": extra_km, "cost": round(extra_km_cost, 2)}
                total += extra_km_cost
    else:
        if rate.hourly_rate_try is None:
            raise ValidationError(
                detail="This vehicle rate has no hourly price; request a number of days instead",
                code="HOURLY_RATE_MISSING",
            )
        min_hours = rate.min_hours or DEFAULT_VEHICLE_MIN_HOURS
        hours = request.hours or min_hours
        billable_hours = max(hours, min_hours)
        total = _money(rate.hourly_rate_try) * billable_hours
        breakdown["hourly_rate"] = {
            "hours": billable_hours,
            "unit_cost": _money(rate.hourly_rate_try),
            "cost": round(total, 2),
        }
        pricing_model = "HOURLY"
        if hours < billable_hours:
            note = f"Minimum {min_hours} hours applies"

    details = {"days": request.days, "hours": request.hours, "distance": request.distance}
    pricing = RateQuotePricing(
        rate_id=rate.id,
        pricing_model=pricing_model,
        breakdown=breakdown,
        total_cost_try=round(total, 2),
        note=note,
    )
    return details, pricing


def guide_cost(rate: Any, request: RateQuoteRequest) -> Calculation:
    """Per day or per hour, following the rate's pricing model."""
    pricing_model = _value(rate.pricing_model)
    breakdown: Dict[str, Any] = {}
    total = 0.0

    if pricing_model == "PER_DAY" and rate.day_cost_try:
        days = request.days or 1
        total = _money(rate.day_cost_try) * days
        breakdown["days"] = {"quantity": days, "unit_cost": _money(rate.day_cost_try), "cost": round(total, 2)}
    elif pricing_model == "PER_HOUR" and rate.hour_cost_try:
        hours = request.hours or DEFAULT_GUIDE_HOURS
        total = _money(rate.hour_cost_try) * hours
        breakdown["hours"] = {"quantity": hours, "unit_cost": _money(rate.hour_cost_try), "cost": round(total, 2)}

    details = {"days": request.days, "hours": request.hours}
    pricing = RateQuotePricing(
        rate_id=rate.id,
        pricing_model=pricing_model,
        breakdown=breakdown,
        total_cost_try=round(total, 2),
    )
    return details, pricing


def activity_cost(rate: Any, request: RateQuoteRequest) -> Calculation:
    """Base cost per person; children get the rate's child discount."""
    pax = request.pax or 1
    children = request.children or 0
    adults = pax - children

    unit_cost = _money(rate.base_cost_try)
    child_unit_cost = unit_cost
    breakdown: Dict[str, Any] = {"base_cost_per_person": unit_cost}
    if children and rate.child_discount_pct:
        child_unit_cost = unit_cost * (1 - _money(rate.child_discount_pct) / 100)
        breakdown["children"] = {
            "quantity": children,
            "unit_cost": round(child_unit_cost, 2),
            "discount": _money(rate.child_discount_pct),
        }

    total = adults * unit_cost + children * child_unit_cost

    details = {"adults": adults, "children": children}
    pricing = RateQuotePricing(
        rate_id=rate.id,
        pricing_model=_value(rate.pricing_model),
        breakdown=breakdown,
        total_cost_try=round(total, 2),
    )
    return details, pricing


CALCULATORS: Dict[ServiceType, Callable[[Any, RateQuoteRequest], Calculation]] = {
    ServiceType.HOTEL_ROOM: hotel_cost,
    ServiceType.TRANSFER: transfer_cost,
    ServiceType.VEHICLE_HIRE: vehicle_cost,
    ServiceType.GUIDE: guide_cost,
    ServiceType.ACTIVITY: activity_cost,
}


class RateQuoteService:
    """Service for pricing catalog offerings from their rate tables."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_quote(self, tenant_id: UUID, request: RateQuoteRequest) -> RateQuote:
        """
        Price the offering with the active rate whose season contains the service date.

        Raises:
            NotFoundError: If the offering is missing or no active rate covers the date
            ValidationError: If the rate cannot price the requested duration
        """
        offering = await self.db.scalar(
            select(ServiceOffering)
            .options(selectinload(ServiceOffering.supplier))
            .where(ServiceOffering.id == request.service_offering_id, ServiceOffering.tenant_id == tenant_id)
        )
        if offering is None:
            raise NotFoundError(resource_type="service_offering", resource_id=str(request.service_offering_id))

        service_type = ServiceType(offering.service_type)
        rate_service = RATE_SERVICES[service_type](self.db)
        rate = await rate_service.get_rate_for_date(
            tenant_id, offering.id, request.service_date, board_type=request.board_type
        )
        if rate is None:
            raise NotFoundError(
                resource_type=rate_service.resource_type,
                detail=f"No active rate found for {request.service_date.isoformat()}",
            )

        details, pricing = CALCULATORS[service_type](rate, request)

        logger.info(
            "Rate quote calculated",
            extra={
                "tenant_id": str(tenant_id),
                "service_offering_id": str(offering.id),
                "service_type": service_type.value,
                "rate_id": str(rate.id),
                "total_cost_try": pricing.total_cost_try,
            }
        )
        return RateQuote(
            service_offering_id=offering.id,
            service_type=service_type,
            service_title=offering.title,
            supplier=offering.supplier.name,
            service_date=request.service_date,
            details=details,
            pricing=pricing,
        )
