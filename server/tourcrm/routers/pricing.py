"""Pricing router: cost of a catalog offering for a date."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import ALL_STAFF, require_roles
from ..schemas.auth import CurrentUser
from ..schemas.rate_quote import RateQuote, RateQuoteRequest
from ..services.rate_quote_service import RateQuoteService

router = APIRouter(prefix="/v1/pricing", tags=["pricing"])

DB_DEPENDENCY = Depends(get_db)
STAFF = Depends(require_roles(*ALL_STAFF))


@router.post("/quote", response_model=RateQuote)
async def quote_offering(
    request: RateQuoteRequest,
    current_user: CurrentUser = STAFF,
    db: AsyncSession = DB_DEPENDENCY,
) -> RateQuote:
    """
    Price a service offering from the active rate covering ``service_date``.

    Returns 404 when no active rate covers the date.
    """
    return await RateQuoteService(db).get_quote(current_user.tenant_uuid, request)
