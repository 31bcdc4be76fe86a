"""Prometheus exposition of the CRM's request and business counters."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST

from ..core.observability import get_prometheus_metrics

router = APIRouter(tags=["observability"])


@router.get(
    "/metrics",
    summary="Prometheus metrics",
    description=(
        "HTTP request counters plus quotation transitions, bookings created, "
        "payments recorded, idempotent replays, rejected rate overlaps and retention runs"
    ),
    response_class=Response,
)
async def prometheus_metrics() -> Response:
    """Unauthenticated so the scraper does not need a tenant token."""
    return Response(content=get_prometheus_metrics(), media_type=CONTENT_TYPE_LATEST)
