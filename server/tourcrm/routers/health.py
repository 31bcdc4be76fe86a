"""Liveness ping for the CRM API, including background worker state."""

import logging
from datetime import datetime

from fastapi import APIRouter

from ..core.config import API_VERSION, SERVICE_NAME, settings
from ..schemas.health import HealthStatus, ServicePing
from ..workers.manager import worker_manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/health", tags=["health"])


@router.post("/ping", response_model=ServicePing)
async def ping_service() -> ServicePing:
    """
    Report that the API is up.

    Workers that are enabled but not running mark the service as degraded,
    since archiving and purging have stopped.
    """
    workers = worker_manager.get_worker_status()
    stalled = settings.enable_workers and not all(workers.values())

    ping = ServicePing(
        status=HealthStatus.DEGRADED if stalled else HealthStatus.HEALTHY,
        timestamp=datetime.utcnow(),
        version=API_VERSION,
        service=SERVICE_NAME,
        environment=settings.environment,
        workers=workers,
    )

    logger.debug("Health ping", extra={"status": ping.status.value, "workers": workers})
    return ping
