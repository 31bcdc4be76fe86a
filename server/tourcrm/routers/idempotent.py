"""Shared handling for endpoints guarded by the Idempotency-Key header."""

import logging
from typing import Any, Awaitable, Callable
from uuid import UUID

from fastapi import Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.observability import metrics_collector
from ..services.idempotency_service import IdempotencyService

logger = logging.getLogger(__name__)

REPLAY_HEADER = "Idempotent-Replayed"


async def handle_idempotent_operation(
    request: Request,
    db: AsyncSession,
    tenant_id: UUID,
    idempotency_key: str,
    request_body: Any,
    operation_func: Callable[[], Awaitable[Any]],
    status_code: int = 200,
) -> JSONResponse:
    """
    Replay a stored response for a repeated key or run ``operation_func``.

    ``operation_func`` must return a JSON-compatible body. Only successful
    results are stored; problem exceptions propagate without being recorded
    so the client may retry with the same key.
    """
    idempotency_service = IdempotencyService(db)
    path = request.url.path

    cached_response = await idempotency_service.check_idempotency(
        tenant_id=tenant_id,
        idempotency_key=idempotency_key,
        path=path,
        method=request.method,
        request_body=request_body,
    )
    if cached_response is not None:
        cached_status, cached_body = cached_response
        metrics_collector.record_idempotent_replay(path)
        return JSONResponse(
            status_code=cached_status,
            content=cached_body,
            headers={REPLAY_HEADER: "true"},
        )

    response_body = await operation_func()

    await idempotency_service.store_response(
        tenant_id=tenant_id,
        idempotency_key=idempotency_key,
        path=path,
        method=request.method,
        request_body=request_body,
        status_code=status_code,
        response_body=response_body,
    )

    return JSONResponse(status_code=status_code, content=response_body)
