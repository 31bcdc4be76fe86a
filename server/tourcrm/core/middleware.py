"""Middleware for request IDs, W3C trace context, request logging and HTTP metrics."""

import logging
import re
import time
import uuid
from typing import Callable, Optional

import structlog
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from .config import settings
from .exceptions import PROBLEM_BASE_URI
from .observability import REQUEST_COUNT, REQUEST_DURATION

logger = logging.getLogger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Attach a request ID to every request and response.

    The ID comes from the ``X-Request-ID`` header when the caller sends one
    and is generated otherwise.
    """

    def __init__(self, app: ASGIApp, header_name: str = "X-Request-ID"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(self.header_name) or str(uuid.uuid4())
        request.state.request_id = request_id
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        response = await call_next(request)
        response.headers[self.header_name] = request_id
        return response


class TraceContextMiddleware(BaseHTTPMiddleware):
    """
    Continue or start a W3C Trace Context for each request.

    https://www.w3.org/TR/trace-context/
    """

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self.traceparent_pattern = re.compile(
            r"^([0-9a-f]{2})-([0-9a-f]{32})-([0-9a-f]{16})-([0-9a-f]{2})$"
        )

    def _parse_traceparent(self, traceparent: str) -> Optional[dict]:
        """Parse a traceparent header; invalid or unsupported values yield None."""
        match = self.traceparent_pattern.match(traceparent)
        if not match:
            return None

        version, trace_id, parent_id, flags = match.groups()
        if version != "00" or trace_id == "0" * 32 or parent_id == "0" * 16:
            return None

        return {"trace_id": trace_id, "parent_id": parent_id, "flags": flags}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        tracestate = request.headers.get("tracestate")
        traceparent = request.headers.get("traceparent")
        incoming = self._parse_traceparent(traceparent) if traceparent else None

        if incoming:
            trace_id = incoming["trace_id"]
            parent_span_id = incoming["parent_id"]
            flags = incoming["flags"]
        else:
            trace_id = uuid.uuid4().hex
            parent_span_id = None
            flags = "01"

        span_id = uuid.uuid4().hex[:16]
        request.state.trace_context = {
            "trace_id": trace_id,
            "span_id": span_id,
            "parent_span_id": parent_span_id,
            "flags": flags,
            "tracestate": tracestate,
        }

        response = await call_next(request)

        response.headers["traceparent"] = f"00-{trace_id}-{span_id}-{flags}"
        if tracestate:
            response.headers["tracestate"] = tracestate
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Log each request with timing and correlation IDs, and record HTTP metrics.

    Metrics are labelled with the route template (``/v1/clients/{client_id}``)
    rather than the raw path.
    """

    def __init__(
        self,
        app: ASGIApp,
        log_request_body: bool = False,
        skip_paths: Optional[list] = None,
    ):
        super().__init__(app)
        self.log_request_body = log_request_body
        self.skip_paths = skip_paths or ["/health", "/metrics", "/favicon.ico"]

    def _should_log(self, path: str) -> bool:
        return path not in self.skip_paths

    def _get_client_ip(self, request: Request) -> str:
        forwarded_for = request.headers.get("X-Forwarded-For")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip

        if request.client:
            return request.client.host

        return "unknown"

    @staticmethod
    def _endpoint_label(request: Request) -> str:
        route = request.scope.get("route")
        return getattr(route, "path", None) or "unmatched"

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not self._should_log(request.url.path):
            return await call_next(request)

        start_time = time.perf_counter()

        request_id = getattr(request.state, "request_id", "unknown")
        trace_context = getattr(request.state, "trace_context", {})

        log_data = {
            "event": "request_started",
            "request_id": request_id,
            "trace_id": trace_context.get("trace_id", "unknown"),
            "span_id": trace_context.get("span_id", "unknown"),
            "method": request.method,
            "path": request.url.path,
            "query": request.url.query or None,
            "client_ip": self._get_client_ip(request),
            "user_agent": request.headers.get("User-Agent", "unknown"),
        }

        if self.log_request_body and request.method in ["POST", "PUT", "PATCH"]:
            body = await request.body()
            if body:
                log_data["request_body"] = body.decode("utf-8", errors="replace")[:1000]

        logger.info("HTTP request started", extra=log_data)

        error = None
        try:
            response = await call_next(request)
            status_code = response.status_code
        except Exception as e:
            status_code = 500
            error = str(e)
            response = JSONResponse(
                status_code=500,
                content={
                    "type": f"{PROBLEM_BASE_URI}/internal-server-error",
                    "title": "Internal Server Error",
                    "status": 500,
                    "detail": "An unexpected error occurred while processing the request",
                    "instance": request.url.path,
                    "request_id": request_id,
                },
                media_type="application/problem+json",
            )

        duration = time.perf_counter() - start_time
        endpoint = self._endpoint_label(request)
        REQUEST_COUNT.labels(method=request.method, endpoint=endpoint, status_code=str(status_code)).inc()
        REQUEST_DURATION.labels(method=request.method, endpoint=endpoint).observe(duration)

        log_data.update({
            "event": "request_completed",
            "status_code": status_code,
            "duration_ms": round(duration * 1000, 2),
            "response_size": response.headers.get("Content-Length"),
        })
        if error:
            log_data["error"] = error

        if status_code >= 500:
            logger.error("HTTP request completed with server error", extra=log_data)
        elif status_code >= 400:
            logger.warning("HTTP request completed with client error", extra=log_data)
        else:
            logger.info("HTTP request completed successfully", extra=log_data)

        return response


def setup_middleware(app, enable_logging: bool = True) -> None:
    """
    Install the middleware stack on ``app``.

    Middleware added last runs first, so request IDs and trace context are
    set before the logging middleware reads them.
    """
    if enable_logging:
        app.add_middleware(
            LoggingMiddleware,
            log_request_body=settings.debug and not settings.is_production,
        )

    app.add_middleware(TraceContextMiddleware)
    app.add_middleware(RequestIDMiddleware)
