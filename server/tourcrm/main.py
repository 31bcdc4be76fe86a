"""FastAPI application initialization and configuration."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .core.config import API_VERSION, SERVICE_NAME, settings
from .core.database import check_db, close_db, init_db
from .core.exceptions import (
    ProblemDetailsException,
    generic_exception_handler,
    problem_details_handler,
    request_validation_handler,
)
from .core.middleware import setup_middleware
from .core.observability import (
    instrument_fastapi,
    instrument_sqlalchemy,
    setup_metrics,
    setup_structured_logging,
    setup_tracing,
)
from .routers import api_routers
from .schemas.health import HealthStatus, ReadinessResponse
from .workers.manager import worker_manager

# Configure structured logging
setup_structured_logging()

# Configure traditional logging for compatibility
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan context manager.

    Sets up observability and the database, then starts the retention
    workers; stops them and closes the engine on shutdown.
    """
    logger.info("Starting FastAPI application")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Debug mode: {settings.debug}")

    try:
        setup_tracing(SERVICE_NAME)
        setup_metrics(SERVICE_NAME)
        instrument_sqlalchemy()
        logger.info("Observability setup completed")

        await init_db()
        logger.info("Database initialized successfully")

        await worker_manager.start_all()
    except Exception as e:
        logger.error(f"Failed to initialize application: {e}")
        raise

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down FastAPI application")

    try:
        await worker_manager.stop_all()
        await close_db()
        logger.info("Database connections closed")
    except Exception as e:
        logger.error(f"Error during application cleanup: {e}")

    logger.info("Application shutdown complete")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    app = FastAPI(
        title="Tour Operator CRM API",
        description=(
            "Multi-tenant CRM for tour operators: clients, leads, quotations that "
            "turn into bookings, supplier rates, payments and manual quotes"
        ),
        version=API_VERSION,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "traceparent", "tracestate", "Idempotent-Replayed"],
    )

    setup_middleware(app, enable_logging=True)

    instrument_fastapi(app)

    app.add_exception_handler(ProblemDetailsException, problem_details_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    @app.get(
        "/health",
        status_code=status.HTTP_200_OK,
        tags=["Health"],
        summary="Health Check",
        description="Check if the service is healthy and responsive",
        response_model=dict,
    )
    async def health_check():
        return {
            "status": HealthStatus.HEALTHY.value,
            "service": SERVICE_NAME,
            "version": API_VERSION,
            "environment": settings.environment,
            "workers": worker_manager.get_worker_status(),
        }

    @app.get(
        "/ready",
        tags=["Health"],
        summary="Readiness Check",
        description="Check that the database answers queries",
        response_model=ReadinessResponse,
    )
    async def readiness_check():
        """Report 503 while the database is unreachable."""
        database_ok = await check_db()
        response_data = ReadinessResponse(
            status=HealthStatus.HEALTHY if database_ok else HealthStatus.UNHEALTHY,
            timestamp=datetime.utcnow(),
            version=API_VERSION,
            checks={"database": "ok" if database_ok else "unavailable"},
        )
        return JSONResponse(
            status_code=status.HTTP_200_OK if database_ok else status.HTTP_503_SERVICE_UNAVAILABLE,
            content=response_data.model_dump(mode="json"),
        )

    for router in api_routers:
        app.include_router(router)

    logger.info("FastAPI application created and configured")

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "tourcrm.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        access_log=True,
    )
