"""
FastAPI application entry point.

Wires configuration, logging, middleware, exception handlers, health
endpoints and the v1 routers together. Run with
``uvicorn bakery.main:app``.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from bakery.api.deps import limiter
from bakery.api.errors import register_exception_handlers
from bakery.api.v1 import routers
from bakery.core.config import get_settings
from bakery.core.logging import (
    clear_context,
    configure_logging,
    get_logger,
    log_performance,
    set_request_id,
)
from bakery.core.security import get_security_headers
from bakery.database.connection import (
    check_database_health,
    close_database_connections,
    get_session,
)
from bakery.services.users.service import UserService

configure_logging()
logger = get_logger(__name__)


async def bootstrap_admin() -> None:
    """Create the configured admin account on an empty installation."""
    settings = get_settings()
    if not (settings.bootstrap_admin_email and settings.bootstrap_admin_password):
        return

    async with get_session() as session:
        await UserService(session).ensure_admin(
            settings.bootstrap_admin_email, settings.bootstrap_admin_password
        )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application startup and shutdown.

    Startup makes sure an admin account exists when one is configured;
    shutdown disposes of the database pool.
    """
    settings = get_settings()
    logger.info(
        "Application starting",
        environment=settings.environment,
        debug=settings.debug,
        version=settings.app_version,
    )

    with log_performance(logger, "application_startup"):
        await bootstrap_admin()

    yield

    logger.info("Application shutting down")
    with log_performance(logger, "application_shutdown"):
        await close_database_connections()


settings = get_settings()
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Order management backend for a bakery storefront",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    debug=settings.debug,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)


@app.middleware("http")
async def security_headers_middleware(request: Request, call_next):
    response = await call_next(request)
    for header, value in get_security_headers().items():
        response.headers[header] = value
    return response


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    """
    Set the correlation id, log the request and time it.

    The id is taken from the ``X-Request-ID`` header when the client sends
    one and is echoed back in the response.
    """
    request_id = set_request_id(request.headers.get("X-Request-ID"))

    logger.info(
        "Request received",
        method=request.method,
        path=request.url.path,
        client_host=request.client.host if request.client else None,
    )

    try:
        with log_performance(
            logger,
            "request_processing",
            method=request.method,
            path=request.url.path,
        ):
            response = await call_next(request)

        response.headers["X-Request-ID"] = request_id
        logger.info(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
        )
        return response
    except Exception as e:
        logger.error(
            "Request failed",
            method=request.method,
            path=request.url.path,
            error=str(e),
            error_type=type(e).__name__,
        )
        raise
    finally:
        clear_context()


@app.get("/health", tags=["Health"], summary="Health check")
async def health_check() -> dict[str, str]:
    """Always 200 while the process is serving requests."""
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }


@app.get("/ready", tags=["Health"], summary="Readiness check")
async def readiness_check():
    """
    Ready when the database answers.

    Returns 503 with ``status: not_ready`` otherwise.
    """
    if not await check_database_health():
        logger.warning("Readiness check failed", database="unhealthy")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "service": settings.app_name,
                "database": "unhealthy",
            },
        )

    return {
        "status": "ready",
        "service": settings.app_name,
        "version": settings.app_version,
        "database": "healthy",
    }


@app.get("/live", tags=["Health"], summary="Liveness check")
async def liveness_check() -> dict[str, str]:
    return {"status": "alive", "service": settings.app_name}


for router in routers:
    app.include_router(router, prefix=settings.api_v1_prefix)
