"""FastAPI application entry point.

This module defines the main FastAPI application with CORS middleware,
lifespan management, error handlers and API routing configuration.

Logging:
    Initializes structured logging on import.
    Every request runs inside a LogContext carrying its request id.
"""

import time
import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from account_service import __version__
from account_service.api import router as api_router
from account_service.api.errors import register_exception_handlers
from account_service.core.config import settings
from account_service.core.logging import LogContext, get_logger, setup_logging
from account_service.db.session import Database

# Initialize logging system
setup_logging(
    log_level=settings.LOG_LEVEL,
    log_file=settings.LOG_FILE,
    enable_json=settings.LOG_JSON_FORMAT,
    debug=settings.DEBUG,
)

# Get application logger
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan context manager.

    Opens the database handle on startup and disposes it on shutdown.
    A handle already placed on ``app.state.db`` (tests do this) is reused
    and left open.
    """
    logger.info(
        f"Starting {settings.PROJECT_NAME}",
        extra={
            "context": {
                "action": "application_startup",
                "version": __version__,
                "debug": settings.DEBUG,
                "log_level": settings.LOG_LEVEL,
            }
        },
    )

    owns_db = getattr(app.state, "db", None) is None
    if owns_db:
        app.state.db = Database(
            settings.DATABASE_URL,
            pool_size=settings.DATABASE_POOL_SIZE,
            max_overflow=settings.DATABASE_MAX_OVERFLOW,
        )
        if settings.DATABASE_AUTO_CREATE:
            await app.state.db.create_all()

    logger.info(
        "Application startup completed",
        extra={"context": {"action": "application_startup", "status": "success"}},
    )

    yield

    logger.info(
        f"Shutting down {settings.PROJECT_NAME}",
        extra={"context": {"action": "application_shutdown"}},
    )

    if owns_db:
        await app.state.db.dispose()
        app.state.db = None

    logger.info(
        "Application shutdown completed",
        extra={"context": {"action": "application_shutdown", "status": "success"}},
    )


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="User registration, authentication and account lifecycle service",
    version=__version__,
    openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.middleware("http")
async def request_logging(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Log each request with a request id shared by every record it produces."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    started = time.perf_counter()

    with LogContext(request_id=request_id, method=request.method, path=request.url.path):
        response = await call_next(request)
        logger.info(
            "Request completed",
            extra={
                "context": {
                    "action": "http_request",
                    "status_code": response.status_code,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                }
            },
        )

    response.headers["X-Request-ID"] = request_id
    return response


# Include API router
app.include_router(api_router, prefix=settings.API_V1_PREFIX)


@app.get("/health", tags=["Health"])
async def health_check() -> dict[str, str]:
    """Health check endpoint.

    Returns a simple status indicating the service is running.
    """
    return {"status": "healthy"}


@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """Root endpoint.

    Returns basic API information.
    """
    return {
        "name": settings.PROJECT_NAME,
        "version": __version__,
        "docs": "/docs",
    }
