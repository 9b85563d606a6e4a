"""
FastAPI Application Entry Point

Digital Menu - restaurant menus, QR ordering and order tracking.
Supports both Mock services (development) and Real providers (production).

Endpoints:
    - /auth/otp/send, /auth/otp/verify: Owner login by email code
    - /restaurants, /categories, /dishes: Owner menu registry
    - /restaurants/{id}/menu: Customer menu
    - /carts: Server-side customer carts
    - /orders: Order intake and status workflow
    - /uploads: Image upload to the media host
    - /health: System health check

Run with:
    uvicorn digital_menu.main:app --port 8001

Version: 1.0.0
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

import redis
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from digital_menu.core.config import get_settings, setup_logging
from digital_menu.core.exceptions import DigitalMenuError, InternalError
from digital_menu.database import engine, get_db, init_db
from digital_menu.routers import auth, carts, categories, dishes, orders, restaurants, uploads
from digital_menu.schemas import HealthResponse
from digital_menu.services.notifications import get_notification_service
from digital_menu.services.storage import get_storage_service

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    # Startup
    logger.info("=" * 60)
    logger.info(f"🚀 Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    await init_db()
    logger.info("✅ Database initialized")

    logger.info(f"✅ Storage Service: {get_storage_service().provider_name}")
    logger.info(f"✅ Notification Service: {get_notification_service().provider_name}")

    if settings.use_real_services:
        missing = settings.validate_production_config()
        if missing:
            logger.warning(f"⚠️ Missing production config: {missing}")

    logger.info("✅ Application ready!")

    yield  # Application runs

    # Shutdown
    logger.info("Shutting down...")
    await engine.dispose()
    logger.info("✅ Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description=(
        "Digital menu service: owners manage restaurants, categories and dishes; "
        "customers browse a QR-linked menu, fill a cart and place orders."
    ),
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(restaurants.router)
app.include_router(categories.router)
app.include_router(dishes.router)
app.include_router(orders.router)
app.include_router(carts.router)
app.include_router(uploads.router)


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """API root with navigation links."""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.env_mode.value,
        "documentation": "/docs",
        "health": "/health",
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(
    db: AsyncSession = Depends(get_db)
) -> HealthResponse:
    """Verify all system components are operational."""

    # Check database
    db_status = "healthy"
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        db_status = f"unhealthy: {e.__class__.__name__}"
        logger.error(f"Database health check failed: {e}")

    # Check Redis (Celery broker)
    redis_status = "healthy"
    try:
        r = redis.Redis.from_url(settings.redis_url, socket_timeout=2, socket_connect_timeout=2)
        r.ping()
        r.close()
    except redis.RedisError as e:
        redis_status = f"unhealthy: {e.__class__.__name__}"
        logger.error(f"Redis health check failed: {e}")

    storage_service = get_storage_service()
    notification_service = get_notification_service()
    storage_ok = await storage_service.health_check()
    notification_ok = notification_service.health_check()

    overall = "operational" if (
        db_status == "healthy" and redis_status == "healthy" and storage_ok and notification_ok
    ) else "degraded"

    return HealthResponse(
        status=overall,
        database=db_status,
        redis=redis_status,
        storage_service=storage_service.provider_name if storage_ok else "unhealthy",
        notification_service=(
            notification_service.provider_name if notification_ok else "unhealthy"
        ),
        timestamp=datetime.now(),
    )


# =============================================================================
# ERROR HANDLERS
# =============================================================================

def error_body(error: str, detail: Any) -> dict[str, Any]:
    return {"success": False, "error": error, "detail": detail}


@app.exception_handler(DigitalMenuError)
async def domain_exception_handler(request: Request, exc: DigitalMenuError) -> JSONResponse:
    """Map domain errors onto their HTTP status."""
    if exc.status_code >= 500:
        logger.error(f"{exc.error} on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.error} on {request.method} {request.url.path}: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.error, exc.message),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Schema violations in the request body, path or query."""
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=422,
        content=error_body("validation_error", errors),
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Store failures never leak their SQL to the client."""
    logger.exception(f"Database error on {request.method} {request.url.path}: {exc}")
    internal = InternalError()
    return JSONResponse(
        status_code=internal.status_code,
        content=error_body(internal.error, internal.message),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content=error_body(
            "internal_error",
            str(exc) if settings.debug else "An unexpected error occurred",
        ),
    )
