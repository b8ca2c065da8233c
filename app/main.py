"""
FastAPI application for restaurant search and table bookings

Bookings and inventory are handled synchronously; emails and in-app
notifications go through Celery workers.
"""
import logging
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from contextlib import asynccontextmanager

from app.config.database import PERSISTENCE_ERRORS
from app.config.redis import close_redis_pool
from app.config.settings import get_settings
from app.core.exceptions import BookTableError, PersistenceUnavailableError
from app.core.middleware import correlation_id_middleware, request_logging_middleware
from app.core.monitoring import health_router
from app.api.v1.router import api_v1_router
from app.utils.my_logging import setup_logging

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    setup_logging()
    logger.info(f"🚀 {settings.APP_NAME} starting up...")
    logger.info("🍽️  Booking API available at /api/v1/")
    logger.info("❤️  Health check at /health")

    routes_count = sum(len(route.methods) for route in app.routes if isinstance(route, APIRoute))
    logger.info(f"✅ Total routes registered: {routes_count}")

    yield

    # Shutdown
    await close_redis_pool()
    logger.info(f"🛑 {settings.APP_NAME} shutting down...")


async def booktable_error_handler(request: Request, exc: BookTableError) -> JSONResponse:
    """Domain errors -> JSON body with error, code and retryable flag"""
    log = logger.warning if exc.status_code < 500 else logger.error
    log(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def persistence_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Store outages that escaped a service guard are still reported as a retryable 503"""
    logger.error(f"{request.method} {request.url.path}: persistence unavailable: {exc}")
    return await booktable_error_handler(request, PersistenceUnavailableError())


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""

    app = FastAPI(
        title=settings.APP_NAME,
        description="Restaurant search and table reservations",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "PUT"],
        allow_headers=["*"],
    )

    # Add custom middleware
    app.middleware("http")(request_logging_middleware)
    app.middleware("http")(correlation_id_middleware)

    app.add_exception_handler(BookTableError, booktable_error_handler)
    for error_type in PERSISTENCE_ERRORS:
        app.add_exception_handler(error_type, persistence_error_handler)

    # Include routers
    app.include_router(health_router, prefix="/health", tags=["monitoring"])
    app.include_router(api_v1_router, prefix="/api/v1")

    @app.get("/")
    async def root():
        return {
            "service": settings.APP_NAME,
            "version": "0.1.0",
            "status": "running",
            "endpoints": {
                "api": "/api/v1/",
                "health": "/health",
                "docs": "/docs" if settings.DEBUG else "disabled"
            }
        }

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
