"""
FastAPI application entry point.

Uses structured logging from catalog.logging. The Redis cache is built at
startup (unless one was injected into create_app) and lives on app.state.
"""

from typing import Callable

from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.base import BaseHTTPMiddleware

from catalog.cache import RedisCache
from catalog.config import get_settings
from catalog.db import db
from catalog.logging import RequestLoggingMiddleware, configure_logging, get_logger

from .error_handlers import register_exception_handlers
from .middleware.request_id import RequestIDMiddleware
from .routers import admin as admin_router
from .routers import admin_images as admin_images_router
from .routers import admin_items as admin_items_router
from .routers import auth as auth_router
from .routers import catalog as catalog_router
from .routers import search as search_router


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Middleware to limit request body size."""

    def __init__(self, app, max_size_mb: int = 10):
        super().__init__(app)
        self.max_size = max_size_mb * 1024 * 1024
        self.max_size_mb = max_size_mb

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_size:
            return JSONResponse(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                content={
                    "detail": f"Maximum request size is {self.max_size_mb}MB",
                    "status_code": status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                    "code": "REQUEST_TOO_LARGE",
                },
            )
        return await call_next(request)


settings = get_settings()
configure_logging(level="DEBUG" if settings.debug else "INFO")
logger = get_logger("api")


def create_app(cache: RedisCache | None = None) -> FastAPI:
    """
    Build the application.

    Args:
        cache: Cache instance to use instead of building one from settings at
            startup. The caller then owns its lifecycle.
    """
    api_prefix = f"{settings.api_prefix}/v1"

    app = FastAPI(title=settings.app_name, debug=settings.debug)
    app.state.cache = cache

    app.add_middleware(RequestSizeLimitMiddleware, max_size_mb=settings.max_request_size_mb)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept", "Origin", "X-Requested-With"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    # Last added runs first: request ids are bound before request logging
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    @app.on_event("startup")
    def startup_event():
        """Initialize database and cache on startup."""
        logger.info("app_startup", app_name=settings.app_name)

        if not db.is_initialized:
            db.initialize(settings.database_url)
            logger.info("database_initialized")
        if settings.auto_create_tables:
            db.create_all_tables()

        if app.state.cache is None:
            app.state.cache = RedisCache(settings)
            app.state.owns_cache = True
        if app.state.cache.open():
            logger.info("cache_initialized", redis_host=settings.redis_host)
        else:
            logger.warning("cache_unavailable")

    @app.on_event("shutdown")
    def shutdown_event():
        """Cleanup on shutdown."""
        logger.info("app_shutdown")
        if getattr(app.state, "owns_cache", False):
            app.state.cache.close()

    @app.get("/health", tags=["health"])
    def health_check():
        """Liveness probe."""
        return {"status": "ok"}

    @app.get("/health/ready", tags=["health"])
    def readiness_check():
        """
        Readiness check endpoint.

        The database is required; the cache is reported but optional since
        every read path works without it.

        Returns 200 if ready, 503 if not ready.
        """
        database = db.health_check()
        cache_status = app.state.cache.health_check() if app.state.cache else {"status": "unavailable"}
        checks = {
            "database": database["healthy"],
            "cache": cache_status.get("status") == "healthy",
        }

        if not checks["database"]:
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={"status": "not_ready", "checks": checks},
            )
        return {"status": "ready", "checks": checks}

    # Register routers with versioned API prefix
    # API is accessible at /api/v1/*
    for router in catalog_router.routers:
        app.include_router(router, prefix=api_prefix)
    app.include_router(search_router.router, prefix=api_prefix)
    app.include_router(auth_router.router, prefix=api_prefix)
    for router in admin_items_router.routers:
        app.include_router(router, prefix=api_prefix)
    app.include_router(admin_images_router.router, prefix=api_prefix)
    app.include_router(admin_router.router, prefix=api_prefix)

    app.mount(
        "/uploads",
        StaticFiles(directory=settings.upload_dir, check_dir=False),
        name="uploads",
    )

    return app


app = create_app()
