"""FastAPI application factory for MovieFinder.

This module creates and configures the FastAPI application with:
- Lifespan management for startup/shutdown events
- Middleware configuration (CORS, request ID, logging)
- Exception handlers
- The catalog proxy and the search analytics API
"""

import time
import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis.asyncio import Redis

from moviefinder.config import Settings, get_settings
from moviefinder.core.exceptions import MovieFinderError
from moviefinder.core.logging import (
    bind_request_id,
    clear_request_id,
    configure_logging,
    get_logger,
)
from moviefinder.schemas.common import HealthCheckResponse
from moviefinder.services.analytics import check_redis_connection, set_redis_client

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifespan events.

    Handles initialization and cleanup of:
    - Logging configuration
    - Redis connection (search analytics)
    - The shared upstream HTTP client (catalog proxy)

    Args:
        app: The FastAPI application instance

    Yields:
        None: Control back to the application
    """
    settings: Settings = app.state.settings

    # ========================================
    # Startup
    # ========================================
    configure_logging(settings)
    startup_logger = get_logger(__name__)

    redis = Redis.from_url(settings.redis_url, decode_responses=True)
    set_redis_client(redis)

    app.state.upstream_client = httpx.AsyncClient(timeout=settings.request_timeout)

    if not settings.has_tmdb_token:
        startup_logger.warning("tmdb_token_missing", hint="set TMDB_TOKEN")

    startup_logger.info(
        "Application starting",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.app_env.value,
        debug=settings.debug,
    )

    yield

    # ========================================
    # Shutdown
    # ========================================
    await app.state.upstream_client.aclose()
    set_redis_client(None)
    await redis.aclose()

    startup_logger.info("Application shutting down", app_name=settings.app_name)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional settings override for testing

    Returns:
        FastAPI: Configured application instance
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description=(
            "Movie discovery backend: a credential-injecting proxy in front of "
            "the TMDB catalog plus search analytics for trending searches."
        ),
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.upstream_client = None

    configure_middleware(app, settings)
    configure_exception_handlers(app)
    configure_routes(app, settings)

    return app


def configure_middleware(app: FastAPI, settings: Settings) -> None:
    """Configure application middleware.

    Args:
        app: The FastAPI application instance
        settings: Application settings
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.is_development else [],
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next: Any) -> Any:
        """Log requests and responses tagged with their request ID."""
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        request.state.request_id = request_id

        bind_request_id(request_id)

        request_logger = get_logger("moviefinder.request")
        start_time = time.perf_counter()

        request_logger.info(
            "Request started",
            method=request.method,
            path=request.url.path,
            query=str(request.query_params) if request.query_params else None,
        )

        try:
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start_time) * 1000
            request_logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                duration_ms=round(duration_ms, 2),
            )

            response.headers["X-Request-ID"] = request_id
            return response

        except Exception as exc:
            duration_ms = (time.perf_counter() - start_time) * 1000
            request_logger.error(
                "Request failed",
                method=request.method,
                path=request.url.path,
                duration_ms=round(duration_ms, 2),
                error=str(exc),
            )
            raise

        finally:
            clear_request_id()


def configure_exception_handlers(app: FastAPI) -> None:
    """Configure global exception handlers.

    Args:
        app: The FastAPI application instance
    """
    exception_logger = get_logger("moviefinder.exceptions")

    @app.exception_handler(MovieFinderError)
    async def moviefinder_exception_handler(
        request: Request, exc: MovieFinderError
    ) -> JSONResponse:
        """Handle MovieFinder exceptions with structured error response."""
        request_id = getattr(request.state, "request_id", None)

        if exc.status_code >= 500:
            exception_logger.error(
                "Application error",
                error_code=exc.code,
                error_message=exc.message,
                status_code=exc.status_code,
                path=request.url.path,
            )
        else:
            exception_logger.warning(
                "Client error",
                error_code=exc.code,
                error_message=exc.message,
                status_code=exc.status_code,
                path=request.url.path,
            )

        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(request_id=request_id),
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions with a consistent error response."""
        request_id = getattr(request.state, "request_id", None)

        exception_logger.exception(
            "Unhandled exception",
            error_type=type(exc).__name__,
            error_message=str(exc),
            path=request.url.path,
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_SERVER_ERROR",
                    "message": "An unexpected error occurred",
                    "request_id": request_id,
                }
            },
        )


def configure_routes(app: FastAPI, settings: Settings) -> None:
    """Configure application routes.

    Args:
        app: The FastAPI application instance
        settings: Application settings
    """

    @app.get(
        "/health/live",
        tags=["Health"],
        summary="Liveness probe",
        description="Returns OK if the service is running",
    )
    async def liveness() -> dict[str, str]:
        """Liveness probe for container orchestration."""
        return {"status": "ok"}

    @app.get(
        "/health/ready",
        tags=["Health"],
        summary="Readiness probe",
        description="Reports Redis connectivity and whether the TMDB token is set",
        response_model=HealthCheckResponse,
    )
    async def readiness(request: Request) -> HealthCheckResponse:
        """Readiness probe checking dependent services."""
        redis_ok = await check_redis_connection()
        token_ok = request.app.state.settings.has_tmdb_token

        # The proxy still works without analytics
        if token_ok and redis_ok:
            overall_status = "ok"
        elif token_ok:
            overall_status = "degraded"
        else:
            overall_status = "error"

        return HealthCheckResponse(
            status=overall_status,
            checks={
                "redis": "ok" if redis_ok else "error",
                "tmdb_token": "ok" if token_ok else "error",
            },
        )

    @app.get(
        "/",
        tags=["Root"],
        summary="API root",
        description="Returns API information",
    )
    async def root(request: Request) -> dict[str, str]:
        """API root endpoint with service information."""
        current = request.app.state.settings
        return {
            "service": current.app_name,
            "version": current.app_version,
            "docs": "/docs",
            "health": "/health/live",
            "catalog": current.catalog_proxy_prefix,
        }

    from moviefinder.api.v1.catalog import router as catalog_router
    from moviefinder.api.v1.catalog import search_router
    from moviefinder.api.v1.router import router as v1_router

    app.include_router(
        catalog_router, prefix=settings.catalog_proxy_prefix, tags=["Catalog"]
    )
    app.include_router(search_router, prefix="/api", tags=["Catalog"])
    app.include_router(v1_router, prefix="/api/v1")


# Create the application instance
app = create_app()


def cli() -> None:
    """CLI entry point for running the application."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "moviefinder.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.value.lower(),
    )


if __name__ == "__main__":
    cli()
