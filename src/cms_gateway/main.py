"""FastAPI application factory for the CMS gateway.

``create_app`` assembles middleware, error handlers and routes. Resources
that need the event loop (the Redis connection, the pooled CMS client and
the service bundle built on it) are created by ``lifespan`` and stored on
``app.state``.
"""

import time
import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError

from cms_gateway.api.v1.router import router as api_router
from cms_gateway.config import Settings, get_settings
from cms_gateway.core.exceptions import GatewayError
from cms_gateway.core.logging import (
    bind_request_context,
    clear_request_context,
    configure_logging,
    get_logger,
)
from cms_gateway.schemas.common import HealthCheckResponse
from cms_gateway.services.cache import connect_cache
from cms_gateway.services.cms import CMSClient, CMSServices

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Connect the cache, open the CMS client, and tear both down on exit.

    An unreachable Redis is not fatal: ``connect_cache`` hands back a
    no-op cache and the gateway serves straight from the CMS.
    """
    settings: Settings = getattr(app.state, "settings", None) or get_settings()
    configure_logging(settings)

    redis, cache = await connect_cache(settings)
    client = CMSClient.from_settings(settings, cache)

    app.state.settings = settings
    app.state.redis = redis
    app.state.cms = CMSServices.from_client(client)

    logger.info(
        "gateway_started",
        version=settings.app_version,
        cms_api_url=settings.cms_api_url,
        cache_backend=type(cache).__name__,
    )
    try:
        yield
    finally:
        await client.close()
        if redis is not None:
            await redis.aclose()
        logger.info("gateway_stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application.

    Args:
        settings: Settings override (tests); defaults to ``get_settings()``
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description=(
            "Gateway to the headless CMS. Serves normalized brand, car, "
            "showroom and content data with Redis-backed caching."
        ),
        version=settings.app_version,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.middleware("http")(request_context_middleware)

    register_error_handlers(app)

    app.include_router(health_router)
    app.include_router(api_router, prefix="/api")
    return app


# =============================================================================
# Middleware
# =============================================================================


async def request_context_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Tag the request with an id, log its outcome, and echo the id back."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    request.state.request_id = request_id
    bind_request_context(request_id, request.method, request.url.path)

    started = time.perf_counter()
    try:
        response = await call_next(request)
        logger.info(
            "http_request",
            status_code=response.status_code,
            duration_ms=_elapsed_ms(started),
        )
    except Exception as exc:
        logger.error(
            "http_request_failed",
            duration_ms=_elapsed_ms(started),
            error_type=type(exc).__name__,
        )
        raise
    finally:
        clear_request_context()

    response.headers[REQUEST_ID_HEADER] = request_id
    return response


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


# =============================================================================
# Error Handlers
# =============================================================================


def register_error_handlers(app: FastAPI) -> None:
    """Render every error in the ``{"error": {...}}`` envelope."""

    @app.exception_handler(GatewayError)
    async def handle_gateway_error(request: Request, exc: GatewayError) -> JSONResponse:
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            "gateway_error",
            error_code=exc.code,
            error_message=exc.message,
            status_code=exc.status_code,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_dict(request_id=getattr(request.state, "request_id", None)),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("unhandled_exception", path=request.url.path)
        error = GatewayError()
        return JSONResponse(
            status_code=error.status_code,
            content=error.to_dict(request_id=getattr(request.state, "request_id", None)),
        )


# =============================================================================
# Health
# =============================================================================

health_router = APIRouter(tags=["Health"])


@health_router.get("/health/live", summary="Liveness probe")
async def liveness() -> dict[str, str]:
    return {"status": "ok"}


@health_router.get(
    "/health/ready",
    response_model=HealthCheckResponse,
    summary="Readiness probe",
    description="Reports Redis connectivity; the gateway serves without it",
)
async def readiness(request: Request) -> HealthCheckResponse:
    redis = getattr(request.app.state, "redis", None)
    if redis is None:
        return HealthCheckResponse(status="ok", checks={"redis": "disabled"})

    try:
        await redis.ping()
    except (RedisError, OSError) as e:
        logger.warning("redis_health_check_failed", error=str(e))
        return HealthCheckResponse(status="degraded", checks={"redis": "error"})
    return HealthCheckResponse(status="ok", checks={"redis": "ok"})


@health_router.get("/", tags=["Root"], summary="Service information")
async def root(request: Request) -> dict[str, str]:
    settings: Settings = request.app.state.settings
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "health": "/health/live",
    }


app = create_app()


def cli() -> None:
    """Run the gateway with uvicorn (``cms-gateway`` console script)."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "cms_gateway.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.value.lower(),
    )


if __name__ == "__main__":
    cli()
