from contextlib import asynccontextmanager
import logging
import time

from fastapi import FastAPI
from starlette.requests import Request

from talent_registry.api.router import api_router
from talent_registry.core.config import get_settings
from talent_registry.core.telemetry import TelemetryRuntime, setup_api_telemetry, shutdown_api_telemetry
from talent_registry.services.repository import get_repository

settings = get_settings()
_telemetry_runtime: TelemetryRuntime | None = None
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    logger.info(
        "api starting environment=%s view_window_hours=%s profile_cache_max_age=%s",
        settings.environment,
        settings.profile_view_window_hours,
        settings.profile_cache_max_age_seconds,
    )
    try:
        yield
    finally:
        if _telemetry_runtime is not None:
            shutdown_api_telemetry(app, _telemetry_runtime)
        await get_repository().close()
        get_repository.cache_clear()


app = FastAPI(title=settings.app_name, lifespan=lifespan)
_telemetry_runtime = setup_api_telemetry(app, settings)


def route_template(request: Request) -> str:
    """Matched path template, so slugs and user ids in the URL never reach the logs."""
    route = request.scope.get("route")
    path = getattr(route, "path", None)
    return path if isinstance(path, str) else "unmatched"


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next):
    started_at = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started_at) * 1000.0
    logger.info(
        "http request method=%s route=%s status=%s duration_ms=%.2f",
        request.method,
        route_template(request),
        response.status_code,
        elapsed_ms,
    )
    return response


app.include_router(api_router)
