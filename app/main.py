"""FastAPI application entry point.

Wiring only: logging, tracing, exception handlers, CORS, routers. Runtime
collaborators (change feed, notifier, relay) are built in app.core.lifespan.

Settings are loaded inside create_app() so that tests can set env (and optionally
clear get_settings cache) before importing or calling create_app().
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1 import api_router
from app.core.config import Settings, get_settings
from app.core.exception_handlers import register_exception_handlers
from app.core.lifespan import create_lifespan
from app.shared.telemetry import TelemetryConfig, set_telemetry, setup_logging


def _setup_tracing(app: FastAPI, settings: Settings) -> None:
    """Install the tracer provider and instrument inbound requests (before startup)."""
    if not settings.telemetry_enabled:
        return
    telemetry = TelemetryConfig.from_settings(settings)
    telemetry.setup_telemetry(
        exporter_type=settings.telemetry_exporter,
        otlp_endpoint=settings.telemetry_otlp_endpoint,
        sample_rate=settings.telemetry_sample_rate,
    )
    telemetry.instrument_fastapi(app)
    set_telemetry(telemetry)


def create_app() -> FastAPI:
    """Build and return the FastAPI application. Settings are resolved here (deferred from import)."""
    settings = get_settings()
    setup_logging()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )

    register_exception_handlers(app)

    # WebSocket consumers connect from the scheduling UI origins.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.allowed_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    _setup_tracing(app, settings)

    app.include_router(api_router, prefix="/api/v1")

    return app


app = create_app()
