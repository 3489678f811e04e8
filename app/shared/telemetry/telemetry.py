"""OpenTelemetry tracing setup.

Spans cover inbound HTTP (FastAPI), contact lookups (SQLAlchemy) and the
status email call (@traced). Exporters: console, otlp (gRPC) or none.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter, SpanExporter
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased
from sqlalchemy.ext.asyncio import AsyncEngine

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

# Probes are polled constantly and carry no useful trace.
EXCLUDED_URLS = "/api/v1/health"


def build_span_exporter(exporter_type: str, otlp_endpoint: str | None = None) -> SpanExporter | None:
    """Return the exporter for exporter_type, or None for "none".

    An "otlp" exporter without an endpoint, or an unknown type, falls back
    to the console exporter with a warning.
    """
    if exporter_type == "none":
        return None
    if exporter_type == "otlp":
        if otlp_endpoint:
            return OTLPSpanExporter(endpoint=otlp_endpoint, insecure=otlp_endpoint.startswith("http://"))
        logger.warning("TELEMETRY_OTLP_ENDPOINT not set; using console exporter")
    elif exporter_type != "console":
        logger.warning("Unknown exporter type '%s', using console", exporter_type)
    return ConsoleSpanExporter()


class TelemetryConfig:
    """Tracer provider for this process plus the FastAPI/SQLAlchemy instrumentors."""

    def __init__(
        self,
        service_name: str,
        service_version: str,
        enabled: bool = True,
        environment: str = "development",
    ) -> None:
        self.service_name = service_name
        self.service_version = service_version
        self.enabled = enabled
        self.environment = environment
        self.tracer_provider: TracerProvider | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> TelemetryConfig:
        return cls(
            service_name=settings.app_name,
            service_version=settings.app_version,
            enabled=settings.telemetry_enabled,
            environment=settings.telemetry_environment,
        )

    def setup_telemetry(
        self,
        exporter_type: str = "console",
        otlp_endpoint: str | None = None,
        sample_rate: float = 1.0,
    ) -> TracerProvider | None:
        """Create the tracer provider and install it globally.

        Args:
            exporter_type: "console", "otlp", or "none".
            otlp_endpoint: OTLP gRPC endpoint (e.g. http://localhost:4317).
            sample_rate: Root sampling ratio 0.0-1.0; child spans follow their parent.

        Returns:
            TracerProvider, or None when disabled or setup failed.
        """
        if not self.enabled:
            logger.info("Telemetry disabled")
            return None
        try:
            provider = TracerProvider(
                resource=Resource(
                    attributes={
                        SERVICE_NAME: self.service_name,
                        SERVICE_VERSION: self.service_version,
                        "deployment.environment": self.environment,
                    }
                ),
                sampler=ParentBased(TraceIdRatioBased(sample_rate)),
            )
            exporter = build_span_exporter(exporter_type, otlp_endpoint)
            if exporter is not None:
                provider.add_span_processor(BatchSpanProcessor(exporter))
            trace.set_tracer_provider(provider)
        except Exception:
            logger.exception("Failed to initialize telemetry")
            return None
        self.tracer_provider = provider
        logger.info(
            "OpenTelemetry initialized: service=%s, version=%s, exporter=%s",
            self.service_name,
            self.service_version,
            exporter_type,
        )
        return provider

    def instrument_fastapi(self, app: FastAPI) -> None:
        """Trace inbound requests, health probes excluded."""
        if self.tracer_provider is None:
            return
        try:
            FastAPIInstrumentor.instrument_app(
                app,
                tracer_provider=self.tracer_provider,
                excluded_urls=EXCLUDED_URLS,
            )
        except Exception:
            logger.exception("Failed to instrument FastAPI")

    def instrument_sqlalchemy(self, engine: AsyncEngine) -> None:
        """Trace contact lookup queries."""
        if self.tracer_provider is None:
            return
        try:
            SQLAlchemyInstrumentor().instrument(
                engine=engine.sync_engine,
                tracer_provider=self.tracer_provider,
            )
        except Exception:
            logger.exception("Failed to instrument SQLAlchemy")

    def shutdown(self) -> None:
        """Flush remaining spans and shut the provider down."""
        provider, self.tracer_provider = self.tracer_provider, None
        if provider is None:
            return
        try:
            provider.shutdown()
            logger.info("Telemetry shutdown complete")
        except Exception:
            logger.exception("Error during telemetry shutdown")


_telemetry: TelemetryConfig | None = None
_telemetry_lock = threading.RLock()


def get_telemetry() -> TelemetryConfig | None:
    """Return the process telemetry instance (set at startup)."""
    with _telemetry_lock:
        return _telemetry


def set_telemetry(telemetry: TelemetryConfig | None) -> None:
    """Set (or clear, with None) the process telemetry instance."""
    global _telemetry
    with _telemetry_lock:
        _telemetry = telemetry
