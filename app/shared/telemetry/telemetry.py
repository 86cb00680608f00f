"""OpenTelemetry setup for the settings service.

Spans come from the FastAPI instrumentation (health probes excluded) and from
the ``@traced`` account operations. The exporter is console or OTLP (gRPC);
``none`` keeps spans in-process, which is enough for log correlation.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
)
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

_EXCLUDED_URLS = "/api/v1/health"


class TelemetryConfig:
    """Tracer provider plus the instrumentations hooked onto the app."""

    def __init__(
        self,
        service_name: str,
        service_version: str,
        environment: str = "development",
        exporter_type: str = "console",
        otlp_endpoint: str | None = None,
        sample_rate: float = 1.0,
    ) -> None:
        self.service_name = service_name
        self.service_version = service_version
        self.environment = environment
        self.exporter_type = exporter_type
        self.otlp_endpoint = otlp_endpoint
        self.sample_rate = sample_rate
        self.tracer_provider: TracerProvider | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> TelemetryConfig:
        return cls(
            service_name=settings.app_name,
            service_version=settings.app_version,
            environment=settings.telemetry_environment,
            exporter_type=settings.telemetry_exporter,
            otlp_endpoint=settings.telemetry_otlp_endpoint,
            sample_rate=settings.telemetry_sample_rate,
        )

    def _build_exporter(self) -> SpanExporter | None:
        if self.exporter_type == "none":
            return None
        if self.exporter_type == "otlp":
            if not self.otlp_endpoint:
                raise ValueError("TELEMETRY_OTLP_ENDPOINT is required for the otlp exporter")
            return OTLPSpanExporter(
                endpoint=self.otlp_endpoint,
                insecure=self.otlp_endpoint.startswith("http://"),
            )
        if self.exporter_type != "console":
            logger.warning("Unknown telemetry exporter %r, using console", self.exporter_type)
        return ConsoleSpanExporter()

    def setup(self, app: FastAPI) -> None:
        """Install the global tracer provider and instrument app and logging.

        Telemetry never blocks startup: a failure is logged and the service
        runs untraced.
        """
        try:
            provider = TracerProvider(
                resource=Resource(
                    attributes={
                        SERVICE_NAME: self.service_name,
                        SERVICE_VERSION: self.service_version,
                        "deployment.environment": self.environment,
                    }
                ),
                sampler=ParentBased(TraceIdRatioBased(self.sample_rate)),
            )
            exporter = self._build_exporter()
            if exporter is not None:
                provider.add_span_processor(BatchSpanProcessor(exporter))
            trace.set_tracer_provider(provider)
            FastAPIInstrumentor.instrument_app(
                app, tracer_provider=provider, excluded_urls=_EXCLUDED_URLS
            )
            LoggingInstrumentor().instrument(tracer_provider=provider, set_logging_format=True)
        except Exception:
            logger.exception("Telemetry setup failed; continuing without tracing")
            return
        self.tracer_provider = provider
        logger.info(
            "Telemetry enabled: service=%s exporter=%s sample_rate=%s",
            self.service_name,
            self.exporter_type,
            self.sample_rate,
        )

    def shutdown(self) -> None:
        """Flush pending spans."""
        if self.tracer_provider is None:
            return
        try:
            self.tracer_provider.shutdown()
        except Exception:
            logger.exception("Telemetry shutdown failed")
