"""Logging setup and OpenTelemetry tracing for the settings service."""

from app.shared.telemetry.logging import get_logger, setup_logging
from app.shared.telemetry.telemetry import TelemetryConfig
from app.shared.telemetry.tracing import add_span_event, traced

__all__ = [
    "setup_logging",
    "get_logger",
    "TelemetryConfig",
    "traced",
    "add_span_event",
]
