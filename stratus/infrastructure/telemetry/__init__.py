"""
Stratus Telemetry Infrastructure

Architectural Intent:
- OpenTelemetry integration for observability
- Metrics and traces for credential polling and deploy operations
"""

from stratus.infrastructure.telemetry.otel_exporter import (
    OTELExporter,
    OTELConfig,
)

__all__ = [
    "OTELExporter",
    "OTELConfig",
]
