"""
OpenTelemetry Exporter for Stratus

Architectural Intent:
- Exports credential-sync and operation telemetry to OTLP-compatible backends
- Metrics are buffered locally and forwarded to OTEL gauges once the SDK is
  initialized; without an endpoint the exporter keeps only the most recent
  METRICS_BUFFER_SIZE values

Security:
- Endpoint defaults to empty string (must be explicitly configured)
- Non-localhost http:// endpoints rejected unless insecure=True
- Validation in __post_init__ prevents accidental plaintext export
"""

from __future__ import annotations
from collections import deque
from dataclasses import dataclass
from typing import Optional, Any
from urllib.parse import urlparse
import logging
from datetime import datetime, UTC

logger = logging.getLogger(__name__)

METRICS_BUFFER_SIZE = 1000


@dataclass
class OTELConfig:
    endpoint: str = ""
    service_name: str = "stratus"
    environment: str = "development"
    enable_traces: bool = True
    enable_metrics: bool = True
    insecure: bool = False

    def __post_init__(self) -> None:
        if self.endpoint:
            parsed = urlparse(self.endpoint)
            is_localhost = parsed.hostname in ("localhost", "127.0.0.1", "::1")
            if parsed.scheme == "http" and not is_localhost and not self.insecure:
                raise ValueError(
                    f"Non-localhost HTTP endpoint '{self.endpoint}' requires "
                    "insecure=True or use https://. "
                    "Set insecure=True to explicitly allow plaintext export."
                )


class OTELExporter:
    """
    OpenTelemetry exporter for credential polling and deploy operations.
    """

    def __init__(self, config: OTELConfig):
        self.config = config
        self._initialized = False
        self._metrics_buffer: deque[dict[str, Any]] = deque(maxlen=METRICS_BUFFER_SIZE)
        self._meter: Any = None
        self._gauges: dict[str, Any] = {}

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Initialize OpenTelemetry SDK and exporters."""
        if not self.config.endpoint:
            logger.info("OTEL endpoint not configured, telemetry disabled")
            return

        try:
            from opentelemetry import trace
            from opentelemetry.sdk.trace import TracerProvider
            from opentelemetry.sdk.trace.export import BatchSpanProcessor
            from opentelemetry.sdk.resources import Resource, SERVICE_NAME
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
                OTLPSpanExporter,
            )
            from opentelemetry import metrics
            from opentelemetry.sdk.metrics import MeterProvider
            from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
            from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import (
                OTLPMetricExporter,
            )
        except ImportError:
            logger.warning(
                "OpenTelemetry SDK not installed (pip install stratus[telemetry]), "
                "telemetry disabled"
            )
            return

        resource = Resource(
            attributes={
                SERVICE_NAME: self.config.service_name,
                "environment": self.config.environment,
            }
        )

        if self.config.enable_traces:
            trace.set_tracer_provider(TracerProvider(resource=resource))
            span_processor = BatchSpanProcessor(
                OTLPSpanExporter(endpoint=self.config.endpoint, insecure=self.config.insecure)
            )
            trace.get_tracer_provider().add_span_processor(span_processor)

        if self.config.enable_metrics:
            metric_reader = PeriodicExportingMetricReader(
                OTLPMetricExporter(endpoint=self.config.endpoint, insecure=self.config.insecure)
            )
            provider = MeterProvider(resource=resource, metric_readers=[metric_reader])
            metrics.set_meter_provider(provider)
            self._meter = metrics.get_meter(__name__)

        self._initialized = True

    def _get_gauge(self, name: str, unit: str = "") -> Any:
        """Get or create a gauge for a metric name."""
        if name not in self._gauges and self._meter:
            self._gauges[name] = self._meter.create_gauge(name, unit=unit)
        return self._gauges.get(name)

    def record_metric(
        self,
        name: str,
        value: float,
        unit: str = "",
        attributes: Optional[dict[str, str]] = None,
    ) -> None:
        """Record a metric value."""
        self._metrics_buffer.append(
            {
                "name": name,
                "value": value,
                "unit": unit,
                "attributes": attributes or {},
                "timestamp": datetime.now(UTC).isoformat(),
            }
        )

        if self._initialized:
            gauge = self._get_gauge(name, unit)
            if gauge:
                gauge.set(value, attributes=attributes or {})

    def record_credentials_loaded(self, loaded: int, failed: int, generation: int) -> None:
        """Record the outcome of one credential poll cycle."""
        attributes = {"generation": str(generation)}
        self.record_metric("stratus.credentials.loaded", float(loaded), attributes=attributes)
        self.record_metric("stratus.credentials.failed", float(failed), attributes=attributes)

    def record_operation(
        self,
        operation: str,
        account: str,
        success: bool,
        duration_ms: float,
    ) -> None:
        """Record a deploy or destroy operation."""
        self.record_metric(
            "stratus.operation.duration_ms",
            duration_ms,
            unit="ms",
            attributes={
                "operation": operation,
                "account": account,
                "success": str(success),
            },
        )

    def start_span(
        self,
        name: str,
        attributes: Optional[dict[str, str]] = None,
    ) -> Optional[Any]:
        """Start a tracing span, or return None when tracing is disabled."""
        if not self._initialized:
            return None

        from opentelemetry import trace

        tracer = trace.get_tracer(__name__)
        return tracer.start_span(name, attributes=attributes or {})

    def end_span(self, span: Any, error: Optional[BaseException] = None) -> None:
        """End a tracing span, recording error when given."""
        if span is None:
            return
        if error is not None:
            span.record_exception(error)
        span.end()

    async def export(self) -> None:
        """Flush the local metric buffer once the SDK owns export."""
        if not self._initialized:
            return

        # With the OTEL SDK initialized, metrics are auto-exported
        # via PeriodicExportingMetricReader. We just clear our local buffer.
        exported_count = len(self._metrics_buffer)
        self._metrics_buffer.clear()

        if exported_count:
            logger.debug("Flushed %d buffered metrics", exported_count)
