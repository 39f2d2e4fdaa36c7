"""
hello-service - OpenTelemetry Distributed Tracing

Tracer lifecycle for the service.

Features:
- OTLP/HTTP span export through a BatchSpanProcessor
- W3C trace context propagation (traceparent header)
- Explicit init/shutdown lifecycle, fatal on failure
- Trace ids rendered as hex for log correlation

Usage:
    from hello_service.observability.tracing import init_tracing

    tracing = init_tracing(config)
    try:
        with tracing.start_span("operation_name") as span:
            span.set_attribute("key", "value")
    finally:
        tracing.shutdown()
"""

from typing import Optional, Dict, Any
from dataclasses import dataclass

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SpanExporter
from opentelemetry.sdk.resources import Resource, SERVICE_NAME, SERVICE_VERSION
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator
from opentelemetry.propagate import set_global_textmap, inject, extract
from opentelemetry.trace import Span, SpanKind
from opentelemetry.context import Context

from ..config import ServiceConfig
from ..errors import ExporterInitError, TracerShutdownError
from .logging import get_logger

logger = get_logger(__name__)


@dataclass
class TraceContext:
    """Trace identifiers of a span, rendered as lowercase hex."""
    trace_id: str
    span_id: str
    trace_flags: int = 1
    trace_state: Optional[str] = None

    @classmethod
    def from_span(cls, span: Span) -> "TraceContext":
        """Create TraceContext from a span."""
        ctx = span.get_span_context()
        return cls(
            trace_id=format(ctx.trace_id, "032x"),
            span_id=format(ctx.span_id, "016x"),
            trace_flags=ctx.trace_flags,
            trace_state=ctx.trace_state.to_header() if ctx.trace_state else None,
        )

    def to_traceparent(self) -> str:
        """Generate W3C traceparent header value."""
        return f"00-{self.trace_id}-{self.span_id}-{self.trace_flags:02x}"


def build_exporter(config: ServiceConfig) -> SpanExporter:
    """
    Construct the OTLP/HTTP span exporter for the configured collector.

    Raises:
        ExporterInitError: the exporter could not be constructed
    """
    try:
        return OTLPSpanExporter(endpoint=config.traces_url)
    except Exception as e:
        raise ExporterInitError(config.collector_endpoint, e) from e


class TracingManager:
    """
    Owner of the service's TracerProvider.

    Constructed once at startup and handed to the application; request
    handlers only read from it.
    """

    def __init__(
        self,
        config: ServiceConfig,
        exporter: Optional[SpanExporter] = None,
    ):
        """
        Initialize tracing.

        Args:
            config: Service configuration
            exporter: Span exporter to batch into; built from the config
                collector endpoint when omitted

        Raises:
            ExporterInitError: the OTLP exporter could not be constructed
        """
        self.config = config
        self.service_name = config.service_name
        self.service_version = config.service_version
        self._shutdown = False

        if exporter is None:
            exporter = build_exporter(config)
        self.exporter = exporter

        resource = Resource.create({
            SERVICE_NAME: config.service_name,
            SERVICE_VERSION: config.service_version,
        })

        self.provider = TracerProvider(resource=resource)
        self.provider.add_span_processor(BatchSpanProcessor(exporter))

        self.tracer = self.provider.get_tracer(config.service_name, config.service_version)

    def install_global(self):
        """Install as the process-wide tracer provider with W3C propagation."""
        trace.set_tracer_provider(self.provider)
        set_global_textmap(TraceContextTextMapPropagator())

    @property
    def is_shutdown(self) -> bool:
        return self._shutdown

    def extract_context(self, headers: Dict[str, str]) -> Context:
        """
        Extract trace context from HTTP headers.

        Args:
            headers: HTTP headers dict (case-insensitive keys)

        Returns:
            OpenTelemetry Context with extracted trace info
        """
        normalized = {k.lower(): v for k, v in headers.items()}
        return extract(normalized)

    def inject_context(self, headers: Dict[str, str]) -> Dict[str, str]:
        """Inject current trace context into HTTP headers."""
        inject(headers)
        return headers

    def start_span(
        self,
        name: str,
        kind: SpanKind = SpanKind.INTERNAL,
        attributes: Optional[Dict[str, Any]] = None,
        context: Optional[Context] = None,
    ):
        """
        Start a new span as a child of `context` (current context if omitted).

        Returns:
            Context manager that yields the span and ends it on exit
        """
        return self.tracer.start_as_current_span(
            name,
            kind=kind,
            attributes=attributes,
            context=context,
        )

    def start_server_span(
        self,
        name: str,
        headers: Dict[str, str],
        attributes: Optional[Dict[str, Any]] = None,
    ):
        """
        Start a server span parented on the traceparent in `headers`.

        Use this for incoming HTTP requests.
        """
        parent_context = self.extract_context(headers)
        return self.tracer.start_as_current_span(
            name,
            kind=SpanKind.SERVER,
            attributes=attributes,
            context=parent_context,
        )

    def get_current_trace_context(self) -> Optional[TraceContext]:
        """Get current trace context for logging/headers."""
        span = trace.get_current_span()
        if span.get_span_context().is_valid:
            return TraceContext.from_span(span)
        return None

    def force_flush(self, timeout_millis: Optional[int] = None) -> bool:
        """Export all ended spans still buffered in the batch processor."""
        if timeout_millis is None:
            timeout_millis = self.config.shutdown_timeout_millis
        return self.provider.force_flush(timeout_millis)

    def shutdown(self):
        """
        Flush buffered spans and shut the provider down.

        Must be called once at process exit; later calls are ignored.

        Raises:
            TracerShutdownError: the flush did not complete or shutdown failed
        """
        if self._shutdown:
            logger.warning("Tracer provider already shut down")
            return
        self._shutdown = True

        try:
            flushed = self.force_flush()
            self.provider.shutdown()
        except Exception as e:
            raise TracerShutdownError(f"Error shutting down tracer provider: {e}") from e

        if not flushed:
            raise TracerShutdownError(
                "Error shutting down tracer provider: span flush timed out after "
                f"{self.config.shutdown_timeout_millis}ms"
            )


def init_tracing(config: ServiceConfig) -> TracingManager:
    """
    Setup distributed tracing for the process.

    Builds the OTLP exporter and batch processor and installs the provider
    process-wide. Call once at startup, before serving requests.

    Raises:
        ExporterInitError: the OTLP exporter could not be constructed
    """
    tracing = TracingManager(config)
    tracing.install_global()

    logger.info(
        "Tracing initialized",
        service_name=config.service_name,
        otlp_endpoint=config.traces_url,
    )
    return tracing
