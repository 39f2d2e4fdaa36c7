"""
hello-service - Observability Module

Observability stack for the service:
- Prometheus metrics (Counter, Histogram) on a separate scrape port
- OpenTelemetry distributed tracing exported over OTLP/HTTP
- Structured JSON logging with context injection
- W3C trace context propagation

Usage:
    from hello_service.observability import (
        setup_logging,
        setup_metrics,
        init_tracing,
        get_logger,
    )
"""

from .metrics import (
    MetricsCollector,
    setup_metrics,
    start_metrics_server,
    render_latest,
)
from .tracing import (
    TracingManager,
    TraceContext,
    init_tracing,
)
from .logging import (
    StructuredLogger,
    get_logger,
    setup_logging,
    LogContext,
)
from .middleware import (
    TraceContextMiddleware,
    get_request_context,
)

__all__ = [
    # Metrics
    "MetricsCollector",
    "setup_metrics",
    "start_metrics_server",
    "render_latest",
    # Tracing
    "TracingManager",
    "TraceContext",
    "init_tracing",
    # Logging
    "StructuredLogger",
    "get_logger",
    "setup_logging",
    "LogContext",
    # Middleware
    "TraceContextMiddleware",
    "get_request_context",
]
