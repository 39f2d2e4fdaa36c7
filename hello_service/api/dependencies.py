"""
hello-service - API Dependencies

The tracer and metrics collector are attached to the application when it
is built; routes receive them through these dependencies instead of
module-level globals.
"""

from fastapi import Request

from ..observability.metrics import MetricsCollector
from ..observability.tracing import TracingManager


def get_tracing(request: Request) -> TracingManager:
    """Tracing manager the application was built with."""
    return request.app.state.tracing


def get_metrics(request: Request) -> MetricsCollector:
    """Metrics collector the application was built with."""
    return request.app.state.metrics
