"""
hello-service - Prometheus Metrics

Request metrics with the Prometheus client library.

Metrics exposed:
- hello_requests_total: Counter of handled requests by method, path, status
- hello_request_duration_seconds: Histogram of handler latency (default buckets)

Usage:
    from hello_service.observability.metrics import setup_metrics, start_metrics_server

    metrics = setup_metrics()
    start_metrics_server(2222)

    metrics.record_request(method="GET", path="/hello", status_code=200, duration_seconds=0.002)
"""

from typing import Optional

from prometheus_client import (
    Counter,
    Histogram,
    CollectorRegistry,
    generate_latest,
    start_http_server,
    REGISTRY,
)

from ..errors import MetricsServerError
from .logging import get_logger

logger = get_logger(__name__)

REQUEST_LABELS = ["method", "path", "status"]


class MetricsCollector:
    """
    Holder of the service's request metrics.

    prometheus_client metrics lock internally; callers never synchronize.
    """

    def __init__(self, registry: CollectorRegistry = REGISTRY):
        self.registry = registry

        self.requests_total = Counter(
            "hello_requests_total",
            "Total number of requests to the hello endpoint",
            labelnames=REQUEST_LABELS,
            registry=registry,
        )

        self.request_duration = Histogram(
            "hello_request_duration_seconds",
            "Duration of hello requests in seconds",
            labelnames=REQUEST_LABELS,
            buckets=Histogram.DEFAULT_BUCKETS,
            registry=registry,
        )

    def record_request(
        self,
        method: str,
        path: str,
        status_code: int,
        duration_seconds: float,
    ):
        """Record one handled request: a count and a latency observation."""
        status = str(status_code)

        self.requests_total.labels(
            method=method,
            path=path,
            status=status,
        ).inc()

        self.request_duration.labels(
            method=method,
            path=path,
            status=status,
        ).observe(duration_seconds)


_metrics_instance: Optional[MetricsCollector] = None


def setup_metrics(registry: CollectorRegistry = REGISTRY) -> MetricsCollector:
    """
    Setup metrics collection.

    Safe to call multiple times - returns the existing instance when the
    registry is the same, since metric names can be registered only once.
    """
    global _metrics_instance

    if _metrics_instance is not None and _metrics_instance.registry is registry:
        return _metrics_instance

    _metrics_instance = MetricsCollector(registry)
    return _metrics_instance


def start_metrics_server(
    port: int,
    addr: str = "0.0.0.0",
    registry: CollectorRegistry = REGISTRY,
):
    """
    Serve the registry for Prometheus scrapes on a separate port.

    The listener runs on a daemon thread for the life of the process and is
    never joined.

    Raises:
        MetricsServerError: the port could not be bound
    """
    try:
        start_http_server(port, addr=addr, registry=registry)
    except OSError as e:
        raise MetricsServerError(port, e) from e

    logger.info("Metrics server listening", port=port, path="/metrics")


def render_latest(registry: CollectorRegistry = REGISTRY) -> str:
    """Current exposition-format text for `registry`."""
    return generate_latest(registry).decode("utf-8")
