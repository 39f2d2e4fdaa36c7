"""
hello-service - Pytest Configuration

Configures:
- Integration test markers (skip by default)
- In-memory span export and per-test metric registries
- A test client around a fully wired application
"""

import os
import socket
import logging
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient
from prometheus_client import CollectorRegistry
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from hello_service.config import ServiceConfig
from hello_service.observability.metrics import MetricsCollector
from hello_service.observability.tracing import TracingManager
from hello_service.server import create_app


# ============================================================
# Environment Configuration
# ============================================================

def _is_truthy(value: Optional[str]) -> bool:
    """Check if environment variable is truthy."""
    if value is None:
        return False
    return value.lower() in ("1", "true", "yes", "on")


RUN_INTEGRATION = _is_truthy(os.getenv("RUN_INTEGRATION"))


# ============================================================
# Pytest Markers
# ============================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (requires RUN_INTEGRATION=1)"
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless RUN_INTEGRATION=1."""
    skip_integration = pytest.mark.skip(
        reason="Integration test - set RUN_INTEGRATION=1 to run"
    )

    for item in items:
        if "integration" in item.keywords and not RUN_INTEGRATION:
            item.add_marker(skip_integration)


# ============================================================
# Helpers
# ============================================================

def random_free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return int(s.getsockname()[1])


class ListHandler(logging.Handler):
    """Collects log records in memory."""

    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.records: List[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord):
        self.records.append(record)

    def messages(self, message: str) -> List[logging.LogRecord]:
        return [r for r in self.records if r.getMessage() == message]


# ============================================================
# Telemetry Fixtures
# ============================================================

@pytest.fixture
def service_config():
    """Service configuration on ports that are free on this host."""
    app_port = random_free_port()
    metrics_port = random_free_port()
    while metrics_port == app_port:
        metrics_port = random_free_port()
    return ServiceConfig(app_port=app_port, metrics_port=metrics_port)


@pytest.fixture
def free_port():
    return random_free_port()


@pytest.fixture
def span_exporter():
    """In-memory exporter receiving every batched span."""
    return InMemorySpanExporter()


@pytest.fixture
def tracing(service_config, span_exporter):
    """Tracing manager exporting to memory; not installed globally."""
    manager = TracingManager(service_config, exporter=span_exporter)
    yield manager
    if not manager.is_shutdown:
        manager.shutdown()


@pytest.fixture
def registry():
    """Fresh Prometheus registry for each test."""
    return CollectorRegistry()


@pytest.fixture
def metrics(registry):
    return MetricsCollector(registry=registry)


@pytest.fixture
def app(tracing, metrics, service_config):
    return create_app(tracing, metrics, service_config)


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def captured_logs():
    """Records logged under the hello_service package."""
    package_logger = logging.getLogger("hello_service")
    previous_level = package_logger.level
    handler = ListHandler()

    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG)
    yield handler
    package_logger.removeHandler(handler)
    package_logger.setLevel(previous_level)


# ============================================================
# Logging Configuration
# ============================================================

@pytest.fixture(autouse=True)
def configure_test_logging():
    """Configure logging for tests."""
    logging.basicConfig(
        level=logging.DEBUG,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    yield
