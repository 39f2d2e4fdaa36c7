"""
hello-service - Error Definitions

Every failure the service models is fatal: configuration and telemetry
errors stop the process instead of degrading it.
"""


class HelloServiceError(Exception):
    """Base exception for all hello-service errors."""

    exit_code = 1


class ConfigurationError(HelloServiceError):
    """Service configuration is invalid."""
    pass


# ============================================================
# Telemetry Errors (fatal, never retried)
# ============================================================

class TelemetryError(HelloServiceError):
    """Base class for telemetry setup and teardown failures."""
    pass


class ExporterInitError(TelemetryError):
    """The OTLP span exporter could not be constructed."""

    def __init__(self, endpoint: str, cause: Exception):
        self.endpoint = endpoint
        self.cause = cause
        super().__init__(f"failed to create OTLP exporter for {endpoint}: {cause}")


class TracerShutdownError(TelemetryError):
    """Buffered spans could not be flushed while shutting the tracer down."""
    pass


class MetricsServerError(TelemetryError):
    """The metrics scrape listener could not be started."""

    def __init__(self, port: int, cause: Exception):
        self.port = port
        self.cause = cause
        super().__init__(f"failed to start metrics server on port {port}: {cause}")
