"""
hello-service - Configuration

The service has no configuration file and reads no environment variables.
All values are fixed defaults on ServiceConfig; tests construct their own
instances to move ports or the collector.
"""

from dataclasses import dataclass

from . import __version__
from .errors import ConfigurationError


SERVICE_NAME = "hello-service"
APP_PORT = 8080
METRICS_PORT = 2222
COLLECTOR_ENDPOINT = "jaeger:4318"


@dataclass(frozen=True)
class ServiceConfig:
    """Fixed runtime settings for the service process."""

    service_name: str = SERVICE_NAME
    service_version: str = __version__
    host: str = "0.0.0.0"
    app_port: int = APP_PORT
    metrics_port: int = METRICS_PORT

    # OTLP/HTTP collector, host:port without scheme
    collector_endpoint: str = COLLECTOR_ENDPOINT
    collector_insecure: bool = True

    log_level: str = "INFO"
    shutdown_timeout_millis: int = 30000

    @property
    def traces_url(self) -> str:
        """Full OTLP/HTTP traces URL for the collector endpoint."""
        scheme = "http" if self.collector_insecure else "https"
        return f"{scheme}://{self.collector_endpoint}/v1/traces"


def _check_port(name: str, port: int) -> None:
    if not (0 < port < 65536):
        raise ConfigurationError(f"{name} must be between 1 and 65535, got {port}")


def validate_config(config: ServiceConfig) -> None:
    """Fail closed on a configuration the service cannot start with."""
    if not config.service_name.strip():
        raise ConfigurationError("service_name must not be empty")

    if not config.collector_endpoint.strip():
        raise ConfigurationError("collector_endpoint must not be empty")

    _check_port("app_port", config.app_port)
    _check_port("metrics_port", config.metrics_port)

    if config.app_port == config.metrics_port:
        raise ConfigurationError(
            f"app_port and metrics_port must differ, both are {config.app_port}"
        )

    if config.shutdown_timeout_millis <= 0:
        raise ConfigurationError("shutdown_timeout_millis must be positive")
