"""
hello-service - Main API Server

FastAPI application serving the greeting endpoint on the application port,
with Prometheus metrics served from a separate scrape port.

Startup order:
1. Structured logging
2. Metrics registry and scrape listener (background thread)
3. Tracer provider with OTLP/HTTP batch export
4. Application server

Telemetry failures at startup or shutdown are fatal: they are logged at
CRITICAL and the process exits with status 1.
"""

from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import ServiceConfig, validate_config
from .errors import HelloServiceError, TelemetryError
from .api import hello_router
from .observability import (
    MetricsCollector,
    TracingManager,
    TraceContextMiddleware,
    get_logger,
    init_tracing,
    setup_logging,
    setup_metrics,
    start_metrics_server,
)

logger = get_logger(__name__)


# ============================================================
# Lifespan management
# ============================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log application lifecycle; the tracer is shut down by main()."""
    config: ServiceConfig = app.state.config
    logger.info(
        f"Listening on http://localhost:{config.app_port}",
        service_name=config.service_name,
        metrics_port=config.metrics_port,
    )

    yield

    logger.info("Application server stopped", service_name=config.service_name)


# ============================================================
# FastAPI App
# ============================================================

def create_app(
    tracing: TracingManager,
    metrics: MetricsCollector,
    config: Optional[ServiceConfig] = None,
) -> FastAPI:
    """
    Build the application around an already initialized tracer and
    metrics collector.

    Only /hello is routed; docs and schema routes are disabled so every
    other path answers 404.
    """
    config = config or ServiceConfig()

    app = FastAPI(
        title=config.service_name,
        version=config.service_version,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    app.state.config = config
    app.state.tracing = tracing
    app.state.metrics = metrics

    app.add_middleware(TraceContextMiddleware, tracing=tracing)

    app.include_router(hello_router)

    app.add_exception_handler(405, method_not_allowed_handler)

    return app


# ============================================================
# Error handlers
# ============================================================

async def method_not_allowed_handler(request: Request, exc: Exception):
    """Answer a known path with an unrouted method the same as an unknown path."""
    return JSONResponse(status_code=404, content={"detail": "Not Found"})


# ============================================================
# Run server
# ============================================================

def _shutdown_tracing(tracing: TracingManager) -> int:
    try:
        tracing.shutdown()
    except TelemetryError as e:
        logger.critical(str(e), error_type=type(e).__name__)
        return e.exit_code

    logger.info("Tracer provider shut down")
    return 0


def main(config: Optional[ServiceConfig] = None) -> int:
    """Process entry point. Returns the exit status."""
    config = config or ServiceConfig()
    setup_logging(level=config.log_level)

    try:
        validate_config(config)

        metrics = setup_metrics()
        start_metrics_server(config.metrics_port, addr=config.host, registry=metrics.registry)

        tracing = init_tracing(config)
    except HelloServiceError as e:
        logger.critical(str(e), error_type=type(e).__name__)
        return e.exit_code

    app = create_app(tracing, metrics, config)

    try:
        uvicorn.run(app, host=config.host, port=config.app_port, log_config=None)
    finally:
        exit_code = _shutdown_tracing(tracing)

    logger.info("hello-service stopped", exit_code=exit_code)
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
