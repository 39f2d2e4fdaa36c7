"""
hello-service - Hello API

The greeting endpoint. Each request produces one "say-hello" span, one
log line carrying that span's ids, and one count plus one latency
observation.
"""

import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from ...observability.logging import get_logger
from ...observability.metrics import MetricsCollector
from ...observability.tracing import TracingManager, TraceContext
from ..dependencies import get_tracing, get_metrics

logger = get_logger(__name__)

router = APIRouter(tags=["hello"])

GREETING = "Hello, traced Gin"
SPAN_NAME = "say-hello"


@router.get("/hello", response_class=PlainTextResponse)
async def say_hello(
    request: Request,
    tracing: TracingManager = Depends(get_tracing),
    metrics: MetricsCollector = Depends(get_metrics),
):
    """
    Return the greeting.

    The span is a child of the server span opened for the request, so it
    joins any trace the caller propagated in `traceparent`.
    """
    start = time.perf_counter()

    with tracing.start_span(SPAN_NAME) as span:
        trace_ctx = TraceContext.from_span(span)

        logger.info(
            "Handled /hello request",
            trace_id=trace_ctx.trace_id,
            span_id=trace_ctx.span_id,
            path=request.url.path,
            method=request.method,
        )

        response = PlainTextResponse(GREETING, status_code=200)

    metrics.record_request(
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_seconds=time.perf_counter() - start,
    )

    return response
