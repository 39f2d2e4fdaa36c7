"""
hello-service - Trace Context Middleware

Opens a server span for every inbound request so that spans started by
route handlers are children of the caller's trace.

Features:
- W3C traceparent extraction from request headers
- Request ID generation / passthrough
- Log context with correlation IDs for the request's lifetime
- X-Request-Id / X-Trace-Id response headers

Usage:
    app.add_middleware(TraceContextMiddleware, tracing=tracing)
"""

import uuid
from typing import Dict

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp
from opentelemetry.trace import Status, StatusCode

from .tracing import TracingManager, TraceContext
from .logging import get_logger, LogContext


class TraceContextMiddleware(BaseHTTPMiddleware):
    """Server span and log context around each request."""

    def __init__(self, app: ASGIApp, tracing: TracingManager):
        super().__init__(app)
        self.tracing = tracing
        self.logger = get_logger("hello_service.observability.middleware")

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        headers = dict(request.headers)

        request_id = headers.get("x-request-id", "")
        if not request_id:
            request_id = f"req_{uuid.uuid4().hex[:24]}"

        with self.tracing.start_server_span(
            name=f"{request.method} {request.url.path}",
            headers=headers,
            attributes={
                "http.method": request.method,
                "http.url": str(request.url),
                "http.route": request.url.path,
                "http.scheme": request.url.scheme,
                "http.host": request.url.hostname or "",
                "http.user_agent": headers.get("user-agent", ""),
                "hello.request_id": request_id,
            },
        ) as span:
            trace_ctx = TraceContext.from_span(span)

            LogContext.set_current(LogContext(
                request_id=request_id,
                trace_id=trace_ctx.trace_id,
                span_id=trace_ctx.span_id,
                endpoint=request.url.path,
            ))

            request.state.request_id = request_id
            request.state.trace_context = trace_ctx

            try:
                response = await call_next(request)

                span.set_attribute("http.status_code", response.status_code)
                if response.status_code >= 500:
                    span.set_status(Status(StatusCode.ERROR, f"HTTP {response.status_code}"))
                elif response.status_code < 400:
                    span.set_status(Status(StatusCode.OK))

                response.headers["X-Request-Id"] = request_id
                response.headers["X-Trace-Id"] = trace_ctx.trace_id
                return response

            except Exception as e:
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, str(e)))
                self.logger.exception(
                    "Request failed with exception",
                    error_type=type(e).__name__,
                    path=request.url.path,
                    method=request.method,
                )
                raise

            finally:
                LogContext.clear()


def get_request_context(request: Request) -> Dict[str, str]:
    """
    Get observability context from request.

    Returns dict with request_id, trace_id, span_id of the server span.
    """
    trace_ctx = getattr(request.state, "trace_context", None)
    return {
        "request_id": getattr(request.state, "request_id", ""),
        "trace_id": trace_ctx.trace_id if trace_ctx else "",
        "span_id": trace_ctx.span_id if trace_ctx else "",
    }
