"""
hello-service - Traced Greeting Service

A single greeting endpoint instrumented with Prometheus metrics,
structured JSON logging and OpenTelemetry tracing exported over OTLP/HTTP.
"""

__version__ = "1.0.0"
__author__ = "hello-service"
