"""
hello-service - API Layer

Routes and dependencies for the application port.
"""

from .dependencies import get_tracing, get_metrics
from .routes import hello_router

__all__ = [
    "hello_router",
    "get_tracing",
    "get_metrics",
]
