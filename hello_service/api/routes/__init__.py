"""
hello-service - API Routes
"""

from .hello import router as hello_router

__all__ = [
    "hello_router",
]
