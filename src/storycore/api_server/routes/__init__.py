# src/storycore/api_server/routes/__init__.py
"""
API routes package initialization.

This module exports the API routers for registration with the main FastAPI
application.
"""

from .context import router as context_router
from .memory import router as memory_router

__all__ = [
    "context_router",
    "memory_router",
]
