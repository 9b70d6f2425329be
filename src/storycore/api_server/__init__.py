# src/storycore/api_server/__init__.py
"""
HTTP surface for StoryCore.

Exposes the session memory store and the cross-agent context engine through
a FastAPI application built by ``create_app``.
"""

from .main import create_app

__all__ = ["create_app"]
