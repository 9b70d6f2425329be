# src/storycore/api_server/main.py
"""
Main FastAPI application for the StoryCore API server.

``create_app`` builds an application whose lifespan owns one memory store,
one context engine and one post-filter, all configured from a single
``StoryCoreConfig`` and attached to ``app.state``.

Run with::

    uvicorn storycore.api_server.main:app
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import StoryCoreConfig, load_config
from ..context.affinity import get_preset
from ..context.injector import ContextRelevanceEngine
from ..context.post_filter import ContextPostFilter
from ..logging_config import configure_logging, log_display
from ..memory.session_store import SessionMemoryStore
from ..utils.clock import Clock
from .routes import context_router, memory_router

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[StoryCoreConfig] = None,
    clock: Optional[Clock] = None,
) -> FastAPI:
    """
    Build the StoryCore FastAPI application.

    Args:
        config: Full configuration.  Loaded with ``load_config()`` (which
            honours ``STORYCORE_CONFIG_FILE``) when omitted.
        clock: Time source shared by the store, the engine and the
            post-filter.  Defaults to the system clock.

    Returns:
        The application, with routers mounted under ``/api``.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manages the lifecycle of the FastAPI application.

        Startup applies the logging section, builds the store, engine and
        post-filter and starts the session cleanup loop.  Shutdown destroys
        the store.
        """
        app_config = config or load_config()
        configure_logging(app_config.logging, app_name="storycore-api")
        logger.info("API Server starting up...")
        preset = get_preset(app_config.preset)

        store = SessionMemoryStore(app_config.memory, clock=clock)
        engine = ContextRelevanceEngine(
            store,
            app_config.context,
            affinity=preset.matrix,
            agent_limits=preset.agent_limits,
            clock=clock,
        )
        post_filter = ContextPostFilter(app_config.post_filter, affinity=preset.matrix, clock=clock)

        await store.start()
        app.state.config = app_config
        app.state.memory_store = store
        app.state.context_engine = engine
        app.state.post_filter = post_filter
        log_display(logger, logging.INFO, "API Server ready (preset: %s)", preset.name)

        try:
            yield
        finally:
            logger.info("API Server shutting down...")
            await store.destroy()
            app.state.memory_store = None
            app.state.context_engine = None
            app.state.post_filter = None
            logger.info("API Server shutdown complete")

    app = FastAPI(
        title="StoryCore API",
        description="Session memory and cross-agent context for multi-agent writing assistants",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"], allow_credentials=True,
        allow_methods=["*"], allow_headers=["*"],
    )

    app.include_router(memory_router, prefix="/api", tags=["memory"])
    app.include_router(context_router, prefix="/api", tags=["context"])

    @app.get("/health")
    async def health_check() -> Dict[str, Any]:
        """Health check endpoint for monitoring."""
        store: Optional[SessionMemoryStore] = getattr(app.state, "memory_store", None)
        if store is None:
            return {"status": "degraded", "memory_store_available": False}
        return {
            "status": "healthy",
            "memory_store_available": True,
            "sessions": store.session_count,
            "cleanup_running": store.is_running,
            "preset": app.state.config.preset,
        }

    return app


app = create_app()
