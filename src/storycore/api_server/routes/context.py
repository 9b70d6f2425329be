# src/storycore/api_server/routes/context.py
"""
Cross-agent context API routes for the StoryCore API server.

Assemble context for an agent and administer the injection toggles of the
``ContextRelevanceEngine`` on ``app.state``.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from ...context.injector import ContextRelevanceEngine
from ...context.post_filter import ContextPostFilter
from ..models import ContextRequest, ContextResponse, ContextSettingsResponse, ToggleRequest

logger = logging.getLogger(__name__)

router = APIRouter()


def get_context_engine(request: Request) -> ContextRelevanceEngine:
    engine: Optional[ContextRelevanceEngine] = getattr(request.app.state, "context_engine", None)
    if engine is None:
        logger.error("Context engine not found in app state")
        raise HTTPException(status_code=503, detail="Context engine is not available.")
    return engine


def get_post_filter(request: Request) -> Optional[ContextPostFilter]:
    return getattr(request.app.state, "post_filter", None)


@router.post("/context/{session_id}/{agent_id}", response_model=ContextResponse)
async def get_relevant_context(
    session_id: str,
    agent_id: str,
    body: ContextRequest,
    engine: ContextRelevanceEngine = Depends(get_context_engine),
    post_filter: Optional[ContextPostFilter] = Depends(get_post_filter),
) -> ContextResponse:
    """
    Context from other agents relevant to ``body.message``.

    Never fails because of the session's contents: when nothing relevant is
    found, or injection is disabled, ``context`` is ``null``.
    """
    bundle = await engine.get_relevant_context(
        session_id, agent_id, body.message, min_score=body.min_score
    )
    if body.refine and post_filter is not None:
        bundle = post_filter.filter_bundle(bundle, body.message)
    return ContextResponse(context=bundle)


@router.get("/context/settings", response_model=ContextSettingsResponse)
async def get_context_settings(
    engine: ContextRelevanceEngine = Depends(get_context_engine),
) -> ContextSettingsResponse:
    return ContextSettingsResponse(
        injection=engine.get_injection_stats(),
        affinity=engine.get_affinity_matrix(),
    )


@router.put("/context/settings", response_model=ContextSettingsResponse)
async def set_context_enabled(
    body: ToggleRequest,
    engine: ContextRelevanceEngine = Depends(get_context_engine),
) -> ContextSettingsResponse:
    """Global on/off switch for context injection."""
    engine.set_global_enabled(body.enabled)
    return ContextSettingsResponse(
        injection=engine.get_injection_stats(),
        affinity=engine.get_affinity_matrix(),
    )


@router.put("/context/agents/{agent_id}", response_model=ContextSettingsResponse)
async def set_agent_context_enabled(
    agent_id: str,
    body: ToggleRequest,
    engine: ContextRelevanceEngine = Depends(get_context_engine),
) -> ContextSettingsResponse:
    """Per-agent on/off switch for context injection."""
    engine.set_agent_enabled(agent_id, body.enabled)
    return ContextSettingsResponse(
        injection=engine.get_injection_stats(),
        affinity=engine.get_affinity_matrix(),
    )
