# src/storycore/api_server/routes/memory.py
"""
Memory-related API routes for the StoryCore API server.

Read, append and clear the per-session conversation logs held by the
``SessionMemoryStore`` on ``app.state``.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from ...exceptions import InvalidSessionIdError, InvalidTurnError
from ...memory.session_store import SessionMemoryStore
from ...models import ConversationTurn, SessionStats
from ..models import ConversationCreateRequest, ConversationPage, SessionClearedResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def get_memory_store(request: Request) -> SessionMemoryStore:
    """Resolve the memory store from app state (503 if startup failed)."""
    store: Optional[SessionMemoryStore] = getattr(request.app.state, "memory_store", None)
    if store is None:
        logger.error("Memory store not found in app state")
        raise HTTPException(status_code=503, detail="Memory store is not available.")
    return store


def _page(
    session_id: str,
    turns: list[ConversationTurn],
    offset: int,
    limit: int,
    agent_id: Optional[str] = None,
) -> ConversationPage:
    window = turns[offset: offset + limit]
    return ConversationPage(
        session_id=session_id,
        agent_id=agent_id,
        conversations=window,
        total=len(turns),
        returned=len(window),
        offset=offset,
        limit=limit,
    )


@router.get("/memory/stats", response_model=SessionStats)
async def get_memory_stats(
    store: SessionMemoryStore = Depends(get_memory_store),
) -> SessionStats:
    """Snapshot of every live session (debug endpoint)."""
    return store.get_session_stats()


@router.get("/memory/{session_id}/conversations", response_model=ConversationPage)
async def get_conversations(
    session_id: str,
    limit: int = Query(default=50, ge=1, le=500, description="Maximum turns to return"),
    offset: int = Query(default=0, ge=0, description="Turns to skip from the oldest"),
    store: SessionMemoryStore = Depends(get_memory_store),
) -> ConversationPage:
    """
    Paginated conversation history of a session, oldest first.

    Unknown sessions yield an empty page rather than a 404.
    """
    try:
        turns = await store.get_all_conversations(session_id)
    except InvalidSessionIdError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _page(session_id, turns, offset, limit)


@router.get("/memory/{session_id}/conversations/{agent_id}", response_model=ConversationPage)
async def get_agent_conversations(
    session_id: str,
    agent_id: str,
    limit: int = Query(default=50, ge=1, le=500, description="Maximum turns to return"),
    offset: int = Query(default=0, ge=0, description="Turns to skip from the oldest"),
    store: SessionMemoryStore = Depends(get_memory_store),
) -> ConversationPage:
    """Paginated history of a single agent within a session."""
    try:
        turns = await store.get_conversation_history(session_id, agent_id)
    except InvalidSessionIdError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _page(session_id, turns, offset, limit, agent_id=agent_id)


@router.post("/memory/{session_id}/conversations", response_model=ConversationTurn)
async def add_conversation(
    session_id: str,
    body: ConversationCreateRequest,
    store: SessionMemoryStore = Depends(get_memory_store),
) -> ConversationTurn:
    """
    Record a conversation turn.

    Raises:
        HTTPException: 400 for an invalid session id, agent id, role or message.
    """
    try:
        return await store.add_conversation(session_id, body.agent_id, body.role, body.message)
    except (InvalidSessionIdError, InvalidTurnError) as e:
        logger.debug(f"Rejected conversation turn for session '{session_id}': {e}")
        raise HTTPException(status_code=400, detail=str(e))


@router.delete("/memory/{session_id}", response_model=SessionClearedResponse)
async def clear_session(
    session_id: str,
    confirm: bool = Query(default=False, description="Must be true to clear the session"),
    store: SessionMemoryStore = Depends(get_memory_store),
) -> SessionClearedResponse:
    """Drop every turn of a session.  Requires ``?confirm=true``."""
    if not confirm:
        raise HTTPException(
            status_code=400,
            detail="Confirmation required. Add ?confirm=true to proceed.",
        )
    try:
        await store.clear_session(session_id)
    except InvalidSessionIdError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(f"Session '{session_id}' cleared via API")
    return SessionClearedResponse(session_id=session_id)
