# src/storycore/api_server/models.py
"""
Pydantic models for the StoryCore API server.

This module defines the request and response models for the FastAPI server,
ensuring proper data validation and clear API contracts.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models import ContextBundle, ConversationTurn


class ConversationCreateRequest(BaseModel):
    """
    Request model for recording a conversation turn.

    ``role`` is kept as a plain string so that the memory store, not the
    request parser, decides which roles are valid (reported as HTTP 400).
    """
    agent_id: str = Field(description="Agent persona the turn belongs to")
    role: str = Field(description="One of: user, assistant, system")
    message: str = Field(description="The message text")

    model_config = ConfigDict(extra="forbid")


class ConversationPage(BaseModel):
    """A page of a session's conversation history."""
    session_id: str
    agent_id: Optional[str] = None
    conversations: List[ConversationTurn] = Field(default_factory=list)
    total: int = Field(description="Turns available before pagination")
    returned: int = Field(description="Turns in this page")
    offset: int
    limit: int


class SessionClearedResponse(BaseModel):
    session_id: str
    message: str = "Session memory cleared successfully"


class ContextRequest(BaseModel):
    """
    Request model for assembling cross-agent context.
    """
    message: str = Field(description="The message the agent is about to answer")
    refine: bool = Field(default=False, description="If True, apply the post-filter to the result")
    min_score: Optional[float] = Field(
        default=None,
        ge=0.0,
        le=1.0,
        description="Optional per-call relevance floor on top of the configured threshold",
    )

    model_config = ConfigDict(extra="forbid")


class ContextResponse(BaseModel):
    """Assembled context, or ``null`` when nothing relevant was found."""
    context: Optional[ContextBundle] = None


class ToggleRequest(BaseModel):
    enabled: bool

    model_config = ConfigDict(extra="forbid")


class ContextSettingsResponse(BaseModel):
    """Current injection settings and the active affinity configuration."""
    injection: Dict[str, Any]
    affinity: Dict[str, Any]

