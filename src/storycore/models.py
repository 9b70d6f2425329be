# src/storycore/models.py
"""
Core data models for the StoryCore library.

This module defines the Pydantic models used to represent conversation turns,
session statistics and the context bundles produced by the relevance engine,
plus the ephemeral ``ScoredTurn`` used while ranking.  Stored turns are
frozen: once appended to a session they only ever disappear through eviction.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .utils.clock import ensure_utc


class Role(str, Enum):
    """
    Enumeration of possible roles in a conversation.
    These roles define the origin or type of a message.
    """
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"

    @classmethod
    def _missing_(cls, value: object): # type: ignore[misc] # Pydantic uses this signature
        """
        Handles case-insensitive matching and common aliases for roles.
        For example, "Agent" or "AGENT" will be mapped to Role.ASSISTANT.
        """
        if isinstance(value, str):
            lower_value = value.lower()
            if lower_value == "agent":
                return cls.ASSISTANT
            for member in cls:
                if member.value == lower_value:
                    return member
        return None


def _coerce_utc(v: Any) -> Any:
    """Shared validator body: parse ISO strings and normalise datetimes to UTC."""
    if isinstance(v, str):
        if v.endswith('Z'):
            v = v[:-1] + '+00:00'
        v = datetime.fromisoformat(v)
    if isinstance(v, datetime):
        return ensure_utc(v)
    return v


class ConversationTurn(BaseModel):
    """
    One message exchanged with one agent inside a session.

    The owning session id is implied by the store partition and is not stored
    on the turn itself.

    Attributes:
        agent_id: Identifier of the persona that produced or received the turn.
        role: Who authored the message (user, assistant or system).
        message: The message text.
        timestamp: Insertion time (UTC), assigned by the memory store.
    """
    model_config = ConfigDict(frozen=True, use_enum_values=True)

    agent_id: str = Field(min_length=1, description="Agent persona this turn belongs to.")
    role: Role = Field(description="The role of the message author (system, user, or assistant).")
    message: str = Field(description="The textual content of the turn.")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Timestamp of when the turn was stored (UTC)."
    )

    @field_validator('timestamp', mode='before')
    @classmethod
    def ensure_utc_timestamp(cls, v: Any) -> Any:
        """Ensure the timestamp is timezone-aware and in UTC if naive."""
        return _coerce_utc(v)


class SessionMetadata(BaseModel):
    """Bookkeeping kept next to each session's turn log."""
    created: datetime
    last_accessed: datetime
    entry_count: int = 0


class SessionDetail(BaseModel):
    """Per-session line in ``SessionStats``."""
    session_id: str
    conversation_count: int
    created: datetime
    last_accessed: datetime


class SessionStats(BaseModel):
    """Read-only snapshot of the memory store."""
    total_sessions: int = 0
    total_conversations: int = 0
    session_details: List[SessionDetail] = Field(default_factory=list)


@dataclass
class ScoredTurn:
    """
    A conversation turn annotated with its computed relevance.

    Computed fresh for every request and never persisted.

    Attributes:
        turn: The stored turn (never mutated).
        relevance_score: Weighted combination of the component scores.
        keyword_score: Keyword overlap with the current message.
        semantic_score: Lexical similarity with the current message.
        recency_score: Linear recency decay.
        relation_score: Agent affinity between requester and turn author.
        original_index: Insertion position within the session log.
        message: Message text as it will be injected (may be truncated).
        truncated: Whether ``message`` was cut to fit the token budget.
    """

    turn: ConversationTurn
    relevance_score: float
    keyword_score: float = 0.0
    semantic_score: float = 0.0
    recency_score: float = 0.0
    relation_score: float = 0.0
    original_index: int = 0
    message: str = ""
    truncated: bool = False

    def __post_init__(self) -> None:
        if not self.message:
            self.message = self.turn.message

    @property
    def agent_id(self) -> str:
        return self.turn.agent_id

    @property
    def role(self) -> str:
        return self.turn.role

    @property
    def timestamp(self) -> datetime:
        return self.turn.timestamp


class ContextEntry(BaseModel):
    """One selected turn as carried inside a ``ContextBundle``."""
    agent_id: str
    display_name: str
    role: Role
    message: str
    timestamp: datetime
    relevance_score: float = 0.0
    truncated: bool = False

    model_config = ConfigDict(use_enum_values=True)


class ContextMetadata(BaseModel):
    """
    Metadata describing an injected context block.

    ``filtered``, ``original_count`` and ``filtered_count`` are only set once
    the bundle has gone through the post-filter.
    """
    context_count: int = Field(description="Number of entries in the block.")
    agents: List[str] = Field(default_factory=list, description="Contributing agent ids, in group order.")
    injected_at: datetime = Field(description="When the block was assembled (UTC).")
    target_agent: str = Field(description="Agent the block was assembled for.")
    filtered: bool = False
    original_count: Optional[int] = None
    filtered_count: Optional[int] = None


class ContextBundle(BaseModel):
    """
    Output of the relevance engine: formatted cross-agent text plus metadata.

    ``entries`` keeps the structured selection so that later refinement steps
    can rescore it without parsing ``formatted_text``.
    """
    formatted_text: str
    metadata: ContextMetadata
    entries: List[ContextEntry] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly representation."""
        return self.model_dump(mode="json")
