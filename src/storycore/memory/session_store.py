# src/storycore/memory/session_store.py
"""
Session Memory Store - Bounded, per-session conversation logs.

Holds the conversation turns that the cross-agent relevance engine scores.
Everything lives in process memory and is lost on restart.

Key properties:
- One ordered turn log per session id, created lazily on first write
- Hard cap per session with FIFO eviction (oldest turns dropped first)
- Idle-timeout expiry driven by a background asyncio sweep
- Per-session ``asyncio.Lock``: operations on the same session serialize,
  operations on different sessions never wait on each other

Usage:
    store = SessionMemoryStore(MemoryStoreConfig(max_entries_per_session=50))
    await store.start()

    await store.add_conversation("sess-1", "plot-architect", "user", "A heist on Mars")
    history = await store.get_conversation_history("sess-1")

    await store.destroy()
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..config.models import MemoryStoreConfig
from ..exceptions import InvalidSessionIdError, InvalidTurnError
from ..models import (
    ConversationTurn,
    Role,
    SessionDetail,
    SessionMetadata,
    SessionStats,
)
from ..utils.clock import Clock, SystemClock, elapsed_seconds

logger = logging.getLogger(__name__)


# =============================================================================
# LOCK REGISTRY
# =============================================================================


@dataclass
class _LockEntry:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class SessionLockRegistry:
    """
    Keyed ``asyncio.Lock`` registry.

    A lock is created when the first task asks for a key and dropped again
    once no task holds or awaits it, so the registry never grows with the
    number of sessions ever seen.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, _LockEntry] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        """Acquire the lock for ``key``; released on every exit path."""
        entry = self._entries.get(key)
        if entry is None:
            entry = _LockEntry()
            self._entries[key] = entry
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0 and self._entries.get(key) is entry:
                del self._entries[key]

    def is_locked(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and entry.lock.locked()

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()


# =============================================================================
# SESSION STATE
# =============================================================================


@dataclass
class _Session:
    turns: List[ConversationTurn]
    metadata: SessionMetadata


# =============================================================================
# SESSION MEMORY STORE
# =============================================================================


class SessionMemoryStore:
    """
    In-memory conversation store partitioned by session id.

    The store exclusively owns the turn logs: readers get copies, and only
    the store's own operations add, evict, expire or clear turns.

    Attributes:
        config: Bounds and expiry settings.
        clock: Time source for timestamps and TTL checks.
    """

    def __init__(
        self,
        config: Optional[MemoryStoreConfig] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.config = config or MemoryStoreConfig()
        self.clock: Clock = clock or SystemClock()

        self._sessions: Dict[str, _Session] = {}
        self._locks = SessionLockRegistry()
        self._cleanup_task: Optional[asyncio.Task] = None
        self._running = False

        logger.debug(
            "SessionMemoryStore initialized: max_entries=%d, ttl=%.0fs, cleanup_every=%.0fs",
            self.config.max_entries_per_session,
            self.config.session_ttl_seconds,
            self.config.cleanup_interval_seconds,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """
        Start the background cleanup loop.

        Idempotent: calling multiple times is safe.
        """
        if self._running:
            return
        self._running = True
        self._cleanup_task = asyncio.create_task(self._cleanup_loop())
        logger.info(
            "Session cleanup started (interval: %.0fs)",
            self.config.cleanup_interval_seconds,
        )

    async def destroy(self) -> None:
        """
        Stop the cleanup loop and release every session.

        The store is not reusable afterwards.
        """
        self._running = False
        if self._cleanup_task:
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
            self._cleanup_task = None
        self._sessions.clear()
        self._locks.clear()
        logger.info("SessionMemoryStore destroyed")

    async def __aenter__(self) -> "SessionMemoryStore":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.destroy()

    @property
    def is_running(self) -> bool:
        """Whether the cleanup loop is active."""
        return self._running

    async def _cleanup_loop(self) -> None:
        while self._running:
            await asyncio.sleep(self.config.cleanup_interval_seconds)
            try:
                await self.cleanup_expired_sessions()
            except Exception as e:
                logger.error(f"Session cleanup failed: {e}", exc_info=True)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_session_id(session_id: Any) -> None:
        if not session_id or not isinstance(session_id, str):
            raise InvalidSessionIdError(session_id)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def add_conversation(
        self,
        session_id: str,
        agent_id: str,
        role: Role | str,
        message: str,
    ) -> ConversationTurn:
        """
        Append a turn to a session, creating the session if needed.

        Args:
            session_id: Owning session.
            agent_id: Persona that produced or received the message.
            role: ``user``, ``assistant`` or ``system``.
            message: Message text.

        Returns:
            The stored (immutable) turn.

        Raises:
            InvalidSessionIdError: If ``session_id`` is not a non-empty string.
            InvalidTurnError: If the agent id, role or message is invalid.
        """
        self._validate_session_id(session_id)
        if not agent_id or not isinstance(agent_id, str):
            raise InvalidTurnError("agent_id", "Agent ID must be a non-empty string.")
        if not isinstance(message, str):
            raise InvalidTurnError("message", "Message must be a string.")
        try:
            role = Role(role)
        except ValueError as e:
            raise InvalidTurnError("role", "Role must be one of: user, assistant, system.") from e

        async with self._locks.hold(session_id):
            now = self.clock.now()
            session = self._sessions.get(session_id)
            if session is None:
                session = _Session(
                    turns=[],
                    metadata=SessionMetadata(created=now, last_accessed=now),
                )
                self._sessions[session_id] = session
                logger.debug("Created session '%s'", session_id)

            try:
                turn = ConversationTurn(agent_id=agent_id, role=role, message=message, timestamp=now)
            except ValidationError as e:
                raise InvalidTurnError("turn", f"Invalid conversation turn: {e}") from e

            session.turns.append(turn)
            session.metadata.last_accessed = now
            session.metadata.entry_count += 1

            overflow = len(session.turns) - self.config.max_entries_per_session
            if overflow > 0:
                del session.turns[:overflow]
                session.metadata.entry_count = len(session.turns)
                logger.debug("Evicted %d oldest turn(s) from session '%s'", overflow, session_id)

            return turn

    async def get_conversation_history(
        self,
        session_id: str,
        agent_id: Optional[str] = None,
    ) -> List[ConversationTurn]:
        """
        Return a session's turns in insertion order.

        Args:
            session_id: Session to read.
            agent_id: If given, only turns of this agent are returned.

        Returns:
            A copy of the turn log; ``[]`` if the session does not exist.

        Raises:
            InvalidSessionIdError: If ``session_id`` is not a non-empty string.
        """
        self._validate_session_id(session_id)

        async with self._locks.hold(session_id):
            session = self._sessions.get(session_id)
            if session is None:
                return []

            session.metadata.last_accessed = self.clock.now()

            if agent_id:
                return [turn for turn in session.turns if turn.agent_id == agent_id]
            return list(session.turns)

    async def get_all_conversations(self, session_id: str) -> List[ConversationTurn]:
        """Unfiltered history of a session."""
        return await self.get_conversation_history(session_id)

    async def clear_session(self, session_id: str) -> None:
        """
        Remove a session entirely.

        Idempotent: clearing an unknown session is not an error.

        Raises:
            InvalidSessionIdError: If ``session_id`` is not a non-empty string.
        """
        self._validate_session_id(session_id)

        async with self._locks.hold(session_id):
            if self._sessions.pop(session_id, None) is not None:
                logger.debug("Cleared session '%s'", session_id)

    async def cleanup_expired_sessions(self) -> int:
        """
        Remove every session idle for longer than the configured TTL.

        Each candidate is re-checked under its own lock, so a session touched
        while the sweep was waiting survives.

        Returns:
            Number of sessions removed.
        """
        ttl = self.config.session_ttl_seconds
        candidates = [
            session_id
            for session_id, session in list(self._sessions.items())
            if self._is_expired(session, ttl)
        ]

        removed = 0
        for session_id in candidates:
            async with self._locks.hold(session_id):
                session = self._sessions.get(session_id)
                if session is not None and self._is_expired(session, ttl):
                    del self._sessions[session_id]
                    removed += 1

        if removed:
            logger.info(f"Cleaned up {removed} expired session(s)")
        return removed

    def _is_expired(self, session: _Session, ttl: float) -> bool:
        return elapsed_seconds(session.metadata.last_accessed, self.clock.now()) > ttl

    def get_session_stats(self) -> SessionStats:
        """
        Snapshot of all sessions.

        Synchronous: it runs without awaiting, so no other task can mutate
        the store while the snapshot is taken.
        """
        details = [
            SessionDetail(
                session_id=session_id,
                conversation_count=len(session.turns),
                created=session.metadata.created,
                last_accessed=session.metadata.last_accessed,
            )
            for session_id, session in self._sessions.items()
        ]
        return SessionStats(
            total_sessions=len(details),
            total_conversations=sum(d.conversation_count for d in details),
            session_details=details,
        )

    def has_session(self, session_id: str) -> bool:
        """Whether a session currently exists (does not touch ``last_accessed``)."""
        return session_id in self._sessions

    @property
    def session_count(self) -> int:
        """Number of live sessions."""
        return len(self._sessions)
