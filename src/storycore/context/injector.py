# src/storycore/context/injector.py
"""
Cross-Agent Context Relevance Engine.

For every inbound chat turn, decides which prior turns from *other* agents
in the same session are worth showing to the current agent:

1. Read the session's turns from the memory store
2. Score each foreign turn (keyword overlap, lexical similarity, recency,
   agent affinity) and drop those at or below the threshold
3. Rank by score (stable, so ties keep insertion order)
4. Greedily fit the ranking into the agent's token budget
5. Format the selection into an agent-grouped context block

Cross-agent context is a best-effort enhancement.  Any failure while
building it is logged and reported as "no context" (``None``); it never
propagates into the chat path.

Example::

    store = SessionMemoryStore()
    engine = ContextRelevanceEngine(store)

    await store.add_conversation("s1", "plot-architect", "user", "A space adventure with aliens")
    bundle = await engine.get_relevant_context("s1", "dialogue-coach", "How should the alien speak?")
    if bundle:
        system_prompt += bundle.formatted_text
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from ..config.models import ContextInjectionConfig
from ..exceptions import RelevanceComputationError
from ..memory.session_store import SessionMemoryStore
from ..models import ContextBundle, ConversationTurn, ScoredTurn
from ..utils.clock import Clock, SystemClock
from ..utils.tokens import CharRatioEstimator
from .affinity import WRITING_STUDIO, AgentAffinityMatrix
from .formatting import format_context
from .relevance import (
    combine_scores,
    extract_keywords,
    keyword_overlap,
    lexical_similarity,
    recency_decay,
)
from .selection import select_within_budget

logger = logging.getLogger(__name__)


class ContextRelevanceEngine:
    """
    Scores, selects and formats cross-agent context.

    One engine serves any agent roster: the roster-specific parts are the
    injected affinity matrix and token limits.

    Args:
        memory_store: Source of conversation turns (read-only use).
        config: Engine settings; ``agent_limits`` here override
            ``agent_limits`` passed alongside the matrix.
        affinity: Agent affinity matrix and display names.  Defaults to the
            writing-studio roster.
        agent_limits: Roster default token limits.  Defaults to the
            writing-studio limits when ``affinity`` is also omitted.
        clock: Time source for recency scoring and labels.
    """

    def __init__(
        self,
        memory_store: SessionMemoryStore,
        config: Optional[ContextInjectionConfig] = None,
        affinity: Optional[AgentAffinityMatrix] = None,
        agent_limits: Optional[Dict[str, int]] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.memory_store = memory_store
        self.config = config or ContextInjectionConfig()
        if affinity is None:
            affinity = WRITING_STUDIO.matrix
            if agent_limits is None:
                agent_limits = WRITING_STUDIO.agent_limits
        self.affinity = affinity
        self.clock: Clock = clock or SystemClock()
        self.estimator = CharRatioEstimator(self.config.tokens_per_char)

        self._enabled = self.config.enabled
        self._token_limits: Dict[str, int] = {**(agent_limits or {}), **self.config.agent_limits}
        self._agent_settings: Dict[str, Dict[str, bool]] = {
            agent_id: {"enabled": True}
            for agent_id in [*self._token_limits, *self.affinity.agents]
        }
        for agent_id in self.config.disabled_agents:
            self._agent_settings[agent_id] = {"enabled": False}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_relevant_context(
        self,
        session_id: str,
        requesting_agent_id: str,
        user_message: str,
        *,
        min_score: Optional[float] = None,
    ) -> Optional[ContextBundle]:
        """
        Assemble context from other agents for the current message.

        Args:
            session_id: Session whose history is searched.
            requesting_agent_id: Agent about to answer; its own turns are
                never included.
            user_message: The message the agent is answering.
            min_score: Optional per-call floor, applied on top of the
                configured threshold.

        Returns:
            A ``ContextBundle``, or ``None`` when disabled, when nothing
            clears the threshold, or when anything goes wrong.
        """
        try:
            if not self._enabled or not self.is_agent_enabled(requesting_agent_id):
                return None
            turns = await self.memory_store.get_all_conversations(session_id)
            if not turns:
                return None
            return self._build_context(turns, requesting_agent_id, user_message, min_score, session_id)
        except Exception as e:
            error = e if isinstance(e, RelevanceComputationError) else RelevanceComputationError(
                session_id=str(session_id),
                agent_id=str(requesting_agent_id),
                message=f"Relevance computation failed: {e}",
            )
            logger.error(f"Error getting relevant context: {error}", exc_info=True)
            return None

    def score_turns(
        self,
        turns: Sequence[ConversationTurn],
        requesting_agent_id: str,
        user_message: str,
        *,
        min_score: Optional[float] = None,
    ) -> List[ScoredTurn]:
        """
        Score and rank turns from agents other than the requester.

        Args:
            turns: Session turns in insertion order.
            requesting_agent_id: Agent whose own turns are skipped.
            user_message: Message to compare against.
            min_score: Optional floor on top of the configured threshold.

        Returns:
            Turns scoring above the floor, highest score first.
        """
        floor = max(self.config.threshold, min_score or 0.0)
        now = self.clock.now()
        weights = self.config.relevance_weights
        window = self.config.recency_window_seconds
        message_keywords = extract_keywords(user_message)

        scored: List[ScoredTurn] = []
        for index, turn in enumerate(turns):
            if turn.agent_id == requesting_agent_id:
                continue

            keyword = keyword_overlap(message_keywords, extract_keywords(turn.message))
            semantic = lexical_similarity(user_message, turn.message)
            recency = recency_decay(turn.timestamp, now, window)
            relation = self.affinity.affinity(requesting_agent_id, turn.agent_id)

            score = combine_scores(
                weights,
                keyword=keyword,
                semantic=semantic,
                recency=recency,
                relation=relation,
            )
            if score <= floor:
                continue

            scored.append(
                ScoredTurn(
                    turn=turn,
                    relevance_score=score,
                    keyword_score=keyword,
                    semantic_score=semantic,
                    recency_score=recency,
                    relation_score=relation,
                    original_index=index,
                )
            )

        scored.sort(key=lambda s: s.relevance_score, reverse=True)
        return scored

    def resolve_max_tokens(self, agent_id: str) -> int:
        """Token budget for an agent, falling back to ``default_max_tokens``."""
        return self._token_limits.get(agent_id, self.config.default_max_tokens)

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def is_agent_enabled(self, agent_id: str) -> bool:
        """Agents without an explicit setting are enabled."""
        return self._agent_settings.get(agent_id, {}).get("enabled", True)

    def set_agent_enabled(self, agent_id: str, enabled: bool) -> None:
        """Switch injection on or off for one agent."""
        self._agent_settings.setdefault(agent_id, {})["enabled"] = enabled
        logger.info(f"Context injection {'enabled' if enabled else 'disabled'} for agent: {agent_id}")

    def set_global_enabled(self, enabled: bool) -> None:
        """Global kill switch."""
        self._enabled = enabled
        logger.info(f"Context injection globally {'enabled' if enabled else 'disabled'}")

    @property
    def enabled(self) -> bool:
        return self._enabled

    def get_injection_stats(self) -> Dict[str, Any]:
        """Current toggles, limits and weights."""
        return {
            "enabled": self._enabled,
            "agent_settings": {k: dict(v) for k, v in self._agent_settings.items()},
            "token_limits": dict(self._token_limits),
            "default_max_tokens": self.config.default_max_tokens,
            "relevance_weights": self.config.relevance_weights.model_dump(),
            "threshold": self.config.threshold,
        }

    def get_affinity_matrix(self) -> Dict[str, Any]:
        """Read-only dump of the affinity configuration."""
        return self.affinity.to_dict()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _build_context(
        self,
        turns: Sequence[ConversationTurn],
        requesting_agent_id: str,
        user_message: str,
        min_score: Optional[float],
        session_id: str,
    ) -> Optional[ContextBundle]:
        ranked = self.score_turns(turns, requesting_agent_id, user_message, min_score=min_score)
        max_tokens = self.resolve_max_tokens(requesting_agent_id)
        selected = select_within_budget(ranked, max_tokens, self.estimator)

        logger.debug(
            "Session '%s': %d turn(s), %d above threshold, %d selected for '%s' (budget %d)",
            session_id, len(turns), len(ranked), len(selected), requesting_agent_id, max_tokens,
        )

        if not selected:
            return None
        return format_context(selected, requesting_agent_id, self.affinity, self.clock.now())
