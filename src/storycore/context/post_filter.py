# src/storycore/context/post_filter.py
"""
Second-pass relevance refinement for context bundles.

The engine's first pass is deliberately permissive.  Right before a prompt
is built, ``ContextPostFilter`` rescores the bundle's entries against the
current message with a stricter, band-based scheme and keeps only the few
entries that clearly matter:

- the message names the entry's agent → ``direct_mention`` (1.0)
- keyword overlap > 0.4 → ``topic_overlap`` (0.7)
- keyword overlap > 0.2 → ``entity_match`` (0.6)
- keyword overlap > 0.1 → ``thematic_link`` (0.4)
- plus up to ``recency_bonus`` (0.1) for entries under ten minutes old

Scores are clamped to [0, 1], the same scale as the engine's threshold.
"""

from __future__ import annotations

import logging
from typing import FrozenSet, Optional, Sequence

from ..config.models import PostFilterConfig
from ..models import ContextBundle, ContextEntry
from ..utils.clock import Clock, SystemClock
from .affinity import WRITING_STUDIO, AgentAffinityMatrix
from .formatting import render_block
from .relevance import STOP_WORDS, extract_keywords, recency_decay

logger = logging.getLogger(__name__)

POST_FILTER_STOP_WORDS: FrozenSet[str] = (STOP_WORDS - {"me", "him", "her"}) | frozenset({
    "what", "which", "who", "when", "where", "why", "how",
    "this", "that", "these", "those",
})


def overlap_ratio(keywords1: Sequence[str], keywords2: Sequence[str]) -> float:
    """Distinct shared keywords divided by the shorter keyword list's length."""
    if not keywords1 or not keywords2:
        return 0.0
    shared = set(keywords1) & set(keywords2)
    return len(shared) / min(len(keywords1), len(keywords2))


class ContextPostFilter:
    """
    Optional refinement step over a ``ContextBundle``.

    Args:
        config: Bands, cutoffs and limits.
        affinity: Source of display names for direct-mention detection.
        clock: Time source for the recency bonus.
    """

    def __init__(
        self,
        config: Optional[PostFilterConfig] = None,
        affinity: Optional[AgentAffinityMatrix] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self.config = config or PostFilterConfig()
        self.affinity = affinity or WRITING_STUDIO.matrix
        self.clock: Clock = clock or SystemClock()

    def score_entry(self, user_message: str, entry: ContextEntry) -> float:
        """Relevance of one entry to the current message, in [0, 1]."""
        cfg = self.config
        score = 0.0
        lower_message = user_message.lower()

        display_name = entry.display_name or self.affinity.display_name(entry.agent_id)
        if display_name and display_name.lower() in lower_message:
            score = max(score, cfg.direct_mention)

        overlap = overlap_ratio(
            extract_keywords(lower_message, POST_FILTER_STOP_WORDS),
            extract_keywords(entry.message, POST_FILTER_STOP_WORDS),
        )
        if overlap > cfg.topic_overlap_cutoff:
            score = max(score, cfg.topic_overlap)
        elif overlap > cfg.entity_match_cutoff:
            score = max(score, cfg.entity_match)
        elif overlap > cfg.thematic_link_cutoff:
            score = max(score, cfg.thematic_link)

        score += cfg.recency_bonus * recency_decay(
            entry.timestamp, self.clock.now(), cfg.recency_window_seconds
        )
        return min(score, 1.0)

    def filter_bundle(
        self,
        bundle: Optional[ContextBundle],
        user_message: str,
    ) -> Optional[ContextBundle]:
        """
        Keep only the most relevant entries of a bundle.

        Args:
            bundle: Output of the relevance engine, possibly ``None``.
            user_message: The message being answered.

        Returns:
            A new bundle with at most ``max_entries`` entries scoring at
            least ``min_relevance`` (best first), or ``None`` if none do.
        """
        if bundle is None or not bundle.entries:
            return None

        scored = [
            (self.score_entry(user_message, entry), entry)
            for entry in bundle.entries
        ]
        kept = [pair for pair in scored if pair[0] >= self.config.min_relevance]
        kept.sort(key=lambda pair: pair[0], reverse=True)
        kept = kept[: self.config.max_entries]

        logger.debug(
            "Post-filter kept %d of %d context entries for '%s'",
            len(kept), len(scored), bundle.metadata.target_agent,
        )

        if not kept:
            return None

        entries = [
            entry.model_copy(update={"relevance_score": score})
            for score, entry in kept
        ]
        agents = list(dict.fromkeys(entry.agent_id for entry in entries))

        return bundle.model_copy(
            update={
                "formatted_text": render_block(entries, self.clock.now()),
                "entries": entries,
                "metadata": bundle.metadata.model_copy(
                    update={
                        "context_count": len(entries),
                        "agents": agents,
                        "filtered": True,
                        "original_count": len(bundle.entries),
                        "filtered_count": len(entries),
                    }
                ),
            }
        )
