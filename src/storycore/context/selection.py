# src/storycore/context/selection.py
"""
Budget-constrained selection of scored turns.

Selection is greedy, not an optimal knapsack: candidates are taken in score
order while they fit, and the walk stops at the first one that does not.
The single exception is a top candidate that alone exceeds the budget; it is
truncated to fit and returned on its own, so a non-empty candidate list
always yields at least one entry.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Sequence

from ..models import ScoredTurn
from ..utils.tokens import CharRatioEstimator

logger = logging.getLogger(__name__)

TRUNCATION_SUFFIX = "..."


def select_within_budget(
    ranked_turns: Sequence[ScoredTurn],
    max_tokens: int,
    estimator: CharRatioEstimator | None = None,
) -> List[ScoredTurn]:
    """
    Select the highest-scoring turns that fit within a token budget.

    Args:
        ranked_turns: Turns sorted by relevance (highest first).
        max_tokens: Token budget for the requesting agent.
        estimator: Token estimator (defaults to 0.25 tokens per char).

    Returns:
        Selected turns, still in score order.  A truncated turn, if any, is
        the only element.
    """
    estimator = estimator or CharRatioEstimator()
    selected: List[ScoredTurn] = []
    used = 0

    for scored in ranked_turns:
        cost = estimator.count(scored.message)

        if used + cost <= max_tokens:
            selected.append(scored)
            used += cost
            continue

        if not selected:
            cut = estimator.max_chars(max_tokens)
            selected.append(
                replace(
                    scored,
                    message=scored.message[:cut] + TRUNCATION_SUFFIX,
                    truncated=True,
                )
            )
            logger.debug(
                "Top context turn (%d tokens) exceeds budget of %d; truncated to %d chars",
                cost, max_tokens, cut,
            )
        break

    return selected
