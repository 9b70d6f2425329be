# tests/context/test_injector.py
"""
Test suite for the cross-agent context relevance engine.

Tests cover:
    - null results (empty session, disabled engine or agent, failures)
    - self-exclusion and threshold filtering
    - affinity- and recency-driven ranking
    - token budgets and truncation
    - administration surface (toggles, stats, affinity dump)
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from storycore.config.models import ContextInjectionConfig, RelevanceWeights
from storycore.context.affinity import STORY_DRIVE, WRITING_STUDIO, AgentAffinityMatrix
from storycore.context.formatting import TRUNCATION_MARKER
from storycore.context.injector import ContextRelevanceEngine
from storycore.models import ContextBundle

# =============================================================================
# Null results
# =============================================================================


class TestNoContext:
    """Cases where the engine returns None."""

    @pytest.mark.asyncio
    async def test_unknown_session(self, engine):
        assert await engine.get_relevant_context("missing", "editor", "hello") is None

    @pytest.mark.asyncio
    async def test_only_own_turns(self, engine, memory_store):
        await memory_store.add_conversation("s1", "editor", "user", "Cut the prologue")
        await memory_store.add_conversation("s1", "editor", "assistant", "Prologue cut")

        assert await engine.get_relevant_context("s1", "editor", "prologue") is None

    @pytest.mark.asyncio
    async def test_globally_disabled(self, engine, memory_store):
        await memory_store.add_conversation("s1", "world-builder", "user", "Desert planet")
        engine.set_global_enabled(False)

        assert engine.enabled is False
        assert await engine.get_relevant_context("s1", "editor", "desert planet") is None

    @pytest.mark.asyncio
    async def test_agent_disabled(self, engine, memory_store):
        await memory_store.add_conversation("s1", "world-builder", "user", "Desert planet")
        engine.set_agent_enabled("editor", False)

        assert await engine.get_relevant_context("s1", "editor", "desert planet") is None
        assert await engine.get_relevant_context("s1", "plot-architect", "desert planet") is not None

    @pytest.mark.asyncio
    async def test_disabled_agents_from_config(self, memory_store, frozen_clock):
        await memory_store.add_conversation("s1", "world-builder", "user", "Desert planet")
        engine = ContextRelevanceEngine(
            memory_store,
            ContextInjectionConfig(disabled_agents=["editor"]),
            clock=frozen_clock,
        )

        assert engine.is_agent_enabled("editor") is False
        assert await engine.get_relevant_context("s1", "editor", "desert planet") is None

    @pytest.mark.asyncio
    async def test_invalid_session_id_is_swallowed(self, engine):
        assert await engine.get_relevant_context("", "editor", "hello") is None

    @pytest.mark.asyncio
    async def test_unhashable_agent_id_is_swallowed(self, engine):
        assert await engine.get_relevant_context("s1", ["editor"], "hello") is None

    @pytest.mark.asyncio
    async def test_store_failure_is_logged_and_swallowed(self, frozen_clock, caplog):
        store = MagicMock()
        store.get_all_conversations = AsyncMock(side_effect=RuntimeError("boom"))
        engine = ContextRelevanceEngine(store, clock=frozen_clock)

        with caplog.at_level("ERROR", logger="storycore.context.injector"):
            result = await engine.get_relevant_context("s1", "editor", "hello")

        assert result is None
        assert "Error getting relevant context" in caplog.text
        assert "boom" in caplog.text


# =============================================================================
# Scoring and filtering
# =============================================================================


class TestScoring:
    """Tests for self-exclusion, thresholds and ranking."""

    @pytest.mark.asyncio
    async def test_requesting_agent_never_included(self, engine, memory_store):
        await memory_store.add_conversation("s1", "editor", "user", "The desert planet chapter drags")
        await memory_store.add_conversation("s1", "world-builder", "user", "The desert planet has twin suns")

        bundle = await engine.get_relevant_context("s1", "editor", "desert planet")

        assert [e.agent_id for e in bundle.entries] == ["world-builder"]
        assert "editor" not in bundle.metadata.agents

    def test_score_components(self, engine, frozen_clock):
        from storycore.models import ConversationTurn

        turn = ConversationTurn(
            agent_id="world-builder", role="user",
            message="desert planet", timestamp=frozen_clock.now(),
        )

        [scored] = engine.score_turns([turn], "plot-architect", "desert planet")

        assert scored.keyword_score == 1.0
        assert scored.semantic_score == pytest.approx(1.0)
        assert scored.recency_score == 1.0
        assert scored.relation_score == 0.8
        assert scored.relevance_score == pytest.approx(0.3 + 0.3 + 0.2 + 0.2 * 0.8)

    @pytest.mark.asyncio
    async def test_zero_score_dropped(self, memory_store, frozen_clock):
        weights = RelevanceWeights(keyword_match=1, semantic_similarity=0, recency=0, agent_relation=0)
        engine = ContextRelevanceEngine(
            memory_store, ContextInjectionConfig(relevance_weights=weights), clock=frozen_clock
        )
        await memory_store.add_conversation("s1", "world-builder", "user", "Twin suns over dunes")

        assert await engine.get_relevant_context("s1", "editor", "Rewrite chapter nine") is None

    @pytest.mark.asyncio
    async def test_score_equal_to_threshold_dropped(self, memory_store, frozen_clock):
        weights = RelevanceWeights(keyword_match=0, semantic_similarity=0, recency=0, agent_relation=1)
        engine = ContextRelevanceEngine(
            memory_store,
            ContextInjectionConfig(relevance_weights=weights, threshold=0.3),
            affinity=AgentAffinityMatrix(),
            clock=frozen_clock,
        )
        await memory_store.add_conversation("s1", "a", "user", "anything")

        assert await engine.get_relevant_context("s1", "b", "anything") is None

    @pytest.mark.asyncio
    async def test_min_score_raises_floor(self, engine, memory_store):
        await memory_store.add_conversation("s1", "world-builder", "user", "Desert planet")

        assert await engine.get_relevant_context("s1", "editor", "desert planet", min_score=0.99) is None
        assert await engine.get_relevant_context("s1", "editor", "desert planet", min_score=0.1) is not None

    @pytest.mark.asyncio
    async def test_affinity_drives_ranking(self, engine, memory_store):
        message = "The desert planet has twin suns"
        await memory_store.add_conversation("s1", "world-builder", "assistant", message)
        await memory_store.add_conversation("s1", "research-assistant", "assistant", message)
        await memory_store.add_conversation("s1", "character-psychologist", "assistant", message)

        turns = await memory_store.get_all_conversations("s1")
        ranked = engine.score_turns(turns, "plot-architect", "Tell me about the desert planet")

        assert [s.agent_id for s in ranked] == [
            "character-psychologist",  # 0.9
            "world-builder",           # 0.8
            "research-assistant",      # 0.6
        ]

        bundle = await engine.get_relevant_context("s1", "plot-architect", "Tell me about the desert planet")
        assert bundle.metadata.agents == ["character-psychologist", "world-builder", "research-assistant"]

    @pytest.mark.asyncio
    async def test_recency_drives_ranking(self, engine, memory_store, frozen_clock):
        await memory_store.add_conversation("s1", "world-builder", "assistant", "Moon base layout")
        frozen_clock.advance(minutes=50)
        await memory_store.add_conversation("s1", "world-builder", "assistant", "Moon base layout")
        frozen_clock.advance(minutes=5)

        turns = await memory_store.get_all_conversations("s1")
        ranked = engine.score_turns(turns, "editor", "moon base layout")

        assert [s.original_index for s in ranked] == [1, 0]
        assert ranked[0].recency_score == pytest.approx(1 - 300 / 3600)
        assert ranked[1].recency_score == pytest.approx(1 - 3300 / 3600)

    @pytest.mark.asyncio
    async def test_ties_keep_insertion_order(self, engine, memory_store):
        for _ in range(3):
            await memory_store.add_conversation("s1", "world-builder", "assistant", "same text")

        turns = await memory_store.get_all_conversations("s1")
        ranked = engine.score_turns(turns, "editor", "same text")

        assert [s.original_index for s in ranked] == [0, 1, 2]

    def test_unlisted_pair_uses_default_affinity(self, memory_store, frozen_clock):
        from storycore.models import ConversationTurn

        matrix = AgentAffinityMatrix(relationships={"a": {"b": 0.0}})
        engine = ContextRelevanceEngine(memory_store, affinity=matrix, clock=frozen_clock)
        turns = [
            ConversationTurn(agent_id="b", role="user", message="x", timestamp=frozen_clock.now()),
            ConversationTurn(agent_id="c", role="user", message="x", timestamp=frozen_clock.now()),
        ]

        ranked = engine.score_turns(turns, "a", "x")
        relations = {s.agent_id: s.relation_score for s in ranked}

        assert relations == {"c": 0.3, "b": 0.0}


# =============================================================================
# Budget
# =============================================================================


class TestBudget:
    """Tests for token budgets."""

    def test_resolve_max_tokens(self, memory_store, frozen_clock):
        engine = ContextRelevanceEngine(
            memory_store,
            ContextInjectionConfig(agent_limits={"editor": 42}),
            clock=frozen_clock,
        )

        assert engine.resolve_max_tokens("plot-architect") == 750
        assert engine.resolve_max_tokens("research-assistant") == 1000
        assert engine.resolve_max_tokens("editor") == 42
        assert engine.resolve_max_tokens("someone-else") == 500

    @pytest.mark.asyncio
    async def test_selection_respects_budget(self, memory_store, frozen_clock):
        engine = ContextRelevanceEngine(
            memory_store,
            ContextInjectionConfig(agent_limits={"dialogue-coach": 10}),
            clock=frozen_clock,
        )
        for _ in range(3):
            await memory_store.add_conversation("s1", "character-psychologist", "assistant", "x" * 16)

        bundle = await engine.get_relevant_context("s1", "dialogue-coach", "anything")

        assert bundle.metadata.context_count == 2
        assert all(not e.truncated for e in bundle.entries)

    @pytest.mark.asyncio
    async def test_oversized_turn_truncated_alone(self, memory_store, frozen_clock):
        engine = ContextRelevanceEngine(
            memory_store,
            ContextInjectionConfig(agent_limits={"dialogue-coach": 10}),
            clock=frozen_clock,
        )
        long_message = "The alien speaks in clicks. " * 10
        await memory_store.add_conversation("s1", "character-psychologist", "assistant", long_message)
        await memory_store.add_conversation("s1", "editor", "assistant", "short")

        bundle = await engine.get_relevant_context("s1", "dialogue-coach", "How does the alien speak?")

        assert bundle.metadata.context_count == 1
        [entry] = bundle.entries
        assert entry.truncated is True
        assert entry.message == long_message[:40] + "..."
        assert TRUNCATION_MARKER in bundle.formatted_text

        stored = await memory_store.get_all_conversations("s1")
        assert stored[0].message == long_message


# =============================================================================
# End to end
# =============================================================================


class TestContextBundle:
    """Tests for the assembled bundle."""

    @pytest.mark.asyncio
    async def test_bundle_contents(self, engine, memory_store, frozen_clock):
        await memory_store.add_conversation("s1", "plot-architect", "user", "A space adventure with aliens")
        await memory_store.add_conversation("s1", "plot-architect", "assistant", "Open on the crash landing.")
        frozen_clock.advance(minutes=5)

        bundle = await engine.get_relevant_context("s1", "dialogue-coach", "How should the aliens speak?")

        assert isinstance(bundle, ContextBundle)
        assert bundle.formatted_text.startswith("[CONTEXT FROM OTHER AGENTS]\n")
        assert bundle.formatted_text.endswith("[END CONTEXT]\n")
        assert "User to Plot Architect (5 minutes ago): A space adventure with aliens" in bundle.formatted_text
        assert "Plot Architect (5 minutes ago): Open on the crash landing." in bundle.formatted_text
        assert bundle.metadata.target_agent == "dialogue-coach"
        assert bundle.metadata.injected_at == frozen_clock.now()

    @pytest.mark.asyncio
    async def test_unlisted_requesting_agent(self, engine, memory_store):
        await memory_store.add_conversation("s1", "editor", "assistant", "Trim the adverbs")

        bundle = await engine.get_relevant_context("s1", "guest-agent", "adverbs")

        assert bundle is not None
        assert engine.is_agent_enabled("guest-agent") is True

    @pytest.mark.asyncio
    async def test_story_drive_roster(self, memory_store, frozen_clock):
        engine = ContextRelevanceEngine(
            memory_store,
            affinity=STORY_DRIVE.matrix,
            agent_limits=STORY_DRIVE.agent_limits,
            clock=frozen_clock,
        )
        await memory_store.add_conversation("s1", "character", "assistant", "Mara fears deep water")

        bundle = await engine.get_relevant_context("s1", "plot", "What does Mara fear?")

        assert "Character Coach (just now): Mara fears deep water" in bundle.formatted_text
        assert engine.resolve_max_tokens("narrative") == 700


# =============================================================================
# Administration
# =============================================================================


class TestAdministration:
    """Tests for toggles and read-only dumps."""

    def test_injection_stats(self, engine):
        stats = engine.get_injection_stats()

        assert set(stats) == {
            "enabled", "agent_settings", "token_limits",
            "default_max_tokens", "relevance_weights", "threshold",
        }
        assert stats["enabled"] is True
        assert stats["token_limits"] == WRITING_STUDIO.agent_limits
        assert stats["agent_settings"]["editor"] == {"enabled": True}
        assert stats["relevance_weights"]["keyword_match"] == 0.3
        assert stats["threshold"] == 0.1

    def test_toggles_reflected_in_stats(self, engine):
        engine.set_agent_enabled("editor", False)
        engine.set_global_enabled(False)

        stats = engine.get_injection_stats()
        assert stats["enabled"] is False
        assert stats["agent_settings"]["editor"] == {"enabled": False}

    def test_stats_are_copies(self, engine):
        stats = engine.get_injection_stats()
        stats["agent_settings"]["editor"]["enabled"] = False
        stats["token_limits"]["editor"] = 1

        assert engine.is_agent_enabled("editor") is True
        assert engine.resolve_max_tokens("editor") == 300

    def test_affinity_dump(self, engine):
        dump = engine.get_affinity_matrix()

        assert dump["relationships"]["plot-architect"]["character-psychologist"] == 0.9
        assert dump["display_names"]["dialogue-coach"] == "Dialogue Coach"
        assert dump["default_affinity"] == 0.3
