"""Unit tests for the agent registry."""

from datetime import datetime

import pytest

from repograde.agents import DEFAULT_AGENTS, setup_default_agents
from repograde.agents.registry import (
    Agent,
    AgentNotRegisteredError,
    AgentRegistry,
    get_registry,
    reset_registry,
)
from repograde.models.analysis import AGENT_KEYS, AgentResult
from repograde.models.evidence import Evidence
from tests.fixtures import NOW


def _constant_agent(key: str, score: int) -> Agent:
    return Agent(key=key, name=key, evaluate=lambda _e, _n: AgentResult(score, f"{key} fixed"))


class TestAgentRegistry:
    """Tests for AgentRegistry."""

    def test_register_and_get(self) -> None:
        registry = AgentRegistry()
        agent = _constant_agent("codeQuality", 50)

        registry.register(agent)

        assert registry.get("codeQuality") is agent
        assert registry.list_agents() == ["codeQuality"]

    def test_duplicate_registration_rejected(self) -> None:
        registry = AgentRegistry()
        registry.register(_constant_agent("codeQuality", 50))

        with pytest.raises(ValueError, match="already registered"):
            registry.register(_constant_agent("codeQuality", 60))

    def test_replace_allowed_when_requested(self) -> None:
        registry = AgentRegistry()
        registry.register(_constant_agent("codeQuality", 50))
        replacement = _constant_agent("codeQuality", 60)

        registry.register(replacement, replace=True)

        assert registry.get("codeQuality") is replacement

    def test_get_missing_agent(self) -> None:
        with pytest.raises(AgentNotRegisteredError, match="techStack"):
            AgentRegistry().get("techStack")

    def test_run_all_requires_every_agent(self, empty_evidence: Evidence) -> None:
        registry = AgentRegistry()
        registry.register(_constant_agent("codeQuality", 50))

        with pytest.raises(AgentNotRegisteredError):
            registry.run_all(empty_evidence, now=NOW)

    def test_run_all_returns_canonical_order(self, empty_evidence: Evidence) -> None:
        registry = AgentRegistry()
        for key in reversed(AGENT_KEYS):
            registry.register(_constant_agent(key, 10))

        results = registry.run_all(empty_evidence, now=NOW)

        assert tuple(results) == AGENT_KEYS

    def test_run_all_passes_reference_time(self, empty_evidence: Evidence) -> None:
        seen: list[datetime] = []

        def record(_evidence: Evidence, now: datetime) -> AgentResult:
            seen.append(now)
            return AgentResult(0, "")

        registry = AgentRegistry()
        for key in AGENT_KEYS:
            registry.register(Agent(key=key, name=key, evaluate=record))

        registry.run_all(empty_evidence, now=NOW)

        assert seen == [NOW] * 5

    def test_parallel_matches_sequential(self, healthy_evidence: Evidence) -> None:
        registry = setup_default_agents(AgentRegistry())

        sequential = registry.run_all(healthy_evidence, now=NOW)
        parallel = registry.run_all(healthy_evidence, now=NOW, parallel=True)

        assert parallel == sequential

    def test_get_metadata(self) -> None:
        registry = setup_default_agents(AgentRegistry())

        metadata = registry.get_metadata()

        assert [a["key"] for a in metadata["agents"]] == list(AGENT_KEYS)


class TestDefaultAgents:
    """Tests for the default agent set and the global registry."""

    def test_default_agents_cover_every_key(self) -> None:
        assert tuple(agent.key for agent in DEFAULT_AGENTS) == AGENT_KEYS

    def test_setup_is_idempotent(self) -> None:
        registry = setup_default_agents()
        setup_default_agents()

        assert registry is get_registry()
        assert registry.list_agents() == list(AGENT_KEYS)

    def test_reset_registry(self) -> None:
        first = get_registry()
        reset_registry()

        assert get_registry() is not first

    def test_default_scores_for_healthy_evidence(self, healthy_evidence: Evidence) -> None:
        results = setup_default_agents(AgentRegistry()).run_all(healthy_evidence, now=NOW)

        assert {key: r.score for key, r in results.items()} == {
            "codeQuality": 100,
            "documentation": 100,
            "commitHealth": 100,
            "testCoverage": 80,
            "techStack": 100,
        }

    def test_default_scores_for_empty_evidence(self, empty_evidence: Evidence) -> None:
        results = setup_default_agents(AgentRegistry()).run_all(empty_evidence, now=NOW)

        assert {key: r.score for key, r in results.items()} == {
            "codeQuality": 40,
            "documentation": 0,
            "commitHealth": 0,
            "testCoverage": 20,
            "techStack": 20,
        }
