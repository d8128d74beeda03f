"""Agent registry for the heuristic scoring agents.

The registry maps each agent key (codeQuality, documentation, ...) to the
function that evaluates it. Agents are pure and independent, so the registry
may run them in any order or concurrently; results are always collected by
key, giving a deterministic fan-in.
"""

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from repograde.models.analysis import AGENT_KEYS, AgentResult
from repograde.models.evidence import Evidence

logger = logging.getLogger(__name__)

# (evidence, reference time) -> result
AgentFunction = Callable[[Evidence, datetime], AgentResult]


@dataclass(frozen=True)
class Agent:
    """A registered heuristic agent.

    Attributes:
        key: Agent key as used in AgentScores (e.g., "codeQuality")
        name: Display name (e.g., "Code Quality")
        evaluate: Function mapping evidence to a result
    """

    key: str
    name: str
    evaluate: AgentFunction


class AgentNotRegisteredError(Exception):
    """Raised when an agent key has no registered agent."""

    def __init__(self, key: str, available: list[str] | None = None) -> None:
        self.key = key
        message = f"Agent not registered: {key}"
        if available is not None:
            message += f". Available: {available}"
        super().__init__(message)


class AgentRegistry:
    """Registry of scoring agents keyed by agent key.

    Adding a new agent:
        1. Write a pure function over Evidence returning AgentResult
        2. Register it under its key
        3. run_all() picks it up; no other changes needed
    """

    def __init__(self) -> None:
        """Initialize empty registry."""
        self._agents: dict[str, Agent] = {}

    # =========================================================================
    # Registration
    # =========================================================================

    def register(self, agent: Agent, replace: bool = False) -> None:
        """Register an agent.

        Args:
            agent: Agent to register
            replace: Allow replacing an agent already registered under the key

        Raises:
            ValueError: If the key is taken and replace is False
        """
        if agent.key in self._agents and not replace:
            raise ValueError(f"Agent already registered: {agent.key}")
        self._agents[agent.key] = agent

    # =========================================================================
    # Retrieval
    # =========================================================================

    def get(self, key: str) -> Agent:
        """Get a registered agent.

        Raises:
            AgentNotRegisteredError: If the key is not registered
        """
        if key not in self._agents:
            raise AgentNotRegisteredError(key, self.list_agents())
        return self._agents[key]

    def list_agents(self) -> list[str]:
        """Get registered agent keys in registration order."""
        return list(self._agents.keys())

    # =========================================================================
    # Execution
    # =========================================================================

    def run_all(
        self,
        evidence: Evidence,
        now: datetime | None = None,
        parallel: bool = False,
    ) -> dict[str, AgentResult]:
        """Run every scoring agent over the evidence.

        Args:
            evidence: Repository evidence snapshot
            now: Reference time shared by all agents (defaults to current UTC)
            parallel: Evaluate agents on a thread pool

        Returns:
            Results keyed by agent key, in canonical AGENT_KEYS order

        Raises:
            AgentNotRegisteredError: If any of the five agents is missing
        """
        missing = [key for key in AGENT_KEYS if key not in self._agents]
        if missing:
            raise AgentNotRegisteredError(missing[0], self.list_agents())

        now = now or datetime.now(UTC)
        agents = [self._agents[key] for key in AGENT_KEYS]

        if parallel:
            with ThreadPoolExecutor(max_workers=len(agents)) as executor:
                futures = {
                    agent.key: executor.submit(agent.evaluate, evidence, now)
                    for agent in agents
                }
                results = {key: future.result() for key, future in futures.items()}
        else:
            results = {agent.key: agent.evaluate(evidence, now) for agent in agents}

        logger.debug(
            "Agent scores: %s",
            ", ".join(f"{key}={results[key].score}" for key in AGENT_KEYS),
        )
        return {key: results[key] for key in AGENT_KEYS}

    def get_metadata(self) -> dict[str, Any]:
        """Get registry metadata for logging and debugging."""
        return {
            "agents": [
                {"key": agent.key, "name": agent.name} for agent in self._agents.values()
            ],
        }


# Global registry instance
_registry: AgentRegistry | None = None


def get_registry() -> AgentRegistry:
    """Get the global agent registry instance."""
    global _registry
    if _registry is None:
        _registry = AgentRegistry()
    return _registry


def reset_registry() -> None:
    """Reset the global registry (primarily for testing)."""
    global _registry
    _registry = None
