"""repograde agents - deterministic heuristic evaluators.

Every agent is a pure function over already-fetched evidence returning an
integer score in [0, 100] plus evidence text. All agents run BEFORE any LLM
invocation and nothing downstream reads scores back from the LLM.

Agents:
- Code Quality: linters, source folder, .gitignore, structure depth
- Documentation: README sections, description, license
- Commit Health: conventional commits, recency, volume
- Test Coverage: test folders, CI config, test files
- Tech Stack: dependency manifest, manifest content, lock files
"""

from repograde.agents.code_quality import run_code_quality_agent
from repograde.agents.commit_health import run_commit_health_agent
from repograde.agents.documentation import run_documentation_agent
from repograde.agents.registry import (
    Agent,
    AgentNotRegisteredError,
    AgentRegistry,
    get_registry,
    reset_registry,
)
from repograde.agents.tech_stack import run_tech_stack_agent
from repograde.agents.test_coverage import run_test_coverage_agent

__all__ = [
    "Agent",
    "AgentNotRegisteredError",
    "AgentRegistry",
    "DEFAULT_AGENTS",
    "get_registry",
    "reset_registry",
    "run_code_quality_agent",
    "run_commit_health_agent",
    "run_documentation_agent",
    "run_tech_stack_agent",
    "run_test_coverage_agent",
    "setup_default_agents",
]

DEFAULT_AGENTS = (
    Agent(
        key="codeQuality",
        name="Code Quality",
        evaluate=lambda evidence, _now: run_code_quality_agent(evidence.files),
    ),
    Agent(
        key="documentation",
        name="Documentation",
        evaluate=lambda evidence, _now: run_documentation_agent(
            evidence.readme, evidence.repo_meta
        ),
    ),
    Agent(
        key="commitHealth",
        name="Commit Health",
        evaluate=lambda evidence, now: run_commit_health_agent(evidence.commits, now=now),
    ),
    Agent(
        key="testCoverage",
        name="Test Coverage",
        evaluate=lambda evidence, _now: run_test_coverage_agent(evidence.files),
    ),
    Agent(
        key="techStack",
        name="Tech Stack",
        evaluate=lambda evidence, _now: run_tech_stack_agent(
            evidence.files, evidence.dependency_manifest
        ),
    ),
)


def setup_default_agents(registry: AgentRegistry | None = None) -> AgentRegistry:
    """Register the five default agents.

    Re-registering is idempotent: existing entries are replaced.

    Args:
        registry: Registry to populate (uses global if None)

    Returns:
        Populated AgentRegistry
    """
    if registry is None:
        registry = get_registry()

    for agent in DEFAULT_AGENTS:
        registry.register(agent, replace=True)

    return registry
