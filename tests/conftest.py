"""Shared pytest fixtures for repograde tests.

Fixtures are organized by category:
- Evidence fixtures: ready-made evidence snapshots for the agents
- LLM fixtures: narrative replies and mocked LiteLLM responses
- GitHub fixtures: an httpx transport serving canned API payloads
"""

import json
from datetime import timedelta
from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest

from repograde.agents import reset_registry
from repograde.config import GitHubConfig
from repograde.models.evidence import CommitRecord, EntryType, Evidence, FileEntry, RepoMeta
from repograde.providers import GitHubProvider
from tests.fixtures import (
    CONTENTS_PAYLOAD,
    NOW,
    PACKAGE_JSON,
    README_TEXT,
    REPO_PAYLOAD,
    github_handler,
    make_litellm_response,
)


@pytest.fixture(autouse=True)
def _fresh_agent_registry() -> None:
    """Start every test with an empty global agent registry."""
    reset_registry()


# =============================================================================
# Evidence Fixtures
# =============================================================================


@pytest.fixture
def now():
    """Fixed reference time for recency scoring."""
    return NOW


@pytest.fixture
def repo_meta() -> RepoMeta:
    """Metadata for a documented, licensed repository."""
    return RepoMeta.from_github(REPO_PAYLOAD)


@pytest.fixture
def healthy_files() -> list[FileEntry]:
    """Root listing with linter, source folder, tests, CI and lock file."""
    return [FileEntry.from_dict(item) for item in CONTENTS_PAYLOAD]


@pytest.fixture
def healthy_commits() -> list[CommitRecord]:
    """Fifteen conventional commits, newest two days old."""
    newest = NOW - timedelta(days=2)
    return [
        CommitRecord(message=f"feat: change {i}", date=newest - timedelta(hours=i))
        for i in range(15)
    ]


@pytest.fixture
def healthy_evidence(
    healthy_files: list[FileEntry],
    healthy_commits: list[CommitRecord],
    repo_meta: RepoMeta,
) -> Evidence:
    """Evidence that earns high marks from every agent."""
    return Evidence(
        files=tuple(healthy_files),
        commits=tuple(healthy_commits),
        readme=README_TEXT,
        dependency_manifest=PACKAGE_JSON,
        repo_meta=repo_meta,
    )


@pytest.fixture
def empty_evidence() -> Evidence:
    """Evidence for an empty repository without README, commits or metadata."""
    return Evidence(repo_meta=RepoMeta(full_name="octo/empty"))


@pytest.fixture
def flat_files() -> list[FileEntry]:
    """A flat listing with only loose files."""
    return [
        FileEntry(name="index.js"),
        FileEntry(name="notes.txt"),
        FileEntry(name=".vscode", type=EntryType.DIR),
    ]


# =============================================================================
# LLM Fixtures
# =============================================================================


@pytest.fixture
def narrative_payload() -> dict[str, Any]:
    """A well-formed narrative reply with deliberately wrong numbers."""
    return {
        "overallScore": 12,
        "agentScores": {
            "codeQuality": 1,
            "documentation": 2,
            "commitHealth": 3,
            "testCoverage": 4,
            "techStack": 5,
        },
        "summary": "A tidy TypeScript service with solid delivery habits.",
        "strengths": [
            "Consistent Conventional Commits",
            "CI configured through GitHub Actions",
            "Locked dependency versions",
        ],
        "weaknesses": [
            "No test files at the repository root",
            "README lacks architecture notes",
            "No contribution guide",
        ],
        "roadmap": [
            {
                "title": "Add unit tests",
                "description": "Cover request handlers with Jest.",
                "difficulty": "Beginner",
                "category": "Code Quality",
            },
            {
                "title": "Document architecture",
                "description": "Describe modules in the README.",
                "difficulty": "Beginner",
                "category": "Documentation",
            },
            {
                "title": "Add coverage reporting",
                "description": "Publish coverage from CI.",
                "difficulty": "Intermediate",
                "category": "DevOps",
            },
            {
                "title": "Introduce input validation",
                "description": "Validate payloads at the API boundary.",
                "difficulty": "Intermediate",
                "category": "Features",
            },
            {
                "title": "Containerize the service",
                "description": "Ship a Dockerfile and compose file.",
                "difficulty": "Advanced",
                "category": "DevOps",
            },
        ],
    }


@pytest.fixture
def narrative_json(narrative_payload: dict[str, Any]) -> str:
    """The narrative reply as raw JSON text."""
    return json.dumps(narrative_payload)


@pytest.fixture
def mock_narrative_response(narrative_json: str) -> MagicMock:
    """LiteLLM response carrying the narrative reply."""
    return make_litellm_response(narrative_json)


# =============================================================================
# GitHub Fixtures
# =============================================================================


@pytest.fixture
def github_provider() -> GitHubProvider:
    """Provider backed by the canned sample repository."""
    client = httpx.Client(transport=httpx.MockTransport(github_handler()))
    return GitHubProvider(GitHubConfig(token="test-token"), client=client)
