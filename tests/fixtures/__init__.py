"""Canned GitHub API payloads for provider, pipeline and CLI tests."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any
from unittest.mock import MagicMock

import httpx

from repograde.models.analysis import (
    AgentEvidence,
    AgentScores,
    Analysis,
    Category,
    Difficulty,
    RoadmapItem,
    SummaryStyle,
)

FULL_NAME = "octo/sample-app"

# Reference clock for recency scoring
NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)

REPO_PAYLOAD: dict[str, Any] = {
    "id": 1296269,
    "full_name": FULL_NAME,
    "html_url": f"https://github.com/{FULL_NAME}",
    "description": "A sample application used to exercise the evaluator",
    "language": "TypeScript",
    "license": {"key": "mit", "name": "MIT License"},
    "default_branch": "main",
    "stargazers_count": 42,
    "forks_count": 7,
    "open_issues_count": 3,
    "updated_at": "2024-05-30T10:00:00Z",
}

CONTENTS_PAYLOAD: list[dict[str, Any]] = [
    {"name": ".github", "type": "dir", "path": ".github"},
    {"name": ".gitignore", "type": "file", "path": ".gitignore"},
    {"name": ".eslintrc.json", "type": "file", "path": ".eslintrc.json"},
    {"name": "README.md", "type": "file", "path": "README.md"},
    {"name": "package.json", "type": "file", "path": "package.json"},
    {"name": "package-lock.json", "type": "file", "path": "package-lock.json"},
    {"name": "src", "type": "dir", "path": "src"},
    {"name": "tests", "type": "dir", "path": "tests"},
]

README_TEXT = """\
# sample-app

## Installation

    npm install

## Usage

    npm start
"""

PACKAGE_JSON = """\
{
  "name": "sample-app",
  "version": "1.0.0",
  "dependencies": {
    "express": "^4.19.2"
  }
}
"""


def commits_payload(
    count: int = 15,
    newest_age_days: int = 2,
    now: datetime = NOW,
) -> list[dict[str, Any]]:
    """Build a newest-first /commits payload with conventional messages."""
    newest = now - timedelta(days=newest_age_days)
    return [
        {
            "sha": f"{i:040x}",
            "commit": {
                "message": f"feat: change number {count - i}",
                "author": {
                    "name": "Octo Cat",
                    "date": (newest - timedelta(hours=i)).isoformat().replace("+00:00", "Z"),
                },
            },
        }
        for i in range(count)
    ]


USER_REPOS_PAYLOAD: list[dict[str, Any]] = [
    {
        "id": 1,
        "name": "sample-app",
        "full_name": FULL_NAME,
        "html_url": f"https://github.com/{FULL_NAME}",
        "description": "A sample application",
        "language": "TypeScript",
        "stargazers_count": 42,
        "updated_at": "2024-05-30T10:00:00Z",
        "private": False,
    },
    {
        "id": 2,
        "name": "dotfiles",
        "full_name": "octo/dotfiles",
        "html_url": "https://github.com/octo/dotfiles",
        "description": None,
        "language": None,
        "stargazers_count": 0,
        "updated_at": "2024-04-01T10:00:00Z",
        "private": False,
    },
]


def make_litellm_response(content: str, model: str = "gemini/gemini-2.5-flash") -> MagicMock:
    """Create a mock LiteLLM completion response."""
    mock_response = MagicMock()
    mock_response.choices = [
        MagicMock(
            message=MagicMock(content=content),
            finish_reason="stop",
        )
    ]
    mock_response.model = model
    mock_response.usage = MagicMock(
        prompt_tokens=100,
        completion_tokens=50,
        total_tokens=150,
    )
    return mock_response


def github_handler(
    overrides: dict[str, httpx.Response] | None = None,
) -> Callable[[httpx.Request], httpx.Response]:
    """Build a MockTransport handler serving the canned sample repository.

    Commits are dated relative to the real clock so pipeline runs score them
    as recent. Unknown URLs answer 404, like missing files on
    raw.githubusercontent.com.

    Args:
        overrides: Responses keyed by "host/path" replacing the defaults
    """
    routes: dict[str, httpx.Response] = {
        f"api.github.com/repos/{FULL_NAME}": httpx.Response(200, json=REPO_PAYLOAD),
        f"api.github.com/repos/{FULL_NAME}/contents": httpx.Response(200, json=CONTENTS_PAYLOAD),
        f"api.github.com/repos/{FULL_NAME}/commits": httpx.Response(
            200, json=commits_payload(now=datetime.now(UTC))
        ),
        f"raw.githubusercontent.com/{FULL_NAME}/main/README.md": httpx.Response(
            200, text=README_TEXT
        ),
        f"raw.githubusercontent.com/{FULL_NAME}/main/package.json": httpx.Response(
            200, text=PACKAGE_JSON
        ),
        "api.github.com/users/octo/repos": httpx.Response(200, json=USER_REPOS_PAYLOAD),
    }
    routes.update(overrides or {})

    def handler(request: httpx.Request) -> httpx.Response:
        response = routes.get(f"{request.url.host}{request.url.path}")
        if response is None:
            return httpx.Response(404, text="Not Found")
        return httpx.Response(
            response.status_code,
            content=response.content,
            headers=response.headers,
        )

    return handler


def sample_analysis(overall_score: int = 95, summary: str = "A tidy service.") -> Analysis:
    """Build a finished Analysis with fixed agent scores and a short roadmap."""
    scores = {
        "codeQuality": 100,
        "documentation": 100,
        "commitHealth": 100,
        "testCoverage": 80,
        "techStack": 100,
    }
    return Analysis(
        overall_score=overall_score,
        agent_scores=AgentScores.from_dict(scores),
        agent_evidence=AgentEvidence.from_dict({key: f"{key} evidence" for key in scores}),
        summary=summary,
        strengths=["Conventional commits", "CI configured", "Lock file present"],
        weaknesses=["No test files", "Sparse README", "No contribution guide"],
        roadmap=[
            RoadmapItem(
                title="Add unit tests",
                description="Cover request handlers.",
                difficulty=Difficulty.BEGINNER,
                category=Category.CODE_QUALITY,
            ),
            RoadmapItem(
                title="Containerize",
                description="Ship a Dockerfile.",
                difficulty=Difficulty.ADVANCED,
                category=Category.DEVOPS,
            ),
        ],
        summary_style=SummaryStyle.PROFESSIONAL,
    )
