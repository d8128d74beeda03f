"""Tech Stack agent.

Scores dependency tooling:
- Base: 20
- Dependency manifest present: +40
- Manifest content longer than 50 characters: +20
- Lock file present: +20
"""

import logging
from collections.abc import Iterable

from repograde.models.analysis import AgentResult
from repograde.models.evidence import FileEntry

logger = logging.getLogger(__name__)

BASE_SCORE = 20

MANIFEST_FILES = frozenset(
    {
        "package.json",
        "requirements.txt",
        "go.mod",
        "Cargo.toml",
        "pom.xml",
        "build.gradle",
        "composer.json",
        "Gemfile",
    }
)

LOCK_FILES = frozenset(
    {
        "package-lock.json",
        "yarn.lock",
        "pnpm-lock.yaml",
        "go.sum",
        "Cargo.lock",
        "Gemfile.lock",
        "composer.lock",
    }
)

MIN_MANIFEST_LENGTH = 50


def run_tech_stack_agent(files: Iterable[FileEntry], dependency_manifest: str) -> AgentResult:
    """Score dependency management signals.

    Args:
        files: Root-level repository entries
        dependency_manifest: Raw manifest text (empty if none was fetched)

    Returns:
        AgentResult with a score in [20, 100]
    """
    entries = list(files)
    manifest = dependency_manifest or ""

    has_manifest_file = any(f.name in MANIFEST_FILES for f in entries)
    has_lock_file = any(f.name in LOCK_FILES for f in entries)

    score = BASE_SCORE
    if has_manifest_file:
        score += 40
    if len(manifest) > MIN_MANIFEST_LENGTH:
        score += 20
    if has_lock_file:
        score += 20

    logger.debug("Tech stack agent: %d", score)

    return AgentResult(
        score=score,
        evidence=(
            f"Dependency file: {has_manifest_file}. Lock file: {has_lock_file}. "
            f"Content length: {len(manifest)}."
        ),
    )
