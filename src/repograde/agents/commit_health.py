"""Commit Health agent.

Scores recent commit activity:
- Empty history: 0
- Commits exist: 20
- Conventional Commits ratio above 30%: +20
- Newest commit less than 30 days old: +20
- More than 5 commits fetched: +20
- 15 or more commits fetched: +20

The volume thresholds are calibrated against the provider's capped fetch
window (15 commits), not the repository's true commit count.
"""

import logging
import math
import re
from collections.abc import Sequence
from datetime import UTC, datetime

from repograde.models.analysis import AgentResult
from repograde.models.evidence import CommitRecord

logger = logging.getLogger(__name__)

CONVENTIONAL_COMMIT_PATTERN = re.compile(
    r"^(feat|fix|docs|style|refactor|test|chore|ci|perf)(\(.+\))?:"
)

CONVENTIONAL_RATIO_THRESHOLD = 0.3
RECENT_DAYS = 30
SOME_COMMITS = 5
FULL_WINDOW_COMMITS = 15

NO_HISTORY_EVIDENCE = "No commit history found."

_SECONDS_PER_DAY = 60 * 60 * 24


def days_since(date: datetime, now: datetime) -> int:
    """Whole days elapsed between date and now, rounded up."""
    if date.tzinfo is None:
        date = date.replace(tzinfo=UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return math.ceil((now - date).total_seconds() / _SECONDS_PER_DAY)


def is_conventional(message: str) -> bool:
    """Return True if the message starts with a Conventional Commits prefix."""
    return CONVENTIONAL_COMMIT_PATTERN.match(message) is not None


def run_commit_health_agent(
    commits: Sequence[CommitRecord],
    now: datetime | None = None,
) -> AgentResult:
    """Score commit history health.

    Args:
        commits: Recent commits ordered newest-first
        now: Reference time for recency (defaults to the current UTC time)

    Returns:
        AgentResult with a score in [0, 100]
    """
    if not commits:
        logger.debug("Commit health agent: no commits")
        return AgentResult(score=0, evidence=NO_HISTORY_EVIDENCE)

    now = now or datetime.now(UTC)
    score = 20

    conventional = sum(1 for c in commits if is_conventional(c.message))
    ratio = conventional / len(commits)
    if ratio > CONVENTIONAL_RATIO_THRESHOLD:
        score += 20

    # commits[0] is the newest commit
    elapsed_days = days_since(commits[0].date, now)
    if elapsed_days < RECENT_DAYS:
        score += 20

    if len(commits) > SOME_COMMITS:
        score += 20
    if len(commits) >= FULL_WINDOW_COMMITS:
        score += 20

    logger.debug(
        "Commit health agent: %d (%d commits, %.0f%% conventional, %d days)",
        score,
        len(commits),
        ratio * 100,
        elapsed_days,
    )

    return AgentResult(
        score=score,
        evidence=(
            f"Commit count (fetched): {len(commits)}. "
            f"Conventional ratio: {ratio * 100:.0f}%. Days since last: {elapsed_days}."
        ),
    )
