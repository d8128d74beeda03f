"""In-memory analysis cache.

Keys are case-insensitive so "Owner/Repo" and "owner/repo" share an entry.
"""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

from repograde.models.analysis import Analysis
from repograde.models.evidence import RepoMeta

logger = logging.getLogger(__name__)


def generate_cache_key(owner: str, repo: str) -> str:
    """Build the cache key for a repository."""
    return f"{owner}/{repo}".lower()


@dataclass(frozen=True)
class CacheEntry:
    """A cached analysis with the time it was stored."""

    repo_meta: RepoMeta
    analysis: Analysis
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


class AnalysisCache:
    """Process-local cache of finished analyses."""

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> CacheEntry | None:
        """Return the entry for key, or None on a miss."""
        entry = self._entries.get(key.lower())
        logger.debug("Cache %s for %s", "hit" if entry else "miss", key)
        return entry

    def set(self, key: str, repo_meta: RepoMeta, analysis: Analysis) -> CacheEntry:
        """Store an analysis, replacing any previous entry for key."""
        entry = CacheEntry(repo_meta=repo_meta, analysis=analysis)
        self._entries[key.lower()] = entry
        return entry

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._entries

    def __len__(self) -> int:
        return len(self._entries)
