"""Per-user analysis history.

History is a JSON array stored at <history_dir>/history_<user>.json, newest
entry first. Saving a repository replaces any earlier entry for it.
"""

import json
import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from repograde.models.analysis import Analysis
from repograde.models.evidence import RepoMeta
from repograde.models.roles import Role, role_label

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryItem:
    """One saved analysis.

    Attributes:
        id: Unique identifier (uuid4 hex string)
        repo_name: "owner/repo"
        repo_url: Public GitHub URL
        score: Overall score
        timestamp: When the analysis was saved (UTC)
        analysis: The saved analysis
        repo_meta: Repository metadata at analysis time
        role: Audience label the narrative was written for, if known
    """

    id: str
    repo_name: str
    repo_url: str
    score: int
    timestamp: datetime
    analysis: Analysis
    repo_meta: RepoMeta
    role: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "repoName": self.repo_name,
            "repoUrl": self.repo_url,
            "score": self.score,
            "timestamp": self.timestamp.isoformat(),
            "analysis": self.analysis.to_dict(),
            "repoMeta": self.repo_meta.to_dict(),
            "role": self.role,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HistoryItem":
        """Create a HistoryItem from a serialized dictionary."""
        return cls(
            id=str(data["id"]),
            repo_name=str(data["repoName"]),
            repo_url=str(data["repoUrl"]),
            score=int(data["score"]),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            analysis=Analysis.from_dict(data["analysis"]),
            repo_meta=RepoMeta.from_dict(data["repoMeta"]),
            role=data.get("role"),
        )


class HistoryStore:
    """JSON-file history for one user."""

    def __init__(self, history_dir: Path, user: str = "local") -> None:
        """Initialize the store.

        Args:
            history_dir: Directory holding history files (created on first save)
            user: User identifier
        """
        self.history_dir = history_dir
        self.user = user

    @property
    def path(self) -> Path:
        """Path of this user's history file."""
        return self.history_dir / f"history_{self.user}.json"

    def _read(self) -> list[HistoryItem]:
        if not self.path.exists():
            return []
        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError(f"History file is not a JSON array: {self.path}")
        return [HistoryItem.from_dict(item) for item in data]

    def _write(self, items: list[HistoryItem]) -> None:
        self.history_dir.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump([item.to_dict() for item in items], f, indent=2)

    def list(self) -> list[HistoryItem]:
        """Return saved analyses, newest first."""
        return self._read()

    def save(
        self,
        repo_meta: RepoMeta,
        analysis: Analysis,
        role: Role | None = None,
    ) -> HistoryItem:
        """Save an analysis, replacing earlier entries for the same repository.

        Args:
            repo_meta: Repository metadata
            analysis: Finished analysis
            role: Audience the narrative was written for

        Returns:
            The new history item
        """
        item = HistoryItem(
            id=uuid.uuid4().hex,
            repo_name=repo_meta.full_name,
            repo_url=repo_meta.html_url,
            score=analysis.overall_score,
            timestamp=datetime.now(UTC),
            analysis=analysis,
            repo_meta=repo_meta,
            role=role_label(role) if role is not None else None,
        )

        name = item.repo_name.lower()
        kept = [
            existing
            for existing in self._read()
            if existing.repo_name.lower() != name and existing.repo_url != item.repo_url
        ]
        self._write([item, *kept])
        logger.debug("Saved %s to history (%d entries)", item.repo_name, len(kept) + 1)
        return item

    def get(self, item_id: str) -> HistoryItem | None:
        """Return one item by id."""
        return next((item for item in self._read() if item.id == item_id), None)

    def latest_for(self, full_name: str) -> HistoryItem | None:
        """Return the saved analysis for a repository, if any."""
        name = full_name.lower()
        return next((item for item in self._read() if item.repo_name.lower() == name), None)

    def delete(self, item_id: str) -> bool:
        """Delete one item.

        Returns:
            True if an item was removed
        """
        items = self._read()
        kept = [item for item in items if item.id != item_id]
        if len(kept) == len(items):
            return False
        self._write(kept)
        return True

    def clear(self) -> None:
        """Delete the whole history for this user."""
        if self.path.exists():
            self.path.unlink()
