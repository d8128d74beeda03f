"""Evidence entities consumed by the heuristic agents.

Evidence is the normalized snapshot of repository facts built once per
analysis request and discarded once the Analysis has been produced:
- FileEntry: a file or directory at the repository root
- CommitRecord: a single commit (message and date are what agents read)
- RepoMeta: repository metadata (description, language, license, ...)
- Evidence: the bundle handed to every agent
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

# Sentinel returned by the data provider when the repository has no README.
# The documentation agent branches on this literal, not on emptiness alone.
README_ABSENT = "No README.md found."

# Returned when the README lookup itself failed (network error).
README_FETCH_ERROR = "Error fetching README."


def readme_present(readme: str | None) -> bool:
    """Return True unless the README text is empty or the absent sentinel."""
    return bool(readme) and readme != README_ABSENT


class EntryType(Enum):
    """Type of a repository root entry."""

    FILE = "file"
    DIR = "dir"


@dataclass(frozen=True)
class FileEntry:
    """A file or directory at the repository root.

    Attributes:
        name: Entry name, case-sensitive as returned by the provider
        type: Whether the entry is a file or a directory
        path: Path relative to the repository root
    """

    name: str
    type: EntryType = EntryType.FILE
    path: str = ""

    @property
    def is_dir(self) -> bool:
        """Return True if the entry is a directory."""
        return self.type == EntryType.DIR

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"name": self.name, "type": self.type.value, "path": self.path or self.name}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FileEntry":
        """Create a FileEntry from a provider or serialized dictionary.

        Unknown entry types (symlink, submodule) are treated as files.
        """
        raw_type = str(data.get("type", "file"))
        entry_type = EntryType.DIR if raw_type == EntryType.DIR.value else EntryType.FILE
        name = str(data.get("name", ""))
        return cls(name=name, type=entry_type, path=str(data.get("path") or name))


def _ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


@dataclass(frozen=True)
class CommitRecord:
    """A single commit from the repository history.

    Attributes:
        message: Full commit message
        date: Author date (timezone-aware, UTC if the source was naive)
        sha: Commit SHA
        author_name: Commit author display name
    """

    message: str
    date: datetime
    sha: str = ""
    author_name: str = ""

    def __post_init__(self) -> None:
        """Ensure the commit date is timezone-aware."""
        object.__setattr__(self, "date", _ensure_utc(self.date))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "sha": self.sha,
            "message": self.message,
            "author_name": self.author_name,
            "date": self.date.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CommitRecord":
        """Create a CommitRecord from a serialized dictionary."""
        return cls(
            message=str(data.get("message", "")),
            date=datetime.fromisoformat(str(data["date"])),
            sha=str(data.get("sha", "")),
            author_name=str(data.get("author_name", "")),
        )


@dataclass(frozen=True)
class RepoMeta:
    """Repository metadata.

    Only description, language and license feed the scoring core; the
    remaining fields are carried for reports and history.

    Attributes:
        full_name: "owner/repo"
        description: Repository description, if any
        language: Primary language reported by the host
        license: License name, None when no license was detected
        default_branch: Default branch name
        stargazers_count: Star count
        forks_count: Fork count
        open_issues_count: Open issue count
        updated_at: Last update timestamp (ISO string as returned by the host)
    """

    full_name: str
    description: str | None = None
    language: str | None = None
    license: str | None = None
    default_branch: str = "main"
    stargazers_count: int = 0
    forks_count: int = 0
    open_issues_count: int = 0
    updated_at: str | None = None

    @property
    def owner(self) -> str:
        """Repository owner login."""
        return self.full_name.split("/", 1)[0]

    @property
    def name(self) -> str:
        """Repository name without the owner."""
        return self.full_name.split("/", 1)[-1]

    @property
    def html_url(self) -> str:
        """Public GitHub URL of the repository."""
        return f"https://github.com/{self.full_name}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "full_name": self.full_name,
            "description": self.description,
            "language": self.language,
            "license": self.license,
            "default_branch": self.default_branch,
            "stargazers_count": self.stargazers_count,
            "forks_count": self.forks_count,
            "open_issues_count": self.open_issues_count,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RepoMeta":
        """Create RepoMeta from a serialized dictionary."""
        return cls(
            full_name=str(data.get("full_name", "")),
            description=data.get("description"),
            language=data.get("language"),
            license=data.get("license"),
            default_branch=str(data.get("default_branch") or "main"),
            stargazers_count=int(data.get("stargazers_count") or 0),
            forks_count=int(data.get("forks_count") or 0),
            open_issues_count=int(data.get("open_issues_count") or 0),
            updated_at=data.get("updated_at"),
        )

    @classmethod
    def from_github(cls, payload: dict[str, Any]) -> "RepoMeta":
        """Create RepoMeta from a GitHub REST `GET /repos/{owner}/{repo}` payload.

        GitHub reports the license as an object (or null); only its name is kept.
        """
        license_info = payload.get("license")
        license_name = license_info.get("name") if isinstance(license_info, dict) else None
        return cls(
            full_name=str(payload.get("full_name", "")),
            description=payload.get("description"),
            language=payload.get("language"),
            license=license_name,
            default_branch=str(payload.get("default_branch") or "main"),
            stargazers_count=int(payload.get("stargazers_count") or 0),
            forks_count=int(payload.get("forks_count") or 0),
            open_issues_count=int(payload.get("open_issues_count") or 0),
            updated_at=payload.get("updated_at"),
        )


@dataclass(frozen=True)
class Evidence:
    """Normalized snapshot of repository facts consumed by the agents.

    Invariant: commits are ordered newest-first, so commits[0] is the most
    recent commit. Recency scoring depends on this.

    Attributes:
        files: Root-level entries (flat, not recursive)
        commits: Recent commits, newest-first, capped by the fetch window
        readme: README text or README_ABSENT
        dependency_manifest: Raw dependency manifest text, possibly empty
        repo_meta: Repository metadata
    """

    files: tuple[FileEntry, ...] = ()
    commits: tuple[CommitRecord, ...] = ()
    readme: str = README_ABSENT
    dependency_manifest: str = ""
    repo_meta: RepoMeta = field(default_factory=lambda: RepoMeta(full_name=""))

    def __post_init__(self) -> None:
        """Freeze sequences so agents cannot mutate shared evidence."""
        object.__setattr__(self, "files", tuple(self.files))
        object.__setattr__(self, "commits", tuple(self.commits))
        object.__setattr__(self, "readme", self.readme or "")
        object.__setattr__(self, "dependency_manifest", self.dependency_manifest or "")

    @property
    def has_readme(self) -> bool:
        """Return True if a README was found."""
        return readme_present(self.readme)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "files": [f.to_dict() for f in self.files],
            "commits": [c.to_dict() for c in self.commits],
            "readme": self.readme,
            "dependency_manifest": self.dependency_manifest,
            "repo_meta": self.repo_meta.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Evidence":
        """Create Evidence from a serialized dictionary."""
        return cls(
            files=tuple(FileEntry.from_dict(f) for f in data.get("files", [])),
            commits=tuple(CommitRecord.from_dict(c) for c in data.get("commits", [])),
            readme=data.get("readme", README_ABSENT),
            dependency_manifest=data.get("dependency_manifest", ""),
            repo_meta=RepoMeta.from_dict(data.get("repo_meta", {})),
        )
