"""GitHub repository data provider.

Fetches repository metadata, the root file listing, recent commits, the
README and one dependency manifest from the public GitHub REST API and
raw.githubusercontent.com, and normalizes them into Evidence.

Only the metadata lookup is fatal. Every other endpoint is best-effort:
failures degrade to an empty listing, no commits, the README sentinel or an
empty manifest, which the agents score as missing evidence.
"""

import logging
import re
from datetime import datetime
from typing import Any

import httpx

from repograde.config import GitHubConfig
from repograde.models.evidence import (
    README_ABSENT,
    README_FETCH_ERROR,
    CommitRecord,
    Evidence,
    FileEntry,
    RepoMeta,
)
from repograde.providers.errors import ProviderError, RateLimitError, RepositoryNotFoundError

logger = logging.getLogger(__name__)

GITHUB_URL_PATTERN = re.compile(r"github\.com/([^/]+/[^/]+)")

# Manifests the provider will fetch, in priority order
FETCHABLE_MANIFESTS = (
    "package.json",
    "requirements.txt",
    "go.mod",
    "Cargo.toml",
    "pom.xml",
    "build.gradle",
)

USER_REPOS_PER_PAGE = 10


def parse_github_url(url: str) -> str | None:
    """Extract "owner/repo" from a GitHub URL.

    Args:
        url: Repository URL (e.g., "https://github.com/owner/repo/")

    Returns:
        "owner/repo" or None if the URL is not a GitHub repository URL
    """
    clean_url = url.strip().rstrip("/")
    match = GITHUB_URL_PATTERN.search(clean_url)
    if not match:
        return None
    full_name = match.group(1)
    if full_name.endswith(".git"):
        full_name = full_name[: -len(".git")]
    return full_name


def resolve_repository(target: str) -> str:
    """Accept either a GitHub URL or a bare "owner/repo".

    Raises:
        ValueError: If target is neither
    """
    full_name = parse_github_url(target)
    if full_name:
        return full_name
    candidate = target.strip().strip("/")
    if re.fullmatch(r"[\w.-]+/[\w.-]+", candidate):
        return candidate
    raise ValueError(f"Not a GitHub repository URL or owner/repo: {target}")


class GitHubProvider:
    """Repository data provider backed by the GitHub REST API.

    Usage:
        with GitHubProvider(config.github) as provider:
            repo_meta, evidence = provider.collect_evidence("owner/repo")
    """

    def __init__(
        self,
        config: GitHubConfig | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            config: GitHub settings (uses defaults if None)
            client: Preconfigured httpx client (created from config if None)
        """
        self.config = config or GitHubConfig()
        self._owns_client = client is None
        self._client = client or httpx.Client(
            headers=self._default_headers(),
            timeout=self.config.timeout,
            follow_redirects=True,
        )

    def _default_headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "repograde",
        }
        if self.config.token:
            headers["Authorization"] = f"Bearer {self.config.token}"
        return headers

    def close(self) -> None:
        """Close the underlying HTTP client if this provider created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "GitHubProvider":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # =========================================================================
    # Endpoint helpers
    # =========================================================================

    def _api_url(self, path: str) -> str:
        return f"{self.config.api_base.rstrip('/')}/{path.lstrip('/')}"

    def _raw_url(self, full_name: str, branch: str, file_name: str) -> str:
        return f"{self.config.raw_base.rstrip('/')}/{full_name}/{branch}/{file_name}"

    def _get_json_list(self, url: str, what: str, **params: Any) -> list[Any]:
        """GET a JSON array, returning [] on any failure."""
        try:
            response = self._client.get(url, params=params or None)
        except httpx.HTTPError as e:
            logger.warning("Could not fetch %s: %s", what, e)
            return []
        if response.status_code != httpx.codes.OK:
            logger.warning("Could not fetch %s: HTTP %d", what, response.status_code)
            return []
        try:
            data = response.json()
        except ValueError as e:
            logger.warning("Could not parse %s: %s", what, e)
            return []
        return data if isinstance(data, list) else []

    def _get_raw(self, url: str) -> str | None:
        """GET raw file text, None when the file does not exist."""
        response = self._client.get(url)
        if response.status_code == httpx.codes.OK:
            return response.text
        return None

    # =========================================================================
    # Fetchers
    # =========================================================================

    def fetch_repo_metadata(self, full_name: str) -> RepoMeta:
        """Fetch repository metadata.

        Raises:
            RepositoryNotFoundError: If the repository does not exist or is private
            RateLimitError: If the API rate limit is exhausted
            ProviderError: On any other failure
        """
        try:
            response = self._client.get(self._api_url(f"repos/{full_name}"))
        except httpx.HTTPError as e:
            raise ProviderError(f"Failed to fetch repository metadata: {e}", full_name) from e

        if response.status_code == httpx.codes.NOT_FOUND:
            raise RepositoryNotFoundError(full_name)
        if response.status_code == httpx.codes.FORBIDDEN:
            raise RateLimitError(full_name)
        if response.status_code != httpx.codes.OK:
            raise ProviderError(
                "Failed to fetch repository metadata",
                full_name,
                status_code=response.status_code,
            )

        return RepoMeta.from_github(response.json())

    def fetch_readme(self, full_name: str, default_branch: str = "main") -> str:
        """Fetch README.md from the default branch, then main, then master.

        Returns:
            README text, README_ABSENT if none exists, README_FETCH_ERROR on
            transport failure
        """
        branches = list(dict.fromkeys([default_branch, "main", "master"]))
        try:
            for branch in branches:
                text = self._get_raw(self._raw_url(full_name, branch, "README.md"))
                if text is not None:
                    return text
        except httpx.HTTPError as e:
            logger.warning("Could not fetch README for %s: %s", full_name, e)
            return README_FETCH_ERROR
        return README_ABSENT

    def fetch_structure(self, full_name: str) -> list[FileEntry]:
        """Fetch the flat root listing of the repository."""
        items = self._get_json_list(
            self._api_url(f"repos/{full_name}/contents"), f"structure of {full_name}"
        )
        return [FileEntry.from_dict(item) for item in items if isinstance(item, dict)]

    def fetch_recent_commits(self, full_name: str) -> list[CommitRecord]:
        """Fetch the most recent commits in API order, capped by the commit window."""
        items = self._get_json_list(
            self._api_url(f"repos/{full_name}/commits"),
            f"commits of {full_name}",
            per_page=self.config.commit_window,
        )
        commits = []
        for item in items:
            commit = item.get("commit", {}) if isinstance(item, dict) else {}
            author = commit.get("author") or {}
            if not author.get("date"):
                continue
            try:
                date = datetime.fromisoformat(author["date"])
            except (TypeError, ValueError):
                logger.warning(
                    "Skipping commit %s with invalid date: %r", item.get("sha", ""), author["date"]
                )
                continue
            commits.append(
                CommitRecord(
                    message=commit.get("message", ""),
                    date=date,
                    sha=item.get("sha", ""),
                    author_name=author.get("name", ""),
                )
            )
        # Keep the API order (newest-first by commit graph, not by author date)
        return commits[: self.config.commit_window]

    def fetch_dependency_manifest(self, full_name: str, files: list[FileEntry]) -> str:
        """Fetch the first known dependency manifest at the root.

        Returns:
            Manifest text, or "" if none exists or it cannot be fetched
        """
        names = {f.name for f in files}
        found = next((name for name in FETCHABLE_MANIFESTS if name in names), None)
        if found is None:
            return ""

        try:
            for branch in ("main", "master"):
                text = self._get_raw(self._raw_url(full_name, branch, found))
                if text is not None:
                    return text
        except httpx.HTTPError as e:
            logger.warning("Could not fetch %s for %s: %s", found, full_name, e)
        return ""

    def fetch_user_repositories(self, username: str) -> list[dict[str, Any]]:
        """Fetch a user's most recently updated public repositories.

        Raises:
            RepositoryNotFoundError: If the user does not exist
            ProviderError: On any other failure
        """
        try:
            response = self._client.get(
                self._api_url(f"users/{username}/repos"),
                params={"type": "public", "sort": "updated", "per_page": USER_REPOS_PER_PAGE},
            )
        except httpx.HTTPError as e:
            raise ProviderError(f"Failed to fetch user repositories: {e}", username) from e

        if response.status_code == httpx.codes.NOT_FOUND:
            raise RepositoryNotFoundError(username, "User not found")
        if response.status_code != httpx.codes.OK:
            raise ProviderError(
                "Failed to fetch user repositories", username, status_code=response.status_code
            )

        data = response.json()
        if not isinstance(data, list):
            return []
        keys = (
            "id",
            "name",
            "full_name",
            "html_url",
            "description",
            "language",
            "stargazers_count",
            "updated_at",
        )
        return [{key: repo.get(key) for key in keys} for repo in data if isinstance(repo, dict)]

    # =========================================================================
    # Evidence
    # =========================================================================

    def collect_evidence(self, full_name: str) -> tuple[RepoMeta, Evidence]:
        """Fetch everything the agents need for one repository.

        Returns:
            Tuple of (repository metadata, evidence)

        Raises:
            ProviderError: If repository metadata cannot be fetched
        """
        logger.info("Fetching repository data for %s", full_name)
        repo_meta = self.fetch_repo_metadata(full_name)

        readme = self.fetch_readme(full_name, repo_meta.default_branch)
        files = self.fetch_structure(full_name)
        commits = self.fetch_recent_commits(full_name)
        manifest = self.fetch_dependency_manifest(full_name, files)

        logger.info(
            "Collected %d root entries, %d commits, README %s, manifest %d chars",
            len(files),
            len(commits),
            "found" if readme not in (README_ABSENT, README_FETCH_ERROR) else "missing",
            len(manifest),
        )

        evidence = Evidence(
            files=tuple(files),
            commits=tuple(commits),
            readme=readme,
            dependency_manifest=manifest,
            repo_meta=repo_meta,
        )
        return repo_meta, evidence
