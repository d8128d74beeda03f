"""Repository data providers.

Providers fetch raw repository facts and normalize them into Evidence:
- GitHubProvider: public repositories via the GitHub REST API
"""

from repograde.providers.errors import ProviderError, RateLimitError, RepositoryNotFoundError
from repograde.providers.github import GitHubProvider, parse_github_url, resolve_repository

__all__ = [
    "GitHubProvider",
    "ProviderError",
    "RateLimitError",
    "RepositoryNotFoundError",
    "parse_github_url",
    "resolve_repository",
]
