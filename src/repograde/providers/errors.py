"""Repository data provider errors."""


class ProviderError(Exception):
    """Raised when repository data cannot be fetched."""

    def __init__(
        self,
        message: str,
        repository: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.repository = repository
        self.status_code = status_code
        full_message = message
        if repository:
            full_message += f" ({repository})"
        if status_code is not None:
            full_message += f" [HTTP {status_code}]"
        super().__init__(full_message)


class RepositoryNotFoundError(ProviderError):
    """Raised when the repository (or user) does not exist or is private."""

    def __init__(self, repository: str, message: str | None = None) -> None:
        super().__init__(
            message or "Repository not found. Is it private?",
            repository=repository,
            status_code=404,
        )


class RateLimitError(ProviderError):
    """Raised when the GitHub API rate limit is exhausted."""

    def __init__(self, repository: str | None = None) -> None:
        super().__init__(
            "GitHub API rate limit exceeded. Please try again later.",
            repository=repository,
            status_code=403,
        )
