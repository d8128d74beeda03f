"""repograde configuration system.

Configuration is primarily YAML-based with minimal CLI overrides (--style, --role,
--output, --format). Supports environment variable substitution (${VAR}) in
config files.

Configuration file discovery (in priority order):
1. CLI --config argument
2. ./.repograde/config.yaml
3. ./repograde.yaml
"""

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from repograde.models.analysis import SummaryStyle
from repograde.models.roles import parse_role

# =============================================================================
# Configuration Dataclasses
# =============================================================================

# Environment variables consulted when no api_key is configured
PROVIDER_ENV_KEYS: dict[str, tuple[str, ...]] = {
    "gemini": ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    "claude": ("ANTHROPIC_API_KEY",),
    "openai": ("OPENAI_API_KEY",),
}

DEFAULT_MODELS: dict[str, str] = {
    "gemini": "gemini-2.5-flash",
    "claude": "claude-sonnet-4-5",
    "openai": "gpt-4o-mini",
    "ollama": "llama3.2",
    "bedrock": "anthropic.claude-3-5-sonnet-20240620-v1:0",
}


@dataclass
class LLMConfig:
    """LLM configuration.

    The LLM only writes the narrative (summary, strengths, weaknesses,
    roadmap) and mentor chat replies. Scores never depend on it, so a
    missing key is not an error until a narrative is actually requested.

    Attributes:
        provider: LLM provider (gemini, claude, openai, ollama, bedrock)
        model: Model identifier
        api_key: API key (falls back to the provider's environment variable)
        api_base: API base URL (required for Ollama)
        temperature: Temperature setting (MUST be 0 for reproducibility)
        max_tokens: Maximum response tokens
        enabled: Whether narrative generation is enabled
    """

    provider: str = "gemini"
    model: str = "gemini-2.5-flash"
    api_key: str | None = None
    api_base: str | None = None
    temperature: float = 0.0
    max_tokens: int = 4096
    enabled: bool = True

    def __post_init__(self) -> None:
        """Validate LLM configuration."""
        if self.temperature != 0:
            raise ValueError(
                f"LLM temperature must be 0 for reproducibility (got {self.temperature})"
            )

        valid_providers = {"gemini", "claude", "openai", "ollama", "bedrock"}
        if self.provider not in valid_providers:
            raise ValueError(f"Invalid LLM provider: {self.provider}. Valid: {valid_providers}")

        if not self.api_key:
            for env_var in PROVIDER_ENV_KEYS.get(self.provider, ()):
                if os.environ.get(env_var):
                    self.api_key = os.environ[env_var]
                    break

        if self.provider == "ollama" and not self.api_base:
            self.api_base = "http://localhost:11434"

    @property
    def is_local(self) -> bool:
        """Return True if using local LLM (no data leaves machine)."""
        return self.provider == "ollama"


@dataclass
class GitHubConfig:
    """GitHub API configuration.

    Attributes:
        token: Personal access token (optional, raises the rate limit)
        api_base: REST API base URL
        raw_base: Raw file content base URL
        commit_window: Number of recent commits fetched per repository
        timeout: HTTP timeout in seconds
    """

    token: str | None = None
    api_base: str = "https://api.github.com"
    raw_base: str = "https://raw.githubusercontent.com"
    commit_window: int = 15
    timeout: float = 30.0

    def __post_init__(self) -> None:
        """Validate GitHub configuration."""
        if self.commit_window < 1:
            raise ValueError(f"commit_window must be positive (got {self.commit_window})")
        if not self.token:
            self.token = os.environ.get("GITHUB_TOKEN") or None


@dataclass
class ReportConfig:
    """Report defaults.

    Attributes:
        style: Default summary style
        role: Default audience role (preset name or any custom string)
        output: Default output path (None prints to stdout)
        format: Output format (markdown, json)
    """

    style: str = "Professional"
    role: str = "Student"
    output: str | None = None
    format: str = "markdown"

    def __post_init__(self) -> None:
        """Validate report configuration."""
        SummaryStyle.parse(self.style)
        parse_role(self.role)
        valid_formats = {"markdown", "json"}
        if self.format not in valid_formats:
            raise ValueError(f"Invalid report format: {self.format}. Valid: {valid_formats}")


@dataclass
class StorageConfig:
    """Local history storage.

    Attributes:
        history_dir: Directory holding per-user history files
        user: User identifier the history is keyed by
    """

    history_dir: str = "~/.repograde/history"
    user: str = "local"

    def __post_init__(self) -> None:
        """Validate storage configuration."""
        # user becomes part of the history file name
        if not re.fullmatch(r"[\w.-]+", self.user) or self.user in {".", ".."}:
            raise ValueError(
                f"Invalid storage user: {self.user!r}. Use letters, digits, '.', '_' or '-'"
            )

    @property
    def history_path(self) -> Path:
        """Expanded history directory."""
        return Path(self.history_dir).expanduser()


@dataclass
class RepogradeConfig:
    """Top-level repograde configuration.

    Attributes:
        llm: Narrative generator settings
        github: GitHub API settings
        report: Report defaults
        storage: History storage settings
    """

    llm: LLMConfig = field(default_factory=LLMConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)

    _config_path: Path | None = field(default=None, repr=False)

    @property
    def config_path(self) -> Path | None:
        """Get the path to the config file that was loaded."""
        return self._config_path


# =============================================================================
# Environment Variable Substitution
# =============================================================================


def substitute_env_vars(value: Any) -> Any:
    """Substitute environment variables in config values.

    Supports ${VAR} syntax for environment variable substitution.
    Example: ${GEMINI_API_KEY} -> value of GEMINI_API_KEY

    Args:
        value: Config value (string, dict, list, or other)

    Returns:
        Value with environment variables substituted

    Raises:
        ValueError: If a referenced variable is not set
    """
    if isinstance(value, str):
        pattern = re.compile(r"\$\{([^}]+)\}")

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                raise ValueError(f"Environment variable not set: {var_name}")
            return env_value

        return pattern.sub(replace_var, value)

    elif isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [substitute_env_vars(v) for v in value]

    return value


# =============================================================================
# Config File Discovery
# =============================================================================


def find_config_file(start_path: Path | None = None) -> Path | None:
    """Find configuration file in standard locations.

    Search order:
    1. ./.repograde/config.yaml
    2. ./repograde.yaml

    Args:
        start_path: Starting directory for search (defaults to cwd)

    Returns:
        Path to config file if found, None otherwise
    """
    if start_path is None:
        start_path = Path.cwd()

    start_path = start_path.resolve()

    candidates = [
        start_path / ".repograde" / "config.yaml",
        start_path / "repograde.yaml",
    ]

    for candidate in candidates:
        if candidate.exists():
            return candidate

    return None


# =============================================================================
# Config Loading
# =============================================================================


def load_config_from_dict(data: dict[str, Any]) -> RepogradeConfig:
    """Load configuration from a dictionary.

    Args:
        data: Configuration dictionary

    Returns:
        RepogradeConfig instance
    """
    data = substitute_env_vars(data)

    config = RepogradeConfig()

    if "llm" in data:
        llm_data = data["llm"] or {}
        defaults = LLMConfig()
        provider = llm_data.get("provider", defaults.provider)
        config.llm = LLMConfig(
            provider=provider,
            model=llm_data.get("model", DEFAULT_MODELS.get(provider, defaults.model)),
            api_key=llm_data.get("api_key"),
            api_base=llm_data.get("api_base"),
            temperature=llm_data.get("temperature", 0),
            max_tokens=llm_data.get("max_tokens", defaults.max_tokens),
            enabled=llm_data.get("enabled", True),
        )

    if "github" in data:
        github_data = data["github"] or {}
        defaults_gh = GitHubConfig()
        config.github = GitHubConfig(
            token=github_data.get("token"),
            api_base=github_data.get("api_base", defaults_gh.api_base),
            raw_base=github_data.get("raw_base", defaults_gh.raw_base),
            commit_window=github_data.get("commit_window", defaults_gh.commit_window),
            timeout=github_data.get("timeout", defaults_gh.timeout),
        )

    if "report" in data:
        report_data = data["report"] or {}
        config.report = ReportConfig(
            style=report_data.get("style", config.report.style),
            role=report_data.get("role", config.report.role),
            output=report_data.get("output", config.report.output),
            format=report_data.get("format", config.report.format),
        )

    if "storage" in data:
        storage_data = data["storage"] or {}
        config.storage = StorageConfig(
            history_dir=storage_data.get("history_dir", config.storage.history_dir),
            user=storage_data.get("user", config.storage.user),
        )

    return config


def load_config(
    config_path: Path | None = None,
    auto_discover: bool = True,
) -> RepogradeConfig:
    """Load configuration from file.

    Args:
        config_path: Explicit path to config file
        auto_discover: Whether to search for config file if not specified

    Returns:
        RepogradeConfig instance

    Raises:
        FileNotFoundError: If config_path specified but doesn't exist
    """
    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        found_path = config_path
    elif auto_discover:
        found_path = find_config_file()
    else:
        found_path = None

    if found_path is not None:
        with open(found_path) as f:
            data = yaml.safe_load(f) or {}
        config = load_config_from_dict(data)
        config._config_path = found_path
    else:
        config = RepogradeConfig()

    return config


def create_default_config() -> str:
    """Create default configuration YAML content.

    Returns:
        YAML string with default configuration and comments
    """
    return '''# repograde configuration

# Narrative generator (scores never depend on it)
llm:
  provider: "gemini"          # gemini, claude, openai, ollama, bedrock
  model: "gemini-2.5-flash"
  # api_key: "${GEMINI_API_KEY}"  # Falls back to GEMINI_API_KEY / GOOGLE_API_KEY
  temperature: 0              # MUST be 0 for reproducibility
  max_tokens: 4096

# GitHub API
github:
  # token: "${GITHUB_TOKEN}"  # Optional, raises the API rate limit
  commit_window: 15           # Recent commits fetched per repository
  timeout: 30

# Report defaults
report:
  style: "Professional"       # Clarity, Naturalness, Professional, Informativeness
  role: "Student"             # Student, Mentor, Recruiter, Developer or any custom role
  format: "markdown"          # markdown, json

# Analysis history
storage:
  history_dir: "~/.repograde/history"
  user: "local"
'''
