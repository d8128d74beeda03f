"""LLM Configuration entity for repograde.

Defines the configuration for the LLM provider that writes the narrative.
Supports multiple providers: Gemini, Claude, OpenAI, Ollama, and Bedrock.
"""

from dataclasses import dataclass, field

# Valid LLM providers
VALID_PROVIDERS = frozenset({"gemini", "claude", "openai", "ollama", "bedrock"})

# litellm model prefix per provider
_MODEL_PREFIXES = {
    "gemini": "gemini",
    "claude": "anthropic",
    "openai": "openai",
    "ollama": "ollama",
    "bedrock": "bedrock",
}


@dataclass
class LLMConfig:
    """Configuration for LLM provider.

    Attributes:
        provider: LLM provider (gemini, claude, openai, ollama, bedrock)
        model: Model identifier (e.g., "gemini-2.5-flash")
        api_key: API key (not required for Ollama or Bedrock)
        api_base: API base URL (required for Ollama)
        temperature: Temperature setting (must be 0 for reproducibility)
        max_tokens: Maximum response tokens
        enabled: Whether narrative generation is enabled
    """

    provider: str
    model: str
    api_key: str | None = None
    api_base: str | None = None
    temperature: float = field(default=0.0)
    max_tokens: int = field(default=4096)
    enabled: bool = field(default=True)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self.provider = self.provider.lower().strip()

        if self.provider not in VALID_PROVIDERS:
            raise ValueError(
                f"Invalid provider '{self.provider}'. "
                f"Must be one of: {sorted(VALID_PROVIDERS)}"
            )

        if not self.model or not self.model.strip():
            raise ValueError("Model identifier cannot be empty")
        self.model = self.model.strip()

        # Same repository must yield the same report
        if self.temperature != 0.0:
            raise ValueError(
                f"Temperature must be 0 for reproducibility. Got: {self.temperature}"
            )

        if self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive. Got: {self.max_tokens}")

        if self.provider == "ollama":
            if not self.api_base:
                raise ValueError("api_base is required for Ollama provider")
        elif self.provider == "bedrock":
            # Bedrock uses AWS credentials from the environment
            pass
        elif not self.api_key:
            raise ValueError(f"api_key is required for {self.provider} provider")

    def validate(self) -> list[str]:
        """Validate configuration and return warnings.

        Returns:
            List of warning messages (empty if no warnings)
        """
        warnings: list[str] = []

        # A full narrative with a five-item roadmap needs room
        if self.max_tokens < 2000:
            warnings.append(
                f"max_tokens is set to {self.max_tokens}, which may truncate the narrative JSON"
            )

        if (
            self.provider == "ollama"
            and self.api_base
            and not self.api_base.startswith(("http://", "https://"))
        ):
            warnings.append(
                f"api_base '{self.api_base}' does not start with http:// or https://"
            )

        return warnings

    def to_dict(self) -> dict[str, str | int | float | bool | None]:
        """Convert to dictionary for serialization."""
        return {
            "provider": self.provider,
            "model": self.model,
            "api_key": self.api_key,
            "api_base": self.api_base,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "enabled": self.enabled,
        }

    @classmethod
    def from_dict(cls, data: dict[str, str | int | float | bool | None]) -> "LLMConfig":
        """Create LLMConfig from dictionary."""
        return cls(
            provider=str(data.get("provider", "")),
            model=str(data.get("model", "")),
            api_key=data.get("api_key") if data.get("api_key") else None,  # type: ignore[arg-type]
            api_base=data.get("api_base") if data.get("api_base") else None,  # type: ignore[arg-type]
            temperature=float(data.get("temperature", 0.0)),  # type: ignore[arg-type]
            max_tokens=int(data.get("max_tokens", 4096)),  # type: ignore[arg-type]
            enabled=bool(data.get("enabled", True)),
        )

    def get_litellm_model_name(self) -> str:
        """Get the model name in LiteLLM "prefix/model" format."""
        return f"{_MODEL_PREFIXES[self.provider]}/{self.model}"
