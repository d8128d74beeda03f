"""Unified LLM client wrapper using LiteLLM.

Provides a consistent interface for multiple LLM providers.
Temperature is fixed at 0 so the same repository yields the same narrative.

The client is an explicit handle: callers construct it once from
configuration and pass it to the narrative builder and to conversations.
There is no module-level session state.
"""

import logging
from dataclasses import dataclass
from typing import Any

import litellm

from repograde.models.llm_config import LLMConfig

logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    """Response from LLM completion.

    Attributes:
        content: Generated text content
        model: Model that generated the response
        usage: Token usage statistics
        finish_reason: Reason for completion (stop, length, etc.)
    """

    content: str
    model: str
    usage: dict[str, int]
    finish_reason: str | None = None


class LLMError(Exception):
    """Exception raised for LLM-related errors."""

    pass


class LLMClient:
    """Unified LLM client using LiteLLM.

    Supports multiple providers through a single interface:
    - Gemini (Google)
    - Claude (Anthropic)
    - OpenAI
    - Ollama (local)
    - Bedrock (AWS)
    """

    def __init__(self, config: LLMConfig) -> None:
        """Initialize LLM client with configuration.

        Args:
            config: LLM configuration with provider, model, and credentials
        """
        self.config = config

    def chat(
        self,
        messages: list[dict[str, str]],
        max_tokens: int | None = None,
        response_schema: dict[str, Any] | None = None,
    ) -> LLMResponse:
        """Generate the next assistant message for a message history.

        Args:
            messages: Chat messages ({"role": ..., "content": ...})
            max_tokens: Override max_tokens from config
            response_schema: JSON schema the reply must follow; enables JSON mode

        Returns:
            LLMResponse with generated content

        Raises:
            LLMError: If the completion fails
        """
        completion_kwargs: dict[str, Any] = {
            "model": self.config.get_litellm_model_name(),
            "messages": messages,
            "temperature": 0,
            "max_tokens": max_tokens or self.config.max_tokens,
        }
        if self.config.api_key:
            completion_kwargs["api_key"] = self.config.api_key

        if self.config.provider == "ollama":
            completion_kwargs["api_base"] = self.config.api_base
            completion_kwargs["top_k"] = 1
        elif self.config.provider in {"claude", "gemini"}:
            completion_kwargs["top_k"] = 1

        if response_schema is not None:
            completion_kwargs["response_format"] = self._response_format(response_schema)

        try:
            response = litellm.completion(**completion_kwargs)
        except litellm.exceptions.AuthenticationError as e:
            raise LLMError(f"Authentication failed for {self.config.provider}: {e}") from e
        except litellm.exceptions.RateLimitError as e:
            raise LLMError(f"Rate limit exceeded for {self.config.provider}: {e}") from e
        except litellm.exceptions.APIConnectionError as e:
            raise LLMError(f"Connection failed to {self.config.provider}: {e}") from e
        except Exception as e:
            raise LLMError(f"LLM completion failed: {e}") from e

        choice = response.choices[0]
        content = choice.message.content or ""

        usage = {}
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens or 0,
                "completion_tokens": response.usage.completion_tokens or 0,
                "total_tokens": response.usage.total_tokens or 0,
            }

        logger.debug(
            "LLM completion: %d chars, %d tokens",
            len(content),
            usage.get("total_tokens", 0),
        )

        return LLMResponse(
            content=content,
            model=response.model or self.config.model,
            usage=usage,
            finish_reason=choice.finish_reason,
        )

    def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        max_tokens: int | None = None,
        response_schema: dict[str, Any] | None = None,
    ) -> LLMResponse:
        """Generate a completion for a single prompt.

        Args:
            prompt: User prompt for the LLM
            system_prompt: Optional system prompt
            max_tokens: Override max_tokens from config
            response_schema: JSON schema the reply must follow

        Returns:
            LLMResponse with generated content

        Raises:
            LLMError: If the completion fails
        """
        messages: list[dict[str, str]] = []

        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})

        messages.append({"role": "user", "content": prompt})

        return self.chat(messages, max_tokens=max_tokens, response_schema=response_schema)

    def _response_format(self, schema: dict[str, Any]) -> dict[str, Any]:
        """Build the litellm response_format for the configured provider."""
        if self.config.provider == "gemini":
            return {"type": "json_object", "response_schema": schema}
        if self.config.provider == "openai":
            return {
                "type": "json_schema",
                "json_schema": {"name": "repository_analysis", "schema": schema},
            }
        return {"type": "json_object"}


def create_client(config: LLMConfig) -> LLMClient:
    """Create an LLM client from configuration.

    Args:
        config: LLM configuration

    Returns:
        Configured LLMClient instance

    Raises:
        ValueError: If LLM is disabled in config
    """
    if not config.enabled:
        raise ValueError("LLM is disabled in configuration")

    return LLMClient(config)
