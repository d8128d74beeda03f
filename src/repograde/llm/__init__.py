"""LLM integration module for repograde.

Provides a unified LLM client wrapper using LiteLLM for multi-provider
support, the narrative request builder and mentor chat conversations.

Temperature is fixed at 0 for deterministic outputs, and numeric fields
returned by the model are always replaced with locally computed values.
"""

from repograde.llm.client import LLMClient, LLMError, LLMResponse, create_client
from repograde.llm.conversation import Conversation, Turn, send_message, start_conversation
from repograde.llm.narrative import (
    GenerationFailure,
    Narrative,
    NarrativeRequest,
    build_analysis,
    build_narrative_request,
    generate_narrative,
    parse_narrative,
    request_analysis,
)
from repograde.llm.prompts import (
    NARRATIVE_RESPONSE_SCHEMA,
    ROLE_INSTRUCTIONS,
    STYLE_INSTRUCTIONS,
    role_instruction,
    style_instruction,
)
from repograde.models.llm_config import VALID_PROVIDERS, LLMConfig

__all__ = [
    "Conversation",
    "GenerationFailure",
    "LLMClient",
    "LLMConfig",
    "LLMError",
    "LLMResponse",
    "NARRATIVE_RESPONSE_SCHEMA",
    "Narrative",
    "NarrativeRequest",
    "ROLE_INSTRUCTIONS",
    "STYLE_INSTRUCTIONS",
    "Turn",
    "VALID_PROVIDERS",
    "build_analysis",
    "build_narrative_request",
    "create_client",
    "generate_narrative",
    "parse_narrative",
    "request_analysis",
    "role_instruction",
    "send_message",
    "start_conversation",
    "style_instruction",
]
