"""Mentor chat conversations.

A Conversation is an immutable value owned by the caller. Each turn is an
explicit transition:

    send_message(client, conversation, message) -> (conversation', reply)

so no chat session state lives inside the client or the module.
"""

import logging
from dataclasses import dataclass

from repograde.llm.client import LLMClient, LLMError
from repograde.llm.prompts import build_mentor_system_prompt
from repograde.models.analysis import Analysis
from repograde.models.evidence import RepoMeta

logger = logging.getLogger(__name__)

SYSTEM = "system"
USER = "user"
ASSISTANT = "assistant"


@dataclass(frozen=True)
class Turn:
    """One message in a conversation."""

    role: str
    text: str


@dataclass(frozen=True)
class Conversation:
    """Ordered conversation history."""

    history: tuple[Turn, ...] = ()

    def append(self, role: str, text: str) -> "Conversation":
        """Return a new conversation with one more turn."""
        return Conversation(history=(*self.history, Turn(role=role, text=text)))

    def to_messages(self) -> list[dict[str, str]]:
        """Convert to chat messages for the LLM client."""
        return [{"role": turn.role, "content": turn.text} for turn in self.history]

    @property
    def replies(self) -> list[str]:
        """Assistant replies in order."""
        return [turn.text for turn in self.history if turn.role == ASSISTANT]


def start_conversation(repo_meta: RepoMeta, analysis: Analysis) -> Conversation:
    """Seed a mentor conversation with the analysis context."""
    context = {
        "repository": repo_meta.full_name,
        "language": repo_meta.language,
        "description": repo_meta.description,
        "scores": analysis.agent_scores.to_dict(),
        "finalScore": analysis.overall_score,
        "summary": analysis.summary,
        "roadmap": [item.to_dict() for item in analysis.roadmap],
    }
    return Conversation().append(SYSTEM, build_mentor_system_prompt(context))


def send_message(
    client: LLMClient,
    conversation: Conversation,
    message: str,
) -> tuple[Conversation, str]:
    """Send a user message and return the extended conversation and reply.

    The input conversation is left unchanged, so a failed turn can simply be
    retried from it.

    Raises:
        LLMError: If the call fails or the reply is empty
    """
    pending = conversation.append(USER, message)
    response = client.chat(pending.to_messages())

    reply = response.content.strip()
    if not reply:
        raise LLMError("Empty reply from mentor chat")

    logger.debug("Chat turn %d: %d chars", len(pending.history), len(reply))
    return pending.append(ASSISTANT, reply), reply
