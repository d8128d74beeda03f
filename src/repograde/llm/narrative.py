"""Narrative request builder.

Assembles the deterministic payload handed to the narrative generator,
calls it once, validates the structured reply and produces the final
Analysis. Numeric fields in the reply (overallScore, agentScores) are never
trusted: the Analysis always carries the locally computed values.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any

from repograde.aggregator import FORMULA
from repograde.llm.client import LLMClient, LLMError
from repograde.llm.prompts import (
    NARRATIVE_RESPONSE_SCHEMA,
    NARRATIVE_SYSTEM_PROMPT,
    build_narrative_prompt,
    role_directive,
    style_instruction,
)
from repograde.models.analysis import (
    AGENT_KEYS,
    AgentEvidence,
    AgentResult,
    AgentScores,
    Analysis,
    RoadmapItem,
    SummaryStyle,
)
from repograde.models.evidence import Evidence, RepoMeta
from repograde.models.roles import Role

logger = logging.getLogger(__name__)

EXPECTED_STRENGTHS = 3
EXPECTED_WEAKNESSES = 3
EXPECTED_ROADMAP_ITEMS = 5

RECENT_COMMIT_MESSAGES = 3
MANIFEST_SNIPPET_LENGTH = 500

# A reply wrapped as a whole in ```json ... ```; fences inside the JSON are left alone
FENCED_REPLY = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL)


class GenerationFailure(LLMError):
    """Raised when the narrative generator fails or returns an unusable reply."""

    def __init__(self, message: str, raw_response: str | None = None) -> None:
        self.raw_response = raw_response
        super().__init__(message)


@dataclass(frozen=True)
class Narrative:
    """Trusted output of the narrative generator (prose only)."""

    summary: str
    strengths: tuple[str, ...]
    weaknesses: tuple[str, ...]
    roadmap: tuple[RoadmapItem, ...]


@dataclass(frozen=True)
class NarrativeRequest:
    """Deterministic context payload for the narrative generator.

    Attributes:
        repo_meta: Repository metadata
        results: All five agent results, keyed by agent key
        overall_score: Locally computed overall score
        style: Requested summary style
        role: Target audience
        recent_commit_messages: Newest commit messages (up to three)
        manifest_snippet: Leading part of the dependency manifest
    """

    repo_meta: RepoMeta
    results: dict[str, AgentResult]
    overall_score: int
    style: SummaryStyle
    role: Role
    recent_commit_messages: tuple[str, ...] = field(default_factory=tuple)
    manifest_snippet: str = ""

    def __post_init__(self) -> None:
        """Require every agent result."""
        missing = [key for key in AGENT_KEYS if key not in self.results]
        if missing:
            raise ValueError(f"Narrative request is missing agent results: {missing}")

    def to_payload(self) -> dict[str, Any]:
        """Build the deterministic payload.

        Identical inputs always produce an identical payload.
        """
        return {
            "repository": {
                "fullName": self.repo_meta.full_name,
                "description": self.repo_meta.description,
                "language": self.repo_meta.language,
            },
            "agents": {key: self.results[key].to_dict() for key in AGENT_KEYS},
            "overallScore": self.overall_score,
            "formula": FORMULA,
            "style": {"name": self.style.value, "instruction": style_instruction(self.style)},
            "role": role_directive(self.role),
            "recentCommitMessages": list(self.recent_commit_messages),
            "manifestSnippet": self.manifest_snippet,
        }

    def render_prompt(self) -> str:
        """Render the user prompt for the generator."""
        return build_narrative_prompt(self.to_payload())


def build_narrative_request(
    evidence: Evidence,
    results: dict[str, AgentResult],
    overall_score: int,
    style: SummaryStyle,
    role: Role,
) -> NarrativeRequest:
    """Assemble a NarrativeRequest from evidence and computed scores.

    Args:
        evidence: Evidence the agents were run on
        results: Agent results keyed by agent key
        overall_score: Aggregated overall score
        style: Summary style
        role: Target audience

    Returns:
        NarrativeRequest ready to send
    """
    return NarrativeRequest(
        repo_meta=evidence.repo_meta,
        results={key: results[key] for key in AGENT_KEYS if key in results},
        overall_score=overall_score,
        style=style,
        role=role,
        recent_commit_messages=tuple(
            c.message for c in evidence.commits[:RECENT_COMMIT_MESSAGES]
        ),
        manifest_snippet=evidence.dependency_manifest[:MANIFEST_SNIPPET_LENGTH],
    )


def _extract_json(text: str) -> str:
    """Strip a markdown code fence wrapping the whole reply, if there is one."""
    stripped = text.strip()
    fenced = FENCED_REPLY.fullmatch(stripped)
    if fenced:
        return fenced.group(1)
    return stripped


def _string_list(data: dict[str, Any], key: str, raw: str) -> tuple[str, ...]:
    value = data.get(key)
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise GenerationFailure(f"Narrative field '{key}' must be a list of strings", raw)
    return tuple(value)


def parse_narrative(text: str) -> Narrative:
    """Parse and validate the generator's structured reply.

    Args:
        text: Raw reply text (JSON, optionally fenced)

    Returns:
        Narrative with the trusted prose fields

    Raises:
        GenerationFailure: If the text is empty or not the expected shape
    """
    if not text or not text.strip():
        raise GenerationFailure("No response from narrative generator")

    try:
        data = json.loads(_extract_json(text))
    except json.JSONDecodeError as e:
        raise GenerationFailure(f"Failed to parse analysis results: {e}", text) from e

    if not isinstance(data, dict):
        raise GenerationFailure("Narrative response must be a JSON object", text)

    summary = data.get("summary")
    if not isinstance(summary, str):
        raise GenerationFailure("Narrative field 'summary' must be a string", text)

    strengths = _string_list(data, "strengths", text)
    weaknesses = _string_list(data, "weaknesses", text)

    raw_roadmap = data.get("roadmap")
    if not isinstance(raw_roadmap, list):
        raise GenerationFailure("Narrative field 'roadmap' must be a list", text)
    try:
        roadmap = tuple(RoadmapItem.from_dict(item) for item in raw_roadmap)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise GenerationFailure(f"Invalid roadmap item: {e}", text) from e

    for name, items, expected in (
        ("strengths", strengths, EXPECTED_STRENGTHS),
        ("weaknesses", weaknesses, EXPECTED_WEAKNESSES),
        ("roadmap", roadmap, EXPECTED_ROADMAP_ITEMS),
    ):
        if len(items) != expected:
            logger.warning(
                "Narrative returned %d %s (expected %d)", len(items), name, expected
            )

    return Narrative(
        summary=summary,
        strengths=strengths,
        weaknesses=weaknesses,
        roadmap=roadmap,
    )


def build_analysis(request: NarrativeRequest, narrative: Narrative) -> Analysis:
    """Combine locally computed scores with the generated prose.

    The scores and evidence come from the request, never from the generator.
    """
    return Analysis(
        overall_score=request.overall_score,
        agent_scores=AgentScores.from_results(request.results),
        agent_evidence=AgentEvidence.from_results(request.results),
        summary=narrative.summary,
        strengths=narrative.strengths,
        weaknesses=narrative.weaknesses,
        roadmap=narrative.roadmap,
        summary_style=request.style,
    )


def generate_narrative(client: LLMClient, request: NarrativeRequest) -> Narrative:
    """Send the request to the narrative generator and parse the reply.

    Raises:
        GenerationFailure: If the call fails or the reply is unusable
    """
    logger.info(
        "Requesting narrative for %s (%s style, %s role)",
        request.repo_meta.full_name,
        request.style.value,
        role_directive(request.role)["label"],
    )

    try:
        response = client.complete(
            prompt=request.render_prompt(),
            system_prompt=NARRATIVE_SYSTEM_PROMPT,
            response_schema=NARRATIVE_RESPONSE_SCHEMA,
        )
    except GenerationFailure:
        raise
    except LLMError as e:
        raise GenerationFailure(f"Narrative generation failed: {e}") from e

    return parse_narrative(response.content)


def request_analysis(client: LLMClient, request: NarrativeRequest) -> Analysis:
    """Generate the narrative and produce the final Analysis.

    Raises:
        GenerationFailure: If narrative generation fails (no partial result)
    """
    narrative = generate_narrative(client, request)
    return build_analysis(request, narrative)
