"""Analysis result entities.

This module contains entities produced by the scoring pipeline:
- AgentResult: Score plus evidence text from a single agent
- AgentScores / AgentEvidence: The fixed five-key score and evidence maps
- RoadmapItem: A single improvement step (difficulty, category)
- SummaryStyle: Writing style requested for the narrative
- Analysis: The final immutable report

Serialization uses the camelCase wire shape (overallScore, agentScores, ...)
so stored reports stay compatible with other consumers of the same payload.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

# Agent keys in canonical order. Every score and evidence map has exactly these.
AGENT_KEYS: tuple[str, ...] = (
    "codeQuality",
    "documentation",
    "commitHealth",
    "testCoverage",
    "techStack",
)


def _normalize_label(value: str) -> str:
    return "".join(value.split()).casefold()


class SummaryStyle(Enum):
    """Writing style for the generated narrative."""

    CLARITY = "Clarity"
    NATURALNESS = "Naturalness"
    PROFESSIONAL = "Professional"
    INFORMATIVENESS = "Informativeness"

    @classmethod
    def parse(cls, value: "str | SummaryStyle") -> "SummaryStyle":
        """Parse a style name case-insensitively.

        Raises:
            ValueError: If the name matches no style
        """
        if isinstance(value, cls):
            return value
        for member in cls:
            if _normalize_label(member.value) == _normalize_label(str(value)):
                return member
        raise ValueError(
            f"Invalid summary style '{value}'. Must be one of: {[m.value for m in cls]}"
        )


class Difficulty(Enum):
    """Difficulty of a roadmap item."""

    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"

    @classmethod
    def parse(cls, value: str) -> "Difficulty":
        """Parse a difficulty label case-insensitively."""
        for member in cls:
            if _normalize_label(member.value) == _normalize_label(str(value)):
                return member
        raise ValueError(f"Invalid difficulty: {value}")


class Category(Enum):
    """Category of a roadmap item."""

    DOCUMENTATION = "Documentation"
    CODE_QUALITY = "Code Quality"
    DEVOPS = "DevOps"
    FEATURES = "Features"

    @classmethod
    def parse(cls, value: str) -> "Category":
        """Parse a category label, ignoring case and whitespace.

        "CodeQuality" and "Code Quality" both map to CODE_QUALITY.
        """
        for member in cls:
            if _normalize_label(member.value) == _normalize_label(str(value)):
                return member
        raise ValueError(f"Invalid category: {value}")


@dataclass(frozen=True)
class AgentResult:
    """Output of a single heuristic agent.

    Attributes:
        score: Integer score in [0, 100]
        evidence: Short human-readable justification naming the rules that
            fired. Display and audit only, never parsed back.
    """

    score: int
    evidence: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"score": self.score, "evidence": self.evidence}


@dataclass(frozen=True)
class AgentScores:
    """Scores of all five agents. Every key is always present."""

    code_quality: int
    documentation: int
    commit_health: int
    test_coverage: int
    tech_stack: int

    def __getitem__(self, key: str) -> int:
        return self.to_dict()[key]

    def to_dict(self) -> dict[str, int]:
        """Convert to the camelCase wire mapping."""
        return {
            "codeQuality": self.code_quality,
            "documentation": self.documentation,
            "commitHealth": self.commit_health,
            "testCoverage": self.test_coverage,
            "techStack": self.tech_stack,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AgentScores":
        """Create AgentScores from the camelCase wire mapping.

        Raises:
            ValueError: If any agent key is missing
        """
        missing = [key for key in AGENT_KEYS if key not in data]
        if missing:
            raise ValueError(f"Missing agent scores: {missing}")
        return cls(
            code_quality=int(data["codeQuality"]),
            documentation=int(data["documentation"]),
            commit_health=int(data["commitHealth"]),
            test_coverage=int(data["testCoverage"]),
            tech_stack=int(data["techStack"]),
        )

    @classmethod
    def from_results(cls, results: dict[str, AgentResult]) -> "AgentScores":
        """Build scores from agent results keyed by agent key."""
        return cls.from_dict({key: results[key].score for key in AGENT_KEYS if key in results})


@dataclass(frozen=True)
class AgentEvidence:
    """Evidence strings of all five agents, keyed like AgentScores."""

    code_quality: str
    documentation: str
    commit_health: str
    test_coverage: str
    tech_stack: str

    def __getitem__(self, key: str) -> str:
        return self.to_dict()[key]

    def to_dict(self) -> dict[str, str]:
        """Convert to the camelCase wire mapping."""
        return {
            "codeQuality": self.code_quality,
            "documentation": self.documentation,
            "commitHealth": self.commit_health,
            "testCoverage": self.test_coverage,
            "techStack": self.tech_stack,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AgentEvidence":
        """Create AgentEvidence from the camelCase wire mapping.

        Raises:
            ValueError: If any agent key is missing
        """
        missing = [key for key in AGENT_KEYS if key not in data]
        if missing:
            raise ValueError(f"Missing agent evidence: {missing}")
        return cls(
            code_quality=str(data["codeQuality"]),
            documentation=str(data["documentation"]),
            commit_health=str(data["commitHealth"]),
            test_coverage=str(data["testCoverage"]),
            tech_stack=str(data["techStack"]),
        )

    @classmethod
    def from_results(cls, results: dict[str, AgentResult]) -> "AgentEvidence":
        """Build evidence from agent results keyed by agent key."""
        return cls.from_dict({key: results[key].evidence for key in AGENT_KEYS if key in results})


@dataclass(frozen=True)
class RoadmapItem:
    """A single actionable improvement step.

    Attributes:
        title: Short title
        description: What to do and why
        difficulty: Beginner, Intermediate or Advanced
        category: Documentation, Code Quality, DevOps or Features
    """

    title: str
    description: str
    difficulty: Difficulty
    category: Category

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for serialization."""
        return {
            "title": self.title,
            "description": self.description,
            "difficulty": self.difficulty.value,
            "category": self.category.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RoadmapItem":
        """Create a RoadmapItem from a dictionary.

        Raises:
            ValueError: If difficulty or category is not a known label
            KeyError: If a required field is missing
        """
        return cls(
            title=str(data["title"]),
            description=str(data["description"]),
            difficulty=Difficulty.parse(data["difficulty"]),
            category=Category.parse(data["category"]),
        )


@dataclass(frozen=True)
class Analysis:
    """Final analysis report.

    Immutable once produced; owned by the caller (cache, history) afterwards.
    overall_score, agent_scores and agent_evidence always come from the local
    deterministic pipeline, never from the narrative generator.

    Attributes:
        overall_score: Weighted overall score in [0, 100]
        agent_scores: Per-agent scores
        agent_evidence: Per-agent evidence strings
        summary: Narrative summary
        strengths: Three strengths
        weaknesses: Three weaknesses
        roadmap: Ordered improvement steps
        summary_style: Style the narrative was written in
    """

    overall_score: int
    agent_scores: AgentScores
    agent_evidence: AgentEvidence
    summary: str
    strengths: tuple[str, ...]
    weaknesses: tuple[str, ...]
    roadmap: tuple[RoadmapItem, ...]
    summary_style: SummaryStyle | None = None

    def __post_init__(self) -> None:
        """Freeze sequences."""
        object.__setattr__(self, "strengths", tuple(self.strengths))
        object.__setattr__(self, "weaknesses", tuple(self.weaknesses))
        object.__setattr__(self, "roadmap", tuple(self.roadmap))

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase wire dictionary."""
        return {
            "overallScore": self.overall_score,
            "agentScores": self.agent_scores.to_dict(),
            "agentEvidence": self.agent_evidence.to_dict(),
            "summary": self.summary,
            "strengths": list(self.strengths),
            "weaknesses": list(self.weaknesses),
            "roadmap": [item.to_dict() for item in self.roadmap],
            "summaryStyle": self.summary_style.value if self.summary_style else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Analysis":
        """Restore an Analysis from its wire dictionary."""
        style = data.get("summaryStyle")
        return cls(
            overall_score=int(data["overallScore"]),
            agent_scores=AgentScores.from_dict(data["agentScores"]),
            agent_evidence=AgentEvidence.from_dict(data["agentEvidence"]),
            summary=str(data.get("summary", "")),
            strengths=tuple(str(s) for s in data.get("strengths", [])),
            weaknesses=tuple(str(w) for w in data.get("weaknesses", [])),
            roadmap=tuple(RoadmapItem.from_dict(item) for item in data.get("roadmap", [])),
            summary_style=SummaryStyle.parse(style) if style else None,
        )
