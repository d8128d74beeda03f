"""repograde data models.

This module exports all core entities used throughout the application:
- Evidence, FileEntry, CommitRecord, RepoMeta: Repository facts fed to agents
- AgentResult, AgentScores, AgentEvidence: Per-agent outputs
- Analysis, RoadmapItem: The final report
- SummaryStyle, Role: Narrative directives
"""

from repograde.models.analysis import (
    AGENT_KEYS,
    AgentEvidence,
    AgentResult,
    AgentScores,
    Analysis,
    Category,
    Difficulty,
    RoadmapItem,
    SummaryStyle,
)
from repograde.models.evidence import (
    README_ABSENT,
    README_FETCH_ERROR,
    CommitRecord,
    EntryType,
    Evidence,
    FileEntry,
    RepoMeta,
    readme_present,
)
from repograde.models.roles import CustomRole, PresetRole, Role, parse_role, role_label

__all__ = [
    "AGENT_KEYS",
    "README_ABSENT",
    "README_FETCH_ERROR",
    "AgentEvidence",
    "AgentResult",
    "AgentScores",
    "Analysis",
    "Category",
    "CommitRecord",
    "CustomRole",
    "Difficulty",
    "EntryType",
    "Evidence",
    "FileEntry",
    "PresetRole",
    "RepoMeta",
    "RoadmapItem",
    "Role",
    "SummaryStyle",
    "parse_role",
    "readme_present",
    "role_label",
]
