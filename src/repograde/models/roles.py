"""Audience roles for the generated narrative.

A role is either one of the preset audiences or a free-text custom role:

    Role = PresetRole | CustomRole

Instruction lookup over this union is total (see repograde.llm.prompts).
"""

from dataclasses import dataclass
from enum import Enum


class PresetRole(Enum):
    """Audiences with dedicated instructions."""

    STUDENT = "Student"
    MENTOR = "Mentor"
    RECRUITER = "Recruiter"
    DEVELOPER = "Developer"


@dataclass(frozen=True)
class CustomRole:
    """Any audience not covered by PresetRole.

    Attributes:
        name: Literal role string as supplied by the user
    """

    name: str

    def __post_init__(self) -> None:
        """Validate the role name."""
        if not self.name or not self.name.strip():
            raise ValueError("Custom role name cannot be empty")


Role = PresetRole | CustomRole


def parse_role(value: "str | Role") -> Role:
    """Map a role string to a Role.

    Preset names match exactly (case-sensitive, like the stored user role);
    anything else becomes a CustomRole carrying the literal string.

    Args:
        value: Role string or an existing Role

    Returns:
        PresetRole or CustomRole
    """
    if isinstance(value, (PresetRole, CustomRole)):
        return value
    for member in PresetRole:
        if member.value == value:
            return member
    return CustomRole(value)


def role_label(role: Role) -> str:
    """Return the display label of a role."""
    if isinstance(role, PresetRole):
        return role.value
    return role.name
