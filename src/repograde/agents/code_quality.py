"""Code Quality agent.

Scores repository hygiene from the root file listing:
- Base: 40
- Linter or formatter config present: +20
- Standard source folder (src, lib, app, components): +20
- .gitignore present: +10
- Not flat (at least one non-hidden directory): +10
"""

import logging
from collections.abc import Iterable

from repograde.models.analysis import AgentResult
from repograde.models.evidence import FileEntry

logger = logging.getLogger(__name__)

BASE_SCORE = 40

# Case-sensitive substrings of linter/formatter config names
LINTER_MARKERS = ("eslint", "prettier", "flake8", "rubocop", "stylelint")

SOURCE_FOLDERS = frozenset({"src", "lib", "app", "components"})


def run_code_quality_agent(files: Iterable[FileEntry]) -> AgentResult:
    """Score code quality signals in the root listing.

    Args:
        files: Root-level repository entries

    Returns:
        AgentResult with a score in [40, 100]
    """
    entries = list(files)

    has_linter = any(marker in f.name for f in entries for marker in LINTER_MARKERS)
    has_src = any(f.name in SOURCE_FOLDERS for f in entries)
    has_gitignore = any(f.name == ".gitignore" for f in entries)
    is_not_flat = any(f.is_dir and not f.name.startswith(".") for f in entries)

    score = BASE_SCORE
    if has_linter:
        score += 20
    if has_src:
        score += 20
    if has_gitignore:
        score += 10
    if is_not_flat:
        score += 10

    logger.debug("Code quality agent: %d (%d entries)", score, len(entries))

    return AgentResult(
        score=score,
        evidence=(
            f"Linter detected: {has_linter}. Standard 'src' folder: {has_src}. "
            f"GitIgnore: {has_gitignore}. Structure depth: {is_not_flat}."
        ),
    )
