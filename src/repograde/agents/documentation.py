"""Documentation agent.

Scores the README and repository metadata:
- README present: +30
- Installation section (install, installation, setup): +20
- Usage section (usage, getting started): +20
- Description longer than 20 characters: +20
- License detected: +10
"""

import logging

from repograde.models.analysis import AgentResult
from repograde.models.evidence import RepoMeta, readme_present

logger = logging.getLogger(__name__)

INSTALL_KEYWORDS = ("installation", "install", "setup")
USAGE_KEYWORDS = ("usage", "getting started")

MIN_DESCRIPTION_LENGTH = 20


def run_documentation_agent(readme: str, repo_meta: RepoMeta) -> AgentResult:
    """Score documentation quality.

    Keyword checks run on the raw README text, so an absent README can still
    only score through the description and license bonuses.

    Args:
        readme: README text or README_ABSENT
        repo_meta: Repository metadata

    Returns:
        AgentResult with a score in [0, 100]
    """
    readme = readme or ""
    readme_lower = readme.lower()
    has_readme = readme_present(readme)

    has_install = any(keyword in readme_lower for keyword in INSTALL_KEYWORDS)
    has_usage = any(keyword in readme_lower for keyword in USAGE_KEYWORDS)
    has_description = bool(repo_meta.description) and len(repo_meta.description or "") > MIN_DESCRIPTION_LENGTH
    has_license = repo_meta.license is not None

    score = 0
    if has_readme:
        score += 30
    if has_install:
        score += 20
    if has_usage:
        score += 20
    if has_description:
        score += 20
    if has_license:
        score += 10

    logger.debug("Documentation agent: %d (readme %d chars)", score, len(readme))

    return AgentResult(
        score=score,
        evidence=(
            f"README present: {has_readme}. Install section: {has_install}. "
            f"Usage section: {has_usage}. Description: {bool(repo_meta.description)}. "
            f"License: {has_license}."
        ),
    )
