"""Score aggregator.

Combines the five agent scores into one overall score with a fixed-weight
linear formula:

    overall = round( 0.25*codeQuality + 0.20*documentation + 0.15*commitHealth
                   + 0.15*testCoverage + 0.15*techStack + 0.10*80 )

The 0.10*80 term is a constant real-world applicability baseline (always 8).
It is not an agent and carries no evidence.

The sum is computed in integer hundredths and rounded half-up, so the result
is exact and identical across platforms and runs.
"""

import logging

from repograde.models.analysis import AGENT_KEYS, AgentScores

logger = logging.getLogger(__name__)

# Weights in percent, keyed by agent key
WEIGHTS: dict[str, int] = {
    "codeQuality": 25,
    "documentation": 20,
    "commitHealth": 15,
    "testCoverage": 15,
    "techStack": 15,
}

APPLICABILITY_WEIGHT = 10
APPLICABILITY_BASELINE = 80

MIN_SCORE = 0
MAX_SCORE = 100

FORMULA = (
    "Final Score = (0.25 * Code Quality) + (0.20 * Documentation) + "
    "(0.15 * Commit) + (0.15 * Test Coverage) + (0.15 * Tech Stack) + "
    "(0.10 * 80) [Base Real-world Applicability Score], rounded to the nearest integer"
)


def clamp_score(key: str, value: int) -> int:
    """Clamp an agent score to [0, 100], logging when clamping was needed."""
    if value < MIN_SCORE or value > MAX_SCORE:
        clamped = max(MIN_SCORE, min(MAX_SCORE, value))
        logger.warning(
            "Agent score out of range: %s=%d, clamped to %d", key, value, clamped
        )
        return clamped
    return value


def aggregate(scores: AgentScores) -> int:
    """Compute the overall score.

    Args:
        scores: Per-agent scores

    Returns:
        Overall score in [0, 100]
    """
    values = scores.to_dict()
    total = sum(WEIGHTS[key] * clamp_score(key, values[key]) for key in AGENT_KEYS)
    total += APPLICABILITY_WEIGHT * APPLICABILITY_BASELINE

    # total is in hundredths; add half and floor for round-half-up
    return (total + 50) // 100
