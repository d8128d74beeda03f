"""repograde - Deterministic GitHub repository grading.

repograde evaluates a public repository and produces an auditable quality
score plus qualitative feedback. Five heuristic agents inspect the repository
structure, documentation, commit history, test presence and dependency
tooling; their scores are combined by a fixed-weight formula, and only then
is an LLM asked to write the narrative around those numbers.

Core principles:
- Deterministic-First: every number is computed locally before any LLM call
- Reproducibility: same evidence produces the same scores, bit for bit
- LLM output is prose only: numeric fields returned by the model are discarded
- Graceful degradation: missing evidence lowers a score, it never fails a run
"""

__version__ = "0.1.0"
__author__ = "repograde Contributors"
