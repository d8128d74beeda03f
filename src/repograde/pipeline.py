"""Analysis pipeline orchestrator.

Runs every deterministic stage before the narrative generator is involved:

1. Evidence collection (GitHub provider)
2. Agent scoring (five heuristic agents)
3. Aggregation (fixed-weight overall score)
4. Narrative generation (LLM, prose only)

Stages 1-3 are enough for `repograde score`; stage 4 never changes a number.
"""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from repograde.agents import AgentRegistry, get_registry, setup_default_agents
from repograde.aggregator import aggregate
from repograde.config import LLMConfig, RepogradeConfig
from repograde.llm import LLMClient, build_narrative_request, create_client, request_analysis
from repograde.models.analysis import AGENT_KEYS, AgentResult, AgentScores, Analysis, SummaryStyle
from repograde.models.evidence import Evidence, RepoMeta
from repograde.models.llm_config import LLMConfig as LLMConfigModel
from repograde.models.roles import PresetRole, Role, role_label
from repograde.providers import GitHubProvider
from repograde.stores.cache import AnalysisCache, generate_cache_key

logger = logging.getLogger(__name__)


@dataclass
class PipelineOptions:
    """Options for controlling pipeline execution.

    Attributes:
        style: Summary style for the narrative
        role: Target audience for the narrative
        use_cache: Reuse a cached analysis for the same repository, style and role
        parallel_agents: Evaluate agents on a thread pool
    """

    style: SummaryStyle = SummaryStyle.PROFESSIONAL
    role: Role = PresetRole.STUDENT
    use_cache: bool = True
    parallel_agents: bool = False


@dataclass(frozen=True)
class ScoreCard:
    """Deterministic scores for one evidence snapshot.

    Attributes:
        overall: Aggregated overall score
        results: Agent results keyed by agent key
    """

    overall: int
    results: dict[str, AgentResult] = field(default_factory=dict)

    @property
    def agent_scores(self) -> AgentScores:
        """Per-agent scores."""
        return AgentScores.from_results(self.results)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "overallScore": self.overall,
            "agents": {key: self.results[key].to_dict() for key in AGENT_KEYS},
        }


@dataclass(frozen=True)
class AnalysisReport:
    """A finished analysis together with the repository it describes."""

    repo_meta: RepoMeta
    analysis: Analysis

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "repository": self.repo_meta.to_dict(),
            "analysis": self.analysis.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AnalysisReport":
        """Restore a report from its dictionary form."""
        return cls(
            repo_meta=RepoMeta.from_dict(data["repository"]),
            analysis=Analysis.from_dict(data["analysis"]),
        )


def score_evidence(
    evidence: Evidence,
    registry: AgentRegistry | None = None,
    now: datetime | None = None,
    parallel: bool = False,
) -> ScoreCard:
    """Run all agents and aggregate their scores.

    Args:
        evidence: Repository evidence snapshot
        registry: Agent registry (uses the global default agents if None)
        now: Reference time for recency scoring (defaults to current UTC)
        parallel: Evaluate agents on a thread pool

    Returns:
        ScoreCard with the overall score and every agent result
    """
    if registry is None:
        registry = setup_default_agents(get_registry())

    results = registry.run_all(evidence, now=now, parallel=parallel)
    overall = aggregate(AgentScores.from_results(results))
    logger.info("Overall score for %s: %d/100", evidence.repo_meta.full_name, overall)
    return ScoreCard(overall=overall, results=results)


def to_client_config(config: LLMConfig) -> LLMConfigModel:
    """Convert file-level LLM settings into a validated client configuration.

    Raises:
        ValueError: If the settings are incomplete for the chosen provider
    """
    return LLMConfigModel(
        provider=config.provider,
        model=config.model,
        api_key=config.api_key,
        api_base=config.api_base,
        temperature=config.temperature,
        max_tokens=config.max_tokens,
        enabled=config.enabled,
    )


def cache_key_for(full_name: str, options: PipelineOptions) -> str:
    """Cache key for a repository analyzed with a given style and role."""
    owner, _, repo = full_name.partition("/")
    return f"{generate_cache_key(owner, repo)}-{options.style.value}-{role_label(options.role)}".lower()


class AnalysisPipeline:
    """Orchestrates evidence collection, scoring and narrative generation.

    Usage:
        with AnalysisPipeline(config) as pipeline:
            report = pipeline.run("owner/repo", PipelineOptions())
    """

    def __init__(
        self,
        config: RepogradeConfig | None = None,
        provider: GitHubProvider | None = None,
        client: LLMClient | None = None,
        cache: AnalysisCache | None = None,
        registry: AgentRegistry | None = None,
    ) -> None:
        """Initialize the analysis pipeline.

        Args:
            config: repograde configuration (uses defaults if None)
            provider: Repository data provider (created from config if None)
            client: LLM client (created from config on first use if None)
            cache: Analysis cache (a fresh in-memory cache if None)
            registry: Agent registry (global default agents if None)
        """
        self.config = config or RepogradeConfig()
        self._owns_provider = provider is None
        self.provider = provider or GitHubProvider(self.config.github)
        self._client = client
        self.cache = cache if cache is not None else AnalysisCache()
        self.registry = registry or setup_default_agents(get_registry())

    def close(self) -> None:
        """Release the provider if the pipeline created it."""
        if self._owns_provider:
            self.provider.close()

    def __enter__(self) -> "AnalysisPipeline":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def client(self) -> LLMClient:
        """LLM client, created from configuration on first use.

        Raises:
            ValueError: If the LLM is disabled or misconfigured
        """
        if self._client is None:
            client_config = to_client_config(self.config.llm)
            for warning in client_config.validate():
                logger.warning("LLM config warning: %s", warning)
            self._client = create_client(client_config)
        return self._client

    # =========================================================================
    # Stages
    # =========================================================================

    def collect(self, full_name: str) -> tuple[RepoMeta, Evidence]:
        """Fetch repository evidence."""
        return self.provider.collect_evidence(full_name)

    def score(self, evidence: Evidence, options: PipelineOptions | None = None) -> ScoreCard:
        """Run the deterministic scoring stages."""
        options = options or PipelineOptions()
        return score_evidence(evidence, self.registry, parallel=options.parallel_agents)

    def analyze_evidence(
        self,
        evidence: Evidence,
        options: PipelineOptions | None = None,
    ) -> Analysis:
        """Score evidence and generate the narrative.

        Raises:
            GenerationFailure: If the narrative cannot be generated
        """
        options = options or PipelineOptions()
        card = self.score(evidence, options)
        request = build_narrative_request(
            evidence,
            card.results,
            card.overall,
            style=options.style,
            role=options.role,
        )
        return request_analysis(self.client, request)

    def run(self, full_name: str, options: PipelineOptions | None = None) -> AnalysisReport:
        """Execute the full analysis pipeline.

        Args:
            full_name: Repository as "owner/repo"
            options: Pipeline execution options

        Returns:
            AnalysisReport with repository metadata and the final analysis

        Raises:
            ProviderError: If repository metadata cannot be fetched
            GenerationFailure: If the narrative cannot be generated
        """
        options = options or PipelineOptions()
        key = cache_key_for(full_name, options)

        if options.use_cache:
            cached = self.cache.get(key)
            if cached is not None:
                logger.info("Using cached analysis for %s", full_name)
                return AnalysisReport(repo_meta=cached.repo_meta, analysis=cached.analysis)

        started = datetime.now(UTC)
        logger.info("Starting analysis of %s", full_name)

        repo_meta, evidence = self.collect(full_name)
        analysis = self.analyze_evidence(evidence, options)

        self.cache.set(key, repo_meta, analysis)
        logger.info(
            "Analysis of %s completed in %.1fs",
            full_name,
            (datetime.now(UTC) - started).total_seconds(),
        )
        return AnalysisReport(repo_meta=repo_meta, analysis=analysis)
