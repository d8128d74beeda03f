"""End-to-end pipeline tests: mocked GitHub transport, patched LiteLLM."""

import json
from unittest.mock import MagicMock, patch

import pytest

from repograde.config import LLMConfig, RepogradeConfig
from repograde.llm import GenerationFailure, LLMClient
from repograde.models.analysis import SummaryStyle
from repograde.models.llm_config import LLMConfig as ClientConfig
from repograde.models.roles import CustomRole, PresetRole
from repograde.pipeline import AnalysisPipeline, PipelineOptions
from repograde.providers import GitHubProvider, RepositoryNotFoundError
from repograde.stores.cache import AnalysisCache
from tests.fixtures import FULL_NAME, make_litellm_response

pytestmark = pytest.mark.integration


@pytest.fixture
def llm_client() -> LLMClient:
    return LLMClient(ClientConfig(provider="gemini", model="gemini-2.5-flash", api_key="test-key"))


@pytest.fixture
def pipeline(github_provider: GitHubProvider, llm_client: LLMClient) -> AnalysisPipeline:
    return AnalysisPipeline(provider=github_provider, client=llm_client)


class TestRun:
    """Tests for AnalysisPipeline.run."""

    @patch("litellm.completion")
    def test_scores_come_from_agents(
        self,
        mock_completion: MagicMock,
        pipeline: AnalysisPipeline,
        mock_narrative_response: MagicMock,
    ) -> None:
        mock_completion.return_value = mock_narrative_response

        report = pipeline.run(FULL_NAME)

        analysis = report.analysis
        assert report.repo_meta.full_name == FULL_NAME
        assert analysis.overall_score == 95
        assert analysis.agent_scores.to_dict() == {
            "codeQuality": 100,
            "documentation": 100,
            "commitHealth": 100,
            "testCoverage": 80,
            "techStack": 100,
        }
        assert analysis.summary == "A tidy TypeScript service with solid delivery habits."
        assert len(analysis.roadmap) == 5
        assert analysis.summary_style is SummaryStyle.PROFESSIONAL

    @patch("litellm.completion")
    def test_prompt_carries_local_scores_and_role(
        self,
        mock_completion: MagicMock,
        pipeline: AnalysisPipeline,
        mock_narrative_response: MagicMock,
    ) -> None:
        mock_completion.return_value = mock_narrative_response
        options = PipelineOptions(style=SummaryStyle.CLARITY, role=CustomRole("Hiring Manager"))

        pipeline.run(FULL_NAME, options)

        kwargs = mock_completion.call_args.kwargs
        prompt = kwargs["messages"][-1]["content"]
        assert "95" in prompt
        assert "Hiring Manager" in prompt
        assert kwargs["temperature"] == 0
        assert kwargs["response_format"]["type"] == "json_object"

    @patch("litellm.completion")
    def test_cache_hit_skips_everything(
        self,
        mock_completion: MagicMock,
        pipeline: AnalysisPipeline,
        mock_narrative_response: MagicMock,
    ) -> None:
        mock_completion.return_value = mock_narrative_response

        first = pipeline.run(FULL_NAME)
        second = pipeline.run("Octo/Sample-App")

        assert mock_completion.call_count == 1
        assert second == first
        assert len(pipeline.cache) == 1

    @patch("litellm.completion")
    def test_cache_keyed_by_style_and_role(
        self,
        mock_completion: MagicMock,
        pipeline: AnalysisPipeline,
        mock_narrative_response: MagicMock,
    ) -> None:
        mock_completion.return_value = mock_narrative_response

        pipeline.run(FULL_NAME)
        pipeline.run(FULL_NAME, PipelineOptions(role=PresetRole.RECRUITER))
        pipeline.run(FULL_NAME, PipelineOptions(role=PresetRole.RECRUITER, use_cache=False))

        assert mock_completion.call_count == 3
        assert len(pipeline.cache) == 2

    @patch("litellm.completion")
    def test_shared_cache_across_pipelines(
        self,
        mock_completion: MagicMock,
        github_provider: GitHubProvider,
        llm_client: LLMClient,
        mock_narrative_response: MagicMock,
    ) -> None:
        mock_completion.return_value = mock_narrative_response
        cache = AnalysisCache()

        AnalysisPipeline(provider=github_provider, client=llm_client, cache=cache).run(FULL_NAME)
        AnalysisPipeline(provider=github_provider, client=llm_client, cache=cache).run(FULL_NAME)

        assert mock_completion.call_count == 1

    @patch("litellm.completion")
    def test_invalid_narrative_is_not_cached(
        self,
        mock_completion: MagicMock,
        pipeline: AnalysisPipeline,
    ) -> None:
        mock_completion.return_value = make_litellm_response("I cannot help with that.")

        with pytest.raises(GenerationFailure):
            pipeline.run(FULL_NAME)

        assert len(pipeline.cache) == 0

    def test_missing_repository(self, pipeline: AnalysisPipeline) -> None:
        with pytest.raises(RepositoryNotFoundError):
            pipeline.run("octo/missing")


class TestScoringStages:
    """Tests for the deterministic stages on their own."""

    def test_collect_and_score_without_llm(self, github_provider: GitHubProvider) -> None:
        pipeline = AnalysisPipeline(provider=github_provider)

        repo_meta, evidence = pipeline.collect(FULL_NAME)
        card = pipeline.score(evidence)

        assert repo_meta.license == "MIT License"
        assert card.overall == 95
        assert json.loads(json.dumps(card.to_dict()))["overallScore"] == 95

    def test_client_built_lazily_from_config(self, github_provider: GitHubProvider) -> None:
        config = RepogradeConfig(llm=LLMConfig(provider="openai", model="gpt-4o-mini", api_key="sk-test"))
        pipeline = AnalysisPipeline(config, provider=github_provider)

        assert pipeline.client.config.get_litellm_model_name() == "openai/gpt-4o-mini"
        assert pipeline.client is pipeline.client

    def test_disabled_llm_raises_on_first_use(self, github_provider: GitHubProvider) -> None:
        config = RepogradeConfig(llm=LLMConfig(api_key="k", enabled=False))
        pipeline = AnalysisPipeline(config, provider=github_provider)

        with pytest.raises(ValueError, match="disabled"):
            _ = pipeline.client

    def test_injected_provider_is_not_closed(self, github_provider: GitHubProvider) -> None:
        with AnalysisPipeline(provider=github_provider):
            pass

        assert github_provider.fetch_repo_metadata(FULL_NAME).full_name == FULL_NAME
