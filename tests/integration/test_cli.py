"""CLI tests using typer's CliRunner against a mocked GitHub and LiteLLM."""

import json
import logging
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock, patch

import httpx
import pytest
from typer.testing import CliRunner

from repograde.cli import app
from repograde.config import GitHubConfig
from repograde.providers import GitHubProvider
from repograde.utils.logging import LOGGER_NAME
from tests.fixtures import FULL_NAME, github_handler, make_litellm_response

pytestmark = pytest.mark.integration

runner = CliRunner()


@pytest.fixture(autouse=True)
def _reset_cli_logging() -> Iterator[None]:
    yield
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


@pytest.fixture(autouse=True)
def _mock_github(monkeypatch: pytest.MonkeyPatch) -> None:
    def provider_factory(config: GitHubConfig | None = None) -> GitHubProvider:
        client = httpx.Client(transport=httpx.MockTransport(github_handler()))
        return GitHubProvider(config, client=client)

    monkeypatch.setattr("repograde.pipeline.GitHubProvider", provider_factory)
    monkeypatch.setattr("repograde.cli.GitHubProvider", provider_factory)


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(
        "llm:\n"
        "  provider: gemini\n"
        "  api_key: test-key\n"
        "storage:\n"
        f"  history_dir: {tmp_path / 'history'}\n"
        "  user: tester\n"
    )
    return path


def _invoke(config_file: Path, *args: str, input: str | None = None):
    return runner.invoke(app, ["--quiet", "--config", str(config_file), *args], input=input)


class TestScore:
    """Tests for the score command."""

    def test_json(self, config_file: Path) -> None:
        result = _invoke(config_file, "score", FULL_NAME, "--json")

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["repository"] == FULL_NAME
        assert data["overallScore"] == 95
        assert data["agents"]["testCoverage"]["score"] == 80

    def test_text(self, config_file: Path) -> None:
        result = _invoke(config_file, "score", f"https://github.com/{FULL_NAME}")

        assert result.exit_code == 0
        assert f"{FULL_NAME}: 95/100" in result.stdout
        assert "codeQuality" in result.stdout

    @patch("litellm.completion")
    def test_never_calls_llm(self, mock_completion: MagicMock, config_file: Path) -> None:
        _invoke(config_file, "score", FULL_NAME)

        mock_completion.assert_not_called()

    def test_missing_repository(self, config_file: Path) -> None:
        result = _invoke(config_file, "score", "octo/missing")

        assert result.exit_code == 1

    def test_invalid_target(self, config_file: Path) -> None:
        result = _invoke(config_file, "score", "not a repository")

        assert result.exit_code == 1


class TestAnalyze:
    """Tests for the analyze command."""

    @patch("litellm.completion")
    def test_markdown_report(
        self, mock_completion: MagicMock, config_file: Path, mock_narrative_response: MagicMock
    ) -> None:
        mock_completion.return_value = mock_narrative_response

        result = _invoke(config_file, "analyze", FULL_NAME, "--role", "Recruiter")

        assert result.exit_code == 0
        assert f"# Repository Report: {FULL_NAME}" in result.stdout
        assert "## Overall Score: 95/100" in result.stdout
        assert "| Audience | Recruiter |" in result.stdout

    @patch("litellm.completion")
    def test_json_report_to_file(
        self,
        mock_completion: MagicMock,
        config_file: Path,
        mock_narrative_response: MagicMock,
        tmp_path: Path,
    ) -> None:
        mock_completion.return_value = mock_narrative_response
        target = tmp_path / "reports" / "sample.json"

        result = _invoke(
            config_file, "analyze", FULL_NAME, "--format", "json", "--output", str(target)
        )

        assert result.exit_code == 0
        assert "Report written to:" in result.stdout
        data = json.loads(target.read_text())
        assert data["analysis"]["overallScore"] == 95
        assert data["analysis"]["agentScores"]["codeQuality"] == 100
        assert data["repository"]["full_name"] == FULL_NAME

    @patch("litellm.completion")
    def test_saves_history(
        self, mock_completion: MagicMock, config_file: Path, mock_narrative_response: MagicMock
    ) -> None:
        mock_completion.return_value = mock_narrative_response

        _invoke(config_file, "analyze", FULL_NAME)
        result = _invoke(config_file, "history", "--json")

        items = json.loads(result.stdout)
        assert [item["repoName"] for item in items] == [FULL_NAME]
        assert items[0]["score"] == 95

    @patch("litellm.completion")
    def test_reuses_saved_analysis(
        self, mock_completion: MagicMock, config_file: Path, mock_narrative_response: MagicMock
    ) -> None:
        mock_completion.return_value = mock_narrative_response

        _invoke(config_file, "analyze", FULL_NAME)
        again = _invoke(config_file, "analyze", f"https://github.com/{FULL_NAME}")

        assert again.exit_code == 0
        assert "## Overall Score: 95/100" in again.stdout
        assert mock_completion.call_count == 1

    @patch("litellm.completion")
    def test_no_cache_analyzes_again(
        self, mock_completion: MagicMock, config_file: Path, mock_narrative_response: MagicMock
    ) -> None:
        mock_completion.return_value = mock_narrative_response

        _invoke(config_file, "analyze", FULL_NAME)
        again = _invoke(config_file, "analyze", FULL_NAME, "--no-cache")

        assert again.exit_code == 0
        assert mock_completion.call_count == 2

    @patch("litellm.completion")
    def test_saved_analysis_needs_same_style_and_role(
        self, mock_completion: MagicMock, config_file: Path, mock_narrative_response: MagicMock
    ) -> None:
        mock_completion.return_value = mock_narrative_response

        _invoke(config_file, "analyze", FULL_NAME)
        _invoke(config_file, "analyze", FULL_NAME, "--role", "Mentor")
        _invoke(config_file, "analyze", FULL_NAME, "--role", "Mentor", "--style", "Clarity")
        _invoke(config_file, "analyze", FULL_NAME, "--role", "Mentor", "--style", "Clarity")

        assert mock_completion.call_count == 3

    @patch("litellm.completion")
    def test_unparseable_narrative(self, mock_completion: MagicMock, config_file: Path) -> None:
        mock_completion.return_value = make_litellm_response("not json at all")

        result = _invoke(config_file, "analyze", FULL_NAME)

        assert result.exit_code == 1

    def test_invalid_style(self, config_file: Path) -> None:
        result = _invoke(config_file, "analyze", FULL_NAME, "--style", "Poetic")

        assert result.exit_code == 1

    def test_invalid_format(self, config_file: Path) -> None:
        result = _invoke(config_file, "analyze", FULL_NAME, "--format", "html")

        assert result.exit_code == 1

    def test_missing_api_key(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        for var in ("GEMINI_API_KEY", "GOOGLE_API_KEY"):
            monkeypatch.delenv(var, raising=False)
        path = tmp_path / "nokey.yaml"
        path.write_text(f"storage:\n  history_dir: {tmp_path / 'history'}\n")

        result = _invoke(path, "analyze", FULL_NAME)

        assert result.exit_code == 1


class TestHistory:
    """Tests for the history command."""

    def test_empty(self, config_file: Path) -> None:
        result = _invoke(config_file, "history")

        assert result.exit_code == 0
        assert "No analyses saved yet" in result.stdout

    @patch("litellm.completion")
    def test_delete_and_clear(
        self, mock_completion: MagicMock, config_file: Path, mock_narrative_response: MagicMock
    ) -> None:
        mock_completion.return_value = mock_narrative_response
        _invoke(config_file, "analyze", FULL_NAME)
        item_id = json.loads(_invoke(config_file, "history", "--json").stdout)[0]["id"]

        listed = _invoke(config_file, "history")
        deleted = _invoke(config_file, "history", "--delete", item_id)
        missing = _invoke(config_file, "history", "--delete", item_id)
        cleared = _invoke(config_file, "history", "--clear")

        assert item_id in listed.stdout
        assert f"Deleted {item_id}" in deleted.stdout
        assert missing.exit_code == 1
        assert "History cleared" in cleared.stdout


class TestChat:
    """Tests for the chat command."""

    @patch("litellm.completion")
    def test_chat_session(
        self, mock_completion: MagicMock, config_file: Path, mock_narrative_response: MagicMock
    ) -> None:
        mock_completion.side_effect = [
            mock_narrative_response,
            make_litellm_response("Start by adding unit tests."),
        ]

        result = _invoke(config_file, "chat", FULL_NAME, input="What next?\nexit\n")

        assert result.exit_code == 0
        assert "Mentor chat for octo/sample-app (95/100)" in result.stdout
        assert "Mentor: Start by adding unit tests." in result.stdout
        assert "Goodbye!" in result.stdout
        sent = mock_completion.call_args.kwargs["messages"]
        assert sent[0]["role"] == "system"
        assert sent[-1] == {"role": "user", "content": "What next?"}

    @patch("litellm.completion")
    def test_chat_reuses_history(
        self, mock_completion: MagicMock, config_file: Path, mock_narrative_response: MagicMock
    ) -> None:
        mock_completion.return_value = mock_narrative_response
        _invoke(config_file, "analyze", FULL_NAME)
        mock_completion.reset_mock()

        result = _invoke(config_file, "chat", FULL_NAME, input="quit\n")

        assert result.exit_code == 0
        mock_completion.assert_not_called()

    @patch("litellm.completion")
    def test_end_of_input_leaves(
        self, mock_completion: MagicMock, config_file: Path, mock_narrative_response: MagicMock
    ) -> None:
        mock_completion.return_value = mock_narrative_response

        result = _invoke(config_file, "chat", FULL_NAME, input="")

        assert result.exit_code == 0
        assert "Goodbye!" in result.stdout


class TestRepos:
    """Tests for the repos command."""

    def test_lists_repositories(self, config_file: Path) -> None:
        result = _invoke(config_file, "repos", "octo")

        assert result.exit_code == 0
        assert FULL_NAME in result.stdout
        assert "octo/dotfiles" in result.stdout

    def test_unknown_user(self, config_file: Path) -> None:
        result = _invoke(config_file, "repos", "ghost")

        assert result.exit_code == 1


class TestInit:
    """Tests for the init command."""

    def test_creates_config(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(app, ["init"])

        assert result.exit_code == 0
        assert "repograde configuration initialized" in result.stdout
        assert (tmp_path / ".repograde" / "config.yaml").exists()

    def test_refuses_to_overwrite(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        runner.invoke(app, ["init"])

        again = runner.invoke(app, ["init"])
        forced = runner.invoke(app, ["init", "--force"])

        assert again.exit_code == 1
        assert forced.exit_code == 0


def test_version() -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert result.stdout.startswith("repograde ")


def test_missing_config_file(tmp_path: Path) -> None:
    result = runner.invoke(app, ["--config", str(tmp_path / "missing.yaml"), "history"])

    assert result.exit_code != 0
