"""repograde CLI interface.

Commands:
- analyze: Score a repository and generate the narrative report
- score: Deterministic scores only (no LLM)
- chat: Ask the mentor about an analyzed repository
- history: List or edit saved analyses
- repos: List a user's recent public repositories
- init: Initialize repograde configuration

Global options:
- --config: Path to configuration file
- --verbose: Enable verbose output with timestamps
- --quiet: Suppress info messages
- --ci: JSON log lines
- --version: Show version and exit
"""

import json
from pathlib import Path
from typing import Annotated

import typer

from repograde import __version__
from repograde.config import RepogradeConfig, create_default_config, load_config
from repograde.llm import GenerationFailure, LLMError, send_message, start_conversation
from repograde.models.analysis import SummaryStyle
from repograde.models.roles import parse_role, role_label
from repograde.pipeline import AnalysisPipeline, AnalysisReport, PipelineOptions, cache_key_for
from repograde.providers import GitHubProvider, ProviderError, resolve_repository
from repograde.stores.history import HistoryStore
from repograde.templates import ReportRenderer
from repograde.utils.logging import configure_from_cli, get_logger

app = typer.Typer(
    name="repograde",
    help="Deterministic GitHub repository evaluator with an LLM-written report",
    add_completion=False,
    no_args_is_help=True,
)

# Global state
_config: RepogradeConfig | None = None
_logger = get_logger()

EXIT_COMMANDS = {"exit", "quit", ":q"}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"repograde {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output with timestamps"),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Suppress info messages (warnings and errors only)"),
    ] = False,
    ci: Annotated[
        bool,
        typer.Option("--ci", help="Enable CI mode with JSON log lines"),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """repograde - GitHub repository evaluator.

    Scores a public repository with five deterministic agents and asks an LLM
    to explain the result for a chosen audience.
    """
    global _config

    configure_from_cli(verbose=verbose, quiet=quiet, ci=ci)

    try:
        _config = load_config(config_path=config)
        if _config.config_path:
            _logger.debug(f"Loaded config from: {_config.config_path}")
    except FileNotFoundError as e:
        _logger.error(str(e))
        raise typer.Exit(1)
    except (ValueError, OSError) as e:
        _logger.error(f"Failed to load config: {e}")
        raise typer.Exit(1)


def _get_config() -> RepogradeConfig:
    return _config if _config is not None else RepogradeConfig()


def _history_store(config: RepogradeConfig) -> HistoryStore:
    return HistoryStore(config.storage.history_path, user=config.storage.user)


def _resolve_or_exit(url: str) -> str:
    try:
        return resolve_repository(url)
    except ValueError as e:
        _logger.error(str(e))
        raise typer.Exit(1)


def _options_or_exit(
    config: RepogradeConfig,
    style: str | None,
    role: str | None,
    use_cache: bool = True,
) -> PipelineOptions:
    try:
        return PipelineOptions(
            style=SummaryStyle.parse(style or config.report.style),
            role=parse_role(role or config.report.role),
            use_cache=use_cache,
        )
    except ValueError as e:
        _logger.error(str(e))
        raise typer.Exit(1)


def _seed_from_history(
    pipeline: AnalysisPipeline,
    store: HistoryStore,
    full_name: str,
    options: PipelineOptions,
) -> None:
    """Offer the saved analysis to the pipeline cache when style and role match."""
    saved = store.latest_for(full_name)
    if saved is None:
        return
    if saved.analysis.summary_style is not options.style or saved.role != role_label(options.role):
        return
    pipeline.cache.set(cache_key_for(full_name, options), saved.repo_meta, saved.analysis)


def _run_analysis(
    config: RepogradeConfig,
    full_name: str,
    options: PipelineOptions,
    store: HistoryStore,
) -> AnalysisReport:
    """Run the full pipeline, mapping failures to exit code 1.

    Unless caching is disabled, a saved analysis with the same style and role
    is reused instead of fetching and generating again.
    """
    try:
        with AnalysisPipeline(config) as pipeline:
            if options.use_cache:
                _seed_from_history(pipeline, store, full_name, options)
            return pipeline.run(full_name, options)
    except ProviderError as e:
        _logger.error(str(e))
    except GenerationFailure as e:
        _logger.error(f"Narrative generation failed: {e}")
        if e.raw_response:
            _logger.debug(f"Raw response: {e.raw_response}")
    except ValueError as e:
        # Misconfigured or disabled LLM
        _logger.error(str(e))
    raise typer.Exit(1)


# =============================================================================
# analyze command
# =============================================================================


@app.command()
def analyze(
    url: Annotated[str, typer.Argument(help="GitHub repository URL or owner/repo")],
    style: Annotated[
        str | None,
        typer.Option("--style", "-s", help="Summary style: Clarity, Naturalness, Professional, Informativeness"),
    ] = None,
    role: Annotated[
        str | None,
        typer.Option("--role", "-r", help="Audience: Student, Mentor, Recruiter, Developer or any custom role"),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the report to this file instead of stdout"),
    ] = None,
    output_format: Annotated[
        str | None,
        typer.Option("--format", "-f", help="Output format: markdown or json"),
    ] = None,
    no_cache: Annotated[
        bool,
        typer.Option("--no-cache", help="Ignore the saved analysis and analyze again"),
    ] = False,
) -> None:
    """Analyze a repository and print the report.

    Exit codes:
        0: Report generated
        1: Repository, configuration or narrative error
    """
    config = _get_config()
    full_name = _resolve_or_exit(url)
    options = _options_or_exit(config, style, role, use_cache=not no_cache)

    fmt = output_format or config.report.format
    if fmt not in {"markdown", "json"}:
        _logger.error(f"Invalid format: {fmt}. Use 'markdown' or 'json'")
        raise typer.Exit(1)

    _logger.info(
        f"Analyzing {full_name} ({options.style.value} style, {role_label(options.role)} role)"
    )
    store = _history_store(config)
    report = _run_analysis(config, full_name, options, store)

    item = store.save(report.repo_meta, report.analysis, role=options.role)
    _logger.debug(f"Saved history entry {item.id}")

    if fmt == "json":
        content = json.dumps(report.to_dict(), indent=2) + "\n"
    else:
        content = ReportRenderer().render(report, role=options.role)

    target = output or (Path(config.report.output) if config.report.output else None)
    if target is not None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        typer.echo(f"Report written to: {target}")
    else:
        typer.echo(content, nl=False)


# =============================================================================
# score command
# =============================================================================


@app.command()
def score(
    url: Annotated[str, typer.Argument(help="GitHub repository URL or owner/repo")],
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output results as JSON"),
    ] = False,
) -> None:
    """Compute the deterministic scores without calling the LLM."""
    config = _get_config()
    full_name = _resolve_or_exit(url)

    try:
        with AnalysisPipeline(config) as pipeline:
            repo_meta, evidence = pipeline.collect(full_name)
            card = pipeline.score(evidence)
    except ProviderError as e:
        _logger.error(str(e))
        raise typer.Exit(1)

    if json_output:
        payload = {"repository": repo_meta.full_name, **card.to_dict()}
        typer.echo(json.dumps(payload, indent=2))
        return

    typer.echo(f"\n{repo_meta.full_name}: {card.overall}/100\n")
    for key, result in card.results.items():
        typer.echo(f"  {key:<14} {result.score:>3}  {result.evidence}")
    typer.echo()


# =============================================================================
# chat command
# =============================================================================


@app.command()
def chat(
    url: Annotated[str, typer.Argument(help="GitHub repository URL or owner/repo")],
    role: Annotated[
        str | None,
        typer.Option("--role", "-r", help="Audience used if a fresh analysis is needed"),
    ] = None,
) -> None:
    """Chat with the mentor about an analyzed repository.

    Reuses the saved analysis from history when there is one. Type 'exit' to
    leave.
    """
    config = _get_config()
    full_name = _resolve_or_exit(url)
    store = _history_store(config)

    saved = store.latest_for(full_name)
    if saved is not None:
        _logger.info(f"Using saved analysis from {saved.timestamp:%Y-%m-%d %H:%M}")
        repo_meta, analysis = saved.repo_meta, saved.analysis
    else:
        options = _options_or_exit(config, None, role)
        report = _run_analysis(config, full_name, options, store)
        store.save(report.repo_meta, report.analysis, role=options.role)
        repo_meta, analysis = report.repo_meta, report.analysis

    try:
        with AnalysisPipeline(config) as pipeline:
            client = pipeline.client
    except ValueError as e:
        _logger.error(str(e))
        raise typer.Exit(1)

    conversation = start_conversation(repo_meta, analysis)
    typer.echo(f"\nMentor chat for {repo_meta.full_name} ({analysis.overall_score}/100). Type 'exit' to leave.\n")

    while True:
        try:
            message = typer.prompt("You")
        except (typer.Abort, EOFError):
            break
        if message.strip().lower() in EXIT_COMMANDS:
            break
        try:
            conversation, reply = send_message(client, conversation, message)
        except LLMError as e:
            _logger.error(f"Mentor reply failed: {e}")
            continue
        typer.echo(f"\nMentor: {reply}\n")

    typer.echo("Goodbye!")


# =============================================================================
# history command
# =============================================================================


@app.command()
def history(
    clear: Annotated[
        bool,
        typer.Option("--clear", help="Delete the whole history"),
    ] = False,
    delete: Annotated[
        str | None,
        typer.Option("--delete", help="Delete one entry by id"),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output entries as JSON"),
    ] = False,
) -> None:
    """List or edit saved analyses."""
    store = _history_store(_get_config())

    if clear:
        store.clear()
        typer.echo("History cleared")
        return

    if delete:
        if not store.delete(delete):
            _logger.error(f"No history entry with id {delete}")
            raise typer.Exit(1)
        typer.echo(f"Deleted {delete}")
        return

    items = store.list()
    if json_output:
        typer.echo(json.dumps([item.to_dict() for item in items], indent=2))
        return

    if not items:
        typer.echo("No analyses saved yet")
        return

    for item in items:
        typer.echo(f"{item.id}  {item.score:>3}/100  {item.timestamp:%Y-%m-%d %H:%M}  {item.repo_name}")


# =============================================================================
# repos command
# =============================================================================


@app.command()
def repos(
    username: Annotated[str, typer.Argument(help="GitHub username")],
) -> None:
    """List a user's recently updated public repositories."""
    config = _get_config()
    try:
        with GitHubProvider(config.github) as provider:
            repositories = provider.fetch_user_repositories(username)
    except ProviderError as e:
        _logger.error(str(e))
        raise typer.Exit(1)

    if not repositories:
        typer.echo(f"No public repositories for {username}")
        return

    for repo in repositories:
        language = repo.get("language") or "-"
        stars = repo.get("stargazers_count") or 0
        typer.echo(f"{repo['full_name']:<40} {language:<12} {stars:>6}*  {repo['html_url']}")


# =============================================================================
# init command
# =============================================================================


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite existing config"),
    ] = False,
) -> None:
    """Initialize repograde configuration in ./.repograde/config.yaml."""
    config_dir = Path(".repograde")
    config_file = config_dir / "config.yaml"

    if config_file.exists() and not force:
        _logger.error(f"Config already exists: {config_file}")
        _logger.info("Use --force to overwrite")
        raise typer.Exit(1)

    config_dir.mkdir(exist_ok=True)
    config_file.write_text(create_default_config())
    _logger.info(f"Created config: {config_file}")

    typer.echo("repograde configuration initialized")
    typer.echo(f"   Config: {config_file}")


if __name__ == "__main__":
    app()
