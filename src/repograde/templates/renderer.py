"""Report renderer.

Renders an AnalysisReport to markdown using Jinja2 templates. Output is
deterministic: the same report always renders to the same text, apart from
the optional generation timestamp.
"""

import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from jinja2 import Environment, PackageLoader, TemplateError, select_autoescape

from repograde.aggregator import FORMULA, WEIGHTS
from repograde.models.analysis import AGENT_KEYS
from repograde.models.roles import Role, role_label
from repograde.pipeline import AnalysisReport

logger = logging.getLogger(__name__)

AGENT_TITLES: dict[str, str] = {
    "codeQuality": "Code Quality",
    "documentation": "Documentation",
    "commitHealth": "Commit Health",
    "testCoverage": "Test Coverage",
    "techStack": "Tech Stack",
}


def format_datetime(dt: datetime | str | None) -> str:
    """Format a datetime or ISO string for display.

    Args:
        dt: Datetime object or ISO string

    Returns:
        Formatted date string
    """
    if dt is None:
        return "N/A"

    if isinstance(dt, str):
        try:
            dt = datetime.fromisoformat(dt.replace("Z", "+00:00"))
        except ValueError:
            return dt

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC).strftime("%Y-%m-%d %H:%M UTC")


def score_bar(score: int, width: int = 20) -> str:
    """Render a score as a fixed-width text bar."""
    filled = round(max(0, min(100, score)) * width / 100)
    return "#" * filled + "-" * (width - filled)


class ReportRenderer:
    """Renders analysis reports to markdown.

    Usage:
        renderer = ReportRenderer()
        markdown = renderer.render(report, role=PresetRole.STUDENT)
    """

    def __init__(self) -> None:
        self._env = Environment(
            loader=PackageLoader("repograde", "templates"),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )
        self._env.filters["format_datetime"] = format_datetime
        self._env.filters["score_bar"] = score_bar

    def render(
        self,
        report: AnalysisReport,
        role: Role | None = None,
        generated_at: datetime | None = None,
        template_name: str = "REPORT.md.j2",
    ) -> str:
        """Render a report to markdown.

        Args:
            report: AnalysisReport from the pipeline
            role: Audience the narrative was written for
            generated_at: Timestamp to print (omitted if None)
            template_name: Template file to use

        Returns:
            Rendered markdown string

        Raises:
            ValueError: If the template cannot be loaded or rendered
        """
        try:
            template = self._env.get_template(template_name)
        except TemplateError as e:
            raise ValueError(f"Template not found: {template_name}") from e

        context = self._build_context(report, role, generated_at)

        try:
            rendered = template.render(**context)
        except TemplateError as e:
            raise ValueError(f"Template rendering failed: {e}") from e

        logger.debug("Rendered report (%d characters)", len(rendered))
        return rendered

    def _build_context(
        self,
        report: AnalysisReport,
        role: Role | None,
        generated_at: datetime | None,
    ) -> dict[str, Any]:
        analysis = report.analysis
        scores = analysis.agent_scores
        evidence = analysis.agent_evidence
        return {
            "repo": report.repo_meta,
            "overall_score": analysis.overall_score,
            "agents": [
                {
                    "key": key,
                    "title": AGENT_TITLES[key],
                    "weight": WEIGHTS[key],
                    "score": scores[key],
                    "evidence": evidence[key],
                }
                for key in AGENT_KEYS
            ],
            "formula": FORMULA,
            "summary": analysis.summary,
            "summary_style": analysis.summary_style.value if analysis.summary_style else None,
            "role": role_label(role) if role is not None else None,
            "strengths": list(analysis.strengths),
            "weaknesses": list(analysis.weaknesses),
            "roadmap": [item.to_dict() for item in analysis.roadmap],
            "generated_at": generated_at,
        }

    def render_to_file(
        self,
        report: AnalysisReport,
        output_path: Path,
        role: Role | None = None,
        generated_at: datetime | None = None,
    ) -> Path:
        """Render a report and write it to a file.

        Returns:
            Path to written file
        """
        content = self.render(report, role=role, generated_at=generated_at)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content, encoding="utf-8")
        logger.info("Wrote report to %s", output_path)
        return output_path
