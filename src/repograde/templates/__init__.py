"""repograde report rendering.

Jinja2-based markdown rendering with deterministic output.
"""

from repograde.templates.renderer import ReportRenderer

__all__ = ["ReportRenderer"]
