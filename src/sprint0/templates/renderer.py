"""Template renderer for assessment reports.

Renders an assembled Report to Markdown using Jinja2 templates, or to JSON.
The proposed decision record can also be rendered as a standalone ADR file.
Identical reports always render identically; the generation timestamp is the
only time-dependent value and can be left out.
"""

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from jinja2 import Environment, PackageLoader, select_autoescape

from sprint0.config import Sprint0Config
from sprint0.models.decision import DecisionRecord
from sprint0.models.report import Report
from sprint0.renderers.filters import format_currency, format_percent, md_cell

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE = "REPORT.md.j2"
ADR_TEMPLATE = "ADR.md.j2"


def format_datetime(dt: datetime | str | None) -> str:
    """Format datetime for display in reports.

    Args:
        dt: Datetime object or ISO string

    Returns:
        Formatted date string
    """
    if dt is None:
        return "N/A"

    if isinstance(dt, str):
        try:
            dt = datetime.fromisoformat(dt)
        except ValueError:
            return dt

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC).strftime("%Y-%m-%d %H:%M:%S UTC")


class ReportRenderer:
    """Renders assessment reports to Markdown or JSON.

    Usage:
        renderer = ReportRenderer(config)
        markdown = renderer.render(report)
    """

    def __init__(self, config: Sprint0Config | None = None) -> None:
        self.config = config

        self._env = Environment(
            loader=PackageLoader("sprint0", "templates"),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
        )

        self._env.filters["format_datetime"] = format_datetime
        self._env.filters["format_currency"] = format_currency
        self._env.filters["format_percent"] = format_percent
        self._env.filters["md_cell"] = md_cell

    def render(
        self,
        report: Report,
        template_name: str = DEFAULT_TEMPLATE,
        include_timestamp: bool = True,
    ) -> str:
        """Render a report to Markdown.

        Args:
            report: Assembled report
            template_name: Template file to use
            include_timestamp: Whether to print the generation time

        Returns:
            Rendered markdown string

        Raises:
            ValueError: If the template is missing or fails to render
        """
        try:
            template = self._env.get_template(template_name)
        except Exception as e:
            logger.error("Failed to load template %s: %s", template_name, e)
            raise ValueError(f"Template not found: {template_name}") from e

        context = self._build_context(report, include_timestamp)

        try:
            rendered = template.render(**context)
            logger.info("Rendered report (%d characters)", len(rendered))
            return rendered
        except Exception as e:
            logger.error("Template rendering failed: %s", e)
            raise ValueError(f"Template rendering failed: {e}") from e

    def _build_context(self, report: Report, include_timestamp: bool) -> dict[str, Any]:
        data = report.to_dict(include_timestamp=include_timestamp)
        return {
            "report_id": data["report_id"],
            "title": data["title"],
            "change_request_lines": report.change_request.strip().splitlines(),
            "change_type": data["change_type"],
            "scope": data["scope"],
            "project_type": data["project_type"],
            "generated_at": data.get("generated_at"),
            "sections": data["sections"],
            "errors": data["errors"],
            "degraded": report.degraded,
            "decision_record": data.get("decision_record"),
        }

    def render_json(self, report: Report, include_timestamp: bool = True) -> str:
        """Render a report as indented JSON."""
        return json.dumps(report.to_dict(include_timestamp=include_timestamp), indent=2) + "\n"

    def render_as(self, report: Report, fmt: str = "markdown", include_timestamp: bool = True) -> str:
        """Render in the named output format (markdown or json)."""
        if fmt == "json":
            return self.render_json(report, include_timestamp=include_timestamp)
        if fmt == "markdown":
            return self.render(report, include_timestamp=include_timestamp)
        raise ValueError(f"Unsupported output format: {fmt}")

    def render_to_file(self, report: Report, output_path: Path, fmt: str = "markdown") -> Path:
        """Render a report and write it to a file.

        Args:
            report: Assembled report
            output_path: Path to write output file
            fmt: Output format (markdown, json)

        Returns:
            Path to written file
        """
        content = self.render_as(report, fmt)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content, encoding="utf-8")
        logger.info("Wrote report to %s", output_path)

        return output_path

    def preview(self, report: Report, max_lines: int = 50) -> str:
        """Generate a truncated preview of the rendered Markdown."""
        full_content = self.render(report)
        lines = full_content.split("\n")

        if len(lines) <= max_lines:
            return full_content

        preview_lines = lines[:max_lines]
        preview_lines.append(f"\n... [{len(lines) - max_lines} more lines] ...")

        return "\n".join(preview_lines)

    def render_decision_record(self, record: DecisionRecord) -> str:
        """Render a decision record as a standalone ADR document."""
        try:
            template = self._env.get_template(ADR_TEMPLATE)
            return template.render(adr=record.to_dict())
        except Exception as e:
            logger.error("ADR rendering failed: %s", e)
            raise ValueError(f"ADR rendering failed: {e}") from e

    def write_decision_record(self, record: DecisionRecord, directory: Path) -> Path:
        """Write a decision record to ``directory/ADR-NNN-slug.md``."""
        output_path = directory / record.filename
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(self.render_decision_record(record), encoding="utf-8")
        logger.info("Wrote %s to %s", record.id, output_path)
        return output_path
