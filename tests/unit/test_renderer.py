"""Unit tests for template renderer."""

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest

from sprint0.models import (
    ArchitectureFindings,
    ChangeContext,
    CurrentStateProfile,
    MetricsResult,
    Report,
)
from sprint0.models.report import AnalysisError
from sprint0.report import ReportAssembler
from sprint0.templates import ReportRenderer, format_datetime


@pytest.fixture
def renderer() -> ReportRenderer:
    """Create a renderer instance."""
    return ReportRenderer()


@pytest.fixture
def express_report(express_artifacts: dict[str, Any]) -> Report:
    """Assembled report for the Express authentication scenario."""
    report = ReportAssembler().assemble(**express_artifacts)
    report.generated_at = datetime(2024, 1, 15, 12, 0, 0, tzinfo=UTC)
    return report


def _empty_report(errors: list[AnalysisError] | None = None) -> Report:
    return ReportAssembler().assemble(
        CurrentStateProfile(),
        ChangeContext(),
        [],
        ArchitectureFindings(),
        [],
        MetricsResult(),
        errors=errors,
    )


class TestReportRenderer:
    """Tests for Markdown rendering."""

    def test_render_basic(self, renderer: ReportRenderer, express_report: Report) -> None:
        """Test header, change request and table of contents."""
        content = renderer.render(express_report)

        assert content.startswith("# EA Assessment: Add authentication to the Express API\n")
        assert "| Report ID | EA-0001 |" in content
        assert "| Generated | 2024-01-15 12:00:00 UTC |" in content
        assert "| Project Type | backend-api |" in content
        assert "> Add authentication to the Express API" in content
        assert "## Table of Contents" in content
        assert "1. [Executive Summary](#executive-summary)" in content
        assert content.rstrip().endswith("*Generated by Sprint0.*")

    def test_render_sections_in_order(self, renderer: ReportRenderer, express_report: Report) -> None:
        """Test numbered section headings and anchors."""
        content = renderer.render(express_report)

        assert '<a id="executive-summary"></a>' in content
        first = content.index("## 1. Executive Summary")
        last = content.index("## 10. Recommendations")
        assert first < content.index("## 4. Data & Integration") < last

    def test_render_blocks(self, renderer: ReportRenderer, express_report: Report) -> None:
        """Test key-value, table and diagram blocks."""
        content = renderer.render(express_report)

        assert "### At a Glance" in content
        assert "- **Complexity:** low (1/10)" in content
        assert "| Component | Kind | Change Type |" in content
        assert "| Auth Service | direct | API |" in content
        assert "```mermaid\nerDiagram" in content
        assert "```mermaid\ngantt" in content

    def test_render_without_timestamp_is_deterministic(
        self, renderer: ReportRenderer, express_artifacts: dict[str, Any]
    ) -> None:
        """Test that identical reports render identically."""
        first = ReportAssembler().assemble(**express_artifacts)
        second = ReportAssembler().assemble(**express_artifacts)

        rendered_first = renderer.render(first, include_timestamp=False)
        rendered_second = renderer.render(second, include_timestamp=False)

        assert rendered_first == rendered_second
        assert "| Generated |" not in rendered_first

    def test_render_empty_change_request(self, renderer: ReportRenderer) -> None:
        """Test placeholder for an empty change request."""
        content = renderer.render(_empty_report())

        assert content.startswith("# EA Assessment\n")
        assert "> _No change request text provided._" in content
        assert "No impacted components identified." in content

    def test_render_degraded_notice(self, renderer: ReportRenderer) -> None:
        """Test that degraded reports are flagged."""
        report = _empty_report(errors=[AnalysisError(component="impact", message="boom")])

        content = renderer.render(report)

        assert "**Partial assessment:** 1 stage error(s)" in content
        assert "## 11. Pipeline Errors" in content
        assert "| impact | boom | yes |" in content

    def test_template_not_found(self, renderer: ReportRenderer, express_report: Report) -> None:
        """Test error for a missing template."""
        with pytest.raises(ValueError, match="Template not found"):
            renderer.render(express_report, template_name="MISSING.md.j2")

    def test_preview(self, renderer: ReportRenderer, express_report: Report) -> None:
        """Test truncated preview."""
        preview = renderer.preview(express_report, max_lines=5)

        assert preview.startswith("# EA Assessment")
        assert "more lines] ..." in preview


class TestJsonAndFiles:
    """Tests for JSON rendering and file output."""

    def test_render_json(self, renderer: ReportRenderer, express_report: Report) -> None:
        data = json.loads(renderer.render_json(express_report))

        assert data["report_id"] == "EA-0001"
        assert data["generated_at"] == "2024-01-15T12:00:00+00:00"
        assert [s["id"] for s in data["sections"]][0] == "executive-summary"

    def test_render_json_without_timestamp(self, renderer: ReportRenderer, express_report: Report) -> None:
        data = json.loads(renderer.render_json(express_report, include_timestamp=False))

        assert "generated_at" not in data

    def test_render_as_unsupported(self, renderer: ReportRenderer, express_report: Report) -> None:
        with pytest.raises(ValueError, match="Unsupported output format: html"):
            renderer.render_as(express_report, "html")

    def test_render_to_file(
        self, renderer: ReportRenderer, express_report: Report, tmp_path: Path
    ) -> None:
        """Test writing nested output paths."""
        output = tmp_path / "docs" / "reports" / "SPRINT0.md"

        written = renderer.render_to_file(express_report, output)

        assert written == output
        assert output.read_text(encoding="utf-8").startswith("# EA Assessment")

    def test_render_json_to_file(
        self, renderer: ReportRenderer, express_report: Report, tmp_path: Path
    ) -> None:
        output = tmp_path / "report.json"

        renderer.render_to_file(express_report, output, fmt="json")

        assert json.loads(output.read_text(encoding="utf-8"))["title"].startswith("EA Assessment")


class TestFormatDatetime:
    """Tests for the format_datetime filter."""

    def test_none(self) -> None:
        assert format_datetime(None) == "N/A"

    def test_aware_datetime(self) -> None:
        assert format_datetime(datetime(2024, 1, 15, 12, 0, tzinfo=UTC)) == "2024-01-15 12:00:00 UTC"

    def test_naive_datetime_treated_as_utc(self) -> None:
        assert format_datetime(datetime(2024, 1, 15, 12, 0)) == "2024-01-15 12:00:00 UTC"

    def test_iso_string(self) -> None:
        assert format_datetime("2024-01-15T12:00:00+00:00") == "2024-01-15 12:00:00 UTC"

    def test_invalid_string_passthrough(self) -> None:
        assert format_datetime("yesterday") == "yesterday"


class TestDecisionRecordRendering:
    """Tests for the ADR appendix and standalone ADR documents."""

    def test_report_appendix(self, renderer: ReportRenderer, express_report: Report) -> None:
        content = renderer.render(express_report)

        assert "## ADR-001: Add authentication to the Express API" in content
        assert "### Status\n\nProposed" in content
        assert "- sec-1: Implement Secret Management" in content
        assert content.index("## ADR-001") > content.index("## 10. Recommendations")

    def test_standalone_document(self, renderer: ReportRenderer, express_report: Report) -> None:
        assert express_report.decision_record is not None

        content = renderer.render_decision_record(express_report.decision_record)

        assert content.startswith("# ADR-001: Add authentication to the Express API\n")
        assert "## Consequences" in content
        assert "### Implementation Strategy" in content
        assert "1. **Do Nothing**: Leaves the change request unaddressed" in content

    def test_empty_record_placeholders(self, renderer: ReportRenderer) -> None:
        record = _empty_report().decision_record
        assert record is not None

        content = renderer.render_decision_record(record)

        assert "### Constraints\n\n- None identified" in content
        assert "- None registered" in content

    def test_write_decision_record(
        self, renderer: ReportRenderer, express_report: Report, tmp_path: Path
    ) -> None:
        assert express_report.decision_record is not None

        written = renderer.write_decision_record(express_report.decision_record, tmp_path / "adr")

        assert written == tmp_path / "adr" / "ADR-001-add-authentication-to-the-expr.md"
        assert written.read_text(encoding="utf-8").startswith("# ADR-001")
