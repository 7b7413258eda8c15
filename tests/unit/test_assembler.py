"""Unit tests for report assembly."""

from typing import Any

import pytest

from sprint0.models import (
    ArchitectureFindings,
    ChangeContext,
    CurrentStateProfile,
    MetricsResult,
    ProjectFamily,
    Report,
    SectionSource,
)
from sprint0.models.report import AnalysisError, BlockType
from sprint0.report import (
    CANONICAL_SECTIONS,
    PIPELINE_ERRORS_SECTION,
    PROJECT_FAMILY_STRATEGIES,
    ReportAssembler,
    format_report_id,
)

CANONICAL_IDS = [
    "executive-summary",
    "solution-discovery",
    "architectural-alignment",
    "data-integration",
    "operational-ownership",
    "technical-debt",
    "business-value",
    "scalability",
    "risk-assessment",
    "recommendations",
]


@pytest.fixture
def assembler() -> ReportAssembler:
    return ReportAssembler()


@pytest.fixture
def express_report(assembler: ReportAssembler, express_artifacts: dict[str, Any]) -> Report:
    return assembler.assemble(**express_artifacts)


def _empty_report(assembler: ReportAssembler, **kwargs: Any) -> Report:
    return assembler.assemble(
        CurrentStateProfile(),
        ChangeContext(),
        [],
        ArchitectureFindings(),
        [],
        MetricsResult(),
        **kwargs,
    )


def _block(report: Report, section_id: str, title: str):
    section = report.section(section_id)
    assert section is not None
    for block in section.blocks:
        if block.title == title:
            return block
    raise AssertionError(f"No block titled {title!r} in {section_id}")


class TestStructure:
    """Tests for canonical section order and ids."""

    def test_canonical_order(self, express_report: Report) -> None:
        assert express_report.section_ids == CANONICAL_IDS
        assert [definition.id for definition in CANONICAL_SECTIONS] == CANONICAL_IDS

    def test_sections_bound_to_one_source(self, express_report: Report) -> None:
        sources = {section.id: section.source for section in express_report.sections}

        assert sources["executive-summary"] == SectionSource.METRICS
        assert sources["solution-discovery"] == SectionSource.PROFILE
        assert sources["data-integration"] == SectionSource.IMPACTS
        assert sources["recommendations"] == SectionSource.RECOMMENDATIONS
        assert sources["risk-assessment"] == SectionSource.FINDINGS

    def test_header_fields(self, express_report: Report) -> None:
        assert express_report.report_id == "EA-0001"
        assert express_report.title == "EA Assessment: Add authentication to the Express API"
        assert express_report.change_type == "feature"
        assert express_report.scope == "medium"
        assert express_report.project_type == "backend-api"
        assert not express_report.degraded

    def test_empty_artifacts_still_produce_every_section(self, assembler: ReportAssembler) -> None:
        report = _empty_report(assembler)

        assert report.section_ids == CANONICAL_IDS
        assert report.title == "EA Assessment"
        data = report.section("data-integration")
        assert data is not None
        assert data.blocks[0].body == "No impacted components identified."
        recommendations = report.section("recommendations")
        assert recommendations is not None
        assert recommendations.blocks[0].body == "No recommendations generated."


class TestReportIds:
    def test_format(self) -> None:
        assert format_report_id(1) == "EA-0001"
        assert format_report_id(42) == "EA-0042"
        assert format_report_id(12345) == "EA-12345"

    def test_explicit_sequence(self, assembler: ReportAssembler) -> None:
        assert _empty_report(assembler, sequence=7).report_id == "EA-0007"

    def test_sequence_below_one_is_clamped(self, assembler: ReportAssembler) -> None:
        assert _empty_report(assembler, sequence=0).report_id == "EA-0001"

    def test_long_title_truncated(self, assembler: ReportAssembler) -> None:
        report = _empty_report(assembler, title="x" * 100)

        subject = report.title.removeprefix("EA Assessment: ")
        assert len(subject) == 80
        assert subject.endswith("...")

    def test_title_from_first_line(self, assembler: ReportAssembler) -> None:
        context = ChangeContext(raw_text="Upgrade Django\nwith extra detail")

        report = assembler.assemble(
            CurrentStateProfile(), context, [], ArchitectureFindings(), [], MetricsResult()
        )

        assert report.title == "EA Assessment: Upgrade Django"


class TestSectionContent:
    """Tests for content interpolated from each artifact."""

    def test_executive_summary(self, express_report: Report) -> None:
        glance = _block(express_report, "executive-summary", "At a Glance")

        assert ["Complexity", "low (1/10)"] in glance.items
        assert ["Estimated duration", "8 weeks"] in glance.items
        assert ["Estimated cost", "$80,000"] in glance.items
        assert ["Expected ROI", "80%"] in glance.items

    def test_backend_strategy(self, express_report: Report) -> None:
        profile_block = _block(express_report, "solution-discovery", "Integration Profile (Backend)")
        endpoints = _block(express_report, "solution-discovery", "Sample Endpoints")

        assert ["Authentication", "JWT"] in profile_block.items
        assert endpoints.items == ["POST /login", "GET /me"]

    def test_data_model_diagram(self, express_report: Report) -> None:
        diagram = _block(express_report, "solution-discovery", "Data Model")

        assert diagram.type == BlockType.DIAGRAM
        assert diagram.diagram_kind == "er"
        assert "USERS ||--o{ SESSIONS" in diagram.body

    def test_impact_matrix(self, express_report: Report) -> None:
        matrix = _block(express_report, "data-integration", "Impact Matrix")

        assert [row[0] for row in matrix.rows] == [
            "Auth Service",
            "Express",
            "API Contract Tests",
            "Build Pipeline",
        ]
        assert matrix.rows[3][5] == "Express"
        assert matrix.rows[3][6] == "package.json"

    def test_alignment(self, express_report: Report) -> None:
        alignment = _block(express_report, "architectural-alignment", "Alignment")

        assert alignment.items == [["Compliance score", "95/100"]]

    def test_empty_findings_sections(self, assembler: ReportAssembler) -> None:
        report = _empty_report(assembler)

        debt = report.section("technical-debt")
        scalability = report.section("scalability")
        assert debt is not None and debt.blocks[0].body == "No technical debt items identified."
        assert scalability is not None
        assert scalability.blocks[0].body == "No scalability concerns identified."

    def test_ownership(self, express_report: Report) -> None:
        owners = _block(express_report, "operational-ownership", "Proposed Owners")

        assert owners.rows[0] == ["Security Team", "sec-1", "Security & Compliance"]
        assert owners.rows[1] == [
            "DevOps Team",
            "sec-1, dx-1",
            "Security & Compliance, Developer Experience",
        ]

    def test_recommendation_details(self, express_report: Report) -> None:
        section = express_report.section("recommendations")
        assert section is not None
        titles = [block.title for block in section.blocks]

        assert "sec-1: Implement Secret Management" in titles
        assert "Recommendation Dependencies" not in titles

    def test_business_value_gantt(self, express_report: Report) -> None:
        gantt = _block(express_report, "business-value", "Implementation Timeline")

        assert gantt.diagram_kind == "gantt"
        assert gantt.body.startswith("gantt")


class TestDegradation:
    """Tests for the pipeline-errors marker section."""

    def test_upstream_errors_append_marker(self, assembler: ReportAssembler) -> None:
        errors = [AnalysisError(component="impact", message="boom")]

        report = _empty_report(assembler, errors=errors)

        assert report.section_ids == CANONICAL_IDS + [PIPELINE_ERRORS_SECTION]
        assert report.degraded
        marker = report.section(PIPELINE_ERRORS_SECTION)
        assert marker is not None
        assert marker.source == SectionSource.PIPELINE
        assert marker.blocks[1].rows == [["impact", "boom", "yes"]]

    def test_failing_builder_degrades_one_section(self, assembler: ReportAssembler) -> None:
        findings = ArchitectureFindings()
        findings.tech_debt = [None]  # type: ignore[list-item]

        report = assembler.assemble(
            CurrentStateProfile(), ChangeContext(), [], findings, [], MetricsResult()
        )

        debt = report.section("technical-debt")
        assert debt is not None
        assert debt.error is not None
        assert debt.blocks[0].body.startswith("Section unavailable:")
        assert report.errors[0].component == "report.technical-debt"
        assert report.section_ids[-1] == PIPELINE_ERRORS_SECTION
        assert report.section("risk-assessment") is not None


class TestStrategies:
    def test_every_family_has_a_strategy(self) -> None:
        assert set(PROJECT_FAMILY_STRATEGIES) == set(ProjectFamily)

    def test_fullstack_combines_frontend_and_backend(self) -> None:
        blocks = PROJECT_FAMILY_STRATEGIES[ProjectFamily.FULLSTACK](CurrentStateProfile())

        assert [block.title for block in blocks] == [
            "Integration Profile (Frontend)",
            "Integration Profile (Backend)",
        ]
