"""Report assembly.

Composes the pipeline artifacts into the canonical, ordered section tree.
Each section is bound to exactly one upstream artifact and only interpolates
its fields; no scoring or classification happens here.

Canonical sections:
    executive-summary        <- metrics
    solution-discovery       <- profile
    architectural-alignment  <- findings
    data-integration         <- impacts
    operational-ownership    <- recommendations
    technical-debt           <- findings
    business-value           <- metrics
    scalability              <- findings
    risk-assessment          <- findings
    recommendations          <- recommendations

A proposed architecture decision record (ADR) travels with the report,
numbered from the same per-run sequence. A ``pipeline-errors`` marker
section is appended whenever any stage (or a section builder) degraded.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from sprint0.models.change import ChangeContext
from sprint0.models.findings import ArchitectureFindings
from sprint0.models.impact import ImpactItem
from sprint0.models.metrics import MetricsResult
from sprint0.models.profile import UNKNOWN, CurrentStateProfile, ProjectFamily, TechType
from sprint0.models.recommendation import Recommendation
from sprint0.models.report import (
    AnalysisError,
    ContentBlock,
    Report,
    ReportSection,
    SectionSource,
)
from sprint0.renderers.filters import format_currency, format_percent, pluralize
from sprint0.report.decisions import DecisionRecordBuilder
from sprint0.report.diagrams import MermaidGenerator

logger = logging.getLogger(__name__)

PIPELINE_ERRORS_SECTION = "pipeline-errors"
MAX_TITLE_LENGTH = 80
MAX_ENDPOINTS_SHOWN = 10
MAX_EVIDENCE_SHOWN = 3


@dataclass(frozen=True)
class SectionSpec:
    """A canonical section and the artifact it is built from."""

    id: str
    title: str
    source: SectionSource


CANONICAL_SECTIONS: list[SectionSpec] = [
    SectionSpec("executive-summary", "Executive Summary", SectionSource.METRICS),
    SectionSpec("solution-discovery", "Solution Discovery", SectionSource.PROFILE),
    SectionSpec("architectural-alignment", "Architectural Alignment", SectionSource.FINDINGS),
    SectionSpec("data-integration", "Data & Integration", SectionSource.IMPACTS),
    SectionSpec("operational-ownership", "Operational Ownership", SectionSource.RECOMMENDATIONS),
    SectionSpec("technical-debt", "Technical Debt", SectionSource.FINDINGS),
    SectionSpec("business-value", "Business Value", SectionSource.METRICS),
    SectionSpec("scalability", "Scalability", SectionSource.FINDINGS),
    SectionSpec("risk-assessment", "Risk Assessment", SectionSource.FINDINGS),
    SectionSpec("recommendations", "Recommendations", SectionSource.RECOMMENDATIONS),
]


def format_report_id(sequence: int) -> str:
    """Report id for an explicit per-run sequence number (e.g., EA-0001)."""
    return f"EA-{sequence:04d}"


# =============================================================================
# Integration-profile strategies (one per project family)
# =============================================================================


def _frontend_profile(profile: CurrentStateProfile) -> list[ContentBlock]:
    return [
        ContentBlock.key_values(
            [
                ("Frameworks", ", ".join(profile.stack_names(TechType.FRAMEWORK)) or UNKNOWN),
                ("Build tools", ", ".join(profile.stack_names(TechType.BUILD_TOOL)) or UNKNOWN),
                ("UI libraries", ", ".join(profile.dependencies.ui) or "none"),
                ("Backend APIs consumed", ", ".join(profile.dependencies.api) or "none"),
            ],
            title="Integration Profile (Frontend)",
        )
    ]


def _backend_profile(profile: CurrentStateProfile) -> list[ContentBlock]:
    blocks = [
        ContentBlock.key_values(
            [
                ("Endpoints", len(profile.apis.endpoints)),
                ("Authentication", profile.apis.authentication),
                ("Data store", profile.data.store_type),
                ("API libraries", ", ".join(profile.dependencies.api) or "none"),
            ],
            title="Integration Profile (Backend)",
        )
    ]
    if profile.apis.endpoints:
        blocks.append(
            ContentBlock.bullets(
                list(profile.apis.endpoints[:MAX_ENDPOINTS_SHOWN]), title="Sample Endpoints"
            )
        )
    return blocks


def _fullstack_profile(profile: CurrentStateProfile) -> list[ContentBlock]:
    return _frontend_profile(profile) + _backend_profile(profile)


def _mobile_profile(profile: CurrentStateProfile) -> list[ContentBlock]:
    return [
        ContentBlock.key_values(
            [
                ("Platform", profile.project_type.value),
                ("UI libraries", ", ".join(profile.dependencies.ui) or "none"),
                ("Remote APIs", ", ".join(profile.dependencies.api) or "none"),
                ("Local storage", ", ".join(profile.dependencies.data) or "none"),
            ],
            title="Integration Profile (Mobile)",
        )
    ]


def _data_science_profile(profile: CurrentStateProfile) -> list[ContentBlock]:
    return [
        ContentBlock.key_values(
            [
                ("Languages", ", ".join(profile.stack_names(TechType.LANGUAGE)) or UNKNOWN),
                ("Data libraries", ", ".join(profile.dependencies.data) or "none"),
                ("Core libraries", ", ".join(profile.dependencies.core) or "none"),
                ("Data entities", len(profile.data.entities)),
            ],
            title="Integration Profile (Data Science)",
        )
    ]


def _blockchain_profile(profile: CurrentStateProfile) -> list[ContentBlock]:
    return [
        ContentBlock.key_values(
            [
                ("Frameworks", ", ".join(profile.stack_names(TechType.FRAMEWORK)) or UNKNOWN),
                ("Core libraries", ", ".join(profile.dependencies.core) or "none"),
                ("Frontend libraries", ", ".join(profile.dependencies.ui) or "none"),
            ],
            title="Integration Profile (Blockchain)",
        )
    ]


def _infrastructure_profile(profile: CurrentStateProfile) -> list[ContentBlock]:
    return [
        ContentBlock.key_values(
            [
                ("Cloud", ", ".join(profile.stack_names(TechType.CLOUD)) or UNKNOWN),
                ("Containers", ", ".join(profile.stack_names(TechType.CONTAINER)) or "none"),
                (
                    "Infrastructure as code",
                    ", ".join(profile.stack_names(TechType.INFRASTRUCTURE)) or "none",
                ),
                ("CI platform", profile.quality.ci_platform),
            ],
            title="Integration Profile (Infrastructure)",
        )
    ]


def _general_profile(profile: CurrentStateProfile) -> list[ContentBlock]:
    languages = ", ".join(f"{ext} ({count})" for ext, count in profile.languages) or UNKNOWN
    return [
        ContentBlock.key_values(
            [
                ("File types", languages),
                ("Dependencies", len(profile.dependency_names)),
            ],
            title="Integration Profile",
        )
    ]


PROJECT_FAMILY_STRATEGIES: dict[ProjectFamily, Callable[[CurrentStateProfile], list[ContentBlock]]] = {
    ProjectFamily.FRONTEND: _frontend_profile,
    ProjectFamily.BACKEND: _backend_profile,
    ProjectFamily.FULLSTACK: _fullstack_profile,
    ProjectFamily.MOBILE: _mobile_profile,
    ProjectFamily.DATA_SCIENCE: _data_science_profile,
    ProjectFamily.BLOCKCHAIN: _blockchain_profile,
    ProjectFamily.INFRASTRUCTURE: _infrastructure_profile,
    ProjectFamily.GENERAL: _general_profile,
}


# =============================================================================
# Assembler
# =============================================================================


class ReportAssembler:
    """Builds the Report section tree from pipeline artifacts."""

    def __init__(self) -> None:
        self.diagrams = MermaidGenerator()
        self.decisions = DecisionRecordBuilder()
        self._builders: dict[str, Callable[[Any], list[ContentBlock]]] = {
            "executive-summary": self.build_executive_summary,
            "solution-discovery": self.build_solution_discovery,
            "architectural-alignment": self.build_architectural_alignment,
            "data-integration": self.build_data_integration,
            "operational-ownership": self.build_operational_ownership,
            "technical-debt": self.build_technical_debt,
            "business-value": self.build_business_value,
            "scalability": self.build_scalability,
            "risk-assessment": self.build_risk_assessment,
            "recommendations": self.build_recommendations,
        }

    def assemble(
        self,
        profile: CurrentStateProfile,
        context: ChangeContext,
        impacts: list[ImpactItem],
        findings: ArchitectureFindings,
        recommendations: list[Recommendation],
        metrics: MetricsResult,
        errors: list[AnalysisError] | None = None,
        sequence: int = 1,
        title: str | None = None,
    ) -> Report:
        """Assemble the report.

        Args:
            profile: Current-state profile
            context: Classified change request (header fields only)
            impacts: Ordered impact items
            findings: Architecture findings
            recommendations: Ranked recommendations
            metrics: Business metrics
            errors: Errors recorded by earlier stages
            sequence: Per-run report sequence number (>= 1)
            title: Change-request title; derived from the text when omitted

        Returns:
            Report with canonical sections, the proposed ADR (plus the error
            marker if degraded)
        """
        if sequence < 1:
            logger.warning("Report sequence %d is below 1; using 1", sequence)
            sequence = 1

        artifacts: dict[SectionSource, Any] = {
            SectionSource.PROFILE: profile,
            SectionSource.IMPACTS: impacts,
            SectionSource.FINDINGS: findings,
            SectionSource.RECOMMENDATIONS: recommendations,
            SectionSource.METRICS: metrics,
        }
        all_errors = list(errors or [])

        sections = []
        for definition in CANONICAL_SECTIONS:
            section = ReportSection(id=definition.id, title=definition.title, source=definition.source)
            try:
                section.blocks = self._builders[definition.id](artifacts[definition.source])
            except Exception as e:
                logger.warning("Section %s could not be built: %s", definition.id, e)
                section.error = str(e)
                section.blocks = [ContentBlock.text(f"Section unavailable: {e}")]
                all_errors.append(
                    AnalysisError(component=f"report.{definition.id}", message=str(e))
                )
            sections.append(section)

        subject = self._subject(title, context)
        decision_record = None
        try:
            decision_record = self.decisions.build(
                subject, context, impacts, findings, recommendations, sequence=sequence
            )
        except Exception as e:
            logger.warning("Decision record could not be built: %s", e)
            all_errors.append(AnalysisError(component="report.adr", message=str(e)))

        if all_errors:
            sections.append(self.build_error_section(all_errors))

        report = Report(
            report_id=format_report_id(sequence),
            title=f"EA Assessment: {subject}" if subject else "EA Assessment",
            change_request=context.raw_text,
            change_type=context.change_type.value,
            scope=context.scope.value,
            project_type=profile.project_type.value,
            sections=sections,
            errors=all_errors,
            decision_record=decision_record,
        )
        logger.info(
            "Assembled report %s with %d sections%s",
            report.report_id,
            len(report.sections),
            " (degraded)" if report.degraded else "",
        )
        return report

    @staticmethod
    def _subject(title: str | None, context: ChangeContext) -> str:
        subject = (title or "").strip()
        if not subject:
            lines = context.raw_text.strip().splitlines()
            subject = lines[0].strip() if lines else ""
        if len(subject) > MAX_TITLE_LENGTH:
            subject = subject[: MAX_TITLE_LENGTH - 3].rstrip() + "..."
        return subject

    # =========================================================================
    # Metrics sections
    # =========================================================================

    def build_executive_summary(self, metrics: MetricsResult) -> list[ContentBlock]:
        complexity = metrics.complexity
        business = metrics.business
        return [
            ContentBlock.key_values(
                [
                    ("Complexity", f"{complexity.level.value} ({complexity.score}/10)"),
                    ("Estimated duration", pluralize(metrics.timeline.total_weeks, "week")),
                    ("Team size", pluralize(metrics.cost.team_size, "engineer")),
                    ("Estimated cost", format_currency(metrics.cost.total_cost)),
                    ("Expected ROI", format_percent(business.roi)),
                    ("Payback period", pluralize(business.payback_period_months, "month")),
                ],
                title="At a Glance",
            ),
            ContentBlock.bullets(complexity.factors, title="Complexity Factors"),
        ]

    def build_business_value(self, metrics: MetricsResult) -> list[ContentBlock]:
        business = metrics.business
        cost = metrics.cost
        timeline = metrics.timeline
        return [
            ContentBlock.key_values(
                [
                    ("ROI", format_percent(business.roi)),
                    ("Payback period", pluralize(business.payback_period_months, "month")),
                    ("Annual cost savings", format_currency(business.cost_savings_annual)),
                    ("Productivity gain", format_percent(business.productivity_gain_pct)),
                    ("Risk reduction", format_percent(business.risk_reduction_pct)),
                    ("Technical debt reduction", f"{business.tech_debt_reduction_hours} hours"),
                    ("Compliance score", format_percent(business.compliance_score_pct)),
                ],
                title="Business Metrics",
            ),
            ContentBlock.table(
                ["Bucket", "Cost"],
                [[bucket.capitalize(), format_currency(amount)] for bucket, amount in cost.breakdown.items()]
                + [["Total", format_currency(cost.total_cost)]],
                title="Cost Breakdown",
            ),
            ContentBlock.table(
                ["Phase", "Weeks"],
                [[phase.name, phase.weeks] for phase in timeline.phases],
                title=(
                    f"Timeline ({timeline.base_weeks} base weeks x {timeline.multiplier} "
                    f"= {timeline.total_weeks} weeks)"
                ),
            ),
            ContentBlock.diagram(
                "gantt",
                self.diagrams.gantt([(phase.name, phase.weeks) for phase in timeline.phases]),
                title="Implementation Timeline",
            ),
        ]

    # =========================================================================
    # Profile section
    # =========================================================================

    def build_solution_discovery(self, profile: CurrentStateProfile) -> list[ContentBlock]:
        blocks = [
            ContentBlock.key_values(
                [
                    ("Project type", f"{profile.project_type.value} ({profile.project_type.family.value})"),
                    ("Files", profile.file_count),
                    ("Architecture", profile.architecture.structure.value),
                    ("Patterns", ", ".join(sorted(profile.architecture.patterns)) or "none"),
                    ("Codebase complexity", profile.architecture.complexity_level.value),
                    ("Quality score", f"{profile.quality.score}/100 ({profile.quality.level.value})"),
                    ("Test coverage", profile.quality.test_coverage),
                    ("CI platform", profile.quality.ci_platform),
                ],
                title="Current State",
            ),
            ContentBlock.table(
                ["Type", "Technology", "Signals"],
                [[fact.type.value, fact.name, fact.evidence_count] for fact in profile.tech_stack],
                title="Technology Stack",
            ),
        ]

        if profile.capabilities:
            blocks.append(ContentBlock.bullets(sorted(profile.capabilities), title="Capabilities"))

        strategy = PROJECT_FAMILY_STRATEGIES.get(profile.project_type.family, _general_profile)
        blocks.extend(strategy(profile))

        blocks.append(
            ContentBlock.diagram(
                "flowchart",
                self._current_architecture_diagram(profile),
                title="Current Architecture",
            )
        )
        if profile.data.entities:
            blocks.append(
                ContentBlock.diagram(
                    "er",
                    self.diagrams.er_diagram(list(profile.data.entities), list(profile.data.relationships)),
                    title="Data Model",
                )
            )

        if profile.degraded_facts:
            blocks.append(
                ContentBlock.bullets(
                    list(profile.degraded_facts), title="Facts Unavailable (reported as unknown)"
                )
            )
        return blocks

    def _current_architecture_diagram(self, profile: CurrentStateProfile) -> str:
        layers: list[str] = []
        roles: dict[str, str] = {}

        if profile.dependencies.ui or profile.project_type.family in (
            ProjectFamily.FRONTEND,
            ProjectFamily.FULLSTACK,
            ProjectFamily.MOBILE,
        ):
            layers.append("User Interface")
            roles["User Interface"] = "ui"

        if profile.apis.endpoints or profile.project_type.family in (
            ProjectFamily.BACKEND,
            ProjectFamily.FULLSTACK,
        ):
            layers.append("API Layer")
            roles["API Layer"] = "api"

        if profile.data.store_type != UNKNOWN or profile.data.entities:
            store = profile.data.store_type if profile.data.store_type != UNKNOWN else "Database"
            layers.append(store)
            roles[store] = "database"

        edges = list(zip(layers, layers[1:]))
        return self.diagrams.flowchart(layers, edges, title="Current architecture", roles=roles)

    # =========================================================================
    # Findings sections
    # =========================================================================

    def build_architectural_alignment(self, findings: ArchitectureFindings) -> list[ContentBlock]:
        blocks = [
            ContentBlock.key_values(
                [("Compliance score", f"{findings.compliance_score}/100")],
                title="Alignment",
            )
        ]
        for title, items in (
            ("Alignment Factors", findings.alignment_factors),
            ("Violations", findings.violations),
            ("Ambiguities", findings.ambiguities),
            ("Reusable Components", findings.reusable_components),
            ("Gaps", findings.gaps),
            ("New Components Required", findings.new_components),
        ):
            if items:
                blocks.append(ContentBlock.bullets(items, title=title))
        return blocks

    def build_technical_debt(self, findings: ArchitectureFindings) -> list[ContentBlock]:
        if not findings.tech_debt:
            return [ContentBlock.text("No technical debt items identified.")]
        return [
            ContentBlock.table(
                ["Item", "Impact", "Effort (hours)", "Priority"],
                [
                    [item.item, item.impact.value, item.effort_hours, item.priority.value]
                    for item in findings.tech_debt
                ],
                title="Current Debt",
            ),
            ContentBlock.key_values(
                [("Total debt", f"{findings.tech_debt_hours} hours")],
                title="Debt Metrics",
            ),
        ]

    def build_scalability(self, findings: ArchitectureFindings) -> list[ContentBlock]:
        blocks = [
            ContentBlock.bullets(items, title=title)
            for title, items in (
                ("Current Limitations", findings.limitations),
                ("Anticipated Bottlenecks", findings.bottlenecks),
                ("Target Capabilities", findings.target_capabilities),
            )
            if items
        ]
        return blocks or [ContentBlock.text("No scalability concerns identified.")]

    def build_risk_assessment(self, findings: ArchitectureFindings) -> list[ContentBlock]:
        blocks = [
            ContentBlock.key_values(
                [
                    ("Overall risk", findings.overall_risk.value),
                    ("Registered risks", len(findings.risks)),
                ],
                title="Summary",
            )
        ]
        if findings.risks:
            blocks.append(
                ContentBlock.table(
                    ["Risk", "Likelihood", "Impact", "Mitigation"],
                    [
                        [risk.description, risk.likelihood.value, risk.impact.value, risk.mitigation]
                        for risk in findings.risks
                    ],
                    title="Risk Register",
                )
            )
        return blocks

    # =========================================================================
    # Impacts section
    # =========================================================================

    def build_data_integration(self, impacts: list[ImpactItem]) -> list[ContentBlock]:
        if not impacts:
            return [ContentBlock.text("No impacted components identified.")]

        rows = []
        for item in impacts:
            shown = ", ".join(e.file for e in item.evidence[:MAX_EVIDENCE_SHOWN]) or "none"
            hidden = max(item.matched_files, len(item.evidence)) - MAX_EVIDENCE_SHOWN
            if hidden > 0 and item.evidence:
                shown = f"{shown} (+{hidden} more)"
            rows.append(
                [
                    item.component,
                    item.kind.value,
                    item.change_type.value,
                    item.effort.value,
                    item.risk.value,
                    item.triggered_by or "-",
                    shown,
                ]
            )

        direct = [item.component for item in impacts if item.is_direct]
        nodes = ["Change Request"] + [item.component for item in impacts]
        edges = [("Change Request", name) for name in direct] + [
            (item.triggered_by, item.component)
            for item in impacts
            if item.triggered_by is not None
        ]
        roles = {
            item.component: "database" if item.source_type == "database" else "pipeline"
            for item in impacts
            if not item.is_direct or item.source_type == "database"
        }

        return [
            ContentBlock.table(
                ["Component", "Kind", "Change Type", "Effort", "Risk", "Triggered By", "Evidence"],
                rows,
                title="Impact Matrix",
            ),
            ContentBlock.diagram(
                "flowchart",
                self.diagrams.flowchart(nodes, edges, title="Impact propagation", direction="LR", roles=roles),
                title="Impact Propagation",
            ),
            ContentBlock.diagram(
                "sequence",
                self.diagrams.sequence(direct, title="Request path"),
                title="Request Path Through Impacted Components",
            ),
        ]

    # =========================================================================
    # Recommendations sections
    # =========================================================================

    def build_operational_ownership(self, recommendations: list[Recommendation]) -> list[ContentBlock]:
        owned: dict[str, list[Recommendation]] = {}
        for recommendation in recommendations:
            for owner in recommendation.owners:
                owned.setdefault(owner, []).append(recommendation)

        if not owned:
            return [ContentBlock.text("No ownership assignments proposed.")]

        rows = [
            [
                owner,
                ", ".join(r.id for r in items),
                ", ".join(dict.fromkeys(r.category.value for r in items)),
            ]
            for owner, items in owned.items()
        ]
        return [ContentBlock.table(["Owner", "Recommendations", "Categories"], rows, title="Proposed Owners")]

    def build_recommendations(self, recommendations: list[Recommendation]) -> list[ContentBlock]:
        if not recommendations:
            return [ContentBlock.text("No recommendations generated.")]

        blocks = [
            ContentBlock.table(
                ["ID", "Category", "Title", "Priority", "Effort", "Risk", "Timeline"],
                [
                    [r.id, r.category.value, r.title, r.priority, r.effort.value, r.risk.value, r.timeline]
                    for r in recommendations
                ],
                title="Prioritized Recommendations",
            )
        ]

        for recommendation in recommendations:
            if not recommendation.implementation_steps:
                continue
            blocks.append(
                ContentBlock.text(
                    f"Why: {recommendation.why}\n\nHow: {recommendation.how}",
                    title=f"{recommendation.id}: {recommendation.title}",
                )
            )
            blocks.append(
                ContentBlock.bullets(recommendation.implementation_steps, title="Implementation Steps")
            )
            blocks.append(
                ContentBlock.bullets(recommendation.acceptance_criteria, title="Acceptance Criteria")
            )
            blocks.append(
                ContentBlock.key_values(
                    [
                        ("Owners", ", ".join(recommendation.owners) or "-"),
                        ("Depends on", ", ".join(recommendation.dependencies) or "-"),
                        ("Evidence", ", ".join(e.file for e in recommendation.evidence) or "-"),
                        ("Impact / confidence", f"{recommendation.impact}/5, {recommendation.confidence}/5"),
                    ]
                )
            )

        edges = [
            (dependency, recommendation.id)
            for recommendation in recommendations
            for dependency in recommendation.dependencies
        ]
        if edges:
            involved = {node for edge in edges for node in edge}
            nodes = [r.id for r in recommendations if r.id in involved]
            blocks.append(
                ContentBlock.diagram(
                    "flowchart",
                    self.diagrams.flowchart(nodes, edges, title="Recommendation dependencies", direction="LR"),
                    title="Recommendation Dependencies",
                )
            )
        return blocks

    # =========================================================================
    # Error marker
    # =========================================================================

    def build_error_section(self, errors: list[AnalysisError]) -> ReportSection:
        """Marker section listing every recorded error."""
        return ReportSection(
            id=PIPELINE_ERRORS_SECTION,
            title="Pipeline Errors",
            source=SectionSource.PIPELINE,
            blocks=[
                ContentBlock.text(
                    "This assessment is partial: the stages below degraded and their "
                    "artifacts were replaced with empty defaults."
                ),
                ContentBlock.table(
                    ["Component", "Message", "Recoverable"],
                    [
                        [error.component, error.message, "yes" if error.recoverable else "no"]
                        for error in errors
                    ],
                ),
            ],
        )
