"""Sprint0 data models.

This module exports the entities that flow through the assessment pipeline:
- ProfilerInput, ChangeRequest: pipeline inputs
- CurrentStateProfile: repository profile
- ChangeContext: classified change request
- ImpactItem, Evidence: impacted components
- ArchitectureFindings: gaps, compliance, risks and debt
- Recommendation: prioritized recommendations
- MetricsResult, BusinessMetrics: derived business metrics
- Report, ReportSection, AnalysisError: assessment output
- DecisionRecord: proposed architecture decision record
"""

from sprint0.models.change import (
    ChangeContext,
    ChangeType,
    ComponentType,
    Concept,
    NamedComponent,
    Scope,
)
from sprint0.models.decision import DecisionRecord, format_adr_id
from sprint0.models.findings import ArchitectureFindings, RiskEntry, TechDebtItem
from sprint0.models.impact import (
    EffortSize,
    Evidence,
    ImpactChangeType,
    ImpactItem,
    ImpactKind,
    RiskLevel,
)
from sprint0.models.inputs import ChangeRequest, ProfilerInput
from sprint0.models.metrics import (
    BusinessMetrics,
    ComplexityAssessment,
    CostModel,
    MetricsResult,
    Timeline,
    TimelinePhase,
)
from sprint0.models.profile import (
    ArchitectureStructure,
    ComplexityLevel,
    CurrentStateProfile,
    ProjectFamily,
    ProjectType,
    TechFact,
    TechType,
)
from sprint0.models.recommendation import Category, Recommendation
from sprint0.models.report import (
    AnalysisError,
    ContentBlock,
    Report,
    ReportSection,
    SectionSource,
)

__all__ = [
    "AnalysisError",
    "ArchitectureFindings",
    "ArchitectureStructure",
    "BusinessMetrics",
    "Category",
    "ChangeContext",
    "ChangeRequest",
    "ChangeType",
    "ComplexityAssessment",
    "ComplexityLevel",
    "ComponentType",
    "Concept",
    "ContentBlock",
    "CostModel",
    "CurrentStateProfile",
    "DecisionRecord",
    "EffortSize",
    "Evidence",
    "ImpactChangeType",
    "ImpactItem",
    "ImpactKind",
    "MetricsResult",
    "NamedComponent",
    "ProfilerInput",
    "ProjectFamily",
    "ProjectType",
    "Recommendation",
    "Report",
    "ReportSection",
    "RiskEntry",
    "RiskLevel",
    "Scope",
    "SectionSource",
    "TechDebtItem",
    "TechFact",
    "TechType",
    "Timeline",
    "TimelinePhase",
    "format_adr_id",
]
