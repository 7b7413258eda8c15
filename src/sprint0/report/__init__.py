"""Report assembly, decision records and diagram generation."""

from sprint0.report.assembler import (
    CANONICAL_SECTIONS,
    PIPELINE_ERRORS_SECTION,
    PROJECT_FAMILY_STRATEGIES,
    ReportAssembler,
    SectionSpec,
    format_report_id,
)
from sprint0.report.decisions import DecisionRecordBuilder, slugify
from sprint0.report.diagrams import MermaidGenerator

__all__ = [
    "CANONICAL_SECTIONS",
    "DecisionRecordBuilder",
    "MermaidGenerator",
    "PIPELINE_ERRORS_SECTION",
    "PROJECT_FAMILY_STRATEGIES",
    "ReportAssembler",
    "SectionSpec",
    "format_report_id",
    "slugify",
]
