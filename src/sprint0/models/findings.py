"""Architecture findings entities.

Findings cross-reference the profile, the change context and the impact list:
reusable components, gaps, compliance alignment, the risk register,
technical debt and scalability observations.
"""

from dataclasses import dataclass, field
from typing import Any

from sprint0.models.impact import RiskLevel


@dataclass
class RiskEntry:
    """One entry in the risk register.

    Attributes:
        description: What could go wrong
        likelihood: How likely it is
        impact: How bad it would be
        mitigation: Suggested mitigation
    """

    description: str
    likelihood: RiskLevel
    impact: RiskLevel
    mitigation: str

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for serialization."""
        return {
            "description": self.description,
            "likelihood": self.likelihood.value,
            "impact": self.impact.value,
            "mitigation": self.mitigation,
        }


@dataclass
class TechDebtItem:
    """One technical-debt item with its remediation estimate."""

    item: str
    impact: RiskLevel
    effort_hours: int
    priority: RiskLevel

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "item": self.item,
            "impact": self.impact.value,
            "effort_hours": self.effort_hours,
            "priority": self.priority.value,
        }


@dataclass
class ArchitectureFindings:
    """Cross-referenced observations feeding recommendations and the report.

    Attributes:
        reusable_components: Existing technologies/capabilities the change can reuse
        gaps: Missing pieces the change requires
        new_components: Named components absent from the current stack
        compliance_score: Architectural alignment score (0-100)
        alignment_factors: Human-readable contributions to the score
        violations: Alignment violations
        ambiguities: Items needing further investigation
        risks: Risk register
        overall_risk: Aggregate risk level
        tech_debt: Technical-debt items
        limitations: Current scalability limitations
        bottlenecks: Likely bottlenecks
        target_capabilities: Capabilities the target state should add
    """

    reusable_components: list[str] = field(default_factory=list)
    gaps: list[str] = field(default_factory=list)
    new_components: list[str] = field(default_factory=list)
    compliance_score: int = 0
    alignment_factors: list[str] = field(default_factory=list)
    violations: list[str] = field(default_factory=list)
    ambiguities: list[str] = field(default_factory=list)
    risks: list[RiskEntry] = field(default_factory=list)
    overall_risk: RiskLevel = RiskLevel.LOW
    tech_debt: list[TechDebtItem] = field(default_factory=list)
    limitations: list[str] = field(default_factory=list)
    bottlenecks: list[str] = field(default_factory=list)
    target_capabilities: list[str] = field(default_factory=list)

    @property
    def tech_debt_hours(self) -> int:
        """Total remediation hours across debt items."""
        return sum(item.effort_hours for item in self.tech_debt)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "reusable_components": list(self.reusable_components),
            "gaps": list(self.gaps),
            "new_components": list(self.new_components),
            "compliance_score": self.compliance_score,
            "alignment_factors": list(self.alignment_factors),
            "violations": list(self.violations),
            "ambiguities": list(self.ambiguities),
            "risks": [risk.to_dict() for risk in self.risks],
            "overall_risk": self.overall_risk.value,
            "tech_debt": [item.to_dict() for item in self.tech_debt],
            "tech_debt_hours": self.tech_debt_hours,
            "limitations": list(self.limitations),
            "bottlenecks": list(self.bottlenecks),
            "target_capabilities": list(self.target_capabilities),
        }
