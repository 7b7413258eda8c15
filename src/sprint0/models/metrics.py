"""Business metric entities (complexity, timeline, cost, financial outcomes)."""

from dataclasses import dataclass, field
from typing import Any

from sprint0.models.profile import ComplexityLevel


@dataclass
class ComplexityAssessment:
    """Complexity score (0-10) with the factors that produced it."""

    score: int = 0
    level: ComplexityLevel = ComplexityLevel.LOW
    factors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "score": self.score,
            "level": self.level.value,
            "factors": list(self.factors),
        }


@dataclass
class TimelinePhase:
    """One delivery phase."""

    name: str
    weeks: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"name": self.name, "weeks": self.weeks}


@dataclass
class Timeline:
    """Delivery timeline."""

    base_weeks: int = 0
    multiplier: float = 1.0
    total_weeks: int = 0
    phases: list[TimelinePhase] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "base_weeks": self.base_weeks,
            "multiplier": self.multiplier,
            "total_weeks": self.total_weeks,
            "phases": [phase.to_dict() for phase in self.phases],
        }


@dataclass
class CostModel:
    """Delivery cost and expected benefit."""

    team_size: int = 0
    weekly_rate: int = 0
    total_cost: int = 0
    breakdown: dict[str, int] = field(default_factory=dict)
    benefit_multiplier: float = 1.0
    estimated_benefit: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "team_size": self.team_size,
            "weekly_rate": self.weekly_rate,
            "total_cost": self.total_cost,
            "breakdown": dict(self.breakdown),
            "benefit_multiplier": self.benefit_multiplier,
            "estimated_benefit": self.estimated_benefit,
        }


@dataclass
class BusinessMetrics:
    """Closed-form business outcomes of a change.

    Attributes:
        roi: Return on investment in percent
        payback_period_months: Months until the investment is recovered
        cost_savings_annual: Net annual benefit
        productivity_gain_pct: Expected productivity gain
        risk_reduction_pct: Expected operational risk reduction
        tech_debt_reduction_hours: Technical-debt hours addressed
        compliance_score_pct: Compliance score (0-100)
    """

    roi: float = 0.0
    payback_period_months: int = 0
    cost_savings_annual: int = 0
    productivity_gain_pct: float = 0.0
    risk_reduction_pct: float = 0.0
    tech_debt_reduction_hours: int = 0
    compliance_score_pct: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "roi": self.roi,
            "payback_period_months": self.payback_period_months,
            "cost_savings_annual": self.cost_savings_annual,
            "productivity_gain_pct": self.productivity_gain_pct,
            "risk_reduction_pct": self.risk_reduction_pct,
            "tech_debt_reduction_hours": self.tech_debt_reduction_hours,
            "compliance_score_pct": self.compliance_score_pct,
        }


@dataclass
class MetricsResult:
    """Everything the metrics synthesizer produces."""

    business: BusinessMetrics = field(default_factory=BusinessMetrics)
    complexity: ComplexityAssessment = field(default_factory=ComplexityAssessment)
    timeline: Timeline = field(default_factory=Timeline)
    cost: CostModel = field(default_factory=CostModel)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "business": self.business.to_dict(),
            "complexity": self.complexity.to_dict(),
            "timeline": self.timeline.to_dict(),
            "cost": self.cost.to_dict(),
        }
