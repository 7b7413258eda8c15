"""Business metrics synthesis.

Pure, closed-form formulas over the change context, profile and impacts.
Nothing here renders text; the report assembler only interpolates the
resulting MetricsResult.
"""

import logging
import math

from sprint0.config import EstimationConfig
from sprint0.models.change import ChangeContext, ChangeType, Scope
from sprint0.models.impact import EffortSize, ImpactItem
from sprint0.models.metrics import (
    BusinessMetrics,
    ComplexityAssessment,
    CostModel,
    MetricsResult,
    Timeline,
    TimelinePhase,
)
from sprint0.models.profile import ComplexityLevel, CurrentStateProfile

logger = logging.getLogger(__name__)

# (minimum files exclusive, points)
FILE_COUNT_POINTS = [(500, 3), (100, 2)]
DEFAULT_FILE_POINTS = 1
CHANGE_TYPE_POINTS = {ChangeType.MIGRATION: 3, ChangeType.REFACTORING: 2}
MANY_IMPACTS = 10
MANY_IMPACTS_POINTS = 2
LARGE_SCOPE_POINTS = 2
MAX_COMPLEXITY_SCORE = 10

HIGH_COMPLEXITY_ABOVE = 7
MEDIUM_COMPLEXITY_ABOVE = 4

COMPLIANCE_RISK_STEP = 20


def complexity_level(score: int) -> ComplexityLevel:
    """Bucket a 0-10 complexity score."""
    if score > HIGH_COMPLEXITY_ABOVE:
        return ComplexityLevel.HIGH
    if score > MEDIUM_COMPLEXITY_ABOVE:
        return ComplexityLevel.MEDIUM
    return ComplexityLevel.LOW


class MetricsSynthesizer:
    """Computes complexity, timeline, cost and business metrics."""

    def __init__(self, estimation: EstimationConfig | None = None) -> None:
        self.estimation = estimation or EstimationConfig()

    def synthesize(
        self,
        context: ChangeContext,
        profile: CurrentStateProfile,
        impacts: list[ImpactItem],
    ) -> MetricsResult:
        """Run every formula for one assessment.

        Args:
            context: Classified change request
            profile: Current-state profile (file count)
            impacts: Ordered impact items

        Returns:
            MetricsResult
        """
        complexity = self.assess_complexity(context, profile.file_count, len(impacts))
        timeline = self.compute_timeline(context.scope, complexity.level)
        cost = self.compute_cost(timeline.total_weeks, complexity.level, context.change_type)
        business = self.compute_business_metrics(context.change_type, cost, impacts)

        logger.debug(
            "Metrics: complexity %d (%s), %d weeks, cost %d, ROI %.1f%%",
            complexity.score,
            complexity.level.value,
            timeline.total_weeks,
            cost.total_cost,
            business.roi,
        )
        return MetricsResult(business=business, complexity=complexity, timeline=timeline, cost=cost)

    def assess_complexity(
        self,
        context: ChangeContext,
        file_count: int,
        impact_count: int,
    ) -> ComplexityAssessment:
        """Sum fixed points for files, change type, impact count and scope."""
        factors = []

        file_points = DEFAULT_FILE_POINTS
        for threshold, points in FILE_COUNT_POINTS:
            if file_count > threshold:
                file_points = points
                break
        factors.append(f"{file_count} files (+{file_points})")
        score = file_points

        type_points = CHANGE_TYPE_POINTS.get(context.change_type, 0)
        if type_points:
            factors.append(f"{context.change_type.value} change (+{type_points})")
            score += type_points

        if impact_count > MANY_IMPACTS:
            factors.append(f"{impact_count} impacted components (+{MANY_IMPACTS_POINTS})")
            score += MANY_IMPACTS_POINTS

        if context.scope == Scope.LARGE:
            factors.append(f"large scope (+{LARGE_SCOPE_POINTS})")
            score += LARGE_SCOPE_POINTS

        score = min(score, MAX_COMPLEXITY_SCORE)
        return ComplexityAssessment(score=score, level=complexity_level(score), factors=factors)

    def compute_timeline(self, scope: Scope, level: ComplexityLevel) -> Timeline:
        """Base weeks by scope times the complexity multiplier, rounded up."""
        base_weeks = self.estimation.base_weeks[scope.value]
        multiplier = self.estimation.complexity_multipliers[level.value]
        total_weeks = math.ceil(base_weeks * multiplier)

        phases = [
            TimelinePhase(name=name, weeks=math.ceil(total_weeks * share))
            for name, share in self.estimation.phase_shares.items()
        ]
        return Timeline(
            base_weeks=base_weeks,
            multiplier=multiplier,
            total_weeks=total_weeks,
            phases=phases,
        )

    def benefit_multiplier(self, change_type: ChangeType) -> float:
        return self.estimation.benefit_multipliers.get(
            change_type.value, self.estimation.default_benefit_multiplier
        )

    def compute_cost(
        self,
        total_weeks: int,
        level: ComplexityLevel,
        change_type: ChangeType,
    ) -> CostModel:
        """weeks * weekly rate * team size / 2, with a percentage breakdown."""
        team_size = self.estimation.team_sizes[level.value]
        weekly_rate = self.estimation.weekly_rate
        total_cost = round(max(total_weeks, 1) * weekly_rate * team_size / 2)

        breakdown = {
            bucket: round(total_cost * share)
            for bucket, share in self.estimation.cost_breakdown.items()
        }
        multiplier = self.benefit_multiplier(change_type)

        return CostModel(
            team_size=team_size,
            weekly_rate=weekly_rate,
            total_cost=total_cost,
            breakdown=breakdown,
            benefit_multiplier=multiplier,
            estimated_benefit=round(total_cost * multiplier),
        )

    def compute_business_metrics(
        self,
        change_type: ChangeType,
        cost: CostModel,
        impacts: list[ImpactItem],
    ) -> BusinessMetrics:
        """ROI, payback, savings, productivity, risk, debt and compliance figures."""
        multiplier = cost.benefit_multiplier
        safe_cost = max(cost.total_cost, 1)
        safe_multiplier = max(multiplier, 1)

        roi = (cost.estimated_benefit - cost.total_cost) / safe_cost * 100

        largest_effort = max((item.effort for item in impacts), key=lambda e: e.rank, default=EffortSize.S)
        highest_risk_rank = max((item.risk.rank for item in impacts), default=1)

        return BusinessMetrics(
            roi=round(roi, 1),
            payback_period_months=math.ceil(self.estimation.payback_base_months / safe_multiplier),
            cost_savings_annual=cost.estimated_benefit - cost.total_cost,
            productivity_gain_pct=round((multiplier - 1) * 100, 1),
            risk_reduction_pct=self.estimation.risk_reduction.get(
                change_type.value, self.estimation.default_risk_reduction
            ),
            tech_debt_reduction_hours=self.estimation.tech_debt_hours[largest_effort.value],
            compliance_score_pct=float(
                max(0, min(100, 100 - COMPLIANCE_RISK_STEP * highest_risk_rank))
            ),
        )
