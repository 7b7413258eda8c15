"""Architecture findings.

Cross-references the current-state profile, the classified change and the
impact list into the observations the report and the recommendation
generator share: reusable components, gaps, compliance alignment, the risk
register, technical debt and scalability limits.
"""

import logging

from sprint0.models.change import ChangeContext, ChangeType, ComponentType, Concept, Scope
from sprint0.models.findings import ArchitectureFindings, RiskEntry, TechDebtItem
from sprint0.models.impact import ImpactItem, RiskLevel
from sprint0.models.profile import (
    ArchitectureStructure,
    ComplexityLevel,
    CurrentStateProfile,
)

logger = logging.getLogger(__name__)

COMPLIANCE_BASE = 70
COMPLIANCE_PATTERNS_BONUS = 10
COMPLIANCE_LAYERING_BONUS = 5
COMPLIANCE_SECURITY_BONUS = 10
COMPLIANCE_DOCS_PENALTY = 5

# (item, impact, hours, priority)
DEBT_MISSING_TESTS = ("Missing test coverage", RiskLevel.HIGH, 40, RiskLevel.HIGH)
DEBT_DOCUMENTATION = ("Insufficient documentation", RiskLevel.MEDIUM, 20, RiskLevel.MEDIUM)
DEBT_MONITORING = ("Basic monitoring only", RiskLevel.MEDIUM, 30, RiskLevel.MEDIUM)
DEBT_COMPLEXITY = ("High complexity", RiskLevel.HIGH, 80, RiskLevel.MEDIUM)

LARGE_CODEBASE_FILES = 500
API_GATEWAY_ENDPOINTS = 50

ELEVATED_RISKS = frozenset({RiskLevel.HIGH, RiskLevel.CRITICAL})


def clamp_score(score: int) -> int:
    """Clamp a score to 0..100."""
    return max(0, min(100, score))


class FindingsAnalyzer:
    """Derives ArchitectureFindings from profile, context and impacts."""

    def analyze(
        self,
        profile: CurrentStateProfile,
        context: ChangeContext,
        impacts: list[ImpactItem],
    ) -> ArchitectureFindings:
        """Build all findings for one assessment.

        Args:
            profile: Current-state profile
            context: Classified change request
            impacts: Ordered impact items

        Returns:
            ArchitectureFindings
        """
        findings = ArchitectureFindings()

        findings.reusable_components = self.find_reusable_components(profile, context, impacts)
        findings.new_components = self.find_new_components(profile, context)
        findings.gaps = self.find_gaps(profile, context)
        self.assess_alignment(profile, impacts, findings)
        findings.risks = self.build_risk_register(profile, context, impacts)
        findings.overall_risk = self.overall_risk(findings.risks)
        findings.tech_debt = self.assess_tech_debt(profile)
        findings.limitations = self.find_limitations(profile)
        findings.bottlenecks = self.find_bottlenecks(profile)
        findings.target_capabilities = self.find_target_capabilities(context)

        logger.debug(
            "Findings: %d gaps, %d violations, %d ambiguities, %d risks (overall %s)",
            len(findings.gaps),
            len(findings.violations),
            len(findings.ambiguities),
            len(findings.risks),
            findings.overall_risk.value,
        )
        return findings

    # =========================================================================
    # Solution discovery
    # =========================================================================

    def find_reusable_components(
        self,
        profile: CurrentStateProfile,
        context: ChangeContext,
        impacts: list[ImpactItem],
    ) -> list[str]:
        """Stack facts no impact targets, then capabilities the change does not mention."""
        targeted = {item.component.lower() for item in impacts}
        reusable = [
            f"{fact.name} ({fact.type.value})"
            for fact in profile.tech_stack
            if fact.name.lower() not in targeted
        ]

        for capability in sorted(profile.capabilities):
            lowered = capability.lower()
            if not any(keyword in lowered for keyword in context.keywords):
                reusable.append(capability)

        return reusable

    def find_new_components(
        self,
        profile: CurrentStateProfile,
        context: ChangeContext,
    ) -> list[str]:
        """Named components absent from the detected stack."""
        return [
            f"{component.display_name} ({component.type.value})"
            for component in context.components
            if not self._in_stack(profile, component.display_name)
        ]

    def find_gaps(self, profile: CurrentStateProfile, context: ChangeContext) -> list[str]:
        """Missing pieces the change requires."""
        gaps = [
            f"{component.display_name} implementation needed"
            for component in context.components
            if not self._in_stack(profile, component.display_name)
        ]

        if context.has_concept(Concept.TESTING) and not profile.quality.has_tests:
            gaps.append("Test coverage implementation")

        if context.change_type == ChangeType.MIGRATION and (
            context.components_of(ComponentType.DATABASE) or context.has_concept(Concept.DATABASE)
        ):
            gaps.append("Data access abstraction to decouple the application from the data store")

        return gaps

    @staticmethod
    def _in_stack(profile: CurrentStateProfile, name: str) -> bool:
        lowered = name.lower()
        return any(fact.name.lower() == lowered for fact in profile.tech_stack)

    # =========================================================================
    # Architectural alignment
    # =========================================================================

    def assess_alignment(
        self,
        profile: CurrentStateProfile,
        impacts: list[ImpactItem],
        findings: ArchitectureFindings,
    ) -> None:
        """Compute the compliance score, factors, violations and ambiguities."""
        score = COMPLIANCE_BASE
        quality = profile.quality

        if profile.architecture.patterns:
            score += COMPLIANCE_PATTERNS_BONUS
            findings.alignment_factors.append("Follows established patterns")

        if profile.apis.endpoints and profile.data.entities:
            score += COMPLIANCE_LAYERING_BONUS
            findings.alignment_factors.append("Proper layer separation")

        if quality.security_level == "implemented":
            score += COMPLIANCE_SECURITY_BONUS
            findings.alignment_factors.append("Security properly implemented")
        else:
            findings.violations.append("Security implementation incomplete")

        if quality.monitoring_level == "basic":
            findings.ambiguities.append("Monitoring strategy needs clarification")

        if quality.documentation_level == "minimal":
            score -= COMPLIANCE_DOCS_PENALTY
            findings.violations.append("Documentation insufficient")

        for item in impacts:
            if not item.is_direct:
                continue
            if item.risk in ELEVATED_RISKS:
                findings.violations.append(
                    f"{item.component}: {item.risk.value}-risk change touches production paths"
                )
            if not item.has_evidence:
                findings.ambiguities.append(
                    f"{item.component}: no matching files found; needs further investigation"
                )

        findings.compliance_score = clamp_score(score)

    # =========================================================================
    # Risk register
    # =========================================================================

    def build_risk_register(
        self,
        profile: CurrentStateProfile,
        context: ChangeContext,
        impacts: list[ImpactItem],
    ) -> list[RiskEntry]:
        """Risk entries in a fixed order."""
        risks: list[RiskEntry] = []

        if not profile.quality.has_tests:
            risks.append(
                RiskEntry(
                    description="Unknown test coverage",
                    likelihood=RiskLevel.MEDIUM,
                    impact=RiskLevel.HIGH,
                    mitigation="Implement comprehensive testing",
                )
            )

        if any(item.is_direct and item.source_type == "database" for item in impacts):
            risks.append(
                RiskEntry(
                    description="Data migration complexity",
                    likelihood=RiskLevel.MEDIUM,
                    impact=RiskLevel.HIGH,
                    mitigation="Implement data validation and rollback procedures",
                )
            )

        if context.has_concept(Concept.INTEGRATION) or context.change_type == ChangeType.INTEGRATION:
            risks.append(
                RiskEntry(
                    description="External system dependencies",
                    likelihood=RiskLevel.MEDIUM,
                    impact=RiskLevel.MEDIUM,
                    mitigation="Coordinate with external teams",
                )
            )

        if context.scope == Scope.LARGE:
            risks.append(
                RiskEntry(
                    description="Service disruption",
                    likelihood=RiskLevel.LOW,
                    impact=RiskLevel.HIGH,
                    mitigation="Plan maintenance windows and rollback procedures",
                )
            )

        for item in impacts:
            if item.risk in ELEVATED_RISKS:
                risks.append(
                    RiskEntry(
                        description=f"{item.component} change affects production code",
                        likelihood=item.risk,
                        impact=RiskLevel.HIGH,
                        mitigation="Stage the rollout behind a feature flag with a tested rollback",
                    )
                )

        return risks

    @staticmethod
    def overall_risk(risks: list[RiskEntry]) -> RiskLevel:
        """More than two high-impact risks is high, any is medium, else low."""
        high = sum(1 for risk in risks if risk.impact in ELEVATED_RISKS)
        if high > 2:
            return RiskLevel.HIGH
        if high > 0:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW

    # =========================================================================
    # Technical debt and scalability
    # =========================================================================

    def assess_tech_debt(self, profile: CurrentStateProfile) -> list[TechDebtItem]:
        """Debt items derived from quality signals and complexity."""
        entries = []
        if not profile.quality.has_tests:
            entries.append(DEBT_MISSING_TESTS)
        if profile.quality.documentation_level == "minimal":
            entries.append(DEBT_DOCUMENTATION)
        if profile.quality.monitoring_level == "basic":
            entries.append(DEBT_MONITORING)
        if profile.architecture.complexity_level == ComplexityLevel.HIGH:
            entries.append(DEBT_COMPLEXITY)

        return [
            TechDebtItem(item=item, impact=impact, effort_hours=hours, priority=priority)
            for item, impact, hours, priority in entries
        ]

    def find_limitations(self, profile: CurrentStateProfile) -> list[str]:
        limitations = []
        if profile.architecture.structure == ArchitectureStructure.MONOLITHIC:
            limitations.append("Monolithic architecture limits independent scaling")
        if profile.file_count > LARGE_CODEBASE_FILES:
            limitations.append("Large codebase may impact deployment speed")
        if not self._has_cache(profile):
            limitations.append("No caching layer for performance optimization")
        return limitations

    def find_bottlenecks(self, profile: CurrentStateProfile) -> list[str]:
        bottlenecks = []
        if not self._has_cache(profile):
            bottlenecks.append("Data access: no caching layer (performance degradation under load)")
        if profile.architecture.structure == ArchitectureStructure.MONOLITHIC:
            bottlenecks.append(
                "Application architecture: monolithic structure (cannot scale components independently)"
            )
        if len(profile.apis.endpoints) > API_GATEWAY_ENDPOINTS:
            bottlenecks.append(
                "API layer: high number of endpoints (API gateway may become a bottleneck)"
            )
        return bottlenecks

    def find_target_capabilities(self, context: ChangeContext) -> list[str]:
        capabilities = []
        if context.change_type == ChangeType.SCALING:
            capabilities.extend(["Horizontal scaling capability", "Load balancing", "Auto-scaling policies"])
        if context.has_concept(Concept.PERFORMANCE):
            capabilities.extend(["Performance optimization", "Caching strategy", "Database optimization"])
        capabilities.extend(
            f"{component.display_name} integration" for component in context.components
        )
        return capabilities

    @staticmethod
    def _has_cache(profile: CurrentStateProfile) -> bool:
        return "Caching" in profile.capabilities or any(
            "cache" in name or "redis" in name for name in profile.dependencies.data
        )
