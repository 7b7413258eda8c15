"""Recommendation generation.

Each category owns a fixed, ordered rule list. A rule inspects the change
context, profile, impacts and findings and yields zero or more
recommendations with baked-in impact, confidence, effort and risk.

Ranking:
    priority = impact * confidence + effort_penalty[effort]

Ties keep category order, then rule order. Only the top recommendations get
implementation steps, acceptance criteria and dependency links; dependencies
follow fixed stage rules (Migration -> Abstraction, Optimization -> Migration)
so edges always point at an earlier stage.
"""

import logging
from dataclasses import dataclass, field

from sprint0.analyzers.classifier import VECTOR_DATABASES
from sprint0.analyzers.profiler import normalize_path
from sprint0.config import EstimationConfig
from sprint0.models.change import ChangeContext, ChangeType, ComponentType, Concept, Scope
from sprint0.models.findings import ArchitectureFindings
from sprint0.models.impact import WHOLE_FILE, EffortSize, Evidence, ImpactItem, RiskLevel
from sprint0.models.profile import UNKNOWN, ComplexityLevel, CurrentStateProfile, TechType
from sprint0.models.recommendation import Category, Recommendation

logger = logging.getLogger(__name__)

TOP_N = 5
MAX_RULE_EVIDENCE = 5
DEPENDENCY_SPRAWL_THRESHOLD = 40
DEBT_SPRINT_THRESHOLD_HOURS = 100

TIMELINES = {
    EffortSize.S: "1 week",
    EffortSize.M: "2 weeks",
    EffortSize.L: "3-4 weeks",
    EffortSize.XL: "6+ weeks",
}

# Delivery stages keyed by title keyword; a title's stage is its highest match
STAGE_KEYWORDS = [("Abstraction", 1), ("Migration", 2), ("Optimization", 3)]
STAGE_PREREQUISITES = {2: 1, 3: 2}

ABSTRACTION_STEPS = [
    "Inventory every call site that talks to the current data store",
    "Define a storage interface covering reads, writes and queries in use",
    "Implement an adapter for the current data store behind the interface",
    "Route all existing call sites through the interface",
    "Add contract tests that every adapter must pass",
    "Implement an adapter for the target data store",
    "Switch adapters through configuration in staging",
    "Remove direct data store imports outside the adapters",
]
MIGRATION_STEPS = [
    "Profile data volumes, shapes and access patterns in the current store",
    "Define the target schema and field mapping",
    "Build an idempotent export/transform/load job",
    "Run a dry-run migration against a production snapshot",
    "Validate record counts and sampled payloads after the dry run",
    "Enable dual writes to both stores",
    "Cut reads over to the target store behind a flag",
    "Decommission the old store after a stabilization window",
]
GENERIC_STEPS = [
    "Agree scope, owner and success metrics",
    "Document the current state and constraints",
    "Implement the change incrementally behind a feature flag",
    "Add automated tests covering the change",
    "Validate in a staging environment",
    "Roll out to production and monitor key metrics",
]
ACCEPTANCE_CRITERIA = [
    "{title} is delivered and reviewed by {owners}",
    "Automated tests cover the new behavior and pass in CI",
    "No regression in existing functionality or performance baselines",
    "Rollback procedure is documented and rehearsed",
    "Operational runbooks and documentation are updated",
    "Success metrics are measured and reported after rollout",
]


@dataclass
class RuleFacts:
    """Everything a recommendation rule may inspect."""

    context: ChangeContext
    profile: CurrentStateProfile
    impacts: list[ImpactItem]
    findings: ArchitectureFindings
    files: list[str] = field(default_factory=list)

    @property
    def is_migration(self) -> bool:
        return self.context.change_type == ChangeType.MIGRATION

    @property
    def database_components(self) -> list[str]:
        return [c.name for c in self.context.components_of(ComponentType.DATABASE)]

    @property
    def touches_data(self) -> bool:
        return bool(self.database_components) or self.context.has_concept(Concept.DATABASE)

    def files_matching(self, *fragments: str) -> list[Evidence]:
        """Whole-file evidence for paths containing any fragment."""
        evidence = [
            Evidence(file=path, line_range=WHOLE_FILE)
            for path in self.files
            if any(fragment in normalize_path(path) for fragment in fragments)
        ]
        return evidence[:MAX_RULE_EVIDENCE]

    def direct_evidence(self, source_type: str) -> list[Evidence]:
        """Evidence from direct impacts of one source type."""
        evidence = [
            entry
            for item in self.impacts
            if item.is_direct and item.source_type == source_type
            for entry in item.evidence
        ]
        return evidence[:MAX_RULE_EVIDENCE]


def _draft(
    category: Category,
    title: str,
    why: str,
    how: str,
    effort: EffortSize,
    risk: RiskLevel,
    impact: int,
    confidence: int,
    owners: list[str],
    evidence: list[Evidence] | None = None,
) -> Recommendation:
    """Recommendation without id or priority (assigned after ranking)."""
    return Recommendation(
        id="",
        category=category,
        title=title,
        why=why,
        how=how,
        effort=effort,
        risk=risk,
        impact=impact,
        confidence=confidence,
        owners=owners,
        evidence=evidence or [],
        timeline=TIMELINES[effort],
    )


def stage_of(title: str) -> int:
    """Delivery stage of a recommendation title (0 when it has none)."""
    stage = 0
    for keyword, value in STAGE_KEYWORDS:
        if keyword.lower() in title.lower():
            stage = max(stage, value)
    return stage


class RecommendationGenerator:
    """Produces ranked, evidence-linked recommendations."""

    def __init__(self, estimation: EstimationConfig | None = None) -> None:
        self.estimation = estimation or EstimationConfig()

    def generate(
        self,
        context: ChangeContext,
        profile: CurrentStateProfile,
        impacts: list[ImpactItem],
        findings: ArchitectureFindings | None = None,
        files: list[str] | None = None,
    ) -> list[Recommendation]:
        """Generate recommendations, highest priority first.

        Args:
            context: Classified change request
            profile: Current-state profile
            impacts: Ordered impact items
            findings: Previously computed findings (gaps, compliance issues)
            files: Repository file paths used for rule evidence

        Returns:
            Ranked recommendations with ids assigned
        """
        facts = RuleFacts(
            context=context,
            profile=profile,
            impacts=impacts,
            findings=findings or ArchitectureFindings(),
            files=list(files or []),
        )

        drafts: list[Recommendation] = []
        for category_rules in (
            self.architecture_rules,
            self.performance_rules,
            self.security_rules,
            self.developer_experience_rules,
            self.operations_rules,
            self.cost_rules,
        ):
            drafts.extend(category_rules(facts))

        for draft in drafts:
            draft.priority = self.priority(draft)

        # sorted() is stable, so rule order survives within a category
        ranked = sorted(drafts, key=lambda r: (-r.priority, r.category.order))
        self._assign_ids(ranked)
        self._enrich_top(ranked)

        logger.info("Generated %d recommendations", len(ranked))
        return ranked

    def priority(self, recommendation: Recommendation) -> int:
        """impact * confidence + effort penalty."""
        penalty = self.estimation.effort_penalty.get(recommendation.effort.value, 0)
        return recommendation.impact * recommendation.confidence + penalty

    @staticmethod
    def _assign_ids(ranked: list[Recommendation]) -> None:
        sequences: dict[Category, int] = {}
        for recommendation in ranked:
            sequence = sequences.get(recommendation.category, 0) + 1
            sequences[recommendation.category] = sequence
            recommendation.id = f"{recommendation.category.id_prefix}-{sequence}"

    def _enrich_top(self, ranked: list[Recommendation]) -> None:
        stages = {recommendation.id: stage_of(recommendation.title) for recommendation in ranked}

        for recommendation in ranked[:TOP_N]:
            stage = stages[recommendation.id]
            if stage == 1:
                recommendation.implementation_steps = list(ABSTRACTION_STEPS)
            elif stage == 2:
                recommendation.implementation_steps = list(MIGRATION_STEPS)
            else:
                recommendation.implementation_steps = list(GENERIC_STEPS)

            owners = ", ".join(recommendation.owners) or "the owning team"
            recommendation.acceptance_criteria = [
                criterion.format(title=recommendation.title, owners=owners)
                for criterion in ACCEPTANCE_CRITERIA
            ]

            prerequisite = STAGE_PREREQUISITES.get(stage)
            if prerequisite is not None:
                recommendation.dependencies = [
                    other.id
                    for other in ranked
                    if other.id != recommendation.id and stages[other.id] == prerequisite
                ]

    # =========================================================================
    # Architecture & Modularity
    # =========================================================================

    def architecture_rules(self, facts: RuleFacts) -> list[Recommendation]:
        category = Category.ARCHITECTURE
        recommendations = []

        if facts.is_migration and facts.database_components:
            is_vector = any(name in VECTOR_DATABASES for name in facts.database_components)
            store = "Vector Database" if is_vector else "Data Store"
            recommendations.append(
                _draft(
                    category,
                    f"Implement {store} Abstraction Layer",
                    "Application code talks to the current store directly, which couples the "
                    "migration to every call site.",
                    "Introduce a storage interface with one adapter per store and route all "
                    "access through it before switching stores.",
                    EffortSize.M, RiskLevel.LOW, 5, 5,
                    ["Platform Team"],
                    facts.direct_evidence("database"),
                )
            )

        if facts.is_migration and facts.touches_data:
            recommendations.append(
                _draft(
                    category,
                    "Create Data Migration Strategy",
                    "Existing data must move to the new store without loss or downtime.",
                    "Plan an idempotent, validated migration with dual writes and a staged "
                    "read cut-over.",
                    EffortSize.L, RiskLevel.HIGH, 5, 4,
                    ["Data Engineering Team"],
                    facts.files_matching(".sql", ".prisma", "migration"),
                )
            )

        if facts.profile.architecture.complexity_level == ComplexityLevel.HIGH:
            recommendations.append(
                _draft(
                    category,
                    "Modularize High-Complexity Codebase",
                    f"The codebase spans {facts.profile.file_count} files with high complexity, "
                    "which slows every change.",
                    "Split the codebase along domain boundaries into independently testable modules.",
                    EffortSize.L, RiskLevel.MEDIUM, 4, 3,
                    ["Architecture Team"],
                )
            )

        if facts.context.has_concept(Concept.FRONTEND) and "design" in facts.context.keywords:
            recommendations.append(
                _draft(
                    category,
                    "Adopt Design System Incrementally",
                    "UI changes are easier to roll out consistently from shared components.",
                    "Introduce design tokens and shared components screen by screen.",
                    EffortSize.M, RiskLevel.LOW, 3, 4,
                    ["Frontend Team"],
                )
            )

        return recommendations

    # =========================================================================
    # Performance & Scalability
    # =========================================================================

    def performance_rules(self, facts: RuleFacts) -> list[Recommendation]:
        category = Category.PERFORMANCE
        context = facts.context
        recommendations = []

        if "Caching" not in facts.profile.capabilities and context.has_concept(
            Concept.PERFORMANCE, Concept.API, Concept.BACKEND, Concept.DATABASE
        ):
            recommendations.append(
                _draft(
                    category,
                    "Implement Caching Strategy",
                    "No caching layer was detected; repeated reads hit the primary store.",
                    "Add a cache for hot read paths with explicit TTLs and invalidation.",
                    EffortSize.M, RiskLevel.LOW, 4, 5,
                    ["Platform Team"],
                )
            )

        if context.has_concept(Concept.PERFORMANCE) or context.change_type in (
            ChangeType.MIGRATION,
            ChangeType.OPTIMIZATION,
            ChangeType.SCALING,
        ):
            recommendations.append(
                _draft(
                    category,
                    "Establish Performance Baselines and Load Testing",
                    "Without baselines the effect of the change cannot be measured.",
                    "Capture latency and throughput baselines and add a repeatable load test.",
                    EffortSize.M, RiskLevel.LOW, 4, 4,
                    ["QA Team", "SRE Team"],
                )
            )

        if facts.is_migration and facts.database_components:
            recommendations.append(
                _draft(
                    category,
                    "Post-Migration Performance Optimization",
                    "Query patterns tuned for the old store rarely fit the new one.",
                    "Profile queries on the target store and tune indexes and batch sizes.",
                    EffortSize.M, RiskLevel.LOW, 3, 3,
                    ["Data Engineering Team"],
                )
            )

        if context.change_type == ChangeType.SCALING or "Horizontal scaling capability" in (
            facts.findings.target_capabilities
        ):
            recommendations.append(
                _draft(
                    category,
                    "Enable Horizontal Scaling",
                    "Capacity currently grows only by scaling single instances up.",
                    "Make services stateless and run them behind a load balancer with auto-scaling.",
                    EffortSize.L, RiskLevel.MEDIUM, 4, 3,
                    ["Platform Team", "SRE Team"],
                )
            )

        return recommendations

    # =========================================================================
    # Security & Compliance
    # =========================================================================

    def security_rules(self, facts: RuleFacts) -> list[Recommendation]:
        category = Category.SECURITY
        context = facts.context
        recommendations = []

        if not facts.profile.has_dependency("vault", "secret"):
            recommendations.append(
                _draft(
                    category,
                    "Implement Secret Management",
                    "No secret manager was detected; credentials likely live in environment files.",
                    "Move credentials into a managed secret store and inject them at runtime.",
                    EffortSize.M, RiskLevel.MEDIUM, 5, 5,
                    ["Security Team", "DevOps Team"],
                    facts.files_matching(".env"),
                )
            )

        auth_in_scope = context.has_concept(Concept.SECURITY) or any(
            c.name == "auth" for c in context.components
        )
        if auth_in_scope and facts.profile.apis.authentication in (UNKNOWN, "Custom"):
            recommendations.append(
                _draft(
                    category,
                    "Introduce Centralized Authentication",
                    "Authentication is missing or hand-rolled.",
                    "Adopt a standard identity provider with OAuth2/OIDC and shared middleware.",
                    EffortSize.L, RiskLevel.HIGH, 5, 4,
                    ["Security Team"],
                )
            )

        if facts.touches_data:
            recommendations.append(
                _draft(
                    category,
                    "Add Audit Trail for Data Changes",
                    "Changes to stored data should be traceable.",
                    "Record who changed what and when for every write path touched by the change.",
                    EffortSize.M, RiskLevel.LOW, 3, 4,
                    ["Security Team"],
                )
            )

        return recommendations

    # =========================================================================
    # Developer Experience
    # =========================================================================

    def developer_experience_rules(self, facts: RuleFacts) -> list[Recommendation]:
        category = Category.DEVELOPER_EXPERIENCE
        quality = facts.profile.quality
        recommendations = []

        if not quality.has_tests:
            recommendations.append(
                _draft(
                    category,
                    "Implement Comprehensive Testing Framework",
                    "No test files were detected, so regressions go unnoticed.",
                    "Add unit and integration test suites and run them on every change.",
                    EffortSize.M, RiskLevel.LOW, 4, 5,
                    ["QA Team", "Development Team"],
                )
            )

        if quality.documentation_level == "minimal":
            recommendations.append(
                _draft(
                    category,
                    "Improve Developer Documentation",
                    "Documentation is minimal, which slows onboarding and reviews.",
                    "Write a README with setup steps plus architecture and decision records.",
                    EffortSize.S, RiskLevel.LOW, 3, 4,
                    ["Development Team"],
                )
            )

        if quality.ci_platform == UNKNOWN:
            recommendations.append(
                _draft(
                    category,
                    "Set Up Continuous Integration Pipeline",
                    "No CI configuration was detected.",
                    "Run build, lint and tests automatically on every pull request.",
                    EffortSize.S, RiskLevel.LOW, 4, 5,
                    ["DevOps Team"],
                )
            )

        for component in facts.context.components:
            if any(fact.name.lower() == component.display_name.lower() for fact in facts.profile.tech_stack):
                continue
            recommendations.append(
                _draft(
                    category,
                    f"Run {component.display_name} Proof of Concept",
                    f"{component.display_name} is new to this codebase.",
                    f"Validate {component.display_name} against a representative workload "
                    "before committing to it.",
                    EffortSize.S, RiskLevel.LOW, 3, 4,
                    ["Development Team"],
                )
            )

        return recommendations

    # =========================================================================
    # Operational Excellence
    # =========================================================================

    def operations_rules(self, facts: RuleFacts) -> list[Recommendation]:
        category = Category.OPERATIONS
        context = facts.context
        recommendations = []

        if facts.profile.quality.monitoring_level == "basic":
            recommendations.append(
                _draft(
                    category,
                    "Implement Observability Stack",
                    "Only basic monitoring was detected.",
                    "Add structured logging, metrics and tracing with alerting on key signals.",
                    EffortSize.M, RiskLevel.LOW, 4, 4,
                    ["SRE Team"],
                )
            )

        if context.change_type in (ChangeType.MIGRATION, ChangeType.UPGRADE) or context.scope == Scope.LARGE:
            recommendations.append(
                _draft(
                    category,
                    "Define Rollback and Dual-Running Procedures",
                    "A failed cut-over must be reversible without data loss.",
                    "Run old and new paths side by side and document a rehearsed rollback.",
                    EffortSize.M, RiskLevel.MEDIUM, 5, 4,
                    ["DevOps Team"],
                )
            )

        if not facts.profile.stack_names(TechType.CONTAINER) and (
            context.has_concept(Concept.INFRASTRUCTURE) or context.change_type == ChangeType.SCALING
        ):
            recommendations.append(
                _draft(
                    category,
                    "Containerize Application Workloads",
                    "Workloads are not containerized, which complicates repeatable deployments.",
                    "Package services as container images and deploy them through one pipeline.",
                    EffortSize.M, RiskLevel.MEDIUM, 3, 4,
                    ["DevOps Team"],
                )
            )

        return recommendations

    # =========================================================================
    # Cost Optimization
    # =========================================================================

    def cost_rules(self, facts: RuleFacts) -> list[Recommendation]:
        category = Category.COST
        profile = facts.profile
        recommendations = []

        if profile.stack_names(TechType.CLOUD) or facts.context.has_concept(Concept.INFRASTRUCTURE):
            recommendations.append(
                _draft(
                    category,
                    "Right-Size Cloud Resources",
                    "Provisioned capacity is rarely revisited after launch.",
                    "Review utilization and adjust instance sizes and reservations.",
                    EffortSize.S, RiskLevel.LOW, 3, 3,
                    ["FinOps Team"],
                )
            )

        if len(profile.dependency_names) > DEPENDENCY_SPRAWL_THRESHOLD:
            recommendations.append(
                _draft(
                    category,
                    "Consolidate Overlapping Dependencies",
                    f"{len(profile.dependency_names)} dependencies increase maintenance and audit cost.",
                    "Remove unused packages and converge on one library per concern.",
                    EffortSize.S, RiskLevel.LOW, 2, 3,
                    ["Development Team"],
                )
            )

        if facts.findings.tech_debt_hours > DEBT_SPRINT_THRESHOLD_HOURS:
            recommendations.append(
                _draft(
                    category,
                    "Schedule Technical Debt Reduction Sprint",
                    f"{facts.findings.tech_debt_hours} hours of technical debt were identified.",
                    "Reserve a sprint for the highest-impact debt items before the change lands.",
                    EffortSize.M, RiskLevel.LOW, 3, 4,
                    ["Engineering Management"],
                )
            )

        return recommendations
