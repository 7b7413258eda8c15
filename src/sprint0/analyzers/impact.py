"""Impact analysis.

Produces an ordered list of ImpactItems:
1. Direct impacts: one per component named in the change request (in text
   order), sized by the number of repository files matching the component's
   search terms.
2. Indirect impacts: fixed single-hop propagation rules keyed by the type of
   the triggering direct impact, emitted in trigger order.

When the change request names no components, generic targets are derived
from its concepts (Frontend, Backend, Database) so that broad requests still
produce an impact matrix.
"""

import logging
import re
from dataclasses import dataclass

from sprint0.analyzers.classifier import COMPONENT_ALIASES, VECTOR_DATABASES
from sprint0.analyzers.profiler import normalize_path
from sprint0.models.change import ChangeContext, ComponentType, Concept
from sprint0.models.impact import (
    WILDCARD,
    WHOLE_FILE,
    EffortSize,
    Evidence,
    ImpactChangeType,
    ImpactItem,
    ImpactKind,
    RiskLevel,
)
from sprint0.models.profile import CurrentStateProfile

logger = logging.getLogger(__name__)

# Upper bounds (exclusive) on matched-file counts per effort size; above the last is XL
EFFORT_THRESHOLDS: list[tuple[int, EffortSize]] = [
    (5, EffortSize.S),
    (15, EffortSize.M),
    (30, EffortSize.L),
]

MAX_EVIDENCE = 25

PRODUCTION_MARKER = re.compile(r"(^|[/._-])prod(uction)?([/._-]|$)")

# =============================================================================
# Search terms
# =============================================================================

VECTOR_TERMS = ("vector", "embedding", *sorted(VECTOR_DATABASES), "chroma")
DATA_STORE_TERMS = ("database", "schema", ".sql", "db/", "migrations/", "models/", "repositor")

FRAMEWORK_TERMS: dict[str, tuple[str, ...]] = {
    "react": (".jsx", ".tsx", "components/"),
    "vue": (".vue",),
    "angular": (".component.ts", ".module.ts"),
    "nextjs": ("pages/", "next.config"),
    "express": ("routes/", "middleware", "server."),
    "fastapi": ("routers/", "api/", "main.py"),
    "django": ("views.py", "urls.py", "models.py"),
    "flask": ("routes", "views", "app.py"),
    "spring": ("controller", "application.properties"),
    "rails": ("app/controllers", "routes.rb"),
}

SERVICE_TERMS: dict[str, tuple[str, ...]] = {
    "auth": ("auth", "login", "session", "jwt", "oauth", "passport"),
    "payment": ("payment", "billing", "checkout", "stripe", "invoice"),
    "email": ("email", "mail", "smtp", "notification"),
    "storage": ("storage", "upload", "s3", "blob"),
    "queue": ("queue", "worker", "job", "consumer", "producer"),
    "cache": ("cache", "redis", "memcache"),
    "search": ("search", "index", "elastic"),
}

DIRECT_CHANGE_TYPES: dict[str, ImpactChangeType] = {
    "database": ImpactChangeType.SCHEMA,
    "framework": ImpactChangeType.LOGIC,
    "service": ImpactChangeType.API,
    "frontend": ImpactChangeType.LOGIC,
    "backend": ImpactChangeType.API,
}


@dataclass(frozen=True)
class ImpactTarget:
    """A component to search the repository for."""

    name: str
    display_name: str
    source_type: str
    terms: tuple[str, ...]


# Concept-derived targets, in emission order
CONCEPT_TARGETS: list[tuple[tuple[Concept, ...], ImpactTarget]] = [
    (
        (Concept.FRONTEND,),
        ImpactTarget(
            "frontend",
            "Frontend",
            "frontend",
            ("frontend", "client/", "components/", "pages/", "views/", ".jsx", ".tsx", ".vue", ".css"),
        ),
    ),
    (
        (Concept.API, Concept.BACKEND),
        ImpactTarget(
            "backend",
            "Backend",
            "backend",
            ("api/", "routes/", "server/", "controllers/", "services/", "handlers/"),
        ),
    ),
    (
        (Concept.DATABASE,),
        ImpactTarget("database", "Database", "database", DATA_STORE_TERMS),
    ),
]

# =============================================================================
# Indirect propagation rules
# =============================================================================


@dataclass(frozen=True)
class IndirectRule:
    """Single-hop propagation from a direct impact type.

    Attributes:
        component: Impacted component name
        change_type: Kind of artifact touched
        effort: Fixed effort
        risk: Fixed risk
        directories: Directory names whose first occurrence becomes wildcard evidence
        manifests: File basenames cited as whole-file evidence
        fallback: Wildcard evidence used when nothing in the repository matches
    """

    component: str
    change_type: ImpactChangeType
    effort: EffortSize
    risk: RiskLevel
    directories: tuple[str, ...] = ()
    manifests: tuple[str, ...] = ()
    fallback: str = "*"


_DATA_ACCESS_RULE = IndirectRule(
    component="Data Access Layer",
    change_type=ImpactChangeType.LOGIC,
    effort=EffortSize.M,
    risk=RiskLevel.MEDIUM,
    directories=("services", "repositories", "repository", "dao", "data"),
    fallback="services/*",
)
_BUILD_RULE = IndirectRule(
    component="Build Pipeline",
    change_type=ImpactChangeType.BUILD,
    effort=EffortSize.S,
    risk=RiskLevel.LOW,
    manifests=(
        "package.json", "requirements.txt", "pyproject.toml", "pom.xml",
        "build.gradle", "webpack.config.js", "vite.config.ts", "vite.config.js",
    ),
    fallback="build/*",
)
_CONTRACT_TESTS_RULE = IndirectRule(
    component="API Contract Tests",
    change_type=ImpactChangeType.TESTS,
    effort=EffortSize.S,
    risk=RiskLevel.LOW,
    directories=("tests", "test", "__tests__", "spec"),
    fallback="tests/*",
)

INDIRECT_RULES: dict[str, IndirectRule] = {
    "database": _DATA_ACCESS_RULE,
    "framework": _BUILD_RULE,
    "frontend": _BUILD_RULE,
    "service": _CONTRACT_TESTS_RULE,
    "backend": _CONTRACT_TESTS_RULE,
}


def effort_for(matched_files: int) -> EffortSize:
    """T-shirt effort for a matched-file count."""
    for upper_bound, effort in EFFORT_THRESHOLDS:
        if matched_files < upper_bound:
            return effort
    return EffortSize.XL


def has_production_marker(text: str) -> bool:
    """Whether a name or path contains a production marker token."""
    return bool(PRODUCTION_MARKER.search(text.lower()))


class ImpactAnalyzer:
    """Builds the ordered impact list for a classified change request."""

    def analyze(
        self,
        profile: CurrentStateProfile,
        context: ChangeContext,
        files: list[str],
    ) -> list[ImpactItem]:
        """Produce direct impacts followed by indirect impacts.

        Args:
            profile: Current-state profile of the repository
            context: Classified change request
            files: Repository file paths

        Returns:
            Ordered impact items (direct first)
        """
        indexed = [(path, normalize_path(path)) for path in files if path and path.strip()]

        targets = self.resolve_targets(context)
        direct = [self._direct_impact(target, indexed) for target in targets]
        indirect = self._indirect_impacts(direct, indexed)

        for item in direct:
            if not item.has_evidence:
                logger.warning(
                    "No repository files matched %s; impact needs investigation",
                    item.component,
                )

        logger.info(
            "Impact analysis for %d-file %s repository: %d direct, %d indirect",
            profile.file_count,
            profile.project_type.value,
            len(direct),
            len(indirect),
        )
        return direct + indirect

    def resolve_targets(self, context: ChangeContext) -> list[ImpactTarget]:
        """Named components, or concept-derived targets when none are named."""
        if context.components:
            return [
                ImpactTarget(
                    name=component.name,
                    display_name=component.display_name,
                    source_type=component.type.value,
                    terms=self._terms_for(component.type, component.name),
                )
                for component in context.components
            ]

        return [target for concepts, target in CONCEPT_TARGETS if context.has_concept(*concepts)]

    def _terms_for(self, component_type: ComponentType, name: str) -> tuple[str, ...]:
        aliases = tuple(alias for alias, canonical in COMPONENT_ALIASES.items() if canonical == name)
        own = (name, *aliases)

        if component_type == ComponentType.DATABASE:
            family = VECTOR_TERMS if name in VECTOR_DATABASES else DATA_STORE_TERMS
        elif component_type == ComponentType.FRAMEWORK:
            family = FRAMEWORK_TERMS.get(name, ())
        else:
            family = SERVICE_TERMS.get(name, ())

        return tuple(dict.fromkeys(own + family))

    def _direct_impact(
        self,
        target: ImpactTarget,
        indexed: list[tuple[str, str]],
    ) -> ImpactItem:
        matched = [
            original
            for original, normalized in indexed
            if any(term in normalized for term in target.terms)
        ]

        risk = RiskLevel.MEDIUM
        if has_production_marker(target.name) or any(
            has_production_marker(path) for path in matched
        ):
            risk = RiskLevel.HIGH

        return ImpactItem(
            component=target.display_name,
            change_type=DIRECT_CHANGE_TYPES.get(target.source_type, ImpactChangeType.LOGIC),
            effort=effort_for(len(matched)),
            risk=risk,
            evidence=[Evidence(file=path, line_range=WHOLE_FILE) for path in matched[:MAX_EVIDENCE]],
            kind=ImpactKind.DIRECT,
            source_type=target.source_type,
            matched_files=len(matched),
        )

    def _indirect_impacts(
        self,
        direct: list[ImpactItem],
        indexed: list[tuple[str, str]],
    ) -> list[ImpactItem]:
        indirect: list[ImpactItem] = []
        emitted: set[str] = set()

        for item in direct:
            rule = INDIRECT_RULES.get(item.source_type)
            if rule is None or rule.component in emitted:
                continue
            emitted.add(rule.component)
            indirect.append(
                ImpactItem(
                    component=rule.component,
                    change_type=rule.change_type,
                    effort=rule.effort,
                    risk=rule.risk,
                    evidence=[self._rule_evidence(rule, indexed)],
                    kind=ImpactKind.INDIRECT,
                    source_type=item.source_type,
                    matched_files=0,
                    triggered_by=item.component,
                )
            )

        return indirect

    def _rule_evidence(self, rule: IndirectRule, indexed: list[tuple[str, str]]) -> Evidence:
        for original, normalized in indexed:
            if normalized.rsplit("/", 1)[-1] in rule.manifests:
                return Evidence(file=original, line_range=WHOLE_FILE)

        for original, normalized in indexed:
            parts = normalized.split("/")[:-1]
            for index, part in enumerate(parts):
                if part in rule.directories:
                    prefix = "/".join(parts[: index + 1])
                    return Evidence(file=f"{prefix}/*", line_range=WILDCARD)

        return Evidence(file=rule.fallback, line_range=WILDCARD)
