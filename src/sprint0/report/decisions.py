"""Architecture decision record generation.

Proposes one ADR per assessment from the classified change, the top impacts,
the top recommendations and the risk register. Records are numbered from the
run's explicit sequence.
"""

import logging
import re

from sprint0.models.change import ChangeContext, ChangeType
from sprint0.models.decision import DecisionRecord, format_adr_id
from sprint0.models.findings import ArchitectureFindings
from sprint0.models.impact import EffortSize, ImpactItem
from sprint0.models.recommendation import Recommendation

logger = logging.getLogger(__name__)

MAX_SLUG_LENGTH = 30
MAX_IMPACTED_COMPONENTS = 5
MAX_APPROACH_ITEMS = 3
MAX_RISKS = 3

# (rollout, rollback) per change type
STRATEGIES: dict[ChangeType, tuple[str, str]] = {
    ChangeType.MIGRATION: (
        "Phased migration with dual writes and gradual traffic shifting",
        "Switch reads back to the source system; keep it in sync until cut-over is confirmed",
    ),
    ChangeType.UPGRADE: (
        "Upgrade one environment at a time behind the existing test suite",
        "Pin the previous versions and redeploy the last known-good build",
    ),
    ChangeType.INTEGRATION: (
        "Enable the integration behind a feature flag for a pilot group",
        "Disable the feature flag; the integration is isolated behind an adapter",
    ),
    ChangeType.SCALING: (
        "Scale incrementally while load testing each step",
        "Return to the previous capacity configuration",
    ),
    ChangeType.FEATURE: (
        "Release behind a feature flag, then widen to all users",
        "Disable the feature flag",
    ),
}
DEFAULT_STRATEGY = (
    "Standard release through the existing delivery pipeline",
    "Redeploy the previous release",
)

ALTERNATIVES: list[tuple[str, str]] = [
    ("Do Nothing", "Leaves the change request unaddressed"),
    ("Partial Implementation", "Would not fully address the need"),
    ("Third-party Solution", "Would require significant integration effort"),
]


def slugify(text: str) -> str:
    """File-name slug: lower case, hyphens for whitespace, [a-z0-9-] only."""
    slug = re.sub(r"\s+", "-", text.strip().lower())
    slug = re.sub(r"[^a-z0-9-]", "", slug)
    return slug[:MAX_SLUG_LENGTH].strip("-")


class DecisionRecordBuilder:
    """Builds the proposed decision record for one assessment."""

    def build(
        self,
        subject: str,
        context: ChangeContext,
        impacts: list[ImpactItem],
        findings: ArchitectureFindings,
        recommendations: list[Recommendation],
        sequence: int = 1,
    ) -> DecisionRecord:
        """Build the decision record.

        Args:
            subject: Decision subject (usually the change-request title)
            context: Classified change request
            impacts: Ordered impact items
            findings: Architecture findings (constraints and risks)
            recommendations: Ranked recommendations
            sequence: Per-run sequence number (>= 1)

        Returns:
            DecisionRecord numbered from ``sequence``
        """
        subject = subject.strip() or "Change request"
        effort = max((item.effort for item in impacts), key=lambda e: e.rank, default=EffortSize.S)
        rollout, rollback = STRATEGIES.get(context.change_type, DEFAULT_STRATEGY)

        record = DecisionRecord(
            id=format_adr_id(max(sequence, 1)),
            title=subject,
            slug=slugify(subject),
            context=context.raw_text.strip() or subject,
            drivers=self._drivers(context),
            constraints=list(findings.violations),
            impacted_components=[item.component for item in impacts[:MAX_IMPACTED_COMPONENTS]],
            approach=[
                f"{rec.id}: {rec.title}" if rec.id else rec.title
                for rec in recommendations[:MAX_APPROACH_ITEMS]
            ],
            effort=effort.value,
            rollout=rollout,
            rollback=rollback,
            positive_consequences=self._positive(findings),
            negative_consequences=self._negative(effort, impacts, findings),
            risks=[
                f"{risk.description} ({risk.likelihood.value}/{risk.impact.value})"
                for risk in findings.risks[:MAX_RISKS]
            ],
            alternatives=list(ALTERNATIVES),
        )
        logger.debug("Proposed %s (%s)", record.id, record.slug or "untitled")
        return record

    @staticmethod
    def _drivers(context: ChangeContext) -> list[str]:
        drivers = [f"{context.change_type.value.capitalize()} requested ({context.scope.value} scope)"]
        drivers.extend(
            f"Concern: {concept.value}" for concept in sorted(context.concepts, key=lambda c: c.value)
        )
        return drivers

    @staticmethod
    def _positive(findings: ArchitectureFindings) -> list[str]:
        positive = ["Addresses the change request"]
        positive.extend(f"Adds {capability}" for capability in findings.target_capabilities)
        if findings.reusable_components:
            positive.append("Reuses " + ", ".join(findings.reusable_components))
        return positive

    @staticmethod
    def _negative(
        effort: EffortSize, impacts: list[ImpactItem], findings: ArchitectureFindings
    ) -> list[str]:
        negative = [
            f"Requires {effort.value} effort across {len(impacts)} impacted component(s)"
        ]
        if findings.new_components:
            negative.append("Introduces " + ", ".join(findings.new_components))
        if findings.gaps:
            negative.append(f"{len(findings.gaps)} gap(s) must be closed first")
        return negative
