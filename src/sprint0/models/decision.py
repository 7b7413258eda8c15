"""Architecture decision record entity.

One record is proposed per assessment. It is numbered from the run's explicit
sequence (ADR-001, ADR-002, ...) so separate runs never share a counter.
"""

from dataclasses import dataclass, field
from typing import Any

ADR_STATUS_PROPOSED = "Proposed"


def format_adr_id(sequence: int) -> str:
    """Decision record id for a per-run sequence number (e.g., ADR-001)."""
    return f"ADR-{sequence:03d}"


@dataclass
class DecisionRecord:
    """Proposed architecture decision for a change request.

    Attributes:
        id: Record id (ADR-001)
        title: Decision subject
        slug: File-name slug derived from the title
        status: Lifecycle status (always "Proposed" when generated)
        context: Change-request text
        drivers: Forces behind the decision
        constraints: Known constraints and violations
        impacted_components: Components the decision touches
        approach: Recommendations adopted as the implementation approach
        effort: Overall T-shirt effort
        rollout: Rollout strategy
        rollback: Rollback strategy
        positive_consequences: Expected benefits
        negative_consequences: Expected costs
        risks: Top risks as "description (likelihood/impact)" strings
        alternatives: Alternatives considered, as (name, reason) pairs
    """

    id: str
    title: str
    slug: str = ""
    status: str = ADR_STATUS_PROPOSED
    context: str = ""
    drivers: list[str] = field(default_factory=list)
    constraints: list[str] = field(default_factory=list)
    impacted_components: list[str] = field(default_factory=list)
    approach: list[str] = field(default_factory=list)
    effort: str = "S"
    rollout: str = ""
    rollback: str = ""
    positive_consequences: list[str] = field(default_factory=list)
    negative_consequences: list[str] = field(default_factory=list)
    risks: list[str] = field(default_factory=list)
    alternatives: list[tuple[str, str]] = field(default_factory=list)

    @property
    def filename(self) -> str:
        """Markdown file name (ADR-001-add-caching.md)."""
        return f"{self.id}-{self.slug}.md" if self.slug else f"{self.id}.md"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "status": self.status,
            "context": self.context,
            "drivers": list(self.drivers),
            "constraints": list(self.constraints),
            "impacted_components": list(self.impacted_components),
            "approach": list(self.approach),
            "effort": self.effort,
            "rollout": self.rollout,
            "rollback": self.rollback,
            "positive_consequences": list(self.positive_consequences),
            "negative_consequences": list(self.negative_consequences),
            "risks": list(self.risks),
            "alternatives": [
                {"name": name, "reason": reason} for name, reason in self.alternatives
            ],
        }
