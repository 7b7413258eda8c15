"""Recommendation entities."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from sprint0.models.impact import EffortSize, Evidence, RiskLevel


class Category(Enum):
    """Recommendation category, declared in tie-break order."""

    ARCHITECTURE = "Architecture & Modularity"
    PERFORMANCE = "Performance & Scalability"
    SECURITY = "Security & Compliance"
    DEVELOPER_EXPERIENCE = "Developer Experience"
    OPERATIONS = "Operational Excellence"
    COST = "Cost Optimization"

    @property
    def order(self) -> int:
        """Position used to break priority ties."""
        return list(Category).index(self)

    @property
    def id_prefix(self) -> str:
        """Prefix for per-run recommendation ids (e.g., "arch")."""
        return _ID_PREFIXES[self]


_ID_PREFIXES = {
    Category.ARCHITECTURE: "arch",
    Category.PERFORMANCE: "perf",
    Category.SECURITY: "sec",
    Category.DEVELOPER_EXPERIENCE: "dx",
    Category.OPERATIONS: "ops",
    Category.COST: "cost",
}


@dataclass
class Recommendation:
    """A prioritized, evidence-linked recommendation.

    Attributes:
        id: Per-run id (category prefix + sequence)
        category: Recommendation category
        title: Short imperative title
        why: Rationale
        how: Approach
        effort: T-shirt effort
        risk: Delivery risk
        impact: Expected impact (1-5)
        confidence: Confidence in the recommendation (1-5)
        priority: Derived ranking score
        owners: Suggested owning teams
        evidence: Supporting files
        dependencies: Ids of recommendations that must land first
        timeline: Indicative duration
        implementation_steps: Ordered steps (top recommendations only)
        acceptance_criteria: Definition of done (top recommendations only)
    """

    id: str
    category: Category
    title: str
    why: str
    how: str
    effort: EffortSize
    risk: RiskLevel
    impact: int
    confidence: int
    priority: int = 0
    owners: list[str] = field(default_factory=list)
    evidence: list[Evidence] = field(default_factory=list)
    dependencies: list[str] = field(default_factory=list)
    timeline: str = ""
    implementation_steps: list[str] = field(default_factory=list)
    acceptance_criteria: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate the 1-5 scales."""
        for name in ("impact", "confidence"):
            value = getattr(self, name)
            if not 1 <= value <= 5:
                raise ValueError(f"{name} must be between 1 and 5 (got {value})")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "category": self.category.value,
            "title": self.title,
            "why": self.why,
            "how": self.how,
            "effort": self.effort.value,
            "risk": self.risk.value,
            "impact": self.impact,
            "confidence": self.confidence,
            "priority": self.priority,
            "owners": list(self.owners),
            "evidence": [e.to_dict() for e in self.evidence],
            "dependencies": list(self.dependencies),
            "timeline": self.timeline,
            "implementation_steps": list(self.implementation_steps),
            "acceptance_criteria": list(self.acceptance_criteria),
        }
