"""Impact analysis entities."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

WHOLE_FILE = "1-*"
WILDCARD = "*"


class ImpactChangeType(Enum):
    """What kind of artifact an impact touches."""

    API = "API"
    SCHEMA = "schema"
    CONFIG = "config"
    INFRA = "infra"
    BUILD = "build"
    TESTS = "tests"
    LOGIC = "logic"


class EffortSize(Enum):
    """T-shirt effort estimate."""

    S = "S"
    M = "M"
    L = "L"
    XL = "XL"

    @property
    def rank(self) -> int:
        """Ordinal position (S=1 .. XL=4)."""
        return _EFFORT_RANKS[self]


class RiskLevel(Enum):
    """Risk scale."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        """Ordinal position (low=1 .. critical=4)."""
        return _RISK_RANKS[self]


_EFFORT_RANKS = {EffortSize.S: 1, EffortSize.M: 2, EffortSize.L: 3, EffortSize.XL: 4}
_RISK_RANKS = {
    RiskLevel.LOW: 1,
    RiskLevel.MEDIUM: 2,
    RiskLevel.HIGH: 3,
    RiskLevel.CRITICAL: 4,
}


class ImpactKind(Enum):
    """Whether an impact was named directly or propagated by a rule."""

    DIRECT = "direct"
    INDIRECT = "indirect"


@dataclass(frozen=True)
class Evidence:
    """A file (or wildcard path) supporting an impact or recommendation.

    Attributes:
        file: Repository-relative path, possibly ending in ``/*``
        line_range: "1-*" for a whole file, "*" for a wildcard path
    """

    file: str
    line_range: str = WHOLE_FILE

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for serialization."""
        return {"file": self.file, "line_range": self.line_range}


@dataclass
class ImpactItem:
    """One impacted component.

    Attributes:
        component: Display name of the impacted component
        change_type: Kind of artifact touched
        effort: T-shirt effort
        risk: Risk level
        evidence: Supporting files (capped; see matched_files for the full count)
        kind: Direct or indirect
        source_type: Component type the item came from (database, framework, ...)
        matched_files: Total number of matching files
        triggered_by: Direct component that triggered an indirect item
    """

    component: str
    change_type: ImpactChangeType
    effort: EffortSize
    risk: RiskLevel
    evidence: list[Evidence] = field(default_factory=list)
    kind: ImpactKind = ImpactKind.DIRECT
    source_type: str = ""
    matched_files: int = 0
    triggered_by: str | None = None

    @property
    def is_direct(self) -> bool:
        """Whether the item was named directly in the change request."""
        return self.kind == ImpactKind.DIRECT

    @property
    def has_evidence(self) -> bool:
        """Whether at least one evidence entry is attached."""
        return bool(self.evidence)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "component": self.component,
            "change_type": self.change_type.value,
            "effort": self.effort.value,
            "risk": self.risk.value,
            "evidence": [e.to_dict() for e in self.evidence],
            "kind": self.kind.value,
            "source_type": self.source_type,
            "matched_files": self.matched_files,
            "triggered_by": self.triggered_by,
        }
