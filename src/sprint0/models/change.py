"""Change-request classification entities."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Concept(Enum):
    """Architectural concern a change request touches."""

    DATABASE = "database"
    API = "api"
    SECURITY = "security"
    FRONTEND = "frontend"
    BACKEND = "backend"
    INFRASTRUCTURE = "infrastructure"
    MIGRATION = "migration"
    PERFORMANCE = "performance"
    INTEGRATION = "integration"
    TESTING = "testing"


class ChangeType(Enum):
    """Primary kind of change (precedence lives in the classifier rule table)."""

    MIGRATION = "migration"
    FEATURE = "feature"
    BUGFIX = "bugfix"
    OPTIMIZATION = "optimization"
    REFACTORING = "refactoring"
    INTEGRATION = "integration"
    UPGRADE = "upgrade"
    SCALING = "scaling"
    ENHANCEMENT = "enhancement"


class Scope(Enum):
    """Breadth of a change request."""

    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class ComponentType(Enum):
    """Vocabulary a named component was matched against."""

    DATABASE = "database"
    FRAMEWORK = "framework"
    SERVICE = "service"


@dataclass(frozen=True)
class NamedComponent:
    """A component named in the change request.

    Attributes:
        type: Vocabulary the token matched
        name: Canonical lower-case token (e.g., "qdrant")
        display_name: Human-facing name (e.g., "Qdrant")
    """

    type: ComponentType
    name: str
    display_name: str

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for serialization."""
        return {
            "type": self.type.value,
            "name": self.name,
            "display_name": self.display_name,
        }


@dataclass(frozen=True)
class ChangeContext:
    """Immutable classification of a change request."""

    raw_text: str = ""
    concepts: frozenset[Concept] = frozenset()
    change_type: ChangeType = ChangeType.ENHANCEMENT
    components: tuple[NamedComponent, ...] = ()
    scope: Scope = Scope.MEDIUM
    keywords: frozenset[str] = frozenset()

    @classmethod
    def empty(cls, raw_text: str = "") -> "ChangeContext":
        """Context with every field at its default."""
        return cls(raw_text=raw_text)

    def has_concept(self, *concepts: Concept) -> bool:
        """Whether any of the given concepts is present."""
        return any(concept in self.concepts for concept in concepts)

    def components_of(self, component_type: ComponentType) -> list[NamedComponent]:
        """Named components of one type, in text order."""
        return [c for c in self.components if c.type == component_type]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "raw_text": self.raw_text,
            "concepts": sorted(concept.value for concept in self.concepts),
            "change_type": self.change_type.value,
            "components": [component.to_dict() for component in self.components],
            "scope": self.scope.value,
            "keywords": sorted(self.keywords),
        }
