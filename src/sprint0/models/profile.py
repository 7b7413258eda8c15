"""Current-state profile entities.

This module contains the facts the profiler derives from a repository snapshot:
- TechFact: one detected technology with its confirming-signal count
- ArchitectureInfo: structural patterns, layout and size-based complexity
- DependencyCategories: dependency names bucketed by role
- QualityPosture: weighted quality signals
- DataProfile / ApiProfile: data entities and API surface
- ProjectType: closed classification of the repository (with its family)
- CurrentStateProfile: the immutable aggregate of all of the above
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

UNKNOWN = "unknown"


class TechType(Enum):
    """Kind of technology fact."""

    LANGUAGE = "language"
    FRAMEWORK = "framework"
    DATABASE = "database"
    CLOUD = "cloud"
    CONTAINER = "container"
    INFRASTRUCTURE = "infrastructure"
    BUILD_TOOL = "build-tool"


class ArchitectureStructure(Enum):
    """Top-level layout of the repository."""

    FULL_STACK_MONOREPO = "full-stack-monorepo"
    SINGLE_PAGE_APPLICATION = "single-page-application"
    BACKEND_SERVICE = "backend-service"
    MONOLITHIC = "monolithic"
    UNKNOWN = "unknown"


class ComplexityLevel(Enum):
    """Three-step complexity scale shared by profile and metrics."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class QualityLevel(Enum):
    """Quality band derived from the weighted quality score."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ProjectFamily(Enum):
    """Family of project types sharing one report-section strategy."""

    FRONTEND = "frontend"
    BACKEND = "backend"
    FULLSTACK = "fullstack"
    MOBILE = "mobile"
    DATA_SCIENCE = "data-science"
    BLOCKCHAIN = "blockchain"
    INFRASTRUCTURE = "infrastructure"
    GENERAL = "general"


class ProjectType(Enum):
    """Closed classification of the profiled repository."""

    MOBILE_REACT_NATIVE = "mobile-react-native"
    MOBILE_IOS = "mobile-ios"
    MOBILE_ANDROID = "mobile-android"
    MOBILE_FLUTTER = "mobile-flutter"
    ML_DATA_SCIENCE = "ml-data-science"
    JUPYTER_NOTEBOOK = "jupyter-notebook"
    IOT_EMBEDDED = "iot-embedded"
    GAME_DEVELOPMENT = "game-development"
    BLOCKCHAIN_WEB3 = "blockchain-web3"
    INFRASTRUCTURE_IAC = "infrastructure-iac"
    CONTAINERIZED = "containerized"
    BACKEND_API = "backend-api"
    BACKEND_GRAPHQL = "backend-graphql"
    BACKEND_GOLANG = "backend-golang"
    FRONTEND_REACT = "frontend-react"
    FRONTEND_VUE = "frontend-vue"
    FRONTEND_ANGULAR = "frontend-angular"
    FRONTEND_SVELTE = "frontend-svelte"
    FULLSTACK = "fullstack"
    STATIC_SITE = "static-site"
    DESKTOP_APP = "desktop-app"
    CLI_TOOL = "cli-tool"
    LIBRARY = "library"
    GENERAL = "general"

    @property
    def family(self) -> ProjectFamily:
        """Family used to pick the report-section strategy."""
        return _PROJECT_FAMILIES.get(self, ProjectFamily.GENERAL)


_PROJECT_FAMILIES: dict[ProjectType, ProjectFamily] = {
    ProjectType.MOBILE_REACT_NATIVE: ProjectFamily.MOBILE,
    ProjectType.MOBILE_IOS: ProjectFamily.MOBILE,
    ProjectType.MOBILE_ANDROID: ProjectFamily.MOBILE,
    ProjectType.MOBILE_FLUTTER: ProjectFamily.MOBILE,
    ProjectType.ML_DATA_SCIENCE: ProjectFamily.DATA_SCIENCE,
    ProjectType.JUPYTER_NOTEBOOK: ProjectFamily.DATA_SCIENCE,
    ProjectType.BLOCKCHAIN_WEB3: ProjectFamily.BLOCKCHAIN,
    ProjectType.INFRASTRUCTURE_IAC: ProjectFamily.INFRASTRUCTURE,
    ProjectType.CONTAINERIZED: ProjectFamily.INFRASTRUCTURE,
    ProjectType.BACKEND_API: ProjectFamily.BACKEND,
    ProjectType.BACKEND_GRAPHQL: ProjectFamily.BACKEND,
    ProjectType.BACKEND_GOLANG: ProjectFamily.BACKEND,
    ProjectType.FRONTEND_REACT: ProjectFamily.FRONTEND,
    ProjectType.FRONTEND_VUE: ProjectFamily.FRONTEND,
    ProjectType.FRONTEND_ANGULAR: ProjectFamily.FRONTEND,
    ProjectType.FRONTEND_SVELTE: ProjectFamily.FRONTEND,
    ProjectType.FULLSTACK: ProjectFamily.FULLSTACK,
}


@dataclass(frozen=True)
class TechFact:
    """One detected technology.

    Attributes:
        type: Kind of technology
        name: Display name (e.g., "Express", "PostgreSQL")
        evidence_count: Number of signals that confirmed the fact
    """

    type: TechType
    name: str
    evidence_count: int = 1

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "type": self.type.value,
            "name": self.name,
            "evidence_count": self.evidence_count,
        }


@dataclass(frozen=True)
class ArchitectureInfo:
    """Architectural shape of the repository."""

    patterns: frozenset[str] = frozenset()
    structure: ArchitectureStructure = ArchitectureStructure.UNKNOWN
    complexity_level: ComplexityLevel = ComplexityLevel.LOW

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "patterns": sorted(self.patterns),
            "structure": self.structure.value,
            "complexity_level": self.complexity_level.value,
        }


@dataclass(frozen=True)
class DependencyCategories:
    """Dependency names bucketed by role (names sorted within a bucket)."""

    core: tuple[str, ...] = ()
    data: tuple[str, ...] = ()
    api: tuple[str, ...] = ()
    ui: tuple[str, ...] = ()
    testing: tuple[str, ...] = ()
    utilities: tuple[str, ...] = ()

    @property
    def total(self) -> int:
        """Total number of categorized dependencies."""
        return sum(len(bucket) for bucket in self.to_dict().values())

    def to_dict(self) -> dict[str, list[str]]:
        """Convert to dictionary for serialization."""
        return {
            "core": list(self.core),
            "data": list(self.data),
            "api": list(self.api),
            "ui": list(self.ui),
            "testing": list(self.testing),
            "utilities": list(self.utilities),
        }


@dataclass(frozen=True)
class QualityPosture:
    """Quality signals and their weighted score.

    Attributes:
        test_coverage: "unknown" or an estimated percentage string
        documentation_level: "present" or "minimal"
        monitoring_level: "configured" or "basic"
        security_level: "implemented" or "basic"
        ci_platform: Detected CI system or "unknown"
        score: Weighted score (base 50, max 100)
        level: Quality band
    """

    test_coverage: str = UNKNOWN
    documentation_level: str = "minimal"
    monitoring_level: str = "basic"
    security_level: str = "basic"
    ci_platform: str = UNKNOWN
    score: int = 50
    level: QualityLevel = QualityLevel.LOW

    @property
    def has_tests(self) -> bool:
        """Whether any test files were detected."""
        return self.test_coverage != UNKNOWN

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "test_coverage": self.test_coverage,
            "documentation_level": self.documentation_level,
            "monitoring_level": self.monitoring_level,
            "security_level": self.security_level,
            "ci_platform": self.ci_platform,
            "score": self.score,
            "level": self.level.value,
        }


@dataclass(frozen=True)
class DataProfile:
    """Data store and entities found in schema files."""

    store_type: str = UNKNOWN
    entities: tuple[str, ...] = ()
    relationships: tuple[tuple[str, str], ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "store_type": self.store_type,
            "entities": list(self.entities),
            "relationships": [
                {"from": source, "to": target} for source, target in self.relationships
            ],
        }


@dataclass(frozen=True)
class ApiProfile:
    """API surface found in sampled route files."""

    endpoints: tuple[str, ...] = ()
    authentication: str = UNKNOWN

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "endpoints": list(self.endpoints),
            "authentication": self.authentication,
        }


@dataclass(frozen=True)
class CurrentStateProfile:
    """Immutable current-state profile of a repository.

    Attributes:
        tech_stack: Detected technologies in rule-table order
        architecture: Patterns, structure and complexity level
        dependencies: Categorized dependency names
        capabilities: Detected business/technical capabilities
        quality: Quality posture
        data: Data store and entities
        apis: Endpoints and authentication mechanism
        project_type: Closed project classification
        file_count: Number of files in the snapshot
        languages: File extension to file count
        dependency_names: All dependency names (lower-cased, sorted)
        degraded_facts: Facts that fell back to unknown because a detector failed
    """

    tech_stack: tuple[TechFact, ...] = ()
    architecture: ArchitectureInfo = field(default_factory=ArchitectureInfo)
    dependencies: DependencyCategories = field(default_factory=DependencyCategories)
    capabilities: frozenset[str] = frozenset()
    quality: QualityPosture = field(default_factory=QualityPosture)
    data: DataProfile = field(default_factory=DataProfile)
    apis: ApiProfile = field(default_factory=ApiProfile)
    project_type: ProjectType = ProjectType.GENERAL
    file_count: int = 0
    languages: tuple[tuple[str, int], ...] = ()
    dependency_names: tuple[str, ...] = ()
    degraded_facts: tuple[str, ...] = ()

    @classmethod
    def empty(cls) -> "CurrentStateProfile":
        """Profile used when profiling could not run at all."""
        return cls(degraded_facts=("profile",))

    def stack_names(self, tech_type: TechType | None = None) -> list[str]:
        """Names of detected technologies, optionally filtered by type."""
        return [
            fact.name
            for fact in self.tech_stack
            if tech_type is None or fact.type == tech_type
        ]

    def has_dependency(self, *fragments: str) -> bool:
        """Whether any dependency name contains one of the fragments."""
        return any(
            fragment in name for name in self.dependency_names for fragment in fragments
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "tech_stack": [fact.to_dict() for fact in self.tech_stack],
            "architecture": self.architecture.to_dict(),
            "dependencies": self.dependencies.to_dict(),
            "capabilities": sorted(self.capabilities),
            "quality": self.quality.to_dict(),
            "data": self.data.to_dict(),
            "apis": self.apis.to_dict(),
            "project_type": self.project_type.value,
            "project_family": self.project_type.family.value,
            "file_count": self.file_count,
            "languages": dict(self.languages),
            "degraded_facts": list(self.degraded_facts),
        }
