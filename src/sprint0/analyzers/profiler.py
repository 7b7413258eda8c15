"""Repository profiling.

Derives a CurrentStateProfile from a repository snapshot (file list,
dependency map, sampled contents) using heuristic detection rules:
- Tech stack: rule table over dependency names, file extensions and filenames
- Architecture: structural patterns, directory layout, size-based complexity
- APIs: route registrations in sampled route files, authentication mechanism
- Data: CREATE TABLE / REFERENCES in SQL, Prisma models, models/ directories
- Quality: tests, docs, observability and security signals with fixed weights
- Project type: ordered rule list over dependencies and file extensions

Every detector runs in isolation. A detector that fails leaves its fact at
"unknown" (or empty), is listed in ``degraded_facts`` and never propagates.
"""

import logging
import re
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import TypeVar

from sprint0.models.inputs import ProfilerInput
from sprint0.models.profile import (
    UNKNOWN,
    ApiProfile,
    ArchitectureInfo,
    ArchitectureStructure,
    ComplexityLevel,
    CurrentStateProfile,
    DataProfile,
    DependencyCategories,
    ProjectType,
    QualityLevel,
    QualityPosture,
    TechFact,
    TechType,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# =============================================================================
# Thresholds and weights
# =============================================================================

SERVICE_ORIENTED_MIN_ROUTES = 20
MODULAR_MIN_FILES = 500
HIGH_COMPLEXITY_FILES = 1000
MEDIUM_COMPLEXITY_FILES = 100
EMBEDDED_MAX_FILES = 50
LIBRARY_MAX_FILES = 20

QUALITY_BASE_SCORE = 50
QUALITY_WEIGHTS = {"tests": 20, "docs": 10, "monitoring": 10, "security": 10}
QUALITY_HIGH_THRESHOLD = 80
QUALITY_MEDIUM_THRESHOLD = 60

# =============================================================================
# Tech-stack rule table
# =============================================================================


@dataclass(frozen=True)
class TechRule:
    """Signals that confirm one technology fact.

    Attributes:
        type: Technology kind
        name: Display name
        dependencies: Exact dependency names
        dependency_prefixes: Dependency name prefixes
        extensions: File extensions (each matching file is one signal)
        filenames: File basenames (each matching file is one signal)
        path_fragments: Path fragments (each matching file is one signal)
    """

    type: TechType
    name: str
    dependencies: tuple[str, ...] = ()
    dependency_prefixes: tuple[str, ...] = ()
    extensions: tuple[str, ...] = ()
    filenames: tuple[str, ...] = ()
    path_fragments: tuple[str, ...] = ()


TECH_RULES: list[TechRule] = [
    # Languages
    TechRule(TechType.LANGUAGE, "Python", extensions=(".py",)),
    TechRule(
        TechType.LANGUAGE,
        "JavaScript/TypeScript",
        extensions=(".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs"),
    ),
    TechRule(TechType.LANGUAGE, "Java", extensions=(".java",)),
    TechRule(TechType.LANGUAGE, "Go", extensions=(".go",)),
    TechRule(TechType.LANGUAGE, "Ruby", extensions=(".rb",)),
    TechRule(TechType.LANGUAGE, "Rust", extensions=(".rs",)),
    TechRule(TechType.LANGUAGE, "C#", extensions=(".cs",)),
    TechRule(TechType.LANGUAGE, "PHP", extensions=(".php",)),
    TechRule(TechType.LANGUAGE, "Kotlin", extensions=(".kt",)),
    TechRule(TechType.LANGUAGE, "Swift", extensions=(".swift",)),
    TechRule(TechType.LANGUAGE, "Solidity", extensions=(".sol",)),
    # Frameworks
    TechRule(TechType.FRAMEWORK, "Express", dependencies=("express",)),
    TechRule(TechType.FRAMEWORK, "React", dependencies=("react", "react-dom")),
    TechRule(TechType.FRAMEWORK, "Next.js", dependencies=("next",)),
    TechRule(TechType.FRAMEWORK, "Vue", dependencies=("vue", "nuxt"), extensions=(".vue",)),
    TechRule(TechType.FRAMEWORK, "Angular", dependencies=("@angular/core",)),
    TechRule(TechType.FRAMEWORK, "Svelte", dependencies=("svelte",), extensions=(".svelte",)),
    TechRule(TechType.FRAMEWORK, "NestJS", dependencies=("@nestjs/core",)),
    TechRule(TechType.FRAMEWORK, "Koa", dependencies=("koa",)),
    TechRule(TechType.FRAMEWORK, "FastAPI", dependencies=("fastapi",)),
    TechRule(TechType.FRAMEWORK, "Django", dependencies=("django",)),
    TechRule(TechType.FRAMEWORK, "Flask", dependencies=("flask",)),
    TechRule(
        TechType.FRAMEWORK,
        "Spring",
        dependency_prefixes=("org.springframework", "spring-boot"),
    ),
    TechRule(TechType.FRAMEWORK, "Rails", dependencies=("rails",)),
    # Databases
    TechRule(
        TechType.DATABASE,
        "PostgreSQL",
        dependencies=("pg", "postgres", "psycopg", "psycopg2", "psycopg2-binary", "asyncpg"),
        filenames=("schema.sql",),
    ),
    TechRule(TechType.DATABASE, "MySQL", dependencies=("mysql", "mysql2", "pymysql", "mysqlclient")),
    TechRule(TechType.DATABASE, "MongoDB", dependencies=("mongodb", "mongoose", "pymongo", "motor")),
    TechRule(TechType.DATABASE, "Redis", dependencies=("redis", "ioredis")),
    TechRule(TechType.DATABASE, "SQLite", dependencies=("sqlite3", "better-sqlite3")),
    TechRule(TechType.DATABASE, "ChromaDB", dependencies=("chromadb",)),
    TechRule(
        TechType.DATABASE,
        "Qdrant",
        dependencies=("qdrant-client", "@qdrant/js-client-rest"),
    ),
    TechRule(
        TechType.DATABASE,
        "Pinecone",
        dependencies=("pinecone", "pinecone-client", "@pinecone-database/pinecone"),
    ),
    TechRule(
        TechType.DATABASE,
        "Elasticsearch",
        dependencies=("elasticsearch", "@elastic/elasticsearch"),
    ),
    TechRule(TechType.DATABASE, "DynamoDB", dependencies=("@aws-sdk/client-dynamodb",)),
    # Cloud
    TechRule(
        TechType.CLOUD,
        "AWS",
        dependencies=("aws-sdk", "boto3"),
        dependency_prefixes=("@aws-sdk/", "aws-cdk"),
    ),
    TechRule(TechType.CLOUD, "Azure", dependency_prefixes=("@azure/", "azure-")),
    TechRule(TechType.CLOUD, "GCP", dependency_prefixes=("@google-cloud/", "google-cloud-")),
    # Containers and infrastructure
    TechRule(
        TechType.CONTAINER,
        "Docker",
        dependency_prefixes=("docker",),
        filenames=("dockerfile", "docker-compose.yml", "docker-compose.yaml", "compose.yaml"),
    ),
    TechRule(TechType.INFRASTRUCTURE, "Terraform", extensions=(".tf",)),
    TechRule(
        TechType.INFRASTRUCTURE,
        "Kubernetes",
        filenames=("kustomization.yaml",),
        path_fragments=("k8s/", "helm/", "kubernetes/"),
    ),
    # Build tools
    TechRule(TechType.BUILD_TOOL, "Webpack", dependencies=("webpack",)),
    TechRule(TechType.BUILD_TOOL, "Vite", dependencies=("vite",)),
    TechRule(TechType.BUILD_TOOL, "Maven", filenames=("pom.xml",)),
    TechRule(TechType.BUILD_TOOL, "Gradle", filenames=("build.gradle", "build.gradle.kts")),
]

# =============================================================================
# Detection vocabularies
# =============================================================================

CONTAINER_FILES = frozenset(
    {"dockerfile", "docker-compose.yml", "docker-compose.yaml", "compose.yaml"}
)

CI_PLATFORMS: list[tuple[str, str]] = [
    (".github/workflows/", "GitHub Actions"),
    (".gitlab-ci.yml", "GitLab CI"),
    ("jenkinsfile", "Jenkins"),
    (".circleci/", "CircleCI"),
    ("azure-pipelines.yml", "Azure Pipelines"),
]

TEST_FILE_PATTERN = re.compile(
    r"(\.test\.|\.spec\.|__tests__/|(^|/)tests?/|(^|/)test_[^/]*\.py$|_test\.(py|go)$)"
)

ROUTE_FILE_PATTERN = re.compile(
    r"(route|api|endpoint|controller|server|app|main|views|handler)", re.IGNORECASE
)
ROUTE_PATTERN = re.compile(
    r"""\.(get|post|put|delete|patch)\(\s*['"`](/[^'"`]*)['"`]""", re.IGNORECASE
)

CREATE_TABLE_PATTERN = re.compile(
    r"create\s+table\s+(?:if\s+not\s+exists\s+)?[`\"\[]?(?:\w+\.)?(\w+)",
    re.IGNORECASE,
)
REFERENCES_PATTERN = re.compile(r"references\s+[`\"\[]?(?:\w+\.)?(\w+)", re.IGNORECASE)
PRISMA_MODEL_PATTERN = re.compile(r"^\s*model\s+(\w+)\s*\{", re.MULTILINE)

# Ordered: the first mechanism found wins
AUTH_CONTENT_MARKERS: list[tuple[str, str]] = [
    ("passport", "Passport.js"),
    ("oauth", "OAuth"),
    ("jwt", "JWT"),
    ("jsonwebtoken", "JWT"),
]
AUTH_DEPENDENCIES: list[tuple[str, str]] = [
    ("passport", "Passport.js"),
    ("next-auth", "OAuth"),
    ("authlib", "OAuth"),
    ("oauthlib", "OAuth"),
    ("jsonwebtoken", "JWT"),
    ("pyjwt", "JWT"),
    ("python-jose", "JWT"),
    ("djangorestframework-simplejwt", "JWT"),
]
AUTH_PATH_FRAGMENTS = ("auth", "login", "jwt", "oauth", "session")

OBSERVABILITY_FRAGMENTS = (
    "prometheus", "prom-client", "datadog", "dd-trace", "opentelemetry",
    "sentry", "newrelic", "statsd", "winston", "pino", "morgan", "loguru",
    "structlog", "bunyan",
)
SECURITY_DEPENDENCIES = ("helmet", "bcrypt", "argon2", "csurf", "cors")

# Ordered: the first category containing a matching fragment wins
DEPENDENCY_CATEGORY_RULES: list[tuple[str, tuple[str, ...]]] = [
    ("ui", ("react", "vue", "angular", "svelte")),
    ("testing", ("test", "jest", "mocha", "chai", "vitest", "cypress", "playwright")),
    ("api", ("express", "fastapi", "axios", "flask", "django", "koa", "graphql", "requests", "httpx")),
    (
        "data",
        ("pg", "typeorm", "dynamo", "mongo", "redis", "sql", "prisma", "sequelize", "psycopg", "chroma", "qdrant"),
    ),
    ("utilities", ("lodash", "moment", "uuid", "dayjs", "date-fns", "underscore")),
]

ENDPOINT_CAPABILITIES: list[tuple[tuple[str, ...], str]] = [
    (("search",), "Search functionality"),
    (("upload",), "File upload"),
    (("payment", "checkout", "billing"), "Payment processing"),
    (("email", "mail"), "Email notifications"),
    (("notification", "notify"), "Notifications"),
]

DEPENDENCY_CAPABILITIES: list[tuple[tuple[str, ...], str]] = [
    (("redis", "memcache"), "Caching"),
    (("queue", "amqp", "bull", "kafka", "rabbit", "celery", "sqs"), "Message queue"),
    (("websocket", "socket.io", "ws"), "Real-time communication"),
    (("stripe", "braintree"), "Payment processing"),
    (("nodemailer", "sendgrid", "mailgun"), "Email notifications"),
    (("algolia", "elasticsearch"), "Search functionality"),
]

FRONTEND_DEPENDENCIES = ("react", "vue", "@angular/core", "svelte", "next")
BACKEND_DEPENDENCIES = ("express", "fastapi", "django", "flask", "koa", "@nestjs/core")

# =============================================================================
# Helpers
# =============================================================================


def normalize_path(path: str) -> str:
    """Posix-style, lower-cased path without leading ./ or /."""
    normalized = path.replace("\\", "/").strip()
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized.lstrip("/").lower()


def file_extension(path: str) -> str:
    """Lower-cased extension of a path ("" when there is none)."""
    return PurePosixPath(path).suffix.lower()


def _basename(path: str) -> str:
    return path.rsplit("/", 1)[-1]


def _dependency_matches(name: str, fragment: str) -> bool:
    """Substring match; fragments of two characters or fewer must match exactly."""
    if len(fragment) <= 2:
        return name == fragment
    return fragment in name


@dataclass
class _Snapshot:
    """Normalized view of a ProfilerInput shared by all detectors."""

    paths: list[str]
    dependencies: dict[str, str]
    contents: dict[str, str]
    extension_counts: Counter[str] = field(default_factory=Counter)
    directories: set[str] = field(default_factory=set)

    @classmethod
    def from_input(cls, profiler_input: ProfilerInput) -> "_Snapshot":
        paths = [normalize_path(p) for p in profiler_input.files if p and p.strip()]
        contents = {
            normalize_path(path): text or ""
            for path, text in sorted(profiler_input.raw_contents.items())
        }
        snapshot = cls(
            paths=paths,
            dependencies={
                name.strip().lower(): version
                for name, version in profiler_input.dependencies.items()
                if name and name.strip()
            },
            contents=contents,
        )
        for path in paths:
            ext = file_extension(path)
            if ext:
                snapshot.extension_counts[ext] += 1
            snapshot.directories.update(path.split("/")[:-1])
        return snapshot

    def has_dep(self, *names: str) -> bool:
        return any(name in self.dependencies for name in names)

    def dep_contains(self, *fragments: str) -> bool:
        return any(fragment in name for name in self.dependencies for fragment in fragments)


# =============================================================================
# Profiler
# =============================================================================


class RepositoryProfiler:
    """Builds a CurrentStateProfile from a repository snapshot.

    Usage:
        profiler = RepositoryProfiler()
        profile = profiler.profile(ProfilerInput(files=[...], dependencies={...}))
    """

    def __init__(self, tech_rules: list[TechRule] | None = None) -> None:
        """Initialize the profiler.

        Args:
            tech_rules: Tech-stack rule table (defaults to TECH_RULES)
        """
        self.tech_rules = tech_rules if tech_rules is not None else TECH_RULES

    def profile(self, profiler_input: ProfilerInput) -> CurrentStateProfile:
        """Profile a repository snapshot.

        Never raises for malformed data: failing detectors degrade to unknown.
        """
        degraded: list[str] = []
        snapshot = _Snapshot.from_input(profiler_input)

        def safe(fact: str, detector: Callable[[], T], default: T) -> T:
            try:
                return detector()
            except Exception as e:
                logger.warning("Profiler could not determine %s: %s", fact, e)
                degraded.append(fact)
                return default

        tech_stack = safe("tech_stack", lambda: self.detect_tech_stack(snapshot), ())
        apis = safe("apis", lambda: self.detect_apis(snapshot), ApiProfile())
        data = safe("data", lambda: self.detect_data(snapshot, tech_stack), DataProfile())
        architecture = safe(
            "architecture",
            lambda: self.detect_architecture(snapshot, apis, data),
            ArchitectureInfo(),
        )
        dependencies = safe(
            "dependencies",
            lambda: self.categorize_dependencies(snapshot),
            DependencyCategories(),
        )
        capabilities = safe(
            "capabilities",
            lambda: self.detect_capabilities(snapshot, apis, data),
            frozenset(),
        )
        quality = safe("quality", lambda: self.assess_quality(snapshot, apis), QualityPosture())
        project_type = safe(
            "project_type", lambda: self.detect_project_type(snapshot), ProjectType.GENERAL
        )

        profile = CurrentStateProfile(
            tech_stack=tech_stack,
            architecture=architecture,
            dependencies=dependencies,
            capabilities=capabilities,
            quality=quality,
            data=data,
            apis=apis,
            project_type=project_type,
            file_count=len(snapshot.paths),
            languages=tuple(sorted(snapshot.extension_counts.items())),
            dependency_names=tuple(sorted(snapshot.dependencies)),
            degraded_facts=tuple(degraded),
        )
        logger.info(
            "Profiled %d files: %d technologies, project type %s",
            profile.file_count,
            len(profile.tech_stack),
            profile.project_type.value,
        )
        return profile

    # =========================================================================
    # Tech stack
    # =========================================================================

    def detect_tech_stack(self, snapshot: _Snapshot) -> tuple[TechFact, ...]:
        """Apply the rule table; evidence count is the number of confirming signals."""
        facts: list[TechFact] = []

        for rule in self.tech_rules:
            signals = sum(1 for name in rule.dependencies if name in snapshot.dependencies)
            if rule.dependency_prefixes:
                signals += sum(
                    1
                    for name in snapshot.dependencies
                    if name.startswith(rule.dependency_prefixes)
                )
            for path in snapshot.paths:
                if rule.extensions and file_extension(path) in rule.extensions:
                    signals += 1
                elif rule.filenames and _basename(path) in rule.filenames:
                    signals += 1
                elif rule.path_fragments and any(f in path for f in rule.path_fragments):
                    signals += 1

            if signals:
                facts.append(TechFact(type=rule.type, name=rule.name, evidence_count=signals))

        return tuple(facts)

    # =========================================================================
    # APIs
    # =========================================================================

    def detect_apis(self, snapshot: _Snapshot) -> ApiProfile:
        """Route registrations in sampled route files plus the auth mechanism."""
        endpoints: list[str] = []
        seen: set[str] = set()

        for path, text in snapshot.contents.items():
            if not ROUTE_FILE_PATTERN.search(path):
                continue
            for method, route in ROUTE_PATTERN.findall(text):
                endpoint = f"{method.upper()} {route}"
                if endpoint not in seen:
                    seen.add(endpoint)
                    endpoints.append(endpoint)

        return ApiProfile(
            endpoints=tuple(endpoints),
            authentication=self.detect_authentication(snapshot),
        )

    def detect_authentication(self, snapshot: _Snapshot) -> str:
        """Authentication mechanism from contents, dependencies or file names."""
        for path, text in snapshot.contents.items():
            lowered = text.lower()
            if not (ROUTE_FILE_PATTERN.search(path) or "auth" in path):
                continue
            for marker, mechanism in AUTH_CONTENT_MARKERS:
                if marker in lowered:
                    return mechanism

        for name, mechanism in AUTH_DEPENDENCIES:
            if name in snapshot.dependencies:
                return mechanism

        for path in snapshot.paths:
            stem = _basename(path)
            if any(fragment in stem for fragment in AUTH_PATH_FRAGMENTS):
                return "Custom"

        return UNKNOWN

    # =========================================================================
    # Data
    # =========================================================================

    def detect_data(self, snapshot: _Snapshot, tech_stack: tuple[TechFact, ...]) -> DataProfile:
        """Entities and relationships from schema files and model directories."""
        entities: list[str] = []
        relationships: list[tuple[str, str]] = []

        def add_entity(name: str) -> None:
            if name and name not in entities:
                entities.append(name)

        for path, text in snapshot.contents.items():
            if path.endswith(".sql"):
                for statement in re.split(r";", text):
                    table_match = CREATE_TABLE_PATTERN.search(statement)
                    if not table_match:
                        continue
                    table = table_match.group(1)
                    add_entity(table)
                    for referenced in REFERENCES_PATTERN.findall(statement):
                        if (table, referenced) not in relationships:
                            relationships.append((table, referenced))
            elif path.endswith(".prisma"):
                for model in PRISMA_MODEL_PATTERN.findall(text):
                    add_entity(model)

        for path in snapshot.paths:
            parts = path.split("/")
            if "models" in parts[:-1] and file_extension(path) in (".py", ".js", ".ts", ".rb"):
                stem = PurePosixPath(parts[-1]).stem
                if stem not in ("__init__", "index"):
                    add_entity(stem)

        store_types = [fact.name for fact in tech_stack if fact.type == TechType.DATABASE]
        if store_types:
            store_type = store_types[0]
        elif entities:
            store_type = "SQL"
        else:
            store_type = UNKNOWN

        return DataProfile(
            store_type=store_type,
            entities=tuple(entities),
            relationships=tuple(relationships),
        )

    # =========================================================================
    # Architecture
    # =========================================================================

    def detect_architecture(
        self,
        snapshot: _Snapshot,
        apis: ApiProfile,
        data: DataProfile,
    ) -> ArchitectureInfo:
        """Patterns, directory layout and size-based complexity."""
        patterns: set[str] = set()
        file_count = len(snapshot.paths)

        if any(_basename(path) in CONTAINER_FILES for path in snapshot.paths):
            patterns.add("Containerized")
        if len(apis.endpoints) >= SERVICE_ORIENTED_MIN_ROUTES:
            patterns.add("Service-oriented")
        if file_count > MODULAR_MIN_FILES:
            patterns.add("Modular")
        if apis.endpoints and data.entities:
            patterns.add("3-tier architecture")
        if self._detect_ci_platform(snapshot) != UNKNOWN:
            patterns.add("CI/CD")
        if any("microservice" in path for path in snapshot.paths):
            patterns.add("Microservices")

        dirs = snapshot.directories
        if not snapshot.paths:
            structure = ArchitectureStructure.UNKNOWN
        elif "server" in dirs and "client" in dirs:
            structure = ArchitectureStructure.FULL_STACK_MONOREPO
        elif "src" in dirs and "public" in dirs:
            structure = ArchitectureStructure.SINGLE_PAGE_APPLICATION
        elif "api" in dirs or "server" in dirs:
            structure = ArchitectureStructure.BACKEND_SERVICE
        else:
            structure = ArchitectureStructure.MONOLITHIC

        if file_count > HIGH_COMPLEXITY_FILES:
            complexity = ComplexityLevel.HIGH
        elif file_count > MEDIUM_COMPLEXITY_FILES:
            complexity = ComplexityLevel.MEDIUM
        else:
            complexity = ComplexityLevel.LOW

        return ArchitectureInfo(
            patterns=frozenset(patterns),
            structure=structure,
            complexity_level=complexity,
        )

    # =========================================================================
    # Dependencies and capabilities
    # =========================================================================

    def categorize_dependencies(self, snapshot: _Snapshot) -> DependencyCategories:
        """Bucket dependency names; the first matching category wins."""
        buckets: dict[str, list[str]] = {
            "core": [], "data": [], "api": [], "ui": [], "testing": [], "utilities": [],
        }

        for name in sorted(snapshot.dependencies):
            buckets[self._dependency_category(name)].append(name)

        return DependencyCategories(**{key: tuple(value) for key, value in buckets.items()})

    def _dependency_category(self, name: str) -> str:
        for category, fragments in DEPENDENCY_CATEGORY_RULES:
            if any(_dependency_matches(name, fragment) for fragment in fragments):
                return category
        return "core"

    def detect_capabilities(
        self,
        snapshot: _Snapshot,
        apis: ApiProfile,
        data: DataProfile,
    ) -> frozenset[str]:
        """Capabilities from auth, endpoints, data entities and dependencies."""
        capabilities: set[str] = set()

        if apis.authentication != UNKNOWN:
            capabilities.add(f"Authentication ({apis.authentication})")

        lowered_endpoints = [endpoint.lower() for endpoint in apis.endpoints]
        for fragments, capability in ENDPOINT_CAPABILITIES:
            if any(f in endpoint for endpoint in lowered_endpoints for f in fragments):
                capabilities.add(capability)

        if data.entities:
            capabilities.add(f"Data persistence ({len(data.entities)} tables)")

        for fragments, capability in DEPENDENCY_CAPABILITIES:
            if any(
                _dependency_matches(name, fragment)
                for name in snapshot.dependencies
                for fragment in fragments
            ):
                capabilities.add(capability)

        return frozenset(capabilities)

    # =========================================================================
    # Quality
    # =========================================================================

    def assess_quality(self, snapshot: _Snapshot, apis: ApiProfile) -> QualityPosture:
        """Weighted quality posture (base 50; tests, docs, monitoring, security)."""
        test_files = sum(1 for path in snapshot.paths if TEST_FILE_PATTERN.search(path))
        has_docs = any(
            path.endswith(".md") or "docs" in path.split("/")[:-1] for path in snapshot.paths
        )
        has_monitoring = snapshot.dep_contains(*OBSERVABILITY_FRAGMENTS)
        has_security = apis.authentication != UNKNOWN or snapshot.has_dep(
            *SECURITY_DEPENDENCIES
        )

        if test_files:
            ratio = round(100 * test_files / max(len(snapshot.paths), 1))
            test_coverage = f"~{ratio}% test files (estimated)"
        else:
            test_coverage = UNKNOWN

        score = QUALITY_BASE_SCORE
        if test_files:
            score += QUALITY_WEIGHTS["tests"]
        if has_docs:
            score += QUALITY_WEIGHTS["docs"]
        if has_monitoring:
            score += QUALITY_WEIGHTS["monitoring"]
        if has_security:
            score += QUALITY_WEIGHTS["security"]

        if score >= QUALITY_HIGH_THRESHOLD:
            level = QualityLevel.HIGH
        elif score >= QUALITY_MEDIUM_THRESHOLD:
            level = QualityLevel.MEDIUM
        else:
            level = QualityLevel.LOW

        return QualityPosture(
            test_coverage=test_coverage,
            documentation_level="present" if has_docs else "minimal",
            monitoring_level="configured" if has_monitoring else "basic",
            security_level="implemented" if has_security else "basic",
            ci_platform=self._detect_ci_platform(snapshot),
            score=score,
            level=level,
        )

    def _detect_ci_platform(self, snapshot: _Snapshot) -> str:
        for path in snapshot.paths:
            for marker, platform in CI_PLATFORMS:
                if path.startswith(marker) or _basename(path) == marker:
                    return platform
        return UNKNOWN

    # =========================================================================
    # Project type
    # =========================================================================

    def detect_project_type(self, snapshot: _Snapshot) -> ProjectType:
        """Ordered project-type rules; the first match wins."""
        ext = snapshot.extension_counts
        files = len(snapshot.paths)
        basenames = {_basename(path) for path in snapshot.paths}
        has_frontend = snapshot.has_dep(*FRONTEND_DEPENDENCIES)
        has_backend = snapshot.has_dep(*BACKEND_DEPENDENCIES)

        rules: list[tuple[bool, ProjectType]] = [
            (snapshot.has_dep("react-native", "expo"), ProjectType.MOBILE_REACT_NATIVE),
            (bool(ext[".swift"]), ProjectType.MOBILE_IOS),
            (
                bool(ext[".kt"]) or "androidmanifest.xml" in basenames,
                ProjectType.MOBILE_ANDROID,
            ),
            (snapshot.has_dep("flutter") or "pubspec.yaml" in basenames, ProjectType.MOBILE_FLUTTER),
            (
                snapshot.has_dep(
                    "tensorflow", "torch", "pytorch", "scikit-learn", "pandas", "keras"
                ),
                ProjectType.ML_DATA_SCIENCE,
            ),
            (bool(ext[".ipynb"]), ProjectType.JUPYTER_NOTEBOOK),
            (
                bool(ext[".ino"]) or (bool(ext[".cpp"]) and files < EMBEDDED_MAX_FILES),
                ProjectType.IOT_EMBEDDED,
            ),
            (
                snapshot.has_dep("phaser", "godot", "pygame") or bool(ext[".gd"]),
                ProjectType.GAME_DEVELOPMENT,
            ),
            (
                snapshot.has_dep("web3", "ethers") or bool(ext[".sol"]),
                ProjectType.BLOCKCHAIN_WEB3,
            ),
            (bool(ext[".tf"]), ProjectType.INFRASTRUCTURE_IAC),
            (has_frontend and has_backend, ProjectType.FULLSTACK),
            (has_backend or snapshot.has_dep("spring-boot"), ProjectType.BACKEND_API),
            (snapshot.has_dep("graphql", "apollo-server"), ProjectType.BACKEND_GRAPHQL),
            (bool(ext[".go"]), ProjectType.BACKEND_GOLANG),
            (snapshot.has_dep("react", "next"), ProjectType.FRONTEND_REACT),
            (snapshot.has_dep("vue", "nuxt"), ProjectType.FRONTEND_VUE),
            (snapshot.has_dep("@angular/core"), ProjectType.FRONTEND_ANGULAR),
            (snapshot.has_dep("svelte", "@sveltejs/kit"), ProjectType.FRONTEND_SVELTE),
            (bool(basenames & CONTAINER_FILES), ProjectType.CONTAINERIZED),
            (snapshot.has_dep("gatsby", "hugo", "jekyll", "astro"), ProjectType.STATIC_SITE),
            (snapshot.has_dep("electron", "tauri", "@tauri-apps/api"), ProjectType.DESKTOP_APP),
            (
                snapshot.has_dep("commander", "yargs", "click", "typer", "argparse"),
                ProjectType.CLI_TOOL,
            ),
            (
                0 < files < LIBRARY_MAX_FILES and bool(ext[".ts"] or ext[".js"] or ext[".py"]),
                ProjectType.LIBRARY,
            ),
        ]

        for matched, project_type in rules:
            if matched:
                return project_type
        return ProjectType.GENERAL
