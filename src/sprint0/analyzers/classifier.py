"""Change-request classification.

Maps free-text change requests to a ChangeContext: concepts touched, primary
change type, named components, scope and residual keywords.

All matching is keyword-family based and case-insensitive. Family entries are
regex fragments matched at token starts, so ``migrat`` covers migrate,
migrated and migration while ``rest\\b`` does not fire on "restructure".
"""

import logging
import re
from abc import ABC, abstractmethod

from sprint0.models.change import (
    ChangeContext,
    ChangeType,
    ComponentType,
    Concept,
    NamedComponent,
    Scope,
)

logger = logging.getLogger(__name__)

# =============================================================================
# Keyword families
# =============================================================================

CONCEPT_FAMILIES: dict[Concept, list[str]] = {
    Concept.DATABASE: [
        r"database", r"db\b", r"storage", r"persist", r"schema", r"sql",
        r"vector", r"embedding", r"mysql", r"postgres", r"mongo", r"redis",
        r"elasticsearch", r"dynamodb", r"cassandra", r"neo4j", r"chroma",
        r"qdrant", r"pinecone", r"weaviate", r"milvus", r"faiss", r"sqlite",
    ],
    Concept.API: [
        r"api", r"endpoint", r"service", r"rest\b", r"restful", r"graphql",
        r"grpc", r"webhook",
    ],
    Concept.SECURITY: [
        r"auth", r"secur", r"encrypt", r"token", r"oauth", r"sso\b",
        r"permission", r"vulnerab",
    ],
    Concept.FRONTEND: [
        r"ui\b", r"frontend", r"front-end", r"interface", r"design", r"ux\b",
        r"theme", r"css\b", r"react", r"vue", r"angular", r"svelte",
    ],
    Concept.BACKEND: [r"backend", r"back-end", r"server", r"process", r"microservice"],
    Concept.INFRASTRUCTURE: [
        r"cloud", r"aws\b", r"azure", r"gcp\b", r"deploy", r"kubernetes",
        r"k8s\b", r"docker", r"terraform", r"infra", r"container",
    ],
    Concept.MIGRATION: [r"migrat", r"upgrad", r"replac", r"switch"],
    Concept.PERFORMANCE: [
        r"scal(?:e|es|ed|ing|abl\w*|abilit\w*)\b", r"perform", r"optimi[sz]",
        r"speed", r"latenc", r"throughput", r"cach",
    ],
    Concept.INTEGRATION: [r"integrat", r"connect", r"sync\b", r"synchroni", r"interop"],
    Concept.TESTING: [r"test", r"quality", r"qa\b", r"coverage"],
}

# Ordered: the first family with a match decides the change type
CHANGE_TYPE_FAMILIES: list[tuple[ChangeType, list[str]]] = [
    (ChangeType.MIGRATION, [r"migrat", r"mov(?:e|es|ed|ing)\b", r"transfer", r"switch"]),
    (ChangeType.FEATURE, [r"add(?:s|ed|ing)?\b", r"implement", r"creat", r"build", r"introduc"]),
    (ChangeType.BUGFIX, [r"fix", r"repair", r"resolv", r"debug", r"bugs?\b"]),
    (ChangeType.OPTIMIZATION, [r"optimi[sz]", r"improv", r"enhanc", r"speed"]),
    (ChangeType.REFACTORING, [r"refactor", r"restructur", r"reorgani[sz]", r"clean[- ]?up"]),
    (ChangeType.INTEGRATION, [r"integrat", r"connect", r"sync\b", r"synchroni"]),
    (ChangeType.UPGRADE, [r"upgrad", r"updat", r"moderni[sz]", r"bump"]),
    (ChangeType.SCALING, [r"scal(?:e|es|ed|ing)\b", r"expand", r"grow"]),
]

# Ordered: large wins over small when both appear
SCOPE_FAMILIES: list[tuple[Scope, list[str]]] = [
    (
        Scope.LARGE,
        [
            r"entire", r"whole", r"complete", r"full\b", r"fully", r"all\b",
            r"critical", r"major", r"significant", r"substantial",
        ],
    ),
    (Scope.SMALL, [r"small", r"minor", r"simple", r"quick", r"trivial", r"tweak"]),
]

# =============================================================================
# Component vocabularies
# =============================================================================

COMPONENT_VOCABULARIES: dict[ComponentType, list[str]] = {
    ComponentType.DATABASE: [
        "mysql", "postgres", "mongodb", "redis", "elasticsearch", "dynamodb",
        "cassandra", "neo4j", "chromadb", "qdrant", "pinecone", "weaviate",
        "milvus", "faiss", "sqlite",
    ],
    ComponentType.FRAMEWORK: [
        "react", "angular", "vue", "nextjs", "express", "fastapi", "django",
        "flask", "spring", "rails",
    ],
    ComponentType.SERVICE: ["auth", "payment", "email", "storage", "queue", "cache", "search"],
}

# Alternative spellings folded onto a vocabulary entry
COMPONENT_ALIASES: dict[str, str] = {
    "postgresql": "postgres",
    "mongo": "mongodb",
    "chroma": "chromadb",
    "elastic": "elasticsearch",
    "reactjs": "react",
    "vuejs": "vue",
    "angularjs": "angular",
    "expressjs": "express",
    "authentication": "auth",
    "payments": "payment",
}

DISPLAY_NAMES: dict[str, str] = {
    "mysql": "MySQL",
    "postgres": "PostgreSQL",
    "mongodb": "MongoDB",
    "elasticsearch": "Elasticsearch",
    "dynamodb": "DynamoDB",
    "neo4j": "Neo4j",
    "chromadb": "ChromaDB",
    "sqlite": "SQLite",
    "faiss": "FAISS",
    "nextjs": "Next.js",
    "fastapi": "FastAPI",
    "auth": "Auth Service",
    "payment": "Payment Service",
    "email": "Email Service",
    "storage": "Storage Service",
    "queue": "Queue Service",
    "cache": "Cache Service",
    "search": "Search Service",
}

# Vector stores; used to specialize recommendations and impact search terms
VECTOR_DATABASES = frozenset({"chromadb", "qdrant", "pinecone", "weaviate", "milvus", "faiss"})

STOP_WORDS = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
        "of", "with", "by", "from", "as", "is", "was", "are", "were",
    }
)

MIN_KEYWORD_LENGTH = 3

_TOKEN_PATTERN = re.compile(r"[a-z0-9][a-z0-9-]*")


def _compile_family(fragments: list[str]) -> re.Pattern[str]:
    """Compile a keyword family into one token-start anchored pattern."""
    return re.compile(r"\b(?:" + "|".join(fragments) + ")")


_CONCEPT_PATTERNS = {
    concept: _compile_family(fragments) for concept, fragments in CONCEPT_FAMILIES.items()
}
_CHANGE_TYPE_PATTERNS = [
    (change_type, _compile_family(fragments)) for change_type, fragments in CHANGE_TYPE_FAMILIES
]
_SCOPE_PATTERNS = [(scope, _compile_family(fragments)) for scope, fragments in SCOPE_FAMILIES]
_VOCABULARY_INDEX: dict[str, ComponentType] = {
    name: component_type
    for component_type, names in COMPONENT_VOCABULARIES.items()
    for name in names
}


def display_name(name: str) -> str:
    """Human-facing name for a canonical component token."""
    return DISPLAY_NAMES.get(name, name.capitalize())


def tokenize(text: str) -> list[str]:
    """Lower-case tokens with punctuation removed (hyphens kept)."""
    return _TOKEN_PATTERN.findall(text.lower())


# =============================================================================
# Classifier interface
# =============================================================================


class Classifier(ABC):
    """Interface for change-request classifiers.

    Implementations MUST be deterministic for identical input text and MUST
    NOT raise for any string input (empty text yields default values).
    """

    name: str = "classifier"

    @abstractmethod
    def classify(self, text: str) -> ChangeContext:
        """Classify change-request text.

        Args:
            text: Raw change-request text

        Returns:
            Immutable ChangeContext
        """


class KeywordClassifier(Classifier):
    """Deterministic keyword-family classifier (the default)."""

    name = "keyword"

    def classify(self, text: str) -> ChangeContext:
        """Classify change-request text by keyword families."""
        text = text or ""
        lowered = text.lower()

        if not lowered.strip():
            logger.debug("Empty change request; using default classification")
            return ChangeContext.empty(text)

        tokens = tokenize(lowered)
        components = self.extract_components(tokens)
        component_tokens = {component.name for component in components}

        context = ChangeContext(
            raw_text=text,
            concepts=self.detect_concepts(lowered),
            change_type=self.detect_change_type(lowered),
            components=tuple(components),
            scope=self.detect_scope(lowered),
            keywords=self.extract_keywords(tokens, component_tokens),
        )
        logger.debug(
            "Classified change request: type=%s scope=%s components=%s",
            context.change_type.value,
            context.scope.value,
            [c.name for c in context.components],
        )
        return context

    def detect_concepts(self, lowered: str) -> frozenset[Concept]:
        """Concepts whose family matches anywhere in the text."""
        return frozenset(
            concept for concept, pattern in _CONCEPT_PATTERNS.items() if pattern.search(lowered)
        )

    def detect_change_type(self, lowered: str) -> ChangeType:
        """First change-type family with a match, else enhancement."""
        for change_type, pattern in _CHANGE_TYPE_PATTERNS:
            if pattern.search(lowered):
                return change_type
        return ChangeType.ENHANCEMENT

    def detect_scope(self, lowered: str) -> Scope:
        """Large, then small, else medium."""
        for scope, pattern in _SCOPE_PATTERNS:
            if pattern.search(lowered):
                return scope
        return Scope.MEDIUM

    def extract_components(self, tokens: list[str]) -> list[NamedComponent]:
        """Vocabulary matches in text order, de-duplicated."""
        components: list[NamedComponent] = []
        seen: set[str] = set()

        for token in tokens:
            name = COMPONENT_ALIASES.get(token, token)
            component_type = _VOCABULARY_INDEX.get(name)
            if component_type is None or name in seen:
                continue
            seen.add(name)
            components.append(
                NamedComponent(type=component_type, name=name, display_name=display_name(name))
            )

        return components

    def extract_keywords(self, tokens: list[str], component_tokens: set[str]) -> frozenset[str]:
        """Residual tokens after stop-word and component removal."""
        return frozenset(
            token
            for token in tokens
            if len(token) >= MIN_KEYWORD_LENGTH
            and token not in STOP_WORDS
            and COMPONENT_ALIASES.get(token, token) not in component_tokens
        )
