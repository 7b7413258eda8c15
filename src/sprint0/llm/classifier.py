"""Model-backed change classifier.

Opt-in alternative to the keyword classifier. The model's answer is parsed
and validated against the closed enums and component vocabularies; any
failure (provider error, malformed JSON, unknown values) falls back to the
keyword classifier so classification never raises.
"""

import json
import logging
import re
from typing import Any

from sprint0.analyzers.classifier import (
    COMPONENT_ALIASES,
    COMPONENT_VOCABULARIES,
    Classifier,
    KeywordClassifier,
    display_name,
    tokenize,
)
from sprint0.llm.client import LLMClient, LLMError
from sprint0.llm.prompts import build_classification_prompt, get_system_prompt
from sprint0.models.change import (
    ChangeContext,
    ChangeType,
    ComponentType,
    Concept,
    NamedComponent,
    Scope,
)

logger = logging.getLogger(__name__)

_JSON_BLOCK = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL)
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


class LLMClassifier(Classifier):
    """Classifier that asks an LLM and validates its answer."""

    name = "llm"

    def __init__(self, client: LLMClient, fallback: Classifier | None = None) -> None:
        """Initialize with an LLM client.

        Args:
            client: Configured LLM client
            fallback: Classifier used when the model answer is unusable
        """
        self.client = client
        self.fallback = fallback or KeywordClassifier()

    def classify(self, text: str) -> ChangeContext:
        """Classify with the model, falling back on any failure."""
        text = text or ""
        if not text.strip():
            return ChangeContext.empty(text)

        try:
            response = self.client.complete(
                build_classification_prompt(text),
                system_prompt=get_system_prompt(),
            )
            context = self.parse_response(text, response.content)
        except (LLMError, ValueError) as e:
            logger.warning("LLM classification failed, using %s classifier: %s", self.fallback.name, e)
            return self.fallback.classify(text)

        logger.debug(
            "LLM classified change request: type=%s scope=%s",
            context.change_type.value,
            context.scope.value,
        )
        return context

    def parse_response(self, text: str, content: str) -> ChangeContext:
        """Parse and validate a model answer.

        Raises:
            ValueError: If the answer is not valid JSON or uses unknown values
        """
        data = _extract_json(content)

        concepts = frozenset(Concept(value) for value in _as_list(data.get("concepts")))
        change_type = ChangeType(data.get("change_type", ChangeType.ENHANCEMENT.value))
        scope = Scope(data.get("scope", Scope.MEDIUM.value))
        components = _parse_components(data.get("components"))

        component_names = {component.name for component in components}
        keywords = KeywordClassifier().extract_keywords(tokenize(text), component_names)

        return ChangeContext(
            raw_text=text,
            concepts=concepts,
            change_type=change_type,
            components=tuple(components),
            scope=scope,
            keywords=keywords,
        )


def _extract_json(content: str) -> dict[str, Any]:
    match = _JSON_BLOCK.search(content)
    if match:
        json_str = match.group(1)
    else:
        match = _JSON_OBJECT.search(content)
        if not match:
            raise ValueError("No JSON object in LLM response")
        json_str = match.group(0)

    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as e:
        raise ValueError(f"Malformed JSON in LLM response: {e}") from e

    if not isinstance(data, dict):
        raise ValueError("LLM response JSON is not an object")
    return data


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"Expected a list, got {type(value).__name__}")
    return value


def _parse_components(value: Any) -> list[NamedComponent]:
    components: list[NamedComponent] = []
    seen: set[str] = set()

    for item in _as_list(value):
        if not isinstance(item, dict):
            raise ValueError(f"Component entry is not an object: {item!r}")
        component_type = ComponentType(item.get("type"))
        raw_name = str(item.get("name", "")).lower().strip()
        name = COMPONENT_ALIASES.get(raw_name, raw_name)
        if name not in COMPONENT_VOCABULARIES[component_type]:
            raise ValueError(f"Unknown {component_type.value} component: {raw_name}")
        if name in seen:
            continue
        seen.add(name)
        components.append(
            NamedComponent(type=component_type, name=name, display_name=display_name(name))
        )

    return components
