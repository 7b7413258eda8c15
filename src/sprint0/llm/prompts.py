"""Prompt templates for model-backed change classification.

The model only fills the same closed vocabularies the keyword classifier
uses; anything outside them is discarded when the response is parsed.
"""

from sprint0.analyzers.classifier import COMPONENT_VOCABULARIES
from sprint0.models.change import ChangeType, Concept, Scope

CLASSIFICATION_SYSTEM_PROMPT = """
You classify software change requests for an enterprise architecture review.

Respond with ONE JSON object and nothing else. Use exactly these keys:
- "concepts": list of zero or more of: {concepts}
- "change_type": one of: {change_types}
- "scope": one of: {scopes}
- "components": list of objects {{"type": ..., "name": ...}} where type is one
  of: {component_types}, and name is one of the names listed for that type:
{vocabularies}
- "keywords": list of lower-case words from the request worth keeping

RULES:
1. Only use values from the lists above. Never invent new values.
2. List components in the order they appear in the request.
3. If the request mentions migrating or moving anything, change_type is "migration".
4. If nothing matches, use empty lists, "enhancement" and "medium".
"""


def get_system_prompt() -> str:
    """System prompt with the closed vocabularies filled in."""
    vocabularies = "\n".join(
        f"  - {component_type.value}: {', '.join(names)}"
        for component_type, names in COMPONENT_VOCABULARIES.items()
    )
    return CLASSIFICATION_SYSTEM_PROMPT.format(
        concepts=", ".join(concept.value for concept in Concept),
        change_types=", ".join(change_type.value for change_type in ChangeType),
        scopes=", ".join(scope.value for scope in Scope),
        component_types=", ".join(component_type.value for component_type in COMPONENT_VOCABULARIES),
        vocabularies=vocabularies,
    )


def build_classification_prompt(text: str) -> str:
    """User prompt wrapping the raw change-request text."""
    return f"Classify this change request:\n\n<request>\n{text.strip()}\n</request>"
