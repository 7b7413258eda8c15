"""LLM integration module for Sprint0.

Provides a unified LLM client wrapper using LiteLLM for multi-provider support
and an opt-in model-backed change classifier. Temperature is fixed at 0.
"""

from sprint0.llm.classifier import LLMClassifier
from sprint0.llm.client import LLMClient, LLMError, LLMResponse, create_client
from sprint0.llm.prompts import build_classification_prompt, get_system_prompt
from sprint0.models.llm_config import VALID_PROVIDERS, LLMConfig

__all__ = [
    "LLMClassifier",
    "LLMClient",
    "LLMConfig",
    "LLMError",
    "LLMResponse",
    "VALID_PROVIDERS",
    "build_classification_prompt",
    "create_client",
    "get_system_prompt",
]
