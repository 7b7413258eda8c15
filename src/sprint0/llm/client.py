"""LiteLLM-backed completion client for change-request classification.

Classification must be repeatable, so sampling is pinned: temperature 0 for
every provider, plus top_k 1 where the provider accepts it.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

import litellm

from sprint0.models.llm_config import LLMConfig

logger = logging.getLogger(__name__)

# litellm module attribute holding each provider's key
PROVIDER_KEY_ATTRS: dict[str, str] = {
    "claude": "anthropic_key",
    "gemini": "google_api_key",
    "openai": "openai_key",
}

TOP_K_PROVIDERS = frozenset({"claude", "gemini", "ollama"})

# (exception, label) checked in order; anything else is a generic failure
ERROR_LABELS: tuple[tuple[type[Exception], str], ...] = (
    (litellm.exceptions.AuthenticationError, "Authentication failed for"),
    (litellm.exceptions.RateLimitError, "Rate limit exceeded for"),
    (litellm.exceptions.Timeout, "Request timed out for"),
    (litellm.exceptions.APIConnectionError, "Connection failed to"),
)


class LLMError(Exception):
    """A classification request could not be completed by the provider."""

    def __init__(self, message: str, provider: str | None = None) -> None:
        super().__init__(message)
        self.provider = provider


@dataclass
class LLMResponse:
    """Text answer from one completion call.

    Attributes:
        content: Answer text (empty when the provider returned none)
        model: Model that answered
        usage: Prompt/completion/total token counts when reported
        finish_reason: Provider stop reason (stop, length, ...)
    """

    content: str
    model: str
    usage: dict[str, int] = field(default_factory=dict)
    finish_reason: str | None = None

    @property
    def truncated(self) -> bool:
        """Whether the answer was cut off by the token limit."""
        return self.finish_reason == "length"


class LLMClient:
    """Sends classification prompts to the configured provider."""

    def __init__(self, config: LLMConfig) -> None:
        self.config = config
        self._register_credentials()

    def _register_credentials(self) -> None:
        key_attr = PROVIDER_KEY_ATTRS.get(self.config.provider)
        if key_attr and self.config.api_key:
            setattr(litellm, key_attr, self.config.api_key)
        if self.config.provider == "ollama" and self.config.api_base:
            litellm.api_base = self.config.api_base

    def build_request(
        self,
        prompt: str,
        system_prompt: str | None = None,
        max_tokens: int | None = None,
    ) -> dict[str, Any]:
        """Keyword arguments for ``litellm.completion``."""
        messages = [{"role": "system", "content": system_prompt}] if system_prompt else []
        messages.append({"role": "user", "content": prompt})

        request: dict[str, Any] = {
            "model": self.config.get_litellm_model_name(),
            "messages": messages,
            "temperature": 0,
            "max_tokens": max_tokens or self.config.max_tokens,
            "api_key": self.config.api_key,
            "timeout": self.config.timeout,
        }
        if self.config.provider in TOP_K_PROVIDERS:
            request["top_k"] = 1
        if self.config.provider == "ollama":
            request["api_base"] = self.config.api_base
        return request

    def complete(
        self,
        prompt: str,
        system_prompt: str | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        """Run one completion.

        Raises:
            LLMError: On any provider or transport failure
        """
        request = self.build_request(prompt, system_prompt, max_tokens)
        logger.debug("Requesting completion from %s", request["model"])
        try:
            raw = litellm.completion(**request)
        except Exception as e:
            raise self._wrap_error(e) from e

        response = self._to_response(raw)
        if response.truncated:
            logger.warning("Completion from %s hit the token limit", response.model)
        return response

    def _wrap_error(self, error: Exception) -> LLMError:
        provider = self.config.provider
        for error_type, label in ERROR_LABELS:
            if isinstance(error, error_type):
                return LLMError(f"{label} {provider}: {error}", provider=provider)
        return LLMError(f"LLM completion failed: {error}", provider=provider)

    def _to_response(self, raw: Any) -> LLMResponse:
        choice = raw.choices[0]
        usage: dict[str, int] = {}
        if raw.usage:
            usage = {
                name: getattr(raw.usage, name, 0) or 0
                for name in ("prompt_tokens", "completion_tokens", "total_tokens")
            }
        return LLMResponse(
            content=choice.message.content or "",
            model=raw.model or self.config.model,
            usage=usage,
            finish_reason=choice.finish_reason,
        )


def create_client(config: LLMConfig) -> LLMClient:
    """Client for an enabled LLM configuration.

    Raises:
        ValueError: If the LLM is disabled
    """
    if not config.enabled:
        raise ValueError("LLM is disabled in configuration")
    return LLMClient(config)
