"""LLM configuration for the optional model-backed change classifier.

Supported providers: Claude, Gemini, OpenAI, Ollama and Bedrock (via LiteLLM).
"""

from dataclasses import dataclass
from typing import Any

VALID_PROVIDERS = frozenset({"claude", "gemini", "openai", "ollama", "bedrock"})

# Providers that authenticate with an explicit API key
KEYED_PROVIDERS = frozenset({"claude", "gemini", "openai"})

# LiteLLM model prefixes per provider
LITELLM_PREFIXES = {
    "claude": "anthropic",
    "gemini": "gemini",
    "openai": "openai",
    "ollama": "ollama",
    "bedrock": "bedrock",
}


@dataclass
class LLMConfig:
    """Configuration for an LLM provider.

    Attributes:
        provider: LLM provider (claude, gemini, openai, ollama, bedrock)
        model: Model identifier
        api_key: API key (cloud providers only)
        api_base: API base URL (defaults to the local server for Ollama)
        temperature: Sampling temperature (must be 0 so answers repeat)
        max_tokens: Maximum response tokens
        timeout: Request timeout in seconds
        enabled: Whether the LLM classifier may be used
    """

    provider: str = "ollama"
    model: str = "llama3.2"
    api_key: str | None = None
    api_base: str | None = None
    temperature: float = 0.0
    max_tokens: int = 1024
    timeout: int = 60
    enabled: bool = False

    def __post_init__(self) -> None:
        """Normalize and validate the configuration."""
        self.provider = self.provider.lower().strip()
        if self.provider not in VALID_PROVIDERS:
            raise ValueError(
                f"Invalid provider '{self.provider}'. "
                f"Must be one of: {sorted(VALID_PROVIDERS)}"
            )

        if not self.model or not self.model.strip():
            raise ValueError("Model identifier cannot be empty")
        self.model = self.model.strip()

        if self.temperature != 0.0:
            raise ValueError(
                f"Temperature must be 0 for repeatable classification. Got: {self.temperature}"
            )

        if self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive. Got: {self.max_tokens}")

        if self.provider == "ollama" and not self.api_base:
            self.api_base = "http://localhost:11434"

        # Keys are only enforced when the classifier is actually switched on
        if self.enabled and self.provider in KEYED_PROVIDERS and not self.api_key:
            raise ValueError(f"api_key is required for {self.provider} provider")

    @property
    def is_local(self) -> bool:
        """Return True if no data leaves the machine."""
        return self.provider == "ollama"

    def get_litellm_model_name(self) -> str:
        """Model name in LiteLLM ``provider/model`` format."""
        return f"{LITELLM_PREFIXES[self.provider]}/{self.model}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization (API key masked)."""
        return {
            "provider": self.provider,
            "model": self.model,
            "api_key": "***" if self.api_key else None,
            "api_base": self.api_base,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "timeout": self.timeout,
            "enabled": self.enabled,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LLMConfig":
        """Create LLMConfig from a configuration mapping."""
        return cls(
            provider=str(data.get("provider", "ollama")),
            model=str(data.get("model", "llama3.2")),
            api_key=data.get("api_key") or None,
            api_base=data.get("api_base") or None,
            temperature=float(data.get("temperature", 0.0)),
            max_tokens=int(data.get("max_tokens", 1024)),
            timeout=int(data.get("timeout", 60)),
            enabled=bool(data.get("enabled", False)),
        )
