"""Language-model backend configuration — loaded from environment variables.

Settings are read once via ``load_llm_settings()`` and passed to
``create_backend()``.

Environment variables:
    LLM_PROVIDER            — openai | anthropic | azure (default: openai)
    LLM_MODEL               — model or Azure deployment name
                              (default: provider-specific, see DEFAULT_MODELS)
    LLM_API_KEY             — provider credential
    LLM_BASE_URL            — endpoint override; required for azure
    LLM_API_VERSION         — Azure api-version query parameter
    LLM_TEMPERATURE         — sampling temperature (default: 0.7)
    LLM_MAX_TOKENS          — completion token limit (default: 4096)
    LLM_TIMEOUT_SECONDS     — per-request HTTP timeout (default: 120)
    LLM_RETRY_MAX_ATTEMPTS  — attempts for server-class failures (default: 3)
    LLM_RETRY_BASE_DELAY    — first retry delay in seconds (default: 1.0)
"""

import os
from dataclasses import dataclass

from triage_interview.constants import (
    LLM_TIMEOUT_SECONDS,
    RETRY_BASE_DELAY,
    RETRY_MAX_ATTEMPTS,
)

PROVIDERS: tuple[str, ...] = ("openai", "anthropic", "azure")

DEFAULT_MODELS: dict[str, str] = {
    "openai": "gpt-4o",
    "anthropic": "claude-sonnet-4-20250514",
    "azure": "gpt-4o",
}

DEFAULT_AZURE_API_VERSION = "2024-02-15-preview"


@dataclass(frozen=True)
class LLMSettings:
    """Immutable backend configuration."""

    provider: str = "openai"
    model: str | None = None
    api_key: str = ""
    base_url: str | None = None
    api_version: str = DEFAULT_AZURE_API_VERSION
    temperature: float = 0.7
    max_tokens: int = 4096
    timeout: float = LLM_TIMEOUT_SECONDS
    max_attempts: int = RETRY_MAX_ATTEMPTS
    base_delay: float = RETRY_BASE_DELAY

    @property
    def resolved_model(self) -> str:
        """The configured model, or the provider's default."""
        return self.model or DEFAULT_MODELS.get(self.provider, DEFAULT_MODELS["openai"])


def load_llm_settings() -> LLMSettings:
    """Build LLMSettings from the current environment."""
    return LLMSettings(
        provider=os.getenv("LLM_PROVIDER", "openai").strip().lower(),
        model=os.getenv("LLM_MODEL") or None,
        api_key=os.getenv("LLM_API_KEY", ""),
        base_url=os.getenv("LLM_BASE_URL") or None,
        api_version=os.getenv("LLM_API_VERSION", DEFAULT_AZURE_API_VERSION),
        temperature=float(os.getenv("LLM_TEMPERATURE", "0.7")),
        max_tokens=int(os.getenv("LLM_MAX_TOKENS", "4096")),
        timeout=float(os.getenv("LLM_TIMEOUT_SECONDS", str(LLM_TIMEOUT_SECONDS))),
        max_attempts=int(os.getenv("LLM_RETRY_MAX_ATTEMPTS", str(RETRY_MAX_ATTEMPTS))),
        base_delay=float(os.getenv("LLM_RETRY_BASE_DELAY", str(RETRY_BASE_DELAY))),
    )
