"""Backend factory — the single place that maps a provider name to a class.

Usage::

    from triage_interview.llm import create_backend, load_llm_settings

    backend = create_backend(load_llm_settings())
    text = await backend.complete(messages)
"""

from __future__ import annotations

import logging

import httpx

from triage_interview.errors import UpstreamGenericError
from triage_interview.interfaces import LLMBackend
from triage_interview.llm.config import PROVIDERS, LLMSettings
from triage_interview.llm.providers import (
    AnthropicBackend,
    AzureOpenAIBackend,
    HTTPBackend,
    OpenAIBackend,
)
from triage_interview.models.requests import LLMMessage

logger = logging.getLogger(__name__)

_BACKENDS: dict[str, type[HTTPBackend]] = {
    "openai": OpenAIBackend,
    "anthropic": AnthropicBackend,
    "azure": AzureOpenAIBackend,
}

# One-word probe used to verify credentials and connectivity
PROBE_MESSAGES: list[LLMMessage] = [
    LLMMessage(role="system", content="Answer with one word: OK"),
    LLMMessage(role="user", content="Connection test"),
]


def create_backend(settings: LLMSettings, client: httpx.AsyncClient | None = None) -> HTTPBackend:
    """Create the backend for ``settings.provider``.

    Raises:
        ValueError: unknown provider, or azure without an endpoint.
    """
    provider = settings.provider.lower().strip()
    backend_cls = _BACKENDS.get(provider)
    if backend_cls is None:
        raise ValueError(
            f"Unknown LLM provider: '{settings.provider}'. "
            f"Supported: {', '.join(PROVIDERS)}"
        )
    backend = backend_cls(settings, client)
    logger.info("LLM backend: %s (model=%s)", provider, backend.model)
    return backend


async def check_connection(backend: LLMBackend) -> str:
    """Send the probe and return the model's reply.

    Upstream errors propagate unchanged.  An empty reply is reported as
    ``UpstreamGenericError``.
    """
    reply = (await backend.complete(PROBE_MESSAGES)).strip()
    if not reply:
        raise UpstreamGenericError("No response from the model.", detail="empty probe reply")
    return reply
