"""HTTP language-model backends.

All backends share one calling convention (``complete(messages) -> str``)
and one transport discipline: an ``httpx.AsyncClient`` per backend,
``send_with_retry`` around every request, and ``classify_http_error`` for
non-2xx responses.  Each subclass supplies only the request layout and the
response-envelope reader.

Provider formats:
  - OpenAI:    POST {base}/chat/completions, ``Authorization: Bearer``,
               reply in ``choices[0].message.content``
  - Azure:     POST {endpoint}/openai/deployments/{model}/chat/completions
               with ``api-version`` query and ``api-key`` header
  - Anthropic: POST {base}/v1/messages, ``x-api-key`` +
               ``anthropic-version``; system prompt is a separate field,
               reply in ``content[*].text``
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from triage_interview.errors import UpstreamAuthError, UpstreamGenericError
from triage_interview.interfaces import LLMBackend
from triage_interview.llm.config import LLMSettings
from triage_interview.llm.retry import classify_http_error, send_with_retry
from triage_interview.models.requests import LLMMessage

logger = logging.getLogger(__name__)

OPENAI_BASE_URL = "https://api.openai.com/v1"
ANTHROPIC_BASE_URL = "https://api.anthropic.com"
ANTHROPIC_VERSION = "2023-06-01"


class HTTPBackend(LLMBackend):
    """Shared transport for the HTTP backends.

    Args:
        settings: backend configuration
        client: optional pre-built ``httpx.AsyncClient`` (tests pass one
            with a ``MockTransport``); otherwise one is created lazily
    """

    provider = "http"

    def __init__(self, settings: LLMSettings, client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings
        self._client = client

    @property
    def model(self) -> str:
        return self._settings.resolved_model

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self._settings.timeout)
        return self._client

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()

    # --- subclass hooks ---

    def _build_request(self, messages: list[LLMMessage]) -> tuple[str, dict[str, Any], dict[str, str], dict[str, str]]:
        """Return ``(url, json_body, headers, query_params)``."""
        raise NotImplementedError

    def _extract_text(self, data: Any) -> str:
        raise NotImplementedError

    # --- LLMBackend ---

    async def complete(self, messages: list[LLMMessage]) -> str:
        if not self._settings.api_key:
            raise UpstreamAuthError(detail=f"{self.provider}: API key not configured")

        url, body, headers, params = self._build_request(messages)
        client = self._get_client()
        logger.debug("%s request: model=%s, %d messages", self.provider, self.model, len(messages))

        response = await send_with_retry(
            lambda: client.post(url, json=body, headers=headers, params=params),
            max_attempts=self._settings.max_attempts,
            base_delay=self._settings.base_delay,
        )
        if response.status_code >= 400:
            error = classify_http_error(response)
            logger.warning(
                "%s API error: status=%d, detail=%s",
                self.provider, response.status_code, error.detail,
            )
            raise error

        try:
            return self._extract_text(response.json())
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            logger.warning("%s returned an unreadable envelope: %s", self.provider, exc)
            raise UpstreamGenericError.from_detail(
                f"Unexpected response from {self.provider}: {exc}"
            ) from exc


class OpenAIBackend(HTTPBackend):
    """OpenAI chat completions (also any OpenAI-compatible endpoint)."""

    provider = "openai"

    def _chat_body(self, messages: list[LLMMessage]) -> dict[str, Any]:
        return {
            "messages": [m.model_dump() for m in messages],
            "temperature": self._settings.temperature,
            "max_tokens": self._settings.max_tokens,
        }

    def _build_request(self, messages):
        base = (self._settings.base_url or OPENAI_BASE_URL).rstrip("/")
        body = {"model": self.model, **self._chat_body(messages)}
        headers = {"Authorization": f"Bearer {self._settings.api_key}"}
        return f"{base}/chat/completions", body, headers, {}

    def _extract_text(self, data: Any) -> str:
        content = data["choices"][0]["message"]["content"]
        return content or ""


class AzureOpenAIBackend(OpenAIBackend):
    """Azure OpenAI deployment.  ``model`` is the deployment name."""

    provider = "azure"

    def __init__(self, settings: LLMSettings, client: httpx.AsyncClient | None = None) -> None:
        if not settings.base_url:
            raise ValueError("azure provider requires LLM_BASE_URL (the resource endpoint)")
        super().__init__(settings, client)

    def _build_request(self, messages):
        base = self._settings.base_url.rstrip("/")
        url = f"{base}/openai/deployments/{self.model}/chat/completions"
        headers = {"api-key": self._settings.api_key}
        params = {"api-version": self._settings.api_version}
        return url, self._chat_body(messages), headers, params


class AnthropicBackend(HTTPBackend):
    """Anthropic Messages API."""

    provider = "anthropic"

    @staticmethod
    def _split_system(messages: list[LLMMessage]) -> tuple[str, list[dict[str, str]]]:
        system_parts = []
        chat = []
        for m in messages:
            if m.role == "system":
                system_parts.append(m.content)
            else:
                chat.append({"role": m.role, "content": m.content})
        return "\n\n".join(system_parts), chat

    def _build_request(self, messages):
        base = (self._settings.base_url or ANTHROPIC_BASE_URL).rstrip("/")
        system, chat = self._split_system(messages)
        body: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self._settings.max_tokens,
            "temperature": self._settings.temperature,
            "messages": chat,
        }
        if system:
            body["system"] = system
        headers = {
            "x-api-key": self._settings.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }
        return f"{base}/v1/messages", body, headers, {}

    def _extract_text(self, data: Any) -> str:
        blocks = data["content"]
        texts = [b["text"] for b in blocks if b.get("type") == "text"]
        if data.get("stop_reason") == "max_tokens":
            logger.warning("anthropic response truncated at max_tokens")
        return "\n".join(texts)
