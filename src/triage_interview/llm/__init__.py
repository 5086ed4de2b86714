"""Language-model backends.

Provides ``create_backend`` (provider dispatch), the three HTTP backends,
the retry helper, and ``check_connection`` for credential probes.
"""

from triage_interview.llm.config import DEFAULT_MODELS, LLMSettings, load_llm_settings
from triage_interview.llm.factory import check_connection, create_backend
from triage_interview.llm.providers import (
    AnthropicBackend,
    AzureOpenAIBackend,
    HTTPBackend,
    OpenAIBackend,
)
from triage_interview.llm.retry import classify_http_error, send_with_retry

__all__ = [
    "DEFAULT_MODELS",
    "LLMSettings",
    "load_llm_settings",
    "check_connection",
    "create_backend",
    "AnthropicBackend",
    "AzureOpenAIBackend",
    "HTTPBackend",
    "OpenAIBackend",
    "classify_http_error",
    "send_with_retry",
]
