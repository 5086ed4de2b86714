"""Exception hierarchy for the interview SDK.

Two families:

  - ``ValidationError`` — malformed input rejected before any state
    mutation (empty patient id, out-of-range age).  It subclasses
    ``ValueError`` so generic handlers keep working.
  - ``UpstreamError`` — failures of the external language-model call.
    Each subclass carries a ``user_message`` suitable for display; the
    pipeline passes it to ``InterviewSession.fail()`` so the session
    reverts to an answerable phase.
"""

from triage_interview.constants import MAX_DIAGNOSTIC_LENGTH


class InterviewError(Exception):
    """Base class for all SDK errors."""


class ValidationError(InterviewError, ValueError):
    """Start parameters failed validation; session state is untouched."""


class UpstreamError(InterviewError):
    """The external language-model call failed."""

    default_message = "The analysis service failed. Please try again."

    def __init__(self, user_message: str | None = None, *, detail: str | None = None) -> None:
        self.user_message = user_message or self.default_message
        # Raw diagnostic for the server log; never shown verbatim to users
        self.detail = detail
        super().__init__(self.user_message)


class UpstreamAuthError(UpstreamError):
    """Credential missing or rejected by the provider."""

    default_message = "Invalid API key. Check the language model configuration."


class UpstreamRateLimitError(UpstreamError):
    """The provider throttled the request."""

    default_message = "Request limit exceeded. Please wait a moment and try again."


class UpstreamParseError(UpstreamError):
    """The provider answered, but the payload is not the expected structure."""

    default_message = "Failed to interpret the language model response."


class UpstreamGenericError(UpstreamError):
    """Any other upstream failure, surfaced with a truncated diagnostic."""

    @classmethod
    def from_detail(cls, detail: str) -> "UpstreamGenericError":
        """Build an error whose user message is ``Error: <detail[:100]>``."""
        return cls(f"Error: {detail[:MAX_DIAGNOSTIC_LENGTH]}", detail=detail)
