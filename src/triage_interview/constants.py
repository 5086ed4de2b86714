"""Interview constants shared across the SDK.

These values are referenced by the state machine, the projector, the
decoders and the prompt renderer.  They mirror the conventions encoded in
the bundled question catalog under ``data/``.

The retry and timeout constants can be overridden via environment
variables so that deployments can tune upstream behaviour without code
changes.
"""

import os

# Fixed category order.  Used to group transcript pairs in the analysis
# request and as the fallback category for decoded follow-up questions.
CATEGORY_ORDER: list[str] = [
    "chief_complaint",
    "risk_factors",
    "medical_history",
    "medications",
    "lifestyle",
    "functional_status",
]

DEFAULT_CATEGORY = CATEGORY_ORDER[0]

QUESTION_TYPES: set[str] = {"text", "textarea", "select", "multiselect", "radio", "scale"}

# Types that render a list of options and therefore require one.
CHOICE_TYPES: set[str] = {"select", "multiselect", "radio"}

# Types that may carry a free-text "other" extension.
OTHER_CAPABLE_TYPES: set[str] = {"radio", "multiselect"}

DEFAULT_QUESTION_TYPE = "text"

# Reserved marker for a free-text "other" entry: "other:<user text>".
OTHER_PREFIX = "other:"

# Multi-select answers are rendered as a single display string.
ANSWER_SEPARATOR = ", "

# Demographic bounds: 1 <= age < 150.
MIN_AGE = 1
MAX_AGE_EXCLUSIVE = 150

# Enumerated report/assessment values and their mid-severity defaults.
RISK_LEVELS: list[str] = ["low", "moderate", "high"]
URGENCY_LEVELS: list[str] = ["routine", "urgent", "immediate"]
RISK_FACTOR_SEVERITIES: list[str] = ["mild", "moderate", "severe"]
DEFAULT_RISK_LEVEL = "moderate"
DEFAULT_URGENCY = "routine"

# Report placeholders used when the generator omits the triage summary.
DEFAULT_CHIEF_COMPLAINT = "Not provided"
DEFAULT_SYMPTOM_DURATION = "Unspecified"

# Upstream diagnostics are truncated before being shown to the user.
MAX_DIAGNOSTIC_LENGTH = 100

# Retry schedule for LLM calls: only server-class failures are retried,
# with an exponential delay of base * 2**(attempt-1) seconds.
RETRY_MAX_ATTEMPTS = int(os.getenv("LLM_RETRY_MAX_ATTEMPTS", "3"))
RETRY_BASE_DELAY = float(os.getenv("LLM_RETRY_BASE_DELAY", "1.0"))

# Per-request HTTP timeout for provider calls (seconds).
LLM_TIMEOUT_SECONDS = float(os.getenv("LLM_TIMEOUT_SECONDS", "120"))
