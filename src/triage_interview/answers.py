"""Helpers for answer values and the free-text "other" marker.

An answer is either a single string or a list of strings (multiselect).
A value starting with ``other:`` is a free-text "other" entry; the rest of
the string is what the patient typed.
"""

from __future__ import annotations

from typing import Any

from triage_interview.constants import ANSWER_SEPARATOR, OTHER_PREFIX


def is_other_answer(value: str) -> bool:
    """True if *value* is a free-text "other" entry."""
    return value.startswith(OTHER_PREFIX)


def other_text(value: str) -> str:
    """Return the user-supplied text of an "other" entry ("" if not one)."""
    if not is_other_answer(value):
        return ""
    return value[len(OTHER_PREFIX):]


def make_other_answer(text: str) -> str:
    """Encode free text as an "other" entry."""
    return f"{OTHER_PREFIX}{text}"


def format_answer(value: str | list[str]) -> str:
    """Render an answer as a single display string.

    Lists are joined with ``", "``; strings are returned unchanged.
    """
    if isinstance(value, list):
        return ANSWER_SEPARATOR.join(value)
    return value


def humanize_answer(value: str) -> str:
    """Render "other" markers inside a display string as ``Other: <text>``.

    Used by the prompt renderer so the model never sees the raw marker.
    """
    parts = value.split(ANSWER_SEPARATOR)
    rendered = [
        f"Other: {other_text(p)}" if is_other_answer(p) else p
        for p in parts
    ]
    return ANSWER_SEPARATOR.join(rendered)


def is_answer_present(value: Any) -> bool:
    """True if *value* counts as answered for a required question.

    A string must be non-empty after trimming; a list must have at least
    one element.  Anything else (including ``None``) is unanswered.
    """
    if isinstance(value, list):
        return len(value) > 0
    if isinstance(value, str):
        return value.strip() != ""
    return False
