"""Question models for the interview catalog and follow-up questions.

Each question type maps to a specific UI component:

    - text: single-line free text
    - textarea: multi-line free text
    - select: pick one option from a dropdown
    - multiselect: pick one or more options (answer is a list)
    - radio: pick exactly one option (mutually exclusive buttons)
    - scale: numeric scale between ``scale_min`` and ``scale_max``

Invariants (enforced by the model validator):

    - select / multiselect / radio questions must carry a non-empty option list
    - ``allow_other`` is only valid on radio and multiselect questions
"""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, model_validator

from triage_interview.constants import CHOICE_TYPES, OTHER_CAPABLE_TYPES

QuestionCategory = Literal[
    "chief_complaint",
    "risk_factors",
    "medical_history",
    "medications",
    "lifestyle",
    "functional_status",
]

QuestionType = Literal["text", "textarea", "select", "multiselect", "radio", "scale"]


class QuestionOption(BaseModel):
    """A selectable option: stored ``value`` and display ``label``."""

    value: str
    label: str


class ScaleLabels(BaseModel):
    """End-point captions for scale questions."""

    min: str
    max: str


class Question(BaseModel):
    """A single interview question."""

    id: str
    category: QuestionCategory
    text: str
    type: QuestionType
    options: Optional[List[QuestionOption]] = None
    required: bool = True
    placeholder: Optional[str] = None
    help_text: Optional[str] = None
    # Scale-only fields
    scale_min: Optional[int] = None
    scale_max: Optional[int] = None
    scale_labels: Optional[ScaleLabels] = None
    # Free-text "other" extension (radio / multiselect only)
    allow_other: bool = False
    other_placeholder: Optional[str] = None

    @model_validator(mode="after")
    def _chk(self):
        if self.type in CHOICE_TYPES and not self.options:
            raise ValueError(f"question '{self.id}' of type {self.type} requires options")
        if self.allow_other and self.type not in OTHER_CAPABLE_TYPES:
            raise ValueError(
                f"question '{self.id}': allow_other requires radio or multiselect, got {self.type}"
            )
        if self.type == "scale" and self.scale_min is not None and self.scale_max is not None:
            if self.scale_min >= self.scale_max:
                raise ValueError("scale_min must be < scale_max")
        return self

    def option_label(self, value: str) -> str | None:
        """Return the display label for an option value, if known."""
        for opt in self.options or []:
            if opt.value == value:
                return opt.label
        return None
