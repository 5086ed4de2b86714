"""Request models exchanged with the language-model collaborator.

These are request/response *shapes*, not wire formats: the prompt
renderer turns them into chat messages.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from triage_interview.models.session import Demographics


class QAPair(BaseModel):
    """A question/answer pair as shown to the language model."""

    question: str
    answer: str
    category: Optional[str] = None
    question_id: Optional[str] = None


class AnalysisRequest(BaseModel):
    """Phase-1 pairs grouped by the fixed category order, plus demographics."""

    pairs: List[QAPair] = Field(default_factory=list)
    demographics: Optional[Demographics] = None


class ReportRequest(BaseModel):
    """Both phase transcripts plus optional analysis notes."""

    phase1: List[QAPair] = Field(default_factory=list)
    phase2: List[QAPair] = Field(default_factory=list)
    analysis_notes: Optional[str] = None


class LLMMessage(BaseModel):
    """A single chat message sent to an LLM backend."""

    role: Literal["system", "user", "assistant"]
    content: str
