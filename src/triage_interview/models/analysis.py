"""Analysis result models — output of the phase-1 analysis merger."""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from triage_interview.models.question import Question


class PreliminaryAssessment(BaseModel):
    """Triage estimate produced alongside the follow-up questions."""

    risk_level: Literal["low", "moderate", "high"] = "moderate"
    urgency: Literal["routine", "urgent", "immediate"] = "routine"
    key_findings: List[str] = Field(default_factory=list)
    areas_to_explore: List[str] = Field(default_factory=list)


class AnalysisResult(BaseModel):
    """Follow-up questions plus the preliminary assessment.

    ``clinical_notes`` is the free-text commentary the model may attach;
    it is forwarded to the report request as analysis notes.
    """

    follow_up_questions: List[Question] = Field(default_factory=list)
    preliminary_assessment: PreliminaryAssessment = Field(default_factory=PreliminaryAssessment)
    clinical_notes: Optional[str] = None
