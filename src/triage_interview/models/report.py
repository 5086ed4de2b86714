"""Report models — the complete document produced by the report assembler.

Every list field defaults to empty and every enumerated field defaults to
its mid-severity value, so a report can always be built from a partial
generator response.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from triage_interview.models.question import QuestionCategory


class PatientSummary(BaseModel):
    session_id: str
    # Captured at assembly time, not at session start
    interview_date: str
    completion_time: str


class TriageSummary(BaseModel):
    chief_complaint: str
    symptom_duration: str
    urgency_level: Literal["routine", "urgent", "immediate"] = "routine"
    urgency_rationale: str = ""


class RiskFactor(BaseModel):
    name: str
    present: bool
    details: Optional[str] = None
    severity: Optional[Literal["mild", "moderate", "severe"]] = None


class RiskFactorAssessment(BaseModel):
    identified_factors: List[RiskFactor] = Field(default_factory=list)
    overall_risk_level: Literal["low", "moderate", "high"] = "moderate"
    risk_rationale: str = ""


class RecommendationSection(BaseModel):
    physical_exam_focus: List[str] = Field(default_factory=list)
    suggested_diagnostics: List[str] = Field(default_factory=list)
    areas_for_deeper_investigation: List[str] = Field(default_factory=list)
    additional_notes: Optional[str] = None


class TranscriptEntry(BaseModel):
    question_id: str
    question_text: str
    answer: str
    category: QuestionCategory


class InterviewTranscript(BaseModel):
    phase1: List[TranscriptEntry] = Field(default_factory=list)
    phase2: List[TranscriptEntry] = Field(default_factory=list)


class ReportContent(BaseModel):
    """Final triage report handed to the clinician."""

    patient_summary: PatientSummary
    triage_summary: TriageSummary
    risk_factors: RiskFactorAssessment = Field(default_factory=RiskFactorAssessment)
    key_findings: List[str] = Field(default_factory=list)
    differential_considerations: List[str] = Field(default_factory=list)
    recommendations: RecommendationSection = Field(default_factory=RecommendationSection)
    interview_transcript: InterviewTranscript = Field(default_factory=InterviewTranscript)
