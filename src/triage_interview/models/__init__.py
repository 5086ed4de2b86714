"""Public model re-exports for triage_interview.

Consumers should import from ``triage_interview.models`` rather than
reaching into sub-modules directly.
"""

# --- Questions ---
from triage_interview.models.question import (
    Question,
    QuestionCategory,
    QuestionOption,
    QuestionType,
    ScaleLabels,
)

# --- Analysis ---
from triage_interview.models.analysis import AnalysisResult, PreliminaryAssessment

# --- Report ---
from triage_interview.models.report import (
    InterviewTranscript,
    PatientSummary,
    RecommendationSection,
    ReportContent,
    RiskFactor,
    RiskFactorAssessment,
    TranscriptEntry,
    TriageSummary,
)

# --- Session ---
from triage_interview.models.session import (
    AnswerValue,
    Demographics,
    ResponseEntry,
    SessionState,
    SessionStatus,
)

# --- LLM requests ---
from triage_interview.models.requests import (
    AnalysisRequest,
    LLMMessage,
    QAPair,
    ReportRequest,
)

__all__ = [
    # Questions
    "Question",
    "QuestionCategory",
    "QuestionOption",
    "QuestionType",
    "ScaleLabels",
    # Analysis
    "AnalysisResult",
    "PreliminaryAssessment",
    # Report
    "InterviewTranscript",
    "PatientSummary",
    "RecommendationSection",
    "ReportContent",
    "RiskFactor",
    "RiskFactorAssessment",
    "TranscriptEntry",
    "TriageSummary",
    # Session
    "AnswerValue",
    "Demographics",
    "ResponseEntry",
    "SessionState",
    "SessionStatus",
    # Requests
    "AnalysisRequest",
    "LLMMessage",
    "QAPair",
    "ReportRequest",
]
