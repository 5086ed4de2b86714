"""Session models — the state owned by ``InterviewSession``.

``SessionState`` is an immutable snapshot: every transition in
``triage_interview.machine`` returns a new instance instead of mutating
the old one.  ``ResponseEntry`` is the derived, per-question transcript
record produced by the projector.
"""

import enum
import uuid
from datetime import datetime, timezone
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from triage_interview.models.analysis import AnalysisResult
from triage_interview.models.question import Question, QuestionCategory
from triage_interview.models.report import ReportContent

# An answer is a single string, or an ordered list of strings (multiselect).
AnswerValue = Union[str, List[str]]


class SessionStatus(str, enum.Enum):
    """Lifecycle states of an interview session.

    Transitions:
        idle -> phase1                    (start)
        phase1 -> analyzing               (complete_phase1)
        analyzing -> phase2               (receive_analysis)
        analyzing -> phase1               (fail)
        phase2 -> generating_report       (complete_phase2)
        generating_report -> completed    (receive_report)
        generating_report -> phase2       (fail)
        * -> idle                         (reset)
    """

    IDLE = "idle"
    PHASE1 = "phase1"
    ANALYZING = "analyzing"
    PHASE2 = "phase2"
    GENERATING_REPORT = "generating_report"
    COMPLETED = "completed"


class Demographics(BaseModel):
    """Patient demographics collected before the interview starts.

    Range checks (1 <= age < 150) happen in the ``start`` transition so
    that they surface as ``triage_interview.errors.ValidationError``.
    """

    sex: Literal["male", "female"]
    age: int


class SessionState(BaseModel):
    """Complete interview state.  Frozen; transitions build new copies."""

    model_config = ConfigDict(frozen=True)

    session_id: Optional[str] = None
    patient_id: Optional[str] = None
    demographics: Optional[Demographics] = None
    status: SessionStatus = SessionStatus.IDLE
    current_index: int = 0
    phase1_questions: List[Question] = Field(default_factory=list)
    phase2_questions: List[Question] = Field(default_factory=list)
    # question id -> answer value
    answers: dict[str, AnswerValue] = Field(default_factory=dict)
    analysis: Optional[AnalysisResult] = None
    report: Optional[ReportContent] = None
    error: Optional[str] = None
    is_loading: bool = False


class ResponseEntry(BaseModel):
    """One answered question, denormalised for transcripts and requests."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    session_id: str
    phase: Literal[1, 2]
    question_id: str
    question_text: str
    category: QuestionCategory
    # Multiselect values are already joined into a single display string
    answer: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
