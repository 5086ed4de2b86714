"""Pure interview state machine.

Every operation on a session is an event model; ``transition(state, event)``
returns a new frozen ``SessionState`` and never mutates its input.  The
``InterviewSession`` controller in ``controller.py`` is the only caller in
production code, but the functions here are directly unit-testable.

Status graph::

    idle ──start──► phase1 ──complete_phase1──► analyzing
                      ▲                            │
                      └──────────── fail ──────────┤
                                                   ▼ receive_analysis
    completed ◄──receive_report── generating_report ◄──complete_phase2── phase2
                                        │                                  ▲
                                        └──────────── fail ────────────────┘

    (any) ──reset──► idle

Notes:
  - ``start`` does not reject a re-start; it overwrites the running session.
  - ``set_answer`` is accepted in every status except ``completed`` and does
    not check that the question id exists.
  - ``advance`` does not enforce ``is_current_answered``; that gate belongs
    to the caller so that back-navigation is never blocked.
  - ``fail`` keeps the answers collected so far.
"""

from __future__ import annotations

import uuid
from typing import Callable, Optional, Union

from pydantic import BaseModel, ConfigDict

from triage_interview.answers import is_answer_present
from triage_interview.constants import MAX_AGE_EXCLUSIVE, MIN_AGE
from triage_interview.errors import ValidationError
from triage_interview.followups import default_follow_up_questions
from triage_interview.models.analysis import AnalysisResult
from triage_interview.models.question import Question
from triage_interview.models.report import ReportContent
from triage_interview.models.session import (
    AnswerValue,
    Demographics,
    SessionState,
    SessionStatus,
)

# Statuses in which the phase-1 list is the "current" question list.
_PHASE1_STATUSES = {SessionStatus.IDLE, SessionStatus.PHASE1, SessionStatus.ANALYZING}


# ======================================================================
# Events
# ======================================================================


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True)


class Start(_Event):
    patient_id: str
    demographics: Demographics


class SetAnswer(_Event):
    question_id: str
    value: AnswerValue


class Advance(_Event):
    pass


class Retreat(_Event):
    pass


class CompletePhase1(_Event):
    pass


class ReceiveAnalysis(_Event):
    questions: list[Question]
    analysis: AnalysisResult


class CompletePhase2(_Event):
    pass


class ReceiveReport(_Event):
    report: ReportContent


class Fail(_Event):
    message: str


class Reset(_Event):
    pass


Event = Union[
    Start,
    SetAnswer,
    Advance,
    Retreat,
    CompletePhase1,
    ReceiveAnalysis,
    CompletePhase2,
    ReceiveReport,
    Fail,
    Reset,
]


# ======================================================================
# Construction
# ======================================================================


def initial_state(phase1_questions: Optional[list[Question]] = None) -> SessionState:
    """Build the idle state.  The phase-1 list is the full catalog."""
    return SessionState(phase1_questions=list(phase1_questions or []))


# ======================================================================
# Queries
# ======================================================================


def current_questions(state: SessionState) -> list[Question]:
    """Return the question list of the phase the session is in."""
    if state.status in _PHASE1_STATUSES:
        return state.phase1_questions
    return state.phase2_questions


def current_question(state: SessionState) -> Question | None:
    """Return the question at the current position, or ``None``."""
    questions = current_questions(state)
    if 0 <= state.current_index < len(questions):
        return questions[state.current_index]
    return None


def is_current_answered(state: SessionState) -> bool:
    """True if the current question may be left behind.

    Non-required questions always count as answered.  A required question
    needs a non-blank string or a non-empty list.  With no current
    question (empty list) this returns ``False``.
    """
    question = current_question(state)
    if question is None:
        return False
    if not question.required:
        return True
    return is_answer_present(state.answers.get(question.id))


def progress(state: SessionState) -> tuple[int, int]:
    """Return ``(position, total)`` for the current phase, 1-based."""
    questions = current_questions(state)
    if not questions:
        return 0, 0
    return state.current_index + 1, len(questions)


# ======================================================================
# Transitions
# ======================================================================


def _require_status(state: SessionState, expected: SessionStatus, op: str) -> None:
    if state.status != expected:
        raise ValueError(
            f"{op} is only valid during {expected.value}, "
            f"but session is in '{state.status.value}'"
        )


def _start(state: SessionState, event: Start) -> SessionState:
    patient_id = event.patient_id.strip()
    if not patient_id:
        raise ValidationError("patient_id must not be empty")
    age = event.demographics.age
    if not (MIN_AGE <= age < MAX_AGE_EXCLUSIVE):
        raise ValidationError(
            f"age must be in [{MIN_AGE}, {MAX_AGE_EXCLUSIVE}), got {age}"
        )

    return SessionState(
        session_id=str(uuid.uuid4()),
        patient_id=patient_id,
        demographics=event.demographics,
        status=SessionStatus.PHASE1,
        phase1_questions=state.phase1_questions,
    )


def _set_answer(state: SessionState, event: SetAnswer) -> SessionState:
    if state.status == SessionStatus.COMPLETED:
        return state
    value = list(event.value) if isinstance(event.value, list) else event.value
    answers = {**state.answers, event.question_id: value}
    return state.model_copy(update={"answers": answers})


def _advance(state: SessionState, event: Advance) -> SessionState:
    last = len(current_questions(state)) - 1
    if state.current_index >= last:
        return state
    return state.model_copy(update={"current_index": state.current_index + 1})


def _retreat(state: SessionState, event: Retreat) -> SessionState:
    if state.current_index <= 0:
        return state
    return state.model_copy(update={"current_index": state.current_index - 1})


def _complete_phase1(state: SessionState, event: CompletePhase1) -> SessionState:
    _require_status(state, SessionStatus.PHASE1, "complete_phase1")
    return state.model_copy(update={
        "status": SessionStatus.ANALYZING,
        "is_loading": True,
        "error": None,
    })


def _receive_analysis(state: SessionState, event: ReceiveAnalysis) -> SessionState:
    _require_status(state, SessionStatus.ANALYZING, "receive_analysis")
    questions = list(event.questions) or default_follow_up_questions()
    return state.model_copy(update={
        "status": SessionStatus.PHASE2,
        "phase2_questions": questions,
        "analysis": event.analysis,
        "current_index": 0,
        "is_loading": False,
    })


def _complete_phase2(state: SessionState, event: CompletePhase2) -> SessionState:
    _require_status(state, SessionStatus.PHASE2, "complete_phase2")
    return state.model_copy(update={
        "status": SessionStatus.GENERATING_REPORT,
        "is_loading": True,
        "error": None,
    })


def _receive_report(state: SessionState, event: ReceiveReport) -> SessionState:
    _require_status(state, SessionStatus.GENERATING_REPORT, "receive_report")
    return state.model_copy(update={
        "status": SessionStatus.COMPLETED,
        "report": event.report,
        "is_loading": False,
    })


def _fail(state: SessionState, event: Fail) -> SessionState:
    status = state.status
    if status == SessionStatus.ANALYZING:
        status = SessionStatus.PHASE1
    elif status == SessionStatus.GENERATING_REPORT:
        status = SessionStatus.PHASE2
    return state.model_copy(update={
        "status": status,
        "error": event.message,
        "is_loading": False,
    })


def _reset(state: SessionState, event: Reset) -> SessionState:
    return initial_state(state.phase1_questions)


_HANDLERS: dict[type, Callable[[SessionState, object], SessionState]] = {
    Start: _start,
    SetAnswer: _set_answer,
    Advance: _advance,
    Retreat: _retreat,
    CompletePhase1: _complete_phase1,
    ReceiveAnalysis: _receive_analysis,
    CompletePhase2: _complete_phase2,
    ReceiveReport: _receive_report,
    Fail: _fail,
    Reset: _reset,
}


def transition(state: SessionState, event: Event) -> SessionState:
    """Apply *event* to *state* and return the resulting state.

    Raises:
        ValidationError: ``Start`` with an empty patient id or an age
            outside [1, 150); *state* is untouched.
        ValueError: a phase operation issued in the wrong status.
        TypeError: *event* is not a known event type.
    """
    handler = _HANDLERS.get(type(event))
    if handler is None:
        raise TypeError(f"Unknown event type: {type(event).__name__}")
    return handler(state, event)
