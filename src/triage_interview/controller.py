"""InterviewSession — the single controller that owns a session's state.

The controller holds one ``SessionState`` and replaces it on every
operation by running the pure ``transition`` function.  It adds no rules
of its own beyond logging and the projector shortcuts.

Usage::

    store = CatalogStore()
    store.load()
    session = InterviewSession(store.questions)

    session.start("P1", Demographics(sex="male", age=55))
    session.set_answer("hypertension", "yes_treated")
    if session.is_current_answered():
        session.advance()

    session.complete_phase1()                  # -> analyzing
    session.receive_analysis(questions, result)  # -> phase2
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional, Sequence

from triage_interview import machine
from triage_interview.models.analysis import AnalysisResult
from triage_interview.models.question import Question
from triage_interview.models.report import ReportContent
from triage_interview.models.session import (
    AnswerValue,
    Demographics,
    ResponseEntry,
    SessionState,
    SessionStatus,
)
from triage_interview.projector import project_responses

logger = logging.getLogger(__name__)


class InterviewSession:
    """Owns one interview's ``SessionState`` and applies transitions to it.

    Args:
        phase1_questions: the full phase-1 catalog, in presentation order
        state: an existing state to resume from (overrides the catalog)
    """

    def __init__(
        self,
        phase1_questions: Optional[Sequence[Question]] = None,
        state: Optional[SessionState] = None,
    ) -> None:
        self._state = state if state is not None else machine.initial_state(list(phase1_questions or []))

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def status(self) -> SessionStatus:
        return self._state.status

    @property
    def session_id(self) -> str | None:
        return self._state.session_id

    @property
    def error(self) -> str | None:
        return self._state.error

    @property
    def is_loading(self) -> bool:
        return self._state.is_loading

    def _apply(self, event: machine.Event) -> SessionState:
        before = self._state.status
        self._state = machine.transition(self._state, event)
        if self._state.status != before:
            logger.info(
                "Session %s: %s -> %s (%s)",
                self._state.session_id,
                before.value,
                self._state.status.value,
                type(event).__name__,
            )
        return self._state

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def current_questions(self) -> list[Question]:
        return machine.current_questions(self._state)

    def current_question(self) -> Question | None:
        return machine.current_question(self._state)

    def is_current_answered(self) -> bool:
        return machine.is_current_answered(self._state)

    def progress(self) -> tuple[int, int]:
        return machine.progress(self._state)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def start(self, patient_id: str, demographics: Demographics | dict[str, Any]) -> SessionState:
        """Begin a new interview, overwriting any running one.

        Raises:
            ValidationError: empty patient id or age outside [1, 150).
        """
        if not isinstance(demographics, Demographics):
            demographics = Demographics(**demographics)
        return self._apply(machine.Start(patient_id=patient_id, demographics=demographics))

    def set_answer(self, question_id: str, value: AnswerValue) -> SessionState:
        logger.debug("Session %s: answer %s", self._state.session_id, question_id)
        return self._apply(machine.SetAnswer(question_id=question_id, value=value))

    def advance(self) -> SessionState:
        return self._apply(machine.Advance())

    def retreat(self) -> SessionState:
        return self._apply(machine.Retreat())

    def complete_phase1(self) -> SessionState:
        return self._apply(machine.CompletePhase1())

    def receive_analysis(
        self,
        questions: Sequence[Question],
        analysis: AnalysisResult,
    ) -> SessionState:
        return self._apply(machine.ReceiveAnalysis(questions=list(questions), analysis=analysis))

    def complete_phase2(self) -> SessionState:
        return self._apply(machine.CompletePhase2())

    def receive_report(self, report: ReportContent) -> SessionState:
        return self._apply(machine.ReceiveReport(report=report))

    def fail(self, message: str) -> SessionState:
        logger.warning(
            "Session %s failed in %s: %s",
            self._state.session_id,
            self._state.status.value,
            message,
        )
        return self._apply(machine.Fail(message=message))

    def reset(self) -> SessionState:
        return self._apply(machine.Reset())

    # ------------------------------------------------------------------
    # Projections
    # ------------------------------------------------------------------

    def phase1_responses(self, now: Optional[datetime] = None) -> list[ResponseEntry]:
        """Project the phase-1 answers into transcript entries."""
        return project_responses(
            self._state.phase1_questions,
            self._state.answers,
            self._state.session_id or "",
            1,
            now=now,
        )

    def phase2_responses(self, now: Optional[datetime] = None) -> list[ResponseEntry]:
        """Project the phase-2 answers into transcript entries."""
        return project_responses(
            self._state.phase2_questions,
            self._state.answers,
            self._state.session_id or "",
            2,
            now=now,
        )
