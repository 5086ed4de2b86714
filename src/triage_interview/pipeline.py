"""InterviewPipeline — orchestrates the two language-model calls of an interview.

The pipeline is the caller the state machine expects: it issues the phase
completion transitions, runs the external call, feeds the decoded result
back into the session, and on any failure calls ``fail`` so the
session lands back on an answerable phase.

Pipeline flow::

    start ──► phase1 ──complete_phase1()──► [analysis call] ──► phase2
                 ▲                                │
                 └─────────── fail ◄── error ─────┘

    phase2 ──complete_phase2()──► [report call] ──► completed
       ▲                               │
       └──────── fail ◄── error ───────┘

Usage::

    pipeline = InterviewPipeline(backend, recorder=DatabaseRecorder())
    session = await pipeline.start("P1", Demographics(sex="male", age=55), store)
    # ... session.set_answer(...) / session.advance() ...
    await pipeline.complete_phase1(session)
    # ... answer the follow-up questions ...
    report = await pipeline.complete_phase2(session)
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Sequence, TypeVar

from triage_interview.catalog import CatalogStore
from triage_interview.controller import InterviewSession
from triage_interview.decoders import assemble_report, decode_analysis, extract_json_payload
from triage_interview.errors import UpstreamError, UpstreamGenericError
from triage_interview.interfaces import LLMBackend, SessionRecorder
from triage_interview.models.analysis import AnalysisResult
from triage_interview.models.question import Question
from triage_interview.models.report import ReportContent
from triage_interview.models.requests import LLMMessage
from triage_interview.models.session import Demographics, SessionStatus
from triage_interview.projector import build_analysis_request, build_report_request
from triage_interview.prompt import PromptManager

logger = logging.getLogger(__name__)

T = TypeVar("T")


class InterviewPipeline:
    """Runs the analysis and report steps around an ``InterviewSession``.

    Args:
        backend: the language-model backend
        prompts: optional prompt renderer; defaults to the bundled templates
        recorder: optional snapshot recorder called at phase boundaries
        timeout: optional per-call deadline in seconds; an expired call is
            treated as an upstream failure
    """

    def __init__(
        self,
        backend: LLMBackend,
        prompts: PromptManager | None = None,
        recorder: SessionRecorder | None = None,
        timeout: float | None = None,
    ) -> None:
        self._backend = backend
        self._prompts = prompts or PromptManager()
        self._recorder = recorder
        self._timeout = timeout

    # ==================================================================
    # Session lifecycle
    # ==================================================================

    async def start(
        self,
        patient_id: str,
        demographics: Demographics | dict[str, Any],
        catalog: CatalogStore | Sequence[Question],
    ) -> InterviewSession:
        """Create a session over *catalog* and start it.

        Raises:
            ValidationError: empty patient id or out-of-range age.
        """
        questions = catalog.questions if isinstance(catalog, CatalogStore) else list(catalog)
        session = InterviewSession(questions)
        session.start(patient_id, demographics)
        await self._record("record_start", session.state)
        return session

    async def complete_phase1(self, session: InterviewSession) -> AnalysisResult:
        """Finish phase 1: run the analysis and move the session to phase 2.

        Raises:
            ValueError: the session is not in ``phase1``, or it was
                discarded while the analysis was running.
            UpstreamError: the analysis call failed; the session is back
                in ``phase1`` with the error message set.
        """
        self._require(session, SessionStatus.PHASE1, "complete_phase1")
        entries = session.phase1_responses()
        session.complete_phase1()

        request = build_analysis_request(entries, session.state.demographics)
        messages = self._prompts.analysis_messages(request)

        analysis = await self._guarded(
            session,
            lambda: self._call(messages, decode_analysis),
        )
        session.receive_analysis(analysis.follow_up_questions, analysis)
        logger.info(
            "Session %s: analysis received (%d follow-ups, risk=%s, urgency=%s)",
            session.session_id,
            len(session.state.phase2_questions),
            analysis.preliminary_assessment.risk_level,
            analysis.preliminary_assessment.urgency,
        )
        await self._record("record_phase", session.state, 1, entries)
        return analysis

    async def complete_phase2(self, session: InterviewSession) -> ReportContent:
        """Finish phase 2: generate the report and complete the session.

        Raises:
            ValueError: the session is not in ``phase2``, or it was
                discarded while the report was being generated.
            UpstreamError: the report call failed; the session is back in
                ``phase2`` with the error message set.
        """
        self._require(session, SessionStatus.PHASE2, "complete_phase2")
        phase1 = session.phase1_responses()
        phase2 = session.phase2_responses()
        session.complete_phase2()

        analysis = session.state.analysis
        notes = analysis.clinical_notes if analysis else None
        messages = self._prompts.report_messages(build_report_request(phase1, phase2, notes))
        session_id = session.session_id or ""

        report = await self._guarded(
            session,
            lambda: self._call(
                messages,
                lambda payload: assemble_report(payload, phase1, phase2, session_id),
            ),
        )
        session.receive_report(report)
        logger.info(
            "Session %s: report generated (urgency=%s, risk=%s)",
            session_id,
            report.triage_summary.urgency_level,
            report.risk_factors.overall_risk_level,
        )
        await self._record("record_phase", session.state, 2, phase2)
        await self._record("record_report", session.state, report)
        return report

    # ==================================================================
    # Internal helpers
    # ==================================================================

    @staticmethod
    def _require(session: InterviewSession, expected: SessionStatus, op: str) -> None:
        if session.status != expected:
            raise ValueError(
                f"{op} is only valid during {expected.value}, "
                f"but session is in '{session.status.value}'"
            )

    async def _call(self, messages: list[LLMMessage], decode: Callable[[Any], T]) -> T:
        text = await self._backend.complete(messages)
        return decode(extract_json_payload(text))

    async def _guarded(
        self,
        session: InterviewSession,
        step: Callable[[], Awaitable[T]],
    ) -> T:
        """Run *step*; on any failure ``fail`` the session and raise an ``UpstreamError``.

        Upstream errors propagate unchanged; timeouts and unexpected
        exceptions are raised as ``UpstreamGenericError`` chained to the
        original.  A session discarded or restarted while the call was
        running raises ``ValueError`` ("not found") and is left untouched.
        """
        session_id = session.session_id
        pending = session.status
        try:
            if self._timeout is not None:
                result = await asyncio.wait_for(step(), timeout=self._timeout)
            else:
                result = await step()
        except asyncio.TimeoutError as exc:
            error = UpstreamGenericError.from_detail(
                f"The model did not respond within {self._timeout:g} seconds"
            )
            self._fail_if_pending(session, session_id, pending, error)
            raise error from exc
        except UpstreamError as exc:
            self._fail_if_pending(session, session_id, pending, exc)
            raise
        except Exception as exc:
            logger.exception("Session %s: unexpected error during model call", session_id)
            error = UpstreamGenericError.from_detail(str(exc) or type(exc).__name__)
            self._fail_if_pending(session, session_id, pending, error)
            raise error from exc

        if not self._still_pending(session, session_id, pending):
            logger.warning(
                "Session %s was discarded while %s was running; result dropped",
                session_id, pending.value,
            )
            raise ValueError(f"Session not found: session_id={session_id} was discarded")
        return result

    @staticmethod
    def _still_pending(
        session: InterviewSession, session_id: str | None, pending: SessionStatus,
    ) -> bool:
        return session.session_id == session_id and session.status == pending

    def _fail_if_pending(
        self,
        session: InterviewSession,
        session_id: str | None,
        pending: SessionStatus,
        error: UpstreamError,
    ) -> None:
        if self._still_pending(session, session_id, pending):
            session.fail(error.user_message)

    async def _record(self, method: str, *args: Any) -> None:
        if self._recorder is None:
            return
        try:
            await getattr(self._recorder, method)(*args)
        except Exception:
            # Snapshots are best-effort; the interview continues
            logger.exception("Recorder %s failed", method)
