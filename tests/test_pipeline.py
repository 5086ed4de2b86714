"""InterviewPipeline tests with a mocked backend and recorder.

Drives complete interviews over the bundled catalog without any network
or database access.

Test scenarios:
  - End-to-end: phase 1 -> analysis with two follow-ups -> phase 2 -> report
  - Report without riskFactors falls back to overall risk "moderate"
  - Malformed analysis reply: UpstreamParseError, session back in phase1
  - Auth failure during report: session back in phase2 with the error
  - Timeout and unexpected exceptions fail the session as UpstreamGenericError
  - Session reset or restarted mid-call: late result dropped, ValueError
  - Stage guards: wrong-status calls raise ValueError, nothing is called
  - Recorder: snapshot calls at each boundary, failures tolerated
"""

import json

import httpx
import pytest

from triage_interview.errors import (
    UpstreamAuthError,
    UpstreamGenericError,
    UpstreamParseError,
)
from triage_interview.llm import LLMSettings, OpenAIBackend
from triage_interview.models import SessionStatus
from triage_interview.pipeline import InterviewPipeline

from helpers.mocks import (
    ANALYSIS_PAYLOAD,
    REPORT_PAYLOAD,
    HangingBackend,
    MockBackend,
    MockRecorder,
    fenced,
)


# =====================================================================
# Helpers
# =====================================================================

# Valid answers for every required catalog question
REQUIRED_ANSWERS = {
    "chief_complaint_main": "chest_pain",
    "chief_complaint_description": "Pressure in the chest when climbing stairs",
    "symptom_duration": "weeks",
    "symptom_triggers": ["physical_exertion"],
    "symptom_relief": ["rest"],
    "hypertension": "yes_treated",
    "diabetes": "no",
    "hyperlipidemia": "unknown",
    "smoking": "never",
    "family_history": ["none"],
    "obesity": "No",
    "cardiac_history": ["none"],
    "cardiac_procedures": ["none"],
    "hospitalizations": "no",
    "comorbidities": ["none", "other:Gout"],
    "current_cardiac_meds": ["none"],
    "allergies": "no",
    "physical_activity": "moderate",
    "diet": "balanced",
    "alcohol": "none",
    "stress_level": "5",
    "sleep_quality": "good",
    "exercise_tolerance": "limited",
    "stairs_climbing": "one_floor",
    "daily_activities": "no_limitation",
    "night_symptoms": "no",
    "pillows_needed": "one",
}


def _answer_all(session, answers):
    """Answer and walk the current phase; values need not match option lists."""
    for question in session.current_questions():
        if question.id in answers:
            session.set_answer(question.id, answers[question.id])
        if question.required:
            assert session.is_current_answered(), f"{question.id} left unanswered"
        session.advance()


async def _phase2_session(pipeline, store, demographics):
    session = await pipeline.start("P1", demographics, store)
    _answer_all(session, REQUIRED_ANSWERS)
    await pipeline.complete_phase1(session)
    return session


# =====================================================================
# End-to-end
# =====================================================================


class TestEndToEnd:

    @pytest.mark.asyncio
    async def test_full_interview(self, store, demographics):
        backend = MockBackend(fenced(ANALYSIS_PAYLOAD), fenced(REPORT_PAYLOAD))
        pipeline = InterviewPipeline(backend)

        session = await pipeline.start("P1", demographics, store)
        assert session.status == SessionStatus.PHASE1
        assert session.progress() == (1, 33)
        _answer_all(session, REQUIRED_ANSWERS)

        analysis = await pipeline.complete_phase1(session)
        assert session.status == SessionStatus.PHASE2
        assert [q.id for q in session.current_questions()] == ["followup_1", "followup_2"]
        assert analysis.preliminary_assessment.risk_level == "high"
        assert session.current_index == 0

        session.set_answer("followup_1", "yes")
        session.advance()
        session.set_answer("followup_2", "About 200 metres")

        report = await pipeline.complete_phase2(session)
        assert session.status == SessionStatus.COMPLETED
        assert session.state.report == report
        assert report.triage_summary.urgency_level == "urgent"
        assert report.risk_factors.overall_risk_level == "moderate", (
            "missing riskFactors must fall back to moderate"
        )
        assert report.patient_summary.session_id == session.session_id
        assert len(report.interview_transcript.phase1) == len(REQUIRED_ANSWERS)
        assert [e.question_id for e in report.interview_transcript.phase2] == [
            "followup_1", "followup_2",
        ]

    @pytest.mark.asyncio
    async def test_analysis_prompt_contents(self, store, demographics):
        backend = MockBackend(fenced(ANALYSIS_PAYLOAD))
        pipeline = InterviewPipeline(backend)
        await _phase2_session(pipeline, store, demographics)

        user = backend.calls[0][1].content
        assert "Patient: male, 55 years old." in user
        assert "Other: Gout" in user
        # Chief complaint pairs come first
        assert user.index("main reason for your visit") < user.index("high blood pressure")

    @pytest.mark.asyncio
    async def test_report_prompt_carries_notes(self, store, demographics):
        backend = MockBackend(fenced(ANALYSIS_PAYLOAD), fenced(REPORT_PAYLOAD))
        pipeline = InterviewPipeline(backend)
        session = await _phase2_session(pipeline, store, demographics)
        session.set_answer("followup_1", "no")
        await pipeline.complete_phase2(session)

        user = backend.calls[1][1].content
        assert "=== ANALYSIS NOTES ===" in user
        assert "Typical angina pattern" in user

    @pytest.mark.asyncio
    async def test_empty_analysis_uses_fallback(self, store, demographics):
        pipeline = InterviewPipeline(MockBackend(json.dumps({"followUpQuestions": []})))
        session = await _phase2_session(pipeline, store, demographics)
        assert len(session.current_questions()) == 3

    @pytest.mark.asyncio
    async def test_start_accepts_question_list(self, small_catalog):
        pipeline = InterviewPipeline(MockBackend())
        session = await pipeline.start("P1", {"sex": "female", "age": 30}, small_catalog)
        assert session.progress() == (1, 3)


# =====================================================================
# Failures
# =====================================================================


class TestFailures:

    @pytest.mark.asyncio
    async def test_malformed_analysis(self, store, demographics):
        pipeline = InterviewPipeline(MockBackend("Sorry, I cannot produce JSON today."))
        session = await pipeline.start("P1", demographics, store)
        _answer_all(session, REQUIRED_ANSWERS)

        with pytest.raises(UpstreamParseError):
            await pipeline.complete_phase1(session)
        assert session.status == SessionStatus.PHASE1
        assert session.error == UpstreamParseError.default_message
        assert not session.is_loading
        assert session.state.answers["smoking"] == "never", "answers must survive a failure"

    @pytest.mark.asyncio
    async def test_retry_after_failure(self, store, demographics):
        backend = MockBackend("not json", fenced(ANALYSIS_PAYLOAD))
        pipeline = InterviewPipeline(backend)
        session = await pipeline.start("P1", demographics, store)
        _answer_all(session, REQUIRED_ANSWERS)

        with pytest.raises(UpstreamParseError):
            await pipeline.complete_phase1(session)
        await pipeline.complete_phase1(session)
        assert session.status == SessionStatus.PHASE2
        assert session.error is None

    @pytest.mark.asyncio
    async def test_auth_error_during_report(self, store, demographics):
        backend = MockBackend(fenced(ANALYSIS_PAYLOAD), UpstreamAuthError())
        pipeline = InterviewPipeline(backend)
        session = await _phase2_session(pipeline, store, demographics)

        with pytest.raises(UpstreamAuthError):
            await pipeline.complete_phase2(session)
        assert session.status == SessionStatus.PHASE2
        assert session.error == UpstreamAuthError.default_message
        assert session.state.report is None

    @pytest.mark.asyncio
    async def test_timeout(self, store, demographics):
        pipeline = InterviewPipeline(HangingBackend(), timeout=0.01)
        session = await pipeline.start("P1", demographics, store)

        with pytest.raises(UpstreamGenericError) as exc_info:
            await pipeline.complete_phase1(session)
        assert "did not respond" in exc_info.value.user_message
        assert session.status == SessionStatus.PHASE1
        assert session.error.startswith("Error: ")

    @pytest.mark.asyncio
    async def test_unexpected_exception_fails_session(self, store, demographics):
        pipeline = InterviewPipeline(MockBackend(RuntimeError("socket closed")))
        session = await pipeline.start("P1", demographics, store)

        with pytest.raises(UpstreamGenericError) as exc_info:
            await pipeline.complete_phase1(session)
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert exc_info.value.user_message == "Error: socket closed"
        assert session.status == SessionStatus.PHASE1
        assert session.error == "Error: socket closed"

    @pytest.mark.asyncio
    async def test_redirect_loop_surfaces_as_upstream_error(self, store, demographics):
        def handler(request):
            raise httpx.TooManyRedirects("redirect loop", request=request)

        settings = LLMSettings(provider="openai", api_key="sk-test", max_attempts=3, base_delay=0.0)
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        pipeline = InterviewPipeline(OpenAIBackend(settings, client))
        session = await pipeline.start("P1", demographics, store)

        with pytest.raises(UpstreamGenericError):
            await pipeline.complete_phase1(session)
        assert session.status == SessionStatus.PHASE1
        assert "redirect loop" in session.error


# =====================================================================
# Discarded sessions
# =====================================================================


class ResettingBackend(MockBackend):
    """Resets the session while the model call is in flight."""

    def __init__(self, session_ref, *replies):
        super().__init__(*replies)
        self.session_ref = session_ref

    async def complete(self, messages):
        self.session_ref[0].reset()
        return await super().complete(messages)


class TestDiscardedSession:

    @pytest.mark.asyncio
    async def test_reset_during_analysis(self, store, demographics):
        ref = []
        recorder = MockRecorder()
        pipeline = InterviewPipeline(ResettingBackend(ref, fenced(ANALYSIS_PAYLOAD)), recorder=recorder)
        session = await pipeline.start("P1", demographics, store)
        ref.append(session)

        with pytest.raises(ValueError, match="not found"):
            await pipeline.complete_phase1(session)
        assert session.status == SessionStatus.IDLE
        assert session.state.analysis is None, "the late result must not be applied"
        assert [e[0] for e in recorder.events] == ["start"]

    @pytest.mark.asyncio
    async def test_reset_during_failing_analysis(self, store, demographics):
        ref = []
        pipeline = InterviewPipeline(ResettingBackend(ref, UpstreamAuthError()))
        session = await pipeline.start("P1", demographics, store)
        ref.append(session)

        with pytest.raises(UpstreamAuthError):
            await pipeline.complete_phase1(session)
        assert session.status == SessionStatus.IDLE
        assert session.error is None, "a discarded session is not marked failed"

    @pytest.mark.asyncio
    async def test_restart_during_report(self, store, demographics):
        pipeline = InterviewPipeline(MockBackend(fenced(ANALYSIS_PAYLOAD)))
        session = await _phase2_session(pipeline, store, demographics)
        old_id = session.session_id

        class RestartingBackend(MockBackend):
            async def complete(self, messages):
                session.start("P2", demographics)
                return await super().complete(messages)

        pipeline = InterviewPipeline(RestartingBackend(fenced(REPORT_PAYLOAD)))
        with pytest.raises(ValueError, match="not found"):
            await pipeline.complete_phase2(session)
        assert session.session_id != old_id
        assert session.status == SessionStatus.PHASE1
        assert session.state.report is None


# =====================================================================
# Stage guards
# =====================================================================


class TestStageGuards:

    @pytest.mark.asyncio
    async def test_complete_phase2_during_phase1(self, store, demographics):
        backend = MockBackend()
        pipeline = InterviewPipeline(backend)
        session = await pipeline.start("P1", demographics, store)

        with pytest.raises(ValueError, match="only valid during phase2"):
            await pipeline.complete_phase2(session)
        assert backend.calls == []
        assert session.status == SessionStatus.PHASE1

    @pytest.mark.asyncio
    async def test_complete_phase1_twice(self, store, demographics):
        pipeline = InterviewPipeline(MockBackend(fenced(ANALYSIS_PAYLOAD)))
        session = await _phase2_session(pipeline, store, demographics)
        with pytest.raises(ValueError, match="only valid during phase1"):
            await pipeline.complete_phase1(session)
        assert session.status == SessionStatus.PHASE2


# =====================================================================
# Recorder
# =====================================================================


class TestRecorder:

    @pytest.mark.asyncio
    async def test_snapshots_at_each_boundary(self, store, demographics):
        recorder = MockRecorder()
        backend = MockBackend(fenced(ANALYSIS_PAYLOAD), fenced(REPORT_PAYLOAD))
        pipeline = InterviewPipeline(backend, recorder=recorder)
        session = await _phase2_session(pipeline, store, demographics)
        session.set_answer("followup_1", "yes")
        await pipeline.complete_phase2(session)

        kinds = [e[0] for e in recorder.events]
        assert kinds == ["start", "phase", "phase", "report"]
        assert recorder.events[0] == ("start", session.session_id)
        assert recorder.events[1][1] == 1
        assert len(recorder.events[1][2]) == len(REQUIRED_ANSWERS)
        assert recorder.events[2] == ("phase", 2, ["followup_1"])

    @pytest.mark.asyncio
    async def test_no_snapshot_on_failure(self, store, demographics):
        recorder = MockRecorder()
        pipeline = InterviewPipeline(MockBackend("oops"), recorder=recorder)
        session = await pipeline.start("P1", demographics, store)
        with pytest.raises(UpstreamParseError):
            await pipeline.complete_phase1(session)
        assert [e[0] for e in recorder.events] == ["start"]

    @pytest.mark.asyncio
    async def test_recorder_failure_tolerated(self, store, demographics, caplog):
        recorder = MockRecorder(fail=True)
        backend = MockBackend(fenced(ANALYSIS_PAYLOAD), fenced(REPORT_PAYLOAD))
        pipeline = InterviewPipeline(backend, recorder=recorder)

        session = await _phase2_session(pipeline, store, demographics)
        await pipeline.complete_phase2(session)
        assert session.status == SessionStatus.COMPLETED
        assert any("Recorder record_start failed" in r.getMessage() for r in caplog.records)
