"""Abstract interfaces for the interview's external collaborators.

These ABCs define the contract that concrete implementations must fulfil.
The SDK ships HTTP language-model backends in ``triage_interview.llm`` and
a database recorder in ``triage_db.recorder``; tests use in-memory mocks.

Typical integration flow::

    backend: LLMBackend = create_backend(load_llm_settings())
    recorder: SessionRecorder = DatabaseRecorder()    # optional

    pipeline = InterviewPipeline(backend, recorder=recorder)
    session = await pipeline.start("P1", Demographics(sex="male", age=55), store)
    # ... answer phase-1 questions ...
    await pipeline.complete_phase1(session)
    # ... answer phase-2 questions ...
    await pipeline.complete_phase2(session)
    session.state.report
"""

from abc import ABC, abstractmethod

from triage_interview.models.report import ReportContent
from triage_interview.models.requests import LLMMessage
from triage_interview.models.session import ResponseEntry, SessionState


class LLMBackend(ABC):
    """Interface for a chat-completion language model.

    One capability: turn a list of chat messages into the model's text
    reply.  Provider differences (authentication, endpoint layout,
    system-prompt placement) stay inside the implementation.
    """

    @abstractmethod
    async def complete(self, messages: list[LLMMessage]) -> str:
        """Send *messages* and return the text of the reply.

        Raises
        ------
        UpstreamAuthError
            The credential is missing or was rejected.
        UpstreamRateLimitError
            The provider throttled the request.
        UpstreamGenericError
            Any other failure, including an unreadable response envelope.
        """
        ...


class SessionRecorder(ABC):
    """Interface for writing session snapshots at phase boundaries.

    The pipeline calls the recorder after each successful phase change.
    Implementations may raise; the pipeline logs recorder failures and
    carries on with the interview.
    """

    @abstractmethod
    async def record_start(self, state: SessionState) -> None:
        """Persist a freshly started session."""
        ...

    @abstractmethod
    async def record_phase(self, state: SessionState, phase: int, entries: list[ResponseEntry]) -> None:
        """Persist the projected responses of a completed phase.

        Parameters
        ----------
        state:
            Session state after the phase completed.
        phase:
            ``1`` or ``2``.
        entries:
            The phase's projected response entries.
        """
        ...

    @abstractmethod
    async def record_report(self, state: SessionState, report: ReportContent) -> None:
        """Persist the final report and mark the session completed."""
        ...
