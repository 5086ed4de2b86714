"""triage_interview — Two-phase cardiology interview SDK.

Public API:
    InterviewSession   — controller owning one session's state
    InterviewPipeline  — runs the analysis and report calls around a session
    CatalogStore       — loads the YAML question catalog into typed models
    PromptManager      — renders analysis/report requests into chat messages

State machine (pure functions over ``SessionState``):
    transition         — apply an event, return the new state
    initial_state      — idle state over a phase-1 catalog
    current_question / is_current_answered / progress — queries

Projection and decoding:
    project_responses       — answers + questions -> ordered response entries
    decode_analysis         — raw analysis payload -> AnalysisResult
    assemble_report         — raw report payload + transcripts -> ReportContent
    extract_json_payload    — strip markdown fencing and parse a JSON object

Collaborator interfaces:
    LLMBackend         — ABC: complete(messages) -> text
    SessionRecorder    — ABC: snapshots at phase boundaries

Errors:
    ValidationError, UpstreamAuthError, UpstreamRateLimitError,
    UpstreamParseError, UpstreamGenericError
"""

from triage_interview.catalog import CatalogStore
from triage_interview.controller import InterviewSession
from triage_interview.decoders import assemble_report, decode_analysis, extract_json_payload
from triage_interview.errors import (
    InterviewError,
    UpstreamAuthError,
    UpstreamError,
    UpstreamGenericError,
    UpstreamParseError,
    UpstreamRateLimitError,
    ValidationError,
)
from triage_interview.followups import DEFAULT_FOLLOW_UP_QUESTIONS
from triage_interview.interfaces import LLMBackend, SessionRecorder
from triage_interview.machine import (
    current_question,
    initial_state,
    is_current_answered,
    progress,
    transition,
)
from triage_interview.models import (
    AnalysisResult,
    Demographics,
    Question,
    ReportContent,
    ResponseEntry,
    SessionState,
    SessionStatus,
)
from triage_interview.pipeline import InterviewPipeline
from triage_interview.projector import project_responses
from triage_interview.prompt import PromptManager

__all__ = [
    # Controllers & stores
    "CatalogStore",
    "InterviewPipeline",
    "InterviewSession",
    "PromptManager",
    # State machine
    "current_question",
    "initial_state",
    "is_current_answered",
    "progress",
    "transition",
    # Projection & decoding
    "assemble_report",
    "decode_analysis",
    "extract_json_payload",
    "project_responses",
    "DEFAULT_FOLLOW_UP_QUESTIONS",
    # Interfaces
    "LLMBackend",
    "SessionRecorder",
    # Models
    "AnalysisResult",
    "Demographics",
    "Question",
    "ReportContent",
    "ResponseEntry",
    "SessionState",
    "SessionStatus",
    # Errors
    "InterviewError",
    "UpstreamAuthError",
    "UpstreamError",
    "UpstreamGenericError",
    "UpstreamParseError",
    "UpstreamRateLimitError",
    "ValidationError",
]
