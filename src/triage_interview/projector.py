"""Response projector — answers + question metadata -> transcript entries.

The projection is pure: it reads a phase's question list and the answer
store and produces one ``ResponseEntry`` per answered question, in list
order.  Questions without an answer are skipped.  The same entries feed
the analysis request, the report request and the final transcript.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal, Mapping, Optional, Sequence

from triage_interview.answers import format_answer
from triage_interview.constants import CATEGORY_ORDER
from triage_interview.models.question import Question
from triage_interview.models.requests import AnalysisRequest, QAPair, ReportRequest
from triage_interview.models.session import AnswerValue, Demographics, ResponseEntry


def project_responses(
    questions: Sequence[Question],
    answers: Mapping[str, AnswerValue],
    session_id: str,
    phase: Literal[1, 2],
    now: Optional[datetime] = None,
) -> list[ResponseEntry]:
    """Project the answers of one phase into ordered response entries.

    List answers are joined with ``", "``.  ``now`` fixes the entries'
    ``created_at``; it defaults to the current UTC time.
    """
    created_at = now or datetime.now(timezone.utc)
    entries: list[ResponseEntry] = []
    for q in questions:
        value = answers.get(q.id)
        if value is None:
            continue
        entries.append(
            ResponseEntry(
                session_id=session_id,
                phase=phase,
                question_id=q.id,
                question_text=q.text,
                category=q.category,
                answer=format_answer(value),
                created_at=created_at,
            )
        )
    return entries


def answers_from_responses(entries: Sequence[ResponseEntry]) -> dict[str, str]:
    """Re-derive ``question_id -> display answer`` from projected entries."""
    return {e.question_id: e.answer for e in entries}


def _to_pair(entry: ResponseEntry) -> QAPair:
    return QAPair(
        question=entry.question_text,
        answer=entry.answer,
        category=entry.category,
        question_id=entry.question_id,
    )


def build_analysis_request(
    entries: Sequence[ResponseEntry],
    demographics: Optional[Demographics] = None,
) -> AnalysisRequest:
    """Build the analysis request, grouping pairs by the fixed category order.

    Within a category the projection order is kept.
    """
    rank = {cat: i for i, cat in enumerate(CATEGORY_ORDER)}
    ordered = sorted(entries, key=lambda e: rank.get(e.category, len(rank)))
    return AnalysisRequest(
        pairs=[_to_pair(e) for e in ordered],
        demographics=demographics,
    )


def build_report_request(
    phase1: Sequence[ResponseEntry],
    phase2: Sequence[ResponseEntry],
    notes: Optional[str] = None,
) -> ReportRequest:
    """Build the report request from both phase transcripts."""
    return ReportRequest(
        phase1=[_to_pair(e) for e in phase1],
        phase2=[_to_pair(e) for e in phase2],
        analysis_notes=notes or None,
    )
