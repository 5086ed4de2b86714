"""Defensive decoders for language-model payloads.

The analysis and report generators return loosely structured JSON.  Each
section is decoded by its own "partial input, defaulted output" function
that never raises on a missing or malformed field.  The only hard failure
is a response that is not a JSON object at all, reported as
``UpstreamParseError``.

Both camelCase (as requested in the prompts) and snake_case keys are
accepted.

Usage::

    payload = extract_json_payload(raw_text)
    result = decode_analysis(payload)

    payload = extract_json_payload(raw_report_text)
    report = assemble_report(payload, phase1_entries, phase2_entries, session_id)
"""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Sequence

from triage_interview.constants import (
    CATEGORY_ORDER,
    CHOICE_TYPES,
    DEFAULT_CATEGORY,
    DEFAULT_CHIEF_COMPLAINT,
    DEFAULT_QUESTION_TYPE,
    DEFAULT_RISK_LEVEL,
    DEFAULT_SYMPTOM_DURATION,
    DEFAULT_URGENCY,
    OTHER_CAPABLE_TYPES,
    QUESTION_TYPES,
    RISK_FACTOR_SEVERITIES,
    RISK_LEVELS,
    URGENCY_LEVELS,
)
from triage_interview.errors import UpstreamParseError
from triage_interview.followups import default_follow_up_questions
from triage_interview.models.analysis import AnalysisResult, PreliminaryAssessment
from triage_interview.models.question import Question, QuestionOption, ScaleLabels
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
from triage_interview.models.session import ResponseEntry

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```json\s*([\s\S]*?)\s*```", re.IGNORECASE)
_FENCED_ANY = re.compile(r"```\s*([\s\S]*?)\s*```")


# ======================================================================
# Envelope
# ======================================================================


def extract_json_payload(text: str) -> dict[str, Any]:
    """Strip markdown fencing from *text* and parse it as a JSON object.

    Raises:
        UpstreamParseError: the text is not valid JSON, or the top-level
            value is not an object.
    """
    match = _FENCED_JSON.search(text) or _FENCED_ANY.search(text)
    body = match.group(1) if match else text
    try:
        payload = json.loads(body.strip())
    except (json.JSONDecodeError, TypeError) as exc:
        logger.warning("Unparseable model response (%d chars): %s", len(text), exc)
        raise UpstreamParseError(detail=str(exc)) from exc
    if not isinstance(payload, dict):
        raise UpstreamParseError(
            detail=f"expected a JSON object, got {type(payload).__name__}"
        )
    return payload


# ======================================================================
# Field helpers
# ======================================================================


def _get(raw: Mapping[str, Any], *keys: str) -> Any:
    """Return the first present value among *keys* (camelCase, snake_case)."""
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


def _as_mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _as_text(value: Any) -> Optional[str]:
    if isinstance(value, str):
        text = value.strip()
        return text or None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _choice(value: Any, allowed: Sequence[str], default: str) -> str:
    if isinstance(value, str) and value.strip().lower() in allowed:
        return value.strip().lower()
    return default


def decode_string_list(value: Any) -> list[str]:
    """Decode a list of strings, dropping blank and non-string items.

    A bare string is treated as a one-element list.
    """
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    result = []
    for item in value:
        text = _as_text(item)
        if text is not None:
            result.append(text)
    return result


# ======================================================================
# Analysis
# ======================================================================


def _decode_options(value: Any) -> list[QuestionOption]:
    if not isinstance(value, list):
        return []
    options = []
    for item in value:
        if isinstance(item, Mapping):
            opt_value = _as_text(item.get("value"))
            label = _as_text(item.get("label")) or opt_value
            if opt_value is None:
                opt_value = label
        else:
            # Bare strings serve as both value and label
            opt_value = label = _as_text(item)
        if opt_value is not None and label is not None:
            options.append(QuestionOption(value=opt_value, label=label))
    return options


def _decode_scale_labels(value: Any) -> Optional[ScaleLabels]:
    raw = _as_mapping(value)
    low, high = _as_text(raw.get("min")), _as_text(raw.get("max"))
    if low is None or high is None:
        return None
    return ScaleLabels(min=low, max=high)


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def decode_follow_up_question(raw: Any, index: int) -> Optional[Question]:
    """Decode one proposed follow-up question.

    Returns ``None`` when the item carries no usable question text.
    Missing fields are filled in:

      - id        -> ``followup_<index>``
      - category  -> first catalog category (also for unknown values)
      - type      -> ``text`` (also for unknown values)
      - required  -> ``True`` unless explicitly ``false``
      - rationale -> surfaced as ``help_text``

    Choice types left without options degrade to ``text`` and
    ``allow_other`` is dropped where the type does not support it.
    """
    item = _as_mapping(raw)
    text = _as_text(item.get("text"))
    if text is None:
        return None

    qtype = _get(item, "type")
    if not isinstance(qtype, str) or qtype not in QUESTION_TYPES:
        qtype = DEFAULT_QUESTION_TYPE
    options = _decode_options(item.get("options"))
    if qtype in CHOICE_TYPES and not options:
        qtype = DEFAULT_QUESTION_TYPE

    category = _get(item, "category")
    if category not in CATEGORY_ORDER:
        category = DEFAULT_CATEGORY

    allow_other = _get(item, "allowOther", "allow_other") is True
    if qtype not in OTHER_CAPABLE_TYPES:
        allow_other = False

    fields: dict[str, Any] = {
        "id": _as_text(item.get("id")) or f"followup_{index}",
        "category": category,
        "text": text,
        "type": qtype,
        "options": options if qtype in CHOICE_TYPES else None,
        "required": item.get("required") is not False,
        "placeholder": _as_text(item.get("placeholder")),
        "help_text": _as_text(_get(item, "rationale", "helpText", "help_text")),
        "allow_other": allow_other,
        "other_placeholder": (
            _as_text(_get(item, "otherPlaceholder", "other_placeholder")) if allow_other else None
        ),
    }

    if qtype == "scale":
        scale_min = _as_int(_get(item, "scaleMin", "scale_min"))
        scale_max = _as_int(_get(item, "scaleMax", "scale_max"))
        if scale_min is not None and scale_max is not None and scale_min < scale_max:
            fields["scale_min"] = scale_min
            fields["scale_max"] = scale_max
        fields["scale_labels"] = _decode_scale_labels(_get(item, "scaleLabels", "scale_labels"))

    return Question(**fields)


def _unused_id(base: str, seen: set[str]) -> str:
    candidate, n = base, 1
    while candidate in seen:
        candidate = f"{base}_{n}"
        n += 1
    return candidate


def decode_follow_up_questions(value: Any) -> list[Question]:
    """Decode the follow-up question list, dropping unusable items.

    The index used for synthesized ids is the item's position in the raw
    list, so ids stay stable when an earlier item is dropped.
    """
    if not isinstance(value, list):
        return []
    questions: list[Question] = []
    seen: set[str] = set()
    for index, raw in enumerate(value):
        question = decode_follow_up_question(raw, index)
        if question is None:
            logger.warning("Dropping follow-up question %d: no usable text", index)
            continue
        if question.id in seen:
            question = question.model_copy(update={"id": _unused_id(f"followup_{index}", seen)})
        seen.add(question.id)
        questions.append(question)
    return questions


def decode_preliminary_assessment(value: Any) -> PreliminaryAssessment:
    """Decode the preliminary assessment; every field has a default."""
    raw = _as_mapping(value)
    return PreliminaryAssessment(
        risk_level=_choice(_get(raw, "riskLevel", "risk_level"), RISK_LEVELS, DEFAULT_RISK_LEVEL),
        urgency=_choice(_get(raw, "urgency"), URGENCY_LEVELS, DEFAULT_URGENCY),
        key_findings=decode_string_list(_get(raw, "keyFindings", "key_findings")),
        areas_to_explore=decode_string_list(_get(raw, "areasToExplore", "areas_to_explore")),
    )


def decode_analysis(payload: Any) -> AnalysisResult:
    """Merge a raw analysis payload into an ``AnalysisResult``.

    An empty follow-up list is replaced by the three fallback questions.

    Raises:
        UpstreamParseError: *payload* is not a mapping.
    """
    if not isinstance(payload, Mapping):
        raise UpstreamParseError(
            detail=f"analysis payload must be an object, got {type(payload).__name__}"
        )

    questions = decode_follow_up_questions(
        _get(payload, "followUpQuestions", "follow_up_questions")
    )
    if not questions:
        logger.info("Analysis returned no follow-up questions; using fallback set")
        questions = default_follow_up_questions()

    return AnalysisResult(
        follow_up_questions=questions,
        preliminary_assessment=decode_preliminary_assessment(
            _get(payload, "preliminaryAssessment", "preliminary_assessment")
        ),
        clinical_notes=_as_text(_get(payload, "clinicalNotes", "clinical_notes")),
    )


# ======================================================================
# Report
# ======================================================================


def decode_triage_summary(value: Any) -> TriageSummary:
    raw = _as_mapping(value)
    return TriageSummary(
        chief_complaint=(
            _as_text(_get(raw, "chiefComplaint", "chief_complaint")) or DEFAULT_CHIEF_COMPLAINT
        ),
        symptom_duration=(
            _as_text(_get(raw, "symptomDuration", "symptom_duration")) or DEFAULT_SYMPTOM_DURATION
        ),
        urgency_level=_choice(
            _get(raw, "urgencyLevel", "urgency_level"), URGENCY_LEVELS, DEFAULT_URGENCY
        ),
        urgency_rationale=_as_text(_get(raw, "urgencyRationale", "urgency_rationale")) or "",
    )


def _decode_risk_factor(value: Any) -> Optional[RiskFactor]:
    raw = _as_mapping(value)
    name = _as_text(raw.get("name"))
    if name is None:
        return None
    severity = _get(raw, "severity")
    return RiskFactor(
        name=name,
        # A listed factor counts as present unless stated otherwise
        present=raw.get("present") is not False,
        details=_as_text(raw.get("details")),
        severity=severity if severity in RISK_FACTOR_SEVERITIES else None,
    )


def decode_risk_factors(value: Any) -> RiskFactorAssessment:
    raw = _as_mapping(value)
    factors_raw = _get(raw, "identifiedFactors", "identified_factors")
    factors = []
    if isinstance(factors_raw, list):
        for item in factors_raw:
            factor = _decode_risk_factor(item)
            if factor is not None:
                factors.append(factor)
    return RiskFactorAssessment(
        identified_factors=factors,
        overall_risk_level=_choice(
            _get(raw, "overallRiskLevel", "overall_risk_level"), RISK_LEVELS, DEFAULT_RISK_LEVEL
        ),
        risk_rationale=_as_text(_get(raw, "riskRationale", "risk_rationale")) or "",
    )


def decode_recommendations(value: Any) -> RecommendationSection:
    raw = _as_mapping(value)
    return RecommendationSection(
        physical_exam_focus=decode_string_list(_get(raw, "physicalExamFocus", "physical_exam_focus")),
        suggested_diagnostics=decode_string_list(
            _get(raw, "suggestedDiagnostics", "suggested_diagnostics")
        ),
        areas_for_deeper_investigation=decode_string_list(
            _get(raw, "areasForDeeperInvestigation", "areas_for_deeper_investigation")
        ),
        additional_notes=_as_text(_get(raw, "additionalNotes", "additional_notes")),
    )


def _transcript(entries: Sequence[ResponseEntry]) -> list[TranscriptEntry]:
    return [
        TranscriptEntry(
            question_id=e.question_id,
            question_text=e.question_text,
            answer=e.answer,
            category=e.category,
        )
        for e in entries
    ]


def assemble_report(
    payload: Any,
    phase1: Sequence[ResponseEntry],
    phase2: Sequence[ResponseEntry],
    session_id: str,
    now: Optional[datetime] = None,
) -> ReportContent:
    """Assemble the final report from a raw payload and both transcripts.

    Each section falls back to its neutral default independently.  The
    patient summary timestamps are taken from *now* (default: current
    UTC time), i.e. report-generation time.

    Raises:
        UpstreamParseError: *payload* is not a mapping.
    """
    if not isinstance(payload, Mapping):
        raise UpstreamParseError(
            detail=f"report payload must be an object, got {type(payload).__name__}"
        )
    now = now or datetime.now(timezone.utc)

    return ReportContent(
        patient_summary=PatientSummary(
            session_id=session_id,
            interview_date=now.date().isoformat(),
            completion_time=now.strftime("%H:%M:%S"),
        ),
        triage_summary=decode_triage_summary(_get(payload, "triageSummary", "triage_summary")),
        risk_factors=decode_risk_factors(_get(payload, "riskFactors", "risk_factors")),
        key_findings=decode_string_list(_get(payload, "keyFindings", "key_findings")),
        differential_considerations=decode_string_list(
            _get(payload, "differentialConsiderations", "differential_considerations")
        ),
        recommendations=decode_recommendations(_get(payload, "recommendations")),
        interview_transcript=InterviewTranscript(
            phase1=_transcript(phase1),
            phase2=_transcript(phase2),
        ),
    )
