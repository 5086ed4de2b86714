"""Fixed fallback follow-up questions.

Substituted for the phase-2 question list whenever the analysis step
yields no follow-up questions, so phase 2 is never empty.
"""

from triage_interview.models.question import Question, QuestionOption

DEFAULT_FOLLOW_UP_QUESTIONS: tuple[Question, ...] = (
    Question(
        id="followup_clarification",
        category="chief_complaint",
        text="Are there any additional symptoms you would like to report?",
        type="textarea",
        required=False,
        placeholder="Describe any additional symptoms...",
    ),
    Question(
        id="followup_recent_changes",
        category="chief_complaint",
        text="Have your symptoms changed over the last few days?",
        type="radio",
        options=[
            QuestionOption(value="improved", label="They have improved"),
            QuestionOption(value="same", label="They are unchanged"),
            QuestionOption(value="worsened", label="They have worsened"),
        ],
        required=True,
    ),
    Question(
        id="followup_concerns",
        category="chief_complaint",
        text="What concerns you most about your heart health?",
        type="textarea",
        required=False,
        placeholder="Describe your concerns...",
    ),
)


def default_follow_up_questions() -> list[Question]:
    """Return a fresh list of the fallback follow-up questions."""
    return list(DEFAULT_FOLLOW_UP_QUESTIONS)
