"""PromptManager tests — verify rendering of the analysis and report prompts.

Requests are built directly from ResponseEntry objects (no backend
needed) and rendered with the bundled Jinja2 templates.
"""

import pytest

from triage_interview.models import Demographics, ResponseEntry
from triage_interview.projector import build_analysis_request, build_report_request
from triage_interview.prompt import PromptManager


# =====================================================================
# Fixtures
# =====================================================================


@pytest.fixture
def pm():
    """Fresh PromptManager for each test."""
    return PromptManager()


def _entry(qid, text, answer, category="risk_factors", phase=1):
    return ResponseEntry(
        session_id="s1", phase=phase, question_id=qid,
        question_text=text, category=category, answer=answer,
    )


# =====================================================================
# Analysis prompt
# =====================================================================


class TestAnalysisPrompt:

    def test_message_roles(self, pm):
        messages = pm.analysis_messages(build_analysis_request([]))
        assert [m.role for m in messages] == ["system", "user"]

    def test_system_prompt_has_json_contract(self, pm):
        system = pm.analysis_messages(build_analysis_request([]))[0].content
        assert "followUpQuestions" in system
        assert "preliminaryAssessment" in system
        assert "functional_status" in system, "category list must be rendered"

    def test_demographics_rendered(self, pm):
        request = build_analysis_request([], Demographics(sex="male", age=55))
        user = pm.analysis_messages(request)[1].content
        assert "Patient: male, 55 years old." in user

    def test_demographics_omitted(self, pm):
        user = pm.analysis_messages(build_analysis_request([]))[1].content
        assert "Patient:" not in user

    def test_pairs_numbered(self, pm):
        request = build_analysis_request([
            _entry("smoking", "Do you smoke?", "never"),
            _entry("diet", "How do you eat?", "balanced", category="lifestyle"),
        ])
        user = pm.analysis_messages(request)[1].content
        assert "1. Question: Do you smoke?" in user
        assert "Answer: never" in user
        assert "2. Question: How do you eat?" in user

    def test_other_answer_humanized(self, pm):
        request = build_analysis_request([
            _entry("family_history", "Family history?", "diabetes, other:Gout"),
        ])
        user = pm.analysis_messages(request)[1].content
        assert "Answer: diabetes, Other: Gout" in user
        assert "other:Gout" not in user


# =====================================================================
# Report prompt
# =====================================================================


class TestReportPrompt:

    def test_sections(self, pm):
        request = build_report_request(
            [_entry("smoking", "Do you smoke?", "never")],
            [_entry("followup_1", "Does it radiate?", "yes", phase=2)],
            "Typical angina",
        )
        system, user = pm.report_messages(request)
        assert "triageSummary" in system.content
        assert "=== PHASE 1: INTAKE QUESTIONNAIRE ===" in user.content
        assert "=== PHASE 2: FOLLOW-UP QUESTIONS ===" in user.content
        assert "1. Q: Do you smoke?" in user.content
        assert "A: yes" in user.content
        assert "=== ANALYSIS NOTES ===\nTypical angina" in user.content

    def test_no_notes_section_without_notes(self, pm):
        user = pm.report_messages(build_report_request([], []))[1].content
        assert "ANALYSIS NOTES" not in user

    def test_other_answer_humanized(self, pm):
        request = build_report_request([_entry("meds", "Meds?", "other:Aspirin")], [])
        user = pm.report_messages(request)[1].content
        assert "A: Other: Aspirin" in user

    def test_custom_template_dir(self, tmp_path):
        for name in ("analysis_system", "analysis_user", "report_system", "report_user"):
            (tmp_path / f"{name}.jinja2").write_text(f"{name} template", encoding="utf-8")
        messages = PromptManager(tmp_path).report_messages(build_report_request([], []))
        assert messages[0].content == "report_system template"
