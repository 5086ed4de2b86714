"""PromptManager — Jinja2-based prompt renderer for the language-model calls.

Loads templates from the ``template/`` directory and renders analysis and
report requests into ``[system, user]`` message lists.  The system
templates carry the JSON response format instructions.
"""

from __future__ import annotations

import json
from pathlib import Path

import jinja2

from triage_interview.answers import humanize_answer
from triage_interview.constants import CATEGORY_ORDER
from triage_interview.models.requests import AnalysisRequest, LLMMessage, ReportRequest

_SEX_LABELS: dict[str, str] = {
    "male": "male",
    "female": "female",
}


class PromptManager:
    """Jinja2-based prompt renderer.

    Args:
        template_dir: optional override for the template directory.
            Defaults to ``template/`` sibling of this module.
    """

    def __init__(self, template_dir: Path | None = None) -> None:
        if template_dir is None:
            template_dir = Path(__file__).parent / "template"
        self._env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._env.filters["tojson"] = lambda v: json.dumps(v, ensure_ascii=False)
        # Answers carrying the "other:" marker are shown as "Other: <text>"
        self._env.filters["humanize"] = humanize_answer

    def _render(self, name: str, **context) -> str:
        return self._env.get_template(name).render(**context).strip()

    def analysis_messages(self, request: AnalysisRequest) -> list[LLMMessage]:
        """Render the phase-1 analysis prompt."""
        demographics = request.demographics
        return [
            LLMMessage(
                role="system",
                content=self._render("analysis_system.jinja2", categories=CATEGORY_ORDER),
            ),
            LLMMessage(
                role="user",
                content=self._render(
                    "analysis_user.jinja2",
                    pairs=request.pairs,
                    demographics=demographics,
                    sex_label=_SEX_LABELS.get(demographics.sex) if demographics else None,
                ),
            ),
        ]

    def report_messages(self, request: ReportRequest) -> list[LLMMessage]:
        """Render the final report prompt."""
        return [
            LLMMessage(role="system", content=self._render("report_system.jinja2")),
            LLMMessage(
                role="user",
                content=self._render(
                    "report_user.jinja2",
                    phase1=request.phase1,
                    phase2=request.phase2,
                    analysis_notes=request.analysis_notes,
                ),
            ),
        ]
