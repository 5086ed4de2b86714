"""Prompt rendering for the analysis and report calls.

Provides ``PromptManager``, a Jinja2-based template engine that renders
``AnalysisRequest`` / ``ReportRequest`` objects into chat message lists
with JSON response format instructions.
"""

from triage_interview.prompt.manager import PromptManager

__all__ = ["PromptManager"]
