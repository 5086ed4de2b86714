"""triage_server — FastAPI REST API for the interview SDK.

Exposes ``InterviewPipeline`` over HTTP: session start/reset, answer
entry, navigation, the two phase-completion calls, transcripts, the
final report, catalog reference data and an LLM connection probe.
"""
