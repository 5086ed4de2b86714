"""HTTP API tests — FastAPI app driven through TestClient.

The app is built with ``create_app()`` and a MockBackend; persistence is
off, so no database is touched.  The TestClient context manager runs the
lifespan handler (catalog load, pipeline and registry setup).

Test scenarios:
  - Health and catalog reference endpoints
  - Session start: 201, validation failures -> 400, bad body -> 422
  - Answer entry, advance gate (400 when unanswered), retreat
  - Full two-phase flow through the API, transcript and report retrieval
  - Upstream failures -> 401 / 429 / 502 with the session reverted
  - Wrong-status phase calls -> 400, unknown sessions -> 404
  - LLM connection probe
  - Idle sessions expire (404); DELETE during analysis drops the result
"""

import pytest
from fastapi.testclient import TestClient

from triage_interview.errors import (
    UpstreamAuthError,
    UpstreamParseError,
    UpstreamRateLimitError,
)
from triage_server.app import create_app
from triage_server.config import ServerSettings
from triage_server.registry import SessionRegistry

from helpers.mocks import ANALYSIS_PAYLOAD, REPORT_PAYLOAD, MockBackend, fenced
from test_pipeline import REQUIRED_ANSWERS

API = "/api/v1"
START_BODY = {"patient_id": "P1", "demographics": {"sex": "male", "age": 55}}


# =====================================================================
# Fixtures
# =====================================================================


@pytest.fixture
def backend():
    """MockBackend primed with one analysis and one report reply."""
    return MockBackend(fenced(ANALYSIS_PAYLOAD), fenced(REPORT_PAYLOAD))


@pytest.fixture
def client(backend):
    app = create_app(ServerSettings(), backend=backend)
    with TestClient(app) as c:
        yield c


def _start(client) -> str:
    resp = client.post(f"{API}/sessions", json=START_BODY)
    assert resp.status_code == 201, resp.text
    return resp.json()["session_id"]


def _answer_required(client, sid):
    for qid, value in REQUIRED_ANSWERS.items():
        resp = client.put(f"{API}/sessions/{sid}/answers/{qid}", json={"value": value})
        assert resp.status_code == 200, resp.text


# =====================================================================
# Reference endpoints
# =====================================================================


class TestReference:

    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "sessions": 0}

    def test_catalog(self, client):
        resp = client.get(f"{API}/catalog")
        assert resp.status_code == 200
        questions = resp.json()
        assert len(questions) == 33
        assert questions[0]["id"] == "chief_complaint_main"

    def test_categories(self, client):
        categories = client.get(f"{API}/catalog/categories").json()
        assert [c["id"] for c in categories] == [
            "chief_complaint", "risk_factors", "medical_history",
            "medications", "lifestyle", "functional_status",
        ]
        assert sum(c["question_count"] for c in categories) == 33
        assert categories[0]["name"] == "Chief complaint"


# =====================================================================
# Sessions
# =====================================================================


class TestSessions:

    def test_start(self, client):
        resp = client.post(f"{API}/sessions", json=START_BODY)
        assert resp.status_code == 201
        view = resp.json()
        assert view["status"] == "phase1"
        assert view["phase"] == 1
        assert view["current_index"] == 0
        assert view["total_questions"] == 33
        assert view["current_question"]["id"] == "chief_complaint_main"
        assert view["is_current_answered"] is False
        assert client.get("/health").json()["sessions"] == 1

    @pytest.mark.parametrize("age", [0, 150])
    def test_start_invalid_age(self, client, age):
        body = {"patient_id": "P1", "demographics": {"sex": "female", "age": age}}
        resp = client.post(f"{API}/sessions", json=body)
        assert resp.status_code == 400
        assert "age" in resp.json()["detail"]

    def test_start_blank_patient(self, client):
        body = {"patient_id": "  ", "demographics": {"sex": "female", "age": 40}}
        resp = client.post(f"{API}/sessions", json=body)
        assert resp.status_code == 400
        assert "patient_id" in resp.json()["detail"]

    def test_start_bad_sex(self, client):
        body = {"patient_id": "P1", "demographics": {"sex": "other", "age": 40}}
        assert client.post(f"{API}/sessions", json=body).status_code == 422

    def test_get_session(self, client):
        sid = _start(client)
        resp = client.get(f"{API}/sessions/{sid}")
        assert resp.status_code == 200
        assert resp.json()["session_id"] == sid

    def test_unknown_session(self, client):
        resp = client.get(f"{API}/sessions/does-not-exist")
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Resource not found"

    def test_delete(self, client):
        sid = _start(client)
        assert client.delete(f"{API}/sessions/{sid}").status_code == 204
        assert client.get(f"{API}/sessions/{sid}").status_code == 404
        assert client.delete(f"{API}/sessions/{sid}").status_code == 404


# =====================================================================
# Answers and navigation
# =====================================================================


class TestAnswers:

    def test_set_answer(self, client):
        sid = _start(client)
        resp = client.put(
            f"{API}/sessions/{sid}/answers/chief_complaint_main", json={"value": "chest_pain"},
        )
        assert resp.status_code == 200
        view = resp.json()
        assert view["answers"] == {"chief_complaint_main": "chest_pain"}
        assert view["is_current_answered"] is True

    def test_list_answer(self, client):
        sid = _start(client)
        resp = client.put(
            f"{API}/sessions/{sid}/answers/family_history",
            json={"value": ["diabetes", "other:Gout"]},
        )
        assert resp.json()["answers"]["family_history"] == ["diabetes", "other:Gout"]

    def test_advance_requires_answer(self, client):
        sid = _start(client)
        resp = client.post(f"{API}/sessions/{sid}/advance")
        assert resp.status_code == 400
        assert client.get(f"{API}/sessions/{sid}").json()["current_index"] == 0

    def test_advance_and_retreat(self, client):
        sid = _start(client)
        client.put(f"{API}/sessions/{sid}/answers/chief_complaint_main", json={"value": "chest_pain"})
        view = client.post(f"{API}/sessions/{sid}/advance").json()
        assert view["current_index"] == 1
        assert view["current_question"]["id"] == "chief_complaint_description"

        view = client.post(f"{API}/sessions/{sid}/retreat").json()
        assert view["current_index"] == 0
        view = client.post(f"{API}/sessions/{sid}/retreat").json()
        assert view["current_index"] == 0, "retreat at the first question is a no-op"


# =====================================================================
# Phases
# =====================================================================


class TestPhases:

    def test_full_flow(self, client):
        sid = _start(client)
        _answer_required(client, sid)

        resp = client.post(f"{API}/sessions/{sid}/phase1/complete")
        assert resp.status_code == 200, resp.text
        view = resp.json()
        assert view["status"] == "phase2"
        assert view["phase"] == 2
        assert view["total_questions"] == 2
        assert view["current_question"]["id"] == "followup_1"
        assert view["preliminary_assessment"]["risk_level"] == "high"

        client.put(f"{API}/sessions/{sid}/answers/followup_1", json={"value": "yes"})
        resp = client.post(f"{API}/sessions/{sid}/phase2/complete")
        assert resp.status_code == 200, resp.text
        report = resp.json()
        assert report["triage_summary"]["chief_complaint"] == "Exertional chest pain"
        assert report["risk_factors"]["overall_risk_level"] == "moderate"

        view = client.get(f"{API}/sessions/{sid}").json()
        assert view["status"] == "completed"
        assert view["phase"] is None

        stored = client.get(f"{API}/sessions/{sid}/report")
        assert stored.status_code == 200
        assert stored.json() == report

        phase2 = client.get(f"{API}/sessions/{sid}/responses", params={"phase": 2}).json()
        assert [e["question_id"] for e in phase2] == ["followup_1"]

    def test_responses_phase1(self, client):
        sid = _start(client)
        client.put(f"{API}/sessions/{sid}/answers/smoking", json={"value": "never"})
        entries = client.get(f"{API}/sessions/{sid}/responses").json()
        assert len(entries) == 1
        assert entries[0]["answer"] == "never"
        assert entries[0]["category"] == "risk_factors"

    def test_responses_invalid_phase(self, client):
        sid = _start(client)
        assert client.get(f"{API}/sessions/{sid}/responses", params={"phase": 3}).status_code == 422

    def test_report_before_completion(self, client):
        sid = _start(client)
        assert client.get(f"{API}/sessions/{sid}/report").status_code == 404

    def test_phase2_during_phase1(self, client, backend):
        sid = _start(client)
        resp = client.post(f"{API}/sessions/{sid}/phase2/complete")
        assert resp.status_code == 400
        assert backend.calls == []


# =====================================================================
# Upstream failures
# =====================================================================


class TestUpstreamFailures:

    @pytest.mark.parametrize("error, status", [
        (UpstreamAuthError(), 401),
        (UpstreamRateLimitError(), 429),
        (UpstreamParseError(), 502),
    ])
    def test_analysis_failure(self, error, status):
        app = create_app(ServerSettings(), backend=MockBackend(error))
        with TestClient(app) as client:
            sid = _start(client)
            resp = client.post(f"{API}/sessions/{sid}/phase1/complete")
            assert resp.status_code == status
            assert resp.json()["detail"] == error.user_message

            view = client.get(f"{API}/sessions/{sid}").json()
            assert view["status"] == "phase1"
            assert view["error"] == error.user_message
            assert view["is_loading"] is False

    def test_malformed_reply(self):
        app = create_app(ServerSettings(), backend=MockBackend("no json here"))
        with TestClient(app) as client:
            sid = _start(client)
            resp = client.post(f"{API}/sessions/{sid}/phase1/complete")
            assert resp.status_code == 502
            assert resp.json()["detail"] == UpstreamParseError.default_message


# =====================================================================
# LLM probe
# =====================================================================


class TestLLMProbe:

    def test_success(self):
        app = create_app(ServerSettings(), backend=MockBackend("OK"))
        with TestClient(app) as client:
            resp = client.post(f"{API}/llm/test")
            assert resp.status_code == 200
            assert resp.json() == {
                "success": True, "provider": "mock", "model": "mock-model", "reply": "OK",
            }

    def test_auth_failure(self):
        app = create_app(ServerSettings(), backend=MockBackend(UpstreamAuthError()))
        with TestClient(app) as client:
            assert client.post(f"{API}/llm/test").status_code == 401

    def test_unexpected_error(self):
        app = create_app(ServerSettings(), backend=MockBackend(RuntimeError("kaboom")))
        with TestClient(app, raise_server_exceptions=False) as client:
            resp = client.post(f"{API}/llm/test")
            assert resp.status_code == 500
            assert resp.json() == {"detail": "Internal server error"}


# =====================================================================
# Session lifetime
# =====================================================================


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class DiscardingBackend(MockBackend):
    """Discards the session through the registry while the call runs."""

    def __init__(self, app, *replies):
        super().__init__(*replies)
        self.app = app
        self.session_id = None

    async def complete(self, messages):
        self.app.state.registry.discard(self.session_id)
        return await super().complete(messages)


class TestSessionLifetime:

    def test_expired_session_not_found(self, client):
        clock = FakeClock()
        client.app.state.registry = SessionRegistry(ttl=60, clock=clock)
        sid = _start(client)
        assert client.get(f"{API}/sessions/{sid}").status_code == 200

        clock.now += 61
        resp = client.get(f"{API}/sessions/{sid}")
        assert resp.status_code == 404
        assert client.get("/health").json()["sessions"] == 0

    def test_ttl_from_settings(self):
        app = create_app(ServerSettings(session_ttl=120.0), backend=MockBackend())
        with TestClient(app):
            assert app.state.registry.ttl == 120.0

    def test_delete_during_analysis(self):
        app = create_app(ServerSettings())
        backend = DiscardingBackend(app, fenced(ANALYSIS_PAYLOAD))
        app.state.backend = backend
        with TestClient(app) as client:
            sid = _start(client)
            backend.session_id = sid

            resp = client.post(f"{API}/sessions/{sid}/phase1/complete")
            assert resp.status_code == 404
            assert resp.json()["detail"] == "Resource not found"
            assert client.get(f"{API}/sessions/{sid}").status_code == 404
