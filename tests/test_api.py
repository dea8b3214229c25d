import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from interviewready.api import dependencies
from interviewready.core.persistence import InMemorySessionRepository
from interviewready.core.session_manager import SessionManager
from main import app

from conftest import FakeQuestionService

USER = {"X-User-Id": "user-1"}
OTHER_USER = {"X-User-Id": "user-2"}


@pytest.fixture
def client(monkeypatch, test_settings):
    service = FakeQuestionService(scores=[9, 3, 6, 9, 7])
    repository = InMemorySessionRepository()
    manager = SessionManager(service, repository, settings=test_settings)

    monkeypatch.setattr(dependencies, "_question_service", service)
    monkeypatch.setattr(dependencies, "_repository", repository)
    monkeypatch.setattr(dependencies, "_session_manager", manager)

    with TestClient(app) as client:
        yield client


def _create_session(client, speech_supported=False):
    response = client.post(
        "/api/interview/setup",
        json={"speech_supported": speech_supported},
        headers=USER,
    )
    assert response.status_code == 200
    return response.json()["session_id"]


def _finish_interview(client, session_id):
    response = client.post(
        f"/api/interview/{session_id}/start",
        json={"job_role": "Backend Engineer", "interview_type": "Technical"},
        headers=USER,
    )
    assert response.status_code == 200
    for i in range(5):
        response = client.post(
            f"/api/interview/{session_id}/respond",
            json={"transcript": f"answer {i + 1}"},
            headers=USER,
        )
        assert response.status_code == 200
    return response.json()


def test_health_check(client):
    """Test the health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_root_endpoint(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["name"] == "InterviewReady"


def test_get_difficulties(client):
    """Difficulty ladder with answer timers"""
    response = client.get("/api/metadata/difficulties")
    assert response.status_code == 200
    data = response.json()
    assert [d["id"] for d in data] == ["easy", "medium", "hard"]
    assert [d["timer_seconds"] for d in data] == [40, 35, 30]


def test_get_interview_types(client):
    response = client.get("/api/metadata/interview-types")
    assert response.status_code == 200
    assert [t["id"] for t in response.json()] == ["Technical", "HR"]


def test_get_interview_settings(client):
    response = client.get("/api/metadata/interview-settings")
    assert response.status_code == 200
    data = response.json()
    assert data["total_questions"] == 5
    assert data["starting_difficulty"] == "medium"


def test_setup_requires_user(client):
    response = client.post("/api/interview/setup", json={})
    assert response.status_code == 401


def test_setup_without_speech_support_warns(client):
    response = client.post(
        "/api/interview/setup", json={"speech_supported": False}, headers=USER
    )
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "created"
    assert data["speech_supported"] is False
    assert "not supported" in data["warning"]


def test_start_interview(client):
    """Starting asks question 1 at medium difficulty"""
    session_id = _create_session(client)

    response = client.post(
        f"/api/interview/{session_id}/start",
        json={"job_role": "Backend Engineer"},
        headers=USER,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["phase"] == "active"
    assert data["question_number"] == 1
    assert data["difficulty"] == "medium"
    assert data["config"]["interview_type"] == "Technical"
    assert data["current_question"] == "Question 1 for Backend Engineer (medium)"


def test_start_rejects_blank_role(client):
    session_id = _create_session(client)

    response = client.post(
        f"/api/interview/{session_id}/start",
        json={"job_role": "   "},
        headers=USER,
    )

    assert response.status_code == 422
    status = client.get(f"/api/interview/{session_id}/status", headers=USER).json()
    assert status["phase"] == "setup"


def test_respond_before_start_conflicts(client):
    session_id = _create_session(client)

    response = client.post(
        f"/api/interview/{session_id}/respond", json={"transcript": "hi"}, headers=USER
    )

    assert response.status_code == 409


def test_unknown_or_foreign_session(client):
    assert client.get("/api/interview/nope/status", headers=USER).status_code == 404

    session_id = _create_session(client)
    response = client.get(f"/api/interview/{session_id}/status", headers=OTHER_USER)
    assert response.status_code == 404


def test_full_interview_flow(client):
    """Setup, five answers, report, save, history, reset"""
    session_id = _create_session(client)

    final = _finish_interview(client, session_id)
    assert final["phase"] == "report"
    assert [q["difficulty"] for q in final["questions_and_answers"]] == [
        "medium", "hard", "medium", "medium", "hard",
    ]

    report = client.get(f"/api/report/{session_id}", headers=USER)
    assert report.status_code == 200
    assert report.json()["session"]["overall_score"] == 6.8
    assert report.json()["total_questions"] == 5

    saved = client.post(f"/api/report/{session_id}/save", headers=USER)
    assert saved.status_code == 200
    assert saved.json() == {"success": True, "session_id": session_id, "error": None}

    history = client.get("/api/report/history/me", headers=USER)
    assert history.status_code == 200
    assert [h["session_id"] for h in history.json()] == [session_id]
    assert history.json()[0]["job_role"] == "Backend Engineer"

    stored = client.get(f"/api/report/saved/{session_id}", headers=USER)
    assert stored.status_code == 200
    assert len(stored.json()["questions_and_answers"]) == 5

    reset = client.post(f"/api/interview/{session_id}/reset", headers=USER)
    assert reset.status_code == 200
    assert reset.json()["phase"] == "setup"
    assert reset.json()["questions_and_answers"] == []


def test_report_before_completion_conflicts(client):
    session_id = _create_session(client)

    assert client.get(f"/api/report/{session_id}", headers=USER).status_code == 409
    assert client.post(f"/api/report/{session_id}/save", headers=USER).status_code == 409


def test_saved_report_not_found(client):
    response = client.get("/api/report/saved/missing", headers=USER)
    assert response.status_code == 404


def test_transcript_relay(client):
    session_id = _create_session(client, speech_supported=True)
    client.post(f"/api/interview/{session_id}/capture/start", headers=USER)

    response = client.post(
        f"/api/interview/{session_id}/transcript",
        json={"text": "I would shard the table", "is_final": True},
        headers=USER,
    )

    assert response.status_code == 200
    assert response.json() == {"transcript": "I would shard the table", "is_capturing": True}

    stopped = client.post(f"/api/interview/{session_id}/capture/stop", headers=USER)
    assert stopped.json()["is_capturing"] is False
    assert stopped.json()["transcript"] == "I would shard the table"


def test_discard_session(client):
    session_id = _create_session(client)

    response = client.delete(f"/api/interview/{session_id}", headers=USER)

    assert response.status_code == 200
    assert client.get(f"/api/interview/{session_id}/status", headers=USER).status_code == 404


def test_websocket_ping_and_start(client):
    session_id = _create_session(client)

    with client.websocket_connect(f"/api/interview/ws/{session_id}?user_id=user-1") as ws:
        ws.send_json({"type": "ping"})
        assert ws.receive_json() == {"type": "pong"}

        ws.send_json({"type": "start", "job_role": "Backend Engineer", "interview_type": "HR"})
        seen = []
        while True:
            message = ws.receive_json()
            seen.append(message["type"])
            if message["type"] == "snapshot":
                break

        assert "question" in seen
        assert message["data"]["phase"] == "active"
        assert message["data"]["config"]["interview_type"] == "HR"

        ws.send_json({"type": "reset"})
        while True:
            message = ws.receive_json()
            if message["type"] == "error":
                break
        assert "Invalid transition" in message["message"]


def test_websocket_unknown_session(client):
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect("/api/interview/ws/missing?user_id=user-1") as ws:
            ws.receive_json()

    assert exc_info.value.code == 4004


def _receive_until(ws, message_type):
    while True:
        message = ws.receive_json()
        if message["type"] == message_type:
            return message


def test_websocket_malformed_messages_keep_connection(client):
    """Bad payloads get an error reply and the turn keeps its countdown"""
    session_id = _create_session(client)
    client.post(
        f"/api/interview/{session_id}/start",
        json={"job_role": "Backend Engineer"},
        headers=USER,
    )

    with client.websocket_connect(f"/api/interview/ws/{session_id}?user_id=user-1") as ws:
        ws.send_json({"type": "submit", "transcript": 42})
        assert _receive_until(ws, "error")["message"]

        ws.send_json({"type": "transcript", "text": None})
        _receive_until(ws, "error")

        ws.send_json(["not", "an", "object"])
        assert _receive_until(ws, "error")["message"] == "Messages must be JSON objects"

        ws.send_json({"type": "ping"})
        _receive_until(ws, "pong")

    status = client.get(f"/api/interview/{session_id}/status", headers=USER).json()
    assert status["phase"] == "active"
    assert status["question_number"] == 1
    assert status["timer_remaining"] > 0
    assert status["questions_and_answers"][0]["answer"] == ""
