"""Tests for the HTTP surface (one controller per browser session)."""

import pytest
from fastapi.testclient import TestClient

import api.session as session
from api.app import create_app
from cbt_exam.services import question_loader
from cbt_exam.services.sample_questions import SAMPLE_QUESTIONS
from conftest import FakeScheduler


@pytest.fixture
def schedulers(monkeypatch, tmp_path):
    created = []

    def factory():
        s = FakeScheduler()
        created.append(s)
        return s

    monkeypatch.setattr(session, "SCHEDULER_FACTORY", factory)
    monkeypatch.setattr(question_loader, "QUESTIONS_FILE", str(tmp_path / "missing.json"))
    return created


@pytest.fixture
def client(schedulers):
    app = create_app(start_cleanup=False)
    with TestClient(app) as c:
        yield c
        c.post("/api/reset")


def test_session_status_uses_embedded_questions(client):
    r = client.get("/api/session-status")
    assert r.status_code == 200
    data = r.json()
    assert data["question_count"] == len(SAMPLE_QUESTIONS)
    assert data["question_source"] == "embedded"
    assert data["lifecycle"] == "not_started"


def test_start_with_zero_duration_is_rejected(client):
    r = client.post("/api/start-exam", json={"minutes": 0, "seconds": 0})
    assert r.status_code == 400
    assert client.get("/api/exam-state").json()["lifecycle"] == "not_started"


def test_start_with_negative_part_is_rejected(client):
    r = client.post("/api/start-exam", json={"minutes": -1, "seconds": 30})
    assert r.status_code == 400


def test_full_exam_flow(client):
    r = client.post("/api/start-exam", json={"minutes": 1, "seconds": 40})
    assert r.status_code == 200
    assert r.json()["total_seconds"] == 100

    # second start while running
    assert client.post("/api/start-exam", json={"minutes": 1}).status_code == 409

    for i, q in enumerate(SAMPLE_QUESTIONS):
        if i > 0:
            assert client.post("/api/next").json()["index"] == i
        choice = q["answerIndex"] if i < 3 else 0
        r = client.post("/api/save-answer", json={"choice_index": choice})
        assert r.json()["saved"] is True

    state = client.get("/api/exam-state").json()
    assert state["answered_count"] == 5
    assert state["lifecycle"] == "running"
    assert state["timer"]["remaining_seconds"] == 100

    q = client.get("/api/question/0").json()
    assert q["saved_answer"] == SAMPLE_QUESTIONS[0]["answerIndex"]
    assert "correct_choice_index" not in q

    r = client.post("/api/submit-exam")
    assert r.json() == {"correct_count": 3, "total": 5, "percent": 60, "ok": True}

    results = client.get("/api/results").json()
    assert results["percent"] == 60
    assert results["auto_submitted"] is False
    assert len(results["answer_key"]) == 5
    assert results["answer_key"][0]["is_correct"] is True

    q = client.get("/api/question/0").json()
    assert q["correct_choice_index"] == SAMPLE_QUESTIONS[0]["answerIndex"]


def test_results_before_submit(client):
    client.post("/api/start-exam", json={"seconds": 30})
    r = client.get("/api/results")
    assert r.status_code == 400


def test_navigate_out_of_range(client):
    client.post("/api/start-exam", json={"seconds": 30})
    r = client.post("/api/navigate", json={"index": len(SAMPLE_QUESTIONS)})
    assert r.status_code == 422
    assert client.get("/api/exam-state").json()["current_index"] == 0


def test_save_answer_out_of_range(client):
    client.post("/api/start-exam", json={"seconds": 30})
    r = client.post("/api/save-answer", json={"choice_index": 9})
    assert r.status_code == 422


def test_actions_before_start_are_ignored(client):
    r = client.post("/api/navigate", json={"index": 2})
    assert r.status_code == 200
    assert r.json()["moved"] is False
    r = client.post("/api/save-answer", json={"choice_index": 1})
    assert r.json()["saved"] is False


def test_question_not_found(client):
    assert client.get("/api/question/99").status_code == 404


def test_timer_expiry_auto_submits(client, schedulers):
    client.post("/api/start-exam", json={"seconds": 2})
    client.post("/api/save-answer", json={"choice_index": SAMPLE_QUESTIONS[0]["answerIndex"]})
    schedulers[-1].advance(2)

    state = client.get("/api/exam-state").json()
    assert state["lifecycle"] == "ended"
    assert state["timer"] == {"remaining_seconds": 0, "is_low_time": True, "expired": True}
    assert state["last_submit_manual"] is False

    results = client.get("/api/results").json()
    assert results["correct_count"] == 1
    assert results["auto_submitted"] is True


def test_reset_and_restart(client):
    client.post("/api/start-exam", json={"seconds": 30})
    client.post("/api/save-answer", json={"choice_index": 0})
    r = client.post("/api/reset")
    assert r.json()["lifecycle"] == "not_started"
    assert r.json()["answered_count"] == 0

    client.post("/api/submit-exam")
    r = client.post("/api/restart")
    assert r.json()["lifecycle"] == "not_started"


def test_reload_questions_replaces_controller(client):
    client.post("/api/start-exam", json={"seconds": 30})
    r = client.post("/api/reload-questions")
    assert r.status_code == 200
    assert r.json()["total"] == len(SAMPLE_QUESTIONS)
    assert client.get("/api/exam-state").json()["lifecycle"] == "not_started"


def test_cleanup_expired_stops_timers(schedulers, monkeypatch):
    sid = session.create_session()
    controller = session.get_session(sid)["controller"]
    controller.start(30)
    assert schedulers[-1].pending

    monkeypatch.setattr(session, "SESSION_TTL", -1)
    assert session.cleanup_expired() >= 1
    assert session.get_session(sid) is None
    assert schedulers[-1].pending == []


def test_client_cannot_mark_submission_automatic(client):
    client.post("/api/start-exam", json={"seconds": 30})
    client.post("/api/submit-exam", json={"manual": False})
    assert client.get("/api/exam-state").json()["last_submit_manual"] is True
    assert client.get("/api/results").json()["auto_submitted"] is False


def test_current_question_follows_navigation(client):
    client.post("/api/start-exam", json={"seconds": 30})
    client.post("/api/next")
    client.post("/api/next")
    q = client.get("/api/current-question").json()
    assert q["index"] == 2
    assert q["is_current"] is True
    assert q["text"] == SAMPLE_QUESTIONS[2]["question"]


def test_shutdown_stops_running_exams(schedulers):
    app = create_app(start_cleanup=False)
    with TestClient(app) as c:
        c.post("/api/start-exam", json={"seconds": 30})
        scheduler = schedulers[-1]
        assert scheduler.pending
        sid = c.cookies.get("cbt_session")

    assert scheduler.pending == []
    assert session.get_session(sid) is None
