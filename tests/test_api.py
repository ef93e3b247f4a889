from __future__ import annotations

import importlib
import sys

from fastapi.testclient import TestClient

from quiz_core.question_bank import load_bank


_DEF_MODULES = [
    "quiz_core.config",
    "api.storage",
    "api.app",
]


def _reload_app(tmp_path, monkeypatch) -> tuple[object, object]:
    monkeypatch.setenv("DATA_DIR", str(tmp_path))
    for name in _DEF_MODULES:
        if name in sys.modules:
            importlib.reload(sys.modules[name])
        else:
            __import__(name)
    storage = sys.modules["api.storage"]
    app_module = sys.modules["api.app"]
    return storage, app_module


def _play(client, answers: dict[int, str], user_id: str | None = "u1") -> str:
    start = client.post("/quiz/sessions", json={"user_id": user_id})
    assert start.status_code == 200
    sid = start.json()["session_id"]
    for qid, value in answers.items():
        resp = client.post(f"/quiz/sessions/{sid}/answer", json={"questionId": qid, "answer": value})
        assert resp.status_code == 200
    return sid


def test_question_endpoints_hide_answer_key(tmp_path, monkeypatch):
    _storage, app_module = _reload_app(tmp_path, monkeypatch)
    client = TestClient(app_module.app)

    assert client.get("/").json()["status"] == "ok"
    assert client.get("/health").json()["questions"] == 15

    questions = client.get("/quiz/questions").json()["questions"]
    assert len(questions) == 15
    assert all("correctAnswer" not in q for q in questions)

    one = client.get("/quiz/questions/1")
    assert one.status_code == 200
    assert one.json()["question"]["id"] == 1
    assert client.get("/quiz/questions/16").status_code == 404
    assert client.get("/quiz/questions/0").status_code == 404


def test_full_session_report_and_exports(tmp_path, monkeypatch):
    storage, app_module = _reload_app(tmp_path, monkeypatch)
    client = TestClient(app_module.app)
    bank = load_bank()

    sid = _play(client, {q.id: q.correct_answer for q in bank})
    progress = client.get(f"/quiz/sessions/{sid}/progress").json()
    assert progress["complete"] is True
    assert progress["live"]["percentage"] == 100.0

    finish = client.post(f"/quiz/sessions/{sid}/finish")
    assert finish.status_code == 200
    report = finish.json()
    rid = report["reportId"]
    assert report["eligibilityCategory"] == "A"
    assert report["estimatedAbilityScore"] == 100.0
    assert report["meta"]["sessionId"] == sid
    assert len(report["analysis"]["strengths"]) == 5
    assert not (storage.ANSWERS_DIR / f"{sid}.json").exists(), "answers cleared after finish"
    assert client.get(f"/quiz/sessions/{sid}/progress").status_code == 404

    assert client.get(f"/reports/{rid}").json()["correctAnswers"] == 15
    assert "Category A: Eligible" in client.get(f"/reports/{rid}/html").json()["html"]

    exported = client.get(f"/reports/{rid}/answers.json").json()
    assert len(exported["answers"]) == 15
    csv_resp = client.get(f"/reports/{rid}/answers.csv")
    assert csv_resp.status_code == 200
    assert csv_resp.text.startswith("id,domain,strand")

    listing = client.get("/users/u1/reports").json()["reports"]
    assert [r["id"] for r in listing] == [rid]
    assert listing[0]["summary"]["eligibilityCategory"] == "A"

    assert client.delete(f"/reports/{rid}").json() == {"ok": True}
    assert client.get(f"/reports/{rid}").status_code == 404
    assert client.delete(f"/reports/{rid}").status_code == 404


def test_finish_requires_every_answer(tmp_path, monkeypatch):
    _storage, app_module = _reload_app(tmp_path, monkeypatch)
    client = TestClient(app_module.app)

    sid = _play(client, {1: "a"})
    resp = client.post(f"/quiz/sessions/{sid}/finish")
    assert resp.status_code == 409
    detail = resp.json()["detail"]
    assert (detail["answered"], detail["total"]) == (1, 15)

    assert client.delete(f"/quiz/sessions/{sid}/answers").json()["answered"] == 0
    assert client.get(f"/quiz/sessions/{sid}/progress").json()["answered"] == 0


def test_bad_answers_and_unknown_sessions(tmp_path, monkeypatch):
    _storage, app_module = _reload_app(tmp_path, monkeypatch)
    client = TestClient(app_module.app)

    sid = _play(client, {})
    assert client.post(f"/quiz/sessions/{sid}/answer", json={"questionId": 99, "answer": "a"}).status_code == 400
    assert client.post(f"/quiz/sessions/{sid}/answer", json={"questionId": 1, "answer": ""}).status_code == 400
    assert client.post("/quiz/sessions/nope/answer", json={"questionId": 1, "answer": "a"}).status_code == 404
    assert client.post("/quiz/sessions/nope/finish").status_code == 404


def test_answer_with_missing_fields_is_a_bad_request(tmp_path, monkeypatch):
    _storage, app_module = _reload_app(tmp_path, monkeypatch)
    client = TestClient(app_module.app)

    sid = _play(client, {})
    for body in ({"questionId": 1}, {"answer": "a"}, {}):
        r = client.post(f"/quiz/sessions/{sid}/answer", json=body)
        assert r.status_code == 400
        assert r.json()["detail"] == "Missing questionId or answer"


def test_plan_endpoint_caches_until_forced(tmp_path, monkeypatch):
    _storage, app_module = _reload_app(tmp_path, monkeypatch)
    client = TestClient(app_module.app)
    bank = load_bank()

    # only domain 1 right
    sid = _play(client, {q.id: (q.correct_answer if q.domain.id == 1 else "zz") for q in bank})
    rid = client.post(f"/quiz/sessions/{sid}/finish").json()["reportId"]

    first = client.post(f"/reports/{rid}/plan")
    assert first.status_code == 200
    plan = first.json()["plan"]
    assert plan["category"] == "C"
    assert len(plan["focus"]) == 3
    assert 1 not in [f["domainId"] for f in plan["focus"]]

    assert client.post(f"/reports/{rid}/plan").json()["plan"] == plan
    assert client.get(f"/reports/{rid}").json()["plan"] == plan
    assert client.post(f"/reports/{rid}/plan", params={"force": True}).json()["plan"] == plan
    assert client.post("/reports/missing/plan").status_code == 404


def test_exports_disabled_return_404(tmp_path, monkeypatch):
    _storage, app_module = _reload_app(tmp_path, monkeypatch)
    client = TestClient(app_module.app)
    bank = load_bank()

    sid = _play(client, {q.id: q.correct_answer for q in bank})
    rid = client.post(f"/quiz/sessions/{sid}/finish").json()["reportId"]

    monkeypatch.setattr(app_module.quiz_config, "REPORT_EXPORT_ENABLED", False)
    assert client.get(f"/reports/{rid}/answers.json").status_code == 404
    assert client.get(f"/reports/{rid}/answers.csv").status_code == 404


def test_open_session_survives_restart(tmp_path, monkeypatch):
    _storage, app_module = _reload_app(tmp_path, monkeypatch)
    client = TestClient(app_module.app)
    sid = _play(client, {1: "a", 2: "b"}, user_id="u2")

    _storage, app_module = _reload_app(tmp_path, monkeypatch)
    client = TestClient(app_module.app)

    progress = client.get(f"/quiz/sessions/{sid}/progress").json()
    assert progress["answered"] == 2
    assert progress["answers"] == {"1": "a", "2": "b"}
    active = client.get("/users/u2/sessions/active").json()["sessions"]
    assert [s["sessionId"] for s in active] == [sid]
    assert active[0]["answered"] == 2
