from __future__ import annotations

import json
import logging
import os

import autoplay
from app_cli import run_quiz
from quiz_core.question_bank import load_bank
from quiz_core.smoke import run_smoke_session


def test_smoke_session_logs_summary(caplog):
    with caplog.at_level(logging.INFO):
        run_smoke_session()
    assert "Run complete: 11/15 correct (73.3%) ability=70.0 category=B" in caplog.text
    assert "Plan focus domains" in caplog.text


def test_autoplay_profiles_write_reports(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    base = autoplay.run("easy-only")
    data = json.loads((tmp_path / "reports" / f"{base}.json").read_text(encoding="utf-8"))
    assert data["correctAnswers"] == 5
    assert data["eligibilityCategory"] == "C"
    assert data["meta"]["profile"] == "easy-only"
    assert data["meta"]["runId"].startswith("run_")
    assert "RUN_ID" not in os.environ
    assert (tmp_path / "reports" / f"{base}.html").exists()

    none = json.loads((tmp_path / "reports" / f"{autoplay.run('none')}.json").read_text(encoding="utf-8"))
    assert none["correctAnswers"] == 0
    assert all(a["userAnswer"] is None for a in none["detailedAnswers"])


def test_terminal_quiz_gates_finish_then_writes_report(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    bank = load_bank()
    keys = ["f"]
    for q in bank:
        keys.append(str([o.value for o in q.options].index(q.correct_answer)))
    keys.append("f")
    feed = iter(keys)
    monkeypatch.setattr("builtins.input", lambda _prompt="": next(feed))

    run_quiz.main()
    out = capsys.readouterr().out

    assert "Please answer all 15 questions" in out
    assert "Score: 15/15 (100.0%)" in out
    assert "category A" in out
    assert list((tmp_path / "reports").glob("report_*.html"))
    assert not (tmp_path / "reports" / ".quiz_answers.json").exists()
