from __future__ import annotations
from fastapi import FastAPI, HTTPException, Query, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
import uuid, os, json, logging, pathlib, typing as t

log = logging.getLogger(__name__)

# ---- Azure autoload from .azure_config.json (only if env is missing) ----
def _load_azure_from_json(path: str = ".azure_config.json") -> None:
    need = ["AZURE_OPENAI_ENDPOINT","AZURE_OPENAI_API_KEY","AZURE_OPENAI_API_VERSION","AZURE_OPENAI_DEPLOYMENT"]
    if all(os.getenv(k) for k in need):
        return
    p = pathlib.Path(path)
    if not p.exists():
        return
    try:
        cfg = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        log.warning("ignoring unreadable %s", path)
        return
    os.environ.setdefault("PLAN_LLM_ENABLED", "1")
    os.environ.setdefault("LLM_BACKEND", "azure")
    os.environ.setdefault("AZURE_OPENAI_ENDPOINT",   str(cfg.get("endpoint","")))
    os.environ.setdefault("AZURE_OPENAI_API_KEY",    str(cfg.get("api_key","")))
    os.environ.setdefault("AZURE_OPENAI_API_VERSION",str(cfg.get("api_version","")))
    os.environ.setdefault("AZURE_OPENAI_DEPLOYMENT", str(cfg.get("deployment","")))

_load_azure_from_json()

# ---- Engine imports ----
from quiz_core import config as quiz_config
from quiz_core.analysis import summarize
from quiz_core.config import load_config, get_backend
from quiz_core.export import to_json as answers_to_json, to_csv as answers_to_csv
from quiz_core.plan import generate_plan
from quiz_core.question_bank import load_bank
from quiz_core.report_html import render_report_html
from quiz_core.session import IncompleteQuizError, QuizSession
from quiz_core.types import Question
from .storage import (
    active_sessions_for_user,
    answer_store_for,
    clear_active_session,
    delete_report,
    list_reports_for_user,
    load_all_active_sessions,
    load_report,
    record_active_session,
    save_report,
    update_active_session,
    utcnow_iso,
)

SESS: dict[str, QuizSession] = {}
SESSION_INFO: dict[str, dict[str, t.Any]] = {}
_BANK: list[Question] = []

app = FastAPI(title="PPSSH Quiz API")


@app.get("/")
def root():
    return {"status": "ok", "service": "ppssh-quiz-api"}


ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,  # keep False unless you use cookies
)

# ---- Schemas ----
class StartReq(BaseModel):
    user_id: str | None = None

class AnswerReq(BaseModel):
    questionId: int | None = None
    answer: str | None = None

# ---- Helpers ----
def _bank() -> list[Question]:
    if not _BANK:
        try:
            _BANK.extend(load_bank())
        except (OSError, ValueError) as exc:
            log.error("question bank failed to load: %s", exc)
            raise HTTPException(500, "Failed to load quiz data")
    return _BANK


def _session(sid: str) -> QuizSession:
    sess = SESS.get(sid)
    if sess is not None:
        return sess
    # a session opened before a restart still has its answers on disk
    payload = load_all_active_sessions().get(sid)
    if not payload:
        raise HTTPException(404, "session not found")
    sess = QuizSession(_bank(), answer_store_for(sid))
    SESS[sid] = sess
    SESSION_INFO[sid] = {"user_id": payload.get("userId"), "started_at": payload.get("startedAt")}
    return sess


def _decorate_report(
    base: dict[str, t.Any],
    *,
    session_id: str,
    user_id: str | None,
    report_id: str | None = None,
    created_at: str | None = None,
) -> dict[str, t.Any]:
    rid = report_id or str(uuid.uuid4())
    created = created_at or utcnow_iso()
    report = dict(base)
    meta = dict(report.get("meta") or {})
    meta.setdefault("sessionId", session_id)
    if user_id:
        meta.setdefault("userId", user_id)
    meta.setdefault("createdAt", created)
    meta["reportId"] = rid
    report["meta"] = meta
    report["id"] = rid
    report["reportId"] = rid
    report["created_at"] = created
    return report


def _index_metadata(report: dict[str, t.Any]) -> dict[str, t.Any]:
    meta = report.get("meta") or {}
    return {
        "sessionId": meta.get("sessionId"),
        "userId": meta.get("userId"),
        "createdAt": report.get("created_at") or meta.get("createdAt"),
        "summary": {
            "correctAnswers": report.get("correctAnswers"),
            "totalQuestions": report.get("totalQuestions"),
            "estimatedAbilityScore": report.get("estimatedAbilityScore"),
            "eligibilityCategory": report.get("eligibilityCategory"),
        },
    }


def _stored_report(report_id: str) -> dict[str, t.Any]:
    report = load_report(report_id)
    if not report:
        raise HTTPException(404, "report not found")
    return report

# ---- Health ----
@app.get("/health")
def health():
    return {
        "questions": len(_bank()),
        "llm_backend": get_backend(load_config()) or "none",
        "azure_config_present": all(os.getenv(k) for k in [
            "AZURE_OPENAI_ENDPOINT","AZURE_OPENAI_API_KEY","AZURE_OPENAI_API_VERSION","AZURE_OPENAI_DEPLOYMENT"
        ])
    }

# ---- Question bank ----
@app.get("/quiz/questions")
def list_questions():
    return {"questions": [q.to_dict(include_key=False) for q in _bank()]}


@app.get("/quiz/questions/{number}")
def get_question(number: int):
    bank = _bank()
    if number < 1 or number > len(bank):
        raise HTTPException(404, f"question {number} not in 1..{len(bank)}")
    return {"number": number, "total": len(bank), "question": bank[number - 1].to_dict(include_key=False)}

# ---- Sessions ----
@app.post("/quiz/sessions")
def start(req: StartReq | None = None):
    user_id = req.user_id if req else None
    sid = str(uuid.uuid4())
    sess = QuizSession(_bank(), answer_store_for(sid))
    SESS[sid] = sess
    started_at = utcnow_iso()
    SESSION_INFO[sid] = {"user_id": user_id, "started_at": started_at}
    record_active_session(
        sid,
        {
            "sessionId": sid,
            "userId": user_id,
            "startedAt": started_at,
            "lastUpdated": started_at,
            "answered": 0,
        },
    )
    first = sess.current_question
    return {
        "session_id": sid,
        "total_questions": sess.total_questions,
        "question": first.to_dict(include_key=False) if first else None,
    }


@app.post("/quiz/sessions/{sid}/answer")
def answer(sid: str, req: AnswerReq):
    sess = _session(sid)
    try:
        sess.answer(req.questionId, req.answer)
    except ValueError as exc:
        raise HTTPException(400, str(exc))
    answered = sess.answered_count
    update_active_session(sid, {"lastUpdated": utcnow_iso(), "answered": answered})
    return {"ok": True, "answered": answered, "total": sess.total_questions, "complete": sess.is_complete}


@app.get("/quiz/sessions/{sid}/progress")
def progress(sid: str):
    sess = _session(sid)
    return {
        "session_id": sid,
        "answered": sess.answered_count,
        "total": sess.total_questions,
        "complete": sess.is_complete,
        "answers": {str(k): v for k, v in sess.store.get().items()},
        "live": sess.live_score(),
    }


@app.delete("/quiz/sessions/{sid}/answers")
def restart(sid: str):
    sess = _session(sid)
    sess.restart()
    update_active_session(sid, {"lastUpdated": utcnow_iso(), "answered": 0})
    return {"ok": True, "answered": 0, "total": sess.total_questions}


@app.post("/quiz/sessions/{sid}/finish")
def finish(sid: str):
    sess = _session(sid)
    try:
        result = sess.finish()
    except IncompleteQuizError as exc:
        raise HTTPException(
            409, {"message": str(exc), "answered": exc.answered, "total": exc.total}
        )
    info = SESSION_INFO.get(sid, {})
    report = _decorate_report(result.to_dict(), session_id=sid, user_id=info.get("user_id"))
    report["analysis"] = summarize(result)
    save_report(report["id"], report, _index_metadata(report))
    clear_active_session(sid)
    SESS.pop(sid, None)
    SESSION_INFO.pop(sid, None)
    return report

# ---- Reports ----
@app.get("/reports/{report_id}")
def get_report(report_id: str):
    return _stored_report(report_id)


@app.get("/reports/{report_id}/html")
def report_html_endpoint(report_id: str):
    report = _stored_report(report_id)
    return {"html": render_report_html(report)}


@app.post("/reports/{report_id}/plan")
def create_plan(report_id: str, force: bool = Query(False, description="Regenerate even if cached")):
    report = _stored_report(report_id)

    existing = report.get("plan")
    if existing and not force:
        return {"result_id": report_id, "plan": existing}

    cfg = load_config()
    plan = generate_plan(report, cfg)
    report["plan"] = plan
    save_report(report_id, report, _index_metadata(report))
    return {"result_id": report_id, "plan": plan}


@app.get("/reports/{report_id}/answers.json")
def get_answers_json(report_id: str):
    if not quiz_config.REPORT_EXPORT_ENABLED:
        raise HTTPException(404, "answer export disabled")

    report = _stored_report(report_id)
    payload = answers_to_json(report.get("detailedAnswers") or [])
    return {"result_id": report_id, **payload}


@app.get("/reports/{report_id}/answers.csv")
def get_answers_csv(report_id: str):
    if not quiz_config.REPORT_EXPORT_ENABLED:
        raise HTTPException(404, "answer export disabled")

    report = _stored_report(report_id)
    body = answers_to_csv(report.get("detailedAnswers") or [])
    filename = f"{report_id}_answers.csv"
    return Response(
        content=body,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=\"{filename}\""},
    )


@app.delete("/reports/{report_id}")
def delete_report_endpoint(report_id: str):
    ok = delete_report(report_id)
    if not ok:
        raise HTTPException(404, "report not found")
    return {"ok": True}


@app.get("/users/{user_id}/reports")
def list_reports(user_id: str):
    reports = list_reports_for_user(user_id)
    return {"reports": reports}


@app.get("/users/{user_id}/sessions/active")
def list_active_sessions(user_id: str):
    sessions = active_sessions_for_user(user_id)
    return {"sessions": sessions}
