# autoplay.py
from __future__ import annotations
import argparse, os, json, datetime, logging
from typing import Optional
from quiz_core.config import load_config
from quiz_core.plan import generate_plan
from quiz_core.question_bank import load_bank
from quiz_core.report_html import export_report_html
from quiz_core.session import QuizSession
from quiz_core.types import Question

def _new_run_id() -> str:
    return datetime.datetime.now().strftime("run_%Y%m%d_%H%M%S")

def _wrong_option(q: Question) -> str:
    for opt in q.options:
        if opt.value != q.correct_answer: return opt.value
    return q.correct_answer

def _answer_for(q: Question, profile: str) -> Optional[str]:
    if profile == "perfect":   return q.correct_answer
    if profile == "all-wrong": return _wrong_option(q)
    if profile == "easy-only":
        return q.correct_answer if q.difficulty.lower() == "easy" else _wrong_option(q)
    return None

def run(profile: str, bank_path: Optional[str] = None) -> str:
    sess = QuizSession(load_bank(bank_path))
    run_id = _new_run_id()

    answered = 0
    for q in sess.questions:
        v = _answer_for(q, profile)
        if v is None: continue
        sess.answer(q.id, v); answered += 1
    if answered <= 0 and profile != "none": raise RuntimeError("Driver answered 0 items.")

    # "none" finishes with an empty answer map, so the gate is lifted
    report = sess.finish(require_complete=(profile != "none"))
    res = report.to_dict()
    res["meta"] = {"runId": run_id, "profile": profile}
    res["plan"] = generate_plan(report, load_config())

    ts = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
    os.makedirs("reports", exist_ok=True)
    base = f"auto_{profile}_{ts}"
    export_report_html(res, os.path.join("reports", base + ".html"))
    with open(os.path.join("reports", base + ".json"), "w", encoding="utf-8") as f:
        json.dump(res, f, indent=2, ensure_ascii=False)
    print(f"Report: {os.path.join('reports', base)}.html  "
          f"({report.correct_answers}/{report.total_questions}, ability {report.estimated_ability_score:.1f}, "
          f"category {report.eligibility_category})")
    return base

def main():
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    ap = argparse.ArgumentParser()
    ap.add_argument("--profile", choices=["perfect", "all-wrong", "easy-only", "none"], default="perfect")
    ap.add_argument("--bank", default=None, help="questions JSON (default: packaged bank)")
    a = ap.parse_args()
    run(a.profile, a.bank)

if __name__ == "__main__":
    main()
