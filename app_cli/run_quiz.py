from __future__ import annotations
import os, datetime, logging
from quiz_core.answer_store import JsonFileAnswerStore
from quiz_core.config import load_config
from quiz_core.plan import generate_plan
from quiz_core.question_bank import load_bank
from quiz_core.report_html import export_report_html
from quiz_core.session import IncompleteQuizError, QuizSession
def ask(session: QuizSession) -> str:
    q = session.current_question
    print(f"\nQuestion {session.question_number} of {session.total_questions}  [{q.domain.name} / {q.difficulty}]")
    print(q.text)
    picked = session.selected_answer()
    for i, opt in enumerate(q.options):
        mark = "*" if opt.value == picked else " "
        print(f" {mark}[{i}] {opt.text}")
    while True:
        v = input("Choice (index), p=prev, n=next, f=finish, r=restart: ").strip().lower()
        if v.isdigit() and int(v) < len(q.options): return q.options[int(v)].value
        if v in ("p", "n", "f", "r"): return v
        print("Enter an option index or p/n/f/r.")
def main():
    logging.basicConfig(level=logging.WARNING, format="[%(levelname)s] %(message)s")
    print("PPSSH Practice Quiz")
    # answers persist between runs until the quiz is finished
    session = QuizSession(load_bank(), JsonFileAnswerStore(os.path.join("reports", ".quiz_answers.json")))
    if session.answered_count: print(f"Resuming: {session.answered_count} answered so far.")
    while True:
        v = ask(session)
        if v == "p":
            if not session.prev(): print("Already at the first question.")
        elif v == "n":
            if not session.next(): print("Select an answer first." if not session.can_go_next() else "This is the last question.")
        elif v == "r":
            session.restart(); print("Answers cleared.")
        elif v == "f":
            try: report = session.finish(); break
            except IncompleteQuizError as e: print(e)
        else:
            session.answer_current(v)
            if not session.is_last_question: session.next()
            else: print("Last question answered. Enter f to finish.")
    res = report.to_dict(); res["plan"] = generate_plan(report, load_config())
    os.makedirs("reports", exist_ok=True)
    ts = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
    path = export_report_html(res, os.path.join("reports", f"report_{ts}.html"))
    print(f"Score: {report.correct_answers}/{report.total_questions} ({report.overall_percentage:.1f}%)  "
          f"ability {report.estimated_ability_score:.1f}%  category {report.eligibility_category}")
    print(f"Done. Report saved to: {path}")
if __name__ == "__main__": main()
