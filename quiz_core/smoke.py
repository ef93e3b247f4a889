from __future__ import annotations

import logging
from typing import List

from .config import DEBUG_TRACE, DIFFICULTY_ORDER, SOLO_LEVEL_ORDER
from .plan import generate_plan
from .question_bank import DOMAINS
from .session import QuizSession
from .types import DifficultyParams, Domain, Indicator, Question, QuestionOption, Strand


def _maybe_enable_trace() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
    if DEBUG_TRACE:
        logging.getLogger("quiz_core.session").setLevel(logging.DEBUG)
        logging.getLogger("quiz_core.plan").setLevel(logging.DEBUG)


def _synthetic_bank() -> List[Question]:
    items: List[Question] = []
    qid = 1
    for domain_id, name in DOMAINS.items():
        for idx, category in enumerate(DIFFICULTY_ORDER):
            items.append(
                Question(
                    id=qid,
                    text=f"{name} {category} question",
                    options=[QuestionOption(v, f"option {v}") for v in "abcd"],
                    correct_answer="a",
                    domain=Domain(domain_id, name),
                    strand=Strand(f"{domain_id}.{idx + 1}", f"{name} strand {idx + 1}"),
                    indicator=Indicator(f"{domain_id}.{idx + 1}.1", "synthetic indicator"),
                    career_stage=idx + 1,
                    solo_level=SOLO_LEVEL_ORDER[(domain_id + idx) % len(SOLO_LEVEL_ORDER)],
                    difficulty_params=DifficultyParams(category=category),
                    explanation="Option a is keyed correct.",
                    content_tags=["smoke"],
                )
            )
            qid += 1
    return items


def _auto_answer(q: Question) -> str:
    # misses every Difficult item in domain 3 and everything in domain 5
    if q.domain.id == 5 or (q.domain.id == 3 and q.difficulty == "Difficult"):
        return "b"
    return q.correct_answer


def run_smoke_session() -> None:
    _maybe_enable_trace()

    session = QuizSession(_synthetic_bank())
    logging.info("Starting synthetic run over %d questions", session.total_questions)

    while True:
        q = session.current_question
        if q is None:
            break
        session.answer_current(_auto_answer(q))
        logging.debug("Q%s answered; live=%s", q.id, session.live_score())
        if not session.next():
            break

    report = session.finish()
    payload = report.to_dict()
    plan = generate_plan(payload, {})

    logging.info(
        "Run complete: %d/%d correct (%.1f%%) ability=%.1f category=%s",
        report.correct_answers,
        report.total_questions,
        report.overall_percentage,
        report.estimated_ability_score,
        report.eligibility_category,
    )
    for d in report.domain_results:
        logging.info("Domain %s %s: %d/%d %.1f%%", d.id, d.name, d.correct, d.total, d.percentage)
    for lvl in report.solo_level_results:
        logging.info("  SOLO %s: %d/%d", lvl.level, lvl.correct, lvl.total)
    for diff in report.difficulty_results:
        logging.info("  %s: %d/%d", diff.category, diff.correct, diff.total)

    logging.info("Plan focus domains: %s", [f["domain"] for f in plan.get("focus", [])])


if __name__ == "__main__":  # pragma: no cover
    run_smoke_session()
