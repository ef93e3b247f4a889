from __future__ import annotations

import pytest

from quiz_core.question_bank import DOMAINS
from quiz_core.types import DifficultyParams, Domain, Indicator, Question, QuestionOption, Strand


def make_question(
    qid: int,
    *,
    domain_id: int = 1,
    domain_name: str | None = None,
    strand_id: str | None = None,
    strand_name: str | None = None,
    career_stage: int = 1,
    solo_level: str = "Unistructural",
    difficulty: str = "Easy",
    correct: str = "a",
    options: tuple[str, ...] = ("a", "b", "c", "d"),
) -> Question:
    name = domain_name or DOMAINS.get(domain_id, f"Domain {domain_id}")
    sid = strand_id or f"{domain_id}.1"
    return Question(
        id=qid,
        text=f"Question {qid}",
        options=[QuestionOption(value=v, text=f"Option {v}") for v in options],
        correct_answer=correct,
        domain=Domain(id=domain_id, name=name),
        strand=Strand(id=sid, name=strand_name or f"Strand {sid}"),
        indicator=Indicator(id=f"{sid}.1", text="indicator"),
        career_stage=career_stage,
        solo_level=solo_level,
        difficulty_params=DifficultyParams(category=difficulty),
        explanation=f"Explanation {qid}",
        content_tags=["tag"],
    )


def build_synthetic_bank(
    *,
    domains: list[int] | None = None,
    difficulties: tuple[str, ...] = ("Easy", "Medium", "Difficult"),
    per_difficulty: int = 1,
) -> list[Question]:
    """Create a deterministic synthetic bank; the keyed answer is always "a"."""

    solo = ("Unistructural", "Multistructural", "Relational", "Extended Abstract")
    items: list[Question] = []
    qid = 1
    for domain_id in domains or list(DOMAINS):
        for d_idx, category in enumerate(difficulties):
            for n in range(per_difficulty):
                items.append(
                    make_question(
                        qid,
                        domain_id=domain_id,
                        strand_id=f"{domain_id}.{d_idx + 1}",
                        career_stage=(d_idx % 4) + 1,
                        solo_level=solo[(qid - 1) % len(solo)],
                        difficulty=category,
                    )
                )
                qid += 1
    return items


def all_correct(questions: list[Question]) -> dict[int, str]:
    return {q.id: q.correct_answer for q in questions}


@pytest.fixture
def synthetic_bank() -> list[Question]:
    return build_synthetic_bank()
