"""Scoring engine: answers in, multi-dimensional quiz report out.

Every caller (session finish, API, CLI, autoplay, live progress) goes through
:func:`score` so there is exactly one definition of how a quiz is tallied.
The function is pure; it never reads or writes an answer store.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, List, Mapping, Optional, Sequence, Tuple

from . import config
from .types import (
    CareerStageResult,
    DetailedAnswer,
    DifficultyResult,
    DomainResult,
    EligibilityCategory,
    Question,
    QuizReport,
    SoloLevelResult,
    StrandResult,
)


@dataclass
class _Bucket:
    total: int = 0
    correct: int = 0
    meta: Dict[str, Any] = field(default_factory=dict)

    def add(self, ok: bool) -> None:
        self.total += 1
        if ok:
            self.correct += 1

    @property
    def percentage(self) -> float:
        return percentage(self.correct, self.total)


def percentage(correct: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return correct / total * 100


def is_correct(question: Question, answers: Mapping[int, Any]) -> bool:
    return answers.get(question.id) == question.correct_answer


def difficulty_points(category: Optional[str]) -> int:
    key = (category or "").lower()
    return int(config.DIFFICULTY_POINTS.get(key, config.DEFAULT_DIFFICULTY_POINTS))


def classify_eligibility(ability_score: float) -> EligibilityCategory:
    if ability_score >= config.ELIGIBILITY_THRESHOLD_A:
        return "A"
    if ability_score >= config.ELIGIBILITY_THRESHOLD_B:
        return "B"
    return "C"


def _rank(order: Sequence[str], value: str) -> int:
    lowered = [o.lower() for o in order]
    key = (value or "").lower()
    return lowered.index(key) if key in lowered else len(order)


def _tally(buckets: Dict[Hashable, _Bucket], key: Hashable, ok: bool, **meta: Any) -> None:
    bucket = buckets.get(key)
    if bucket is None:
        # first question seen for a key owns the display metadata
        bucket = buckets[key] = _Bucket(meta=meta)
    bucket.add(ok)


def _detailed(q: Question, answers: Mapping[int, Any], ok: bool) -> DetailedAnswer:
    return DetailedAnswer(
        id=q.id,
        question=q.text,
        user_answer=answers.get(q.id),
        correct_answer=q.correct_answer,
        is_correct=ok,
        explanation=q.explanation,
        domain=q.domain.name,
        strand=q.strand.name,
        indicator=q.indicator.text,
        career_stage=q.career_stage,
        solo_level=q.solo_level,
        content_tags=list(q.content_tags),
        difficulty=q.difficulty_params.category,
    )


def weighted_ability(questions: Sequence[Question], answers: Mapping[int, Any]) -> Tuple[int, int, float]:
    """Return ``(earned, possible, score)`` with points taken from difficulty."""
    earned = possible = 0
    for q in questions:
        w = difficulty_points(q.difficulty_params.category)
        possible += w
        if is_correct(q, answers):
            earned += w
    return earned, possible, percentage(earned, possible)


def score(questions: Sequence[Question], answers: Mapping[int, Any]) -> QuizReport:
    domains: Dict[Hashable, _Bucket] = {}
    strands: Dict[Hashable, _Bucket] = {}
    stages: Dict[Hashable, _Bucket] = {}
    solo: Dict[Hashable, _Bucket] = {}
    difficulty: Dict[Hashable, _Bucket] = {}

    correct_count = 0
    detailed: List[DetailedAnswer] = []

    for q in questions:
        ok = is_correct(q, answers)
        if ok:
            correct_count += 1

        _tally(domains, q.domain.id, ok, name=q.domain.name)
        _tally(strands, q.strand.id, ok, name=q.strand.name, domain_id=q.domain.id, domain_name=q.domain.name)
        _tally(stages, q.career_stage, ok)
        _tally(solo, q.solo_level, ok)
        _tally(difficulty, q.difficulty_params.category, ok)
        detailed.append(_detailed(q, answers, ok))

    _earned, _possible, ability = weighted_ability(questions, answers)

    domain_results = [
        DomainResult(id=k, name=b.meta["name"], total=b.total, correct=b.correct, percentage=b.percentage)
        for k, b in sorted(domains.items(), key=lambda kv: kv[0])
    ]
    strand_results = [
        StrandResult(
            id=k,
            name=b.meta["name"],
            domain_id=b.meta["domain_id"],
            domain_name=b.meta["domain_name"],
            total=b.total,
            correct=b.correct,
            percentage=b.percentage,
        )
        for k, b in sorted(strands.items(), key=lambda kv: kv[0])
    ]
    stage_results = [
        CareerStageResult(stage=k, total=b.total, correct=b.correct, percentage=b.percentage)
        for k, b in sorted(stages.items(), key=lambda kv: kv[0])
    ]
    # sorted() is stable, so unknown labels keep first-seen order at the tail
    solo_results = [
        SoloLevelResult(level=k, total=b.total, correct=b.correct, percentage=b.percentage)
        for k, b in sorted(solo.items(), key=lambda kv: _rank(config.SOLO_LEVEL_ORDER, kv[0]))
    ]
    difficulty_results = [
        DifficultyResult(category=k, total=b.total, correct=b.correct, percentage=b.percentage)
        for k, b in sorted(difficulty.items(), key=lambda kv: _rank(config.DIFFICULTY_ORDER, kv[0]))
    ]

    return QuizReport(
        total_questions=len(questions),
        correct_answers=correct_count,
        overall_percentage=percentage(correct_count, len(questions)),
        domain_results=domain_results,
        strand_results=strand_results,
        career_stage_results=stage_results,
        solo_level_results=solo_results,
        difficulty_results=difficulty_results,
        detailed_answers=detailed,
        estimated_ability_score=ability,
        eligibility_category=classify_eligibility(ability),
    )


def live_score(questions: Sequence[Question], answers: Mapping[int, Any]) -> Dict[str, float]:
    """Running tally for a session still in progress (answered questions only)."""
    answered = [q for q in questions if q.id in answers]
    correct = sum(1 for q in answered if is_correct(q, answers))
    return {
        "answered": len(answered),
        "total": len(questions),
        "correct": correct,
        "percentage": percentage(correct, len(answered)),
    }
