from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from . import config
from .answer_store import AnswerStore, MemoryAnswerStore
from .scoring import live_score, score
from .types import Question, QuizReport

log = logging.getLogger(__name__)


class IncompleteQuizError(RuntimeError):
    def __init__(self, answered: int, total: int):
        super().__init__(f"Please answer all {total} questions before finishing. You have answered {answered}.")
        self.answered = answered
        self.total = total


class QuizSession:
    """Walks a fixed question list, writing each answer through to ``store``."""

    def __init__(self, questions: Sequence[Question], store: Optional[AnswerStore] = None):
        self.questions: List[Question] = list(questions)
        self.store: AnswerStore = store if store is not None else MemoryAnswerStore()
        self.current_index = 0
        self._by_id: Dict[int, Question] = {q.id: q for q in self.questions}

    # ---- position ----
    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def question_number(self) -> int:
        return self.current_index + 1

    @property
    def current_question(self) -> Optional[Question]:
        if 0 <= self.current_index < len(self.questions):
            return self.questions[self.current_index]
        return None

    @property
    def is_last_question(self) -> bool:
        return self.question_number == self.total_questions

    def can_go_prev(self) -> bool:
        return self.current_index > 0

    def can_go_next(self) -> bool:
        return self.selected_answer() is not None

    def go_to(self, number: int) -> Question:
        if number < 1 or number > self.total_questions:
            raise IndexError(f"question {number} not in 1..{self.total_questions}")
        self.current_index = number - 1
        return self.questions[self.current_index]

    def next(self) -> bool:
        if not self.can_go_next() or self.is_last_question:
            return False
        self.current_index += 1
        return True

    def prev(self) -> bool:
        if not self.can_go_prev():
            return False
        self.current_index -= 1
        return True

    # ---- answers ----
    def answer(self, question_id: Optional[int], value: Optional[str]) -> None:
        if question_id is None or value is None or str(value) == "":
            raise ValueError("Missing questionId or answer")
        if question_id not in self._by_id:
            raise ValueError(f"unknown question id {question_id!r}")
        self.store.set(question_id, str(value))

    def answer_current(self, value: str) -> None:
        q = self.current_question
        if q is None:
            raise IndexError("no current question")
        self.answer(q.id, value)

    def selected_answer(self) -> Optional[str]:
        q = self.current_question
        if q is None:
            return None
        return self.store.get().get(q.id)

    @property
    def answered_count(self) -> int:
        answers = self.store.get()
        return sum(1 for q in self.questions if q.id in answers)

    @property
    def is_complete(self) -> bool:
        return self.answered_count == self.total_questions

    def live_score(self) -> Dict[str, float]:
        return live_score(self.questions, self.store.get())

    # ---- lifecycle ----
    def finish(self, require_complete: Optional[bool] = None) -> QuizReport:
        """Score the session and clear the store; a report is produced once."""
        gate = config.REQUIRE_ALL_ANSWERED if require_complete is None else require_complete
        answers = self.store.get()
        answered = sum(1 for q in self.questions if q.id in answers)
        if gate and answered < self.total_questions:
            log.warning("finish attempted with %d/%d answered", answered, self.total_questions)
            raise IncompleteQuizError(answered, self.total_questions)
        report = score(self.questions, answers)
        self.store.clear()
        log.info(
            "quiz finished: %d/%d correct, ability=%.1f category=%s",
            report.correct_answers,
            report.total_questions,
            report.estimated_ability_score,
            report.eligibility_category,
        )
        return report

    def restart(self) -> None:
        self.store.clear()
        self.current_index = 0
