from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Mapping, Optional

EligibilityCategory = Literal["A", "B", "C"]
AnswerMap = Mapping[int, str]


@dataclass(frozen=True)
class QuestionOption:
    value: str; text: str


@dataclass(frozen=True)
class Domain:
    id: int; name: str


@dataclass(frozen=True)
class Strand:
    id: str; name: str


@dataclass(frozen=True)
class Indicator:
    id: str; text: str


@dataclass(frozen=True)
class DifficultyParams:
    category: str
    value: float = 0.0
    discrimination: float = 1.0
    guessing: float = 0.0


@dataclass(frozen=True)
class Question:
    id: int
    text: str
    options: List[QuestionOption]
    correct_answer: str
    domain: Domain
    strand: Strand
    indicator: Indicator
    career_stage: int
    solo_level: str
    difficulty_params: DifficultyParams
    explanation: str = ""
    content_tags: List[str] = field(default_factory=list)

    @property
    def difficulty(self) -> str:
        return self.difficulty_params.category

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "Question":
        """Build a question from its bank/wire form (camelCase keys)."""
        dp = d.get("difficultyParams") or {}
        return Question(
            id=int(d["id"]),
            text=str(d["text"]),
            options=[QuestionOption(value=str(o["value"]), text=str(o["text"])) for o in d["options"]],
            correct_answer=str(d["correctAnswer"]),
            domain=Domain(id=int(d["domain"]["id"]), name=str(d["domain"]["name"])),
            strand=Strand(id=str(d["strand"]["id"]), name=str(d["strand"]["name"])),
            indicator=Indicator(
                id=str((d.get("indicator") or {}).get("id", "")),
                text=str((d.get("indicator") or {}).get("text", "")),
            ),
            career_stage=int(d["careerStage"]),
            solo_level=str(d.get("soloLevel", "")),
            difficulty_params=DifficultyParams(
                category=str(dp.get("category", "")),
                value=float(dp.get("value", 0.0)),
                discrimination=float(dp.get("discrimination", 1.0)),
                guessing=float(dp.get("guessing", 0.0)),
            ),
            explanation=str(d.get("explanation", "") or ""),
            content_tags=[str(t) for t in (d.get("contentTags") or [])],
        )

    def to_dict(self, include_key: bool = True) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.id,
            "text": self.text,
            "options": [{"value": o.value, "text": o.text} for o in self.options],
            "domain": {"id": self.domain.id, "name": self.domain.name},
            "strand": {"id": self.strand.id, "name": self.strand.name},
            "indicator": {"id": self.indicator.id, "text": self.indicator.text},
            "careerStage": self.career_stage,
            "soloLevel": self.solo_level,
            "difficultyParams": {
                "value": self.difficulty_params.value,
                "category": self.difficulty_params.category,
                "discrimination": self.difficulty_params.discrimination,
                "guessing": self.difficulty_params.guessing,
            },
            "contentTags": list(self.content_tags),
        }
        # answer key stays server-side unless asked for
        if include_key:
            out["correctAnswer"] = self.correct_answer
            out["explanation"] = self.explanation
        return out


@dataclass(frozen=True)
class DomainResult:
    id: int; name: str; total: int; correct: int; percentage: float


@dataclass(frozen=True)
class StrandResult:
    id: str
    name: str
    domain_id: int
    domain_name: str
    total: int
    correct: int
    percentage: float


@dataclass(frozen=True)
class CareerStageResult:
    stage: int; total: int; correct: int; percentage: float


@dataclass(frozen=True)
class SoloLevelResult:
    level: str; total: int; correct: int; percentage: float


@dataclass(frozen=True)
class DifficultyResult:
    category: str; total: int; correct: int; percentage: float


@dataclass(frozen=True)
class DetailedAnswer:
    id: int
    question: str
    user_answer: Optional[str]
    correct_answer: str
    is_correct: bool
    explanation: str
    domain: str
    strand: str
    indicator: str
    career_stage: int
    solo_level: str
    content_tags: List[str] = field(default_factory=list)
    difficulty: str = ""


_WIRE_KEYS = {
    "total_questions": "totalQuestions",
    "correct_answers": "correctAnswers",
    "overall_percentage": "overallPercentage",
    "domain_results": "domainResults",
    "strand_results": "strandResults",
    "career_stage_results": "careerStageResults",
    "solo_level_results": "soloLevelResults",
    "difficulty_results": "difficultyResults",
    "detailed_answers": "detailedAnswers",
    "estimated_ability_score": "estimatedAbilityScore",
    "eligibility_category": "eligibilityCategory",
    "domain_id": "domainId",
    "domain_name": "domainName",
    "user_answer": "userAnswer",
    "correct_answer": "correctAnswer",
    "is_correct": "isCorrect",
    "career_stage": "careerStage",
    "solo_level": "soloLevel",
    "content_tags": "contentTags",
}
_PY_KEYS = {v: k for k, v in _WIRE_KEYS.items()}


def _camel(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {_WIRE_KEYS.get(k, k): _camel(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_camel(v) for v in obj]
    return obj


def _snake(d: Mapping[str, Any]) -> Dict[str, Any]:
    return {_PY_KEYS.get(k, k): v for k, v in d.items()}


@dataclass(frozen=True)
class QuizReport:
    total_questions: int
    correct_answers: int
    overall_percentage: float
    domain_results: List[DomainResult]
    strand_results: List[StrandResult]
    career_stage_results: List[CareerStageResult]
    solo_level_results: List[SoloLevelResult]
    difficulty_results: List[DifficultyResult]
    detailed_answers: List[DetailedAnswer]
    estimated_ability_score: float
    eligibility_category: EligibilityCategory

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe camelCase form, the shape the results view consumes."""
        return _camel({
            "total_questions": self.total_questions,
            "correct_answers": self.correct_answers,
            "overall_percentage": self.overall_percentage,
            "domain_results": [vars(r) for r in self.domain_results],
            "strand_results": [vars(r) for r in self.strand_results],
            "career_stage_results": [vars(r) for r in self.career_stage_results],
            "solo_level_results": [vars(r) for r in self.solo_level_results],
            "difficulty_results": [vars(r) for r in self.difficulty_results],
            "detailed_answers": [dict(vars(r), content_tags=list(r.content_tags)) for r in self.detailed_answers],
            "estimated_ability_score": self.estimated_ability_score,
            "eligibility_category": self.eligibility_category,
        })

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "QuizReport":
        return QuizReport(
            total_questions=int(d["totalQuestions"]),
            correct_answers=int(d["correctAnswers"]),
            overall_percentage=float(d["overallPercentage"]),
            domain_results=[DomainResult(**_snake(r)) for r in d.get("domainResults", [])],
            strand_results=[StrandResult(**_snake(r)) for r in d.get("strandResults", [])],
            career_stage_results=[CareerStageResult(**_snake(r)) for r in d.get("careerStageResults", [])],
            solo_level_results=[SoloLevelResult(**_snake(r)) for r in d.get("soloLevelResults", [])],
            difficulty_results=[DifficultyResult(**_snake(r)) for r in d.get("difficultyResults", [])],
            detailed_answers=[DetailedAnswer(**_snake(r)) for r in d.get("detailedAnswers", [])],
            estimated_ability_score=float(d["estimatedAbilityScore"]),
            eligibility_category=d["eligibilityCategory"],
        )
