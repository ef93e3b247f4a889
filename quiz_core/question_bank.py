from __future__ import annotations
import json, os, importlib.resources as ir, logging
from pathlib import Path
from typing import Any, List, Optional
from .types import Question
from .config import SOLO_LEVEL_ORDER as SOLO_LEVELS, DIFFICULTY_ORDER as DIFFICULTY_CATEGORIES

log = logging.getLogger(__name__)

DOMAINS = {
    1: "Leading Strategically",
    2: "Managing School Operations and Resources",
    3: "Focusing on Teaching and Learning",
    4: "Developing Self and Others",
    5: "Building Connections",
}


def _read_raw(path: Optional[str]) -> Any:
    src = path or os.getenv("QUIZ_BANK_PATH")
    if src:
        data = Path(src).read_text(encoding="utf-8")
    else:
        data = ir.files(__package__).joinpath("data/questions.json").read_text(encoding="utf-8")
    return json.loads(data)


def parse_bank(raw: Any) -> List[Question]:
    if not isinstance(raw, list):
        raise ValueError("question bank must be a JSON list of question records")
    out: List[Question] = []
    for idx, rec in enumerate(raw):
        try:
            out.append(Question.from_dict(rec))
        except (KeyError, TypeError, ValueError) as exc:
            rid = rec.get("id") if isinstance(rec, dict) else None
            raise ValueError(f"malformed question record #{idx} (id={rid}): {exc!r}") from exc
    return out


def load_bank(path: Optional[str] = None) -> List[Question]:
    questions = parse_bank(_read_raw(path))
    log.debug("loaded %d questions", len(questions))
    return questions


__all__ = ["DOMAINS", "SOLO_LEVELS", "DIFFICULTY_CATEGORIES", "load_bank", "parse_bank"]
