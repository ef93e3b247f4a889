"""Helpers to export per-question answer review in JSON/CSV formats."""
from __future__ import annotations

from typing import Iterable, List, Dict, Any
import csv
import io

_FIELDS: tuple[str, ...] = (
    "id",
    "domain",
    "strand",
    "indicator",
    "careerStage",
    "soloLevel",
    "difficulty",
    "userAnswer",
    "correctAnswer",
    "isCorrect",
    "contentTags",
    "question",
)


def _normalize_row(row: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for key in _FIELDS:
        val = row.get(key)
        if key in {"id", "careerStage"}:
            try:
                out[key] = int(val)
            except (TypeError, ValueError):
                out[key] = 0
        elif key == "isCorrect":
            out[key] = bool(val)
        elif key == "contentTags":
            out[key] = ";".join(str(t) for t in (val or []))
        else:
            out[key] = "" if val is None else str(val)
    return out


def to_json(rows: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    """Return a JSON-safe payload of detailed answers."""

    normalized: List[Dict[str, Any]] = [_normalize_row(r or {}) for r in rows]
    return {"answers": normalized}


def to_csv(rows: Iterable[Dict[str, Any]]) -> str:
    """Render detailed answers as CSV with a fixed header."""

    normalized = [_normalize_row(r or {}) for r in rows]
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=_FIELDS)
    writer.writeheader()
    for row in normalized:
        writer.writerow(row)
    return buf.getvalue()


__all__ = ["to_json", "to_csv"]
