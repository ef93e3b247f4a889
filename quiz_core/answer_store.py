"""Answer persistence behind a small ``get/set/clear`` interface.

The scoring engine never touches a store; sessions and the API hold one and
pass ``store.get()`` to :func:`quiz_core.scoring.score`.  The JSON backend
plays the role browser local storage plays for the web client: one document
holding named answer maps, keyed by :data:`config.ANSWER_STORE_KEY`.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from . import config

log = logging.getLogger(__name__)


class AnswerStore(Protocol):
    def get(self) -> Dict[int, str]: ...

    def set(self, question_id: int, value: str) -> None: ...

    def clear(self) -> None: ...


def _normalize(raw: Any) -> Dict[int, str]:
    out: Dict[int, str] = {}
    if not isinstance(raw, dict):
        return out
    for k, v in raw.items():
        try:
            out[int(k)] = str(v)
        except (TypeError, ValueError):
            log.debug("skipping non-numeric answer key %r", k)
    return out


class MemoryAnswerStore:
    def __init__(self, initial: Optional[Dict[int, str]] = None) -> None:
        self._answers: Dict[int, str] = dict(initial or {})

    def get(self) -> Dict[int, str]:
        return dict(self._answers)

    def set(self, question_id: int, value: str) -> None:
        self._answers[int(question_id)] = value

    def clear(self) -> None:
        self._answers.clear()


class JsonFileAnswerStore:
    """File-backed store; several keys may share one document."""

    _LOCK = threading.Lock()

    def __init__(self, path: Path | str, key: Optional[str] = None) -> None:
        self.path = Path(path)
        self.key = key or config.ANSWER_STORE_KEY

    def _read_doc(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            doc = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            log.exception("Error reading answers from %s", self.path)
            return {}
        return doc if isinstance(doc, dict) else {}

    def _write_doc(self, doc: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(doc, indent=2, sort_keys=True), encoding="utf-8")
        tmp.replace(self.path)

    def get(self) -> Dict[int, str]:
        return _normalize(self._read_doc().get(self.key))

    def set(self, question_id: int, value: str) -> None:
        with self._LOCK:
            doc = self._read_doc()
            current = doc.get(self.key) if isinstance(doc.get(self.key), dict) else {}
            current = dict(current)
            current[str(int(question_id))] = value
            doc[self.key] = current
            self._write_doc(doc)

    def clear(self) -> None:
        with self._LOCK:
            doc = self._read_doc()
            if self.key not in doc:
                return
            doc.pop(self.key, None)
            if doc:
                self._write_doc(doc)
            elif self.path.exists():
                self.path.unlink()


def get_answer(store: AnswerStore, question_id: int) -> Optional[str]:
    return store.get().get(int(question_id))


__all__ = ["AnswerStore", "MemoryAnswerStore", "JsonFileAnswerStore", "get_answer"]
