from __future__ import annotations

import json
from collections import Counter
from pathlib import Path
from typing import Iterable

from . import config
from .question_bank import load_bank
from .types import Question


def _blank_domain(name: str) -> dict[str, object]:
    return {
        "name": name,
        "total": 0,
        "difficulty": {cat: 0 for cat in config.DIFFICULTY_ORDER},
        "solo": {lvl: 0 for lvl in config.SOLO_LEVEL_ORDER},
    }


def audit_questions(questions: Iterable[Question]) -> dict[str, object]:
    coverage: dict[int, dict[str, object]] = {}
    errors: list[str] = []
    warnings: list[str] = []
    seen_ids: Counter[int] = Counter()
    strands: dict[str, tuple[str, int]] = {}
    known_solo = {s.lower(): s for s in config.SOLO_LEVEL_ORDER}
    known_diff = {d.lower(): d for d in config.DIFFICULTY_ORDER}
    total = 0

    for q in questions:
        total += 1
        seen_ids[q.id] += 1
        dom = coverage.setdefault(q.domain.id, _blank_domain(q.domain.name))
        dom["total"] += 1  # type: ignore[operator]

        values = [o.value for o in q.options]
        if not values:
            errors.append(f"Q{q.id} has no options")
        elif q.correct_answer not in values:
            errors.append(f"Q{q.id} correct answer {q.correct_answer!r} is not among options {values}")
        dupes = sorted(v for v, n in Counter(values).items() if n > 1)
        if dupes:
            errors.append(f"Q{q.id} repeats option values {dupes}")

        category = q.difficulty_params.category
        diff_map: dict[str, int] = dom["difficulty"]  # type: ignore[assignment]
        canonical = known_diff.get(category.lower())
        if canonical:
            diff_map[canonical] += 1
        else:
            warnings.append(f"Q{q.id} unknown difficulty category {category!r} (weighted as 1)")

        solo_map: dict[str, int] = dom["solo"]  # type: ignore[assignment]
        level = known_solo.get(q.solo_level.lower())
        if level:
            solo_map[level] += 1
        else:
            warnings.append(f"Q{q.id} unknown SOLO level {q.solo_level!r}")

        first = strands.setdefault(q.strand.id, (q.strand.name, q.domain.id))
        if first != (q.strand.name, q.domain.id):
            warnings.append(
                f"strand {q.strand.id} is {first[0]!r} in domain {first[1]} but Q{q.id} says "
                f"{q.strand.name!r} in domain {q.domain.id}"
            )

    for qid, n in sorted(seen_ids.items()):
        if n > 1:
            errors.append(f"question id {qid} appears {n} times")

    for key, data in sorted(coverage.items()):
        if data["total"] < config.BANK_MIN_PER_DOMAIN:  # type: ignore[operator]
            warnings.append(
                f"Domain {key} {data['name']} has {data['total']} questions (<{config.BANK_MIN_PER_DOMAIN})"
            )

    return {
        "coverage": coverage,
        "errors": errors,
        "warnings": warnings,
        "totals": {"questions": total, "domains": len(coverage), "strands": len(strands)},
    }


def _format_row(label: str, data: dict[str, int]) -> str:
    parts = [label]
    for key, n in data.items():
        parts.append(f"{key}:{n:3d}")
    return "  ".join(parts)


def print_report(summary: dict[str, object]) -> None:
    coverage: dict[int, dict[str, object]] = summary["coverage"]  # type: ignore[assignment]
    print("=== Question Bank Coverage ===")
    for key in sorted(coverage):
        data = coverage[key]
        print(f"\nDomain {key}: {data['name']} ({data['total']} questions)")
        print("  " + _format_row("difficulty", data["difficulty"]))  # type: ignore[arg-type]
        print("  " + _format_row("solo      ", data["solo"]))  # type: ignore[arg-type]

    for title, key in (("Errors", "errors"), ("Warnings", "warnings")):
        msgs: list[str] = summary[key]  # type: ignore[assignment]
        if msgs:
            print(f"\n{title}:")
            for msg in msgs:
                print(f" - {msg}")
    if not summary["errors"] and not summary["warnings"]:
        print("\nNo problems found.")

    print("\nTotals:", summary["totals"])


def write_summary(summary: dict[str, object], path: Path = Path("bank_audit.json")) -> str:
    text = json.dumps(summary, indent=2, sort_keys=True)
    path.write_text(text + "\n", encoding="utf-8")
    return text


def main(argv: list[str] | None = None) -> int:
    import argparse

    ap = argparse.ArgumentParser(description="Validate the quiz question bank.")
    ap.add_argument("--bank", default=None, help="path to a questions JSON file (default: packaged bank)")
    ap.add_argument("--out", default="bank_audit.json", help="where to write the JSON summary")
    a = ap.parse_args(argv)

    questions = load_bank(a.bank)
    summary = audit_questions(questions)
    print_report(summary)
    write_summary(summary, Path(a.out))
    if summary["errors"]:
        return 1
    return 2 if summary["warnings"] else 0


if __name__ == "__main__":
    raise SystemExit(main())
