from __future__ import annotations

from dataclasses import replace

import quiz_core.bank_audit as bank_audit
from quiz_core import config
from tests.conftest import build_synthetic_bank, make_question


def test_clean_bank_has_no_findings():
    summary = bank_audit.audit_questions(build_synthetic_bank())

    assert summary["errors"] == []
    assert summary["warnings"] == []
    assert summary["totals"] == {"questions": 15, "domains": 5, "strands": 15}
    dom = summary["coverage"][1]
    assert dom["difficulty"] == {"Easy": 1, "Medium": 1, "Difficult": 1}
    assert sum(dom["solo"].values()) == 3


def test_audit_flags_broken_questions():
    good = make_question(1)
    bank = [
        good,
        replace(good, text="duplicate id"),
        make_question(2, correct="z"),
        make_question(3, options=("a", "a", "b")),
        make_question(4, options=()),
    ]
    summary = bank_audit.audit_questions(bank)
    joined = "\n".join(summary["errors"])

    assert "question id 1 appears 2 times" in joined
    assert "Q2 correct answer 'z'" in joined
    assert "Q3 repeats option values ['a']" in joined
    assert "Q4 has no options" in joined


def test_audit_warns_on_unknown_labels_and_strand_drift(monkeypatch):
    monkeypatch.setattr(config, "BANK_MIN_PER_DOMAIN", 0)
    bank = [
        make_question(1, solo_level="Prestructural", difficulty="Expert"),
        make_question(2, domain_id=2, strand_id="1.1", strand_name="Strand 1.1"),
    ]
    summary = bank_audit.audit_questions(bank)
    joined = "\n".join(summary["warnings"])

    assert summary["errors"] == []
    assert "unknown SOLO level 'Prestructural'" in joined
    assert "unknown difficulty category 'Expert'" in joined
    assert "strand 1.1" in joined


def test_audit_flags_sparse_domains(monkeypatch, tmp_path):
    monkeypatch.setattr(config, "BANK_MIN_PER_DOMAIN", 2)
    bank = build_synthetic_bank(domains=[3], difficulties=("Easy",))

    summary = bank_audit.audit_questions(bank)
    assert any("Domain 3" in w for w in summary["warnings"])

    outfile = tmp_path / "bank_audit.json"
    text = bank_audit.write_summary(summary, path=outfile)
    assert outfile.read_text(encoding="utf-8").strip() == text


def test_main_exit_codes(monkeypatch, capsys, tmp_path):
    out = str(tmp_path / "audit.json")

    assert bank_audit.main(["--out", out]) == 0
    assert "No problems found." in capsys.readouterr().out

    monkeypatch.setattr(bank_audit, "load_bank", lambda path=None: [make_question(1)])
    assert bank_audit.main(["--out", out]) == 2
    assert "Warnings:" in capsys.readouterr().out

    monkeypatch.setattr(bank_audit, "load_bank", lambda path=None: [make_question(1, correct="q")] * 2)
    assert bank_audit.main(["--out", out]) == 1
    assert "Errors:" in capsys.readouterr().out


def test_coverage_keyed_by_domain_id_with_canonical_labels(monkeypatch, capsys):
    monkeypatch.setattr(config, "BANK_MIN_PER_DOMAIN", 0)
    bank = [
        make_question(1, domain_id=10, strand_id="10.1", difficulty="easy", solo_level="relational"),
        make_question(2, domain_id=2, strand_id="2.1", difficulty="Easy"),
    ]
    summary = bank_audit.audit_questions(bank)

    assert list(summary["coverage"]) == [10, 2]
    assert summary["coverage"][10]["difficulty"] == {"Easy": 1, "Medium": 0, "Difficult": 0}
    assert summary["coverage"][10]["solo"]["Relational"] == 1
    assert summary["warnings"] == []

    bank_audit.print_report(summary)
    out = capsys.readouterr().out
    assert out.index("Domain 2:") < out.index("Domain 10:")
