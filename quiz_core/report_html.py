from __future__ import annotations
from html import escape
from typing import Dict, Any, List

from . import config
from .analysis import career_stage_label, domain_strength
from .plan import eligibility_guidance


def _pct(v: Any) -> str:
    try:
        return f"{float(v):.1f}%"
    except (TypeError, ValueError):
        return "-"


def _bucket_rows(rows: List[Dict[str, Any]], label_key: str, band: bool = False) -> str:
    out: List[str] = []
    for r in rows:
        label = escape(str(r.get(label_key, "")))
        band_td = f"<td>{domain_strength(r.get('percentage', 0.0))}</td>" if band else ""
        out.append(
            f"<tr><td>{label}</td><td>{r.get('correct', 0)}/{r.get('total', 0)}</td>"
            f"<td>{_pct(r.get('percentage'))}</td>{band_td}</tr>"
        )
    return "\n".join(out)


def _table(head: List[str], body: str) -> str:
    ths = "".join(f"<th>{h}</th>" for h in head)
    return (
        "<table border='1' cellpadding='6' cellspacing='0'>"
        f"<thead><tr>{ths}</tr></thead><tbody>{body}</tbody></table>"
    )


def _answer_row(a: Dict[str, Any]) -> str:
    mark = "&#10003;" if a.get("isCorrect") else "&#10007;"
    user = a.get("userAnswer")
    user_txt = escape(str(user)) if user is not None else "<i>unanswered</i>"
    tags = ", ".join(escape(str(t)) for t in (a.get("contentTags") or []))
    return (
        f"<tr><td>{a.get('id')}</td><td>{escape(str(a.get('question', '')))}"
        f"<div class=\"expl\">{escape(str(a.get('explanation', '')))}</div></td>"
        f"<td>{user_txt}</td><td>{escape(str(a.get('correctAnswer', '')))}</td><td>{mark}</td>"
        f"<td>{escape(str(a.get('domain', '')))} / {escape(str(a.get('strand', '')))}</td>"
        f"<td>{escape(str(a.get('difficulty', '')))}</td><td>{tags}</td></tr>"
    )


def render_report_html(result: Dict[str, Any], title: str = "PPSSH Quiz Results") -> str:
    meta = result.get("meta", {}) or {}
    category = str(result.get("eligibilityCategory") or "C")
    guidance = eligibility_guidance(category)
    plan = result.get("plan") or {}
    if isinstance(plan, dict) and plan.get("guidance"):
        guidance = plan["guidance"]

    stage_rows = [
        dict(r, stage=f"Career Stage {r.get('stage')} ({career_stage_label(r.get('stage', 0))})")
        for r in result.get("careerStageResults", []) or []
    ]
    strand_rows = [
        dict(r, label=f"{r.get('id')} {r.get('name')} ({r.get('domainName')})")
        for r in result.get("strandResults", []) or []
    ]

    recs = "".join(f"<li>{escape(str(x))}</li>" for x in guidance.get("recommendations", []))

    focus_html = ""
    focus = plan.get("focus") if isinstance(plan, dict) else None
    if focus:
        blocks: List[str] = []
        for entry in focus:
            areas = "".join(f"<li>{escape(str(a))}</li>" for a in entry.get("improvements", []))
            blocks.append(
                '<div>'
                + f"<h4>{escape(str(entry.get('domain')))} ({_pct(entry.get('percentage'))}, {entry.get('band')})</h4>"
                + f"<p>{escape(str(entry.get('goal', '')))}</p>"
                + f"<ul>{areas}</ul>"
                + '</div>'
            )
        focus_html = '<h3>Development focus</h3>' + ''.join(blocks)

    export_links = ""
    if config.REPORT_EXPORT_ENABLED:
        report_id = result.get("reportId") or meta.get("reportId")
        if report_id:
            rid = escape(str(report_id))
            export_links = (
                "<p class=\"export-links\">"
                f"<a href=\"/reports/{rid}/answers.json\">Download answers (JSON)</a> · "
                f"<a href=\"/reports/{rid}/answers.csv\">Download answers (CSV)</a>"
                "</p>"
            )

    answers = "\n".join(_answer_row(a) for a in result.get("detailedAnswers", []) or [])

    return f"""<!doctype html>
<html lang="en">
<head>
<meta charset="utf-8"/>
<title>{escape(title)}</title>
<style>
 body{{font-family:system-ui,-apple-system,Segoe UI,Roboto,Ubuntu,'Helvetica Neue',Arial}}
 .wrap{{max-width:960px;margin:40px auto;padding:0 16px}}
 h1{{margin:0 0 16px}}
 .overall{{font-size:1.1rem;margin:8px 0 16px}}
 .banner{{padding:12px 16px;border-radius:6px;margin:16px 0}}
 .cat-A{{background:#e6f6ea;border:1px solid #22a34a}}
 .cat-B{{background:#fff7db;border:1px solid #d4a106}}
 .cat-C{{background:#fde8e8;border:1px solid #d33}}
 .expl{{color:#555;font-size:.85rem;margin-top:4px}}
 table{{border-collapse:collapse;width:100%}}
 th,td{{text-align:left;vertical-align:top}}
</style>
</head>
<body>
<div class="wrap">
  <h1>{escape(title)}</h1>
  <div class="overall"><b>Overall:</b> {result.get('correctAnswers', 0)} / {result.get('totalQuestions', 0)} ({_pct(result.get('overallPercentage'))})</div>

  <div class="banner cat-{escape(guidance.get('category', category))}">
    <h2>{escape(str(guidance.get('title', '')))}</h2>
    <p>{escape(str(guidance.get('description', '')))}</p>
    <p><b>Estimated Ability Score (Weighted by Difficulty):</b> {_pct(result.get('estimatedAbilityScore'))}</p>
    <h4>Recommendations</h4>
    <ul>{recs}</ul>
    <p><i>{escape(str(guidance.get('disclaimer', '')))}</i></p>
  </div>

  <h3>Domains</h3>
  {_table(["Domain", "Correct", "Score", "Level"], _bucket_rows(result.get("domainResults", []) or [], "name", band=True))}

  <h3>Strands</h3>
  {_table(["Strand", "Correct", "Score"], _bucket_rows(strand_rows, "label"))}

  <h3>Career stages</h3>
  {_table(["Stage", "Correct", "Score"], _bucket_rows(stage_rows, "stage"))}

  <h3>SOLO levels</h3>
  {_table(["Level", "Correct", "Score"], _bucket_rows(result.get("soloLevelResults", []) or [], "level"))}

  <h3>Difficulty</h3>
  {_table(["Category", "Correct", "Score"], _bucket_rows(result.get("difficultyResults", []) or [], "category"))}

  {focus_html}

  <h3>Answer review</h3>
  {_table(["#", "Question", "Your answer", "Correct", "", "Domain / Strand", "Difficulty", "Tags"], answers)}
  {export_links}
</div>
</body>
</html>"""


def export_report_html(result: Dict[str, Any], path: str) -> str:
    html = render_report_html(result)
    with open(path, "w", encoding="utf-8") as f:
        f.write(html)
    return path
