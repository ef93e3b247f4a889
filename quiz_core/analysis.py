# quiz_core/analysis.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List

from . import config
from .types import QuizReport

_DESCRIPTIONS: Dict[str, str] = {
    "Leading Strategically": "Demonstrates capability in setting direction, establishing goals, and ensuring strategic alignment. Leadership in vision development is effective.",
    "Managing School Operations and Resources": "Shows ability in managing systems and processes efficiently and fairly. Resource management supports school operations effectively.",
    "Focusing on Teaching and Learning": "Excels at promoting quality teaching and learning through instructional leadership. Approaches improve teacher competence and learning outcomes.",
    "Developing Self and Others": "Demonstrates capability in nurturing professional development and supporting personnel welfare. Self-reflection practices contribute to ongoing improvement.",
    "Building Connections": "Shows strong engagement with stakeholders and effectively promotes shared responsibility for education. Community relationships foster productive partnerships.",
}

_STRENGTH_AREAS: Dict[str, List[str]] = {
    "Leading Strategically": ["Vision articulation", "Strategic planning", "Policy implementation", "Data-driven decisions"],
    "Managing School Operations and Resources": ["Financial practices", "Resource allocation", "Staff management", "Operational planning"],
    "Focusing on Teaching and Learning": ["Instructional leadership", "Curriculum implementation", "Assessment practices", "Teacher support"],
    "Developing Self and Others": ["Professional reflection", "Team development", "Performance management", "Staff recognition"],
    "Building Connections": ["Stakeholder engagement", "Community partnerships", "Communication", "Inclusive practices"],
}

_IMPROVEMENT_AREAS: Dict[str, List[str]] = {
    "Leading Strategically": ["Research utilization", "M&E systems", "Learner voice integration", "Long-term visioning"],
    "Managing School Operations and Resources": ["Technology integration", "Disaster preparedness", "Resource tracking", "Facilities planning"],
    "Focusing on Teaching and Learning": ["Contextualization", "Career guidance", "Teaching innovations", "Cross-curricular integration"],
    "Developing Self and Others": ["Mentoring systems", "Succession planning", "PLCs", "Distributed leadership"],
    "Building Connections": ["Diversity initiatives", "Expanded partnerships", "Resource mobilization", "Cross-sector collaborations"],
}

_NO_PROFILE = "No detailed information available for this domain."


@dataclass(frozen=True)
class DomainProfile:
    name: str
    description: str
    strengths: List[str]
    improvements: List[str]


def _normalize_name(name: str) -> str:
    return name.replace(" & ", " and ")


def _short_name(name: str) -> str:
    return name.replace(" and ", " & ")


def domain_strength(percentage: float) -> str:
    p = float(percentage)
    for floor, label in config.DOMAIN_BANDS:
        if p >= floor: return label
    return config.DOMAIN_BAND_FLOOR


def career_stage_label(stage: int) -> str:
    return config.CAREER_STAGE_LABELS.get(int(stage), "Expert")


def domain_profile(name: str) -> DomainProfile:
    key = _normalize_name(name)
    return DomainProfile(
        name=key,
        description=_DESCRIPTIONS.get(key, _NO_PROFILE),
        strengths=list(_STRENGTH_AREAS.get(key, [])),
        improvements=list(_IMPROVEMENT_AREAS.get(key, [])),
    )


def strengths_and_weaknesses(report: QuizReport) -> Dict[str, List[Dict[str, Any]]]:
    strengths = sorted(
        (d for d in report.domain_results if d.percentage >= config.STRENGTH_MIN_PCT),
        key=lambda d: d.percentage,
        reverse=True,
    )
    weaknesses = sorted(
        (d for d in report.domain_results if d.percentage < config.WEAKNESS_BELOW_PCT),
        key=lambda d: d.percentage,
    )
    return {
        "strengths": [{"type": "domain", "name": d.name, "percentage": d.percentage} for d in strengths],
        "weaknesses": [{"type": "domain", "name": d.name, "percentage": d.percentage} for d in weaknesses],
    }


def radar_chart_data(report: QuizReport) -> List[Dict[str, Any]]:
    return [
        {"subject": _short_name(d.name), "A": round(d.percentage, 1), "fullMark": 100}
        for d in report.domain_results
    ]


def domain_chart_data(report: QuizReport) -> List[Dict[str, Any]]:
    return [{"name": d.name, "score": round(d.percentage, 1)} for d in report.domain_results]


def career_stage_chart_data(report: QuizReport) -> List[Dict[str, Any]]:
    return [
        {"name": f"Stage {s.stage}", "label": career_stage_label(s.stage), "score": round(s.percentage, 1)}
        for s in sorted(report.career_stage_results, key=lambda s: s.stage)
    ]


def summarize(report: QuizReport) -> Dict[str, Any]:
    """Everything the results view derives from a report, in one payload."""
    sw = strengths_and_weaknesses(report)
    return {
        "strengths": sw["strengths"],
        "weaknesses": sw["weaknesses"],
        "domainBands": [
            {"id": d.id, "name": d.name, "band": domain_strength(d.percentage)} for d in report.domain_results
        ],
        "radar": radar_chart_data(report),
        "domainChart": domain_chart_data(report),
        "careerStageChart": career_stage_chart_data(report),
    }
