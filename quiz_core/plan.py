from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping

from . import config as cfg_defaults
from .analysis import domain_profile, domain_strength
from .types import QuizReport

log = logging.getLogger(__name__)

DISCLAIMER = (
    "This eligibility category is based on an estimated ability score derived from your performance on "
    "questions weighted by difficulty. It serves as an indicator and is not a formal NQESH result or a "
    "substitute for official DepEd assessment processes which may use a calibrated Rasch model."
)

_GUIDANCE: Dict[str, Dict[str, Any]] = {
    "A": {
        "title": "Category A: Eligible",
        "description": (
            "You are ELIGIBLE to proceed to the next stage in the selection process for Principal 1 positions."
        ),
        "recommendations": [
            "Prepare for and proceed to the next stage of the selection process.",
        ],
    },
    "B": {
        "title": "Category B: Conditional Eligibility",
        "description": (
            "You MAY TAKE the next NQESH examination, but this is contingent upon participation in coaching and "
            "mentoring. You may also be prioritized for OIC/TIC roles if needed."
        ),
        "recommendations": [
            "Actively participate in coaching and mentoring sessions with an experienced Principal.",
            "Focus on strengthening areas identified in the domain/strand analysis.",
            "Prepare for the next NQESH examination following mentorship.",
            "Be prepared for potential designation as OIC/TIC if applicable.",
        ],
    },
    "C": {
        "title": "Category C: Needs Development",
        "description": (
            "You MUST UNDERTAKE an intensive School Heads Development Program (SHDP) before retaking the NQESH."
        ),
        "recommendations": [
            "Enroll and diligently complete the required SHDP through NEAP or an authorized provider.",
            "Focus on building foundational knowledge and skills across all PPSSH domains.",
            "Reflect on feedback received during the SHDP.",
            "Retake the NQESH only after successful completion of the SHDP.",
        ],
    },
}


@dataclass(frozen=True)
class PlanSettings:
    enabled: bool
    focus_max: int
    areas_max: int
    strength_min_pct: float
    llm_enabled: bool

    @staticmethod
    def from_cfg(cfg: Mapping[str, Any] | None) -> "PlanSettings":
        def _cfg_value(name: str, default: Any) -> Any:
            if cfg is None:
                return default
            if isinstance(cfg, Mapping) and name in cfg:
                return cfg[name]
            return default

        return PlanSettings(
            enabled=bool(_cfg_value("PLAN_ENABLED", cfg_defaults.PLAN_ENABLED)),
            focus_max=int(_cfg_value("PLAN_FOCUS_MAX", cfg_defaults.PLAN_FOCUS_MAX)),
            areas_max=int(_cfg_value("PLAN_AREAS_MAX", cfg_defaults.PLAN_AREAS_MAX)),
            strength_min_pct=float(_cfg_value("STRENGTH_MIN_PCT", cfg_defaults.STRENGTH_MIN_PCT)),
            llm_enabled=bool(_cfg_value("PLAN_LLM_ENABLED", cfg_defaults.PLAN_LLM_ENABLED)),
        )


def eligibility_guidance(category: str) -> Dict[str, Any]:
    key = str(category or "").upper().strip()
    entry = _GUIDANCE.get(key, _GUIDANCE["C"])
    return {
        "category": key if key in _GUIDANCE else "C",
        "title": entry["title"],
        "description": entry["description"],
        "recommendations": list(entry["recommendations"]),
        "disclaimer": DISCLAIMER,
    }


def _as_report(result: Any) -> QuizReport:
    if isinstance(result, QuizReport):
        return result
    if isinstance(result, Mapping):
        return QuizReport.from_dict(result)
    raise TypeError(f"cannot build a plan from {type(result).__name__}")


def _focus_domains(report: QuizReport, settings: PlanSettings) -> List[Dict[str, Any]]:
    ranked = sorted(report.domain_results, key=lambda d: (d.percentage, d.id))
    below = [d for d in ranked if d.percentage < settings.strength_min_pct]
    if not below and report.eligibility_category != "A" and ranked:
        below = ranked[:1]
    out: List[Dict[str, Any]] = []
    for d in below[: max(0, settings.focus_max)]:
        profile = domain_profile(d.name)
        out.append(
            {
                "domainId": d.id,
                "domain": d.name,
                "percentage": d.percentage,
                "band": domain_strength(d.percentage),
                "improvements": profile.improvements[: settings.areas_max],
                "goal": f"Raise {d.name} from {d.percentage:.0f}% to at least {settings.strength_min_pct:.0f}%.",
            }
        )
    return out


def _maybe_rewrite_with_llm(
    category: str,
    focus: List[Dict[str, Any]],
    recommendations: List[str],
    settings: PlanSettings,
) -> List[str]:
    if not settings.llm_enabled:
        return recommendations
    try:
        from . import llm_bridge

        if llm_bridge.backend_in_use() != "azure":
            return recommendations
        return llm_bridge.rewrite_recommendations(category, [f["domain"] for f in focus], recommendations)
    except Exception as exc:
        log.debug("plan LLM fallback: %s", exc)
        return recommendations


def generate_plan(result: Any, cfg: Mapping[str, Any] | None = None) -> Dict[str, Any]:
    """Build the development plan for a finished quiz.

    Parameters
    ----------
    result:
        A :class:`QuizReport` or its camelCase dict form (as stored by the API).
    cfg:
        Configuration mapping (typically output of :func:`quiz_core.config.load_config`).

    Returns
    -------
    dict
        ``guidance`` for the eligibility category and ``focus`` domains with
        improvement areas. ``{}`` when planning is disabled.
    """

    settings = PlanSettings.from_cfg(cfg)
    if not settings.enabled:
        return {}

    report = _as_report(result)
    guidance = eligibility_guidance(report.eligibility_category)
    focus = _focus_domains(report, settings)
    guidance["recommendations"] = _maybe_rewrite_with_llm(
        guidance["category"], focus, guidance["recommendations"], settings
    )
    return {
        "category": guidance["category"],
        "estimatedAbilityScore": report.estimated_ability_score,
        "guidance": guidance,
        "focus": focus,
    }
