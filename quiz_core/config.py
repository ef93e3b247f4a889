from __future__ import annotations
import os, json, pathlib


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


# eligibility cutoffs on the difficulty-weighted ability score (0..100)
ELIGIBILITY_THRESHOLD_A: float = 85.0
ELIGIBILITY_THRESHOLD_B: float = 70.0

DIFFICULTY_POINTS: dict[str, int] = {"easy": 1, "medium": 2, "difficult": 3}
DEFAULT_DIFFICULTY_POINTS: int = 1

SOLO_LEVEL_ORDER: tuple[str, ...] = (
    "Unistructural",
    "Multistructural",
    "Relational",
    "Extended Abstract",
)
DIFFICULTY_ORDER: tuple[str, ...] = ("Easy", "Medium", "Difficult")

STRENGTH_MIN_PCT: float = 80.0
WEAKNESS_BELOW_PCT: float = 70.0
DOMAIN_BANDS: tuple[tuple[float, str], ...] = (
    (90.0, "Expert"),
    (80.0, "Proficient"),
    (70.0, "Developing"),
)
DOMAIN_BAND_FLOOR: str = "Emerging"

CAREER_STAGE_LABELS: dict[int, str] = {1: "Aspiring", 2: "Practicing", 3: "Advanced", 4: "Expert"}

ANSWER_STORE_KEY: str = "ppsshQuizAnswers"
REQUIRE_ALL_ANSWERED: bool = True

REPORT_EXPORT_ENABLED: bool = True

PLAN_ENABLED: bool = True
PLAN_FOCUS_MAX: int = 3
PLAN_AREAS_MAX: int = 4
PLAN_LLM_ENABLED: bool = False

BANK_MIN_PER_DOMAIN: int = 2

DEBUG_TRACE: bool = False

# // env overrides for staging/ops; defaults mirror the published cutoffs.
ELIGIBILITY_THRESHOLD_A = _env_float("ELIGIBILITY_THRESHOLD_A", ELIGIBILITY_THRESHOLD_A)
ELIGIBILITY_THRESHOLD_B = _env_float("ELIGIBILITY_THRESHOLD_B", ELIGIBILITY_THRESHOLD_B)
REQUIRE_ALL_ANSWERED = _env_bool("REQUIRE_ALL_ANSWERED", REQUIRE_ALL_ANSWERED)
REPORT_EXPORT_ENABLED = _env_bool("REPORT_EXPORT_ENABLED", REPORT_EXPORT_ENABLED)
PLAN_ENABLED = _env_bool("PLAN_ENABLED", PLAN_ENABLED)
PLAN_FOCUS_MAX = _env_int("PLAN_FOCUS_MAX", PLAN_FOCUS_MAX)
PLAN_LLM_ENABLED = _env_bool("PLAN_LLM_ENABLED", PLAN_LLM_ENABLED)
BANK_MIN_PER_DOMAIN = _env_int("BANK_MIN_PER_DOMAIN", BANK_MIN_PER_DOMAIN)
DEBUG_TRACE = _env_bool("DEBUG_TRACE", DEBUG_TRACE)


def _env_true(name: str) -> bool:
    return os.environ.get(name, "").lower() in ("1","true","yes","on")


def load_config() -> dict:
    cfg = {}
    p = pathlib.Path("config.json")
    if p.exists():
        try: cfg = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError): cfg = {}
    e = os.environ
    if e.get("PLAN_LLM_ENABLED"): cfg["PLAN_LLM_ENABLED"] = _env_true("PLAN_LLM_ENABLED")
    if e.get("LLM_BACKEND"): cfg["LLM_BACKEND"] = e.get("LLM_BACKEND")
    if e.get("PLAN_FOCUS_MAX"): cfg["PLAN_FOCUS_MAX"] = _env_int("PLAN_FOCUS_MAX", PLAN_FOCUS_MAX)
    for k in ("AZURE_OPENAI_ENDPOINT","AZURE_OPENAI_API_VERSION","AZURE_OPENAI_DEPLOYMENT"):
        if e.get(k): cfg[k] = e.get(k)
    if e.get("QUIZ_BANK_PATH"): cfg["QUIZ_BANK_PATH"] = e.get("QUIZ_BANK_PATH")
    return cfg


def get_backend(cfg: dict) -> str|None:
    if not cfg.get("PLAN_LLM_ENABLED"): return None
    b = (cfg.get("LLM_BACKEND") or "").lower().strip()
    return b if b == "azure" else None
