from __future__ import annotations
import json, os, pathlib, logging
from dataclasses import dataclass
from typing import Any, Dict, List
from openai import AzureOpenAI

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class AzureSettings:
    endpoint: str
    api_key: str
    deployment: str
    api_version: str


def backend_in_use() -> str:
    b = (os.getenv("LLM_BACKEND") or "").lower()
    return b if b == "azure" else "none"


def _from_env() -> dict[str, str]:
    return {
        "endpoint":   os.getenv("AZURE_OPENAI_ENDPOINT", ""),
        "api_key":    os.getenv("AZURE_OPENAI_API_KEY", ""),
        "api_version":os.getenv("AZURE_OPENAI_API_VERSION", ""),
        "deployment": os.getenv("AZURE_OPENAI_DEPLOYMENT", ""),
    }


def _from_json(path: str = ".azure_config.json") -> dict[str, str]:
    p = pathlib.Path(path)
    if not p.exists(): return {}
    try:
        j = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return {k: str(j.get(k, "")) for k in ("endpoint", "api_key", "api_version", "deployment")}


def settings() -> AzureSettings:
    cfg = _from_env()
    if not all(cfg.values()):
        for k, v in _from_json().items():
            if not cfg.get(k): cfg[k] = v
    missing = [k for k, v in cfg.items() if not v]
    if missing:
        raise RuntimeError(f"Azure OpenAI not configured. Missing: {', '.join(missing)}")
    return AzureSettings(**cfg)


def client() -> AzureOpenAI:
    s = settings()
    return AzureOpenAI(azure_endpoint=s.endpoint, api_key=s.api_key, api_version=s.api_version)


def rewrite_recommendations(category: str, focus: List[str], recommendations: List[str]) -> List[str]:
    """Ask the model for warmer wording of the same recommendations.

    Returns the model's list, or raises; callers own the fallback.
    """
    payload: Dict[str, Any] = {"category": category, "focus_domains": focus, "recommendations": recommendations}
    cli = client()
    resp = cli.chat.completions.create(
        model=settings().deployment,
        messages=[
            {
                "role": "system",
                "content": (
                    "You coach aspiring school heads. Rewrite each recommendation to be supportive, specific and "
                    "time-bound. Keep the same number of items and their order. "
                    "Return ONLY JSON: {\"recommendations\": [string, ...]}."
                ),
            },
            {"role": "user", "content": json.dumps(payload, ensure_ascii=False)},
        ],
        temperature=0.2,
        top_p=0.9,
        max_tokens=500,
    )
    content = resp.choices[0].message.content if resp.choices else None
    data = json.loads(content or "{}")
    items = data.get("recommendations") if isinstance(data, dict) else None
    if not isinstance(items, list) or len(items) != len(recommendations):
        raise ValueError("LLM returned a recommendation list of the wrong shape")
    return [str(x) for x in items]
