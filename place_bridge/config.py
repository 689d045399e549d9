from __future__ import annotations
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "data" / "config.default.json"

@dataclass
class Config:
    max_entries: int
    default_max_distance_m: float
    redirect_max_hops: int
    user_agent: str
    http_timeout_s: Optional[float]
    weights: Dict[str, float]
    tie_epsilon: float
    distance_decay_m: float

def load_config(path: str | Path = DEFAULT_CONFIG_PATH) -> Config:
    p = Path(path)
    raw = json.loads(p.read_text(encoding="utf-8"))
    timeout = raw.get("http_timeout_s")
    return Config(
        max_entries=int(raw["max_entries"]),
        default_max_distance_m=float(raw["default_max_distance_m"]),
        redirect_max_hops=int(raw["redirect_max_hops"]),
        user_agent=str(raw["user_agent"]),
        http_timeout_s=float(timeout) if timeout is not None else None,
        weights={k: float(v) for k, v in raw["weights"].items()},
        tie_epsilon=float(raw["tie_epsilon"]),
        distance_decay_m=float(raw["distance_decay_m"]),
    )
