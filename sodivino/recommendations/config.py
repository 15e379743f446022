from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class RecommendationConfig:
    top_n: int = 3
    max_limit: int = 50
    llm_batch_size: int = 10
    default_adventurousness: int = 3
    text_preview_chars: int = 400
    cache_ttl_seconds: float = 300.0
    profiles_path: Path = Path(__file__).resolve().parent.parent / "data" / "wine_profiles.csv"


DEFAULT_RECOMMENDATION_CONFIG = RecommendationConfig()
