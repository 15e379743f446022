from __future__ import annotations

import logging

from ..llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from ..llm.groq_client import rate_wines_with_llm
from ..personas.models import (
    PersonaRecommendationRequest,
    PersonaRecommendationResponse,
    UserPreferences,
    WineItem,
    WinePersona,
    WineRecommendation,
)
from ..personas.taste_profiles import (
    map_taste_profile_to_persona,
    map_taste_profile_to_preferences,
)
from .cache import RatingCache
from .config import DEFAULT_RECOMMENDATION_CONFIG, RecommendationConfig
from .heuristic import dedupe_recommendations, heuristic_rate

logger = logging.getLogger(__name__)


def resolve_personas(
    request: PersonaRecommendationRequest,
) -> tuple[list[WinePersona], UserPreferences | None]:
    """Explicit personas win; otherwise the taste profile is mapped."""
    if request.personas:
        return request.personas, request.preferences
    if request.taste_profile is not None:
        return (
            [map_taste_profile_to_persona(request.taste_profile)],
            map_taste_profile_to_preferences(request.taste_profile),
        )
    return [], request.preferences


def rate_batch(
    personas: list[WinePersona],
    preferences: UserPreferences | None,
    batch: list[WineItem],
    cache: RatingCache | None = None,
    llm_config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> tuple[list[WineRecommendation], str]:
    """Rate one batch; returns the recommendations and "llm" or "heuristic"."""
    key = {
        "personas": [p.model_dump(mode="json") for p in personas],
        "preferences": preferences.model_dump(mode="json") if preferences else None,
        "wines": [w.model_dump(mode="json") for w in batch],
        "model": llm_config.model,
    }
    if cache is not None:
        cached = cache.get(key)
        if cached is not None:
            return cached

    recs = rate_wines_with_llm(personas, preferences, batch, config=llm_config)
    if recs:
        result = (recs, "llm")
    else:
        result = (heuristic_rate(personas, preferences, batch), "heuristic")

    if cache is not None:
        cache.set(key, result)
    return result


def recommend_for_personas(
    request: PersonaRecommendationRequest,
    cache: RatingCache | None = None,
    llm_config: LLMConfig = DEFAULT_LLM_CONFIG,
    config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
) -> PersonaRecommendationResponse:
    personas, preferences = resolve_personas(request)
    wines = request.wines

    aggregated: list[WineRecommendation] = []
    sources: set[str] = set()
    for start in range(0, len(wines), config.llm_batch_size):
        batch = wines[start:start + config.llm_batch_size]
        recs, source = rate_batch(personas, preferences, batch, cache=cache, llm_config=llm_config)
        aggregated.extend(recs)
        sources.add(source)

    known_ids = {w.id for w in wines}
    deduped = dedupe_recommendations(aggregated, known_ids)
    deduped.sort(key=lambda r: r.score, reverse=True)

    source = sources.pop() if len(sources) == 1 else "mixed"
    logger.info(
        "Rated %d wines for %d personas (%s)", len(wines), len(personas), source,
    )
    return PersonaRecommendationResponse(recommendations=deduped, source=source)
