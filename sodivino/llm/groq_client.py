from __future__ import annotations

import json
import logging
import math
from typing import Any

from groq import Groq

from ..personas.models import UserPreferences, WineItem, WinePersona, WineRecommendation
from ..recommendations.heuristic import clamp_score, unique_strings
from .config import DEFAULT_LLM_CONFIG, LLMConfig

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a master sommelier helping a host recommend wines to a guest. "
    "For each batch of wines you must rate how well every wine fits the "
    "provided personas and global preferences.\n\n"
    "Return ONLY valid JSON in this exact format:\n"
    '{"recommendations": [{"wineId": "<wine id>", "score": <0-100>, '
    '"reason": "<short reason>", "tags": ["<tag>"]}]}\n'
    "Reasons should be short (under 240 characters) and tags should highlight "
    'key attributes such as "safe", "bold", "good value" or "food pairing". '
    "Score each wine relative to this group; do not omit wines unless "
    "information is missing."
)


def _summarize_persona(persona: WinePersona) -> str:
    grapes = f"Grapes: {', '.join(persona.grapes)}." if persona.grapes else "Grapes: flexible."
    food = f"Food tags: {', '.join(persona.food_pairing_tags)}." if persona.food_pairing_tags else ""
    if persona.min_price is not None or persona.max_price is not None:
        low = persona.min_price if persona.min_price is not None else "?"
        high = persona.max_price if persona.max_price is not None else "?"
        price = f"Price target: {low} - {high}."
    else:
        price = "Price target: flexible."
    notes = f"Notes: {persona.notes}" if persona.notes else ""

    return (
        f"- {persona.name}: prefers {persona.color.value} wines "
        f"({persona.body.value} body, {persona.tannin.value} tannin, "
        f"{persona.acidity.value} acidity, {persona.sweetness.value} sweetness). "
        f"{grapes} {food} {price} {notes}"
    ).strip()


def _summarize_preferences(preferences: UserPreferences | None) -> str:
    if preferences is None:
        return "No stored user preferences. Default to balanced recommendations."

    if preferences.favorite_grapes:
        grapes = f"Favorites: {', '.join(preferences.favorite_grapes)}."
    else:
        grapes = "Favorites: open."
    if preferences.usual_budget_min is not None or preferences.usual_budget_max is not None:
        low = preferences.usual_budget_min if preferences.usual_budget_min is not None else "?"
        high = preferences.usual_budget_max if preferences.usual_budget_max is not None else "?"
        budget = f"Usual budget: {low} - {high}."
    else:
        budget = "Usual budget: flexible."

    return (
        f"{grapes} Quality tier: {preferences.quality_tier.value}. "
        f"Risk tolerance: {preferences.risk_tolerance.value}. {budget}"
    )


def _build_user_message(
    personas: list[WinePersona],
    preferences: UserPreferences | None,
    wines: list[WineItem],
) -> str:
    persona_lines = (
        "\n".join(_summarize_persona(p) for p in personas) if personas else "No personas supplied."
    )
    wines_json = json.dumps(
        [w.model_dump(exclude_none=True) for w in wines], indent=2, ensure_ascii=False,
    )

    lines = [
        "## Personas",
        persona_lines,
        "",
        "## Global Preferences",
        _summarize_preferences(preferences),
        "",
        "## Wines to evaluate (echo each wine's id as wineId)",
        wines_json,
        "",
        "Sort by score, highest first. Every wine in the batch must appear once, "
        "with 1-4 descriptive tags.",
    ]
    return "\n".join(lines)


def _parse_recommendations(payload: Any) -> list[WineRecommendation]:
    if not isinstance(payload, dict) or not isinstance(payload.get("recommendations"), list):
        return []

    recs: list[WineRecommendation] = []
    for entry in payload["recommendations"]:
        if not isinstance(entry, dict):
            continue
        wine_id = entry.get("wineId")
        reason = entry.get("reason")
        score = entry.get("score")
        tags = entry.get("tags")

        if not isinstance(wine_id, str) or not wine_id.strip():
            continue
        if not isinstance(reason, str) or not reason.strip():
            continue
        if isinstance(score, bool) or not isinstance(score, (int, float)) or not math.isfinite(score):
            continue
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            tags = []

        recs.append(WineRecommendation(
            wine_id=wine_id.strip(),
            score=clamp_score(score),
            reason=reason.strip(),
            tags=unique_strings(tags),
        ))
    return recs


def rate_wines_with_llm(
    personas: list[WinePersona],
    preferences: UserPreferences | None,
    wines: list[WineItem],
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> list[WineRecommendation]:
    """
    Ask the Groq LLM to score a batch of wines against the personas.

    Returns the parsed recommendations (scores clamped to 0-100).
    Returns an empty list on any failure (disabled, timeout, bad JSON,
    API error) so the caller can fall back to the heuristic rater.
    """
    if not config.enabled or not config.api_key:
        return []

    if not wines:
        return []

    try:
        client = Groq(api_key=config.api_key, timeout=config.timeout)
        response = client.chat.completions.create(
            model=config.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": _build_user_message(personas, preferences, wines),
                },
            ],
            max_tokens=config.max_tokens,
            temperature=config.rating_temperature,
            response_format={"type": "json_object"},
        )

        content = response.choices[0].message.content or ""
        return _parse_recommendations(json.loads(content))

    except Exception:
        logger.warning("Groq wine rating failed, falling back to heuristic rating", exc_info=True)
        return []
