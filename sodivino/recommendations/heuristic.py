"""
Deterministic persona rater.

Used whenever the LLM rating call comes back empty. Scores
start at 40 (plus the wine's position, so ordering stays deterministic) and
move with price fit, grape matches and the user's risk tolerance. Unlike
the menu scorer, results are clamped to 0-100 like the LLM path.
"""
from __future__ import annotations

import math

from ..personas.models import (
    RiskTolerance,
    UserPreferences,
    WineItem,
    WinePersona,
    WineRecommendation,
)

_BASE_SCORE = 40


def clamp_score(score: float) -> float:
    if not math.isfinite(score):
        return 0
    return max(0, min(100, math.floor(score + 0.5)))


def unique_strings(values: list[str]) -> list[str]:
    seen: dict[str, None] = {}
    for value in values:
        trimmed = value.strip()
        if trimmed:
            seen.setdefault(trimmed, None)
    return list(seen)


def _price_against_persona(price: float, persona: WinePersona) -> tuple[float, str]:
    if persona.min_price is None and persona.max_price is None:
        return 0.0, ""

    low = persona.min_price if persona.min_price is not None else persona.max_price
    high = persona.max_price if persona.max_price is not None else persona.min_price

    if low <= price <= high:
        return 10.0, f"hits {persona.name}'s target price"

    closest = low if price < low else high
    penalty = min(6.0, abs(price - closest) / 5)
    side = "below" if price < low else "above"
    return -penalty, f"price is {side} {persona.name}'s target"


def heuristic_rate(
    personas: list[WinePersona],
    preferences: UserPreferences | None,
    wines: list[WineItem],
) -> list[WineRecommendation]:
    results: list[WineRecommendation] = []

    for index, wine in enumerate(wines):
        score = float(_BASE_SCORE + index)
        tags: dict[str, None] = {}
        reasons: list[str] = []

        if wine.price is not None:
            matches = [_price_against_persona(wine.price, p) for p in personas]
            if matches:
                delta, reason = max(matches, key=lambda m: m[0])
                if delta > 0:
                    score += delta
                    tags["price match"] = None
                    reasons.append(reason)

            if preferences:
                within = (
                    (preferences.usual_budget_min is None or wine.price >= preferences.usual_budget_min)
                    and (preferences.usual_budget_max is None or wine.price <= preferences.usual_budget_max)
                )
                if within:
                    score += 5
                    tags["good value"] = None
                    reasons.append("within typical budget")

        if wine.grape:
            grape = wine.grape.lower()
            matched = next(
                (p for p in personas if any(g.lower() == grape for g in p.grapes)),
                None,
            )
            if matched:
                score += 8
                tags["grape match"] = None
                reasons.append(f"aligns with {matched.name}'s grape preferences")

            if preferences and any(g.lower() == grape for g in preferences.favorite_grapes):
                score += 6
                tags["familiar"] = None
                reasons.append("uses a favorite grape")

        if preferences:
            if preferences.risk_tolerance == RiskTolerance.safe:
                tags["safe"] = None
            elif preferences.risk_tolerance == RiskTolerance.adventurous:
                tags["adventurous"] = None
                score += 2
            else:
                tags["anything goes"] = None
                score += 3

        results.append(WineRecommendation(
            wine_id=wine.id,
            score=clamp_score(score),
            reason="; ".join(reasons) if reasons else "Balanced pick based on limited data.",
            tags=list(tags),
        ))

    return results


def dedupe_recommendations(
    recs: list[WineRecommendation],
    valid_ids: set[str],
) -> list[WineRecommendation]:
    """Drop unknown wine ids and keep the best-scoring entry per wine."""
    by_id: dict[str, WineRecommendation] = {}
    for rec in recs:
        if rec.wine_id not in valid_ids:
            continue
        normalized = WineRecommendation(
            wine_id=rec.wine_id,
            score=clamp_score(rec.score),
            reason=rec.reason.strip(),
            tags=unique_strings(rec.tags),
        )
        existing = by_id.get(rec.wine_id)
        if existing is None or normalized.score > existing.score:
            by_id[rec.wine_id] = normalized
    return list(by_id.values())
