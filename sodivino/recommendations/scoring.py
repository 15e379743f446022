from __future__ import annotations

import math
from typing import Iterable

from .models import (
    AcidityPreference,
    BodyPreference,
    ColorPreference,
    PreferenceProfile,
    ScoredWine,
    ScoringOverrides,
    SweetnessPreference,
    WineLineItem,
)

ADVENTUROUS_THRESHOLD = 7
ADVENTUROUS_BUDGET_FACTOR = 1.3
OVERAGE_DIVISOR = 15


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _fmt_amount(value: float) -> str:
    """Render 45.0 as "45" and 45.5 as "45.5"."""
    return str(int(value)) if float(value).is_integer() else str(value)


def _is_adjacent_body(preferred: str, actual: str) -> bool:
    if preferred == "medium":
        return actual in ("light", "full")
    return actual == "medium"


def score_wine(
    wine: WineLineItem,
    profile: PreferenceProfile,
    overrides: ScoringOverrides | None = None,
) -> ScoredWine:
    """
    Heuristic match score for one wine against a preference profile.

    Rules are applied in a fixed order and are all additive. The score is
    not clamped; callers decide how to present it. Penalties for body,
    sweetness and acidity mismatches add no reason text.
    """
    overrides = overrides or ScoringOverrides()

    budget = overrides.budget if overrides.budget is not None else profile.budget
    raw_dislikes = (
        overrides.disliked_terms if overrides.disliked_terms is not None else profile.disliked_terms
    )
    dislikes = [t.strip().lower() for t in raw_dislikes if t]
    adventurous = (
        overrides.adventurousness
        if overrides.adventurousness is not None
        else profile.adventurousness
    )
    adventurous = max(0, min(10, adventurous))

    score = 0.0
    reasons: list[str] = []

    # Color
    if profile.color != ColorPreference.any:
        if wine.color.value == profile.color.value:
            score += 3
            reasons.append("matches preferred color")
        else:
            score -= 1
            reasons.append("different color than usual")

    # Body
    if profile.body != BodyPreference.any:
        if wine.body.value == profile.body.value:
            score += 2
            reasons.append("body matches your preference")
        elif _is_adjacent_body(profile.body.value, wine.body.value):
            score += 1
            reasons.append("body is close to your preference")
        else:
            score -= 0.5

    # Sweetness
    if profile.sweetness != SweetnessPreference.any:
        if wine.sweetness.value == profile.sweetness.value:
            score += 2
            reasons.append("sweetness matches your preference")
        elif profile.sweetness == SweetnessPreference.off_dry and wine.sweetness.value in ("dry", "sweet"):
            score += 0.5
            reasons.append("sweetness is near your sweet spot")
        else:
            score -= 1

    # Acidity
    if profile.acidity != AcidityPreference.any:
        if wine.acidity.value == profile.acidity.value:
            score += 1.5
            reasons.append("acidity is in your comfort zone")
        else:
            score -= 0.5

    # Budget
    if wine.price is not None:
        if wine.price <= budget:
            score += 2
            reasons.append(
                f"within your budget ({_fmt_amount(wine.price)} ≤ {_fmt_amount(budget)})"
            )
        else:
            over_by = wine.price - budget
            score -= over_by / OVERAGE_DIVISOR
            reasons.append(f"above your budget by ~{_round_half_up(over_by)}")

    # Disliked terms, one penalty per matching term
    haystack = f"{wine.name} {wine.notes or ''}".lower()
    for term in dislikes:
        if term and term in haystack:
            score -= 3
            reasons.append(f"contains “{term}”, which you wanted to avoid")

    # Adventurousness bonus
    if adventurous >= ADVENTUROUS_THRESHOLD:
        if (
            profile.color != ColorPreference.any
            and wine.color.value != profile.color.value
            and wine.price
            and wine.price <= budget * ADVENTUROUS_BUDGET_FACTOR
        ):
            score += 2
            reasons.append("fun alternative to your usual style (you said you’re adventurous)")

    return ScoredWine(wine=wine, score=score, reasons=reasons)


def rank_wines(
    wines: Iterable[WineLineItem],
    profile: PreferenceProfile,
    overrides: ScoringOverrides | None = None,
    limit: int | None = None,
) -> list[ScoredWine]:
    """Score every wine and return them best first; ties keep input order."""
    scored = [score_wine(w, profile, overrides) for w in wines]
    # sorted() is stable, so equal scores stay in menu order.
    scored = sorted(scored, key=lambda s: s.score, reverse=True)
    if limit is not None:
        scored = scored[:limit]
    return scored
