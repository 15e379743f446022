from __future__ import annotations

from typing import Any

from .models import (
    DEFAULT_PROFILE_NAME,
    Adventurousness,
    BodyLevel,
    BudgetFocus,
    IntensityLevel,
    PersonaColor,
    QualityTier,
    RiskTolerance,
    SweetnessLevel,
    TasteProfile,
    TasteSweetness,
    UserPreferences,
    WinePersona,
)


def _dedupe_strings(values: list[Any]) -> list[str]:
    seen: dict[str, None] = {}
    for value in values:
        if value is None:
            continue
        text = str(value).strip()
        if text:
            seen.setdefault(text, None)
    return list(seen)


def normalize_taste_profile_input(data: dict[str, Any]) -> TasteProfile:
    """Fill questionnaire defaults and dedupe the tag lists."""

    def _list(key: str) -> list[str]:
        value = data.get(key)
        return _dedupe_strings(value) if isinstance(value, list) else []

    name = data.get("profile_name")
    notes = data.get("notes")
    return TasteProfile(
        id=str(data.get("id") or ""),
        profile_name=(name.strip() if isinstance(name, str) else "") or DEFAULT_PROFILE_NAME,
        preferred_styles=_list("preferred_styles"),
        sweetness_preference=data.get("sweetness_preference") or TasteSweetness.dry,
        adventurousness=data.get("adventurousness") or Adventurousness.balanced,
        budget_focus=data.get("budget_focus") or BudgetFocus.balanced,
        occasion_tags=_list("occasion_tags"),
        favorite_regions=_list("favorite_regions"),
        notes=notes if isinstance(notes, str) else None,
    )


def _style_to_color(style: str) -> PersonaColor:
    if "red" in style:
        return PersonaColor.red
    if "white" in style:
        return PersonaColor.white
    if "sparkling" in style or "bubbles" in style:
        return PersonaColor.sparkling
    if "rose" in style:
        return PersonaColor.rose
    return PersonaColor.any


def _style_to_body(style: str) -> BodyLevel:
    if "sparkling" in style or "white" in style:
        return BodyLevel.light
    if "red" in style:
        return BodyLevel.medium
    return BodyLevel.unknown


_SWEETNESS_MAP = {
    TasteSweetness.dry: SweetnessLevel.dry,
    TasteSweetness.off_dry: SweetnessLevel.off_dry,
    TasteSweetness.sweet: SweetnessLevel.sweet,
    TasteSweetness.flexible: SweetnessLevel.unknown,
}


def map_taste_profile_to_persona(profile: TasteProfile) -> WinePersona:
    style = profile.preferred_styles[0].lower() if profile.preferred_styles else "any"
    return WinePersona(
        id=f"taste-profile-{profile.id}",
        name=profile.profile_name,
        color=_style_to_color(style),
        grapes=[],
        body=_style_to_body(style),
        tannin=IntensityLevel.unknown,
        acidity=IntensityLevel.unknown,
        sweetness=_SWEETNESS_MAP[profile.sweetness_preference],
        food_pairing_tags=list(profile.occasion_tags),
        min_price=0 if profile.budget_focus == BudgetFocus.value else None,
        max_price=None,
        notes=profile.notes,
        is_default=True,
    )


def map_taste_profile_to_preferences(profile: TasteProfile) -> UserPreferences:
    if profile.budget_focus == BudgetFocus.premium:
        tier = QualityTier.special
    elif profile.budget_focus == BudgetFocus.value:
        tier = QualityTier.value
    else:
        tier = QualityTier.everyday

    if profile.adventurousness == Adventurousness.bold:
        risk = RiskTolerance.anything_goes
    elif profile.adventurousness == Adventurousness.classic:
        risk = RiskTolerance.safe
    else:
        risk = RiskTolerance.adventurous

    return UserPreferences(
        favorite_grapes=[],
        quality_tier=tier,
        usual_budget_min=0 if profile.budget_focus == BudgetFocus.value else None,
        usual_budget_max=None,
        risk_tolerance=risk,
    )
