from __future__ import annotations

import pytest
from pydantic import ValidationError

from sodivino.personas.models import (
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
from sodivino.personas.taste_profiles import (
    map_taste_profile_to_persona,
    map_taste_profile_to_preferences,
    normalize_taste_profile_input,
)


class TestNormalize:
    def test_defaults(self):
        profile = normalize_taste_profile_input({})
        assert profile.profile_name == "Primary profile"
        assert profile.preferred_styles == []
        assert profile.sweetness_preference == TasteSweetness.dry
        assert profile.adventurousness == Adventurousness.balanced
        assert profile.budget_focus == BudgetFocus.balanced
        assert profile.notes is None

    def test_dedupes_and_trims_lists(self):
        profile = normalize_taste_profile_input({
            "profile_name": "  Weeknight  ",
            "preferred_styles": ["Red", " Red ", "", None, "White"],
            "occasion_tags": "not a list",
        })
        assert profile.profile_name == "Weeknight"
        assert profile.preferred_styles == ["Red", "White"]
        assert profile.occasion_tags == []

    def test_blank_name_falls_back(self):
        assert normalize_taste_profile_input({"profile_name": "   "}).profile_name == "Primary profile"


class TestPersonaMapping:
    def test_red_style(self):
        persona = map_taste_profile_to_persona(TasteProfile(id="abc", preferred_styles=["Red blends"]))
        assert persona.id == "taste-profile-abc"
        assert persona.name == "Primary profile"
        assert persona.color == PersonaColor.red
        assert persona.body == BodyLevel.medium
        assert persona.tannin == IntensityLevel.unknown
        assert persona.is_default is True

    def test_sparkling_style(self):
        persona = map_taste_profile_to_persona(TasteProfile(preferred_styles=["Bubbles"]))
        assert persona.color == PersonaColor.sparkling
        assert persona.body == BodyLevel.unknown

        persona = map_taste_profile_to_persona(TasteProfile(preferred_styles=["Sparkling"]))
        assert persona.color == PersonaColor.sparkling
        assert persona.body == BodyLevel.light

    def test_rose_style(self):
        persona = map_taste_profile_to_persona(TasteProfile(preferred_styles=["Rose"]))
        assert persona.color == PersonaColor.rose

    def test_no_style(self):
        persona = map_taste_profile_to_persona(TasteProfile())
        assert persona.color == PersonaColor.any
        assert persona.body == BodyLevel.unknown

    def test_only_first_style_is_used(self):
        persona = map_taste_profile_to_persona(TasteProfile(preferred_styles=["White", "Red"]))
        assert persona.color == PersonaColor.white

    @pytest.mark.parametrize("taste,expected", [
        ("dry", SweetnessLevel.dry),
        ("off_dry", SweetnessLevel.off_dry),
        ("sweet", SweetnessLevel.sweet),
        ("flexible", SweetnessLevel.unknown),
    ])
    def test_sweetness(self, taste, expected):
        persona = map_taste_profile_to_persona(TasteProfile(sweetness_preference=taste))
        assert persona.sweetness == expected

    def test_value_budget_sets_min_price(self):
        value = map_taste_profile_to_persona(TasteProfile(budget_focus="value"))
        assert value.min_price == 0
        premium = map_taste_profile_to_persona(TasteProfile(budget_focus="premium"))
        assert premium.min_price is None

    def test_occasions_become_food_tags(self):
        persona = map_taste_profile_to_persona(TasteProfile(occasion_tags=["pizza", "date night"]))
        assert persona.food_pairing_tags == ["pizza", "date night"]


class TestPreferenceMapping:
    @pytest.mark.parametrize("adventurousness,expected", [
        ("classic", RiskTolerance.safe),
        ("balanced", RiskTolerance.adventurous),
        ("bold", RiskTolerance.anything_goes),
    ])
    def test_risk_tolerance(self, adventurousness, expected):
        prefs = map_taste_profile_to_preferences(TasteProfile(adventurousness=adventurousness))
        assert prefs.risk_tolerance == expected

    @pytest.mark.parametrize("focus,expected", [
        ("value", QualityTier.value),
        ("balanced", QualityTier.everyday),
        ("premium", QualityTier.special),
    ])
    def test_quality_tier(self, focus, expected):
        prefs = map_taste_profile_to_preferences(TasteProfile(budget_focus=focus))
        assert prefs.quality_tier == expected

    def test_value_budget_floor(self):
        assert map_taste_profile_to_preferences(TasteProfile(budget_focus="value")).usual_budget_min == 0
        assert map_taste_profile_to_preferences(TasteProfile()).usual_budget_min is None


class TestPersonaValidation:
    def test_name_required(self):
        with pytest.raises(ValidationError):
            WinePersona(name="   ", color="red")

    def test_lenient_fields(self):
        persona = WinePersona(
            name=" Date Night ",
            color="red",
            grapes="Nebbiolo, Sangiovese,",
            body="chewy",
            sweetness=None,
            min_price="",
            max_price=40,
        )
        assert persona.name == "Date Night"
        assert persona.grapes == ["Nebbiolo", "Sangiovese"]
        assert persona.body == BodyLevel.unknown
        assert persona.sweetness == SweetnessLevel.unknown
        assert persona.min_price is None
        assert persona.max_price == 40


class TestLenientDefaults:
    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_blank_profile_name(self, name):
        profile = TasteProfile(profile_name=name)
        assert profile.profile_name == "Primary profile"
        assert map_taste_profile_to_persona(profile).name == "Primary profile"

    def test_profile_name_is_trimmed(self):
        assert TasteProfile(profile_name="  Weeknight ").profile_name == "Weeknight"

    def test_unknown_preference_levels_fall_back(self):
        prefs = UserPreferences(quality_tier="luxury", risk_tolerance="yolo")
        assert prefs.quality_tier == QualityTier.value
        assert prefs.risk_tolerance == RiskTolerance.safe

    def test_known_preference_levels_kept(self):
        prefs = UserPreferences(quality_tier="special", risk_tolerance="anything_goes")
        assert prefs.quality_tier == QualityTier.special
        assert prefs.risk_tolerance == RiskTolerance.anything_goes
