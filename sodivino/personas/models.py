from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator


class PersonaColor(str, Enum):
    red = "red"
    white = "white"
    rose = "rose"
    orange = "orange"
    sparkling = "sparkling"
    any = "any"


class BodyLevel(str, Enum):
    light = "light"
    medium = "medium"
    full = "full"
    unknown = "unknown"


class IntensityLevel(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    unknown = "unknown"


class SweetnessLevel(str, Enum):
    dry = "dry"
    off_dry = "off_dry"
    sweet = "sweet"
    unknown = "unknown"


class QualityTier(str, Enum):
    value = "value"
    everyday = "everyday"
    special = "special"


class RiskTolerance(str, Enum):
    safe = "safe"
    adventurous = "adventurous"
    anything_goes = "anything_goes"


class TasteSweetness(str, Enum):
    dry = "dry"
    off_dry = "off_dry"
    sweet = "sweet"
    flexible = "flexible"


class Adventurousness(str, Enum):
    classic = "classic"
    balanced = "balanced"
    bold = "bold"


class BudgetFocus(str, Enum):
    value = "value"
    balanced = "balanced"
    premium = "premium"


DEFAULT_PROFILE_NAME = "Primary profile"


def _string_list(value: Any) -> list[str]:
    """Accept a list of strings or a comma-separated string."""
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    if isinstance(value, list):
        return [v.strip() for v in value if isinstance(v, str) and v.strip()]
    return []


def _nullable_number(value: Any) -> Any:
    if value is None or value == "":
        return None
    return value


def _enum_or_default(enum_cls: type[Enum], value: Any, default: Enum) -> Any:
    try:
        return enum_cls(value)
    except (TypeError, ValueError):
        return default


def _level_or_unknown(enum_cls: type[Enum], value: Any) -> Any:
    return _enum_or_default(enum_cls, value, enum_cls("unknown"))


class WinePersona(BaseModel):
    id: str = ""
    name: str = Field(..., min_length=1)
    color: PersonaColor
    grapes: list[str] = Field(default_factory=list)
    body: BodyLevel = BodyLevel.unknown
    tannin: IntensityLevel = IntensityLevel.unknown
    acidity: IntensityLevel = IntensityLevel.unknown
    sweetness: SweetnessLevel = SweetnessLevel.unknown
    food_pairing_tags: list[str] = Field(default_factory=list)
    min_price: float | None = None
    max_price: float | None = None
    notes: str | None = None
    is_default: bool = False

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("grapes", "food_pairing_tags", mode="before")
    @classmethod
    def _split_lists(cls, value: Any) -> list[str]:
        return _string_list(value)

    @field_validator("min_price", "max_price", mode="before")
    @classmethod
    def _blank_prices(cls, value: Any) -> Any:
        return _nullable_number(value)

    @field_validator("body", mode="before")
    @classmethod
    def _body_level(cls, value: Any) -> Any:
        return _level_or_unknown(BodyLevel, value)

    @field_validator("tannin", "acidity", mode="before")
    @classmethod
    def _intensity_level(cls, value: Any) -> Any:
        return _level_or_unknown(IntensityLevel, value)

    @field_validator("sweetness", mode="before")
    @classmethod
    def _sweetness_level(cls, value: Any) -> Any:
        return _level_or_unknown(SweetnessLevel, value)


class UserPreferences(BaseModel):
    favorite_grapes: list[str] = Field(default_factory=list)
    quality_tier: QualityTier = QualityTier.value
    usual_budget_min: float | None = None
    usual_budget_max: float | None = None
    risk_tolerance: RiskTolerance = RiskTolerance.safe

    @field_validator("favorite_grapes", mode="before")
    @classmethod
    def _split_grapes(cls, value: Any) -> list[str]:
        return _string_list(value)

    @field_validator("usual_budget_min", "usual_budget_max", mode="before")
    @classmethod
    def _blank_budget(cls, value: Any) -> Any:
        return _nullable_number(value)

    @field_validator("quality_tier", mode="before")
    @classmethod
    def _quality_tier(cls, value: Any) -> Any:
        return _enum_or_default(QualityTier, value, QualityTier.value)

    @field_validator("risk_tolerance", mode="before")
    @classmethod
    def _risk_tolerance(cls, value: Any) -> Any:
        return _enum_or_default(RiskTolerance, value, RiskTolerance.safe)


class TasteProfile(BaseModel):
    id: str = ""
    profile_name: str = DEFAULT_PROFILE_NAME
    preferred_styles: list[str] = Field(default_factory=list)
    sweetness_preference: TasteSweetness = TasteSweetness.dry
    adventurousness: Adventurousness = Adventurousness.balanced
    budget_focus: BudgetFocus = BudgetFocus.balanced
    occasion_tags: list[str] = Field(default_factory=list)
    favorite_regions: list[str] = Field(default_factory=list)
    notes: str | None = None

    @field_validator("profile_name", mode="before")
    @classmethod
    def _default_name(cls, value: Any) -> Any:
        if value is None:
            return DEFAULT_PROFILE_NAME
        if isinstance(value, str):
            return value.strip() or DEFAULT_PROFILE_NAME
        return value


class WineItem(BaseModel):
    """A wine as handed to the persona rater (structured menu output)."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    producer: str | None = None
    region: str | None = None
    country: str | None = None
    grape: str | None = None
    vintage: str | None = None
    price: float | None = None
    currency: str | None = None
    by_glass_or_bottle: str | None = None
    section: str | None = None
    raw_text: str = ""


class WineRecommendation(BaseModel):
    wine_id: str
    score: float
    reason: str
    tags: list[str] = Field(default_factory=list)


class PersonaRecommendationRequest(BaseModel):
    personas: list[WinePersona] = Field(default_factory=list)
    preferences: UserPreferences | None = None
    taste_profile: TasteProfile | None = None
    wines: list[WineItem] = Field(..., min_length=1)

    @model_validator(mode="after")
    def _require_personas_or_taste_profile(self) -> "PersonaRecommendationRequest":
        if not self.personas and self.taste_profile is None:
            raise ValueError("Provide either personas or a taste_profile")
        return self


class PersonaRecommendationResponse(BaseModel):
    recommendations: list[WineRecommendation]
    source: str
