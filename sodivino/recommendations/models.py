from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator


class WineColor(str, Enum):
    red = "red"
    white = "white"
    rose = "rosé"
    sparkling = "sparkling"
    unknown = "unknown"


class Body(str, Enum):
    light = "light"
    medium = "medium"
    full = "full"


class Sweetness(str, Enum):
    dry = "dry"
    off_dry = "off-dry"
    sweet = "sweet"


class Acidity(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


# Preference-side enums carry the "any" wildcard on top of the wine values.


class ColorPreference(str, Enum):
    red = "red"
    white = "white"
    rose = "rosé"
    sparkling = "sparkling"
    any = "any"


class BodyPreference(str, Enum):
    light = "light"
    medium = "medium"
    full = "full"
    any = "any"


class SweetnessPreference(str, Enum):
    dry = "dry"
    off_dry = "off-dry"
    sweet = "sweet"
    any = "any"


class AcidityPreference(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    any = "any"


class WineLineItem(BaseModel):
    name: str = Field(..., min_length=1)
    color: WineColor = WineColor.unknown
    body: Body = Body.medium
    sweetness: Sweetness = Sweetness.dry
    acidity: Acidity = Acidity.medium
    price: float | None = Field(default=None, ge=0.0)
    notes: str = ""
    producer: str | None = None
    region: str | None = None
    vintage: str | None = None


class PreferenceProfile(BaseModel):
    id: str = ""
    label: str = ""
    description: str = ""
    color: ColorPreference = ColorPreference.any
    body: BodyPreference = BodyPreference.any
    sweetness: SweetnessPreference = SweetnessPreference.any
    acidity: AcidityPreference = AcidityPreference.any
    budget: float = Field(default=0.0, ge=0.0)
    disliked_terms: list[str] = Field(default_factory=list)
    adventurousness: int = Field(default=3, ge=0, le=10)

    @field_validator("disliked_terms")
    @classmethod
    def _lowercase_terms(cls, value: list[str]) -> list[str]:
        return [t.strip().lower() for t in value if t and t.strip()]


class ScoringOverrides(BaseModel):
    budget: float | None = Field(default=None, ge=0.0)
    disliked_terms: list[str] | None = None
    adventurousness: int | None = None


class ScoredWine(BaseModel):
    wine: WineLineItem
    score: float
    reasons: list[str] = Field(default_factory=list)


# ── Request / response bodies ────────────────────────────────────────────


class ParseMenuRequest(BaseModel):
    text: str


class ParseMenuResponse(BaseModel):
    wines: list[WineLineItem]
    parsed_count: int


class TextRecommendationRequest(BaseModel):
    text: str
    profile_id: str = Field(..., min_length=1)
    budget: float | None = Field(default=None, ge=0.0)
    dislikes: list[str] = Field(default_factory=list)
    adventurous: int | None = Field(default=None, ge=0, le=10)
    limit: int = Field(default=3, ge=1, le=50)


class MenuRecommendationResponse(BaseModel):
    profile: PreferenceProfile
    parsed_count: int
    top: list[ScoredWine]
    text_preview: str | None = None
    message: str | None = None
