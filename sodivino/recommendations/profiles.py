from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from .config import DEFAULT_RECOMMENDATION_CONFIG
from .models import PreferenceProfile

logger = logging.getLogger(__name__)

_STYLE_COLUMNS = ["color", "body", "sweetness", "acidity"]


def _load(path: Path) -> list[PreferenceProfile]:
    df = pd.read_csv(path, dtype={"id": str})

    # Blank style cells mean "no preference"
    for col in _STYLE_COLUMNS:
        df[col] = df[col].fillna("any").astype(str).str.strip().str.lower()
        df.loc[df[col] == "", col] = "any"
        # Spreadsheets tend to drop the accent
        if col == "color":
            df.loc[df[col] == "rose", col] = "rosé"

    df["description"] = df["description"].fillna("")
    df["budget"] = pd.to_numeric(df["budget"], errors="coerce").fillna(0.0)

    return [PreferenceProfile(**row) for row in df.to_dict(orient="records")]


class ProfileCatalog:
    """Built-in preference profiles, loaded once per process."""

    def __init__(self, profiles: list[PreferenceProfile]) -> None:
        self._profiles = {p.id: p for p in profiles}

    @classmethod
    def from_csv(cls, path: Path = DEFAULT_RECOMMENDATION_CONFIG.profiles_path) -> "ProfileCatalog":
        profiles = _load(path)
        logger.info("Loaded %d wine profiles from %s", len(profiles), path)
        return cls(profiles)

    def list_profiles(self) -> list[PreferenceProfile]:
        return list(self._profiles.values())

    def get(self, profile_id: str) -> PreferenceProfile | None:
        return self._profiles.get(profile_id)

    def __len__(self) -> int:
        return len(self._profiles)
