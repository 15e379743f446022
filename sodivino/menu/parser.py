from __future__ import annotations

import re

from ..recommendations.models import Acidity, Body, Sweetness, WineColor, WineLineItem

# Trailing price: one or two digits, optional 1-2 digit fraction, at end of line.
# Never starts inside a longer number, so "120" is not read as 20.
_PRICE_RE = re.compile(r"(?<![\d.])(\d{1,2}(?:\.\d{1,2})?)\s*$")

# Ordered keyword rules; the first rule with a matching keyword wins.
_COLOR_RULES: list[tuple[WineColor, tuple[str, ...]]] = [
    (WineColor.rose, ("rosé", "rose")),
    (WineColor.sparkling, ("sparkling", "prosecco", "champagne", "cava")),
    (WineColor.white, ("white", "bianco", "blanc")),
    (WineColor.red, ("red", "rosso", "rouge")),
]

_BODY_RULES: list[tuple[Body, tuple[str, ...]]] = [
    (Body.full, ("full",)),
    (Body.light, ("light",)),
]

_SWEETNESS_RULES: list[tuple[Sweetness, tuple[str, ...]]] = [
    (Sweetness.sweet, ("sweet", "dolce")),
    (Sweetness.off_dry, ("off-dry", "demi-sec")),
]

_ACIDITY_RULES: list[tuple[Acidity, tuple[str, ...]]] = [
    (Acidity.high, ("crisp", "fresh", "high acidity")),
]


def _first_hit(text: str, rules, default):
    lower = text.lower()
    for value, keywords in rules:
        if any(k in lower for k in keywords):
            return value
    return default


def classify_color(text: str) -> WineColor:
    return _first_hit(text, _COLOR_RULES, WineColor.unknown)


def classify_body(text: str) -> Body:
    return _first_hit(text, _BODY_RULES, Body.medium)


def classify_sweetness(text: str) -> Sweetness:
    return _first_hit(text, _SWEETNESS_RULES, Sweetness.dry)


def classify_acidity(text: str) -> Acidity:
    return _first_hit(text, _ACIDITY_RULES, Acidity.medium)


def parse_menu_text(text: str) -> list[WineLineItem]:
    """
    Turn raw wine-list text into priced wine line items.

    Only lines ending in a price are kept; everything else (section
    headers, separators, unpriced text) is dropped. Best effort: never
    raises, malformed input just yields fewer items.
    """
    lines = [line.strip() for line in (text or "").split("\n")]

    wines: list[WineLineItem] = []
    for line in lines:
        if not line:
            continue
        match = _PRICE_RE.search(line)
        if not match:
            continue

        name = line[: match.start()].strip()
        if not name:
            continue

        wines.append(WineLineItem(
            name=name,
            color=classify_color(name),
            body=classify_body(name),
            sweetness=classify_sweetness(name),
            acidity=classify_acidity(name),
            price=float(match.group(1)),
            notes="",
        ))

    return wines
