from __future__ import annotations

import base64
import json
import logging
import re
from typing import Any

from groq import Groq
from pydantic import BaseModel, Field

from ..menu.parser import classify_acidity, classify_body, classify_color, classify_sweetness
from ..recommendations.models import Acidity, Body, Sweetness, WineColor, WineLineItem
from .config import DEFAULT_LLM_CONFIG, LLMConfig

logger = logging.getLogger(__name__)

VISION_PROMPT = (
    "You are a sommelier assistant reading a photo of a restaurant wine list. "
    "Return ONLY valid JSON in this exact format:\n"
    '{"raw_text": "<the list transcribed line by line, one wine per line, '
    'price at the end of the line>", '
    '"wines": [{"name": "", "producer": "", "region": "", "vintage": "", '
    '"color": "red|white|rosé|sparkling|unknown", "body": "light|medium|full", '
    '"sweetness": "dry|off-dry|sweet", "acidity": "low|medium|high", '
    '"price": 0, "notes": ""}]}\n'
    "Use null for anything you cannot read. Do not invent wines."
)

_NON_NUMERIC_RE = re.compile(r"[^0-9.\-]")


class MenuExtraction(BaseModel):
    raw_text: str = ""
    wines: list[WineLineItem] = Field(default_factory=list)


def _text(record: dict[str, Any], key: str) -> str | None:
    value = record.get(key)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _price(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if value >= 0 else None
    if isinstance(value, str):
        cleaned = _NON_NUMERIC_RE.sub("", value)
        try:
            parsed = float(cleaned)
        except ValueError:
            return None
        return parsed if parsed >= 0 else None
    return None


def _enum_or_classified(enum_cls, value: str | None, fallback):
    if value:
        try:
            return enum_cls(value.lower())
        except ValueError:
            pass
    return fallback


def coerce_wine(record: Any) -> WineLineItem | None:
    """
    Validate one structured wine from the vision model.

    Enum fields the model got wrong are re-derived from the name with the
    menu keyword classifiers. Records without a name are dropped.
    """
    if not isinstance(record, dict):
        return None
    name = _text(record, "name")
    if not name:
        return None

    return WineLineItem(
        name=name,
        color=_enum_or_classified(WineColor, _text(record, "color"), classify_color(name)),
        body=_enum_or_classified(Body, _text(record, "body"), classify_body(name)),
        sweetness=_enum_or_classified(Sweetness, _text(record, "sweetness"), classify_sweetness(name)),
        acidity=_enum_or_classified(Acidity, _text(record, "acidity"), classify_acidity(name)),
        price=_price(record.get("price")),
        notes=_text(record, "notes") or "",
        producer=_text(record, "producer"),
        region=_text(record, "region"),
        vintage=_text(record, "vintage"),
    )


def extract_menu(
    image_bytes: bytes,
    content_type: str = "image/jpeg",
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> MenuExtraction:
    """
    Read a wine-list photo with a Groq vision model.

    Returns an empty extraction on any failure so the caller can report
    "nothing parsed" instead of erroring.
    """
    if not config.enabled or not config.api_key or not image_bytes:
        return MenuExtraction()

    try:
        encoded = base64.b64encode(image_bytes).decode("ascii")
        client = Groq(api_key=config.api_key, timeout=config.timeout)
        response = client.chat.completions.create(
            model=config.vision_model,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": VISION_PROMPT},
                        {
                            "type": "image_url",
                            "image_url": {"url": f"data:{content_type};base64,{encoded}"},
                        },
                    ],
                },
            ],
            max_tokens=config.max_tokens,
            temperature=config.vision_temperature,
            response_format={"type": "json_object"},
        )

        content = response.choices[0].message.content or "{}"
        parsed = json.loads(content)
        if not isinstance(parsed, dict):
            return MenuExtraction()

        raw_text = parsed.get("raw_text")
        records = parsed.get("wines")
        wines: list[WineLineItem] = []
        if isinstance(records, list):
            for record in records:
                wine = coerce_wine(record)
                if wine is not None:
                    wines.append(wine)

        return MenuExtraction(
            raw_text=raw_text if isinstance(raw_text, str) else "",
            wines=wines,
        )

    except Exception:
        logger.warning("Vision menu extraction failed", exc_info=True)
        return MenuExtraction()
