from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class LLMConfig:
    api_key: str = os.getenv("GROQ_API_KEY", "")
    model: str = os.getenv("SODIVINO_RATING_MODEL", "llama-3.3-70b-versatile")
    vision_model: str = os.getenv(
        "SODIVINO_VISION_MODEL", "meta-llama/llama-4-scout-17b-16e-instruct"
    )
    rating_temperature: float = 0.3
    # Transcription should be literal
    vision_temperature: float = 0.0
    timeout: float = 30.0
    max_tokens: int = 2048
    enabled: bool = os.getenv("SODIVINO_LLM_ENABLED", "true").lower() not in ("0", "false", "no")


DEFAULT_LLM_CONFIG = LLMConfig()
