from __future__ import annotations

import logging
import math
import time

from fastapi import APIRouter, Depends, FastAPI, File, Form, HTTPException, Request, UploadFile

from .analytics.aggregator import compute_analytics
from .analytics.store import EventStore
from .llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from .llm.vision import extract_menu
from .menu.parser import parse_menu_text
from .personas.models import PersonaRecommendationRequest, PersonaRecommendationResponse
from .recommendations.cache import RatingCache
from .recommendations.config import DEFAULT_RECOMMENDATION_CONFIG, RecommendationConfig
from .recommendations.models import (
    MenuRecommendationResponse,
    ParseMenuRequest,
    ParseMenuResponse,
    PreferenceProfile,
    ScoringOverrides,
    TextRecommendationRequest,
    WineLineItem,
)
from .recommendations.profiles import ProfileCatalog
from .recommendations.rating import recommend_for_personas
from .recommendations.scoring import rank_wines

logger = logging.getLogger(__name__)

NO_WINES_MESSAGE = (
    "The menu was read but no wines were parsed. "
    "Only lines ending in a price are recognised."
)


router = APIRouter()


# ── Dependencies ─────────────────────────────────────────────────────────


def get_catalog(request: Request) -> ProfileCatalog:
    return request.app.state.catalog


def get_llm_config(request: Request) -> LLMConfig:
    return request.app.state.llm_config


def get_config(request: Request) -> RecommendationConfig:
    return request.app.state.config


def get_rating_cache(request: Request) -> RatingCache:
    return request.app.state.rating_cache


def get_events(request: Request) -> EventStore:
    return request.app.state.events


# ── Helpers ──────────────────────────────────────────────────────────────


def _require_profile(catalog: ProfileCatalog, profile_id: str) -> PreferenceProfile:
    profile = catalog.get(profile_id)
    if profile is None:
        raise HTTPException(status_code=400, detail="Unknown profileId")
    return profile


def _split_dislikes(raw: str) -> list[str]:
    return [w.strip() for w in raw.split(",") if w.strip()]


def _parse_budget(raw: str | None) -> float | None:
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid budget")
    if not math.isfinite(value) or value < 0:
        raise HTTPException(status_code=400, detail="Invalid budget")
    return value


def _parse_adventurous(raw: str | None, default: int) -> int:
    try:
        value = int(float(raw)) if raw else 0
    except (ValueError, OverflowError):
        value = 0
    return value or default


def _menu_response(
    wines: list[WineLineItem],
    profile: PreferenceProfile,
    overrides: ScoringOverrides,
    limit: int,
    text: str,
    source: str,
    started: float,
    events: EventStore,
    config: RecommendationConfig,
) -> MenuRecommendationResponse:
    top = rank_wines(wines, profile, overrides, limit=limit)

    elapsed_ms = round((time.time() - started) * 1000, 1)
    events.record("menu_recommendation", {
        "source": source,
        "profile_id": profile.id,
        "parsed_count": len(wines),
        "results_returned": len(top),
        "response_time_ms": elapsed_ms,
    })
    logger.info("Parsed %d wines from %s menu for profile %s", len(wines), source, profile.id)

    if not wines:
        return MenuRecommendationResponse(
            profile=profile,
            parsed_count=0,
            top=[],
            text_preview=text[: config.text_preview_chars],
            message=NO_WINES_MESSAGE,
        )

    return MenuRecommendationResponse(profile=profile, parsed_count=len(wines), top=top)


# ── Endpoints ────────────────────────────────────────────────────────────


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/profiles", response_model=list[PreferenceProfile])
def list_profiles(catalog: ProfileCatalog = Depends(get_catalog)) -> list[PreferenceProfile]:
    return catalog.list_profiles()


@router.get("/profiles/{profile_id}", response_model=PreferenceProfile)
def get_profile(
    profile_id: str,
    catalog: ProfileCatalog = Depends(get_catalog),
) -> PreferenceProfile:
    profile = catalog.get(profile_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


@router.post("/parse-menu", response_model=ParseMenuResponse)
def parse_menu(body: ParseMenuRequest) -> ParseMenuResponse:
    wines = parse_menu_text(body.text)
    return ParseMenuResponse(wines=wines, parsed_count=len(wines))


@router.post("/recommend-from-text", response_model=MenuRecommendationResponse)
def recommend_from_text(
    body: TextRecommendationRequest,
    catalog: ProfileCatalog = Depends(get_catalog),
    events: EventStore = Depends(get_events),
    config: RecommendationConfig = Depends(get_config),
) -> MenuRecommendationResponse:
    started = time.time()
    profile = _require_profile(catalog, body.profile_id)
    overrides = ScoringOverrides(
        budget=body.budget,
        disliked_terms=body.dislikes,
        adventurousness=body.adventurous or config.default_adventurousness,
    )
    wines = parse_menu_text(body.text)
    return _menu_response(
        wines, profile, overrides, body.limit, body.text, "text", started, events, config,
    )


@router.post("/recommend-from-image", response_model=MenuRecommendationResponse)
def recommend_from_image(
    image: UploadFile | None = File(None),
    profile_id: str = Form(""),
    # Browser form posts the camelCase name
    profile_id_camel: str = Form("", alias="profileId"),
    budget: str | None = Form(None),
    dislikes: str = Form(""),
    adventurous: str | None = Form(None),
    limit: int = Form(DEFAULT_RECOMMENDATION_CONFIG.top_n, ge=1, le=50),
    catalog: ProfileCatalog = Depends(get_catalog),
    events: EventStore = Depends(get_events),
    llm_config: LLMConfig = Depends(get_llm_config),
    config: RecommendationConfig = Depends(get_config),
) -> MenuRecommendationResponse:
    started = time.time()
    if image is None:
        raise HTTPException(status_code=400, detail="No image uploaded")
    content_type = image.content_type or ""
    if not content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="Upload must be an image")

    profile = _require_profile(catalog, profile_id or profile_id_camel)
    overrides = ScoringOverrides(
        budget=_parse_budget(budget),
        disliked_terms=_split_dislikes(dislikes),
        adventurousness=_parse_adventurous(adventurous, config.default_adventurousness),
    )

    extraction = extract_menu(image.file.read(), content_type, config=llm_config)

    # Structured output first; fall back to parsing the transcription
    wines = extraction.wines or parse_menu_text(extraction.raw_text)
    return _menu_response(
        wines, profile, overrides, limit, extraction.raw_text, "image", started, events, config,
    )


@router.post("/recommendations", response_model=PersonaRecommendationResponse)
def recommendations(
    body: PersonaRecommendationRequest,
    events: EventStore = Depends(get_events),
    cache: RatingCache = Depends(get_rating_cache),
    llm_config: LLMConfig = Depends(get_llm_config),
    config: RecommendationConfig = Depends(get_config),
) -> PersonaRecommendationResponse:
    started = time.time()
    response = recommend_for_personas(body, cache=cache, llm_config=llm_config, config=config)

    elapsed_ms = round((time.time() - started) * 1000, 1)
    events.record("persona_recommendation", {
        "wine_count": len(body.wines),
        "rating_source": response.source,
        "results_returned": len(response.recommendations),
        "response_time_ms": elapsed_ms,
    })
    return response


@router.get("/analytics")
def analytics(events: EventStore = Depends(get_events)) -> dict:
    return compute_analytics(events.events())


@router.get("/cache/stats")
def cache_stats(cache: RatingCache = Depends(get_rating_cache)) -> dict:
    return cache.stats()


def create_app(
    catalog: ProfileCatalog | None = None,
    llm_config: LLMConfig = DEFAULT_LLM_CONFIG,
    config: RecommendationConfig = DEFAULT_RECOMMENDATION_CONFIG,
) -> FastAPI:
    app = FastAPI(title="So Divino Wine Recommendation API", version="1.0.0")

    # One instance of each per process, handed to handlers via dependencies
    app.state.catalog = catalog or ProfileCatalog.from_csv(config.profiles_path)
    app.state.llm_config = llm_config
    app.state.config = config
    app.state.rating_cache = RatingCache(ttl=config.cache_ttl_seconds)
    app.state.events = EventStore()

    app.include_router(router)
    return app


app = create_app()
