from __future__ import annotations

from collections import Counter
from typing import Any

MENU_EVENT_TYPES = ("menu_recommendation",)
PERSONA_EVENT_TYPES = ("persona_recommendation",)


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    menu = [e for e in events if e["type"] in MENU_EVENT_TYPES]
    persona = [e for e in events if e["type"] in PERSONA_EVENT_TYPES]
    total = len(menu) + len(persona)

    # Average response time across both request kinds
    times = [e["response_time_ms"] for e in menu + persona if "response_time_ms" in e]
    avg_time = round(sum(times) / len(times), 1) if times else 0.0

    # Parsing health
    parsed = [e.get("parsed_count", 0) for e in menu]
    avg_parsed = round(sum(parsed) / len(parsed), 1) if parsed else 0.0
    empty = sum(1 for p in parsed if p == 0)

    # Top profiles
    profile_counter: Counter[str] = Counter()
    for e in menu:
        profile_counter[e.get("profile_id", "unknown")] += 1
    top_profiles = [{"id": n, "count": c} for n, c in profile_counter.most_common(10)]

    # Input sources (text vs image)
    source_counter: Counter[str] = Counter(e.get("source", "unknown") for e in menu)

    # LLM fallback usage on the persona path
    fallbacks = sum(1 for e in persona if e.get("rating_source") in ("heuristic", "mixed"))

    return {
        "total_requests": total,
        "menu_requests": len(menu),
        "persona_requests": len(persona),
        "avg_response_time_ms": avg_time,
        "avg_parsed_wines": avg_parsed,
        "empty_parse_rate": round(empty / len(menu) * 100, 1) if menu else 0.0,
        "top_profiles": top_profiles,
        "input_sources": dict(source_counter),
        "heuristic_fallbacks": fallbacks,
    }
