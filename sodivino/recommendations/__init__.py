"""
Wine recommendation engine.

Responsibilities:
- Model parsed wines, preference profiles and scored results.
- Score wines against a preference profile with deterministic heuristics.
- Rate wine batches against personas (LLM first, heuristic fallback).
- Serve the built-in preference profile catalog.
"""
