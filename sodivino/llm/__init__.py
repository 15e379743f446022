"""
LLM integration layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Rate wine batches against personas and return scored explanations.
- Read wine-list photos with a vision model.
- Graceful fallback when the LLM is unavailable or returns invalid output.
"""
