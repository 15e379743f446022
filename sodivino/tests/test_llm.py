import json
from unittest.mock import MagicMock, patch

from sodivino.llm.config import LLMConfig
from sodivino.llm.groq_client import _build_user_message, rate_wines_with_llm
from sodivino.personas.models import UserPreferences, WineItem, WinePersona

SAMPLE_PERSONAS = [
    WinePersona(name="Date Night", color="red", grapes=["Nebbiolo"], min_price=30, max_price=80),
]

SAMPLE_PREFERENCES = UserPreferences(favorite_grapes=["Pinot Noir"], risk_tolerance="adventurous")

SAMPLE_WINES = [
    WineItem(id="w1", name="Barolo", producer="Vietti", grape="Nebbiolo", price=75),
    WineItem(id="w2", name="Sancerre", grape="Sauvignon Blanc", price=48),
    WineItem(id="w3", name="Lambrusco", price=22),
]

ENABLED_CONFIG = LLMConfig(api_key="test-key", enabled=True)
DISABLED_CONFIG = LLMConfig(api_key="test-key", enabled=False)


def _mock_groq_response(content: str) -> MagicMock:
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    response = MagicMock()
    response.choices = [choice]
    return response


@patch("sodivino.llm.groq_client.Groq")
def test_rate_wines_returns_recommendations(mock_groq_cls):
    llm_response = json.dumps({
        "recommendations": [
            {"wineId": "w1", "score": 92, "reason": "Classic Nebbiolo for the date.", "tags": ["bold", "bold"]},
            {"wineId": "w2", "score": 61.4, "reason": "Bright and food friendly.", "tags": ["food pairing"]},
            {"wineId": "w3", "score": 55, "reason": "Fun and fizzy.", "tags": "not a list"},
        ]
    })
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(llm_response)

    result = rate_wines_with_llm(SAMPLE_PERSONAS, SAMPLE_PREFERENCES, SAMPLE_WINES, config=ENABLED_CONFIG)

    assert [r.wine_id for r in result] == ["w1", "w2", "w3"]
    assert result[0].score == 92
    assert result[0].tags == ["bold"]
    assert result[1].score == 61
    assert result[2].tags == []


@patch("sodivino.llm.groq_client.Groq")
def test_rate_wines_requests_json_mode(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(
        json.dumps({"recommendations": []})
    )

    rate_wines_with_llm(SAMPLE_PERSONAS, None, SAMPLE_WINES, config=ENABLED_CONFIG)

    mock_groq_cls.assert_called_once_with(api_key="test-key", timeout=ENABLED_CONFIG.timeout)
    kwargs = mock_groq_cls.return_value.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == ENABLED_CONFIG.model
    assert kwargs["response_format"] == {"type": "json_object"}
    assert kwargs["messages"][0]["role"] == "system"


@patch("sodivino.llm.groq_client.Groq")
def test_rate_wines_skips_invalid_entries_and_clamps(mock_groq_cls):
    llm_response = json.dumps({
        "recommendations": [
            {"wineId": "w1", "score": 150, "reason": "Too enthusiastic.", "tags": []},
            {"wineId": "w2", "score": "high", "reason": "Score is not a number.", "tags": []},
            {"wineId": "", "score": 50, "reason": "Missing id.", "tags": []},
            {"wineId": "w3", "score": 40, "reason": "   ", "tags": []},
            "garbage",
        ]
    })
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(llm_response)

    result = rate_wines_with_llm(SAMPLE_PERSONAS, None, SAMPLE_WINES, config=ENABLED_CONFIG)

    assert len(result) == 1
    assert result[0].wine_id == "w1"
    assert result[0].score == 100


@patch("sodivino.llm.groq_client.Groq")
def test_rate_wines_fallback_on_api_error(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.side_effect = Exception("API timeout")

    result = rate_wines_with_llm(SAMPLE_PERSONAS, SAMPLE_PREFERENCES, SAMPLE_WINES, config=ENABLED_CONFIG)

    assert result == []


@patch("sodivino.llm.groq_client.Groq")
def test_rate_wines_fallback_on_bad_json(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response("not valid json{{{")

    result = rate_wines_with_llm(SAMPLE_PERSONAS, SAMPLE_PREFERENCES, SAMPLE_WINES, config=ENABLED_CONFIG)

    assert result == []


@patch("sodivino.llm.groq_client.Groq")
def test_rate_wines_wrong_shape(mock_groq_cls):
    mock_groq_cls.return_value.chat.completions.create.return_value = _mock_groq_response(
        json.dumps({"wines": [{"wineId": "w1"}]})
    )

    result = rate_wines_with_llm(SAMPLE_PERSONAS, SAMPLE_PREFERENCES, SAMPLE_WINES, config=ENABLED_CONFIG)

    assert result == []


def test_rate_wines_disabled():
    result = rate_wines_with_llm(SAMPLE_PERSONAS, SAMPLE_PREFERENCES, SAMPLE_WINES, config=DISABLED_CONFIG)

    assert result == []


def test_rate_wines_without_api_key():
    result = rate_wines_with_llm(
        SAMPLE_PERSONAS, SAMPLE_PREFERENCES, SAMPLE_WINES, config=LLMConfig(api_key=""),
    )

    assert result == []


def test_rate_wines_empty_batch():
    result = rate_wines_with_llm(SAMPLE_PERSONAS, SAMPLE_PREFERENCES, [], config=ENABLED_CONFIG)

    assert result == []


def test_user_message_lists_personas_and_wines():
    message = _build_user_message(SAMPLE_PERSONAS, SAMPLE_PREFERENCES, SAMPLE_WINES)

    assert "Date Night: prefers red wines" in message
    assert "Price target: 30.0 - 80.0." in message
    assert "Favorites: Pinot Noir." in message
    assert "Risk tolerance: adventurous." in message
    assert '"id": "w1"' in message
    assert '"producer": "Vietti"' in message


def test_user_message_without_preferences():
    message = _build_user_message([], None, SAMPLE_WINES[:1])

    assert "No personas supplied." in message
    assert "No stored user preferences." in message
