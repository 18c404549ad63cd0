"""
Gemini client: request shape, response handling and re-validation of parsed entries
"""

import json
from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest
import requests

from callpace.aggregator import DailySummary
from callpace.ai_client import (
    AIServiceError,
    GeminiClient,
    build_coaching_prompt,
    build_parse_prompt,
    strip_code_fences,
)
from callpace.models import DaySettings, ProductGoal


def _response(text=None, status=200, payload=None):
    response = MagicMock()
    response.status_code = status
    response.text = "error body"
    response.json.return_value = payload if payload is not None else {
        "candidates": [{"content": {"parts": [{"text": text}]}}]
    }
    return response


@pytest.fixture
def client():
    return GeminiClient(api_key="test-key", model="gemini-2.5-flash", timeout=5)


class TestGenerate:

    @patch('callpace.ai_client.requests.post')
    def test_request_shape(self, mock_post, client):
        mock_post.return_value = _response("hello")

        assert client.generate("prompt") == "hello"

        args, kwargs = mock_post.call_args
        assert args[0].endswith("/models/gemini-2.5-flash:generateContent")
        assert kwargs["headers"]["x-goog-api-key"] == "test-key"
        assert kwargs["json"]["contents"][0]["parts"][0]["text"] == "prompt"
        assert kwargs["timeout"] == 5

    @patch('callpace.ai_client.requests.post')
    def test_http_error(self, mock_post, client):
        mock_post.return_value = _response(status=500)
        with pytest.raises(AIServiceError):
            client.generate("prompt")

    @patch('callpace.ai_client.requests.post')
    def test_unexpected_shape(self, mock_post, client):
        mock_post.return_value = _response(payload={"candidates": []})
        with pytest.raises(AIServiceError):
            client.generate("prompt")

    def test_missing_key(self):
        with pytest.raises(AIServiceError):
            GeminiClient(api_key="").generate("prompt")


class TestParseEntry:

    @patch('callpace.ai_client.requests.post')
    def test_fenced_json_is_parsed_and_normalised(self, mock_post, client):
        body = {"reportingTime": 14, "calls": 30, "memoAttempts": "25",
                "productSuccesses": {"A": 3, "Other": 9}, "activations": 1}
        mock_post.return_value = _response(f"```json\n{json.dumps(body)}\n```")

        entry = client.parse_entry("14시 콜 30 메모 25 A 3건 개통 1", ["A", "B"])

        assert entry.reporting_time == 14
        assert entry.calls == 30
        assert entry.memo_attempts == 25
        assert entry.product_successes == {"A": 3, "B": 0}
        assert entry.activations == 1

    @patch('callpace.ai_client.requests.post')
    def test_unrecognised_time_is_unselected(self, mock_post, client):
        mock_post.return_value = _response(json.dumps({"reportingTime": 20, "calls": 3}))
        assert client.parse_entry("text", ["A"]).reporting_time == 0

    @pytest.mark.parametrize("outcome", [
        _response("not json at all"),
        _response(json.dumps([1, 2, 3])),
        _response(status=429),
        requests.ConnectionError("offline"),
    ])
    def test_failures_return_none(self, outcome, client):
        with patch('callpace.ai_client.requests.post') as mock_post:
            if isinstance(outcome, Exception):
                mock_post.side_effect = outcome
            else:
                mock_post.return_value = outcome
            assert client.parse_entry("text", ["A"]) is None

    def test_blank_text_is_not_sent(self, client):
        with patch('callpace.ai_client.requests.post') as mock_post:
            assert client.parse_entry("   ", ["A"]) is None
            mock_post.assert_not_called()


class TestCoaching:

    @patch('callpace.ai_client.requests.post')
    def test_message(self, mock_post, client):
        mock_post.return_value = _response("  화이팅! 🚀  ")
        message = client.coaching("team1", DailySummary(), DaySettings(product_goals=[]))
        assert message == "화이팅! 🚀"

    @patch('callpace.ai_client.requests.post')
    def test_timeout_returns_none(self, mock_post, client):
        mock_post.side_effect = requests.Timeout("slow")
        assert client.coaching("team1", DailySummary(), DaySettings(product_goals=[])) is None


class TestPrompts:

    def test_parse_prompt_lists_products(self):
        prompt = build_parse_prompt("콜 10", ["A", "B"])
        assert 'Text: "콜 10"' in prompt
        assert "Available Product Names for matching: A, B." in prompt
        assert '"A": number' in prompt

    def test_coaching_prompt_context(self):
        settings = DaySettings(product_goals=[ProductGoal(id=1, name="A", goal=100)])
        summary = DailySummary(daily_goal=12.5, total_successes=4, predicted_successes=11.0, attempt_rate=88.0)
        prompt = build_coaching_prompt("team2", summary, settings, now=datetime(2025, 10, 10, 14, 0))
        assert "Team: 2팀" in prompt
        assert "Time Now: 14시" in prompt
        assert "Goal: 12.5 successes" in prompt
        assert "(Goal: 90%)" in prompt

    def test_strip_code_fences(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'


def test_health_reports_configuration():
    assert GeminiClient(api_key="", model="m").health() == {"configured": False, "model": "m"}


@patch.dict('os.environ', {"GEMINI_API_KEY": "from-env"})
def test_client_is_configured_only_from_settings():
    from callpace.config import Settings

    assert GeminiClient().is_configured is False

    client = GeminiClient.from_settings(Settings(gemini_api_key="key", gemini_model="m", ai_timeout=7))
    assert client.is_configured is True
    assert (client.model, client.timeout) == ("m", 7)
