"""
Gemini text service client
Free-text entry parsing and short coaching messages
https://ai.google.dev/api/generate-content
"""

import json
import logging
import textwrap
from datetime import datetime
from typing import Any, Dict, List, Optional

import requests

from .aggregator import DailySummary
from .models import CheckpointEntry, DaySettings

logger = logging.getLogger(__name__)

DEFAULT_MODEL = 'gemini-2.5-flash'
TEAM_LABELS = {'team1': '1팀', 'team2': '2팀'}


class AIServiceError(Exception):
    """Raised inside the client when the service returns no usable text"""


def strip_code_fences(text: str) -> str:
    return text.replace('```json', '').replace('```', '').strip()


def build_parse_prompt(text: str, product_names: List[str]) -> str:
    first_product = product_names[0] if product_names else 'product'
    return textwrap.dedent(f"""
        Extract call center metrics from the following text and return ONLY a JSON object.

        Text: "{{text}}"

        Required JSON Format:
        {{
            "reportingTime": number (extract 10, 11, 12, 13, 14, 15, 16, 17 or 18 from context),
            "calls": number,
            "memoAttempts": number (may be called "메모", "시도"),
            "managerAttempts": number (may be called "확인", "관리자"),
            "sttAttempts": number (may be called "STT", "감지"),
            "activations": number (may be called "개통"),
            "productSuccesses": {{
                "{first_product}": number,
                ... other products matched from text
            }}
        }}

        Available Product Names for matching: {', '.join(product_names)}.
        If a value is missing, use 0.
        Return ONLY the JSON.
    """).strip().replace('{text}', text)


def build_coaching_prompt(team: str, summary: DailySummary, settings: DaySettings,
                          now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    products = '\n'.join(
        f"- {name}: {product.total_successes} successes (Goal: {product.daily_goal:.1f})"
        for name, product in summary.product_summaries.items()
    )
    return textwrap.dedent(f"""
        You are an expert sales performance coach for a call center team.
        Analyze the following daily performance data and provide a concise, motivating, and strategic 2-sentence advice in Korean.

        Context:
        - Team: {TEAM_LABELS.get(team, team)}
        - Time Now: {now.hour}시
        - Goal: {summary.daily_goal:.1f} successes
        - Current Successes: {summary.total_successes}
        - Predicted Successes: {summary.predicted_successes:.1f}
        - Mention Rate: {summary.attempt_rate:.1f}% (Goal: {settings.core_goals.attempt_rate}%)
        - Activation Rate: {summary.activation_rate:.1f}%

        Product Breakdown:
        {{products}}

        If behind goal, suggest specific actions (e.g., focus on X product, improve mention rate).
        If ahead, encourage consistency.
        Keep it under 150 characters. Use emojis.
    """).strip().replace('{products}', products)


class GeminiClient:
    """Minimal client for the Gemini generateContent endpoint"""

    def __init__(self, api_key: str = '', model: str = DEFAULT_MODEL, timeout: int = 30):
        self.api_key = api_key
        self.model = model or DEFAULT_MODEL
        self.timeout = timeout
        self.base_url = "https://generativelanguage.googleapis.com/v1beta"

    @classmethod
    def from_settings(cls, settings) -> "GeminiClient":
        """Client configured from a config.Settings instance"""
        return cls(settings.gemini_api_key, settings.gemini_model, settings.ai_timeout)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def generate(self, prompt: str) -> str:
        """
        Send a single-turn prompt and return the response text

        Raises:
            AIServiceError: on HTTP errors or an empty response
        """
        if not self.is_configured:
            raise AIServiceError("Gemini API key is not configured")

        response = requests.post(
            f"{self.base_url}/models/{self.model}:generateContent",
            json={'contents': [{'parts': [{'text': prompt}]}]},
            headers={
                'x-goog-api-key': self.api_key,
                'Content-Type': 'application/json'
            },
            timeout=self.timeout
        )

        if response.status_code != 200:
            raise AIServiceError(f"generateContent failed ({response.status_code}): {response.text[:200]}")

        payload = response.json()
        try:
            parts = payload['candidates'][0]['content']['parts']
        except (KeyError, IndexError, TypeError) as e:
            raise AIServiceError(f"Unexpected response shape: {e}") from e
        text = ''.join(part.get('text', '') for part in parts if isinstance(part, dict))
        if not text:
            raise AIServiceError("Empty response text")
        return text

    def parse_entry(self, text: str, product_names: List[str]) -> Optional[CheckpointEntry]:
        """
        Turn a free-text report into a checkpoint entry

        Args:
            text: Operator's free-form report
            product_names: Tracked product names for mention matching

        Returns:
            Re-validated entry (reporting time 0 if none recognised), or None on failure
        """
        if not text or not text.strip():
            return None
        try:
            raw = self.generate(build_parse_prompt(text, product_names))
            data: Any = json.loads(strip_code_fences(raw))
        except (requests.RequestException, AIServiceError, ValueError) as e:
            logger.error(f"Smart input parsing failed: {e}")
            return None
        if not isinstance(data, dict):
            logger.error("Smart input parsing returned a non-object payload")
            return None
        return CheckpointEntry.from_untrusted(data, product_names)

    def coaching(self, team: str, summary: DailySummary, settings: DaySettings,
                 now: Optional[datetime] = None) -> Optional[str]:
        """Short coaching message for the day's numbers, or None on failure"""
        try:
            return self.generate(build_coaching_prompt(team, summary, settings, now)).strip()
        except (requests.RequestException, AIServiceError, ValueError) as e:
            logger.error(f"Coaching generation failed: {e}")
            return None

    def health(self) -> Dict[str, Any]:
        return {'configured': self.is_configured, 'model': self.model}
