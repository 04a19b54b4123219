import logging
from datetime import date
from typing import Dict, Optional, Sequence

import requests

from habitflow.core.config import settings
from habitflow.models.habit import Habit
from habitflow.services import streak_engine

logger = logging.getLogger(__name__)

MISSING_KEY_MESSAGE = "API Key is missing. Please configure your environment."
FAILURE_MESSAGE = "I couldn't analyze your habits right now. Try again later!"
EMPTY_RESPONSE_MESSAGE = "Keep going! You're doing great."


class CoachService:
    """Habit coaching insights from a hosted Gemini model"""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        self.api_key = settings.gemini_api_key if api_key is None else api_key
        self.model = model or settings.gemini_model
        self.api_url = f"https://generativelanguage.googleapis.com/v1beta/models/{self.model}:generateContent"
        self.system_instruction = "You are a helpful productivity coach."

    def habit_summary(self, habits: Sequence[Habit], today: Optional[date] = None) -> str:
        """One line per habit: completions this week, total and streak"""
        today = today or date.today()
        lines = []
        for habit in habits:
            days = streak_engine.unique_dates(habit.completed_dates)
            last_7_days = sum(1 for d in days if abs((today - d).days) <= 7)
            lines.append(
                f"- {habit.emoji} {habit.name}: {last_7_days} times in last 7 days. "
                f"Total: {len(set(habit.completed_dates))}. Streak: {habit.streak}."
            )
        return "\n".join(lines)

    def build_prompt(self, habits: Sequence[Habit], today: Optional[date] = None) -> str:
        return f"""
        You are a habit coaching assistant. Analyze the following user habit data and provide 3 brief, encouraging, and actionable insights or tips in a friendly, clean tone.
        Focus on consistency and small improvements. Keep it under 150 words.

        User's Habits:
        {self.habit_summary(habits, today)}
        """

    async def get_habit_insights(self, habits: Sequence[Habit], today: Optional[date] = None) -> str:
        """Ask the model for insights, falling back to canned messages"""
        if not self.api_key:
            return MISSING_KEY_MESSAGE

        try:
            response = self._call_gemini_api(self.build_prompt(habits, today))
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Error fetching insights: {e}")
            return FAILURE_MESSAGE

        return self._extract_text(response) or EMPTY_RESPONSE_MESSAGE

    def _call_gemini_api(self, prompt: str) -> Dict:
        payload = {
            "systemInstruction": {"parts": [{"text": self.system_instruction}]},
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        }
        response = requests.post(
            self.api_url,
            params={"key": self.api_key},
            json=payload,
            timeout=30
        )
        response.raise_for_status()
        return response.json()

    @staticmethod
    def _extract_text(response: Dict) -> str:
        candidates = response.get("candidates") or []
        if not candidates:
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts).strip()
