"""Tests for the habit coach - the HTTP call to the model is replaced, the rest runs for real."""

import asyncio
from datetime import date

import pytest
import requests

from habitflow.models.habit import Habit
from habitflow.routers import gamification as gamification_router
from habitflow.services import coach_service as coach_module
from habitflow.services.coach_service import (
    EMPTY_RESPONSE_MESSAGE,
    FAILURE_MESSAGE,
    MISSING_KEY_MESSAGE,
    CoachService,
)
from tests.conftest import TEST_USER_ID

TODAY = date(2024, 6, 5)


class FakeHTTPResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self.payload


def gemini_reply(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


@pytest.fixture
def sent_requests(monkeypatch):
    """Replace requests.post and record every call"""
    calls = []
    replies = []

    def fake_post(url, **kwargs):
        calls.append({"url": url, **kwargs})
        reply = replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    monkeypatch.setattr(coach_module.requests, "post", fake_post)
    return calls, replies


def make_habit(**fields) -> Habit:
    data = {"id": "h1", "name": "Physics revision", "emoji": "⚛️", "completed_dates": [], "streak": 0}
    data.update(fields)
    return Habit(**data)


def run(coro):
    return asyncio.run(coro)


# =============================================================================
# Habit summary
# =============================================================================


class TestHabitSummary:
    def test_counts_last_seven_days_total_and_streak(self):
        habit = make_habit(
            completed_dates=["2024-06-05", "2024-06-04", "2024-05-29", "2024-05-20"],
            streak=2,
        )

        summary = CoachService(api_key="key").habit_summary([habit], today=TODAY)

        assert summary == "- ⚛️ Physics revision: 3 times in last 7 days. Total: 4. Streak: 2."

    def test_one_line_per_habit(self):
        habits = [make_habit(), make_habit(id="h2", name="Chemistry notes", emoji="🧪")]

        lines = CoachService(api_key="key").habit_summary(habits, today=TODAY).splitlines()

        assert len(lines) == 2
        assert lines[1].startswith("- 🧪 Chemistry notes: 0 times")

    def test_malformed_dates_skip_the_weekly_count(self):
        habit = make_habit(completed_dates=["2024-06-05", "yesterday"])

        summary = CoachService(api_key="key").habit_summary([habit], today=TODAY)

        assert "1 times in last 7 days. Total: 2." in summary


# =============================================================================
# Insights
# =============================================================================


class TestHabitInsights:
    def test_missing_key_skips_the_request(self, sent_requests):
        calls, _ = sent_requests

        assert run(CoachService(api_key="").get_habit_insights([make_habit()])) == MISSING_KEY_MESSAGE
        assert calls == []

    def test_returns_model_text(self, sent_requests):
        calls, replies = sent_requests
        replies.append(FakeHTTPResponse(gemini_reply("  Keep your mornings for Physics.  ")))
        habit = make_habit(completed_dates=["2024-06-05"], streak=1)

        insights = run(CoachService(api_key="secret", model="test-model").get_habit_insights([habit], today=TODAY))

        assert insights == "Keep your mornings for Physics."
        assert calls[0]["url"].endswith("/models/test-model:generateContent")
        assert calls[0]["params"] == {"key": "secret"}
        prompt = calls[0]["json"]["contents"][0]["parts"][0]["text"]
        assert "- ⚛️ Physics revision: 1 times in last 7 days. Total: 1. Streak: 1." in prompt
        assert calls[0]["json"]["systemInstruction"]["parts"][0]["text"] == "You are a helpful productivity coach."

    def test_empty_reply_falls_back(self, sent_requests):
        _, replies = sent_requests
        replies.append(FakeHTTPResponse({"candidates": []}))

        assert run(CoachService(api_key="secret").get_habit_insights([make_habit()])) == EMPTY_RESPONSE_MESSAGE

    def test_http_error_falls_back(self, sent_requests):
        _, replies = sent_requests
        replies.append(FakeHTTPResponse({}, status_code=500))

        assert run(CoachService(api_key="secret").get_habit_insights([make_habit()])) == FAILURE_MESSAGE

    def test_connection_error_falls_back(self, sent_requests):
        _, replies = sent_requests
        replies.append(requests.ConnectionError("offline"))

        assert run(CoachService(api_key="secret").get_habit_insights([make_habit()])) == FAILURE_MESSAGE


# =============================================================================
# Endpoint
# =============================================================================


def test_insights_endpoint(client, fake_db, sent_requests, monkeypatch):
    calls, replies = sent_requests
    replies.append(FakeHTTPResponse(gemini_reply("Two sessions a day keeps the streak alive.")))
    monkeypatch.setattr(gamification_router.coach_service, "api_key", "secret")
    fake_db.rows("habits").append({
        "id": "habit-1", "user_id": TEST_USER_ID, "name": "Maths drills",
        "completed_dates": [], "skipped_dates": [], "streak": 0,
    })

    response = client.get("/gamification/insights")

    assert response.status_code == 200
    assert response.json() == {"insights": "Two sessions a day keeps the streak alive."}
    assert "Maths drills" in calls[0]["json"]["contents"][0]["parts"][0]["text"]


def test_insights_endpoint_without_key(client, sent_requests, monkeypatch):
    monkeypatch.setattr(gamification_router.coach_service, "api_key", "")

    assert client.get("/gamification/insights").json() == {"insights": MISSING_KEY_MESSAGE}
