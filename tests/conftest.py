# tests/conftest.py
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.main import app

LLM_ENV = ("LLM_PROVIDER", "LLM_API_KEY", "LLM_MODEL", "LLM_ENDPOINT", "OPENAI_API_KEY", "ANTHROPIC_API_KEY")

# --------------------------------------------------------------------
# Keep the developer's real provider settings out of the tests
# --------------------------------------------------------------------
@pytest.fixture(autouse=True)
def clean_llm_env(monkeypatch):
    for name in LLM_ENV:
        monkeypatch.delenv(name, raising=False)

# --------------------------------------------------------------------
# FastAPI test client available as fixture `client`
# --------------------------------------------------------------------
@pytest.fixture(scope="session")
def client() -> TestClient:
    return TestClient(app)

# --------------------------------------------------------------------
# Sample conversations
# --------------------------------------------------------------------
@pytest.fixture
def rough_conversation() -> str:
    # Trips every issue detector and stays free of enthusiasm markers.
    return (
        "did you eat? are you home? why not?\n"
        "what now? where are you? who was that?\n"
        "can we talk? are you mad? why?\n"
        "\n"
        "ok\n"
        "yes\n"
        "no\n"
        "sure\n"
        "fine\n"
        "\n"
        "but i said it was fine, however you did not listen, actually you lied.\n"
        "sorry for the late reply, i was dealing with my ex and my therapist again.\n"
        "you should call me. you need to answer. you have to understand.\n"
        "whatever, i am not interested in excuses. are you single or not?\n"
        "i hate this, it was awful and terrible, the worst week.\n"
    )

@pytest.fixture
def llm_reply() -> dict:
    return {
        "overallScore": 62,
        "summary": "The conversation stalled after a few rushed questions.",
        "issues": [
            {
                "category": "social-cues",
                "title": "Missed cues",
                "description": "Short replies were not picked up on.",
                "severity": "medium",
                "examples": ["ok", "sure"],
            }
        ],
        "strengths": ["Friendly opening"],
        "suggestions": [
            {"category": "Engagement", "title": "Slow down", "description": "Ask one thing at a time.", "actionable": True}
        ],
        "riskFactors": [],
    }
