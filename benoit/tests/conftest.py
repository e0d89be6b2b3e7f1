"""
Shared test fixtures for the Benoît backend tests.

Provides fake services, a test client, and common lesson data
used across all test modules.
"""

import pytest
from fastapi.testclient import TestClient

from benoit.models import Lesson, LessonLevel
from benoit.tests.fakes import FakeAudioContext, FakeAudioPlayer, FakeGeminiService


@pytest.fixture(autouse=True)
def mock_mode_env(monkeypatch):
    """Ensure MOCK_MODE=true and no real keys for all tests."""
    monkeypatch.setenv("MOCK_MODE", "true")
    monkeypatch.setenv("GEMINI_API_KEY", "")
    monkeypatch.setenv("API_KEY", "")


@pytest.fixture
def fake_gemini():
    return FakeGeminiService()


@pytest.fixture
def fake_player():
    return FakeAudioPlayer()


@pytest.fixture
def fake_audio_context():
    return FakeAudioContext()


@pytest.fixture
def greetings_lesson():
    """A minimal lesson used by conversation scenarios."""
    return Lesson(
        id="t1",
        title="Greetings",
        level=LessonLevel.BEGINNER,
        description="say hello and introduce yourself",
        icon="👋",
    )


@pytest.fixture
def test_client():
    """Create a FastAPI TestClient with a fresh mock-mode tutor state.

    Audio goes to a FakeAudioContext so no sound device is opened.
    """
    from benoit.main import app
    from benoit.routes.session import reset_controller
    from benoit.services.audio_service import AudioPlayer
    from benoit.services.conversation_service import ConversationSession
    from benoit.services.gemini_service import GeminiService
    from benoit.services.mode_controller import ModeController

    gemini = GeminiService()
    session = ConversationSession(gemini, AudioPlayer(gemini, context_provider=FakeAudioContext))
    reset_controller(ModeController(session))
    with TestClient(app) as client:
        yield client
    reset_controller()
