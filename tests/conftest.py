from unittest.mock import AsyncMock, Mock

import pytest

from app.config import get_settings


class FakeClock:
    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def mock_env(monkeypatch):
    """Set test environment variables."""
    monkeypatch.setenv("TELEGRAM_TOKEN", "123:test-token")
    monkeypatch.setenv("SERVER_URL", "https://relay.example.com")
    monkeypatch.setenv("PROJECT_ID", "test-project")
    monkeypatch.setenv("LOCATION", "us-central1")
    monkeypatch.setenv("AGENT_ID", "test-agent")
    monkeypatch.setenv("LANGUAGE", "en")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def agent():
    """Intent-detection agent double with a predictable session path."""
    fake = Mock()
    fake.session_path = Mock(side_effect=lambda session_id: f"projects/p/locations/l/agents/a/sessions/{session_id}")
    fake.detect_intent = AsyncMock(return_value=[])
    return fake


@pytest.fixture
def sender():
    fake = Mock()
    fake.send = AsyncMock()
    return fake
