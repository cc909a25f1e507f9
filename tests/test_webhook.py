from unittest.mock import AsyncMock, Mock, patch

import pytest
from fastapi.testclient import TestClient

from agents.base_agent import IntentDetectionError
from agents.orchestrator_agent import RelayOrchestrator
from app.config import Settings, get_settings
from app.main import app
from app.routers.webhook import get_orchestrator
from app.schemas.messages import PayloadSegment, TextSegment
from tools.session_store import SessionStore

TOKEN = "123:test-token"
URL = f"/webhook/{TOKEN}"


def text_update(text="hello", chat_id=42):
    return {
        "update_id": 1,
        "message": {
            "message_id": 10,
            "date": 1702000000,
            "chat": {"id": chat_id, "type": "private"},
            "from": {"id": chat_id, "is_bot": False, "first_name": "Ann"},
            "text": text,
        },
    }


@pytest.fixture
def orchestrator(agent, sender, clock):
    return RelayOrchestrator(agent, sender, SessionStore(clock=clock), "en")


@pytest.fixture
def client(orchestrator):
    settings = Settings(telegram_token=TOKEN, server_url=None, project_id="p", agent_id="a")
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestTelegramWebhook:
    def test_text_message_is_relayed(self, client, agent, sender):
        agent.detect_intent.return_value = [TextSegment(lines=["Hi ", "Ann"])]

        response = client.post(URL, json=text_update())

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        agent.detect_intent.assert_awaited_once()
        message = sender.send.await_args.args[0]
        assert message.to_payload() == {"chat_id": 42, "text": "Hi Ann"}

    def test_update_without_text_is_a_no_op(self, client, agent, sender):
        update = text_update()
        del update["message"]["text"]
        update["message"]["sticker"] = {"file_id": "abc"}

        response = client.post(URL, json=update)

        assert response.status_code == 200
        agent.detect_intent.assert_not_called()
        sender.send.assert_not_called()

    def test_update_without_message_is_a_no_op(self, client, agent, sender):
        response = client.post(URL, json={"update_id": 2, "edited_message": {"text": "x"}})

        assert response.status_code == 200
        agent.detect_intent.assert_not_called()
        sender.send.assert_not_called()

    def test_message_without_id_is_still_relayed(self, client, agent, sender):
        update = text_update()
        del update["message"]["message_id"]

        response = client.post(URL, json=update)

        assert response.status_code == 200
        agent.detect_intent.assert_awaited_once()

    def test_unreadable_update_is_acknowledged(self, client, agent, sender):
        response = client.post(URL, json={"update_id": 3, "message": {"text": "no chat here"}})

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        agent.detect_intent.assert_not_called()
        sender.send.assert_not_called()

    def test_agent_failure_returns_500(self, client, agent, sender):
        agent.detect_intent.side_effect = IntentDetectionError("deadline exceeded")

        response = client.post(URL, json=text_update())

        assert response.status_code == 500
        assert response.json() == {"ok": False}
        sender.send.assert_not_called()

    def test_malformed_payload_skipped(self, client, agent, sender):
        agent.detect_intent.return_value = [TextSegment(lines=["only this"]), PayloadSegment(payload="{oops")]

        response = client.post(URL, json=text_update())

        assert response.status_code == 200
        assert sender.send.await_count == 1

    def test_wrong_token_is_rejected(self, client, agent):
        response = client.post("/webhook/not-the-token", json=text_update())

        assert response.status_code == 403
        agent.detect_intent.assert_not_called()


def test_status_endpoints():
    client = TestClient(app)
    assert client.get("/").status_code == 200
    assert client.get("/test").json() == {"message": "Bot is running!"}


class TestLifespan:
    def test_registers_and_deletes_webhook(self, mock_env):
        fake_agent = Mock(close=AsyncMock())
        fake_sender = Mock(close=AsyncMock())
        fake_sender.set_webhook.return_value = True
        fake_sender.delete_webhook.return_value = True

        with patch("app.main.get_agent", return_value=Mock(return_value=fake_agent)) as get_agent, \
                patch("app.main.TelegramClient", return_value=fake_sender):
            with TestClient(app):
                assert isinstance(app.state.orchestrator, RelayOrchestrator)
                fake_sender.set_webhook.assert_called_once_with(f"https://relay.example.com/webhook/{TOKEN}")

        get_agent.assert_called_once_with("dialogflow_cx")
        fake_sender.delete_webhook.assert_called_once()
        fake_sender.close.assert_awaited_once()
        fake_agent.close.assert_awaited_once()

    def test_missing_token_fails_startup(self, mock_env, monkeypatch):
        monkeypatch.delenv("TELEGRAM_TOKEN")
        monkeypatch.setattr("app.config.load_dotenv", lambda: False)
        get_settings.cache_clear()

        with pytest.raises(ValueError):
            with TestClient(app):
                pass
