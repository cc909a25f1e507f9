import pytest

from tools.request_tool import build_intent_request


def test_builds_request_for_session():
    request = build_intent_request(
        42, "Hi there", "telegram-42-1", "en", session_path=lambda sid: f"projects/p/sessions/{sid}"
    )
    assert request.session == "projects/p/sessions/telegram-42-1"
    assert request.text == "Hi there"
    assert request.language_code == "en"


def test_default_session_path_is_the_session_id():
    request = build_intent_request(42, "Hi", "telegram-42-1", "de")
    assert request.session == "telegram-42-1"


def test_empty_text_is_rejected():
    with pytest.raises(ValueError):
        build_intent_request(42, "", "telegram-42-1", "en")
