from typing import Callable, Hashable

from app.schemas.messages import IntentRequest


def build_intent_request(
    conversation_id: Hashable,
    message_text: str,
    session_id: str,
    language_code: str,
    session_path: Callable[[str], str] = lambda session_id: session_id,
) -> IntentRequest:
    """Build the detect-intent request for one incoming chat message.

    ``session_path`` turns the bare session id into the agent's full session
    resource name; the Dialogflow agent passes its own path builder here.
    """
    if not message_text:
        raise ValueError(f"Message from chat {conversation_id} has no text")

    return IntentRequest(
        session=session_path(session_id),
        text=message_text,
        language_code=language_code,
    )
