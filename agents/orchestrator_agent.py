"""Relays one Telegram text message through the intent-detection agent and back to the chat."""

import logging
from typing import Hashable, List

from agents.base_agent import BaseAgent
from tools.request_tool import build_intent_request
from tools.response_tool import to_outbound_messages
from tools.session_store import SessionStore
from tools.telegram_tool import SendResult, TelegramClient, TelegramSendError

logger = logging.getLogger("orchestrator_agent")


class RelayOrchestrator:
    def __init__(self, agent: BaseAgent, sender: TelegramClient, sessions: SessionStore, language_code: str):
        self.agent = agent
        self.sender = sender
        self.sessions = sessions
        self.language_code = language_code

    async def handle_message(self, chat_id: Hashable, text: str) -> List[SendResult]:
        logger.info(f"Processing request for chat ID: {chat_id}")

        session_id = self.sessions.resolve_session(chat_id)
        request = build_intent_request(
            chat_id, text, session_id, self.language_code, session_path=self.agent.session_path
        )

        # Errors from the agent propagate; the webhook answers 500 so Telegram can redeliver.
        segments = await self.agent.detect_intent(request)
        logger.debug(f"Agent returned {len(segments)} segment(s) for session {session_id}")

        messages = to_outbound_messages(segments, chat_id)
        logger.info(f"Converted {len(messages)} Telegram message(s) for chat ID: {chat_id}")

        results = []
        for message in messages:
            try:
                result = await self.sender.send(message)
                logger.info(f"Successfully sent {message.method} to chat ID: {chat_id}")
            except TelegramSendError as e:
                logger.error(f"Error sending message to Telegram: {e}")
                result = SendResult(message=message, ok=False, error=str(e))
            except Exception as e:
                logger.exception(f"Unexpected error sending {message.method} to chat ID {chat_id}: {e}")
                result = SendResult(message=message, ok=False, error=str(e))
            results.append(result)

        return results
