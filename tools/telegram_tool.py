"""Telegram Bot API calls: outbound messages and webhook registration."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx
import requests

from app.schemas.messages import OutboundMessage

logger = logging.getLogger("telegram_tool")

TELEGRAM_API_BASE = "https://api.telegram.org"


class TelegramSendError(Exception):
    def __init__(self, method: str, description: str, status_code: Optional[int] = None):
        super().__init__(f"{method} failed: {description}")
        self.method = method
        self.description = description
        self.status_code = status_code


@dataclass
class SendResult:
    message: OutboundMessage
    ok: bool
    response: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class TelegramClient:
    def __init__(
        self,
        token: str,
        api_base: str = TELEGRAM_API_BASE,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.token = token
        self.api_url = f"{api_base.rstrip('/')}/bot{token}"
        self.client = http_client or httpx.AsyncClient()

    async def send(self, message: OutboundMessage) -> SendResult:
        """Post one message to the Bot API method matching its kind."""
        method = message.method
        try:
            response = await self.client.post(f"{self.api_url}/{method}", json=message.to_payload())
        except httpx.HTTPError as e:
            raise TelegramSendError(method, str(e) or type(e).__name__) from e

        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            body = {"ok": False, "description": response.text}

        if response.status_code >= 400 or not body.get("ok", False):
            raise TelegramSendError(method, body.get("description", response.text), response.status_code)

        return SendResult(message=message, ok=True, response=body)

    def set_webhook(self, url: str) -> bool:
        return self._lifecycle_call("setWebhook", params={"url": url})

    def delete_webhook(self) -> bool:
        return self._lifecycle_call("deleteWebhook")

    def _lifecycle_call(self, method: str, params: Optional[Dict[str, Any]] = None) -> bool:
        try:
            response = requests.post(f"{self.api_url}/{method}", params=params, timeout=10)
        except requests.RequestException as e:
            logger.error(f"Error calling {method}: {e}")
            return False

        if response.status_code == 200:
            logger.info(f"{method} response: {response.text}")
            return True
        logger.warning(f"Failed to {method}: {response.text}")
        return False

    async def close(self) -> None:
        await self.client.aclose()
