import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

import requests
from dotenv import load_dotenv

logger = logging.getLogger("config")

NGROK_TUNNELS_URL = "http://localhost:4040/api/tunnels"


@dataclass(frozen=True)
class Settings:
    telegram_token: Optional[str]
    server_url: Optional[str]
    project_id: Optional[str]
    location: str = "global"
    agent_id: Optional[str] = None
    language_code: str = "en"
    port: int = 3000
    session_ttl_minutes: int = 60
    agent_backend: str = "dialogflow_cx"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        return cls(
            telegram_token=os.getenv("TELEGRAM_TOKEN"),
            server_url=os.getenv("SERVER_URL"),
            project_id=os.getenv("PROJECT_ID"),
            location=os.getenv("LOCATION", "global"),
            agent_id=os.getenv("AGENT_ID"),
            language_code=os.getenv("LANGUAGE", "en"),
            port=int(os.getenv("PORT", "3000")),
            session_ttl_minutes=int(os.getenv("SESSION_TTL_MINUTES", "60")),
            agent_backend=os.getenv("AGENT_BACKEND", "dialogflow_cx"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    @property
    def webhook_path(self) -> str:
        return f"/webhook/{self.telegram_token}"


@lru_cache()
def get_settings() -> Settings:
    return Settings.from_env()


def discover_ngrok_url() -> Optional[str]:
    """Public HTTPS URL of a local ngrok tunnel, if one is running."""
    try:
        tunnels = requests.get(NGROK_TUNNELS_URL, timeout=5).json()
    except (requests.RequestException, ValueError) as e:
        logger.warning(f"Could not reach the ngrok API: {e}")
        return None

    for tunnel in tunnels.get("tunnels", []):
        if tunnel.get("proto") == "https":
            return tunnel.get("public_url")
    return None


def public_base_url(settings: Settings) -> Optional[str]:
    if settings.server_url:
        return settings.server_url.rstrip("/")
    logger.info("SERVER_URL is not set, looking for an ngrok tunnel")
    url = discover_ngrok_url()
    if not url:
        logger.warning("No ngrok HTTPS tunnel found. Make sure you ran ngrok first.")
    return url
