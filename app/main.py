from fastapi import FastAPI
from app.routers import webhook
from app.config import get_settings, public_base_url
import asyncio
import logging
from contextlib import asynccontextmanager, suppress

import agents.dialogflow_agent  # registers the "dialogflow_cx" backend
from agents.base_agent import get_agent
from agents.orchestrator_agent import RelayOrchestrator
from tools.session_store import SessionStore
from tools.telegram_tool import TelegramClient

settings = get_settings()

logger = logging.getLogger("fastapi")
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    settings = get_settings()
    if not settings.telegram_token:
        logger.error("TELEGRAM_TOKEN is not set. Exiting.")
        raise ValueError("TELEGRAM_TOKEN is not set in environment variables.")

    for name, value in (
        ("TELEGRAM_TOKEN", settings.telegram_token),
        ("SERVER_URL", settings.server_url),
        ("PROJECT_ID", settings.project_id),
        ("AGENT_ID", settings.agent_id),
    ):
        logger.info(f"{name}: {'Set' if value else 'Not set'}")

    agent_cls = get_agent(settings.agent_backend)
    agent = agent_cls(settings.project_id, settings.location, settings.agent_id)
    sender = TelegramClient(settings.telegram_token)
    sessions = SessionStore(ttl_seconds=settings.session_ttl_minutes * 60)
    app.state.orchestrator = RelayOrchestrator(agent, sender, sessions, settings.language_code)
    sweeper = asyncio.create_task(sessions.run_sweeper())

    # startup: register webhook with Telegram
    base_url = public_base_url(settings)
    if base_url:
        logger.info(f"Setting webhook to: {base_url}/webhook/<token>")
        if sender.set_webhook(f"{base_url}{settings.webhook_path}"):
            logger.info("Telegram webhook set.")

    yield

    # shutdown: remove webhook
    if sender.delete_webhook():
        logger.info("Telegram webhook deleted.")
    sweeper.cancel()
    with suppress(asyncio.CancelledError):
        await sweeper
    await sender.close()
    await agent.close()

app = FastAPI(lifespan=lifespan)

app.include_router(webhook.router)

@app.get("/")
def root():
    return {"message": "Dialogflow CX Telegram relay is running!"}

@app.get("/test")
def liveness():
    return {"message": "Bot is running!"}


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Your Dialogflow integration server is listening on port {settings.port}")
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
