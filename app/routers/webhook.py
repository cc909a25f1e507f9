from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
import logging
import secrets

from agents.orchestrator_agent import RelayOrchestrator
from app.config import Settings, get_settings
from app.schemas.telegram import TelegramUpdate

router = APIRouter()
logger = logging.getLogger("webhook")


def get_orchestrator(request: Request) -> RelayOrchestrator:
    return request.app.state.orchestrator


@router.post("/webhook/{token}")
async def telegram_webhook(
    token: str,
    body: dict,
    settings: Settings = Depends(get_settings),
    orchestrator: RelayOrchestrator = Depends(get_orchestrator),
):
    if not settings.telegram_token or not secrets.compare_digest(token, settings.telegram_token):
        raise HTTPException(status_code=403, detail="Invalid webhook token")

    logger.debug(f"Received webhook: {body}")

    try:
        update = TelegramUpdate.model_validate(body)
    except ValidationError as e:
        # Acknowledge anyway; Telegram would keep redelivering an update we cannot read.
        logger.warning(f"Ignoring update that does not match the expected shape: {e}")
        return {"ok": True}

    chat_text = update.chat_text
    if chat_text is None:
        logger.info(f"Update {update.update_id} does not contain a text message, skipping")
        return {"ok": True}

    chat_id, text = chat_text
    try:
        await orchestrator.handle_message(chat_id, text)
    except Exception as e:
        logger.exception(f"Error processing webhook for chat ID {chat_id}: {e}")
        return JSONResponse(status_code=500, content={"ok": False})

    return {"ok": True}
