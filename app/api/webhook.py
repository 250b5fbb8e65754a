# app/api/webhook.py
from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, BackgroundTasks, Request
from fastapi.responses import PlainTextResponse

from app.config.settings import get_settings
from app.services.dispatcher import handle_update
from app.services.errors import DeliveryError
from app.services.telegram import set_webhook

logger = logging.getLogger("crypto_bot.webhook")

router = APIRouter(tags=["telegram"])

WEBHOOK_ENDPOINT = "/webhook"


async def process_update(payload: Any) -> None:
    # runs after the response went out; nothing may escape from here
    try:
        await handle_update(payload)
    except Exception:
        logger.exception("❌ update processing crashed")


@router.post(WEBHOOK_ENDPOINT, response_class=PlainTextResponse)
async def telegram_webhook(request: Request, background_tasks: BackgroundTasks) -> str:
    """
    Acknowledge the update right away and dispatch it in the background.
    """
    try:
        payload = await request.json()
    except ValueError:
        logger.warning("⚠️ webhook body is not JSON, acknowledging anyway")
        return "OK"

    logger.debug("📥 update received | %s", payload)
    background_tasks.add_task(process_update, payload)
    return "OK"


@router.get("/setwebhook", response_class=PlainTextResponse)
async def register_webhook(request: Request) -> PlainTextResponse:
    if not get_settings().bot_configured:
        return PlainTextResponse("TELEGRAM_BOT_TOKEN not configured", status_code=500)

    webhook_url = f"{request.url.scheme}://{request.url.netloc}{WEBHOOK_ENDPOINT}"

    try:
        await set_webhook(webhook_url)
    except DeliveryError as exc:
        if exc.status_code >= 400:
            return PlainTextResponse(f"Failed to set webhook: {exc.body}", status_code=exc.status_code)
        logger.error("❌ webhook setup error | err=%s", exc)
        return PlainTextResponse("Failed to set webhook", status_code=500)

    return PlainTextResponse("Webhook set successfully!", status_code=200)
