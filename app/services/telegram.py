"""Outbound calls to the Telegram Bot API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from app.config.settings import get_settings
from app.schemas.telegram import ChatId, OutboundReply
from app.services.errors import DeliveryError
from app.services.http import open_client

logger = logging.getLogger("crypto_bot.telegram")


def _method_url(method: str) -> str:
    settings = get_settings()
    if not settings.TELEGRAM_BOT_TOKEN:
        raise DeliveryError(500, "TELEGRAM_BOT_TOKEN not configured")
    return f"{settings.TELEGRAM_API_URL}/bot{settings.TELEGRAM_BOT_TOKEN}/{method}"


def _decode(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


async def send_reply(reply: OutboundReply, *, http: httpx.AsyncClient | None = None) -> Any:
    """
    POST ``sendMessage`` with MarkdownV2. Raises ``DeliveryError`` carrying the
    platform's status and body when Telegram rejects the message.
    """
    url = _method_url("sendMessage")
    logger.debug("📤 sending message | chat=%s | text=%r", reply.chat_id, reply.text)

    try:
        async with open_client(http) as client:
            response = await client.post(url, json=reply.to_payload())
    except httpx.HTTPError as exc:
        raise DeliveryError(0, f"transport error: {exc!r}") from exc

    body = _decode(response)
    if not response.is_success:
        logger.error("❌ telegram rejected message | chat=%s | status=%s | body=%s", reply.chat_id, response.status_code, body)
        raise DeliveryError(response.status_code, body)

    return body


async def send_message(chat_id: ChatId, text: str, *, http: httpx.AsyncClient | None = None) -> Any:
    return await send_reply(OutboundReply(chat_id=chat_id, text=text), http=http)


async def set_webhook(url: str, *, http: httpx.AsyncClient | None = None) -> Any:
    """Register ``url`` as the bot's webhook."""
    method_url = _method_url("setWebhook")
    logger.info("🔗 setting webhook | url=%s", url)

    try:
        async with open_client(http) as client:
            response = await client.get(method_url, params={"url": url})
    except httpx.HTTPError as exc:
        raise DeliveryError(0, f"transport error: {exc!r}") from exc

    body = _decode(response)
    logger.info("🔗 webhook setup response | status=%s | body=%s", response.status_code, body)

    if not response.is_success:
        description = body.get("description") if isinstance(body, dict) else body
        raise DeliveryError(response.status_code, description)

    return body
