# app/services/dispatcher.py
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from app.config.settings import get_settings
from app.schemas.market import NotFound
from app.schemas.telegram import InboundMessage, OutboundReply, TelegramUpdate
from app.services.axiom import fetch_pulse
from app.services.coingecko import fetch_global_stats, fetch_top10, fetch_trending, search_and_fetch_price
from app.services.errors import DeliveryError, MalformedUpdate
from app.services.formatter import (
    format_failure,
    format_global_stats,
    format_help,
    format_not_found,
    format_price,
    format_pulse,
    format_top10,
    format_trending,
)
from app.services.http import open_client
from app.services.telegram import send_message

logger = logging.getLogger("crypto_bot.dispatcher")


# ----------------------------
# command parsing
# ----------------------------
class CommandKind(str, Enum):
    HELP = "help"
    TOP10 = "top10"
    TRENDING = "trending"
    PULSE = "pulse"
    GLOBAL = "global"
    PRICE = "price"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class Command:
    kind: CommandKind
    argument: Optional[str] = None


_EXACT_COMMANDS = {
    "/start": CommandKind.HELP,
    "/help": CommandKind.HELP,
    "/top10": CommandKind.TOP10,
    "/trending": CommandKind.TRENDING,
    "/pulse": CommandKind.PULSE,
    "/global": CommandKind.GLOBAL,
}

PRICE_PREFIX = "/price "


def parse_command(text: str | None) -> Command:
    """
    Case-insensitive match on the trimmed text. ``/price <coin>`` keeps only
    the first token after the prefix.
    """
    normalized = (text or "").strip().lower()

    kind = _EXACT_COMMANDS.get(normalized)
    if kind is not None:
        return Command(kind)

    if normalized.startswith(PRICE_PREFIX):
        tokens = normalized[len(PRICE_PREFIX):].split()
        if tokens:
            return Command(CommandKind.PRICE, tokens[0])

    return Command(CommandKind.UNRECOGNIZED)


def parse_update(payload: Any) -> InboundMessage:
    try:
        update = TelegramUpdate.model_validate(payload)
    except ValidationError as exc:
        raise MalformedUpdate("invalid update payload") from exc

    message = update.message
    if message is None or not message.text:
        raise MalformedUpdate("update has no message text")
    if message.chat is None or message.chat.id is None:
        raise MalformedUpdate("update has no chat id")

    return InboundMessage(chat_id=message.chat.id, text=message.text)


# ----------------------------
# dispatch result
# ----------------------------
class DispatchStatus(str, Enum):
    REPLIED = "replied"
    IGNORED = "ignored"
    FAILED = "failed"


@dataclass
class DispatchResult:
    status: DispatchStatus
    command: Optional[Command] = None
    reply: Optional[OutboundReply] = None
    delivered: bool = False
    error: Optional[str] = None


# ----------------------------
# fetch + format flows
# ----------------------------
async def _render(command: Command, client: httpx.AsyncClient) -> str:
    kind = command.kind

    if kind is CommandKind.HELP:
        return format_help()

    if kind is CommandKind.GLOBAL:
        return format_global_stats(await fetch_global_stats(http=client))

    if kind is CommandKind.TOP10:
        return format_top10(await fetch_top10(http=client))

    if kind is CommandKind.TRENDING:
        return format_trending(await fetch_trending(http=client))

    if kind is CommandKind.PULSE:
        sections = await fetch_pulse(http=client)
        return format_pulse(sections, limit=get_settings().PULSE_SECTION_LIMIT)

    if kind is CommandKind.PRICE:
        result = await search_and_fetch_price(command.argument or "", http=client)
        if isinstance(result, NotFound):
            return format_not_found(result)
        return format_price(result)

    raise ValueError(f"No flow for command: {kind}")


async def _deliver(reply: OutboundReply, client: httpx.AsyncClient) -> bool:
    try:
        await send_message(reply.chat_id, reply.text, http=client)
        return True
    except DeliveryError as exc:
        # no retry: the webhook has already been acknowledged
        logger.error("❌ delivery failed | chat=%s | status=%s | body=%s", reply.chat_id, exc.status_code, exc.body)
        return False


async def dispatch(message: InboundMessage, *, http: httpx.AsyncClient | None = None) -> DispatchResult:
    command = parse_command(message.text)

    if command.kind is CommandKind.UNRECOGNIZED:
        logger.debug("ℹ️ ignoring non-command | chat=%s", message.chat_id)
        return DispatchResult(status=DispatchStatus.IGNORED, command=command)

    logger.info("📨 command | chat=%s | cmd=%s | arg=%s", message.chat_id, command.kind.value, command.argument)
    t0 = time.perf_counter()

    async with open_client(http) as client:
        try:
            text = await _render(command, client)
            status = DispatchStatus.REPLIED
            error = None
        except Exception as exc:
            logger.exception("❌ command failed | chat=%s | cmd=%s", message.chat_id, command.kind.value)
            text = format_failure(command.kind.value, command.argument)
            status = DispatchStatus.FAILED
            error = repr(exc)[:300]

        reply = OutboundReply(chat_id=message.chat_id, text=text)
        delivered = await _deliver(reply, client)

    dt_ms = int((time.perf_counter() - t0) * 1000)
    logger.info(
        "✅ command done | chat=%s | cmd=%s | status=%s | delivered=%s | %dms",
        message.chat_id,
        command.kind.value,
        status.value,
        delivered,
        dt_ms,
    )

    return DispatchResult(status=status, command=command, reply=reply, delivered=delivered, error=error)


async def handle_update(payload: Any, *, http: httpx.AsyncClient | None = None) -> DispatchResult:
    """Entry point for one webhook delivery. Malformed updates are dropped silently."""
    try:
        message = parse_update(payload)
    except MalformedUpdate as exc:
        logger.info("ℹ️ update dropped | reason=%s", exc)
        return DispatchResult(status=DispatchStatus.IGNORED)

    return await dispatch(message, http=http)
