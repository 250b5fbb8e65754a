"""Telegram webhook payloads and the request-scoped messages built from them."""

from __future__ import annotations

from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict

ChatId = Union[int, str]

PARSE_MODE = "MarkdownV2"


class TelegramChat(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[ChatId] = None


class TelegramMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message_id: Optional[int] = None
    chat: Optional[TelegramChat] = None
    text: Optional[str] = None


class TelegramUpdate(BaseModel):
    """The subset of a Telegram ``Update`` the bot reads."""

    model_config = ConfigDict(extra="ignore")

    update_id: Optional[int] = None
    message: Optional[TelegramMessage] = None


class InboundMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    chat_id: ChatId
    text: str


class OutboundReply(BaseModel):
    """A MarkdownV2 reply; ``text`` is already escaped."""

    model_config = ConfigDict(frozen=True)

    chat_id: ChatId
    text: str

    def to_payload(self) -> Dict[str, Any]:
        return {"chat_id": self.chat_id, "text": self.text, "parse_mode": PARSE_MODE}
