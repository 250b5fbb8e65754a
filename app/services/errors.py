from __future__ import annotations

from typing import Any


class UpstreamError(RuntimeError):
    """A market-data provider was unreachable or answered with a non-success status."""

    def __init__(self, provider: str, message: str, status_code: int | None = None):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.status_code = status_code


class DeliveryError(RuntimeError):
    """Telegram rejected an outbound call."""

    def __init__(self, status_code: int, body: Any):
        super().__init__(f"Telegram API error: {status_code} - {body}")
        self.status_code = status_code
        self.body = body


class MalformedUpdate(ValueError):
    """Inbound webhook payload without a chat id or message text."""
