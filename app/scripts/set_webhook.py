# app/scripts/set_webhook.py
from __future__ import annotations

import argparse
import asyncio
import json
from typing import Any, Awaitable, Callable

from app.config.log import configure_logging
from app.services.errors import DeliveryError
from app.services.telegram import set_webhook


def _normalize_url(value: str) -> str:
    url = value.strip()
    if not url.startswith("https://") and not url.startswith("http://"):
        raise SystemExit("--url must be an absolute http(s) URL")
    if not url.rstrip("/").endswith("/webhook"):
        url = url.rstrip("/") + "/webhook"
    return url


async def register(url: str, set_webhook_fn: Callable[[str], Awaitable[Any]] = set_webhook) -> dict[str, Any]:
    try:
        body = await set_webhook_fn(url)
        return {"ok": True, "url": url, "response": body}
    except DeliveryError as exc:
        return {"ok": False, "url": url, "status_code": exc.status_code, "error": exc.body}


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Register the bot webhook with Telegram")
    parser.add_argument("--url", required=True, help="public base URL or full /webhook URL")
    args = parser.parse_args(argv)

    configure_logging()
    result = asyncio.run(register(_normalize_url(args.url)))
    print(json.dumps(result, default=str))
    raise SystemExit(0 if result["ok"] else 1)


if __name__ == "__main__":
    main()
