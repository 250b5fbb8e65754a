from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx

from app.config.settings import get_settings


def default_headers() -> dict[str, str]:
    return {
        "Accept": "application/json",
        "User-Agent": get_settings().HTTP_USER_AGENT,
    }


def build_client(**kwargs) -> httpx.AsyncClient:
    settings = get_settings()
    kwargs.setdefault("timeout", settings.HTTP_TIMEOUT_SECONDS)
    kwargs.setdefault("headers", default_headers())
    return httpx.AsyncClient(**kwargs)


@asynccontextmanager
async def open_client(http: httpx.AsyncClient | None = None) -> AsyncIterator[httpx.AsyncClient]:
    """
    Yield ``http`` untouched when the caller owns a client, otherwise a fresh
    one that is closed on exit.
    """
    if http is not None:
        yield http
        return

    async with build_client() as client:
        yield client
