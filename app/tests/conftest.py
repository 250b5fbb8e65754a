from __future__ import annotations

import json
from typing import Any, Callable

import httpx
import pytest

from app.config import settings as settings_module

TOKEN = "test-token"


@pytest.fixture(autouse=True)
def bot_env(monkeypatch):
    monkeypatch.setenv("TELEGRAM_BOT_TOKEN", TOKEN)
    for key in (
        "TELEGRAM_API_URL",
        "COINGECKO_API_URL",
        "AXIOM_API_URL",
        "HTTP_USER_AGENT",
        "PULSE_SECTION_LIMIT",
    ):
        monkeypatch.delenv(key, raising=False)

    settings_module.reset_settings()
    yield
    settings_module.reset_settings()


class FakeProviders:
    """
    Routes requests from an httpx MockTransport by host + path and records
    every Telegram ``sendMessage`` body.
    """

    def __init__(self) -> None:
        self.routes: dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.sent: list[dict[str, Any]] = []
        self.requests: list[httpx.Request] = []
        self.telegram_status = 200

    def on(self, path: str, response: httpx.Response | Callable[[httpx.Request], httpx.Response]) -> None:
        if callable(response):
            self.routes[path] = response
            return

        # fresh copy per request so a route can be hit more than once
        def replay(request: httpx.Request, r: httpx.Response = response) -> httpx.Response:
            return httpx.Response(r.status_code, headers=r.headers, content=r.content)

        self.routes[path] = replay

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.url.host == "api.telegram.org":
            body = json.loads(request.content)
            self.sent.append(body)
            if self.telegram_status >= 400:
                return httpx.Response(self.telegram_status, json={"ok": False, "description": "Bad Request"})
            return httpx.Response(200, json={"ok": True, "result": {"message_id": 1}})

        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"error": "not found"})
        return route(request)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self))


@pytest.fixture()
def providers() -> FakeProviders:
    return FakeProviders()


@pytest.fixture()
def btc_detail() -> dict[str, Any]:
    return {
        "id": "bitcoin",
        "symbol": "btc",
        "name": "Bitcoin",
        "market_cap_rank": 1,
        "market_data": {
            "current_price": {"usd": 67000.5},
            "price_change_percentage_24h": 2.5,
            "high_24h": {"usd": 68000},
            "low_24h": {"usd": 65000},
            "market_cap": {"usd": 1320000000000},
            "total_volume": {"usd": 25000000000},
        },
    }


@pytest.fixture()
def market_rows() -> Callable[[int], list[dict[str, Any]]]:
    def build(count: int) -> list[dict[str, Any]]:
        return [
            {
                "id": f"coin-{i}",
                "symbol": f"c{i}",
                "name": f"Coin {i}",
                "current_price": 100.0 - i,
                "price_change_percentage_24h": None if i == 3 else (-1) ** i * 1.5,
                "market_cap": 10_000 - i,
                "total_volume": 500,
                "image": "https://example.invalid/logo.png",
            }
            for i in range(count)
        ]

    return build
