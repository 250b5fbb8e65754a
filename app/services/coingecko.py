"""Helpers for interacting with the public CoinGecko API."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from app.config.settings import get_settings
from app.schemas.market import CoinDetail, GlobalStats, MarketSnapshotRow, NotFound, TrendingItem
from app.services.errors import UpstreamError
from app.services.http import open_client

logger = logging.getLogger("crypto_bot.coingecko")

PROVIDER = "coingecko"

TOP_N = 10

DETAIL_PARAMS = {
    "localization": "false",
    "tickers": "false",
    "market_data": "true",
    "community_data": "false",
    "developer_data": "false",
}

# payload-shape surprises surface as UpstreamError, same as a bad status
_PAYLOAD_ERRORS = (KeyError, TypeError, AttributeError, IndexError, ValidationError)


async def _get_json(client: httpx.AsyncClient, path: str, params: dict[str, Any] | None = None) -> Any:
    url = f"{get_settings().COINGECKO_API_URL}{path}"

    try:
        response = await client.get(url, params=params)
    except httpx.HTTPError as exc:
        raise UpstreamError(PROVIDER, f"Unable to reach CoinGecko ({path})") from exc

    if not response.is_success:
        logger.error(
            "❌ coingecko error | path=%s | status=%s | body=%s",
            path,
            response.status_code,
            response.text[:300],
        )
        raise UpstreamError(PROVIDER, f"API error: {response.status_code}", status_code=response.status_code)

    try:
        return response.json()
    except ValueError as exc:
        raise UpstreamError(PROVIDER, f"Invalid JSON from {path}") from exc


def _usd(market_data: dict[str, Any], key: str) -> Any:
    value = market_data.get(key) or {}
    return value.get("usd")


async def fetch_global_stats(*, http: httpx.AsyncClient | None = None) -> GlobalStats:
    async with open_client(http) as client:
        payload = await _get_json(client, "/global")

    try:
        stats = payload["data"]
        return GlobalStats(
            total_market_cap_usd=stats["total_market_cap"]["usd"],
            total_volume_usd=stats["total_volume"]["usd"],
            btc_dominance_percent=stats["market_cap_percentage"]["btc"],
            active_cryptocurrencies=stats["active_cryptocurrencies"],
            markets=stats["markets"],
        )
    except _PAYLOAD_ERRORS as exc:
        raise UpstreamError(PROVIDER, "Unexpected /global payload") from exc


async def fetch_top10(*, http: httpx.AsyncClient | None = None) -> list[MarketSnapshotRow]:
    """Top coins by market cap, in the order CoinGecko returns them."""

    params = {
        "vs_currency": "usd",
        "order": "market_cap_desc",
        "per_page": TOP_N,
        "page": 1,
        "sparkline": "false",
    }

    async with open_client(http) as client:
        payload = await _get_json(client, "/coins/markets", params)

    try:
        return [MarketSnapshotRow.model_validate(coin) for coin in payload]
    except _PAYLOAD_ERRORS as exc:
        raise UpstreamError(PROVIDER, "Unexpected /coins/markets payload") from exc


async def fetch_trending(*, http: httpx.AsyncClient | None = None) -> list[TrendingItem]:
    async with open_client(http) as client:
        payload = await _get_json(client, "/search/trending")

    try:
        items = []
        for entry in payload["coins"]:
            coin = entry["item"]
            items.append(
                TrendingItem(
                    name=coin["name"],
                    symbol=coin["symbol"],
                    market_cap_rank=coin.get("market_cap_rank"),
                    price_btc=coin.get("price_btc"),
                )
            )
        return items
    except _PAYLOAD_ERRORS as exc:
        raise UpstreamError(PROVIDER, "Unexpected /search/trending payload") from exc


async def search_and_fetch_price(
    query: str,
    *,
    http: httpx.AsyncClient | None = None,
) -> CoinDetail | NotFound:
    """
    Resolve ``query`` through ``/search`` and load the first hit's detail record.

    Zero search hits is a normal outcome and returns ``NotFound``.
    """
    async with open_client(http) as client:
        search = await _get_json(client, "/search", {"query": query})

        try:
            hits = search.get("coins") or []
            coin_id = hits[0]["id"] if hits else None
        except _PAYLOAD_ERRORS as exc:
            raise UpstreamError(PROVIDER, "Unexpected /search payload") from exc

        if coin_id is None:
            return NotFound(query=query)

        detail = await _get_json(client, f"/coins/{quote(str(coin_id), safe='')}", DETAIL_PARAMS)

    try:
        market_data = detail.get("market_data") or {}
        return CoinDetail(
            id=detail.get("id") or coin_id,
            symbol=detail["symbol"],
            name=detail["name"],
            market_cap_rank=detail.get("market_cap_rank"),
            current_price=_usd(market_data, "current_price"),
            price_change_percentage_24h=market_data.get("price_change_percentage_24h"),
            high_24h=_usd(market_data, "high_24h"),
            low_24h=_usd(market_data, "low_24h"),
            market_cap=_usd(market_data, "market_cap"),
            total_volume=_usd(market_data, "total_volume"),
        )
    except _PAYLOAD_ERRORS as exc:
        raise UpstreamError(PROVIDER, f"Unexpected /coins/{coin_id} payload") from exc
