"""
Axiom Trade pulse sections (new pairs, final stretch, migrated).

Unlike the CoinGecko helpers, nothing here raises: when the provider cannot
be used, a section falls back to a fixed sample listing so /pulse always has
something to show.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List

import httpx
from pydantic import ValidationError

from app.config.settings import get_settings
from app.schemas.market import PulseListing, PulseSection
from app.services.errors import UpstreamError
from app.services.http import open_client

logger = logging.getLogger("crypto_bot.axiom")

PROVIDER = "axiom"


# ----------------------------
# fallback fixtures
# ----------------------------
_FALLBACK: Dict[PulseSection, List[Dict[str, Any]]] = {
    PulseSection.NEW_PAIRS: [
        {
            "name": "PEPE2.0",
            "symbol": "PEPE2",
            "price": 0.000001234,
            "marketCap": 1250000,
            "volume24h": 450000,
            "holders": 1250,
            "age": "15m",
            "change24h": 45.67,
        },
        {
            "name": "DogeCoin Classic",
            "symbol": "DOGEC",
            "price": 0.00234,
            "marketCap": 890000,
            "volume24h": 320000,
            "holders": 890,
            "age": "8m",
            "change24h": -12.34,
        },
        {
            "name": "Solana Cat",
            "symbol": "SCAT",
            "price": 0.0000871,
            "marketCap": 410000,
            "volume24h": 152000,
            "holders": 512,
            "age": "4m",
            "change24h": 18.9,
        },
        {
            "name": "Based Frog",
            "symbol": "BFROG",
            "price": 0.000452,
            "marketCap": 275000,
            "volume24h": 98000,
            "holders": 301,
            "age": "3m",
            "change24h": -4.2,
        },
        {
            "name": "Tiny Whale",
            "symbol": "TWHL",
            "price": 0.0000119,
            "marketCap": 118000,
            "volume24h": 41000,
            "holders": 144,
            "age": "1m",
            "change24h": 7.5,
        },
    ],
    PulseSection.FINAL_STRETCH: [
        {
            "name": "MoonShot Token",
            "symbol": "MOON",
            "price": 0.0456,
            "marketCap": 2340000,
            "volume24h": 890000,
            "holders": 2100,
            "age": "2h",
            "change24h": 123.45,
            "progress": 85,
        },
        {
            "name": "Rocket Dog",
            "symbol": "RDOG",
            "price": 0.0123,
            "marketCap": 1870000,
            "volume24h": 640000,
            "holders": 1760,
            "age": "1h",
            "change24h": 67.8,
            "progress": 92,
        },
        {
            "name": "Laser Eyes",
            "symbol": "LASER",
            "price": 0.00981,
            "marketCap": 1420000,
            "volume24h": 505000,
            "holders": 1330,
            "age": "3h",
            "change24h": -8.15,
            "progress": 78,
        },
        {
            "name": "Chad Coin",
            "symbol": "CHAD",
            "price": 0.00644,
            "marketCap": 1150000,
            "volume24h": 388000,
            "holders": 1045,
            "age": "45m",
            "change24h": 31.2,
            "progress": 71,
        },
        {
            "name": "Gigabrain",
            "symbol": "GIGA",
            "price": 0.00512,
            "marketCap": 990000,
            "volume24h": 296000,
            "holders": 960,
            "age": "50m",
            "change24h": 12.05,
            "progress": 66,
        },
    ],
    PulseSection.MIGRATED: [
        {
            "name": "Successful Meme",
            "symbol": "SMEME",
            "price": 0.234,
            "marketCap": 15600000,
            "volume24h": 3400000,
            "holders": 8900,
            "age": "1d",
            "change24h": 234.56,
            "migrationTime": "2h ago",
        },
        {
            "name": "Graduate Goose",
            "symbol": "GOOSE",
            "price": 0.0871,
            "marketCap": 8700000,
            "volume24h": 2100000,
            "holders": 6120,
            "age": "20h",
            "change24h": 88.4,
            "migrationTime": "5h ago",
        },
        {
            "name": "Raydium Rat",
            "symbol": "RRAT",
            "price": 0.0412,
            "marketCap": 5300000,
            "volume24h": 1250000,
            "holders": 4410,
            "age": "16h",
            "change24h": -15.6,
            "migrationTime": "8h ago",
        },
        {
            "name": "Liquid Llama",
            "symbol": "LLAMA",
            "price": 0.0275,
            "marketCap": 3900000,
            "volume24h": 870000,
            "holders": 3580,
            "age": "1d",
            "change24h": 42.1,
            "migrationTime": "12h ago",
        },
        {
            "name": "Bonded Bear",
            "symbol": "BBEAR",
            "price": 0.0169,
            "marketCap": 2600000,
            "volume24h": 540000,
            "holders": 2790,
            "age": "2d",
            "change24h": -2.3,
            "migrationTime": "1d ago",
        },
    ],
}


def fallback_listings(section: PulseSection) -> List[PulseListing]:
    return [PulseListing.model_validate(item) for item in _FALLBACK.get(section, [])]


# ----------------------------
# response shape normalization
# ----------------------------
def normalize_pulse_payload(payload: Any, section: PulseSection | None = None) -> List[Dict[str, Any]]:
    """
    Accept a bare list, ``{"data": [...]}`` or ``{"tokens": [...]}``.
    Any other shape is an empty section. Non-object entries are dropped.
    """
    if isinstance(payload, list):
        items = payload
    elif isinstance(payload, dict) and isinstance(payload.get("data"), list):
        items = payload["data"]
    elif isinstance(payload, dict) and isinstance(payload.get("tokens"), list):
        items = payload["tokens"]
    else:
        logger.warning(
            "⚠️ axiom unexpected shape | section=%s | type=%s",
            section.value if section else None,
            type(payload).__name__,
        )
        return []

    return [item for item in items if isinstance(item, dict)]


# ----------------------------
# fetch
# ----------------------------
async def _fetch_section_payload(client: httpx.AsyncClient, section: PulseSection) -> Any:
    url = f"{get_settings().AXIOM_API_URL}/pulse/{section.value}"

    try:
        response = await client.get(url)
    except httpx.HTTPError as exc:
        raise UpstreamError(PROVIDER, f"Unable to reach Axiom ({section.value})") from exc

    if not response.is_success:
        raise UpstreamError(PROVIDER, f"API error: {response.status_code}", status_code=response.status_code)

    try:
        return response.json()
    except ValueError as exc:
        raise UpstreamError(PROVIDER, f"Invalid JSON for {section.value}") from exc


async def fetch_pulse_section(
    section: PulseSection,
    *,
    http: httpx.AsyncClient | None = None,
) -> List[PulseListing]:
    try:
        async with open_client(http) as client:
            payload = await _fetch_section_payload(client, section)
    except UpstreamError as exc:
        logger.warning("⚠️ axiom fallback | section=%s | err=%s", section.value, exc)
        return fallback_listings(section)

    listings: List[PulseListing] = []
    for item in normalize_pulse_payload(payload, section):
        try:
            listings.append(PulseListing.model_validate(item))
        except ValidationError as exc:
            # one bad item never costs the rest of the live section
            logger.warning(
                "⚠️ axiom item dropped | section=%s | name=%s | err=%s",
                section.value,
                item.get("name"),
                exc.errors()[0]["msg"],
            )
    return listings


async def fetch_pulse(
    *,
    http: httpx.AsyncClient | None = None,
) -> Dict[PulseSection, List[PulseListing]]:
    """
    Fetch all pulse sections concurrently. A section that still blows up
    (anything beyond the fallback path) is reported empty; the rest are kept.
    """
    sections = list(PulseSection)

    async with open_client(http) as client:
        results = await asyncio.gather(
            *(fetch_pulse_section(section, http=client) for section in sections),
            return_exceptions=True,
        )

    out: Dict[PulseSection, List[PulseListing]] = {}
    for section, result in zip(sections, results):
        if isinstance(result, BaseException):
            if isinstance(result, asyncio.CancelledError):
                raise result
            logger.error("❌ axiom section error | section=%s | err=%r", section.value, result)
            out[section] = []
        else:
            out[section] = result
    return out
