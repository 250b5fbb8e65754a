from __future__ import annotations

import httpx
import pytest

from app.schemas.telegram import InboundMessage
from app.services import dispatcher as dispatcher_module
from app.services.dispatcher import (
    Command,
    CommandKind,
    DispatchStatus,
    dispatch,
    handle_update,
    parse_command,
)
from app.services.errors import UpstreamError
from app.services.formatter import FOOTER, PULSE_EMPTY, PULSE_HEADINGS


def _update(text: str | None, chat_id: int | None = 42) -> dict:
    message: dict = {"message_id": 7}
    if chat_id is not None:
        message["chat"] = {"id": chat_id, "type": "private"}
    if text is not None:
        message["text"] = text
    return {"update_id": 1, "message": message}


# ----------------------------
# parsing
# ----------------------------
@pytest.mark.parametrize(
    "text, expected",
    [
        ("/start", Command(CommandKind.HELP)),
        ("/help", Command(CommandKind.HELP)),
        ("  /TOP10  ", Command(CommandKind.TOP10)),
        ("/trending", Command(CommandKind.TRENDING)),
        ("/Pulse", Command(CommandKind.PULSE)),
        ("/global", Command(CommandKind.GLOBAL)),
        ("/price Bitcoin", Command(CommandKind.PRICE, "bitcoin")),
        ("/price eth extra words", Command(CommandKind.PRICE, "eth")),
        ("/price", Command(CommandKind.UNRECOGNIZED)),
        ("/pricebitcoin", Command(CommandKind.UNRECOGNIZED)),
        ("/top10 now", Command(CommandKind.UNRECOGNIZED)),
        ("hello there", Command(CommandKind.UNRECOGNIZED)),
        ("", Command(CommandKind.UNRECOGNIZED)),
    ],
)
def test_parse_command(text, expected):
    assert parse_command(text) == expected


# ----------------------------
# end-to-end flows against fake providers
# ----------------------------
@pytest.mark.asyncio
async def test_price_command_replies_with_detail(providers, btc_detail):
    providers.on("/api/v3/search", httpx.Response(200, json={"coins": [{"id": "bitcoin"}]}))
    providers.on("/api/v3/coins/bitcoin", httpx.Response(200, json=btc_detail))

    async with providers.client() as client:
        result = await handle_update(_update("/price bitcoin"), http=client)

    assert result.status is DispatchStatus.REPLIED
    assert result.delivered is True
    assert len(providers.sent) == 1

    sent = providers.sent[0]
    assert sent["chat_id"] == 42
    assert sent["parse_mode"] == "MarkdownV2"
    assert "Bitcoin" in sent["text"]
    assert "\\(BTC\\)" in sent["text"]
    assert "Current Price: $67,000\\.5" in sent["text"]

    telegram_req = providers.requests[-1]
    assert telegram_req.url.path == "/bottest-token/sendMessage"


@pytest.mark.asyncio
async def test_price_lookup_miss_echoes_query_without_prices(providers):
    providers.on("/api/v3/search", httpx.Response(200, json={"coins": []}))

    async with providers.client() as client:
        result = await handle_update(_update("/price doesnotexist123"), http=client)

    assert result.status is DispatchStatus.REPLIED
    text = providers.sent[0]["text"]
    assert "doesnotexist123" in text
    assert "$" not in text
    assert "Price" not in text


@pytest.mark.asyncio
async def test_pulse_all_sections_failing_still_renders_fallbacks(providers):
    for section in ("new-pairs", "final-stretch", "migrated"):
        providers.on(f"/v1/pulse/{section}", httpx.Response(500, text="boom"))

    async with providers.client() as client:
        result = await handle_update(_update("/pulse"), http=client)

    assert result.status is DispatchStatus.REPLIED
    text = providers.sent[0]["text"]
    for heading in PULSE_HEADINGS.values():
        assert heading in text
    assert text.count("5\\. ") == 3
    assert PULSE_EMPTY not in text


@pytest.mark.asyncio
async def test_pulse_all_sections_empty_renders_notice(providers):
    providers.on("/v1/pulse/new-pairs", httpx.Response(200, json=[]))
    providers.on("/v1/pulse/final-stretch", httpx.Response(200, json={"data": []}))
    providers.on("/v1/pulse/migrated", httpx.Response(200, json={"tokens": []}))

    async with providers.client() as client:
        await handle_update(_update("/pulse"), http=client)

    text = providers.sent[0]["text"]
    assert PULSE_EMPTY in text
    for heading in PULSE_HEADINGS.values():
        assert heading not in text


@pytest.mark.asyncio
async def test_top10_renders_ten_rows_in_provider_order(providers, market_rows):
    rows = market_rows(10)
    providers.on("/api/v3/coins/markets", httpx.Response(200, json=rows))

    async with providers.client() as client:
        await handle_update(_update("/top10"), http=client)

    text = providers.sent[0]["text"]
    positions = [text.index(f"{i + 1}\\. Coin {i} \\(C{i}\\)") for i in range(10)]
    assert positions == sorted(positions)
    assert text.count("24h:") == 10
    assert text.endswith(FOOTER)


@pytest.mark.asyncio
async def test_help_needs_no_upstream(providers):
    async with providers.client() as client:
        result = await handle_update(_update("/start"), http=client)

    assert result.status is DispatchStatus.REPLIED
    assert "Available commands" in providers.sent[0]["text"]
    assert [r.url.host for r in providers.requests] == ["api.telegram.org"]


# ----------------------------
# failure policy
# ----------------------------
@pytest.mark.asyncio
async def test_upstream_failure_becomes_apology(providers):
    providers.on("/api/v3/global", httpx.Response(502, text="bad gateway"))

    async with providers.client() as client:
        result = await handle_update(_update("/global"), http=client)

    assert result.status is DispatchStatus.FAILED
    assert "UpstreamError" in result.error
    assert providers.sent[0]["text"].startswith("❌ Failed to fetch global market stats")


@pytest.mark.asyncio
async def test_price_failure_apology_names_the_coin(monkeypatch, providers):
    async def broken(query, *, http=None):
        raise UpstreamError("coingecko", "API error: 500", status_code=500)

    monkeypatch.setattr(dispatcher_module, "search_and_fetch_price", broken)

    async with providers.client() as client:
        await handle_update(_update("/price solana"), http=client)

    assert "Failed to fetch price for solana" in providers.sent[0]["text"]


@pytest.mark.asyncio
async def test_unexpected_error_is_contained(monkeypatch, providers):
    async def explode(*, http=None):
        raise KeyError("market_data")

    monkeypatch.setattr(dispatcher_module, "fetch_trending", explode)

    async with providers.client() as client:
        result = await handle_update(_update("/trending"), http=client)

    assert result.status is DispatchStatus.FAILED
    assert "trending coins" in providers.sent[0]["text"]


@pytest.mark.asyncio
async def test_delivery_error_is_swallowed(providers):
    providers.telegram_status = 400

    async with providers.client() as client:
        result = await handle_update(_update("/help"), http=client)

    assert result.status is DispatchStatus.REPLIED
    assert result.delivered is False
    assert len(providers.sent) == 1


# ----------------------------
# ignored input
# ----------------------------
@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        _update(None),
        _update(""),
        _update("/help", chat_id=None),
        {"update_id": 1},
        {"update_id": 1, "edited_message": {"text": "/help"}},
        {"message": "not an object"},
        [],
    ],
)
async def test_malformed_updates_send_nothing(providers, payload):
    async with providers.client() as client:
        result = await handle_update(payload, http=client)

    assert result.status is DispatchStatus.IGNORED
    assert providers.requests == []


@pytest.mark.asyncio
async def test_unrecognized_text_sends_nothing(providers):
    async with providers.client() as client:
        result = await dispatch(InboundMessage(chat_id=1, text="gm frens"), http=client)

    assert result.status is DispatchStatus.IGNORED
    assert result.command == Command(CommandKind.UNRECOGNIZED)
    assert providers.requests == []
