"""
MarkdownV2 renderers for every bot reply.

Each function takes already-parsed market records and returns the final
message text. Literal values go through ``escape_markdown`` exactly once;
the bold markers and pre-escaped punctuation written here are markup.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

from app.schemas.market import (
    CoinDetail,
    GlobalStats,
    MarketSnapshotRow,
    NotFound,
    PulseListing,
    PulseSection,
    TrendingItem,
)
from app.utils.markdown import escape_markdown

POSITIVE = "🟢"
NEGATIVE = "🔴"

FOOTER = "/help \\- Show commands"

HELP_TEXT = (
    "Welcome to the Crypto Price Bot\\! 🚀\n\n"
    "Available commands:\n"
    "/price \\<coin\\> \\- Get price for a specific coin \\(e\\.g\\., /price bitcoin\\)\n"
    "/top10 \\- Get top 10 cryptocurrencies by market cap\n"
    "/trending \\- Show trending coins\n"
    "/pulse \\- Show new coins from Axiom Trade \\(New Pairs, Final Stretch, Migrated\\)\n"
    "/global \\- Show global market stats\n"
    "/help \\- Show this help message"
)

PULSE_HEADINGS = {
    PulseSection.NEW_PAIRS: "🆕 *New Pairs*",
    PulseSection.FINAL_STRETCH: "🏁 *Final Stretch*",
    PulseSection.MIGRATED: "✅ *Migrated to Raydium*",
}

PULSE_EMPTY = "📭 No new coins found in pulse sections at the moment\\."

_FAILURES = {
    "global": "❌ Failed to fetch global market stats\\. Please try again later\\.",
    "top10": "❌ Failed to fetch top 10 cryptocurrencies\\. Please try again later\\.",
    "trending": "❌ Failed to fetch trending coins\\. Please try again later\\.",
    "pulse": "❌ Failed to fetch pulse data from Axiom Trade\\. Please try again later\\.",
}

GENERIC_FAILURE = "❌ Sorry, an error occurred\\. Please try again later\\."


# ----------------------------
# value helpers
# ----------------------------
def format_number(value: Any) -> str:
    """
    en-US style grouping: ``1234567 -> 1,234,567``, ``67000.5 -> 67,000.5``.

    At most three fraction digits, eight below 1 so micro-cap prices stay
    readable. Trailing zeros are trimmed. Returns plain text, not escaped.
    """
    if value is None:
        return "N/A"
    if isinstance(value, int) and not isinstance(value, bool):
        return f"{value:,}"

    number = float(value)
    if number.is_integer():
        return f"{int(number):,}"

    decimals = 3 if abs(number) >= 1 else 8
    text = f"{number:,.{decimals}f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def format_usd(value: Any) -> str:
    if value is None:
        return "N/A"
    return "$" + escape_markdown(format_number(value))


def trend_glyph(change: float | None) -> str:
    return POSITIVE if (change or 0) >= 0 else NEGATIVE


def format_percent(value: float | None) -> str:
    return escape_markdown(f"{(value or 0):.2f}") + "\\%"


def _title(name: str, symbol: str) -> str:
    return f"{escape_markdown(name)} \\({escape_markdown(symbol.upper())}\\)"


# ----------------------------
# command replies
# ----------------------------
def format_help() -> str:
    return HELP_TEXT


def format_failure(family: str, argument: str | None = None) -> str:
    """Fixed apology for a command family."""
    if family == "price" and argument is not None:
        return f"❌ Failed to fetch price for {escape_markdown(argument)}\\. Please try again later\\."
    return _FAILURES.get(family, GENERIC_FAILURE)


def format_global_stats(stats: GlobalStats) -> str:
    return (
        "🌍 *Global Crypto Market Stats*\n\n"
        f"Total Market Cap: {format_usd(stats.total_market_cap_usd)}\n"
        f"24h Volume: {format_usd(stats.total_volume_usd)}\n"
        f"BTC Dominance: {format_percent(stats.btc_dominance_percent)}\n"
        f"Active Cryptocurrencies: {escape_markdown(stats.active_cryptocurrencies)}\n"
        f"Markets: {escape_markdown(stats.markets)}\n\n"
        f"{FOOTER}"
    )


def format_top10(rows: Sequence[MarketSnapshotRow]) -> str:
    parts = ["📊 *Top 10 Cryptocurrencies*\n\n"]

    for index, coin in enumerate(rows, start=1):
        change = coin.price_change_percentage_24h or 0
        parts.append(
            f"{index}\\. {_title(coin.name, coin.symbol)}\n"
            f"💵 Price: {format_usd(coin.current_price)}\n"
            f"{trend_glyph(change)} 24h: {format_percent(change)}\n"
            f"💎 Market Cap: {format_usd(coin.market_cap)}\n"
            f"📊 Volume: {format_usd(coin.total_volume)}\n\n"
        )

    parts.append(f"\n{FOOTER}")
    return "".join(parts)


def format_trending(items: Sequence[TrendingItem]) -> str:
    parts = ["🔥 *Trending Cryptocurrencies*\n\n"]

    for index, coin in enumerate(items, start=1):
        rank = coin.market_cap_rank if coin.market_cap_rank is not None else "N/A"
        price_btc = f"{coin.price_btc:.8f}" if coin.price_btc is not None else "N/A"
        parts.append(
            f"{index}\\. {_title(coin.name, coin.symbol)}\n"
            f"Market Cap Rank: \\#{escape_markdown(rank)}\n"
            f"Price BTC: {escape_markdown(price_btc)}\n\n"
        )

    parts.append(f"\n{FOOTER}")
    return "".join(parts)


def format_price(coin: CoinDetail) -> str:
    change = coin.price_change_percentage_24h or 0
    rank = coin.market_cap_rank if coin.market_cap_rank is not None else "N/A"
    return (
        f"💰 *{_title(coin.name, coin.symbol)}*\n\n"
        f"Current Price: {format_usd(coin.current_price)}\n"
        f"{trend_glyph(change)} 24h Change: {format_percent(change)}\n"
        f"📈 24h High: {format_usd(coin.high_24h)}\n"
        f"📉 24h Low: {format_usd(coin.low_24h)}\n"
        f"💎 Market Cap: {format_usd(coin.market_cap)}\n"
        f"📊 Market Cap Rank: \\#{escape_markdown(rank)}\n"
        f"💫 Volume: {format_usd(coin.total_volume)}\n"
        f"{FOOTER}"
    )


def format_not_found(result: NotFound) -> str:
    return f"❌ Could not find cryptocurrency: {escape_markdown(result.query)}"


# ----------------------------
# pulse
# ----------------------------
def format_pulse_listing(coin: PulseListing, index: int) -> str:
    # zero counts as missing for every optional numeric field
    lines = [f"{index}\\. {_title(coin.name, coin.symbol)}"]

    if coin.price:
        lines.append(f"💰 Price: {format_usd(coin.price)}")
    if coin.change_24h:
        lines.append(f"{trend_glyph(coin.change_24h)} 24h: {format_percent(coin.change_24h)}")
    if coin.market_cap:
        lines.append(f"💎 Market Cap: {format_usd(coin.market_cap)}")
    if coin.volume_24h:
        lines.append(f"📊 Volume: {format_usd(coin.volume_24h)}")
    if coin.holders:
        lines.append(f"👥 Holders: {escape_markdown(format_number(coin.holders))}")
    if coin.age:
        lines.append(f"⏰ Age: {escape_markdown(coin.age)}")
    if coin.progress:
        lines.append(f"📈 Progress: {escape_markdown(format_number(coin.progress))}\\%")
    if coin.migration_time:
        lines.append(f"🚀 Migrated: {escape_markdown(coin.migration_time)}")

    return "\n".join(lines) + "\n\n"


def format_pulse(
    sections: Mapping[PulseSection, Iterable[PulseListing]],
    limit: int = 5,
) -> str:
    parts = ["🚀 *Axiom Trade Pulse \\- New Coins*\n\n"]
    rendered_any = False

    for section in PulseSection:
        listings = list(sections.get(section) or [])[:limit]
        if not listings:
            continue

        rendered_any = True
        parts.append(PULSE_HEADINGS[section] + "\n")
        for index, coin in enumerate(listings, start=1):
            parts.append(format_pulse_listing(coin, index))
        parts.append("\n")

    if not rendered_any:
        parts.append(PULSE_EMPTY + "\n\n")

    parts.append(FOOTER)
    return "".join(parts)
