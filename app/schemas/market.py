"""Pydantic models for the market data rendered by the bot."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MarketSnapshotRow(BaseModel):
    """One row of the CoinGecko ``/coins/markets`` listing."""

    id: str
    symbol: str
    name: str
    current_price: Optional[float] = None
    price_change_percentage_24h: Optional[float] = None
    market_cap: Optional[float] = None
    total_volume: Optional[float] = None


class CoinDetail(BaseModel):
    """Flattened ``/coins/{id}`` record, USD figures only."""

    id: str
    symbol: str
    name: str
    market_cap_rank: Optional[int] = None
    current_price: Optional[float] = None
    price_change_percentage_24h: Optional[float] = None
    high_24h: Optional[float] = None
    low_24h: Optional[float] = None
    market_cap: Optional[float] = None
    total_volume: Optional[float] = None


class NotFound(BaseModel):
    """A coin search that matched nothing. Normal result, not an error."""

    query: str


class TrendingItem(BaseModel):
    name: str
    symbol: str
    market_cap_rank: Optional[int] = None
    price_btc: Optional[float] = None


class GlobalStats(BaseModel):
    total_market_cap_usd: float
    total_volume_usd: float
    btc_dominance_percent: float
    active_cryptocurrencies: int
    markets: int


class PulseSection(str, Enum):
    NEW_PAIRS = "new-pairs"
    FINAL_STRETCH = "final-stretch"
    MIGRATED = "migrated"


class PulseListing(BaseModel):
    """
    Sparse token listing from an Axiom pulse section.

    Only name and symbol are always present; the formatter skips every other
    field when it is missing or zero. Provider keys are camelCase.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)

    name: str = "Unknown"
    symbol: str = "N/A"
    price: Optional[float] = None
    market_cap: Optional[float] = Field(default=None, alias="marketCap")
    volume_24h: Optional[float] = Field(default=None, alias="volume24h")
    holders: Optional[int] = None
    age: Optional[str] = None
    change_24h: Optional[float] = Field(default=None, alias="change24h")
    progress: Optional[float] = None
    migration_time: Optional[str] = Field(default=None, alias="migrationTime")

    @field_validator("name", mode="before")
    @classmethod
    def _default_name(cls, value):
        return "Unknown" if value in (None, "") else value

    @field_validator("symbol", mode="before")
    @classmethod
    def _default_symbol(cls, value):
        return "N/A" if value in (None, "") else value
