# app/config/settings.py
from __future__ import annotations

import os
from dataclasses import dataclass


def parse_int(value: str | None, default: int) -> int:
    if value is None or value.strip() == "":
        return default
    return int(value)


def parse_float(value: str | None, default: float) -> float:
    if value is None or value.strip() == "":
        return default
    return float(value)


def parse_positive_int(value: str | None, default: int) -> int:
    parsed = parse_int(value, default)
    if parsed < 1:
        raise ValueError(f"expected a positive integer, got {value!r}")
    return parsed


def parse_url(value: str | None, default: str) -> str:
    if not value or not value.strip():
        return default
    return value.strip().rstrip("/")


@dataclass(frozen=True)
class Settings:
    TELEGRAM_BOT_TOKEN: str | None
    TELEGRAM_API_URL: str
    COINGECKO_API_URL: str
    AXIOM_API_URL: str
    HTTP_TIMEOUT_SECONDS: float
    HTTP_USER_AGENT: str
    LOG_LEVEL: str
    PULSE_SECTION_LIMIT: int

    @property
    def bot_configured(self) -> bool:
        return bool(self.TELEGRAM_BOT_TOKEN)

    @staticmethod
    def from_env() -> "Settings":
        return Settings(
            TELEGRAM_BOT_TOKEN=os.getenv("TELEGRAM_BOT_TOKEN") or None,
            TELEGRAM_API_URL=parse_url(os.getenv("TELEGRAM_API_URL"), "https://api.telegram.org"),
            COINGECKO_API_URL=parse_url(os.getenv("COINGECKO_API_URL"), "https://api.coingecko.com/api/v3"),
            AXIOM_API_URL=parse_url(os.getenv("AXIOM_API_URL"), "https://api.axiom.trade/v1"),
            HTTP_TIMEOUT_SECONDS=parse_float(os.getenv("HTTP_TIMEOUT_SECONDS"), 10.0),
            HTTP_USER_AGENT=os.getenv("HTTP_USER_AGENT", "Telegram Bot"),
            LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO").upper(),
            PULSE_SECTION_LIMIT=parse_positive_int(os.getenv("PULSE_SECTION_LIMIT"), 5),
        )


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment (tests)."""
    global _settings
    _settings = None
