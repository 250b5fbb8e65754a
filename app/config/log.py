# app/config/log.py
from __future__ import annotations

import logging

from app.config.settings import get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_configured = False


def configure_logging(level: str | None = None) -> None:
    """
    Install the root handler once. Safe to call from every app factory call.
    """
    global _configured
    if _configured:
        return

    level_name = (level or get_settings().LOG_LEVEL).upper()
    logging.basicConfig(format=LOG_FORMAT, level=getattr(logging, level_name, logging.INFO))

    # httpx logs every request at INFO, which would leak the bot token in URLs
    logging.getLogger("httpx").setLevel(logging.WARNING)
    _configured = True
