# app/main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.health import router as health_router
from app.api.webhook import router as webhook_router
from app.config.log import configure_logging
from app.config.settings import get_settings

logger = logging.getLogger("crypto_bot.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    if not settings.bot_configured:
        logger.warning("⚠️ TELEGRAM_BOT_TOKEN not configured; replies will fail")
    logger.info("✅ crypto bot started | coingecko=%s | axiom=%s", settings.COINGECKO_API_URL, settings.AXIOM_API_URL)
    yield
    logger.info("🛑 crypto bot stopped")


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(title="Crypto Telegram Bot", lifespan=lifespan)

    # Routers
    app.include_router(health_router)
    app.include_router(webhook_router)

    @app.get("/")
    def root() -> dict[str, str]:
        return {"message": "Crypto Price Bot is running"}

    return app


app = create_app()
