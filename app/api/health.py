# app/api/health.py
from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Response

from app.config.settings import get_settings

router = APIRouter(tags=["health"])

APP_STARTED_AT = time.time()


def _now_meta() -> Dict[str, Any]:
    now_ts = time.time()
    now_dt = datetime.fromtimestamp(now_ts, tz=timezone.utc)
    return {
        "now_unix": int(now_ts),
        "now_iso": now_dt.isoformat().replace("+00:00", "Z"),
        "uptime_s": int(now_ts - APP_STARTED_AT),
    }


def _check_config() -> Dict[str, Any]:
    settings = get_settings()
    return {
        "ok": settings.bot_configured,
        "bot_token_configured": settings.bot_configured,
        "providers": {
            "coingecko": settings.COINGECKO_API_URL,
            "axiom": settings.AXIOM_API_URL,
        },
    }


@router.get("/live")
async def live():
    return {"status": "ok"}


@router.get("/health")
async def health(response: Response):
    config_check = _check_config()
    payload: Dict[str, Any] = {
        "status": "ok",
        **_now_meta(),
        "checks": {"config": config_check},
    }

    # without a token every reply fails, so report degraded
    if not config_check["ok"]:
        payload["status"] = "degraded"
        payload["degraded_reasons"] = ["bot_token_missing"]
        response.status_code = 503

    return payload
