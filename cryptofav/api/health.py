# cryptofav/api/health.py
from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, Response
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from cryptofav.db.session import get_db
from cryptofav.utils.cache import TTLCache, get_cache
from cryptofav.utils.time import iso_z

router = APIRouter(tags=["health"])

APP_STARTED_AT = time.time()


def _now_meta() -> Dict[str, Any]:
    now_ts = time.time()
    return {
        "now_unix": int(now_ts),
        "now_iso": iso_z(datetime.fromtimestamp(now_ts, tz=timezone.utc)),
        "uptime_s": int(now_ts - APP_STARTED_AT),
    }


async def _check_db(db: AsyncSession) -> Dict[str, Any]:
    t0 = time.time()
    try:
        await db.execute(text("SELECT 1"))
        return {"ok": True, "latency_ms": int((time.time() - t0) * 1000)}
    except Exception as e:
        return {
            "ok": False,
            "latency_ms": int((time.time() - t0) * 1000),
            "error": str(e),
        }


def _check_cache(cache: TTLCache) -> Dict[str, Any]:
    return {"ok": True, **cache.stats()}


@router.get("/live")
async def live():
    return {"status": "ok"}


@router.get("/ready")
async def ready(
    response: Response,
    db: AsyncSession = Depends(get_db),
    cache: TTLCache = Depends(get_cache),
):
    checks = {
        "db": await _check_db(db),
        "cache": _check_cache(cache),
    }

    degraded_reasons = []
    if not checks["db"]["ok"]:
        degraded_reasons.append("db_unhealthy")

    payload: Dict[str, Any] = {**_now_meta(), "checks": checks}
    if degraded_reasons:
        payload["status"] = "degraded"
        payload["degraded_reasons"] = degraded_reasons
        response.status_code = 503
    else:
        payload["status"] = "ok"
        payload["degraded_reasons"] = []
    return payload
