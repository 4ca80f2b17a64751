"""Cached, normalizing client for the public CoinGecko API."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, TypeVar
from urllib.parse import quote

import httpx

from cryptofav.config.settings import Settings, get_settings
from cryptofav.schemas.market import AssetDetail, MarketChart, MarketListing
from cryptofav.services.normalization import (
    MARKETS_LIMIT,
    normalize_asset,
    normalize_market_chart,
    normalize_markets,
)
from cryptofav.services.results import FailureKind, FetchResult
from cryptofav.utils.cache import CacheStore, get_cache


logger = logging.getLogger("cryptofav.coingecko")

COINGECKO_URL = "https://api.coingecko.com/api/v3"

MIN_CHART_DAYS = 1
MAX_CHART_DAYS = 365

T = TypeVar("T")


class UpstreamError(Exception):
    """Transport failure or non-2xx answer from CoinGecko, after retries."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def clamp_days(days: int) -> int:
    return max(MIN_CHART_DAYS, min(int(days), MAX_CHART_DAYS))


def _key_segment(asset_id: str) -> str:
    # percent-encode "." too so an id can never reach into another key's segments
    return quote(asset_id, safe="").replace(".", "%2E")


def markets_cache_key() -> str:
    return "coingecko.markets.top10"


def asset_cache_key(asset_id: str) -> str:
    return f"coingecko.asset.{_key_segment(asset_id)}"


def market_chart_cache_key(asset_id: str, days: int) -> str:
    return f"coingecko.market_chart.{_key_segment(asset_id)}.{days}"


def _classify(exc: UpstreamError) -> FailureKind:
    if exc.status_code == 404:
        return FailureKind.NOT_FOUND
    return FailureKind.UNAVAILABLE


class CoinGeckoClient:
    """
    Fetches market listings, asset detail and price history.

    Every operation goes through the injected cache: a hit returns the stored
    record, a miss performs one request (plus ``retries`` retries after a
    fixed delay), normalizes the body and stores it for ``ttl_seconds``.
    Failures are returned as tagged ``FetchResult`` values and never cached.
    """

    def __init__(
        self,
        cache: CacheStore,
        *,
        base_url: str = COINGECKO_URL,
        ttl_seconds: int = 60,
        timeout: float = 10.0,
        retries: int = 1,
        retry_delay: float = 0.2,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._cache = cache
        self._base_url = base_url.rstrip("/")
        self._ttl = ttl_seconds
        self._timeout = timeout
        self._retries = max(0, retries)
        self._retry_delay = retry_delay
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, cache: CacheStore) -> "CoinGeckoClient":
        return cls(
            cache,
            base_url=settings.COINGECKO_BASE_URL,
            ttl_seconds=settings.CACHE_TTL_SECONDS,
            timeout=settings.COINGECKO_TIMEOUT_SECONDS,
            retries=settings.COINGECKO_RETRIES,
            retry_delay=settings.COINGECKO_RETRY_DELAY_MS / 1000.0,
        )

    # ----------------------------
    # Operations
    # ----------------------------
    async def list_markets(self) -> FetchResult[list[MarketListing]]:
        async def compute() -> list[MarketListing]:
            raw = await self._get_json(
                "/coins/markets",
                params={
                    "vs_currency": "usd",
                    "order": "market_cap_desc",
                    "per_page": MARKETS_LIMIT,
                    "page": 1,
                    "sparkline": "false",
                },
            )
            return normalize_markets(raw)

        return await self._cached(markets_cache_key(), compute)

    async def get_asset(self, asset_id: str) -> FetchResult[AssetDetail]:
        async def compute() -> AssetDetail:
            raw = await self._get_json(f"/coins/{quote(asset_id, safe='')}")
            return normalize_asset(raw)

        result = await self._cached(asset_cache_key(asset_id), compute)
        if result.ok and not (isinstance(result.value, AssetDetail) and result.value.id):
            return FetchResult.failed(FailureKind.NOT_FOUND, f"no asset payload for {asset_id!r}")
        return result

    async def get_market_chart(self, asset_id: str, days: int = 7) -> FetchResult[MarketChart]:
        days = clamp_days(days)

        async def compute() -> MarketChart:
            raw = await self._get_json(
                f"/coins/{quote(asset_id, safe='')}/market_chart",
                params={"vs_currency": "usd", "days": days},
            )
            return normalize_market_chart(raw)

        result = await self._cached(market_chart_cache_key(asset_id, days), compute)
        if result.ok and not isinstance(result.value, MarketChart):
            return FetchResult.failed(FailureKind.UNAVAILABLE, f"unexpected cached value for {asset_id!r}")
        return result

    # ----------------------------
    # Plumbing
    # ----------------------------
    async def _cached(self, key: str, compute: Callable[[], Awaitable[T]]) -> FetchResult[T]:
        try:
            value = await self._cache.remember(key, self._ttl, compute)
        except UpstreamError as exc:
            kind = _classify(exc)
            logger.warning("coingecko fetch failed | key=%s | kind=%s | err=%s", key, kind.value, exc)
            return FetchResult.failed(kind, str(exc))
        return FetchResult.success(value)

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        attempts = self._retries + 1
        attempt = 0
        while True:
            attempt += 1
            try:
                async with httpx.AsyncClient(
                    base_url=self._base_url,
                    timeout=self._timeout,
                    transport=self._transport,
                    headers={"Accept": "application/json"},
                ) as client:
                    response = await client.get(path, params=params)
                    response.raise_for_status()
            except httpx.HTTPError as exc:
                status = exc.response.status_code if isinstance(exc, httpx.HTTPStatusError) else None
                if attempt >= attempts:
                    raise UpstreamError(f"GET {path} failed: {exc}", status_code=status) from exc
                logger.warning(
                    "coingecko request failed | path=%s | attempt=%d/%d | status=%s | sleep=%.2fs",
                    path,
                    attempt,
                    attempts,
                    status,
                    self._retry_delay,
                )
                await asyncio.sleep(self._retry_delay)
                continue

            try:
                return response.json()
            except ValueError:
                logger.warning("coingecko returned a non-JSON body | path=%s", path)
                return None


_client: CoinGeckoClient | None = None


def get_market_client() -> CoinGeckoClient:
    global _client
    if _client is None:
        _client = CoinGeckoClient.from_settings(get_settings(), get_cache())
    return _client
