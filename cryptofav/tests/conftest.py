from __future__ import annotations

import asyncio
from typing import Any, Callable

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from cryptofav.api.assets import router as assets_router
from cryptofav.api.favorites import router as favorites_router
from cryptofav.api.health import router as health_router
from cryptofav.db.models import Favorite  # noqa: F401
from cryptofav.db.session import Base, get_db
from cryptofav.errors import register_error_handlers
from cryptofav.services.coingecko import CoinGeckoClient, get_market_client
from cryptofav.utils.cache import TTLCache, get_cache


class FakeClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeCoinGecko:
    """Scripted upstream: replies are consumed in order, the last one repeats."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self._replies: list[Any] = [(200, [])]

    def reply(self, *replies: Any) -> "FakeCoinGecko":
        self._replies = list(replies)
        return self

    def json(self, payload: Any, status_code: int = 200) -> "FakeCoinGecko":
        return self.reply((status_code, payload))

    @property
    def calls(self) -> int:
        return len(self.requests)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self._replies.pop(0) if len(self._replies) > 1 else self._replies[0]
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(request)
        status_code, payload = reply
        return httpx.Response(status_code, json=payload)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def cache(clock) -> TTLCache:
    return TTLCache(clock=clock)


@pytest.fixture()
def upstream() -> FakeCoinGecko:
    return FakeCoinGecko()


@pytest.fixture()
def market_client(cache, upstream) -> CoinGeckoClient:
    return CoinGeckoClient(
        cache,
        base_url="https://api.coingecko.test/api/v3",
        retry_delay=0,
        transport=upstream.transport(),
    )


@pytest_asyncio.fixture
async def sessionmaker():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    Session = async_sessionmaker(engine, expire_on_commit=False)
    try:
        yield Session
    finally:
        await engine.dispose()


@pytest.fixture()
def db_sessionmaker(tmp_path):
    # file DB + NullPool: TestClient drives each request on its own event loop
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)

    async def _setup():
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    asyncio.run(_setup())
    Session = async_sessionmaker(engine, expire_on_commit=False)
    yield Session
    asyncio.run(engine.dispose())


def build_app(overrides: dict[Callable, Callable]) -> FastAPI:
    app = FastAPI()
    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(assets_router)
    app.include_router(favorites_router)
    app.dependency_overrides.update(overrides)
    return app


@pytest.fixture()
def api(db_sessionmaker, market_client, cache):
    async def _get_db():
        async with db_sessionmaker() as session:
            yield session

    app = build_app(
        {
            get_db: _get_db,
            get_market_client: lambda: market_client,
            get_cache: lambda: cache,
        }
    )
    return TestClient(app, raise_server_exceptions=False)
