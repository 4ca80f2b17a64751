from __future__ import annotations

import asyncio

from sqlalchemy import func, select

from cryptofav.db.models import Favorite


def _count(db_sessionmaker, asset_id: str | None = None) -> int:
    async def _q():
        async with db_sessionmaker() as session:
            stmt = select(func.count()).select_from(Favorite)
            if asset_id:
                stmt = stmt.where(Favorite.asset_id == asset_id)
            return (await session.execute(stmt)).scalar_one()

    return asyncio.run(_q())


def test_create_favorite_is_idempotent(api, db_sessionmaker):
    first = api.post("/favorites", json={"assetId": "bitcoin"})
    second = api.post("/favorites", json={"assetId": "bitcoin"})

    assert first.status_code == 201
    assert second.status_code == 201
    assert first.json()["asset_id"] == "bitcoin"
    assert set(first.json()) == {"asset_id", "created_at", "updated_at"}
    assert second.json()["created_at"] == first.json()["created_at"]
    assert _count(db_sessionmaker) == 1


def test_list_returns_most_recent_first(api):
    api.post("/favorites", json={"assetId": "bitcoin"})
    api.post("/favorites", json={"assetId": "ethereum"})

    resp = api.get("/favorites")

    assert resp.status_code == 200
    assert [f["asset_id"] for f in resp.json()] == ["ethereum", "bitcoin"]


def test_delete_is_idempotent(api, db_sessionmaker):
    api.post("/favorites", json={"assetId": "bitcoin"})

    first = api.delete("/favorites/bitcoin")
    second = api.delete("/favorites/bitcoin")

    assert first.status_code == 204
    assert second.status_code == 204
    assert first.content == b""
    assert _count(db_sessionmaker, "bitcoin") == 0


def test_create_requires_asset_id(api, db_sessionmaker):
    resp = api.post("/favorites", json={})

    assert resp.status_code == 422
    body = resp.json()
    assert "assetId" in body["errors"]
    assert body["message"]
    assert _count(db_sessionmaker) == 0


def test_create_rejects_empty_and_non_string_asset_id(api):
    assert api.post("/favorites", json={"assetId": ""}).status_code == 422
    assert api.post("/favorites", json={"assetId": 42}).status_code == 422


def test_favorites_do_not_touch_upstream(api, upstream):
    api.post("/favorites", json={"assetId": "bitcoin"})
    api.get("/favorites")
    api.delete("/favorites/bitcoin")

    assert upstream.calls == 0
