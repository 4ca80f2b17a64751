from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cryptofav.db.models import Favorite


logger = logging.getLogger("cryptofav.favorites")


async def get_favorite(session: AsyncSession, asset_id: str) -> Favorite | None:
    result = await session.execute(select(Favorite).where(Favorite.asset_id == asset_id))
    return result.scalars().first()


async def add_favorite(session: AsyncSession, asset_id: str) -> Favorite:
    """First-or-create: an existing favorite is returned untouched."""
    row = await get_favorite(session, asset_id)
    if row:
        return row

    row = Favorite(asset_id=asset_id)
    session.add(row)
    try:
        await session.commit()
    except IntegrityError:
        # lost a race with a concurrent insert of the same asset id
        await session.rollback()
        existing = await get_favorite(session, asset_id)
        if existing is None:
            raise
        return existing

    await session.refresh(row)
    logger.info("favorite added | asset_id=%s", asset_id)
    return row


async def list_favorites(session: AsyncSession) -> list[Favorite]:
    stmt = select(Favorite).order_by(Favorite.created_at.desc(), Favorite.id.desc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def remove_favorite(session: AsyncSession, asset_id: str) -> int:
    result = await session.execute(delete(Favorite).where(Favorite.asset_id == asset_id))
    await session.commit()
    if result.rowcount:
        logger.info("favorite removed | asset_id=%s", asset_id)
    return result.rowcount or 0


async def favorite_ids(session: AsyncSession, asset_ids: Iterable[str | None]) -> set[str]:
    ids = [a for a in asset_ids if a]
    if not ids:
        return set()
    result = await session.execute(select(Favorite.asset_id).where(Favorite.asset_id.in_(ids)))
    return set(result.scalars().all())
