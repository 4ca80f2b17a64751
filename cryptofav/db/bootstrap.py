# cryptofav/db/bootstrap.py
from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine

import cryptofav.db.models  # noqa: F401  registers Favorite on Base.metadata
from cryptofav.db.migrations import enforce_integrity_constraints
from cryptofav.db.session import Base, engine as default_engine


async def ensure_db_primitives(engine: AsyncEngine | None = None) -> None:
    """
    Create tables and apply integrity constraints/indexes idempotently at startup.
    """
    eng = engine or default_engine
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    await enforce_integrity_constraints(eng)
