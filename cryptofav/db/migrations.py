from __future__ import annotations

from typing import Sequence

from sqlalchemy import text
from sqlalchemy.exc import OperationalError, ProgrammingError
from sqlalchemy.ext.asyncio import AsyncEngine

from cryptofav.db.session import engine as default_engine

_FAVORITE_DUP_SQL = """
    SELECT asset_id, COUNT(*) AS count
    FROM favorites
    GROUP BY asset_id
    HAVING count > 1
    LIMIT 1
"""

_STATEMENTS: Sequence[str] = (
    """
    CREATE UNIQUE INDEX IF NOT EXISTS uq_favorites_asset_id_idx
    ON favorites(asset_id);
    """,
    """
    CREATE INDEX IF NOT EXISTS ix_favorites_created_at
    ON favorites(created_at DESC);
    """,
)


async def enforce_integrity_constraints(engine: AsyncEngine | None = None) -> None:
    """
    Ensures the favorites uniqueness + ordering indexes exist.

    Fails fast when duplicate asset ids are already stored, since the unique
    index could not be built over them.
    """
    eng = engine or default_engine

    async with eng.begin() as conn:
        await _assert_no_duplicates(conn, _FAVORITE_DUP_SQL, "favorites", ("asset_id",))

        for stmt in _STATEMENTS:
            try:
                await conn.execute(text(stmt))
            except (OperationalError, ProgrammingError) as exc:
                raise RuntimeError(f"Failed to apply integrity DDL: {stmt}") from exc


async def _assert_no_duplicates(conn, sql: str, table: str, keys: Sequence[str]) -> None:
    try:
        result = await conn.execute(text(sql))
    except (OperationalError, ProgrammingError):
        # Table may not exist yet (fresh DB); skip validation.
        return

    row = result.first()
    if row:
        mapping = row._mapping
        joined_keys = ", ".join(f"{k}={mapping.get(k)}" for k in keys if k in mapping)
        raise RuntimeError(
            f"Duplicate rows detected in {table} for ({joined_keys}). Clean data before enforcing constraints."
        )
