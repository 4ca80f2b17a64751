import asyncio

from cryptofav.db.bootstrap import ensure_db_primitives
from cryptofav.db.session import DATABASE_URL


async def main():
    await ensure_db_primitives()
    print(f"✅ Tables created/verified | db={DATABASE_URL}")


if __name__ == "__main__":
    asyncio.run(main())
