"""
Delete ALL collections + sales and zero the inventory row.

Run inside docker (recommended):
  docker exec -i egg-ledger-api sh -lc "cd /app && PYTHONPATH=/app uv run python scripts/reset_ledger.py"
"""

from __future__ import annotations

import asyncio

from core.ledger import reset_all
from core.logger import setup_logger
from db.database import async_session_maker, create_db_and_tables


async def main() -> None:
    setup_logger()
    await create_db_and_tables()
    async with async_session_maker() as db:
        deleted = await reset_all(db)
    print(f"Deleted collections: {deleted['collections']}, sales: {deleted['sales']}")


if __name__ == "__main__":
    asyncio.run(main())
