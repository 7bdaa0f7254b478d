"""
Rebuild the inventory row from the full ledger (sum of collections minus sum of sales).

Use after restoring a backup or when /api/inventory looks off.

Run inside docker:
  docker exec -i egg-ledger-api sh -lc "cd /app && PYTHONPATH=/app uv run python scripts/reconcile_inventory.py"
"""

from __future__ import annotations

import asyncio

from core.inventory import reconcile_inventory
from core.logger import setup_logger
from db.database import async_session_maker, create_db_and_tables


async def main() -> None:
    setup_logger()
    await create_db_and_tables()
    async with async_session_maker() as db:
        result = await reconcile_inventory(db)

    print(f"Before: {result['before']}")
    print(f"After:  {result['after']}")
    print("Drift corrected" if result["drift"] else "No drift")


if __name__ == "__main__":
    asyncio.run(main())
