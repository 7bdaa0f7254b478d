"""
Create a user with the admin role (needed for /api/admin/*).

  PYTHONPATH=. python scripts/create_admin.py <username> <password>
"""

from __future__ import annotations

import argparse
import asyncio

from core.auth import ADMIN_ROLE, register_user
from core.logger import setup_logger
from db.database import async_session_maker, create_db_and_tables


async def main(username: str, password: str) -> None:
    setup_logger()
    await create_db_and_tables()
    async with async_session_maker() as db:
        user = await register_user(db, username, password, ADMIN_ROLE)
    print(f"Created admin user {user.username} (id={user.id})")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("username")
    parser.add_argument("password")
    args = parser.parse_args()
    asyncio.run(main(args.username, args.password))
