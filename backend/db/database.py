from collections.abc import AsyncGenerator
from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from core.config import settings

DATABASE_URL = settings.database_url


class Base(DeclarativeBase):
    pass


def _engine_kwargs(url: str) -> dict:
    kwargs = {"echo": settings.database_echo}
    if url.startswith("sqlite"):
        # aiosqlite connections are bound to the loop that opened them.
        kwargs["poolclass"] = NullPool
    return kwargs


engine = create_async_engine(DATABASE_URL, **_engine_kwargs(DATABASE_URL))
async_session_maker = async_sessionmaker(engine, expire_on_commit=False)


def _ensure_sqlite_dir() -> None:
    if engine.url.get_backend_name() != "sqlite":
        return
    database = engine.url.database
    if database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)


async def create_db_and_tables():
    # Register every table on Base.metadata
    from db import inventory, ledger, users  # noqa: F401

    _ensure_sqlite_dir()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db_and_tables():
    from db import inventory, ledger, users  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        yield session
