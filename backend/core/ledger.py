"""Ledger store: append-only collections and sales."""

import logging
from typing import Any, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.converters import as_count, as_event_date, as_price, check_count
from core.errors import StorageError, ValidationError
from core.inventory import apply_collection, apply_sale, inventory_write, reset_inventory
from db.ledger import SALE_TYPE_CHANNELS, Collection, Sale

logger = logging.getLogger(__name__)

SIZES = ("S", "M", "L", "XL")
CHANNELS = ("wholesale", "retail")
DEFAULT_LIST_LIMIT = 200


async def record_collection(
    db: AsyncSession,
    *,
    date: Any = None,
    s: Any = 0,
    m: Any = 0,
    l: Any = 0,  # noqa: E741
    xl: Any = 0,
    notes: Optional[str] = "",
) -> Collection:
    counts = {
        name: check_count(name, as_count(value))
        for name, value in (("s", s), ("m", m), ("l", l), ("xl", xl))
    }
    event = Collection(date=as_event_date(date), notes=notes or "", **counts)

    async with inventory_write(db, "record collection"):
        db.add(event)
        await db.flush()
        await apply_collection(db, **counts)

    logger.info("Recorded collection %s (%s): %s", event.id, event.date, counts)
    return event


async def record_sale(
    db: AsyncSession,
    *,
    channel: Optional[str],
    size: Optional[str],
    quantity: Any = 0,
    price: Any = 0,
    client: Optional[str] = "",
    date: Any = None,
) -> Sale:
    """Record a sale and take its quantity out of the matching bucket.

    `channel` accepts the sales-form aliases ('mayor' / 'menor') as well as
    'wholesale' / 'retail'. A non-numeric quantity is recorded as 0.
    """
    channel = SALE_TYPE_CHANNELS.get(channel, channel)
    if channel not in CHANNELS:
        raise ValidationError("channel must be wholesale or retail")
    if size not in SIZES:
        raise ValidationError("size must be S,M,L or XL")

    event = Sale(
        date=as_event_date(date),
        channel=channel,
        size=size,
        quantity=check_count("quantity", as_count(quantity)),
        price=as_price(price),
        client=client or "",
    )

    async with inventory_write(db, "record sale"):
        db.add(event)
        await db.flush()
        await apply_sale(db, event.size, event.quantity)

    logger.info("Recorded sale %s (%s): %s x%d via %s", event.id, event.date, event.size, event.quantity, event.channel)
    return event


async def _list(db: AsyncSession, model, limit: int) -> list:
    if limit < 1:
        raise ValidationError("limit must be >= 1")
    stmt = select(model).order_by(model.date.desc(), model.id.desc()).limit(limit)
    try:
        res = await db.execute(stmt)
    except SQLAlchemyError as e:
        logger.exception("Listing %s failed", model.__tablename__)
        raise StorageError(f"Failed to list {model.__tablename__}: {e}") from e
    return list(res.scalars().all())


async def list_collections(db: AsyncSession, limit: int = DEFAULT_LIST_LIMIT) -> List[Collection]:
    return await _list(db, Collection, limit)


async def list_sales(db: AsyncSession, limit: int = DEFAULT_LIST_LIMIT) -> List[Sale]:
    return await _list(db, Sale, limit)


async def reset_all(db: AsyncSession) -> dict:
    """Delete every ledger event and zero the inventory, all or nothing."""
    async with inventory_write(db, "reset ledger"):
        res_collections = await db.execute(delete(Collection))
        res_sales = await db.execute(delete(Sale))
        await reset_inventory(db)

    deleted = {
        "collections": int(getattr(res_collections, "rowcount", 0) or 0),
        "sales": int(getattr(res_sales, "rowcount", 0) or 0),
    }
    logger.warning("Ledger reset: deleted %(collections)d collections, %(sales)d sales", deleted)
    return deleted
