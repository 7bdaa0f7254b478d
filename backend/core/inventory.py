"""
Inventory projection maintenance.

The single `inventory` row always equals the net of every collection minus
every sale, per size bucket. Writers go through `inventory_write`, which holds
the writer lock and runs the ledger insert plus the bucket delta as one
transaction, so a failed delta also discards the ledger event.
"""

import asyncio
import logging
import weakref
from contextlib import asynccontextmanager
from typing import Dict

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import EggLedgerError, InventoryInvariantError, StorageError
from db.inventory import INVENTORY_ROW_ID, InventoryStock
from db.ledger import Collection, Sale

logger = logging.getLogger(__name__)

BUCKETS = ("s", "m", "l", "xl")
SIZE_BUCKETS = {"S": "s", "M": "m", "L": "l", "XL": "xl"}
EMPTY_INVENTORY = {"s": 0, "m": 0, "l": 0, "xl": 0, "total": 0}

_writer_locks: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, asyncio.Lock]" = weakref.WeakKeyDictionary()


def writer_lock() -> asyncio.Lock:
    """Lock serializing every inventory write issued from the running event loop."""
    loop = asyncio.get_running_loop()
    lock = _writer_locks.get(loop)
    if lock is None:
        lock = _writer_locks[loop] = asyncio.Lock()
    return lock


@asynccontextmanager
async def inventory_write(db: AsyncSession, action: str):
    async with writer_lock():
        try:
            yield db
            await db.commit()
        except EggLedgerError:
            await db.rollback()
            raise
        except SQLAlchemyError as e:
            await db.rollback()
            logger.exception("[inventory] %s failed", action)
            raise StorageError(f"Failed to {action}: {e}") from e
        except Exception as e:
            # Driver-level errors (e.g. an integer the column cannot hold) are not SQLAlchemyErrors.
            await db.rollback()
            logger.exception("[inventory] %s failed unexpectedly", action)
            raise StorageError(f"Failed to {action}: {e}") from e


def _row_update():
    return (
        update(InventoryStock)
        .where(InventoryStock.id == INVENTORY_ROW_ID)
        .execution_options(synchronize_session=False)
    )


def _require_row(result, action: str) -> None:
    if result.rowcount != 1:
        logger.error("[inventory] %s: inventory row %s is missing", action, INVENTORY_ROW_ID)
        raise InventoryInvariantError("Inventory is not initialized")


async def apply_collection(db: AsyncSession, s: int, m: int, l: int, xl: int) -> None:  # noqa: E741
    res = await db.execute(
        _row_update().values(
            s=InventoryStock.s + s,
            m=InventoryStock.m + m,
            l=InventoryStock.l + l,
            xl=InventoryStock.xl + xl,
            total=InventoryStock.total + (s + m + l + xl),
        )
    )
    _require_row(res, "apply collection")


async def apply_sale(db: AsyncSession, size: str, quantity: int) -> None:
    bucket = SIZE_BUCKETS.get(size)
    if bucket is None:
        # Sizes are validated before the ledger write, so this is a programming error.
        logger.error("[inventory] sale size %r has no inventory bucket", size)
        raise InventoryInvariantError(f"Sale size {size!r} has no inventory bucket")

    column = getattr(InventoryStock, bucket)
    res = await db.execute(
        _row_update().values(
            {bucket: column - quantity, "total": InventoryStock.total - quantity}
        )
    )
    _require_row(res, "apply sale")


async def get_inventory(db: AsyncSession) -> Dict[str, int]:
    """Current stock. A missing row reads as all zeros and is not created here."""
    try:
        res = await db.execute(
            select(
                InventoryStock.s,
                InventoryStock.m,
                InventoryStock.l,
                InventoryStock.xl,
                InventoryStock.total,
            ).where(InventoryStock.id == INVENTORY_ROW_ID)
        )
    except SQLAlchemyError as e:
        logger.exception("[inventory] read failed")
        raise StorageError(f"Failed to read inventory: {e}") from e
    row = res.first()
    if row is None:
        return dict(EMPTY_INVENTORY)
    return {k: int(v or 0) for k, v in row._mapping.items()}


async def reset_inventory(db: AsyncSession) -> None:
    res = await db.execute(_row_update().values(**EMPTY_INVENTORY))
    if res.rowcount == 0:
        db.add(InventoryStock(id=INVENTORY_ROW_ID, **EMPTY_INVENTORY))


async def ensure_inventory(db: AsyncSession) -> bool:
    """Create the zero row if it does not exist yet. Returns True when a row was created."""
    res = await db.execute(select(InventoryStock.id).where(InventoryStock.id == INVENTORY_ROW_ID))
    if res.scalar_one_or_none() is not None:
        await db.rollback()
        return False

    db.add(InventoryStock(id=INVENTORY_ROW_ID, **EMPTY_INVENTORY))
    try:
        await db.commit()
    except IntegrityError:
        # Another worker created it first
        await db.rollback()
        return False
    logger.info("[inventory] initialized empty inventory row")
    return True


async def compute_inventory_from_ledger(db: AsyncSession) -> Dict[str, int]:
    collected = (
        await db.execute(
            select(
                func.coalesce(func.sum(Collection.s), 0),
                func.coalesce(func.sum(Collection.m), 0),
                func.coalesce(func.sum(Collection.l), 0),
                func.coalesce(func.sum(Collection.xl), 0),
            )
        )
    ).one()
    out = {b: int(v) for b, v in zip(BUCKETS, collected)}

    sold = await db.execute(
        select(Sale.size, func.coalesce(func.sum(Sale.quantity), 0)).group_by(Sale.size)
    )
    for size, qty in sold.all():
        bucket = SIZE_BUCKETS.get(size)
        if bucket is None:
            logger.error("[inventory] ledger holds sales with unknown size %r", size)
            raise InventoryInvariantError(f"Ledger holds sales with unknown size {size!r}")
        out[bucket] -= int(qty)

    out["total"] = sum(out[b] for b in BUCKETS)
    return out


async def reconcile_inventory(db: AsyncSession) -> dict:
    """Rebuild the projection by replaying the whole ledger."""
    async with inventory_write(db, "reconcile inventory"):
        before = await get_inventory(db)
        after = await compute_inventory_from_ledger(db)
        res = await db.execute(_row_update().values(**after))
        if res.rowcount == 0:
            db.add(InventoryStock(id=INVENTORY_ROW_ID, **after))

    drift = before != after
    if drift:
        logger.warning("[inventory] reconciliation corrected drift: %s -> %s", before, after)
    else:
        logger.info("[inventory] reconciliation found no drift")
    return {"before": before, "after": after, "drift": drift}
