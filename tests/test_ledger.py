"""Ledger store and inventory maintenance, exercised without HTTP."""

import asyncio
from datetime import date

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import OperationalError

from core import ledger
from core.errors import InventoryInvariantError, StorageError, ValidationError
from core.inventory import (
    apply_sale,
    compute_inventory_from_ledger,
    ensure_inventory,
    get_inventory,
    inventory_write,
    reconcile_inventory,
)
from db.database import async_session_maker
from db.inventory import InventoryStock
from db.ledger import Collection


def _assert_total_consistent(inv: dict) -> None:
    assert inv["total"] == inv["s"] + inv["m"] + inv["l"] + inv["xl"]


class TestRecordCollection:
    def test_increments_every_bucket(self, run):
        event = run(ledger.record_collection, s=10, m=5, l=2, xl=1, notes="morning")
        assert event.id is not None
        assert event.notes == "morning"

        inv = run(get_inventory)
        assert inv == {"s": 10, "m": 5, "l": 2, "xl": 1, "total": 18}

    def test_defaults(self, run):
        event = run(ledger.record_collection)
        assert (event.s, event.m, event.l, event.xl) == (0, 0, 0, 0)
        assert event.notes == ""
        assert isinstance(event.date, date)

    def test_non_numeric_counts_become_zero(self, run):
        event = run(ledger.record_collection, s="abc", m="4", l=None, xl=-3)
        assert (event.s, event.m, event.l, event.xl) == (0, 4, 0, 0)
        assert run(get_inventory)["total"] == 4

    def test_ids_are_monotonic(self, run):
        first = run(ledger.record_collection, s=1)
        second = run(ledger.record_collection, s=1)
        assert second.id > first.id

    def test_explicit_date(self, run):
        event = run(ledger.record_collection, date="2024-02-29", s=1)
        assert event.date == date(2024, 2, 29)


class TestRecordSale:
    def test_collection_then_sale(self, run):
        run(ledger.record_collection, s=10)
        sale = run(ledger.record_sale, channel="wholesale", size="S", quantity=3)

        assert sale.quantity == 3
        inv = run(get_inventory)
        assert inv["s"] == 7
        assert inv["total"] == 7

    def test_sale_type_aliases(self, run):
        assert run(ledger.record_sale, channel="mayor", size="M", quantity=1).channel == "wholesale"
        assert run(ledger.record_sale, channel="menor", size="M", quantity=1).channel == "retail"

    def test_unknown_size_is_rejected_without_touching_inventory(self, run):
        run(ledger.record_collection, s=4)
        with pytest.raises(ValidationError):
            run(ledger.record_sale, channel="retail", size="XXL", quantity=2)

        assert run(get_inventory) == {"s": 4, "m": 0, "l": 0, "xl": 0, "total": 4}
        assert run(ledger.list_sales) == []

    def test_unknown_channel_is_rejected(self, run):
        with pytest.raises(ValidationError):
            run(ledger.record_sale, channel="online", size="S", quantity=1)

    def test_non_numeric_quantity_is_recorded_as_zero(self, run):
        run(ledger.record_collection, l=5)
        sale = run(ledger.record_sale, channel="retail", size="L", quantity="lots", price="n/a")
        assert sale.quantity == 0
        assert sale.price == 0.0
        assert run(get_inventory)["l"] == 5

    def test_oversold_goes_negative(self, run):
        run(ledger.record_sale, channel="retail", size="XL", quantity=2, price=1.5, client="Ana")
        inv = run(get_inventory)
        assert inv["xl"] == -2
        assert inv["total"] == -2


class TestListing:
    def test_newest_first(self, run):
        run(ledger.record_collection, date="2024-01-01", s=1)
        run(ledger.record_collection, date="2024-03-01", s=2)
        run(ledger.record_collection, date="2024-02-01", s=3)

        dates = [c.date for c in run(ledger.list_collections)]
        assert dates == [date(2024, 3, 1), date(2024, 2, 1), date(2024, 1, 1)]

    def test_same_day_sorted_by_id(self, run):
        a = run(ledger.record_sale, channel="retail", size="S", quantity=1, date="2024-01-01")
        b = run(ledger.record_sale, channel="retail", size="S", quantity=1, date="2024-01-01")
        assert [s.id for s in run(ledger.list_sales)] == [b.id, a.id]

    def test_limit(self, run):
        for _ in range(5):
            run(ledger.record_collection, s=1)
        assert len(run(ledger.list_collections, limit=3)) == 3

    def test_limit_must_be_positive(self, run):
        with pytest.raises(ValidationError):
            run(ledger.list_sales, limit=0)


class TestResetAll:
    def test_clears_ledger_and_inventory(self, run):
        run(ledger.record_collection, s=3, m=3)
        run(ledger.record_sale, channel="retail", size="M", quantity=1)

        deleted = run(ledger.reset_all)
        assert deleted == {"collections": 1, "sales": 1}

        assert run(get_inventory) == {"s": 0, "m": 0, "l": 0, "xl": 0, "total": 0}
        assert run(ledger.list_collections) == []
        assert run(ledger.list_sales) == []

    def test_recreates_missing_inventory_row(self, run):
        async def drop_row(db):
            await db.execute(delete(InventoryStock))
            await db.commit()

        run(drop_row)
        run(ledger.reset_all)
        assert run(get_inventory)["total"] == 0
        assert run(ensure_inventory) is False


class TestProjectionRow:
    def test_missing_row_reads_as_zero_without_creating_it(self, run):
        async def drop_row(db):
            await db.execute(delete(InventoryStock))
            await db.commit()

        async def count_rows(db):
            return (await db.execute(select(func.count()).select_from(InventoryStock))).scalar_one()

        run(drop_row)
        assert run(get_inventory) == {"s": 0, "m": 0, "l": 0, "xl": 0, "total": 0}
        assert run(count_rows) == 0

    def test_ensure_is_idempotent(self, run):
        run(ledger.record_collection, s=2)
        assert run(ensure_inventory) is False
        assert run(get_inventory)["s"] == 2

    def test_missing_row_rolls_back_the_ledger_write(self, run):
        async def drop_row(db):
            await db.execute(delete(InventoryStock))
            await db.commit()

        run(drop_row)
        with pytest.raises(InventoryInvariantError):
            run(ledger.record_collection, s=5)
        assert run(ledger.list_collections) == []

    def test_unmapped_size_in_maintainer_is_an_invariant_violation(self, run):
        with pytest.raises(InventoryInvariantError):
            run(apply_sale, "XXL", 1)


class TestStorageFailure:
    @staticmethod
    async def _failing_delta(*args, **kwargs):
        raise OperationalError("UPDATE inventory", {}, Exception("disk I/O error"))

    def test_failed_collection_delta_rolls_back_the_event(self, run, monkeypatch):
        run(ledger.record_collection, s=2)
        monkeypatch.setattr(ledger, "apply_collection", self._failing_delta)

        with pytest.raises(StorageError):
            run(ledger.record_collection, s=5, m=1)

        assert len(run(ledger.list_collections)) == 1
        assert run(get_inventory) == {"s": 2, "m": 0, "l": 0, "xl": 0, "total": 2}

    def test_failed_sale_delta_rolls_back_the_event(self, run, monkeypatch):
        run(ledger.record_collection, xl=3)
        monkeypatch.setattr(ledger, "apply_sale", self._failing_delta)

        with pytest.raises(StorageError):
            run(ledger.record_sale, channel="retail", size="XL", quantity=1)

        assert run(ledger.list_sales) == []
        assert run(get_inventory)["xl"] == 3

    def test_driver_errors_become_storage_errors(self, run):
        async def overflow(db):
            async with inventory_write(db, "record collection"):
                db.add(Collection(date=date(2024, 1, 1), s=1, m=0, l=0, xl=0, notes=""))
                await db.flush()
                raise OverflowError("Python int too large to convert to SQLite INTEGER")

        with pytest.raises(StorageError):
            run(overflow)
        assert run(ledger.list_collections) == []

    def test_oversized_counts_are_rejected(self, run):
        with pytest.raises(ValidationError):
            run(ledger.record_collection, s=10**20)
        with pytest.raises(ValidationError):
            run(ledger.record_sale, channel="retail", size="S", quantity=str(10**12))

        assert run(ledger.list_collections) == []
        assert run(get_inventory)["total"] == 0


class TestReconcile:
    def test_fixes_drift(self, run):
        run(ledger.record_collection, s=10, xl=4)
        run(ledger.record_sale, channel="wholesale", size="S", quantity=3)

        async def corrupt(db):
            await db.execute(update(InventoryStock).values(s=999, total=999))
            await db.commit()

        run(corrupt)
        result = run(reconcile_inventory)

        assert result["drift"] is True
        assert result["before"]["s"] == 999
        assert result["after"] == {"s": 7, "m": 0, "l": 0, "xl": 4, "total": 11}
        assert run(get_inventory) == result["after"]

    def test_no_drift(self, run):
        run(ledger.record_collection, m=2)
        result = run(reconcile_inventory)
        assert result["drift"] is False
        assert result["before"] == result["after"]


class TestConcurrency:
    def test_concurrent_collections_do_not_lose_updates(self):
        n = 25

        async def scenario():
            async def one():
                async with async_session_maker() as db:
                    await ledger.record_collection(db, s=1)

            await asyncio.gather(*(one() for _ in range(n)))
            async with async_session_maker() as db:
                return await get_inventory(db)

        inv = asyncio.run(scenario())
        assert inv["s"] == n
        assert inv["total"] == n

    def test_concurrent_sales_and_reset(self):
        async def scenario():
            async with async_session_maker() as db:
                await ledger.record_collection(db, m=50)

            async def sell():
                async with async_session_maker() as db:
                    await ledger.record_sale(db, channel="retail", size="M", quantity=1)

            async def reset():
                async with async_session_maker() as db:
                    await ledger.reset_all(db)

            await asyncio.gather(*(sell() for _ in range(10)), reset(), *(sell() for _ in range(10)))
            async with async_session_maker() as db:
                return await get_inventory(db), await compute_inventory_from_ledger(db)

        inv, replayed = asyncio.run(scenario())
        _assert_total_consistent(inv)
        assert inv == replayed


events = st.lists(
    st.one_of(
        st.tuples(
            st.just("collection"),
            st.integers(0, 50),
            st.integers(0, 50),
            st.integers(0, 50),
            st.integers(0, 50),
        ),
        st.tuples(
            st.just("sale"),
            st.sampled_from(["wholesale", "retail"]),
            st.sampled_from(list(ledger.SIZES)),
            st.integers(0, 60),
        ),
    ),
    max_size=12,
)


@settings(max_examples=20, deadline=None, suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(events)
def test_inventory_matches_ledger_net(seq):
    async def scenario():
        async with async_session_maker() as db:
            await ledger.reset_all(db)

        for ev in seq:
            async with async_session_maker() as db:
                if ev[0] == "collection":
                    _, s, m, l, xl = ev  # noqa: E741
                    await ledger.record_collection(db, s=s, m=m, l=l, xl=xl)
                else:
                    _, channel, size, qty = ev
                    await ledger.record_sale(db, channel=channel, size=size, quantity=qty)
            async with async_session_maker() as db:
                _assert_total_consistent(await get_inventory(db))

        async with async_session_maker() as db:
            return await get_inventory(db)

    inv = asyncio.run(scenario())
    _assert_total_consistent(inv)
    assert {k: inv[k] for k in ("s", "m", "l", "xl")} == _expected_from(seq)


def _expected_from(seq) -> dict:
    out = {"s": 0, "m": 0, "l": 0, "xl": 0}
    for ev in seq:
        if ev[0] == "collection":
            for k, v in zip(("s", "m", "l", "xl"), ev[1:]):
                out[k] += v
        else:
            out[ev[2].lower()] -= ev[3]
    return out
