"""
SQL store round-trips against in-memory SQLite.

Stored quotations must come back equal to what was saved: exact decimals,
timezone-aware timestamps and child collections in domain order.
"""

from datetime import timezone
from decimal import Decimal

import pytest

from quotedesk_kernel.domain import comments, workflow
from quotedesk_kernel.domain.values import Actor, QuotationStatus, Role
from quotedesk_kernel.stores.sql import SqlKeyValueStore, SqlQuotationStore


@pytest.fixture
def sql_store(database, seed_quotations):
    store = SqlQuotationStore(database)
    for q in seed_quotations:
        store.save(q)
    return store


class TestSqlQuotationStore:

    def test_round_trip_equals_seed(self, sql_store, seed_quotations):
        assert sql_store.list_all() == seed_quotations

    def test_decimals_exact(self, sql_store):
        q101 = sql_store.get("Q-101")
        assert q101.amount == Decimal("36034.20")
        assert str(q101.amount) == "36034.20"
        assert [li.rate for li in q101.line_items] == [
            Decimal("28.50"), Decimal("85.00"), Decimal("18.75"),
        ]

    def test_timestamps_aware_utc(self, sql_store):
        q = sql_store.get("Q-103")
        assert q.last_updated.utcoffset() == timezone.utc.utcoffset(None)
        assert all(e.changed_at.tzinfo is not None for e in q.status_history)

    def test_unknown_id(self, sql_store):
        assert sql_store.get("Q-999") is None
        assert "Q-999" not in sql_store
        assert "Q-101" in sql_store

    def test_save_replaces_aggregate(self, sql_store, deterministic_clock):
        now = deterministic_clock.now()
        q = sql_store.get("Q-104")
        q = workflow.transition(
            q, QuotationStatus.REJECTED, Actor(name="Jane Smith", role=Role.MANAGER), now,
            reason="Late",
        )
        q, comment = comments.add_comment(q, "John Doe", Role.SALES_REP, "Why?", now)
        q, _ = comments.add_reply(q, comment.id, "Jane Smith", Role.MANAGER, "Late.", now)

        sql_store.save(q)

        stored = sql_store.get("Q-104")
        assert stored == q
        assert [e.status for e in stored.status_history] == [
            QuotationStatus.PENDING, QuotationStatus.REJECTED,
        ]
        assert stored.comments[0].replies[0].text == "Late."

    def test_list_all_ordered_by_id(self, database, seed_quotations):
        store = SqlQuotationStore(database)
        for q in reversed(seed_quotations):
            store.save(q)
        assert [q.id for q in store.list_all()] == [q.id for q in seed_quotations]


class TestSqlKeyValueStore:

    @pytest.fixture
    def kv(self, database, deterministic_clock):
        return SqlKeyValueStore(database, deterministic_clock)

    def test_set_get(self, kv):
        kv.set("quotedesk_user", {"id": "u1", "role": "manager"})
        assert kv.get("quotedesk_user") == {"id": "u1", "role": "manager"}

    def test_overwrite(self, kv):
        kv.set("k", 1)
        kv.set("k", [1, 2])
        assert kv.get("k") == [1, 2]

    def test_delete_and_missing(self, kv):
        kv.set("k", "v")
        kv.delete("k")
        kv.delete("never-set")
        assert kv.get("k") is None

    def test_clear(self, kv):
        kv.set("a", 1)
        kv.set("b", 2)
        kv.clear()
        assert kv.get("a") is None and kv.get("b") is None
