"""SQL store behaviour not covered through the query composer."""
from datetime import datetime, timezone

import pytest

from fastbreak.errors import StoreError
from fastbreak.stores.predicates import Contains, Eq, ILike, NotIn, Order
from fastbreak.stores.sql_store import SqlEventStore


def _row(name="Club Friendly", sport="Soccer", day=1, **extra) -> dict:
    row = {
        "user_id": "owner-1",
        "name": name,
        "sport": sport,
        "date": datetime(2030, 5, day, 18, 0, tzinfo=timezone.utc),
        "venues": ["Somewhere"],
    }
    row.update(extra)
    return row


class TestFailures:

    def test_constraint_violation_raises_store_error(self, db):
        store = SqlEventStore(db)
        with pytest.raises(StoreError) as exc_info:
            store.insert(_row(name=None))
        assert exc_info.value.status_code == 502
        assert "name" in exc_info.value.message

    def test_session_usable_after_failure(self, db):
        store = SqlEventStore(db)
        with pytest.raises(StoreError):
            store.insert(_row(name=None))
        created = store.insert(_row(name="Rematch"))
        rows = store.select([Eq("id", created["id"])])
        assert [r["name"] for r in rows] == ["Rematch"]


class TestUnicodeCaseFolding:

    def _seed(self, store):
        store.insert(_row(name="Été Classic", sport="ÉSPORT", day=1))
        store.insert(_row(name="Winter Cup", sport="Soccer", day=2))

    def test_sport_equality_folds_non_ascii(self, db):
        store = SqlEventStore(db)
        self._seed(store)
        rows = store.select([ILike("sport", "ésport")])
        assert [r["name"] for r in rows] == ["Été Classic"]

    def test_exclusion_folds_non_ascii(self, db):
        store = SqlEventStore(db)
        self._seed(store)
        rows = store.select([NotIn("sport", ("éSport",))], Order("date"))
        assert [r["name"] for r in rows] == ["Winter Cup"]

    def test_substring_folds_non_ascii(self, db):
        store = SqlEventStore(db)
        self._seed(store)
        rows = store.select([Contains("name", "ÉTÉ")])
        assert [r["name"] for r in rows] == ["Été Classic"]
