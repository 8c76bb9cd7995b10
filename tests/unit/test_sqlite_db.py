"""
Unit tests for the SQLite order store.
"""

import pytest

from data import create_repository
from data.sqlite_db import SQLiteOrderStore


@pytest.fixture
def db():
    """Create an in-memory database for testing."""
    database = create_repository("sqlite", ":memory:")
    yield database
    database.close()


def test_create_database(tmp_path):
    """Test database file and schema creation."""
    db_path = tmp_path / "nested" / "orders.db"
    store = create_repository("sqlite", db_path)

    assert isinstance(store, SQLiteOrderStore)
    assert db_path.exists()
    assert store.snapshot() == []
    store.close()


def test_save_and_load_keeps_order(db):
    """Test documents round-trip in collection order."""
    with db.transaction() as orders:
        orders["z"] = {"id": "z", "clientId": "CLI-1", "status": "scheduled", "location": {"address": "Calle 1"}}
        orders["a"] = {"id": "a", "clientId": "CLI-2", "status": "completed"}

    loaded = db.snapshot()
    assert [o["id"] for o in loaded] == ["z", "a"]
    assert loaded[0]["location"] == {"address": "Calle 1"}
    assert db.count() == 2


def test_save_replaces_collection(db):
    """Test a deletion inside the transaction removes the row."""
    with db.transaction() as orders:
        orders["a"] = {"id": "a"}
        orders["b"] = {"id": "b"}

    with db.transaction() as orders:
        del orders["a"]

    assert [o["id"] for o in db.snapshot()] == ["b"]
    assert db.count() == 1


def test_failed_transaction_writes_nothing(db):
    """Test rollback semantics of the transaction helper."""
    with db.transaction() as orders:
        orders["a"] = {"id": "a"}

    with pytest.raises(KeyError):
        with db.transaction() as orders:
            orders["b"] = {"id": "b"}
            orders["missing"]

    assert db.count() == 1


def test_persists_across_connections(tmp_path):
    """Test data survives closing and reopening the file."""
    db_path = tmp_path / "orders.db"
    store = create_repository("sqlite", db_path)
    with store.transaction() as orders:
        orders["a"] = {"id": "a", "pestType": "Rodent"}
    store.close()

    reopened = create_repository("sqlite", db_path)
    assert reopened.snapshot() == [{"id": "a", "pestType": "Rodent"}]
    reopened.close()
