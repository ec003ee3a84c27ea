"""Tests for the key-value storage layer."""
import pytest

from ticktask.database import configure_db_path, db
from ticktask.database.helpers import describe_value


class TestStorage:
    async def test_missing_key_is_none(self, memory_db):
        assert await db.get_item("tasks") is None

    async def test_set_overwrites(self, memory_db):
        await db.set_item("darkMode", "true")
        await db.set_item("darkMode", "false")
        assert await db.get_item("darkMode") == "false"
        assert await db.get_item("tasks") is None

    async def test_values_stored_verbatim(self, memory_db):
        payload = '[{"name": "Café ☕"}]'
        await db.set_item("tasks", payload)
        assert await db.get_item("tasks") == payload

    async def test_cannot_change_path_while_open(self, memory_db):
        with pytest.raises(RuntimeError):
            configure_db_path(":memory:")

    async def test_reopens_after_close(self, tmp_path):
        await db.close()
        configure_db_path(tmp_path / "store.db")
        await db.set_item("tasks", "[]")
        await db.close()
        assert await db.get_item("tasks") == "[]"
        await db.close()


def test_describe_value():
    assert describe_value("true") == "'true'"
    long = "x" * 100
    assert describe_value(long).endswith("(100 chars)")
