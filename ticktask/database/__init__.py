"""Database package - async SQLite key-value store with mixin-based composition.

Usage: ``from ticktask.database import db, DatabaseError``.
"""
from pathlib import Path
from typing import Union

from ticktask.config import DB_PATH as _DEFAULT_DB_PATH

DB_PATH: Union[str, Path] = _DEFAULT_DB_PATH

from ticktask.database.helpers import DatabaseError  # noqa: E402
from ticktask.database.core import DatabaseCore  # noqa: E402
from ticktask.database.storage import StorageMixin  # noqa: E402


class Database(DatabaseCore, StorageMixin):
    """Composed database class combining all mixins."""
    pass


def configure_db_path(path: Union[str, Path]) -> None:
    """Set a custom database path before any connection is opened.

    Raises:
        RuntimeError: If the database connection is already open.
    """
    global DB_PATH
    if Database._instance is not None and Database._instance.is_open:
        raise RuntimeError(
            "Cannot change DB_PATH after a database connection has been opened. "
            "Call configure_db_path() before any database operations."
        )
    DB_PATH = path


db = Database()

__all__ = ["DB_PATH", "Database", "DatabaseError", "configure_db_path", "db"]
