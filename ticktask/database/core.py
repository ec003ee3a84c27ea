import aiosqlite
import asyncio
import sqlite3
import logging
import threading
from contextlib import asynccontextmanager
from typing import Optional, AsyncIterator

import ticktask.database as _pkg
from ticktask.database.helpers import DatabaseError

logger = logging.getLogger(__name__)

_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA busy_timeout=5000",
)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS local_storage (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


class DatabaseCore:
    """One shared aiosqlite connection for the whole process.

    The connection opens on first use against ``ticktask.database.DB_PATH``
    and stays open until close(). Every statement runs under one
    asyncio.Lock. The lock is FIFO, so fire-and-forget writes are applied
    in the order they were scheduled.
    """
    _instance: Optional["DatabaseCore"] = None
    _instance_lock = threading.Lock()

    def __new__(cls) -> "DatabaseCore":
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    instance = super().__new__(cls)
                    instance._conn = None
                    instance._conn_lock = None
                    instance._schema_lock = None
                    instance._schema_ready = False
                    cls._instance = instance
        return cls._instance

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    async def _open(self) -> aiosqlite.Connection:
        path = str(_pkg.DB_PATH)
        try:
            conn = await aiosqlite.connect(path)
            conn.row_factory = aiosqlite.Row
            for pragma in _PRAGMAS:
                await conn.execute(pragma)
        except (sqlite3.Error, OSError) as e:
            raise DatabaseError(f"Cannot open database at {path}: {e}") from e
        logger.debug(f"Opened database at {path}")
        return conn

    @asynccontextmanager
    async def _get_connection(self) -> AsyncIterator[aiosqlite.Connection]:
        """Yield the shared connection while holding the access lock."""
        # Locks are created lazily so they bind to the loop that uses them
        if self._conn_lock is None:
            self._conn_lock = asyncio.Lock()
        async with self._conn_lock:
            if self._conn is None:
                self._conn = await self._open()
            yield self._conn

    async def init_db(self) -> None:
        """Create the storage table once per connection."""
        if self._schema_lock is None:
            self._schema_lock = asyncio.Lock()
        async with self._schema_lock:
            if self._schema_ready:
                return
            async with self._get_connection() as conn:
                try:
                    await conn.executescript(_SCHEMA)
                    await conn.commit()
                except sqlite3.Error as e:
                    raise DatabaseError(f"Failed to initialize schema: {e}") from e
            self._schema_ready = True

    async def close(self) -> None:
        """Close the connection and forget the loop-bound locks."""
        conn, self._conn = self._conn, None
        self._conn_lock = None
        self._schema_lock = None
        self._schema_ready = False
        if conn is None:
            return
        try:
            await conn.close()
        except (sqlite3.Error, OSError) as e:
            logger.warning(f"Error closing database connection: {e}")
