import sqlite3
import logging
from typing import Optional

from ticktask.database.helpers import DatabaseError, describe_value

logger = logging.getLogger(__name__)


class StorageMixin:
    """Keyed text slots, the local-storage surface the app persists through.

    Values are stored verbatim; callers own the encoding (JSON for the task
    tree, "true"/"false" for flags).
    """

    async def get_item(self, key: str) -> Optional[str]:
        """Return the raw text in a slot, or None if the slot is empty."""
        await self.init_db()
        try:
            async with self._get_connection() as conn:
                async with conn.execute(
                    "SELECT value FROM local_storage WHERE key=?",
                    (key,)
                ) as cursor:
                    row = await cursor.fetchone()
                    return row["value"] if row else None
        except sqlite3.Error as e:
            logger.error(f"Error reading slot {key}: {e}")
            raise DatabaseError(f"Failed to read {key}: {e}") from e

    async def set_item(self, key: str, value: str) -> None:
        await self.init_db()
        try:
            async with self._get_connection() as conn:
                await conn.execute(
                    "INSERT OR REPLACE INTO local_storage (key,value) VALUES (?,?)",
                    (key, value)
                )
                await conn.commit()
        except sqlite3.Error as e:
            logger.error(f"Error writing slot {key}: {e}")
            raise DatabaseError(f"Failed to write {key}: {e}") from e
        logger.debug(f"Stored {key} = {describe_value(value)}")

