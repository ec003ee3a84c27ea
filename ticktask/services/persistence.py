import asyncio
import json
import logging
from typing import Any, Callable, List, Optional, Set

from ticktask.config import DARK_MODE_KEY, TASKS_KEY
from ticktask.database import db, DatabaseError
from ticktask.events import event_bus, AppEvent, Subscription
from ticktask.models.entities import Task

logger = logging.getLogger(__name__)

AsyncScheduler = Callable[..., Any]


def serialize_tasks(tasks: List[Task]) -> str:
    return json.dumps([t.to_dict() for t in tasks], ensure_ascii=False)


def deserialize_tasks(raw: Optional[str]) -> List[Task]:
    """Parse a stored task tree.

    Raises ValueError/KeyError/TypeError for anything that is not a
    well-formed list of tasks.
    """
    if raw is None:
        return []
    data = json.loads(raw)
    if not isinstance(data, list):
        raise TypeError(f"Expected a list of tasks, got {type(data).__name__}")
    return [Task.from_dict(d) for d in data]


class PersistenceAdapter:
    """Round-trips the task tree and the dark-mode flag through local storage.

    Loads degrade to defaults and saves are fire-and-forget: storage
    problems are logged and never reach the caller, so the in-memory state
    stays authoritative for the session.
    """

    def __init__(self, async_scheduler: AsyncScheduler) -> None:
        """
        Args:
            async_scheduler: Function that runs an async function in the
                background, e.g. page.run_task or ticktask.core.spawn.
        """
        self._schedule_async = async_scheduler
        self._subscription: Optional[Subscription] = None
        # asyncio Tasks (spawn) or concurrent futures (page.run_task)
        self._in_flight: Set[Any] = set()

    def attach(self) -> None:
        """Save after every TaskStore mutation."""
        if self._subscription is None:
            self._subscription = event_bus.subscribe(AppEvent.TASKS_CHANGED, self.save)

    def detach(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    async def load(self) -> List[Task]:
        """Load the stored task tree; empty if absent, unreadable or malformed."""
        try:
            raw = await db.get_item(TASKS_KEY)
        except DatabaseError as e:
            logger.warning(f"Could not read stored tasks, starting empty: {e}")
            return []
        try:
            tasks = deserialize_tasks(raw)
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Stored tasks are malformed, starting empty: {e}")
            return []
        logger.info(f"Loaded {len(tasks)} task(s) from storage")
        return tasks

    def save(self, tasks: List[Task]) -> None:
        """Schedule a background write of the task tree.

        The payload is serialized immediately, so later mutations cannot
        leak into this write.
        """
        self._fire_and_forget(TASKS_KEY, serialize_tasks(tasks))

    def _fire_and_forget(self, key: str, payload: str) -> None:
        try:
            future = self._schedule_async(self._write, key, payload)
        except RuntimeError as e:
            # No running event loop (e.g. during interpreter shutdown)
            logger.warning(f"Could not schedule write of {key}: {e}")
            return
        if future is not None:
            self._in_flight.add(future)
            future.add_done_callback(self._on_write_done)

    def _on_write_done(self, future: Any) -> None:
        self._in_flight.discard(future)
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error(f"Background write failed: {error!r}")

    @property
    def pending_writes(self) -> int:
        return len(self._in_flight)

    async def flush(self) -> None:
        """Wait for every scheduled background write to finish."""
        while self._in_flight:
            pending = [asyncio.wrap_future(f) for f in list(self._in_flight)]
            await asyncio.gather(*pending, return_exceptions=True)

    async def save_async(self, tasks: List[Task]) -> bool:
        """Write the task tree now. Returns False if the write failed."""
        return await self._write(TASKS_KEY, serialize_tasks(tasks))

    async def load_dark_mode(self) -> bool:
        try:
            return await db.get_item(DARK_MODE_KEY) == "true"
        except DatabaseError as e:
            logger.warning(f"Could not read dark mode flag: {e}")
            return False

    def save_dark_mode(self, enabled: bool) -> None:
        self._fire_and_forget(DARK_MODE_KEY, "true" if enabled else "false")

    async def _write(self, key: str, payload: str) -> bool:
        try:
            await db.set_item(key, payload)
            return True
        except DatabaseError as e:
            logger.warning(f"Failed to persist {key}, keeping in-memory state: {e}")
            return False
