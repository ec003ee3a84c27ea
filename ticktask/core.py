"""Headless bootstrap for ticktask services.

Initializes the service layer without any Flet dependency, suitable for
scripts and testing. Must be awaited from inside a running event loop.

Usage:
    from ticktask.core import bootstrap, shutdown

    svc = await bootstrap(db_path=Path("my.db"))
    task = svc.store.add_task("Groceries")
    svc.store.add_subtask(task.id, "Milk")
    await shutdown(svc)
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, Set, Union

from ticktask.database import db, configure_db_path, DatabaseError
from ticktask.models.entities import AppState
from ticktask.services.notification_service import LogNotificationSink, NotificationSink
from ticktask.services.persistence import AsyncScheduler, PersistenceAdapter
from ticktask.services.pomodoro import PomodoroTimer
from ticktask.services.scheduling import Clock, Scheduler
from ticktask.services.settings_service import SettingsService
from ticktask.services.subtask_engine import SubtaskStateEngine
from ticktask.services.task_store import TaskStore

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Container holding all initialized services."""
    state: AppState
    store: TaskStore
    persistence: PersistenceAdapter
    settings: SettingsService
    engine: SubtaskStateEngine
    pomodoro: PomodoroTimer


# The loop only keeps weak references to tasks
_background_tasks: Set["asyncio.Task[Any]"] = set()


def spawn(fn: Callable[..., Awaitable[Any]], *args: Any) -> "asyncio.Task[Any]":
    """Run an async function in the background on the running loop."""
    task = asyncio.get_running_loop().create_task(fn(*args))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return task


async def bootstrap(
    db_path: Optional[Union[str, Path]] = None,
    clock: Optional[Clock] = None,
    loop: Optional[Scheduler] = None,
    notifier: Optional[NotificationSink] = None,
    async_scheduler: AsyncScheduler = spawn,
) -> ServiceContainer:
    """Initialize and wire the service layer.

    Args:
        db_path: Custom database path. Uses the configured default if None.
        clock: Wall clock for the subtask engine (datetime.now by default).
        loop: Scheduler for wake-ups and ticks (the running loop by default).
        notifier: Where user-visible notifications go (log by default).
        async_scheduler: Runs fire-and-forget writes (spawn by default,
            page.run_task in the app).
    """
    if db_path is not None:
        configure_db_path(db_path)
    scheduler = loop or asyncio.get_running_loop()
    sink = notifier or LogNotificationSink()

    try:
        await db.init_db()
    except DatabaseError as e:
        # Storage is best-effort; run this session in memory only
        logger.warning(f"Local storage unavailable: {e}")

    try:
        return await _wire(scheduler, sink, clock or datetime.now, async_scheduler)
    except BaseException:
        await db.close()
        raise


async def _wire(
    scheduler: Scheduler,
    sink: NotificationSink,
    clock: Clock,
    async_scheduler: AsyncScheduler,
) -> ServiceContainer:
    persistence = PersistenceAdapter(async_scheduler)
    state = AppState(
        tasks=await persistence.load(),
        dark_mode=await persistence.load_dark_mode(),
    )

    store = TaskStore(state)
    settings = SettingsService(state, persistence)
    engine = SubtaskStateEngine(scheduler, sink, clock)
    pomodoro = PomodoroTimer(scheduler, sink)

    persistence.attach()
    engine.attach()
    try:
        # Derive initial states for everything that was loaded
        engine.sync(store.snapshot())
    except Exception:
        engine.shutdown()
        persistence.detach()
        raise

    return ServiceContainer(
        state=state,
        store=store,
        persistence=persistence,
        settings=settings,
        engine=engine,
        pomodoro=pomodoro,
    )


async def shutdown(svc: ServiceContainer) -> None:
    """Cancel every timer, drain queued writes, then save once more and close the database."""
    svc.engine.shutdown()
    svc.pomodoro.cleanup()
    svc.persistence.detach()
    await svc.persistence.flush()
    await svc.persistence.save_async(svc.store.tasks)
    await db.close()
