"""Shared fixtures for ticktask tests."""
import asyncio
from datetime import datetime
from typing import List

import pytest
import pytest_asyncio

from ticktask.core import ServiceContainer, bootstrap, shutdown
from ticktask.database import db, configure_db_path
from ticktask.events import event_bus
from ticktask.models.entities import AppState
from ticktask.services.task_store import TaskStore

from fakes import FakeLoop, RecordingNotifier

START = datetime(2026, 3, 2, 9, 0, 0)


@pytest.fixture(autouse=True)
def clean_event_bus():
    event_bus.clear()
    yield
    event_bus.clear()


@pytest.fixture
def loop() -> FakeLoop:
    return FakeLoop(START)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def store() -> TaskStore:
    return TaskStore(AppState())


@pytest_asyncio.fixture
async def memory_db():
    """Fresh in-memory database for one test."""
    await db.close()
    configure_db_path(":memory:")
    await db.init_db()
    yield db
    await db.close()


@pytest.fixture
def spawned() -> List[asyncio.Task]:
    return []


@pytest.fixture
def async_scheduler(spawned):
    """Fire-and-forget scheduler whose tasks the test can await."""
    def schedule(fn, *args):
        task = asyncio.get_running_loop().create_task(fn(*args))
        spawned.append(task)
        return task
    return schedule


@pytest_asyncio.fixture
async def services(loop, notifier, async_scheduler, spawned) -> ServiceContainer:
    """Fully wired services on an in-memory DB and virtual time."""
    await db.close()
    svc = await bootstrap(
        db_path=":memory:",
        clock=loop.now,
        loop=loop,
        notifier=notifier,
        async_scheduler=async_scheduler,
    )
    yield svc
    # Let queued background writes land before the connection closes
    await asyncio.gather(*spawned)
    await shutdown(svc)
