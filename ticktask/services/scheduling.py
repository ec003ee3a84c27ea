"""Scheduling ports shared by the subtask engine and the pomodoro timer.

Production code passes the running asyncio event loop as the scheduler; any
object with the same ``call_later`` signature works, which is how the tests
drive time deterministically.
"""
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Protocol

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle: ...


class OwnedTimers:
    """The set of pending callbacks owned by one entity.

    Each slot holds at most one handle; scheduling into an occupied slot
    cancels the previous handle first, so an entity can never have two
    live tick chains.
    """

    def __init__(self, scheduler: Scheduler, owner: str) -> None:
        self._scheduler = scheduler
        self._owner = owner
        self._handles: Dict[str, TimerHandle] = {}

    def schedule(self, slot: str, delay: float, callback: Callable[[], None]) -> None:
        self.cancel(slot)

        def fire() -> None:
            self._handles.pop(slot, None)
            callback()

        self._handles[slot] = self._scheduler.call_later(max(0.0, delay), fire)
        logger.debug(f"{self._owner}: scheduled {slot} in {max(0.0, delay):.3f}s")

    def cancel(self, slot: str) -> None:
        handle = self._handles.pop(slot, None)
        if handle is not None:
            handle.cancel()

    def cancel_all(self) -> None:
        for slot in list(self._handles):
            self.cancel(slot)

    @property
    def pending(self) -> int:
        return len(self._handles)
