from enum import Enum, auto
from typing import Callable, Dict, Any, Optional
import itertools
import threading
import logging

logger = logging.getLogger(__name__)

Handler = Callable[[Any], None]


class AppEvent(Enum):
    """Everything the services announce to each other and to the UI."""
    TASKS_CHANGED = auto()          # payload: deep copy of the task tree
    SUBTASK_STATE_CHANGED = auto()  # payload: SubtaskView
    POMODORO_STARTED = auto()       # payload: remaining seconds
    POMODORO_TICK = auto()
    POMODORO_STOPPED = auto()
    POMODORO_RESET = auto()
    POMODORO_COMPLETED = auto()
    SETTINGS_CHANGED = auto()       # payload: {"dark_mode": bool}


class Subscription:
    """Returned by EventBus.subscribe(). Unsubscribing twice is harmless."""

    def __init__(self, bus: "EventBus", event: AppEvent, key: int):
        self._bus = bus
        self._event = event
        self._key = key
        self._active = True

    @property
    def id(self) -> int:
        return self._key

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        self._bus._remove(self._event, self._key)


class EventBus:
    """Process-wide publish/subscribe hub.

    emit() calls handlers synchronously, in the order they subscribed. A
    handler that raises is logged and skipped; the remaining handlers still
    run. Handlers are held strongly until unsubscribed.
    """
    _instance: Optional["EventBus"] = None
    _instance_lock = threading.Lock()

    def __new__(cls) -> "EventBus":
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    bus = super().__new__(cls)
                    bus._handlers: Dict[AppEvent, Dict[int, Handler]] = {}
                    bus._keys = itertools.count(1)
                    cls._instance = bus
        return cls._instance

    def subscribe(self, event: AppEvent, handler: Handler) -> Subscription:
        key = next(self._keys)
        self._handlers.setdefault(event, {})[key] = handler
        return Subscription(self, event, key)

    def _remove(self, event: AppEvent, key: int) -> None:
        self._handlers.get(event, {}).pop(key, None)

    def has_subscribers(self, event: AppEvent) -> bool:
        return bool(self._handlers.get(event))

    def emit(self, event: AppEvent, data: Any = None) -> None:
        # Snapshot so handlers may (un)subscribe while we iterate
        for handler in list(self._handlers.get(event, {}).values()):
            try:
                handler(data)
            except Exception:
                logger.exception(f"Handler for {event.name} failed")

    def clear(self) -> None:
        """Drop every subscription (used between tests)."""
        self._handlers.clear()


event_bus = EventBus()
