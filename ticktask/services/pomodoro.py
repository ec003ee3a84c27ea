import logging

from ticktask.config import (
    POMODORO_COMPLETE_MESSAGE,
    POMODORO_SECONDS,
    TICK_INTERVAL_SECONDS,
    PomodoroStatus,
)
from ticktask.events import event_bus, AppEvent
from ticktask.services.notification_service import NotificationSink, deliver
from ticktask.services.scheduling import OwnedTimers, Scheduler

logger = logging.getLogger(__name__)

TICK_SLOT = "tick"


class PomodoroTimer:
    """Countdown timer that owns its own tick chain.

    Framework-agnostic: ticks are scheduled through the injected scheduler.
    State is process-local and starts at the full length on every launch.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        notifier: NotificationSink,
        duration_seconds: int = POMODORO_SECONDS,
    ) -> None:
        self.duration_seconds = duration_seconds
        self._notifier = notifier
        self._timers = OwnedTimers(scheduler, "pomodoro")

        self.remaining_seconds: int = duration_seconds
        self.status: PomodoroStatus = PomodoroStatus.IDLE

    @property
    def running(self) -> bool:
        return self.status is PomodoroStatus.RUNNING

    def start(self) -> None:
        """Start (or restart) a full-length countdown."""
        self._timers.cancel_all()
        self.remaining_seconds = self.duration_seconds
        self.status = PomodoroStatus.RUNNING
        self._schedule_tick()
        logger.info(f"Pomodoro started for {self.duration_seconds}s")
        event_bus.emit(AppEvent.POMODORO_STARTED, self.remaining_seconds)

    def stop(self) -> None:
        """Stop counting; the remaining value is kept only for display."""
        self._timers.cancel_all()
        if self.status is PomodoroStatus.RUNNING:
            self.status = PomodoroStatus.IDLE
        event_bus.emit(AppEvent.POMODORO_STOPPED, self.remaining_seconds)

    def reset(self) -> None:
        self._timers.cancel_all()
        self.remaining_seconds = self.duration_seconds
        self.status = PomodoroStatus.IDLE
        event_bus.emit(AppEvent.POMODORO_RESET, self.remaining_seconds)

    def cleanup(self) -> None:
        """Cancel the tick chain on shutdown without touching state."""
        self._timers.cancel_all()

    def _schedule_tick(self) -> None:
        self._timers.schedule(TICK_SLOT, TICK_INTERVAL_SECONDS, self._on_tick)

    def _on_tick(self) -> None:
        if self.status is not PomodoroStatus.RUNNING:
            return
        self.remaining_seconds = max(0, self.remaining_seconds - 1)
        event_bus.emit(AppEvent.POMODORO_TICK, self.remaining_seconds)
        if self.remaining_seconds > 0:
            self._schedule_tick()
            return

        self.status = PomodoroStatus.COMPLETED
        logger.info("Pomodoro completed")
        deliver(self._notifier, POMODORO_COMPLETE_MESSAGE)
        event_bus.emit(AppEvent.POMODORO_COMPLETED, 0)
