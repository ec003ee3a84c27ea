import logging
from datetime import datetime
from typing import Callable, Dict, Iterable, Optional, Tuple

from ticktask.config import SUBTASK_STARTED_MESSAGE, TICK_INTERVAL_SECONDS, SubtaskState
from ticktask.events import event_bus, AppEvent, Subscription
from ticktask.models.entities import Subtask, SubtaskView, Task
from ticktask.services.lifecycle import derive_state
from ticktask.services.notification_service import NotificationSink, deliver
from ticktask.services.scheduling import Clock, OwnedTimers, Scheduler

logger = logging.getLogger(__name__)

START_SLOT = "start"
TICK_SLOT = "tick"

TimeFields = Tuple[Optional[datetime], Optional[datetime], bool]


class SubtaskTimer:
    """Owns the wake-up and countdown of a single subtask.

    The timer keeps its own copy of the fields it was last scheduled
    against. reschedule() always cancels everything first, so a callback
    can never run against superseded start/end/completed values.
    """

    def __init__(
        self,
        subtask: Subtask,
        scheduler: Scheduler,
        clock: Clock,
        notifier: NotificationSink,
        on_view: Callable[[SubtaskView], None],
    ) -> None:
        self.subtask_id = subtask.id
        self.name = subtask.name
        self._fields: TimeFields = (subtask.start_time, subtask.end_time, subtask.completed)
        self._clock = clock
        self._notifier = notifier
        self._on_view = on_view
        self._timers = OwnedTimers(scheduler, f"subtask {subtask.id}")
        self.view: Optional[SubtaskView] = None

    @property
    def fields(self) -> TimeFields:
        return self._fields

    @property
    def pending(self) -> int:
        return self._timers.pending

    def reschedule(self, subtask: Optional[Subtask] = None) -> SubtaskView:
        """Cancel pending callbacks and re-derive from (new) field values."""
        self.cancel_all()
        if subtask is not None:
            self.name = subtask.name
            self._fields = (subtask.start_time, subtask.end_time, subtask.completed)
        return self._evaluate()

    def rename(self, name: str) -> None:
        self.name = name

    def cancel_all(self) -> None:
        self._timers.cancel_all()

    def _evaluate(self) -> SubtaskView:
        start, end, completed = self._fields
        now = self._clock()
        view = derive_state(self.subtask_id, start, end, completed, now)

        if view.state is SubtaskState.ACTIVE:
            if view.remaining_seconds <= 0:
                view = SubtaskView(self.subtask_id, SubtaskState.ENDED)
            else:
                self._timers.schedule(TICK_SLOT, TICK_INTERVAL_SECONDS, self._on_tick)
        elif view.wake_at is not None:
            self._timers.schedule(START_SLOT, (view.wake_at - now).total_seconds(), self._on_start)

        self._publish(view)
        return view

    def _publish(self, view: SubtaskView) -> None:
        if view == self.view:
            return
        previous = self.view.state if self.view else None
        self.view = view
        if previous is not view.state:
            logger.debug(f"Subtask {self.subtask_id}: {previous} -> {view.state}")
        self._on_view(view)

    def _on_tick(self) -> None:
        self._evaluate()

    def _on_start(self) -> None:
        view = self._evaluate()
        if view.state is SubtaskState.ACTIVE:
            deliver(self._notifier, SUBTASK_STARTED_MESSAGE.format(name=self.name))
        elif view.state is not SubtaskState.UPCOMING:
            # Woke after the window closed; no backfilled notification
            logger.info(f"Subtask {self.subtask_id} start wake-up landed in {view.state.value}, not notifying")


class SubtaskStateEngine:
    """Keeps one SubtaskTimer per subtask in the task tree.

    Subscribed to AppEvent.TASKS_CHANGED via attach(). Every published view
    is re-emitted as AppEvent.SUBTASK_STATE_CHANGED for the UI.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        notifier: NotificationSink,
        clock: Clock = datetime.now,
    ) -> None:
        self._scheduler = scheduler
        self._notifier = notifier
        self._clock = clock
        self._timers: Dict[str, SubtaskTimer] = {}
        self._subscription: Optional[Subscription] = None

    def attach(self) -> None:
        """Start following task tree changes."""
        if self._subscription is None:
            self._subscription = event_bus.subscribe(AppEvent.TASKS_CHANGED, self.sync)

    def _emit_view(self, view: SubtaskView) -> None:
        event_bus.emit(AppEvent.SUBTASK_STATE_CHANGED, view)

    def sync(self, tasks: Iterable[Task]) -> None:
        """Reconcile timers with the given task tree."""
        seen = set()
        for task in tasks:
            for subtask in task.subtasks:
                seen.add(subtask.id)
                timer = self._timers.get(subtask.id)
                if timer is None:
                    timer = SubtaskTimer(
                        subtask, self._scheduler, self._clock, self._notifier, self._emit_view
                    )
                    self._timers[subtask.id] = timer
                    timer.reschedule()
                elif timer.fields != (subtask.start_time, subtask.end_time, subtask.completed):
                    timer.reschedule(subtask)
                elif timer.name != subtask.name:
                    timer.rename(subtask.name)

        for subtask_id in set(self._timers) - seen:
            self._timers.pop(subtask_id).cancel_all()
            logger.debug(f"Subtask {subtask_id} removed, timers cancelled")

    def refresh(self) -> None:
        """Re-derive every subtask from the wall clock, e.g. after resume."""
        for timer in self._timers.values():
            timer.reschedule()

    def view_for(self, subtask_id: str) -> Optional[SubtaskView]:
        timer = self._timers.get(subtask_id)
        return timer.view if timer else None

    @property
    def tracked(self) -> int:
        return len(self._timers)

    @property
    def pending_timers(self) -> int:
        return sum(t.pending for t in self._timers.values())

    def shutdown(self) -> None:
        """Cancel every pending callback and stop following the store."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        for timer in self._timers.values():
            timer.cancel_all()
        self._timers.clear()
