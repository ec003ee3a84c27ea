"""Tests for the subtask lifecycle engine driven by a virtual clock."""
from datetime import timedelta

import pytest

from ticktask.config import SubtaskState
from ticktask.events import AppEvent
from ticktask.services.subtask_engine import SubtaskStateEngine
from ticktask.services.task_store import TaskStore

from fakes import EventCollector, FailingNotifier, FakeLoop, RecordingNotifier


@pytest.fixture
def engine(loop: FakeLoop, notifier: RecordingNotifier):
    eng = SubtaskStateEngine(loop, notifier, clock=loop.now)
    eng.attach()
    yield eng
    eng.shutdown()


@pytest.fixture
def views():
    collector = EventCollector(AppEvent.SUBTASK_STATE_CHANGED)
    yield collector
    collector.cleanup()


def at(loop: FakeLoop, seconds: float):
    return loop.now() + timedelta(seconds=seconds)


def states_for(views: EventCollector, subtask_id: str):
    return [v for v in views.of(AppEvent.SUBTASK_STATE_CHANGED) if v.subtask_id == subtask_id]


class TestUntimedSubtasks:
    def test_toggle_between_upcoming_and_completed(self, store: TaskStore, engine, loop):
        task = store.add_task("Groceries")
        milk = store.add_subtask(task.id, "Milk")
        assert engine.view_for(milk.id).state is SubtaskState.UPCOMING

        store.toggle_subtask_completed(task.id, milk.id)
        assert engine.view_for(milk.id).state is SubtaskState.COMPLETED

        store.toggle_subtask_completed(task.id, milk.id)
        assert engine.view_for(milk.id).state is SubtaskState.UPCOMING
        assert engine.pending_timers == 0
        assert loop.pending == []


class TestActiveCountdown:
    def test_counts_down_then_ends(self, store: TaskStore, engine, loop, views):
        task = store.add_task("Work")
        sub = store.add_subtask(task.id, "Write report", at(loop, -10), at(loop, 50))
        view = engine.view_for(sub.id)
        assert view.state is SubtaskState.ACTIVE
        assert view.remaining_seconds == 50

        loop.advance(1)
        assert engine.view_for(sub.id).remaining_seconds == 49

        loop.advance(49)
        assert engine.view_for(sub.id).state is SubtaskState.ENDED
        assert engine.pending_timers == 0

        remaining = [v.remaining_seconds for v in states_for(views, sub.id) if v.is_active]
        assert remaining == list(range(50, 0, -1))

        loop.advance(120)
        assert states_for(views, sub.id)[-1].state is SubtaskState.ENDED

    def test_at_most_one_tick_chain(self, store: TaskStore, engine, loop):
        task = store.add_task("Work")
        sub = store.add_subtask(task.id, "Write report", at(loop, -10), at(loop, 50))
        for _ in range(5):
            store.update_subtask(task.id, sub.id, name="Write report")
            engine.refresh()
        assert engine.pending_timers == 1
        assert len(loop.pending) == 1

    def test_moving_end_into_past_stops_countdown(self, store: TaskStore, engine, loop, views):
        task = store.add_task("Work")
        sub = store.add_subtask(task.id, "Write report", at(loop, -10), at(loop, 50))
        loop.advance(3)

        store.update_subtask(task.id, sub.id, end_time=at(loop, -1))
        assert engine.view_for(sub.id).state is SubtaskState.ENDED
        assert engine.pending_timers == 0

        before = len(views.received)
        loop.advance(10)
        assert len(views.received) == before

    def test_completing_stops_countdown(self, store: TaskStore, engine, loop):
        task = store.add_task("Work")
        sub = store.add_subtask(task.id, "Write report", at(loop, -10), at(loop, 50))
        store.toggle_subtask_completed(task.id, sub.id)
        assert engine.view_for(sub.id).state is SubtaskState.COMPLETED
        assert loop.pending == []

    def test_moving_start_into_future_cancels_ticks(self, store: TaskStore, engine, loop, views):
        task = store.add_task("Work")
        sub = store.add_subtask(task.id, "Write report", at(loop, -10), at(loop, 50))

        store.update_subtask(task.id, sub.id, start_time=at(loop, 20))
        assert engine.view_for(sub.id).state is SubtaskState.UPCOMING

        loop.advance(5)
        assert engine.view_for(sub.id).state is SubtaskState.UPCOMING
        assert states_for(views, sub.id)[-1].state is SubtaskState.UPCOMING

    def test_fractional_end_rounds_half_up(self, store: TaskStore, engine, loop):
        task = store.add_task("Work")
        sub = store.add_subtask(task.id, "Write report", at(loop, -1), at(loop, 2.5))
        assert engine.view_for(sub.id).remaining_seconds == 3
        loop.advance(1)
        assert engine.view_for(sub.id).remaining_seconds == 2


class TestStartWakeUp:
    def test_activates_and_notifies_once(self, store: TaskStore, engine, loop, notifier, views):
        task = store.add_task("Work")
        sub = store.add_subtask(task.id, "Standup", at(loop, 30), at(loop, 90))
        view = engine.view_for(sub.id)
        assert view.state is SubtaskState.UPCOMING
        assert view.wake_at == at(loop, 30)

        loop.advance(29)
        assert notifier.messages == []

        loop.advance(1)
        assert engine.view_for(sub.id).state is SubtaskState.ACTIVE
        assert engine.view_for(sub.id).remaining_seconds == 60
        assert notifier.messages == ['Subtask "Standup" has started!']

        loop.advance(60)
        assert engine.view_for(sub.id).state is SubtaskState.ENDED
        assert notifier.messages == ['Subtask "Standup" has started!']

    def test_late_wake_up_is_not_backfilled(self, store: TaskStore, engine, loop, notifier):
        task = store.add_task("Work")
        sub = store.add_subtask(task.id, "Standup", at(loop, 30), at(loop, 40))

        # Loop suspended past the whole window
        loop.jump(45)
        loop.run_due()

        assert engine.view_for(sub.id).state is SubtaskState.ENDED
        assert notifier.messages == []
        assert engine.pending_timers == 0

    def test_notification_uses_current_name(self, store: TaskStore, engine, loop, notifier):
        task = store.add_task("Work")
        sub = store.add_subtask(task.id, "Standup", at(loop, 30), at(loop, 90))
        store.update_subtask(task.id, sub.id, name="Daily standup")
        loop.advance(30)
        assert notifier.messages == ['Subtask "Daily standup" has started!']

    def test_completed_before_start_never_notifies(self, store: TaskStore, engine, loop, notifier):
        task = store.add_task("Work")
        sub = store.add_subtask(task.id, "Standup", at(loop, 30), at(loop, 90))
        store.toggle_subtask_completed(task.id, sub.id)
        loop.advance(120)
        assert notifier.messages == []
        assert engine.view_for(sub.id).state is SubtaskState.COMPLETED

    def test_inverted_window_ends_without_notification(self, store: TaskStore, engine, loop, notifier):
        task = store.add_task("Work")
        sub = store.add_subtask(task.id, "Backwards", at(loop, 60), at(loop, 30))
        assert engine.view_for(sub.id).state is SubtaskState.UPCOMING
        loop.advance(60)
        assert engine.view_for(sub.id).state is SubtaskState.ENDED
        assert notifier.messages == []

    def test_failing_notifier_keeps_countdown(self, store: TaskStore, loop):
        failing = FailingNotifier()
        engine = SubtaskStateEngine(loop, failing, clock=loop.now)
        engine.attach()
        task = store.add_task("Work")
        sub = store.add_subtask(task.id, "Standup", at(loop, 1), at(loop, 10))
        loop.advance(2)
        assert failing.calls == 1
        assert engine.view_for(sub.id).state is SubtaskState.ACTIVE
        assert engine.view_for(sub.id).remaining_seconds == 8
        engine.shutdown()


class TestLifecycleOfTimers:
    def test_uncompleting_past_window_is_ended(self, store: TaskStore, engine, loop):
        task = store.add_task("Work")
        sub = store.add_subtask(task.id, "Old", at(loop, -120), at(loop, -60))
        store.toggle_subtask_completed(task.id, sub.id)
        store.toggle_subtask_completed(task.id, sub.id)
        assert engine.view_for(sub.id).state is SubtaskState.ENDED

    def test_deleting_subtask_cancels_its_timers(self, store: TaskStore, engine, loop, views):
        task = store.add_task("Work")
        sub = store.add_subtask(task.id, "Standup", at(loop, -5), at(loop, 90))
        store.delete_subtask(task.id, sub.id)
        assert engine.tracked == 0
        assert loop.pending == []

        before = len(views.received)
        loop.advance(100)
        assert len(views.received) == before

    def test_deleting_task_cancels_all_subtask_timers(self, store: TaskStore, engine, loop):
        task = store.add_task("Work")
        store.add_subtask(task.id, "A", at(loop, -5), at(loop, 90))
        store.add_subtask(task.id, "B", at(loop, 30), at(loop, 90))
        other = store.add_task("Home")
        kept = store.add_subtask(other.id, "C", at(loop, 30), at(loop, 90))
        assert engine.pending_timers == 3

        store.delete_task(task.id)
        assert engine.tracked == 1
        assert engine.pending_timers == 1
        assert engine.view_for(kept.id).state is SubtaskState.UPCOMING

    def test_shutdown_cancels_everything(self, store: TaskStore, engine, loop, notifier):
        task = store.add_task("Work")
        store.add_subtask(task.id, "A", at(loop, -5), at(loop, 90))
        store.add_subtask(task.id, "B", at(loop, 30), at(loop, 90))
        engine.shutdown()
        assert loop.pending == []
        loop.advance(200)
        assert notifier.messages == []

        store.add_subtask(task.id, "C", at(loop, 30), at(loop, 90))
        assert engine.tracked == 0

    def test_refresh_after_suspension(self, store: TaskStore, engine, loop):
        task = store.add_task("Work")
        sub = store.add_subtask(task.id, "Report", at(loop, -10), at(loop, 50))
        loop.jump(30)
        engine.refresh()
        assert engine.view_for(sub.id).remaining_seconds == 20
        assert engine.pending_timers == 1

    def test_sync_of_preloaded_tree(self, loop, notifier):
        from ticktask.models.entities import AppState, Subtask, Task

        sub = Subtask("Loaded", start_time=at(loop, -1), end_time=at(loop, 5))
        store = TaskStore(AppState(tasks=[Task("Work", subtasks=[sub])]))
        engine = SubtaskStateEngine(loop, notifier, clock=loop.now)
        engine.sync(store.snapshot())
        assert engine.view_for(sub.id).state is SubtaskState.ACTIVE
        assert engine.view_for("missing") is None
        engine.shutdown()
