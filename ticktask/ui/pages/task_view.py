import flet as ft
import logging
from typing import List, Set

from ticktask.config import SPACING_LG
from ticktask.events import event_bus, AppEvent, Subscription
from ticktask.models.entities import SubtaskView, Task
from ticktask.services.subtask_engine import SubtaskStateEngine
from ticktask.services.task_store import TaskStore
from ticktask.ui.components.task_tile import TaskTile
from ticktask.ui.helpers import accent_btn, safe_update

logger = logging.getLogger(__name__)


class TaskForm(ft.Container):
    """Name field plus "Add Task". Blank names are ignored and keep focus."""

    def __init__(self, store: TaskStore) -> None:
        self.store = store
        self.name_field = ft.TextField(hint_text="Task Name", expand=True, on_submit=self._on_submit)
        super().__init__(
            content=ft.Row([self.name_field, accent_btn("Add Task", self._on_submit)]),
            padding=ft.Padding.symmetric(vertical=8),
        )

    def _on_submit(self, e: ft.ControlEvent) -> None:
        if self.store.add_task(self.name_field.value or "") is None:
            self.name_field.focus()
            return
        self.name_field.value = ""
        self.name_field.focus()
        safe_update(self.name_field)


class TaskListView(ft.Column):
    """Numbered list of task cards, rebuilt on every store change.

    Subtask state changes are routed to the matching tile without a full
    rebuild, so countdown ticks only repaint one row.
    """

    def __init__(self, store: TaskStore, engine: SubtaskStateEngine) -> None:
        super().__init__(spacing=SPACING_LG)
        self.store = store
        self.engine = engine
        self.form_open: Set[str] = set()
        self.hide_completed: Set[str] = set()
        self._tiles: List[TaskTile] = []
        self._subscriptions: List[Subscription] = []

    def subscribe(self) -> None:
        self._subscriptions.append(event_bus.subscribe(AppEvent.TASKS_CHANGED, self._on_tasks_changed))
        self._subscriptions.append(
            event_bus.subscribe(AppEvent.SUBTASK_STATE_CHANGED, self._on_subtask_state_changed)
        )

    def unsubscribe(self) -> None:
        for sub in self._subscriptions:
            sub.unsubscribe()
        self._subscriptions.clear()

    def refresh(self) -> None:
        self._rebuild(self.store.tasks)
        safe_update(self)

    def _rebuild(self, tasks: List[Task]) -> None:
        logger.debug(f"Rendering {len(tasks)} task(s)")
        live_ids = {t.id for t in tasks}
        self.form_open &= live_ids
        self.hide_completed &= live_ids
        self._tiles = [
            TaskTile(
                task,
                index,
                self.store,
                self.engine.view_for,
                form_open=task.id in self.form_open,
                hide_completed=task.id in self.hide_completed,
                on_toggle_form=self._toggle_form,
                on_set_hide_completed=self._set_hide_completed,
            )
            for index, task in enumerate(tasks)
        ]
        self.controls = list(self._tiles)

    def _on_tasks_changed(self, tasks: List[Task]) -> None:
        # Render from the live tree so tiles mutate through the store's objects
        self.refresh()

    def _on_subtask_state_changed(self, view: SubtaskView) -> None:
        for task_tile in self._tiles:
            tile = task_tile.subtask_tiles.get(view.subtask_id)
            if tile is not None:
                tile.apply_view(view)
                return

    def _toggle_form(self, task_id: str) -> None:
        self.form_open ^= {task_id}
        self.refresh()

    def _set_hide_completed(self, task_id: str, hide: bool) -> None:
        if hide:
            self.hide_completed.add(task_id)
        else:
            self.hide_completed.discard(task_id)
        self.refresh()
