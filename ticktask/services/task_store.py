import copy
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from ticktask.events import event_bus, AppEvent
from ticktask.models.entities import AppState, Task, Subtask

logger = logging.getLogger(__name__)

_TASK_FIELDS = frozenset({"name"})
_SUBTASK_FIELDS = frozenset({"name", "start_time", "end_time", "completed"})


def _is_blank(name: Optional[str]) -> bool:
    return name is None or not name.strip()


def _local_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Subtask times are naive local wall-clock values."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


class TaskStore:
    """In-memory task tree with CRUD and change notification.

    All operations are synchronous and total: a blank name or an unknown id
    is a no-op that returns None. After every successful mutation the whole
    tree is published as AppEvent.TASKS_CHANGED (a deep copy, so subscribers
    cannot mutate the store through it). Persistence and the subtask engine
    both subscribe to that event.
    """

    def __init__(self, state: AppState) -> None:
        self.state = state
        logger.info(f"TaskStore ready with {len(state.tasks)} task(s)")

    @property
    def tasks(self) -> List[Task]:
        return self.state.tasks

    def snapshot(self) -> List[Task]:
        """Deep copy of the complete task tree."""
        return copy.deepcopy(self.state.tasks)

    def _notify(self) -> None:
        event_bus.emit(AppEvent.TASKS_CHANGED, self.snapshot())

    @staticmethod
    def _check_fields(changes: Dict[str, Any], allowed: frozenset) -> None:
        unknown = set(changes) - allowed
        if unknown:
            raise ValueError(f"Unknown field(s): {', '.join(sorted(unknown))}")

    def get_task(self, task_id: str) -> Optional[Task]:
        return self.state.get_task_by_id(task_id)

    def get_subtask(self, task_id: str, subtask_id: str) -> Optional[Subtask]:
        task = self.get_task(task_id)
        return task.get_subtask(subtask_id) if task else None

    # ---- tasks ----

    def add_task(self, name: str) -> Optional[Task]:
        if _is_blank(name):
            return None
        task = Task(name=name)
        self.state.tasks.append(task)
        logger.debug(f"Task added id={task.id}")
        self._notify()
        return task

    def update_task(self, task_id: str, **changes: Any) -> Optional[Task]:
        """Apply a patch to a task. Only ``name`` is editable."""
        self._check_fields(changes, _TASK_FIELDS)
        task = self.get_task(task_id)
        if task is None:
            return None
        if "name" in changes and _is_blank(changes["name"]):
            return None
        for key, value in changes.items():
            setattr(task, key, value)
        self._notify()
        return task

    def delete_task(self, task_id: str) -> bool:
        task = self.get_task(task_id)
        if task is None:
            return False
        self.state.tasks.remove(task)
        logger.debug(f"Task deleted id={task_id} with {len(task.subtasks)} subtask(s)")
        self._notify()
        return True

    # ---- subtasks ----

    def add_subtask(
        self,
        task_id: str,
        name: str,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> Optional[Subtask]:
        task = self.get_task(task_id)
        if task is None or _is_blank(name):
            return None
        subtask = Subtask(
            name=name,
            start_time=_local_naive(start_time),
            end_time=_local_naive(end_time),
        )
        task.subtasks.append(subtask)
        logger.debug(f"Subtask added id={subtask.id} task={task_id}")
        self._notify()
        return subtask

    def update_subtask(self, task_id: str, subtask_id: str, **changes: Any) -> Optional[Subtask]:
        """Apply a patch of name/start_time/end_time/completed to a subtask.

        Times may be set to None to clear them. A blank name rejects the
        whole patch.
        """
        self._check_fields(changes, _SUBTASK_FIELDS)
        subtask = self.get_subtask(task_id, subtask_id)
        if subtask is None:
            return None
        if "name" in changes and _is_blank(changes["name"]):
            return None
        for key in ("start_time", "end_time"):
            if key in changes:
                changes[key] = _local_naive(changes[key])
        for key, value in changes.items():
            setattr(subtask, key, value)
        self._notify()
        return subtask

    def delete_subtask(self, task_id: str, subtask_id: str) -> bool:
        task = self.get_task(task_id)
        subtask = task.get_subtask(subtask_id) if task else None
        if subtask is None:
            return False
        task.subtasks.remove(subtask)
        self._notify()
        return True

    def toggle_subtask_completed(self, task_id: str, subtask_id: str) -> Optional[Subtask]:
        subtask = self.get_subtask(task_id, subtask_id)
        if subtask is None:
            return None
        subtask.completed = not subtask.completed
        self._notify()
        return subtask
