from dataclasses import dataclass
from typing import List, Optional

from ticktask.config import STATE_COLORS, SubtaskState
from ticktask.formatters import TimeFormatter
from ticktask.models.entities import Subtask, SubtaskView, Task


@dataclass
class SubtaskDisplayData:
    """Computed display data for a subtask, separating logic from presentation."""
    name: str
    state: SubtaskState
    bgcolor: str
    range_display: str
    countdown_display: Optional[str]
    completed: bool


class SubtaskPresenter:
    """Computes display values for subtasks and task headers without rendering."""

    @staticmethod
    def create_display_data(subtask: Subtask, view: Optional[SubtaskView]) -> SubtaskDisplayData:
        state = view.state if view else (
            SubtaskState.COMPLETED if subtask.completed else SubtaskState.UPCOMING
        )
        countdown = None
        if view is not None and view.is_active and view.remaining_seconds is not None:
            countdown = TimeFormatter.seconds_to_hms(view.remaining_seconds)
        return SubtaskDisplayData(
            name=subtask.name,
            state=state,
            bgcolor=STATE_COLORS[state],
            range_display=TimeFormatter.range_to_display(subtask.start_time, subtask.end_time),
            countdown_display=countdown,
            completed=subtask.completed,
        )

    @staticmethod
    def task_heading(task: Task, index: int) -> str:
        """Task title with its 1-based position, e.g. '1. Groceries'."""
        return f"{index + 1}. {task.name}"

    @staticmethod
    def visible_subtasks(task: Task, hide_completed: bool) -> List[Subtask]:
        if not hide_completed:
            return list(task.subtasks)
        return [s for s in task.subtasks if not s.completed]
