import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List, Dict, Any

from ticktask.config import SubtaskState
from ticktask.formatters import TimeFormatter


def new_id() -> str:
    """Globally unique identifier for tasks and subtasks."""
    return str(uuid.uuid4())


def _time_to_json(value: Optional[datetime]) -> str:
    return value.isoformat() if value is not None else ""


def _time_from_json(raw: Any) -> Optional[datetime]:
    if raw is None or raw == "":
        return None
    parsed = TimeFormatter.parse_timestamp(raw) if isinstance(raw, str) else None
    if parsed is None:
        raise ValueError(f"Invalid timestamp: {raw!r}")
    return parsed


@dataclass
class Subtask:
    """A step of a task with an optional time window."""
    name: str
    id: str = field(default_factory=new_id)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    completed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON shape kept in local storage."""
        return {
            "id": self.id,
            "name": self.name,
            "startTime": _time_to_json(self.start_time),
            "endTime": _time_to_json(self.end_time),
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Subtask":
        """Create Subtask from its stored dictionary.

        Raises KeyError/ValueError/TypeError on malformed input.
        """
        if not isinstance(d["id"], str) or not isinstance(d["name"], str):
            raise TypeError("Subtask id and name must be strings")
        completed = d.get("completed", False)
        if not isinstance(completed, bool):
            raise TypeError("Subtask completed must be a boolean")
        return cls(
            id=d["id"],
            name=d["name"],
            start_time=_time_from_json(d.get("startTime")),
            end_time=_time_from_json(d.get("endTime")),
            completed=completed,
        )


@dataclass
class Task:
    name: str
    id: str = field(default_factory=new_id)
    subtasks: List[Subtask] = field(default_factory=list)

    def get_subtask(self, subtask_id: str) -> Optional[Subtask]:
        for s in self.subtasks:
            if s.id == subtask_id:
                return s
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "subtasks": [s.to_dict() for s in self.subtasks],
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Task":
        if not isinstance(d["id"], str) or not isinstance(d["name"], str):
            raise TypeError("Task id and name must be strings")
        raw_subtasks = d.get("subtasks", [])
        if not isinstance(raw_subtasks, list):
            raise TypeError("Task subtasks must be a list")
        return cls(
            id=d["id"],
            name=d["name"],
            subtasks=[Subtask.from_dict(s) for s in raw_subtasks],
        )


@dataclass(frozen=True)
class SubtaskView:
    """Derived display state of a subtask at one instant.

    remaining_seconds is only set while ACTIVE; wake_at only while UPCOMING
    with a known start in the future.
    """
    subtask_id: str
    state: SubtaskState
    remaining_seconds: Optional[int] = None
    wake_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.state is SubtaskState.ACTIVE


@dataclass
class AppState:
    tasks: List[Task] = field(default_factory=list)
    dark_mode: bool = False

    def get_task_by_id(self, task_id: Optional[str]) -> Optional[Task]:
        if task_id is None:
            return None
        for t in self.tasks:
            if t.id == task_id:
                return t
        return None
