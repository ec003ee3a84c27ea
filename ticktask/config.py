"""Application configuration - single source of truth for all constants.

Contains storage slot names, timer lengths, lifecycle enums (SubtaskState,
PomodoroStatus) and the colour palette. Values that differ per machine come
from the environment (optionally via a .env file next to the package).
"""
import os
from enum import Enum
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).parent / ".env")


class SubtaskState(Enum):
    """Derived lifecycle state of a subtask. Never persisted."""
    UPCOMING = "upcoming"
    ACTIVE = "active"
    ENDED = "ended"
    COMPLETED = "completed"


class PomodoroStatus(Enum):
    """Lifecycle of the pomodoro countdown."""
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"


DB_PATH = Path(os.getenv("TICKTASK_DB_PATH", "") or "ticktask.db")
LOG_LEVEL = os.getenv("TICKTASK_LOG_LEVEL", "") or "INFO"

# Local storage slots
TASKS_KEY = "tasks"
DARK_MODE_KEY = "darkMode"

POMODORO_SECONDS = int(os.getenv("TICKTASK_POMODORO_SECONDS", "") or 25 * 60)
TICK_INTERVAL_SECONDS = 1.0

SUBTASK_STARTED_MESSAGE = 'Subtask "{name}" has started!'
POMODORO_COMPLETE_MESSAGE = "Pomodoro timer is complete!"

# Accepted formats for typed-in subtask times, tried in order
TIME_INPUT_FORMATS = (
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
)
TIME_INPUT_HINT = "YYYY-MM-DDTHH:MM"

APP_TITLE = "To-Do List"
PAGE_MAX_WIDTH = 900

FONT_SIZE_SM = 12
FONT_SIZE_MD = 14
FONT_SIZE_LG = 18
FONT_SIZE_TITLE = 36

SPACING_SM = 4
SPACING_MD = 8
SPACING_LG = 12

PADDING_SM = 4
PADDING_MD = 8
PADDING_LG = 16

BORDER_RADIUS = 8

COLORS = {
    "completed_bg": "#e6ffe6",
    "active_bg": "#e0f7fa",
    "ended_bg": "#ffe0b2",
    "upcoming_bg": "white",
    "timer_bg": "#bbbbbb",
    "timer_text": "#ffffff",
    "subtask_text": "#222222",
    "accent": "#00d1b2",
    "danger": "#ff6b6b",
    "white": "white",
}

# Background per derived subtask state
STATE_COLORS = {
    SubtaskState.COMPLETED: COLORS["completed_bg"],
    SubtaskState.ACTIVE: COLORS["active_bg"],
    SubtaskState.ENDED: COLORS["ended_bg"],
    SubtaskState.UPCOMING: COLORS["upcoming_bg"],
}
