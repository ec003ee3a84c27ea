"""ticktask - to-do list with timed subtasks and a pomodoro timer."""

__version__ = "0.1.0"
