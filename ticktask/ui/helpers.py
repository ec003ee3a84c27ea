import flet as ft
from datetime import datetime
from typing import Optional, Tuple

from ticktask.config import COLORS, TIME_INPUT_HINT
from ticktask.formatters import TimeFormatter


def accent_btn(text: str, on_click) -> ft.Button:
    return ft.Button(
        text,
        on_click=on_click,
        bgcolor=COLORS["accent"],
        color=COLORS["white"],
    )


def danger_icon_btn(on_click, tooltip: str = "Delete") -> ft.IconButton:
    return ft.IconButton(
        ft.Icons.CLOSE,
        icon_color=COLORS["danger"],
        tooltip=tooltip,
        on_click=on_click,
    )


def edit_icon_btn(on_click) -> ft.IconButton:
    return ft.IconButton(ft.Icons.EDIT, tooltip="Edit", on_click=on_click)


def time_field(label: str, value: str = "") -> ft.TextField:
    """Text input for a subtask start/end time."""
    return ft.TextField(
        label=label,
        value=value,
        hint_text=TIME_INPUT_HINT,
        dense=True,
        width=190,
    )


def read_time_fields(
    start_field: ft.TextField, end_field: ft.TextField
) -> Optional[Tuple[Optional[datetime], Optional[datetime]]]:
    """Parse a start/end pair of time inputs.

    Returns None, and marks and focuses the first bad field, if either holds
    text that is not a time. Blank fields mean unset.
    """
    values = []
    for field in (start_field, end_field):
        try:
            values.append(TimeFormatter.parse_time_input(field.value))
            field.error_text = None
        except ValueError:
            field.error_text = f"Use {TIME_INPUT_HINT}"
            field.focus()
            safe_update(field)
            return None
    return values[0], values[1]


def timer_badge(text: str, visible: bool = True) -> ft.Container:
    """Grey pill used for both the pomodoro and subtask countdowns."""
    return ft.Container(
        content=ft.Text(text, color=COLORS["timer_text"], weight="bold", font_family="monospace"),
        bgcolor=COLORS["timer_bg"],
        padding=ft.Padding.symmetric(horizontal=8, vertical=4),
        border_radius=4,
        visible=visible,
    )


def safe_update(control: Optional[ft.Control]) -> None:
    """Update a control if it is mounted on a page."""
    if control is None:
        return
    try:
        control.update()
    except (AssertionError, RuntimeError):
        # Not added to a page yet (or already removed)
        pass
