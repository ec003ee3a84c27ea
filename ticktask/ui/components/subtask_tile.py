import flet as ft
from typing import Optional

from ticktask.config import BORDER_RADIUS, COLORS, FONT_SIZE_MD, FONT_SIZE_SM, PADDING_LG
from ticktask.formatters import TimeFormatter
from ticktask.models.entities import Subtask, SubtaskView
from ticktask.services.task_store import TaskStore
from ticktask.ui.helpers import (
    accent_btn,
    danger_icon_btn,
    edit_icon_btn,
    read_time_fields,
    safe_update,
    time_field,
    timer_badge,
)
from ticktask.ui.presenters.subtask_presenter import SubtaskPresenter


class SubtaskTile(ft.Container):
    """One subtask row: name, time range, live countdown and controls.

    Store mutations go straight to the TaskStore; the tile only re-renders
    itself when a new SubtaskView arrives for its subtask.
    """

    def __init__(
        self,
        task_id: str,
        subtask: Subtask,
        view: Optional[SubtaskView],
        store: TaskStore,
        on_toggled,
    ) -> None:
        self.task_id = task_id
        self.subtask = subtask
        self.view = view
        self.store = store
        self._on_toggled = on_toggled
        self.editing = False
        super().__init__(
            padding=PADDING_LG,
            border_radius=BORDER_RADIUS,
        )
        self._render()

    def apply_view(self, view: SubtaskView) -> None:
        """Re-render for a fresh derived state (tick or transition)."""
        self.view = view
        if not self.editing:
            self._render()
            safe_update(self)

    def _render(self) -> None:
        self.content = self._build_edit() if self.editing else self._build_display()

    def _build_display(self) -> ft.Control:
        display = SubtaskPresenter.create_display_data(self.subtask, self.view)
        self.bgcolor = display.bgcolor

        details = [ft.Text(display.name, weight="bold", size=FONT_SIZE_MD, color=COLORS["subtask_text"])]
        if display.range_display:
            details.append(ft.Text(display.range_display, size=FONT_SIZE_SM, weight="bold", color=COLORS["subtask_text"]))

        return ft.Row(
            [
                ft.Column(details, expand=True, spacing=2),
                timer_badge(display.countdown_display or "", visible=display.countdown_display is not None),
                ft.Checkbox(value=display.completed, on_change=self._on_toggle),
                edit_icon_btn(self._on_edit),
                danger_icon_btn(self._on_delete),
            ],
            vertical_alignment=ft.CrossAxisAlignment.CENTER,
        )

    def _build_edit(self) -> ft.Control:
        self.bgcolor = COLORS["upcoming_bg"]
        self.name_field = ft.TextField(value=self.subtask.name, dense=True, expand=True)
        self.start_field = time_field("Start Time", TimeFormatter.to_input_value(self.subtask.start_time))
        self.end_field = time_field("End Time", TimeFormatter.to_input_value(self.subtask.end_time))
        return ft.Row(
            [
                self.name_field,
                self.start_field,
                self.end_field,
                accent_btn("Save", self._on_save),
                ft.TextButton("Cancel", on_click=self._on_cancel),
            ],
            wrap=True,
        )

    def _on_toggle(self, e: ft.ControlEvent) -> None:
        self.store.toggle_subtask_completed(self.task_id, self.subtask.id)
        self._on_toggled()

    def _on_edit(self, e: ft.ControlEvent) -> None:
        self.editing = True
        self._render()
        safe_update(self)

    def _on_save(self, e: ft.ControlEvent) -> None:
        times = read_time_fields(self.start_field, self.end_field)
        if times is None:
            return
        updated = self.store.update_subtask(
            self.task_id,
            self.subtask.id,
            name=self.name_field.value,
            start_time=times[0],
            end_time=times[1],
        )
        if updated is None:
            # Blank name: keep the editor open
            self.name_field.focus()
            return
        self.editing = False

    def _on_cancel(self, e: ft.ControlEvent) -> None:
        self.editing = False
        self._render()
        safe_update(self)

    def _on_delete(self, e: ft.ControlEvent) -> None:
        self.store.delete_subtask(self.task_id, self.subtask.id)
