import flet as ft
from typing import Callable, Dict, Optional

from ticktask.config import BORDER_RADIUS, FONT_SIZE_LG, PADDING_LG, SPACING_MD
from ticktask.models.entities import SubtaskView, Task
from ticktask.services.task_store import TaskStore
from ticktask.ui.components.subtask_tile import SubtaskTile
from ticktask.ui.helpers import (
    accent_btn,
    danger_icon_btn,
    edit_icon_btn,
    read_time_fields,
    safe_update,
    time_field,
)
from ticktask.ui.presenters.subtask_presenter import SubtaskPresenter


class TaskTile(ft.Container):
    """A task card: heading, task controls, subtask form and subtask list.

    Display-only toggles (form open, hide completed) are owned by the list
    view so they survive rebuilds after each store change.
    """

    def __init__(
        self,
        task: Task,
        index: int,
        store: TaskStore,
        view_for: Callable[[str], Optional[SubtaskView]],
        form_open: bool,
        hide_completed: bool,
        on_toggle_form: Callable[[str], None],
        on_set_hide_completed: Callable[[str, bool], None],
    ) -> None:
        self.task = task
        self.index = index
        self.store = store
        self._view_for = view_for
        self.form_open = form_open
        self.hide_completed = hide_completed
        self._on_toggle_form = on_toggle_form
        self._on_set_hide_completed = on_set_hide_completed
        self.editing = False
        self.subtask_tiles: Dict[str, SubtaskTile] = {}
        super().__init__(
            padding=PADDING_LG,
            border_radius=BORDER_RADIUS,
            border=ft.Border.all(1, ft.Colors.OUTLINE_VARIANT),
        )
        self._render()

    def _render(self) -> None:
        self.content = ft.Column(
            [self._build_header(), self._build_toolbar()]
            + ([self._build_subtask_form()] if self.form_open else [])
            + [self._build_subtasks()],
            spacing=SPACING_MD,
        )

    def _build_header(self) -> ft.Control:
        if self.editing:
            self.name_field = ft.TextField(value=self.task.name, dense=True, expand=True, autofocus=True)
            return ft.Row([
                self.name_field,
                accent_btn("Save", self._on_save_name),
                ft.TextButton("Cancel", on_click=self._on_cancel_edit),
            ])
        return ft.Row([
            ft.Text(SubtaskPresenter.task_heading(self.task, self.index), size=FONT_SIZE_LG, weight="bold", expand=True),
            edit_icon_btn(self._on_edit),
            danger_icon_btn(lambda e: self.store.delete_task(self.task.id)),
        ])

    def _build_toolbar(self) -> ft.Control:
        return ft.Row(
            [
                ft.Button(
                    "Hide Subtask Form" if self.form_open else "Add Subtask",
                    on_click=lambda e: self._on_toggle_form(self.task.id),
                ),
                ft.Button(
                    "Show Completed" if self.hide_completed else "Hide Completed",
                    on_click=lambda e: self._on_set_hide_completed(self.task.id, not self.hide_completed),
                ),
            ],
            alignment=ft.MainAxisAlignment.SPACE_BETWEEN,
        )

    def _build_subtask_form(self) -> ft.Control:
        self.subtask_name_field = ft.TextField(hint_text="Subtask Name", dense=True, on_submit=self._on_add_subtask)
        self.start_field = time_field("Start Time")
        self.end_field = time_field("End Time")
        return ft.Column([
            self.subtask_name_field,
            ft.Row([self.start_field, self.end_field], wrap=True),
            accent_btn("Add Subtask", self._on_add_subtask),
        ])

    def _build_subtasks(self) -> ft.Control:
        self.subtask_tiles.clear()
        for subtask in SubtaskPresenter.visible_subtasks(self.task, self.hide_completed):
            self.subtask_tiles[subtask.id] = SubtaskTile(
                self.task.id,
                subtask,
                self._view_for(subtask.id),
                self.store,
                on_toggled=lambda: self._on_set_hide_completed(self.task.id, True),
            )
        return ft.Column(list(self.subtask_tiles.values()), spacing=SPACING_MD)

    def _on_edit(self, e: ft.ControlEvent) -> None:
        self.editing = True
        self._render()
        safe_update(self)

    def _on_save_name(self, e: ft.ControlEvent) -> None:
        if self.store.update_task(self.task.id, name=self.name_field.value) is None:
            self.name_field.focus()

    def _on_cancel_edit(self, e: ft.ControlEvent) -> None:
        self.editing = False
        self._render()
        safe_update(self)

    def _on_add_subtask(self, e: ft.ControlEvent) -> None:
        times = read_time_fields(self.start_field, self.end_field)
        if times is None:
            return
        added = self.store.add_subtask(
            self.task.id,
            self.subtask_name_field.value or "",
            start_time=times[0],
            end_time=times[1],
        )
        if added is None:
            self.subtask_name_field.focus()
            return
        # A successful add closes the form
        self._on_toggle_form(self.task.id)
