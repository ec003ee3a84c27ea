import flet as ft
import logging
from typing import Any, List

from ticktask.config import APP_TITLE, FONT_SIZE_TITLE, PADDING_LG, PAGE_MAX_WIDTH, SPACING_MD
from ticktask.core import ServiceContainer, shutdown
from ticktask.events import event_bus, AppEvent, Subscription
from ticktask.ui.components.timer_widget import PomodoroWidget
from ticktask.ui.helpers import safe_update
from ticktask.ui.pages.task_view import TaskForm, TaskListView

logger = logging.getLogger(__name__)


class TickTaskApp:
    """Main application class wiring the services to the flet page."""

    def __init__(self, page: ft.Page, services: ServiceContainer) -> None:
        self.page = page
        self.services = services
        self._subscriptions: List[Subscription] = []

        self.pomodoro_widget = PomodoroWidget(services.pomodoro)
        self.dark_mode_btn = ft.Button(self._dark_mode_label(), on_click=self._on_toggle_dark_mode)
        self.task_form = TaskForm(services.store)
        self.task_list = TaskListView(services.store, services.engine)

        self._setup_page()
        self._subscribe_to_events()
        self._build_layout()

        self.page.on_close = self._on_page_close
        self.page.on_app_lifecycle_state_change = self._on_app_lifecycle_state_change

    def _setup_page(self) -> None:
        self.page.title = APP_TITLE
        self.page.padding = PADDING_LG
        self.page.scroll = ft.ScrollMode.AUTO
        self._apply_theme()

    def _apply_theme(self) -> None:
        self.page.theme_mode = ft.ThemeMode.DARK if self.services.settings.dark_mode else ft.ThemeMode.LIGHT

    def _dark_mode_label(self) -> str:
        return "Light Mode" if self.services.settings.dark_mode else "Dark Mode"

    def _subscribe_to_events(self) -> None:
        self._subscriptions.append(
            event_bus.subscribe(AppEvent.SETTINGS_CHANGED, self._on_settings_changed)
        )
        self.pomodoro_widget.subscribe()
        self.task_list.subscribe()

    def _unsubscribe_all(self) -> None:
        for subscription in self._subscriptions:
            subscription.unsubscribe()
        self._subscriptions.clear()
        self.pomodoro_widget.unsubscribe()
        self.task_list.unsubscribe()

    def _build_layout(self) -> None:
        header = ft.Row(
            [
                ft.Text(APP_TITLE, size=FONT_SIZE_TITLE, weight="bold", expand=True),
                self.pomodoro_widget,
                self.dark_mode_btn,
            ],
            wrap=True,
            spacing=SPACING_MD,
        )
        self.task_list.refresh()
        self.page.add(
            ft.Container(
                content=ft.Column([header, self.task_form, self.task_list]),
                width=PAGE_MAX_WIDTH,
            )
        )

    def _on_toggle_dark_mode(self, e: ft.ControlEvent) -> None:
        self.services.settings.toggle_dark_mode()

    def _on_settings_changed(self, data: Any) -> None:
        self._apply_theme()
        self.dark_mode_btn.content = self._dark_mode_label()
        safe_update(self.page)

    def _on_app_lifecycle_state_change(self, e: ft.AppLifecycleStateChangeEvent) -> None:
        """Re-derive subtask states on resume; the loop may have been suspended."""
        if e.state in (ft.AppLifecycleState.RESUME, ft.AppLifecycleState.SHOW):
            self.services.engine.refresh()

    def _on_page_close(self, e: ft.ControlEvent) -> None:
        self.page.run_task(self.cleanup)

    async def cleanup(self) -> None:
        """Release subscriptions, cancel every timer and flush storage."""
        logger.info("Shutting down")
        self._unsubscribe_all()
        await shutdown(self.services)


def create_app(page: ft.Page, services: ServiceContainer) -> TickTaskApp:
    """Factory function to create the application."""
    return TickTaskApp(page, services)
