import flet as ft
from typing import Callable, List

from ticktask.config import SPACING_MD
from ticktask.events import event_bus, AppEvent, Subscription
from ticktask.formatters import TimeFormatter
from ticktask.services.pomodoro import PomodoroTimer
from ticktask.ui.helpers import safe_update, timer_badge


class PomodoroWidget(ft.Row):
    """Pomodoro countdown with Start, or Stop + Reset while running."""

    def __init__(self, pomodoro: PomodoroTimer) -> None:
        self.pomodoro = pomodoro
        self.badge = timer_badge(TimeFormatter.seconds_to_hms(pomodoro.remaining_seconds))
        self.start_btn = ft.Button("Start Pomodoro", on_click=lambda e: self.pomodoro.start())
        self.stop_btn = ft.Button("Stop", on_click=lambda e: self.pomodoro.stop())
        self.reset_btn = ft.Button("Reset", on_click=lambda e: self.pomodoro.reset())
        super().__init__(
            controls=[self.badge, self.start_btn, self.stop_btn, self.reset_btn],
            spacing=SPACING_MD,
            tight=True,
        )
        self._subscriptions: List[Subscription] = []
        self._sync_buttons()

    def subscribe(self) -> None:
        handler: Callable[[int], None] = self._on_pomodoro_event
        for event in (
            AppEvent.POMODORO_STARTED,
            AppEvent.POMODORO_TICK,
            AppEvent.POMODORO_STOPPED,
            AppEvent.POMODORO_RESET,
            AppEvent.POMODORO_COMPLETED,
        ):
            self._subscriptions.append(event_bus.subscribe(event, handler))

    def unsubscribe(self) -> None:
        for sub in self._subscriptions:
            sub.unsubscribe()
        self._subscriptions.clear()

    def _sync_buttons(self) -> None:
        running = self.pomodoro.running
        self.start_btn.visible = not running
        self.stop_btn.visible = running
        self.reset_btn.visible = running

    def _on_pomodoro_event(self, remaining: int) -> None:
        self.badge.content.value = TimeFormatter.seconds_to_hms(remaining)
        self._sync_buttons()
        safe_update(self)
