from ticktask.events import event_bus, AppEvent
from ticktask.models.entities import AppState
from ticktask.services.persistence import PersistenceAdapter


class SettingsService:
    """Service for application settings.

    Only the dark-mode flag lives here; it is persisted through the same
    local storage as the task tree. Pomodoro state is deliberately not a
    setting and is never persisted.
    """

    def __init__(self, state: AppState, persistence: PersistenceAdapter) -> None:
        self.state = state
        self._persistence = persistence

    @property
    def dark_mode(self) -> bool:
        return self.state.dark_mode

    def set_dark_mode(self, enabled: bool) -> None:
        self.state.dark_mode = enabled
        self._persistence.save_dark_mode(enabled)
        event_bus.emit(AppEvent.SETTINGS_CHANGED, {"dark_mode": enabled})

    def toggle_dark_mode(self) -> bool:
        """Flip dark mode and return the new value."""
        self.set_dark_mode(not self.state.dark_mode)
        return self.state.dark_mode
