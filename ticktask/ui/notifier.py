import flet as ft
import logging

logger = logging.getLogger(__name__)


class DialogNotifier:
    """NotificationSink that shows a modal alert with an OK button.

    Non-blocking: the timer chain keeps running while the dialog is open,
    and dismissing it has no side effects.
    """

    def __init__(self, page: ft.Page) -> None:
        self.page = page

    def notify(self, message: str) -> None:
        logger.info(f"Showing notification: {message}")

        dialog = ft.AlertDialog(
            modal=True,
            title=ft.Text("ticktask"),
            content=ft.Text(message),
            actions_alignment=ft.MainAxisAlignment.END,
        )

        def close(e: ft.ControlEvent) -> None:
            self.page.pop_dialog()

        dialog.actions = [ft.TextButton("OK", on_click=close)]
        self.page.show_dialog(dialog)
