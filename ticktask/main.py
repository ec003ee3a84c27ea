import flet as ft

from ticktask.app import create_app
from ticktask.config import LOG_LEVEL
from ticktask.core import bootstrap
from ticktask.logging_setup import setup_logging
from ticktask.ui.notifier import DialogNotifier


async def main(page: ft.Page) -> None:
    services = await bootstrap(
        notifier=DialogNotifier(page),
        async_scheduler=page.run_task,
    )
    create_app(page, services)


def run() -> None:
    """Console entry point."""
    setup_logging(LOG_LEVEL)
    ft.run(main)


if __name__ == "__main__":
    run()
