"""
User-visible notifications.

The engine and the pomodoro timer only see a NotificationSink. The flet app
plugs in a modal dialog (ticktask.ui.notifier.DialogNotifier); headless runs
and scripts use LogNotificationSink. Delivery is best-effort: a failing sink
is logged and never breaks the caller's timer chain.
"""
import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    def notify(self, message: str) -> None: ...


class LogNotificationSink:
    """Sink for headless use - writes notifications to the log."""

    def notify(self, message: str) -> None:
        logger.info(f"Notification: {message}")


def deliver(sink: NotificationSink, message: str) -> bool:
    """Send a message through a sink, swallowing sink failures.

    Returns True if the sink accepted the message.
    """
    try:
        sink.notify(message)
        return True
    except Exception:
        logger.exception(f"Notification sink failed for {message!r}")
        return False
