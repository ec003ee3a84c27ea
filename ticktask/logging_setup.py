import logging
import sys
from typing import Union

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Third-party loggers that are noisy at INFO
_QUIET_LOGGERS = ("flet", "flet_core", "flet_desktop", "flet_web", "aiosqlite", "asyncio")


def setup_logging(level: Union[int, str] = logging.INFO) -> None:
    """Configure root logging with a single stderr handler.

    Call this once, before the first log line. Calling it again replaces
    the handler instead of duplicating output.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.captureWarnings(True)
