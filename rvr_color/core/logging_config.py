"""Root logging setup for the command-line host.

Library code only logs through ``get_module_logger``; handlers are attached
here, once, by whoever owns the process.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATEFMT = "%H:%M:%S"
LOG_FILE_MAX_BYTES = 256 * 1024
LOG_FILE_BACKUPS = 1

LOG_LEVELS: dict[str, int] = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

_configured = False


def _level_number(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    try:
        return LOG_LEVELS[level.strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown log level '{level}'") from None


def configure_logging(
    level: Union[int, str] = logging.INFO,
    *,
    console: bool = True,
    log_file: Optional[Union[str, Path]] = None,
    force: bool = False,
) -> None:
    """Attach console and/or rotating-file handlers to the root logger.

    A second call only adjusts the level unless ``force`` is set.
    """
    global _configured
    numeric_level = _level_number(level)
    root = logging.getLogger()
    root.setLevel(numeric_level)
    if _configured and not force:
        return

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)
    handlers: list[logging.Handler] = []
    if console:
        handlers.append(logging.StreamHandler(sys.stdout))
    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(path, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS, encoding="utf-8")
        )

    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    if not handlers:
        # keep the lastResort handler quiet
        root.addHandler(logging.NullHandler())

    _configured = True


__all__ = ["LOG_LEVELS", "configure_logging"]
