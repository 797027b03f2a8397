"""Loguru setup for the engine.

Nothing is configured at import time; an embedding app (or a script) calls
setup_logger() once. Level and file default to settings.log_level and
settings.log_file.
"""

import sys
from pathlib import Path

from loguru import logger

from shallwewalk.core.config import settings

# Ticks, position updates and route responses arrive on different threads
_CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<magenta>{thread.name}</magenta> | <cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {thread.name} | {name}:{function}:{line} - {message}"


def setup_logger(level: str | None = None, log_file: str | None = None, rotation: str = "10 MB") -> None:
    """Replace loguru's default sink with the engine's console sink.

    A rotating file sink is added when `log_file` (or settings.log_file) is
    set. Every sink is enqueued, so logging from the timer thread never
    blocks behind a slow file write.
    """
    level = (level or settings.log_level).upper()
    log_file = log_file or settings.log_file

    logger.remove()
    logger.add(sys.stderr, format=_CONSOLE_FORMAT, level=level, colorize=True, enqueue=True)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(log_path, format=_FILE_FORMAT, level=level, rotation=rotation, encoding="utf-8", enqueue=True)

    logger.debug(f"Logging at {level}" + (f" to {log_file}" if log_file else ""))
