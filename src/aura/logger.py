"""Logging for the Aura companion core

All modules log through the loguru `logger` exported here. `setup_logging`
installs three sinks (coloured stderr, a rotating main file and an error file
kept for longer) and routes the stdlib loggers of uvicorn and httpx into
loguru, so the admin server and the weather client end up in the same files.

Levels: TRACE/DEBUG/INFO/WARNING/ERROR/CRITICAL, FATAL is read as CRITICAL.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Literal, Union

from loguru import logger

LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL", "FATAL"]

STDLIB_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "httpx", "httpcore")

_CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> <level>{level:<7}</level> "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> {message}"
)
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} {level:<8} {name}:{function}:{line} {message}"


def _level_name(level: Union[str, LogLevel]) -> str:
    name = str(level).upper()
    return "CRITICAL" if name == "FATAL" else name


class _ToLoguru(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: Union[str, int] = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        # depth=6 skips the logging module frames so loguru reports the caller
        logger.opt(depth=6, exception=record.exc_info).log(level, record.getMessage())


def _route_stdlib() -> None:
    handler = _ToLoguru()
    for name in STDLIB_LOGGERS:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [handler]
        std_logger.propagate = False
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def setup_logging(
    log_level: LogLevel,
    log_file: Union[str, Path],
    console_level: LogLevel = "INFO",
) -> None:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    error_path = path.with_name(f"{path.stem}_error{path.suffix}")

    file_sink = {"format": _FILE_FORMAT, "rotation": "10 MB", "compression": "zip", "encoding": "utf-8"}
    logger.configure(
        handlers=[
            {"sink": sys.stderr, "level": _level_name(console_level), "format": _CONSOLE_FORMAT, "colorize": True},
            {"sink": path, "level": _level_name(log_level), "retention": "30 days", **file_sink},
            {"sink": error_path, "level": "ERROR", "retention": "90 days", **file_sink},
        ]
    )
    _route_stdlib()


__all__ = ["setup_logging", "logger", "LogLevel"]
