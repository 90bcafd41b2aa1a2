"""Log output for the command line tools and the viewer.

Library modules only call ``logging.getLogger(__name__)``; the entry points
call :func:`setup_logging` once to decide where those records go.
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional, Union

LOGGER_NAME = "objview"

LEVELS = {name: getattr(logging, name.upper()) for name in ("debug", "info", "warning", "error", "critical")}

# Level -> (tag, ANSI color) for console lines.
_CONSOLE_STYLE = {
    logging.DEBUG: ("dbg", "\x1b[2m"),
    logging.INFO: ("inf", ""),
    logging.WARNING: ("wrn", "\x1b[33m"),
    logging.ERROR: ("err", "\x1b[31m"),
    logging.CRITICAL: ("crt", "\x1b[31;1m"),
}
_RESET = "\x1b[0m"

_installed: List[logging.Handler] = []


class ConsoleFormatter(logging.Formatter):
    """Formats records as ``[wrn] services.probe: message``.

    The package prefix is dropped from logger names, and lines are colored by
    level when ``color`` is set.
    """

    def __init__(self, color: bool = False) -> None:
        super().__init__("[%(tag)s] %(component)s: %(message)s")
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        tag, color = _CONSOLE_STYLE.get(record.levelno, ("???", ""))
        record.tag = tag
        record.component = record.name.removeprefix(f"{LOGGER_NAME}.")
        line = super().format(record)
        if self.color and color:
            return f"{color}{line}{_RESET}"
        return line


def parse_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    try:
        return LEVELS[level.lower()]
    except KeyError:
        raise ValueError(f"unknown log level '{level}'; expected one of {', '.join(LEVELS)}") from None


def setup_logging(
    level: Union[int, str] = logging.WARNING,
    file: Optional[Union[str, Path]] = None,
    color: Optional[bool] = None,
) -> logging.Logger:
    """Send records from the ``objview`` loggers to stderr and optionally a file.

    Calling this again replaces the handlers from the previous call. ``color``
    defaults to whether stderr is a terminal.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(parse_level(level))

    while _installed:
        handler = _installed.pop()
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(ConsoleFormatter(sys.stderr.isatty() if color is None else color))
    _installed.append(console)

    if file:
        log_file = logging.FileHandler(Path(file), encoding="utf-8")
        log_file.setFormatter(logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s"))
        _installed.append(log_file)

    for handler in _installed:
        logger.addHandler(handler)
    return logger


__all__ = ["LEVELS", "LOGGER_NAME", "ConsoleFormatter", "parse_level", "setup_logging"]
