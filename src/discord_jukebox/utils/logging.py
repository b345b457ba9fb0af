"""Console log formatting and per-record guild context."""

from __future__ import annotations

import logging
import os
import sys
from typing import TextIO

LEVEL_COLORS: dict[int, str] = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[1;31m",
}
RESET = "\033[0m"


def colors_enabled(stream: TextIO) -> bool:
    """ANSI colours only on a TTY, and never when ``NO_COLOR`` is set."""
    if os.environ.get("NO_COLOR") is not None:
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


class ColoredFormatter(logging.Formatter):
    """Colours the level name of each record.

    ``stream`` should be the handler's stream; it defaults to stdout, which is
    where ``logging_config.json`` sends console output.
    """

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        style: str = "%",
        *,
        stream: TextIO | None = None,
    ) -> None:
        super().__init__(fmt, datefmt, style)  # type: ignore[arg-type]
        self.stream = stream

    def format(self, record: logging.LogRecord) -> str:
        if not colors_enabled(self.stream or sys.stdout):
            return super().format(record)
        # Copy so other handlers still see the plain level name.
        record = logging.makeLogRecord(record.__dict__)
        color = LEVEL_COLORS.get(record.levelno, "")
        record.levelname = f"{color}{record.levelname}{RESET}"
        return super().format(record)


class GuildContextFilter(logging.Filter):
    """Guarantees a ``guild_id`` attribute so formats can reference it.

    Callers attach one with ``extra={"guild_id": ...}``; records without it
    get ``default``.
    """

    def __init__(self, name: str = "", default: str = "-") -> None:
        super().__init__(name)
        self.default = default

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "guild_id"):
            record.guild_id = self.default
        return True
