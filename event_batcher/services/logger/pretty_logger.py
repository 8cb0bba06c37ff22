from __future__ import annotations

import sys
from datetime import datetime
from typing import Any, TextIO

from event_batcher.services.logger.interface import LEVELS, LoggingInterface, check_level

_LEVEL_COLOR = {
    "DEBUG": "\033[2;36m",
    "INFO": "\033[32m",
    "WARN": "\033[1;33m",
    "ERROR": "\033[1;31m",
}
_DIM = "\033[2m"
_RESET = "\033[0m"


def _format_value(value: Any) -> str:
    text = str(value)
    return repr(text) if not text or " " in text else text


class PrettyLogger(LoggingInterface):
    """Human-readable logger for local development, written to stderr.

    Context is rendered as ``key=value`` pairs after the message. Colors are
    only emitted when the stream is a terminal.
    """

    def __init__(self, min_level: str = "DEBUG", stream: TextIO | None = None) -> None:
        self._threshold = LEVELS.index(check_level(min_level))
        self._stream = stream

    def info(self, msg: str, **ctx: Any) -> None:
        self._emit("INFO", msg, ctx)

    def warn(self, msg: str, **ctx: Any) -> None:
        self._emit("WARN", msg, ctx)

    def error(self, msg: str, **ctx: Any) -> None:
        self._emit("ERROR", msg, ctx)

    def debug(self, msg: str, **ctx: Any) -> None:
        self._emit("DEBUG", msg, ctx)

    def _emit(self, level: str, msg: str, ctx: dict[str, Any]) -> None:
        if LEVELS.index(level) < self._threshold:
            return
        # Resolved per call so pytest's capsys sees the swapped stream
        stream = self._stream or sys.stderr
        stamp = datetime.now().astimezone().strftime("%H:%M:%S.%f")[:-3]
        pairs = " ".join(f"{k}={_format_value(v)}" for k, v in ctx.items())
        if stream.isatty():
            head = f"{_DIM}{stamp}{_RESET} {_LEVEL_COLOR[level]}{level:<5}{_RESET}"
        else:
            head = f"{stamp} {level:<5}"
        stream.write(f"{head} {msg}{'  ' + pairs if pairs else ''}\n")
