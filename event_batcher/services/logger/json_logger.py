"""JSON-lines logger for production: one object per line on stdout.

Log shippers (Loki promtail, CloudWatch agent, Vector) pick the lines up
without any parsing configuration.
"""

from __future__ import annotations

import json
import sys
import threading
from datetime import datetime, timezone
from typing import Any

from event_batcher.services.logger.interface import LEVELS, LoggingInterface, check_level


class JsonLogger(LoggingInterface):
    """Structured logger that writes ``{"time", "level", "msg", **ctx}`` lines."""

    def __init__(self, service: str = "event_batcher", min_level: str = "DEBUG") -> None:
        self._service = service
        self._threshold = LEVELS.index(check_level(min_level))
        self._lock = threading.Lock()

    def info(self, msg: str, **ctx: Any) -> None:
        self._log("INFO", msg, ctx)

    def warn(self, msg: str, **ctx: Any) -> None:
        self._log("WARN", msg, ctx)

    def error(self, msg: str, **ctx: Any) -> None:
        self._log("ERROR", msg, ctx)

    def debug(self, msg: str, **ctx: Any) -> None:
        self._log("DEBUG", msg, ctx)

    def _log(self, level: str, msg: str, ctx: dict[str, Any]) -> None:
        if LEVELS.index(level) < self._threshold:
            return
        payload = {
            "time": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "level": level,
            "service": self._service,
            "msg": msg,
            **ctx,
        }
        # default=str keeps exceptions and paths from breaking the line
        line = json.dumps(payload, default=str)
        with self._lock:
            sys.stdout.write(line + "\n")
            sys.stdout.flush()
