from __future__ import annotations

from event_batcher.services.logger.interface import LoggingInterface, check_level
from event_batcher.services.logger.json_logger import JsonLogger
from event_batcher.services.logger.memory_logger import MemoryLogger
from event_batcher.services.logger.pretty_logger import PrettyLogger

_IMPLEMENTATIONS: dict[str, type[LoggingInterface]] = {
    "pretty": PrettyLogger,
    "json": JsonLogger,
    "memory": MemoryLogger,
}


def _lookup(impl_name: str) -> type[LoggingInterface]:
    try:
        return _IMPLEMENTATIONS[impl_name]
    except KeyError:
        raise ValueError(
            f"Unknown logger implementation: '{impl_name}' "
            f"(available: {', '.join(_IMPLEMENTATIONS)})"
        ) from None


class LoggerFactory:
    """Hands out one shared logger per implementation name.

    ``level`` applies to the stream loggers (pretty, json). The memory logger
    keeps everything so tests can assert on debug output.
    """

    def __init__(self, default_impl: str = "pretty", level: str = "DEBUG") -> None:
        _lookup(default_impl)
        self._default_impl = default_impl
        self._level = check_level(level)
        self._instances: dict[str, LoggingInterface] = {}

    def create(self, impl_name: str | None = None) -> LoggingInterface:
        name = impl_name or self._default_impl
        logger = self._instances.get(name)
        if logger is None:
            cls = _lookup(name)
            logger = cls() if cls is MemoryLogger else cls(min_level=self._level)
            self._instances[name] = logger
        return logger
