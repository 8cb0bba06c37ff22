from abc import ABC, abstractmethod
from typing import Any

# Severity order, lowest first
LEVELS = ("DEBUG", "INFO", "WARN", "ERROR")


def check_level(level: str) -> str:
    """Normalize a level name, raising ValueError for unknown ones."""
    name = level.upper()
    if name == "WARNING":
        name = "WARN"
    if name not in LEVELS:
        raise ValueError(f"Unknown log level: '{level}' (available: {', '.join(LEVELS)})")
    return name


class LoggingInterface(ABC):
    """Structured logging: a message plus keyword context."""

    @abstractmethod
    def info(self, msg: str, **ctx: Any) -> None: ...

    @abstractmethod
    def warn(self, msg: str, **ctx: Any) -> None: ...

    @abstractmethod
    def error(self, msg: str, **ctx: Any) -> None: ...

    @abstractmethod
    def debug(self, msg: str, **ctx: Any) -> None: ...
