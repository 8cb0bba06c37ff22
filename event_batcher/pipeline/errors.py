"""Error kinds raised by the batching pipeline.

``ValidationError`` is client-caused and never reaches the buffer.
``PersistenceError`` means the blob store rejected or timed out on a batch;
by the time it is raised the batch is already back in the buffer.
``ShutdownFlushError`` is the same failure during the final flush, where
nothing will retry and the events are lost with the process.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from event_batcher.pipeline.flush_engine import FlushResult


class ValidationError(ValueError):
    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


class PersistenceError(Exception):
    def __init__(self, message: str, result: FlushResult) -> None:
        super().__init__(message)
        self.result = result

    @property
    def count(self) -> int:
        return self.result.count


class ShutdownFlushError(PersistenceError):
    pass
