"""In-memory batch buffer shared by every request handler of the server.

Each operation holds one lock for an in-memory list operation only, so
``append``, ``drain`` and ``restore`` never interleave partially whether
callers run on the event loop or in worker threads.
"""

from __future__ import annotations

import threading
from typing import Any, Iterable

EventRecord = dict[str, Any]


class BatchBuffer:
    """Ordered, append-only sequence of event records."""

    def __init__(self) -> None:
        self._records: list[EventRecord] = []
        self._lock = threading.Lock()

    def append(self, record: EventRecord) -> int:
        """Add *record* at the end and return the new length."""
        with self._lock:
            self._records.append(record)
            return len(self._records)

    def size(self) -> int:
        with self._lock:
            return len(self._records)

    def __len__(self) -> int:
        return self.size()

    def drain(self) -> list[EventRecord]:
        """Return every buffered record and leave the buffer empty."""
        with self._lock:
            # Swap instead of copy+clear: callers keep the old list untouched
            drained, self._records = self._records, []
            return drained

    def restore(self, records: Iterable[EventRecord]) -> None:
        """Put *records* back in front of anything appended since they were drained."""
        records = list(records)
        if not records:
            return
        with self._lock:
            self._records = records + self._records
