"""Flush engine: moves the buffered batch to the blob store as one NDJSON object.

The buffer is drained before anything slow happens, so the lock is never
held across the upload and requests keep appending while a flush is in
flight. The upload itself runs in a worker thread (blob store clients are
blocking) under a timeout. If it fails or times out the drained records go
back to the front of the buffer and ``PersistenceError`` is raised; nothing
here retries.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from event_batcher.pipeline.buffer import BatchBuffer
from event_batcher.pipeline.errors import PersistenceError, ShutdownFlushError
from event_batcher.pipeline.serialization import NDJSON_CONTENT_TYPE, batch_key, now_utc, to_ndjson
from event_batcher.services.blob_store.interface import BlobStoreInterface
from event_batcher.services.logger.interface import LoggingInterface
from event_batcher.services.metrics.interface import MetricsInterface
from event_batcher.services.metrics.noop_metrics import NoopMetrics


@dataclass(frozen=True)
class FlushResult:
    count: int
    key: str | None
    destination: str | None
    success: bool

    def to_dict(self) -> dict[str, Any]:
        return {"flushed": self.count, "filename": self.key, "bucket": self.destination}


EMPTY_FLUSH = FlushResult(count=0, key=None, destination=None, success=True)


class FlushEngine:
    def __init__(
        self,
        buffer: BatchBuffer,
        store: BlobStoreInterface,
        log: LoggingInterface,
        metrics: MetricsInterface | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.buffer = buffer
        self.store = store
        self.log = log
        self.metrics = metrics or NoopMetrics()
        self.timeout = timeout
        self._last_instant: datetime | None = None

    async def flush(self) -> FlushResult:
        """Drain the buffer and persist it. Raises PersistenceError after restoring."""
        started = now_utc()
        records = self.buffer.drain()
        if not records:
            self.log.debug("No events to flush")
            return EMPTY_FLUSH

        key = self._next_key(started)
        t0 = time.perf_counter()
        try:
            body = to_ndjson(records)
            await asyncio.wait_for(
                asyncio.to_thread(self.store.put, key, body, NDJSON_CONTENT_TYPE),
                timeout=self.timeout,
            )
        except asyncio.CancelledError:
            self.buffer.restore(records)
            raise
        except Exception as exc:
            self.buffer.restore(records)
            self.metrics.counter("flush.failure")
            self.metrics.gauge("buffer.size", self.buffer.size())
            cause = "timed out" if isinstance(exc, asyncio.TimeoutError) else repr(exc)
            self.log.error(
                "Failed to flush events, restored to buffer",
                count=len(records),
                key=key,
                error=cause,
            )
            failed = FlushResult(count=len(records), key=key, destination=self.store.destination, success=False)
            raise PersistenceError(f"Failed to persist {len(records)} events to {key}: {cause}", failed) from exc

        duration_ms = (time.perf_counter() - t0) * 1000
        self.metrics.counter("flush.success")
        self.metrics.counter("events.flushed", len(records))
        self.metrics.histogram("flush.duration_ms", duration_ms)
        self.metrics.gauge("buffer.size", self.buffer.size())
        self.log.info(
            "Flushed events",
            count=len(records),
            key=key,
            destination=self.store.destination,
            duration_ms=round(duration_ms, 2),
        )
        return FlushResult(count=len(records), key=key, destination=self.store.destination, success=True)

    async def final_flush(self) -> FlushResult:
        """Single best-effort flush during shutdown.

        Raises ShutdownFlushError on failure; the events are still in the
        buffer but the process is about to exit, so they are lost.
        """
        try:
            return await self.flush()
        except PersistenceError as exc:
            raise ShutdownFlushError(
                f"Final flush failed, {exc.count} events lost: {exc}", exc.result
            ) from exc

    def _next_key(self, instant: datetime) -> str:
        # Keys must be strictly increasing so two flushes never overwrite each other
        if self._last_instant is not None and instant <= self._last_instant:
            instant = self._last_instant + timedelta(microseconds=1)
        self._last_instant = instant
        return batch_key(instant)
