"""Event Batching Server module.

Accepts tracked analytics events over HTTP, buffers them in memory, and
flushes them to the configured blob store as one NDJSON object per batch
once ``--batch-size`` events are waiting (or on demand).

Endpoints::

    POST /api/track     one event object, must carry a non-blank "name"
    POST /api/flush     flush whatever is buffered right now
    GET  /api/status    buffer size, threshold, destination
    GET  /health        service info

Track response::

    {"success": true, "batchSize": N, "flushed": null | {"flushed": N, "filename": "...", "bucket": "..."}}

Every route allows cross-origin requests from any origin, preflight included.

On SIGTERM/SIGINT the server stops taking requests, closes the listener,
and makes one final flush attempt before the process exits.
"""

from __future__ import annotations

import asyncio
import json
import os
from time import perf_counter
from typing import Any, Awaitable, Callable

import aiohttp_cors
from aiohttp import web

from event_batcher.config.context import ModuleConfig
from event_batcher.modules.base import Module
from event_batcher.pipeline.buffer import BatchBuffer
from event_batcher.pipeline.errors import PersistenceError, ShutdownFlushError, ValidationError
from event_batcher.pipeline.flush_engine import FlushEngine
from event_batcher.pipeline.validation import normalize_event, validate_event
from event_batcher.services.blob_store.interface import BlobStoreInterface
from event_batcher.services.lifecycle.lifecycle_manager import LifecycleManager
from event_batcher.services.logger.factory import LoggerFactory
from event_batcher.services.logger.interface import LoggingInterface
from event_batcher.services.metrics.interface import MetricsInterface

SERVICE_NAME = "Event Batching Server"
SERVICE_VERSION = "1.0.0"

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


class BatchingServerModule(Module):
    log: LoggingInterface
    engine: FlushEngine

    def __init__(
        self,
        config: ModuleConfig,
        logger: LoggerFactory,
        blob: BlobStoreInterface,
        lifecycle: LifecycleManager,
        metrics: MetricsInterface,
    ) -> None:
        self.config = config
        self.logger = logger
        self.blob = blob
        self.lifecycle = lifecycle
        self.metrics = metrics
        self.buffer = BatchBuffer()
        self._runner: web.AppRunner | None = None

    async def initialize(self) -> None:
        self.log = self.logger.create()
        self.host = self.config.get("host", "0.0.0.0")
        self.port = int(self.config.get("port", 3000))
        self.batch_size = self.config.get_positive_int("batch-size", 100)
        flush_timeout = self.config.get_positive_float("flush-timeout", 30.0)
        self.lifecycle.drain_timeout = self.config.get_positive_float("drain-timeout", 30.0)

        self.engine = FlushEngine(self.buffer, self.blob, self.log, self.metrics, timeout=flush_timeout)

        # Hooks run in reverse: close the listener first, then flush what is left
        self.lifecycle.on_shutdown(self._final_flush)
        self.lifecycle.on_shutdown(self._stop_server)

    async def validate(self) -> None:
        healthy = await asyncio.to_thread(self.blob.health_check)
        if not healthy:
            # Not fatal: flushes fail and restore until the store comes back
            self.log.warn("Blob store health check failed", destination=self.blob.describe())

    async def execute(self) -> int:
        self._runner = web.AppRunner(self.build_app(), shutdown_timeout=self.lifecycle.drain_timeout)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()

        self.log.info(
            "Event Batching Server listening",
            host=self.host,
            port=self.port,
            batch_size=self.batch_size,
            destination=self.blob.describe(),
        )

        while not self.lifecycle.is_shutting_down:
            await asyncio.sleep(0.1)

        return 0

    async def teardown(self) -> None:
        await self._stop_server()

    def build_app(self) -> web.Application:
        app = web.Application(middlewares=[self._request_log_middleware, self._draining_middleware])
        app.router.add_post("/api/track", self._track)
        app.router.add_post("/api/flush", self._flush)
        app.router.add_get("/api/status", self._status)
        app.router.add_get("/health", self._health)

        # Any origin may call every route
        cors = aiohttp_cors.setup(app, defaults={
            "*": aiohttp_cors.ResourceOptions(allow_headers="*", allow_methods="*", expose_headers="*"),
        })
        for route in list(app.router.routes()):
            cors.add(route)
        return app

    async def _stop_server(self) -> None:
        if self._runner:
            runner, self._runner = self._runner, None
            await runner.cleanup()
            self.log.info("Server closed")

    async def _final_flush(self) -> None:
        pending = self.buffer.size()
        if pending == 0:
            self.log.info("No events to flush on shutdown")
            return
        self.log.info("Flushing remaining events", count=pending)
        try:
            result = await self.engine.final_flush()
        except ShutdownFlushError as exc:
            self.log.error("Final flush failed, events lost", lost=exc.count, error=str(exc.__cause__ or exc))
            return
        self.log.info("Final flush completed", count=result.count, key=result.key)

    # ------------------------------------------------------------------
    # Middleware
    # ------------------------------------------------------------------

    @web.middleware
    async def _request_log_middleware(self, request: web.Request, handler: Handler) -> web.StreamResponse:
        start = perf_counter()
        request_id = request.headers.get("X-Request-Id", os.urandom(4).hex())
        status = 500
        try:
            response = await handler(request)
            status = response.status
            return response
        except web.HTTPException as exc:
            status = exc.status
            raise
        finally:
            self.log.info(
                "request.complete",
                path=request.path,
                method=request.method,
                status_code=status,
                duration_ms=round((perf_counter() - start) * 1000, 2),
                request_id=request_id,
            )

    @web.middleware
    async def _draining_middleware(self, request: web.Request, handler: Handler) -> web.StreamResponse:
        if self.lifecycle.is_shutting_down and request.path != "/health":
            return web.json_response({"error": "Server is shutting down"}, status=503)
        return await handler(request)

    # ------------------------------------------------------------------
    # Request handlers
    # ------------------------------------------------------------------

    async def _track(self, request: web.Request) -> web.Response:
        try:
            body = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return web.json_response({"error": "Invalid JSON body"}, status=400)

        try:
            payload = validate_event(body)
        except ValidationError as exc:
            self.metrics.counter("events.rejected")
            return web.json_response({"error": exc.message}, status=400)

        record = normalize_event(payload)
        size = self.buffer.append(record)
        self.metrics.counter("events.ingested")
        self.metrics.gauge("buffer.size", size)
        self.log.info("Event received", name=record["name"], batch=f"{size}/{self.batch_size}")

        flushed: dict[str, Any] | None = None
        if size >= self.batch_size:
            self.log.info("Batch size reached, flushing", batch_size=self.batch_size)
            try:
                result = await self.engine.flush()
            except PersistenceError as exc:
                return web.json_response(
                    {"error": "Failed to process event", "message": str(exc)}, status=500
                )
            flushed = result.to_dict()

        return web.json_response({
            "success": True,
            "batchSize": self.buffer.size(),
            "flushed": flushed,
        })

    async def _flush(self, request: web.Request) -> web.Response:
        self.log.info("Manual flush triggered", pending=self.buffer.size())
        try:
            result = await self.engine.flush()
        except PersistenceError as exc:
            return web.json_response({"error": "Failed to flush events", "message": str(exc)}, status=500)
        return web.json_response({"success": True, **result.to_dict()})

    async def _status(self, request: web.Request) -> web.Response:
        return web.json_response({
            "status": self.lifecycle.state.value,
            "batchSize": self.buffer.size(),
            "maxBatchSize": self.batch_size,
            "destination": self.blob.describe(),
        })

    async def _health(self, request: web.Request) -> web.Response:
        return web.json_response({
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "endpoints": {
                "track": "POST /api/track",
                "flush": "POST /api/flush",
                "status": "GET /api/status",
            },
        })


module_class = BatchingServerModule
