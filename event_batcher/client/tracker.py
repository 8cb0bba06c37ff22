"""Client-side tracker that fans an event out to two sinks.

The primary analytics client (anything with a Split-style
``track(traffic_type, name, value, properties)`` method) is called first and
its result is returned unchanged. The same event is then POSTed to the
batching server. That second hop is best-effort: failures are logged and
handed to ``on_error`` but never raised to the caller.

Usage::

    async with EventTracker(split_client) as tracker:
        await tracker.track("user", "checkout", 49.0, {"plan": "pro"})
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Callable

import aiohttp

from event_batcher.pipeline.serialization import now_iso
from event_batcher.services.logger.factory import LoggerFactory
from event_batcher.services.logger.interface import LoggingInterface

DEFAULT_SERVER_URL = "http://localhost:3000/api/track"

ErrorHook = Callable[[Exception, dict[str, Any]], None]


class ForwardError(Exception):
    """The batching server answered with a non-2xx status."""

    def __init__(self, status: int, reason: str | None) -> None:
        super().__init__(f"Server responded with {status}: {reason}")
        self.status = status


class EventTracker:
    def __init__(
        self,
        client: Any,
        server_url: str = DEFAULT_SERVER_URL,
        on_error: ErrorHook | None = None,
        timeout: float = 5.0,
        log: LoggingInterface | None = None,
    ) -> None:
        if client is None:
            raise ValueError("Analytics client is required")
        self.client = client
        self.server_url = server_url
        self.on_error = on_error
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.log = log or LoggerFactory().create()
        self._session: aiohttp.ClientSession | None = None

    async def track(
        self,
        traffic_type: str,
        name: str,
        value: float | None = None,
        properties: dict[str, Any] | None = None,
    ) -> Any:
        """Track with the primary client, then forward to the batching server."""
        result = self.client.track(traffic_type, name, value, properties)
        if inspect.isawaitable(result):
            result = await result

        await self._forward({
            "trafficType": traffic_type,
            "name": name,
            "value": value,
            "properties": properties,
            "timestamp": now_iso(),
        })
        return result

    async def _forward(self, event: dict[str, Any]) -> None:
        try:
            session = self._get_session()
            async with session.post(self.server_url, json=event) as resp:
                if resp.status >= 300:
                    raise ForwardError(resp.status, resp.reason)
                body = await resp.json()
            batch_size = body.get("batchSize") if isinstance(body, dict) else None
            self.log.debug("Event sent to batching server", name=event["name"], batch_size=batch_size)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError, ForwardError) as exc:
            self.log.warn(
                "Failed to send event to batching server",
                name=event["name"],
                url=self.server_url,
                error=repr(exc),
            )
            self._notify(exc, event)

    def _notify(self, exc: Exception, event: dict[str, Any]) -> None:
        if self.on_error is None:
            return
        try:
            self.on_error(exc, event)
        except Exception as hook_exc:
            self.log.error("Tracker error hook failed", error=repr(hook_exc))

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> EventTracker:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()
