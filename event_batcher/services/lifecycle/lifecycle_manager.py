"""Shutdown coordination: signal handling, state machine, and ordered cleanup hooks.

States move strictly forward::

    RUNNING -> DRAINING -> STOPPED

DRAINING starts on SIGTERM/SIGINT or ``request_shutdown()``. Modules poll
``is_shutting_down`` to stop taking new work; ``shutdown()`` then runs the
registered hooks (last registered first) and lands in STOPPED whatever the
hooks did.
"""

from __future__ import annotations

import asyncio
import inspect
import signal
from enum import Enum
from typing import Any, Awaitable, Callable, Union

from event_batcher.services.logger.interface import LoggingInterface

ShutdownHook = Union[Callable[[], None], Callable[[], Awaitable[None]]]


class LifecycleState(str, Enum):
    RUNNING = "running"
    DRAINING = "draining"
    STOPPED = "stopped"


class LifecycleManager:
    def __init__(self, drain_timeout: float = 30.0, log: LoggingInterface | None = None) -> None:
        self.drain_timeout = drain_timeout
        self._log = log
        self._hooks: list[ShutdownHook] = []
        self._state = LifecycleState.RUNNING
        self._shutdown_task: asyncio.Task[None] | None = None

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def is_shutting_down(self) -> bool:
        """Modules poll this to know if they should stop accepting work."""
        return self._state is not LifecycleState.RUNNING

    def set_logger(self, log: LoggingInterface) -> None:
        self._log = log

    def on_shutdown(self, callback: ShutdownHook) -> None:
        """Register a cleanup callback. Executed in reverse order on shutdown."""
        self._hooks.append(callback)

    def request_shutdown(self, reason: str = "operator") -> None:
        """Enter DRAINING without running hooks yet. Safe to call repeatedly."""
        if self._state is LifecycleState.RUNNING:
            self._state = LifecycleState.DRAINING
            if self._log:
                self._log.info("Shutdown requested, draining", reason=reason)

    def install_signal_handlers(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """Register SIGTERM and SIGINT handlers.

        If *loop* is provided, uses loop.add_signal_handler (async-safe).
        Otherwise falls back to signal.signal (sync context).
        """
        if loop is not None:
            for sig in (signal.SIGTERM, signal.SIGINT):
                loop.add_signal_handler(sig, self.request_shutdown, sig.name)
        else:
            for sig in (signal.SIGTERM, signal.SIGINT):
                signal.signal(sig, self._handle_signal)

    async def shutdown(self) -> None:
        """Run the full shutdown sequence once; concurrent callers wait for the same run."""
        if self._shutdown_task is None:
            self.request_shutdown()
            self._shutdown_task = asyncio.ensure_future(self._run_hooks())
        await asyncio.shield(self._shutdown_task)

    async def _run_hooks(self) -> None:
        for hook in reversed(self._hooks):
            name = getattr(hook, "__qualname__", repr(hook))
            try:
                result = hook()
                if inspect.isawaitable(result):
                    await asyncio.wait_for(result, timeout=self.drain_timeout)
            except asyncio.TimeoutError:
                if self._log:
                    self._log.error("Shutdown hook timed out", hook=name, timeout_s=self.drain_timeout)
            except Exception as exc:
                # One failing hook must not prevent the others from running
                if self._log:
                    self._log.error("Shutdown hook failed", hook=name, error=repr(exc))
        self._state = LifecycleState.STOPPED
        if self._log:
            self._log.info("Shutdown complete")

    def _handle_signal(self, signum: int, frame: Any) -> None:
        """Sync signal handler: only flips the state, hooks run from shutdown()."""
        self.request_shutdown(signal.Signals(signum).name)
