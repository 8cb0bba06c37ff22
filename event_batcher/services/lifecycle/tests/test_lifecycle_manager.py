"""Tests for LifecycleManager."""

from __future__ import annotations

import asyncio
import os
import signal

import pytest

from event_batcher.services.lifecycle.lifecycle_manager import LifecycleManager, LifecycleState
from event_batcher.services.logger.memory_logger import MemoryLogger


@pytest.mark.asyncio
async def test_hooks_execute_in_reverse_order() -> None:
    lm = LifecycleManager()
    order: list[str] = []
    lm.on_shutdown(lambda: order.append("final_flush"))
    lm.on_shutdown(lambda: order.append("stop_server"))
    await lm.shutdown()
    assert order == ["stop_server", "final_flush"]


@pytest.mark.asyncio
async def test_state_transitions() -> None:
    lm = LifecycleManager()
    seen: list[LifecycleState] = []
    lm.on_shutdown(lambda: seen.append(lm.state))

    assert lm.state is LifecycleState.RUNNING
    assert not lm.is_shutting_down
    lm.request_shutdown()
    assert lm.state is LifecycleState.DRAINING
    assert lm.is_shutting_down
    await lm.shutdown()
    assert seen == [LifecycleState.DRAINING]
    assert lm.state is LifecycleState.STOPPED


@pytest.mark.asyncio
async def test_hook_failure_is_logged_and_does_not_block_others() -> None:
    log = MemoryLogger()
    lm = LifecycleManager(log=log)
    calls: list[str] = []
    lm.on_shutdown(lambda: calls.append("first"))

    def failing_hook() -> None:
        raise RuntimeError("boom")

    lm.on_shutdown(failing_hook)
    lm.on_shutdown(lambda: calls.append("last"))
    await lm.shutdown()

    assert calls == ["last", "first"]
    errors = log.at_level("ERROR")
    assert errors[0].msg == "Shutdown hook failed"
    assert "boom" in errors[0].ctx["error"]
    assert lm.state is LifecycleState.STOPPED


@pytest.mark.asyncio
async def test_slow_async_hook_is_bounded_by_drain_timeout() -> None:
    log = MemoryLogger()
    lm = LifecycleManager(drain_timeout=0.05, log=log)
    ran: list[str] = []

    async def slow_hook() -> None:
        await asyncio.sleep(10)

    lm.on_shutdown(lambda: ran.append("after"))
    lm.on_shutdown(slow_hook)
    await asyncio.wait_for(lm.shutdown(), timeout=2)

    assert ran == ["after"]
    assert "Shutdown hook timed out" in log.messages
    assert lm.state is LifecycleState.STOPPED


@pytest.mark.asyncio
async def test_async_hooks_awaited() -> None:
    lm = LifecycleManager()
    result: list[str] = []

    async def async_hook() -> None:
        result.append("async_done")

    lm.on_shutdown(async_hook)
    await lm.shutdown()
    assert result == ["async_done"]


@pytest.mark.asyncio
async def test_double_shutdown_runs_hooks_once() -> None:
    lm = LifecycleManager()
    count = 0

    async def hook() -> None:
        nonlocal count
        await asyncio.sleep(0.01)
        count += 1

    lm.on_shutdown(hook)
    await asyncio.gather(lm.shutdown(), lm.shutdown())
    await lm.shutdown()
    assert count == 1


@pytest.mark.asyncio
async def test_sigterm_moves_to_draining() -> None:
    lm = LifecycleManager()
    lm.install_signal_handlers(loop=asyncio.get_running_loop())
    try:
        os.kill(os.getpid(), signal.SIGTERM)
        for _ in range(100):
            if lm.is_shutting_down:
                break
            await asyncio.sleep(0.01)
        assert lm.state is LifecycleState.DRAINING
    finally:
        loop = asyncio.get_running_loop()
        loop.remove_signal_handler(signal.SIGTERM)
        loop.remove_signal_handler(signal.SIGINT)


def test_request_shutdown_is_idempotent() -> None:
    log = MemoryLogger()
    lm = LifecycleManager(log=log)
    lm.request_shutdown("SIGINT")
    lm.request_shutdown("SIGTERM")
    assert log.messages == ["Shutdown requested, draining"]
    assert log.entries[0].ctx == {"reason": "SIGINT"}
