"""Tests for BatchBuffer, including concurrent append/drain."""

from __future__ import annotations

import threading

from event_batcher.pipeline.buffer import BatchBuffer


def _events(*names: str) -> list[dict]:
    return [{"name": n} for n in names]


def test_append_returns_new_size():
    buf = BatchBuffer()
    assert buf.append({"name": "a"}) == 1
    assert buf.append({"name": "b"}) == 2
    assert buf.size() == 2
    assert len(buf) == 2


def test_drain_returns_records_in_order_and_empties():
    buf = BatchBuffer()
    for e in _events("a", "b", "c", "d"):
        buf.append(e)
    assert buf.drain() == _events("a", "b", "c", "d")
    assert buf.size() == 0
    assert buf.drain() == []


def test_drained_list_is_detached_from_live_buffer():
    buf = BatchBuffer()
    buf.append({"name": "a"})
    drained = buf.drain()
    buf.append({"name": "b"})
    assert drained == [{"name": "a"}]


def test_restore_prepends_ahead_of_new_arrivals():
    buf = BatchBuffer()
    for e in _events("a", "b"):
        buf.append(e)
    drained = buf.drain()
    buf.append({"name": "c"})
    buf.restore(drained)
    assert buf.drain() == _events("a", "b", "c")


def test_restore_empty_is_noop():
    buf = BatchBuffer()
    buf.append({"name": "a"})
    buf.restore([])
    assert buf.drain() == _events("a")


def test_concurrent_appends_and_drains_lose_and_duplicate_nothing():
    buf = BatchBuffer()
    writers, per_writer = 8, 500
    drained: list[dict] = []
    drained_lock = threading.Lock()
    done = threading.Event()

    def writer(w: int) -> None:
        for i in range(per_writer):
            buf.append({"name": "e", "w": w, "i": i})

    def drainer() -> None:
        while not done.is_set():
            batch = buf.drain()
            with drained_lock:
                drained.extend(batch)

    d = threading.Thread(target=drainer)
    d.start()
    threads = [threading.Thread(target=writer, args=(w,)) for w in range(writers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    done.set()
    d.join()

    everything = drained + buf.drain()
    seen = {(e["w"], e["i"]) for e in everything}
    assert len(everything) == writers * per_writer
    assert len(seen) == writers * per_writer

    # Per-writer order survives across drains
    for w in range(writers):
        assert [e["i"] for e in everything if e["w"] == w] == list(range(per_writer))
