import pytest

from event_batcher.services.registry import resolve_implementation, resolve_interface_type


def test_resolve_memory_blob_store():
    cls = resolve_implementation("blob", "memory")
    from event_batcher.services.blob_store.memory_blob_store import MemoryBlobStore

    assert cls is MemoryBlobStore


def test_resolve_local_blob_store():
    cls = resolve_implementation("blob", "local")
    from event_batcher.services.blob_store.local_blob_store import LocalBlobStore

    assert cls is LocalBlobStore


def test_resolve_minio_blob_store():
    cls = resolve_implementation("blob", "minio")
    from event_batcher.services.blob_store.minio_blob_store import MinioBlobStore

    assert cls is MinioBlobStore


def test_resolve_metrics_impls():
    from event_batcher.services.metrics.memory_metrics import MemoryMetrics
    from event_batcher.services.metrics.noop_metrics import NoopMetrics

    assert resolve_implementation("metrics", "noop") is NoopMetrics
    assert resolve_implementation("metrics", "memory") is MemoryMetrics


def test_unknown_flag_raises():
    with pytest.raises(ValueError, match="Unknown interface flag"):
        resolve_implementation("db", "memory")


def test_unknown_impl_raises():
    with pytest.raises(ValueError, match=r"Unknown implementation 'gcs' for --blob \(available: memory, local, minio\)"):
        resolve_implementation("blob", "gcs")


def test_resolve_interface_type():
    iface = resolve_interface_type("blob")
    from event_batcher.services.blob_store.interface import BlobStoreInterface

    assert iface is BlobStoreInterface


def test_resolve_interface_type_unknown():
    with pytest.raises(ValueError, match="Unknown interface flag"):
        resolve_interface_type("cache")


def test_secrets_are_not_flag_selectable():
    with pytest.raises(ValueError, match="Unknown interface flag: --secrets"):
        resolve_implementation("secrets", "env")
