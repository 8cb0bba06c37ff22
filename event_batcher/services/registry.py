"""Which classes back each ``--<flag> <impl>`` choice.

Everything is a dotted path imported on demand, so selecting ``--blob local``
never imports minio and ``--metrics noop`` never imports prometheus_client.
"""

from __future__ import annotations

import importlib
from typing import Any, NamedTuple

_PKG = "event_batcher.services"


class _Slot(NamedTuple):
    interface: str
    impls: dict[str, str]


_SLOTS: dict[str, _Slot] = {
    "blob": _Slot(
        f"{_PKG}.blob_store.interface.BlobStoreInterface",
        {
            "memory": f"{_PKG}.blob_store.memory_blob_store.MemoryBlobStore",
            "local": f"{_PKG}.blob_store.local_blob_store.LocalBlobStore",
            "minio": f"{_PKG}.blob_store.minio_blob_store.MinioBlobStore",
        },
    ),
    "metrics": _Slot(
        f"{_PKG}.metrics.interface.MetricsInterface",
        {
            "noop": f"{_PKG}.metrics.noop_metrics.NoopMetrics",
            "memory": f"{_PKG}.metrics.memory_metrics.MemoryMetrics",
            "prometheus": f"{_PKG}.metrics.prometheus_metrics.PrometheusMetrics",
        },
    ),
}


def _import(dotted: str) -> type[Any]:
    module_name, _, attr = dotted.rpartition(".")
    return getattr(importlib.import_module(module_name), attr)


def _slot(flag_name: str) -> _Slot:
    slot = _SLOTS.get(flag_name)
    if slot is None:
        raise ValueError(f"Unknown interface flag: --{flag_name}")
    return slot


def resolve_implementation(flag_name: str, impl_name: str) -> type[Any]:
    """Concrete class registered as *impl_name* for ``--flag_name``."""
    impls = _slot(flag_name).impls
    if impl_name not in impls:
        raise ValueError(
            f"Unknown implementation '{impl_name}' for --{flag_name} "
            f"(available: {', '.join(impls)})"
        )
    return _import(impls[impl_name])


def resolve_interface_type(flag_name: str) -> type[Any]:
    """The ABC the chosen implementation is registered under in the container."""
    return _import(_slot(flag_name).interface)
