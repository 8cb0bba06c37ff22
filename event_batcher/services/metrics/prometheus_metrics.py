"""Prometheus metrics implementation using prometheus_client."""

from __future__ import annotations

from typing import Any

from event_batcher.services.metrics.interface import MetricsInterface
from event_batcher.services.secrets.interface import SecretsInterface

_NAMESPACE = "event_batcher"


class PrometheusMetrics(MetricsInterface):
    """Metrics backend that exposes metrics via a Prometheus HTTP endpoint.

    Config (via secrets):
        METRICS_PROMETHEUS_PORT - Port to expose /metrics on (default: 9091).
                                  Set to 0 or empty to disable the HTTP server.

    Names are prefixed with ``event_batcher_`` and dots/dashes become
    underscores (``flush.duration_ms`` -> ``event_batcher_flush_duration_ms``).
    """

    def __init__(self, secrets: SecretsInterface) -> None:
        import prometheus_client as prom

        self._prom = prom
        self._registry = prom.CollectorRegistry()
        self._collectors: dict[tuple[str, str, tuple[str, ...]], Any] = {}

        port_str = secrets.get_or_default("METRICS_PROMETHEUS_PORT", "9091")
        port = int(port_str) if port_str else 0
        if port:
            prom.start_http_server(port, registry=self._registry)

    @staticmethod
    def _sanitize(name: str) -> str:
        return f"{_NAMESPACE}_" + name.replace("-", "_").replace(".", "_")

    def _get(self, kind: str, name: str, tags: dict[str, str] | None) -> Any:
        safe = self._sanitize(name)
        label_names = tuple(sorted(tags)) if tags else ()
        key = (kind, safe, label_names)
        collector = self._collectors.get(key)
        if collector is None:
            cls = {"counter": self._prom.Counter, "gauge": self._prom.Gauge, "histogram": self._prom.Histogram}[kind]
            collector = cls(safe, safe, label_names, registry=self._registry)
            self._collectors[key] = collector
        if label_names:
            return collector.labels(*(tags[n] for n in label_names))  # type: ignore[index]
        return collector

    def counter(self, name: str, value: float = 1, tags: dict[str, str] | None = None) -> None:
        self._get("counter", name, tags).inc(value)

    def gauge(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        self._get("gauge", name, tags).set(value)

    def histogram(self, name: str, value: float, tags: dict[str, str] | None = None) -> None:
        self._get("histogram", name, tags).observe(value)

    def render(self) -> bytes:
        """Current exposition-format snapshot (what /metrics would serve)."""
        return self._prom.generate_latest(self._registry)
