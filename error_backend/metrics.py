"""Prometheus request metrics.

Each app owns its own `CollectorRegistry` so tests (and multiple apps in one
process) never collide on metric names in the global default registry.
"""
from __future__ import annotations

import time

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, generate_latest

__all__ = [
    "NAMESPACE",
    "SUBSYSTEM",
    "CONTENT_TYPE_LATEST",
    "RequestMetrics",
    "protocol_label",
]

NAMESPACE = "default_http_backend"
SUBSYSTEM = "http"


def protocol_label(http_version: str | None) -> str:
    """Normalize an ASGI ``http_version`` to ``major.minor`` (``"2"`` -> ``"2.0"``)."""
    version = http_version or "1.1"
    return version if "." in version else f"{version}.0"


class RequestMetrics:
    """Request count and duration, both labelled by HTTP protocol version."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry if registry is not None else CollectorRegistry()
        self.request_count = Counter(
            "request_count_total",
            "Total number of HTTP requests made.",
            ["proto"],
            namespace=NAMESPACE,
            subsystem=SUBSYSTEM,
            registry=self.registry,
        )
        self.request_duration = Histogram(
            "request_duration_seconds",
            "Histogram of the duration (in seconds) of HTTP requests.",
            ["proto"],
            namespace=NAMESPACE,
            subsystem=SUBSYSTEM,
            registry=self.registry,
        )

    def observe(self, proto: str, seconds: float) -> None:
        self.request_count.labels(proto=proto).inc()
        self.request_duration.labels(proto=proto).observe(seconds)

    def observe_since(self, proto: str, started: float) -> None:
        """Record a request that started at `started` (a `time.perf_counter()` value)."""
        self.observe(proto, time.perf_counter() - started)

    def render(self) -> bytes:
        """Return the registry in the Prometheus text exposition format."""
        return generate_latest(self.registry)
