"""Prometheus metrics for protocol resolution.

Counts and times every handler chain the resolver executes. Recording is
gated on ``observability.metrics.enabled``.
"""

import time
from collections.abc import Iterator
from contextlib import contextmanager

from prometheus_client import Counter, Histogram

RESOLUTION_COUNT = Counter(
    "protocall_resolution_count_total",
    "Total number of protocol handler chains executed",
    labelnames=["protocol", "status"],
)

RESOLUTION_LATENCY = Histogram(
    "protocall_resolution_latency_seconds",
    "Handler chain execution latency in seconds",
    labelnames=["protocol"],
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)


def metrics_enabled() -> bool:
    """Whether resolution metrics should be recorded."""
    from protocall.config import get_settings

    return get_settings().observability.metrics.enabled


@contextmanager
def track_resolution(protocol: str) -> Iterator[None]:
    """Record count and latency for one chain execution of ``protocol``."""
    if not metrics_enabled():
        yield
        return

    start_time = time.perf_counter()
    try:
        yield
    except BaseException:
        RESOLUTION_COUNT.labels(protocol=protocol, status="error").inc()
        raise
    else:
        RESOLUTION_COUNT.labels(protocol=protocol, status="success").inc()
    finally:
        RESOLUTION_LATENCY.labels(protocol=protocol).observe(
            time.perf_counter() - start_time
        )
