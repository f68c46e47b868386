"""
Helper functions for Prometheus metric registration.

Metrics are module-level singletons, but the app factory (and uvicorn
--reload) may import this package more than once per process. These helpers
return the already-registered collector instead of failing on a duplicate.
"""

from typing import TypeVar

from prometheus_client import REGISTRY, Counter, Gauge, Histogram

MetricT = TypeVar("MetricT", Counter, Gauge, Histogram)


def _get_or_create(
    metric_cls: type[MetricT],
    name: str,
    doc: str,
    labels: list[str] | None = None,
    **kwargs,
) -> MetricT:
    try:
        return metric_cls(name, doc, labels or [], **kwargs)
    except ValueError:
        # Metric already exists, retrieve it from registry
        return REGISTRY._names_to_collectors[name]


def _get_or_create_counter(
    name: str, doc: str, labels: list[str] | None = None
) -> Counter:
    """
    Get existing counter or create new one.

    Args:
        name: Metric name (without the _total suffix prometheus_client adds).
        doc: Metric documentation.
        labels: Optional list of label names.
    """
    return _get_or_create(Counter, name, doc, labels)


def _get_or_create_gauge(
    name: str, doc: str, labels: list[str] | None = None
) -> Gauge:
    """Get existing gauge or create new one."""
    return _get_or_create(Gauge, name, doc, labels)
