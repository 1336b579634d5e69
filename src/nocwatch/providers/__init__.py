"""Metric source adapters."""

from nocwatch.providers.base import MetricSource, MetricSourceError, NamespaceHealth
from nocwatch.providers.grafana import GrafanaMetricSource
from nocwatch.providers.static import StaticMetricSource

__all__ = [
    "GrafanaMetricSource",
    "MetricSource",
    "MetricSourceError",
    "NamespaceHealth",
    "StaticMetricSource",
]
