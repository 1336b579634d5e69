"""
In-memory metric source.

Answers lookups from a pre-captured snapshot of dimension values, for offline
runs and tests.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from nocwatch.core.errors import ConfigurationError
from nocwatch.providers.base import MetricSourceError, NamespaceHealth


class StaticMetricSource:
    """
    Metric source backed by a ``{namespace: {region: {dimension_key: [values]}}}`` mapping.

    A namespace/region pair absent from the mapping reports no metrics.
    Namespaces listed in ``failing`` raise ``MetricSourceError`` on every lookup.
    """

    name = "static"

    def __init__(
        self,
        values: dict[str, dict[str, dict[str, list[str]]]] | None = None,
        *,
        failing: set[str] | frozenset[str] = frozenset(),
    ) -> None:
        self._values = values or {}
        self._failing = frozenset(failing)
        self.calls: list[tuple[str, ...]] = []

    @classmethod
    def from_file(cls, path: str | Path) -> StaticMetricSource:
        snapshot = Path(path)
        if not snapshot.exists():
            raise ConfigurationError(f"Metric snapshot not found: {snapshot}")
        try:
            data: Any = yaml.safe_load(snapshot.read_text())
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Failed to parse metric snapshot {snapshot}: {exc}") from exc
        return cls(data or {})

    def _check(self, namespace: str) -> None:
        if namespace in self._failing:
            raise MetricSourceError(f"Lookup failed for namespace {namespace}")

    def dimension_values(
        self,
        namespace: str,
        metric: str,
        dimension_key: str,
        region: str,
    ) -> list[str]:
        self.calls.append(("dimension_values", namespace, region, dimension_key))
        self._check(namespace)
        return list(self._values.get(namespace, {}).get(region, {}).get(dimension_key, []))

    def namespace_health(self, namespace: str, region: str) -> NamespaceHealth:
        self.calls.append(("namespace_health", namespace, region))
        self._check(namespace)
        dimensions = self._values.get(namespace, {}).get(region, {})
        metric_count = sum(len(v) for v in dimensions.values())
        return NamespaceHealth(
            namespace=namespace,
            region=region,
            has_metrics=metric_count > 0,
            metric_count=metric_count,
        )
