from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from nocwatch.core.errors import ProviderError


class MetricSourceError(ProviderError):
    """Raised when the telemetry backend cannot answer a lookup."""


@dataclass(frozen=True)
class NamespaceHealth:
    """Whether a metrics namespace returns any data in a region."""

    namespace: str
    region: str
    has_metrics: bool
    metric_count: int = 0


class MetricSource(Protocol):
    """Telemetry lookups consumed by the resource validator."""

    def dimension_values(
        self,
        namespace: str,
        metric: str,
        dimension_key: str,
        region: str,
    ) -> list[str]:
        ...

    def namespace_health(self, namespace: str, region: str) -> NamespaceHealth:
        ...
