"""
Per-run provisioning context.

Holds the state shared across one pipeline run, most importantly the
namespace-health cache. A fresh context is created for every run and is never
reused, so repeated runs in the same process stay isolated.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

import structlog

from nocwatch.providers.base import MetricSource

logger = structlog.get_logger()


def _new_run_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass
class ProvisioningRun:
    customer: str | None = None
    run_id: str = field(default_factory=_new_run_id)
    # "namespace:region" -> namespace has any metrics
    namespace_health: dict[str, bool] = field(default_factory=dict)

    @staticmethod
    def cache_key(namespace: str, region: str) -> str:
        return f"{namespace}:{region}"

    def namespace_accessible(self, metric_source: MetricSource, namespace: str, region: str) -> bool:
        """Look up namespace health at most once per ``namespace:region`` for this run.

        A failed lookup is cached as inaccessible.
        """
        key = self.cache_key(namespace, region)
        if key in self.namespace_health:
            return self.namespace_health[key]

        try:
            accessible = metric_source.namespace_health(namespace, region).has_metrics
        except Exception as exc:
            logger.warning(
                "namespace_health_failed",
                run_id=self.run_id,
                namespace=namespace,
                region=region,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            accessible = False

        self.namespace_health[key] = accessible
        return accessible
