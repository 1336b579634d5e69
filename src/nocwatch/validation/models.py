"""
Validation result models.

Diagnostics explain why a discovered resource has no CloudWatch telemetry;
results and the summary aggregate those decisions per service and region.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Literal

from nocwatch.resources.models import LoadBalancerResource, Resource, ServiceType


class RootCause(StrEnum):
    """Why a discovered resource has no telemetry."""

    PERMISSIONS = "permissions"  # namespace not accessible at all
    NO_ACTIVITY = "no_activity"  # namespace has data, resource has never emitted
    CONFIG_REQUIRED = "config_required"  # S3 request metrics, Container Insights
    EDGE_FUNCTION = "edge_function"  # Lambda@Edge naming
    STOPPED_RESOURCE = "stopped_resource"
    NO_TARGETS = "no_targets"  # load balancer with nothing registered
    BASELINE_UNHEALTHY = "baseline_unhealthy"  # load balancer with every target unhealthy
    UNKNOWN = "unknown"


class ValidationStatus(StrEnum):
    OK = "ok"
    PARTIAL = "partial"
    NONE = "none"
    EMPTY = "empty"


@dataclass(frozen=True)
class Diagnosis:
    root_cause: RootCause
    recommendation: str


@dataclass(frozen=True)
class ResourceDiagnostic:
    resource: Resource
    matched: bool
    root_cause: RootCause | None = None
    recommendation: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "service": self.resource.service.value,
            "region": self.resource.region,
            "id": self.resource.id,
            "name": self.resource.name,
            "matched": self.matched,
            "root_cause": self.root_cause.value if self.root_cause else None,
            "recommendation": self.recommendation,
        }


@dataclass(frozen=True)
class ServiceValidationResult:
    """Validation outcome for one (service, region) group.

    RDS produces up to two results per region: one for cluster-type resources
    and one for instance-type resources, distinguished by ``dimension_key``.
    """

    service: ServiceType
    region: str
    namespace: str
    dimension_key: str
    discovered: tuple[Resource, ...]
    matched: tuple[Resource, ...]
    unmatched: tuple[Resource, ...]
    status: ValidationStatus
    namespace_accessible: bool = True
    cloudwatch_count: int = 0
    diagnostics: tuple[ResourceDiagnostic, ...] = ()

    @property
    def discovered_count(self) -> int:
        return len(self.discovered)

    @property
    def matched_count(self) -> int:
        return len(self.matched)

    @property
    def unmatched_count(self) -> int:
        return len(self.unmatched)

    def to_dict(self) -> dict[str, Any]:
        return {
            "service": self.service.value,
            "region": self.region,
            "namespace": self.namespace,
            "dimension_key": self.dimension_key,
            "status": self.status.value,
            "namespace_accessible": self.namespace_accessible,
            "discovered_count": self.discovered_count,
            "matched_count": self.matched_count,
            "unmatched_count": self.unmatched_count,
            "cloudwatch_count": self.cloudwatch_count,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }


@dataclass(frozen=True)
class LoadBalancerWarning:
    """A load balancer kept in monitoring despite a risky baseline."""

    resource: LoadBalancerResource
    message: str
    warning_type: Literal["baseline_unhealthy"] = "baseline_unhealthy"


@dataclass(frozen=True)
class ValidationSummary:
    results: tuple[ServiceValidationResult, ...]
    total_discovered: int
    total_matched: int
    total_unmatched: int
    has_issues: bool
    has_critical_issues: bool
    warnings: tuple[LoadBalancerWarning, ...] = field(default_factory=tuple)

    @property
    def diagnostics(self) -> list[ResourceDiagnostic]:
        return [d for result in self.results for d in result.diagnostics]

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_discovered": self.total_discovered,
            "total_matched": self.total_matched,
            "total_unmatched": self.total_unmatched,
            "has_issues": self.has_issues,
            "has_critical_issues": self.has_critical_issues,
            "warnings": [
                {
                    "service": w.resource.service.value,
                    "region": w.resource.region,
                    "name": w.resource.name,
                    "warning_type": w.warning_type,
                    "message": w.message,
                }
                for w in self.warnings
            ],
            "results": [r.to_dict() for r in self.results],
        }
