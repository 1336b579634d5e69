"""
Resource validator.

Splits discovered resources per (service, region) into those that have live
CloudWatch telemetry and those that do not, attaching a diagnosis to each
resource left out.
"""

from __future__ import annotations

from typing import Sequence

import structlog

from nocwatch.core.cloudwatch import CloudWatchServiceConfig, get_cloudwatch_config
from nocwatch.providers.base import MetricSource
from nocwatch.resources.models import (
    DiscoveredResources,
    Resource,
    ServiceType,
    is_load_balancer,
)
from nocwatch.validation.context import ProvisioningRun
from nocwatch.validation.diagnostics import diagnose_unmatched
from nocwatch.validation.identity import IdentityResolver
from nocwatch.validation.models import ServiceValidationResult, ValidationStatus

logger = structlog.get_logger()


def _has_no_registered_targets(resource: Resource) -> bool:
    if not is_load_balancer(resource):
        return False
    health = resource.target_health  # type: ignore[union-attr]
    return health is not None and health.has_no_targets


def _status(discovered: int, matched: int) -> ValidationStatus:
    if discovered == 0:
        return ValidationStatus.EMPTY
    if matched == discovered:
        return ValidationStatus.OK
    if matched > 0:
        return ValidationStatus.PARTIAL
    return ValidationStatus.NONE


def validate_resources(
    resources: Sequence[Resource],
    dimension_values: Sequence[str],
    service: ServiceType | str,
    region: str,
    namespace_accessible: bool = True,
    *,
    config: CloudWatchServiceConfig | None = None,
    resolver: IdentityResolver | None = None,
) -> ServiceValidationResult:
    """
    Validate one group of resources against the live dimension values.

    A resource is matched when any of its identifiers appears in
    ``dimension_values`` (case-insensitive). Load balancers with zero registered
    targets are unmatched regardless.
    """
    service = ServiceType(service)
    config = config or get_cloudwatch_config(service)
    resolver = resolver or IdentityResolver()
    live = {value.lower() for value in dimension_values}

    matched: list[Resource] = []
    unmatched: list[Resource] = []
    for resource in resources:
        present = any(candidate.lower() in live for candidate in resolver.resolve(resource))
        if present and not _has_no_registered_targets(resource):
            matched.append(resource)
        else:
            unmatched.append(resource)

    return ServiceValidationResult(
        service=service,
        region=region,
        namespace=config.namespace,
        dimension_key=config.dimension_key,
        discovered=tuple(resources),
        matched=tuple(matched),
        unmatched=tuple(unmatched),
        status=_status(len(resources), len(matched)),
        namespace_accessible=namespace_accessible,
        cloudwatch_count=len(dimension_values),
        diagnostics=tuple(diagnose_unmatched(r, namespace_accessible) for r in unmatched),
    )


class ResourceValidator:
    """
    Validate discovered resources against a metric source.

    Usage:
        validator = ResourceValidator(GrafanaMetricSource(...))
        results = validator.validate(discovered, ProvisioningRun(customer="acme"))
    """

    def __init__(self, metric_source: MetricSource, *, resolver: IdentityResolver | None = None):
        self.metric_source = metric_source
        self.resolver = resolver or IdentityResolver()

    def validate(
        self,
        discovered: DiscoveredResources,
        run: ProvisioningRun | None = None,
    ) -> list[ServiceValidationResult]:
        run = run or ProvisioningRun()
        results: list[ServiceValidationResult] = []
        for (service, region), resources in discovered.service_region_groups().items():
            results.extend(self.validate_group(service, region, resources, run))

        logger.info(
            "validation_complete",
            run_id=run.run_id,
            groups=len(results),
            discovered=discovered.total_count(),
            matched=sum(r.matched_count for r in results),
        )
        return results

    def validate_group(
        self,
        service: ServiceType,
        region: str,
        resources: Sequence[Resource],
        run: ProvisioningRun,
    ) -> list[ServiceValidationResult]:
        """Validate one (service, region) group.

        RDS is split into cluster-type and instance-type resources first, each
        checked against its own dimension key.
        """
        if service is ServiceType.RDS:
            clusters = [r for r in resources if r.is_cluster]  # type: ignore[union-attr]
            instances = [r for r in resources if not r.is_cluster]  # type: ignore[union-attr]
            subsets = [(True, clusters), (False, instances)]
        else:
            subsets = [(False, list(resources))]

        results = []
        for cluster, subset in subsets:
            if not subset:
                continue
            config = get_cloudwatch_config(service, cluster=cluster)
            values, accessible = self._lookup(config, region, run)
            result = validate_resources(
                subset,
                values,
                service,
                region,
                accessible,
                config=config,
                resolver=self.resolver,
            )
            logger.info(
                "validation_group_complete",
                run_id=run.run_id,
                service=service.value,
                region=region,
                dimension_key=config.dimension_key,
                status=result.status.value,
                matched=result.matched_count,
                unmatched=result.unmatched_count,
            )
            results.append(result)
        return results

    def _lookup(
        self,
        config: CloudWatchServiceConfig,
        region: str,
        run: ProvisioningRun,
    ) -> tuple[list[str], bool]:
        accessible = run.namespace_accessible(self.metric_source, config.namespace, region)
        try:
            values = self.metric_source.dimension_values(
                config.namespace, config.metric_name, config.dimension_key, region
            )
        except Exception as exc:
            logger.warning(
                "metric_source_failed",
                run_id=run.run_id,
                namespace=config.namespace,
                dimension_key=config.dimension_key,
                region=region,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return [], False
        return values, accessible
