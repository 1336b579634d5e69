"""Aggregate validation results and project discovery down to validated resources."""

from __future__ import annotations

from typing import Iterable, Sequence

import structlog

from nocwatch.core.errors import ValidationError
from nocwatch.resources.models import DiscoveredResources, is_load_balancer
from nocwatch.validation.models import (
    LoadBalancerWarning,
    ServiceValidationResult,
    ValidationStatus,
    ValidationSummary,
)

logger = structlog.get_logger()


def summarize_validation(results: Sequence[ServiceValidationResult]) -> ValidationSummary:
    """
    Sum results and flag issues.

    Matched load balancers whose targets are all unhealthy stay in monitoring
    and get one ``baseline_unhealthy`` warning each.
    """
    has_issues = False
    has_critical_issues = False
    warnings: list[LoadBalancerWarning] = []

    for result in results:
        if result.status in (ValidationStatus.PARTIAL, ValidationStatus.NONE):
            has_issues = True
        if result.status is ValidationStatus.NONE and result.discovered_count > 0:
            has_critical_issues = True

        for resource in result.matched:
            if not is_load_balancer(resource):
                continue
            health = resource.target_health  # type: ignore[union-attr]
            if health is not None and health.is_baseline_unhealthy:
                warnings.append(
                    LoadBalancerWarning(
                        resource=resource,  # type: ignore[arg-type]
                        message=(
                            f"All {health.unhealthy_target_count} targets are unhealthy"
                            " - alerts may fire immediately"
                        ),
                    )
                )

    return ValidationSummary(
        results=tuple(results),
        total_discovered=sum(r.discovered_count for r in results),
        total_matched=sum(r.matched_count for r in results),
        total_unmatched=sum(r.unmatched_count for r in results),
        has_issues=has_issues,
        has_critical_issues=has_critical_issues,
        warnings=tuple(warnings),
    )


def _keys(results: Iterable[ServiceValidationResult], attr: str) -> set[tuple[str, str, str]]:
    return {resource.key for result in results for resource in getattr(result, attr)}


def filter_validated_resources(
    discovered: DiscoveredResources,
    results: Sequence[ServiceValidationResult],
) -> DiscoveredResources:
    """
    Keep only resources matched in some result, keyed by (service, region, id).

    Raises:
        ValidationError: If a discovered resource appears in neither a matched
            nor an unmatched list
    """
    matched = _keys(results, "matched")
    accounted = matched | _keys(results, "unmatched")

    missing = [r.key for r in discovered.all() if r.key not in accounted]
    if missing:
        raise ValidationError(
            f"{len(missing)} discovered resource(s) missing from validation results",
            details={"missing": ", ".join("/".join(k) for k in missing[:10])},
        )

    kept = [r for r in discovered.all() if r.key in matched]
    logger.debug("resources_filtered", discovered=discovered.total_count(), kept=len(kept))
    return DiscoveredResources.from_resources(kept)
