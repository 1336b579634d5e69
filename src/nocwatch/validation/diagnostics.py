"""
Root-cause classification for resources with no CloudWatch telemetry.

``diagnose`` reads only the state captured at discovery time. It never calls
out to AWS or Grafana, so the same resource always gets the same diagnosis.
"""

from __future__ import annotations

from typing import Callable

from nocwatch.resources.models import (
    AlbResource,
    Ec2Resource,
    EcsClusterResource,
    EcsServiceResource,
    ElastiCacheResource,
    LambdaResource,
    NlbResource,
    RdsResource,
    Resource,
    S3Resource,
    ServiceType,
)
from nocwatch.validation.models import Diagnosis, ResourceDiagnostic, RootCause

PERMISSIONS_RECOMMENDATION = (
    "Check IAM role permissions for cloudwatch:GetMetricData and cloudwatch:ListMetrics"
)
UNKNOWN_RECOMMENDATION = "Unable to determine root cause - resource may be newly created"


def _ec2(resource: Ec2Resource) -> Diagnosis:
    if resource.state != "running":
        return Diagnosis(
            RootCause.STOPPED_RESOURCE,
            f"EC2 instance is {resource.state} - only running instances emit metrics",
        )
    return Diagnosis(
        RootCause.UNKNOWN,
        "Instance is running but no metrics found - may be newly launched (wait 5 min)",
    )


def _rds(resource: RdsResource) -> Diagnosis:
    if resource.status != "available":
        return Diagnosis(
            RootCause.STOPPED_RESOURCE,
            f'RDS instance status is "{resource.status}" - only available instances emit metrics',
        )
    if resource.is_cluster:
        return Diagnosis(
            RootCause.UNKNOWN,
            "Aurora cluster is available - verify DBClusterIdentifier dimension is being queried",
        )
    return Diagnosis(
        RootCause.UNKNOWN,
        "RDS instance is available but no metrics found - may be newly created",
    )


def _lambda(resource: LambdaResource) -> Diagnosis:
    if resource.is_edge_function:
        return Diagnosis(
            RootCause.EDGE_FUNCTION,
            'Lambda@Edge function - metrics appear in us-east-1 as "{region}.{function_name}"',
        )
    return Diagnosis(
        RootCause.NO_ACTIVITY,
        "Lambda function has not been invoked - metrics appear after first invocation",
    )


def _ecs(resource: EcsClusterResource | EcsServiceResource) -> Diagnosis:
    if not resource.container_insights_enabled:
        where = resource.cluster_name if isinstance(resource, EcsServiceResource) else resource.name
        return Diagnosis(
            RootCause.CONFIG_REQUIRED,
            f'Container Insights is DISABLED on cluster "{where}" - enable it for CloudWatch metrics',
        )
    if isinstance(resource, EcsServiceResource) and resource.running_count == 0:
        return Diagnosis(
            RootCause.STOPPED_RESOURCE,
            f"ECS service has 0 running tasks (desired: {resource.desired_count})",
        )
    if isinstance(resource, EcsClusterResource) and resource.running_tasks_count == 0:
        return Diagnosis(RootCause.STOPPED_RESOURCE, "ECS cluster has 0 running tasks")
    return Diagnosis(
        RootCause.UNKNOWN,
        "ECS resource exists but no metrics found - Container Insights may need enabling",
    )


def _s3(resource: S3Resource) -> Diagnosis:
    if not resource.has_request_metrics:
        return Diagnosis(
            RootCause.CONFIG_REQUIRED,
            "S3 request metrics are NOT ENABLED on this bucket - enable in bucket properties",
        )
    return Diagnosis(
        RootCause.UNKNOWN,
        "S3 bucket has request metrics enabled but no data - may be newly configured",
    )


def _load_balancer(resource: AlbResource | NlbResource) -> Diagnosis:
    kind = resource.service.value.upper()
    if resource.state != "active":
        return Diagnosis(
            RootCause.STOPPED_RESOURCE,
            f'{kind} state is "{resource.state}" - only active load balancers emit metrics',
        )
    health = resource.target_health
    if health is not None:
        if health.has_no_targets:
            return Diagnosis(
                RootCause.NO_TARGETS,
                f"{kind} has no registered targets - likely intentionally unused or misconfigured",
            )
        if health.is_baseline_unhealthy:
            return Diagnosis(
                RootCause.BASELINE_UNHEALTHY,
                f"{kind} has {health.unhealthy_target_count} targets but all are unhealthy"
                " - alerts will fire immediately",
            )
    return Diagnosis(
        RootCause.NO_ACTIVITY,
        f"{kind} is active but no metrics - has not received traffic yet",
    )


def _elasticache(resource: ElastiCacheResource) -> Diagnosis:
    if resource.status != "available":
        return Diagnosis(
            RootCause.STOPPED_RESOURCE,
            f'ElastiCache status is "{resource.status}" - only available clusters emit metrics',
        )
    return Diagnosis(RootCause.UNKNOWN, "ElastiCache is available but no metrics found")


def _fixed(root_cause: RootCause, recommendation: str) -> Callable[[Resource], Diagnosis]:
    diagnosis = Diagnosis(root_cause, recommendation)
    return lambda _resource: diagnosis


_SERVICE_CHECKS: dict[ServiceType, Callable[..., Diagnosis]] = {
    ServiceType.EC2: _ec2,
    ServiceType.RDS: _rds,
    ServiceType.LAMBDA: _lambda,
    ServiceType.ECS: _ecs,
    ServiceType.S3: _s3,
    ServiceType.ALB: _load_balancer,
    ServiceType.NLB: _load_balancer,
    ServiceType.ELASTICACHE: _elasticache,
    ServiceType.APIGATEWAY: _fixed(
        RootCause.NO_ACTIVITY, "API Gateway only emits metrics after receiving API calls"
    ),
    ServiceType.SQS: _fixed(RootCause.NO_ACTIVITY, "SQS queue has not received messages"),
    ServiceType.EKS: _fixed(
        RootCause.CONFIG_REQUIRED,
        "EKS requires Container Insights to be enabled for CloudWatch metrics",
    ),
}


def diagnose(resource: Resource, namespace_accessible: bool) -> Diagnosis:
    """
    Classify why ``resource`` has no telemetry.

    An inaccessible namespace always wins. Otherwise the per-service checks run
    against discovery-time state; anything unrecognized resolves to ``unknown``.
    """
    if not namespace_accessible:
        return Diagnosis(RootCause.PERMISSIONS, PERMISSIONS_RECOMMENDATION)

    check = _SERVICE_CHECKS.get(getattr(resource, "service", None))  # type: ignore[arg-type]
    if check is None:
        return Diagnosis(RootCause.UNKNOWN, UNKNOWN_RECOMMENDATION)
    try:
        return check(resource)
    except AttributeError:
        # variant does not carry the fields its service check reads
        return Diagnosis(RootCause.UNKNOWN, UNKNOWN_RECOMMENDATION)


def diagnose_unmatched(resource: Resource, namespace_accessible: bool) -> ResourceDiagnostic:
    diagnosis = diagnose(resource, namespace_accessible)
    return ResourceDiagnostic(
        resource=resource,
        matched=False,
        root_cause=diagnosis.root_cause,
        recommendation=diagnosis.recommendation,
    )
