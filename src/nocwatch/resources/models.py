"""
Discovered AWS resource models.

Each service has its own frozen variant; ``service`` is a class-level tag used
as the discriminator. The ``Resource`` union is closed: code that branches on
``resource.service`` covers every member of ``ServiceType``.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
from typing import ClassVar, Iterator, Literal, Union


class ServiceType(StrEnum):
    """AWS service types that can be discovered and monitored."""

    EC2 = "ec2"
    RDS = "rds"
    LAMBDA = "lambda"
    ECS = "ecs"
    EKS = "eks"
    ELASTICACHE = "elasticache"
    ALB = "alb"
    NLB = "nlb"
    APIGATEWAY = "apigateway"
    S3 = "s3"
    SQS = "sqs"


# Canonical iteration order for services
SERVICE_ORDER: tuple[ServiceType, ...] = tuple(ServiceType)

LOAD_BALANCER_SERVICES: frozenset[ServiceType] = frozenset({ServiceType.ALB, ServiceType.NLB})


@dataclass(frozen=True)
class ResourceTag:
    key: str
    value: str


@dataclass(frozen=True, kw_only=True)
class BaseResource:
    """Fields shared by every discovered resource."""

    service: ClassVar[ServiceType]

    id: str
    arn: str = ""
    name: str
    region: str
    tags: tuple[ResourceTag, ...] = ()

    @property
    def key(self) -> tuple[str, str, str]:
        """Identity of the resource within a run: (service, region, id)."""
        return (self.service.value, self.region, self.id)


@dataclass(frozen=True, kw_only=True)
class Ec2Resource(BaseResource):
    service: ClassVar[ServiceType] = ServiceType.EC2

    instance_type: str = ""
    state: str = "running"
    vpc_id: str | None = None
    subnet_id: str | None = None
    private_ip_address: str | None = None
    public_ip_address: str | None = None


@dataclass(frozen=True, kw_only=True)
class RdsResource(BaseResource):
    service: ClassVar[ServiceType] = ServiceType.RDS

    engine: str = ""
    engine_version: str = ""
    instance_class: str = ""
    allocated_storage: int = 0
    multi_az: bool = False
    status: str = "available"
    # Feature flags for conditional alerts
    has_read_replicas: bool = False
    is_read_replica: bool = False
    has_storage_autoscaling: bool = False
    # Aurora resources are cluster-type: CloudWatch keys them by DBClusterIdentifier
    is_aurora: bool = False
    cluster_identifier: str | None = None
    is_serverless: bool = False

    @property
    def is_cluster(self) -> bool:
        return self.is_aurora


@dataclass(frozen=True, kw_only=True)
class LambdaResource(BaseResource):
    service: ClassVar[ServiceType] = ServiceType.LAMBDA

    runtime: str = ""
    memory_size: int = 128
    timeout: int = 3
    handler: str = ""
    last_modified: str = ""
    has_dlq_configured: bool = False
    # Lambda@Edge replicas report metrics as "{region}.{function_name}"
    is_edge_function: bool = False


@dataclass(frozen=True, kw_only=True)
class EcsClusterResource(BaseResource):
    service: ClassVar[ServiceType] = ServiceType.ECS
    resource_type: ClassVar[Literal["cluster"]] = "cluster"

    status: str = "ACTIVE"
    running_tasks_count: int = 0
    pending_tasks_count: int = 0
    active_services_count: int = 0
    container_insights_enabled: bool = False


@dataclass(frozen=True, kw_only=True)
class EcsServiceResource(BaseResource):
    service: ClassVar[ServiceType] = ServiceType.ECS
    resource_type: ClassVar[Literal["service"]] = "service"

    cluster_arn: str = ""
    cluster_name: str = ""
    status: str = "ACTIVE"
    desired_count: int = 0
    running_count: int = 0
    launch_type: str = ""
    has_auto_scaling: bool = False
    # Inherited from the owning cluster
    container_insights_enabled: bool = False


@dataclass(frozen=True, kw_only=True)
class EksResource(BaseResource):
    service: ClassVar[ServiceType] = ServiceType.EKS

    version: str = ""
    status: str = "ACTIVE"
    platform_version: str = ""
    endpoint: str | None = None


@dataclass(frozen=True, kw_only=True)
class ElastiCacheResource(BaseResource):
    service: ClassVar[ServiceType] = ServiceType.ELASTICACHE

    engine: str = ""
    engine_version: str = ""
    cache_node_type: str = ""
    num_cache_nodes: int = 1
    status: str = "available"
    has_replication: bool = False


TargetState = Literal["healthy", "unhealthy", "draining", "unavailable", "unused", "initial"]


@dataclass(frozen=True)
class TargetHealthDetail:
    target_id: str
    target_group_arn: str = ""
    state: TargetState = "healthy"
    reason: str | None = None


@dataclass(frozen=True)
class LoadBalancerTargetHealth:
    registered_target_count: int = 0
    healthy_target_count: int = 0
    unhealthy_target_count: int = 0
    target_group_count: int = 0
    details: tuple[TargetHealthDetail, ...] = ()

    @property
    def has_no_targets(self) -> bool:
        return self.registered_target_count == 0

    @property
    def is_baseline_unhealthy(self) -> bool:
        """Targets are registered but none is healthy."""
        return self.healthy_target_count == 0 and self.unhealthy_target_count > 0


@dataclass(frozen=True, kw_only=True)
class AlbResource(BaseResource):
    service: ClassVar[ServiceType] = ServiceType.ALB

    dns_name: str = ""
    scheme: str = "internet-facing"
    vpc_id: str = ""
    state: str = "active"
    target_health: LoadBalancerTargetHealth | None = None


@dataclass(frozen=True, kw_only=True)
class NlbResource(BaseResource):
    service: ClassVar[ServiceType] = ServiceType.NLB

    dns_name: str = ""
    scheme: str = "internet-facing"
    vpc_id: str = ""
    state: str = "active"
    target_health: LoadBalancerTargetHealth | None = None


@dataclass(frozen=True, kw_only=True)
class ApiGatewayResource(BaseResource):
    service: ClassVar[ServiceType] = ServiceType.APIGATEWAY

    description: str | None = None
    created_date: str = ""
    api_key_source: str | None = None
    endpoint_configuration: str | None = None


@dataclass(frozen=True, kw_only=True)
class S3Resource(BaseResource):
    service: ClassVar[ServiceType] = ServiceType.S3

    creation_date: str = ""
    has_request_metrics: bool = False


@dataclass(frozen=True, kw_only=True)
class SqsResource(BaseResource):
    service: ClassVar[ServiceType] = ServiceType.SQS

    queue_url: str = ""
    is_fifo: bool = False
    visibility_timeout: int | None = None
    message_retention_period: int | None = None
    has_dlq: bool = False


EcsResource = Union[EcsClusterResource, EcsServiceResource]
LoadBalancerResource = Union[AlbResource, NlbResource]

Resource = Union[
    Ec2Resource,
    RdsResource,
    LambdaResource,
    EcsClusterResource,
    EcsServiceResource,
    EksResource,
    ElastiCacheResource,
    AlbResource,
    NlbResource,
    ApiGatewayResource,
    S3Resource,
    SqsResource,
]


def is_load_balancer(resource: Resource) -> bool:
    return resource.service in LOAD_BALANCER_SERVICES


@dataclass(frozen=True)
class DiscoveredResources:
    """Per-service resource collections produced by discovery for one run."""

    ec2: tuple[Ec2Resource, ...] = ()
    rds: tuple[RdsResource, ...] = ()
    lambda_: tuple[LambdaResource, ...] = ()
    ecs: tuple[EcsResource, ...] = ()
    eks: tuple[EksResource, ...] = ()
    elasticache: tuple[ElastiCacheResource, ...] = ()
    alb: tuple[AlbResource, ...] = ()
    nlb: tuple[NlbResource, ...] = ()
    apigateway: tuple[ApiGatewayResource, ...] = ()
    s3: tuple[S3Resource, ...] = ()
    sqs: tuple[SqsResource, ...] = ()

    @staticmethod
    def _attr(service: ServiceType | str) -> str:
        value = ServiceType(service).value
        return "lambda_" if value == "lambda" else value

    @classmethod
    def from_resources(cls, resources: list[Resource] | tuple[Resource, ...]) -> DiscoveredResources:
        """Build a collection from a flat resource list, preserving order."""
        grouped: dict[str, list[Resource]] = {cls._attr(s): [] for s in SERVICE_ORDER}
        for resource in resources:
            grouped[cls._attr(resource.service)].append(resource)
        return cls(**{attr: tuple(items) for attr, items in grouped.items()})

    def by_service(self, service: ServiceType | str) -> tuple[Resource, ...]:
        return getattr(self, self._attr(service))

    def with_service(
        self, service: ServiceType | str, resources: tuple[Resource, ...]
    ) -> DiscoveredResources:
        return replace(self, **{self._attr(service): tuple(resources)})

    def all(self) -> Iterator[Resource]:
        for service in SERVICE_ORDER:
            yield from self.by_service(service)

    def total_count(self) -> int:
        return sum(len(self.by_service(service)) for service in SERVICE_ORDER)

    def service_region_groups(self) -> dict[tuple[ServiceType, str], list[Resource]]:
        """Group resources by (service, region), preserving discovery order."""
        groups: dict[tuple[ServiceType, str], list[Resource]] = {}
        for resource in self.all():
            groups.setdefault((resource.service, resource.region), []).append(resource)
        return groups
