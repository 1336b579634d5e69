"""
CloudWatch lookup configuration per AWS service.

Each service is probed through one namespace, one dimension key and one metric
that every healthy resource of that service emits. Aurora clusters are keyed by
``DBClusterIdentifier`` instead of the RDS instance dimension.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from nocwatch.resources.models import ServiceType

if TYPE_CHECKING:
    from nocwatch.resources.models import Resource


@dataclass(frozen=True)
class CloudWatchServiceConfig:
    namespace: str
    dimension_key: str
    metric_name: str


SERVICE_CLOUDWATCH_CONFIG: dict[ServiceType, CloudWatchServiceConfig] = {
    ServiceType.EC2: CloudWatchServiceConfig("AWS/EC2", "InstanceId", "CPUUtilization"),
    ServiceType.RDS: CloudWatchServiceConfig("AWS/RDS", "DBInstanceIdentifier", "CPUUtilization"),
    ServiceType.LAMBDA: CloudWatchServiceConfig("AWS/Lambda", "FunctionName", "Invocations"),
    ServiceType.ECS: CloudWatchServiceConfig("AWS/ECS", "ServiceName", "CPUUtilization"),
    ServiceType.EKS: CloudWatchServiceConfig("AWS/EKS", "ClusterName", "cluster_failed_node_count"),
    ServiceType.ELASTICACHE: CloudWatchServiceConfig(
        "AWS/ElastiCache", "CacheClusterId", "CPUUtilization"
    ),
    ServiceType.ALB: CloudWatchServiceConfig("AWS/ApplicationELB", "LoadBalancer", "RequestCount"),
    ServiceType.NLB: CloudWatchServiceConfig("AWS/NetworkELB", "LoadBalancer", "ProcessedBytes"),
    ServiceType.APIGATEWAY: CloudWatchServiceConfig("AWS/ApiGateway", "ApiName", "Count"),
    ServiceType.S3: CloudWatchServiceConfig("AWS/S3", "BucketName", "NumberOfObjects"),
    ServiceType.SQS: CloudWatchServiceConfig("AWS/SQS", "QueueName", "NumberOfMessagesReceived"),
}

AURORA_CLOUDWATCH_CONFIG = CloudWatchServiceConfig("AWS/RDS", "DBClusterIdentifier", "CPUUtilization")


def get_cloudwatch_config(service: ServiceType | str, *, cluster: bool = False) -> CloudWatchServiceConfig:
    service = ServiceType(service)
    if service is ServiceType.RDS and cluster:
        return AURORA_CLOUDWATCH_CONFIG
    return SERVICE_CLOUDWATCH_CONFIG[service]


def get_cloudwatch_config_for_resource(resource: Resource) -> CloudWatchServiceConfig:
    return get_cloudwatch_config(resource.service, cluster=getattr(resource, "is_aurora", False))


def default_dimension(service: ServiceType | str) -> str:
    """Dimension key used when a template declares none."""
    return get_cloudwatch_config(service).dimension_key
