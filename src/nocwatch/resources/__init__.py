"""Discovered AWS resource model and discovery snapshot loading."""

from nocwatch.resources.loader import load_discovery, parse_discovery, parse_resource
from nocwatch.resources.models import (
    AlbResource,
    ApiGatewayResource,
    DiscoveredResources,
    Ec2Resource,
    EcsClusterResource,
    EcsServiceResource,
    EksResource,
    ElastiCacheResource,
    LambdaResource,
    LoadBalancerTargetHealth,
    NlbResource,
    RdsResource,
    Resource,
    ResourceTag,
    S3Resource,
    ServiceType,
    SqsResource,
    TargetHealthDetail,
)

__all__ = [
    "AlbResource",
    "ApiGatewayResource",
    "DiscoveredResources",
    "Ec2Resource",
    "EcsClusterResource",
    "EcsServiceResource",
    "EksResource",
    "ElastiCacheResource",
    "LambdaResource",
    "LoadBalancerTargetHealth",
    "NlbResource",
    "RdsResource",
    "Resource",
    "ResourceTag",
    "S3Resource",
    "ServiceType",
    "SqsResource",
    "TargetHealthDetail",
    "load_discovery",
    "parse_discovery",
    "parse_resource",
]
