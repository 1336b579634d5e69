"""
Discovery snapshot loader.

Reads a YAML or JSON snapshot written by the discovery step and turns it into
an immutable ``DiscoveredResources`` collection. Keys may be camelCase (as the
discovery adapters emit them) or snake_case.

Expected format:
    ec2:
      - id: i-0abc
        name: web-1
        region: us-east-1
        state: running
    alb:
      - id: my-alb
        arn: arn:aws:elasticloadbalancing:...:loadbalancer/app/my-alb/123
        name: my-alb
        region: us-east-1
        targetHealth:
          registeredTargetCount: 2
          healthyTargetCount: 2
    ecs:
      - resourceType: service
        ...
"""

from __future__ import annotations

import json
import re
from dataclasses import fields
from pathlib import Path
from typing import Any

import structlog
import yaml

from nocwatch.core.errors import ConfigurationError
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

logger = structlog.get_logger()

_RESOURCE_CLASSES: dict[ServiceType, type] = {
    ServiceType.EC2: Ec2Resource,
    ServiceType.RDS: RdsResource,
    ServiceType.LAMBDA: LambdaResource,
    ServiceType.EKS: EksResource,
    ServiceType.ELASTICACHE: ElastiCacheResource,
    ServiceType.ALB: AlbResource,
    ServiceType.NLB: NlbResource,
    ServiceType.APIGATEWAY: ApiGatewayResource,
    ServiceType.S3: S3Resource,
    ServiceType.SQS: SqsResource,
}

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


def _snake(key: str) -> str:
    return _CAMEL_RE.sub("_", key).lower()


def _normalize_keys(data: dict[str, Any]) -> dict[str, Any]:
    return {_snake(k): v for k, v in data.items()}


def _parse_target_health(data: dict[str, Any] | None) -> LoadBalancerTargetHealth | None:
    if data is None:
        return None
    raw = _normalize_keys(data)
    details = tuple(
        TargetHealthDetail(
            target_id=d["target_id"],
            target_group_arn=d.get("target_group_arn", ""),
            state=d.get("state", "healthy"),
            reason=d.get("reason"),
        )
        for d in (_normalize_keys(item) for item in raw.get("details", []))
    )
    return LoadBalancerTargetHealth(
        registered_target_count=int(raw.get("registered_target_count", 0)),
        healthy_target_count=int(raw.get("healthy_target_count", 0)),
        unhealthy_target_count=int(raw.get("unhealthy_target_count", 0)),
        target_group_count=int(raw.get("target_group_count", 0)),
        details=details,
    )


def _resource_class(service: ServiceType, raw: dict[str, Any]) -> type:
    if service is ServiceType.ECS:
        return EcsClusterResource if raw.get("resource_type") == "cluster" else EcsServiceResource
    return _RESOURCE_CLASSES[service]


def parse_resource(service: ServiceType | str, data: dict[str, Any]) -> Resource:
    """Build a typed resource from a raw discovery record.

    Unknown keys are ignored so newer discovery snapshots stay loadable.
    """
    service = ServiceType(service)
    raw = _normalize_keys(data)
    cls = _resource_class(service, raw)
    allowed = {f.name for f in fields(cls)}

    kwargs: dict[str, Any] = {}
    for key, value in raw.items():
        if key not in allowed:
            continue
        if key == "tags":
            value = tuple(
                ResourceTag(key=t.get("key", t.get("Key", "")), value=t.get("value", t.get("Value", "")))
                for t in value or []
            )
        elif key == "target_health":
            value = _parse_target_health(value)
        kwargs[key] = value

    try:
        return cls(**kwargs)
    except TypeError as exc:
        raise ConfigurationError(
            f"Invalid {service.value} resource in discovery snapshot: {exc}",
            details={"service": service.value, "resource": data.get("id")},
        ) from exc


def parse_discovery(data: dict[str, Any]) -> DiscoveredResources:
    """Parse a discovery mapping of ``service -> [records]``."""
    resources: list[Resource] = []
    for key, records in (data or {}).items():
        try:
            service = ServiceType(key)
        except ValueError:
            logger.warning("discovery_unknown_service", service=key)
            continue
        for record in records or []:
            resources.append(parse_resource(service, record))
    return DiscoveredResources.from_resources(resources)


def load_discovery(path: str | Path) -> DiscoveredResources:
    """Load a discovery snapshot from a YAML or JSON file."""
    snapshot = Path(path)
    if not snapshot.exists():
        raise ConfigurationError(f"Discovery snapshot not found: {snapshot}")

    try:
        text = snapshot.read_text()
        data = json.loads(text) if snapshot.suffix == ".json" else yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Failed to parse discovery snapshot {snapshot}: {exc}") from exc

    discovered = parse_discovery(data or {})
    logger.info("discovery_loaded", path=str(snapshot), total=discovered.total_count())
    return discovered
