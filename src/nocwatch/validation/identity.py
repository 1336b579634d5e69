"""
Identity resolution between discovered resources and CloudWatch dimension values.

A resource resolves to an ordered list of admissible identifiers: the primary
dimension value for its service followed by any aliases. Comparison against
live dimension values is case-insensitive and succeeds if any candidate is
present.

Aliases are registered per service as rules, so a new naming quirk is a new
rule rather than a new branch:

    resolver = IdentityResolver()
    resolver.register_alias(ServiceType.SQS, lambda r: [r.arn.rsplit(":", 1)[-1]])
"""

from __future__ import annotations

from typing import Callable, Iterable, Mapping, Sequence

from nocwatch.resources.models import Resource, ServiceType

AliasRule = Callable[[Resource], Iterable[str]]

LOAD_BALANCER_ARN_MARKER = ":loadbalancer/"


def load_balancer_arn_suffix(resource: Resource) -> str:
    """``app/name/id`` or ``net/name/id`` from a load balancer ARN, else the name."""
    _, sep, suffix = resource.arn.partition(LOAD_BALANCER_ARN_MARKER)
    return suffix if sep and suffix else resource.name


def _rds_identifier(resource: Resource) -> str:
    if getattr(resource, "is_aurora", False):
        return getattr(resource, "cluster_identifier", None) or resource.id
    return resource.id


_PRIMARY_IDENTIFIERS: dict[ServiceType, Callable[[Resource], str]] = {
    ServiceType.EC2: lambda r: r.id,
    ServiceType.RDS: _rds_identifier,
    ServiceType.LAMBDA: lambda r: r.name,
    ServiceType.ECS: lambda r: r.name,
    ServiceType.EKS: lambda r: r.name,
    ServiceType.ELASTICACHE: lambda r: r.id,
    ServiceType.ALB: load_balancer_arn_suffix,
    ServiceType.NLB: load_balancer_arn_suffix,
    ServiceType.APIGATEWAY: lambda r: r.name,
    ServiceType.S3: lambda r: r.name,
    ServiceType.SQS: lambda r: r.name,
}


def primary_identifier(resource: Resource) -> str:
    resolver = _PRIMARY_IDENTIFIERS.get(getattr(resource, "service", None))  # type: ignore[arg-type]
    if resolver is None:
        return resource.id
    return resolver(resource)


def edge_function_alias(resource: Resource) -> list[str]:
    """Lambda@Edge replicas report as ``{region}.{function_name}``."""
    if getattr(resource, "is_edge_function", False):
        return [f"{resource.region}.{resource.name}"]
    return []


DEFAULT_ALIAS_RULES: Mapping[ServiceType, Sequence[AliasRule]] = {
    ServiceType.LAMBDA: (edge_function_alias,),
}


class IdentityResolver:
    def __init__(self, alias_rules: Mapping[ServiceType, Sequence[AliasRule]] | None = None):
        rules = DEFAULT_ALIAS_RULES if alias_rules is None else alias_rules
        self._alias_rules: dict[ServiceType, list[AliasRule]] = {
            ServiceType(service): list(service_rules) for service, service_rules in rules.items()
        }

    def register_alias(self, service: ServiceType | str, rule: AliasRule) -> None:
        self._alias_rules.setdefault(ServiceType(service), []).append(rule)

    def resolve(self, resource: Resource) -> list[str]:
        """Ordered, de-duplicated candidate identifiers for ``resource``."""
        candidates = [primary_identifier(resource)]
        for rule in self._alias_rules.get(getattr(resource, "service", None), ()):  # type: ignore[arg-type]
            candidates.extend(rule(resource))

        seen: set[str] = set()
        ordered = []
        for candidate in candidates:
            if candidate and candidate.lower() not in seen:
                seen.add(candidate.lower())
                ordered.append(candidate)
        return ordered

    def is_present(self, resource: Resource, live_identifiers: Iterable[str]) -> bool:
        live = {value.lower() for value in live_identifiers}
        return any(candidate.lower() in live for candidate in self.resolve(resource))


def resolve_identifiers(resource: Resource) -> list[str]:
    return IdentityResolver().resolve(resource)
