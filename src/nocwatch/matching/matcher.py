"""
Template matcher.

Pairs alert templates with validated resources. Each (template, region) pair
with at least one eligible resource becomes one ``TemplateMatch`` carrying the
whole regional resource list; the resulting alert queries the dimension by
wildcard, so the list is for audit only.

RDS is split before region partitioning: cluster-type (Aurora) resources only
match templates keyed by ``DBClusterIdentifier`` and instance-type resources
only match templates keyed by ``DBInstanceIdentifier``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

import structlog

from nocwatch.resources.models import SERVICE_ORDER, DiscoveredResources, Resource, ServiceType
from nocwatch.templates.models import (
    AlertTemplate,
    DataSourceType,
    MatchedResource,
    TemplateMatch,
)

logger = structlog.get_logger()


@dataclass(frozen=True)
class MatchResult:
    matches: tuple[TemplateMatch, ...]
    unmatched_resources: tuple[Resource, ...]
    unmatched_templates: tuple[AlertTemplate, ...]
    covered_resource_keys: frozenset[tuple[str, str, str]] = field(default_factory=frozenset)
    covered_template_ids: frozenset[str] = field(default_factory=frozenset)

    def to_dict(self) -> dict:
        return {
            "matches": [
                {
                    "template_id": m.template.id,
                    "service": m.service.value,
                    "region": m.region,
                    "resources": [r.id for r in m.resources],
                }
                for m in self.matches
            ],
            "unmatched_resources": ["/".join(r.key) for r in self.unmatched_resources],
            "unmatched_templates": [t.id for t in self.unmatched_templates],
        }


def group_by_region(resources: Sequence[Resource]) -> dict[str, list[Resource]]:
    grouped: dict[str, list[Resource]] = {}
    for resource in resources:
        grouped.setdefault(resource.region, []).append(resource)
    return grouped


class TemplateMatcher:
    """
    Match templates to resources.

    Args:
        data_source_type: Only consider templates that carry a config for this
            data source type. When omitted, any template with at least one
            data source config is eligible.
    """

    def __init__(self, data_source_type: DataSourceType | str | None = None):
        self.data_source_type = DataSourceType(data_source_type) if data_source_type else None

    def _eligible(self, template: AlertTemplate) -> bool:
        if self.data_source_type is None:
            return template.has_data_source()
        return template.data_sources.supports(self.data_source_type)

    def match_templates(
        self,
        templates: Sequence[AlertTemplate],
        resources: DiscoveredResources,
    ) -> MatchResult:
        eligible = [t for t in templates if self._eligible(t)]
        skipped = len(templates) - len(eligible)
        if skipped:
            logger.debug("templates_without_data_source", count=skipped)

        matches: list[TemplateMatch] = []
        covered_resources: set[tuple[str, str, str]] = set()
        covered_templates: set[str] = set()

        for service in SERVICE_ORDER:
            service_resources = list(resources.by_service(service))
            if not service_resources:
                continue
            service_templates = [t for t in eligible if t.service == service]

            for group_templates, group_resources in self._pairings(
                service, service_templates, service_resources
            ):
                for template in group_templates:
                    for region, regional in group_by_region(group_resources).items():
                        matches.append(
                            TemplateMatch(
                                template=template,
                                region=region,
                                resources=tuple(MatchedResource.from_resource(r) for r in regional),
                            )
                        )
                        covered_templates.add(template.id)
                        covered_resources.update(r.key for r in regional)

        unmatched_resources = tuple(r for r in resources.all() if r.key not in covered_resources)
        unmatched_templates = tuple(t for t in templates if t.id not in covered_templates)

        logger.info(
            "templates_matched",
            matches=len(matches),
            unmatched_resources=len(unmatched_resources),
            unmatched_templates=len(unmatched_templates),
        )
        return MatchResult(
            matches=tuple(matches),
            unmatched_resources=unmatched_resources,
            unmatched_templates=unmatched_templates,
            covered_resource_keys=frozenset(covered_resources),
            covered_template_ids=frozenset(covered_templates),
        )

    @staticmethod
    def _pairings(
        service: ServiceType,
        templates: list[AlertTemplate],
        resources: list[Resource],
    ) -> list[tuple[list[AlertTemplate], list[Resource]]]:
        if service is not ServiceType.RDS:
            return [(templates, resources)]

        clusters = [r for r in resources if r.is_cluster]  # type: ignore[union-attr]
        instances = [r for r in resources if not r.is_cluster]  # type: ignore[union-attr]
        cluster_templates = [t for t in templates if t.is_cluster_template]
        instance_templates = [
            t for t in templates if t.is_instance_template and not t.is_cluster_template
        ]
        return [(cluster_templates, clusters), (instance_templates, instances)]


def group_matches_by_service(matches: Sequence[TemplateMatch]) -> dict[ServiceType, list[TemplateMatch]]:
    grouped: dict[ServiceType, list[TemplateMatch]] = {}
    for match in matches:
        grouped.setdefault(match.service, []).append(match)
    return grouped


def group_matches_by_template(matches: Sequence[TemplateMatch]) -> dict[str, list[TemplateMatch]]:
    grouped: dict[str, list[TemplateMatch]] = {}
    for match in matches:
        grouped.setdefault(match.template.id, []).append(match)
    return grouped
