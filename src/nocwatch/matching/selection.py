"""
Default template selection.

Which matched templates are enabled by default is decided by tier (see
``nocwatch.core.tiers``) and by features detected on the discovered resources.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Literal, Sequence

from nocwatch.core.tiers import (
    CONDITIONAL_TEMPLATES,
    CORE_TEMPLATES,
    FEATURE_LABELS,
    TUNING_REQUIRED_TEMPLATES,
    classify_template_tier,
    get_required_feature,
    get_tuning_reason,
)
from nocwatch.resources.models import DiscoveredResources, EcsServiceResource
from nocwatch.templates.models import AlertTemplate, TemplateMatch

SkipReason = Literal[
    "no_matching_resources",
    "feature_not_detected",
    "tuning_required",
    "user_deselected",
]


@dataclass(frozen=True)
class DetectedFeatures:
    rds_has_replicas: bool = False
    aurora_has_serverless: bool = False
    lambda_has_dlq: bool = False
    elasticache_has_replication: bool = False
    ecs_has_auto_scaling: bool = False
    sqs_has_dlq: bool = False

    def is_detected(self, feature: str) -> bool:
        return bool(getattr(self, feature, False))

    def detected(self) -> list[str]:
        return [name for name in FEATURE_LABELS if self.is_detected(name)]


def detect_features(resources: DiscoveredResources) -> DetectedFeatures:
    return DetectedFeatures(
        rds_has_replicas=any(r.has_read_replicas or r.is_read_replica for r in resources.rds),
        aurora_has_serverless=any(r.is_aurora and r.is_serverless for r in resources.rds),
        lambda_has_dlq=any(r.has_dlq_configured for r in resources.lambda_),
        elasticache_has_replication=any(r.has_replication for r in resources.elasticache),
        ecs_has_auto_scaling=any(
            isinstance(r, EcsServiceResource) and r.has_auto_scaling for r in resources.ecs
        ),
        sqs_has_dlq=any(r.has_dlq for r in resources.sqs),
    )


def default_template_ids(features: DetectedFeatures) -> set[str]:
    """Core templates plus conditional templates whose feature was detected."""
    defaults = set(CORE_TEMPLATES)
    for template_id, feature in CONDITIONAL_TEMPLATES.items():
        if features.is_detected(feature):
            defaults.add(template_id)
    return defaults


def select_matches(
    matches: Sequence[TemplateMatch],
    selected_ids: Iterable[str],
) -> list[TemplateMatch]:
    selected = set(selected_ids)
    return [m for m in matches if m.template.id in selected]


@dataclass(frozen=True)
class ImplementedAlert:
    template: AlertTemplate
    resources_by_region: dict[str, list[str]]

    @property
    def total_resource_count(self) -> int:
        return sum(len(names) for names in self.resources_by_region.values())


@dataclass(frozen=True)
class SkippedAlert:
    template: AlertTemplate
    reason: SkipReason
    detail: str = ""


@dataclass(frozen=True)
class SelectionSummary:
    implemented: tuple[ImplementedAlert, ...] = ()
    skipped: tuple[SkippedAlert, ...] = ()
    regions: frozenset[str] = field(default_factory=frozenset)
    resources_covered: int = 0

    def skipped_for(self, reason: SkipReason) -> list[SkippedAlert]:
        return [s for s in self.skipped if s.reason == reason]

    def to_dict(self) -> dict[str, Any]:
        return {
            "implemented": [
                {
                    "template_id": a.template.id,
                    "tier": classify_template_tier(a.template.id).value,
                    "resources_by_region": a.resources_by_region,
                }
                for a in self.implemented
            ],
            "skipped": [
                {"template_id": s.template.id, "reason": s.reason, "detail": s.detail}
                for s in self.skipped
            ],
            "regions": sorted(self.regions),
            "resources_covered": self.resources_covered,
        }


def build_selection_summary(
    matches: Sequence[TemplateMatch],
    selected_ids: Iterable[str],
    features: DetectedFeatures,
    unmatched_templates: Sequence[AlertTemplate] = (),
) -> SelectionSummary:
    """Explain, per template, whether it was implemented and why not."""
    selected = set(selected_ids)
    by_template: dict[str, list[TemplateMatch]] = {}
    for match in matches:
        by_template.setdefault(match.template.id, []).append(match)

    implemented: list[ImplementedAlert] = []
    skipped: list[SkippedAlert] = [
        SkippedAlert(t, "no_matching_resources", f"No {t.service.value} resources discovered")
        for t in unmatched_templates
    ]

    for template_id, template_matches in by_template.items():
        template = template_matches[0].template
        if template_id in selected:
            by_region: dict[str, list[str]] = {}
            for match in template_matches:
                by_region.setdefault(match.region, []).extend(r.name for r in match.resources)
            implemented.append(ImplementedAlert(template, by_region))
            continue

        feature = get_required_feature(template_id)
        if feature and not features.is_detected(feature):
            skipped.append(
                SkippedAlert(template, "feature_not_detected", FEATURE_LABELS.get(feature, feature))
            )
        elif template_id in TUNING_REQUIRED_TEMPLATES:
            skipped.append(SkippedAlert(template, "tuning_required", get_tuning_reason(template_id)))
        else:
            skipped.append(SkippedAlert(template, "user_deselected"))

    regions = {region for alert in implemented for region in alert.resources_by_region}
    covered = {
        f"{region}:{name}"
        for alert in implemented
        for region, names in alert.resources_by_region.items()
        for name in names
    }
    return SelectionSummary(
        implemented=tuple(implemented),
        skipped=tuple(skipped),
        regions=frozenset(regions),
        resources_covered=len(covered),
    )
