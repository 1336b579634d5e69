"""
Alert Rule Models

An alert rule is built from one template match: one rule per (template, region)
covering every resource of the service in that region.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Any

from nocwatch.resources.models import ServiceType
from nocwatch.templates.models import (
    AlertSeverity,
    AlertTemplate,
    DataSourceType,
    MatchedResource,
    Threshold,
    ThresholdOperator,
)

US_REGIONS: tuple[str, ...] = ("us-east-1", "us-east-2", "us-west-1", "us-west-2")

# Dimension value meaning "every value of this dimension"
WILDCARD = "*"


@dataclass(frozen=True)
class DataSourceRef:
    """Grafana data source an alert rule queries."""

    type: DataSourceType
    uid: str
    name: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type.value, "uid": self.uid, "name": self.name}


@dataclass(frozen=True)
class Customer:
    name: str
    grafana_folder: str
    default_contact_point: str = "default"
    regions: tuple[str, ...] = US_REGIONS
    labels: dict[str, str] = field(default_factory=dict)


def sanitize_folder_name(name: str) -> str:
    folder = re.sub(r"[^a-z0-9-]", "-", name.lower())
    folder = re.sub(r"-+", "-", folder)
    return folder.strip("-")


def create_customer(
    name: str,
    *,
    grafana_folder: str | None = None,
    default_contact_point: str = "default",
    regions: list[str] | tuple[str, ...] | None = None,
    labels: dict[str, str] | None = None,
) -> Customer:
    return Customer(
        name=name,
        grafana_folder=grafana_folder or sanitize_folder_name(name),
        default_contact_point=default_contact_point,
        regions=tuple(regions) if regions else US_REGIONS,
        labels=dict(labels or {}),
    )


@dataclass(frozen=True)
class AlertConfiguration:
    """Per-alert settings, defaulted from the template and open to customization."""

    threshold: float
    evaluation_interval: str
    for_duration: str
    severity: AlertSeverity
    contact_point: str
    data_source_type: DataSourceType
    threshold_operator: ThresholdOperator = ThresholdOperator.GT
    labels: dict[str, str] = field(default_factory=dict)

    def merged(self, overrides: dict[str, Any] | None) -> AlertConfiguration:
        """Copy with ``overrides`` applied; unknown keys are ignored."""
        if not overrides:
            return self
        allowed = {k: v for k, v in overrides.items() if k in self.__dataclass_fields__}
        if "data_source_type" in allowed:
            allowed["data_source_type"] = DataSourceType(allowed["data_source_type"])
        if "threshold" in allowed:
            allowed["threshold"] = float(allowed["threshold"])
        if "threshold_operator" in allowed:
            allowed["threshold_operator"] = ThresholdOperator(allowed["threshold_operator"])
        return replace(self, **allowed)


@dataclass(frozen=True)
class PendingAlert:
    """One (template, region) alert awaiting a data source; resources are informational."""

    template: AlertTemplate
    region: str
    resources: tuple[MatchedResource, ...]
    configuration: AlertConfiguration


@dataclass(frozen=True)
class CloudWatchQuery:
    namespace: str
    metric_name: str
    statistic: str
    dimension_key: str
    region: str
    dimension_values: tuple[str, ...] = (WILDCARD,)
    period: int = 300

    type: str = "cloudwatch"

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "namespace": self.namespace,
            "metricName": self.metric_name,
            "statistic": self.statistic,
            "dimensions": {self.dimension_key: list(self.dimension_values)},
            "period": self.period,
            "region": self.region,
        }


@dataclass(frozen=True)
class PrometheusQuery:
    expr: str
    legend_format: str = "{{instance}}"

    type: str = "prometheus"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "expr": self.expr, "legendFormat": self.legend_format}


AlertQuery = CloudWatchQuery | PrometheusQuery


@dataclass(frozen=True)
class AlertRule:
    """
    Grafana alert rule using multi-dimensional alerting.

    ``covered_resources`` records what matched at build time. It is audit
    metadata only; CloudWatch rules query the dimension by wildcard and cover
    resources created later.
    """

    id: str
    title: str
    description: str
    rule_group: str
    severity: AlertSeverity
    threshold: Threshold
    evaluation_interval: str
    for_duration: str
    data_source: DataSourceRef
    query: AlertQuery
    contact_point: str
    source_template: AlertTemplate
    region: str
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    covered_resources: tuple[MatchedResource, ...] = ()
    folder_uid: str = ""

    @property
    def service(self) -> ServiceType:
        return self.source_template.service

    def to_dict(self) -> dict[str, Any]:
        return {
            "uid": self.id,
            "title": self.title,
            "description": self.description,
            "ruleGroup": self.rule_group,
            "folderUID": self.folder_uid,
            "severity": self.severity,
            "condition": self.threshold.to_grafana_condition(),
            "interval": self.evaluation_interval,
            "for": self.for_duration,
            "datasource": self.data_source.to_dict(),
            "query": self.query.to_dict(),
            "labels": dict(self.labels),
            "annotations": dict(self.annotations),
            "contactPoint": self.contact_point,
            "sourceTemplate": self.source_template.id,
            "coveredResources": [r.id for r in self.covered_resources],
        }


def group_alerts_by_service(alerts: list[AlertRule]) -> dict[ServiceType, list[AlertRule]]:
    grouped: dict[ServiceType, list[AlertRule]] = {}
    for alert in alerts:
        grouped.setdefault(alert.service, []).append(alert)
    return grouped


def count_alerts_by_severity(alerts: list[AlertRule]) -> dict[str, int]:
    counts = {"critical": 0, "warning": 0, "info": 0}
    for alert in alerts:
        counts[alert.severity] = counts.get(alert.severity, 0) + 1
    return counts
