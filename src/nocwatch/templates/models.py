"""
Alert template models.

A template describes one alert for one AWS service and carries a query
configuration per data source type it supports (CloudWatch, Prometheus).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Literal

from nocwatch.resources.models import Resource, ServiceType

AlertSeverity = Literal["critical", "warning", "info"]

# CloudWatch dimension keys that distinguish cluster-type from instance-type RDS
CLUSTER_DIMENSION = "DBClusterIdentifier"
INSTANCE_DIMENSION = "DBInstanceIdentifier"


class DataSourceType(StrEnum):
    CLOUDWATCH = "cloudwatch"
    PROMETHEUS = "prometheus"


class ThresholdOperator(StrEnum):
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    EQ = "eq"
    NEQ = "neq"

    @property
    def symbol(self) -> str:
        return _OPERATOR_SYMBOLS[self]


_OPERATOR_SYMBOLS: dict[ThresholdOperator, str] = {
    ThresholdOperator.GT: ">",
    ThresholdOperator.GTE: ">=",
    ThresholdOperator.LT: "<",
    ThresholdOperator.LTE: "<=",
    ThresholdOperator.EQ: "==",
    ThresholdOperator.NEQ: "!=",
}


@dataclass(frozen=True)
class Threshold:
    value: float
    operator: ThresholdOperator = ThresholdOperator.GT

    def to_grafana_condition(self) -> str:
        return f"{self.operator.symbol} {self.value:g}"

    def to_promql_operator(self) -> str:
        return self.operator.symbol


@dataclass(frozen=True)
class CloudWatchDataSourceConfig:
    namespace: str
    metric: str
    statistic: str = "Average"
    dimensions: tuple[str, ...] = ()
    period: int | None = None

    type: Literal["cloudwatch"] = "cloudwatch"


@dataclass(frozen=True)
class PrometheusDataSourceConfig:
    metric: str
    query: str

    type: Literal["prometheus"] = "prometheus"


@dataclass(frozen=True)
class TemplateDataSources:
    cloudwatch: CloudWatchDataSourceConfig | None = None
    prometheus: PrometheusDataSourceConfig | None = None

    def types(self) -> list[DataSourceType]:
        types = []
        if self.cloudwatch is not None:
            types.append(DataSourceType.CLOUDWATCH)
        if self.prometheus is not None:
            types.append(DataSourceType.PROMETHEUS)
        return types

    def supports(self, data_source_type: DataSourceType | str) -> bool:
        return DataSourceType(data_source_type) in self.types()


@dataclass(frozen=True)
class TemplateDefaults:
    threshold: float
    threshold_operator: ThresholdOperator = ThresholdOperator.GT
    evaluation_interval: str = "1m"
    for_duration: str = "5m"


@dataclass(frozen=True)
class TemplateAnnotations:
    summary: str = ""
    description: str = ""
    runbook_url: str | None = None


@dataclass(frozen=True)
class AlertTemplate:
    """An alert rule template for one AWS service."""

    id: str
    name: str
    service: ServiceType
    defaults: TemplateDefaults
    severity: AlertSeverity = "warning"
    description: str = ""
    data_sources: TemplateDataSources = field(default_factory=TemplateDataSources)
    labels: dict[str, str] = field(default_factory=dict)
    annotations: TemplateAnnotations = field(default_factory=TemplateAnnotations)
    customizable: tuple[str, ...] = ()

    @property
    def cloudwatch_dimensions(self) -> tuple[str, ...]:
        if self.data_sources.cloudwatch is None:
            return ()
        return self.data_sources.cloudwatch.dimensions

    @property
    def is_cluster_template(self) -> bool:
        """Template queries RDS by cluster identifier (Aurora)."""
        return CLUSTER_DIMENSION in self.cloudwatch_dimensions

    @property
    def is_instance_template(self) -> bool:
        """Template queries RDS by instance identifier."""
        return INSTANCE_DIMENSION in self.cloudwatch_dimensions

    def has_data_source(self) -> bool:
        return bool(self.data_sources.types())

    def is_customizable(self, field_name: str) -> bool:
        return field_name in self.customizable


@dataclass(frozen=True)
class MatchedResource:
    """Audit view of a resource covered by a template match."""

    id: str
    name: str
    arn: str
    region: str

    @classmethod
    def from_resource(cls, resource: Resource) -> MatchedResource:
        return cls(id=resource.id, name=resource.name, arn=resource.arn, region=resource.region)


@dataclass(frozen=True)
class TemplateMatch:
    """One template applied to every eligible resource of its service in a region."""

    template: AlertTemplate
    region: str
    resources: tuple[MatchedResource, ...]

    @property
    def service(self) -> ServiceType:
        return self.template.service
