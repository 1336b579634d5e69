"""
Alert rule builder.

Turns template matches into Grafana alert rules. Rule identity is derived only
from the template id and region, so rebuilding from identical inputs yields
identical rules.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Sequence

import structlog
import yaml

from nocwatch.alerts.models import (
    WILDCARD,
    AlertConfiguration,
    AlertQuery,
    AlertRule,
    CloudWatchQuery,
    Customer,
    DataSourceRef,
    PendingAlert,
    PrometheusQuery,
    count_alerts_by_severity,
    group_alerts_by_service,
)
from nocwatch.core.cloudwatch import default_dimension
from nocwatch.core.errors import ValidationError
from nocwatch.templates.models import (
    AlertTemplate,
    DataSourceType,
    MatchedResource,
    TemplateMatch,
    Threshold,
)

logger = structlog.get_logger()

DEFAULT_PERIOD = 300
HIGH_ALERT_COUNT = 100
HIGH_CRITICAL_COUNT = 20

_RESOURCE_PLACEHOLDER = re.compile(r"\{\{\s*\$resource_(?:pattern|name)\s*\}\}")


def alert_id(template: AlertTemplate, region: str) -> str:
    return f"{template.id}-{region}"


def alert_title(template: AlertTemplate, region: str) -> str:
    return f"{template.name} ({region})"


def rule_group(template: AlertTemplate) -> str:
    return f"{template.service.value.upper()}-Alerts"


def interpolate_prometheus_query(query: str, resource_names: Sequence[str]) -> str:
    """Substitute resource placeholders with a regex alternation of names."""
    pattern = "|".join(resource_names)
    return _RESOURCE_PLACEHOLDER.sub(lambda _m: pattern, query)


class AlertBuilder:
    def create_default_configuration(
        self,
        template: AlertTemplate,
        customer: Customer,
        data_source_type: DataSourceType | str | None = None,
    ) -> AlertConfiguration:
        """Configuration from template defaults.

        A requested ``data_source_type`` is used when the template supports it;
        otherwise CloudWatch is preferred over Prometheus.
        """
        if data_source_type and template.data_sources.supports(data_source_type):
            resolved = DataSourceType(data_source_type)
        elif template.data_sources.cloudwatch is not None:
            resolved = DataSourceType.CLOUDWATCH
        else:
            resolved = DataSourceType.PROMETHEUS
        return AlertConfiguration(
            threshold=template.defaults.threshold,
            evaluation_interval=template.defaults.evaluation_interval,
            for_duration=template.defaults.for_duration,
            severity=template.severity,
            contact_point=customer.default_contact_point,
            data_source_type=resolved,
            threshold_operator=template.defaults.threshold_operator,
            labels=dict(template.labels),
        )

    def create_pending_alert(
        self,
        match: TemplateMatch,
        customer: Customer,
        overrides: Mapping[str, Any] | None = None,
        data_source_type: DataSourceType | str | None = None,
    ) -> PendingAlert:
        configuration = self.create_default_configuration(
            match.template, customer, data_source_type
        )
        return PendingAlert(
            template=match.template,
            region=match.region,
            resources=match.resources,
            configuration=configuration.merged(dict(overrides) if overrides else None),
        )

    def build_alert(
        self,
        pending: PendingAlert,
        customer: Customer,
        data_source: DataSourceRef,
    ) -> AlertRule:
        """
        Build one alert rule.

        Raises:
            ValidationError: If the template has no config for the configured
                data source type
        """
        template = pending.template
        configuration = pending.configuration

        return AlertRule(
            id=alert_id(template, pending.region),
            title=alert_title(template, pending.region),
            description=template.description,
            rule_group=rule_group(template),
            severity=configuration.severity,
            threshold=Threshold(configuration.threshold, configuration.threshold_operator),
            evaluation_interval=configuration.evaluation_interval,
            for_duration=configuration.for_duration,
            data_source=data_source,
            query=self.build_query(template, pending.resources, configuration, pending.region),
            contact_point=configuration.contact_point,
            source_template=template,
            region=pending.region,
            labels=self._labels(template, configuration, customer),
            annotations=self._annotations(template),
            covered_resources=pending.resources,
        )

    def build_alerts(
        self,
        pending_alerts: Sequence[PendingAlert],
        customer: Customer,
        data_sources: Mapping[DataSourceType, DataSourceRef],
    ) -> list[AlertRule]:
        """
        Build rules for every pending alert whose data source type is available.

        Alerts whose template has no config for the configured type, or whose
        type has no data source, are skipped and logged.
        """
        alerts = []
        for pending in pending_alerts:
            data_source_type = pending.configuration.data_source_type
            if not pending.template.data_sources.supports(data_source_type):
                logger.warning(
                    "data_source_not_supported",
                    template_id=pending.template.id,
                    region=pending.region,
                    data_source_type=data_source_type.value,
                )
                continue
            data_source = data_sources.get(data_source_type)
            if data_source is None:
                logger.warning(
                    "data_source_unavailable",
                    template_id=pending.template.id,
                    region=pending.region,
                    data_source_type=data_source_type.value,
                )
                continue
            alerts.append(self.build_alert(pending, customer, data_source))
        return alerts

    def build_query(
        self,
        template: AlertTemplate,
        resources: Sequence[MatchedResource],
        configuration: AlertConfiguration,
        region: str,
    ) -> AlertQuery:
        data_sources = template.data_sources

        if configuration.data_source_type is DataSourceType.CLOUDWATCH and data_sources.cloudwatch:
            cloudwatch = data_sources.cloudwatch
            dimension_key = (
                cloudwatch.dimensions[0]
                if cloudwatch.dimensions
                else default_dimension(template.service)
            )
            return CloudWatchQuery(
                namespace=cloudwatch.namespace,
                metric_name=cloudwatch.metric,
                statistic=cloudwatch.statistic,
                dimension_key=dimension_key,
                region=region,
                dimension_values=(WILDCARD,),
                period=cloudwatch.period or DEFAULT_PERIOD,
            )

        if configuration.data_source_type is DataSourceType.PROMETHEUS and data_sources.prometheus:
            # no wildcard primitive: matched names are baked into the expression
            expr = interpolate_prometheus_query(
                data_sources.prometheus.query, [r.name for r in resources]
            )
            return PrometheusQuery(expr=expr)

        raise ValidationError(
            f"No valid data source configuration for template {template.id}",
            details={
                "template_id": template.id,
                "data_source_type": configuration.data_source_type.value,
            },
        )

    @staticmethod
    def _labels(
        template: AlertTemplate,
        configuration: AlertConfiguration,
        customer: Customer,
    ) -> dict[str, str]:
        labels = {
            **template.labels,
            **configuration.labels,
            "customer": customer.name,
            "service": template.service.value,
            "severity": configuration.severity,
        }
        labels.update(customer.labels)
        return labels

    @staticmethod
    def _annotations(template: AlertTemplate) -> dict[str, str]:
        annotations = {
            "summary": template.annotations.summary,
            "description": template.annotations.description,
        }
        if template.annotations.runbook_url:
            annotations["runbook_url"] = template.annotations.runbook_url
        return annotations


def customize_matches(
    matches: Sequence[TemplateMatch],
    customer: Customer,
    customizations: Mapping[str, Mapping[str, Any]] | None = None,
    builder: AlertBuilder | None = None,
    data_source_type: DataSourceType | str | None = None,
) -> list[PendingAlert]:
    """One pending alert per match, with per-template-id overrides applied."""
    builder = builder or AlertBuilder()
    customizations = customizations or {}
    return [
        builder.create_pending_alert(
            match, customer, customizations.get(match.template.id), data_source_type
        )
        for match in matches
    ]


@dataclass(frozen=True)
class AlertsSummary:
    total_count: int
    by_service: dict[str, int]
    by_severity: dict[str, int]
    warnings: list[str] = field(default_factory=list)


def summarize_alerts(alerts: list[AlertRule]) -> AlertsSummary:
    by_severity = count_alerts_by_severity(alerts)
    warnings = []
    if len(alerts) > HIGH_ALERT_COUNT:
        warnings.append(
            f"High alert count ({len(alerts)}). Consider splitting into multiple provisioning runs."
        )
    if by_severity["critical"] > HIGH_CRITICAL_COUNT:
        warnings.append(
            f"Many critical alerts ({by_severity['critical']}). This may cause alert fatigue."
        )
    return AlertsSummary(
        total_count=len(alerts),
        by_service={s.value: len(a) for s, a in group_alerts_by_service(alerts).items()},
        by_severity=by_severity,
        warnings=warnings,
    )


def export_rules(alerts: list[AlertRule], customer: Customer, output_path: str | Path) -> Path:
    """Write rules grouped by rule group as a YAML document."""
    groups: dict[str, list[dict[str, Any]]] = {}
    for alert in alerts:
        groups.setdefault(alert.rule_group, []).append(alert.to_dict())

    document = {
        "customer": customer.name,
        "folder": customer.grafana_folder,
        "groups": [{"name": name, "rules": rules} for name, rules in groups.items()],
    }

    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.dump(document, f, sort_keys=False, default_flow_style=False)

    logger.info("rules_exported", path=str(path), rules=len(alerts), groups=len(groups))
    return path
