"""
Alert Template Store

Loads alert templates from YAML files organized by service:
    templates/ec2/ec2-critical-cpu.yaml
    templates/rds/rds-low-storage.yaml
    templates/rds/aurora-critical-cpu.yaml
    etc.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
import yaml

from nocwatch.core.errors import ConfigurationError
from nocwatch.resources.models import ServiceType
from nocwatch.templates.models import (
    AlertTemplate,
    CloudWatchDataSourceConfig,
    PrometheusDataSourceConfig,
    TemplateAnnotations,
    TemplateDataSources,
    TemplateDefaults,
    ThresholdOperator,
)

logger = structlog.get_logger()


class YamlTemplateStore:
    """
    Load alert templates from a directory of per-service YAML files.

    Usage:
        store = YamlTemplateStore(Path("templates"))
        templates = store.load_all_templates()
    """

    def __init__(self, templates_dir: str | Path):
        self.templates_dir = Path(templates_dir)
        self._cache: dict[str, AlertTemplate] | None = None

    def load_all_templates(self) -> list[AlertTemplate]:
        """Load every template, parsing the directory once per store instance.

        Raises:
            ConfigurationError: If the templates directory does not exist
        """
        if self._cache is None:
            self._cache = self._load_from_disk()
        return list(self._cache.values())

    def load_templates_by_service(self, service: ServiceType | str) -> list[AlertTemplate]:
        service = ServiceType(service)
        return [t for t in self.load_all_templates() if t.service == service]

    def get_template(self, template_id: str) -> AlertTemplate | None:
        self.load_all_templates()
        assert self._cache is not None
        return self._cache.get(template_id)

    def _load_from_disk(self) -> dict[str, AlertTemplate]:
        if not self.templates_dir.is_dir():
            raise ConfigurationError(f"Templates directory not found: {self.templates_dir}")

        templates: dict[str, AlertTemplate] = {}
        for service_dir in sorted(self.templates_dir.iterdir()):
            if not service_dir.is_dir():
                continue

            files = sorted([*service_dir.glob("*.yaml"), *service_dir.glob("*.yml")])
            for template_file in files:
                try:
                    with open(template_file) as f:
                        raw = yaml.safe_load(f)
                    template = parse_template(raw)
                except (OSError, yaml.YAMLError, KeyError, ValueError, TypeError) as e:
                    logger.error("template_parse_failed", path=str(template_file), error=str(e))
                    continue
                templates[template.id] = template

        logger.info("templates_loaded", count=len(templates), templates_dir=str(self.templates_dir))
        return templates


def _parse_cloudwatch(raw: dict[str, Any]) -> CloudWatchDataSourceConfig:
    return CloudWatchDataSourceConfig(
        namespace=raw["namespace"],
        metric=raw["metric"],
        statistic=raw.get("statistic", "Average"),
        dimensions=tuple(raw.get("dimensions") or ()),
        period=raw.get("period"),
    )


def _parse_prometheus(raw: dict[str, Any]) -> PrometheusDataSourceConfig:
    return PrometheusDataSourceConfig(metric=raw.get("metric", ""), query=raw["query"])


def parse_data_sources(raw: dict[str, Any]) -> TemplateDataSources:
    """
    Parse data source configs from either format.

    New format:
        data_sources:
          cloudwatch: {namespace, metric, statistic, dimensions, period}
          prometheus: {metric, query}

    Legacy single data source format:
        data_source: {type: cloudwatch, namespace, metric, ...}
    """
    cloudwatch = None
    prometheus = None

    multi = raw.get("data_sources")
    if multi:
        if multi.get("cloudwatch"):
            cloudwatch = _parse_cloudwatch(multi["cloudwatch"])
        if multi.get("prometheus"):
            prometheus = _parse_prometheus(multi["prometheus"])
    elif raw.get("data_source"):
        legacy = raw["data_source"]
        if legacy.get("type") == "cloudwatch":
            cloudwatch = _parse_cloudwatch(legacy)
        elif legacy.get("type") == "prometheus" and legacy.get("query"):
            prometheus = _parse_prometheus(legacy)

    return TemplateDataSources(cloudwatch=cloudwatch, prometheus=prometheus)


def parse_template(raw: dict[str, Any]) -> AlertTemplate:
    """Parse a template from its YAML mapping."""
    defaults = raw.get("defaults") or {}
    annotations = raw.get("annotations") or {}

    return AlertTemplate(
        id=raw["id"],
        name=raw.get("name", raw["id"]),
        description=raw.get("description", ""),
        service=ServiceType(raw["service"]),
        severity=raw.get("severity", "warning"),
        data_sources=parse_data_sources(raw),
        defaults=TemplateDefaults(
            threshold=float(defaults.get("threshold", 0)),
            threshold_operator=ThresholdOperator(defaults.get("threshold_operator", "gt")),
            evaluation_interval=defaults.get("evaluation_interval", "1m"),
            for_duration=defaults.get("for_duration", "5m"),
        ),
        labels=dict(raw.get("labels") or {}),
        annotations=TemplateAnnotations(
            summary=annotations.get("summary", ""),
            description=annotations.get("description", ""),
            runbook_url=annotations.get("runbook_url"),
        ),
        customizable=tuple(raw.get("customizable") or ()),
    )
