"""
CLI command for alert rule generation.

Runs the full pipeline (validate, match templates, build rules) and writes the
validation report and the rules YAML to the output directory.
"""

from __future__ import annotations

import json
from pathlib import Path

import structlog
import yaml

from nocwatch.alerts import DataSourceRef, create_customer, export_rules
from nocwatch.cli.ux import console, header, info, print_table, success, warning
from nocwatch.cli.validate import build_metric_source, print_validation_summary
from nocwatch.config import Settings, get_settings
from nocwatch.core.errors import ConfigurationError, ExitCode, main_with_error_handling
from nocwatch.pipeline import PipelineResult, run_pipeline
from nocwatch.resources import load_discovery
from nocwatch.templates import DataSourceType, YamlTemplateStore

logger = structlog.get_logger()


def configured_data_sources(
    settings: Settings,
    cloudwatch_uid: str | None = None,
    prometheus_uid: str | None = None,
) -> dict[DataSourceType, DataSourceRef]:
    data_sources: dict[DataSourceType, DataSourceRef] = {}
    cw_uid = cloudwatch_uid or settings.cloudwatch_datasource_uid
    if cw_uid:
        data_sources[DataSourceType.CLOUDWATCH] = DataSourceRef(
            DataSourceType.CLOUDWATCH, cw_uid, settings.cloudwatch_datasource_name
        )
    prom_uid = prometheus_uid or settings.prometheus_datasource_uid
    if prom_uid:
        data_sources[DataSourceType.PROMETHEUS] = DataSourceRef(
            DataSourceType.PROMETHEUS, prom_uid, settings.prometheus_datasource_name
        )
    return data_sources


def load_customizations(path: str | None) -> dict[str, dict]:
    """Per-template-id overrides from a YAML file (``{template_id: {threshold: 90}}``)."""
    if not path:
        return {}
    file = Path(path)
    if not file.exists():
        raise ConfigurationError(f"Customizations file not found: {file}")
    try:
        data = yaml.safe_load(file.read_text()) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse customizations {file}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Customizations file must be a mapping: {file}")
    return data


def _print_rules(result: PipelineResult) -> None:
    rows = [
        [
            rule.id,
            rule.rule_group,
            rule.severity,
            rule.threshold.to_grafana_condition(),
            str(len(rule.covered_resources)),
        ]
        for rule in result.rules
    ]
    print_table("Alert Rules", ["Rule", "Group", "Severity", "Condition", "Resources"], rows)
    console.print()

    for skipped in result.selection.skipped:
        detail = f" ({skipped.detail})" if skipped.detail else ""
        console.print(f"  [muted]skipped {skipped.template.id}: {skipped.reason}{detail}[/muted]")
    if result.selection.skipped:
        console.print()

    for message in result.alerts_summary.warnings:
        warning(message)


@main_with_error_handling()
def generate_command(
    discovery_file: str,
    customer: str,
    *,
    templates_dir: str | None = None,
    output_dir: str | None = None,
    metrics_snapshot: str | None = None,
    customizations_file: str | None = None,
    default_selection: bool = False,
    data_source_type: str | None = None,
    cloudwatch_uid: str | None = None,
    prometheus_uid: str | None = None,
    regions: list[str] | None = None,
    dry_run: bool = False,
    output_format: str = "text",
) -> int:
    settings = get_settings()
    discovered = load_discovery(discovery_file)
    metric_source = build_metric_source(settings, metrics_snapshot)
    store = YamlTemplateStore(templates_dir or settings.templates_dir)
    data_sources = configured_data_sources(settings, cloudwatch_uid, prometheus_uid)
    if not data_sources:
        raise ConfigurationError(
            "No data source configured for alert rules",
            details={"hint": "set NOCWATCH_CLOUDWATCH_DATASOURCE_UID or pass --cloudwatch-uid"},
        )

    target = create_customer(
        customer,
        default_contact_point=settings.default_contact_point,
        regions=regions,
    )
    result = run_pipeline(
        discovered,
        metric_source,
        store,
        target,
        data_sources,
        use_default_selection=default_selection,
        customizations=load_customizations(customizations_file),
        data_source_type=data_source_type,
    )

    if output_format == "json":
        console.print_json(json.dumps(result.to_dict()))
    else:
        header(f"Alert Generation: {target.name}")
        print_validation_summary(result.summary)
        _print_rules(result)

    if dry_run:
        info(f"Dry run: {len(result.rules)} rule(s) not written")
        return ExitCode.SUCCESS

    out = Path(output_dir or settings.output_dir) / target.grafana_folder
    out.mkdir(parents=True, exist_ok=True)
    (out / "validation-report.md").write_text(result.report)
    export_rules(list(result.rules), target, out / "alert-rules.yaml")

    if output_format != "json":
        success(f"Generated {len(result.rules)} alert rule(s) in {out}")
    return ExitCode.SUCCESS
