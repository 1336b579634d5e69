"""
CLI command for telemetry validation.

Checks every discovered resource against live CloudWatch dimension values and
writes the Markdown validation report.

Exit codes:
    0 = every discovered resource has telemetry
    1 = some resources were excluded (warning)
    2 = a service has discovered resources but no telemetry at all (blocked)
"""

from __future__ import annotations

import json
from pathlib import Path

import structlog

from nocwatch.cli.ux import console, header, info, print_table, success, warning
from nocwatch.config import Settings, get_settings
from nocwatch.core.errors import ConfigurationError, ExitCode, main_with_error_handling
from nocwatch.pipeline import run_validation
from nocwatch.providers import GrafanaMetricSource, MetricSource, StaticMetricSource
from nocwatch.resources import load_discovery
from nocwatch.validation import ProvisioningRun, ValidationSummary, generate_validation_report

logger = structlog.get_logger()


def build_metric_source(settings: Settings, metrics_snapshot: str | None = None) -> MetricSource:
    """Offline snapshot when given, otherwise CloudWatch through Grafana."""
    if metrics_snapshot:
        return StaticMetricSource.from_file(metrics_snapshot)
    if not settings.cloudwatch_datasource_uid:
        raise ConfigurationError(
            "No CloudWatch data source configured",
            details={"hint": "set NOCWATCH_CLOUDWATCH_DATASOURCE_UID or pass --metrics-snapshot"},
        )
    return GrafanaMetricSource(
        settings.grafana_url,
        settings.grafana_token,
        settings.cloudwatch_datasource_uid,
        timeout=settings.http_timeout,
        org_id=settings.grafana_org_id,
    )


def exit_code_for(summary: ValidationSummary) -> ExitCode:
    if summary.has_critical_issues:
        return ExitCode.BLOCKED
    if summary.has_issues:
        return ExitCode.WARNING
    return ExitCode.SUCCESS


def print_validation_summary(summary: ValidationSummary) -> None:
    rows = [
        [
            result.service.value.upper(),
            result.region,
            result.dimension_key,
            str(result.discovered_count),
            str(result.matched_count),
            result.status.value,
        ]
        for result in summary.results
    ]
    print_table(
        "CloudWatch Validation",
        ["Service", "Region", "Dimension", "Discovered", "Matched", "Status"],
        rows,
    )
    console.print()
    console.print(f"[muted]Discovered:[/muted] {summary.total_discovered}")
    console.print(f"[muted]Included:[/muted] {summary.total_matched}")
    console.print(f"[muted]Excluded:[/muted] {summary.total_unmatched}")
    console.print()

    for w in summary.warnings:
        warning(f"{w.resource.name} ({w.resource.service.value.upper()}, {w.resource.region}): {w.message}")

    inaccessible = sorted({f"{r.namespace} ({r.region})" for r in summary.results if not r.namespace_accessible})
    for namespace in inaccessible:
        warning(f"Cannot access CloudWatch namespace {namespace} - check IAM permissions")


@main_with_error_handling()
def validate_command(
    discovery_file: str,
    *,
    metrics_snapshot: str | None = None,
    output: str | None = None,
    customer: str | None = None,
    output_format: str = "text",
) -> int:
    settings = get_settings()
    discovered = load_discovery(discovery_file)
    metric_source = build_metric_source(settings, metrics_snapshot)

    run = ProvisioningRun(customer=customer)
    summary, _validated = run_validation(discovered, metric_source, run)
    report = generate_validation_report(summary, customer)

    report_path = Path(output) if output else Path(settings.output_dir) / "validation-report.md"
    report_path.parent.mkdir(parents=True, exist_ok=True)
    report_path.write_text(report)
    logger.info("validation_report_written", path=str(report_path), run_id=run.run_id)

    if output_format == "json":
        console.print_json(json.dumps(summary.to_dict()))
        return exit_code_for(summary)

    header(f"Validation: {customer}" if customer else "Validation")
    print_validation_summary(summary)

    code = exit_code_for(summary)
    if code is ExitCode.SUCCESS:
        success("All discovered resources have CloudWatch metrics")
    elif code is ExitCode.WARNING:
        warning(f"{summary.total_unmatched} resource(s) excluded from monitoring")
    else:
        warning("Some services have discovered resources but no CloudWatch metrics")
    info(f"Report written to {report_path}")
    return code
