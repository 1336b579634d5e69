"""
Markdown validation report.

Section order is fixed: Summary, Warnings, Exclusions (grouped by root cause),
Exclusion Summary. Empty sections are omitted; the order of the ones present
never changes.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

from nocwatch.core.cloudwatch import get_cloudwatch_config_for_resource
from nocwatch.resources.models import (
    EcsClusterResource,
    EcsServiceResource,
    Resource,
    ServiceType,
)
from nocwatch.validation.models import ResourceDiagnostic, RootCause, ValidationSummary

NO_EXCLUSIONS_NOTE = (
    "*No resources were excluded - all discovered resources have CloudWatch metrics.*"
)

# Exclusion Summary rows, in report order
EXCLUSION_CATEGORIES: tuple[tuple[RootCause, str, str], ...] = (
    (RootCause.STOPPED_RESOURCE, "Stopped Resources", "Not running, no metrics emitted"),
    (RootCause.CONFIG_REQUIRED, "Config Required", "AWS configuration needed for metrics"),
    (RootCause.EDGE_FUNCTION, "Lambda@Edge", "Different naming convention in CloudWatch"),
    (RootCause.NO_TARGETS, "No Targets", "Load balancer has no registered targets"),
    (RootCause.BASELINE_UNHEALTHY, "All Targets Unhealthy", "No metrics and every target unhealthy"),
    (RootCause.NO_ACTIVITY, "No Activity", "No traffic/invocations, no metrics yet"),
    (RootCause.PERMISSIONS, "Permissions", "IAM permissions needed"),
    (RootCause.UNKNOWN, "Unknown", "Manual investigation required"),
)


def resource_state(resource: Resource) -> str:
    """Lifecycle state shown in the stopped-resources table."""
    if isinstance(resource, EcsServiceResource):
        return f"runningCount={resource.running_count}"
    if isinstance(resource, EcsClusterResource):
        return f"runningTasksCount={resource.running_tasks_count}"
    for attr in ("state", "status"):
        value = getattr(resource, attr, None)
        if value:
            return str(value)
    return "unknown"


def _label(resource: Resource) -> str:
    return f"`{resource.name}` ({resource.service.value.upper()}, {resource.region})"


def _table(
    lines: list[str],
    diagnostics: list[ResourceDiagnostic],
    columns: list[tuple[str, Callable[[ResourceDiagnostic], str]]],
) -> None:
    lines.append("| " + " | ".join(header for header, _ in columns) + " |")
    lines.append("|" + "|".join("---" for _ in columns) + "|")
    for d in diagnostics:
        lines.append("| " + " | ".join(getter(d) for _, getter in columns) + " |")


def _warnings_section(lines: list[str], summary: ValidationSummary) -> None:
    lines.append("## Warnings")
    lines.append("")
    lines.append("The following resources are **included in monitoring** but have conditions that may")
    lines.append("cause alerts to fire immediately after deployment.")
    lines.append("")
    lines.append("### Load Balancers With All Targets Unhealthy")
    lines.append("")
    lines.append("**Verified via:** ELBv2 DescribeTargetHealth API")
    lines.append("")
    lines.append("**Rationale:** These load balancers have registered targets but all are currently unhealthy.")
    lines.append("Alerts for these resources **will fire immediately** after deployment.")
    lines.append("")
    lines.append("Possible causes:")
    lines.append("- Active outage that should be investigated")
    lines.append("- Service intentionally scaled to zero")
    lines.append("- Health check misconfiguration")
    lines.append("")

    for warning in summary.warnings:
        lb = warning.resource
        lines.append(f"- {_label(lb)}")
        health = lb.target_health
        if health is None:
            continue
        lines.append(
            f"  - Healthy: {health.healthy_target_count}, Unhealthy: {health.unhealthy_target_count}"
        )
        unhealthy = [t for t in health.details if t.state == "unhealthy"]
        if unhealthy:
            lines.append("  - Unhealthy targets:")
            for target in unhealthy[:3]:
                lines.append(f"    - `{target.target_id}`: {target.reason or 'Unknown'}")
            if len(unhealthy) > 3:
                lines.append(f"    - ... and {len(unhealthy) - 3} more")
    lines.append("")
    lines.append("**Decision:** INCLUDED - real problems should trigger alerts, even immediately after deployment")
    lines.append("")


def _stopped_section(lines: list[str], diagnostics: list[ResourceDiagnostic]) -> None:
    lines.append("### Stopped/Inactive Resources")
    lines.append("")
    lines.append("**Rationale:** These resources exist in AWS but are not currently running.")
    lines.append('Stopped resources do not emit CloudWatch metrics; alerts would sit in "No Data".')
    lines.append("")
    _table(
        lines,
        diagnostics,
        [
            ("Resource", lambda d: d.resource.name),
            ("Service", lambda d: d.resource.service.value.upper()),
            ("Region", lambda d: d.resource.region),
            ("State", lambda d: resource_state(d.resource)),
        ],
    )
    lines.append("")
    lines.append('**Decision:** EXCLUDED - alerts would show "No Data"')
    lines.append("")


def _config_required_section(lines: list[str], diagnostics: list[ResourceDiagnostic]) -> None:
    lines.append("### Configuration Required")
    lines.append("")
    lines.append("**Rationale:** These resources require explicit AWS configuration to emit CloudWatch metrics.")
    lines.append("")

    s3 = [d for d in diagnostics if d.resource.service is ServiceType.S3]
    ecs = [d for d in diagnostics if d.resource.service is ServiceType.ECS]
    eks = [d for d in diagnostics if d.resource.service is ServiceType.EKS]
    grouped = {ServiceType.S3, ServiceType.ECS, ServiceType.EKS}
    other = [d for d in diagnostics if d.resource.service not in grouped]

    if s3:
        lines.append("#### S3 Request Metrics Not Enabled")
        lines.append("")
        lines.append("Request metrics (4xx/5xx errors, latency) must be enabled in bucket properties.")
        lines.append("")
        for d in s3:
            lines.append(f"- `{d.resource.name}` ({d.resource.region})")
        lines.append("")

    if ecs:
        lines.append("#### ECS Container Insights Not Enabled")
        lines.append("")
        lines.append(
            "`aws ecs update-cluster-settings --cluster <name> --settings name=containerInsights,value=enabled`"
        )
        lines.append("")
        for d in ecs:
            if isinstance(d.resource, EcsServiceResource):
                lines.append(
                    f"- `{d.resource.name}` on cluster `{d.resource.cluster_name}` ({d.resource.region})"
                )
            else:
                lines.append(f"- `{d.resource.name}` ({d.resource.region})")
        lines.append("")

    if eks:
        lines.append("#### EKS Container Insights Not Enabled")
        lines.append("")
        for d in eks:
            lines.append(f"- `{d.resource.name}` ({d.resource.region})")
        lines.append("")

    for d in other:
        lines.append(f"- {_label(d.resource)}")
    if other:
        lines.append("")

    lines.append("**Decision:** EXCLUDED - no metrics available until configuration is enabled")
    lines.append("")


def _edge_section(lines: list[str], diagnostics: list[ResourceDiagnostic]) -> None:
    lines.append("### Lambda@Edge Functions")
    lines.append("")
    lines.append("**Rationale:** Lambda@Edge metrics appear with a region-prefixed function name.")
    lines.append("")
    for d in diagnostics:
        lines.append(f"- `{d.resource.name}` ({d.resource.region})")
        lines.append(f"  - CloudWatch dimension: `{d.resource.region}.{d.resource.name}`")
    lines.append("")
    lines.append("**Decision:** EXCLUDED - requires manual alert configuration")
    lines.append("")


def _no_targets_section(lines: list[str], diagnostics: list[ResourceDiagnostic]) -> None:
    lines.append("### Load Balancers With No Targets")
    lines.append("")
    lines.append("**Rationale:** There is nothing registered to become unhealthy.")
    lines.append("")
    for d in diagnostics:
        lines.append(f"- {_label(d.resource)}")
        health = getattr(d.resource, "target_health", None)
        if health is not None:
            lines.append(
                f"  - Target Groups: {health.target_group_count}, "
                f"Registered Targets: {health.registered_target_count}"
            )
    lines.append("")
    lines.append("**Decision:** EXCLUDED - no targets to become unhealthy")
    lines.append("")


def _baseline_unhealthy_section(lines: list[str], diagnostics: list[ResourceDiagnostic]) -> None:
    lines.append("### Load Balancers Without Metrics And All Targets Unhealthy")
    lines.append("")
    for d in diagnostics:
        lines.append(f"- {_label(d.resource)}")
    lines.append("")
    lines.append("**Decision:** EXCLUDED - no metrics to alert on; investigate target health")
    lines.append("")


def _no_activity_section(lines: list[str], diagnostics: list[ResourceDiagnostic]) -> None:
    lines.append("### No CloudWatch Activity")
    lines.append("")
    lines.append("**Rationale:** These resources are active but have not generated any CloudWatch metrics.")
    lines.append("")
    by_group: dict[str, list[ResourceDiagnostic]] = {}
    for d in diagnostics:
        by_group.setdefault(f"{d.resource.service.value}/{d.resource.region}", []).append(d)
    for key, group in by_group.items():
        lines.append(f"**{key.upper()}:**")
        for d in group:
            lines.append(f"- `{d.resource.name}`")
        lines.append("")
    lines.append("**Decision:** EXCLUDED - re-validate after the resource receives traffic")
    lines.append("")


def _permissions_section(lines: list[str], diagnostics: list[ResourceDiagnostic]) -> None:
    lines.append("### Permissions Issues")
    lines.append("")
    lines.append("**Rationale:** The CloudWatch namespace for these resources returned no metrics at all.")
    lines.append("")
    lines.append("**Required permissions:**")
    lines.append("- `cloudwatch:GetMetricData`")
    lines.append("- `cloudwatch:ListMetrics`")
    lines.append("")
    by_namespace: dict[str, list[ResourceDiagnostic]] = {}
    for d in diagnostics:
        namespace = get_cloudwatch_config_for_resource(d.resource).namespace
        by_namespace.setdefault(namespace, []).append(d)
    for namespace, group in by_namespace.items():
        lines.append(f"**{namespace}:**")
        for d in group:
            lines.append(f"- `{d.resource.name}` ({d.resource.region})")
        lines.append("")
    lines.append("**Decision:** EXCLUDED - unable to access CloudWatch metrics; fix IAM permissions")
    lines.append("")


def _unknown_section(lines: list[str], diagnostics: list[ResourceDiagnostic]) -> None:
    lines.append("### Unable to Determine Cause")
    lines.append("")
    for d in diagnostics:
        lines.append(f"- {_label(d.resource)}")
        if d.recommendation:
            lines.append(f"  > {d.recommendation}")
    lines.append("")
    lines.append("**Decision:** EXCLUDED - reason unknown; investigate manually")
    lines.append("")


_SECTIONS: dict[RootCause, Callable[[list[str], list[ResourceDiagnostic]], None]] = {
    RootCause.STOPPED_RESOURCE: _stopped_section,
    RootCause.CONFIG_REQUIRED: _config_required_section,
    RootCause.EDGE_FUNCTION: _edge_section,
    RootCause.NO_TARGETS: _no_targets_section,
    RootCause.BASELINE_UNHEALTHY: _baseline_unhealthy_section,
    RootCause.NO_ACTIVITY: _no_activity_section,
    RootCause.PERMISSIONS: _permissions_section,
    RootCause.UNKNOWN: _unknown_section,
}


def generate_validation_report(
    summary: ValidationSummary,
    customer_name: str | None = None,
    *,
    generated_at: datetime | None = None,
) -> str:
    """Render the validation summary as a Markdown document."""
    generated_at = generated_at or datetime.now(timezone.utc)
    lines = ["# CloudWatch Validation Report"]
    if customer_name:
        lines.append(f"**Customer:** {customer_name}")
    lines.append(f"**Generated:** {generated_at.strftime('%B %d, %Y %H:%M %Z').strip()}")
    lines.append("")

    lines.append("## Summary")
    lines.append(f"- Total Discovered: {summary.total_discovered}")
    lines.append(f"- Included in Monitoring: {summary.total_matched}")
    lines.append(f"- Excluded from Monitoring: {summary.total_unmatched}")
    if summary.warnings:
        lines.append(f"- Warnings: {len(summary.warnings)}")
    lines.append("")

    if summary.warnings:
        _warnings_section(lines, summary)

    diagnostics = summary.diagnostics
    if not diagnostics:
        lines.append(NO_EXCLUSIONS_NOTE)
        lines.append("")
        return "\n".join(lines)

    by_cause: dict[RootCause, list[ResourceDiagnostic]] = {}
    for d in diagnostics:
        by_cause.setdefault(d.root_cause or RootCause.UNKNOWN, []).append(d)

    lines.append("## Exclusions")
    lines.append("")
    lines.append("The following resources were excluded from monitoring, grouped by root cause.")
    lines.append("")
    for cause, _, _ in EXCLUSION_CATEGORIES:
        if by_cause.get(cause):
            _SECTIONS[cause](lines, by_cause[cause])

    lines.append("## Exclusion Summary")
    lines.append("")
    lines.append("| Category | Count | Rationale |")
    lines.append("|----------|-------|-----------|")
    for cause, label, rationale in EXCLUSION_CATEGORIES:
        count = len(by_cause.get(cause, []))
        if count:
            lines.append(f"| {label} | {count} | {rationale} |")
    lines.append(f"| **Total Excluded** | **{summary.total_unmatched}** | |")
    lines.append("")

    return "\n".join(lines)
