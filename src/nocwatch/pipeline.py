"""
Provisioning pipeline.

Discovery (already captured) -> validation -> summary -> filter -> template
matching -> alert rules, plus the Markdown validation report. Every run gets a
fresh ``ProvisioningRun`` so nothing is shared between runs.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Mapping, Protocol

from nocwatch.alerts.builder import AlertBuilder, AlertsSummary, customize_matches, summarize_alerts
from nocwatch.alerts.models import AlertRule, Customer, DataSourceRef
from nocwatch.logging import bind_context
from nocwatch.matching.matcher import MatchResult, TemplateMatcher
from nocwatch.matching.selection import (
    SelectionSummary,
    build_selection_summary,
    default_template_ids,
    detect_features,
    select_matches,
)
from nocwatch.providers.base import MetricSource
from nocwatch.resources.models import DiscoveredResources
from nocwatch.templates.models import AlertTemplate, DataSourceType
from nocwatch.validation.context import ProvisioningRun
from nocwatch.validation.models import ValidationSummary
from nocwatch.validation.report import generate_validation_report
from nocwatch.validation.summary import filter_validated_resources, summarize_validation
from nocwatch.validation.validator import ResourceValidator


class TemplateStore(Protocol):
    def load_all_templates(self) -> list[AlertTemplate]:
        ...


@dataclass(frozen=True)
class PipelineResult:
    run_id: str
    summary: ValidationSummary
    validated: DiscoveredResources
    match_result: MatchResult
    selection: SelectionSummary
    rules: tuple[AlertRule, ...]
    alerts_summary: AlertsSummary
    report: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "validation": self.summary.to_dict(),
            "matching": self.match_result.to_dict(),
            "selection": self.selection.to_dict(),
            "rules": [rule.to_dict() for rule in self.rules],
            "alerts_summary": {
                "total_count": self.alerts_summary.total_count,
                "by_service": self.alerts_summary.by_service,
                "by_severity": self.alerts_summary.by_severity,
                "warnings": self.alerts_summary.warnings,
            },
        }


def run_validation(
    discovered: DiscoveredResources,
    metric_source: MetricSource,
    run: ProvisioningRun | None = None,
) -> tuple[ValidationSummary, DiscoveredResources]:
    """Validate discovery and return the summary plus the validated resources."""
    run = run or ProvisioningRun()
    results = ResourceValidator(metric_source).validate(discovered, run)
    summary = summarize_validation(results)
    return summary, filter_validated_resources(discovered, results)


def run_pipeline(
    discovered: DiscoveredResources,
    metric_source: MetricSource,
    template_store: TemplateStore,
    customer: Customer,
    data_sources: Mapping[DataSourceType, DataSourceRef],
    *,
    selected_template_ids: Iterable[str] | None = None,
    use_default_selection: bool = False,
    customizations: Mapping[str, Mapping[str, Any]] | None = None,
    data_source_type: DataSourceType | str | None = None,
    run: ProvisioningRun | None = None,
    generated_at: datetime | None = None,
) -> PipelineResult:
    """
    Run one provisioning pass.

    Args:
        selected_template_ids: Explicit template selection. Takes precedence
            over ``use_default_selection``.
        use_default_selection: Select core templates plus conditional templates
            whose feature was detected. When neither selection argument is
            given, every matched template is selected.
        customizations: Per-template-id configuration overrides
        data_source_type: Restrict matching to templates supporting this type
            and build their rules against it
    """
    run = run or ProvisioningRun(customer=customer.name)
    log = bind_context(run_id=run.run_id, customer=customer.name)
    log.info("pipeline_started", discovered=discovered.total_count())

    summary, validated = run_validation(discovered, metric_source, run)
    if summary.has_critical_issues:
        log.warning("validation_critical_issues", unmatched=summary.total_unmatched)

    templates = template_store.load_all_templates()
    match_result = TemplateMatcher(data_source_type).match_templates(templates, validated)

    features = detect_features(validated)
    if selected_template_ids is not None:
        selected = set(selected_template_ids)
    elif use_default_selection:
        selected = default_template_ids(features)
    else:
        selected = {m.template.id for m in match_result.matches}

    selection = build_selection_summary(
        match_result.matches, selected, features, match_result.unmatched_templates
    )

    builder = AlertBuilder()
    pending = customize_matches(
        select_matches(match_result.matches, selected),
        customer,
        customizations,
        builder,
        data_source_type=data_source_type,
    )
    rules = builder.build_alerts(pending, customer, data_sources)
    alerts_summary = summarize_alerts(rules)
    for warning in alerts_summary.warnings:
        log.warning("alerts_summary_warning", message=warning)

    report = generate_validation_report(summary, customer.name, generated_at=generated_at)

    log.info(
        "pipeline_complete",
        matched_resources=summary.total_matched,
        excluded_resources=summary.total_unmatched,
        matches=len(match_result.matches),
        rules=len(rules),
    )
    return PipelineResult(
        run_id=run.run_id,
        summary=summary,
        validated=validated,
        match_result=match_result,
        selection=selection,
        rules=tuple(rules),
        alerts_summary=alerts_summary,
        report=report,
    )
