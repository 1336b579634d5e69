"""
Tests for the Markdown validation report.
"""

from datetime import datetime, timezone

from nocwatch.resources import (
    AlbResource,
    Ec2Resource,
    EcsServiceResource,
    LambdaResource,
    LoadBalancerTargetHealth,
    S3Resource,
    SqsResource,
)
from nocwatch.validation import generate_validation_report, summarize_validation, validate_resources
from nocwatch.validation.report import NO_EXCLUSIONS_NOTE, resource_state

REGION = "us-east-1"
GENERATED_AT = datetime(2026, 3, 14, 9, 30, tzinfo=timezone.utc)


def _report(results, customer_name="Acme Corp"):
    return generate_validation_report(
        summarize_validation(results), customer_name, generated_at=GENERATED_AT
    )


class TestReportHeader:
    def test_title_customer_and_timestamp(self):
        report = _report([])
        lines = report.splitlines()

        assert lines[0] == "# CloudWatch Validation Report"
        assert lines[1] == "**Customer:** Acme Corp"
        assert lines[2] == "**Generated:** March 14, 2026 09:30 UTC"

    def test_customer_line_optional(self):
        report = _report([], customer_name=None)
        assert "**Customer:**" not in report

    def test_summary_counts(self):
        resources = [Ec2Resource(id="i-1", name="a", region=REGION), Ec2Resource(id="i-2", name="b", region=REGION)]
        report = _report([validate_resources(resources, ["i-1"], "ec2", REGION)])

        assert "- Total Discovered: 2" in report
        assert "- Included in Monitoring: 1" in report
        assert "- Excluded from Monitoring: 1" in report
        assert "- Warnings:" not in report


class TestNoExclusions:
    def test_note_and_no_exclusion_sections(self):
        resources = [Ec2Resource(id="i-1", name="a", region=REGION)]
        report = _report([validate_resources(resources, ["i-1"], "ec2", REGION)])

        assert NO_EXCLUSIONS_NOTE in report
        assert "## Exclusions" not in report
        assert "## Exclusion Summary" not in report


class TestExclusions:
    def _results(self):
        return [
            validate_resources(
                [Ec2Resource(id="i-2", name="batch", region=REGION, state="stopped")],
                [],
                "ec2",
                REGION,
            ),
            validate_resources(
                [LambdaResource(id="fn", name="auth-edge", region=REGION, is_edge_function=True)],
                [],
                "lambda",
                REGION,
            ),
            validate_resources([SqsResource(id="q", name="orders", region=REGION)], [], "sqs", REGION),
            validate_resources([S3Resource(id="b", name="assets", region=REGION)], [], "s3", REGION),
            validate_resources(
                [EcsServiceResource(id="s", name="api", region=REGION, cluster_name="prod")],
                [],
                "ecs",
                REGION,
            ),
            validate_resources(
                [Ec2Resource(id="i-3", name="locked", region="eu-west-1")],
                [],
                "ec2",
                "eu-west-1",
                False,
            ),
        ]

    def test_sections_in_fixed_order(self):
        report = _report(self._results())
        headings = [
            "## Summary",
            "## Exclusions",
            "### Stopped/Inactive Resources",
            "### Configuration Required",
            "### Lambda@Edge Functions",
            "### No CloudWatch Activity",
            "### Permissions Issues",
            "## Exclusion Summary",
        ]
        positions = [report.index(h) for h in headings]

        assert positions == sorted(positions)

    def test_stopped_table(self):
        report = _report(self._results())

        assert "| Resource | Service | Region | State |" in report
        assert "| batch | EC2 | us-east-1 | stopped |" in report

    def test_config_required_subsections(self):
        report = _report(self._results())

        assert "#### S3 Request Metrics Not Enabled" in report
        assert "#### ECS Container Insights Not Enabled" in report
        assert "- `api` on cluster `prod` (us-east-1)" in report

    def test_edge_dimension_hint(self):
        report = _report(self._results())
        assert "CloudWatch dimension: `us-east-1.auth-edge`" in report

    def test_no_activity_grouped_by_service_region(self):
        report = _report(self._results())
        assert "**SQS/US-EAST-1:**" in report

    def test_permissions_grouped_by_namespace(self):
        report = _report(self._results())
        assert "**AWS/EC2:**" in report
        assert "- `locked` (eu-west-1)" in report

    def test_exclusion_summary_rows(self):
        report = _report(self._results())

        assert "| Category | Count | Rationale |" in report
        assert "| Stopped Resources | 1 |" in report
        assert "| Config Required | 2 |" in report
        assert "| Lambda@Edge | 1 |" in report
        assert "| No Activity | 1 |" in report
        assert "| Permissions | 1 |" in report
        assert "| **Total Excluded** | **6** | |" in report
        assert "| Unknown |" not in report

    def test_empty_sections_omitted(self):
        report = _report(self._results())

        assert "### Load Balancers With No Targets" not in report
        assert "### Unable to Determine Cause" not in report


class TestLoadBalancerSections:
    def test_warnings_section_lists_unhealthy_targets(self):
        health = LoadBalancerTargetHealth(registered_target_count=1, unhealthy_target_count=1)
        alb = AlbResource(
            id="a",
            name="checkout",
            region=REGION,
            arn=f"arn:aws:elasticloadbalancing:{REGION}:1:loadbalancer/app/checkout/abc",
            target_health=health,
        )
        report = _report([validate_resources([alb], ["app/checkout/abc"], "alb", REGION)])

        assert "- Warnings: 1" in report
        assert "## Warnings" in report
        assert report.index("## Warnings") < report.index(NO_EXCLUSIONS_NOTE)
        assert "`checkout` (ALB, us-east-1)" in report

    def test_no_targets_and_baseline_unhealthy_sections(self):
        empty = AlbResource(id="e", name="empty", region=REGION, target_health=LoadBalancerTargetHealth())
        sick = AlbResource(
            id="s",
            name="sick",
            region=REGION,
            target_health=LoadBalancerTargetHealth(registered_target_count=2, unhealthy_target_count=2),
        )
        report = _report([validate_resources([empty, sick], [], "alb", REGION)])

        assert report.index("### Load Balancers With No Targets") < report.index(
            "### Load Balancers Without Metrics And All Targets Unhealthy"
        )
        assert "| No Targets | 1 |" in report
        assert "| All Targets Unhealthy | 1 |" in report


class TestResourceState:
    def test_ecs_service_state(self):
        resource = EcsServiceResource(id="s", name="api", region=REGION, running_count=0)
        assert resource_state(resource) == "runningCount=0"

    def test_ec2_state(self):
        assert resource_state(Ec2Resource(id="i", name="i", region=REGION, state="stopped")) == "stopped"
