"""
End-to-end tests for a provisioning run, from discovery to alert rules.
"""

from datetime import datetime, timezone

import pytest

from nocwatch.alerts import DataSourceRef
from nocwatch.pipeline import run_pipeline, run_validation
from nocwatch.providers import StaticMetricSource
from nocwatch.resources import (
    AlbResource,
    DiscoveredResources,
    Ec2Resource,
    LambdaResource,
    LoadBalancerTargetHealth,
    RdsResource,
    ServiceType,
)
from nocwatch.templates import DataSourceType
from nocwatch.validation import ProvisioningRun

REGION = "us-east-1"
DATA_SOURCES = {DataSourceType.CLOUDWATCH: DataSourceRef(DataSourceType.CLOUDWATCH, "cw-uid")}
PROMETHEUS = DataSourceRef(DataSourceType.PROMETHEUS, "prom-uid")
PROM_QUERY = 'rate(cpu{instance=~"{{ $resource_pattern }}"}[5m])'


class _Store:
    def __init__(self, templates):
        self.templates = templates

    def load_all_templates(self):
        return list(self.templates)


@pytest.fixture
def discovered():
    return DiscoveredResources.from_resources(
        [
            Ec2Resource(id="i-1", name="web-1", region=REGION),
            Ec2Resource(id="i-2", name="batch", region=REGION, state="stopped"),
            RdsResource(id="orders", name="orders", region=REGION, is_aurora=True),
            RdsResource(id="billing", name="billing", region=REGION, has_read_replicas=True),
            LambdaResource(id="fn", name="auth-edge", region=REGION, is_edge_function=True),
            AlbResource(
                id="lb",
                name="lb",
                region=REGION,
                arn=f"arn:aws:elasticloadbalancing:{REGION}:1:loadbalancer/app/lb/abc",
                target_health=LoadBalancerTargetHealth(),
            ),
        ]
    )


@pytest.fixture
def metric_source():
    return StaticMetricSource(
        {
            "AWS/EC2": {REGION: {"InstanceId": ["i-1"]}},
            "AWS/RDS": {REGION: {"DBClusterIdentifier": ["orders"], "DBInstanceIdentifier": ["billing"]}},
            "AWS/Lambda": {REGION: {"FunctionName": [f"{REGION}.auth-edge"]}},
            "AWS/ApplicationELB": {REGION: {"LoadBalancer": ["app/lb/abc"]}},
        }
    )


@pytest.fixture
def store(make_template):
    return _Store(
        [
            make_template("ec2-critical-cpu"),
            make_template("ec2-custom", severity="warning"),
            make_template(
                "aurora-critical-cpu", ServiceType.RDS, namespace="AWS/RDS", dimensions=("DBClusterIdentifier",)
            ),
            make_template(
                "rds-critical-replica-lag",
                ServiceType.RDS,
                namespace="AWS/RDS",
                dimensions=("DBInstanceIdentifier",),
            ),
            make_template(
                "lambda-critical-errors", ServiceType.LAMBDA, namespace="AWS/Lambda", dimensions=("FunctionName",)
            ),
            make_template("alb-5xx-errors", ServiceType.ALB, namespace="AWS/ApplicationELB", dimensions=()),
        ]
    )


class TestRunValidation:
    def test_validated_resources(self, discovered, metric_source):
        summary, validated = run_validation(discovered, metric_source)

        assert summary.total_discovered == 6
        assert summary.total_matched == 4
        assert {r.id for r in validated.all()} == {"i-1", "orders", "billing", "fn"}


class TestRunPipeline:
    def test_all_matched_templates_selected_by_default(self, discovered, metric_source, store, customer):
        result = run_pipeline(discovered, metric_source, store, customer, DATA_SOURCES)

        assert sorted(r.id for r in result.rules) == [
            "aurora-critical-cpu-us-east-1",
            "ec2-critical-cpu-us-east-1",
            "ec2-custom-us-east-1",
            "lambda-critical-errors-us-east-1",
            "rds-critical-replica-lag-us-east-1",
        ]
        assert all(r.query.dimension_values == ("*",) for r in result.rules)
        assert [t.id for t in result.match_result.unmatched_templates] == ["alb-5xx-errors"]

    def test_default_selection(self, discovered, metric_source, store, customer):
        result = run_pipeline(
            discovered, metric_source, store, customer, DATA_SOURCES, use_default_selection=True
        )

        ids = {r.source_template.id for r in result.rules}
        assert "ec2-custom" not in ids
        assert "rds-critical-replica-lag" in ids
        assert result.selection.skipped_for("user_deselected")[0].template.id == "ec2-custom"

    def test_explicit_selection_wins(self, discovered, metric_source, store, customer):
        result = run_pipeline(
            discovered,
            metric_source,
            store,
            customer,
            DATA_SOURCES,
            selected_template_ids=["ec2-custom"],
            use_default_selection=True,
        )

        assert [r.id for r in result.rules] == ["ec2-custom-us-east-1"]

    def test_customizations(self, discovered, metric_source, store, customer):
        result = run_pipeline(
            discovered,
            metric_source,
            store,
            customer,
            DATA_SOURCES,
            selected_template_ids=["ec2-critical-cpu"],
            customizations={"ec2-critical-cpu": {"threshold": 70}},
        )

        assert result.rules[0].threshold.value == 70.0

    def test_prometheus_data_source_type(self, discovered, metric_source, make_template, customer):
        store = _Store([make_template(prometheus_query=PROM_QUERY)])

        result = run_pipeline(
            discovered,
            metric_source,
            store,
            customer,
            {DataSourceType.PROMETHEUS: PROMETHEUS},
            data_source_type="prometheus",
        )

        assert len(result.rules) == 1
        rule = result.rules[0]
        assert rule.data_source == PROMETHEUS
        assert rule.query.expr == 'rate(cpu{instance=~"web-1"}[5m])'

    def test_requested_type_wins_over_cloudwatch(self, discovered, metric_source, make_template, customer):
        store = _Store([make_template(prometheus_query=PROM_QUERY)])

        result = run_pipeline(
            discovered,
            metric_source,
            store,
            customer,
            {**DATA_SOURCES, DataSourceType.PROMETHEUS: PROMETHEUS},
            data_source_type=DataSourceType.PROMETHEUS,
        )

        assert [r.query.type for r in result.rules] == ["prometheus"]

    def test_unsupported_customization_skips_only_that_template(
        self, discovered, metric_source, store, customer
    ):
        result = run_pipeline(
            discovered,
            metric_source,
            store,
            customer,
            {**DATA_SOURCES, DataSourceType.PROMETHEUS: PROMETHEUS},
            selected_template_ids=["ec2-critical-cpu", "ec2-custom"],
            customizations={"ec2-custom": {"data_source_type": "prometheus"}},
        )

        assert [r.id for r in result.rules] == ["ec2-critical-cpu-us-east-1"]

    def test_operator_customization(self, discovered, metric_source, store, customer):
        result = run_pipeline(
            discovered,
            metric_source,
            store,
            customer,
            DATA_SOURCES,
            selected_template_ids=["ec2-critical-cpu"],
            customizations={"ec2-critical-cpu": {"threshold": 5, "threshold_operator": "lt"}},
        )

        assert result.rules[0].to_dict()["condition"] == "< 5"

    def test_no_data_source_no_rules(self, discovered, metric_source, store, customer):
        result = run_pipeline(discovered, metric_source, store, customer, {})

        assert result.rules == ()
        assert result.match_result.matches

    def test_report_and_run_id(self, discovered, metric_source, store, customer):
        run = ProvisioningRun(customer=customer.name)
        result = run_pipeline(
            discovered,
            metric_source,
            store,
            customer,
            DATA_SOURCES,
            run=run,
            generated_at=datetime(2026, 1, 2, 3, 4, tzinfo=timezone.utc),
        )

        assert result.run_id == run.run_id
        assert "**Customer:** Acme Corp" in result.report
        assert "### Load Balancers With No Targets" in result.report
        assert result.to_dict()["alerts_summary"]["total_count"] == len(result.rules)

    def test_runs_isolated(self, discovered, metric_source, store, customer):
        run_pipeline(discovered, metric_source, store, customer, DATA_SOURCES)
        first = len(metric_source.calls)
        run_pipeline(discovered, metric_source, store, customer, DATA_SOURCES)

        assert len(metric_source.calls) == 2 * first
