"""
Tests for root-cause classification of resources without telemetry.
"""

from dataclasses import dataclass

import pytest

from nocwatch.resources import (
    AlbResource,
    ApiGatewayResource,
    Ec2Resource,
    EcsClusterResource,
    EcsServiceResource,
    EksResource,
    ElastiCacheResource,
    LambdaResource,
    LoadBalancerTargetHealth,
    NlbResource,
    RdsResource,
    S3Resource,
    SqsResource,
)
from nocwatch.validation import RootCause, diagnose, diagnose_unmatched
from nocwatch.validation.diagnostics import PERMISSIONS_RECOMMENDATION, UNKNOWN_RECOMMENDATION

REGION = "us-east-1"


class TestPermissions:
    @pytest.mark.parametrize(
        "resource",
        [
            Ec2Resource(id="i-1", name="web", region=REGION, state="stopped"),
            LambdaResource(id="fn", name="fn", region=REGION, is_edge_function=True),
            S3Resource(id="b", name="b", region=REGION),
        ],
    )
    def test_inaccessible_namespace_wins(self, resource):
        diagnosis = diagnose(resource, namespace_accessible=False)

        assert diagnosis.root_cause == RootCause.PERMISSIONS
        assert diagnosis.recommendation == PERMISSIONS_RECOMMENDATION


class TestEc2:
    def test_stopped_instance(self):
        diagnosis = diagnose(Ec2Resource(id="i-1", name="web", region=REGION, state="stopped"), True)

        assert diagnosis.root_cause == RootCause.STOPPED_RESOURCE
        assert "stopped" in diagnosis.recommendation

    def test_running_instance_is_unknown(self):
        diagnosis = diagnose(Ec2Resource(id="i-1", name="web", region=REGION), True)
        assert diagnosis.root_cause == RootCause.UNKNOWN


class TestRds:
    def test_not_available(self):
        resource = RdsResource(id="db", name="db", region=REGION, status="stopped")
        assert diagnose(resource, True).root_cause == RootCause.STOPPED_RESOURCE

    def test_available_aurora_cluster(self):
        resource = RdsResource(id="c", name="c", region=REGION, is_aurora=True)
        diagnosis = diagnose(resource, True)

        assert diagnosis.root_cause == RootCause.UNKNOWN
        assert "DBClusterIdentifier" in diagnosis.recommendation

    def test_available_instance(self):
        resource = RdsResource(id="db", name="db", region=REGION)
        assert diagnose(resource, True).root_cause == RootCause.UNKNOWN


class TestLambda:
    def test_edge_function(self):
        resource = LambdaResource(id="fn", name="fn", region=REGION, is_edge_function=True)
        assert diagnose(resource, True).root_cause == RootCause.EDGE_FUNCTION

    def test_never_invoked(self):
        resource = LambdaResource(id="fn", name="fn", region=REGION)
        assert diagnose(resource, True).root_cause == RootCause.NO_ACTIVITY


class TestEcs:
    def test_service_without_container_insights(self):
        resource = EcsServiceResource(id="s", name="api", region=REGION, cluster_name="prod")
        diagnosis = diagnose(resource, True)

        assert diagnosis.root_cause == RootCause.CONFIG_REQUIRED
        assert '"prod"' in diagnosis.recommendation

    def test_cluster_without_container_insights(self):
        resource = EcsClusterResource(id="c", name="prod", region=REGION)
        diagnosis = diagnose(resource, True)

        assert diagnosis.root_cause == RootCause.CONFIG_REQUIRED
        assert '"prod"' in diagnosis.recommendation

    def test_service_with_no_running_tasks(self):
        resource = EcsServiceResource(
            id="s",
            name="api",
            region=REGION,
            container_insights_enabled=True,
            running_count=0,
            desired_count=2,
        )
        diagnosis = diagnose(resource, True)

        assert diagnosis.root_cause == RootCause.STOPPED_RESOURCE
        assert "desired: 2" in diagnosis.recommendation

    def test_cluster_with_no_running_tasks(self):
        resource = EcsClusterResource(id="c", name="prod", region=REGION, container_insights_enabled=True)
        assert diagnose(resource, True).root_cause == RootCause.STOPPED_RESOURCE

    def test_running_service_is_unknown(self):
        resource = EcsServiceResource(
            id="s", name="api", region=REGION, container_insights_enabled=True, running_count=3
        )
        assert diagnose(resource, True).root_cause == RootCause.UNKNOWN


class TestS3:
    def test_request_metrics_disabled(self):
        resource = S3Resource(id="b", name="b", region=REGION)
        assert diagnose(resource, True).root_cause == RootCause.CONFIG_REQUIRED

    def test_request_metrics_enabled(self):
        resource = S3Resource(id="b", name="b", region=REGION, has_request_metrics=True)
        assert diagnose(resource, True).root_cause == RootCause.UNKNOWN


class TestLoadBalancers:
    def test_inactive(self):
        resource = AlbResource(id="a", name="a", region=REGION, state="provisioning")
        diagnosis = diagnose(resource, True)

        assert diagnosis.root_cause == RootCause.STOPPED_RESOURCE
        assert diagnosis.recommendation.startswith("ALB")

    def test_no_registered_targets(self):
        resource = NlbResource(
            id="n", name="n", region=REGION, target_health=LoadBalancerTargetHealth()
        )
        diagnosis = diagnose(resource, True)

        assert diagnosis.root_cause == RootCause.NO_TARGETS
        assert diagnosis.recommendation.startswith("NLB")

    def test_all_targets_unhealthy(self):
        health = LoadBalancerTargetHealth(registered_target_count=3, unhealthy_target_count=3)
        resource = AlbResource(id="a", name="a", region=REGION, target_health=health)
        diagnosis = diagnose(resource, True)

        assert diagnosis.root_cause == RootCause.BASELINE_UNHEALTHY
        assert "3 targets" in diagnosis.recommendation

    def test_healthy_targets_without_traffic(self):
        health = LoadBalancerTargetHealth(registered_target_count=2, healthy_target_count=2)
        resource = AlbResource(id="a", name="a", region=REGION, target_health=health)
        assert diagnose(resource, True).root_cause == RootCause.NO_ACTIVITY

    def test_missing_target_health(self):
        resource = AlbResource(id="a", name="a", region=REGION)
        assert diagnose(resource, True).root_cause == RootCause.NO_ACTIVITY


class TestOtherServices:
    def test_elasticache_not_available(self):
        resource = ElastiCacheResource(id="r", name="r", region=REGION, status="modifying")
        assert diagnose(resource, True).root_cause == RootCause.STOPPED_RESOURCE

    def test_elasticache_available(self):
        resource = ElastiCacheResource(id="r", name="r", region=REGION)
        assert diagnose(resource, True).root_cause == RootCause.UNKNOWN

    def test_api_gateway(self):
        resource = ApiGatewayResource(id="api", name="api", region=REGION)
        assert diagnose(resource, True).root_cause == RootCause.NO_ACTIVITY

    def test_sqs(self):
        resource = SqsResource(id="q", name="q", region=REGION)
        assert diagnose(resource, True).root_cause == RootCause.NO_ACTIVITY

    def test_eks(self):
        resource = EksResource(id="k", name="k", region=REGION)
        assert diagnose(resource, True).root_cause == RootCause.CONFIG_REQUIRED


@dataclass(frozen=True)
class _Unrecognized:
    id: str = "x"
    name: str = "x"
    region: str = REGION
    service: str = "cloudfront"


class TestDeterminism:
    def test_unrecognized_resource_is_unknown(self):
        diagnosis = diagnose(_Unrecognized(), True)  # type: ignore[arg-type]

        assert diagnosis.root_cause == RootCause.UNKNOWN
        assert diagnosis.recommendation == UNKNOWN_RECOMMENDATION

    def test_same_input_same_diagnosis(self):
        resource = EcsServiceResource(id="s", name="api", region=REGION, cluster_name="prod")
        assert diagnose(resource, True) == diagnose(resource, True)

    def test_diagnose_unmatched(self):
        resource = SqsResource(id="q", name="q", region=REGION)
        diagnostic = diagnose_unmatched(resource, True)

        assert diagnostic.resource is resource
        assert diagnostic.matched is False
        assert diagnostic.root_cause == RootCause.NO_ACTIVITY
        assert diagnostic.to_dict()["root_cause"] == "no_activity"
