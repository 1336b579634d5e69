"""
Tests for resolving discovered resources to CloudWatch dimension values.
"""

from nocwatch.resources import (
    AlbResource,
    Ec2Resource,
    LambdaResource,
    NlbResource,
    RdsResource,
    ServiceType,
    SqsResource,
)
from nocwatch.validation import IdentityResolver, resolve_identifiers
from nocwatch.validation.identity import load_balancer_arn_suffix


class TestPrimaryIdentifiers:
    def test_ec2_uses_instance_id(self):
        resource = Ec2Resource(id="i-0abc", name="web-1", region="us-east-1")
        assert resolve_identifiers(resource) == ["i-0abc"]

    def test_lambda_uses_function_name(self):
        resource = LambdaResource(id="arn-ish", name="process-orders", region="us-east-1")
        assert resolve_identifiers(resource) == ["process-orders"]

    def test_rds_instance_uses_id(self):
        resource = RdsResource(id="orders-db", name="orders-db", region="us-east-1")
        assert resolve_identifiers(resource) == ["orders-db"]

    def test_aurora_prefers_cluster_identifier(self):
        resource = RdsResource(
            id="orders-instance-1",
            name="orders",
            region="us-east-1",
            is_aurora=True,
            cluster_identifier="orders-cluster",
        )
        assert resolve_identifiers(resource) == ["orders-cluster"]

    def test_aurora_without_cluster_identifier_falls_back_to_id(self):
        resource = RdsResource(id="orders", name="orders", region="us-east-1", is_aurora=True)
        assert resolve_identifiers(resource) == ["orders"]


class TestLoadBalancerArnSuffix:
    def test_alb_suffix(self):
        resource = AlbResource(
            id="my-alb",
            name="my-alb",
            region="us-east-1",
            arn="arn:aws:elasticloadbalancing:us-east-1:123456789012:loadbalancer/app/my-alb/50dc6c495c0c9188",
        )
        assert load_balancer_arn_suffix(resource) == "app/my-alb/50dc6c495c0c9188"

    def test_nlb_suffix(self):
        resource = NlbResource(
            id="edge",
            name="edge",
            region="us-east-1",
            arn="arn:aws:elasticloadbalancing:us-east-1:123456789012:loadbalancer/net/edge/abc123",
        )
        assert resolve_identifiers(resource) == ["net/edge/abc123"]

    def test_malformed_arn_falls_back_to_name(self):
        resource = AlbResource(id="my-alb", name="my-alb", region="us-east-1", arn="not-an-arn")
        assert load_balancer_arn_suffix(resource) == "my-alb"

    def test_missing_arn_falls_back_to_name(self):
        resource = AlbResource(id="my-alb", name="my-alb", region="us-east-1")
        assert load_balancer_arn_suffix(resource) == "my-alb"


class TestEdgeFunctionAlias:
    def test_edge_function_gets_region_prefixed_alias(self):
        resource = LambdaResource(id="fn", name="auth-edge", region="us-east-1", is_edge_function=True)
        assert resolve_identifiers(resource) == ["auth-edge", "us-east-1.auth-edge"]

    def test_regular_function_has_no_alias(self):
        resource = LambdaResource(id="fn", name="auth", region="us-east-1")
        assert resolve_identifiers(resource) == ["auth"]

    def test_alias_matches_live_value(self):
        resource = LambdaResource(id="fn", name="auth-edge", region="eu-west-1", is_edge_function=True)
        assert IdentityResolver().is_present(resource, ["eu-west-1.auth-edge"])


class TestIdentityResolver:
    def test_match_is_case_insensitive(self):
        resource = Ec2Resource(id="i-0ABC", name="web", region="us-east-1")
        assert IdentityResolver().is_present(resource, ["i-0abc"])

    def test_absent_identifier(self):
        resource = Ec2Resource(id="i-1", name="web", region="us-east-1")
        assert not IdentityResolver().is_present(resource, ["i-2", "i-3"])

    def test_empty_live_set(self):
        resource = Ec2Resource(id="i-1", name="web", region="us-east-1")
        assert not IdentityResolver().is_present(resource, [])

    def test_register_alias(self):
        resolver = IdentityResolver()
        resolver.register_alias(ServiceType.SQS, lambda r: [r.queue_url.rsplit("/", 1)[-1]])
        resource = SqsResource(
            id="q",
            name="orders",
            region="us-east-1",
            queue_url="https://sqs.us-east-1.amazonaws.com/123/orders-fifo",
        )

        assert resolver.resolve(resource) == ["orders", "orders-fifo"]
        assert resolver.is_present(resource, ["ORDERS-FIFO"])

    def test_duplicate_candidates_collapsed(self):
        resolver = IdentityResolver(alias_rules={})
        resolver.register_alias("ec2", lambda r: [r.id.upper()])
        resource = Ec2Resource(id="i-1", name="web", region="us-east-1")

        assert resolver.resolve(resource) == ["i-1"]

    def test_empty_alias_rules_disable_edge_alias(self):
        resolver = IdentityResolver(alias_rules={})
        resource = LambdaResource(id="fn", name="auth-edge", region="us-east-1", is_edge_function=True)
        assert resolver.resolve(resource) == ["auth-edge"]

    def test_register_alias_does_not_leak_between_resolvers(self):
        first = IdentityResolver()
        first.register_alias(ServiceType.EC2, lambda r: [r.name])
        resource = Ec2Resource(id="i-1", name="web", region="us-east-1")

        assert IdentityResolver().resolve(resource) == ["i-1"]
