"""
Tests for validation summaries and filtering discovery to validated resources.
"""

import pytest

from nocwatch.core.errors import ValidationError
from nocwatch.resources import (
    AlbResource,
    DiscoveredResources,
    Ec2Resource,
    LoadBalancerTargetHealth,
    NlbResource,
)
from nocwatch.validation import (
    filter_validated_resources,
    summarize_validation,
    validate_resources,
)

REGION = "us-east-1"


def _alb(name, health=None):
    return AlbResource(
        id=name,
        name=name,
        region=REGION,
        arn=f"arn:aws:elasticloadbalancing:{REGION}:1:loadbalancer/app/{name}/abc",
        target_health=health,
    )


UNHEALTHY = LoadBalancerTargetHealth(registered_target_count=2, unhealthy_target_count=2)
HEALTHY = LoadBalancerTargetHealth(registered_target_count=2, healthy_target_count=2)


class TestSummarizeValidation:
    def test_totals(self):
        resources = [Ec2Resource(id=f"i-{n}", name=f"w{n}", region=REGION) for n in range(3)]
        result = validate_resources(resources, ["i-0", "i-1"], "ec2", REGION)

        summary = summarize_validation([result])

        assert summary.total_discovered == 3
        assert summary.total_matched == 2
        assert summary.total_unmatched == 1
        assert summary.total_matched + summary.total_unmatched == summary.total_discovered

    def test_partial_is_issue_but_not_critical(self):
        resources = [Ec2Resource(id="i-1", name="a", region=REGION), Ec2Resource(id="i-2", name="b", region=REGION)]
        summary = summarize_validation([validate_resources(resources, ["i-1"], "ec2", REGION)])

        assert summary.has_issues
        assert not summary.has_critical_issues

    def test_none_is_critical(self):
        resources = [Ec2Resource(id="i-1", name="a", region=REGION)]
        summary = summarize_validation([validate_resources(resources, [], "ec2", REGION)])

        assert summary.has_issues
        assert summary.has_critical_issues

    def test_all_ok(self):
        resources = [Ec2Resource(id="i-1", name="a", region=REGION)]
        summary = summarize_validation([validate_resources(resources, ["i-1"], "ec2", REGION)])

        assert not summary.has_issues
        assert not summary.has_critical_issues

    def test_empty_results(self):
        summary = summarize_validation([])

        assert summary.total_discovered == 0
        assert not summary.has_issues
        assert summary.warnings == ()

    def test_one_warning_per_matched_unhealthy_load_balancer(self):
        unhealthy = _alb("sick", UNHEALTHY)
        healthy = _alb("fine", HEALTHY)
        unmatched_unhealthy = _alb("quiet", UNHEALTHY)
        result = validate_resources(
            [unhealthy, healthy, unmatched_unhealthy],
            ["app/sick/abc", "app/fine/abc"],
            "alb",
            REGION,
        )

        summary = summarize_validation([result])

        assert [w.resource for w in summary.warnings] == [unhealthy]
        assert summary.warnings[0].warning_type == "baseline_unhealthy"
        assert "All 2 targets are unhealthy" in summary.warnings[0].message

    def test_warned_load_balancer_stays_matched(self):
        nlb = NlbResource(
            id="n",
            name="n",
            region=REGION,
            arn=f"arn:aws:elasticloadbalancing:{REGION}:1:loadbalancer/net/n/abc",
            target_health=UNHEALTHY,
        )
        result = validate_resources([nlb], ["net/n/abc"], "nlb", REGION)
        summary = summarize_validation([result])

        assert summary.total_matched == 1
        assert len(summary.warnings) == 1

    def test_to_dict(self):
        result = validate_resources([_alb("sick", UNHEALTHY)], ["app/sick/abc"], "alb", REGION)
        data = summarize_validation([result]).to_dict()

        assert data["total_matched"] == 1
        assert data["warnings"][0]["name"] == "sick"
        assert data["results"][0]["status"] == "ok"


class TestFilterValidatedResources:
    def _setup(self):
        a = Ec2Resource(id="i-1", name="a", region=REGION)
        b = Ec2Resource(id="i-2", name="b", region=REGION)
        discovered = DiscoveredResources.from_resources([a, b])
        results = [validate_resources([a, b], ["i-1"], "ec2", REGION)]
        return a, discovered, results

    def test_keeps_matched_only(self):
        a, discovered, results = self._setup()
        filtered = filter_validated_resources(discovered, results)

        assert filtered.ec2 == (a,)
        assert filtered.total_count() == 1

    def test_idempotent(self):
        _, discovered, results = self._setup()
        once = filter_validated_resources(discovered, results)
        revalidated = [validate_resources(list(once.ec2), ["i-1"], "ec2", REGION)]
        twice = filter_validated_resources(once, revalidated)

        assert once == twice

    def test_same_id_in_other_region_not_kept(self):
        a = Ec2Resource(id="i-1", name="a", region=REGION)
        other = Ec2Resource(id="i-1", name="a", region="us-west-2")
        discovered = DiscoveredResources.from_resources([a, other])
        results = [
            validate_resources([a], ["i-1"], "ec2", REGION),
            validate_resources([other], [], "ec2", "us-west-2"),
        ]

        assert filter_validated_resources(discovered, results).ec2 == (a,)

    def test_missing_resource_raises(self):
        a = Ec2Resource(id="i-1", name="a", region=REGION)
        stray = Ec2Resource(id="i-9", name="stray", region=REGION)
        discovered = DiscoveredResources.from_resources([a, stray])
        results = [validate_resources([a], ["i-1"], "ec2", REGION)]

        with pytest.raises(ValidationError, match="missing from validation results"):
            filter_validated_resources(discovered, results)
