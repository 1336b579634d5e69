"""
Alert template tier definitions.

Template ids are grouped into tiers:
- core: always selected by default (outages, critical failures)
- conditional: selected only when the feature it depends on is detected
- tuning_required: needs a per-environment baseline, never auto-selected

The sets are not strictly disjoint: an id listed as both core and conditional
classifies as core and is always selected.

Tier membership lives here, keyed by template id, rather than on the template
records themselves. A template added to the template store without being added
below falls into the ``uncategorized`` bucket and is never selected by default.
Moving the tier onto the template definition would make that visible at load
time.
"""

from __future__ import annotations

from enum import StrEnum


class TemplateTier(StrEnum):
    """Default-selection tier of an alert template."""

    CORE = "core"
    CONDITIONAL = "conditional"
    TUNING_REQUIRED = "tuning_required"
    UNCATEGORIZED = "uncategorized"


# Feature flags a conditional template can depend on (see matching.selection)
FEATURE_LABELS: dict[str, str] = {
    "rds_has_replicas": "RDS read replicas",
    "aurora_has_serverless": "Aurora Serverless v2",
    "lambda_has_dlq": "Lambda dead letter queue",
    "elasticache_has_replication": "ElastiCache replication",
    "ecs_has_auto_scaling": "ECS service auto-scaling",
    "sqs_has_dlq": "SQS dead letter queue",
}

CORE_TEMPLATES: frozenset[str] = frozenset(
    {
        # ACM
        "acm-certificate-expiring-critical",
        # ALB
        "alb-unhealthy-hosts",
        "alb-no-healthy-hosts",
        "alb-5xx-errors",
        "alb-critical-target-5xx-errors",
        # API Gateway
        "apigateway-critical-5xx-errors",
        # Aurora
        "aurora-connectivity-loss",
        "aurora-critical-cpu",
        "aurora-critical-memory",
        "aurora-critical-replica-lag",
        "aurora-low-storage",
        # EC2
        "ec2-critical-cpu",
        "ec2-status-check-failed",
        # ECS
        "ecs-critical-cpu",
        "ecs-critical-memory",
        # EKS
        "eks-node-not-ready",
        # ElastiCache
        "elasticache-critical-cpu",
        "elasticache-critical-memory-usage",
        "elasticache-connectivity-loss",
        # Lambda
        "lambda-critical-errors",
        # NLB
        "nlb-unhealthy-hosts",
        "nlb-no-healthy-hosts",
        # RDS
        "rds-critical-cpu",
        "rds-critical-memory",
        "rds-low-storage",
        "rds-connectivity-loss",
        # S3
        "s3-5xx-errors",
    }
)

# template id -> feature flag that must be detected for it to be selected
CONDITIONAL_TEMPLATES: dict[str, str] = {
    "rds-critical-replica-lag": "rds_has_replicas",
    "aurora-critical-replica-lag": "rds_has_replicas",
    "aurora-serverless-acu-high": "aurora_has_serverless",
    "lambda-dead-letter-errors": "lambda_has_dlq",
    "elasticache-critical-replication-lag": "elasticache_has_replication",
}

# template id -> why it needs tuning before it can be enabled
TUNING_REQUIRED_TEMPLATES: dict[str, str] = {
    "alb-4xx-errors": "4xx errors are client-caused and often not actionable",
    "apigateway-4xx-errors": "4xx errors are client-caused and often not actionable",
    "s3-4xx-errors": "4xx errors are client-caused and often not actionable",
    "nlb-tcp-client-resets": "TCP reset threshold needs a traffic baseline",
    "nlb-tcp-target-resets": "TCP reset threshold needs a traffic baseline",
    "nlb-tcp-elb-resets": "TCP reset threshold needs a traffic baseline",
    "ecs-running-task-count": "Needs per-service desired count configuration",
    "ecs-pending-task-count": "Needs per-service desired count configuration",
    "elasticache-critical-evictions": "Acceptable eviction levels vary by application",
    "alb-rejected-connections": "Needs a baseline for traffic patterns",
    "acm-certificate-expiring-soon": "Depends on the certificate management process",
    "aurora-blocked-transactions": "Needs a transaction baseline",
    "aurora-critical-deadlocks": "Needs a transaction baseline",
    "sqs-message-age": "Threshold varies by use case (real-time vs batch)",
}


def classify_template_tier(template_id: str) -> TemplateTier:
    """Return the tier a template id belongs to.

    Core membership wins over the other sets, matching the order in which
    defaults are assembled.
    """
    if template_id in CORE_TEMPLATES:
        return TemplateTier.CORE
    if template_id in CONDITIONAL_TEMPLATES:
        return TemplateTier.CONDITIONAL
    if template_id in TUNING_REQUIRED_TEMPLATES:
        return TemplateTier.TUNING_REQUIRED
    return TemplateTier.UNCATEGORIZED


def get_required_feature(template_id: str) -> str | None:
    """Feature flag a conditional template depends on, if any."""
    return CONDITIONAL_TEMPLATES.get(template_id)


def get_tuning_reason(template_id: str) -> str:
    """Human-readable reason a template requires tuning."""
    return TUNING_REQUIRED_TEMPLATES.get(template_id, "Requires per-environment tuning")
