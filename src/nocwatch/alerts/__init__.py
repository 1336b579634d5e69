"""
Alert rule models and the rule builder.
"""

from nocwatch.alerts.builder import (
    AlertBuilder,
    AlertsSummary,
    customize_matches,
    export_rules,
    interpolate_prometheus_query,
    summarize_alerts,
)
from nocwatch.alerts.models import (
    AlertConfiguration,
    AlertRule,
    CloudWatchQuery,
    Customer,
    DataSourceRef,
    PendingAlert,
    PrometheusQuery,
    count_alerts_by_severity,
    create_customer,
    group_alerts_by_service,
)

__all__ = [
    "AlertBuilder",
    "AlertConfiguration",
    "AlertRule",
    "AlertsSummary",
    "CloudWatchQuery",
    "Customer",
    "DataSourceRef",
    "PendingAlert",
    "PrometheusQuery",
    "count_alerts_by_severity",
    "create_customer",
    "customize_matches",
    "export_rules",
    "group_alerts_by_service",
    "interpolate_prometheus_query",
    "summarize_alerts",
]
