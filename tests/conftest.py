"""Root test configuration."""

import logging

import pytest
import structlog

from nocwatch.alerts import create_customer
from nocwatch.resources.models import ServiceType
from nocwatch.templates.models import (
    AlertTemplate,
    CloudWatchDataSourceConfig,
    PrometheusDataSourceConfig,
    TemplateAnnotations,
    TemplateDataSources,
    TemplateDefaults,
)


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def build_template(
    template_id="ec2-critical-cpu",
    service=ServiceType.EC2,
    *,
    name=None,
    namespace="AWS/EC2",
    metric="CPUUtilization",
    dimensions=("InstanceId",),
    cloudwatch=True,
    prometheus_query=None,
    severity="critical",
    threshold=90.0,
    labels=None,
    runbook_url=None,
):
    return AlertTemplate(
        id=template_id,
        name=name or template_id.replace("-", " ").title(),
        service=ServiceType(service),
        severity=severity,
        description=f"{template_id} description",
        defaults=TemplateDefaults(threshold=threshold),
        data_sources=TemplateDataSources(
            cloudwatch=(
                CloudWatchDataSourceConfig(
                    namespace=namespace, metric=metric, dimensions=tuple(dimensions)
                )
                if cloudwatch
                else None
            ),
            prometheus=(
                PrometheusDataSourceConfig(metric="m", query=prometheus_query)
                if prometheus_query
                else None
            ),
        ),
        labels=dict(labels or {}),
        annotations=TemplateAnnotations(
            summary=f"{template_id} firing",
            description="details",
            runbook_url=runbook_url,
        ),
    )


@pytest.fixture
def make_template():
    return build_template


@pytest.fixture
def customer():
    return create_customer("Acme Corp", regions=["us-east-1", "us-west-2"])
