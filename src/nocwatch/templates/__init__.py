"""
Alert templates: models and the YAML-backed template store.
"""

from .loader import YamlTemplateStore, parse_template
from .models import (
    AlertTemplate,
    CloudWatchDataSourceConfig,
    DataSourceType,
    MatchedResource,
    PrometheusDataSourceConfig,
    TemplateDataSources,
    TemplateDefaults,
    TemplateMatch,
    Threshold,
    ThresholdOperator,
)

__all__ = [
    "AlertTemplate",
    "CloudWatchDataSourceConfig",
    "DataSourceType",
    "MatchedResource",
    "PrometheusDataSourceConfig",
    "TemplateDataSources",
    "TemplateDefaults",
    "TemplateMatch",
    "Threshold",
    "ThresholdOperator",
    "YamlTemplateStore",
    "parse_template",
]
