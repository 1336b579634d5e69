"""
Telemetry validation: decide which discovered resources can be monitored and
explain why the rest cannot.
"""

from nocwatch.validation.context import ProvisioningRun
from nocwatch.validation.diagnostics import diagnose, diagnose_unmatched
from nocwatch.validation.identity import IdentityResolver, resolve_identifiers
from nocwatch.validation.models import (
    Diagnosis,
    LoadBalancerWarning,
    ResourceDiagnostic,
    RootCause,
    ServiceValidationResult,
    ValidationStatus,
    ValidationSummary,
)
from nocwatch.validation.report import generate_validation_report
from nocwatch.validation.summary import filter_validated_resources, summarize_validation
from nocwatch.validation.validator import ResourceValidator, validate_resources

__all__ = [
    "Diagnosis",
    "IdentityResolver",
    "LoadBalancerWarning",
    "ProvisioningRun",
    "ResourceDiagnostic",
    "ResourceValidator",
    "RootCause",
    "ServiceValidationResult",
    "ValidationStatus",
    "ValidationSummary",
    "diagnose",
    "diagnose_unmatched",
    "filter_validated_resources",
    "generate_validation_report",
    "resolve_identifiers",
    "summarize_validation",
    "validate_resources",
]
