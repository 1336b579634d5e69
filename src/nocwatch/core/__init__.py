"""Core modules for nocwatch - centralized definitions and utilities."""

from nocwatch.core.errors import (
    ConfigurationError,
    ExitCode,
    NocwatchError,
    ProviderError,
    ValidationError,
    format_error_message,
    main_with_error_handling,
)
from nocwatch.core.tiers import (
    CONDITIONAL_TEMPLATES,
    CORE_TEMPLATES,
    TUNING_REQUIRED_TEMPLATES,
    TemplateTier,
    classify_template_tier,
)

__all__ = [
    # Errors
    "ExitCode",
    "NocwatchError",
    "ConfigurationError",
    "ProviderError",
    "ValidationError",
    "main_with_error_handling",
    "format_error_message",
    # Tiers
    "TemplateTier",
    "CORE_TEMPLATES",
    "CONDITIONAL_TEMPLATES",
    "TUNING_REQUIRED_TEMPLATES",
    "classify_template_tier",
]
