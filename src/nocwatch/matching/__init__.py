"""Template matching and default template selection."""

from nocwatch.matching.matcher import (
    MatchResult,
    TemplateMatcher,
    group_matches_by_service,
    group_matches_by_template,
)
from nocwatch.matching.selection import (
    DetectedFeatures,
    SelectionSummary,
    build_selection_summary,
    default_template_ids,
    detect_features,
    select_matches,
)

__all__ = [
    "DetectedFeatures",
    "MatchResult",
    "SelectionSummary",
    "TemplateMatcher",
    "build_selection_summary",
    "default_template_ids",
    "detect_features",
    "group_matches_by_service",
    "group_matches_by_template",
    "select_matches",
]
