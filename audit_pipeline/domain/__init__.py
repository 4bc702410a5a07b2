"""Domain models used across application layer boundaries."""

from .completeness import domain_classify_completeness, domain_coerce_number, domain_coerce_text
from .models import (
    TERMINAL_SEGMENT_STATUSES,
    HealthStatus,
    OverallStatus,
    SegmentStatus,
    domain_parse_overall_status,
    domain_parse_segment_status,
)
from .segments import (
    DEMOGRAPHICS_DEFINITION,
    DEMOGRAPHICS_SEGMENT,
    KNOWN_SEGMENT_NAMES,
    ORGANIC_SEARCH_DEFINITION,
    ORGANIC_SEARCH_SEGMENT,
    SEGMENT_DEFINITIONS,
    SegmentDefinition,
    domain_get_segment_definition,
)

__all__ = [
    "DEMOGRAPHICS_DEFINITION",
    "DEMOGRAPHICS_SEGMENT",
    "KNOWN_SEGMENT_NAMES",
    "ORGANIC_SEARCH_DEFINITION",
    "ORGANIC_SEARCH_SEGMENT",
    "SEGMENT_DEFINITIONS",
    "TERMINAL_SEGMENT_STATUSES",
    "HealthStatus",
    "OverallStatus",
    "SegmentDefinition",
    "SegmentStatus",
    "domain_classify_completeness",
    "domain_coerce_number",
    "domain_coerce_text",
    "domain_get_segment_definition",
    "domain_parse_overall_status",
    "domain_parse_segment_status",
]
