"""Static catalogue of audit job segments known at build time."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Final

from .completeness import domain_coerce_number, domain_coerce_text
from .models import SegmentStatus

DEMOGRAPHICS_SEGMENT: Final[str] = "demographics"
ORGANIC_SEARCH_SEGMENT: Final[str] = "organic_search"


@dataclass(frozen=True)
class SegmentDefinition:
    """Immutable description of one segment and its persistence shape.

    Attributes:
        name: Stage name carried by channel messages.
        processing_mode: `synchronous` or `asynchronous`.
        status_column: Job table column owned by this segment.
        result_table: Segment result table keyed by job id.
        field_names: Fixed result field set, in column order.
        coerce_value: Coercion applied to each raw field value.
        missing_reference_status: Outcome recorded when reference data is absent.
        payload_field_aliases: Inbound payload key to field name mapping.
    """

    name: str
    processing_mode: str
    status_column: str
    result_table: str
    field_names: tuple[str, ...]
    coerce_value: Callable[[object], object]
    missing_reference_status: SegmentStatus = SegmentStatus.FAILED
    payload_field_aliases: dict[str, str] = field(default_factory=dict)

    def segment_coerce_fields(self, raw_values: dict[str, object]) -> dict[str, object]:
        """Coerce raw values onto the fixed field set.

        Keys are looked up by field name first and then by payload alias, so both
        reference rows and camelCase callback payloads are accepted.

        Args:
            raw_values: Raw values keyed by field name or payload alias.

        Returns:
            dict[str, object]: Coerced value for every field, None when absent.
        """

        alias_lookup = {field_name: alias for alias, field_name in self.payload_field_aliases.items()}
        coerced_values: dict[str, object] = {}
        for field_name in self.field_names:
            if field_name in raw_values:
                raw_value = raw_values[field_name]
            else:
                raw_value = raw_values.get(alias_lookup.get(field_name, field_name))
            coerced_values[field_name] = self.coerce_value(raw_value)
        return coerced_values

    def segment_empty_fields(self) -> dict[str, object]:
        """Return a field mapping with every value set to None."""

        return {field_name: None for field_name in self.field_names}


def _organic_search_field_names() -> tuple[str, ...]:
    names: list[str] = []
    for rank in range(1, 11):
        names.append(f"rank{rank}_name")
        names.append(f"rank{rank}_url")
    return tuple(names)


def _organic_search_payload_aliases() -> dict[str, str]:
    aliases: dict[str, str] = {}
    for rank in range(1, 11):
        aliases[f"rank{rank}Name"] = f"rank{rank}_name"
        aliases[f"rank{rank}Url"] = f"rank{rank}_url"
    return aliases


DEMOGRAPHICS_DEFINITION: Final[SegmentDefinition] = SegmentDefinition(
    name=DEMOGRAPHICS_SEGMENT,
    processing_mode="synchronous",
    status_column="demographics_status",
    result_table="segment_demographics_result",
    field_names=(
        "population_no",
        "median_age",
        "median_income_households",
        "median_income_families",
        "male_percentage",
        "female_percentage",
    ),
    coerce_value=domain_coerce_number,
    missing_reference_status=SegmentStatus.FAILED,
)

ORGANIC_SEARCH_DEFINITION: Final[SegmentDefinition] = SegmentDefinition(
    name=ORGANIC_SEARCH_SEGMENT,
    processing_mode="asynchronous",
    status_column="organic_search_status",
    result_table="segment_organic_search_result",
    field_names=_organic_search_field_names(),
    coerce_value=domain_coerce_text,
    payload_field_aliases=_organic_search_payload_aliases(),
)

SEGMENT_DEFINITIONS: Final[dict[str, SegmentDefinition]] = {
    DEMOGRAPHICS_SEGMENT: DEMOGRAPHICS_DEFINITION,
    ORGANIC_SEARCH_SEGMENT: ORGANIC_SEARCH_DEFINITION,
}

KNOWN_SEGMENT_NAMES: Final[tuple[str, ...]] = tuple(SEGMENT_DEFINITIONS)


def domain_get_segment_definition(segment_name: str) -> SegmentDefinition:
    """Return the definition of one known segment.

    Args:
        segment_name: Stage name.

    Returns:
        SegmentDefinition: Matching definition.

    Raises:
        LookupError: Raised when the segment is unknown.
    """

    normalized_name = segment_name.strip()
    definition = SEGMENT_DEFINITIONS.get(normalized_name)
    if definition is None:
        raise LookupError(f"unknown segment={normalized_name}")
    return definition
