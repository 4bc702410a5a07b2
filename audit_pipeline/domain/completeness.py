"""Value coercion and completeness classification for segment result fields."""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from decimal import Decimal, InvalidOperation

from .models import SegmentStatus


def domain_coerce_number(value: object) -> float | int | None:
    """Coerce one raw metric to a number or None.

    Absent values, blank strings, booleans, non-numeric text and non-finite
    numbers all map to None. Nothing maps to zero unless it was zero.

    Args:
        value: Raw metric value from a reference record or callback payload.

    Returns:
        float | int | None: Numeric value, or None when the value carries no number.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, Decimal):
        return float(value) if value.is_finite() else None

    text_value = str(value).strip()
    if not text_value:
        return None
    try:
        decimal_value = Decimal(text_value)
    except InvalidOperation:
        return None
    if not decimal_value.is_finite():
        return None
    if decimal_value == decimal_value.to_integral_value() and "." not in text_value and "e" not in text_value.lower():
        return int(decimal_value)
    return float(decimal_value)


def domain_coerce_text(value: object) -> str | None:
    """Coerce one raw text field to a stripped string or None.

    Args:
        value: Raw text value from a callback payload.

    Returns:
        str | None: Stripped text, or None when the value is absent or blank.
    """

    if value is None:
        return None
    text_value = str(value).strip()
    return text_value or None


def domain_classify_completeness(values: Mapping[str, object], field_names: Iterable[str]) -> SegmentStatus:
    """Classify a coerced field set into a segment outcome.

    Args:
        values: Coerced field values keyed by field name.
        field_names: Fixed field set of the segment.

    Returns:
        SegmentStatus: `failed` when no field is set, `completed` when every field
        is set, `partial` otherwise.

    Raises:
        ValueError: Raised when the field set is empty.
    """

    expected_fields = tuple(field_names)
    if not expected_fields:
        raise ValueError("field_names must not be empty")

    present_count = sum(1 for field_name in expected_fields if values.get(field_name) is not None)
    if present_count == 0:
        return SegmentStatus.FAILED
    if present_count == len(expected_fields):
        return SegmentStatus.COMPLETED
    return SegmentStatus.PARTIAL
