"""Typed domain models shared across runtime layers.

Status enums inherit from `str` so members compare equal to the plain text
values stored in the database and serialize naturally at API boundaries.
"""

from dataclasses import dataclass
from enum import Enum


class SegmentStatus(str, Enum):
    """Lifecycle status of one segment of an audit job.

    `queued` means not started, `pending` means claimed but not finished, and
    the remaining values are terminal outcomes of one processing attempt.
    """

    QUEUED = "queued"
    PENDING = "pending"
    PARTIAL = "partial"
    COMPLETED = "completed"
    FAILED = "failed"
    NO_DATA = "no_data"

    def segment_status_is_terminal(self) -> bool:
        """Return whether the status is a terminal outcome of one attempt.

        Returns:
            bool: True for `completed`, `partial`, `failed` and `no_data`.
        """

        return self in TERMINAL_SEGMENT_STATUSES


TERMINAL_SEGMENT_STATUSES = frozenset(
    {SegmentStatus.COMPLETED, SegmentStatus.PARTIAL, SegmentStatus.FAILED, SegmentStatus.NO_DATA}
)


class OverallStatus(str, Enum):
    """Job-level status derived from segment statuses by the aggregator."""

    QUEUED = "queued"
    PENDING = "pending"
    PARTIAL = "partial"
    COMPLETED = "completed"
    FAILED = "failed"


def domain_parse_segment_status(value: object) -> SegmentStatus:
    """Parse a stored segment status, treating missing values as `queued`.

    Args:
        value: Raw column value.

    Returns:
        SegmentStatus: Parsed status.

    Raises:
        ValueError: Raised when the value is not a known segment status.
    """

    if value is None:
        return SegmentStatus.QUEUED
    normalized_value = str(value).strip().lower()
    if not normalized_value:
        return SegmentStatus.QUEUED
    return SegmentStatus(normalized_value)


def domain_parse_overall_status(value: object) -> OverallStatus | None:
    """Parse a stored overall status.

    Args:
        value: Raw column value.

    Returns:
        OverallStatus | None: Parsed status, or None when nothing is stored yet.

    Raises:
        ValueError: Raised when the value is not a known overall status.
    """

    if value is None:
        return None
    normalized_value = str(value).strip().lower()
    if not normalized_value:
        return None
    return OverallStatus(normalized_value)


@dataclass(frozen=True)
class HealthStatus:
    """Health response contract used by health-check surfaces.

    Attributes:
        status: Overall status text for service health.
        detail: Additional message suitable for operational diagnostics.
    """

    status: str
    detail: str
