"""Idempotency guard shared by segment processors."""

from __future__ import annotations

from audit_pipeline.db import AuditJobRecord, SegmentResultRecord
from audit_pipeline.domain import SegmentDefinition, SegmentStatus, domain_classify_completeness


def job_segment_is_durably_terminal(
    definition: SegmentDefinition,
    job: AuditJobRecord,
    result: SegmentResultRecord | None,
) -> bool:
    """Return whether a segment's terminal status is backed by its stored result.

    The segment status must be terminal, the result row must exist with the same
    status, and for `completed` or `partial` the stored fields must still
    classify to that status.

    Args:
        definition: Segment definition.
        job: Loaded job record.
        result: Stored result row, or None.

    Returns:
        bool: True when a redelivered run can skip straight to aggregation.
    """

    segment_status = job.segment_status.get(definition.name, SegmentStatus.QUEUED)
    if not segment_status.segment_status_is_terminal():
        return False
    if result is None or result.status != segment_status:
        return False
    if segment_status in (SegmentStatus.COMPLETED, SegmentStatus.PARTIAL):
        stored_classification = domain_classify_completeness(result.fields, definition.field_names)
        return stored_classification == segment_status
    return True
