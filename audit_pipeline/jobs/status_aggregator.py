"""Deterministic reducer from segment statuses to one overall job status."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from audit_pipeline.config import SegmentEngineConfig
from audit_pipeline.db import AuditJobStorePort, JobStoreUnavailableError
from audit_pipeline.domain import KNOWN_SEGMENT_NAMES, OverallStatus, SegmentStatus

from .interfaces import AggregationResult, StatusAggregatorPort

logger = logging.getLogger(__name__)


def job_aggregate_overall_status(
    segment_statuses: Mapping[str, SegmentStatus | None],
    known_segments: Iterable[str] = KNOWN_SEGMENT_NAMES,
    all_queued_status: OverallStatus = OverallStatus.QUEUED,
) -> OverallStatus:
    """Reduce segment statuses to one overall status.

    First match wins: any `failed`; all `queued` (reported as
    `all_queued_status`); any `pending` or `queued`; any `partial`; all
    `completed`. Anything else falls back to `pending`. Segments missing from
    the mapping count as `queued`.

    Args:
        segment_statuses: Stored status per segment.
        known_segments: Full segment set of a job.
        all_queued_status: `queued` or `pending`, reported while nothing has started.

    Returns:
        OverallStatus: Derived overall status.

    Raises:
        ValueError: Raised when the segment set is empty or the all-queued status is unsupported.
    """

    segment_names = tuple(known_segments)
    if not segment_names:
        raise ValueError("known_segments must not be empty")
    if all_queued_status not in (OverallStatus.QUEUED, OverallStatus.PENDING):
        raise ValueError("all_queued_status must be queued or pending")

    statuses = [SegmentStatus(segment_statuses.get(name) or SegmentStatus.QUEUED) for name in segment_names]

    if SegmentStatus.FAILED in statuses:
        return OverallStatus.FAILED
    if all(status == SegmentStatus.QUEUED for status in statuses):
        return OverallStatus(all_queued_status)
    if any(status in (SegmentStatus.PENDING, SegmentStatus.QUEUED) for status in statuses):
        return OverallStatus.PENDING
    if SegmentStatus.PARTIAL in statuses:
        return OverallStatus.PARTIAL
    if all(status == SegmentStatus.COMPLETED for status in statuses):
        return OverallStatus.COMPLETED
    return OverallStatus.PENDING


class StatusAggregator(StatusAggregatorPort):
    """Recompute the stored overall status of a job from its segment columns.

    This is the only writer of the overall status column. Store failures are
    logged and the stored value is left untouched.
    """

    def __init__(
        self,
        job_store: AuditJobStorePort,
        engine_config: SegmentEngineConfig | None = None,
        known_segments: tuple[str, ...] = KNOWN_SEGMENT_NAMES,
    ):
        """Initialize the aggregator.

        Args:
            job_store: Audit job store holding segment and overall status columns.
            engine_config: Engine configuration; the all-queued status defaults to `queued` when omitted.
            known_segments: Full segment set of a job.

        Raises:
            ValueError: Raised when a dependency or the all-queued status is invalid.
        """

        if job_store is None:
            raise ValueError("job_store must not be None")
        all_queued_status = engine_config.all_queued_overall_status if engine_config else OverallStatus.QUEUED
        if all_queued_status not in (OverallStatus.QUEUED, OverallStatus.PENDING):
            raise ValueError("all_queued_overall_status must be queued or pending")
        if not known_segments:
            raise ValueError("known_segments must not be empty")

        self._job_store = job_store
        self._all_queued_status = OverallStatus(all_queued_status)
        self._known_segments = known_segments

    def aggregator_recompute(self, job_id: str) -> AggregationResult:
        """Recompute and persist the overall status of one job.

        Args:
            job_id: Job identifier.

        Returns:
            AggregationResult: Previous and computed status and whether a write happened.
        """

        try:
            job = self._job_store.db_job_get_by_id(job_id)
        except (JobStoreUnavailableError, ValueError) as error:
            logger.error("overall status read failed job_id=%s error=%s", job_id, error)
            return AggregationResult(
                job_id=job_id,
                previous_status=None,
                computed_status=None,
                written=False,
                error_message=str(error),
            )

        if job is None:
            logger.warning("overall status skipped, job not found job_id=%s", job_id)
            return AggregationResult(job_id=job_id, previous_status=None, computed_status=None, written=False)

        computed_status = job_aggregate_overall_status(
            segment_statuses=job.segment_status,
            known_segments=self._known_segments,
            all_queued_status=self._all_queued_status,
        )
        if computed_status == job.overall_status:
            logger.debug("overall status unchanged job_id=%s status=%s", job_id, computed_status.value)
            return AggregationResult(
                job_id=job_id,
                previous_status=job.overall_status,
                computed_status=computed_status,
                written=False,
            )

        try:
            self._job_store.db_job_update_overall_status(job_id, computed_status)
        except JobStoreUnavailableError as error:
            logger.error(
                "overall status write failed job_id=%s status=%s error=%s",
                job_id,
                computed_status.value,
                error,
            )
            return AggregationResult(
                job_id=job_id,
                previous_status=job.overall_status,
                computed_status=computed_status,
                written=False,
                error_message=str(error),
            )

        logger.info(
            "overall status updated job_id=%s %s -> %s",
            job_id,
            job.overall_status.value if job.overall_status else None,
            computed_status.value,
        )
        return AggregationResult(
            job_id=job_id,
            previous_status=job.overall_status,
            computed_status=computed_status,
            written=True,
        )
