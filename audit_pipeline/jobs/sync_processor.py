"""Synchronous segment processor backed by read-only reference data."""

from __future__ import annotations

import logging

from audit_pipeline.db import (
    AuditJobStorePort,
    ReferenceDataSourcePort,
    SegmentResultRecord,
    SegmentResultStorePort,
)
from audit_pipeline.domain import SegmentDefinition, SegmentStatus, domain_classify_completeness

from .interfaces import SegmentProcessorPort, SegmentRunResult, StatusAggregatorPort
from .segment_guard import job_segment_is_durably_terminal

logger = logging.getLogger(__name__)


class ReferenceSegmentProcessor(SegmentProcessorPort):
    """Compute one segment result from the reference record of the job's location.

    Safe under duplicate delivery: an already terminal segment backed by a
    matching result row is not recomputed, only re-aggregated. Store failures
    propagate so the channel can redeliver the whole segment.
    """

    def __init__(
        self,
        definition: SegmentDefinition,
        job_store: AuditJobStorePort,
        reference_source: ReferenceDataSourcePort,
        result_store: SegmentResultStorePort,
        aggregator: StatusAggregatorPort,
    ):
        """Initialize synchronous segment processor dependencies.

        Args:
            definition: Segment handled by this processor.
            job_store: Job point reads and segment status writes.
            reference_source: Read-only reference lookups by location.
            result_store: This segment's result rows.
            aggregator: Overall status recomputation.

        Raises:
            ValueError: Raised when dependencies are invalid.
        """

        if definition is None:
            raise ValueError("definition must not be None")
        if definition.processing_mode != "synchronous":
            raise ValueError(f"segment {definition.name} is not synchronous")
        if job_store is None:
            raise ValueError("job_store must not be None")
        if reference_source is None:
            raise ValueError("reference_source must not be None")
        if result_store is None:
            raise ValueError("result_store must not be None")
        if aggregator is None:
            raise ValueError("aggregator must not be None")

        self._definition = definition
        self._job_store = job_store
        self._reference_source = reference_source
        self._result_store = result_store
        self._aggregator = aggregator

    def segment_name(self) -> str:
        return self._definition.name

    def segment_process(self, job_id: str) -> SegmentRunResult:
        """Run the segment for one job.

        Args:
            job_id: Job identifier.

        Returns:
            SegmentRunResult: Outcome of the run.

        Raises:
            JobStoreUnavailableError: Raised when a store operation fails mid-run.
        """

        segment_name = self._definition.name
        job = self._job_store.db_job_get_by_id(job_id)
        if job is None:
            logger.warning("[%s] job not found, nothing to update job_id=%s", segment_name, job_id)
            return SegmentRunResult(job_id=job_id, segment_name=segment_name, outcome="job_not_found", segment_status=None)

        existing_result = self._result_store.db_segment_result_get_by_job_id(job_id)
        if job_segment_is_durably_terminal(self._definition, job, existing_result):
            stored_status = job.segment_status[segment_name]
            logger.info(
                "[%s] already %s, re-aggregating only job_id=%s",
                segment_name,
                stored_status.value,
                job_id,
            )
            self._aggregator.aggregator_recompute(job_id)
            return SegmentRunResult(
                job_id=job_id,
                segment_name=segment_name,
                outcome="already_terminal",
                segment_status=stored_status,
            )

        self._job_store.db_job_update_segment_status(job_id, segment_name, SegmentStatus.PENDING)

        reference = None
        if job.location_key:
            reference = self._reference_source.db_reference_get_by_location(job.location_key)

        if reference is None:
            missing_status = self._definition.missing_reference_status
            logger.warning(
                "[%s] no reference data for location=%r job_id=%s, recording %s",
                segment_name,
                job.location_key,
                job_id,
                missing_status.value,
            )
            self._result_store.db_segment_result_upsert(
                SegmentResultRecord(
                    job_id=job_id,
                    business_name=job.business_name,
                    timestamp_utc=job.created_at_utc,
                    fields=self._definition.segment_empty_fields(),
                    status=missing_status,
                )
            )
            self._job_store.db_job_update_segment_status(job_id, segment_name, missing_status)
            self._aggregator.aggregator_recompute(job_id)
            return SegmentRunResult(
                job_id=job_id,
                segment_name=segment_name,
                outcome="no_reference_data",
                segment_status=missing_status,
            )

        coerced_fields = self._definition.segment_coerce_fields(reference.values)
        classification = domain_classify_completeness(coerced_fields, self._definition.field_names)
        self._result_store.db_segment_result_upsert(
            SegmentResultRecord(
                job_id=job_id,
                business_name=job.business_name,
                timestamp_utc=job.created_at_utc,
                fields=coerced_fields,
                status=classification,
            )
        )
        self._job_store.db_job_update_segment_status(job_id, segment_name, classification)
        logger.info(
            "[%s] stored result job_id=%s status=%s present=%d/%d",
            segment_name,
            job_id,
            classification.value,
            sum(1 for value in coerced_fields.values() if value is not None),
            len(coerced_fields),
        )

        self._aggregator.aggregator_recompute(job_id)
        return SegmentRunResult(
            job_id=job_id,
            segment_name=segment_name,
            outcome="classified",
            segment_status=classification,
        )
