"""Two-phase segment processor: automation trigger and inbound result callback."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from audit_pipeline.adapters import AutomationTriggerError, AutomationTriggerPort, AutomationTriggerRequest
from audit_pipeline.db import AuditJobStorePort, SegmentResultRecord, SegmentResultStorePort
from audit_pipeline.domain import SegmentDefinition, SegmentStatus, domain_classify_completeness

from .interfaces import SegmentProcessorPort, SegmentRunResult, StatusAggregatorPort
from .segment_guard import job_segment_is_durably_terminal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CallbackItemOutcome:
    """Outcome of one result record received through the callback.

    Attributes:
        job_id: Job identifier from the record, None when absent.
        accepted: Whether the record was applied.
        detail: Outcome label (`applied`, `missing_job_id`, `unknown_job`, `invalid_item`).
        segment_status: Segment status written, when applied.
    """

    job_id: str | None
    accepted: bool
    detail: str
    segment_status: SegmentStatus | None = None


class CallbackPayloadError(ValueError):
    """Raised when a callback body is neither a result object nor a non-empty list of them."""


class AutomationSegmentProcessor(SegmentProcessorPort):
    """Segment whose result is produced by an external automation run.

    Phase A (`segment_process`) is channel-driven: it claims the segment, seeds
    a placeholder row and starts the automation. Phase B
    (`segment_handle_callback`) is called by the automation tool with the
    computed fields. A trigger failure is terminal; nothing here retries it.
    """

    def __init__(
        self,
        definition: SegmentDefinition,
        job_store: AuditJobStorePort,
        result_store: SegmentResultStorePort,
        trigger: AutomationTriggerPort,
        aggregator: StatusAggregatorPort,
    ):
        """Initialize two-phase segment processor dependencies.

        Args:
            definition: Segment handled by this processor.
            job_store: Job point reads and segment status writes.
            result_store: This segment's result rows, shared by both phases.
            trigger: Outbound automation trigger.
            aggregator: Overall status recomputation.

        Raises:
            ValueError: Raised when dependencies are invalid.
        """

        if definition is None:
            raise ValueError("definition must not be None")
        if definition.processing_mode != "asynchronous":
            raise ValueError(f"segment {definition.name} is not asynchronous")
        if job_store is None:
            raise ValueError("job_store must not be None")
        if result_store is None:
            raise ValueError("result_store must not be None")
        if trigger is None:
            raise ValueError("trigger must not be None")
        if aggregator is None:
            raise ValueError("aggregator must not be None")

        self._definition = definition
        self._job_store = job_store
        self._result_store = result_store
        self._trigger = trigger
        self._aggregator = aggregator

    def segment_name(self) -> str:
        return self._definition.name

    def segment_process(self, job_id: str) -> SegmentRunResult:
        """Phase A: claim the segment and start the automation run.

        Args:
            job_id: Job identifier.

        Returns:
            SegmentRunResult: `triggered` while awaiting the callback, or a terminal outcome.

        Raises:
            JobStoreUnavailableError: Raised when a store operation fails mid-run.
        """

        segment_name = self._definition.name
        job = self._job_store.db_job_get_by_id(job_id)
        if job is None:
            logger.warning("[%s] job not found, trigger skipped job_id=%s", segment_name, job_id)
            return SegmentRunResult(job_id=job_id, segment_name=segment_name, outcome="job_not_found", segment_status=None)

        existing_result = self._result_store.db_segment_result_get_by_job_id(job_id)
        if job_segment_is_durably_terminal(self._definition, job, existing_result):
            stored_status = job.segment_status[segment_name]
            logger.info("[%s] already %s, trigger skipped job_id=%s", segment_name, stored_status.value, job_id)
            self._aggregator.aggregator_recompute(job_id)
            return SegmentRunResult(
                job_id=job_id,
                segment_name=segment_name,
                outcome="already_terminal",
                segment_status=stored_status,
            )

        self._job_store.db_job_update_segment_status(job_id, segment_name, SegmentStatus.PENDING)
        self._result_store.db_segment_result_upsert(
            SegmentResultRecord(
                job_id=job_id,
                business_name=job.business_name,
                timestamp_utc=job.created_at_utc,
                fields=self._definition.segment_empty_fields(),
                status=SegmentStatus.PENDING,
            )
        )
        self._aggregator.aggregator_recompute(job_id)

        trigger_request = AutomationTriggerRequest(
            job_id=job_id,
            location_key=job.location_key,
            parameters={
                "services": list(job.services),
                "businessName": job.business_name,
                "website": job.website,
            },
        )
        try:
            self._trigger.adapter_trigger(trigger_request)
        except AutomationTriggerError as error:
            logger.error(
                "[%s] automation trigger failed job_id=%s error_type=%s error=%s",
                segment_name,
                job_id,
                type(error).__name__,
                error,
            )
            self._job_store.db_job_update_segment_status(job_id, segment_name, SegmentStatus.FAILED)
            self._aggregator.aggregator_recompute(job_id)
            return SegmentRunResult(
                job_id=job_id,
                segment_name=segment_name,
                outcome="trigger_failed",
                segment_status=SegmentStatus.FAILED,
            )

        logger.info("[%s] automation accepted, awaiting callback job_id=%s", segment_name, job_id)
        return SegmentRunResult(
            job_id=job_id,
            segment_name=segment_name,
            outcome="triggered",
            segment_status=SegmentStatus.PENDING,
        )

    def segment_handle_callback(self, payload: Any) -> list[CallbackItemOutcome]:
        """Phase B: apply result records delivered by the automation tool.

        Only `jobId` and the result fields are read from each record; business
        name and timestamp are recovered from the stored job.

        Args:
            payload: Decoded JSON body, one record or a non-empty list of records.

        Returns:
            list[CallbackItemOutcome]: One outcome per received record.

        Raises:
            CallbackPayloadError: Raised when the body shape is invalid.
            JobStoreUnavailableError: Raised when a store operation fails.
        """

        if isinstance(payload, dict):
            items = [payload]
        elif isinstance(payload, list) and payload:
            items = payload
        else:
            raise CallbackPayloadError("callback payload must be an object or a non-empty array")

        logger.info("[%s] callback received items=%d", self._definition.name, len(items))
        return [self._segment_apply_callback_item(item) for item in items]

    def _segment_apply_callback_item(self, item: Any) -> CallbackItemOutcome:
        segment_name = self._definition.name
        if not isinstance(item, dict):
            logger.warning("[%s] callback item is not an object, rejected", segment_name)
            return CallbackItemOutcome(job_id=None, accepted=False, detail="invalid_item")

        raw_job_id = item.get("jobId")
        job_id = str(raw_job_id).strip() if raw_job_id is not None else ""
        if not job_id:
            logger.warning("[%s] callback item without jobId, rejected", segment_name)
            return CallbackItemOutcome(job_id=None, accepted=False, detail="missing_job_id")

        job = self._job_store.db_job_get_by_id(job_id)
        if job is None:
            logger.warning("[%s] callback for unknown job rejected job_id=%s", segment_name, job_id)
            return CallbackItemOutcome(job_id=job_id, accepted=False, detail="unknown_job")

        coerced_fields = self._definition.segment_coerce_fields(item)
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
        logger.info("[%s] callback applied job_id=%s status=%s", segment_name, job_id, classification.value)

        self._aggregator.aggregator_recompute(job_id)
        return CallbackItemOutcome(job_id=job_id, accepted=True, detail="applied", segment_status=classification)
