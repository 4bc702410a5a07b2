"""Routing of `(job_id, stage)` deliveries to segment processors."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from audit_pipeline.db import JobStoreUnavailableError

from .interfaces import DispatchOutcome, SegmentProcessorPort, UnknownSegmentError

logger = logging.getLogger(__name__)


class SegmentDispatcher:
    """Entry point for channel deliveries and operator re-runs.

    Segment failures are recorded as status values by the processors, so a
    delivery is acknowledged whatever the processor outcome. The single
    exception is a store outage, which asks the channel to redeliver.
    """

    def __init__(self, processors: Iterable[SegmentProcessorPort]):
        """Initialize dispatcher with its processor registry.

        Args:
            processors: One processor per known stage.

        Raises:
            ValueError: Raised when the registry is empty or holds duplicate stages.
        """

        registry: dict[str, SegmentProcessorPort] = {}
        for processor in processors:
            stage_name = processor.segment_name()
            if stage_name in registry:
                raise ValueError(f"duplicate processor for stage={stage_name}")
            registry[stage_name] = processor
        if not registry:
            raise ValueError("processors must not be empty")
        self._processors = registry

    def dispatcher_stages(self) -> tuple[str, ...]:
        """Return registered stage names in registration order."""

        return tuple(self._processors)

    def dispatcher_dispatch(self, job_id: str, stage: str) -> DispatchOutcome:
        """Handle one channel delivery.

        Args:
            job_id: Job identifier from the envelope.
            stage: Stage name from the envelope.

        Returns:
            DispatchOutcome: `acknowledge=False` only for transient store failures.
        """

        normalized_job_id = (job_id or "").strip()
        normalized_stage = (stage or "").strip()
        if not normalized_job_id:
            logger.error("delivery without job id acknowledged stage=%s", normalized_stage)
            return DispatchOutcome(job_id="", stage=normalized_stage, acknowledge=True, detail="missing_job_id")

        processor = self._processors.get(normalized_stage)
        if processor is None:
            logger.warning("unknown stage acknowledged job_id=%s stage=%s", normalized_job_id, normalized_stage)
            return DispatchOutcome(
                job_id=normalized_job_id,
                stage=normalized_stage,
                acknowledge=True,
                detail="unknown_stage",
            )

        return self._dispatcher_run(processor=processor, job_id=normalized_job_id, stage=normalized_stage)

    def dispatcher_run_manual(self, job_id: str, stage: str) -> DispatchOutcome:
        """Re-run one segment outside the channel through the same processor.

        Args:
            job_id: Job identifier.
            stage: Stage name.

        Returns:
            DispatchOutcome: Same outcome contract as channel deliveries.

        Raises:
            ValueError: Raised when job id is blank.
            UnknownSegmentError: Raised when no processor is registered for the stage.
        """

        normalized_job_id = (job_id or "").strip()
        normalized_stage = (stage or "").strip()
        if not normalized_job_id:
            raise ValueError("job_id must not be blank")

        processor = self._processors.get(normalized_stage)
        if processor is None:
            raise UnknownSegmentError(f"unknown stage={normalized_stage}")

        logger.info("manual segment run job_id=%s stage=%s", normalized_job_id, normalized_stage)
        return self._dispatcher_run(processor=processor, job_id=normalized_job_id, stage=normalized_stage)

    def _dispatcher_run(self, processor: SegmentProcessorPort, job_id: str, stage: str) -> DispatchOutcome:
        try:
            run_result = processor.segment_process(job_id)
        except JobStoreUnavailableError as error:
            logger.warning("store unavailable, requesting redelivery job_id=%s stage=%s error=%s", job_id, stage, error)
            return DispatchOutcome(job_id=job_id, stage=stage, acknowledge=False, detail="store_unavailable")
        except Exception:  # pylint: disable=broad-exception-caught
            logger.exception("segment processor crashed, delivery acknowledged job_id=%s stage=%s", job_id, stage)
            return DispatchOutcome(job_id=job_id, stage=stage, acknowledge=True, detail="processor_error")

        return DispatchOutcome(
            job_id=job_id,
            stage=stage,
            acknowledge=True,
            detail=run_result.outcome,
            run_result=run_result,
        )
