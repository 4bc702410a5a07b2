"""Typed interfaces for job-layer segment orchestration responsibilities."""

from dataclasses import dataclass
from typing import Protocol

from audit_pipeline.domain import OverallStatus, SegmentStatus


class UnknownSegmentError(LookupError):
    """Raised when a manual run names a stage with no registered processor."""


@dataclass(frozen=True)
class SegmentRunResult:
    """Result contract for one segment processor invocation.

    Attributes:
        job_id: Processed job identifier.
        segment_name: Processed segment.
        outcome: Short machine-readable outcome label.
        segment_status: Segment status after the run, None when the job is absent.
    """

    job_id: str
    segment_name: str
    outcome: str
    segment_status: SegmentStatus | None


@dataclass(frozen=True)
class AggregationResult:
    """Result contract for one overall status recomputation.

    Attributes:
        job_id: Job identifier.
        previous_status: Stored overall status before the run.
        computed_status: Status derived from the segment statuses, None when not computed.
        written: Whether the stored value was changed.
        error_message: Store failure description when the run was abandoned.
    """

    job_id: str
    previous_status: OverallStatus | None
    computed_status: OverallStatus | None
    written: bool
    error_message: str | None = None


@dataclass(frozen=True)
class DispatchOutcome:
    """Acknowledgement decision for one channel delivery.

    Attributes:
        job_id: Job identifier from the envelope.
        stage: Stage name from the envelope.
        acknowledge: False only when the channel should redeliver.
        detail: Outcome label for logs and responses.
        run_result: Processor result when the processor finished.
    """

    job_id: str
    stage: str
    acknowledge: bool
    detail: str
    run_result: SegmentRunResult | None = None


class SegmentProcessorPort(Protocol):
    """Port definition for one segment's channel-driven processing function."""

    def segment_name(self) -> str:
        """Return the stage name handled by this processor.

        Returns:
            str: Stage name.
        """

    def segment_process(self, job_id: str) -> SegmentRunResult:
        """Process one segment of one job.

        Args:
            job_id: Job identifier.

        Returns:
            SegmentRunResult: Outcome of the run.

        Raises:
            JobStoreUnavailableError: Raised when a store operation fails mid-run.
        """


class StatusAggregatorPort(Protocol):
    """Port definition for overall status recomputation."""

    def aggregator_recompute(self, job_id: str) -> AggregationResult:
        """Recompute and persist the overall status of one job.

        Args:
            job_id: Job identifier.

        Returns:
            AggregationResult: Recomputation result; never raises.
        """
