"""Tests for delivery routing and acknowledgement decisions."""

from __future__ import annotations

import pytest

from audit_pipeline.db import JobStoreUnavailableError
from audit_pipeline.domain import SegmentStatus
from audit_pipeline.jobs import SegmentDispatcher, SegmentRunResult, UnknownSegmentError


class _ProcessorStub:
    """Processor stub returning a fixed outcome or raising a configured error."""

    def __init__(self, stage: str, error: Exception | None = None):
        """Initialize stub state.

        Args:
            stage: Stage name served by the stub.
            error: Optional error raised by every run.

        Returns:
            None: Initializer does not return values.
        """

        self._stage = stage
        self._error = error
        self.processed_job_ids: list[str] = []

    def segment_name(self) -> str:
        return self._stage

    def segment_process(self, job_id: str) -> SegmentRunResult:
        """Record the job id and return a classified outcome.

        Returns:
            SegmentRunResult: Deterministic run result.

        Raises:
            Exception: Raised when an error is configured.
        """

        self.processed_job_ids.append(job_id)
        if self._error is not None:
            raise self._error
        return SegmentRunResult(
            job_id=job_id,
            segment_name=self._stage,
            outcome="classified",
            segment_status=SegmentStatus.COMPLETED,
        )


def test_dispatcher_routes_delivery_to_registered_processor() -> None:
    processor = _ProcessorStub("demographics")
    dispatcher = SegmentDispatcher(processors=[processor, _ProcessorStub("organic_search")])

    outcome = dispatcher.dispatcher_dispatch(" J1 ", " demographics ")

    assert outcome.acknowledge is True
    assert outcome.detail == "classified"
    assert outcome.run_result.segment_status == SegmentStatus.COMPLETED
    assert processor.processed_job_ids == ["J1"]
    assert dispatcher.dispatcher_stages() == ("demographics", "organic_search")


def test_dispatcher_acknowledges_unknown_stage_and_missing_job_id() -> None:
    """Acknowledge deliveries that can never succeed without invoking processors."""

    processor = _ProcessorStub("demographics")
    dispatcher = SegmentDispatcher(processors=[processor])

    unknown_stage = dispatcher.dispatcher_dispatch("J1", "paid_ads")
    missing_job_id = dispatcher.dispatcher_dispatch("", "demographics")

    assert (unknown_stage.acknowledge, unknown_stage.detail) == (True, "unknown_stage")
    assert (missing_job_id.acknowledge, missing_job_id.detail) == (True, "missing_job_id")
    assert processor.processed_job_ids == []


def test_dispatcher_requests_redelivery_on_store_outage() -> None:
    dispatcher = SegmentDispatcher(
        processors=[_ProcessorStub("demographics", error=JobStoreUnavailableError("connection refused"))]
    )

    outcome = dispatcher.dispatcher_dispatch("J1", "demographics")

    assert outcome.acknowledge is False
    assert outcome.detail == "store_unavailable"


def test_dispatcher_acknowledges_processor_crash() -> None:
    dispatcher = SegmentDispatcher(processors=[_ProcessorStub("demographics", error=KeyError("boom"))])

    outcome = dispatcher.dispatcher_dispatch("J1", "demographics")

    assert outcome.acknowledge is True
    assert outcome.detail == "processor_error"
    assert outcome.run_result is None


def test_dispatcher_manual_run_validates_inputs() -> None:
    """Raise for blank job ids and unknown stages on operator re-runs."""

    processor = _ProcessorStub("demographics")
    dispatcher = SegmentDispatcher(processors=[processor])

    with pytest.raises(ValueError):
        dispatcher.dispatcher_run_manual(" ", "demographics")
    with pytest.raises(UnknownSegmentError):
        dispatcher.dispatcher_run_manual("J1", "paid_ads")

    outcome = dispatcher.dispatcher_run_manual("J1", "demographics")

    assert outcome.detail == "classified"
    assert processor.processed_job_ids == ["J1"]


def test_dispatcher_rejects_invalid_registry() -> None:
    with pytest.raises(ValueError):
        SegmentDispatcher(processors=[])
    with pytest.raises(ValueError):
        SegmentDispatcher(processors=[_ProcessorStub("demographics"), _ProcessorStub("demographics")])
