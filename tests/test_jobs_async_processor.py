"""Regression tests for the two-phase automation segment processor."""

from __future__ import annotations

import httpx
import pytest

from audit_pipeline.adapters import (
    AutomationTriggerPort,
    AutomationTriggerRejectedError,
    AutomationTriggerTimeoutError,
    WebhookAutomationTrigger,
)
from audit_pipeline.domain import (
    DEMOGRAPHICS_SEGMENT,
    ORGANIC_SEARCH_DEFINITION,
    ORGANIC_SEARCH_SEGMENT,
    OverallStatus,
    SegmentStatus,
)
from audit_pipeline.jobs import AutomationSegmentProcessor, CallbackPayloadError, SegmentDispatcher, StatusAggregator

from segment_doubles import InMemoryAuditJobStore, InMemorySegmentResultStore, RecordingAutomationTrigger


def _build_processor(
    job_store: InMemoryAuditJobStore,
    result_store: InMemorySegmentResultStore,
    trigger: AutomationTriggerPort,
) -> AutomationSegmentProcessor:
    """Build processor wired to in-memory doubles.

    Returns:
        AutomationSegmentProcessor: Processor under test.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    return AutomationSegmentProcessor(
        definition=ORGANIC_SEARCH_DEFINITION,
        job_store=job_store,
        result_store=result_store,
        trigger=trigger,
        aggregator=StatusAggregator(job_store=job_store),
    )


def _ranking_payload(job_id: str, ranks: int) -> dict[str, object]:
    payload: dict[str, object] = {"jobId": job_id, "businessName": "ignored", "timestamp": "ignored"}
    for position in range(1, ranks + 1):
        payload[f"rank{position}Name"] = f"Competitor {position}"
        payload[f"rank{position}Url"] = f"https://competitor{position}.example"
    return payload


def test_async_processor_trigger_seeds_placeholder_and_waits(
    job_store: InMemoryAuditJobStore,
    result_store: InMemorySegmentResultStore,
) -> None:
    """Claim the segment, seed a pending row and send one trigger request.

    Returns:
        None: Assertions validate Phase A side effects.

    Raises:
        AssertionError: Raised when state or trigger payload differs.
    """

    job_store.add_job("J2", services=("plumbing", "heating"))
    trigger = RecordingAutomationTrigger()

    run_result = _build_processor(job_store, result_store, trigger).segment_process("J2")

    assert run_result.outcome == "triggered"
    assert run_result.segment_status == SegmentStatus.PENDING
    assert job_store.jobs["J2"].segment_status[ORGANIC_SEARCH_SEGMENT] == SegmentStatus.PENDING
    assert job_store.jobs["J2"].overall_status == OverallStatus.PENDING
    placeholder_row = result_store.rows["J2"]
    assert placeholder_row.status == SegmentStatus.PENDING
    assert set(placeholder_row.fields.values()) == {None}
    assert len(trigger.requests) == 1
    wire_payload = trigger.requests[0].trigger_request_payload()
    assert wire_payload["jobId"] == "J2"
    assert wire_payload["location"] == "Springfield"
    assert wire_payload["parameters"]["services"] == ["plumbing", "heating"]
    assert wire_payload["parameters"]["businessName"] == "Acme Plumbing"


@pytest.mark.parametrize(
    "trigger_error",
    [
        AutomationTriggerTimeoutError("automation trigger timed out after 15.0s"),
        AutomationTriggerRejectedError("automation trigger rejected: status=500", status_code=500),
    ],
)
def test_async_processor_trigger_failure_is_terminal(
    job_store: InMemoryAuditJobStore,
    result_store: InMemorySegmentResultStore,
    trigger_error: Exception,
) -> None:
    """Record `failed` and a failed overall status when the trigger call fails."""

    job_store.add_job("J2")
    trigger = RecordingAutomationTrigger(error=trigger_error)

    run_result = _build_processor(job_store, result_store, trigger).segment_process("J2")

    assert run_result.outcome == "trigger_failed"
    assert job_store.jobs["J2"].segment_status[ORGANIC_SEARCH_SEGMENT] == SegmentStatus.FAILED
    assert job_store.jobs["J2"].overall_status == OverallStatus.FAILED
    assert len(trigger.requests) == 1


def test_async_processor_undecodable_trigger_response_is_terminal(
    job_store: InMemoryAuditJobStore,
    result_store: InMemorySegmentResultStore,
) -> None:
    """Fail the segment when the webhook answers with a body that cannot be decoded."""

    def _corrupt_gzip_response(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            headers={"Content-Encoding": "gzip"},
            stream=httpx.ByteStream(b"not-gzip"),
        )

    job_store.add_job("J9")
    trigger = WebhookAutomationTrigger(
        webhook_url="https://automation.test/webhook/organic",
        transport=httpx.MockTransport(_corrupt_gzip_response),
    )
    dispatcher = SegmentDispatcher(processors=[_build_processor(job_store, result_store, trigger)])

    outcome = dispatcher.dispatcher_dispatch("J9", ORGANIC_SEARCH_SEGMENT)

    assert outcome.acknowledge is True
    assert outcome.detail == "trigger_failed"
    assert job_store.jobs["J9"].segment_status[ORGANIC_SEARCH_SEGMENT] == SegmentStatus.FAILED
    assert job_store.jobs["J9"].overall_status == OverallStatus.FAILED


def test_async_processor_does_not_retrigger_terminal_segment(
    job_store: InMemoryAuditJobStore,
    result_store: InMemorySegmentResultStore,
) -> None:
    job_store.add_job("J2")
    trigger = RecordingAutomationTrigger()
    processor = _build_processor(job_store, result_store, trigger)
    processor.segment_process("J2")
    processor.segment_handle_callback(_ranking_payload("J2", ranks=10))

    redelivery = processor.segment_process("J2")

    assert redelivery.outcome == "already_terminal"
    assert redelivery.segment_status == SegmentStatus.COMPLETED
    assert len(trigger.requests) == 1


def test_async_processor_callback_applies_partial_rankings(
    job_store: InMemoryAuditJobStore,
    result_store: InMemorySegmentResultStore,
) -> None:
    """Classify callback fields and recover business name from the job.

    Returns:
        None: Assertions validate Phase B side effects.

    Raises:
        AssertionError: Raised when stored state differs.
    """

    job_store.add_job(
        "J2",
        segment_status={
            DEMOGRAPHICS_SEGMENT: SegmentStatus.COMPLETED,
            ORGANIC_SEARCH_SEGMENT: SegmentStatus.PENDING,
        },
        overall_status=OverallStatus.PENDING,
    )
    processor = _build_processor(job_store, result_store, RecordingAutomationTrigger())

    item_outcomes = processor.segment_handle_callback(_ranking_payload("J2", ranks=3))

    assert [outcome.detail for outcome in item_outcomes] == ["applied"]
    assert item_outcomes[0].segment_status == SegmentStatus.PARTIAL
    stored_row = result_store.rows["J2"]
    assert stored_row.business_name == "Acme Plumbing"
    assert stored_row.fields["rank3_url"] == "https://competitor3.example"
    assert stored_row.fields["rank4_name"] is None
    assert job_store.jobs["J2"].segment_status[ORGANIC_SEARCH_SEGMENT] == SegmentStatus.PARTIAL
    assert job_store.jobs["J2"].overall_status == OverallStatus.PARTIAL


def test_async_processor_callback_array_rejects_orphans_and_missing_ids(
    job_store: InMemoryAuditJobStore,
    result_store: InMemorySegmentResultStore,
) -> None:
    """Apply valid items and reject the rest without touching unrelated jobs."""

    job_store.add_job("J2")
    processor = _build_processor(job_store, result_store, RecordingAutomationTrigger())

    item_outcomes = processor.segment_handle_callback(
        [
            _ranking_payload("J2", ranks=10),
            _ranking_payload("ghost", ranks=10),
            {"rank1Name": "No id"},
            "not-an-object",
        ]
    )

    assert [(outcome.job_id, outcome.accepted, outcome.detail) for outcome in item_outcomes] == [
        ("J2", True, "applied"),
        ("ghost", False, "unknown_job"),
        (None, False, "missing_job_id"),
        (None, False, "invalid_item"),
    ]
    assert set(result_store.rows) == {"J2"}
    assert job_store.jobs["J2"].segment_status[ORGANIC_SEARCH_SEGMENT] == SegmentStatus.COMPLETED


def test_async_processor_callback_without_fields_records_failure(
    job_store: InMemoryAuditJobStore,
    result_store: InMemorySegmentResultStore,
) -> None:
    job_store.add_job("J2")
    processor = _build_processor(job_store, result_store, RecordingAutomationTrigger())

    item_outcomes = processor.segment_handle_callback({"jobId": "J2"})

    assert item_outcomes[0].segment_status == SegmentStatus.FAILED
    assert job_store.jobs["J2"].overall_status == OverallStatus.FAILED


@pytest.mark.parametrize("payload", [[], "text", None, 42])
def test_async_processor_callback_rejects_invalid_body(
    job_store: InMemoryAuditJobStore,
    result_store: InMemorySegmentResultStore,
    payload: object,
) -> None:
    processor = _build_processor(job_store, result_store, RecordingAutomationTrigger())

    with pytest.raises(CallbackPayloadError):
        processor.segment_handle_callback(payload)


def test_async_processor_duplicate_callback_converges(
    job_store: InMemoryAuditJobStore,
    result_store: InMemorySegmentResultStore,
) -> None:
    """Replay of the same callback leaves rows and statuses unchanged."""

    job_store.add_job("J2")
    processor = _build_processor(job_store, result_store, RecordingAutomationTrigger())
    payload = _ranking_payload("J2", ranks=10)

    processor.segment_handle_callback(payload)
    state_after_first_callback = (dict(result_store.rows), dict(job_store.jobs), len(job_store.overall_status_writes))
    processor.segment_handle_callback(payload)

    assert (dict(result_store.rows), dict(job_store.jobs), len(job_store.overall_status_writes)) == (
        state_after_first_callback
    )
