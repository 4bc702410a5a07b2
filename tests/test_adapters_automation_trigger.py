"""Tests for webhook automation trigger adapter behavior."""

from __future__ import annotations

import json

import httpx
import pytest

from audit_pipeline.adapters import (
    AutomationTriggerConnectionError,
    AutomationTriggerRejectedError,
    AutomationTriggerRequest,
    AutomationTriggerTimeoutError,
    WebhookAutomationTrigger,
)
from audit_pipeline.config import SegmentEngineConfig

_WEBHOOK_URL = "https://automation.test/webhook/organic?token=secret"


def _build_request() -> AutomationTriggerRequest:
    return AutomationTriggerRequest(
        job_id="J2",
        location_key="Springfield",
        parameters={"services": ["plumbing"], "businessName": "Acme Plumbing", "website": None},
    )


def test_adapter_trigger_posts_json_payload() -> None:
    """Send one POST with the camelCase trigger body and accept 2xx answers.

    Returns:
        None: Assertions validate request and result.

    Raises:
        AssertionError: Raised when the wire request differs.
    """

    captured_requests: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        captured_requests.append(request)
        return httpx.Response(202, text="Workflow was started")

    adapter = WebhookAutomationTrigger(webhook_url=_WEBHOOK_URL, transport=httpx.MockTransport(_handler))

    result = adapter.adapter_trigger(_build_request())

    assert result.status_code == 202
    assert result.response_excerpt == "Workflow was started"
    assert len(captured_requests) == 1
    assert captured_requests[0].method == "POST"
    assert json.loads(captured_requests[0].content) == {
        "jobId": "J2",
        "locationKey": "Springfield",
        "location": "Springfield",
        "parameters": {"services": ["plumbing"], "businessName": "Acme Plumbing", "website": None},
    }
    assert adapter.adapter_target_name() == "https://automation.test/webhook/organic"


def test_adapter_trigger_raises_rejected_for_non_success_status() -> None:
    adapter = WebhookAutomationTrigger(
        webhook_url=_WEBHOOK_URL,
        transport=httpx.MockTransport(lambda request: httpx.Response(500, text="error")),
    )

    with pytest.raises(AutomationTriggerRejectedError) as error_info:
        adapter.adapter_trigger(_build_request())

    assert error_info.value.status_code == 500


@pytest.mark.parametrize(
    ("transport_error", "expected_error"),
    [
        (httpx.ReadTimeout, AutomationTriggerTimeoutError),
        (httpx.ConnectError, AutomationTriggerConnectionError),
    ],
)
def test_adapter_trigger_maps_transport_failures(
    transport_error: type[httpx.TransportError],
    expected_error: type[Exception],
) -> None:
    """Map httpx timeout and connection failures to typed trigger errors."""

    def _handler(request: httpx.Request) -> httpx.Response:
        raise transport_error("simulated failure", request=request)

    adapter = WebhookAutomationTrigger(
        webhook_url=_WEBHOOK_URL,
        timeout_seconds=0.5,
        transport=httpx.MockTransport(_handler),
    )

    with pytest.raises(expected_error):
        adapter.adapter_trigger(_build_request())


def test_adapter_trigger_rejects_invalid_configuration() -> None:
    with pytest.raises(ValueError):
        WebhookAutomationTrigger(webhook_url=" ")
    with pytest.raises(ValueError):
        WebhookAutomationTrigger(webhook_url=_WEBHOOK_URL, timeout_seconds=0)


def _corrupt_gzip_response(request: httpx.Request) -> httpx.Response:
    return httpx.Response(
        200,
        headers={"Content-Encoding": "gzip"},
        stream=httpx.ByteStream(b"not-gzip"),
    )


def test_adapter_trigger_maps_undecodable_response_to_connection_error() -> None:
    """Map a response body that cannot be decoded to a typed trigger error."""

    adapter = WebhookAutomationTrigger(webhook_url=_WEBHOOK_URL, transport=httpx.MockTransport(_corrupt_gzip_response))

    with pytest.raises(AutomationTriggerConnectionError) as error_info:
        adapter.adapter_trigger(_build_request())

    assert isinstance(error_info.value.__cause__, httpx.DecodingError)


def test_adapter_trigger_maps_malformed_webhook_url_to_connection_error() -> None:
    adapter = WebhookAutomationTrigger(webhook_url="https://automation.test:notaport/webhook")

    with pytest.raises(AutomationTriggerConnectionError):
        adapter.adapter_trigger(_build_request())


def test_adapter_from_engine_config_uses_configured_webhook() -> None:
    captured_requests: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        captured_requests.append(request)
        return httpx.Response(200, text="ok")

    engine_config = SegmentEngineConfig(organic_search_webhook_url=_WEBHOOK_URL, automation_trigger_timeout_seconds=3.0)
    adapter = WebhookAutomationTrigger.from_engine_config(engine_config, transport=httpx.MockTransport(_handler))

    adapter.adapter_trigger(_build_request())

    assert adapter.adapter_target_name() == "https://automation.test/webhook/organic"
    assert str(captured_requests[0].url) == _WEBHOOK_URL
    with pytest.raises(ValueError):
        WebhookAutomationTrigger.from_engine_config(None)
