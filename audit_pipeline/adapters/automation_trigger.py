"""Webhook adapter that starts external automation runs over HTTP."""

from __future__ import annotations

import logging
from typing import Final

import httpx

from audit_pipeline.config import SegmentEngineConfig

from .automation_errors import (
    AutomationTriggerConnectionError,
    AutomationTriggerRejectedError,
    AutomationTriggerTimeoutError,
)
from .interfaces import AutomationTriggerPort, AutomationTriggerRequest, AutomationTriggerResult

logger = logging.getLogger(__name__)


class WebhookAutomationTrigger(AutomationTriggerPort):
    """Adapter posting one JSON payload to an automation webhook per trigger.

    There is no retry loop here: any failure is surfaced to the caller, which
    records it as a terminal segment failure.
    """

    _USER_AGENT: Final[str] = "audit-pipeline/1.0 (Python/httpx)"
    _RESPONSE_EXCERPT_LIMIT: Final[int] = 500

    def __init__(
        self,
        webhook_url: str,
        timeout_seconds: float = 15.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize webhook trigger adapter.

        Args:
            webhook_url: Automation webhook URL.
            timeout_seconds: Bounded timeout for the whole call.
            transport: Optional httpx transport override.

        Raises:
            ValueError: Raised when configuration values are invalid.
        """

        normalized_webhook_url = webhook_url.strip()
        if not normalized_webhook_url:
            raise ValueError("webhook_url must not be blank")
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be > 0")

        self._webhook_url = normalized_webhook_url
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    @classmethod
    def from_engine_config(
        cls,
        engine_config: SegmentEngineConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> WebhookAutomationTrigger:
        """Build the organic search trigger from the engine configuration.

        Args:
            engine_config: Immutable engine configuration.
            transport: Optional httpx transport override.

        Returns:
            WebhookAutomationTrigger: Adapter bound to the configured webhook and timeout.

        Raises:
            ValueError: Raised when engine_config is missing or its values are invalid.
        """

        if engine_config is None:
            raise ValueError("engine_config must not be None")

        return cls(
            webhook_url=engine_config.organic_search_webhook_url,
            timeout_seconds=engine_config.automation_trigger_timeout_seconds,
            transport=transport,
        )

    def adapter_target_name(self) -> str:
        """Return the configured webhook URL without query string."""

        return self._webhook_url.split("?", 1)[0]

    def adapter_trigger(self, request: AutomationTriggerRequest) -> AutomationTriggerResult:
        """POST the trigger payload and require a 2xx answer.

        Args:
            request: Trigger payload.

        Returns:
            AutomationTriggerResult: Accepted status code and response excerpt.

        Raises:
            ValueError: Raised when request job id is blank.
            AutomationTriggerTimeoutError: Raised when the call exceeds the timeout.
            AutomationTriggerConnectionError: Raised for transport, URL or response decoding failures.
            AutomationTriggerRejectedError: Raised for non-2xx responses.
        """

        if not request.job_id.strip():
            raise ValueError("request.job_id must not be blank")

        payload = request.trigger_request_payload()
        logger.info("triggering automation job_id=%s target=%s", request.job_id, self.adapter_target_name())

        try:
            with httpx.Client(
                timeout=self._timeout_seconds,
                headers={"User-Agent": self._USER_AGENT},
                transport=self._transport,
            ) as client:
                response = client.post(self._webhook_url, json=payload)
                response_excerpt = response.text[: self._RESPONSE_EXCERPT_LIMIT]
        except httpx.TimeoutException as error:
            raise AutomationTriggerTimeoutError(
                f"automation trigger timed out after {self._timeout_seconds}s"
            ) from error
        except httpx.TransportError as error:
            raise AutomationTriggerConnectionError(f"automation trigger transport failure: {error}") from error
        except (httpx.HTTPError, httpx.InvalidURL) as error:
            raise AutomationTriggerConnectionError(f"automation trigger request failed: {error}") from error

        if not response.is_success:
            raise AutomationTriggerRejectedError(
                f"automation trigger rejected: status={response.status_code}",
                status_code=response.status_code,
            )

        logger.info("automation accepted job_id=%s status=%s", request.job_id, response.status_code)
        return AutomationTriggerResult(status_code=response.status_code, response_excerpt=response_excerpt)
