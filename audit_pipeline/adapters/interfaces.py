"""Typed interfaces for adapter-layer responsibilities."""

from dataclasses import dataclass, field
from typing import Any
from typing import Protocol


@dataclass(frozen=True)
class AutomationTriggerRequest:
    """Outbound payload for one asynchronous segment trigger.

    Attributes:
        job_id: Job identifier echoed back by the automation callback.
        location_key: Business location key.
        parameters: Service-selection and context parameters.
    """

    job_id: str
    location_key: str | None
    parameters: dict[str, Any] = field(default_factory=dict)

    def trigger_request_payload(self) -> dict[str, Any]:
        """Render the JSON body sent to the automation tool.

        Returns:
            dict[str, Any]: Wire payload with camelCase keys.
        """

        return {
            "jobId": self.job_id,
            "locationKey": self.location_key,
            "location": self.location_key,
            "parameters": dict(self.parameters),
        }


@dataclass(frozen=True)
class AutomationTriggerResult:
    """Result contract for an accepted trigger call.

    Accepted means the automation run was started, not that it finished.

    Attributes:
        status_code: HTTP status code returned by the automation tool.
        response_excerpt: Leading part of the response body for diagnostics.
    """

    status_code: int
    response_excerpt: str


class AutomationTriggerPort(Protocol):
    """Port definition for starting one external automation run."""

    def adapter_target_name(self) -> str:
        """Return a stable label of the trigger target for diagnostics.

        Returns:
            str: Target label.
        """

    def adapter_trigger(self, request: AutomationTriggerRequest) -> AutomationTriggerResult:
        """Start one automation run with a bounded timeout.

        Args:
            request: Trigger payload.

        Returns:
            AutomationTriggerResult: Acceptance details.

        Raises:
            AutomationTriggerTimeoutError: Raised when the call times out.
            AutomationTriggerConnectionError: Raised when the target cannot be reached.
            AutomationTriggerRejectedError: Raised when the target answers with non-success.
        """
