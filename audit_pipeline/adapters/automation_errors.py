"""Project-native typed exceptions for outbound automation trigger failures."""

from __future__ import annotations


class AutomationTriggerError(Exception):
    """Base exception for automation trigger failures.

    Attributes:
        status_code: Optional HTTP status code returned by the automation tool.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class AutomationTriggerConnectionError(AutomationTriggerError, ConnectionError):
    """Transport-level connectivity failure while calling the automation tool."""


class AutomationTriggerTimeoutError(AutomationTriggerError, TimeoutError):
    """Automation tool did not answer within the bounded timeout."""


class AutomationTriggerRejectedError(AutomationTriggerError, ValueError):
    """Automation tool answered with a non-success status."""
