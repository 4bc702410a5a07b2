"""Adapter layer package for external automation boundaries."""

from .automation_errors import (
	AutomationTriggerConnectionError,
	AutomationTriggerError,
	AutomationTriggerRejectedError,
	AutomationTriggerTimeoutError,
)
from .automation_trigger import WebhookAutomationTrigger
from .interfaces import AutomationTriggerPort, AutomationTriggerRequest, AutomationTriggerResult

__all__ = [
	"AutomationTriggerConnectionError",
	"AutomationTriggerError",
	"AutomationTriggerPort",
	"AutomationTriggerRejectedError",
	"AutomationTriggerRequest",
	"AutomationTriggerResult",
	"AutomationTriggerTimeoutError",
	"WebhookAutomationTrigger",
]
