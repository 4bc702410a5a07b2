"""Job layer package for segment orchestration and status aggregation."""

from .async_processor import AutomationSegmentProcessor, CallbackItemOutcome, CallbackPayloadError
from .dispatcher import SegmentDispatcher
from .interfaces import (
	AggregationResult,
	DispatchOutcome,
	SegmentProcessorPort,
	SegmentRunResult,
	StatusAggregatorPort,
	UnknownSegmentError,
)
from .segment_guard import job_segment_is_durably_terminal
from .status_aggregator import StatusAggregator, job_aggregate_overall_status
from .sync_processor import ReferenceSegmentProcessor

__all__ = [
	"AggregationResult",
	"AutomationSegmentProcessor",
	"CallbackItemOutcome",
	"CallbackPayloadError",
	"DispatchOutcome",
	"ReferenceSegmentProcessor",
	"SegmentDispatcher",
	"SegmentProcessorPort",
	"SegmentRunResult",
	"StatusAggregator",
	"StatusAggregatorPort",
	"UnknownSegmentError",
	"job_aggregate_overall_status",
	"job_segment_is_durably_terminal",
]
