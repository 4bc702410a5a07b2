"""Immutable segment engine configuration shared across layers."""

from dataclasses import dataclass

from audit_pipeline.domain import OverallStatus


@dataclass(frozen=True)
class SegmentEngineConfig:
    """Immutable configuration shared by the automation trigger and the aggregator.

    Built once at process start and passed explicitly to each component.

    Attributes:
        organic_search_webhook_url: Automation webhook for organic search ranking.
        automation_trigger_timeout_seconds: Bounded timeout of one trigger call.
        all_queued_overall_status: Overall status reported while every segment is queued.
    """

    organic_search_webhook_url: str
    automation_trigger_timeout_seconds: float = 15.0
    all_queued_overall_status: OverallStatus = OverallStatus.QUEUED
