"""FastAPI application factory for the segment orchestration service.

This module composes the channel push, callback, manual run, status and
health routers into one application.
"""

from fastapi import FastAPI

from audit_pipeline.config import AppSettings
from audit_pipeline.db import AuditJobStorePort, DatabaseHealthPort
from audit_pipeline.jobs import AutomationSegmentProcessor, SegmentDispatcher

from .routers import (
    api_create_health_router,
    api_create_jobs_router,
    api_create_messages_router,
    api_create_segments_router,
)


def create_api_application(
    settings: AppSettings,
    db_health_service: DatabaseHealthPort,
    job_store: AuditJobStorePort,
    dispatcher: SegmentDispatcher,
    callback_processors: dict[str, AutomationSegmentProcessor] | None = None,
) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated application settings used for runtime metadata.
        db_health_service: Database health service used by health endpoints.
        job_store: Audit job store used by the status endpoint.
        dispatcher: Segment dispatcher for channel deliveries and manual runs.
        callback_processors: Optional two-phase processors keyed by stage name.

    Returns:
        FastAPI: Framework application instance with all routers mounted.

    Raises:
        ValueError: Raised when a router dependency is invalid.
    """
    application = FastAPI(title="Audit Segment Pipeline")

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, object]:
        """Return service identity and registered stages.

        Returns:
            dict[str, object]: Minimal response for deployment verification.
        """

        return {
            "service": "audit-segment-pipeline",
            "status": "ready",
            "environment": settings.environment_name,
            "stages": list(dispatcher.dispatcher_stages()),
        }

    application.include_router(
        api_create_health_router(
            db_health_service=db_health_service,
            registered_stages=dispatcher.dispatcher_stages(),
        )
    )
    application.include_router(api_create_messages_router(dispatcher=dispatcher))
    application.include_router(
        api_create_segments_router(
            dispatcher=dispatcher,
            callback_processors=callback_processors or {},
        )
    )
    application.include_router(api_create_jobs_router(job_store=job_store))

    return application
