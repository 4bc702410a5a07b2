"""Read-only job status router for polling clients."""

from __future__ import annotations

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from audit_pipeline.db import AuditJobRecord, AuditJobStorePort, JobStoreUnavailableError


def api_create_jobs_router(job_store: AuditJobStorePort) -> APIRouter:
    """Create job status router.

    Args:
        job_store: Audit job store.

    Returns:
        APIRouter: Router exposing `GET /jobs/{job_id}/status`.

    Raises:
        ValueError: Raised when job_store is None.
    """

    if job_store is None:
        raise ValueError("job_store must not be None")

    router = APIRouter(prefix="/jobs", tags=["jobs"])

    @router.get("/{job_id}/status")
    def api_job_status(job_id: str) -> JSONResponse:
        """Return overall and per-segment status of one job.

        Args:
            job_id: Job identifier.

        Returns:
            JSONResponse: Status payload, 404 when absent, 503 on store outage.
        """

        try:
            job = job_store.db_job_get_by_id(job_id)
        except JobStoreUnavailableError:
            return JSONResponse(
                content={"status": "error", "message": "store unavailable"},
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            )
        if job is None:
            return JSONResponse(
                content={"status": "error", "message": "job not found"},
                status_code=status.HTTP_404_NOT_FOUND,
            )
        return JSONResponse(content=api_serialize_job_status(job), status_code=status.HTTP_200_OK)

    return router


def api_serialize_job_status(job: AuditJobRecord) -> dict[str, object]:
    """Serialize job status fields to a JSON payload.

    Args:
        job: Typed job record.

    Returns:
        dict[str, object]: JSON-serializable status payload.
    """

    return {
        "jobId": job.job_id,
        "status": job.overall_status.value if job.overall_status else None,
        "segments": {segment_name: segment_status.value for segment_name, segment_status in job.segment_status.items()},
    }
