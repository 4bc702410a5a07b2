"""Health endpoint router for process liveness and job store reachability."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from audit_pipeline.db import DatabaseHealthPort


def api_create_health_router(
    db_health_service: DatabaseHealthPort,
    registered_stages: tuple[str, ...] = (),
) -> APIRouter:
    """Create health-check router reporting job store reachability.

    A reachable database without the audit job table reports as degraded,
    since no segment can run against it.

    Args:
        db_health_service: DB-layer health service interface.
        registered_stages: Stage names served by the dispatcher.

    Returns:
        APIRouter: Router exposing `/health` endpoint.

    Raises:
        ValueError: Raised when db_health_service is invalid.
    """

    if db_health_service is None:
        raise ValueError("db_health_service must not be None")

    router = APIRouter(tags=["health"])

    @router.get("/health")
    def api_health_status() -> JSONResponse:
        """Return process and job store health state.

        Returns:
            JSONResponse: 200 when the job store answers, 503 otherwise.
        """

        payload: dict[str, object] = {
            "app": "up",
            "target": db_health_service.db_connection_label(),
            "stages": list(registered_stages),
        }
        try:
            db_health = db_health_service.db_check_health()
        except ConnectionError as error:
            payload.update({"status": "degraded", "database": "down", "detail": str(error)})
            return JSONResponse(content=payload, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

        payload.update({"status": "ok", "database": db_health.status, "detail": db_health.detail})
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    return router
