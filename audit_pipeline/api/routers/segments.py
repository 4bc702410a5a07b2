"""Segment router for automation callbacks and operator re-runs."""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Query, Request, status
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from audit_pipeline.db import JobStoreUnavailableError
from audit_pipeline.domain import ORGANIC_SEARCH_SEGMENT
from audit_pipeline.jobs import (
    AutomationSegmentProcessor,
    CallbackItemOutcome,
    CallbackPayloadError,
    DispatchOutcome,
    SegmentDispatcher,
    UnknownSegmentError,
)

logger = logging.getLogger(__name__)


def api_create_segments_router(
    dispatcher: SegmentDispatcher,
    callback_processors: dict[str, AutomationSegmentProcessor],
) -> APIRouter:
    """Create segment router with callback and manual run endpoints.

    Args:
        dispatcher: Segment dispatcher used for manual re-runs.
        callback_processors: Two-phase processors keyed by stage name.

    Returns:
        APIRouter: Router exposing segment APIs.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if dispatcher is None:
        raise ValueError("dispatcher must not be None")
    if callback_processors is None:
        raise ValueError("callback_processors must not be None")

    router = APIRouter(tags=["segments"])

    async def _api_handle_callback(stage: str, request: Request) -> JSONResponse:
        processor = callback_processors.get(stage)
        if processor is None:
            return JSONResponse(
                content={"status": "error", "message": f"stage {stage} does not accept callbacks"},
                status_code=status.HTTP_404_NOT_FOUND,
            )

        try:
            payload = json.loads(await request.body() or b"null")
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.error("[%s] callback body is not valid JSON", stage)
            return JSONResponse(
                content={"status": "error", "message": "invalid JSON payload"},
                status_code=status.HTTP_400_BAD_REQUEST,
            )

        try:
            item_outcomes = await run_in_threadpool(processor.segment_handle_callback, payload)
        except CallbackPayloadError as error:
            logger.error("[%s] callback rejected: %s", stage, error)
            return JSONResponse(
                content={"status": "error", "message": str(error)},
                status_code=status.HTTP_400_BAD_REQUEST,
            )
        except JobStoreUnavailableError as error:
            logger.error("[%s] callback aborted, store unavailable: %s", stage, error)
            return JSONResponse(
                content={"status": "error", "message": "store unavailable"},
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            )

        return JSONResponse(
            content={
                "ok": True,
                "items": [api_serialize_callback_outcome(item_outcome) for item_outcome in item_outcomes],
            },
            status_code=status.HTTP_200_OK,
        )

    @router.post("/segments/{stage}/callback")
    async def api_segment_callback(stage: str, request: Request) -> JSONResponse:
        """Apply result records posted by the automation tool for one stage."""

        return await _api_handle_callback(stage.strip(), request)

    @router.post("/organic-result")
    async def api_organic_result_callback(request: Request) -> JSONResponse:
        """Legacy callback path used by the organic search automation."""

        return await _api_handle_callback(ORGANIC_SEARCH_SEGMENT, request)

    @router.post("/segments/{stage}/run")
    def api_segment_manual_run(stage: str, job_id: str = Query(min_length=1)) -> JSONResponse:
        """Re-run one segment of one job outside the message channel.

        Args:
            stage: Stage name.
            job_id: Job identifier.

        Returns:
            JSONResponse: Dispatch outcome, 404 for unknown stages, 503 on store outage.
        """

        try:
            outcome = dispatcher.dispatcher_run_manual(job_id=job_id, stage=stage)
        except UnknownSegmentError as error:
            return JSONResponse(
                content={"status": "error", "message": str(error)},
                status_code=status.HTTP_404_NOT_FOUND,
            )
        except ValueError as error:
            return JSONResponse(
                content={"status": "error", "message": str(error)},
                status_code=status.HTTP_400_BAD_REQUEST,
            )

        response_status = status.HTTP_200_OK if outcome.acknowledge else status.HTTP_503_SERVICE_UNAVAILABLE
        return JSONResponse(content=api_serialize_dispatch_outcome(outcome), status_code=response_status)

    return router


def api_serialize_callback_outcome(item_outcome: CallbackItemOutcome) -> dict[str, Any]:
    """Serialize one callback item outcome to a JSON payload."""

    return {
        "jobId": item_outcome.job_id,
        "accepted": item_outcome.accepted,
        "detail": item_outcome.detail,
        "segmentStatus": item_outcome.segment_status.value if item_outcome.segment_status else None,
    }


def api_serialize_dispatch_outcome(outcome: DispatchOutcome) -> dict[str, Any]:
    """Serialize one dispatch outcome to a JSON payload."""

    run_result = outcome.run_result
    return {
        "jobId": outcome.job_id,
        "stage": outcome.stage,
        "acknowledged": outcome.acknowledge,
        "detail": outcome.detail,
        "segmentStatus": run_result.segment_status.value if run_result and run_result.segment_status else None,
    }
