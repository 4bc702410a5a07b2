"""Message channel push endpoint routing `(jobId, stage)` envelopes to the dispatcher."""

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any

from fastapi import APIRouter, Request, Response, status
from starlette.concurrency import run_in_threadpool

from audit_pipeline.jobs import SegmentDispatcher

logger = logging.getLogger(__name__)


def api_create_messages_router(dispatcher: SegmentDispatcher) -> APIRouter:
    """Create the push-subscription router.

    Deliveries are acknowledged with 204. Only a store outage answers 503 so the
    channel redelivers; malformed envelopes are acknowledged and logged because
    replaying them can never succeed.

    Args:
        dispatcher: Segment dispatcher.

    Returns:
        APIRouter: Router exposing `POST /messages/push`.

    Raises:
        ValueError: Raised when dispatcher is None.
    """

    if dispatcher is None:
        raise ValueError("dispatcher must not be None")

    router = APIRouter(prefix="/messages", tags=["messages"])

    @router.post("/push")
    async def api_messages_push(request: Request) -> Response:
        raw_body = await request.body()
        message_payload = api_decode_push_envelope(raw_body)
        if message_payload is None:
            return Response(status_code=status.HTTP_204_NO_CONTENT)

        job_id = str(message_payload.get("jobId") or "").strip()
        stage = str(message_payload.get("stage") or "").strip()
        logger.info("delivery received job_id=%s stage=%s", job_id, stage)

        outcome = await run_in_threadpool(dispatcher.dispatcher_dispatch, job_id, stage)
        if not outcome.acknowledge:
            return Response(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router


def api_decode_push_envelope(raw_body: bytes) -> dict[str, Any] | None:
    """Decode a push envelope into its message payload.

    Accepts `{"message": {"data": <base64 JSON>, "attributes": {...}}}`. The
    `stage` may also be carried as a message attribute.

    Args:
        raw_body: Raw HTTP request body.

    Returns:
        dict[str, Any] | None: Message payload, or None when the envelope is malformed.
    """

    try:
        envelope = json.loads(raw_body or b"null")
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.error("push envelope is not valid JSON, acknowledged")
        return None

    message = envelope.get("message") if isinstance(envelope, dict) else None
    if not isinstance(message, dict) or not message.get("data"):
        logger.error("push envelope without message data, acknowledged")
        return None

    try:
        decoded_data = base64.b64decode(str(message["data"]), validate=True).decode("utf-8")
        message_payload = json.loads(decoded_data)
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError):
        logger.error("push message data could not be decoded, acknowledged")
        return None

    if not isinstance(message_payload, dict):
        logger.error("push message data is not an object, acknowledged")
        return None

    attributes = message.get("attributes")
    if isinstance(attributes, dict) and not message_payload.get("stage") and attributes.get("stage"):
        message_payload["stage"] = attributes["stage"]
    return message_payload
