"""
Arduino Relay - Ingest Route Handler
=====================================

What:  Handles POST /arduino-data: stores the JSON body in Firebase and
       returns the generated key.
Who:   Called by the Arduino sensor board (and anything else on the network).
When:  Every time the device reports a reading.

Request Flow:
    1. json_payload dependency decodes the body (400 if it is not JSON)
    2. DataSink.append() writes it under a fresh push key
    3. WriteSucceeded → 200 {"status": "success", "id": key}
       WriteFailed    → 500 {"error": "Failed to write to Firebase"}

What this route does NOT do:
    - No auth, no size limit, no field validation: the payload is opaque
    - No retry: a failed write is reported and the device may resend
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from relay.dependencies import get_data_sink, json_payload
from relay.middleware.request_id import request_id_var
from relay.schemas.ingest import (
    WRITE_FAILED_MESSAGE,
    ErrorResponse,
    IngestResponse,
    WriteFailedResponse,
)
from relay.services.data_sink import DataSink, WriteFailed, WriteSucceeded

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Ingest"])


@router.post(
    "/arduino-data",
    response_model=IngestResponse,
    responses={
        200: {"description": "Record stored", "model": IngestResponse},
        400: {"description": "Body is not valid JSON", "model": ErrorResponse},
        500: {"description": "Firebase write failed", "model": WriteFailedResponse},
    },
    summary="Store one sensor payload",
    description=(
        "Accepts any JSON value and appends it to the Firebase Realtime Database "
        "under a new push key. Returns the key of the stored record."
    ),
)
async def ingest_arduino_data(
    payload: Any = Depends(json_payload),
    sink: DataSink = Depends(get_data_sink),
):
    """
    Relay one payload to Firebase.

    Returns:
        IngestResponse (HTTP 200) on success, or a JSONResponse with the fixed
        500 body when the sink reports a failed write.
    """
    result = await sink.append(payload)

    if isinstance(result, WriteSucceeded):
        return IngestResponse(id=result.key)

    if isinstance(result, WriteFailed):
        # Detail goes to the log only; the client always sees the same body
        logger.error(
            "[%s] Firebase write error: %s | Context: %s",
            request_id_var.get(""),
            result.error.message,
            result.error.context,
        )
    else:
        logger.error("[%s] Unknown write result: %r", request_id_var.get(""), result)

    return JSONResponse(
        status_code=500,
        content=WriteFailedResponse(error=WRITE_FAILED_MESSAGE).model_dump(),
    )
