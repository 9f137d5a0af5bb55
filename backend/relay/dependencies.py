"""
Arduino Relay - FastAPI Dependencies
=====================================

What:  Request-scoped access to the sink created at startup, plus the JSON
       body parsing stage.
Why:   The Firebase client lives on `app.state`, created once by the
       application factory/lifespan. Routes ask for it through Depends()
       instead of importing module-level singletons, which keeps tests free to
       build an app around a fake sink.
"""

from typing import Any

from fastapi import Body, Request

from relay.exceptions import ValidationError
from relay.services.data_sink import DataSink, UnavailableDataSink


def get_data_sink(request: Request) -> DataSink:
    """
    The shared DataSink for this app.

    Falls back to UnavailableDataSink when startup has not installed one,
    so writes still end in the fixed failure body.
    """
    sink = getattr(request.app.state, "data_sink", None)
    if sink is None:
        return UnavailableDataSink()
    return sink


async def json_payload(payload: Any = Body(...)) -> Any:
    """
    Body parsing stage for the ingest route.

    FastAPI has already decoded the body when this runs. Malformed JSON, an
    empty body, and a JSON null all fail inside FastAPI and surface as a
    RequestValidationError. What reaches here as raw bytes was sent with a
    non-JSON content type.

    Raises:
        ValidationError: The body arrived but was not JSON.
    """
    if isinstance(payload, (bytes, bytearray)):
        raise ValidationError(
            message="Request body must be JSON (Content-Type: application/json)",
            context={"body_type": type(payload).__name__},
        )
    return payload
