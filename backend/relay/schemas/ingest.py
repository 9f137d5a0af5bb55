"""
Arduino Relay - Pydantic Response Schemas
==========================================

What:  Pydantic models describing what the relay sends back.
Why:   Response shapes show up in the OpenAPI docs and are validated on the way out.
Note:  There is deliberately no request model. The relay stores whatever JSON
       it receives, so the body is typed as Any.
"""

from typing import Optional

from pydantic import BaseModel, Field


# Fixed body for every failed write; clients match on this exact string.
WRITE_FAILED_MESSAGE = "Failed to write to Firebase"


class IngestResponse(BaseModel):
    """
    What:  Returned by POST /arduino-data with HTTP 200.
    Why:   The key lets a dashboard fetch the exact record it just sent.
    """
    status: str = Field(default="success", description="Always 'success'")
    id: str = Field(description="Store-generated key of the new record")


class WriteFailedResponse(BaseModel):
    """Returned by POST /arduino-data with HTTP 500 when the write fails."""
    error: str = Field(default=WRITE_FAILED_MESSAGE, description="Fixed error message")


class ErrorResponse(BaseModel):
    """
    What:  Error format for everything other than a failed write.
    Fields:
        error: Machine-readable error code (e.g., "validation_error")
        message: Human-readable description
        request_id: Correlation ID for tracing this error in server logs
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """
    What:  Returned by GET /health.
    Why:   A relay that cannot reach Firebase is down even if the process is up.
    """
    status: str = Field(description="Overall status: healthy or unhealthy")
    version: str = Field(description="Application version")
    firebase: str = Field(description="Firebase status: connected or unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
