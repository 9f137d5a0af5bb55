"""
Arduino Relay - Custom Exception Hierarchy
===========================================

What:  Application-specific exceptions for the few things that can go wrong.
Why:   Each error class maps to one HTTP outcome and carries a context dict
       that is logged server-side but never returned to the client.
Who:   Raised by the body parser and the data sink; handled in main.py and
       in the ingest route.

Exception Hierarchy:
    RelayError (base)
    ├── ValidationError      → 400 Bad Request (body is not JSON)
    ├── ConfigurationError   → logged at startup; writes then fail with 500
    └── SinkWriteError       → carried in WriteFailed; 500 with fixed body

Design Decision:
    SinkWriteError is not raised across the route boundary. The sink wraps it
    in a WriteFailed result and the route branches on the result type, so the
    fixed "Failed to write to Firebase" body is produced in exactly one place.
"""

from typing import Any, Dict, Optional


class RelayError(Exception):
    """
    Base exception for all relay errors.

    Attributes:
        message:  Human-readable description (safe to log)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(RelayError):
    """
    Raised when the request body cannot be parsed as JSON.

    HTTP:    400 Bad Request
    When:    Malformed JSON, empty body, JSON null, or a non-JSON content type.
    Note:    The relay validates nothing beyond "is this JSON"; payload
             structure is never inspected.
    """

    def __init__(
        self,
        message: str = "Request body must be valid JSON",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConfigurationError(RelayError):
    """
    Raised when the Firebase app cannot be initialized.

    When:    Missing or unreadable service account file, malformed key,
             invalid database URL.
    Recovery:
        The server keeps running so /health can report the problem. Every
        write returns WriteFailed until the process is restarted with a
        working configuration.
    """

    def __init__(
        self,
        message: str = "Firebase is not configured",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class SinkWriteError(RelayError):
    """
    Describes a failed append to the keyed store.

    When:    Network failure, permission denied, value not serializable,
             or the sink was never connected.
    HTTP:    500 with {"error": "Failed to write to Firebase"}; the message and
             context here only reach the log.
    """

    def __init__(
        self,
        message: str = "Failed to write to Firebase",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
