"""
Error taxonomy for the API: transform, definition and storage endpoints.

Every failure a request can end in is one of these exceptions. None of them is
retried by the service; the route layer renders them as ``{error, details?}``
with the class's HTTP status.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Dict, Optional

import openai

DETAILS_EXCERPT_CHARS = 200

# "rate" as a word start, so "generate" or "accurate" do not count
_RATE_SIGNAL_RE = re.compile(r"\brate")


class ErrorCode(str, Enum):
    """Stable labels for each failure class."""
    INVALID_REQUEST = "InvalidRequest"
    NOT_FOUND = "NotFound"
    UNAUTHENTICATED = "Unauthenticated"
    RATE_LIMITED = "RateLimited"
    UNAVAILABLE = "Unavailable"
    UPSTREAM_ERROR = "UpstreamError"
    MALFORMED_RESPONSE = "MalformedResponse"
    EMPTY_RESPONSE = "EmptyResponse"


class NotesServiceError(Exception):
    """Base class for request-terminating failures."""

    error_code: ErrorCode = ErrorCode.UPSTREAM_ERROR
    status_code: int = 500
    default_message = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class InvalidRequest(NotesServiceError):
    error_code = ErrorCode.INVALID_REQUEST
    status_code = 400
    default_message = "Invalid request format"


class NotFound(NotesServiceError):
    error_code = ErrorCode.NOT_FOUND
    status_code = 404
    default_message = "Resource not found"


class Unauthenticated(NotesServiceError):
    error_code = ErrorCode.UNAUTHENTICATED
    status_code = 401
    default_message = (
        "HF_TOKEN environment variable is not set. "
        "Please configure your inference API token."
    )


class RateLimited(NotesServiceError):
    error_code = ErrorCode.RATE_LIMITED
    status_code = 429
    default_message = "Inference API rate limit exceeded. Please try again in a moment."


class Unavailable(NotesServiceError):
    error_code = ErrorCode.UNAVAILABLE
    status_code = 503
    default_message = "The model is currently overloaded. Please try again later."


class UpstreamError(NotesServiceError):
    error_code = ErrorCode.UPSTREAM_ERROR
    status_code = 500
    default_message = "Inference API request failed"


class MalformedResponse(NotesServiceError):
    error_code = ErrorCode.MALFORMED_RESPONSE
    status_code = 500
    default_message = (
        "Failed to parse transformation response. "
        "The model may have returned invalid JSON. Please try again."
    )


class EmptyResponse(NotesServiceError):
    error_code = ErrorCode.EMPTY_RESPONSE
    status_code = 500
    default_message = "No definition received from the inference API"


def excerpt(text: str, limit: int = DETAILS_EXCERPT_CHARS) -> str:
    return (text or "")[:limit]


def classify_upstream_error(exc: Exception) -> NotesServiceError:
    """Map an exception raised by the inference SDK onto the taxonomy."""
    if isinstance(exc, NotesServiceError):
        return exc

    message = str(exc)
    lowered = message.lower()
    status = getattr(exc, "status_code", None)

    if (
        isinstance(exc, openai.AuthenticationError)
        or status == 401
        or "401" in message
        or "unauthorized" in lowered
    ):
        return Unauthenticated(
            "Inference API authentication failed. Check your HF_TOKEN is valid."
        )
    if (
        isinstance(exc, openai.RateLimitError)
        or status == 429
        or "429" in message
        or _RATE_SIGNAL_RE.search(lowered)
    ):
        return RateLimited()
    if "overloaded" in lowered:
        return Unavailable()
    return UpstreamError(f"Inference API Error: {message}")
