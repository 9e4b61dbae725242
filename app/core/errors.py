"""Error taxonomy for the generate endpoint.

Every failure the request handler can produce is one of these exceptions. Each
carries a ``kind`` (stable identifier used in logs), the HTTP status it maps to
and a short public message. Internal details stay in ``__cause__`` and in the
server log; clients only ever see ``public_message``.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from fastapi import status


class FailureKind(str, Enum):
    AUTH_MISSING = "auth_missing"
    AUTH_INVALID = "auth_invalid"
    BAD_INPUT = "bad_input"
    UPSTREAM = "upstream_error"
    EXTRACTION = "extraction_error"
    PARSE = "parse_error"
    SCHEMA = "schema_error"


class StudyBuddyError(Exception):
    kind: FailureKind
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "An unknown server error occurred."

    def __init__(self, message: Optional[str] = None, *, detail: Optional[str] = None):
        self.public_message = message or self.default_message
        # Server-side only; never sent to the client
        self.detail = detail
        super().__init__(self.public_message)

    def __str__(self) -> str:
        if self.detail:
            return f"{self.public_message} ({self.detail})"
        return self.public_message


class AuthMissing(StudyBuddyError):
    kind = FailureKind.AUTH_MISSING
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Missing or malformed Authorization header"


class AuthInvalid(StudyBuddyError):
    kind = FailureKind.AUTH_INVALID
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid or expired token"


class BadInput(StudyBuddyError):
    kind = FailureKind.BAD_INPUT
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Query must be a non-empty string"


class UpstreamError(StudyBuddyError):
    kind = FailureKind.UPSTREAM
    default_message = "The study material service is unavailable right now."

    # Provider statuses passed through to the client as-is
    PASSTHROUGH_STATUSES = frozenset({429, 500, 502, 503, 504})

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        detail: Optional[str] = None,
        upstream_status: Optional[int] = None,
    ):
        super().__init__(message, detail=detail)
        self.upstream_status = upstream_status
        if upstream_status in self.PASSTHROUGH_STATUSES:
            self.status_code = upstream_status


class ExtractionError(StudyBuddyError):
    kind = FailureKind.EXTRACTION
    default_message = "No valid JSON object found in the AI response."


class ParseError(StudyBuddyError):
    kind = FailureKind.PARSE
    default_message = "The AI response was not valid JSON."


class SchemaError(StudyBuddyError):
    kind = FailureKind.SCHEMA
    default_message = "The AI response did not match the study package schema."

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        issues: Optional[list] = None,
        detail: Optional[str] = None,
    ):
        self.issues = list(issues or [])
        if detail is None and self.issues:
            detail = "; ".join(str(i) for i in self.issues)
        super().__init__(message, detail=detail)
