# FileMaker Data MCP Server
# File: errors.py
# Version: v1

"""Error taxonomy for the FileMaker Data MCP Server.

Every failure is normalised into a single :class:`ErrorDescriptor` carrying a
stable internal code, a human message and a retry hint. Two lookup tables feed
the resolver:

- ``HTTP_ERROR_MAP``: generic conditions keyed by HTTP status.
- ``FM_ERROR_MAP``: FileMaker Data API error codes (``messages[].code``).

FileMaker codes are always consulted first. FileMaker code 401 means "no
records match the request" and collides numerically with HTTP 401 (session
expired); checking the FileMaker table first keeps the two apart.

Internal code ranges:

=========  =================
1000-1099  authentication
2000-2099  session
3000-3099  API / request
4000-4099  analysis
5000-5099  internal
=========  =================
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Any, Dict, Mapping, Optional


class ErrorCode(IntEnum):
    AUTH_INVALID_CREDENTIALS = 1001
    AUTH_SERVER_UNAVAILABLE = 1002
    AUTH_DATABASE_NOT_FOUND = 1003
    AUTH_INSUFFICIENT_PRIVILEGES = 1004
    AUTH_ACCOUNT_LOCKED = 1005

    SESSION_EXPIRED = 2001
    SESSION_INVALID = 2002
    SESSION_MAX_CONNECTIONS = 2003

    API_LAYOUT_NOT_FOUND = 3001
    API_RECORD_NOT_FOUND = 3002
    API_FIELD_NOT_FOUND = 3003
    API_INVALID_QUERY = 3004
    API_INSUFFICIENT_PRIVILEGES = 3005
    API_RATE_LIMITED = 3006

    ANALYSIS_METADATA_FAILED = 4001
    ANALYSIS_PORTAL_FAILED = 4002
    ANALYSIS_TIMEOUT = 4003

    INTERNAL_UNKNOWN = 5001
    INTERNAL_CONFIG_ERROR = 5002
    INTERNAL_MEMORY_ERROR = 5003


# FileMaker Data API code for "No records match the request".
FM_NO_RECORDS_MATCH = 401


@dataclass(frozen=True)
class ErrorDescriptor:
    """Normalised, immutable description of one failure."""

    code: int
    message: str
    retryable: bool
    details: Optional[str] = None
    fm_error_code: Optional[int] = None

    @property
    def is_no_records_match(self) -> bool:
        return self.fm_error_code == FM_NO_RECORDS_MATCH

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "code": int(self.code),
            "message": self.message,
            "retryable": self.retryable,
        }
        if self.details:
            out["details"] = self.details
        if self.fm_error_code is not None:
            out["fm_error_code"] = self.fm_error_code
        return out


class FileMakerError(RuntimeError):
    """Raised for any failure that has been resolved to an ErrorDescriptor."""

    def __init__(self, error: ErrorDescriptor):
        super().__init__(error.message)
        self.error = error

    @property
    def code(self) -> int:
        return self.error.code

    @property
    def retryable(self) -> bool:
        return self.error.retryable

    def __str__(self) -> str:
        if self.error.details:
            return f"{self.error.message} ({self.error.details})"
        return self.error.message


def _entry(code: ErrorCode, message: str, retryable: bool) -> ErrorDescriptor:
    return ErrorDescriptor(code=code, message=message, retryable=retryable)


HTTP_ERROR_MAP: Mapping[int, ErrorDescriptor] = {
    400: _entry(ErrorCode.API_INVALID_QUERY, "Bad request", False),
    # Recoverable by logging in again.
    401: _entry(ErrorCode.SESSION_EXPIRED, "Session expired", True),
    403: _entry(ErrorCode.AUTH_INSUFFICIENT_PRIVILEGES, "Insufficient privileges", False),
    404: _entry(ErrorCode.API_LAYOUT_NOT_FOUND, "Resource not found", False),
    409: _entry(ErrorCode.API_INVALID_QUERY, "Conflict", False),
    413: _entry(ErrorCode.API_INVALID_QUERY, "Payload too large", False),
    429: _entry(ErrorCode.API_RATE_LIMITED, "Rate limited - too many requests", True),
    500: _entry(ErrorCode.INTERNAL_UNKNOWN, "FileMaker server error", True),
    502: _entry(ErrorCode.AUTH_SERVER_UNAVAILABLE, "Bad gateway", True),
    503: _entry(ErrorCode.AUTH_SERVER_UNAVAILABLE, "FileMaker server unavailable", True),
    504: _entry(ErrorCode.AUTH_SERVER_UNAVAILABLE, "Gateway timeout", True),
}

FM_ERROR_MAP: Mapping[int, ErrorDescriptor] = {
    100: _entry(ErrorCode.API_RECORD_NOT_FOUND, "File is missing", False),
    101: _entry(ErrorCode.API_RECORD_NOT_FOUND, "Record is missing", False),
    102: _entry(ErrorCode.API_FIELD_NOT_FOUND, "Field is missing", False),
    105: _entry(ErrorCode.API_LAYOUT_NOT_FOUND, "Layout is missing", False),
    212: _entry(ErrorCode.AUTH_INVALID_CREDENTIALS, "Invalid username or password", False),
    214: _entry(ErrorCode.AUTH_ACCOUNT_LOCKED, "Account is locked out", False),
    400: _entry(ErrorCode.API_INVALID_QUERY, "Find criteria are empty", False),
    # An empty search result, not an authentication problem.
    FM_NO_RECORDS_MATCH: _entry(
        ErrorCode.API_RECORD_NOT_FOUND, "No records match the request", False
    ),
    802: _entry(ErrorCode.AUTH_SERVER_UNAVAILABLE, "Unable to open file", True),
    952: _entry(
        ErrorCode.AUTH_INSUFFICIENT_PRIVILEGES, "Insufficient access privileges", False
    ),
}

UNKNOWN_ERROR = _entry(ErrorCode.INTERNAL_UNKNOWN, "Unknown error", False)


def resolve_error(http_status: int, fm_error_code: Optional[int] = None) -> ErrorDescriptor:
    """Map an (HTTP status, FileMaker code) pair to a table descriptor.

    Resolution order:
    1. FileMaker code, when present and known.
    2. HTTP status, when known.
    3. ``INTERNAL_UNKNOWN`` (not retryable).
    """
    if fm_error_code is not None and fm_error_code in FM_ERROR_MAP:
        return FM_ERROR_MAP[fm_error_code]

    if http_status in HTTP_ERROR_MAP:
        return HTTP_ERROR_MAP[http_status]

    return UNKNOWN_ERROR


def create_error(
    http_status: int,
    fm_error_code: Optional[int] = None,
    details: Optional[str] = None,
) -> ErrorDescriptor:
    """Resolve and attach call-site details plus the original FileMaker code."""
    resolved = resolve_error(http_status, fm_error_code)
    return replace(resolved, details=details, fm_error_code=fm_error_code)


def extract_fm_error_code(body: Any) -> Optional[int]:
    """Pull the FileMaker error code out of an error payload.

    FileMaker reports errors as ``{"messages": [{"code": "401", ...}]}``.
    Code ``0`` means OK and is ignored.
    """
    if not isinstance(body, dict):
        return None

    messages = body.get("messages")
    if not isinstance(messages, list) or not messages:
        return None

    first = messages[0]
    if not isinstance(first, dict):
        return None

    try:
        code = int(str(first.get("code")).strip())
    except (TypeError, ValueError):
        return None

    return code or None


def is_retryable(code: int) -> bool:
    """Return the retry flag stored for an internal code.

    The HTTP table is scanned first, then the FileMaker table; codes found in
    neither are not retryable.
    """
    for table in (HTTP_ERROR_MAP, FM_ERROR_MAP):
        for info in table.values():
            if info.code == code:
                return info.retryable
    return False


def no_session_error(details: Optional[str] = None) -> ErrorDescriptor:
    """Descriptor for calls made without a session; log in first, do not retry."""
    return ErrorDescriptor(
        code=ErrorCode.SESSION_INVALID,
        message="No active session. Please login first.",
        retryable=False,
        details=details,
    )


def config_error(errors: Any) -> ErrorDescriptor:
    details = "; ".join(errors) if isinstance(errors, (list, tuple)) else str(errors)
    return ErrorDescriptor(
        code=ErrorCode.INTERNAL_CONFIG_ERROR,
        message="Invalid configuration",
        retryable=False,
        details=details,
    )
