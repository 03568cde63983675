"""Exceptions and structured error codes.

Usage:
    from ipacl.core.errors import api_error, E

    raise api_error(400, E.INVALID_ADDRESS)
    raise AllowlistFormatError("allowlist: invalid allowlist")
"""
from enum import Enum

from fastapi import HTTPException


class AllowlistError(Exception):
    """Base class for every allowlist failure."""


class AllowlistFormatError(AllowlistError, ValueError):
    """Serialized allowlist could not be parsed."""


class AllowlistConfigError(AllowlistError, ValueError):
    """A gating handler was built without a mandatory collaborator."""


class AddressLookupError(AllowlistError):
    """No remote address could be obtained from a request or connection."""


class OverlappingNetworkError(AllowlistError):
    """A network overlaps an entry already present in a strict network list."""


class ErrorCode(str, Enum):
    """Error codes returned by the admin API."""

    INVALID_ADDRESS = "INVALID_ADDRESS"
    INVALID_ALLOWLIST = "INVALID_ALLOWLIST"
    ADDRESS_LOOKUP_FAILED = "ADDRESS_LOOKUP_FAILED"
    UNAUTHORIZED = "UNAUTHORIZED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# Shorthand alias
E = ErrorCode

_DEFAULT_MESSAGES: dict[str, str] = {
    E.INVALID_ADDRESS: "Invalid IP address",
    E.INVALID_ALLOWLIST: "Invalid allowlist",
    E.ADDRESS_LOOKUP_FAILED: "Failed to look up request address",
    E.UNAUTHORIZED: "Unauthorized",
    E.INTERNAL_ERROR: "Internal error",
}


def api_error(
    status_code: int,
    code: ErrorCode,
    detail: str | None = None,
) -> HTTPException:
    """Create an HTTPException with a structured error code.

    Args:
        status_code: HTTP status code (400, 401, 500, etc.)
        code: ErrorCode enum value
        detail: Human-readable message. If None, uses default for the code.

    Returns:
        HTTPException with JSON body {"detail": "...", "code": "ERROR_CODE"}
    """
    message = detail or _DEFAULT_MESSAGES.get(code, code.value)
    return HTTPException(
        status_code=status_code,
        detail={"detail": message, "code": code.value},
    )
