"""Error codes dictionary.

Single source of truth for every error code the API returns, its
retryability, and the suggested recovery action. Used by the exception
handlers to build machine-readable error responses.
"""

from typing import Any, TypedDict


class ErrorCodeSpec(TypedDict, total=False):
    """Specification for an error code."""

    retryable: bool
    suggested_action: str
    suggested_endpoint: str
    suggested_fix: str
    parameters: dict[str, Any]


ERROR_CODES: dict[str, ErrorCodeSpec] = {
    # ==========================================================================
    # Resource errors (refresh ids, then retry)
    # ==========================================================================
    "SCRAPBOOK_NOT_FOUND": {
        "retryable": False,
        "suggested_action": "refresh_ids",
        "suggested_endpoint": "GET /api/scrapbooks",
    },
    "PAGE_NOT_FOUND": {
        "retryable": False,
        "suggested_action": "refresh_ids",
        "suggested_endpoint": "GET /api/scrapbooks/{scrapbook_id}",
    },
    "ELEMENT_NOT_FOUND": {
        "retryable": False,
        "suggested_action": "refresh_ids",
        "suggested_endpoint": "GET /api/scrapbooks/{scrapbook_id}",
    },
    "SONG_NOT_FOUND": {
        "retryable": False,
        "suggested_action": "refresh_ids",
        "suggested_endpoint": "GET /api/songs",
    },
    "SONG_LINK_NOT_FOUND": {
        "retryable": False,
        "suggested_action": "refresh_ids",
        "suggested_endpoint": "GET /api/scrapbooks/{scrapbook_id}",
    },
    "NOT_FOUND": {
        "retryable": False,
    },
    # ==========================================================================
    # Authentication/Authorization errors
    # ==========================================================================
    "UNAUTHENTICATED": {
        "retryable": True,
        "suggested_action": "refresh_token",
        "suggested_fix": "Send a valid 'Authorization: Bearer <token>' header",
    },
    "FORBIDDEN": {
        "retryable": False,
        "suggested_fix": "Only the scrapbook owner can modify it or its pages",
    },
    # ==========================================================================
    # Validation errors (not retryable, fix input)
    # ==========================================================================
    "VALIDATION_ERROR": {
        "retryable": False,
    },
    "INVALID_ELEMENT": {
        "retryable": False,
        "suggested_fix": "Element type must be photo, sticker or text with numeric position, "
        "positive scale, integer zIndex and the properties its type requires",
    },
    "BAD_REQUEST": {
        "retryable": False,
    },
    # ==========================================================================
    # Conflict errors
    # ==========================================================================
    "SONG_ALREADY_LINKED": {
        "retryable": False,
    },
    # ==========================================================================
    # System errors (retry belongs to the caller)
    # ==========================================================================
    "STORAGE_ERROR": {
        "retryable": True,
        "suggested_action": "retry_with_backoff",
        "parameters": {"delay_ms": 2000, "max_retries": 2},
    },
    "INTERNAL_ERROR": {
        "retryable": True,
        "suggested_action": "retry_with_backoff",
        "parameters": {"delay_ms": 2000, "max_retries": 2},
    },
}


def get_error_spec(code: str) -> ErrorCodeSpec:
    """Get error specification by code.

    Unknown codes are treated as non-retryable.
    """
    return ERROR_CODES.get(code, {"retryable": False})
