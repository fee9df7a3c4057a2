"""Custom exceptions for the scrapbook backend.

Every error carries a machine-readable code from
``scrapbook_api.constants.error_codes`` and an HTTP status, and renders to an
``ErrorInfo`` for the response envelope.
"""

from scrapbook_api.constants.error_codes import get_error_spec
from scrapbook_api.schemas.envelope import ErrorInfo, ErrorLocation, SuggestedAction


class ScrapbookError(Exception):
    """Base exception for all scrapbook application errors."""

    code: str = "INTERNAL_ERROR"
    status_code: int = 500
    message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        status_code: int | None = None,
        location: ErrorLocation | None = None,
        suggested_fix: str | None = None,
    ):
        self.message = message or self.__class__.message
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code
        self.location = location
        self.suggested_fix = suggested_fix
        super().__init__(self.message)

    def to_error_info(self) -> ErrorInfo:
        """Convert exception to ErrorInfo for API response."""
        spec = get_error_spec(self.code)

        suggested_actions: list[SuggestedAction] = []
        if "suggested_action" in spec:
            suggested_actions.append(
                SuggestedAction(
                    action=spec["suggested_action"],
                    endpoint=spec.get("suggested_endpoint"),
                    parameters=spec.get("parameters", {}),
                )
            )

        return ErrorInfo(
            code=self.code,
            message=self.message,
            location=self.location,
            retryable=spec.get("retryable", False),
            suggested_fix=self.suggested_fix or spec.get("suggested_fix"),
            suggested_actions=suggested_actions,
        )


# =============================================================================
# Resource Not Found Errors (404)
# =============================================================================


class ResourceNotFoundError(ScrapbookError):
    """Base class for resource not found errors."""

    code = "NOT_FOUND"
    status_code = 404
    message = "Resource not found"
    entity: str = "Resource"

    def __init__(self, entity_id: object | None = None):
        message = f"{self.entity} not found: {entity_id}" if entity_id else self.message
        location = (
            ErrorLocation(entity=self.entity.lower(), entity_id=str(entity_id)) if entity_id else None
        )
        super().__init__(message, location=location)


class ScrapbookNotFoundError(ResourceNotFoundError):
    code = "SCRAPBOOK_NOT_FOUND"
    message = "Scrapbook not found"
    entity = "Scrapbook"


class PageNotFoundError(ResourceNotFoundError):
    code = "PAGE_NOT_FOUND"
    message = "Page not found"
    entity = "Page"


class ElementNotFoundError(ResourceNotFoundError):
    code = "ELEMENT_NOT_FOUND"
    message = "Element not found"
    entity = "Element"


class SongNotFoundError(ResourceNotFoundError):
    code = "SONG_NOT_FOUND"
    message = "Song not found"
    entity = "Song"


class SongLinkNotFoundError(ResourceNotFoundError):
    code = "SONG_LINK_NOT_FOUND"
    message = "Song link not found"
    entity = "Song link"


# =============================================================================
# Authorization Errors (403)
# =============================================================================


class ForbiddenError(ScrapbookError):
    """The entity exists but the caller may not act on it."""

    code = "FORBIDDEN"
    status_code = 403
    message = "Access denied"


# =============================================================================
# Validation Errors (422)
# =============================================================================


class ValidationError(ScrapbookError):
    """Base class for validation errors."""

    code = "VALIDATION_ERROR"
    status_code = 422
    message = "Validation failed"


class ElementValidationError(ValidationError):
    """An element in a layout or add request is malformed."""

    code = "INVALID_ELEMENT"
    message = "Invalid element"

    def __init__(self, reason: str, *, index: int | None = None, field: str | None = None):
        prefix = f"elements[{index}]" if index is not None else "element"
        message = f"{prefix}: {reason}"
        super().__init__(message, location=ErrorLocation(field=field, index=index))


# =============================================================================
# Conflict Errors (409)
# =============================================================================


class ConflictError(ScrapbookError):
    """Base class for conflict errors."""

    code = "CONFLICT"
    status_code = 409
    message = "Conflict"


class SongAlreadyLinkedError(ConflictError):
    code = "SONG_ALREADY_LINKED"
    message = "Song is already linked to this scrapbook"


# =============================================================================
# System Errors
# =============================================================================


class StorageError(ScrapbookError):
    """The storage engine failed or aborted the transaction."""

    code = "STORAGE_ERROR"
    status_code = 503
    message = "Storage operation failed"
