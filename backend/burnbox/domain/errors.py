"""
Burn Errors

Domain exceptions raised by the lifecycle service and the stores, plus the
categories and user-facing copy the API maps them to.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(Enum):
    """Error categories reported in the "error" field of API responses."""

    INVALID_REQUEST = "invalid_request"
    QUOTA_EXCEEDED = "quota_exceeded"
    BURN_NOT_FOUND = "burn_not_found"
    BURN_GONE = "burn_gone"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    INVALID_SIGNATURE = "invalid_signature"
    SERVICE_UNAVAILABLE = "service_unavailable"
    SYSTEM_ERROR = "system_error"


# Copy shown to uploaders and recipients, keyed by category
ERROR_MESSAGES: Dict[ErrorCategory, Dict[str, str]] = {
    ErrorCategory.INVALID_REQUEST: {
        "title": "Invalid Request",
        "message": "The request is missing required information or contains invalid data.",
        "action": "Please check your input and try again.",
    },
    ErrorCategory.QUOTA_EXCEEDED: {
        "title": "Plan Limit Exceeded",
        "message": "The requested file size, lifetime or download count is above what your plan allows.",
        "action": "Lower the requested value or upgrade to Pro.",
    },
    ErrorCategory.BURN_NOT_FOUND: {
        "title": "Burn Not Found",
        "message": "No file exists for this link.",
        "action": "Check the link you were given.",
    },
    ErrorCategory.BURN_GONE: {
        "title": "File Burned",
        "message": "This file has been destroyed and can no longer be downloaded.",
        "action": "Ask the sender to share it again.",
    },
    ErrorCategory.UNAUTHORIZED: {
        "title": "Password Required",
        "message": "A valid password or sign-in is required for this file.",
        "action": "Enter the password you were given and try again.",
    },
    ErrorCategory.FORBIDDEN: {
        "title": "Not Allowed",
        "message": "You can only manage files you uploaded yourself.",
        "action": "Sign in with the account that created this file.",
    },
    ErrorCategory.INVALID_SIGNATURE: {
        "title": "Link Invalid",
        "message": "This transfer link is invalid or has expired.",
        "action": "Request a fresh link and try again.",
    },
    ErrorCategory.SERVICE_UNAVAILABLE: {
        "title": "Service Unavailable",
        "message": "Storage is temporarily unavailable.",
        "action": "Please try again in a few moments.",
    },
    ErrorCategory.SYSTEM_ERROR: {
        "title": "System Error",
        "message": "An unexpected error occurred while processing your request.",
        "action": "Please try again later. If the problem persists, contact support.",
    },
}


# ============================================================================
# Domain Exceptions
# ============================================================================

class DomainError(Exception):
    """
    Base exception for burn lifecycle errors.

    Store adapters wrap the library exception they caught in ``original_error``.
    """

    def __init__(self, message: str, original_error: Exception = None):
        """
        Initialize domain error.

        Args:
            message: Error message
            original_error: Optional original exception that caused this error
        """
        super().__init__(message)
        self.original_error = original_error


class ValidationError(DomainError):
    """
    Raised when a request is malformed or missing required fields.

    Always reported to the client, never retried.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class QuotaExceededError(ValidationError):
    """Raised when a request breaches a tier ceiling."""

    def __init__(self, verdict):
        super().__init__(verdict.message, field=verdict.ceiling)
        self.verdict = verdict


class BurnNotFoundError(DomainError):
    """Raised when a key resolves to no burn record."""
    pass


class BurnGoneError(DomainError):
    """
    Raised when a burn record exists but is retired or expired.

    Carries the retirement reason ("expired", "max-downloads", "manual").
    """

    def __init__(self, reason: str, message: Optional[str] = None):
        super().__init__(message or f"Burn is gone ({reason})")
        self.reason = reason


class UnauthorizedError(DomainError):
    """Raised when a credential is missing or does not match."""
    pass


class ForbiddenError(DomainError):
    """Raised when a caller attempts to mutate a burn they do not own."""
    pass


class ConflictError(DomainError):
    """Raised by the record store when an id or short code already exists."""
    pass


class NamespaceExhaustedError(DomainError):
    """Raised when no free short code could be generated within the retry bound."""
    pass


class TransientStoreError(DomainError):
    """
    Raised when the record store or blob store is unavailable.

    A timed-out call is reported this way too: it is not proof that the
    underlying mutation did or did not happen.
    """
    pass


# ============================================================================
# API Error Responses
# ============================================================================

class ApplicationError(Exception):
    """
    Base application error with category and user-friendly messaging.

    Bridges domain errors with user-facing error messages and HTTP responses.
    """

    def __init__(
        self,
        category: ErrorCategory,
        technical_message: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize application error.

        Args:
            category: Error category
            technical_message: Technical error details for logging
            context: Additional context information
        """
        self.category = category
        self.technical_message = technical_message or ""
        self.context = context or {}

        error_info = ERROR_MESSAGES.get(
            category, ERROR_MESSAGES[ErrorCategory.SYSTEM_ERROR]
        )
        self.title = error_info["title"]
        self.message = error_info["message"]
        self.action = error_info["action"]

        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to dictionary for API response.

        Returns:
            Dictionary with error information
        """
        data = {
            "error": self.category.value,
            "title": self.title,
            "message": self.message,
            "action": self.action,
        }
        if self.technical_message:
            data["detail"] = self.technical_message
        if self.context:
            data.update(self.context)
        return data


def create_error_response(
    category: ErrorCategory,
    technical_message: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = 400,
) -> tuple[Dict[str, Any], int]:
    """
    Create a structured error response for API endpoints.

    Args:
        category: Error category
        technical_message: Technical error details, surfaced as "detail"
        context: Additional fields merged into the response body
        status_code: HTTP status code

    Returns:
        Tuple of (error_dict, status_code)
    """
    error = ApplicationError(category, technical_message, context)
    return error.to_dict(), status_code


# Domain exception -> (category, HTTP status). Order matters: subclasses first.
_DOMAIN_ERROR_MAP = (
    (QuotaExceededError, ErrorCategory.QUOTA_EXCEEDED, 403),
    (ValidationError, ErrorCategory.INVALID_REQUEST, 400),
    (BurnNotFoundError, ErrorCategory.BURN_NOT_FOUND, 404),
    (BurnGoneError, ErrorCategory.BURN_GONE, 410),
    (UnauthorizedError, ErrorCategory.UNAUTHORIZED, 401),
    (ForbiddenError, ErrorCategory.FORBIDDEN, 403),
    (TransientStoreError, ErrorCategory.SERVICE_UNAVAILABLE, 503),
)


def error_response_for(error: DomainError) -> tuple[Dict[str, Any], int]:
    """
    Map a domain exception to a structured error response.

    Unmapped domain errors (conflicts, exhausted namespace) become 500s.
    """
    for error_type, category, status_code in _DOMAIN_ERROR_MAP:
        if isinstance(error, error_type):
            context = {}
            if isinstance(error, BurnGoneError):
                context["reason"] = error.reason
            if isinstance(error, ValidationError) and error.field:
                context["field"] = error.field
            return create_error_response(category, str(error), context, status_code)
    return create_error_response(ErrorCategory.SYSTEM_ERROR, str(error), status_code=500)
