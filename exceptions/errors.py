"""
Custom exception classes for the application.

Every error carries a stable code, an HTTP status and a details dict so
routes can return the same error envelope everywhere.
"""

from typing import Optional, Any
from datetime import datetime


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "IMPORT_SESSION_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.utcnow().isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ConflictError(AppError):
    """Conflict with current resource state (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


# ===================
# IMPORT SESSION ERRORS
# ===================

class ImportSessionNotFoundError(NotFoundError):
    """Import session not found or expired."""

    def __init__(self, session_id: str):
        super().__init__(
            resource="Import session",
            identifier=session_id,
            code="IMPORT_SESSION_NOT_FOUND"
        )


class ImportedProductNotFoundError(NotFoundError):
    """Product not present in the import session."""

    def __init__(self, product_id: str):
        super().__init__(
            resource="Product",
            identifier=product_id,
            code="PRODUCT_NOT_FOUND"
        )


class CategoryEditNotAllowedError(ConflictError):
    """Category override attempted before categorization finished."""

    def __init__(self, product_id: str, status: str):
        super().__init__(
            code="CATEGORY_EDIT_NOT_ALLOWED",
            message=f"Category cannot be edited while product is {status}",
            details={
                "product_id": product_id,
                "status": status,
                "allowed_statuses": ["processed", "error"]
            }
        )


class InvalidStatusTransitionError(ValidationError):
    """Invalid product status transition."""

    def __init__(self, current_status: str, new_status: str):
        super().__init__(
            code="INVALID_STATUS_TRANSITION",
            message=f"Cannot transition from {current_status} to {new_status}",
            details={
                "current_status": current_status,
                "new_status": new_status,
                "reason": "Status only moves pending -> processing -> processed|error"
            }
        )


class UnsupportedExportFormatError(ValidationError):
    """Export format other than csv or json."""

    def __init__(self, export_format: str):
        super().__init__(
            code="UNSUPPORTED_EXPORT_FORMAT",
            message=f"Unsupported export format: {export_format}",
            details={"format": export_format, "supported": ["csv", "json"]}
        )


# ===================
# CATEGORY SUGGESTION ERRORS
# ===================

class CategorySuggestionError(ExternalServiceError):
    """
    Category suggestion call failed.

    reason is one of: not_configured, timeout, api_error, invalid_response.
    """

    def __init__(
        self,
        reason: str,
        message: str,
        details: Optional[dict] = None
    ):
        self.reason = reason
        super().__init__(
            service="category_suggestion",
            message=message,
            details={"reason": reason, **(details or {})}
        )
