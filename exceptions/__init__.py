"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,
    ExternalServiceError,

    # Import sessions
    ImportSessionNotFoundError,
    ImportedProductNotFoundError,
    CategoryEditNotAllowedError,
    InvalidStatusTransitionError,
    UnsupportedExportFormatError,

    # Category suggestions
    CategorySuggestionError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "ExternalServiceError",

    # Import sessions
    "ImportSessionNotFoundError",
    "ImportedProductNotFoundError",
    "CategoryEditNotAllowedError",
    "InvalidStatusTransitionError",
    "UnsupportedExportFormatError",

    # Category suggestions
    "CategorySuggestionError",
]
