"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema
from models.product import (
    ProductStatus,
    ImportedProduct,
    CategoryUpdate,
    TERMINAL_STATUSES,
)
from models.suggestion import (
    CategorySuggestion,
    SuggestionResult,
    SuggestionRequest,
)
from models.import_session import (
    ImportEventKind,
    ImportEvent,
    ImportTotals,
    CategorySummaryEntry,
    ParseAnomalyResponse,
    ImportRequest,
    ImportSessionResponse,
    CategorySummaryResponse,
    ImportEventListResponse,
)

__all__ = [
    # Base
    "BaseSchema",

    # Product
    "ProductStatus",
    "ImportedProduct",
    "CategoryUpdate",
    "TERMINAL_STATUSES",

    # Suggestion
    "CategorySuggestion",
    "SuggestionResult",
    "SuggestionRequest",

    # Import session
    "ImportEventKind",
    "ImportEvent",
    "ImportTotals",
    "CategorySummaryEntry",
    "ParseAnomalyResponse",
    "ImportRequest",
    "ImportSessionResponse",
    "CategorySummaryResponse",
    "ImportEventListResponse",
]
