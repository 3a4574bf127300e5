"""
Import session schemas.

Request/response models for the import workflow plus the event records
each workflow operation reports back to the caller.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import Field

from models.base import BaseSchema
from models.product import ImportedProduct


class ImportEventKind(str, Enum):
    """What happened in an import session."""
    IMPORT_STARTED = "import_started"
    PRODUCT_PROCESSED = "product_processed"
    PRODUCT_FAILED = "product_failed"
    SUGGESTION_DISCARDED = "suggestion_discarded"
    CATEGORY_UPDATED = "category_updated"
    PRODUCT_DELETED = "product_deleted"
    IMPORT_COMPLETED = "import_completed"
    EXPORT_SKIPPED = "export_skipped"


class ImportEvent(BaseSchema):
    """
    A user-facing notification produced by a workflow operation.

    The API decides how to surface these (toast, inline marker, ...).
    """

    kind: ImportEventKind
    message: str
    product_id: Optional[str] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class ImportTotals(BaseSchema):
    """Aggregates recomputed from the current product list."""

    item_count: int = Field(..., ge=0)
    total_price: Decimal = Field(..., ge=0)


class CategorySummaryEntry(BaseSchema):
    """Total price of processed products in one category."""

    category: str
    total: Decimal = Field(..., ge=0)


class ParseAnomalyResponse(BaseSchema):
    """A pasted line that needed a fallback while parsing."""

    line_number: int = Field(..., ge=1)
    line: str
    reason: str


class ImportRequest(BaseSchema):
    """Pasted product list, one product per line."""

    raw_text: str = Field(
        ...,
        min_length=1,
        max_length=100_000,
        description="Free text, each line a description followed by a price",
        examples=["2x Organic Avocados - 4.99\nWhole Milk 1L 1.29"]
    )


class ImportSessionResponse(BaseSchema):
    """Current state of an import session."""

    session_id: str
    created_at: datetime
    products: list[ImportedProduct]
    totals: ImportTotals
    anomalies: list[ParseAnomalyResponse] = Field(default_factory=list)
    is_processing: bool


class CategorySummaryResponse(BaseSchema):
    """Per-category cost summary."""

    session_id: str
    data: list[CategorySummaryEntry]


class ImportEventListResponse(BaseSchema):
    """Ordered event log of an import session."""

    session_id: str
    data: list[ImportEvent]
