"""
Imported product schemas.

A product record is created from one line of pasted text and then
categorized, overridden or deleted inside an import session.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import Field

from models.base import BaseSchema


class ProductStatus(str, Enum):
    """Categorization lifecycle: pending -> processing -> processed | error."""
    PENDING = "pending"
    PROCESSING = "processing"
    PROCESSED = "processed"
    ERROR = "error"


TERMINAL_STATUSES = frozenset({ProductStatus.PROCESSED, ProductStatus.ERROR})


class ImportedProduct(BaseSchema):
    """
    One product in an import session.

    `category` is the field of record and is what gets exported.
    `ai_category` / `ai_confidence` are advisory and only set once the
    suggestion call succeeded.
    """

    id: str = Field(..., description="Product id, unique within the session")
    description: str = Field(..., description="Product description as pasted")
    price: Decimal = Field(..., ge=0, description="Unit price parsed from the line")
    category: str = Field(
        default="",
        description="Final category (AI suggestion or manual override)"
    )
    ai_category: Optional[str] = Field(None, description="Category suggested by the model")
    ai_confidence: Optional[float] = Field(
        None,
        ge=0.0,
        le=1.0,
        description="Model confidence for ai_category"
    )
    status: ProductStatus = Field(
        default=ProductStatus.PENDING,
        description="Categorization status"
    )

    @property
    def is_terminal(self) -> bool:
        """True once categorization finished (successfully or not)."""
        return self.status in TERMINAL_STATUSES

    @property
    def is_editable(self) -> bool:
        """Manual category overrides are only accepted in terminal states."""
        return self.is_terminal


class CategoryUpdate(BaseSchema):
    """Manual category override for a single product."""

    category: str = Field(
        ...,
        max_length=200,
        description="New final category (may be empty to clear it)"
    )
