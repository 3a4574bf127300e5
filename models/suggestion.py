"""
Category suggestion schemas.

CategorySuggestion is the validated shape of the model response.
SuggestionResult is the tagged outcome handed to the import workflow.
"""

from typing import Optional

from pydantic import BaseModel, Field

from models.base import BaseSchema


class CategorySuggestion(BaseSchema):
    """Suggested category for a product description."""

    category: str = Field(
        ...,
        min_length=1,
        description="The suggested category for the product"
    )
    confidence: float = Field(
        ...,
        ge=0.0,
        le=1.0,
        description="The confidence level of the category suggestion (0 to 1)"
    )


class SuggestionResult(BaseModel):
    """
    Outcome of one suggestion call.

    Either ok=True with a suggestion, or ok=False with a failure reason.
    Never both.
    """

    ok: bool
    suggestion: Optional[CategorySuggestion] = None
    reason: Optional[str] = None

    @classmethod
    def success(cls, suggestion: CategorySuggestion) -> "SuggestionResult":
        return cls(ok=True, suggestion=suggestion)

    @classmethod
    def failure(cls, reason: str) -> "SuggestionResult":
        return cls(ok=False, reason=reason)


class SuggestionRequest(BaseSchema):
    """Request body for a single suggestion."""

    product_description: str = Field(
        ...,
        min_length=1,
        max_length=1000,
        description="The description of the product to categorize",
        examples=["2x Organic Avocados"]
    )
