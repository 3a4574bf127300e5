"""
Category suggestion API route.

Exposes the single-description suggestion call on its own.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import structlog

from exceptions import AppError
from models.suggestion import CategorySuggestion, SuggestionRequest
from services.category_suggestion_service import get_category_suggestion_service

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/suggestions", tags=["Suggestions"])


def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(status_code=e.status_code, content=e.to_dict())
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
            }
        },
    )


@router.post("", response_model=CategorySuggestion)
async def suggest_category(data: SuggestionRequest):
    """
    Suggest a category for one product description.

    Raises:
        503: Model not configured, unreachable, timed out or returned
             an invalid response
    """
    try:
        service = get_category_suggestion_service()
        return await service.suggest_category(data.product_description)

    except Exception as e:
        return handle_error(e)
