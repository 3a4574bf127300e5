"""
Product import API routes.

Paste a product list, watch categorization progress, override categories,
delete lines and download the result.
"""

from fastapi import APIRouter, BackgroundTasks, Query
from fastapi.responses import JSONResponse, Response
import structlog

from exceptions import AppError
from models.import_session import (
    CategorySummaryResponse,
    ImportEventListResponse,
    ImportRequest,
    ImportSessionResponse,
    ImportTotals,
    ParseAnomalyResponse,
)
from models.product import CategoryUpdate, ImportedProduct
from services.import_session_store import ImportSession
from services.import_workflow_service import (
    ImportWorkflowService,
    get_import_workflow_service,
)

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/imports", tags=["Imports"])


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


def build_session_response(
    service: ImportWorkflowService,
    session: ImportSession,
) -> ImportSessionResponse:
    """Snapshot a session for the API."""
    return ImportSessionResponse(
        session_id=session.session_id,
        created_at=session.created_at,
        products=session.ordered_products(),
        totals=service.get_totals(session.session_id),
        anomalies=[
            ParseAnomalyResponse(
                line_number=a.line_number,
                line=a.line,
                reason=a.reason
            )
            for a in session.anomalies
        ],
        is_processing=session.is_processing,
    )


# ===================
# ROUTES
# ===================

@router.post("", response_model=ImportSessionResponse, status_code=201)
async def create_import(data: ImportRequest, background_tasks: BackgroundTasks):
    """
    Parse a pasted product list and start categorization.

    Products come back as pending; poll the session to see them move to
    processed or error.
    """
    try:
        service = get_import_workflow_service()
        session = service.create_session(data.raw_text)
        background_tasks.add_task(service.categorize, session.session_id)
        return build_session_response(service, session)

    except Exception as e:
        return handle_error(e)


@router.get("/{session_id}", response_model=ImportSessionResponse)
async def get_import(session_id: str):
    """
    Get products, totals and parse anomalies of an import.

    Raises:
        404: Session not found or expired
    """
    try:
        service = get_import_workflow_service()
        session = service.get_session(session_id)
        return build_session_response(service, session)

    except Exception as e:
        return handle_error(e)


@router.get("/{session_id}/totals", response_model=ImportTotals)
async def get_import_totals(session_id: str):
    """Item count and total price of the current products."""
    try:
        service = get_import_workflow_service()
        return service.get_totals(session_id)

    except Exception as e:
        return handle_error(e)


@router.get("/{session_id}/summary", response_model=CategorySummaryResponse)
async def get_category_summary(session_id: str):
    """Total price per category of categorized products."""
    try:
        service = get_import_workflow_service()
        return CategorySummaryResponse(
            session_id=session_id,
            data=service.get_category_summary(session_id)
        )

    except Exception as e:
        return handle_error(e)


@router.get("/{session_id}/events", response_model=ImportEventListResponse)
async def get_import_events(session_id: str):
    """Notifications produced by the import, oldest first."""
    try:
        service = get_import_workflow_service()
        return ImportEventListResponse(
            session_id=session_id,
            data=service.get_events(session_id)
        )

    except Exception as e:
        return handle_error(e)


@router.patch("/{session_id}/products/{product_id}", response_model=ImportedProduct)
async def update_product_category(session_id: str, product_id: str, data: CategoryUpdate):
    """
    Override the final category of a product.

    Raises:
        404: Session or product not found
        409: Product is still waiting for its suggestion
    """
    try:
        service = get_import_workflow_service()
        return service.update_category(session_id, product_id, data.category)

    except Exception as e:
        return handle_error(e)


@router.delete("/{session_id}/products/{product_id}", status_code=204, response_class=Response)
async def delete_product(session_id: str, product_id: str):
    """
    Remove a product from the import.

    Raises:
        404: Session or product not found
    """
    try:
        service = get_import_workflow_service()
        service.delete_product(session_id, product_id)
        return Response(status_code=204)

    except Exception as e:
        return handle_error(e)


@router.get("/{session_id}/export")
async def export_import(
    session_id: str,
    format: str = Query("csv", description="Export format: csv or json"),
):
    """
    Download the products as products.csv or products.json.

    Returns 204 with no body when there is nothing to export.

    Raises:
        404: Session not found
        422: Unsupported format
    """
    try:
        service = get_import_workflow_service()
        artifact = service.export(session_id, format)

        if artifact is None:
            return Response(status_code=204)

        return Response(
            content=artifact.content,
            media_type=artifact.media_type,
            headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'}
        )

    except Exception as e:
        return handle_error(e)
