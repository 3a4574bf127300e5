"""
Import workflow service.

Turns pasted text into an import session and drives each product through
categorization:

    pending -> processing -> processed | error

Suggestion calls for different products run concurrently, bounded by an
asyncio.Semaphore. Each completion replaces only its own record. A result
that arrives for a product the user already deleted is dropped.
"""

import asyncio
import uuid
from decimal import Decimal
from typing import Optional, Protocol

import structlog

from config import settings
from exceptions import (
    ImportSessionNotFoundError,
    ImportedProductNotFoundError,
    CategoryEditNotAllowedError,
    InvalidStatusTransitionError,
)
from models.import_session import (
    CategorySummaryEntry,
    ImportEvent,
    ImportEventKind,
    ImportTotals,
)
from models.product import ImportedProduct, ProductStatus
from models.suggestion import SuggestionResult
from parsers.product_text_parser import parse_product_text
from services.category_suggestion_service import get_category_suggestion_service
from services.export_service import ExportArtifact, get_export_service
from services.import_session_store import (
    ImportSession,
    ImportSessionStore,
    get_import_session_store,
)

logger = structlog.get_logger(__name__)

UNCATEGORIZED = "Uncategorized"

ALLOWED_TRANSITIONS: dict[ProductStatus, frozenset[ProductStatus]] = {
    ProductStatus.PENDING: frozenset({ProductStatus.PROCESSING}),
    ProductStatus.PROCESSING: frozenset({ProductStatus.PROCESSED, ProductStatus.ERROR}),
    ProductStatus.PROCESSED: frozenset(),
    ProductStatus.ERROR: frozenset(),
}


class CategorySuggester(Protocol):
    """Anything that can suggest a category for a description."""

    async def suggest(self, product_description: str) -> SuggestionResult:
        ...


def check_transition(current: ProductStatus, new: ProductStatus) -> None:
    """
    Validate a status change.

    Raises:
        InvalidStatusTransitionError: new is not reachable from current
    """
    if new not in ALLOWED_TRANSITIONS[current]:
        raise InvalidStatusTransitionError(current.value, new.value)


class ImportWorkflowService:
    """
    Import workflow business logic.

    Usage:
        service = get_import_workflow_service()
        session = service.create_session(raw_text)
        await service.categorize(session.session_id)
        totals = service.get_totals(session.session_id)
    """

    def __init__(
        self,
        suggester: Optional[CategorySuggester] = None,
        max_concurrency: Optional[int] = None,
        store: Optional[ImportSessionStore] = None,
    ):
        """
        Args:
            suggester: Category suggestion capability (defaults to Claude)
            max_concurrency: Max suggestion calls in flight per categorize()
            store: Session store (defaults to the process-wide store)
        """
        self.suggester = suggester or get_category_suggestion_service()
        self.max_concurrency = (
            settings.suggestion_max_concurrency if max_concurrency is None else max_concurrency
        )
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.store = store or get_import_session_store()
        self.export_service = get_export_service()

    # ===================
    # SESSION LIFECYCLE
    # ===================

    def create_session(self, raw_text: str) -> ImportSession:
        """
        Parse pasted text into a new session of pending products.

        Args:
            raw_text: Pasted product list

        Returns:
            The stored ImportSession
        """
        parsed = parse_product_text(raw_text)

        session = ImportSession(anomalies=parsed.anomalies)
        for draft in parsed.drafts:
            product = ImportedProduct(
                id=str(uuid.uuid4()),
                description=draft.description,
                price=draft.price,
            )
            session.products[product.id] = product

        session.record_event(
            ImportEventKind.IMPORT_STARTED,
            f"Imported {len(session.products)} products"
        )
        self.store.save(session)

        logger.info(
            "import_session_created",
            session_id=session.session_id,
            product_count=len(session.products),
            anomalies=len(session.anomalies)
        )

        return session

    def get_session(self, session_id: str) -> ImportSession:
        """
        Get a session by id.

        Raises:
            ImportSessionNotFoundError: Unknown or expired session
        """
        session = self.store.get(session_id)
        if session is None:
            raise ImportSessionNotFoundError(session_id)
        return session

    async def start_import(self, raw_text: str) -> ImportSession:
        """Create a session and categorize all of its products."""
        session = self.create_session(raw_text)
        await self.categorize(session.session_id)
        return session

    # ===================
    # CATEGORIZATION
    # ===================

    async def categorize(self, session_id: str) -> list[ImportEvent]:
        """
        Request a suggestion for every pending product.

        At most max_concurrency calls are in flight at once. A product only
        moves to processing when its call is actually dispatched.

        Args:
            session_id: Session UUID

        Returns:
            Events produced by this run in display order, followed by
            the completion summary. The session log keeps completion order.
        """
        session = self.get_session(session_id)
        pending_ids = [
            p.id for p in session.ordered_products()
            if p.status == ProductStatus.PENDING
        ]

        logger.info(
            "categorization_started",
            session_id=session_id,
            product_count=len(pending_ids),
            concurrency=self.max_concurrency
        )

        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _categorize_limited(product_id: str) -> Optional[ImportEvent]:
            async with semaphore:
                return await self._categorize_product(session, product_id)

        results = await asyncio.gather(
            *(_categorize_limited(product_id) for product_id in pending_ids)
        )
        events = [event for event in results if event is not None]

        processed = sum(1 for e in events if e.kind == ImportEventKind.PRODUCT_PROCESSED)
        failed = sum(1 for e in events if e.kind == ImportEventKind.PRODUCT_FAILED)

        events.append(session.record_event(
            ImportEventKind.IMPORT_COMPLETED,
            f"Categorized {processed} products, {failed} failed"
        ))

        logger.info(
            "categorization_complete",
            session_id=session_id,
            processed=processed,
            failed=failed,
            discarded=len(pending_ids) - processed - failed
        )

        return events

    async def _categorize_product(
        self,
        session: ImportSession,
        product_id: str,
    ) -> Optional[ImportEvent]:
        """Dispatch one suggestion call and merge its outcome."""
        product = session.products.get(product_id)
        if product is None:
            # Deleted while waiting for a free slot
            return None

        check_transition(product.status, ProductStatus.PROCESSING)
        session.products[product_id] = product.model_copy(
            update={"status": ProductStatus.PROCESSING}
        )

        try:
            result = await self.suggester.suggest(product.description)
        except Exception as e:
            logger.error(
                "suggestion_call_failed",
                session_id=session.session_id,
                product_id=product_id,
                error=str(e),
                error_type=type(e).__name__
            )
            result = SuggestionResult.failure("unexpected_error")

        return self.apply_suggestion(session, product_id, result)

    def apply_suggestion(
        self,
        session: ImportSession,
        product_id: str,
        result: SuggestionResult,
    ) -> ImportEvent:
        """
        Merge a suggestion outcome into its product.

        Success: processed, category initialised to the suggestion.
        Failure: error, category and AI fields untouched.
        Unknown product id (deleted meanwhile): discarded.
        """
        current = session.products.get(product_id)
        if current is None:
            logger.info(
                "suggestion_discarded",
                session_id=session.session_id,
                product_id=product_id,
                reason="product_deleted"
            )
            return session.record_event(
                ImportEventKind.SUGGESTION_DISCARDED,
                "Suggestion arrived for a deleted product",
                product_id=product_id
            )

        if result.ok and result.suggestion is not None:
            check_transition(current.status, ProductStatus.PROCESSED)
            session.products[product_id] = current.model_copy(update={
                "status": ProductStatus.PROCESSED,
                "ai_category": result.suggestion.category,
                "ai_confidence": result.suggestion.confidence,
                "category": result.suggestion.category,
            })
            logger.debug(
                "product_processed",
                session_id=session.session_id,
                product_id=product_id,
                category=result.suggestion.category
            )
            return session.record_event(
                ImportEventKind.PRODUCT_PROCESSED,
                f"Categorized as {result.suggestion.category}",
                product_id=product_id
            )

        check_transition(current.status, ProductStatus.ERROR)
        session.products[product_id] = current.model_copy(
            update={"status": ProductStatus.ERROR}
        )
        logger.warning(
            "product_categorization_failed",
            session_id=session.session_id,
            product_id=product_id,
            reason=result.reason
        )
        return session.record_event(
            ImportEventKind.PRODUCT_FAILED,
            f"Could not categorize product ({result.reason})",
            product_id=product_id
        )

    # ===================
    # USER EDITS
    # ===================

    def list_products(self, session_id: str) -> list[ImportedProduct]:
        """Products in display order."""
        return self.get_session(session_id).ordered_products()

    def update_category(
        self,
        session_id: str,
        product_id: str,
        category: str,
    ) -> ImportedProduct:
        """
        Override the final category of a product.

        Status and AI fields are left as they are.

        Raises:
            ImportSessionNotFoundError: Unknown session
            ImportedProductNotFoundError: Unknown product
            CategoryEditNotAllowedError: Product is still pending/processing
        """
        session = self.get_session(session_id)
        current = session.products.get(product_id)
        if current is None:
            raise ImportedProductNotFoundError(product_id)
        if not current.is_editable:
            raise CategoryEditNotAllowedError(product_id, current.status.value)

        updated = current.model_copy(update={"category": category})
        session.products[product_id] = updated
        session.record_event(
            ImportEventKind.CATEGORY_UPDATED,
            f"Category set to {category!r}",
            product_id=product_id
        )

        logger.info(
            "category_updated",
            session_id=session_id,
            product_id=product_id,
            ai_category=current.ai_category,
            category=category
        )

        return updated

    def delete_product(self, session_id: str, product_id: str) -> ImportEvent:
        """
        Remove a product from the session, whatever its status.

        An in-flight suggestion for it is not cancelled; its result is
        discarded when it arrives.

        Raises:
            ImportSessionNotFoundError: Unknown session
            ImportedProductNotFoundError: Unknown product
        """
        session = self.get_session(session_id)
        removed = session.products.pop(product_id, None)
        if removed is None:
            raise ImportedProductNotFoundError(product_id)

        logger.info(
            "product_deleted",
            session_id=session_id,
            product_id=product_id,
            status=removed.status.value
        )

        return session.record_event(
            ImportEventKind.PRODUCT_DELETED,
            f"Removed {removed.description}",
            product_id=product_id
        )

    # ===================
    # DERIVED VIEWS
    # ===================

    def get_totals(self, session_id: str) -> ImportTotals:
        """Item count and total price of the current products."""
        products = self.list_products(session_id)
        return ImportTotals(
            item_count=len(products),
            total_price=sum((p.price for p in products), Decimal("0")),
        )

    def get_category_summary(self, session_id: str) -> list[CategorySummaryEntry]:
        """
        Total price per final category, highest first.

        Only processed products count; an empty category is reported as
        "Uncategorized".
        """
        totals: dict[str, Decimal] = {}
        for product in self.list_products(session_id):
            if product.status != ProductStatus.PROCESSED:
                continue
            category = product.category or UNCATEGORIZED
            totals[category] = totals.get(category, Decimal("0")) + product.price

        return [
            CategorySummaryEntry(category=category, total=total)
            for category, total in sorted(totals.items(), key=lambda item: item[1], reverse=True)
        ]

    def get_events(self, session_id: str) -> list[ImportEvent]:
        """Event log of a session, oldest first."""
        return list(self.get_session(session_id).events)

    # ===================
    # EXPORT
    # ===================

    def export(self, session_id: str, export_format: str) -> Optional[ExportArtifact]:
        """
        Export the current products.

        Returns:
            ExportArtifact, or None when the session has no products

        Raises:
            UnsupportedExportFormatError: format is not csv or json
        """
        session = self.get_session(session_id)
        artifact = self.export_service.export(session.ordered_products(), export_format)
        if artifact is None:
            session.record_event(
                ImportEventKind.EXPORT_SKIPPED,
                "Nothing to export"
            )
        return artifact


# Singleton instance
_workflow_service: Optional[ImportWorkflowService] = None


def get_import_workflow_service() -> ImportWorkflowService:
    """Get or create ImportWorkflowService instance."""
    global _workflow_service
    if _workflow_service is None:
        _workflow_service = ImportWorkflowService()
    return _workflow_service
