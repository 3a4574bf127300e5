"""
Business logic services.

Each service handles one domain area.
"""

from services.category_suggestion_service import (
    CategorySuggestionService,
    get_category_suggestion_service,
)
from services.export_service import ExportArtifact, ExportService, get_export_service
from services.import_session_store import (
    ImportSession,
    ImportSessionStore,
    get_import_session_store,
)
from services.import_workflow_service import (
    ImportWorkflowService,
    get_import_workflow_service,
)

__all__ = [
    "CategorySuggestionService",
    "get_category_suggestion_service",
    "ExportArtifact",
    "ExportService",
    "get_export_service",
    "ImportSession",
    "ImportSessionStore",
    "get_import_session_store",
    "ImportWorkflowService",
    "get_import_workflow_service",
]
