"""
Shared test fixtures.
"""

import sys
from pathlib import Path

# Add project root to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from services.import_session_store import ImportSessionStore
from services.import_workflow_service import ImportWorkflowService
from tests.factories import FakeSuggester, make_message_response


# ===================
# ANTHROPIC CLIENT MOCKS
# ===================

@pytest.fixture
def mock_anthropic_client() -> MagicMock:
    """
    Create a mock AsyncAnthropic client.

    Usage:
        def test_something(mock_anthropic_client):
            mock_anthropic_client.messages.create.return_value = make_message_response(
                '{"category": "Dairy", "confidence": 0.9}'
            )
    """
    client = MagicMock()
    client.messages.create = AsyncMock(
        return_value=make_message_response('{"category": "General", "confidence": 0.5}')
    )
    return client


# ===================
# WORKFLOW FIXTURES
# ===================

@pytest.fixture
def session_store() -> ImportSessionStore:
    """Fresh session store per test."""
    return ImportSessionStore(ttl_minutes=30)


@pytest.fixture
def fake_suggester() -> FakeSuggester:
    """Suggester with a few known products."""
    return FakeSuggester(
        suggestions={
            "2x Organic Avocados": ("Produce", 0.97),
            "Whole Milk 1L": ("Dairy", 0.93),
            "Paper towels": ("Household", 0.6),
        },
    )


@pytest.fixture
def workflow_service(fake_suggester, session_store) -> ImportWorkflowService:
    """Workflow service wired to the fake suggester and a fresh store."""
    return ImportWorkflowService(
        suggester=fake_suggester,
        max_concurrency=3,
        store=session_store,
    )


@pytest.fixture
def sample_raw_text() -> str:
    """Pasted product list: two priced lines, one blank, one without price."""
    return (
        "2x Organic Avocados - 4.99\n"
        "Whole Milk 1L 1.29\n"
        "\n"
        "Paper towels\n"
    )


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client(workflow_service):
    """
    Create FastAPI test client backed by the fake suggester.

    Usage:
        def test_endpoint(test_client):
            response = test_client.post("/api/imports", json={"raw_text": "Milk 1.29"})
            assert response.status_code == 201
    """
    from fastapi.testclient import TestClient
    from main import app

    with patch("routes.imports.get_import_workflow_service", return_value=workflow_service):
        yield TestClient(app)
