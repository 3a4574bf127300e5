"""
API tests for the import and suggestion routes.

Run: pytest tests/unit/test_import_routes.py -v
"""

import json
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

from exceptions import CategorySuggestionError
from models.suggestion import CategorySuggestion


def create_import(test_client, raw_text):
    response = test_client.post("/api/imports", json={"raw_text": raw_text})
    assert response.status_code == 201
    return response.json()


class TestCreateImport:
    """Tests for POST /api/imports"""

    def test_returns_pending_products(self, test_client, sample_raw_text):
        data = create_import(test_client, sample_raw_text)

        assert [p["description"] for p in data["products"]] == [
            "2x Organic Avocados", "Whole Milk 1L", "Paper towels"
        ]
        assert all(p["status"] == "pending" for p in data["products"])
        assert data["is_processing"] is True
        assert data["totals"]["item_count"] == 3
        assert Decimal(str(data["totals"]["total_price"])) == Decimal("6.28")
        assert data["anomalies"] == [
            {"line_number": 4, "line": "Paper towels", "reason": "no_price"}
        ]

    def test_categorization_runs_in_background(self, test_client, sample_raw_text):
        created = create_import(test_client, sample_raw_text)

        response = test_client.get(f"/api/imports/{created['session_id']}")

        assert response.status_code == 200
        data = response.json()
        assert data["is_processing"] is False
        assert [p["status"] for p in data["products"]] == ["processed"] * 3
        assert [p["category"] for p in data["products"]] == ["Produce", "Dairy", "Household"]
        assert data["products"][0]["ai_confidence"] == 0.97

    def test_empty_text_rejected(self, test_client):
        response = test_client.post("/api/imports", json={"raw_text": ""})

        assert response.status_code == 422


class TestReadImport:
    """Tests for the read-only session endpoints."""

    def test_unknown_session_returns_error_envelope(self, test_client):
        response = test_client.get("/api/imports/missing")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "IMPORT_SESSION_NOT_FOUND"

    def test_totals(self, test_client):
        created = create_import(test_client, "Apples 1.50\nPears 2.25")

        response = test_client.get(f"/api/imports/{created['session_id']}/totals")

        assert response.status_code == 200
        assert response.json()["item_count"] == 2
        assert Decimal(str(response.json()["total_price"])) == Decimal("3.75")

    def test_summary(self, test_client, sample_raw_text):
        created = create_import(test_client, sample_raw_text)

        response = test_client.get(f"/api/imports/{created['session_id']}/summary")

        assert response.status_code == 200
        entries = response.json()["data"]
        assert [e["category"] for e in entries] == ["Produce", "Dairy", "Household"]

    def test_events(self, test_client, sample_raw_text):
        created = create_import(test_client, sample_raw_text)

        response = test_client.get(f"/api/imports/{created['session_id']}/events")

        kinds = [e["kind"] for e in response.json()["data"]]
        assert kinds[0] == "import_started"
        assert kinds.count("product_processed") == 3
        assert kinds[-1] == "import_completed"


class TestEditImport:
    """Tests for PATCH / DELETE on products."""

    def test_override_category(self, test_client, sample_raw_text):
        created = create_import(test_client, sample_raw_text)
        session_id = created["session_id"]
        milk_id = created["products"][1]["id"]

        response = test_client.patch(
            f"/api/imports/{session_id}/products/{milk_id}",
            json={"category": "Beverages"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["category"] == "Beverages"
        assert data["ai_category"] == "Dairy"
        assert data["status"] == "processed"

    def test_override_unknown_product(self, test_client, sample_raw_text):
        created = create_import(test_client, sample_raw_text)

        response = test_client.patch(
            f"/api/imports/{created['session_id']}/products/missing",
            json={"category": "Beverages"}
        )

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "PRODUCT_NOT_FOUND"

    def test_override_pending_product_conflicts(self, test_client, workflow_service):
        session = workflow_service.create_session("Apples 1.00")
        product_id = session.ordered_products()[0].id

        response = test_client.patch(
            f"/api/imports/{session.session_id}/products/{product_id}",
            json={"category": "Produce"}
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "CATEGORY_EDIT_NOT_ALLOWED"

    def test_delete_product(self, test_client, sample_raw_text):
        created = create_import(test_client, sample_raw_text)
        session_id = created["session_id"]
        milk_id = created["products"][1]["id"]

        response = test_client.delete(f"/api/imports/{session_id}/products/{milk_id}")

        assert response.status_code == 204
        remaining = test_client.get(f"/api/imports/{session_id}").json()["products"]
        assert [p["description"] for p in remaining] == ["2x Organic Avocados", "Paper towels"]

    def test_delete_unknown_product(self, test_client, sample_raw_text):
        created = create_import(test_client, sample_raw_text)

        response = test_client.delete(f"/api/imports/{created['session_id']}/products/missing")

        assert response.status_code == 404


class TestExportImport:
    """Tests for GET /api/imports/{id}/export"""

    def test_csv_download(self, test_client):
        created = create_import(test_client, "A, B 1.5")
        session_id = created["session_id"]
        product_id = created["products"][0]["id"]
        test_client.patch(
            f"/api/imports/{session_id}/products/{product_id}",
            json={"category": "X"}
        )

        response = test_client.get(f"/api/imports/{session_id}/export", params={"format": "csv"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert response.headers["content-disposition"] == 'attachment; filename="products.csv"'
        assert response.text == 'Description,Price,Category\n"A, B",1.5,"X"'

    def test_json_download(self, test_client):
        created = create_import(test_client, "Whole Milk 1L 1.29")

        response = test_client.get(
            f"/api/imports/{created['session_id']}/export",
            params={"format": "json"}
        )

        assert response.status_code == 200
        assert response.headers["content-disposition"] == 'attachment; filename="products.json"'
        assert json.loads(response.content) == [
            {"description": "Whole Milk 1L", "price": 1.29, "category": "Dairy"}
        ]

    def test_empty_list_returns_no_content(self, test_client, workflow_service):
        session = workflow_service.create_session("")

        response = test_client.get(f"/api/imports/{session.session_id}/export")

        assert response.status_code == 204
        assert response.content == b""

    def test_unsupported_format(self, test_client, sample_raw_text):
        created = create_import(test_client, sample_raw_text)

        response = test_client.get(
            f"/api/imports/{created['session_id']}/export",
            params={"format": "xml"}
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "UNSUPPORTED_EXPORT_FORMAT"


class TestSuggestionRoute:
    """Tests for POST /api/suggestions"""

    def test_returns_suggestion(self, test_client):
        service = MagicMock()
        service.suggest_category = AsyncMock(
            return_value=CategorySuggestion(category="Dairy", confidence=0.9)
        )

        with patch("routes.suggestions.get_category_suggestion_service", return_value=service):
            response = test_client.post(
                "/api/suggestions",
                json={"product_description": "Whole Milk 1L"}
            )

        assert response.status_code == 200
        assert response.json() == {"category": "Dairy", "confidence": 0.9}
        service.suggest_category.assert_awaited_once_with("Whole Milk 1L")

    def test_failure_returns_503(self, test_client):
        service = MagicMock()
        service.suggest_category = AsyncMock(
            side_effect=CategorySuggestionError("timeout", "Category suggestion timed out")
        )

        with patch("routes.suggestions.get_category_suggestion_service", return_value=service):
            response = test_client.post(
                "/api/suggestions",
                json={"product_description": "Whole Milk 1L"}
            )

        assert response.status_code == 503
        assert response.json()["error"]["code"] == "CATEGORY_SUGGESTION_ERROR"
