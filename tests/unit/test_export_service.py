"""
Tests for export_service: CSV / JSON product exports.
"""

import json
from decimal import Decimal

import pytest

from exceptions import UnsupportedExportFormatError
from models.product import ProductStatus
from services.export_service import (
    format_price,
    format_price_text,
    quote_csv_field,
    ExportService,
    get_export_service,
    CSV_FILENAME,
    JSON_FILENAME,
)
from tests.factories import ImportedProductFactory


class TestFormatPrice:
    """Tests for price formatting."""

    def test_decimal_fraction(self):
        assert format_price(Decimal("1.5")) == 1.5

    def test_trailing_zero_dropped(self):
        assert format_price(Decimal("1.50")) == 1.5

    def test_whole_number_is_int(self):
        result = format_price(Decimal("12.00"))
        assert result == 12
        assert isinstance(result, int)

    def test_zero(self):
        assert str(format_price(Decimal("0"))) == "0"


class TestFormatPriceText:
    """Tests for exact CSV price text."""

    @pytest.mark.parametrize("price,expected", [
        ("1.50", "1.5"),
        ("12.00", "12"),
        ("100", "100"),
        ("0.00", "0"),
        ("19.999999999999999999", "19.999999999999999999"),
    ])
    def test_plain_number_text(self, price, expected):
        assert format_price_text(Decimal(price)) == expected


class TestQuoteCsvField:
    """Tests for CSV field quoting."""

    def test_wraps_in_quotes(self):
        assert quote_csv_field("A, B") == '"A, B"'

    def test_doubles_inner_quotes(self):
        assert quote_csv_field('12" pizza') == '"12"" pizza"'

    def test_empty_string(self):
        assert quote_csv_field("") == '""'


class TestExportCsv:
    """Tests for ExportService.export_csv()"""

    @pytest.fixture
    def service(self):
        return ExportService()

    def test_exact_output_for_single_product(self, service):
        products = [ImportedProductFactory.create(description="A, B", price="1.5", category="X")]

        artifact = service.export_csv(products)

        assert artifact.content.decode("utf-8") == 'Description,Price,Category\n"A, B",1.5,"X"'

    def test_filename_and_media_type(self, service):
        artifact = service.export_csv(ImportedProductFactory.create_batch(1))

        assert artifact.filename == CSV_FILENAME == "products.csv"
        assert artifact.media_type.startswith("text/csv")

    def test_rows_follow_display_order(self, service):
        products = [
            ImportedProductFactory.create(description="Zucchini", price="2"),
            ImportedProductFactory.create(description="Apples", price="3.25"),
        ]

        lines = service.export_csv(products).content.decode("utf-8").split("\n")

        assert lines[1] == '"Zucchini",2,""'
        assert lines[2] == '"Apples",3.25,""'

    def test_empty_category_is_empty_quoted_field(self, service):
        products = [ImportedProductFactory.create(description="Mystery", price="0", status=ProductStatus.ERROR)]

        content = service.export_csv(products).content.decode("utf-8")

        assert content.endswith('"Mystery",0,""')
        assert "N/A" not in content

    def test_quotes_inside_fields_are_doubled(self, service):
        products = [ImportedProductFactory.create(description='Pizza 12"', price="9.99", category='Food "hot"')]

        content = service.export_csv(products).content.decode("utf-8")

        assert content.split("\n")[1] == '"Pizza 12""",9.99,"Food ""hot"""'

    def test_price_keeps_every_digit(self, service):
        products = [ImportedProductFactory.create(description="Gizmo", price="19.999999999999999999")]

        content = service.export_csv(products).content.decode("utf-8")

        assert content.split("\n")[1] == '"Gizmo",19.999999999999999999,""'

    def test_utf8_content(self, service):
        products = [ImportedProductFactory.create(description="Café molido", price="5", category="Café")]

        content = service.export_csv(products).content

        assert "Café molido".encode("utf-8") in content

    def test_empty_list_produces_nothing(self, service):
        assert service.export_csv([]) is None


class TestExportJson:
    """Tests for ExportService.export_json()"""

    @pytest.fixture
    def service(self):
        return ExportService()

    def test_only_persisted_fields_are_written(self, service):
        products = [
            ImportedProductFactory.create_processed(
                description="Whole Milk 1L",
                price="1.29",
                category="Dairy",
                confidence=0.93,
            )
        ]

        data = json.loads(service.export_json(products).content)

        assert data == [{"description": "Whole Milk 1L", "price": 1.29, "category": "Dairy"}]

    def test_override_is_exported_not_ai_category(self, service):
        product = ImportedProductFactory.create_processed(category="Dairy")
        product = product.model_copy(update={"category": "Beverages"})

        data = json.loads(service.export_json([product]).content)

        assert data[0]["category"] == "Beverages"

    def test_order_preserved(self, service):
        products = [
            ImportedProductFactory.create(description=name, price="1")
            for name in ["C", "A", "B"]
        ]

        data = json.loads(service.export_json(products).content)

        assert [row["description"] for row in data] == ["C", "A", "B"]

    def test_pretty_printed(self, service):
        content = service.export_json(ImportedProductFactory.create_batch(1)).content.decode("utf-8")

        assert content.startswith("[\n  {\n")

    def test_filename_and_media_type(self, service):
        artifact = service.export_json(ImportedProductFactory.create_batch(1))

        assert artifact.filename == JSON_FILENAME == "products.json"
        assert artifact.media_type.startswith("application/json")

    def test_empty_list_produces_nothing(self, service):
        assert service.export_json([]) is None


class TestExportDispatch:
    """Tests for ExportService.export()"""

    def test_format_is_case_insensitive(self):
        artifact = ExportService().export(ImportedProductFactory.create_batch(1), "CSV")
        assert artifact.filename == "products.csv"

    def test_unsupported_format_raises(self):
        with pytest.raises(UnsupportedExportFormatError) as exc_info:
            ExportService().export(ImportedProductFactory.create_batch(1), "xml")

        assert exc_info.value.status_code == 422

    def test_singleton(self):
        assert get_export_service() is get_export_service()
