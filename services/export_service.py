"""
Export service: serialize the imported product list for download.

Two formats:
- CSV  (products.csv):  Description,Price,Category
- JSON (products.json): [{"description", "price", "category"}]

Both return None for an empty list so no empty file is ever produced.
"""

import json
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Sequence, Union

import structlog

from exceptions import UnsupportedExportFormatError
from models.product import ImportedProduct

logger = structlog.get_logger(__name__)

CSV_HEADERS = ["Description", "Price", "Category"]
CSV_FILENAME = "products.csv"
CSV_MEDIA_TYPE = "text/csv;charset=utf-8"
JSON_FILENAME = "products.json"
JSON_MEDIA_TYPE = "application/json;charset=utf-8"

EXPORT_FORMATS = ("csv", "json")


@dataclass
class ExportArtifact:
    """A generated file ready to be downloaded."""
    filename: str
    media_type: str
    content: bytes


def format_price(price: Decimal) -> Union[int, float]:
    """
    Price as a JSON number.

    Decimal("1.50") -> 1.5, Decimal("12.00") -> 12, Decimal("0") -> 0

    Fractional prices go through float, so digits beyond float precision
    are rounded. CSV uses format_price_text and keeps every digit.
    """
    if price == price.to_integral_value():
        return int(price)
    return float(price)


def format_price_text(price: Decimal) -> str:
    """
    Price as exact plain-number text, trailing zeros dropped.

    Decimal("1.50") -> "1.5", Decimal("100") -> "100",
    Decimal("19.999999999999999999") -> "19.999999999999999999"
    """
    return format(price.normalize(), "f")


def quote_csv_field(value: str) -> str:
    """Wrap in double quotes, doubling any quote inside."""
    return '"' + (value or "").replace('"', '""') + '"'


class ExportService:
    """Service for generating product export files."""

    def export_csv(self, products: Sequence[ImportedProduct]) -> Optional[ExportArtifact]:
        """
        Generate products.csv.

        Args:
            products: Products in display order

        Returns:
            ExportArtifact, or None when there is nothing to export
        """
        if not products:
            logger.info("export_skipped", format="csv", reason="no_products")
            return None

        lines = [",".join(CSV_HEADERS)]
        for product in products:
            lines.append(",".join([
                quote_csv_field(product.description),
                format_price_text(product.price),
                quote_csv_field(product.category),
            ]))

        content = "\n".join(lines)

        logger.info("export_generated", format="csv", product_count=len(products))

        return ExportArtifact(
            filename=CSV_FILENAME,
            media_type=CSV_MEDIA_TYPE,
            content=content.encode("utf-8"),
        )

    def export_json(self, products: Sequence[ImportedProduct]) -> Optional[ExportArtifact]:
        """
        Generate products.json.

        Only description, price and category are written; id, status and
        the AI fields stay out of the file.

        Args:
            products: Products in display order

        Returns:
            ExportArtifact, or None when there is nothing to export
        """
        if not products:
            logger.info("export_skipped", format="json", reason="no_products")
            return None

        data = [
            {
                "description": product.description,
                "price": format_price(product.price),
                "category": product.category,
            }
            for product in products
        ]

        content = json.dumps(data, indent=2, ensure_ascii=False)

        logger.info("export_generated", format="json", product_count=len(products))

        return ExportArtifact(
            filename=JSON_FILENAME,
            media_type=JSON_MEDIA_TYPE,
            content=content.encode("utf-8"),
        )

    def export(
        self,
        products: Sequence[ImportedProduct],
        export_format: str,
    ) -> Optional[ExportArtifact]:
        """
        Generate an export in the requested format.

        Raises:
            UnsupportedExportFormatError: format is not csv or json
        """
        fmt = (export_format or "").lower()
        if fmt == "csv":
            return self.export_csv(products)
        if fmt == "json":
            return self.export_json(products)
        raise UnsupportedExportFormatError(export_format)


# Singleton instance
_export_service: Optional[ExportService] = None


def get_export_service() -> ExportService:
    """Get or create ExportService instance."""
    global _export_service
    if _export_service is None:
        _export_service = ExportService()
    return _export_service
