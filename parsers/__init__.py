"""
Text parsers module.
"""

from parsers.product_text_parser import (
    parse_product_text,
    ProductTextParseResult,
)

__all__ = [
    "parse_product_text",
    "ProductTextParseResult",
]
