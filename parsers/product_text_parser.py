"""
Parser for pasted product lists.

Each non-empty line becomes one draft product. The rightmost standalone
number on the line is the price; whatever is left is the description.

    "2x Organic Avocados - 4.99"  -> ("2x Organic Avocados", 4.99)
    "Coca Cola 12 pack $5.99"     -> ("Coca Cola 12 pack", 5.99)
    "Paper towels"                -> ("Paper towels", 0)   + anomaly
"""

import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Optional
import structlog

logger = structlog.get_logger(__name__)

# A number not glued to letters or to another number ("2x", "500ml" and
# the "99" of "4.99" are not price tokens). A comma after a digit is a
# thousands separator; any other comma is a field separator ("Widget,4.99").
PRICE_PATTERN = re.compile(
    r"(?<![\w.])(?<!\d,)"
    r"(\d{1,3}(?:,\d{3})+(?:\.\d+)?|\d+(?:\.\d+)?)"
    r"(?![\w]|[.,]\d)"
)

# Trimmed from the edges left behind once the price token is cut out
SEPARATOR_CHARS = " \t-–:|=,;$€£"

NO_PRICE_REASON = "no_price"


@dataclass
class ProductDraft:
    """Description and price read from one line."""
    description: str
    price: Decimal
    line_number: int


@dataclass
class ParseAnomaly:
    """A line that was kept but needed a fallback."""
    line_number: int
    line: str
    reason: str


@dataclass
class ProductTextParseResult:
    """Result of parsing a pasted product list."""
    drafts: list[ProductDraft] = field(default_factory=list)
    anomalies: list[ParseAnomaly] = field(default_factory=list)

    @property
    def has_data(self) -> bool:
        """True if any product was parsed."""
        return len(self.drafts) > 0

    def to_dict(self) -> dict:
        """Convert to dictionary for API response."""
        return {
            "drafts": [
                {
                    "description": d.description,
                    "price": str(d.price),
                    "line_number": d.line_number,
                }
                for d in self.drafts
            ],
            "anomalies": [
                {
                    "line_number": a.line_number,
                    "line": a.line,
                    "reason": a.reason,
                }
                for a in self.anomalies
            ],
        }


def _to_decimal(token: str) -> Optional[Decimal]:
    """Convert a matched price token to Decimal."""
    try:
        return Decimal(token.replace(",", ""))
    except InvalidOperation:
        return None


def parse_product_line(line: str) -> tuple[str, Optional[Decimal]]:
    """
    Split one line into description and price.

    Args:
        line: Raw line (not necessarily trimmed)

    Returns:
        (description, price). price is None when the line has no
        parseable number; description is then the full trimmed line.
    """
    stripped = line.strip()

    matches = list(PRICE_PATTERN.finditer(stripped))
    if not matches:
        return stripped, None

    match = matches[-1]
    price = _to_decimal(match.group(1))
    if price is None:
        return stripped, None

    before = stripped[:match.start()].rstrip(SEPARATOR_CHARS)
    after = stripped[match.end():].lstrip(SEPARATOR_CHARS)
    description = " ".join(part for part in (before, after) if part)

    # A line that is only a number keeps itself as description
    return description or stripped, price


def parse_product_text(raw_text: str) -> ProductTextParseResult:
    """
    Parse pasted text into draft products, one per non-empty line.

    Lines without a price are kept with price 0 and reported as
    anomalies. Input order is preserved.

    Args:
        raw_text: Pasted product list

    Returns:
        ProductTextParseResult with drafts and anomalies
    """
    result = ProductTextParseResult()

    for line_number, line in enumerate((raw_text or "").splitlines(), start=1):
        if not line.strip():
            continue

        description, price = parse_product_line(line)

        if price is None:
            result.anomalies.append(ParseAnomaly(
                line_number=line_number,
                line=line.strip(),
                reason=NO_PRICE_REASON,
            ))
            price = Decimal("0")

        result.drafts.append(ProductDraft(
            description=description,
            price=price,
            line_number=line_number,
        ))

    logger.info(
        "product_text_parsed",
        drafts=len(result.drafts),
        anomalies=len(result.anomalies)
    )

    return result
