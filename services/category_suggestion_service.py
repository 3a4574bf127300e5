"""
Category suggestion service.

Asks Claude for a product category and a confidence score given a product
description. One call per description: no retries, no streaming, no cache.
The response must validate as CategorySuggestion or the call fails.
"""

import json
import re
from typing import Any, Optional

import anthropic
import structlog
from pydantic import ValidationError as PydanticValidationError

from config import settings
from exceptions import CategorySuggestionError
from models.suggestion import CategorySuggestion, SuggestionResult

logger = structlog.get_logger(__name__)


class CategorySuggestionService:
    """
    Suggest a category for a product description using Claude.

    Usage:
        service = get_category_suggestion_service()
        suggestion = await service.suggest_category("2x Organic Avocados")
        print(suggestion.category, suggestion.confidence)
    """

    PROMPT_TEMPLATE = (
        "You are a product categorization expert. Given the following product "
        "description, suggest a category and a confidence level (0 to 1) for "
        "the suggestion.\n\n"
        "Product Description: {product_description}"
    )

    SYSTEM_PROMPT = """You categorize products for a small business back office.

IMPORTANT: Return ONLY valid JSON, no markdown, no explanation, no code blocks.

Return JSON in this exact structure:
{
  "category": "Produce",
  "confidence": 0.92
}

- category: a short, human-readable category name
- confidence: number between 0.0 and 1.0"""

    def __init__(
        self,
        client: Optional[Any] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        timeout_seconds: Optional[float] = None,
    ):
        """
        Initialize the suggestion service.

        Args:
            client: Pre-built async Anthropic client (tests inject a mock)
            api_key: Anthropic API key (defaults to settings)
            model: Model name (defaults to settings)
            max_tokens: Response token limit (defaults to settings)
            timeout_seconds: Per-call timeout (defaults to settings)
        """
        self.model = model or settings.suggestion_model
        self.max_tokens = max_tokens or settings.suggestion_max_tokens
        self.timeout_seconds = timeout_seconds or settings.suggestion_timeout_seconds

        api_key = api_key or settings.anthropic_api_key
        if client is not None:
            self.client = client
        elif api_key:
            self.client = anthropic.AsyncAnthropic(
                api_key=api_key,
                timeout=self.timeout_seconds,
                max_retries=0,
            )
        else:
            self.client = None
            logger.warning(
                "anthropic_api_key_missing",
                message="ANTHROPIC_API_KEY not set, category suggestions will fail"
            )

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    def build_prompt(self, product_description: str) -> str:
        """Fill the fixed instruction template."""
        return self.PROMPT_TEMPLATE.format(product_description=product_description)

    async def suggest_category(self, product_description: str) -> CategorySuggestion:
        """
        Get a validated category suggestion.

        Args:
            product_description: The description of the product to categorize

        Returns:
            CategorySuggestion

        Raises:
            CategorySuggestionError: Not configured, timeout, API failure,
                or a response that does not match the schema
        """
        if self.client is None:
            raise CategorySuggestionError(
                reason="not_configured",
                message="Category suggestions unavailable. Set ANTHROPIC_API_KEY."
            )

        logger.debug("suggestion_requested", description=product_description)

        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=0.0,
                system=self.SYSTEM_PROMPT,
                messages=[{
                    "role": "user",
                    "content": self.build_prompt(product_description)
                }]
            )
        except anthropic.APITimeoutError as e:
            logger.warning("suggestion_timeout", description=product_description)
            raise CategorySuggestionError(
                reason="timeout",
                message="Category suggestion timed out",
                details={"timeout_seconds": self.timeout_seconds}
            ) from e
        except anthropic.APIError as e:
            logger.error("suggestion_api_error", description=product_description, error=str(e))
            raise CategorySuggestionError(
                reason="api_error",
                message=f"Claude API error: {str(e)}"
            ) from e

        suggestion = self._parse_response(self._response_text(response))

        logger.info(
            "suggestion_received",
            description=product_description,
            category=suggestion.category,
            confidence=suggestion.confidence
        )

        return suggestion

    async def suggest(self, product_description: str) -> SuggestionResult:
        """
        Same as suggest_category, but returns a tagged result instead of raising.

        Args:
            product_description: The description of the product to categorize

        Returns:
            SuggestionResult (ok with suggestion, or failure with reason)
        """
        try:
            suggestion = await self.suggest_category(product_description)
        except CategorySuggestionError as e:
            return SuggestionResult.failure(e.reason)
        return SuggestionResult.success(suggestion)

    def _response_text(self, response: Any) -> str:
        """Concatenate the text blocks of a Messages API response."""
        return "".join(
            block.text
            for block in response.content
            if getattr(block, "type", None) == "text"
        )

    def _parse_response(self, response_text: str) -> CategorySuggestion:
        """
        Validate Claude's JSON response.

        Args:
            response_text: Raw response from Claude

        Returns:
            CategorySuggestion

        Raises:
            CategorySuggestionError: reason "invalid_response"
        """
        # Remove markdown code blocks if present
        cleaned = response_text.strip()
        if cleaned.startswith("```"):
            cleaned = re.sub(r'^```(?:json)?\s*', '', cleaned)
            cleaned = re.sub(r'\s*```$', '', cleaned)

        try:
            data = json.loads(cleaned)
            return CategorySuggestion.model_validate(data)
        except (json.JSONDecodeError, PydanticValidationError) as e:
            logger.error(
                "suggestion_response_invalid",
                response_preview=response_text[:500],
                error=str(e)
            )
            raise CategorySuggestionError(
                reason="invalid_response",
                message="Category suggestion response failed validation",
                details={"response_preview": response_text[:200]}
            ) from e


# Singleton instance
_suggestion_service: Optional[CategorySuggestionService] = None


def get_category_suggestion_service() -> CategorySuggestionService:
    """Get or create CategorySuggestionService instance."""
    global _suggestion_service
    if _suggestion_service is None:
        _suggestion_service = CategorySuggestionService()
    return _suggestion_service
