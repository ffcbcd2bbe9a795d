"""
Bundle suggestion client - OpenAI-compatible completion API (Groq by default).

Uses the OpenAI SDK pointed at the configured base URL. One completion per
merchant request, SDK retries disabled.
"""
import time
from typing import Optional, Sequence

from openai import APIError, AsyncOpenAI

from smartbundle.core.config import settings
from smartbundle.core.errors import AINotConfiguredError, UpstreamError
from smartbundle.core.logging import get_logger
from smartbundle.schemas.catalog import CatalogProduct

logger = get_logger(__name__)


SYSTEM_PROMPT = (
    "You are a helpful e-commerce assistant that suggests product bundles. "
    "Always respond with valid JSON only, no markdown or extra text."
)

PROMPT_TEMPLATE = """You are an e-commerce bundle optimization AI. Analyze these products and suggest 3-5 product bundles that would work well together for customers.

Products:
{product_lines}

For each bundle suggestion, provide:
1. A catchy bundle name
2. Which products to include (use exact titles)
3. A short reason why they go well together
4. Suggested discount percentage (10-25%)

Return ONLY valid JSON array in this format:
[
  {{
    "name": "Bundle Name",
    "products": ["Product Title 1", "Product Title 2"],
    "reason": "Why these products work together",
    "discount": 15
  }}
]"""


class SuggestionGenerationError(UpstreamError):
    """The completion API failed or returned an error."""


def build_prompt(catalog: Sequence[CatalogProduct]) -> str:
    """Render the catalog snapshot into the suggestion prompt."""
    product_lines = "\n".join(
        f"- {p.title} (${p.price}) [Type: {p.product_type}] [Tags: {', '.join(p.tags)}]"
        for p in catalog
    )
    return PROMPT_TEMPLATE.format(product_lines=product_lines)


class SuggestionClient:
    """
    Requests bundle proposals for a catalog snapshot.

    The API key stays server-side; a missing key fails before any I/O.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.groq_api_key
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=settings.ai_base_url,
                timeout=settings.ai_timeout_seconds,
                max_retries=0,
            )
        return self._client

    async def request_suggestions(
        self,
        catalog: Sequence[CatalogProduct],
        model: Optional[str] = None,
    ) -> str:
        """
        Ask the model for bundle suggestions.

        Args:
            catalog: Store products offered to the model
            model: Model identifier (defaults to the configured model)

        Returns:
            Raw completion text, "[]" when the model returned nothing

        Raises:
            AINotConfiguredError: No API key configured
            SuggestionGenerationError: The completion API call failed
        """
        if not self.api_key:
            raise AINotConfiguredError()

        start_time = time.time()
        model = model or settings.default_ai_model

        try:
            response = await self.client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_prompt(catalog)},
                ],
                temperature=settings.ai_temperature,
                max_tokens=settings.ai_max_tokens,
            )
        except APIError as e:
            logger.error("Suggestion completion failed", model=model, error=e.message)
            raise SuggestionGenerationError(f"AI error: {e.message}") from e

        content = response.choices[0].message.content if response.choices else None
        tokens_used = response.usage.total_tokens if response.usage else 0

        logger.info(
            "Suggestion completion received",
            model=model,
            products=len(catalog),
            tokens=tokens_used,
            duration_ms=int((time.time() - start_time) * 1000),
        )
        return content or "[]"
