"""
AI bundle suggestion routes.

Generate asks the completion API for proposals over the live catalog;
accept turns confirmed proposals into bundles.
"""
from fastapi import APIRouter, status

from smartbundle.core.errors import BundleValidationError, ConfigurationError
from smartbundle.core.logging import get_logger
from smartbundle.routers.bundles import BundleServiceDep
from smartbundle.routers.deps import CurrentShop, ShopifyClient, Suggestions
from smartbundle.schemas.bundle import BundleCreatedResponse
from smartbundle.schemas.suggestion import (
    AcceptBatchRequest,
    AcceptBatchResponse,
    Suggestion,
    SuggestionsResponse,
)
from smartbundle.services.suggestion_parser import parse_suggestions

logger = get_logger(__name__)

router = APIRouter(prefix="/admin/suggestions", tags=["suggestions"])

MIN_CATALOG_PRODUCTS = 3


@router.post("/generate", response_model=SuggestionsResponse)
async def generate_suggestions(
    shop: CurrentShop,
    shopify: ShopifyClient,
    suggestion_client: Suggestions,
) -> SuggestionsResponse:
    """
    Propose bundles for the shop's catalog.

    A completion that cannot be parsed yields an empty list with an error
    message rather than an error status.
    """
    if not shop.ai_enabled:
        raise ConfigurationError("AI suggestions are disabled in settings")

    catalog = await shopify.get_catalog()
    if len(catalog) < MIN_CATALOG_PRODUCTS:
        raise BundleValidationError(
            "You need at least 3 products in your store to generate bundle suggestions"
        )

    raw = await suggestion_client.request_suggestions(catalog, model=shop.ai_model)
    result = parse_suggestions(raw, catalog)

    logger.info(
        "Suggestions generated",
        shop=shop.domain,
        catalog=len(catalog),
        suggestions=len(result.suggestions),
    )
    return SuggestionsResponse(
        suggestions=result.suggestions,
        error=result.error,
        catalog_size=len(catalog),
    )


@router.post(
    "/accept",
    response_model=BundleCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def accept_suggestion(
    suggestion: Suggestion,
    shop: CurrentShop,
    service: BundleServiceDep,
) -> BundleCreatedResponse:
    """Create an active bundle from one confirmed suggestion."""
    bundle = await service.create_from_suggestion(shop, suggestion)
    return BundleCreatedResponse(id=bundle.id, discount_code=bundle.discount_code)


@router.post("/accept-batch", response_model=AcceptBatchResponse)
async def accept_suggestions(
    request: AcceptBatchRequest,
    shop: CurrentShop,
    service: BundleServiceDep,
) -> AcceptBatchResponse:
    """Create bundles for several suggestions, skipping the ones that fail."""
    created, total = await service.create_many(shop, request.suggestions)
    return AcceptBatchResponse(created=created, total=total)
