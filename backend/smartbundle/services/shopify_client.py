"""
Shopify Admin GraphQL client.

One request per call, no retries: every caller is an interactive merchant
action and surfaces failures directly.
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

import httpx

from smartbundle.core.config import settings
from smartbundle.core.errors import ConfigurationError, UpstreamError
from smartbundle.core.logging import get_logger
from smartbundle.core.security import decrypt_token
from smartbundle.models.bundle import DiscountType
from smartbundle.schemas.catalog import CatalogProduct

logger = get_logger(__name__)


CATALOG_QUERY = """
query GetCatalog($first: Int!, $after: String) {
    products(first: $first, after: $after) {
        edges {
            cursor
            node {
                id
                title
                description
                productType
                tags
                featuredImage {
                    url
                }
                variants(first: 1) {
                    edges {
                        node {
                            id
                            price
                            compareAtPrice
                        }
                    }
                }
            }
        }
        pageInfo {
            hasNextPage
            endCursor
        }
    }
}
"""

DISCOUNT_CREATE_MUTATION = """
mutation discountCodeBasicCreate($basicCodeDiscount: DiscountCodeBasicInput!) {
    discountCodeBasicCreate(basicCodeDiscount: $basicCodeDiscount) {
        codeDiscountNode { id }
        userErrors { field message }
    }
}
"""

DISCOUNT_UPDATE_MUTATION = """
mutation discountCodeBasicUpdate($id: ID!, $basicCodeDiscount: DiscountCodeBasicInput!) {
    discountCodeBasicUpdate(id: $id, basicCodeDiscount: $basicCodeDiscount) {
        codeDiscountNode { id }
        userErrors { field message }
    }
}
"""

DISCOUNT_DELETE_MUTATION = """
mutation discountCodeDelete($id: ID!) {
    discountCodeDelete(id: $id) {
        deletedCodeDiscountId
        userErrors { field message }
    }
}
"""

ACTIVE_SUBSCRIPTIONS_QUERY = """
query {
    currentAppInstallation {
        activeSubscriptions {
            id
            name
            status
            lineItems {
                plan {
                    pricingDetails {
                        ... on AppRecurringPricing {
                            price {
                                amount
                            }
                        }
                    }
                }
            }
        }
    }
}
"""

SUBSCRIPTION_CREATE_MUTATION = """
mutation AppSubscriptionCreate(
    $name: String!
    $lineItems: [AppSubscriptionLineItemInput!]!
    $returnUrl: URL!
    $trialDays: Int
    $test: Boolean
) {
    appSubscriptionCreate(
        name: $name
        returnUrl: $returnUrl
        trialDays: $trialDays
        lineItems: $lineItems
        test: $test
    ) {
        appSubscription { id }
        confirmationUrl
        userErrors { field message }
    }
}
"""


class ShopifyAPIError(UpstreamError):
    """Shopify rejected a request or returned GraphQL/user errors."""

    def __init__(self, message: str | list) -> None:
        if isinstance(message, list):
            message = "; ".join(
                str(e.get("message", e)) if isinstance(e, dict) else str(e)
                for e in message
            )
        super().__init__(str(message))


class ShopifyGraphQLClient:
    """
    Async Shopify Admin GraphQL API client for one shop.

    Features:
    - Automatic token decryption
    - Catalog pagination
    - Discount code and app subscription mutations
    """

    GRAPHQL_ENDPOINT = "https://{domain}/admin/api/{version}/graphql.json"
    TIMEOUT = 30.0

    def __init__(
        self,
        access_token_encrypted: Optional[str],
        shop_domain: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.access_token = decrypt_token(access_token_encrypted) if access_token_encrypted else None
        self.shop_domain = shop_domain
        self.endpoint = self.GRAPHQL_ENDPOINT.format(
            domain=shop_domain,
            version=settings.shopify_api_version,
        )
        self._transport = transport

    async def execute_query(
        self,
        query: str,
        variables: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """
        Execute a GraphQL query against the Shopify Admin API.

        Raises:
            ConfigurationError: The shop never registered an offline token
            ShopifyAPIError: On transport, HTTP or GraphQL errors
        """
        if not self.access_token:
            raise ConfigurationError(
                "Shop has no access token. Reinstall the app to reconnect it."
            )

        headers = {
            "Content-Type": "application/json",
            "X-Shopify-Access-Token": self.access_token,
        }

        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        async with httpx.AsyncClient(timeout=self.TIMEOUT, transport=self._transport) as client:
            try:
                response = await client.post(
                    self.endpoint,
                    json=payload,
                    headers=headers,
                )
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                logger.error(
                    "Shopify HTTP error",
                    status=e.response.status_code,
                    shop=self.shop_domain,
                )
                raise ShopifyAPIError(f"HTTP error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                logger.error("Shopify request failed", error=str(e), shop=self.shop_domain)
                raise ShopifyAPIError(f"Request failed: {e}") from e

        data = response.json()

        if data.get("errors"):
            logger.error(
                "Shopify GraphQL errors",
                errors=data["errors"],
                shop=self.shop_domain,
            )
            raise ShopifyAPIError(data["errors"])

        return data.get("data") or {}

    async def get_catalog(self) -> list[CatalogProduct]:
        """Fetch the store's products, following cursors up to the configured cap."""
        products: list[CatalogProduct] = []
        cursor = None

        while len(products) < settings.catalog_max_products:
            data = await self.execute_query(
                CATALOG_QUERY,
                {"first": settings.catalog_page_size, "after": cursor},
            )
            connection = data.get("products") or {}
            edges = connection.get("edges") or []

            for edge in edges:
                products.append(self._parse_product(edge["node"]))
                cursor = edge.get("cursor")

            page_info = connection.get("pageInfo") or {}
            if not edges or not page_info.get("hasNextPage", False):
                break

        logger.info("Catalog fetched", shop=self.shop_domain, count=len(products))
        return products[: settings.catalog_max_products]

    @staticmethod
    def _parse_product(node: dict[str, Any]) -> CatalogProduct:
        variant_edges = (node.get("variants") or {}).get("edges") or []
        variant = variant_edges[0]["node"] if variant_edges else {}
        compare_at = variant.get("compareAtPrice")
        image = node.get("featuredImage") or {}

        return CatalogProduct(
            id=node["id"],
            title=node.get("title") or "",
            description=node.get("description") or "",
            product_type=node.get("productType") or "",
            tags=node.get("tags") or [],
            price=Decimal(str(variant.get("price") or "0")),
            compare_at_price=Decimal(str(compare_at)) if compare_at else None,
            image_url=image.get("url"),
            variant_id=variant.get("id"),
        )

    @staticmethod
    def _customer_gets(discount_type: str, value: Decimal) -> dict[str, Any]:
        if discount_type == DiscountType.FIXED_AMOUNT.value:
            amount: dict[str, Any] = {
                "discountAmount": {
                    "amount": str(value),
                    "appliesOnEachItem": False,
                }
            }
        else:
            amount = {"percentage": float(value) / 100}
        return {"value": amount, "items": {"all": True}}

    @staticmethod
    def _raise_user_errors(payload: dict[str, Any], operation: str) -> None:
        user_errors = payload.get("userErrors") or []
        if user_errors:
            logger.warning("Shopify user errors", operation=operation, errors=user_errors)
            raise ShopifyAPIError(user_errors)

    async def create_discount(
        self,
        title: str,
        code: str,
        discount_type: str,
        value: Decimal,
    ) -> str:
        """Create a basic code discount for a bundle and return its node id."""
        data = await self.execute_query(
            DISCOUNT_CREATE_MUTATION,
            {
                "basicCodeDiscount": {
                    "title": f"Bundle: {title}",
                    "code": code,
                    "startsAt": datetime.now(timezone.utc).isoformat(),
                    "customerSelection": {"all": True},
                    "customerGets": self._customer_gets(discount_type, value),
                    "usageLimit": 10000,
                    "appliesOncePerCustomer": False,
                }
            },
        )
        payload = data.get("discountCodeBasicCreate") or {}
        self._raise_user_errors(payload, "discountCodeBasicCreate")

        node = payload.get("codeDiscountNode") or {}
        if not node.get("id"):
            raise ShopifyAPIError("Discount creation returned no discount id")

        logger.info("Discount created", shop=self.shop_domain, code=code)
        return node["id"]

    async def update_discount(
        self,
        node_id: str,
        title: str,
        discount_type: str,
        value: Decimal,
    ) -> None:
        """Change the amount of an existing bundle discount."""
        data = await self.execute_query(
            DISCOUNT_UPDATE_MUTATION,
            {
                "id": node_id,
                "basicCodeDiscount": {
                    "title": f"Bundle: {title}",
                    "customerGets": self._customer_gets(discount_type, value),
                },
            },
        )
        self._raise_user_errors(data.get("discountCodeBasicUpdate") or {}, "discountCodeBasicUpdate")

    async def delete_discount(self, node_id: str) -> None:
        data = await self.execute_query(DISCOUNT_DELETE_MUTATION, {"id": node_id})
        self._raise_user_errors(data.get("discountCodeDelete") or {}, "discountCodeDelete")
        logger.info("Discount deleted", shop=self.shop_domain, node_id=node_id)

    async def get_active_subscriptions(self) -> list[dict[str, Any]]:
        data = await self.execute_query(ACTIVE_SUBSCRIPTIONS_QUERY)
        installation = data.get("currentAppInstallation") or {}
        return installation.get("activeSubscriptions") or []

    async def create_subscription(
        self,
        name: str,
        price: Decimal,
        trial_days: int,
        return_url: str,
        test: bool,
    ) -> str:
        """Create a recurring app subscription and return its confirmation URL."""
        data = await self.execute_query(
            SUBSCRIPTION_CREATE_MUTATION,
            {
                "name": name,
                "returnUrl": return_url,
                "trialDays": trial_days,
                "test": test,
                "lineItems": [
                    {
                        "plan": {
                            "appRecurringPricingDetails": {
                                "price": {"amount": str(price), "currencyCode": "USD"},
                                "interval": "EVERY_30_DAYS",
                            }
                        }
                    }
                ],
            },
        )
        payload = data.get("appSubscriptionCreate") or {}
        self._raise_user_errors(payload, "appSubscriptionCreate")

        confirmation_url = payload.get("confirmationUrl")
        if not confirmation_url:
            raise ShopifyAPIError("Failed to create subscription. Please try again.")
        return confirmation_url
