"""
Shared router dependencies: embedded-admin authentication and outbound clients.

Tests replace the client factories through app.dependency_overrides.
"""
from typing import Annotated, Optional

import structlog
from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from smartbundle.core.database import DbSession
from smartbundle.core.logging import get_logger
from smartbundle.core.security import (
    decode_session_token,
    shop_domain_from_claims,
    verify_internal_key,
)
from smartbundle.models.shop import Shop
from smartbundle.repositories.shop import ShopRepository
from smartbundle.services.notification_service import NotificationService
from smartbundle.services.shopify_client import ShopifyGraphQLClient
from smartbundle.services.suggestion_client import SuggestionClient

logger = get_logger(__name__)

session_token_scheme = HTTPBearer(auto_error=False)


async def get_current_shop(
    session: DbSession,
    credentials: Annotated[
        Optional[HTTPAuthorizationCredentials],
        Depends(session_token_scheme),
    ],
) -> Shop:
    """
    Authenticate an embedded-admin request by its App Bridge session token.

    The shop is created on its first authenticated visit.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing session token",
        )

    claims = decode_session_token(credentials.credentials)
    domain = shop_domain_from_claims(claims) if claims else None
    if not domain:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid session token",
        )

    shop, created = await ShopRepository(session).get_or_create(domain)
    if created:
        logger.info("Created shop on first visit", shop=domain)

    structlog.contextvars.bind_contextvars(shop=domain)
    return shop


CurrentShop = Annotated[Shop, Depends(get_current_shop)]


def get_shopify_client(shop: CurrentShop) -> ShopifyGraphQLClient:
    return ShopifyGraphQLClient(shop.access_token_encrypted, shop.domain)


def get_suggestion_client() -> SuggestionClient:
    return SuggestionClient()


def get_notification_service() -> NotificationService:
    return NotificationService()


ShopifyClient = Annotated[ShopifyGraphQLClient, Depends(get_shopify_client)]
Suggestions = Annotated[SuggestionClient, Depends(get_suggestion_client)]
Notifications = Annotated[NotificationService, Depends(get_notification_service)]


async def require_internal_key(
    x_internal_key: Annotated[Optional[str], Header()] = None,
) -> None:
    """Guard for endpoints only the OAuth auth-proxy may call."""
    if not verify_internal_key(x_internal_key):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid internal key",
        )
