"""
Shop registration for the OAuth auth-proxy.

The proxy completes Shopify OAuth and hands the offline token over here; it
is stored encrypted and never returned.
"""
from fastapi import APIRouter, Depends, HTTPException, status

from smartbundle.core.database import DbSession
from smartbundle.core.logging import get_logger
from smartbundle.core.security import encrypt_token
from smartbundle.repositories.shop import ShopRepository
from smartbundle.routers.deps import require_internal_key
from smartbundle.schemas.shop import ShopCreate, ShopResponse

logger = get_logger(__name__)

router = APIRouter(
    prefix="/shops",
    tags=["shops"],
    dependencies=[Depends(require_internal_key)],
)


@router.post("", response_model=ShopResponse, status_code=status.HTTP_201_CREATED)
async def register_shop(shop_data: ShopCreate, session: DbSession) -> ShopResponse:
    """Store (or rotate) a shop's offline token after OAuth."""
    shop, created = await ShopRepository(session).create_or_update(
        domain=shop_data.domain,
        access_token_encrypted=encrypt_token(shop_data.access_token),
        scopes=shop_data.scopes,
    )

    logger.info(
        "Shop registered" if created else "Shop token rotated",
        shop=shop.domain,
        scopes=shop.scopes,
    )
    return ShopResponse.model_validate(shop)


@router.get("/{shop_domain}", response_model=ShopResponse)
async def get_shop(shop_domain: str, session: DbSession) -> ShopResponse:
    shop = await ShopRepository(session).get_by_domain(shop_domain.lower())
    if not shop:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Shop not found",
        )
    return ShopResponse.model_validate(shop)
