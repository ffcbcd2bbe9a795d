"""
Catalog routes - store products for the bundle product picker.
"""
from fastapi import APIRouter, Depends

from smartbundle.routers.deps import ShopifyClient, get_current_shop
from smartbundle.schemas.catalog import CatalogResponse

router = APIRouter(
    prefix="/admin/catalog",
    tags=["catalog"],
    dependencies=[Depends(get_current_shop)],
)


@router.get("", response_model=CatalogResponse)
async def get_catalog(shopify: ShopifyClient) -> CatalogResponse:
    products = await shopify.get_catalog()
    return CatalogResponse(products=products, total=len(products))
