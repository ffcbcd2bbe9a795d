"""
Bundle management API routes for the embedded admin.
"""
from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from smartbundle.core.database import DbSession
from smartbundle.models.bundle import BundleStatus
from smartbundle.routers.deps import CurrentShop, ShopifyClient
from smartbundle.schemas.bundle import (
    BulkActionRequest,
    BulkActionResponse,
    BundleDraft,
    BundleListResponse,
    BundleResponse,
)
from smartbundle.services.bundle_service import BundleService

router = APIRouter(prefix="/admin/bundles", tags=["bundles"])


def get_bundle_service(session: DbSession, shopify: ShopifyClient) -> BundleService:
    """Dependency to get the bundle service."""
    return BundleService(session, shopify)


BundleServiceDep = Annotated[BundleService, Depends(get_bundle_service)]


@router.get("", response_model=BundleListResponse)
async def list_bundles(
    shop: CurrentShop,
    service: BundleServiceDep,
    status_filter: Annotated[
        Optional[BundleStatus],
        Query(alias="status", description="Only bundles in this status"),
    ] = None,
) -> BundleListResponse:
    """List the shop's bundles, newest first."""
    bundles = await service.list_bundles(
        shop,
        status=status_filter.value if status_filter else None,
    )
    return BundleListResponse(
        bundles=[BundleResponse.from_bundle(b) for b in bundles],
        total=len(bundles),
    )


@router.post("", response_model=BundleResponse, status_code=status.HTTP_201_CREATED)
async def create_bundle(
    draft: BundleDraft,
    shop: CurrentShop,
    service: BundleServiceDep,
) -> BundleResponse:
    """
    Create a bundle and its Shopify discount code.

    Active bundles need at least two products.
    """
    bundle = await service.create_bundle(shop, draft)
    return BundleResponse.from_bundle(bundle)


@router.post("/bulk", response_model=BulkActionResponse)
async def bulk_action(
    request: BulkActionRequest,
    shop: CurrentShop,
    service: BundleServiceDep,
) -> BulkActionResponse:
    """Delete, activate or pause several bundles at once."""
    result = await service.bulk_action(shop, request.action, request.bundle_ids)
    return BulkActionResponse(
        action=result.action,
        affected=result.affected,
        skipped=result.skipped,
    )


@router.get("/{bundle_id}", response_model=BundleResponse)
async def get_bundle(
    bundle_id: UUID,
    shop: CurrentShop,
    service: BundleServiceDep,
) -> BundleResponse:
    bundle = await service.get_bundle(shop, bundle_id)
    return BundleResponse.from_bundle(bundle)


@router.put("/{bundle_id}", response_model=BundleResponse)
async def update_bundle(
    bundle_id: UUID,
    draft: BundleDraft,
    shop: CurrentShop,
    service: BundleServiceDep,
) -> BundleResponse:
    """Replace a bundle's fields and products."""
    bundle = await service.update_bundle(shop, bundle_id, draft)
    return BundleResponse.from_bundle(bundle)


@router.delete("/{bundle_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_bundle(
    bundle_id: UUID,
    shop: CurrentShop,
    service: BundleServiceDep,
) -> None:
    await service.delete_bundle(shop, bundle_id)
