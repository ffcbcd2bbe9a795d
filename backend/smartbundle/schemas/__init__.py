"""
Pydantic schemas package.
"""
from smartbundle.schemas.billing import (
    PlanResponse,
    PlansResponse,
    SubscribeRequest,
    SubscribeResponse,
)
from smartbundle.schemas.bundle import (
    BulkActionRequest,
    BulkActionResponse,
    BundleCreatedResponse,
    BundleDraft,
    BundleListResponse,
    BundleProductIn,
    BundleResponse,
)
from smartbundle.schemas.catalog import CatalogProduct, CatalogResponse
from smartbundle.schemas.dashboard import (
    AnalyticsSummary,
    DashboardResponse,
    DashboardStats,
)
from smartbundle.schemas.shop import (
    ShopCreate,
    ShopResponse,
    ShopSettings,
    ShopSettingsUpdate,
)
from smartbundle.schemas.storefront import (
    AnalyticsEventIn,
    CartComposeRequest,
    CartComposeResponse,
    StorefrontLookupResponse,
)
from smartbundle.schemas.suggestion import (
    AcceptBatchRequest,
    AcceptBatchResponse,
    SuggestedProduct,
    Suggestion,
    SuggestionsResponse,
)
from smartbundle.schemas.support import SupportRequest, SupportResponse

__all__ = [
    # Shop
    "ShopCreate",
    "ShopResponse",
    "ShopSettings",
    "ShopSettingsUpdate",
    # Catalog
    "CatalogProduct",
    "CatalogResponse",
    # Bundles
    "BundleDraft",
    "BundleProductIn",
    "BundleResponse",
    "BundleListResponse",
    "BundleCreatedResponse",
    "BulkActionRequest",
    "BulkActionResponse",
    # Suggestions
    "Suggestion",
    "SuggestedProduct",
    "SuggestionsResponse",
    "AcceptBatchRequest",
    "AcceptBatchResponse",
    # Storefront
    "StorefrontLookupResponse",
    "AnalyticsEventIn",
    "CartComposeRequest",
    "CartComposeResponse",
    # Billing
    "PlanResponse",
    "PlansResponse",
    "SubscribeRequest",
    "SubscribeResponse",
    # Dashboard
    "DashboardStats",
    "DashboardResponse",
    "AnalyticsSummary",
    # Support
    "SupportRequest",
    "SupportResponse",
]
