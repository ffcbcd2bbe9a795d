"""
API routers package.
"""
from smartbundle.routers.billing import router as billing_router
from smartbundle.routers.bundles import router as bundles_router
from smartbundle.routers.catalog import router as catalog_router
from smartbundle.routers.dashboard import router as dashboard_router
from smartbundle.routers.health import router as health_router
from smartbundle.routers.settings import router as settings_router
from smartbundle.routers.shops import router as shops_router
from smartbundle.routers.storefront import router as storefront_router
from smartbundle.routers.suggestions import router as suggestions_router
from smartbundle.routers.support import router as support_router
from smartbundle.routers.webhooks import router as webhooks_router

__all__ = [
    "health_router",
    "shops_router",
    "storefront_router",
    "webhooks_router",
    "dashboard_router",
    "catalog_router",
    "bundles_router",
    "suggestions_router",
    "billing_router",
    "settings_router",
    "support_router",
]
