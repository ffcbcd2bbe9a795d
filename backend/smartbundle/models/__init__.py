"""
SQLAlchemy models package.
All models are imported here for easy access and Alembic discovery.
"""
from smartbundle.models.analytics import AnalyticsEvent, EventType
from smartbundle.models.bundle import (
    MIN_ACTIVE_PRODUCTS,
    Bundle,
    BundleProduct,
    BundleStatus,
    DiscountType,
)
from smartbundle.models.shop import DEFAULT_AI_MODEL, Shop

__all__ = [
    "Shop",
    "DEFAULT_AI_MODEL",
    "Bundle",
    "BundleProduct",
    "BundleStatus",
    "DiscountType",
    "MIN_ACTIVE_PRODUCTS",
    "AnalyticsEvent",
    "EventType",
]
