"""
Repository package for data access layer.
"""
from smartbundle.repositories.analytics import AnalyticsRepository
from smartbundle.repositories.base import BaseRepository
from smartbundle.repositories.bundle import BundleRepository
from smartbundle.repositories.shop import ShopRepository

__all__ = [
    "BaseRepository",
    "ShopRepository",
    "BundleRepository",
    "AnalyticsRepository",
]
