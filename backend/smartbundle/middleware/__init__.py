"""
Middleware package.
"""
from smartbundle.middleware.error_handler import ErrorHandlerMiddleware
from smartbundle.middleware.request_id import RequestIdMiddleware
from smartbundle.middleware.storefront_cors import StorefrontCORSMiddleware

__all__ = [
    "ErrorHandlerMiddleware",
    "RequestIdMiddleware",
    "StorefrontCORSMiddleware",
]
