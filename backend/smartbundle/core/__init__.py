"""
Core package containing configuration, database, security, errors and logging.
"""
from smartbundle.core.config import settings
from smartbundle.core.database import Base, DbSession, get_db_session
from smartbundle.core.errors import (
    AINotConfiguredError,
    BundleValidationError,
    ConfigurationError,
    NotFoundError,
    SmartBundleError,
    UpstreamError,
)
from smartbundle.core.logging import configure_logging, get_logger
from smartbundle.core.security import (
    decode_session_token,
    decrypt_token,
    encrypt_token,
    verify_shopify_hmac,
)

__all__ = [
    "settings",
    "Base",
    "DbSession",
    "get_db_session",
    "configure_logging",
    "get_logger",
    "SmartBundleError",
    "ConfigurationError",
    "AINotConfiguredError",
    "UpstreamError",
    "BundleValidationError",
    "NotFoundError",
    "encrypt_token",
    "decrypt_token",
    "decode_session_token",
    "verify_shopify_hmac",
]
