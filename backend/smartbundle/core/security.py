"""
Security utilities: offline token encryption, Shopify session tokens,
webhook signatures.
"""
import base64
import hashlib
import hmac
from typing import Any

from cryptography.fernet import Fernet, InvalidToken
from jose import JWTError, jwt

from smartbundle.core.config import settings
from smartbundle.core.logging import get_logger

logger = get_logger(__name__)

SESSION_TOKEN_ALGORITHM = "HS256"


def derive_fernet_key(secret: str) -> bytes:
    """Derive a Fernet-compatible key from the encryption key."""
    key = hashlib.sha256(secret.encode()).digest()
    return base64.urlsafe_b64encode(key)


_fernet = Fernet(derive_fernet_key(settings.encryption_key))


def encrypt_token(token: str) -> str:
    """Encrypt an offline access token for storage."""
    return _fernet.encrypt(token.encode()).decode()


def decrypt_token(encrypted_token: str) -> str:
    """Decrypt a stored offline access token."""
    try:
        return _fernet.decrypt(encrypted_token.encode()).decode()
    except InvalidToken as e:
        logger.error("Failed to decrypt token", error=str(e))
        raise ValueError("Invalid encrypted token") from e


def decode_session_token(token: str) -> dict[str, Any] | None:
    """
    Decode and validate an App Bridge session token.

    The token is signed with the app's API secret and addressed to the API
    key. Returns the claims, or None when the token is invalid or the app
    credentials are not configured.
    """
    if not settings.shopify_api_secret or not settings.shopify_api_key:
        logger.warning("Shopify app credentials not configured, rejecting session token")
        return None

    try:
        return jwt.decode(
            token,
            settings.shopify_api_secret,
            algorithms=[SESSION_TOKEN_ALGORITHM],
            audience=settings.shopify_api_key,
        )
    except JWTError as e:
        logger.warning("Invalid session token", error=str(e))
        return None


def shop_domain_from_claims(claims: dict[str, Any]) -> str | None:
    """Extract the myshopify domain from the `dest` claim."""
    dest = claims.get("dest") or ""
    domain = dest.removeprefix("https://").removeprefix("http://").strip("/")
    return domain or None


def verify_shopify_hmac(hmac_header: str, body: bytes) -> bool:
    """Verify Shopify webhook HMAC signature."""
    if not settings.shopify_api_secret:
        logger.warning("Shopify API secret not configured, webhook rejected")
        return False

    computed_hmac = base64.b64encode(
        hmac.new(
            settings.shopify_api_secret.encode(),
            body,
            hashlib.sha256,
        ).digest()
    ).decode()
    return hmac.compare_digest(computed_hmac, hmac_header)


def verify_internal_key(provided: str | None) -> bool:
    """Check the shared key used by the OAuth auth-proxy."""
    if not settings.internal_api_key or not provided:
        return False
    return hmac.compare_digest(settings.internal_api_key, provided)
