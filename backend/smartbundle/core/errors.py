"""
Application exception hierarchy.

Every error carries the HTTP status it maps to; ErrorHandlerMiddleware
renders them as {"detail": message}.
"""


class SmartBundleError(Exception):
    """Base class for all expected application errors."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(SmartBundleError):
    """A credential or setting required for the operation is missing."""

    status_code = 503


class AINotConfiguredError(ConfigurationError):
    """No completion API key is configured on the server."""

    def __init__(self, message: str = "AI not configured") -> None:
        super().__init__(message)


class UpstreamError(SmartBundleError):
    """Shopify or the completion API rejected or failed a call."""

    status_code = 502


class BundleValidationError(SmartBundleError):
    """Input failed a business rule (missing title, too few products...)."""

    status_code = 422


class NotFoundError(SmartBundleError):
    status_code = 404
