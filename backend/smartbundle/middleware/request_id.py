"""
Request ID middleware for tracing.

Uses pure ASGI middleware (not BaseHTTPMiddleware) to avoid breaking
async generator dependencies like get_db_session().
"""
import uuid
from typing import Optional
from urllib.parse import parse_qs

import structlog
from starlette.types import ASGIApp, Message, Receive, Scope, Send

REQUEST_ID_HEADER = b"x-request-id"
WEBHOOK_SHOP_HEADER = b"x-shopify-shop-domain"


def _header(scope: Scope, name: bytes) -> Optional[str]:
    for header_name, header_value in scope.get("headers", []):
        if header_name == name:
            return header_value.decode("latin-1")
    return None


def _shop_for(scope: Scope) -> Optional[str]:
    """The shop a request is about, when it says so before authentication."""
    query = parse_qs(scope.get("query_string", b"").decode("latin-1"))
    if query.get("shop"):
        return query["shop"][0]
    return _header(scope, WEBHOOK_SHOP_HEADER)


class RequestIdMiddleware:
    """
    Tags every request with an id, echoed in the X-Request-ID header.

    The log context is reset per request and carries the id, path, method
    and, for storefront calls and webhooks, the shop domain. Admin requests
    bind the shop once the session token is verified.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = _header(scope, REQUEST_ID_HEADER) or str(uuid.uuid4())

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            path=scope.get("path", ""),
            method=scope.get("method", ""),
        )
        shop = _shop_for(scope)
        if shop:
            structlog.contextvars.bind_contextvars(shop=shop)

        scope.setdefault("state", {})["request_id"] = request_id

        async def send_with_request_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = list(message.get("headers", []))
                headers.append((REQUEST_ID_HEADER, request_id.encode("latin-1")))
                message = {**message, "headers": headers}
            await send(message)

        await self.app(scope, receive, send_with_request_id)
