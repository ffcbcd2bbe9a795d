"""
Open CORS for the public storefront API.

The embedded admin only accepts its configured origins, but the widget runs
on every merchant's storefront domain. Requests under the storefront paths
get wildcard CORS headers and their preflights are answered here with 204.
"""
from starlette.types import ASGIApp, Receive, Scope, Send

STOREFRONT_PATHS = ("/api/bundles", "/api/analytics", "/api/cart")

CORS_HEADERS = [
    (b"access-control-allow-origin", b"*"),
    (b"access-control-allow-methods", b"GET, POST, OPTIONS"),
    (
        b"access-control-allow-headers",
        b"Content-Type, Authorization, Accept, ngrok-skip-browser-warning",
    ),
    (b"access-control-max-age", b"86400"),
]


def is_storefront_path(path: str) -> bool:
    return any(path == prefix or path.startswith(prefix + "/") for prefix in STOREFRONT_PATHS)


class StorefrontCORSMiddleware:
    """Pure ASGI middleware; must be the outermost middleware."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not is_storefront_path(scope.get("path", "")):
            await self.app(scope, receive, send)
            return

        if scope.get("method") == "OPTIONS":
            await send({
                "type": "http.response.start",
                "status": 204,
                "headers": list(CORS_HEADERS),
            })
            await send({"type": "http.response.body", "body": b""})
            return

        async def send_with_cors(message):
            if message["type"] == "http.response.start":
                # Replace any admin CORS headers set further in
                headers = [
                    (name, value)
                    for name, value in message.get("headers", [])
                    if not bytes(name).lower().startswith(b"access-control-")
                ]
                headers.extend(CORS_HEADERS)
                message = {**message, "headers": headers}
            await send(message)

        await self.app(scope, receive, send_with_cors)
