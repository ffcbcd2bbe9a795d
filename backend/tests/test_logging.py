"""
Tests for log redaction and the error handling middleware.
"""
from fastapi import FastAPI
from fastapi.testclient import TestClient

from smartbundle.core.errors import NotFoundError
from smartbundle.core.logging import REDACTED, redact_secrets
from smartbundle.middleware import ErrorHandlerMiddleware


def test_redacts_credentials():
    event = redact_secrets(None, "info", {
        "event": "Shop registered",
        "shop": "test-shop.myshopify.com",
        "access_token": "shpat_secret",
        "Authorization": "Bearer abc",
    })

    assert event["access_token"] == REDACTED
    assert event["Authorization"] == REDACTED
    assert event["shop"] == "test-shop.myshopify.com"


def error_app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(ErrorHandlerMiddleware)

    @app.get("/missing")
    async def missing():
        raise NotFoundError("Bundle not found")

    @app.get("/broken")
    async def broken():
        raise RuntimeError("boom")

    return app


def test_application_errors_map_to_status():
    client = TestClient(error_app())

    response = client.get("/missing")

    assert response.status_code == 404
    assert response.json() == {"detail": "Bundle not found"}


def test_unexpected_errors_become_500():
    client = TestClient(error_app(), raise_server_exceptions=False)

    response = client.get("/broken")

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal server error", "type": "RuntimeError"}
