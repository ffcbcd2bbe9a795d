"""
Health probes and service info.
"""
from datetime import datetime, timezone

from fastapi import APIRouter
from sqlalchemy import text

from smartbundle.core.config import settings
from smartbundle.core.database import DbSession

router = APIRouter(tags=["health"])

WIDGET_SCRIPT_PATH = "/static/bundle-widget.js"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _integrations() -> dict[str, bool]:
    """Which outbound integrations have credentials configured."""
    return {
        "shopify": bool(settings.shopify_api_key and settings.shopify_api_secret),
        "ai": bool(settings.groq_api_key),
        "email": bool(settings.sendgrid_api_key),
    }


@router.get("/")
async def root() -> dict:
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "running",
        "widget": WIDGET_SCRIPT_PATH,
    }


@router.get("/health")
async def health_check() -> dict:
    return {
        "status": "healthy",
        "timestamp": _now(),
        "version": settings.app_version,
        "environment": settings.environment,
    }


@router.get("/health/ready")
async def readiness_check(session: DbSession) -> dict:
    """
    Readiness probe.

    Only the database decides readiness; missing integration credentials are
    reported but degrade single features, not the service.
    """
    try:
        await session.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception as e:
        db_status = f"error: {e}"

    return {
        "status": "ready" if db_status == "connected" else "not_ready",
        "checks": {
            "database": db_status,
            "integrations": _integrations(),
        },
        "timestamp": _now(),
    }


@router.get("/health/live")
async def liveness_check() -> dict:
    return {"status": "alive", "timestamp": _now()}
