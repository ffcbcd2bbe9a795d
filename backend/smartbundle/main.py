"""
SmartBundle API - Main Application Entry Point.

Bundle builder for Shopify: embedded admin API, AI bundle suggestions and
the public storefront widget API.
"""
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from smartbundle.core.config import settings
from smartbundle.core.database import create_engine, create_session_factory, init_db
from smartbundle.core.logging import configure_logging, get_logger
from smartbundle.middleware import (
    ErrorHandlerMiddleware,
    RequestIdMiddleware,
    StorefrontCORSMiddleware,
)
from smartbundle.routers import (
    billing_router,
    bundles_router,
    catalog_router,
    dashboard_router,
    health_router,
    settings_router,
    shops_router,
    storefront_router,
    suggestions_router,
    support_router,
    webhooks_router,
)

# Configure logging before anything else
configure_logging()
logger = get_logger(__name__)

STATIC_DIR = Path(__file__).parent / "static"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.
    Owns the database engine: created on startup, disposed on shutdown.
    """
    # Startup
    logger.info(
        "Starting application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    engine = create_engine()
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    if settings.database_auto_create:
        await init_db(engine)

    # Initialize Sentry if configured
    if settings.sentry_dsn:
        import sentry_sdk

        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            environment=settings.environment,
            traces_sample_rate=0.1,
        )
        logger.info("Sentry initialized")

    yield

    # Shutdown
    logger.info("Shutting down application")
    await engine.dispose()


def create_app() -> FastAPI:
    """
    Application factory function.
    Creates and configures the FastAPI application.
    """
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Product bundles with AI suggestions for Shopify stores",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # Middleware: the last one added is the outermost
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(RequestIdMiddleware)

    # CORS for the embedded admin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=[
            "Authorization",
            "Content-Type",
            "X-Request-ID",
        ],
    )

    # Open CORS for the storefront widget API
    app.add_middleware(StorefrontCORSMiddleware)

    # Register routers
    app.include_router(health_router)
    app.include_router(webhooks_router)
    app.include_router(shops_router, prefix="/api")
    app.include_router(storefront_router, prefix="/api")
    app.include_router(dashboard_router, prefix="/api")
    app.include_router(catalog_router, prefix="/api")
    app.include_router(bundles_router, prefix="/api")
    app.include_router(suggestions_router, prefix="/api")
    app.include_router(billing_router, prefix="/api")
    app.include_router(settings_router, prefix="/api")
    app.include_router(support_router, prefix="/api")

    # Storefront widget script
    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    logger.info(
        "Application created",
        routes=len(app.routes),
        cors_origins=len(settings.allowed_origins),
    )

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "smartbundle.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
