"""
FastAPI application entry point for ShopLabel.
"""

from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from shoplabel import __version__
from shoplabel.api.dependencies import build_services
from shoplabel.api.middleware import ErrorHandlerMiddleware, register_exception_handlers
from shoplabel.api.routes import auth, billing, health, setup, tiktok
from shoplabel.carriers.packlink_client import PacklinkClient
from shoplabel.core.config import Settings, get_settings
from shoplabel.database.connection import init_db
from shoplabel.database.oauth_state_store import OAuthStateStore
from shoplabel.database.seller_store import SellerStore
from shoplabel.marketplaces.tiktok_client import TikTokShopClient
from shoplabel.monitoring import MetricsMiddleware, get_metrics, setup_sentry
from shoplabel.services.billing import StripeClient
from shoplabel.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings: Settings = app.state.services.settings

    setup_logging(settings)
    logger.info("Starting ShopLabel API...")

    setup_sentry(
        settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        release=f"shoplabel@{__version__}",
        traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
    )

    if not settings.billing_configured:
        logger.warning("STRIPE_SECRET_KEY not set, billing endpoints are disabled")

    logger.info("API started successfully")

    yield

    logger.info("Shutting down ShopLabel API...")


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[SellerStore] = None,
    state_store: Optional[OAuthStateStore] = None,
    tiktok_client: Optional[TikTokShopClient] = None,
    stripe_client: Optional[StripeClient] = None,
    packlink_factory: Optional[Callable[[str], PacklinkClient]] = None,
) -> FastAPI:
    """
    Build the application.

    Components not passed in are created from ``settings``; with no stores
    given, the seller and OAuth state tables are created in DATABASE_URL.
    """
    settings = settings or get_settings()

    services = build_services(
        settings,
        store=store,
        state_store=state_store,
        tiktok_client=tiktok_client,
        stripe_client=stripe_client,
        packlink_factory=packlink_factory,
    )
    if services.engine is not None:
        init_db(services.engine)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="TikTok Shop order fulfillment with Packlink labels and metered Stripe billing",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(MetricsMiddleware)

    register_exception_handlers(app)

    app.include_router(auth.router, prefix="/api", tags=["Authentication"])
    app.include_router(setup.router, prefix="/api", tags=["Setup"])
    app.include_router(billing.router, prefix="/api", tags=["Billing"])
    app.include_router(tiktok.router, prefix="/api", tags=["TikTok Shop"])
    app.include_router(health.router, prefix="/api", tags=["Health"])

    @app.get("/metrics", tags=["Monitoring"])
    def metrics():
        """Prometheus metrics endpoint."""
        return PlainTextResponse(
            generate_latest(get_metrics().registry),
            media_type=CONTENT_TYPE_LATEST,
        )

    @app.get("/", tags=["Root"])
    def root():
        return {
            "name": settings.PROJECT_NAME,
            "version": __version__,
            "status": "operational",
            "docs": "/docs",
        }

    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "shoplabel.api.main:create_app",
        factory=True,
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
    )
