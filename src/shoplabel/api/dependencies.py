"""
Service wiring and FastAPI dependencies.

``build_services`` constructs every component from an explicit ``Settings``
object; tests pass in-memory stores and mocked clients instead of the
defaults.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Header, Request
from sqlalchemy.engine import Engine

from shoplabel.auth.jwt_manager import JWTManager
from shoplabel.auth.session import SessionAuthenticator
from shoplabel.carriers.packlink_client import PacklinkClient
from shoplabel.core.config import Settings
from shoplabel.database.connection import create_db_engine, create_session_factory
from shoplabel.database.models import Seller
from shoplabel.database.oauth_state_store import OAuthStateStore, SqlOAuthStateStore
from shoplabel.database.seller_store import SellerStore, SqlSellerStore
from shoplabel.marketplaces.tiktok_client import TikTokShopClient
from shoplabel.services.billing import BillingGateway, StripeClient
from shoplabel.services.fulfillment import OrderFulfillmentPipeline
from shoplabel.services.oauth_connector import OAuthConnector


@dataclass
class Services:
    """Everything a request handler needs, built once per application."""
    settings: Settings
    store: SellerStore
    authenticator: SessionAuthenticator
    oauth: OAuthConnector
    billing: BillingGateway
    pipeline: OrderFulfillmentPipeline
    engine: Optional[Engine] = None


def build_services(
    settings: Settings,
    store: Optional[SellerStore] = None,
    state_store: Optional[OAuthStateStore] = None,
    tiktok_client: Optional[TikTokShopClient] = None,
    stripe_client: Optional[StripeClient] = None,
    packlink_factory: Optional[Callable[[str], PacklinkClient]] = None,
) -> Services:
    engine = None
    if store is None or state_store is None:
        engine = create_db_engine(settings.DATABASE_URL, echo=settings.DEBUG)
        session_factory = create_session_factory(engine)
        store = store or SqlSellerStore(session_factory)
        state_store = state_store or SqlOAuthStateStore(
            session_factory, ttl_seconds=settings.OAUTH_STATE_TTL_SECONDS
        )

    if tiktok_client is None:
        tiktok_client = TikTokShopClient(
            app_key=settings.TIKTOK_CLIENT_KEY,
            app_secret=settings.TIKTOK_CLIENT_SECRET,
            auth_base_url=settings.TIKTOK_AUTH_BASE_URL,
            api_base_url=settings.TIKTOK_API_BASE_URL,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        )

    if stripe_client is None and (settings.STRIPE_SECRET_KEY or settings.STRIPE_WEBHOOK_SECRET):
        stripe_client = StripeClient(settings.STRIPE_SECRET_KEY, settings.STRIPE_WEBHOOK_SECRET)

    jwt_manager = JWTManager(
        secret_key=settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
        expire_days=settings.JWT_EXPIRE_DAYS,
    )
    billing = BillingGateway(settings, store, stripe_client)

    return Services(
        settings=settings,
        store=store,
        authenticator=SessionAuthenticator(store, jwt_manager),
        oauth=OAuthConnector(settings, store, state_store, tiktok_client),
        billing=billing,
        pipeline=OrderFulfillmentPipeline(
            settings, store, billing, tiktok_client, packlink_factory=packlink_factory
        ),
        engine=engine,
    )


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_current_seller(
    request: Request,
    authorization: Optional[str] = Header(None),
) -> Seller:
    """
    Dependency to get the authenticated seller.

    Usage:
        @router.get("/protected")
        def protected_route(seller: Seller = Depends(get_current_seller)):
            return {"seller_id": seller.id}
    """
    return get_services(request).authenticator.authenticate_header(authorization)
