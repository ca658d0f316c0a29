"""
Test configuration and fixtures for ShopLabel
"""
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from shoplabel.api.main import create_app
from shoplabel.auth import JWTManager, hash_password
from shoplabel.carriers import PacklinkClient
from shoplabel.core.config import Settings
from shoplabel.database import (
    InMemoryOAuthStateStore,
    InMemorySellerStore,
    SqlSellerStore,
    create_db_engine,
    create_session_factory,
    init_db,
)
from shoplabel.database.models import Seller
from shoplabel.marketplaces import TikTokShopClient
from shoplabel.services.billing import StripeClient


# =============================================================================
# Settings
# =============================================================================

@pytest.fixture
def settings() -> Settings:
    """Fully configured test settings"""
    return Settings(
        ENVIRONMENT="testing",
        DATABASE_URL="sqlite:///:memory:",
        JWT_SECRET="test-secret-key-for-testing-only",
        STRIPE_SECRET_KEY="sk_test_123",
        STRIPE_WEBHOOK_SECRET="whsec_test_123",
        STRIPE_PRICE_ID="price_flat",
        STRIPE_METERED_PRICE_ID="price_metered",
        FRONTEND_URL="http://frontend.test",
        TIKTOK_CLIENT_KEY="tt-app-key",
        TIKTOK_CLIENT_SECRET="tt-app-secret",
        TIKTOK_REDIRECT_URI="http://api.test/api/auth/tiktok/callback",
        PACKLINK_API_BASE_URL="https://packlink.test",
    )


# =============================================================================
# Test Database Setup
# =============================================================================

@pytest.fixture
def engine():
    """In-memory SQLite engine with all tables"""
    engine = create_db_engine("sqlite:///:memory:")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def sql_store(session_factory) -> SqlSellerStore:
    return SqlSellerStore(session_factory)


@pytest.fixture
def store() -> InMemorySellerStore:
    return InMemorySellerStore()


@pytest.fixture
def clock():
    """Controllable clock: set ``clock.now`` to move time"""
    class _Clock:
        now = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)

        def __call__(self):
            return self.now

    return _Clock()


@pytest.fixture
def state_store(clock) -> InMemoryOAuthStateStore:
    return InMemoryOAuthStateStore(ttl_seconds=600, clock=clock)


# =============================================================================
# Mock External Services
# =============================================================================

@pytest.fixture
def mock_tiktok():
    """Mock TikTok Shop client"""
    client = MagicMock(spec=TikTokShopClient)
    client.build_authorization_url.return_value = "https://auth.tiktok.test/api/authorize?state=x"
    client.ship_order.return_value = {"code": 0}
    return client


@pytest.fixture
def mock_packlink():
    """Mock Packlink client returned for any API key"""
    client = MagicMock(spec=PacklinkClient)
    client.__enter__.return_value = client
    client.create_shipment.return_value = {"reference": "ES2026", "tracking_number": "PL123456"}
    return client


@pytest.fixture
def packlink_factory(mock_packlink):
    return MagicMock(return_value=mock_packlink)


@pytest.fixture
def mock_stripe(settings):
    """Mock Stripe client"""
    client = MagicMock(spec=StripeClient)
    client.webhook_secret = settings.STRIPE_WEBHOOK_SECRET
    client.create_checkout_session.return_value = {"id": "cs_test_1", "url": "https://checkout.stripe.test/cs_test_1"}
    return client


# =============================================================================
# FastAPI Test Client
# =============================================================================

@pytest.fixture
def app(settings, store, state_store, mock_tiktok, mock_stripe, packlink_factory):
    return create_app(
        settings,
        store=store,
        state_store=state_store,
        tiktok_client=mock_tiktok,
        stripe_client=mock_stripe,
        packlink_factory=packlink_factory,
    )


@pytest.fixture
def client(app):
    """Create FastAPI test client"""
    with TestClient(app) as test_client:
        yield test_client


# =============================================================================
# Test Data Fixtures
# =============================================================================

@pytest.fixture
def seller_password() -> str:
    return "TestPassword123!"


@pytest.fixture
def seller(store, seller_password) -> Seller:
    """Registered seller with nothing connected"""
    return store.create("seller@example.com", hash_password(seller_password))


@pytest.fixture
def ready_seller(store, seller) -> Seller:
    """Seller with TikTok, Packlink, automation and a metered subscription"""
    return store.update(
        seller.id,
        tiktok_access_token="tt-access",
        tiktok_refresh_token="tt-refresh",
        packlink_api_key="pl-key",
        automation_enabled=True,
        stripe_subscription_item_id="si_metered",
    )


@pytest.fixture
def jwt_manager(settings) -> JWTManager:
    return JWTManager(settings.JWT_SECRET)


@pytest.fixture
def auth_headers(jwt_manager, seller) -> dict:
    """Create authorization headers"""
    token = jwt_manager.create_access_token(seller.id, seller.email)
    return {"Authorization": f"Bearer {token}"}
