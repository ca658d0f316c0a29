"""
Billing session gateway.

Opens Stripe subscription checkouts, binds the resulting subscription to a
seller when Stripe reports the checkout as completed, and records one unit of
metered usage per generated label.
"""

import enum
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from shoplabel.core.config import Settings
from shoplabel.database.models import Seller
from shoplabel.database.seller_store import SellerStore
from shoplabel.monitoring import get_metrics
from shoplabel.services.billing.stripe_client import StripeClient
from shoplabel.utils.exceptions import (
    BillingUnconfiguredError,
    InvalidSignatureError,
    ShopLabelError,
)
from shoplabel.utils.logger import get_logger

logger = get_logger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"


class WebhookOutcome(str, enum.Enum):
    """
    Result of handling one Stripe webhook delivery.

    Stripe gets the same ``{"received": true}`` answer for all three; the
    distinction exists for logs, metrics and tests.
    """
    ACKNOWLEDGED = "acknowledged"
    ACKNOWLEDGED_WITH_INTERNAL_FAILURE = "acknowledged_with_internal_failure"
    IGNORED = "ignored"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _field(obj: Any, name: str) -> Any:
    """Read a key from a Stripe object or plain dict."""
    if obj is None:
        return None
    try:
        return obj[name]
    except (KeyError, TypeError):
        return None


class BillingGateway:
    """Stripe-facing billing operations for sellers."""

    def __init__(
        self,
        settings: Settings,
        store: SellerStore,
        client: Optional[StripeClient],
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.settings = settings
        self.store = store
        self.client = client
        self.clock = clock

    @property
    def configured(self) -> bool:
        return self.settings.billing_configured and self.client is not None

    def _require_client(self) -> StripeClient:
        if not self.configured:
            raise BillingUnconfiguredError()
        return self.client

    # =========================================================================
    # Checkout
    # =========================================================================

    def create_checkout_session(self, seller: Seller) -> str:
        """
        Open a subscription checkout for the seller.

        Returns:
            Checkout URL

        Raises:
            BillingUnconfiguredError: Stripe key missing at startup
            StripeAPIError: Stripe rejected the request
        """
        client = self._require_client()
        front_url = self.settings.FRONTEND_URL.rstrip("/")

        session = client.create_checkout_session(
            customer_email=seller.email,
            line_items=[
                {"price": self.settings.STRIPE_PRICE_ID, "quantity": 1},
                {"price": self.settings.STRIPE_METERED_PRICE_ID, "quantity": 0},
            ],
            success_url=f"{front_url}/dashboard?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{front_url}/dashboard?canceled=true",
            metadata={"seller_id": str(seller.id)},
        )

        logger.info(f"Checkout session created for seller {seller.id}")
        return _field(session, "url")

    # =========================================================================
    # Webhooks
    # =========================================================================

    def handle_webhook(self, raw_body: bytes, signature_header: Optional[str]) -> WebhookOutcome:
        """
        Verify and process a Stripe webhook delivery.

        Raises:
            InvalidSignatureError: No webhook secret configured, or signature
                verification failed
        """
        if self.client is None or not self.client.webhook_secret:
            logger.error("Stripe webhook received but STRIPE_WEBHOOK_SECRET is not set")
            raise InvalidSignatureError("Stripe webhook secret not configured")

        event = self.client.construct_webhook_event(raw_body, signature_header)
        event_type = _field(event, "type")

        if event_type != CHECKOUT_COMPLETED:
            logger.debug(f"Ignoring Stripe event {event_type}")
            outcome = WebhookOutcome.IGNORED
        else:
            session = _field(_field(event, "data"), "object")
            try:
                self._bind_subscription(session)
                outcome = WebhookOutcome.ACKNOWLEDGED
            except Exception as e:
                logger.error(f"Failed to bind Stripe subscription: {e}", exc_info=True)
                outcome = WebhookOutcome.ACKNOWLEDGED_WITH_INTERNAL_FAILURE

        get_metrics().billing_webhooks_total.labels(outcome=outcome.value).inc()
        return outcome

    def _bind_subscription(self, session: Any) -> Optional[Seller]:
        """
        Store customer/subscription/item ids on the seller owning the
        checkout email. Nothing is written unless both the email and a line
        item with the metered price are found.
        """
        client = self._require_client()

        customer_email = _field(session, "customer_email") or _field(
            _field(session, "customer_details"), "email"
        )
        subscription_id = _field(session, "subscription")
        subscription = client.get_subscription(subscription_id)

        items = _field(_field(subscription, "items"), "data") or []
        item_id = next(
            (
                _field(item, "id")
                for item in items
                if _field(_field(item, "price"), "id") == self.settings.STRIPE_METERED_PRICE_ID
            ),
            None,
        )

        if not customer_email or not item_id:
            logger.warning(
                f"Checkout for subscription {subscription_id} has no customer email "
                f"or metered item; nothing to bind"
            )
            return None

        seller = self.store.find_by_email(customer_email)
        if seller is None:
            logger.warning(f"No seller with email {customer_email} for subscription {subscription_id}")
            return None

        updated = self.store.update(
            seller.id,
            stripe_customer_id=_field(session, "customer"),
            stripe_subscription_id=subscription_id,
            stripe_subscription_item_id=item_id,
        )
        logger.info(f"Bound subscription {subscription_id} to seller {seller.id}")
        return updated

    # =========================================================================
    # Usage-based Billing
    # =========================================================================

    def record_usage(self, subscription_item_id: Optional[str]) -> bool:
        """
        Record one usage unit, timestamped now.

        Never raises: remote failures are logged and reported as False.

        Returns:
            True if Stripe accepted the usage record
        """
        metrics = get_metrics()

        if not self.configured or not subscription_item_id:
            metrics.usage_reports_total.labels(status="skipped").inc()
            return False

        try:
            self.client.report_usage(
                subscription_item_id,
                quantity=1,
                timestamp=self.clock(),
                action="increment",
            )
        except ShopLabelError as e:
            logger.error(f"Usage record for {subscription_item_id} failed: {e}", exc_info=True)
            metrics.usage_reports_total.labels(status="failed").inc()
            metrics.upstream_errors_total.labels(provider="stripe").inc()
            return False

        metrics.usage_reports_total.labels(status="recorded").inc()
        return True
