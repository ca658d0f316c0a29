"""
Order fulfillment pipeline.

Turns a TikTok Shop order event into a Packlink shipping label:

1. validate   - the event must name a seller email
2. resolve    - the seller must exist
3. gate       - automation on and a Packlink key stored, else skip
4. ship       - create the shipment at Packlink
5. notify     - report the tracking number to TikTok Shop
6. bill       - record one metered usage unit in Stripe (best effort)

Steps run sequentially in the caller's thread and are not transactional. A
Packlink failure stops the pipeline before TikTok Shop is contacted; a TikTok
Shop failure leaves the Packlink shipment in place. Events carry no
idempotency key, so a redelivered event creates a second shipment.
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from shoplabel.carriers.packlink_client import PacklinkClient
from shoplabel.core.config import Settings
from shoplabel.database.models import Seller
from shoplabel.database.seller_store import SellerStore
from shoplabel.marketplaces.tiktok_client import TikTokShopClient
from shoplabel.monitoring import get_metrics
from shoplabel.services.billing.gateway import BillingGateway
from shoplabel.utils.exceptions import (
    MarketplaceNotConnectedError,
    MissingSellerInfoError,
    PacklinkAPIError,
    SellerNotFoundError,
    TikTokAPIError,
)
from shoplabel.utils.logger import get_logger

logger = get_logger(__name__)

# Used when Packlink answers without a tracking number
TRACKING_PLACEHOLDER = "TRACK"

CARRIER_CODE = "Packlink"
SHIPPING_SERVICE = "standard"

# Event keys forwarded to Packlink, mapped to their Packlink names
_SHIPMENT_FIELDS = {
    "recipient": "to",
    "to": "to",
    "sender": "from",
    "from": "from",
    "packages": "packages",
    "service_id": "service_id",
    "content": "content",
}


class FulfillmentStatus(str, enum.Enum):
    LABEL_GENERATED = "Label generated"
    AUTOMATION_DISABLED = "Automation disabled"


@dataclass
class OrderEvent:
    """Order notification received from TikTok Shop."""
    order_id: Optional[str]
    seller_email: Optional[str]
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Any) -> "OrderEvent":
        if not isinstance(payload, dict):
            return cls(order_id=None, seller_email=None)

        order_id = payload.get("order_id")
        if order_id is None and isinstance(payload.get("data"), dict):
            order_id = payload["data"].get("order_id")

        # Non-string emails are treated as missing
        seller_email = payload.get("seller_email")
        if not isinstance(seller_email, str):
            seller_email = None

        return cls(
            order_id=str(order_id) if order_id is not None else None,
            seller_email=seller_email or None,
            raw=payload,
        )


@dataclass
class FulfillmentResult:
    status: FulfillmentStatus
    tracking_number: Optional[str] = None
    usage_recorded: bool = False

    def to_response(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"status": self.status.value}
        if self.tracking_number is not None:
            body["tracking"] = self.tracking_number
        return body


def build_shipment_payload(event: OrderEvent) -> Dict[str, Any]:
    """Packlink shipment body for an order event."""
    payload: Dict[str, Any] = {
        "order_reference": event.order_id,
        "source": "tiktok_shop",
    }
    for event_key, packlink_key in _SHIPMENT_FIELDS.items():
        value = event.raw.get(event_key)
        if value is not None and packlink_key not in payload:
            payload[packlink_key] = value
    return payload


class OrderFulfillmentPipeline:
    """Runs one order event through ship, notify and bill."""

    def __init__(
        self,
        settings: Settings,
        store: SellerStore,
        billing: BillingGateway,
        tiktok_client: TikTokShopClient,
        packlink_factory: Optional[Callable[[str], PacklinkClient]] = None,
    ):
        self.settings = settings
        self.store = store
        self.billing = billing
        self.tiktok_client = tiktok_client
        self.packlink_factory = packlink_factory or self._default_packlink_client

    def _default_packlink_client(self, api_key: str) -> PacklinkClient:
        return PacklinkClient(
            api_key,
            base_url=self.settings.PACKLINK_API_BASE_URL,
            timeout=self.settings.HTTP_TIMEOUT_SECONDS,
        )

    def handle(self, event: OrderEvent) -> FulfillmentResult:
        """
        Process an order event.

        Raises:
            MissingSellerInfoError: Event has no seller email
            SellerNotFoundError: No seller with that email
            MarketplaceNotConnectedError: Seller never completed TikTok OAuth
            PacklinkAPIError: Shipment creation failed
            TikTokAPIError: Shipment notification failed
        """
        metrics = get_metrics()

        if not event.seller_email:
            metrics.fulfillment_events_total.labels(outcome="missing_seller_info").inc()
            raise MissingSellerInfoError()

        seller = self.store.find_by_email(event.seller_email)
        if seller is None:
            metrics.fulfillment_events_total.labels(outcome="seller_not_found").inc()
            raise SellerNotFoundError(email=event.seller_email)

        if not seller.automation_enabled or not seller.packlink_api_key:
            logger.info(f"Automation disabled for seller {seller.id}, order {event.order_id} skipped")
            metrics.fulfillment_events_total.labels(outcome="automation_disabled").inc()
            return FulfillmentResult(status=FulfillmentStatus.AUTOMATION_DISABLED)

        if not seller.tiktok_access_token:
            metrics.fulfillment_events_total.labels(outcome="marketplace_not_connected").inc()
            raise MarketplaceNotConnectedError(seller.id)

        tracking_number = self._create_shipment(seller, event)
        self._notify_marketplace(seller, event, tracking_number)

        usage_recorded = self.billing.record_usage(seller.stripe_subscription_item_id)

        metrics.fulfillment_events_total.labels(outcome="label_generated").inc()
        logger.info(
            f"Label generated for order {event.order_id} of seller {seller.id} "
            f"(tracking={tracking_number}, usage_recorded={usage_recorded})"
        )
        return FulfillmentResult(
            status=FulfillmentStatus.LABEL_GENERATED,
            tracking_number=tracking_number,
            usage_recorded=usage_recorded,
        )

    def _create_shipment(self, seller: Seller, event: OrderEvent) -> str:
        metrics = get_metrics()

        try:
            with self.packlink_factory(seller.packlink_api_key) as client:
                response = client.create_shipment(build_shipment_payload(event))
        except PacklinkAPIError as e:
            logger.error(f"Packlink shipment failed for order {event.order_id}: {e}")
            metrics.upstream_errors_total.labels(provider="packlink").inc()
            metrics.fulfillment_events_total.labels(outcome="carrier_failed").inc()
            raise

        metrics.labels_generated_total.inc()

        tracking_number = response.get("tracking_number")
        if not tracking_number:
            logger.warning(f"Packlink returned no tracking number for order {event.order_id}")
            tracking_number = TRACKING_PLACEHOLDER
        return tracking_number

    def _notify_marketplace(self, seller: Seller, event: OrderEvent, tracking_number: str) -> None:
        metrics = get_metrics()

        try:
            self.tiktok_client.ship_order(
                seller.tiktok_access_token,
                event.order_id,
                tracking_number,
                carrier_code=CARRIER_CODE,
                service=SHIPPING_SERVICE,
            )
        except TikTokAPIError as e:
            # The Packlink shipment already exists and is left as is
            logger.error(
                f"TikTok Shop notification failed for order {event.order_id} "
                f"after shipment {tracking_number} was created: {e}"
            )
            metrics.upstream_errors_total.labels(provider="tiktok").inc()
            metrics.fulfillment_events_total.labels(outcome="notify_failed").inc()
            raise
