"""
TikTok Shop routes: OAuth connect flow and order webhook.
"""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import PlainTextResponse

from shoplabel.api.dependencies import Services, get_current_seller, get_services
from shoplabel.api.middleware.error_handler import error_response
from shoplabel.api.schemas import UrlResponse
from shoplabel.database.models import Seller
from shoplabel.services.fulfillment import OrderEvent
from shoplabel.utils.exceptions import ConfigurationError, TikTokAPIError, UpstreamError
from shoplabel.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()

CONNECTED_MESSAGE = "TikTok connected. You can close this window."


@router.get("/auth/tiktok", response_model=UrlResponse)
def tiktok_authorize(
    seller: Seller = Depends(get_current_seller),
    services: Services = Depends(get_services),
):
    return {"url": services.oauth.build_authorization_url(seller)}


@router.get("/auth/tiktok/callback", response_class=PlainTextResponse)
def tiktok_callback(
    code: Optional[str] = None,
    state: Optional[str] = None,
    services: Services = Depends(get_services),
):
    """
    OAuth redirect target.

    Missing code and invalid state surface as 400 through the exception
    handlers; a failed token exchange answers 500.
    """
    try:
        services.oauth.exchange_code(code, state)
    except TikTokAPIError as e:
        logger.error(f"TikTok code exchange failed: {e}")
        return error_response(500, "Failed to exchange code")

    return PlainTextResponse(CONNECTED_MESSAGE)


@router.post("/webhooks/tiktok")
def tiktok_order_webhook(
    payload: Any = Body(None),
    services: Services = Depends(get_services),
):
    """
    Receive a TikTok Shop order event and generate its shipping label.

    Responses:
        200 {"status": "Label generated", "tracking": ...}
        200 {"status": "Automation disabled"}
        400 missing seller email, 404 unknown seller
        500 any carrier, marketplace or configuration failure
    """
    event = OrderEvent.from_payload(payload)

    try:
        result = services.pipeline.handle(event)
    except (UpstreamError, ConfigurationError) as e:
        logger.error(f"Order {event.order_id} failed: {e}")
        return error_response(500, "Failed to process webhook")

    return result.to_response()
