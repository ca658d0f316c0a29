"""
Billing routes: Stripe checkout and webhook.
"""

from fastapi import APIRouter, Depends, Request
from starlette.concurrency import run_in_threadpool

from shoplabel.api.dependencies import Services, get_current_seller, get_services
from shoplabel.api.middleware.error_handler import error_response
from shoplabel.api.schemas import UrlResponse, WebhookAck
from shoplabel.database.models import Seller
from shoplabel.utils.exceptions import StripeAPIError
from shoplabel.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.post("/billing/create-session", response_model=UrlResponse)
def create_checkout_session(
    seller: Seller = Depends(get_current_seller),
    services: Services = Depends(get_services),
):
    """
    Create a Stripe Checkout session for the flat and metered prices.
    """
    try:
        url = services.billing.create_checkout_session(seller)
    except StripeAPIError as e:
        logger.error(f"Checkout session for seller {seller.id} failed: {e}")
        return error_response(500, "Failed to create checkout session")

    return {"url": url}


@router.post("/billing/webhook", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    services: Services = Depends(get_services),
):
    """
    Handle Stripe webhook events.

    The raw body is verified against the Stripe-Signature header. Every
    verified event is acknowledged, including ones that failed internally.
    """
    payload = await request.body()
    signature = request.headers.get("Stripe-Signature")

    outcome = await run_in_threadpool(services.billing.handle_webhook, payload, signature)
    logger.info(f"Stripe webhook handled: {outcome.value}")

    return {"received": True}
