"""
Stripe API client for billing integration
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

import stripe

from shoplabel.utils.exceptions import InvalidSignatureError, StripeAPIError


class StripeClient:
    """
    Stripe API client for checkout, webhooks and metered usage
    """

    def __init__(self, api_key: str, webhook_secret: str = ""):
        """Initialize Stripe client"""
        self.api_key = api_key
        stripe.api_key = self.api_key
        self.webhook_secret = webhook_secret

    # =========================================================================
    # Checkout Session
    # =========================================================================

    def create_checkout_session(
        self,
        customer_email: str,
        line_items: List[Dict[str, Any]],
        success_url: str,
        cancel_url: str,
        metadata: Optional[Dict[str, str]] = None
    ) -> stripe.checkout.Session:
        """
        Create Stripe Checkout session for a subscription

        Args:
            customer_email: Email Stripe attaches to the new customer
            line_items: Price/quantity pairs
            success_url: Redirect URL on success
            cancel_url: Redirect URL on cancel
            metadata: Additional metadata

        Returns:
            stripe.checkout.Session with URL to redirect user
        """
        try:
            return stripe.checkout.Session.create(
                mode="subscription",
                payment_method_types=["card"],
                customer_email=customer_email,
                line_items=line_items,
                success_url=success_url,
                cancel_url=cancel_url,
                metadata=metadata or {},
            )
        except stripe.StripeError as e:
            raise StripeAPIError(f"Failed to create checkout session: {str(e)}")

    # =========================================================================
    # Subscription Management
    # =========================================================================

    def get_subscription(self, subscription_id: str) -> stripe.Subscription:
        """Get subscription by ID"""
        try:
            return stripe.Subscription.retrieve(subscription_id)
        except stripe.StripeError as e:
            raise StripeAPIError(f"Failed to retrieve subscription: {str(e)}")

    # =========================================================================
    # Webhooks
    # =========================================================================

    def construct_webhook_event(
        self,
        payload: bytes,
        signature: Optional[str]
    ) -> stripe.Event:
        """
        Verify and construct webhook event

        Args:
            payload: Raw request body
            signature: Stripe-Signature header

        Returns:
            stripe.Event object

        Raises:
            InvalidSignatureError: If the header is missing, the payload is
                malformed or signature verification fails
        """
        if not signature:
            raise InvalidSignatureError("Missing Stripe signature")

        try:
            return stripe.Webhook.construct_event(
                payload, signature, self.webhook_secret
            )
        except ValueError as e:
            raise InvalidSignatureError(f"Invalid webhook payload: {str(e)}")
        except stripe.SignatureVerificationError as e:
            raise InvalidSignatureError(f"Invalid webhook signature: {str(e)}")

    # =========================================================================
    # Usage-based Billing
    # =========================================================================

    def report_usage(
        self,
        subscription_item_id: str,
        quantity: int,
        timestamp: Optional[datetime] = None,
        action: str = "increment"
    ) -> Any:
        """
        Report usage for metered billing

        Args:
            subscription_item_id: Subscription item ID
            quantity: Usage quantity
            timestamp: Usage timestamp (defaults to now)
            action: 'increment' or 'set'
        """
        try:
            params: Dict[str, Any] = {
                "quantity": quantity,
                "action": action,
            }
            if timestamp:
                params["timestamp"] = int(timestamp.timestamp())

            return stripe.SubscriptionItem.create_usage_record(
                subscription_item_id,
                **params
            )
        except stripe.StripeError as e:
            raise StripeAPIError(f"Failed to report usage: {str(e)}")
