"""
Billing service initialization
"""
from .stripe_client import StripeClient
from .gateway import BillingGateway, WebhookOutcome

__all__ = [
    "StripeClient",
    "BillingGateway",
    "WebhookOutcome",
]
