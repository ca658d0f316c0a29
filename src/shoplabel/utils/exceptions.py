"""
Custom exceptions for ShopLabel.

Every error the service raises on purpose derives from ``ShopLabelError``.
The HTTP layer maps each family to a status code (see
``shoplabel.api.middleware.error_handler``).
"""

from typing import Optional, Dict, Any


class ShopLabelError(Exception):
    """Base exception for all ShopLabel errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize exception with message and optional details.

        Args:
            message: Error message
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(ShopLabelError):
    """Raised when a request is missing required fields."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else None
        super().__init__(message, details)
        self.field = field


class MissingSellerInfoError(ValidationError):
    """Order event does not identify a seller."""

    def __init__(self, message: str = "Missing seller info"):
        super().__init__(message, field="seller_email")


class DuplicateEmailError(ShopLabelError):
    """Raised when creating a seller with an email that already exists."""

    def __init__(self, email: str):
        super().__init__("Email already exists", {"email": email})
        self.email = email


class AuthenticationError(ShopLabelError):
    """Raised when a credential is missing, invalid, expired or wrong."""
    pass


class NotFoundError(ShopLabelError):
    """Raised when a referenced record does not exist."""
    pass


class SellerNotFoundError(NotFoundError):
    """No seller matches the given email or id."""

    def __init__(self, message: str = "Seller not found", email: Optional[str] = None):
        super().__init__(message, {"email": email} if email else None)


class InvalidOAuthStateError(ShopLabelError):
    """OAuth state is unknown, expired or already used."""
    pass


class InvalidSignatureError(ShopLabelError):
    """Webhook signature verification failed."""
    pass


class ConfigurationError(ShopLabelError):
    """Raised when configuration is invalid or missing."""
    pass


class BillingUnconfiguredError(ConfigurationError):
    """Stripe credentials were not configured at process start."""

    def __init__(self, message: str = "Stripe not configured"):
        super().__init__(message)


class MarketplaceNotConnectedError(ConfigurationError):
    """Seller has no TikTok Shop access token."""

    def __init__(self, seller_id: Optional[int] = None):
        super().__init__(
            "TikTok Shop is not connected",
            {"seller_id": seller_id} if seller_id is not None else None,
        )


class UpstreamError(ShopLabelError):
    """Base class for failures of external APIs."""

    provider = "upstream"

    def __init__(self, message: str, status_code: Optional[int] = None,
                 response_data: Optional[Any] = None,
                 endpoint: Optional[str] = None):
        """
        Initialize upstream error.

        Args:
            message: Error message
            status_code: HTTP status code returned by the provider
            response_data: Provider response body
            endpoint: Provider endpoint that failed
        """
        details: Dict[str, Any] = {"provider": self.provider}
        if status_code:
            details["status_code"] = status_code
        if endpoint:
            details["endpoint"] = endpoint
        if response_data:
            details["response_data"] = response_data

        super().__init__(message, details)
        self.status_code = status_code
        self.response_data = response_data
        self.endpoint = endpoint


class PacklinkAPIError(UpstreamError):
    """Raised when Packlink API calls fail."""
    provider = "packlink"


class TikTokAPIError(UpstreamError):
    """Raised when TikTok Shop API calls fail."""
    provider = "tiktok"


class StripeAPIError(UpstreamError):
    """Raised when Stripe API calls fail."""
    provider = "stripe"
