"""
Seller model - one row per registered merchant with their third-party credentials.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text

from .base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Seller(Base):
    """
    Registered merchant account.

    Each seller can have:
    - Email/password authentication
    - TikTok Shop OAuth tokens (set by the OAuth callback)
    - Packlink API key (set from the setup screen)
    - Stripe customer/subscription identifiers (set by the billing webhook)
    """

    __tablename__ = "sellers"

    # Primary Key
    id = Column(Integer, primary_key=True, autoincrement=True)

    # Authentication
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)

    # TikTok Shop Integration
    tiktok_access_token = Column(Text, nullable=True)
    tiktok_refresh_token = Column(Text, nullable=True)

    # Packlink Integration
    packlink_api_key = Column(Text, nullable=True)

    # Automation
    automation_enabled = Column(Boolean, default=False, nullable=False)

    # Stripe Billing
    stripe_customer_id = Column(String(255), nullable=True)
    stripe_subscription_id = Column(String(255), nullable=True)
    stripe_subscription_item_id = Column(String(255), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    # Columns callers may change through SellerStore.update()
    MUTABLE_FIELDS = frozenset({
        "tiktok_access_token",
        "tiktok_refresh_token",
        "packlink_api_key",
        "automation_enabled",
        "stripe_customer_id",
        "stripe_subscription_id",
        "stripe_subscription_item_id",
    })

    def __repr__(self):
        return f"<Seller(id={self.id}, email='{self.email}', automation={self.automation_enabled})>"

    @property
    def tiktok_connected(self) -> bool:
        return bool(self.tiktok_access_token)

    @property
    def packlink_connected(self) -> bool:
        return bool(self.packlink_api_key)

    def to_public_dict(self) -> dict:
        """Identity fields safe to return to the client."""
        return {"id": self.id, "email": self.email}
