"""
SQLAlchemy database models for ShopLabel.

Models:
- Seller: merchant accounts with marketplace, carrier and billing credentials
- OAuthState: pending TikTok Shop authorizations
"""

from .base import Base
from .seller import Seller
from .oauth_state import OAuthState

__all__ = [
    "Base",
    "Seller",
    "OAuthState",
]
