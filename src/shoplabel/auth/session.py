"""
Session authenticator: resolves a bearer token to a stored seller.
"""

from typing import Optional

from jose import JWTError

from shoplabel.auth.jwt_manager import JWTManager
from shoplabel.database.models import Seller
from shoplabel.database.seller_store import SellerStore
from shoplabel.utils.exceptions import AuthenticationError
from shoplabel.utils.logger import get_logger

logger = get_logger(__name__)


class SessionAuthenticator:
    """
    Verifies bearer credentials.

    Every failure (missing token, bad signature, malformed token, expiry,
    seller deleted) raises the same ``AuthenticationError("Unauthorized")``
    so callers cannot tell an expired token from a forged one.
    """

    def __init__(self, store: SellerStore, jwt_manager: JWTManager):
        self.store = store
        self.jwt_manager = jwt_manager

    def issue_token(self, seller: Seller) -> str:
        return self.jwt_manager.create_access_token(seller.id, seller.email)

    def authenticate(self, bearer_token: Optional[str]) -> Seller:
        if not bearer_token:
            raise AuthenticationError("Unauthorized")

        try:
            payload = self.jwt_manager.verify_token(bearer_token)
        except JWTError:
            raise AuthenticationError("Unauthorized")

        seller_id = payload.get("id")
        if not isinstance(seller_id, int):
            logger.warning("Token payload carries no seller id")
            raise AuthenticationError("Unauthorized")

        seller = self.store.find_by_id(seller_id)
        if seller is None:
            logger.warning(f"Token for unknown seller {seller_id}")
            raise AuthenticationError("Unauthorized")

        return seller

    def authenticate_header(self, authorization: Optional[str]) -> Seller:
        """Authenticate an ``Authorization: Bearer <token>`` header value."""
        if not authorization:
            raise AuthenticationError("Unauthorized")

        parts = authorization.split(" ")
        token = parts[1] if len(parts) > 1 else None
        return self.authenticate(token)
