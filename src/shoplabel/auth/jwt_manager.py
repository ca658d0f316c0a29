"""
JWT token management for seller sessions.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt

from shoplabel.core.config import DEFAULT_JWT_SECRET
from shoplabel.utils.exceptions import ConfigurationError
from shoplabel.utils.logger import get_logger

logger = get_logger(__name__)


class JWTManager:
    """
    Manages JWT token creation and verification.

    Tokens embed the seller ``id`` and ``email`` and expire after
    ``expire_days`` (7 by default).
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expire_days: int = 7
    ):
        """
        Initialize JWT manager.

        Args:
            secret_key: Secret key for signing tokens
            algorithm: Signing algorithm
            expire_days: Token TTL in days
        """
        if not secret_key:
            raise ConfigurationError("JWT_SECRET is required for JWT")
        if secret_key == DEFAULT_JWT_SECRET:
            logger.warning("JWT_SECRET is the built-in default; set a real secret in production")

        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire = timedelta(days=expire_days)

    def create_access_token(
        self,
        seller_id: int,
        email: str,
        now: Optional[datetime] = None
    ) -> str:
        """
        Create access token for an authenticated seller.

        Args:
            seller_id: Seller id
            email: Seller email
            now: Issuance time (defaults to current UTC time)

        Returns:
            JWT access token string
        """
        issued_at = now or datetime.now(timezone.utc)
        payload = {
            "id": seller_id,
            "email": email,
            "type": "access",
            "iat": issued_at,
            "exp": issued_at + self.expire,
        }

        token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        logger.debug(f"Created access token for seller {seller_id} (expires in {self.expire})")
        return token

    def verify_token(self, token: str) -> Dict[str, Any]:
        """
        Verify and decode JWT token.

        Args:
            token: JWT token string

        Returns:
            Decoded token payload

        Raises:
            JWTError: If token is invalid, expired or of the wrong type
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm]
            )

            if payload.get("type") != "access":
                raise JWTError(f"Invalid token type: {payload.get('type')}")

            return payload

        except JWTError as e:
            logger.warning(f"Token verification failed: {e}")
            raise
