"""
TikTok Shop OAuth connector.

Builds the authorization redirect for a seller and, on callback, exchanges
the authorization code for tokens and stores them on the seller the state
was issued to.
"""

from typing import Optional, Tuple

from shoplabel.core.config import Settings
from shoplabel.database.models import Seller
from shoplabel.database.oauth_state_store import OAuthStateStore
from shoplabel.database.seller_store import SellerStore
from shoplabel.marketplaces.tiktok_client import TikTokShopClient
from shoplabel.utils.exceptions import InvalidOAuthStateError, ValidationError
from shoplabel.utils.logger import get_logger

logger = get_logger(__name__)


class OAuthConnector:
    """Connects a seller account to TikTok Shop."""

    def __init__(
        self,
        settings: Settings,
        store: SellerStore,
        state_store: OAuthStateStore,
        client: TikTokShopClient,
    ):
        self.settings = settings
        self.store = store
        self.state_store = state_store
        self.client = client

    def build_authorization_url(self, seller: Seller) -> str:
        state = self.state_store.issue(seller.id)
        return self.client.build_authorization_url(
            redirect_uri=self.settings.TIKTOK_REDIRECT_URI,
            state=state,
            scope=self.settings.TIKTOK_OAUTH_SCOPE,
        )

    def exchange_code(self, code: Optional[str], state: Optional[str]) -> Tuple[str, Optional[str]]:
        """
        Complete the authorization.

        The state is consumed before the token call, so a failed exchange
        requires the seller to restart the flow.

        Returns:
            (access_token, refresh_token)

        Raises:
            ValidationError: Missing code
            InvalidOAuthStateError: Unknown, expired or reused state
            TikTokAPIError: Token exchange failed
        """
        if not code:
            raise ValidationError("Missing code", field="code")

        seller_id = self.state_store.consume(state)
        if seller_id is None:
            logger.warning("OAuth callback with invalid or expired state")
            raise InvalidOAuthStateError("Invalid or expired state")

        tokens = self.client.exchange_code(code)

        updated = self.store.update(
            seller_id,
            tiktok_access_token=tokens.access_token,
            tiktok_refresh_token=tokens.refresh_token,
        )
        if updated is None:
            logger.warning(f"Seller {seller_id} disappeared before TikTok tokens were stored")
        else:
            logger.info(f"TikTok Shop connected for seller {seller_id}")

        return tokens.access_token, tokens.refresh_token
